"""Postgres schema management for newsdesk.

Schema creation is idempotent (CREATE IF NOT EXISTS / ON CONFLICT DO NOTHING),
so workers can call ensure_postgres_schema on every start.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

import psycopg

from newsdesk.errors import StoreUnavailable

logger = logging.getLogger(__name__)

CHANGES_CHANNEL = "articles_changes"
DEFAULT_CATEGORY_SLUG = "uncategorized"


SCHEMA_STATEMENTS: list[str] = [
    # Taxonomy
    """
    CREATE TABLE IF NOT EXISTS categories (
      id BIGSERIAL PRIMARY KEY,
      name TEXT NOT NULL,
      slug TEXT UNIQUE NOT NULL,
      created_at TIMESTAMPTZ NOT NULL DEFAULT now()
    );
    """,
    """
    INSERT INTO categories (name, slug) VALUES
      ('Business', 'business'),
      ('Politics', 'politics'),
      ('Sports', 'sports'),
      ('Entertainment', 'entertainment'),
      ('Health', 'health'),
      ('Technology', 'technology'),
      ('General', 'uncategorized')
    ON CONFLICT (slug) DO NOTHING;
    """,
    # Regions
    """
    CREATE TABLE IF NOT EXISTS countries (
      id BIGSERIAL PRIMARY KEY,
      code TEXT UNIQUE NOT NULL,
      name TEXT NOT NULL
    );
    """,
    """
    INSERT INTO countries (code, name) VALUES
      ('IN', 'India'),
      ('US', 'United States'),
      ('GB', 'United Kingdom'),
      ('AU', 'Australia')
    ON CONFLICT (code) DO NOTHING;
    """,
    # Articles (slug is the dedup key)
    """
    CREATE TABLE IF NOT EXISTS articles (
      id BIGSERIAL PRIMARY KEY,
      title TEXT NOT NULL CHECK (length(btrim(title)) > 0),
      description TEXT,
      content TEXT,
      image_url TEXT,
      slug TEXT NOT NULL UNIQUE,
      author TEXT,
      published_at TIMESTAMPTZ NOT NULL DEFAULT now(),
      category_id BIGINT REFERENCES categories(id) ON DELETE SET NULL,
      country_id BIGINT REFERENCES countries(id) ON DELETE SET NULL,
      tags TEXT[] NOT NULL DEFAULT '{}' CHECK (cardinality(tags) <= 10),
      views BIGINT NOT NULL DEFAULT 0 CHECK (views >= 0),
      created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
      updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
    );
    """,
    "CREATE INDEX IF NOT EXISTS idx_articles_published_at ON articles (published_at DESC);",
    "CREATE INDEX IF NOT EXISTS idx_articles_category ON articles (category_id);",
    "CREATE INDEX IF NOT EXISTS idx_articles_views ON articles (views DESC);",
    # Comments (single-level-back parent reference)
    """
    CREATE TABLE IF NOT EXISTS comments (
      id BIGSERIAL PRIMARY KEY,
      article_id BIGINT NOT NULL REFERENCES articles(id) ON DELETE CASCADE,
      user_name TEXT NOT NULL,
      comment_text TEXT NOT NULL,
      parent_comment_id BIGINT REFERENCES comments(id) ON DELETE SET NULL,
      created_at TIMESTAMPTZ NOT NULL DEFAULT now()
    );
    """,
    "CREATE INDEX IF NOT EXISTS idx_comments_article_created ON comments (article_id, created_at, id);",
    # Change notification for listening read pages
    f"""
    CREATE OR REPLACE FUNCTION notify_articles_change() RETURNS trigger AS $$
    BEGIN
      PERFORM pg_notify(
        '{CHANGES_CHANNEL}',
        json_build_object('operation', TG_OP, 'id', NEW.id, 'slug', NEW.slug)::text
      );
      RETURN NEW;
    END;
    $$ LANGUAGE plpgsql;
    """,
    "DROP TRIGGER IF EXISTS trg_articles_change ON articles;",
    """
    CREATE TRIGGER trg_articles_change
    AFTER INSERT OR UPDATE ON articles
    FOR EACH ROW EXECUTE FUNCTION notify_articles_change();
    """,
]


def ensure_postgres_schema(pg_dsn: str, *, statements: Optional[Iterable[str]] = None) -> None:
    """Ensure Postgres schema exists."""
    stmts = list(statements) if statements is not None else SCHEMA_STATEMENTS
    try:
        with psycopg.connect(pg_dsn, autocommit=True) as conn:
            with conn.cursor() as cur:
                for s in stmts:
                    cur.execute(s)
    except psycopg.Error as e:
        raise StoreUnavailable(f"schema setup failed: {e}") from e
    logger.info(f"Postgres schema ensured ({len(stmts)} statements)")
