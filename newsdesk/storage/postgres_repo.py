"""Postgres-backed NewsStore.

psycopg + plain SQL. Every call opens a short-lived autocommit connection, so
each insert and each view increment is one atomic statement.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import psycopg
from psycopg import errors as pg_errors

from newsdesk.engagement.comment_types import Comment
from newsdesk.errors import InvalidInput, StoreUnavailable
from newsdesk.ingestion.article_types import NewArticle
from newsdesk.storage.base import NewsStore
from newsdesk.storage.postgres_schema import DEFAULT_CATEGORY_SLUG

logger = logging.getLogger(__name__)


def _iso(dt: Optional[datetime]) -> Optional[str]:
    return dt.isoformat() if isinstance(dt, datetime) else None


class PostgresNewsStore(NewsStore):
    def __init__(self, pg_dsn: str, *, default_category_slug: str = DEFAULT_CATEGORY_SLUG):
        self.pg_dsn = pg_dsn
        self.default_category_slug = default_category_slug

    def _connect(self):
        return psycopg.connect(self.pg_dsn, autocommit=True)

    def slug_exists(self, slug: str) -> bool:
        try:
            with self._connect() as conn:
                with conn.cursor() as cur:
                    cur.execute("SELECT 1 FROM articles WHERE slug = %s LIMIT 1", (slug,))
                    return cur.fetchone() is not None
        except psycopg.Error as e:
            raise StoreUnavailable(f"slug lookup failed: {e}") from e

    def insert_article_if_absent(self, article: NewArticle) -> Optional[Dict[str, Any]]:
        try:
            with self._connect() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        """
                        INSERT INTO articles (
                          title, description, content, image_url, slug, author,
                          published_at, category_id, country_id, tags
                        )
                        VALUES (
                          %(title)s, %(description)s, %(content)s, %(image_url)s, %(slug)s, %(author)s,
                          %(published_at)s, %(category_id)s, %(country_id)s, %(tags)s
                        )
                        ON CONFLICT (slug) DO NOTHING
                        RETURNING id, slug, title, category_id, published_at
                        """,
                        {
                            "title": article.title,
                            "description": article.description,
                            "content": article.content,
                            "image_url": article.image_url,
                            "slug": article.slug,
                            "author": article.author,
                            "published_at": article.published_at,
                            "category_id": article.category_id,
                            "country_id": article.country_id,
                            "tags": list(article.tags),
                        },
                    )
                    row = cur.fetchone()
        except pg_errors.UniqueViolation:
            # Lost a race with a concurrent run between pre-check and insert
            logger.info(f"Slug {article.slug} inserted concurrently, treating as duplicate")
            return None
        except psycopg.Error as e:
            raise StoreUnavailable(f"article insert failed: {e}") from e
        if row is None:
            return None
        aid, slug, title, category_id, published_at = row
        return {
            "id": int(aid),
            "slug": slug,
            "title": title,
            "category_id": int(category_id) if category_id is not None else None,
            "published_at": _iso(published_at),
        }

    def get_article(self, slug: str) -> Optional[Dict[str, Any]]:
        try:
            with self._connect() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        """
                        SELECT a.id, a.title, a.description, a.content, a.image_url, a.slug, a.author,
                               a.published_at, a.tags, a.views, a.created_at,
                               c.name, c.slug, co.code
                        FROM articles a
                        LEFT JOIN categories c ON c.id = a.category_id
                        LEFT JOIN countries co ON co.id = a.country_id
                        WHERE a.slug = %s
                        """,
                        (slug,),
                    )
                    row = cur.fetchone()
        except psycopg.Error as e:
            raise StoreUnavailable(f"article lookup failed: {e}") from e
        if row is None:
            return None
        (
            aid,
            title,
            description,
            content,
            image_url,
            aslug,
            author,
            published_at,
            tags,
            views,
            created_at,
            category_name,
            category_slug,
            country_code,
        ) = row
        return {
            "id": int(aid),
            "title": title,
            "description": description,
            "content": content,
            "image_url": image_url,
            "slug": aslug,
            "author": author,
            "published_at": _iso(published_at),
            "tags": list(tags or []),
            "views": int(views or 0),
            "created_at": _iso(created_at),
            "category": {"name": category_name, "slug": category_slug} if category_slug else None,
            "country": country_code,
        }

    def find_category_id(self, category_slug: str) -> Optional[int]:
        try:
            with self._connect() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        """
                        SELECT id FROM categories
                        WHERE slug IN (%s, %s)
                        ORDER BY (slug = %s) DESC
                        LIMIT 1
                        """,
                        (category_slug, self.default_category_slug, category_slug),
                    )
                    row = cur.fetchone()
        except psycopg.Error as e:
            raise StoreUnavailable(f"category lookup failed: {e}") from e
        return int(row[0]) if row else None

    def find_country_id(self, code: str) -> Optional[int]:
        try:
            with self._connect() as conn:
                with conn.cursor() as cur:
                    cur.execute("SELECT id FROM countries WHERE code = %s", ((code or "").upper(),))
                    row = cur.fetchone()
        except psycopg.Error as e:
            raise StoreUnavailable(f"country lookup failed: {e}") from e
        return int(row[0]) if row else None

    def increment_views(self, slug: str) -> Optional[int]:
        try:
            with self._connect() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        "UPDATE articles SET views = views + 1 WHERE slug = %s RETURNING views",
                        (slug,),
                    )
                    row = cur.fetchone()
        except psycopg.Error as e:
            raise StoreUnavailable(f"view increment failed: {e}") from e
        return int(row[0]) if row else None

    def list_comments(self, article_id: int) -> List[Comment]:
        try:
            with self._connect() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        """
                        SELECT id, article_id, user_name, comment_text, created_at, parent_comment_id
                        FROM comments
                        WHERE article_id = %s
                        ORDER BY created_at ASC, id ASC
                        """,
                        (int(article_id),),
                    )
                    rows = cur.fetchall()
        except psycopg.Error as e:
            raise StoreUnavailable(f"comment listing failed: {e}") from e
        return [
            Comment(
                id=int(cid),
                article_id=int(aid),
                user_name=user_name,
                comment_text=text,
                created_at=created_at,
                parent_comment_id=int(parent) if parent is not None else None,
            )
            for (cid, aid, user_name, text, created_at, parent) in rows
        ]

    def add_comment(
        self,
        *,
        article_id: int,
        user_name: str,
        comment_text: str,
        parent_comment_id: Optional[int] = None,
    ) -> Comment:
        name = (user_name or "").strip()
        text = (comment_text or "").strip()
        if not name or not text:
            raise InvalidInput("user_name and comment_text are required")
        try:
            with self._connect() as conn:
                with conn.cursor() as cur:
                    if parent_comment_id is not None:
                        cur.execute("SELECT article_id FROM comments WHERE id = %s", (int(parent_comment_id),))
                        parent = cur.fetchone()
                        if parent is None or int(parent[0]) != int(article_id):
                            raise InvalidInput("parent comment does not belong to this article")
                    cur.execute(
                        """
                        INSERT INTO comments (article_id, user_name, comment_text, parent_comment_id)
                        VALUES (%s, %s, %s, %s)
                        RETURNING id, created_at
                        """,
                        (int(article_id), name, text, parent_comment_id),
                    )
                    cid, created_at = cur.fetchone()
        except psycopg.Error as e:
            raise StoreUnavailable(f"comment insert failed: {e}") from e
        return Comment(
            id=int(cid),
            article_id=int(article_id),
            user_name=name,
            comment_text=text,
            created_at=created_at,
            parent_comment_id=parent_comment_id,
        )
