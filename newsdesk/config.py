"""Runtime configuration loaded from the environment (and `.env`)."""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, field
from typing import Optional, Tuple

from dotenv import load_dotenv


DEFAULT_PG_DSN = "dbname=newsdesk user=newsdesk password=newsdeskpass host=localhost port=5432"
DEFAULT_GNEWS_ENDPOINT = "https://gnews.io/api/v4/search"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _env_int(name: str, default: int) -> int:
    raw = (os.environ.get(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = (os.environ.get(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    pg_dsn: str = DEFAULT_PG_DSN
    gnews_api_key: Optional[str] = None
    gnews_endpoint: str = DEFAULT_GNEWS_ENDPOINT
    news_query: str = "India"
    news_lang: str = "en"
    news_country: str = "in"
    default_country_code: str = "IN"
    default_author: str = "GNews"
    max_articles: int = 10
    fetch_timeout: float = 30.0
    ingest_interval_minutes: int = 30
    ingest_mode: str = "once"
    log_level: str = "INFO"
    cors_origins: Tuple[str, ...] = field(default_factory=lambda: ("http://localhost:3000", "http://localhost:8080"))

    @classmethod
    def from_env(cls, *, dotenv: bool = True) -> "Settings":
        if dotenv:
            load_dotenv()
        origins = tuple(
            o.strip() for o in (os.environ.get("CORS_ORIGINS") or "").split(",") if o.strip()
        )
        kwargs = {}
        if origins:
            kwargs["cors_origins"] = origins
        return cls(
            pg_dsn=os.environ.get("PG_DSN", DEFAULT_PG_DSN),
            gnews_api_key=(os.environ.get("GNEWS_API_KEY") or "").strip() or None,
            gnews_endpoint=os.environ.get("GNEWS_ENDPOINT", DEFAULT_GNEWS_ENDPOINT),
            news_query=os.environ.get("NEWS_QUERY", "India"),
            news_lang=os.environ.get("NEWS_LANG", "en"),
            news_country=os.environ.get("NEWS_COUNTRY", "in"),
            default_country_code=os.environ.get("DEFAULT_COUNTRY_CODE", "IN").strip().upper(),
            default_author=os.environ.get("DEFAULT_AUTHOR", "GNews"),
            # GNews free tier caps a request at 10 articles
            max_articles=max(1, min(_env_int("NEWS_MAX_ARTICLES", 10), 100)),
            fetch_timeout=_env_float("NEWS_FETCH_TIMEOUT", 30.0),
            ingest_interval_minutes=max(1, _env_int("INGEST_INTERVAL_MINUTES", 30)),
            ingest_mode=(os.environ.get("INGEST_MODE") or "once").lower().strip(),
            log_level=(os.environ.get("LOG_LEVEL") or "INFO").upper().strip(),
            **kwargs,
        )


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for entrypoints (worker, web app)."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
