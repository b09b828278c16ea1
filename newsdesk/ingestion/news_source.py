"""External news source adapters.

Each source returns a bounded list of ArticleCandidate; any transport,
status or payload problem surfaces as SourceUnavailable.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, List, Optional

import requests

from newsdesk.errors import SourceUnavailable
from newsdesk.ingestion.article_types import ArticleCandidate

logger = logging.getLogger(__name__)

USER_AGENT = "Newsdesk/1.0"


def _parse_dt(dt: Any) -> Optional[datetime]:
    if not dt:
        return None
    if isinstance(dt, datetime):
        return dt
    s = str(dt).strip()
    if not s:
        return None
    s = s.replace("Z", "+00:00")
    try:
        parsed = datetime.fromisoformat(s)
        # Normalize naive to UTC
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed
    except ValueError:
        return None


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


class BaseNewsSource:
    name: str = "base"

    def fetch(self, *, limit: int = 10, timeout: Optional[float] = None) -> List[ArticleCandidate]:
        raise NotImplementedError


@dataclass(frozen=True)
class GNewsSource(BaseNewsSource):
    api_key: Optional[str]
    endpoint: str = "https://gnews.io/api/v4/search"
    query: str = "India"
    lang: str = "en"
    country: str = "in"
    timeout: float = 30.0

    name: str = "gnews"

    def fetch(self, *, limit: int = 10, timeout: Optional[float] = None) -> List[ArticleCandidate]:
        if not self.api_key:
            raise SourceUnavailable("GNEWS_API_KEY not configured")
        limit = min(max(int(limit), 1), 100)
        params = {
            "q": self.query,
            "lang": self.lang,
            "country": self.country,
            "max": limit,
            "apikey": self.api_key,
        }
        timeout = timeout if timeout is not None else self.timeout
        if timeout is not None and not timeout > 0:
            raise SourceUnavailable(f"{self.name} timeout must be positive, got {timeout!r}")
        logger.info(f"Fetching up to {limit} articles from {self.name} (q={self.query!r}, country={self.country})")
        try:
            resp = requests.get(
                self.endpoint,
                params=params,
                headers={"User-Agent": USER_AGENT},
                timeout=timeout,
            )
        except (requests.RequestException, ValueError) as e:
            # urllib3 rejects bad timeout values with ValueError.
            raise SourceUnavailable(f"{self.name} request failed: {e.__class__.__name__}") from e
        if not resp.ok:
            raise SourceUnavailable(f"{self.name} API error: {resp.status_code}")
        try:
            data = resp.json()
        except ValueError as e:
            raise SourceUnavailable(f"{self.name} returned a non-JSON payload") from e
        if not isinstance(data, dict) or not isinstance(data.get("articles", []), list):
            raise SourceUnavailable(f"{self.name} returned a malformed payload")

        out: List[ArticleCandidate] = []
        for a in data.get("articles") or []:
            if not isinstance(a, dict):
                continue
            source_name = None
            src = a.get("source")
            if isinstance(src, dict):
                source_name = _clean(src.get("name"))
            out.append(
                ArticleCandidate(
                    title=_clean(a.get("title")) or "",
                    description=_clean(a.get("description")),
                    content=_clean(a.get("content")),
                    url=_clean(a.get("url")),
                    image_url=_clean(a.get("image")),
                    source_name=source_name,
                    published_at=_parse_dt(a.get("publishedAt")),
                    raw=a,
                )
            )
        logger.info(f"Fetched {len(out)} articles from {self.name}")
        return out[:limit]
