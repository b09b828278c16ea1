"""Shared ingestion data types."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class ArticleCandidate:
    """Normalized candidate article as returned by a news source.

    Nothing here has been validated yet; title/description may be empty.
    """

    title: str
    description: Optional[str] = None
    content: Optional[str] = None
    url: Optional[str] = None
    image_url: Optional[str] = None
    source_name: Optional[str] = None
    published_at: Optional[datetime] = None
    raw: Optional[Dict[str, Any]] = None


@dataclass(frozen=True)
class NewArticle:
    """Fully derived record ready for insertion."""

    title: str
    slug: str
    description: Optional[str]
    content: Optional[str]
    image_url: Optional[str]
    author: str
    published_at: datetime
    category_id: Optional[int] = None
    country_id: Optional[int] = None
    tags: List[str] = field(default_factory=list)
