"""Ingestion orchestrator: fetch -> slug -> dedup -> classify/tag -> insert.

Every candidate ends in exactly one tagged outcome (accepted, duplicate,
skipped or failed); the run summary is derived from those outcomes. Only a
source failure aborts the run, and it does so before anything is written.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from newsdesk.classification.categories import classify_category
from newsdesk.config import Settings
from newsdesk.errors import InvalidInput, SourceUnavailable, StoreUnavailable
from newsdesk.ingestion.article_types import ArticleCandidate, NewArticle
from newsdesk.ingestion.keywords import extract_keywords
from newsdesk.ingestion.news_source import BaseNewsSource, GNewsSource
from newsdesk.ingestion.slugs import slugify
from newsdesk.storage.base import NewsStore
from newsdesk.storage.postgres_repo import PostgresNewsStore

logger = logging.getLogger(__name__)


class OutcomeKind(str, Enum):
    ACCEPTED = "accepted"
    DUPLICATE = "duplicate"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class CandidateOutcome:
    kind: OutcomeKind
    title: str
    slug: Optional[str] = None
    reason: Optional[str] = None
    article: Optional[Dict[str, Any]] = None


@dataclass
class IngestionRun:
    outcomes: List[CandidateOutcome] = field(default_factory=list)
    fetched: int = 0
    error: Optional[str] = None
    started_at: Optional[datetime] = None
    duration_s: float = 0.0

    def _count(self, kind: OutcomeKind) -> int:
        return sum(1 for o in self.outcomes if o.kind is kind)

    @property
    def accepted(self) -> int:
        return self._count(OutcomeKind.ACCEPTED)

    @property
    def duplicate(self) -> int:
        return self._count(OutcomeKind.DUPLICATE)

    @property
    def skipped(self) -> int:
        return self._count(OutcomeKind.SKIPPED)

    @property
    def failed(self) -> int:
        return self._count(OutcomeKind.FAILED)

    @property
    def created_articles(self) -> List[Dict[str, Any]]:
        return [o.article for o in self.outcomes if o.kind is OutcomeKind.ACCEPTED and o.article]

    def summary(self) -> Dict[str, int]:
        return {
            "fetched": self.fetched,
            "accepted": self.accepted,
            "duplicate": self.duplicate,
            "skipped": self.skipped,
            "failed": self.failed,
        }

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = dict(self.summary())
        out["failures"] = [
            {"title": o.title, "slug": o.slug, "reason": o.reason}
            for o in self.outcomes
            if o.kind is OutcomeKind.FAILED
        ]
        out["articles"] = self.created_articles
        out["error"] = self.error
        out["started_at"] = self.started_at.isoformat() if self.started_at else None
        out["duration_s"] = round(self.duration_s, 3)
        return out


class IngestionPipeline:
    def __init__(self, source: BaseNewsSource, store: NewsStore, settings: Optional[Settings] = None):
        self.source = source
        self.store = store
        self.settings = settings or Settings()
        self._country_id: Optional[int] = None
        self._country_resolved = False

    def run(self, *, timeout: Optional[float] = None) -> IngestionRun:
        run = IngestionRun(started_at=datetime.now(timezone.utc))
        t0 = time.monotonic()
        self._country_id = None
        self._country_resolved = False
        try:
            candidates = self.source.fetch(limit=self.settings.max_articles, timeout=timeout)
        except SourceUnavailable as e:
            logger.error(f"Ingestion aborted, news source unavailable: {e}")
            run.error = str(e)
            run.duration_s = time.monotonic() - t0
            return run

        candidates = candidates[: self.settings.max_articles]
        run.fetched = len(candidates)
        for candidate in candidates:
            outcome = self.process_candidate(candidate)
            run.outcomes.append(outcome)
            if outcome.kind is OutcomeKind.FAILED:
                logger.warning(f"Candidate failed ({outcome.reason}): {outcome.title[:80]!r}")

        run.duration_s = time.monotonic() - t0
        logger.info(
            f"Ingestion run complete: fetched={run.fetched} accepted={run.accepted} "
            f"duplicate={run.duplicate} skipped={run.skipped} failed={run.failed}"
        )
        return run

    def process_candidate(self, candidate: ArticleCandidate) -> CandidateOutcome:
        title = (candidate.title or "").strip()
        description = (candidate.description or "").strip()
        if not title or not description:
            return CandidateOutcome(OutcomeKind.SKIPPED, title=title, reason="missing title or description")

        try:
            slug = slugify(title)
        except InvalidInput as e:
            return CandidateOutcome(OutcomeKind.FAILED, title=title, reason=f"invalid_title: {e}")

        try:
            if self.store.slug_exists(slug):
                logger.info(f"Article with slug {slug} already exists, skipping")
                return CandidateOutcome(OutcomeKind.DUPLICATE, title=title, slug=slug)

            category = classify_category(title, description)
            tags = extract_keywords(title, description)
            category_id = self.store.find_category_id(category)
            country_id = self._default_country_id()

            article = NewArticle(
                title=title,
                slug=slug,
                description=description,
                content=candidate.content or description,
                image_url=candidate.image_url,
                author=candidate.source_name or self.settings.default_author,
                published_at=candidate.published_at or datetime.now(timezone.utc),
                category_id=category_id,
                country_id=country_id,
                tags=tags,
            )
            created = self.store.insert_article_if_absent(article)
        except StoreUnavailable as e:
            return CandidateOutcome(OutcomeKind.FAILED, title=title, slug=slug, reason=f"store_unavailable: {e}")

        if created is None:
            logger.info(f"Article with slug {slug} was inserted concurrently, skipping")
            return CandidateOutcome(OutcomeKind.DUPLICATE, title=title, slug=slug)
        logger.info(f"Created new article [{category}]: {title[:80]}")
        return CandidateOutcome(OutcomeKind.ACCEPTED, title=title, slug=slug, article=created)

    def _default_country_id(self) -> Optional[int]:
        if not self._country_resolved:
            self._country_id = self.store.find_country_id(self.settings.default_country_code)
            self._country_resolved = True
        return self._country_id


def build_pipeline(settings: Settings, store: Optional[NewsStore] = None) -> IngestionPipeline:
    """Wire the configured GNews source to ``store`` (Postgres by default)."""
    source = GNewsSource(
        api_key=settings.gnews_api_key,
        endpoint=settings.gnews_endpoint,
        query=settings.news_query,
        lang=settings.news_lang,
        country=settings.news_country,
        timeout=settings.fetch_timeout,
    )
    return IngestionPipeline(source, store or PostgresNewsStore(settings.pg_dsn), settings)
