"""Store contract consumed by ingestion and the read path."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from newsdesk.engagement.comment_types import Comment
from newsdesk.ingestion.article_types import NewArticle


class NewsStore:
    """Operations the core needs from the relational store.

    Implementations raise StoreUnavailable for any persistence failure.
    """

    def slug_exists(self, slug: str) -> bool:
        raise NotImplementedError

    def insert_article_if_absent(self, article: NewArticle) -> Optional[Dict[str, Any]]:
        """Insert ``article``; return its summary, or None if the slug is taken."""
        raise NotImplementedError

    def get_article(self, slug: str) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    def find_category_id(self, category_slug: str) -> Optional[int]:
        """Id of ``category_slug``, falling back to the default category."""
        raise NotImplementedError

    def find_country_id(self, code: str) -> Optional[int]:
        raise NotImplementedError

    def increment_views(self, slug: str) -> Optional[int]:
        """Atomically add one view; return the new count (None if unknown slug)."""
        raise NotImplementedError

    def list_comments(self, article_id: int) -> List[Comment]:
        """Comments of one article in ascending creation order."""
        raise NotImplementedError

    def add_comment(
        self,
        *,
        article_id: int,
        user_name: str,
        comment_text: str,
        parent_comment_id: Optional[int] = None,
    ) -> Comment:
        raise NotImplementedError
