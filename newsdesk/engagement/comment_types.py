"""Comment data types shared by storage and threading."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class Comment:
    id: int
    article_id: int
    user_name: str
    comment_text: str
    created_at: Optional[datetime] = None
    parent_comment_id: Optional[int] = None


@dataclass
class CommentNode:
    """A comment plus its direct replies, in ascending creation order."""

    comment: Comment
    replies: List["CommentNode"] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        c = self.comment
        return {
            "id": c.id,
            "article_id": c.article_id,
            "user_name": c.user_name,
            "comment_text": c.comment_text,
            "created_at": c.created_at.isoformat() if c.created_at else None,
            "parent_comment_id": c.parent_comment_id,
            "replies": [],
        }
