"""Rebuild nested reply threads from a flat comment list.

The store keeps comments as a table with a nullable parent reference. The
forest is rebuilt with an id -> node index and a second attach pass; nothing
here recurses, so nesting depth is unbounded.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List

from newsdesk.engagement.comment_types import Comment, CommentNode


def build_comment_forest(comments: Iterable[Comment]) -> List[CommentNode]:
    """Nest replies under their parents.

    ``comments`` must be in ascending creation order; sibling order follows it.
    Replies whose parent is unknown are dropped together with their subtree.
    """
    ordered = list(comments)
    index: Dict[int, CommentNode] = {}
    for c in ordered:
        index[c.id] = CommentNode(comment=c)

    roots: List[CommentNode] = []
    for c in ordered:
        node = index[c.id]
        if c.parent_comment_id is None:
            roots.append(node)
            continue
        parent = index.get(c.parent_comment_id)
        if parent is None or parent is node:
            continue
        parent.replies.append(node)
    return roots


def count_comments(forest: List[CommentNode]) -> int:
    total = 0
    stack = list(forest)
    while stack:
        node = stack.pop()
        total += 1
        stack.extend(node.replies)
    return total


def forest_to_dicts(forest: List[CommentNode]) -> List[Dict[str, Any]]:
    out: List[Dict[str, Any]] = []
    stack = [(node, out) for node in reversed(forest)]
    while stack:
        node, siblings = stack.pop()
        d = node.to_dict()
        siblings.append(d)
        for reply in reversed(node.replies):
            stack.append((reply, d["replies"]))
    return out
