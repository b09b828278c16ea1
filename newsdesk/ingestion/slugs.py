"""Slug derivation for article titles.

Slugs are the de-duplication key for ingested articles, so they must be
stable: the same title yields the same slug in every process.
"""

from __future__ import annotations

import re
import unicodedata

from newsdesk.errors import InvalidInput


DEFAULT_MAX_SLUG_LENGTH = 120

_STRIP_CHARS = re.compile(r"[^a-z0-9\s-]")
_SEPARATORS = re.compile(r"[\s-]+")


def _ascii_fold(text: str) -> str:
    normalized = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in normalized if not unicodedata.combining(ch)).encode("ascii", "ignore").decode("ascii")


def slugify(title: str, *, max_length: int = DEFAULT_MAX_SLUG_LENGTH) -> str:
    """Derive a lowercase, hyphen-separated slug from ``title``.

    - Fold accents to ASCII ("Český" -> "cesky")
    - Strip punctuation ("India's" -> "indias", "U.S." -> "us")
    - Collapse every run of whitespace/hyphens into one hyphen
    - Trim leading/trailing hyphens, cap at ``max_length``

    The cap is part of the dedup key: titles that agree on their first
    ``max_length`` slug characters map to the same slug and dedupe together.

    Raises InvalidInput when nothing slug-able remains.
    """
    if not title or not str(title).strip():
        raise InvalidInput("title is empty")
    stripped = _STRIP_CHARS.sub("", _ascii_fold(str(title)).lower())
    slug = _SEPARATORS.sub("-", stripped).strip("-")
    if max_length > 0 and len(slug) > max_length:
        slug = slug[:max_length].rstrip("-")
    if not slug:
        raise InvalidInput(f"title has no slug-able characters: {title!r}")
    return slug
