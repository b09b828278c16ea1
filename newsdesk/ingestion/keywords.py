"""Keyword/tag extraction for ingested articles."""

from __future__ import annotations

import re
from typing import List


DEFAULT_MAX_KEYWORDS = 10
DEFAULT_MIN_LENGTH = 4

# "over" is not a stop word.
STOPWORDS = {
    "the","a","an","and","or","but","of","to","in","on","for","with","by","at","as","is","are","was","were","be","been","being",
    "this","that","these","those","it","its","from","about","into","after","before","between","through","during","without","within",
    "what","who","whom","which","when","where","why","how","can","could","should","would","may","might","will","shall","do","does","did",
    "their","they","them","we","you","your","i","he","she","his","her","our","ours","us",
    "have","has","had","having","said","says","also","more","most","than","then","there","here","just","only","very","such",
    "some","other","each","much","many","upon","while","until","again","against","amid","among","news","read",
}

_TOKEN = re.compile(r"[a-z0-9]+")


def extract_keywords(
    title: str,
    body: str = "",
    *,
    max_keywords: int = DEFAULT_MAX_KEYWORDS,
    min_length: int = DEFAULT_MIN_LENGTH,
) -> List[str]:
    """Distinct lowercase tokens in first-occurrence order.

    Tokens shorter than ``min_length``, stop words and pure numbers are dropped;
    the result is capped at ``max_keywords``.
    """
    text = ((title or "") + " " + (body or "")).lower()
    if not text.strip() or max_keywords <= 0:
        return []
    seen = set()
    out: List[str] = []
    for tok in _TOKEN.findall(text):
        if len(tok) < min_length or tok in STOPWORDS or tok.isdigit():
            continue
        if tok in seen:
            continue
        seen.add(tok)
        out.append(tok)
        if len(out) >= max_keywords:
            break
    return out
