"""Keyword-scored category classification.

Deterministic and explainable:
- each category owns a static set of trigger terms (words or phrases)
- text is lowercased and every whole-word occurrence of a term scores 1
- the strictly highest score wins; any tie (including all zero) is
  ``UNCATEGORIZED``
"""

from __future__ import annotations

import re
from typing import Dict, List, Pattern, Tuple


UNCATEGORIZED = "uncategorized"

# -----------------------------
# Taxonomy (category slug -> trigger terms)
# -----------------------------
CATEGORY_KEYWORDS: Dict[str, Tuple[str, ...]] = {
    "business": (
        "business",
        "economy",
        "economic",
        "market",
        "markets",
        "stock",
        "stocks",
        "sensex",
        "nifty",
        "shares",
        "investor",
        "investors",
        "startup",
        "company",
        "profit",
        "revenue",
        "inflation",
        "gdp",
        "rbi",
        "bank",
        "banking",
        "trade",
        "rupee",
        "ipo",
    ),
    "politics": (
        "politics",
        "political",
        "election",
        "elections",
        "minister",
        "parliament",
        "lok sabha",
        "rajya sabha",
        "government",
        "bjp",
        "congress",
        "opposition",
        "vote",
        "voters",
        "campaign",
        "policy",
        "prime minister",
        "chief minister",
        "assembly",
    ),
    "sports": (
        "sports",
        "sport",
        "cricket",
        "football",
        "hockey",
        "tennis",
        "olympics",
        "ipl",
        "match",
        "tournament",
        "world cup",
        "wicket",
        "century",
        "captain",
        "player",
        "players",
        "coach",
        "medal",
    ),
    "entertainment": (
        "entertainment",
        "bollywood",
        "film",
        "films",
        "movie",
        "movies",
        "actor",
        "actress",
        "box office",
        "music",
        "song",
        "celebrity",
        "series",
        "trailer",
        "ott",
        "netflix",
    ),
    "health": (
        "health",
        "hospital",
        "doctor",
        "doctors",
        "disease",
        "virus",
        "vaccine",
        "covid",
        "medical",
        "medicine",
        "patients",
        "cancer",
        "diabetes",
        "outbreak",
        "fitness",
        "nutrition",
    ),
    "technology": (
        "technology",
        "tech",
        "smartphone",
        "software",
        "app",
        "apps",
        "internet",
        "artificial intelligence",
        "ai",
        "isro",
        "satellite",
        "cyber",
        "chip",
        "semiconductor",
        "google",
        "apple",
        "5g",
    ),
}


def _compile(terms: Tuple[str, ...]) -> List[Pattern[str]]:
    return [re.compile(r"\b" + re.escape(t.lower()) + r"\b") for t in terms]


_PATTERNS: Dict[str, List[Pattern[str]]] = {cat: _compile(terms) for cat, terms in CATEGORY_KEYWORDS.items()}


def score_categories(title: str, body: str = "") -> Dict[str, int]:
    """Whole-word trigger hits per category for title + body."""
    blob = ((title or "") + " " + (body or "")).lower()
    scores: Dict[str, int] = {}
    for category, patterns in _PATTERNS.items():
        scores[category] = sum(len(p.findall(blob)) for p in patterns)
    return scores


def classify_category(title: str, body: str = "") -> str:
    scores = score_categories(title, body)
    best = max(scores.values(), default=0)
    if best <= 0:
        return UNCATEGORIZED
    leaders = [cat for cat, score in scores.items() if score == best]
    if len(leaders) != 1:
        return UNCATEGORIZED
    return leaders[0]
