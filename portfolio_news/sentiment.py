"""Keyword sentiment heuristic and headline categoriser.

Used by adapters whose provider does not rate sentiment itself.  Alpha
Vantage ships a numeric score, which ``map_sentiment_score`` folds into
the same three buckets.
"""

from __future__ import annotations

import re

from .common_types import Category, Sentiment

POSITIVE_WORDS: frozenset[str] = frozenset({
    "bullish", "up", "gain", "surge", "profit", "growth",
    "strong", "beat", "exceed", "optimistic", "buy", "rally",
})

NEGATIVE_WORDS: frozenset[str] = frozenset({
    "bearish", "down", "loss", "fall", "decline", "weak",
    "miss", "concern", "pessimistic", "sell", "crash",
})

_SPLIT_RE = re.compile(r"\W+")

# Provider scores inside (-0.15, 0.15) are treated as noise.
_SCORE_THRESHOLD = 0.15


def analyze_sentiment(text: str) -> Sentiment:
    """Classify *text* by counting positive vs negative keyword tokens.

    Every occurrence counts, so "up up down" is positive.  Ties are
    neutral.
    """
    pos = 0
    neg = 0
    for word in _SPLIT_RE.split((text or "").lower()):
        if word in POSITIVE_WORDS:
            pos += 1
        elif word in NEGATIVE_WORDS:
            neg += 1
    if pos > neg:
        return "positive"
    if neg > pos:
        return "negative"
    return "neutral"


def map_sentiment_score(score: float) -> Sentiment:
    """Map a provider sentiment score (roughly -1 … +1) to a label."""
    if score > _SCORE_THRESHOLD:
        return "positive"
    if score < -_SCORE_THRESHOLD:
        return "negative"
    return "neutral"


# Ordered: first match wins.
_CATEGORY_HINTS: list[tuple[Category, tuple[str, ...]]] = [
    ("earnings", ("earnings", "quarterly")),
    ("crypto", ("bitcoin", "crypto")),
    ("stock", ("stock", "share")),
    ("market", ("market", "index")),
]


def categorize_news(text: str) -> Category:
    """Assign a display category from substring hints in *text*."""
    lower = (text or "").lower()
    for category, hints in _CATEGORY_HINTS:
        if any(h in lower for h in hints):
            return category
    return "general"
