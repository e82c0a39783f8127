"""Unified internal schema shared across all news providers.

Every adapter (Reddit, NewsAPI, Finnhub, Alpha Vantage, Twitter)
normalises its raw payload into a ``NewsItem`` before entering the
pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from dateutil import parser as dtparser

Sentiment = Literal["positive", "negative", "neutral"]
Category = Literal["market", "stock", "crypto", "earnings", "general"]

CATEGORIES: tuple[str, ...] = ("market", "stock", "crypto", "earnings", "general")


@dataclass
class Engagement:
    """Provider-specific interaction counts (informational)."""

    upvotes: int | None = None
    comments: int | None = None
    shares: int | None = None

    def to_dict(self) -> dict[str, int]:
        counts = {"upvotes": self.upvotes, "comments": self.comments, "shares": self.shares}
        return {k: v for k, v in counts.items() if v is not None}


@dataclass
class NewsItem:
    """Provider-agnostic news record."""

    id: str  # "<source>_<provider-local id>"
    title: str
    summary: str
    url: str  # "#" when there is no real link
    published_at: str  # ISO-8601
    sentiment: Sentiment
    source: str  # provider / channel label
    category: Category
    symbol: str | None = None
    relevance_score: float | None = None
    engagement: Engagement | None = None
    image_url: str | None = None
    author: str | None = None

    # ── Convenience ─────────────────────────────────────────────

    @property
    def is_valid(self) -> bool:
        """Minimal sanity check before pipeline accepts the item."""
        return bool(self.id and self.title and self.title.strip())

    def published_epoch(self) -> float:
        """``published_at`` as epoch seconds; 0.0 when unparseable."""
        if not self.published_at:
            return 0.0
        try:
            return dtparser.isoparse(self.published_at).timestamp()
        except (ValueError, OverflowError):
            return 0.0

    def to_dict(self) -> dict[str, Any]:
        """JSON form consumed by the dashboard (camelCase keys)."""
        out: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "summary": self.summary,
            "url": self.url,
            "publishedAt": self.published_at,
            "sentiment": self.sentiment,
            "source": self.source,
            "category": self.category,
        }
        if self.symbol is not None:
            out["symbol"] = self.symbol
        if self.relevance_score is not None:
            out["relevanceScore"] = self.relevance_score
        if self.engagement is not None:
            out["engagement"] = self.engagement.to_dict()
        if self.image_url:
            out["imageUrl"] = self.image_url
        if self.author:
            out["author"] = self.author
        return out
