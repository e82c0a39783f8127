"""Static news shown when every live source comes back empty."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable

from .common_types import NewsItem
from .normalize import iso_utc


def fallback_news(now: Callable[[], datetime] | None = None) -> list[NewsItem]:
    """Two canned market items, timestamped 2h and 4h before *now*."""
    ts = (now or (lambda: datetime.now(timezone.utc)))()
    return [
        NewsItem(
            id="fallback_1",
            title="Market Update: Tech Stocks Show Mixed Performance",
            summary=(
                "Technology stocks displayed varied performance today as investors "
                "weigh quarterly earnings results and market outlook."
            ),
            url="#",
            published_at=iso_utc(ts - timedelta(hours=2)),
            sentiment="neutral",
            source="Market Wire",
            category="market",
        ),
        NewsItem(
            id="fallback_2",
            title="Federal Reserve Maintains Current Interest Rate Policy",
            summary=(
                "The Federal Reserve announced it will maintain current interest rates, "
                "citing ongoing economic stability and inflation targets."
            ),
            url="#",
            published_at=iso_utc(ts - timedelta(hours=4)),
            sentiment="neutral",
            source="Financial News",
            category="market",
        ),
    ]
