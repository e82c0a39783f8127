"""Response payload for the dashboard's news panel, plus atomic JSON export.

``build_news_feed()`` wraps the ranked items with the metadata the UI
shows next to them: which providers are configured and when the answer
was produced.  The category filter lives here, after the core has
ranked and truncated.
"""

from __future__ import annotations

import contextlib
import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from typing import Any, Iterable

from .common_types import CATEGORIES
from .fallback import fallback_news
from .normalize import iso_utc
from .pipeline import NewsAggregator

logger = logging.getLogger(__name__)


def build_news_feed(
    aggregator: NewsAggregator,
    symbols: Iterable[str] | None = None,
    limit: int | None = None,
    category: str | None = None,
) -> dict[str, Any]:
    """Query *aggregator* and shape the result for the dashboard."""
    if category is not None and category not in CATEGORIES:
        raise ValueError(f"unknown category {category!r}; expected one of {', '.join(CATEGORIES)}")

    symbols = list(symbols) if symbols else None
    try:
        items = aggregator.get_comprehensive_news(symbols, limit)
    except Exception:
        logger.exception("News aggregation failed, serving fallback news.")
        return {
            "news": [it.to_dict() for it in fallback_news()],
            "sources": {name: False for name in aggregator.cfg.available_sources},
            "error": "Using fallback news data",
            "timestamp": iso_utc(datetime.now(timezone.utc)),
        }

    if category:
        items = [it for it in items if it.category == category]
    logger.info("Returning %d news items.", len(items))
    return {
        "news": [it.to_dict() for it in items],
        "sources": aggregator.cfg.available_sources,
        "timestamp": iso_utc(datetime.now(timezone.utc)),
    }


def export_feed(path: str, payload: dict[str, Any]) -> str:
    """Write the feed *payload* to *path* so readers never see a partial file.

    The JSON is rendered before anything touches disk; a payload that
    cannot be serialised (e.g. a NaN score) raises without leaving a
    temp file behind.  Returns the absolute path written.
    """
    body = json.dumps(payload, ensure_ascii=False, indent=2, default=str, allow_nan=False)
    dest = os.path.abspath(path)
    dest_dir = os.path.dirname(dest)
    os.makedirs(dest_dir, exist_ok=True)

    fd, tmp = tempfile.mkstemp(dir=dest_dir, prefix=f".{os.path.basename(dest)}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(body)
            f.write("\n")
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, dest)
    except BaseException:
        with contextlib.suppress(OSError):
            os.unlink(tmp)
        raise
    logger.debug("Exported %d news items to %s", len(payload.get("news") or []), dest)
    return dest
