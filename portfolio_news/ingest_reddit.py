"""Reddit ingestion adapter (public JSON listings, no auth).

Queries a fixed set of investing subreddits in parallel:
 1. ``/r/<sub>/hot.json``     when no symbols are given
 2. ``/r/<sub>/search.json``  restricted to the subreddit, cashtag query

A failing subreddit only drops its own posts.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from ._http import BaseAdapter, as_dict_list, get_json, log_fetch_warning
from .common_types import NewsItem
from .normalize import normalize_reddit

logger = logging.getLogger(__name__)

REDDIT_BASE = "https://www.reddit.com"

SUBREDDITS: tuple[str, ...] = ("investing", "stocks", "SecurityAnalysis", "ValueInvesting", "StockMarket")

POSTS_PER_SUBREDDIT = 10


class RedditAdapter(BaseAdapter):
    """Social-forum adapter over Reddit's public listing endpoints."""

    name = "reddit"

    @property
    def is_configured(self) -> bool:
        return self.cfg.enable_reddit

    def _listing_request(self, subreddit: str, symbols: list[str] | None) -> tuple[str, dict[str, Any]]:
        if symbols:
            query = " OR ".join(f"${s}" for s in symbols)
            return (
                f"{REDDIT_BASE}/r/{subreddit}/search.json",
                {"q": query, "restrict_sr": 1, "sort": "hot", "limit": POSTS_PER_SUBREDDIT},
            )
        return f"{REDDIT_BASE}/r/{subreddit}/hot.json", {"limit": POSTS_PER_SUBREDDIT}

    def _fetch_subreddit(self, subreddit: str, symbols: list[str] | None) -> list[NewsItem]:
        url, params = self._listing_request(subreddit, symbols)
        try:
            data = get_json(self.client, url, params)
        except Exception as exc:
            log_fetch_warning(f"reddit r/{subreddit}", exc)
            return []

        children = (data.get("data") or {}).get("children") if isinstance(data, dict) else None
        posts = [c.get("data") for c in as_dict_list(children)]
        return [normalize_reddit(p, symbols) for p in posts if isinstance(p, dict)]

    def _fetch(self, symbols: list[str] | None) -> list[NewsItem]:
        with ThreadPoolExecutor(max_workers=len(SUBREDDITS)) as pool:
            batches = list(pool.map(lambda sub: self._fetch_subreddit(sub, symbols), SUBREDDITS))
        items = [it for batch in batches for it in batch]
        logger.debug("reddit: %d posts from %d subreddits", len(items), len(SUBREDDITS))
        return items
