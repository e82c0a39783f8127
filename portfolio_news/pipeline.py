"""Multi-source pipeline: fan-out → merge → dedupe → rank → truncate → reprioritise.

``NewsAggregator.get_comprehensive_news()`` is the single query entry
point.  It never raises: a failed or slow adapter is simply absent from
this call's results, and when nothing at all comes back the static
fallback items are returned so the dashboard is never blank.

The quota-constrained Twitter adapter is called **after** the standard
fan-out completes and only when symbols were supplied.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, wait
from datetime import datetime, timezone
from typing import Callable, Iterable, Protocol, Sequence

from .common_types import NewsItem
from .config import Config
from .fallback import fallback_news
from .ingest_alphavantage import AlphaVantageAdapter
from .ingest_finnhub import FinnhubAdapter
from .ingest_newsapi import NewsApiAdapter
from .ingest_reddit import RedditAdapter
from .ingest_twitter import TwitterAdapter
from .scoring import mentions_symbol

logger = logging.getLogger(__name__)

PORTFOLIO_BOOST = 15.0
MAX_SOCIAL_SYMBOLS = 3


class NewsAdapter(Protocol):
    name: str

    def fetch(self, symbols: list[str] | None = None) -> list[NewsItem]: ...


# ── Pure pipeline stages ────────────────────────────────────────

def normalize_symbols(symbols: Iterable[str] | None) -> list[str]:
    """Strip, upper-case and de-duplicate, keeping first-seen order."""
    if not symbols:
        return []
    cleaned = (s.strip().upper() for s in symbols if isinstance(s, str))
    return list(dict.fromkeys(s for s in cleaned if s))


def remove_duplicates(items: Iterable[NewsItem]) -> list[NewsItem]:
    """Drop items whose case-folded, trimmed title was already seen.

    Exact-title match only: the same story under a different headline is
    kept twice, and two different stories sharing a generic headline are
    collapsed into the first.
    """
    seen: set[str] = set()
    out: list[NewsItem] = []
    for it in items:
        key = it.title.strip().lower()
        if key in seen:
            continue
        seen.add(key)
        out.append(it)
    return out


def sort_and_limit(items: Iterable[NewsItem], limit: int) -> list[NewsItem]:
    """Relevance descending, then most recent first; keep *limit*."""
    ranked = sorted(
        items,
        key=lambda it: (it.relevance_score or 0.0, it.published_epoch()),
        reverse=True,
    )
    return ranked[:limit]


def is_portfolio_relevant(item: NewsItem, symbols: Sequence[str]) -> bool:
    content = f"{item.title} {item.summary}"
    return any(mentions_symbol(content, sym) or item.symbol == sym for sym in symbols)


def prioritize_portfolio_news(items: list[NewsItem], symbols: Sequence[str]) -> list[NewsItem]:
    """Boost and front-load items that mention a portfolio symbol.

    Mutates ``relevance_score`` of matching items in place (+15).  Both
    groups keep their relative order.
    """
    portfolio: list[NewsItem] = []
    other: list[NewsItem] = []
    for it in items:
        if is_portfolio_relevant(it, symbols):
            it.relevance_score = (it.relevance_score or 0.0) + PORTFOLIO_BOOST
            portfolio.append(it)
        else:
            other.append(it)
    return portfolio + other


# ── Aggregator ──────────────────────────────────────────────────

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class NewsAggregator:
    """Fans out to every configured news source and ranks the result.

    Adapters are built from *cfg* unless passed in explicitly (tests pass
    stubs).  *clock* only feeds the fallback timestamps; the Twitter gate
    carries its own clock.
    """

    def __init__(
        self,
        cfg: Config | None = None,
        adapters: Sequence[NewsAdapter] | None = None,
        social_adapter: NewsAdapter | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.cfg = cfg or Config()
        self.adapters: list[NewsAdapter] = list(adapters) if adapters is not None else [
            RedditAdapter(self.cfg),
            NewsApiAdapter(self.cfg),
            FinnhubAdapter(self.cfg),
            AlphaVantageAdapter(self.cfg),
        ]
        self.social_adapter = social_adapter if social_adapter is not None else TwitterAdapter(self.cfg)
        self._clock = clock

    # ── Fan-out ─────────────────────────────────────────────────

    def _fan_out(self, symbols: list[str] | None) -> list[NewsItem]:
        """Run every standard adapter concurrently; collect in adapter order."""
        if not self.adapters:
            return []
        pool = ThreadPoolExecutor(max_workers=len(self.adapters), thread_name_prefix="news-adapter")
        try:
            futures = [pool.submit(a.fetch, symbols) for a in self.adapters]
            wait(futures, timeout=self.cfg.adapter_timeout_s)

            merged: list[NewsItem] = []
            for adapter, fut in zip(self.adapters, futures):
                name = getattr(adapter, "name", type(adapter).__name__)
                if not fut.done():
                    logger.warning("News source %s timed out after %.1fs, skipped.", name, self.cfg.adapter_timeout_s)
                    continue
                exc = fut.exception()
                if exc is not None:
                    logger.error("News source %s failed: %s", name, exc)
                    continue
                items = fut.result() or []
                logger.debug("News source %s returned %d items.", name, len(items))
                merged.extend(items)
            return merged
        finally:
            # Stuck adapters keep their thread until their HTTP timeout fires;
            # do not block the response on them.
            pool.shutdown(wait=False, cancel_futures=True)

    def _social(self, symbols: list[str]) -> list[NewsItem]:
        subset = symbols[:MAX_SOCIAL_SYMBOLS]
        try:
            items = self.social_adapter.fetch(subset)
        except Exception:
            logger.info("Twitter quota preserved, using other news sources.")
            return []
        if items:
            logger.info("Added %d Twitter insights for %s.", len(items), ", ".join(subset))
        return items

    # ── Query ───────────────────────────────────────────────────

    def get_comprehensive_news(
        self,
        symbols: Iterable[str] | None = None,
        limit: int | None = None,
    ) -> list[NewsItem]:
        """Ranked, de-duplicated news across all sources.

        With *symbols*, provider queries are scoped to them and items that
        mention one are boosted and moved to the front.
        """
        syms = normalize_symbols(symbols)
        if limit is None:
            limit = self.cfg.default_limit
        limit = max(1, int(limit))

        all_news = self._fan_out(syms or None)
        if syms:
            all_news.extend(self._social(syms))

        if not all_news:
            logger.warning("All news sources returned nothing, serving fallback news.")
            return fallback_news(self._clock)

        unique = remove_duplicates(all_news)
        ranked = sort_and_limit(unique, limit)
        if syms:
            ranked = prioritize_portfolio_news(ranked, syms)

        logger.info(
            "news query: symbols=%s raw=%d unique=%d returned=%d",
            ",".join(syms) or "-", len(all_news), len(unique), len(ranked),
        )
        return ranked

    def close(self) -> None:
        for a in [*self.adapters, self.social_adapter]:
            close = getattr(a, "close", None)
            if close is None:
                continue
            try:
                close()
            except Exception as exc:
                logger.debug("closing %s failed: %s", getattr(a, "name", a), exc)
