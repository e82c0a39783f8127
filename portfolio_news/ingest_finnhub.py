"""Finnhub company-news ingestion adapter.

Polls two endpoints in parallel:
 1. /news?category=general             (general market news, always)
 2. /company-news?symbol=…&from=…&to=… (one per symbol, last 7 days)

A failing sub-request only drops its own articles.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import date, timedelta
from typing import Any, Callable

import httpx

from ._http import BaseAdapter, as_dict_list, get_json, log_fetch_warning
from .common_types import NewsItem
from .config import Config
from .normalize import normalize_finnhub

logger = logging.getLogger(__name__)

FINNHUB_BASE = "https://finnhub.io/api/v1"

COMPANY_NEWS_LOOKBACK_DAYS = 7


class FinnhubAdapter(BaseAdapter):
    """Company-news adapter."""

    name = "finnhub"

    def __init__(
        self,
        cfg: Config,
        client: httpx.Client | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        super().__init__(cfg, client)
        self._today = today

    @property
    def is_configured(self) -> bool:
        return bool(self.cfg.finnhub_api_key)

    def _requests(self, symbols: list[str] | None) -> list[tuple[str, dict[str, Any], str | None]]:
        token = self.cfg.finnhub_api_key
        reqs: list[tuple[str, dict[str, Any], str | None]] = [
            (f"{FINNHUB_BASE}/news", {"category": "general", "token": token}, None),
        ]
        if symbols:
            today = self._today()
            since = today - timedelta(days=COMPANY_NEWS_LOOKBACK_DAYS)
            for sym in symbols:
                reqs.append((
                    f"{FINNHUB_BASE}/company-news",
                    {"symbol": sym, "from": since.isoformat(), "to": today.isoformat(), "token": token},
                    sym,
                ))
        return reqs

    def _fetch_one(
        self,
        url: str,
        params: dict[str, Any],
        symbol: str | None,
        symbols: list[str] | None,
    ) -> list[NewsItem]:
        label = f"finnhub {symbol}" if symbol else "finnhub general"
        try:
            data = get_json(self.client, url, params)
        except Exception as exc:
            log_fetch_warning(label, exc)
            return []
        return [normalize_finnhub(a, symbols, queried_symbol=symbol) for a in as_dict_list(data)]

    def _fetch(self, symbols: list[str] | None) -> list[NewsItem]:
        reqs = self._requests(symbols)
        # One worker per request; no sub-request queues behind another.
        with ThreadPoolExecutor(max_workers=len(reqs)) as pool:
            batches = list(pool.map(lambda r: self._fetch_one(r[0], r[1], r[2], symbols), reqs))
        return [it for batch in batches for it in batch]
