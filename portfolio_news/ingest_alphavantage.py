"""Alpha Vantage NEWS_SENTIMENT ingestion adapter.

The only provider that ships its own sentiment score.  On the free tier a
throttled call still answers HTTP 200, with a ``Note``/``Information``
message in place of ``feed``.
"""

from __future__ import annotations

import logging

from ._http import BaseAdapter, as_dict_list, get_json
from .common_types import NewsItem
from .normalize import normalize_alphavantage

logger = logging.getLogger(__name__)

ALPHAVANTAGE_URL = "https://www.alphavantage.co/query"

DEFAULT_TICKERS = ("AAPL", "GOOGL", "MSFT", "TSLA", "NVDA")
FEED_LIMIT = 20


class AlphaVantageAdapter(BaseAdapter):
    """Sentiment-news adapter."""

    name = "alphavantage"

    @property
    def is_configured(self) -> bool:
        return bool(self.cfg.alpha_vantage_api_key)

    def _fetch(self, symbols: list[str] | None) -> list[NewsItem]:
        tickers = ",".join(symbols or DEFAULT_TICKERS)
        data = get_json(self.client, ALPHAVANTAGE_URL, {
            "function": "NEWS_SENTIMENT",
            "tickers": tickers,
            "limit": FEED_LIMIT,
            "apikey": self.cfg.alpha_vantage_api_key,
        })
        if not isinstance(data, dict):
            raise ValueError(f"Alpha Vantage returned {type(data).__name__} instead of object")

        notice = data.get("Note") or data.get("Information") or data.get("Error Message")
        if notice and "feed" not in data:
            logger.warning("Alpha Vantage returned no feed: %s", str(notice)[:200])
            return []
        return [normalize_alphavantage(a, symbols) for a in as_dict_list(data.get("feed"))]
