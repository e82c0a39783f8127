"""NewsAPI.org ingestion adapter.

Single request against ``/v2/everything``, newest first.  Symbols are
OR-ed into the free-text query; without symbols a generic market query
is used.
"""

from __future__ import annotations

from typing import Any

from ._http import BaseAdapter, as_dict_list, get_json
from .common_types import NewsItem
from .normalize import normalize_newsapi

NEWSAPI_URL = "https://newsapi.org/v2/everything"

DEFAULT_QUERY = "stock market OR investing OR finance"
PAGE_SIZE = 15


def build_query(symbols: list[str] | None) -> str:
    return " OR ".join(symbols) if symbols else DEFAULT_QUERY


class NewsApiAdapter(BaseAdapter):
    """Press-wire adapter."""

    name = "newsapi"

    @property
    def is_configured(self) -> bool:
        return bool(self.cfg.news_api_key)

    def _fetch(self, symbols: list[str] | None) -> list[NewsItem]:
        params: dict[str, Any] = {
            "q": build_query(symbols),
            "sortBy": "publishedAt",
            "language": "en",
            "pageSize": PAGE_SIZE,
            "apiKey": self.cfg.news_api_key,
        }
        data = get_json(self.client, NEWSAPI_URL, params)
        if not isinstance(data, dict):
            raise ValueError(f"NewsAPI returned {type(data).__name__} instead of object")
        if data.get("status") == "error":
            raise ValueError(f"NewsAPI error {data.get('code')}: {data.get('message')}")
        return [normalize_newsapi(a, symbols) for a in as_dict_list(data.get("articles"))]
