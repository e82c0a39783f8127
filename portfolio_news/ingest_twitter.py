"""Twitter (X) recent-search adapter (quota constrained).

The provider allows 100 calls a month, so this adapter:

* only calls on days the ``QuotaGate`` allows,
* spends the call on a single primary symbol,
* asks only for high-engagement tweets and drops low-signal ones that
  slipped through,
* never retries.

Gate closed, no symbols and no token all look the same to the caller:
an empty list.
"""

from __future__ import annotations

import logging

import httpx

from ._http import BaseAdapter, as_dict_list, get_json
from .common_types import NewsItem
from .config import Config
from .normalize import normalize_tweet
from .quota import QuotaGate, pick_primary_symbol
from .scoring import tweet_engagement

logger = logging.getLogger(__name__)

TWITTER_SEARCH_URL = "https://api.twitter.com/2/tweets/search/recent"

MAX_RESULTS = 10
MIN_ENGAGEMENT = 20

COMPANY_NAMES: dict[str, str] = {
    "AAPL": "Apple",
    "SOUN": "SoundHound",
    "IONQ": "IonQ",
    "PLTR": "Palantir",
    "NVDA": "NVIDIA",
    "OKLO": "Oklo",
    "TMC": "TMC the metals company",
    "BBAI": "BigBear.ai",
}


def company_name(symbol: str) -> str:
    return COMPANY_NAMES.get(symbol, symbol)


def build_query(symbol: str) -> str:
    """High-engagement, original-tweets-only search for *symbol*."""
    return f"(${symbol} OR {company_name(symbol)}) (min_retweets:10 OR min_faves:50) -is:retweet lang:en"


class TwitterAdapter(BaseAdapter):
    """Social-sentiment adapter behind a daily quota gate."""

    name = "twitter"

    def __init__(
        self,
        cfg: Config,
        client: httpx.Client | None = None,
        gate: QuotaGate | None = None,
    ) -> None:
        super().__init__(cfg, client)
        self.gate = gate or QuotaGate()

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.cfg.twitter_bearer_token}"}

    @property
    def is_configured(self) -> bool:
        return bool(self.cfg.twitter_bearer_token)

    def _fetch(self, symbols: list[str] | None) -> list[NewsItem]:
        if not self.gate.should_use_today():
            logger.info("Twitter API not scheduled today, skipping to preserve monthly quota.")
            return []
        if not symbols:
            return []

        symbol = pick_primary_symbol(symbols)
        logger.info("Using Twitter API call for %s", symbol)
        try:
            data = get_json(self.client, TWITTER_SEARCH_URL, {
                "query": build_query(symbol),
                "max_results": MAX_RESULTS,
                "tweet.fields": "created_at,author_id,public_metrics,context_annotations",
                "user.fields": "verified",
            })
        finally:
            # The call counts against quota whether or not it succeeded.
            self.gate.log_usage(symbol)

        tweets = as_dict_list(data.get("data")) if isinstance(data, dict) else []
        return [
            normalize_tweet(t, symbol)
            for t in tweets
            if tweet_engagement(t) >= MIN_ENGAGEMENT
        ]
