"""Global configuration for the portfolio news aggregator.

One ``Config`` is built at process start and handed to the aggregator and
every adapter.  All tunables can be overridden via environment variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field


def _env_float(key: str, default: float) -> float:
    """Read an env var as float, returning *default* on parse failure."""
    try:
        return float(os.getenv(key, str(default)))
    except (ValueError, TypeError):
        return default


def _env_int(key: str, default: int) -> int:
    """Read an env var as int, returning *default* on parse failure."""
    try:
        return int(os.getenv(key, str(default)))
    except (ValueError, TypeError):
        return default


def _env_key(key: str) -> str:
    """Read a credential, accepting the dashboard's ``NEXT_PUBLIC_`` spelling too."""
    return (os.getenv(key) or os.getenv(f"NEXT_PUBLIC_{key}") or "").strip()


@dataclass(frozen=True)
class Config:
    """Central configuration – one instance per process.

    Environment variables are read at **instantiation** time (not module
    import time) so callers can set them programmatically before
    creating a ``Config``.
    """

    # ── Provider credentials (repr=False to prevent accidental logging) ──
    news_api_key: str = field(default_factory=lambda: _env_key("NEWS_API_KEY"), repr=False)
    finnhub_api_key: str = field(default_factory=lambda: _env_key("FINNHUB_API_KEY"), repr=False)
    alpha_vantage_api_key: str = field(default_factory=lambda: _env_key("ALPHA_VANTAGE_API_KEY"), repr=False)
    twitter_bearer_token: str = field(default_factory=lambda: _env_key("TWITTER_BEARER_TOKEN"), repr=False)

    # ── Feature flags ───────────────────────────────────────────
    # Reddit's public JSON needs no credential, so it has an explicit switch.
    enable_reddit: bool = field(default_factory=lambda: os.getenv("ENABLE_REDDIT", "1") == "1")

    # ── Timeouts ────────────────────────────────────────────────
    # Per HTTP request.
    request_timeout_s: float = field(default_factory=lambda: _env_float("NEWS_REQUEST_TIMEOUT_S", 10.0))
    # Per adapter in the aggregator fan-out (covers an adapter's sub-requests).
    adapter_timeout_s: float = field(default_factory=lambda: _env_float("NEWS_ADAPTER_TIMEOUT_S", 15.0))

    # ── Query shape ─────────────────────────────────────────────
    default_limit: int = field(default_factory=lambda: _env_int("NEWS_DEFAULT_LIMIT", 20))
    user_agent: str = field(default_factory=lambda: os.getenv("NEWS_USER_AGENT", "PortfolioDashboard/1.0"))

    # ── Derived helpers ─────────────────────────────────────────

    @property
    def available_sources(self) -> dict[str, bool]:
        """Provider → configured flag, for response metadata."""
        return {
            "reddit": self.enable_reddit,
            "newsapi": bool(self.news_api_key),
            "finnhub": bool(self.finnhub_api_key),
            "alphavantage": bool(self.alpha_vantage_api_key),
            "twitter": bool(self.twitter_bearer_token),
        }
