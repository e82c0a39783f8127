"""Shared HTTP helpers and the adapter base class.

Centralises URL/exception sanitisation so that API keys are never logged
in plain text, regardless of which adapter raises the error, and gives
every adapter the same never-raises ``fetch()`` boundary.
"""

from __future__ import annotations

import logging
import re
import threading
from typing import Any

import httpx

from .common_types import NewsItem
from .config import Config

logger = logging.getLogger(__name__)

# Regex to strip API keys/tokens from URLs before logging.
_TOKEN_RE = re.compile(r"(apikey|api_key|apiKey|token|key)=[^&\s]+", re.IGNORECASE)

# ── Once-per-adapter error suppression ──────────────────────────
# 400/401/403/404 usually mean a bad key or an endpoint outside the
# user's plan.  Warn once, then suppress to avoid log spam.
_WARNED_LABELS: set[str] = set()
_warned_lock = threading.Lock()

_TIER_LIMITED_CODES: frozenset[int] = frozenset({400, 401, 403, 404})


def _sanitize_url(url: str) -> str:
    """Remove apikey/token query params from a URL for safe logging."""
    return _TOKEN_RE.sub(r"\1=***", url)


def _sanitize_exc(exc: BaseException) -> str:
    """Strip API keys/tokens from exception text for safe logging."""
    return _TOKEN_RE.sub(r"\1=***", str(exc))


def _is_tier_limited_error(exc: BaseException) -> bool:
    return (
        isinstance(exc, httpx.HTTPStatusError)
        and exc.response.status_code in _TIER_LIMITED_CODES
    )


def log_fetch_warning(label: str, exc: BaseException) -> None:
    """Log a fetch failure, suppressing repeated tier-limited errors.

    The first 400/401/403/404 for a given *label* is logged at WARNING
    with a note that further occurrences will be suppressed; later ones
    go to DEBUG.  Other errors (network, 5xx, bad JSON) are always
    logged at WARNING.
    """
    msg = _sanitize_exc(exc)
    if _is_tier_limited_error(exc):
        with _warned_lock:
            already_warned = label in _WARNED_LABELS
            _WARNED_LABELS.add(label)
        if not already_warned:
            code = exc.response.status_code  # type: ignore[attr-defined]
            logger.warning(
                "%s fetch failed (HTTP %d) – check the key / plan; "
                "suppressing further warnings: %s",
                label, code, msg,
            )
        else:
            logger.debug("%s fetch failed (tier-limited, suppressed): %s", label, msg)
    else:
        logger.warning("%s fetch failed: %s", label, msg)


def build_client(cfg: Config, headers: dict[str, str] | None = None) -> httpx.Client:
    """httpx client with the configured timeout and User-Agent."""
    merged = {"User-Agent": cfg.user_agent, "Accept": "application/json"}
    merged.update(headers or {})
    return httpx.Client(timeout=cfg.request_timeout_s, headers=merged, follow_redirects=True)


def get_json(client: httpx.Client, url: str, params: dict[str, Any] | None = None) -> Any:
    """GET *url* and return parsed JSON.

    Raises ``httpx.HTTPStatusError`` (with a sanitised message) on non-2xx
    and ``ValueError`` on a non-JSON body.  No retries: callers treat a
    failure as "no results this round".
    """
    r = client.get(url, params=params)
    try:
        r.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise httpx.HTTPStatusError(
            message=f"HTTP {r.status_code} from {_sanitize_url(str(r.url))}",
            request=exc.request,
            response=exc.response,
        ) from None

    ct = r.headers.get("content-type", "")
    try:
        return r.json()
    except ValueError:
        raise ValueError(
            f"non-JSON response (content-type={ct!r}, "
            f"status={r.status_code}, url={_sanitize_url(str(r.url))})"
        ) from None


class BaseAdapter:
    """Common scaffolding for provider adapters.

    Subclasses set ``name`` and implement ``_fetch(symbols)``; they may
    raise freely.  ``fetch()`` is the public boundary and never raises.
    """

    name = "base"

    def __init__(self, cfg: Config, client: httpx.Client | None = None) -> None:
        self.cfg = cfg
        self.client = client if client is not None else build_client(cfg, self._headers())

    def _headers(self) -> dict[str, str]:
        return {}

    @property
    def is_configured(self) -> bool:
        return True

    def _fetch(self, symbols: list[str] | None) -> list[NewsItem]:
        raise NotImplementedError

    def fetch(self, symbols: list[str] | None = None) -> list[NewsItem]:
        """Fetch and normalise; any failure yields ``[]``."""
        if not self.is_configured:
            logger.info("%s not configured (no credentials), skipping.", self.name)
            return []
        try:
            items = self._fetch(symbols or None)
        except Exception as exc:
            log_fetch_warning(self.name, exc)
            return []
        return [it for it in items if it.is_valid]

    def close(self) -> None:
        self.client.close()


def as_dict_list(x: Any) -> list[dict[str, Any]]:
    """Keep only the dict entries of *x*; anything that is not a list → []."""
    if not isinstance(x, list):
        return []
    return [item for item in x if isinstance(item, dict)]
