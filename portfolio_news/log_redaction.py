"""Scrub provider credentials from log output.

Every provider authenticates differently: NewsAPI ``apiKey=``, Finnhub
``token=``, Alpha Vantage ``apikey=`` in the query string, and Twitter
with an ``Authorization: Bearer`` header.  Any of them can leak through an
exception message that embeds a URL or request repr, so the filter works
on the fully rendered record, traceback included.

Usage::

    from portfolio_news.log_redaction import apply_global_log_redaction
    apply_global_log_redaction()  # once at startup, after basicConfig
"""
from __future__ import annotations

import logging
import re

REDACTED = "***REDACTED***"

# (name, pattern, replacement).  Query params keep their name so the log
# still says which credential was present.
_RULES: list[tuple[str, re.Pattern[str], str]] = [
    (
        "bearer",
        re.compile(r"(Bearer\s+)[A-Za-z0-9%._~+/=-]+", re.IGNORECASE),
        r"\1" + REDACTED,
    ),
    (
        "query_param",
        re.compile(r"\b(api[_-]?key|apikey|token|access_token)=[^&\s\"']+", re.IGNORECASE),
        r"\1=" + REDACTED,
    ),
    (
        "assignment",
        re.compile(r"\b(secret|password)\s*[:=]\s*[\"']?[^\s&\"']+[\"']?", re.IGNORECASE),
        r"\1=" + REDACTED,
    ),
]


def redact_secrets(msg: str) -> str:
    """Return *msg* with every recognised credential replaced."""
    if not msg:
        return msg
    for _name, pattern, repl in _RULES:
        msg = pattern.sub(repl, msg)
    return msg


class LogRedactionFilter(logging.Filter):
    """Render the record once, redact it, and freeze the result.

    Redacting only ``record.args`` misses credentials that arrive inside
    an exception object (``%s`` of an ``httpx.HTTPStatusError``), so the
    message is rendered first.  The traceback text is scrubbed as well.
    """

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
        try:
            rendered = record.getMessage()
        except (TypeError, ValueError):
            rendered = str(record.msg)
        record.msg = redact_secrets(rendered)
        record.args = None
        if record.exc_info and not record.exc_text:
            record.exc_text = logging.Formatter().formatException(record.exc_info)
        if record.exc_text:
            record.exc_text = redact_secrets(record.exc_text)
        return True


def apply_log_redaction(logger: logging.Logger) -> None:
    """Attach one :class:`LogRedactionFilter` to every handler of *logger*."""
    for handler in logger.handlers:
        if not any(isinstance(f, LogRedactionFilter) for f in handler.filters):
            handler.addFilter(LogRedactionFilter())


def apply_global_log_redaction() -> None:
    apply_log_redaction(logging.getLogger())
