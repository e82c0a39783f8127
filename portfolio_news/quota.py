"""Daily call gate for the Twitter recent-search quota (100 calls / month).

The gate is a pure function of the calendar date: weekdays whose
day-of-month is divisible by 3 are eligible, which is at most ~10 days a
month.  No counter is stored; the usage log line is advisory.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable, Sequence

logger = logging.getLogger(__name__)

MONTHLY_CALL_LIMIT = 100

# Checked in order; the first supplied symbol found here gets the call.
PRIORITY_SYMBOLS: tuple[str, ...] = ("AAPL", "NVDA", "PLTR", "IONQ", "SOUN")


def is_eligible_day(day: date) -> bool:
    """True on Monday–Friday when the day-of-month is a multiple of 3."""
    return day.weekday() < 5 and day.day % 3 == 0


def pick_primary_symbol(symbols: Sequence[str]) -> str:
    """Pick the one symbol worth spending the call on."""
    if not symbols:
        raise ValueError("pick_primary_symbol() needs at least one symbol")
    for sym in PRIORITY_SYMBOLS:
        if sym in symbols:
            return sym
    return symbols[0]


class QuotaGate:
    """Wall-clock gate around a scarce API.

    *clock* defaults to local ``datetime.now`` and is injectable so tests
    can pin the date.
    """

    def __init__(self, clock: Callable[[], datetime] = datetime.now) -> None:
        self._clock = clock

    def today(self) -> date:
        return self._clock().date()

    def should_use_today(self) -> bool:
        return is_eligible_day(self.today())

    def log_usage(self, symbol: str) -> None:
        logger.info(
            "Twitter API used on %s for %s - monitor monthly usage to stay under %d calls",
            self.today().isoformat(), symbol, MONTHLY_CALL_LIMIT,
        )
