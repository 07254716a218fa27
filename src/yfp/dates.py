"""Date range and frequency resolution.

Turns a ``YYYY-MM-DD`` start/end pair and a frequency into the epoch-second
boundaries and interval code the chart endpoint expects.  Pure functions
only — no network or file I/O.
"""

from __future__ import annotations

import datetime as dt
import enum
from dataclasses import dataclass

from yfp.errors import InvalidDateFormat, InvalidFrequency, InvalidRange, InvalidTicker

_DATE_FORMAT = "%Y-%m-%d"
_SECONDS_PER_DAY = 86_400


class Frequency(str, enum.Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"

    @property
    def interval(self) -> str:
        """Provider interval code."""
        return _INTERVALS[self]

    def __str__(self) -> str:
        return self.value


_INTERVALS = {
    Frequency.DAILY: "1d",
    Frequency.WEEKLY: "1wk",
    Frequency.MONTHLY: "1mo",
}


@dataclass(frozen=True)
class ResolvedQuery:
    """Provider query parameters for one ticker and date range."""

    ticker: str
    start_epoch: int
    end_epoch: int
    interval: str


def utc_today() -> dt.date:
    return dt.datetime.now(dt.timezone.utc).date()


def parse_frequency(value: Frequency | str) -> Frequency:
    """Coerce *value* to a ``Frequency``, raising ``InvalidFrequency``."""
    try:
        return Frequency(value)
    except ValueError:
        raise InvalidFrequency(value) from None


def parse_date(value: str) -> dt.date:
    """Parse a ``YYYY-MM-DD`` string, raising ``InvalidDateFormat``."""
    try:
        return dt.datetime.strptime(value, _DATE_FORMAT).date()
    except (TypeError, ValueError):
        raise InvalidDateFormat(value) from None


def date_to_timestamp(day: dt.date) -> int:
    """Epoch seconds of UTC midnight on *day*."""
    midnight = dt.datetime(day.year, day.month, day.day, tzinfo=dt.timezone.utc)
    return int(midnight.timestamp())


def timestamp_to_date(timestamp: int) -> dt.date:
    return dt.datetime.fromtimestamp(timestamp, tz=dt.timezone.utc).date()


def short_date(day: dt.date) -> str:
    """``Dec 28, 2005`` — the date format used in output files."""
    return f"{day:%b} {day.day}, {day.year}"


def human_readable_date(day: dt.date) -> str:
    """``December 28, 2005`` — the date format used in log lines."""
    return f"{day:%B} {day.day}, {day.year}"


def resolve(
    ticker: str,
    start: str,
    end: str | None = None,
    frequency: Frequency = Frequency.DAILY,
    today: dt.date | None = None,
) -> ResolvedQuery:
    """Resolve a ticker, date range and frequency into query parameters.

    Parameters
    ----------
    end:
        Inclusive end date.  Defaults to *today*, which itself defaults to
        the current UTC date.  Callers that resolve several queries in one
        run should read the clock once and pass it in.

    The end boundary is the UTC midnight *after* the end date, so bars
    stamped anywhere on the end date are included.
    """
    if not ticker or not ticker.strip():
        raise InvalidTicker("Ticker must be a non-empty symbol")

    start_day = parse_date(start)
    if end is None:
        end_day = today if today is not None else utc_today()
    else:
        end_day = parse_date(end)

    if start_day > end_day:
        raise InvalidRange(start_day.isoformat(), end_day.isoformat())

    return ResolvedQuery(
        ticker=ticker.strip(),
        start_epoch=date_to_timestamp(start_day),
        end_epoch=date_to_timestamp(end_day) + _SECONDS_PER_DAY,
        interval=parse_frequency(frequency).interval,
    )
