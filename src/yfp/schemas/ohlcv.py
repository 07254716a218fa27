"""Pydantic schemas for chart payloads and OHLCV (Open-High-Low-Close-Volume) records."""

from __future__ import annotations

import datetime as dt
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from yfp.dates import short_date, timestamp_to_date

# Output column order; readers of the files depend on it.
FIELDS = ("date", "open", "high", "low", "close", "adj_close", "volume")


class RawSeriesPayload(BaseModel):
    """The chart endpoint's parallel, index-aligned arrays.

    ``adjclose`` is indexed like the others but may carry nulls in different
    positions, or be missing entirely.
    """

    timestamp: list[int] = []
    open: list[Optional[float]] = []
    high: list[Optional[float]] = []
    low: list[Optional[float]] = []
    close: list[Optional[float]] = []
    volume: list[Optional[float]] = []
    adjclose: list[Optional[float]] = []

    @property
    def is_empty(self) -> bool:
        return not self.timestamp


class OHLCVRecord(BaseModel):
    """A single price bar.

    ``timestamp`` is the only stored date; ``date`` and ``human_date`` are
    derived from it.
    """

    timestamp: int
    open: float = Field(..., ge=0)
    high: float = Field(..., ge=0)
    low: float = Field(..., ge=0)
    close: float = Field(..., ge=0)
    adj_close: float = Field(..., ge=0)
    volume: int

    @field_validator("volume", mode="before")
    @classmethod
    def volume_must_be_whole(cls, v):
        if isinstance(v, float):
            if not v.is_integer():
                raise ValueError(f"volume must be a whole number, got {v}")
            return int(v)
        return v

    @field_validator("volume")
    @classmethod
    def volume_must_be_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"volume must be non-negative, got {v}")
        return v

    @property
    def date(self) -> dt.date:
        return timestamp_to_date(self.timestamp)

    @property
    def human_date(self) -> str:
        return short_date(self.date)

    def to_row(self) -> dict[str, object]:
        """Output row keyed by ``FIELDS``, human-readable date."""
        return {
            "date": self.human_date,
            "open": self.open,
            "high": self.high,
            "low": self.low,
            "close": self.close,
            "adj_close": self.adj_close,
            "volume": self.volume,
        }
