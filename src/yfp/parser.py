"""Series parser — parallel chart arrays to ordered OHLCV records.

Rules, applied per index:
  - every primary array must be as long as the timestamp array;
  - an index with any null open/high/low/close/volume is skipped
    (non-trading day, pending split, data gap);
  - a null or missing adjusted close is replaced with that bar's close;
  - timestamps must never decrease across emitted records.

No smoothing, interpolation or outlier correction happens here.
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

from yfp.errors import MalformedPayload, UnorderedSeries
from yfp.schemas.ohlcv import OHLCVRecord, RawSeriesPayload

logger = logging.getLogger(__name__)

_PRIMARY_FIELDS = ("open", "high", "low", "close", "volume")


def _check_lengths(payload: RawSeriesPayload) -> None:
    expected = len(payload.timestamp)
    mismatched = {
        field: len(getattr(payload, field))
        for field in _PRIMARY_FIELDS
        if len(getattr(payload, field)) != expected
    }
    if mismatched:
        raise MalformedPayload(
            f"Parallel arrays misaligned: {expected} timestamps but {mismatched}"
        )


def parse_series(payload: RawSeriesPayload) -> list[OHLCVRecord]:
    """Transcribe *payload* into records, ascending by timestamp."""
    _check_lengths(payload)

    records: list[OHLCVRecord] = []
    skipped = 0
    substituted = 0
    previous: int | None = None

    for i, ts in enumerate(payload.timestamp):
        values = {field: getattr(payload, field)[i] for field in _PRIMARY_FIELDS}
        missing = [field for field, value in values.items() if value is None]
        if missing:
            skipped += 1
            logger.debug("Skipping index %d (ts=%d): null %s", i, ts, missing)
            continue

        adj_close = payload.adjclose[i] if i < len(payload.adjclose) else None
        if adj_close is None:
            adj_close = values["close"]
            substituted += 1

        if previous is not None and ts < previous:
            raise UnorderedSeries(i, previous, ts)
        previous = ts

        try:
            record = OHLCVRecord(timestamp=ts, adj_close=adj_close, **values)
        except ValidationError as exc:
            raise MalformedPayload(f"Invalid bar at index {i}: {exc}") from exc
        records.append(record)

    logger.info(
        "Parsed %d→%d rows (%d skipped, %d adj_close substituted)",
        len(payload.timestamp), len(records), skipped, substituted,
    )
    return records
