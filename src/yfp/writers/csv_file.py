"""CSV writer — header row followed by one row per record."""

from __future__ import annotations

from typing import Sequence

from yfp.registry import register_writer
from yfp.schemas.ohlcv import OHLCVRecord
from yfp.writers.base import BaseWriter


@register_writer("csv")
class CSVWriter(BaseWriter):
    """Render records as ``date,open,high,low,close,adj_close,volume`` rows."""

    extension = "csv"

    def render(self, records: Sequence[OHLCVRecord]) -> str:
        return self.to_frame(records).to_csv(index=False, lineterminator="\n")
