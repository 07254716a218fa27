"""Base writer interface.

Writers are the final stage — they render an ordered record sequence and
persist it to a local file.  They never reorder, filter or coerce records.
"""

from __future__ import annotations

import abc
import datetime as dt
import logging
import tempfile
from pathlib import Path
from typing import Any, Sequence

import pandas as pd

from yfp.dates import utc_today
from yfp.errors import SerializationFailed
from yfp.schemas.ohlcv import FIELDS, OHLCVRecord

logger = logging.getLogger(__name__)


class BaseWriter(abc.ABC):
    """Render records to text and write them to disk.

    Lifecycle:
        1. __init__(config)    — receive optional writer options.
        2. render(records)     — produce the file contents (mandatory).
        3. write(records, name) — render, then write atomically.
    """

    extension: str = ""

    def __init__(self, config: dict[str, Any] | None = None) -> None:
        self._config = config or {}

    @property
    def name(self) -> str:
        return self.__class__.__name__

    @staticmethod
    def to_frame(records: Sequence[OHLCVRecord]) -> pd.DataFrame:
        """One row per record, columns in ``FIELDS`` order."""
        return pd.DataFrame([r.to_row() for r in records], columns=list(FIELDS))

    @abc.abstractmethod
    def render(self, records: Sequence[OHLCVRecord]) -> str:
        """Return the serialized contents for *records*."""
        ...

    def output_path(self, file_name: str | Path) -> Path:
        path = Path(file_name)
        if path.suffix != f".{self.extension}":
            path = path.with_name(f"{path.name}.{self.extension}")
        return path

    def write(self, records: Sequence[OHLCVRecord], file_name: str | Path) -> Path:
        """Write *records* to ``file_name.<extension>`` and return the path.

        The file is written to a temp file in the same directory, then
        renamed, so a failed run never leaves a half-written file behind.
        """
        path = self.output_path(file_name)
        content = self.render(records)
        tmp_path: str | None = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
            with open(fd, "w", newline="") as fh:
                fh.write(content)
            Path(tmp_path).replace(path)
        except OSError as exc:
            if tmp_path is not None:
                Path(tmp_path).unlink(missing_ok=True)
            raise SerializationFailed(f"Could not write {path}: {exc}") from exc

        logger.info("Wrote %d rows to %s", len(records), path)
        return path


def prepare_file_name(
    ticker: str,
    start: str,
    end: str | None,
    frequency: str,
    file_name: str | None = None,
    today: dt.date | None = None,
) -> str:
    """Return *file_name*, or build ``yfp_<ticker>_<start>_<end>_<freq>_<today>``."""
    if file_name:
        return file_name
    today = today or utc_today()
    return f"yfp_{ticker}_{start}_{end or 'today'}_{frequency}_{today:%Y-%m-%d}"
