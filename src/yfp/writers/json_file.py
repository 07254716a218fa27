"""JSON writer — an array of objects, one per record."""

from __future__ import annotations

import json
import logging
from typing import Sequence

from yfp.registry import register_writer
from yfp.schemas.ohlcv import OHLCVRecord
from yfp.writers.base import BaseWriter

logger = logging.getLogger(__name__)


@register_writer("json")
class JSONWriter(BaseWriter):
    """Render records as a pretty-printed JSON array of row objects.

    Floats are written with ``repr`` precision so every price reads back as
    the exact value the provider sent.
    """

    extension = "json"

    def render(self, records: Sequence[OHLCVRecord]) -> str:
        indent = self._config.get("indent", 2)
        if not records:
            logger.info("%s: no records — writing an empty array", self.name)
        return json.dumps([r.to_row() for r in records], indent=indent)
