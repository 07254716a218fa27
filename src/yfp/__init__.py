"""yfp — historical OHLCV bars from Yahoo Finance."""

from yfp.dates import Frequency
from yfp.fetcher import HistoryFetcher
from yfp.pipeline import retrieve_historical_data
from yfp.schemas.ohlcv import OHLCVRecord

__all__ = [
    "Frequency",
    "HistoryFetcher",
    "OHLCVRecord",
    "retrieve_historical_data",
]
