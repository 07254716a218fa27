"""Pipeline entry point — resolve → handshake → fetch → parse.

``retrieve_historical_data`` returns exactly one ordered record list or
raises exactly one ``YFPError``; there is no partial output.
"""

from __future__ import annotations

import datetime as dt
import logging

from yfp.dates import (
    Frequency,
    human_readable_date,
    parse_date,
    parse_frequency,
    resolve,
    utc_today,
)
from yfp.fetcher import HistoryFetcher
from yfp.models import Settings
from yfp.parser import parse_series
from yfp.schemas.ohlcv import OHLCVRecord

logger = logging.getLogger(__name__)


def retrieve_historical_data(
    ticker: str,
    start_date: str,
    end_date: str | None = None,
    frequency: Frequency | str = Frequency.DAILY,
    *,
    settings: Settings | None = None,
    fetcher: HistoryFetcher | None = None,
    today: dt.date | None = None,
) -> list[OHLCVRecord]:
    """Fetch and normalize historical bars for one ticker.

    Parameters
    ----------
    end_date:
        Inclusive ``YYYY-MM-DD`` end date; defaults to *today*.
    fetcher:
        An existing fetcher to reuse.  Its session, once established, is
        shared by every call that passes it in.  When omitted a fetcher is
        created for this call and closed afterwards.
    today:
        The run's clock reading.  Read once from UTC when omitted.
    """
    frequency = parse_frequency(frequency)
    today = today or utc_today()

    # Dates are validated before any network activity.
    query = resolve(ticker, start_date, end_date, frequency, today=today)
    end_day = parse_date(end_date) if end_date else today
    logger.info(
        "Getting historical data for %s from %s until %s on %s frequency",
        query.ticker,
        human_readable_date(parse_date(start_date)),
        human_readable_date(end_day),
        frequency,
    )

    if fetcher is not None:
        payload = fetcher.fetch(query)
    else:
        with HistoryFetcher(settings) as owned:
            payload = owned.fetch(query)

    records = parse_series(payload)
    logger.info("Retrieved %d records for %s", len(records), query.ticker)
    return records
