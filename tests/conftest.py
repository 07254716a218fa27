"""Shared fixtures for the test suite."""

from __future__ import annotations

import datetime as dt
from typing import Any
from unittest.mock import MagicMock

import pytest

from yfp.dates import date_to_timestamp
from yfp.models import RetrySettings, Settings

# Daily bars are stamped at US market open, 14:30 UTC.
MARKET_OPEN_OFFSET = 14 * 3600 + 30 * 60

VOO_DAYS = [
    dt.date(2020, 1, 2),
    dt.date(2020, 1, 3),
    dt.date(2020, 1, 6),
    dt.date(2020, 1, 7),
    dt.date(2020, 1, 8),
]


def bar_timestamp(day: dt.date) -> int:
    return date_to_timestamp(day) + MARKET_OPEN_OFFSET


def make_chart(
    days: list[dt.date],
    *,
    overrides: dict[str, list[Any]] | None = None,
    adjclose: list[Any] | None = None,
    include_adjclose: bool = True,
) -> dict:
    """Build a chart-endpoint JSON body for *days* with simple rising prices."""
    n = len(days)
    quote: dict[str, list[Any]] = {
        "open": [300.0 + i for i in range(n)],
        "high": [305.0 + i for i in range(n)],
        "low": [295.0 + i for i in range(n)],
        "close": [302.0 + i for i in range(n)],
        "volume": [1_000_000 + i * 1000 for i in range(n)],
    }
    quote.update(overrides or {})
    indicators: dict[str, Any] = {"quote": [quote]}
    if include_adjclose:
        adj = adjclose if adjclose is not None else [301.5 + i for i in range(n)]
        indicators["adjclose"] = [{"adjclose": adj}]
    return {
        "chart": {
            "result": [
                {
                    "meta": {"symbol": "VOO", "currency": "USD"},
                    "timestamp": [bar_timestamp(d) for d in days],
                    "indicators": indicators,
                }
            ],
            "error": None,
        }
    }


def make_response(
    status: int = 200,
    json_data: Any = None,
    text: str = "",
    cookies: dict[str, str] | None = None,
) -> MagicMock:
    """A stand-in for ``httpx.Response``."""
    resp = MagicMock()
    resp.status_code = status
    resp.text = text
    resp.cookies = cookies or {}
    resp.reason_phrase = "Error" if status >= 400 else "OK"
    if json_data is None:
        resp.json.side_effect = ValueError("Expecting value: line 1 column 1")
    else:
        resp.json.return_value = json_data
    return resp


class FakeYahoo:
    """Route GETs to cookie / crumb / chart responses and count the calls.

    ``chart`` is a list consumed in order; an ``Exception`` entry is raised
    instead of returned.
    """

    def __init__(self, settings: Settings, chart: list[Any] | None = None) -> None:
        self.provider = settings.provider
        self.cookie_response = make_response(404, text="", cookies={"A3": "d=AQABBC"})
        self.crumb_response = make_response(200, text="abcCRUMB123")
        self.chart = list(chart or [])
        self.calls: list[tuple[str, dict]] = []

    def get(self, url: str, params=None, headers=None):  # noqa: ANN001
        self.calls.append((url, {"params": params, "headers": headers}))
        if url == self.provider.cookie_url:
            return self._answer(self.cookie_response)
        if url == self.provider.crumb_url:
            return self._answer(self.crumb_response)
        if url.startswith(self.provider.chart_url):
            return self._answer(self.chart.pop(0))
        raise AssertionError(f"unexpected URL {url}")

    @staticmethod
    def _answer(item):  # noqa: ANN001
        if isinstance(item, Exception):
            raise item
        return item

    def count(self, url: str) -> int:
        return sum(1 for called, _ in self.calls if called.startswith(url))

    @property
    def chart_calls(self) -> int:
        return self.count(self.provider.chart_url)

    @property
    def cookie_calls(self) -> int:
        return self.count(self.provider.cookie_url)

    def client(self) -> MagicMock:
        mock_client = MagicMock()
        mock_client.get.side_effect = self.get
        return mock_client


@pytest.fixture()
def settings() -> Settings:
    """Default settings with zero backoff so retries don't sleep."""
    return Settings(retry=RetrySettings(max_attempts=3, backoff_seconds=0))


@pytest.fixture()
def voo_chart() -> dict:
    return make_chart(VOO_DAYS)
