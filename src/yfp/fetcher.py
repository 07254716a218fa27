"""History fetcher — pulls the raw chart payload for one ticker.

The chart endpoint returns a JSON envelope shaped like::

    {"chart": {"result": [{"timestamp": [...],
                           "indicators": {"quote": [{"open": [...], ...}],
                                          "adjclose": [{"adjclose": [...]}]}}],
               "error": null}}

This module unwraps the envelope into a ``RawSeriesPayload`` and nothing
else; turning the parallel arrays into records is the parser's job.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable

import httpx
from pydantic import ValidationError

from yfp.dates import ResolvedQuery
from yfp.errors import MalformedPayload, NetworkTransient, ProviderRejected
from yfp.models import Settings
from yfp.schemas.ohlcv import RawSeriesPayload
from yfp.session import SessionHandshake

logger = logging.getLogger(__name__)

_QUOTE_FIELDS = ("open", "high", "low", "close", "volume")


class HistoryFetcher:
    """Fetch chart payloads with a cached session and bounded retries.

    One fetcher is one run: it owns the HTTP client and the session
    handshake, so every ``fetch`` on the same instance reuses one session.

    Lifecycle:
        1. __init__(settings)  — receive the validated settings.
        2. connect()           — open the HTTP client (implicit on first fetch).
        3. fetch(query)        — handshake once, then GET the chart.
        4. disconnect()        — close the client if this fetcher opened it.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        client: httpx.Client | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._settings = settings or Settings()
        self._client = client
        self._owns_client = client is None
        self._sleep = sleep
        self._handshake: SessionHandshake | None = None

    @property
    def name(self) -> str:
        return self.__class__.__name__

    @property
    def handshake(self) -> SessionHandshake:
        if self._handshake is None:
            self.connect()
        return self._handshake  # type: ignore[return-value]

    # -- lifecycle -----------------------------------------------------------

    def connect(self) -> None:
        provider = self._settings.provider
        if self._client is None:
            self._client = httpx.Client(
                headers={"User-Agent": provider.user_agent},
                timeout=provider.timeout,
                follow_redirects=True,
            )
            self._owns_client = True
            logger.debug("Opened HTTP client (timeout=%.1fs)", provider.timeout)
        if self._handshake is None:
            self._handshake = SessionHandshake(self._client, provider)

    def fetch(self, query: ResolvedQuery) -> RawSeriesPayload:
        """Return the raw series for *query*.

        Raises ``ProviderRejected`` on a 4xx answer, ``NetworkTransient``
        once retries run out, and ``MalformedPayload`` when the body is not
        a chart envelope.  An empty series is returned, not raised.
        """
        session = self.handshake.acquire()

        url = f"{self._settings.provider.chart_url.rstrip('/')}/{query.ticker}"
        params = {
            "period1": query.start_epoch,
            "period2": query.end_epoch,
            "interval": query.interval,
            "includeAdjustedClose": "true",
            "events": "div,splits",
            "crumb": session.crumb,
        }
        logger.info(
            "Requesting %s interval=%s period1=%d period2=%d",
            query.ticker, query.interval, query.start_epoch, query.end_epoch,
        )

        resp = self._get_with_retry(url, params, {"Cookie": session.cookie})
        payload = self._decode(resp)
        logger.info("Received %d points for %s", len(payload.timestamp), query.ticker)
        return payload

    def disconnect(self) -> None:
        if self._client is not None and self._owns_client:
            self._client.close()
            self._client = None
            self._handshake = None
            logger.debug("Disconnected HTTP client")

    def __enter__(self) -> HistoryFetcher:
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        self.disconnect()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _get_with_retry(
        self, url: str, params: dict[str, Any], headers: dict[str, str]
    ) -> httpx.Response:
        """GET *url*, retrying transport errors and 5xx with backoff."""
        retry = self._settings.retry
        delays = retry.delays()
        last_error = ""

        for attempt in range(1, retry.max_attempts + 1):
            try:
                resp = self._client.get(url, params=params, headers=headers)  # type: ignore[union-attr]
            except httpx.TransportError as exc:
                last_error = str(exc) or exc.__class__.__name__
            except httpx.HTTPError as exc:
                logger.error("%s request failed: %r", self.name, exc)
                raise NetworkTransient(attempt, str(exc) or exc.__class__.__name__) from exc
            else:
                status = resp.status_code
                if status < 400:
                    return resp
                if status < 500:
                    raise ProviderRejected(status, self._error_detail(resp))
                last_error = f"HTTP {status}"

            if attempt < retry.max_attempts:
                wait = delays[attempt - 1]
                logger.warning(
                    "%s attempt %d/%d failed (%s), retrying in %.1fs…",
                    self.name, attempt, retry.max_attempts, last_error, wait,
                )
                self._sleep(wait)

        logger.error("%s failed after %d attempts", self.name, retry.max_attempts)
        raise NetworkTransient(retry.max_attempts, last_error)

    @staticmethod
    def _error_detail(resp: httpx.Response) -> str:
        """Pull ``chart.error.description`` out of an error body, if any."""
        try:
            return str(resp.json()["chart"]["error"]["description"])
        except (ValueError, KeyError, TypeError):
            return resp.reason_phrase or ""

    @staticmethod
    def _decode(resp: httpx.Response) -> RawSeriesPayload:
        try:
            data = resp.json()
        except ValueError as exc:
            raise MalformedPayload(f"Response body is not JSON: {exc}") from exc

        chart = data.get("chart") if isinstance(data, dict) else None
        if not isinstance(chart, dict):
            raise MalformedPayload("Response has no 'chart' object")

        error = chart.get("error")
        if error:
            detail = error.get("description", "") if isinstance(error, dict) else str(error)
            raise ProviderRejected(resp.status_code, detail)

        results = chart.get("result")
        if not results or not isinstance(results[0], dict):
            raise MalformedPayload("Response has no chart result")
        result = results[0]

        timestamps = result.get("timestamp")
        if not timestamps:
            return RawSeriesPayload()

        indicators = result.get("indicators") or {}
        quote = (indicators.get("quote") or [{}])[0] or {}
        adjclose = (indicators.get("adjclose") or [{}])[0] or {}

        try:
            return RawSeriesPayload(
                timestamp=timestamps,
                adjclose=adjclose.get("adjclose") or [],
                **{field: quote.get(field) or [] for field in _QUOTE_FIELDS},
            )
        except ValidationError as exc:
            raise MalformedPayload(f"Chart arrays have unexpected types: {exc}") from exc
