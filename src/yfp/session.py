"""Session handshake — anonymous cookie followed by a crumb token.

The chart endpoint rejects requests that don't carry both a session cookie
and the matching crumb.  The handshake runs at most once per
``SessionHandshake`` instance and the result is shared by every later fetch.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

import httpx

from yfp.errors import HandshakeFailed
from yfp.models import ProviderSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Session:
    cookie: str
    crumb: str


class SessionHandshake:
    """Lazily acquire and cache a ``Session``.

    ``acquire()`` is guarded by a lock: a second caller arriving while the
    first handshake is in flight blocks on it and reuses its result.  A
    failed handshake caches nothing, and is never retried internally.
    """

    def __init__(self, client: httpx.Client, settings: ProviderSettings) -> None:
        self._client = client
        self._settings = settings
        self._lock = threading.Lock()
        self._session: Session | None = None
        self.handshake_count = 0

    def acquire(self) -> Session:
        with self._lock:
            if self._session is None:
                self.handshake_count += 1
                self._session = self._handshake()
            return self._session

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _handshake(self) -> Session:
        cookie = self._fetch_cookie()
        crumb = self._fetch_crumb(cookie)
        logger.info("Session established")
        return Session(cookie=cookie, crumb=crumb)

    def _fetch_cookie(self) -> str:
        url = self._settings.cookie_url
        logger.debug("Requesting session cookie from %s", url)
        try:
            resp = self._client.get(url)
        except httpx.HTTPError as exc:
            raise HandshakeFailed("cookie", str(exc)) from exc

        # Cookie host answers 404 while still setting the cookie; status ignored.
        pairs = [f"{name}={value}" for name, value in resp.cookies.items()]
        if not pairs:
            raise HandshakeFailed(
                "cookie", f"no cookie returned (HTTP {resp.status_code})"
            )
        return "; ".join(pairs)

    def _fetch_crumb(self, cookie: str) -> str:
        url = self._settings.crumb_url
        logger.debug("Requesting crumb from %s", url)
        try:
            resp = self._client.get(url, headers={"Cookie": cookie})
        except httpx.HTTPError as exc:
            raise HandshakeFailed("crumb", str(exc)) from exc

        if resp.status_code != 200:
            raise HandshakeFailed("crumb", f"HTTP {resp.status_code}")

        crumb = resp.text.strip()
        if not crumb or "<" in crumb:
            raise HandshakeFailed("crumb", "empty or non-token response body")
        return crumb
