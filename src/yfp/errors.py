"""Error taxonomy for the retrieval pipeline.

Every failure the pipeline can surface is a subclass of ``YFPError``.  Each
class carries its own ``exit_code`` so the CLI can map errors to distinct
process exit statuses without a lookup table.
"""

from __future__ import annotations


class YFPError(Exception):
    """Base class for all pipeline errors."""

    exit_code: int = 1


class InvalidTicker(YFPError):
    exit_code = 3


class InvalidDateFormat(YFPError):
    exit_code = 4

    def __init__(self, value: str) -> None:
        super().__init__(f"Invalid date {value!r}: expected YYYY-MM-DD")
        self.value = value


class InvalidRange(YFPError):
    exit_code = 5

    def __init__(self, start: str, end: str) -> None:
        super().__init__(f"Start date {start} is after end date {end}")
        self.start = start
        self.end = end


class HandshakeFailed(YFPError):
    """The cookie or crumb step of the session handshake failed."""

    exit_code = 6

    def __init__(self, stage: str, reason: str) -> None:
        super().__init__(f"Session handshake failed at {stage!r} stage: {reason}")
        self.stage = stage
        self.reason = reason


class ProviderRejected(YFPError):
    """The provider answered with a non-retryable (4xx) response."""

    exit_code = 7

    def __init__(self, status: int, detail: str = "") -> None:
        message = f"Provider rejected the request (HTTP {status})"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.status = status
        self.detail = detail


class NetworkTransient(YFPError):
    """Transient network failures persisted through every retry attempt."""

    exit_code = 8

    def __init__(self, attempts: int, last_error: str) -> None:
        super().__init__(
            f"Request failed after {attempts} attempts, last error: {last_error}"
        )
        self.attempts = attempts
        self.last_error = last_error


class MalformedPayload(YFPError):
    exit_code = 9


class UnorderedSeries(YFPError):
    exit_code = 10

    def __init__(self, index: int, previous: int, current: int) -> None:
        super().__init__(
            f"Series out of order at index {index}: "
            f"timestamp {current} follows {previous}"
        )
        self.index = index
        self.previous = previous
        self.current = current


class SerializationFailed(YFPError):
    exit_code = 11


class InvalidFrequency(YFPError):
    exit_code = 12

    def __init__(self, value: object) -> None:
        super().__init__(
            f"Invalid frequency {value!r}: expected daily, weekly or monthly"
        )
        self.value = value
