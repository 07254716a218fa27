"""Pydantic models for runtime settings.

Settings come from an optional YAML file and are validated at startup.
Invalid settings fail fast with clear error messages before any I/O happens.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64; rv:134.0) Gecko/20100101 Firefox/134.0"
)


class RetrySettings(BaseModel):
    max_attempts: int = Field(3, ge=1)
    backoff_seconds: float = Field(1.0, ge=0)
    max_backoff_seconds: float = Field(8.0, ge=0)

    def delays(self) -> list[float]:
        """Sleep durations between attempts, capped exponential.

        There is one delay fewer than ``max_attempts``: no sleep follows the
        final attempt.
        """
        return [
            min(self.backoff_seconds * (2 ** n), self.max_backoff_seconds)
            for n in range(self.max_attempts - 1)
        ]


class ProviderSettings(BaseModel):
    """Yahoo Finance endpoints and HTTP client options."""

    cookie_url: str = "https://fc.yahoo.com"
    crumb_url: str = "https://query1.finance.yahoo.com/v1/test/getcrumb"
    chart_url: str = "https://query1.finance.yahoo.com/v8/finance/chart"
    user_agent: str = DEFAULT_USER_AGENT
    timeout: float = Field(30.0, gt=0)

    @model_validator(mode="after")
    def _require_http_urls(self):
        for name in ("cookie_url", "crumb_url", "chart_url"):
            url = getattr(self, name)
            if not url.startswith(("http://", "https://")):
                raise ValueError(f"{name} must be an http(s) URL, got {url!r}")
        return self


class Settings(BaseModel):
    """Root model — represents the entire settings YAML file."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    retry: RetrySettings = RetrySettings()
    provider: ProviderSettings = ProviderSettings()

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, v):
        return v.upper() if isinstance(v, str) else v


def load_settings(path: str | Path | None = None) -> Settings:
    """Read and validate settings from *path*, or return the defaults."""
    if path is None:
        return Settings()
    raw = yaml.safe_load(Path(path).read_text()) or {}
    return Settings.model_validate(raw)
