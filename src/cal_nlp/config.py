"""Configuration loading for cal-nlp.

Reads settings from environment variables (with .env support via
python-dotenv).  Every setting is optional: without ``GEMINI_API_KEY`` the
parser runs in rule-based-only mode.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from cal_nlp.clock import resolve_zone
from cal_nlp.exceptions import InvalidTimezone

DEFAULT_MODEL = "gemini-2.0-flash"
DEFAULT_TIMEOUT_SECONDS = 15.0


class ConfigError(Exception):
    """Raised when configuration values are present but invalid."""


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables.

    Attributes:
        gemini_api_key: API key for Google Gemini, or ``None`` to disable
            the generative path.
        gemini_model: Gemini model identifier.
        timeout_seconds: Transport timeout for the Gemini call.
        log_level: Logging level (default ``"INFO"``).
        timezone: Default IANA timezone for callers that supply none.
    """

    gemini_api_key: str | None = None
    gemini_model: str = DEFAULT_MODEL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    log_level: str = "INFO"
    timezone: str = "UTC"

    @property
    def generative_enabled(self) -> bool:
        return bool(self.gemini_api_key)

    def __repr__(self) -> str:
        masked = "'***'" if self.gemini_api_key else "None"
        return (
            f"Settings(gemini_api_key={masked}, "
            f"gemini_model={self.gemini_model!r}, "
            f"timeout_seconds={self.timeout_seconds!r}, "
            f"log_level={self.log_level!r}, "
            f"timezone={self.timezone!r})"
        )


def load_settings() -> Settings:
    """Load and validate settings from environment variables.

    Calls :func:`dotenv.load_dotenv` so a ``.env`` file in the project root
    is picked up automatically.  Blank values fall back to defaults.

    Returns:
        A validated :class:`Settings` instance.

    Raises:
        ConfigError: If ``GEMINI_TIMEOUT_SECONDS`` is not a positive number
            or ``TIMEZONE`` is not a known IANA zone.
    """
    load_dotenv()

    values: dict[str, object] = {}

    api_key = os.environ.get("GEMINI_API_KEY", "").strip()
    if api_key:
        values["gemini_api_key"] = api_key

    model = os.environ.get("GEMINI_MODEL", "").strip()
    if model:
        values["gemini_model"] = model

    raw_timeout = os.environ.get("GEMINI_TIMEOUT_SECONDS", "").strip()
    if raw_timeout:
        try:
            timeout = float(raw_timeout)
        except ValueError:
            raise ConfigError(
                f"GEMINI_TIMEOUT_SECONDS must be a number, got {raw_timeout!r}"
            ) from None
        if timeout <= 0:
            raise ConfigError(
                f"GEMINI_TIMEOUT_SECONDS must be positive, got {raw_timeout!r}"
            )
        values["timeout_seconds"] = timeout

    log_level = os.environ.get("LOG_LEVEL", "").strip()
    if log_level:
        values["log_level"] = log_level

    timezone = os.environ.get("TIMEZONE", "").strip()
    if timezone:
        try:
            resolve_zone(timezone)
        except InvalidTimezone as exc:
            raise ConfigError(f"TIMEZONE is not a valid IANA zone: {timezone!r}") from exc
        values["timezone"] = timezone

    return Settings(**values)
