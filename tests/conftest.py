"""Shared fixtures for cal-nlp tests."""

from __future__ import annotations

import logging
from collections.abc import Generator
from datetime import UTC, datetime

import pytest

from cal_nlp.clock import TimezoneClock

# Wednesday 2026-02-18 18:00 UTC: 13:00 in New York, 03:00 (Thu) in Tokyo.
REFERENCE_INSTANT = datetime(2026, 2, 18, 18, 0, tzinfo=UTC)

_ENV_KEYS = (
    "GEMINI_API_KEY",
    "GEMINI_MODEL",
    "GEMINI_TIMEOUT_SECONDS",
    "LOG_LEVEL",
    "TIMEZONE",
)


def pytest_addoption(parser: pytest.Parser) -> None:
    """Register the ``--live`` CLI flag for live Gemini API tests."""
    parser.addoption(
        "--live",
        action="store_true",
        default=False,
        help="Run live tests against the real Gemini API.",
    )


def pytest_collection_modifyitems(
    config: pytest.Config,
    items: list[pytest.Item],
) -> None:
    """Skip ``@pytest.mark.live`` tests unless ``--live`` is passed."""
    if config.getoption("--live"):
        return

    skip_live = pytest.mark.skip(reason="Need --live option to run")
    for item in items:
        if "live" in item.keywords:
            item.add_marker(skip_live)


@pytest.fixture()
def clock() -> TimezoneClock:
    """A clock frozen at :data:`REFERENCE_INSTANT`."""
    return TimezoneClock(REFERENCE_INSTANT)


@pytest.fixture()
def monkeypatch_env(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Set the environment variables to valid, generative-enabled values.

    Also patches ``load_dotenv`` so that a real ``.env`` file on disk does not
    override the test values.

    Returns the dict of variables so tests can inspect or override values.
    """
    monkeypatch.setattr("cal_nlp.config.load_dotenv", lambda *_a, **_kw: None)
    env_vars = {
        "GEMINI_API_KEY": "test-gemini-key-12345",
        "GEMINI_MODEL": "gemini-2.0-flash",
        "TIMEZONE": "America/New_York",
    }
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    return env_vars


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove all cal-nlp-related environment variables.

    Patches ``load_dotenv`` so a real ``.env`` file cannot re-inject values
    that the test explicitly removed.
    """
    monkeypatch.setattr("cal_nlp.config.load_dotenv", lambda *_a, **_kw: None)
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def _reset_root_logger() -> Generator[None, None, None]:
    """Reset the root logger after each test to prevent handler leaks."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
