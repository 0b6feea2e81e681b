"""Unit tests for the CLI entrypoint.

Tests cover: rule-only parsing, generative wiring, timezone selection,
parse failures, configuration errors, and argument errors.
"""

from __future__ import annotations

import json
import logging
from unittest.mock import MagicMock, patch

import pytest

from cal_nlp.__main__ import main
from cal_nlp.exceptions import BothFailed


class TestCLI:
    """Unit tests for ``cal_nlp.__main__.main``."""

    def test_rule_only_prints_payload(
        self, clean_env: None, capsys: pytest.CaptureFixture[str]
    ) -> None:
        exit_code = main(["Lunch with Sam tomorrow at noon at Cafe Roma", "--rule-only"])

        assert exit_code == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["title"] == "Lunch with Sam"
        assert payload["location"] == "Cafe Roma"
        assert payload["duration"] == 60
        assert payload["startTime"].endswith("Z")

    def test_settings_drive_orchestrator(self, monkeypatch_env: dict[str, str]) -> None:
        orchestrator = MagicMock()
        orchestrator.parse_event.return_value.to_payload.return_value = {"title": "x"}

        with patch("cal_nlp.__main__.build_orchestrator", return_value=orchestrator) as build:
            exit_code = main(["Lunch tomorrow"])

        assert exit_code == 0
        settings = build.call_args.args[0]
        assert settings.gemini_api_key == "test-gemini-key-12345"
        orchestrator.parse_event.assert_called_once_with("Lunch tomorrow", "America/New_York")

    def test_timezone_flag_overrides_settings(self, monkeypatch_env: dict[str, str]) -> None:
        orchestrator = MagicMock()
        orchestrator.parse_event.return_value.to_payload.return_value = {}

        with patch("cal_nlp.__main__.build_orchestrator", return_value=orchestrator):
            main(["Lunch", "--timezone", "Asia/Tokyo"])

        orchestrator.parse_event.assert_called_once_with("Lunch", "Asia/Tokyo")

    def test_rule_only_skips_generative(self, monkeypatch_env: dict[str, str]) -> None:
        with patch("cal_nlp.__main__.build_orchestrator") as build:
            exit_code = main(["Lunch", "--rule-only"])

        assert exit_code == 0
        build.assert_not_called()

    def test_unknown_timezone(
        self, clean_env: None, capsys: pytest.CaptureFixture[str]
    ) -> None:
        exit_code = main(["Lunch", "--timezone", "Bogus/Zone", "--rule-only"])

        assert exit_code == 1
        assert "Unknown timezone" in capsys.readouterr().err

    def test_nothing_parsed(self, clean_env: None, capsys: pytest.CaptureFixture[str]) -> None:
        orchestrator = MagicMock()
        orchestrator.parse_event.side_effect = BothFailed("")

        with patch("cal_nlp.__main__.build_orchestrator", return_value=orchestrator):
            exit_code = main([""])

        assert exit_code == 1
        assert "Could not parse event details" in capsys.readouterr().err

    def test_config_error(
        self,
        clean_env: None,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        monkeypatch.setenv("GEMINI_TIMEOUT_SECONDS", "later")

        exit_code = main(["Lunch"])

        assert exit_code == 1
        assert "GEMINI_TIMEOUT_SECONDS" in capsys.readouterr().err

    def test_missing_text_is_argument_error(self, clean_env: None) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([])

        assert exc_info.value.code == 2

    def test_verbose_enables_debug(self, clean_env: None) -> None:
        main(["Lunch", "--rule-only", "-v"])

        assert logging.getLogger().level == logging.DEBUG
