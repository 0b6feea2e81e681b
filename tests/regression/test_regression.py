"""Parametrized regression tests for the hybrid event parser.

Two test functions cover mock mode (default) and live mode (``--live``):

- ``test_mock_parse`` -- patches ``genai.Client`` so that
  ``models.generate_content`` returns the sidecar's ``mock_llm_response``
  (or raises a connection error when it is ``null``), runs the hybrid
  orchestrator against the sidecar's frozen clock, checks which path
  produced the event, and asserts via the tolerance engine.

- ``test_live_parse`` -- same flow but does NOT mock the model call.
  Requires a real ``GEMINI_API_KEY`` env var and the ``--live`` flag.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from unittest.mock import MagicMock, patch

import httpx
import pytest

from cal_nlp.hybrid import HybridOrchestrator, ParseState
from cal_nlp.llm import GeminiEventExtractor
from cal_nlp.rules.extractor import RuleBasedExtractor
from tests.regression.loader import build_clock, read_sample_text
from tests.regression.schema import SidecarSpec
from tests.regression.tolerance import assert_parsed_event

_SOURCES = {
    "generative": ParseState.TRY_GENERATIVE,
    "rule": ParseState.FALLBACK_RULE,
}

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _wire_mock_response(generate_content: MagicMock, sidecar: SidecarSpec) -> None:
    """Make *generate_content* behave as the sidecar describes.

    A dict is returned as JSON text, a string verbatim, and ``None``
    raises a connection error.
    """
    if sidecar.mock_llm_response is None:
        generate_content.side_effect = httpx.ConnectError("connection refused")
        return

    mock_resp = MagicMock()
    if isinstance(sidecar.mock_llm_response, str):
        mock_resp.text = sidecar.mock_llm_response
    else:
        mock_resp.text = json.dumps(sidecar.mock_llm_response)
    generate_content.return_value = mock_resp


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


@pytest.mark.regression
def test_mock_parse(sample_case: tuple[Path, SidecarSpec]) -> None:
    """Mock mode: patch the model call, then assert the parse.

    Steps:
    1. Load the sentence and sidecar (provided via ``pytest_generate_tests``).
    2. Freeze the clock at the sidecar's ``reference_datetime``.
    3. Patch ``genai.Client`` so ``generate_content`` follows the sidecar's
       ``mock_llm_response``.
    4. Run the hybrid orchestrator in the sidecar's timezone.
    5. Assert the producing path and the event via ``assert_parsed_event()``.
    """
    txt_path, sidecar = sample_case
    text = read_sample_text(txt_path)
    clock = build_clock(sidecar)

    with patch("cal_nlp.llm.genai.Client") as mock_genai_cls:
        _wire_mock_response(mock_genai_cls.return_value.models.generate_content, sidecar)
        orchestrator = HybridOrchestrator(
            rule_extractor=RuleBasedExtractor(clock),
            generative=GeminiEventExtractor(api_key="fake-key", clock=clock),
            clock=clock,
        )
        outcome = orchestrator.run(text, sidecar.timezone)

    assert outcome.event is not None, f"No event parsed: {outcome.errors}"
    assert outcome.source is _SOURCES[sidecar.expected_source], outcome.errors
    assert_parsed_event(outcome.event, sidecar)


@pytest.mark.regression
@pytest.mark.live
def test_live_parse(sample_case: tuple[Path, SidecarSpec]) -> None:
    """Live mode: real Gemini API call, then assert the parse with tolerance.

    Only samples whose expected result comes from the generative path are
    meaningful here; rule-path samples are skipped.
    """
    api_key = os.environ.get("GEMINI_API_KEY", "")
    if not api_key:
        pytest.skip("Real GEMINI_API_KEY required for live tests")

    txt_path, sidecar = sample_case
    if sidecar.expected_source != "generative":
        pytest.skip("Sample exercises the rule-based fallback")

    clock = build_clock(sidecar)
    extractor = GeminiEventExtractor(api_key=api_key, clock=clock)

    event = extractor.parse(read_sample_text(txt_path), sidecar.timezone)

    assert_parsed_event(event, sidecar)
