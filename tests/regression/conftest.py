"""Regression test infrastructure: sample auto-discovery.

Provides ``pytest_generate_tests`` for automatic parametrization of
``sample_case`` fixtures from ``samples/**/*.expected.json`` sidecar files.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from tests.regression.loader import discover_samples

# Root of the samples directory (relative to the project root).
_SAMPLES_DIR = Path(__file__).resolve().parent.parent.parent / "samples"


def pytest_generate_tests(metafunc: pytest.Metafunc) -> None:
    """Auto-parametrize tests that request a ``sample_case`` fixture.

    Discovers all ``samples/**/*.txt`` files paired with a sibling
    ``.expected.json`` sidecar, and parametrizes the test with
    ``(txt_path, sidecar)`` tuples.  Test IDs use ``category/stem``
    format for easy ``-k`` filtering (e.g., ``-k relative/lunch_tomorrow``).
    """
    if "sample_case" not in metafunc.fixturenames:
        return

    cases = discover_samples(_SAMPLES_DIR)

    ids = []
    for txt_path, _sidecar in cases:
        rel = txt_path.relative_to(_SAMPLES_DIR)
        ids.append(f"{rel.parent}/{rel.stem}")

    metafunc.parametrize("sample_case", cases, ids=ids)
