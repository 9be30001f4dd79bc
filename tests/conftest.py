from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
TESTS_DIR = Path(__file__).resolve().parent
for path in (ROOT, TESTS_DIR):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

SAMPLE_ROOT_NAMESPACE = "sample_app.controllers"


@pytest.fixture(autouse=True)
def _isolate_route_synth_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in (
        "ROUTESYNTH_ROOT_NAMESPACE",
        "ROUTESYNTH_OUTPUT_FORMAT",
        "ROUTESYNTH_ROUTE_FILE",
    ):
        monkeypatch.delenv(key, raising=False)
