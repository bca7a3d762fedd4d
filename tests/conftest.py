from __future__ import annotations

import pathlib
import sys

import pytest

_PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
for _p in (_PROJECT_ROOT / 'src', _PROJECT_ROOT):
    if str(_p) not in sys.path:
        sys.path.insert(0, str(_p))

from pid_control.control import ManualClock  # noqa: E402
from pid_control.telemetry import TelemetryRecorder  # noqa: E402


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def recorder() -> TelemetryRecorder:
    return TelemetryRecorder()
