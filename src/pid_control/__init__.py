from __future__ import annotations

from pathlib import Path

ROOT_DIR_PATH = Path(__file__).parent.parent.parent
SRC_DIR_PATH = ROOT_DIR_PATH / "src"
APPS_DIR_PATH = ROOT_DIR_PATH / "apps"
TESTS_DIR_PATH = ROOT_DIR_PATH / "tests"
DEFAULT_BASE_DIR_PATH = ROOT_DIR_PATH / "data"

__version__ = "0.1.0"

# pid_control package root
from .config import ConfigError, load_config
from .control import ManualClock, MonotonicClock, PIDConfig, PIDController, PIDState, clamp
from .telemetry import CsvTelemetryLogger, TelemetryEvent, TelemetryRecorder, TerminalPrinter, fan_out

__all__ = [
    'ConfigError', 'load_config',
    'ManualClock', 'MonotonicClock', 'PIDConfig', 'PIDController', 'PIDState', 'clamp',
    'CsvTelemetryLogger', 'TelemetryEvent', 'TelemetryRecorder', 'TerminalPrinter', 'fan_out',
]
