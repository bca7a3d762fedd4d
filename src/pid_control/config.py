# Shared PID configuration defaults
# Option names, defaults and the TOML loader used by PIDController.from_mapping
from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

try:
    import tomllib  # Python 3.11+
except ImportError:  # pragma: no cover
    import tomli as tomllib  # type: ignore

# Gains
DEFAULT_KP = 0.0
DEFAULT_KI = 0.0
DEFAULT_KD = 0.0

# Derivative low-pass (1.0 bypasses the filter)
DEFAULT_TAU = 1.0

# Nominal time-step per call (sec), used unless use_external_t is set
DEFAULT_T = 1.0

# Output bounds, also used for integral anti-windup
DEFAULT_OUTPUT_MIN = -1.0
DEFAULT_OUTPUT_MAX = 1.0

DEFAULT_USE_EXTERNAL_T = False
DEFAULT_ZERO_D_ON_SET_POINT_CHANGE = False

# Telemetry
DEFAULT_TELEMETRY_ENABLED = False
DEFAULT_TELEMETRY_CHANNEL = 'pid_controller'

# Divisor floor for the derivative term (sec)
DERIVATIVE_T_FLOOR = 0.001

DEFAULT_CONFIG: dict[str, Any] = {
    'kp': DEFAULT_KP,
    'ki': DEFAULT_KI,
    'kd': DEFAULT_KD,
    'tau': DEFAULT_TAU,
    't': DEFAULT_T,
    'output_min': DEFAULT_OUTPUT_MIN,
    'output_max': DEFAULT_OUTPUT_MAX,
    'use_external_t': DEFAULT_USE_EXTERNAL_T,
    'zero_d_on_set_point_change': DEFAULT_ZERO_D_ON_SET_POINT_CHANGE,
    'telemetry_enabled': DEFAULT_TELEMETRY_ENABLED,
    'telemetry_channel': DEFAULT_TELEMETRY_CHANNEL,
}

FLOAT_OPTIONS = ('kp', 'ki', 'kd', 'tau', 't', 'output_min', 'output_max')
BOOL_OPTIONS = ('use_external_t', 'zero_d_on_set_point_change', 'telemetry_enabled')


class ConfigError(ValueError):
    """Raised for option names or values the controller does not recognise."""


def merge_config(overrides: Mapping[str, Any] | None = None) -> dict[str, Any]:
    """Merge ``overrides`` over :data:`DEFAULT_CONFIG` and coerce value types.

    Unknown keys raise :class:`ConfigError` instead of being dropped, so a
    misspelt option never leaves its default silently in place.
    """
    merged = dict(DEFAULT_CONFIG)
    if not overrides:
        return merged
    unknown = sorted(k for k in overrides if k not in DEFAULT_CONFIG)
    if unknown:
        raise ConfigError(f"unknown PID option(s): {', '.join(unknown)}")
    for key, value in overrides.items():
        try:
            if key in FLOAT_OPTIONS:
                merged[key] = float(value)
            elif key in BOOL_OPTIONS:
                merged[key] = bool(value)
            else:
                merged[key] = str(value)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"invalid value for {key!r}: {value!r}") from e
    return merged


def read_toml_section(path: str | Path, section: str = 'pid') -> dict[str, Any]:
    """Return the ``[section]`` table of a TOML file (empty if absent)."""
    with Path(path).open('rb') as f:
        cfg = tomllib.load(f)
    table = cfg.get(section, {})
    if not isinstance(table, dict):
        raise ConfigError(f"[{section}] in {path} is not a table")
    return table


def load_config(path: str | Path, section: str = 'pid'):
    """Create a PIDConfig from the ``[section]`` table of a TOML file."""
    from pid_control.control.pid import PIDConfig

    return PIDConfig.from_mapping(read_toml_section(path, section))


__all__ = [
    'DEFAULT_KP', 'DEFAULT_KI', 'DEFAULT_KD', 'DEFAULT_TAU', 'DEFAULT_T',
    'DEFAULT_OUTPUT_MIN', 'DEFAULT_OUTPUT_MAX',
    'DEFAULT_USE_EXTERNAL_T', 'DEFAULT_ZERO_D_ON_SET_POINT_CHANGE',
    'DEFAULT_TELEMETRY_ENABLED', 'DEFAULT_TELEMETRY_CHANNEL',
    'DERIVATIVE_T_FLOOR', 'DEFAULT_CONFIG',
    'ConfigError', 'merge_config', 'read_toml_section', 'load_config',
]
