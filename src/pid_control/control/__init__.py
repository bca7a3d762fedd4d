"""Controller subpackage.

Modules:
- pid: PIDConfig, PIDState, PIDController and the clamp helper
- clock: monotonic and manually advanced time sources
"""
from .clock import Clock, ManualClock, MonotonicClock  # noqa: F401
from .pid import PIDConfig, PIDController, PIDState, clamp  # noqa: F401

__all__ = [
    'Clock', 'ManualClock', 'MonotonicClock',
    'PIDConfig', 'PIDController', 'PIDState', 'clamp',
]
