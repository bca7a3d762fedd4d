"""Discrete-time PID controller.

The controller keeps an immutable :class:`PIDConfig` and a :class:`PIDState`
that is replaced (never mutated) by each call to :meth:`PIDController.step`.

Timing: with ``use_external_t`` the step length is the elapsed time between
consecutive calls as read from the injected clock.  The very first call has
no previous timestamp, so it falls back to the configured ``t``; this is the
intended bootstrap behaviour, not a measurement.

Instances are not thread safe.  Use one controller per control loop, or
serialise calls externally.
"""
from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pid_control import config as cfg
from pid_control.control.clock import Clock, MonotonicClock
from pid_control.telemetry import TelemetryEvent, TelemetrySink


def clamp(n, a, b):
    """Bound ``n`` to ``[a, b]``; a reversed pair is swapped first.

    The result is a float if any argument is a float.  NaN ``n`` propagates.
    """
    if a > b:
        a, b = b, a
    if isinstance(n, float) or isinstance(a, float) or isinstance(b, float):
        n, a, b = float(n), float(a), float(b)
    if n != n:  # NaN
        return n
    return max(a, min(b, n))


@dataclass(frozen=True)
class PIDConfig:
    kp: float = cfg.DEFAULT_KP
    ki: float = cfg.DEFAULT_KI
    kd: float = cfg.DEFAULT_KD
    tau: float = cfg.DEFAULT_TAU  # 1.0 => no filtering, 0.0 => d frozen
    t: float = cfg.DEFAULT_T  # sec per step unless use_external_t
    output_min: float = cfg.DEFAULT_OUTPUT_MIN
    output_max: float = cfg.DEFAULT_OUTPUT_MAX
    use_external_t: bool = cfg.DEFAULT_USE_EXTERNAL_T
    zero_d_on_set_point_change: bool = cfg.DEFAULT_ZERO_D_ON_SET_POINT_CHANGE
    telemetry_enabled: bool = cfg.DEFAULT_TELEMETRY_ENABLED
    telemetry_channel: str = cfg.DEFAULT_TELEMETRY_CHANNEL

    def __post_init__(self):
        # Keep output_min <= output_max whatever order the bounds were given in
        if self.output_min > self.output_max:
            lo, hi = self.output_max, self.output_min
            object.__setattr__(self, 'output_min', lo)
            object.__setattr__(self, 'output_max', hi)

    @classmethod
    def from_mapping(cls, overrides: Mapping[str, Any] | None = None) -> PIDConfig:
        return cls(**cfg.merge_config(overrides))

    def as_dict(self) -> dict[str, Any]:
        return dataclasses.asdict(self)


@dataclass(frozen=True)
class PIDState:
    p: float = 0.0
    i: float = 0.0
    d: float = 0.0
    t: float = 0.0
    last_error: float | None = None
    last_measurement: float = 0.0
    last_set_point: float = 0.0
    output: float = 0.0
    last_time: float | None = None


class PIDController:
    def __init__(self, config: PIDConfig | None = None, *, clock: Clock | None = None,
                 telemetry_sink: TelemetrySink | None = None):
        self._config = config if config is not None else PIDConfig()
        self.clock = clock if clock is not None else MonotonicClock()
        self.telemetry_sink = telemetry_sink
        self._state = PIDState()

    @classmethod
    def from_mapping(cls, overrides: Mapping[str, Any] | None = None, **kwargs) -> PIDController:  # noqa: ANN003
        """Build a controller from any subset of the option names in ``config.DEFAULT_CONFIG``."""
        return cls(PIDConfig.from_mapping(overrides), **kwargs)

    @property
    def config(self) -> PIDConfig:
        return self._config

    @property
    def state(self) -> PIDState:
        return self._state

    @property
    def output(self) -> float:
        return self._state.output

    def reset(self) -> None:
        self._state = PIDState()

    def _resolve_t(self, prev: PIDState) -> tuple[float, float | None]:
        c = self._config
        if not c.use_external_t:
            return c.t, None
        now = self.clock.now()
        if prev.last_time is None:
            return c.t, now
        return self.clock.elapsed(prev.last_time, now), now

    def step(self, set_point: float, measurement: float) -> PIDState:
        """Advance the controller by one sample and return the new state."""
        c = self._config
        prev = self._state
        t, now = self._resolve_t(prev)

        e0 = set_point - measurement
        p = c.kp * e0

        # derivative reference: no kick on the first sample, optionally none on set-point changes
        if prev.last_error is None:
            ref_error = e0
        elif c.zero_d_on_set_point_change and set_point != prev.last_set_point:
            ref_error = e0
        else:
            ref_error = prev.last_error
        d_raw = c.kd * (e0 - ref_error) / max(t, cfg.DERIVATIVE_T_FLOOR)
        d = prev.d + c.tau * (d_raw - prev.d)

        # integral with anti-windup against the output bounds
        i_raw = prev.i + c.ki * e0 * t
        i = clamp(i_raw, c.output_min, c.output_max)

        output = clamp(p + d + i, c.output_min, c.output_max)

        self._state = PIDState(
            p=p, i=i, d=d, t=t,
            last_error=e0,
            last_measurement=measurement,
            last_set_point=set_point,
            output=output,
            last_time=now,
        )
        self._emit_telemetry(self._state)
        return self._state

    def _emit_telemetry(self, s: PIDState) -> None:
        if not self._config.telemetry_enabled or self.telemetry_sink is None:
            return
        try:
            event = TelemetryEvent(
                set_point=s.last_set_point,
                measurement=s.last_measurement,
                error=s.last_error,
                p=s.p, i=s.i, d=s.d, t=s.t,
                output=s.output,
            )
            self.telemetry_sink(self._config.telemetry_channel, event)
        except Exception:  # noqa: BLE001
            # telemetry is best effort; the committed state stands
            pass

__all__ = ['PIDConfig', 'PIDState', 'PIDController', 'clamp']
