from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from pid_control.control.clock import ManualClock
from pid_control.control.pid import PIDController


@dataclass
class FirstOrderPlant:
    """y' = (gain * u - y) / time_constant, discretised with a zero-order hold."""
    gain: float = 1.0
    time_constant: float = 1.0
    y0: float = 0.0

    def __post_init__(self):
        if self.time_constant <= 0:
            raise ValueError("time_constant must be positive")
        self.y = self.y0

    def reset(self) -> None:
        self.y = self.y0

    def advance(self, u: float, dt: float) -> float:
        a = math.exp(-dt / self.time_constant)
        self.y = a * self.y + (1.0 - a) * self.gain * u
        return self.y


def simulate_step_response(
    controller: PIDController,
    plant: FirstOrderPlant,
    set_point: float,
    duration: float,
    dt: float,
    set_point_change: tuple[float, float] | None = None,
) -> dict[str, np.ndarray]:
    """Run controller and plant in closed loop for ``duration`` simulated seconds.

    ``set_point_change`` is an optional ``(t_change, new_set_point)``.  When the
    controller measures time externally its clock must be a ManualClock; it is
    advanced by ``dt`` per sample so no wall time is involved.
    """
    if dt <= 0:
        raise ValueError("dt must be positive")
    clock = controller.clock
    if controller.config.use_external_t and not isinstance(clock, ManualClock):
        raise ValueError("external timing in simulation needs a ManualClock")

    n = int(round(duration / dt)) + 1
    t = np.arange(n, dtype=float) * dt
    sp = np.full(n, float(set_point))
    if set_point_change is not None:
        t_change, new_sp = set_point_change
        sp[t >= t_change] = float(new_sp)
    y = np.empty(n)
    u = np.empty(n)

    for k in range(n):
        if k and isinstance(clock, ManualClock):
            clock.advance(dt)
        y[k] = plant.y
        u[k] = controller.step(sp[k], y[k]).output
        plant.advance(u[k], dt)

    return {'t': t, 'set_point': sp, 'measurement': y, 'output': u}

__all__ = ['FirstOrderPlant', 'simulate_step_response']
