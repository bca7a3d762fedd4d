#!/usr/bin/env python3
from __future__ import annotations

import argparse
import pathlib
import sys

# Workspace paths for local imports
_PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
_SRC_PATH = _PROJECT_ROOT / 'src'
if str(_SRC_PATH) not in sys.path:
    sys.path.insert(0, str(_SRC_PATH))

import numpy as np

from pid_control import config as cfg
from pid_control.control import ManualClock, PIDController
from pid_control.plant import FirstOrderPlant, simulate_step_response
from pid_control.plotter import plot_csv
from pid_control.telemetry import CsvTelemetryLogger, TerminalPrinter, fan_out


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description='Simulate a PID step response on a first-order plant and log telemetry')
    p.add_argument('-c', '--config', default=None, help='TOML file with a [pid] table (CLI gains override it)')
    p.add_argument('--kp', type=float, default=None)
    p.add_argument('--ki', type=float, default=None)
    p.add_argument('--kd', type=float, default=None)
    p.add_argument('--tau', type=float, default=None, help='Derivative filter coefficient (1.0 = off)')
    p.add_argument('--output-min', type=float, default=None)
    p.add_argument('--output-max', type=float, default=None)
    p.add_argument('--zero-d-on-change', action='store_true', help='Suppress derivative kick on set-point changes')
    p.add_argument('--external-t', action='store_true', help='Measure the step length from the (simulated) clock')
    p.add_argument('--dt', type=float, default=0.05, help='Sample period (sec)')
    p.add_argument('-T', '--duration', type=float, default=10.0, help='Simulated duration (sec)')
    p.add_argument('--set-point', type=float, default=1.0)
    p.add_argument('--change-at', type=float, default=None, help='Time of a set-point change (sec)')
    p.add_argument('--new-set-point', type=float, default=0.5)
    p.add_argument('--plant-gain', type=float, default=1.0)
    p.add_argument('--plant-tau', type=float, default=1.0, help='Plant time constant (sec)')
    p.add_argument('-o', '--output', default=str(pathlib.Path('data') / 'pid'), help='Output directory for CSV/plots')
    p.add_argument('--prefix', default='step_response', help='Filename prefix')
    p.add_argument('--plot', action='store_true', help='Write a PNG next to the CSV')
    p.add_argument('-v', '--verbose', action='count', default=0, help='Echo telemetry to the terminal')
    return p.parse_args(argv)


def build_overrides(args: argparse.Namespace) -> dict:
    overrides = cfg.read_toml_section(args.config) if args.config else {}
    for key in ('kp', 'ki', 'kd', 'tau', 'output_min', 'output_max'):
        val = getattr(args, key)
        if val is not None:
            overrides[key] = val
    if args.zero_d_on_change:
        overrides['zero_d_on_set_point_change'] = True
    if args.external_t:
        overrides['use_external_t'] = True
    # also the bootstrap step length when timing is external
    overrides.setdefault('t', args.dt)
    overrides['telemetry_enabled'] = True
    return overrides


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        overrides = build_overrides(args)
        clock = ManualClock()
        logger = CsvTelemetryLogger(args.output, args.prefix, clock=clock)
        controller = PIDController.from_mapping(overrides, clock=clock)
    except (OSError, cfg.ConfigError) as e:
        print(f'[ERROR] {e}', file=sys.stderr, flush=True)
        return 2

    plant = FirstOrderPlant(gain=args.plant_gain, time_constant=args.plant_tau)
    change = (args.change_at, args.new_set_point) if args.change_at is not None else None
    with logger:
        controller.telemetry_sink = fan_out(logger, TerminalPrinter(args.verbose))
        res = simulate_step_response(controller, plant, args.set_point, args.duration, args.dt, change)
    print(f'[INFO] telemetry: {logger.path}', flush=True)

    err = np.abs(res['set_point'] - res['measurement'])
    tail = err[-max(1, len(err) // 10):]
    print(f'[INFO] final error={err[-1]:.4f} mean tail error={float(np.mean(tail)):.4f} '
          f'output range=[{res["output"].min():.3f}, {res["output"].max():.3f}]', flush=True)

    if args.plot:
        png = plot_csv(logger.path)
        if png:
            print(f'[INFO] plot: {png}', flush=True)
    return 0


if __name__ == '__main__':
    sys.exit(main())
