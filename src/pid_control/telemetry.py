from __future__ import annotations

import csv
import os
from collections.abc import Callable
from dataclasses import asdict, dataclass, fields
from datetime import datetime
from typing import List

import numpy as np

from pid_control.control.clock import Clock, MonotonicClock


@dataclass(frozen=True)
class TelemetryEvent:
    set_point: float
    measurement: float
    error: float
    p: float
    i: float
    d: float
    t: float
    output: float

    def as_dict(self) -> dict[str, float]:
        return asdict(self)


EVENT_FIELDS: List[str] = [f.name for f in fields(TelemetryEvent)]

# sink(channel, event); return value is ignored
TelemetrySink = Callable[[str, TelemetryEvent], None]


def make_header() -> List[str]:
    return ['ms', 'channel'] + EVENT_FIELDS


class CsvTelemetryLogger:
    """Telemetry sink writing one CSV row per controller step.

    ``ms`` is the time since :meth:`open_file` as read from ``clock``, so an
    offline simulation driven by a ManualClock logs simulated time.
    """

    def __init__(self, base_dir: str, filename_hint: str = '', clock: Clock | None = None):
        os.makedirs(base_dir, exist_ok=True)
        self.base_dir = base_dir
        self.filename_hint = filename_hint
        self.header = make_header()
        self.clock = clock if clock is not None else MonotonicClock()
        self.fp = None
        self.writer = None
        self.path = ''
        self._t0 = 0.0

    def open_file(self, run_index: int | None = None) -> str:
        ts = datetime.now().strftime('%Y%m%d_%H%M%S')
        # With a filename hint, number files sequentially after the existing ones
        if self.filename_hint:
            if run_index is None:
                max_idx = 0
                for f in os.listdir(self.base_dir):
                    if not (f.startswith(self.filename_hint + '_') and f.lower().endswith('.csv')):
                        continue
                    suffix = f[len(self.filename_hint) + 1:].rsplit('.', 1)[0]
                    if suffix.isdigit():
                        max_idx = max(max_idx, int(suffix))
                run_index = max_idx + 1
            filename = f'{self.filename_hint}_{run_index}.csv'
        else:
            filename = f'telemetry_{ts}.csv'
        self.path = os.path.join(self.base_dir, filename)
        self.fp = open(self.path, 'w', buffering=1, newline='')
        self.writer = csv.writer(self.fp)
        self.writer.writerow(self.header)
        self._t0 = self.clock.now()
        return self.path

    def write_row(self, row: List[str | float | int]) -> None:
        if self.writer is None:
            raise RuntimeError('Logger file not open')
        self.writer.writerow(row)

    def __call__(self, channel: str, event: TelemetryEvent) -> None:
        ms = int(round(self.clock.elapsed(self._t0, self.clock.now()) * 1000.0))
        self.write_row([ms, channel] + [getattr(event, k) for k in EVENT_FIELDS])

    def close(self) -> None:
        if self.fp:
            try:
                self.fp.close()
            except Exception:  # noqa: BLE001
                pass
            self.fp = None
            self.writer = None

    def __enter__(self) -> CsvTelemetryLogger:
        if self.fp is None:
            self.open_file()
        return self

    def __exit__(self, *exc) -> None:  # noqa: ANN002
        self.close()


class TerminalPrinter:
    def __init__(self, verbose: int = 0):
        self.verbose = verbose
        self._printed_header = False

    def __call__(self, channel: str, event: TelemetryEvent) -> None:
        if self.verbose:
            if not self._printed_header:
                print(','.join(['channel'] + EVENT_FIELDS), flush=True)
                self._printed_header = True
            row = [channel] + [f'{getattr(event, k):.6g}' for k in EVENT_FIELDS]
            print(','.join(row), flush=True)


class TelemetryRecorder:
    """In-memory sink, events grouped by channel."""

    def __init__(self):
        self.events: dict[str, list[TelemetryEvent]] = {}

    def __call__(self, channel: str, event: TelemetryEvent) -> None:
        self.events.setdefault(channel, []).append(event)

    def __len__(self) -> int:
        return sum(len(v) for v in self.events.values())

    def as_arrays(self, channel: str | None = None) -> dict[str, np.ndarray]:
        if channel is None:
            if len(self.events) > 1:
                raise ValueError('several channels recorded; pass one explicitly')
            channel = next(iter(self.events), '')
        evs = self.events.get(channel, [])
        return {k: np.array([getattr(e, k) for e in evs], dtype=float) for k in EVENT_FIELDS}


def fan_out(*sinks: TelemetrySink) -> TelemetrySink:
    """Combine sinks; a failing sink does not stop the ones after it."""
    def _emit(channel: str, event: TelemetryEvent) -> None:
        for sink in sinks:
            try:
                sink(channel, event)
            except Exception:  # noqa: BLE001
                pass
    return _emit

__all__ = [
    'TelemetryEvent', 'TelemetrySink', 'EVENT_FIELDS', 'make_header',
    'CsvTelemetryLogger', 'TerminalPrinter', 'TelemetryRecorder', 'fan_out',
]
