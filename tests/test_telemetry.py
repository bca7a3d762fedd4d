from __future__ import annotations

import csv

import numpy as np
import pytest

from pid_control.control import PIDController
from pid_control.telemetry import (
    EVENT_FIELDS,
    CsvTelemetryLogger,
    TelemetryEvent,
    TelemetryRecorder,
    TerminalPrinter,
    fan_out,
    make_header,
)


def event(output: float = 0.5) -> TelemetryEvent:
    return TelemetryEvent(set_point=1.0, measurement=0.5, error=0.5, p=0.25, i=0.25, d=0.0, t=1.0, output=output)


def read_rows(path: str) -> list[dict[str, str]]:
    with open(path, newline='', encoding='utf-8') as f:
        return list(csv.DictReader(f))


def test_header_layout():
    assert make_header() == ['ms', 'channel', 'set_point', 'measurement', 'error', 'p', 'i', 'd', 't', 'output']


def test_csv_logger_writes_rows(tmp_path, clock):
    logger = CsvTelemetryLogger(str(tmp_path / 'out'), 'run', clock=clock)
    with logger:
        logger('pid_controller', event(0.1))
        clock.advance(0.25)
        logger('pid_controller', event(0.2))
    assert logger.path.endswith('run_1.csv')
    rows = read_rows(logger.path)
    assert [r['ms'] for r in rows] == ['0', '250']
    assert [float(r['output']) for r in rows] == [0.1, 0.2]
    assert rows[0]['channel'] == 'pid_controller'


def test_csv_logger_numbers_files_sequentially(tmp_path, clock):
    (tmp_path / 'run_3.csv').write_text('', encoding='utf-8')
    (tmp_path / 'run_notes.csv').write_text('', encoding='utf-8')
    logger = CsvTelemetryLogger(str(tmp_path), 'run', clock=clock)
    assert logger.open_file().endswith('run_4.csv')
    logger.close()
    assert logger.open_file(run_index=9).endswith('run_9.csv')
    logger.close()


def test_csv_logger_without_hint_uses_timestamp(tmp_path, clock):
    with CsvTelemetryLogger(str(tmp_path), clock=clock) as logger:
        pass
    assert logger.path.rsplit('/', 1)[-1].startswith('telemetry_')


def test_csv_logger_closed_raises(tmp_path, clock):
    logger = CsvTelemetryLogger(str(tmp_path), 'run', clock=clock)
    with pytest.raises(RuntimeError):
        logger('pid_controller', event())


def test_terminal_printer(capsys):
    TerminalPrinter(verbose=0)('c', event())
    assert capsys.readouterr().out == ''

    printer = TerminalPrinter(verbose=1)
    printer('c', event())
    printer('c', event(0.75))
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == ','.join(['channel'] + EVENT_FIELDS)
    assert len(lines) == 3
    assert lines[2].endswith(',0.75')


def test_recorder_as_arrays(recorder):
    pid = PIDController.from_mapping({'kp': 0.5, 'telemetry_enabled': True}, telemetry_sink=recorder)
    for meas in (0.0, 0.5, 1.0):
        pid.step(1.0, meas)
    arrays = recorder.as_arrays()
    assert set(arrays) == set(EVENT_FIELDS)
    np.testing.assert_allclose(arrays['output'], [0.5, 0.25, 0.0])
    np.testing.assert_allclose(arrays['error'], [1.0, 0.5, 0.0])


def test_recorder_needs_channel_when_ambiguous(recorder):
    recorder('a', event())
    recorder('b', event())
    with pytest.raises(ValueError):
        recorder.as_arrays()
    assert recorder.as_arrays('b')['output'].shape == (1,)


def test_fan_out_continues_after_failure(recorder):
    def broken(channel, ev):  # noqa: ANN001
        raise OSError('disk full')

    fan_out(broken, recorder)('c', event())
    assert len(recorder) == 1
