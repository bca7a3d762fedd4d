from __future__ import annotations

import pytest

from pid_control import config as cfg
from pid_control.control import PIDConfig


def test_merge_without_overrides_returns_defaults():
    merged = cfg.merge_config(None)
    assert merged == cfg.DEFAULT_CONFIG
    assert merged is not cfg.DEFAULT_CONFIG


def test_merge_coerces_types():
    merged = cfg.merge_config({'kp': 1, 'use_external_t': 1, 'telemetry_channel': 7})
    assert merged['kp'] == 1.0 and isinstance(merged['kp'], float)
    assert merged['use_external_t'] is True
    assert merged['telemetry_channel'] == '7'
    # untouched keys keep their defaults
    assert merged['ki'] == cfg.DEFAULT_KI
    assert merged['output_max'] == cfg.DEFAULT_OUTPUT_MAX


def test_merge_rejects_unknown_keys():
    with pytest.raises(cfg.ConfigError, match='gain, use_system_t'):
        cfg.merge_config({'kp': 1.0, 'use_system_t': True, 'gain': 2.0})


def test_merge_rejects_non_numeric_gain():
    with pytest.raises(cfg.ConfigError, match="'kd'"):
        cfg.merge_config({'kd': 'fast'})


def test_load_config_from_toml(tmp_path):
    path = tmp_path / 'loop.toml'
    path.write_text(
        '[run]\n'
        'duration = 10.0\n'
        '\n'
        '[pid]\n'
        'kp = 0.1\n'
        'ki = 0.04\n'
        'output_min = 1.0\n'
        'output_max = -1.0\n'
        'zero_d_on_set_point_change = true\n',
        encoding='utf-8',
    )
    c = cfg.load_config(path)
    assert isinstance(c, PIDConfig)
    assert (c.kp, c.ki, c.kd) == (0.1, 0.04, 0.0)
    assert (c.output_min, c.output_max) == (-1.0, 1.0)
    assert c.zero_d_on_set_point_change is True


def test_load_config_missing_section_gives_defaults(tmp_path):
    path = tmp_path / 'empty.toml'
    path.write_text('[run]\nduration = 1.0\n', encoding='utf-8')
    assert cfg.load_config(path) == PIDConfig()


def test_load_config_other_section(tmp_path):
    path = tmp_path / 'two.toml'
    path.write_text('[pid]\nkp = 1.0\n\n[pid_pitch]\nkp = 2.0\n', encoding='utf-8')
    assert cfg.load_config(path, section='pid_pitch').kp == 2.0


def test_section_that_is_not_a_table(tmp_path):
    path = tmp_path / 'bad.toml'
    path.write_text('pid = 3\n', encoding='utf-8')
    with pytest.raises(cfg.ConfigError):
        cfg.load_config(path)


def test_unknown_key_in_toml(tmp_path):
    path = tmp_path / 'typo.toml'
    path.write_text('[pid]\nkpp = 1.0\n', encoding='utf-8')
    with pytest.raises(cfg.ConfigError, match='kpp'):
        cfg.load_config(path)
