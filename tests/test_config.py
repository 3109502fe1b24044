from __future__ import annotations

import json

import pytest

from wavdyn.config import DEFAULT_CONFIG, AnalysisConfig, config_from_dict, load_config


def test_defaults():
    cfg = AnalysisConfig()
    assert cfg.window_seconds == 0.4
    assert cfg.hop_seconds == 0.1
    assert cfg.floor_dbfs == -120.0
    assert cfg.duration_tolerance_s == 2.0
    assert (cfg.log_soft_cap, cfg.log_evict_count) == (1000, 500)
    assert load_config(None) is DEFAULT_CONFIG


def test_overrides_keep_other_defaults():
    cfg = config_from_dict({"hop_seconds": 0.05, "log_soft_cap": 200.0, "log_evict_count": 20})
    assert cfg.hop_seconds == 0.05
    assert cfg.window_seconds == 0.4
    assert cfg.log_soft_cap == 200
    assert isinstance(cfg.log_soft_cap, int)


@pytest.mark.parametrize(
    "payload",
    [
        {"window_size": 0.4},
        {"hop_seconds": "0.1"},
        {"hop_seconds": True},
        {"hop_seconds": 0},
        {"log_evict_count": 2000},
        {"duration_tolerance_s": -1},
        [0.4],
    ],
)
def test_invalid_configs(payload):
    with pytest.raises(ValueError):
        config_from_dict(payload)


def test_load_from_file(tmp_path):
    path = tmp_path / "cfg.json"
    path.write_text(json.dumps({"duration_tolerance_s": 0.5}), encoding="utf-8")
    assert load_config(str(path)).duration_tolerance_s == 0.5


def test_load_missing_file(tmp_path):
    with pytest.raises(OSError):
        load_config(str(tmp_path / "nope.json"))
