"""Analysis and runtime configuration."""
from __future__ import annotations
import json
from dataclasses import dataclass, fields, replace


@dataclass(frozen=True)
class AnalysisConfig:
    window_seconds: float = 0.4
    hop_seconds: float = 0.1
    floor_dbfs: float = -120.0
    silence_rms: float = 1e-9
    duration_tolerance_s: float = 2.0
    log_soft_cap: int = 1000
    log_evict_count: int = 500
    poll_interval_s: float = 0.1
    default_target_lufs: float = -23.0

    def __post_init__(self):
        if self.window_seconds <= 0 or self.hop_seconds <= 0:
            raise ValueError("window_seconds and hop_seconds must be > 0.")
        if self.duration_tolerance_s < 0:
            raise ValueError("duration_tolerance_s must be >= 0.")
        if self.log_soft_cap < 1:
            raise ValueError("log_soft_cap must be >= 1.")
        if not 0 < self.log_evict_count <= self.log_soft_cap:
            raise ValueError("log_evict_count must be in (0, log_soft_cap].")
        if self.poll_interval_s <= 0:
            raise ValueError("poll_interval_s must be > 0.")


DEFAULT_CONFIG = AnalysisConfig()


def config_from_dict(j: dict, *, base: AnalysisConfig = DEFAULT_CONFIG) -> AnalysisConfig:
    """
    Build a config from a mapping, defaulting missing keys.

    Args:
        j: Mapping of field name to value
        base: Config supplying values for missing keys

    Returns:
        AnalysisConfig with overrides applied
    """
    if not isinstance(j, dict):
        raise ValueError("config must be a JSON object.")
    known = {f.name: f.type for f in fields(AnalysisConfig)}
    unknown = sorted(set(j) - set(known))
    if unknown:
        raise ValueError(f"Unknown config keys: {unknown}")
    overrides = {}
    for key, value in j.items():
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"config.{key} must be a number.")
        overrides[key] = int(value) if key.startswith("log_") else float(value)
    return replace(base, **overrides)


def load_config(path: str | None) -> AnalysisConfig:
    """Load an AnalysisConfig from a JSON file, or the defaults when path is None."""
    if path is None:
        return DEFAULT_CONFIG
    with open(path, "r", encoding="utf-8") as f:
        j = json.load(f)
    return config_from_dict(j)
