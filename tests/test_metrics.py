from __future__ import annotations

import math

import numpy as np

from wavdyn.metrics.correlation import pearson_correlation
from wavdyn.metrics.levels import rms, rms_dbfs
from wavdyn.metrics.stats import critical_value, sample_std, t_statistic


def test_rms_dbfs_floor_for_silence_and_empty():
    assert rms_dbfs(np.zeros(1000)) == -120.0
    assert rms_dbfs(np.array([], dtype=np.float64)) == -120.0
    assert rms_dbfs(np.full(10, 1e-12)) == -120.0


def test_rms_dbfs_never_above_zero_for_unit_range():
    rng = np.random.default_rng(1234)
    for _ in range(20):
        x = rng.uniform(-1.0, 1.0, size=4800)
        assert rms_dbfs(x) <= 0.0
    assert rms_dbfs(np.ones(100)) == 0.0
    assert rms_dbfs(-np.ones(100)) == 0.0


def test_rms_dbfs_sine_is_minus_three_db():
    fs = 48000
    t = np.arange(fs) / fs
    x = np.sin(2.0 * np.pi * 1000.0 * t)
    assert np.isclose(rms(x), 1.0 / math.sqrt(2.0), atol=1e-6)
    assert np.isclose(rms_dbfs(x), -3.0103, atol=1e-3)


def test_pearson_bounds_and_degenerate_cases():
    rng = np.random.default_rng(7)
    for _ in range(20):
        a = rng.normal(size=50)
        b = rng.normal(size=50)
        r = pearson_correlation(a, b)
        assert -1.0 <= r <= 1.0
    a = np.linspace(-30.0, -10.0, 40)
    assert pearson_correlation(a, 2.0 * a + 5.0) == 1.0
    assert pearson_correlation(a, -a) == -1.0
    assert pearson_correlation([1.0], [2.0]) == 0.0
    assert pearson_correlation([], []) == 0.0
    assert pearson_correlation(np.full(5, -20.0), a[:5]) == 0.0


def test_t_statistic_formula_and_guards():
    assert t_statistic(1.5, 2.0, 1) == 0.0
    assert t_statistic(1.5, 0.0, 100) == 0.0
    assert np.isclose(t_statistic(1.5, 2.0, 16), 1.5 / (2.0 / 4.0))
    assert np.isclose(t_statistic(-0.5, 1.0, 25), -2.5)


def test_sample_std_is_bessel_corrected():
    x = np.array([1.0, 2.0, 3.0, 4.0])
    assert np.isclose(sample_std(x), np.std(x, ddof=1))
    assert sample_std(np.array([3.0])) == 0.0


def test_critical_values():
    assert critical_value(0.90) == 1.645
    assert critical_value(0.95) == 1.960
    assert critical_value(0.99) == 2.576
    assert critical_value(0.5) == 1.960
