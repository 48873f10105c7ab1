"""Guarded statistics and trend labels."""

import math
import warnings

import numpy as np

from steadfast.signals import (
    align_pairs,
    clamp,
    classify_change,
    is_decline,
    mean_or,
    pearson,
    population_std,
    ratio_or,
)

from tests.helpers import approx


def test_mean_or_default_on_empty():
    assert mean_or([], 3.0) == 3.0


def test_mean_or_ignores_missing():
    approx(mean_or([1.0, None, float("nan"), 3.0], 0.0), 2.0)


def test_population_std():
    approx(population_std([1, 3]), 1.0)
    assert population_std([4]) == 0.0
    assert population_std([]) == 0.0


def test_clamp_nan_to_low():
    assert clamp(float("nan"), 0.0, 100.0) == 0.0
    assert clamp(250, 0.0, 100.0) == 100.0


def test_ratio_or_zero_denominator():
    assert ratio_or(3, 0, 1.0) == 1.0
    approx(ratio_or(3, 4, 1.0), 0.75)


def test_classify_change_thresholds_are_strict():
    assert classify_change(0.5, 0.5, "improving", "declining") == "stable"
    assert classify_change(0.51, 0.5, "improving", "declining") == "improving"
    assert classify_change(-0.6, 0.5, "improving", "declining") == "declining"


def test_decline_requires_previous_activity():
    assert not is_decline(0, 0, 0.7)
    assert is_decline(3, 10, 0.7)
    assert not is_decline(7, 10, 0.7)


def test_pearson_identical_series():
    x = np.array([1.0, 2.0, 3.0, 4.0])
    approx(pearson(x, x), 1.0)


def test_pearson_degenerate_inputs():
    assert pearson(np.array([1.0]), np.array([2.0])) == 0.0
    assert pearson(np.array([2.0, 2.0, 2.0]), np.array([1.0, 2.0, 3.0])) == 0.0


def test_pearson_never_nan():
    r = pearson(np.array([1e308, -1e308, 1e308]), np.array([1.0, 2.0, 3.0]))
    assert math.isfinite(r) and -1.0 <= r <= 1.0


def test_align_pairs_drops_incomplete():
    xs, ys = align_pairs([1, None, 3, 4, 5], [2, 5, float("nan"), 8])
    assert xs.tolist() == [1.0, 4.0]
    assert ys.tolist() == [2.0, 8.0]


def test_pearson_overflow_is_silent():
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        r = pearson(np.array([1e200, -1e200, 1e200]), np.array([1.0, 2.0, 3.0]))
    assert r == 0.0
