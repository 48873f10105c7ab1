"""
Statistical primitives: guarded means, dispersion, Pearson, trend labels.

All functions are pure and never return NaN or infinity. Degenerate inputs
(empty series, a single point, zero variance) short-circuit to documented
neutral values.
"""

from typing import Iterable, Sequence, Tuple

import numpy as np
import pandas as pd


def _finite(values: Iterable[float]) -> np.ndarray:
    series = values if isinstance(values, pd.Series) else pd.Series(list(values), dtype=object)
    arr = pd.to_numeric(series, errors="coerce").to_numpy(dtype=np.float64)
    return arr[np.isfinite(arr)]


def clamp(value: float, low: float, high: float) -> float:
    """Clamp to [low, high]; NaN collapses to ``low``."""
    if np.isnan(value):
        return float(low)
    return float(min(max(value, low), high))


def mean_or(values: Iterable[float], default: float) -> float:
    """Arithmetic mean of the finite values, or ``default`` if there are none."""
    arr = _finite(values)
    if arr.size == 0:
        return float(default)
    return float(arr.mean())


def population_std(values: Iterable[float]) -> float:
    """
    Population standard deviation (ddof=0).

    We want the actual dispersion of the week's moods, not a sample
    estimate. Returns 0.0 with fewer than two values.
    """
    arr = _finite(values)
    if arr.size < 2:
        return 0.0
    return float(np.std(arr, ddof=0))


def ratio_or(numerator: float, denominator: float, default: float) -> float:
    if denominator == 0:
        return float(default)
    return float(numerator) / float(denominator)


# ---------------------------------------------------------------------------
# Trend classification
# ---------------------------------------------------------------------------

def classify_change(
    delta: float,
    threshold: float,
    rising: str,
    falling: str,
) -> str:
    """Map a week-over-week delta to (rising | falling | 'stable')."""
    if delta > threshold:
        return rising
    if delta < -threshold:
        return falling
    return "stable"


def is_decline(recent: int, previous: int, ratio: float) -> bool:
    """
    True when the recent count dropped below ``ratio`` of the previous one.

    An empty previous window never signals a decline.
    """
    if previous <= 0:
        return False
    return recent < previous * ratio


# ---------------------------------------------------------------------------
# Pearson correlation
# ---------------------------------------------------------------------------

def align_pairs(x: Sequence[float], y: Sequence[float]) -> Tuple[np.ndarray, np.ndarray]:
    """
    Pair values index-wise up to the shorter length, dropping any pair where
    either side is missing or non-finite.
    """
    n = min(len(x), len(y))
    if n == 0:
        return np.empty(0), np.empty(0)
    xs = pd.to_numeric(pd.Series(list(x)[:n], dtype=object), errors="coerce").to_numpy(np.float64)
    ys = pd.to_numeric(pd.Series(list(y)[:n], dtype=object), errors="coerce").to_numpy(np.float64)
    keep = np.isfinite(xs) & np.isfinite(ys)
    return xs[keep], ys[keep]


def pearson(x: np.ndarray, y: np.ndarray, min_points: int = 2) -> float:
    """
    Pearson product-moment coefficient.

        r = Σ(x_c · y_c) / sqrt(Σx_c² · Σy_c²)

    where x_c and y_c are mean-centered. Returns 0.0 with fewer than
    ``min_points`` pairs or a zero denominator. Clipped to [-1, 1] for
    numerical safety.
    """
    n = min(len(x), len(y))
    if n < max(min_points, 2):
        return 0.0
    x = np.asarray(x[:n], dtype=np.float64)
    y = np.asarray(y[:n], dtype=np.float64)
    # Extreme magnitudes overflow to inf and fall through to 0.0 below
    with np.errstate(over="ignore", invalid="ignore", divide="ignore"):
        x_c = x - x.mean()
        y_c = y - y.mean()
        denom = np.sqrt(np.dot(x_c, x_c) * np.dot(y_c, y_c))
        if denom == 0.0 or not np.isfinite(denom):
            return 0.0
        r = np.dot(x_c, y_c) / denom
    if not np.isfinite(r):
        return 0.0
    return float(np.clip(r, -1.0, 1.0))
