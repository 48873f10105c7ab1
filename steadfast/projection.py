"""
Short-horizon projections for mood, craving frequency and craving success.

Intentionally a bounded heuristic rather than a fitted regression: each
metric's current windowed value is nudged by a fixed delta chosen from the
already-computed week-over-week trend. Confidences are fixed per-metric
constants; intervals are fixed margins clamped to the metric's range.
"""

import math
from typing import Optional

import pandas as pd

from steadfast.config import SteadfastConfig
from steadfast.detectors import current_streak
from steadfast.frames import EventFrames, until, window
from steadfast.models import BehavioralSnapshot, ConfidenceInterval, Prediction, PredictiveModel
from steadfast.signals import clamp, mean_or, ratio_or


METHODOLOGY = "Windowed average with fixed trend adjustment (heuristic, not a fitted model)"


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _interval(center: float, margin: float, low: float, high: float) -> ConfidenceInterval:
    lo = clamp(center - margin, low, high)
    hi = clamp(center + margin, low, high)
    return ConfidenceInterval(low=round(min(lo, hi), 4), high=round(max(lo, hi), 4))


def project_mood(
    frames: EventFrames,
    snapshot: BehavioralSnapshot,
    now: pd.Timestamp,
    cfg: SteadfastConfig,
) -> Prediction:
    p = cfg.projection
    recent = window(frames.check_ins, now, cfg.windows.projection)
    current = clamp(mean_or(recent["mood"], cfg.defaults.mood), p.mood_min, p.mood_max)

    adjustment = {
        "improving": p.mood_adjustment,
        "declining": -p.mood_adjustment,
    }.get(snapshot.mood_trend, 0.0)
    predicted = clamp(current + adjustment, p.mood_min, p.mood_max)

    return Prediction(
        metric="Average Mood",
        current_value=round(current, 4),
        predicted_value=round(predicted, 4),
        timeframe=p.timeframe,
        confidence=p.mood_confidence,
        trend="improving" if adjustment > 0 else "declining" if adjustment < 0 else "stable",
        confidence_interval=_interval(predicted, p.mood_margin, p.mood_min, p.mood_max),
        factors=("Recent mood trend", "Historical patterns", "Activity levels"),
    )


def project_craving_frequency(
    frames: EventFrames,
    snapshot: BehavioralSnapshot,
    now: pd.Timestamp,
    cfg: SteadfastConfig,
) -> Prediction:
    p = cfg.projection
    current = len(window(frames.cravings, now, cfg.windows.projection))

    factor = {
        "worsening": p.craving_worsening_factor,
        "improving": p.craving_improving_factor,
    }.get(snapshot.craving_intensity_trend, 1.0)
    predicted = _round_half_up(current * factor)

    # More cravings is a decline, fewer is an improvement
    trend = "declining" if factor > 1 else "improving" if factor < 1 else "stable"

    return Prediction(
        metric="Craving Frequency",
        current_value=float(current),
        predicted_value=float(predicted),
        timeframe=p.timeframe,
        confidence=p.craving_confidence,
        trend=trend,
        confidence_interval=_interval(predicted, p.craving_margin, 0.0, math.inf),
        factors=("Recent craving trend", "Success rate", "Support activity"),
    )


def project_success_rate(
    frames: EventFrames,
    now: pd.Timestamp,
    cfg: SteadfastConfig,
) -> Prediction:
    p = cfg.projection
    recent = window(frames.cravings, now, cfg.windows.projection)
    current = clamp(
        ratio_or(int(recent["overcame"].sum()), len(recent), cfg.defaults.craving_success_rate),
        0.0, 1.0,
    )
    predicted = clamp(current + p.success_adjustment, 0.0, 1.0)

    return Prediction(
        metric="Craving Success Rate",
        current_value=round(current, 4),
        predicted_value=round(predicted, 4),
        timeframe=p.timeframe,
        confidence=p.success_confidence,
        trend="improving" if predicted > current else "stable",
        confidence_interval=_interval(predicted, p.success_margin, 0.0, 1.0),
        factors=("Historical success rate", "Coping strategy effectiveness"),
    )


def model_accuracy(
    frames: EventFrames,
    now: pd.Timestamp,
    cfg: SteadfastConfig,
    local_now: Optional[pd.Timestamp] = None,
) -> float:
    """
    Data-completeness proxy in [0, 1]:
    mean of (data points / saturation) and (current check-in streak / saturation).

    The streak counts local calendar days ending on ``local_now`` (default ``now``).
    """
    p = cfg.projection
    points = len(until(frames.check_ins, now)) + len(until(frames.cravings, now))
    data_score = min(points / p.data_saturation, 1.0)
    streak = current_streak(frames.check_ins, now if local_now is None else local_now)
    streak_score = min(streak / p.streak_saturation, 1.0)
    return round(clamp((data_score + streak_score) / 2, 0.0, 1.0), 4)


def project(
    frames: EventFrames,
    snapshot: BehavioralSnapshot,
    now: pd.Timestamp,
    cfg: SteadfastConfig,
    local_now: Optional[pd.Timestamp] = None,
) -> PredictiveModel:
    """Project all three metrics and wrap them with the model accuracy."""
    predictions = (
        project_mood(frames, snapshot, now, cfg),
        project_craving_frequency(frames, snapshot, now, cfg),
        project_success_rate(frames, now, cfg),
    )
    accuracy = model_accuracy(frames, now, cfg, local_now)
    return PredictiveModel(
        predictions=predictions,
        accuracy=accuracy,
        confidence=accuracy,
        methodology=METHODOLOGY,
    )
