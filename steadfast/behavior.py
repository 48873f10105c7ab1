"""
Behavioral snapshot: week-over-week aggregates from raw event frames.

Each series is split into a recent window (last 7 days) and a previous
window (7-14 days ago). Sparse or empty series degrade to neutral defaults;
nothing here raises on data.
"""

import logging

import pandas as pd

from steadfast.config import SteadfastConfig
from steadfast.frames import EventFrames, window
from steadfast.models import BehavioralSnapshot, HALTAverages, HALT_KEYS
from steadfast.signals import (
    clamp,
    classify_change,
    is_decline,
    mean_or,
    population_std,
    ratio_or,
)

logger = logging.getLogger(__name__)


def _split(df: pd.DataFrame, now: pd.Timestamp, cfg: SteadfastConfig):
    w = cfg.windows
    return window(df, now, w.recent), window(df, now, w.previous, w.recent)


def _halt_averages(check_ins: pd.DataFrame, cfg: SteadfastConfig) -> HALTAverages:
    """Average each HALT component over check-ins that carry a full assessment."""
    assessed = check_ins.dropna(subset=list(HALT_KEYS))
    neutral = cfg.defaults.halt
    if assessed.empty:
        return HALTAverages(neutral, neutral, neutral, neutral)
    return HALTAverages(**{k: mean_or(assessed[k], neutral) for k in HALT_KEYS})


def analyze_behavior(
    frames: EventFrames,
    now: pd.Timestamp,
    cfg: SteadfastConfig,
) -> BehavioralSnapshot:
    """Derive the behavioral snapshot as of ``now``."""
    w = cfg.windows
    d = cfg.defaults
    t = cfg.trend
    c = cfg.composite

    recent_checks, previous_checks = _split(frames.check_ins, now, cfg)
    recent_cravings, previous_cravings = _split(frames.cravings, now, cfg)
    recent_meetings, previous_meetings = _split(frames.meetings, now, cfg)
    recent_meds, previous_meds = _split(frames.meditations, now, cfg)

    # -- Check-ins and mood ---------------------------------------------------

    avg_mood = mean_or(recent_checks["mood"], d.mood)
    previous_avg_mood = mean_or(previous_checks["mood"], d.mood)
    mood_trend = classify_change(
        avg_mood - previous_avg_mood, t.mood_change, "improving", "declining"
    )
    volatility = population_std(recent_checks["mood"])

    # -- Cravings -------------------------------------------------------------

    avg_intensity = mean_or(recent_cravings["intensity"], d.craving_intensity)
    previous_intensity = mean_or(previous_cravings["intensity"], d.craving_intensity)
    # Higher intensity is worse, so a rising delta means "worsening"
    intensity_trend = classify_change(
        avg_intensity - previous_intensity,
        t.craving_intensity_change,
        "worsening",
        "improving",
    )
    success_rate = clamp(
        ratio_or(
            int(recent_cravings["overcame"].sum()),
            len(recent_cravings),
            d.craving_success_rate,
        ),
        0.0, 1.0,
    )

    # -- HALT + composites ----------------------------------------------------

    halt = _halt_averages(recent_checks, cfg)
    meetings_recent = len(recent_meetings)

    isolation = clamp(
        (c.meeting_baseline - meetings_recent) * c.meeting_step + halt.lonely * c.lonely_step,
        0.0, c.scale_max,
    )
    stress = clamp(
        (halt.angry + halt.tired) * c.halt_step + volatility * c.volatility_step,
        0.0, c.scale_max,
    )

    snapshot = BehavioralSnapshot(
        check_in_frequency=len(recent_checks),
        previous_check_in_frequency=len(previous_checks),
        check_in_decline=is_decline(len(recent_checks), len(previous_checks), w.decline_ratio),
        mood_trend=mood_trend,
        avg_mood=avg_mood,
        previous_avg_mood=previous_avg_mood,
        mood_volatility=volatility,
        craving_frequency=len(recent_cravings),
        avg_craving_intensity=avg_intensity,
        previous_avg_craving_intensity=previous_intensity,
        craving_intensity_trend=intensity_trend,
        craving_success_rate=success_rate,
        halt=halt,
        meeting_attendance=meetings_recent,
        previous_meeting_attendance=len(previous_meetings),
        meeting_decline=is_decline(meetings_recent, len(previous_meetings), w.decline_ratio),
        meditation_frequency=len(recent_meds),
        previous_meditation_frequency=len(previous_meds),
        meditation_decline=is_decline(len(recent_meds), len(previous_meds), w.decline_ratio),
        isolation_score=isolation,
        stress_score=stress,
    )
    logger.debug(
        "Snapshot at %s: mood=%.2f (%s) cravings=%d (%s) isolation=%.0f stress=%.0f",
        now, avg_mood, mood_trend, snapshot.craving_frequency, intensity_trend,
        isolation, stress,
    )
    return snapshot
