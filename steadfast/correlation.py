"""
Pairwise Pearson correlations between behavioral metrics.

Three fixed pairs are computed:
    Mood <-> Craving Intensity              aligned by local calendar day
    Meeting Attendance <-> Mood             aggregated by week
    Meditation Minutes <-> Craving Success  aggregated by week

Days and weeks are taken from each event's local wall-clock time.

The reported ``p_value`` is the simplified proxy ``1 - |r|``. It is not a
significance test; surface it as an approximation.
"""

import logging
from typing import Dict, Optional, Sequence

import pandas as pd

from steadfast.config import CorrelationThresholds, SteadfastConfig
from steadfast.frames import EventFrames
from steadfast.models import Correlation, CorrelationAnalysis
from steadfast.signals import align_pairs, pearson

logger = logging.getLogger(__name__)


def classify_strength(r: float, t: CorrelationThresholds) -> str:
    magnitude = abs(r)
    if magnitude > t.strong:
        return "strong"
    if magnitude > t.moderate:
        return "moderate"
    return "weak"


def classify_direction(r: float, t: CorrelationThresholds) -> str:
    if r > t.direction:
        return "positive"
    if r < -t.direction:
        return "negative"
    return "none"


def correlate(
    series_a: Sequence[float],
    series_b: Sequence[float],
    variable1: str = "Series A",
    variable2: str = "Series B",
    interpretations: Optional[Dict[str, str]] = None,
    cfg: Optional[SteadfastConfig] = None,
) -> Correlation:
    """
    Correlate two index-aligned numeric series.

    Pairs with a missing or non-finite side are dropped. With fewer than
    two remaining pairs, or zero variance on either side, the result is
    coefficient 0 / weak / none with p_value 1.

    ``interpretations`` maps direction ('positive', 'negative', 'none') to
    the human-readable sentence; a generic sentence is used otherwise.
    """
    t = (cfg or SteadfastConfig()).correlation
    xs, ys = align_pairs(series_a, series_b)
    r = pearson(xs, ys, t.min_points)
    direction = classify_direction(r, t)

    texts = interpretations or {
        "positive": f"Higher {variable1.lower()} goes with higher {variable2.lower()}",
        "negative": f"Higher {variable1.lower()} goes with lower {variable2.lower()}",
        "none": f"No significant correlation between {variable1.lower()} and {variable2.lower()}",
    }

    return Correlation(
        variable1=variable1,
        variable2=variable2,
        coefficient=round(r, 4),
        strength=classify_strength(r, t),
        direction=direction,
        p_value=round(1.0 - abs(r), 4),
        sample_size=int(len(xs)),
        interpretation=texts[direction],
    )


# ---------------------------------------------------------------------------
# Aggregations
# ---------------------------------------------------------------------------

def _day(df: pd.DataFrame) -> pd.Series:
    return df["local_date"].dt.normalize()


def _week(df: pd.DataFrame) -> pd.Series:
    return df["local_date"].dt.to_period("W")


def daily_mood_vs_intensity(frames: EventFrames) -> pd.DataFrame:
    """Daily mean mood joined to daily mean craving intensity (days with both)."""
    checks = frames.check_ins.dropna(subset=["mood"])
    mood = checks.groupby(_day(checks))["mood"].mean()
    intensity = frames.cravings.groupby(_day(frames.cravings))["intensity"].mean()
    return pd.concat([mood, intensity], axis=1, join="inner")


def weekly_meetings_vs_mood(frames: EventFrames) -> pd.DataFrame:
    """Per week with mood data: meeting count and mean mood."""
    checks = frames.check_ins.dropna(subset=["mood"])
    mood = checks.groupby(_week(checks))["mood"].mean()
    meetings = frames.meetings.groupby(_week(frames.meetings)).size()
    return pd.DataFrame({
        "meetings": meetings.reindex(mood.index, fill_value=0).astype(float),
        "mood": mood,
    })


def weekly_meditation_vs_success(frames: EventFrames) -> pd.DataFrame:
    """Per week with cravings: total meditation minutes and craving success rate."""
    cravings = frames.cravings
    success = cravings.groupby(_week(cravings))["overcame"].mean()
    minutes = frames.meditations.groupby(_week(frames.meditations))["duration"].sum()
    return pd.DataFrame({
        "minutes": minutes.reindex(success.index, fill_value=0.0).astype(float),
        "success_rate": success.astype(float),
    })


def compute_correlations(frames: EventFrames, cfg: SteadfastConfig) -> tuple:
    mood_intensity = daily_mood_vs_intensity(frames)
    meeting_mood = weekly_meetings_vs_mood(frames)
    meditation_success = weekly_meditation_vs_success(frames)

    results = (
        correlate(
            mood_intensity["mood"].tolist(),
            mood_intensity["intensity"].tolist(),
            "Mood", "Craving Intensity",
            {
                "negative": "Lower mood correlates with higher craving intensity",
                "positive": "Higher mood correlates with higher craving intensity",
                "none": "No significant correlation between mood and craving intensity",
            },
            cfg,
        ),
        correlate(
            meeting_mood["meetings"].tolist(),
            meeting_mood["mood"].tolist(),
            "Meeting Attendance", "Mood",
            {
                "positive": "More meeting attendance correlates with better mood",
                "negative": "More meeting attendance correlates with lower mood",
                "none": "No significant correlation between meeting attendance and mood",
            },
            cfg,
        ),
        correlate(
            meditation_success["minutes"].tolist(),
            meditation_success["success_rate"].tolist(),
            "Meditation Minutes", "Craving Success Rate",
            {
                "positive": "More meditation time correlates with better craving management",
                "negative": "More meditation time correlates with lower craving success",
                "none": "No significant correlation between meditation and craving success",
            },
            cfg,
        ),
    )
    logger.debug("Correlations: %s", [(c.variable1, c.variable2, c.coefficient) for c in results])
    return results


def correlation_insights(correlations, t: CorrelationThresholds) -> tuple:
    insights = []
    for corr in correlations:
        if abs(corr.coefficient) > t.insight:
            verb = "increases" if corr.direction == "positive" else "decreases"
            insights.append(
                f"Strong {corr.direction} correlation: {corr.variable1} {verb} "
                f"with {corr.variable2} (r={corr.coefficient:.2f})"
            )
    return tuple(insights)


def analyze_correlations_frames(frames: EventFrames, cfg: SteadfastConfig) -> CorrelationAnalysis:
    correlations = compute_correlations(frames, cfg)
    t = cfg.correlation
    return CorrelationAnalysis(
        correlations=correlations,
        strong_correlations=tuple(c for c in correlations if abs(c.coefficient) > t.insight),
        insights=correlation_insights(correlations, t),
    )
