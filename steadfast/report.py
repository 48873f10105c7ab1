"""
Report aggregation: merge all stage outputs into one immutable RiskPrediction.

Also owns the two report-level statistics that are not produced by any
single stage: the data-quality confidence and the summary block.
"""

from typing import Optional, Sequence

import pandas as pd

from steadfast.config import SteadfastConfig
from steadfast.frames import DAY, EventFrames, until, window
from steadfast.models import (
    BehavioralSnapshot,
    CorrelationAnalysis,
    Intervention,
    PredictiveModel,
    ReportSummary,
    RiskFactor,
    RiskPrediction,
    RiskWarning,
    SimilarPattern,
)
from steadfast.scoring import classify_level
from steadfast.signals import clamp, mean_or, ratio_or


# ---------------------------------------------------------------------------
# Data-quality confidence
# ---------------------------------------------------------------------------

def recent_data_points(frames: EventFrames, now: pd.Timestamp, cfg: SteadfastConfig) -> int:
    """Events across all four series inside the confidence window."""
    days = cfg.windows.confidence
    return sum(len(window(df, now, days)) for df in frames)


def data_confidence(points: int, cfg: SteadfastConfig) -> float:
    """
    Map a data-point count to a fixed confidence band.

    This is the prediction-level confidence. It is unrelated to the fixed
    per-warning and per-prediction confidences.
    """
    for min_points, confidence in cfg.confidence.bands:
        if points >= min_points:
            return confidence
    return cfg.confidence.floor


# ---------------------------------------------------------------------------
# Summary
# ---------------------------------------------------------------------------

def summarize(
    frames: EventFrames,
    snapshot: BehavioralSnapshot,
    sobriety_date: Optional[pd.Timestamp],
    now: pd.Timestamp,
    cfg: SteadfastConfig,
    local_now: Optional[pd.Timestamp] = None,
) -> ReportSummary:
    """
    Report-level summary. Day counts use local calendar days ending on
    ``local_now`` (default ``now``).
    """
    check_ins = until(frames.check_ins, now)
    cravings = until(frames.cravings, now)
    today = (now if local_now is None else local_now).normalize()

    total_days = 0
    if sobriety_date is not None and sobriety_date <= now:
        total_days = max(int((today - sobriety_date.normalize()) / DAY), 0)

    avg_mood = mean_or(check_ins["mood"], cfg.defaults.mood)

    rate_days = cfg.windows.check_in_rate
    # The rate_days calendar days ending today, today included
    days = check_ins["local_date"].dt.normalize()
    recent_days = days[(days > today - rate_days * DAY) & (days <= today)].nunique()
    check_in_rate = clamp(recent_days / rate_days, 0.0, 1.0)

    success_rate = clamp(
        ratio_or(int(cravings["overcame"].sum()), len(cravings), 0.0), 0.0, 1.0
    )
    engagement = int(round(clamp(
        check_in_rate * 40 + success_rate * 30 + (avg_mood / 5) * 30, 0.0, 100.0
    )))

    if snapshot.mood_trend == "improving" and snapshot.craving_intensity_trend != "worsening":
        overall = "positive"
    elif snapshot.mood_trend == "declining" or snapshot.craving_intensity_trend == "worsening":
        overall = "negative"
    else:
        overall = "neutral"

    insights = []
    if sobriety_date is not None:
        insights.append(f"{total_days} days of continuous sobriety")
    insights.extend([
        f"{round(check_in_rate * 100)}% check-in consistency",
        f"{round(success_rate * 100)}% craving success rate",
        f"Average mood: {avg_mood:.1f}/5",
    ])

    return ReportSummary(
        total_days=total_days,
        avg_mood=round(avg_mood, 4),
        check_in_rate=round(check_in_rate, 4),
        craving_success_rate=round(success_rate, 4),
        engagement_score=engagement,
        overall_trend=overall,
        key_insights=tuple(insights),
    )


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------

def aggregate(
    snapshot: BehavioralSnapshot,
    risk_score: float,
    factors: Sequence[RiskFactor],
    warnings: Sequence[RiskWarning],
    interventions: Sequence[Intervention],
    correlations: CorrelationAnalysis,
    predictions: PredictiveModel,
    confidence: float,
    summary: ReportSummary,
    now: pd.Timestamp,
    cfg: SteadfastConfig,
    similar_patterns: Sequence[SimilarPattern] = (),
    predicted_date: Optional[pd.Timestamp] = None,
) -> RiskPrediction:
    """Compose the final report; the score is clamped once more here."""
    score = clamp(risk_score, 0.0, cfg.levels.max_score)
    return RiskPrediction(
        risk_level=classify_level(score, cfg.levels),
        risk_score=score,
        confidence=clamp(confidence, 0.0, 1.0),
        timeframe=cfg.timeframe,
        warnings=tuple(warnings),
        interventions=tuple(interventions),
        similar_patterns=tuple(similar_patterns),
        predicted_date=predicted_date,
        factors=tuple(factors),
        snapshot=snapshot,
        correlations=correlations,
        predictions=predictions,
        summary=summary,
        generated_at=now,
    )
