"""
Pipeline orchestration: ingest → snapshot → score → guide → correlate →
project → aggregate.

Only ``load_events`` touches the file system. Every entry point takes the
event collections plus an explicit reference timestamp ``now`` and returns
a fresh, immutable result; nothing is cached between calls.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import pandas as pd

from steadfast.behavior import analyze_behavior
from steadfast.config import SteadfastConfig
from steadfast.correlation import analyze_correlations_frames
from steadfast.detectors import detect_patterns_frames, predict_high_risk_date
from steadfast.frames import EventFrames, build_frames, resolve_local_now, resolve_now
from steadfast.guidance import generate
from steadfast.history import find_similar_periods
from steadfast.models import (
    BehavioralSnapshot,
    CorrelationAnalysis,
    DailyRiskAssessment,
    EventLog,
    PatternDetection,
    PredictiveModel,
    RiskPrediction,
    coerce_events,
)
from steadfast.projection import project
from steadfast.report import aggregate, data_confidence, recent_data_points, summarize
from steadfast.scoring import build_risk_factors, score

logger = logging.getLogger(__name__)

Events = Union[EventLog, Dict[str, Any], None]


# ---------------------------------------------------------------------------
# Data loading (CLI mode only)
# ---------------------------------------------------------------------------

def load_events(filepath: Union[str, Path]) -> Tuple[EventLog, Optional[pd.Timestamp]]:
    """
    Load an event file: a JSON object with checkIns / cravings / meetings /
    meditations lists and an optional "now" reference timestamp.
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Event file not found: {path}")

    with open(path, "r") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Event file is not valid JSON: {path}: {e}") from e

    if not isinstance(data, dict):
        raise ValueError("Event file must contain a JSON object")

    now = resolve_now(data["now"]) if data.get("now") else None
    return EventLog.from_dict(data), now


# ---------------------------------------------------------------------------
# Shared preparation
# ---------------------------------------------------------------------------

def _prepare(
    events: Events,
    now: Any,
    cfg: Optional[SteadfastConfig],
) -> Tuple[EventLog, EventFrames, pd.Timestamp, pd.Timestamp, SteadfastConfig]:
    """Returns (log, frames, now as UTC, now as local wall clock, cfg)."""
    if cfg is None:
        cfg = SteadfastConfig()
    log = coerce_events(events)
    frames = build_frames(log)
    return log, frames, resolve_now(now), resolve_local_now(now), cfg


def analyze_snapshot(
    events: Events,
    now: Any = None,
    cfg: Optional[SteadfastConfig] = None,
) -> BehavioralSnapshot:
    """Behavioral snapshot only (week-over-week aggregates)."""
    _, frames, ref, _, cfg = _prepare(events, now, cfg)
    return analyze_behavior(frames, ref, cfg)


# ---------------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------------

def predict_risk(
    events: Events,
    now: Any = None,
    cfg: Optional[SteadfastConfig] = None,
) -> RiskPrediction:
    """
    Full risk assessment.

    Stateless. No file reads. Never raises on sparse or malformed events;
    malformed records are dropped during ingestion.
    """
    log, frames, ref, local, cfg = _prepare(events, now, cfg)

    # Stage 1: Snapshot
    snapshot = analyze_behavior(frames, ref, cfg)

    # Stage 2: Score
    overall, contributions = score(snapshot, cfg)
    factors = build_risk_factors(snapshot, contributions, cfg)

    # Stage 3: Guidance
    warnings, interventions = generate(factors, snapshot, cfg)

    # Stage 4: Correlations + projections
    correlations = analyze_correlations_frames(frames, cfg)
    predictions = project(frames, snapshot, ref, cfg, local)

    # Stage 5: History
    similar = find_similar_periods(frames, log.relapses, snapshot, ref, cfg)
    predicted_date = predict_high_risk_date(frames, ref, cfg, local)

    # Stage 6: Aggregate
    points = recent_data_points(frames, ref, cfg)
    result = aggregate(
        snapshot=snapshot,
        risk_score=overall,
        factors=factors,
        warnings=warnings,
        interventions=interventions,
        correlations=correlations,
        predictions=predictions,
        confidence=data_confidence(points, cfg),
        summary=summarize(frames, snapshot, log.sobriety_date, ref, cfg, local),
        now=ref,
        cfg=cfg,
        similar_patterns=similar,
        predicted_date=predicted_date,
    )
    logger.debug(
        "Risk at %s: %s (%.0f) from %d factors, %d recent points",
        ref, result.risk_level, result.risk_score, len(factors), points,
    )
    return result


def get_daily_risk_assessment(
    events: Events,
    now: Any = None,
    cfg: Optional[SteadfastConfig] = None,
) -> DailyRiskAssessment:
    """Condensed view of ``predict_risk``: same level and score by construction."""
    if cfg is None:
        cfg = SteadfastConfig()
    prediction = predict_risk(events, now, cfg)
    lim = cfg.limits

    urgent = [i for i in prediction.interventions if i.priority in ("immediate", "high")]
    actions = [
        action
        for intervention in urgent[: lim.daily_actions]
        for action in intervention.actions[: lim.actions_per_intervention]
    ]

    return DailyRiskAssessment(
        today_risk=prediction.risk_level,
        risk_score=prediction.risk_score,
        top_warnings=tuple(w.title for w in prediction.warnings[: lim.daily_warnings]),
        immediate_actions=tuple(actions[: lim.daily_actions]),
    )


def detect_patterns(
    events: Events,
    now: Any = None,
    cfg: Optional[SteadfastConfig] = None,
) -> PatternDetection:
    """Craving timing peaks, meeting-day mood and check-in habits."""
    _, frames, ref, _, cfg = _prepare(events, now, cfg)
    return detect_patterns_frames(frames, ref, cfg)


def analyze_correlations(
    events: Events,
    cfg: Optional[SteadfastConfig] = None,
) -> CorrelationAnalysis:
    """Fixed metric pairs over the full history; independent of ``now``."""
    _, frames, _, _, cfg = _prepare(events, None, cfg)
    return analyze_correlations_frames(frames, cfg)


def generate_predictions(
    events: Events,
    now: Any = None,
    cfg: Optional[SteadfastConfig] = None,
) -> PredictiveModel:
    """Trend projections for mood, craving frequency and success rate."""
    _, frames, ref, local, cfg = _prepare(events, now, cfg)
    snapshot = analyze_behavior(frames, ref, cfg)
    return project(frames, snapshot, ref, cfg, local)


# ---------------------------------------------------------------------------
# Report generation
# ---------------------------------------------------------------------------

def generate_report(result: RiskPrediction) -> str:
    """Format a RiskPrediction as a human-readable text report."""
    s = result.snapshot
    lines = [
        "STEADFAST RISK REPORT",
        "=" * 58,
        "",
        f"  Generated For       : {result.generated_at:%Y-%m-%d %H:%M}" if result.generated_at is not None
        else "  Generated For       : -",
        f"  Risk Level          : {result.risk_level.upper()} ({result.risk_score:.0f}/100)",
        f"  Confidence          : {result.confidence:.2f}",
        f"  Timeframe           : {result.timeframe}",
    ]
    if result.predicted_date is not None:
        lines.append(f"  Highest-Risk Day    : {result.predicted_date:%A %Y-%m-%d}")

    lines += [
        "",
        "  This Week:",
        f"    Check-ins         : {s.check_in_frequency}{' (declining)' if s.check_in_decline else ''}",
        f"    Mood              : {s.avg_mood:.1f}/5 ({s.mood_trend}, volatility {s.mood_volatility:.2f})",
        f"    Cravings          : {s.craving_frequency} ({s.craving_intensity_trend}, "
        f"{s.craving_success_rate * 100:.0f}% overcome)",
        f"    Meetings          : {s.meeting_attendance}{' (declining)' if s.meeting_decline else ''}",
        f"    Meditations       : {s.meditation_frequency}{' (declining)' if s.meditation_decline else ''}",
        f"    Isolation / Stress: {s.isolation_score:.0f} / {s.stress_score:.0f}",
    ]

    if result.factors:
        lines.append("")
        lines.append("  Risk Factors:")
        for f in result.factors:
            lines.append(f"    +{f.contribution:<3d} {f.name:28s} {f.description}")

    if result.warnings:
        lines.append("")
        lines.append("  Warnings:")
        for w in result.warnings:
            lines.append(f"    [{w.severity.upper():8s}] {w.title}")

    lines.append("")
    lines.append("  Interventions:")
    for i in result.interventions:
        lines.append(f"    [{i.priority.upper():9s}] {i.title} ({i.time_estimate})")

    lines.append("")
    lines.append("  Correlations (p-value is the 1-|r| approximation):")
    for c in result.correlations.correlations:
        lines.append(
            f"    {c.variable1} vs {c.variable2}: r={c.coefficient:+.2f} "
            f"({c.strength}, n={c.sample_size}, p~{c.p_value:.2f})"
        )

    lines.append("")
    lines.append(f"  Projections ({result.predictions.methodology}):")
    for p in result.predictions.predictions:
        ci = p.confidence_interval
        lines.append(
            f"    {p.metric:22s}: {p.current_value:.2f} -> {p.predicted_value:.2f} "
            f"[{ci.low:.2f}, {ci.high:.2f}] {p.trend}"
        )

    if result.similar_patterns:
        lines.append("")
        lines.append("  Similar Past Weeks:")
        for m in result.similar_patterns:
            lines.append(f"    {m.date:%Y-%m-%d}  similarity {m.similarity:.2f}  -> {m.outcome}")

    if result.summary is not None:
        lines.append("")
        lines.append("  Summary:")
        for insight in result.summary.key_insights:
            lines.append(f"    - {insight}")

    if result.risk_level in ("high", "critical"):
        lines.append("")
        lines.append("  ⚠  HIGH RISK: Contact your support network today")

    lines.append("")
    lines.append("=" * 58)
    return "\n".join(lines)
