"""
STEADFAST v1.0 — Rule-Based Relapse Risk Engine

A deterministic, explainable behavioral engine that analyzes self-tracked
recovery events (check-ins, cravings, meetings, meditation) and produces a
relapse-risk assessment with warnings, interventions, correlations and
short-horizon projections.

Architecture:
    config      — All thresholds, weights, and window sizes (single source of truth)
    models      — Input events and immutable output records
    frames      — Event DataFrames and reference-time windowing
    signals     — Guarded statistics: means, dispersion, Pearson, trend labels
    behavior    — Week-over-week behavioral snapshot
    scoring     — Additive rule-based risk score and risk factors
    guidance    — Ranked warnings and interventions
    correlation — Metric-pair correlations
    projection  — Short-horizon metric projections
    detectors   — Craving timing, meeting-day mood, check-in streak patterns
    history     — Similar past weeks and how they turned out
    report      — Data-quality confidence, summary, final aggregation
    pipeline    — Public entry points and text report
    dispatch    — Background request/response dispatcher
    store       — Explicit state container with a persistence port

Public API:
    predict_risk(events, now)               → RiskPrediction
    get_daily_risk_assessment(events, now)  → DailyRiskAssessment
    detect_patterns(events, now)            → PatternDetection
    analyze_correlations(events)            → CorrelationAnalysis
    generate_predictions(events, now)       → PredictiveModel
    generate_report(prediction)             → formatted report
"""

from steadfast.config import SteadfastConfig
from steadfast.correlation import correlate
from steadfast.pipeline import (
    analyze_correlations,
    analyze_snapshot,
    detect_patterns,
    generate_predictions,
    generate_report,
    get_daily_risk_assessment,
    load_events,
    predict_risk,
)

__version__ = "1.0.0"

__all__ = [
    "SteadfastConfig",
    "analyze_correlations",
    "analyze_snapshot",
    "correlate",
    "detect_patterns",
    "generate_predictions",
    "generate_report",
    "get_daily_risk_assessment",
    "load_events",
    "predict_risk",
]
