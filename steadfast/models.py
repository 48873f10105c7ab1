"""
Typed records flowing in and out of the engine.

Inputs are built leniently from plain dicts: a record without a parseable
date is dropped, and out-of-range values are clamped into their documented
ranges. Each event keeps two clocks: ``date`` (absolute, naive UTC) for
windowing and ``local_date`` (the wall-clock time the user saw, offset
dropped) for hour, weekday and calendar-day grouping. Outputs are frozen dataclasses with a ``to_dict()`` that yields plain
JSON-serializable data.
"""

import logging
import math
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Mapping, Optional, Tuple

import pandas as pd

logger = logging.getLogger(__name__)


MOOD_RANGE = (1.0, 5.0)
HALT_RANGE = (1.0, 10.0)
INTENSITY_RANGE = (1.0, 10.0)

HALT_KEYS = ("hungry", "angry", "lonely", "tired")


# ---------------------------------------------------------------------------
# Coercion helpers
# ---------------------------------------------------------------------------

def _to_timestamp(value: Any, utc: bool) -> Optional[pd.Timestamp]:
    if value is None or isinstance(value, bool):
        return None
    try:
        ts = pd.to_datetime(value, utc=utc, errors="coerce")
    except (TypeError, ValueError, OverflowError):
        return None
    if not isinstance(ts, pd.Timestamp) or pd.isna(ts):
        return None
    return ts.tz_localize(None) if ts.tzinfo is not None else ts


def parse_timestamp(value: Any) -> Optional[pd.Timestamp]:
    """Parse anything date-like into a naive UTC Timestamp, or None."""
    return _to_timestamp(value, utc=True)


def parse_wall_clock(value: Any) -> Optional[pd.Timestamp]:
    """
    Parse into a naive Timestamp showing the clock time where the event
    happened: a UTC offset is dropped, not converted.
    """
    return _to_timestamp(value, utc=False)


def _as_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "y")
    return bool(value)


def _clamp(value: float, low: float, high: float) -> float:
    return min(max(value, low), high)


def _get(data: Mapping, *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return default


def _local_date(data: Mapping, date: pd.Timestamp) -> pd.Timestamp:
    """Local wall-clock time: an explicit local_date, else the raw date's own clock."""
    local = parse_wall_clock(_get(data, "local_date", "localDate"))
    if local is None:
        local = parse_wall_clock(data.get("date"))
    return local if local is not None else date


def _plain(value: Any) -> Any:
    """Recursively convert dataclasses, tuples, and timestamps to plain data."""
    if hasattr(value, "__dataclass_fields__"):
        return {f.name: _plain(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, pd.Timestamp):
        return value.isoformat()
    return value


class Serializable:
    """Mixin adding ``to_dict()`` to frozen dataclasses."""

    def to_dict(self) -> Dict[str, Any]:
        return _plain(self)


# ---------------------------------------------------------------------------
# Input events
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class HALTCheck(Serializable):
    """Hungry / Angry / Lonely / Tired self-assessment, each 1-10."""

    hungry: float
    angry: float
    lonely: float
    tired: float

    @classmethod
    def from_dict(cls, data: Any) -> Optional["HALTCheck"]:
        if isinstance(data, HALTCheck):
            return data
        if not isinstance(data, Mapping):
            return None
        values = {}
        for key in HALT_KEYS:
            number = _as_float(data.get(key))
            if number is None:
                logger.debug("Dropping HALT assessment with invalid %s: %r", key, data.get(key))
                return None
            values[key] = _clamp(number, *HALT_RANGE)
        return cls(**values)


@dataclass(frozen=True)
class CheckIn(Serializable):
    date: pd.Timestamp
    mood: Optional[float] = None
    halt: Optional[HALTCheck] = None
    notes: Optional[str] = None
    local_date: Optional[pd.Timestamp] = None

    @classmethod
    def from_dict(cls, data: Any) -> Optional["CheckIn"]:
        if isinstance(data, CheckIn):
            return data
        if not isinstance(data, Mapping):
            return None
        date = parse_timestamp(data.get("date"))
        if date is None:
            logger.debug("Dropping check-in without a valid date: %r", data.get("date"))
            return None
        mood = _as_float(data.get("mood"))
        if mood is not None:
            mood = _clamp(mood, *MOOD_RANGE)
        halt = data.get("halt")
        return cls(
            date=date,
            mood=mood,
            halt=HALTCheck.from_dict(halt) if halt is not None else None,
            notes=data.get("notes"),
            local_date=_local_date(data, date),
        )


@dataclass(frozen=True)
class Craving(Serializable):
    date: pd.Timestamp
    intensity: float
    trigger: str = "unknown"
    overcame: bool = False
    halt: Optional[HALTCheck] = None
    local_date: Optional[pd.Timestamp] = None

    @classmethod
    def from_dict(cls, data: Any) -> Optional["Craving"]:
        if isinstance(data, Craving):
            return data
        if not isinstance(data, Mapping):
            return None
        date = parse_timestamp(data.get("date"))
        intensity = _as_float(data.get("intensity"))
        if date is None or intensity is None:
            logger.debug("Dropping malformed craving: %r", data)
            return None
        halt = data.get("halt")
        return cls(
            date=date,
            intensity=_clamp(intensity, *INTENSITY_RANGE),
            trigger=str(data.get("trigger") or "unknown"),
            overcame=_as_bool(data.get("overcame", False)),
            halt=HALTCheck.from_dict(halt) if halt is not None else None,
            local_date=_local_date(data, date),
        )


@dataclass(frozen=True)
class Meeting(Serializable):
    date: pd.Timestamp
    type: str = ""
    location: str = ""
    local_date: Optional[pd.Timestamp] = None

    @classmethod
    def from_dict(cls, data: Any) -> Optional["Meeting"]:
        if isinstance(data, Meeting):
            return data
        if not isinstance(data, Mapping):
            return None
        date = parse_timestamp(data.get("date"))
        if date is None:
            logger.debug("Dropping meeting without a valid date: %r", data.get("date"))
            return None
        return cls(
            date=date,
            type=str(data.get("type") or ""),
            location=str(data.get("location") or ""),
            local_date=_local_date(data, date),
        )


@dataclass(frozen=True)
class MeditationSession(Serializable):
    date: pd.Timestamp
    duration: float = 0.0
    type: str = ""
    local_date: Optional[pd.Timestamp] = None

    @classmethod
    def from_dict(cls, data: Any) -> Optional["MeditationSession"]:
        if isinstance(data, MeditationSession):
            return data
        if not isinstance(data, Mapping):
            return None
        date = parse_timestamp(data.get("date"))
        if date is None:
            logger.debug("Dropping meditation without a valid date: %r", data.get("date"))
            return None
        duration = _as_float(data.get("duration"))
        return cls(
            date=date,
            duration=max(duration, 0.0) if duration is not None else 0.0,
            type=str(data.get("type") or ""),
            local_date=_local_date(data, date),
        )


@dataclass(frozen=True)
class Relapse(Serializable):
    date: pd.Timestamp
    triggers: Tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Any) -> Optional["Relapse"]:
        if isinstance(data, Relapse):
            return data
        if not isinstance(data, Mapping):
            return None
        date = parse_timestamp(data.get("date"))
        if date is None:
            return None
        triggers = data.get("triggers") or ()
        if isinstance(triggers, str):
            triggers = (triggers,)
        return cls(date=date, triggers=tuple(str(t) for t in triggers))


def _build_all(items: Any, builder) -> tuple:
    if not items or isinstance(items, (str, bytes, Mapping)):
        return ()
    try:
        candidates = list(items)
    except TypeError:
        return ()
    built = [builder(item) for item in candidates]
    kept = tuple(b for b in built if b is not None)
    if len(kept) != len(candidates):
        logger.debug("Dropped %d of %d records", len(candidates) - len(kept), len(candidates))
    return kept


@dataclass(frozen=True)
class EventLog(Serializable):
    """The four event series plus optional sobriety context."""

    check_ins: Tuple[CheckIn, ...] = ()
    cravings: Tuple[Craving, ...] = ()
    meetings: Tuple[Meeting, ...] = ()
    meditations: Tuple[MeditationSession, ...] = ()
    sobriety_date: Optional[pd.Timestamp] = None
    relapses: Tuple[Relapse, ...] = ()

    @classmethod
    def from_dict(cls, data: Any) -> "EventLog":
        if isinstance(data, EventLog):
            return data
        if not isinstance(data, Mapping):
            return cls()
        return cls(
            check_ins=_build_all(_get(data, "check_ins", "checkIns"), CheckIn.from_dict),
            cravings=_build_all(data.get("cravings"), Craving.from_dict),
            meetings=_build_all(data.get("meetings"), Meeting.from_dict),
            meditations=_build_all(data.get("meditations"), MeditationSession.from_dict),
            sobriety_date=parse_timestamp(_get(data, "sobriety_date", "sobrietyDate")),
            relapses=_build_all(
                _get(data, "relapses", "previous_relapses", "previousRelapses"),
                Relapse.from_dict,
            ),
        )

    @property
    def is_empty(self) -> bool:
        return not (self.check_ins or self.cravings or self.meetings or self.meditations)


def coerce_events(events: Any) -> EventLog:
    """Accept an EventLog, a mapping of event lists, or None."""
    if events is None:
        return EventLog()
    return EventLog.from_dict(events)


# ---------------------------------------------------------------------------
# Derived records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class HALTAverages(Serializable):
    hungry: float = 5.0
    angry: float = 5.0
    lonely: float = 5.0
    tired: float = 5.0


@dataclass(frozen=True)
class BehavioralSnapshot(Serializable):
    """Week-over-week aggregates feeding the risk scorer."""

    check_in_frequency: int = 0
    check_in_decline: bool = False
    mood_trend: str = "stable"
    avg_mood: float = 3.0
    previous_avg_mood: float = 3.0
    mood_volatility: float = 0.0
    craving_frequency: int = 0
    avg_craving_intensity: float = 0.0
    previous_avg_craving_intensity: float = 0.0
    craving_intensity_trend: str = "stable"
    craving_success_rate: float = 1.0
    halt: HALTAverages = field(default_factory=HALTAverages)
    meeting_attendance: int = 0
    previous_meeting_attendance: int = 0
    meeting_decline: bool = False
    meditation_frequency: int = 0
    previous_meditation_frequency: int = 0
    meditation_decline: bool = False
    previous_check_in_frequency: int = 0
    isolation_score: float = 0.0
    stress_score: float = 0.0


@dataclass(frozen=True)
class RiskFactor(Serializable):
    id: str
    name: str
    weight: float
    score: float
    level: str
    contribution: int
    description: str
    mitigation_actions: Tuple[str, ...] = ()


@dataclass(frozen=True)
class RiskWarning(Serializable):
    id: str
    severity: str
    title: str
    description: str
    detected_pattern: str
    confidence: float
    trigger_factors: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Intervention(Serializable):
    id: str
    priority: str
    title: str
    description: str
    actions: Tuple[str, ...]
    effectiveness: float
    time_estimate: str


@dataclass(frozen=True)
class Correlation(Serializable):
    """
    Pearson correlation between two metrics.

    ``p_value`` is the simplified proxy ``1 - |r|``; it is not a
    significance test and should be presented as an approximation.
    """

    variable1: str
    variable2: str
    coefficient: float = 0.0
    strength: str = "weak"
    direction: str = "none"
    p_value: float = 1.0
    sample_size: int = 0
    interpretation: str = ""


@dataclass(frozen=True)
class ConfidenceInterval(Serializable):
    low: float
    high: float


@dataclass(frozen=True)
class Prediction(Serializable):
    metric: str
    current_value: float
    predicted_value: float
    timeframe: str
    confidence: float
    trend: str
    confidence_interval: ConfidenceInterval
    factors: Tuple[str, ...] = ()


@dataclass(frozen=True)
class DetectedPattern(Serializable):
    type: str
    pattern: str
    frequency: int
    impact: str
    description: str
    correlation: float


@dataclass(frozen=True)
class SimilarPattern(Serializable):
    date: pd.Timestamp
    similarity: float
    outcome: str
    what_helped: Tuple[str, ...] = ()
    what_didnt_help: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ReportSummary(Serializable):
    total_days: int
    avg_mood: float
    check_in_rate: float
    craving_success_rate: float
    engagement_score: int
    overall_trend: str
    key_insights: Tuple[str, ...] = ()


@dataclass(frozen=True)
class CorrelationAnalysis(Serializable):
    correlations: Tuple[Correlation, ...] = ()
    strong_correlations: Tuple[Correlation, ...] = ()
    insights: Tuple[str, ...] = ()


@dataclass(frozen=True)
class PatternDetection(Serializable):
    patterns: Tuple[DetectedPattern, ...] = ()
    confidence: float = 0.0
    timeframe: str = ""


@dataclass(frozen=True)
class PredictiveModel(Serializable):
    predictions: Tuple[Prediction, ...] = ()
    accuracy: float = 0.0
    confidence: float = 0.0
    methodology: str = ""


@dataclass(frozen=True)
class RiskPrediction(Serializable):
    """Top-level output of ``predict_risk``."""

    risk_level: str
    risk_score: float
    confidence: float
    timeframe: str
    warnings: Tuple[RiskWarning, ...] = ()
    interventions: Tuple[Intervention, ...] = ()
    similar_patterns: Tuple[SimilarPattern, ...] = ()
    predicted_date: Optional[pd.Timestamp] = None
    factors: Tuple[RiskFactor, ...] = ()
    snapshot: BehavioralSnapshot = field(default_factory=BehavioralSnapshot)
    correlations: CorrelationAnalysis = field(default_factory=CorrelationAnalysis)
    predictions: PredictiveModel = field(default_factory=PredictiveModel)
    summary: Optional[ReportSummary] = None
    generated_at: Optional[pd.Timestamp] = None


@dataclass(frozen=True)
class DailyRiskAssessment(Serializable):
    today_risk: str
    risk_score: float
    top_warnings: Tuple[str, ...] = ()
    immediate_actions: Tuple[str, ...] = ()
