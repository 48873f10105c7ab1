"""
Centralized configuration for all thresholds, weights, and window parameters.

Every tunable constant lives here. The scorer is additive and rule-based:
each weight below is a fixed design constant, not a fitted parameter.
"""

from dataclasses import dataclass, field


# ---------------------------------------------------------------------------
# Windows
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class WindowParams:
    """Window sizes in days, all measured back from the reference timestamp."""

    recent: int = 7              # "this week"
    previous: int = 14           # "last week" = previous..recent days ago
    confidence: int = 14         # data-quality window for prediction confidence
    projection: int = 30         # current values for trend projection
    check_in_rate: int = 30      # summary check-in consistency
    patterns: int = 90           # pattern detection lookback

    # Decline flag: recent count < ratio * previous count
    decline_ratio: float = 0.7


# ---------------------------------------------------------------------------
# Trend classification
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TrendThresholds:
    """Week-over-week change needed before a trend label moves off 'stable'."""

    mood_change: float = 0.5
    craving_intensity_change: float = 1.0


# ---------------------------------------------------------------------------
# Neutral defaults for sparse data
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class NeutralDefaults:
    """Values used when a window holds no data."""

    mood: float = 3.0
    craving_intensity: float = 0.0
    craving_success_rate: float = 1.0
    halt: float = 5.0


# ---------------------------------------------------------------------------
# Behavioral composite scores
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CompositeParams:
    """
    Isolation = (meeting_baseline - meetings) * meeting_step + lonely * lonely_step
    Stress    = (angry + tired) * halt_step + volatility * volatility_step
    Both clamped to [0, scale_max].
    """

    meeting_baseline: float = 10.0
    meeting_step: float = 10.0
    lonely_step: float = 5.0
    halt_step: float = 5.0
    volatility_step: float = 10.0
    scale_max: float = 100.0


# ---------------------------------------------------------------------------
# Risk factor triggers and weights
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FactorThresholds:
    """Trigger conditions for each risk factor."""

    low_mood: float = 3.0
    mood_volatility: float = 1.5
    craving_frequency: int = 5
    craving_success_rate: float = 0.6
    halt_component: float = 7.0
    min_meetings: int = 2
    isolation: float = 60.0
    stress: float = 60.0


@dataclass(frozen=True)
class FactorWeights:
    """Points added to the risk score when a factor is active."""

    check_in_decline: int = 15
    mood_decline: int = 20
    low_mood: int = 15
    mood_volatility: int = 10
    high_craving_frequency: int = 20
    worsening_cravings: int = 25
    low_craving_success: int = 20
    high_hunger: int = 12
    high_anger: int = 15
    high_loneliness: int = 18
    high_tiredness: int = 12
    meeting_decline: int = 15
    meditation_decline: int = 10
    isolation: int = 20
    stress: int = 15


@dataclass(frozen=True)
class LevelThresholds:
    """Score boundaries for the four risk levels (inclusive lower bounds)."""

    critical: float = 75.0
    high: float = 50.0
    moderate: float = 25.0
    max_score: float = 100.0

    def __post_init__(self):
        if not (self.max_score >= self.critical > self.high > self.moderate >= 0):
            raise ValueError(
                "Level thresholds must satisfy max >= critical > high > moderate >= 0, "
                f"got {self.critical}/{self.high}/{self.moderate} (max {self.max_score})"
            )


# ---------------------------------------------------------------------------
# Prediction confidence
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ConfidenceBands:
    """
    Maps the number of recent data points to a prediction confidence.

    bands are (min_points, confidence) pairs checked in order; first match wins.
    """

    bands: tuple = ((30, 0.90), (20, 0.80), (10, 0.70), (5, 0.60))
    floor: float = 0.50

    def __post_init__(self):
        previous_points = None
        previous_conf = None
        for points, conf in self.bands:
            if not 0.0 <= conf <= 1.0:
                raise ValueError(f"Confidence band value must be in [0, 1], got {conf}")
            if previous_points is not None and (points >= previous_points or conf > previous_conf):
                raise ValueError("Confidence bands must be ordered by descending points and confidence")
            previous_points, previous_conf = points, conf
        if not 0.0 <= self.floor <= 1.0:
            raise ValueError(f"Confidence floor must be in [0, 1], got {self.floor}")
        if self.bands and self.floor > self.bands[-1][1]:
            raise ValueError("Confidence floor cannot exceed the lowest band")


# ---------------------------------------------------------------------------
# Warnings / interventions
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class InterventionThresholds:
    """Conditions that add an intervention on top of the emergency one."""

    craving_frequency: int = 3
    craving_success_rate: float = 0.7
    min_meetings: int = 2
    isolation: float = 50.0
    low_mood: float = 3.0
    min_meditations: int = 3
    stress: float = 60.0

    # Mood warning escalates to critical below this average
    critical_mood: float = 2.0


@dataclass(frozen=True)
class OutputLimits:
    """Caps applied after sorting."""

    warnings: int = 5
    interventions: int = 10
    similar_patterns: int = 3
    daily_warnings: int = 3
    daily_actions: int = 3
    actions_per_intervention: int = 2


# ---------------------------------------------------------------------------
# Correlation
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CorrelationThresholds:
    """Labels for Pearson coefficients."""

    strong: float = 0.7
    moderate: float = 0.4
    direction: float = 0.1
    insight: float = 0.5
    min_points: int = 2


# ---------------------------------------------------------------------------
# Projection
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ProjectionParams:
    """Fixed nudges, margins and confidences for each projected metric."""

    timeframe: str = "Next 30 days"

    mood_adjustment: float = 0.3
    mood_margin: float = 0.5
    mood_confidence: float = 0.70
    mood_min: float = 1.0
    mood_max: float = 5.0

    craving_worsening_factor: float = 1.2
    craving_improving_factor: float = 0.8
    craving_margin: float = 2.0
    craving_confidence: float = 0.65

    success_adjustment: float = 0.05
    success_margin: float = 0.1
    success_confidence: float = 0.60

    # Accuracy = mean(min(points / data_saturation, 1), min(streak / streak_saturation, 1))
    data_saturation: int = 100
    streak_saturation: int = 30


# ---------------------------------------------------------------------------
# Pattern detection
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PatternParams:
    """Thresholds and fixed correlations for detected behavior patterns."""

    peak_ratio: float = 1.5
    day_of_week_correlation: float = 0.7
    time_of_day_correlation: float = 0.65
    meeting_mood_min: float = 0.3
    mood_scale: float = 5.0
    streak_min_days: int = 7
    streak_correlation: float = 0.8
    timeframe: str = "Last 90 days"

    # Predicted high-risk date falls this many days after the reference date
    high_risk_from_days: int = 3
    high_risk_to_days: int = 7


@dataclass(frozen=True)
class SimilarityParams:
    """Historical period matching."""

    lookback_weeks: int = 8
    min_similarity: float = 0.6
    success_rate: float = 0.7


# ---------------------------------------------------------------------------
# Top-level config aggregate
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SteadfastConfig:
    """Complete engine configuration. Pass to the pipeline to override defaults."""

    windows: WindowParams = field(default_factory=WindowParams)
    trend: TrendThresholds = field(default_factory=TrendThresholds)
    defaults: NeutralDefaults = field(default_factory=NeutralDefaults)
    composite: CompositeParams = field(default_factory=CompositeParams)
    factor_thresholds: FactorThresholds = field(default_factory=FactorThresholds)
    factor_weights: FactorWeights = field(default_factory=FactorWeights)
    levels: LevelThresholds = field(default_factory=LevelThresholds)
    confidence: ConfidenceBands = field(default_factory=ConfidenceBands)
    interventions: InterventionThresholds = field(default_factory=InterventionThresholds)
    limits: OutputLimits = field(default_factory=OutputLimits)
    correlation: CorrelationThresholds = field(default_factory=CorrelationThresholds)
    projection: ProjectionParams = field(default_factory=ProjectionParams)
    patterns: PatternParams = field(default_factory=PatternParams)
    similarity: SimilarityParams = field(default_factory=SimilarityParams)
    timeframe: str = "Next 3-7 days"
