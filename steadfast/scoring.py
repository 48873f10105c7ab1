"""
Risk scoring: behavioral snapshot -> additive, clamped 0-100 score.

Each factor is a named rule with a fixed point weight (config.FactorWeights).
Active factors add their weight; the sum is clamped to the scale maximum.
Every point of risk therefore traces back to one human-readable cause.
"""

from typing import Callable, Dict, Tuple

from steadfast.config import LevelThresholds, SteadfastConfig
from steadfast.models import BehavioralSnapshot, RiskFactor
from steadfast.signals import clamp, ratio_or


# Factor id -> display name, in evaluation order
FACTOR_NAMES = {
    "check_in_decline": "Check-in Decline",
    "mood_decline": "Mood Decline",
    "low_mood": "Low Mood",
    "mood_volatility": "Mood Volatility",
    "high_craving_frequency": "High Craving Frequency",
    "worsening_cravings": "Worsening Craving Intensity",
    "low_craving_success": "Low Craving Success",
    "high_hunger": "High Hunger",
    "high_anger": "High Anger",
    "high_loneliness": "High Loneliness",
    "high_tiredness": "High Tiredness",
    "meeting_decline": "Meeting Decline",
    "meditation_decline": "Meditation Decline",
    "isolation": "Social Isolation",
    "stress": "Elevated Stress",
}

MITIGATIONS = {
    "check_in_decline": ("Set daily reminders", "Join accountability group", "Track smaller wins"),
    "mood_decline": ("Seek professional support", "Increase self-care activities", "Reach out to support network"),
    "low_mood": ("Schedule therapy appointment", "Get 30 minutes of exercise", "Practice gratitude journaling"),
    "mood_volatility": ("Keep a consistent daily routine", "Track mood triggers", "Practice emotional regulation"),
    "high_craving_frequency": ("Practice coping strategies", "Increase meeting attendance", "Call sponsor immediately"),
    "worsening_cravings": ("Practice urge surfing", "Avoid known triggers", "Call sponsor immediately"),
    "low_craving_success": ("Review relapse prevention plan", "Rehearse coping strategies", "Reach out before acting on urges"),
    "high_hunger": ("Eat regular balanced meals", "Keep healthy snacks nearby"),
    "high_anger": ("Practice emotional regulation", "Talk through resentments with sponsor"),
    "high_loneliness": ("Call someone in your network", "Attend a meeting to connect"),
    "high_tiredness": ("Establish routine sleep schedule", "Rest before making decisions"),
    "meeting_decline": ("Schedule regular meetings", "Join online support groups"),
    "meditation_decline": ("Start daily meditation practice", "Use guided meditation"),
    "isolation": ("Text 3 people from your support network", "Schedule time with sponsor"),
    "stress": ("Practice box breathing", "Address physical needs first", "Delegate non-critical tasks"),
}


# ---------------------------------------------------------------------------
# Trigger conditions
# ---------------------------------------------------------------------------

def active_factors(snapshot: BehavioralSnapshot, cfg: SteadfastConfig) -> Dict[str, bool]:
    """Evaluate every factor's trigger condition."""
    s = snapshot
    ft = cfg.factor_thresholds
    return {
        "check_in_decline": s.check_in_decline,
        "mood_decline": s.mood_trend == "declining",
        "low_mood": s.avg_mood < ft.low_mood,
        "mood_volatility": s.mood_volatility > ft.mood_volatility,
        "high_craving_frequency": s.craving_frequency > ft.craving_frequency,
        "worsening_cravings": s.craving_intensity_trend == "worsening",
        "low_craving_success": s.craving_success_rate < ft.craving_success_rate,
        "high_hunger": s.halt.hungry > ft.halt_component,
        "high_anger": s.halt.angry > ft.halt_component,
        "high_loneliness": s.halt.lonely > ft.halt_component,
        "high_tiredness": s.halt.tired > ft.halt_component,
        "meeting_decline": s.meeting_decline or s.meeting_attendance < ft.min_meetings,
        "meditation_decline": s.meditation_decline,
        "isolation": s.isolation_score > ft.isolation,
        "stress": s.stress_score > ft.stress,
    }


def score(snapshot: BehavioralSnapshot, cfg: SteadfastConfig) -> Tuple[float, Dict[str, int]]:
    """
    Sum the weights of all active factors.

    Returns:
        (overall_score clamped to [0, max_score], {factor_id: contribution})
    """
    weights = cfg.factor_weights
    contributions = {
        factor_id: getattr(weights, factor_id)
        for factor_id, active in active_factors(snapshot, cfg).items()
        if active
    }
    overall = clamp(float(sum(contributions.values())), 0.0, cfg.levels.max_score)
    return overall, contributions


def classify_level(value: float, levels: LevelThresholds) -> str:
    """Map a 0-100 score to low / moderate / high / critical."""
    if value >= levels.critical:
        return "critical"
    if value >= levels.high:
        return "high"
    if value >= levels.moderate:
        return "moderate"
    return "low"


# ---------------------------------------------------------------------------
# Factor intensity (0-100) and descriptions
# ---------------------------------------------------------------------------

def _drop(recent: int, previous: int) -> float:
    return (1.0 - ratio_or(recent, previous, 1.0)) * 100


_INTENSITY: Dict[str, Callable[[BehavioralSnapshot], float]] = {
    "check_in_decline": lambda s: _drop(s.check_in_frequency, s.previous_check_in_frequency),
    # Mood spans 1-5, so the largest possible drop is 4 points
    "mood_decline": lambda s: (s.previous_avg_mood - s.avg_mood) / 4 * 100,
    "low_mood": lambda s: (3 - s.avg_mood) / 2 * 100,
    "mood_volatility": lambda s: s.mood_volatility / 2 * 100,
    "high_craving_frequency": lambda s: s.craving_frequency * 10,
    "worsening_cravings": lambda s: (s.avg_craving_intensity - s.previous_avg_craving_intensity) / 9 * 100,
    "low_craving_success": lambda s: (1 - s.craving_success_rate) * 100,
    "high_hunger": lambda s: s.halt.hungry * 10,
    "high_anger": lambda s: s.halt.angry * 10,
    "high_loneliness": lambda s: s.halt.lonely * 10,
    "high_tiredness": lambda s: s.halt.tired * 10,
    "meeting_decline": lambda s: max(
        _drop(s.meeting_attendance, s.previous_meeting_attendance),
        (2 - s.meeting_attendance) / 2 * 100,
    ),
    "meditation_decline": lambda s: _drop(s.meditation_frequency, s.previous_meditation_frequency),
    "isolation": lambda s: s.isolation_score,
    "stress": lambda s: s.stress_score,
}


def factor_intensity(factor_id: str, snapshot: BehavioralSnapshot) -> float:
    """How strongly the triggering metric is expressed, on a 0-100 scale."""
    return round(clamp(_INTENSITY[factor_id](snapshot), 0.0, 100.0), 1)


def describe_factor(factor_id: str, s: BehavioralSnapshot) -> str:
    if factor_id == "check_in_decline":
        return f"{s.check_in_frequency} check-ins this week vs {s.previous_check_in_frequency} last week"
    if factor_id in ("mood_decline", "low_mood"):
        return f"Average mood {s.avg_mood:.1f}/5 (previous week {s.previous_avg_mood:.1f}/5)"
    if factor_id == "mood_volatility":
        return f"Mood standard deviation {s.mood_volatility:.2f}"
    if factor_id == "high_craving_frequency":
        return f"{s.craving_frequency} cravings in the last 7 days"
    if factor_id == "worsening_cravings":
        return (
            f"Average intensity {s.avg_craving_intensity:.1f}/10 "
            f"(previous week {s.previous_avg_craving_intensity:.1f}/10)"
        )
    if factor_id == "low_craving_success":
        return f"{s.craving_success_rate * 100:.0f}% of recent cravings overcome"
    if factor_id.startswith("high_"):
        component = {
            "high_hunger": "hungry", "high_anger": "angry",
            "high_loneliness": "lonely", "high_tiredness": "tired",
        }[factor_id]
        return f"Average HALT {component} rating {getattr(s.halt, component):.1f}/10"
    if factor_id == "meeting_decline":
        return f"{s.meeting_attendance} meetings this week vs {s.previous_meeting_attendance} last week"
    if factor_id == "meditation_decline":
        return f"{s.meditation_frequency} meditations this week vs {s.previous_meditation_frequency} last week"
    if factor_id == "isolation":
        return f"Isolation score {s.isolation_score:.0f}/100"
    return f"Stress score {s.stress_score:.0f}/100"


def build_risk_factors(
    snapshot: BehavioralSnapshot,
    contributions: Dict[str, int],
    cfg: SteadfastConfig,
) -> Tuple[RiskFactor, ...]:
    """Expand active contributions into RiskFactor records, largest first."""
    max_score = cfg.levels.max_score
    factors = []
    for factor_id, points in contributions.items():
        intensity = factor_intensity(factor_id, snapshot)
        factors.append(RiskFactor(
            id=factor_id,
            name=FACTOR_NAMES[factor_id],
            weight=round(points / max_score, 4),
            score=intensity,
            level=classify_level(intensity, cfg.levels),
            contribution=points,
            description=describe_factor(factor_id, snapshot),
            mitigation_actions=MITIGATIONS[factor_id],
        ))
    # Stable sort keeps evaluation order among equal contributions
    factors.sort(key=lambda f: f.contribution, reverse=True)
    return tuple(factors)
