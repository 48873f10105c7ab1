"""
Warnings and interventions derived from active risk factors.

Warnings are one-per-factor (several factors can share one warning) with a
fixed confidence. Interventions are generated independently from the
snapshot; the emergency-support intervention is always present. Both lists
are stable-sorted by a fixed rank map, then capped.
"""

from typing import Iterable, Tuple

from steadfast.config import SteadfastConfig
from steadfast.models import BehavioralSnapshot, Intervention, RiskFactor, RiskWarning


SEVERITY_RANK = {"critical": 4, "high": 3, "medium": 2, "low": 1}
PRIORITY_RANK = {"immediate": 4, "high": 3, "medium": 2, "low": 1}


def sort_warnings(warnings: Iterable[RiskWarning]) -> list:
    return sorted(warnings, key=lambda w: SEVERITY_RANK[w.severity], reverse=True)


def sort_interventions(interventions: Iterable[Intervention]) -> list:
    return sorted(interventions, key=lambda i: PRIORITY_RANK[i.priority], reverse=True)


# ---------------------------------------------------------------------------
# Warnings
# ---------------------------------------------------------------------------

def generate_warnings(
    active: set,
    snapshot: BehavioralSnapshot,
    cfg: SteadfastConfig,
) -> list:
    s = snapshot
    warnings = []

    if "check_in_decline" in active:
        warnings.append(RiskWarning(
            id="check-in-decline",
            severity="high",
            title="Check-in Frequency Declining",
            description=(
                "You've been checking in less frequently this week compared to last week. "
                "This often precedes increased risk."
            ),
            detected_pattern="Declining engagement pattern detected",
            confidence=0.85,
            trigger_factors=("Reduced accountability", "Possible avoidance behavior"),
        ))

    if "mood_decline" in active or "low_mood" in active:
        warnings.append(RiskWarning(
            id="mood-warning",
            severity="critical" if s.avg_mood < cfg.interventions.critical_mood else "high",
            title="Mood Declining",
            description=(
                f"Your average mood has dropped to {s.avg_mood:.1f}/5. "
                "Declining mood is a significant risk factor."
            ),
            detected_pattern="Negative mood trend detected",
            confidence=0.90,
            trigger_factors=("Depression risk", "Emotional vulnerability"),
        ))

    if "worsening_cravings" in active:
        warnings.append(RiskWarning(
            id="craving-intensity",
            severity="critical",
            title="Craving Intensity Increasing",
            description=(
                "Your cravings are becoming more intense. "
                "This pattern often indicates heightened risk."
            ),
            detected_pattern="Escalating urge pattern",
            confidence=0.92,
            trigger_factors=("Increased urge strength", "Possible trigger exposure"),
        ))

    if "low_craving_success" in active:
        warnings.append(RiskWarning(
            id="low-success-rate",
            severity="critical",
            title="Craving Success Rate Dropping",
            description=(
                f"You're overcoming only {s.craving_success_rate * 100:.0f}% of cravings. "
                "Your coping strategies may need reinforcement."
            ),
            detected_pattern="Decreasing coping effectiveness",
            confidence=0.88,
            trigger_factors=("Coping fatigue", "Strategy ineffectiveness"),
        ))

    if "high_craving_frequency" in active:
        warnings.append(RiskWarning(
            id="craving-frequency",
            severity="high",
            title="Frequent Cravings",
            description=(
                f"You've logged {s.craving_frequency} cravings in the last week. "
                "Frequent urges wear down coping capacity."
            ),
            detected_pattern="Elevated urge frequency",
            confidence=0.80,
            trigger_factors=("Trigger exposure", "Coping fatigue"),
        ))

    if "high_loneliness" in active:
        warnings.append(RiskWarning(
            id="loneliness",
            severity="high",
            title="High Loneliness Detected",
            description=(
                "Your HALT assessments show elevated loneliness. "
                "Isolation is a major relapse trigger."
            ),
            detected_pattern="Social withdrawal pattern",
            confidence=0.82,
            trigger_factors=("Social isolation", "Lack of support connection"),
        ))

    if "meeting_decline" in active:
        warnings.append(RiskWarning(
            id="meeting-decline",
            severity="high",
            title="Meeting Attendance Dropping",
            description=(
                "You've attended fewer support meetings this week. "
                "Reduced support correlates with increased risk."
            ),
            detected_pattern="Support disengagement",
            confidence=0.80,
            trigger_factors=("Reduced support network", "Isolation tendency"),
        ))

    if "stress" in active:
        warnings.append(RiskWarning(
            id="high-stress",
            severity="high",
            title="Elevated Stress Levels",
            description="Your HALT data indicates high anger and tiredness, suggesting elevated stress.",
            detected_pattern="Chronic stress pattern",
            confidence=0.75,
            trigger_factors=("Stress accumulation", "Poor self-care"),
        ))

    if "mood_volatility" in active:
        warnings.append(RiskWarning(
            id="mood-volatility",
            severity="medium",
            title="Mood Swings Detected",
            description=(
                f"Your mood has varied widely this week (std {s.mood_volatility:.1f}). "
                "Emotional swings can lower resistance to urges."
            ),
            detected_pattern="Emotional instability",
            confidence=0.70,
            trigger_factors=("Emotional dysregulation",),
        ))

    if "meditation_decline" in active:
        warnings.append(RiskWarning(
            id="meditation-decline",
            severity="low",
            title="Meditation Practice Slipping",
            description="You've meditated less this week than last week.",
            detected_pattern="Self-care routine disruption",
            confidence=0.65,
            trigger_factors=("Routine disruption",),
        ))

    if "isolation" in active:
        warnings.append(RiskWarning(
            id="isolation",
            severity="critical",
            title="Social Isolation Detected",
            description="Multiple indicators suggest you may be withdrawing from support systems.",
            detected_pattern="Isolation spiral",
            confidence=0.88,
            trigger_factors=("Social withdrawal", "Loneliness", "Shame spiral"),
        ))

    return sort_warnings(warnings)


# ---------------------------------------------------------------------------
# Interventions
# ---------------------------------------------------------------------------

EMERGENCY_SUPPORT = Intervention(
    id="emergency-support",
    priority="immediate",
    title="Contact Your Support Network NOW",
    description="Reach out to your sponsor, therapist, or trusted friend immediately.",
    actions=(
        "Call your sponsor right now",
        "Text your accountability partner",
        "Attend an emergency meeting today",
        "Call recovery hotline: 1-800-662-4357",
    ),
    effectiveness=0.95,
    time_estimate="5-10 minutes",
)


def generate_interventions(snapshot: BehavioralSnapshot, cfg: SteadfastConfig) -> list:
    s = snapshot
    it = cfg.interventions
    interventions = [EMERGENCY_SUPPORT]

    if s.craving_frequency > it.craving_frequency or s.craving_success_rate < it.craving_success_rate:
        interventions.append(Intervention(
            id="craving-management",
            priority="immediate",
            title="Intensive Craving Management",
            description="Your craving patterns suggest you need immediate coping skill reinforcement.",
            actions=(
                "Practice 10-minute urge surfing meditation NOW",
                "Use HALT check-in before each craving",
                "Call sponsor when craving hits (don't wait)",
                "Review your relapse prevention plan",
                "Attend extra meeting today",
            ),
            effectiveness=0.85,
            time_estimate="30-60 minutes today",
        ))

    if s.meeting_attendance < it.min_meetings:
        interventions.append(Intervention(
            id="increase-meetings",
            priority="high",
            title="Increase Meeting Attendance",
            description="Your meeting attendance has dropped. Research shows this significantly increases risk.",
            actions=(
                "Schedule at least 3 meetings this week",
                "Find an online meeting if in-person is difficult",
                "Arrive early and stay late to connect",
                "Exchange numbers with 2 new people",
                "Commit to 90-in-90 if needed",
            ),
            effectiveness=0.80,
            time_estimate="2-3 hours this week",
        ))

    if s.isolation_score > it.isolation:
        interventions.append(Intervention(
            id="combat-isolation",
            priority="high",
            title="Break the Isolation Cycle",
            description="Isolation is dangerous. You need immediate social connection.",
            actions=(
                "Text 3 people from your support network today",
                "Attend a meeting specifically to connect",
                "Schedule coffee with sponsor this week",
                "Join a recovery-focused online community",
                "Call someone instead of texting",
            ),
            effectiveness=0.85,
            time_estimate="1-2 hours over 3 days",
        ))

    if s.avg_mood < it.low_mood:
        interventions.append(Intervention(
            id="mood-support",
            priority="high",
            title="Address Low Mood",
            description="Your mood has been consistently low. This requires attention.",
            actions=(
                "Schedule therapy appointment this week",
                "Practice gratitude journaling daily",
                "Get 30 minutes of exercise today",
                "Check sleep quality (aim for 7-8 hours)",
                "Consider medication evaluation if needed",
            ),
            effectiveness=0.75,
            time_estimate="Daily practice, 20-30 min",
        ))

    if s.meditation_frequency < it.min_meditations:
        interventions.append(Intervention(
            id="mindfulness-practice",
            priority="medium",
            title="Restart Meditation Practice",
            description="Daily meditation significantly reduces relapse risk.",
            actions=(
                "Start with just 5 minutes daily",
                "Use guided meditation apps",
                "Try breathing exercises when stressed",
                "Practice mindfulness during daily activities",
                "Join a meditation group",
            ),
            effectiveness=0.70,
            time_estimate="5-20 minutes daily",
        ))

    if s.stress_score > it.stress:
        interventions.append(Intervention(
            id="stress-management",
            priority="high",
            title="Urgent Stress Management",
            description="Your stress levels are dangerously high.",
            actions=(
                "Practice box breathing (4-4-4-4) NOW",
                "Take a 15-minute walk outside",
                "Write down stressors and action plans",
                "Delegate or postpone non-critical tasks",
                "Schedule self-care time daily",
            ),
            effectiveness=0.78,
            time_estimate="15-30 minutes today",
        ))

    if s.check_in_decline:
        interventions.append(Intervention(
            id="resume-checkins",
            priority="medium",
            title="Resume Daily Check-ins",
            description="Daily check-ins keep you accountable and aware.",
            actions=(
                "Set daily reminder for check-in",
                "Make it first thing in morning",
                "Share check-ins with accountability partner",
                "Track HALT daily for awareness",
                "Review check-in trends weekly",
            ),
            effectiveness=0.72,
            time_estimate="2-5 minutes daily",
        ))

    return sort_interventions(interventions)


def generate(
    factors: Iterable[RiskFactor],
    snapshot: BehavioralSnapshot,
    cfg: SteadfastConfig,
) -> Tuple[Tuple[RiskWarning, ...], Tuple[Intervention, ...]]:
    """Ranked, capped warnings and interventions for the active factors."""
    active = {f.id for f in factors}
    warnings = generate_warnings(active, snapshot, cfg)
    interventions = generate_interventions(snapshot, cfg)
    return (
        tuple(warnings[: cfg.limits.warnings]),
        tuple(interventions[: cfg.limits.interventions]),
    )
