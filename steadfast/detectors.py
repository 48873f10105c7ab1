"""
Pattern detectors: craving timing peaks, meeting-day mood, check-in streaks.

Each detector is a pure function over event frames that returns either a
structured finding or None. No side effects.
"""

import calendar
import math
from typing import List, Optional, Tuple

import numpy as np
import pandas as pd

from steadfast.config import PatternParams, SteadfastConfig
from steadfast.frames import DAY, EventFrames, window
from steadfast.models import DetectedPattern, PatternDetection
from steadfast.signals import mean_or


DAY_NAMES = tuple(calendar.day_name)   # Monday .. Sunday, matching dt.dayofweek

# (label, first hour, last hour exclusive)
DAY_PERIODS = (
    ("Morning (6am-12pm)", 6, 12),
    ("Afternoon (12pm-6pm)", 12, 18),
    ("Evening (6pm-12am)", 18, 24),
    ("Night (12am-6am)", 0, 6),
)


# ---------------------------------------------------------------------------
# Streaks
# ---------------------------------------------------------------------------

def _check_in_days(check_ins: pd.DataFrame) -> pd.DatetimeIndex:
    return pd.DatetimeIndex(check_ins["local_date"].dt.normalize().unique()).sort_values()


def streak_lengths(check_ins: pd.DataFrame) -> List[int]:
    """Lengths of every run of consecutive check-in days longer than one day."""
    days = _check_in_days(check_ins)
    if len(days) == 0:
        return []
    streaks = []
    current = 1
    for gap in np.diff(days.values).astype("timedelta64[D]").astype(int):
        if gap == 1:
            current += 1
        else:
            if current > 1:
                streaks.append(current)
            current = 1
    if current > 1:
        streaks.append(current)
    return streaks


def current_streak(check_ins: pd.DataFrame, local_now: pd.Timestamp) -> int:
    """Consecutive local check-in days ending on the reference day (0 if none today)."""
    days = set(_check_in_days(check_ins))
    day = local_now.normalize()
    streak = 0
    while day in days:
        streak += 1
        day -= DAY
    return streak


# ---------------------------------------------------------------------------
# Craving timing peaks
# ---------------------------------------------------------------------------

def day_of_week_peak(cravings: pd.DataFrame, p: PatternParams) -> Optional[Tuple[int, int]]:
    """
    (weekday index, count) of the busiest craving weekday, when it exceeds
    ``peak_ratio`` x the mean over weekdays that have any cravings.
    """
    if cravings.empty:
        return None
    counts = cravings.groupby(cravings["local_date"].dt.dayofweek).size()
    peak_day = int(counts.idxmax())
    peak_count = int(counts.max())
    if peak_count > counts.mean() * p.peak_ratio:
        return peak_day, peak_count
    return None


def time_of_day_peak(cravings: pd.DataFrame, p: PatternParams) -> Optional[Tuple[str, int]]:
    """(period label, count) of the busiest period of the day, if it stands out."""
    if cravings.empty:
        return None
    hours = cravings["local_date"].dt.hour
    counts = pd.Series(
        {label: int(((hours >= lo) & (hours < hi)).sum()) for label, lo, hi in DAY_PERIODS}
    )
    peak_label = counts.idxmax()
    peak_count = int(counts.max())
    if peak_count > counts.mean() * p.peak_ratio:
        return peak_label, peak_count
    return None


# ---------------------------------------------------------------------------
# Meeting-day mood
# ---------------------------------------------------------------------------

def meeting_day_mood(
    check_ins: pd.DataFrame,
    meetings: pd.DataFrame,
    p: PatternParams,
) -> Optional[Tuple[float, int, str]]:
    """
    Compare mood on meeting days against other days.

    Returns (normalized difference in [-1, 1], meeting-day check-ins,
    description), or None when either group is empty.
    """
    moods = check_ins.dropna(subset=["mood"])
    meeting_days = meetings["local_date"].dt.normalize().unique()
    on_meeting_day = moods["local_date"].dt.normalize().isin(meeting_days)

    with_meetings = moods.loc[on_meeting_day, "mood"]
    without_meetings = moods.loc[~on_meeting_day, "mood"]
    if with_meetings.empty or without_meetings.empty:
        return None

    avg_with = mean_or(with_meetings, 0.0)
    avg_without = mean_or(without_meetings, 0.0)
    diff = avg_with - avg_without
    correlation = float(np.clip(diff / p.mood_scale, -1.0, 1.0))
    description = (
        f"Mood {'higher' if diff > 0 else 'lower'} on days with meetings "
        f"({avg_with:.1f} vs {avg_without:.1f})"
    )
    return correlation, int(len(with_meetings)), description


# ---------------------------------------------------------------------------
# Aggregate detection
# ---------------------------------------------------------------------------

def detect_patterns_frames(
    frames: EventFrames,
    now: pd.Timestamp,
    cfg: SteadfastConfig,
) -> PatternDetection:
    """Run every detector over the pattern lookback window."""
    p = cfg.patterns
    lookback = cfg.windows.patterns
    cravings = window(frames.cravings, now, lookback)
    check_ins = window(frames.check_ins, now, lookback)
    meetings = window(frames.meetings, now, lookback)

    patterns = []

    dow = day_of_week_peak(cravings, p)
    if dow is not None:
        day, count = dow
        patterns.append(DetectedPattern(
            type="day",
            pattern=f"Peak cravings on {DAY_NAMES[day]}s",
            frequency=count,
            impact="negative",
            description=f"{count} of {len(cravings)} cravings fell on a {DAY_NAMES[day]}",
            correlation=p.day_of_week_correlation,
        ))

    tod = time_of_day_peak(cravings, p)
    if tod is not None:
        period, count = tod
        patterns.append(DetectedPattern(
            type="time",
            pattern=f"Peak cravings during {period}",
            frequency=count,
            impact="negative",
            description=f"Most cravings occur during {period} hours",
            correlation=p.time_of_day_correlation,
        ))

    mood = meeting_day_mood(check_ins, meetings, p)
    if mood is not None and abs(mood[0]) > p.meeting_mood_min:
        correlation, occurrences, description = mood
        patterns.append(DetectedPattern(
            type="mood",
            pattern=(
                "Meeting attendance improves mood" if correlation > 0
                else "Low meeting attendance correlates with lower mood"
            ),
            frequency=occurrences,
            impact="positive" if correlation > 0 else "negative",
            description=description,
            correlation=round(correlation, 4),
        ))

    streaks = streak_lengths(check_ins)
    avg_streak = int(math.floor(sum(streaks) / len(streaks) + 0.5)) if streaks else 0
    if avg_streak > p.streak_min_days:
        patterns.append(DetectedPattern(
            type="behavior",
            pattern="Strong check-in habit",
            frequency=len(streaks),
            impact="positive",
            description=f"Average streak length: {avg_streak} days",
            correlation=p.streak_correlation,
        ))

    confidence = 0.0
    if patterns:
        confidence = float(np.clip(np.mean([abs(x.correlation) for x in patterns]), 0.0, 1.0))

    return PatternDetection(
        patterns=tuple(patterns),
        confidence=round(confidence, 4),
        timeframe=p.timeframe,
    )


def predict_high_risk_date(
    frames: EventFrames,
    now: pd.Timestamp,
    cfg: SteadfastConfig,
    local_now: Optional[pd.Timestamp] = None,
) -> Optional[pd.Timestamp]:
    """
    First local date 3-7 days out that falls on the peak craving weekday,
    if any. ``local_now`` picks "today"; it defaults to ``now``.
    """
    p = cfg.patterns
    peak = day_of_week_peak(window(frames.cravings, now, cfg.windows.patterns), p)
    if peak is None:
        return None
    today = (now if local_now is None else local_now).normalize()
    for offset in range(p.high_risk_from_days, p.high_risk_to_days + 1):
        candidate = today + offset * DAY
        if candidate.dayofweek == peak[0]:
            return candidate
    return None
