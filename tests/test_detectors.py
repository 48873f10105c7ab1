"""Craving timing, meeting-day mood and check-in streaks."""

import pandas as pd

from steadfast import detect_patterns, predict_risk
from steadfast.detectors import current_streak, predict_high_risk_date, streak_lengths

from tests.helpers import CFG, NOW, check_ins, frames_of, meetings

FRIDAY_EVENINGS = [
    {"date": f"{day}T21:00:00", "intensity": 7, "overcame": True}
    for day in ("2026-03-13", "2026-03-06", "2026-02-27", "2026-02-20", "2026-03-09", "2026-03-10")
]


def test_day_and_time_peaks():
    result = detect_patterns({"cravings": FRIDAY_EVENINGS}, now=NOW)
    by_type = {p.type: p for p in result.patterns}
    assert by_type["day"].pattern == "Peak cravings on Fridays"
    assert by_type["day"].frequency == 4
    assert by_type["time"].pattern == "Peak cravings during Evening (6pm-12am)"
    assert by_type["time"].frequency == 6
    assert result.timeframe == "Last 90 days"
    assert 0.0 <= result.confidence <= 1.0


def test_no_peak_when_cravings_are_spread():
    spread = [
        {"date": f"2026-03-{day:02d}T{hour:02d}:00:00", "intensity": 5}
        for day, hour in ((9, 8), (10, 14), (11, 20), (12, 2))
    ]
    result = detect_patterns({"cravings": spread}, now=NOW)
    assert result.patterns == ()
    assert result.confidence == 0.0


def test_meeting_day_mood_pattern():
    events = {
        "checkIns": check_ins([0, 2, 4], mood=5) + check_ins([1, 3, 5], mood=2),
        "meetings": meetings([0, 2, 4]),
    }
    result = detect_patterns(events, now=NOW)
    assert len(result.patterns) == 1
    pattern = result.patterns[0]
    assert pattern.type == "mood"
    assert pattern.impact == "positive"
    assert pattern.frequency == 3
    assert pattern.correlation == 0.6
    assert result.confidence == 0.6


def test_check_in_habit():
    result = detect_patterns({"checkIns": check_ins(range(10), mood=4)}, now=NOW)
    habit = [p for p in result.patterns if p.type == "behavior"][0]
    assert habit.description == "Average streak length: 10 days"


def test_streak_lengths_skip_single_days():
    frames = frames_of(checkIns=[
        {"date": d} for d in (
            "2026-03-01", "2026-03-02", "2026-03-03", "2026-03-05", "2026-03-07", "2026-03-08",
            "2026-03-08T18:00:00",
        )
    ])
    assert streak_lengths(frames.check_ins) == [3, 2]


def test_current_streak_must_include_today():
    frames = frames_of(checkIns=check_ins([0, 1, 3]))
    assert current_streak(frames.check_ins, NOW) == 2
    frames = frames_of(checkIns=check_ins([1, 2]))
    assert current_streak(frames.check_ins, NOW) == 0


def test_high_risk_date_is_next_peak_weekday():
    frames = frames_of(cravings=FRIDAY_EVENINGS)
    assert predict_high_risk_date(frames, NOW, CFG) == pd.Timestamp("2026-03-20")
    assert predict_high_risk_date(frames_of(), NOW, CFG) is None


def test_empty_input():
    result = detect_patterns(None, now=NOW)
    assert result.patterns == ()
    assert result.confidence == 0.0


# Pacific time: these evenings are already the next morning in UTC
PACIFIC_NOON = "2026-03-15T12:00:00-08:00"


def test_time_of_day_uses_local_clock():
    evenings = [
        {"date": f"2026-03-{day:02d}T20:00:00-08:00", "intensity": 6, "overcame": True}
        for day in range(1, 11)
    ]
    result = detect_patterns({"cravings": evenings}, now=PACIFIC_NOON)
    patterns = [p.pattern for p in result.patterns]
    assert "Peak cravings during Evening (6pm-12am)" in patterns
    assert not any("Night" in p for p in patterns)


def test_high_risk_date_uses_local_weekday():
    fridays = [
        {"date": f"{day}T21:00:00-08:00", "intensity": 7, "overcame": True}
        for day in ("2026-03-13", "2026-03-06", "2026-02-27", "2026-02-20", "2026-03-09", "2026-03-10")
    ]
    result = predict_risk({"cravings": fridays}, now=PACIFIC_NOON)
    assert result.predicted_date == pd.Timestamp("2026-03-20")
    patterns = detect_patterns({"cravings": fridays}, now=PACIFIC_NOON).patterns
    assert patterns[0].pattern == "Peak cravings on Fridays"


def test_meeting_day_mood_uses_local_calendar_day():
    events = {
        "checkIns": [
            {"date": f"2026-03-{day}T18:00:00-08:00", "mood": mood}
            for day, mood in (("10", 5), ("11", 2), ("12", 5), ("13", 2))
        ],
        "meetings": [{"date": f"2026-03-{day}T09:00:00-08:00"} for day in ("10", "12")],
    }
    result = detect_patterns(events, now=PACIFIC_NOON)
    assert len(result.patterns) == 1
    assert result.patterns[0].impact == "positive"
    assert result.patterns[0].correlation == 0.6


def test_current_streak_counts_local_days():
    frames = frames_of(checkIns=[
        {"date": "2026-03-14T09:00:00-08:00"},
        {"date": "2026-03-15T09:00:00-08:00"},
    ])
    assert current_streak(frames.check_ins, pd.Timestamp("2026-03-15T20:00:00")) == 2
