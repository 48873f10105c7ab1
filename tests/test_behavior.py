"""Behavioral snapshot windows and composites."""

from steadfast.behavior import analyze_behavior

from tests.helpers import CFG, NOW, ago, approx, check_ins, cravings, frames_of, meetings


def snapshot(**series):
    return analyze_behavior(frames_of(**series), NOW, CFG)


def test_empty_input_uses_neutral_defaults():
    s = snapshot()
    assert s.check_in_frequency == 0
    assert s.avg_mood == 3.0
    assert s.mood_trend == "stable"
    assert s.craving_success_rate == 1.0
    assert s.halt.lonely == 5.0
    assert s.mood_volatility == 0.0
    assert not s.check_in_decline


def test_recent_window_includes_boundary_and_excludes_future():
    s = snapshot(checkIns=check_ins([0, 3, 7, -1], mood=4))
    assert s.check_in_frequency == 3


def test_check_in_decline():
    s = snapshot(checkIns=check_ins([1, 3, 5]) + check_ins(range(8, 14)))
    assert s.previous_check_in_frequency == 6
    assert s.check_in_decline


def test_mood_trend_and_volatility():
    s = snapshot(checkIns=check_ins([1], mood=1) + check_ins([2], mood=3) + check_ins([8, 9], mood=4))
    approx(s.avg_mood, 2.0)
    approx(s.previous_avg_mood, 4.0)
    assert s.mood_trend == "declining"
    approx(s.mood_volatility, 1.0)


def test_halt_averages_only_use_assessed_check_ins():
    s = snapshot(checkIns=check_ins([1], halt=8) + check_ins([2]))
    approx(s.halt.hungry, 8.0)
    approx(s.halt.tired, 8.0)
    # (8 + 8) * 5, no volatility
    approx(s.stress_score, 80.0)


def test_craving_trend_and_success():
    s = snapshot(cravings=(
        cravings([1, 2], intensity=9, overcame=False)
        + cravings([3], intensity=6, overcame=True)
        + cravings([9, 10], intensity=3)
    ))
    assert s.craving_frequency == 3
    assert s.craving_intensity_trend == "worsening"
    approx(s.craving_success_rate, 1 / 3)


def test_isolation_clamped_at_zero():
    s = snapshot(
        checkIns=check_ins([1], halt=1),
        meetings=meetings([i * 0.4 for i in range(15)]),
    )
    assert s.meeting_attendance == 15
    assert s.isolation_score == 0.0


def test_isolation_clamped_at_hundred():
    s = snapshot(checkIns=check_ins([1], halt=10))
    assert s.isolation_score == 100.0


def test_meeting_decline():
    s = snapshot(meetings=meetings([1] + [8, 9, 10, 11]))
    assert s.meeting_decline
    assert s.previous_meeting_attendance == 4


def test_does_not_mutate_frames():
    frames = frames_of(checkIns=check_ins(range(10), mood=4))
    before = frames.check_ins.copy()
    analyze_behavior(frames, NOW, CFG)
    assert frames.check_ins.equals(before)


def test_timestamp_exactly_seven_days_ago_is_recent():
    s = snapshot(meetings=[{"date": ago(7)}])
    assert s.meeting_attendance == 1
    assert s.previous_meeting_attendance == 0
