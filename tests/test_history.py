"""Similar past weeks and what followed them."""

import pandas as pd

from steadfast import analyze_snapshot
from steadfast.frames import build_frames
from steadfast.history import find_similar_periods, similarity
from steadfast.models import BehavioralSnapshot, EventLog

from tests.helpers import CFG, NOW, ago, check_ins, meetings


def steady_log():
    return EventLog.from_dict({
        "checkIns": check_ins(range(35), mood=3),
        "meetings": meetings(range(0, 35, 2)),
        "relapses": [{"date": ago(10), "triggers": ["stress"]}],
    })


def test_similarity_bounds():
    assert similarity(BehavioralSnapshot(), BehavioralSnapshot()) == 1.0
    far = BehavioralSnapshot(avg_mood=5.0, craving_frequency=10, craving_success_rate=0.0,
                             meeting_attendance=7, meditation_frequency=7,
                             isolation_score=100.0, stress_score=100.0)
    near_zero = BehavioralSnapshot(avg_mood=1.0, craving_success_rate=1.0)
    assert 0.0 <= similarity(far, near_zero) < 0.6


def test_steady_weeks_match_with_outcomes():
    log = steady_log()
    current = analyze_snapshot(log, now=NOW)
    matches = find_similar_periods(build_frames(log), log.relapses, current, NOW, CFG)
    assert len(matches) == CFG.limits.similar_patterns
    assert [m.outcome for m in matches] == ["success", "relapse", "success"]
    assert matches[0].date == NOW - pd.Timedelta(days=7)
    assert matches[1].date == NOW - pd.Timedelta(days=14)
    assert all(m.similarity == 1.0 for m in matches)
    assert "Attended 4 meetings" in matches[0].what_helped


def test_no_history_no_matches():
    log = EventLog.from_dict({"checkIns": check_ins([0, 1])})
    current = analyze_snapshot(log, now=NOW)
    assert find_similar_periods(build_frames(log), (), current, NOW, CFG) == ()
