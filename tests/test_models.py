"""Lenient event ingestion and serialization."""

import json

import pandas as pd

from steadfast.models import CheckIn, Craving, EventLog, Meeting, MeditationSession, coerce_events

from tests.helpers import ago


def test_check_in_without_date_dropped():
    assert CheckIn.from_dict({"mood": 3}) is None
    assert CheckIn.from_dict({"date": "not a date", "mood": 3}) is None


def test_mood_clamped_to_scale():
    assert CheckIn.from_dict({"date": ago(1), "mood": 11}).mood == 5.0
    assert CheckIn.from_dict({"date": ago(1), "mood": -2}).mood == 1.0


def test_invalid_mood_kept_as_missing():
    c = CheckIn.from_dict({"date": ago(1), "mood": "great"})
    assert c is not None and c.mood is None


def test_partial_halt_dropped():
    c = CheckIn.from_dict({"date": ago(1), "halt": {"hungry": 3, "angry": 4}})
    assert c.halt is None


def test_halt_clamped():
    c = CheckIn.from_dict({"date": ago(1), "halt": {"hungry": 0, "angry": 12, "lonely": 5, "tired": 5}})
    assert c.halt.hungry == 1.0 and c.halt.angry == 10.0


def test_craving_requires_intensity():
    assert Craving.from_dict({"date": ago(1), "trigger": "stress"}) is None


def test_craving_string_booleans():
    assert Craving.from_dict({"date": ago(1), "intensity": 5, "overcame": "false"}).overcame is False
    assert Craving.from_dict({"date": ago(1), "intensity": 5, "overcame": "true"}).overcame is True


def test_negative_duration_floored():
    assert MeditationSession.from_dict({"date": ago(1), "duration": -10}).duration == 0.0


def test_event_log_accepts_camel_case_and_garbage():
    log = EventLog.from_dict({
        "checkIns": [{"date": ago(1), "mood": 3}, None, 7, {"date": None}],
        "cravings": "oops",
        "meetings": [{"date": ago(2)}],
        "sobrietyDate": "2025-01-01",
    })
    assert len(log.check_ins) == 1
    assert log.cravings == ()
    assert len(log.meetings) == 1
    assert log.sobriety_date is not None


def test_coerce_none_is_empty():
    assert coerce_events(None).is_empty


def test_timezone_offsets_normalized_to_utc():
    c = CheckIn.from_dict({"date": "2026-03-10T10:00:00+02:00"})
    assert c.date.tzinfo is None
    assert c.date.hour == 8


def test_local_wall_clock_kept_beside_utc():
    c = Craving.from_dict({"date": "2026-03-10T21:30:00-08:00", "intensity": 5})
    assert c.date == pd.Timestamp("2026-03-11T05:30:00")
    assert c.local_date == pd.Timestamp("2026-03-10T21:30:00")

    naive = Meeting.from_dict({"date": "2026-03-10T19:00:00"})
    assert naive.local_date == naive.date

    explicit = CheckIn.from_dict({"date": "2026-03-11T05:30:00", "localDate": "2026-03-10T21:30:00"})
    assert explicit.local_date.day == 10


def test_event_log_round_trips_through_json():
    log = EventLog.from_dict({
        "checkIns": [{"date": "2026-03-10T21:30:00-08:00", "mood": 4, "halt": {"hungry": 2, "angry": 3, "lonely": 4, "tired": 5}}],
        "cravings": [{"date": ago(2), "intensity": 6, "trigger": "stress", "overcame": True}],
    })
    restored = EventLog.from_dict(json.loads(json.dumps(log.to_dict())))
    assert restored == log
