"""Shared builders for engine tests."""

import pandas as pd

from steadfast.config import SteadfastConfig
from steadfast.frames import build_frames
from steadfast.models import EventLog

CFG = SteadfastConfig()

# Sunday evening
NOW = pd.Timestamp("2026-03-15T20:00:00")


def ago(days: float, hours: float = 0) -> str:
    """ISO timestamp ``days`` (+ ``hours``) before NOW."""
    return (NOW - pd.Timedelta(days=days, hours=hours)).isoformat()


def approx(a, b, tol=1e-6):
    assert abs(a - b) < tol, f"{a} != {b} (tol={tol})"


def frames_of(**series):
    return build_frames(EventLog.from_dict(series))


def check_ins(days, mood=None, halt=None):
    rows = []
    for d in days:
        row = {"date": ago(d)}
        if mood is not None:
            row["mood"] = mood
        if halt is not None:
            row["halt"] = {"hungry": halt, "angry": halt, "lonely": halt, "tired": halt}
        rows.append(row)
    return rows


def cravings(days, intensity=5, overcame=True, trigger="stress"):
    return [
        {"date": ago(d), "intensity": intensity, "trigger": trigger, "overcame": overcame}
        for d in days
    ]


def meetings(days):
    return [{"date": ago(d), "type": "AA", "location": "Hall"} for d in days]


def meditations(days, duration=10):
    return [{"date": ago(d), "duration": duration, "type": "guided"} for d in days]


def high_risk_events():
    """15 intense, failed cravings; mood 1-2; no meetings or meditation."""
    return {
        "checkIns": [
            {"date": ago(d), "mood": 1 if d % 2 else 2} for d in range(7)
        ],
        "cravings": [
            {"date": ago(i * 0.4), "intensity": 8 + i % 3, "trigger": "stress", "overcame": False}
            for i in range(15)
        ],
        "meetings": [],
        "meditations": [],
    }


def low_risk_events():
    """30 days of mood 5 with calm HALT, 20 meetings, 25 meditations."""
    return {
        "checkIns": check_ins(range(30), mood=5, halt=2),
        "cravings": [],
        "meetings": meetings([i * 1.5 for i in range(20)]),
        "meditations": meditations([i * 1.2 for i in range(25)]),
    }
