"""
Event series as DataFrames, plus reference-time windowing.

Every analytical stage works on these frames. Building them never mutates
the EventLog; windows are boolean-mask views returned as new frames.

Windows filter on ``date`` (absolute UTC). Hour, weekday and calendar-day
grouping reads ``local_date``, the wall-clock time where the event happened.
"""

from typing import Any, NamedTuple, Optional

import numpy as np
import pandas as pd

from steadfast.models import (
    EventLog,
    HALT_KEYS,
    HALT_RANGE,
    INTENSITY_RANGE,
    MOOD_RANGE,
    parse_timestamp,
    parse_wall_clock,
)


CHECK_IN_COLUMNS = ("date", "local_date", "mood") + HALT_KEYS
CRAVING_COLUMNS = ("date", "local_date", "intensity", "trigger", "overcame")
MEETING_COLUMNS = ("date", "local_date", "type", "location")
MEDITATION_COLUMNS = ("date", "local_date", "duration", "type")

DAY = pd.Timedelta(days=1)


class EventFrames(NamedTuple):
    check_ins: pd.DataFrame
    cravings: pd.DataFrame
    meetings: pd.DataFrame
    meditations: pd.DataFrame

    def total_rows(self) -> int:
        return sum(len(df) for df in self)


def _frame(rows: list, columns: tuple) -> pd.DataFrame:
    df = pd.DataFrame(rows, columns=list(columns))
    for column in ("date", "local_date"):
        df[column] = pd.to_datetime(df[column])
    df.sort_values("date", inplace=True, kind="mergesort")
    df.reset_index(drop=True, inplace=True)
    return df


def _local(event) -> pd.Timestamp:
    return event.local_date if event.local_date is not None else event.date


def build_frames(log: EventLog) -> EventFrames:
    """Flatten an EventLog into four date-sorted DataFrames."""
    check_in_rows = []
    for c in log.check_ins:
        halt = c.halt
        check_in_rows.append((
            c.date,
            _local(c),
            np.nan if c.mood is None else c.mood,
            *(np.nan if halt is None else getattr(halt, k) for k in HALT_KEYS),
        ))
    check_ins = _frame(check_in_rows, CHECK_IN_COLUMNS)
    check_ins["mood"] = check_ins["mood"].astype(float).clip(*MOOD_RANGE)
    for key in HALT_KEYS:
        check_ins[key] = check_ins[key].astype(float).clip(*HALT_RANGE)

    cravings = _frame(
        [(c.date, _local(c), c.intensity, c.trigger, bool(c.overcame)) for c in log.cravings],
        CRAVING_COLUMNS,
    )
    cravings["intensity"] = cravings["intensity"].astype(float).clip(*INTENSITY_RANGE)
    cravings["overcame"] = cravings["overcame"].astype(bool)

    meetings = _frame([(m.date, _local(m), m.type, m.location) for m in log.meetings], MEETING_COLUMNS)

    meditations = _frame(
        [(m.date, _local(m), m.duration, m.type) for m in log.meditations],
        MEDITATION_COLUMNS,
    )
    meditations["duration"] = meditations["duration"].astype(float).clip(lower=0.0)

    return EventFrames(check_ins, cravings, meetings, meditations)


# ---------------------------------------------------------------------------
# Reference time
# ---------------------------------------------------------------------------

def resolve_now(now: Any = None) -> pd.Timestamp:
    """
    Normalize the reference timestamp to naive UTC.

    ``None`` means the current wall clock; pass an explicit value for
    deterministic results.
    """
    if now is None:
        return pd.Timestamp.now(tz="UTC").tz_localize(None)
    ts = parse_timestamp(now)
    if ts is None:
        raise ValueError(f"Invalid reference timestamp: {now!r}")
    return ts


def resolve_local_now(now: Any = None) -> pd.Timestamp:
    """
    Wall-clock form of the reference timestamp, used to decide which calendar
    day is "today". A UTC offset on ``now`` is dropped, not converted;
    ``None`` means the machine's local clock.
    """
    if now is None:
        return pd.Timestamp.now()
    ts = parse_wall_clock(now)
    if ts is None:
        raise ValueError(f"Invalid reference timestamp: {now!r}")
    return ts


# ---------------------------------------------------------------------------
# Windowing
# ---------------------------------------------------------------------------

def window(
    df: pd.DataFrame,
    now: pd.Timestamp,
    start_days: float,
    end_days: Optional[float] = None,
) -> pd.DataFrame:
    """
    Rows dated within [now - start_days, now - end_days).

    With ``end_days`` omitted the window runs up to and including ``now``;
    events dated after ``now`` are never counted.
    """
    start = now - start_days * DAY
    if end_days is None:
        mask = (df["date"] >= start) & (df["date"] <= now)
    else:
        mask = (df["date"] >= start) & (df["date"] < now - end_days * DAY)
    return df.loc[mask]


def until(df: pd.DataFrame, now: pd.Timestamp) -> pd.DataFrame:
    """All rows dated at or before ``now``."""
    return df.loc[df["date"] <= now]
