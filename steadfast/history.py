"""
Similar historical periods.

Re-derives the behavioral snapshot at weekly steps back in time and
compares each to the current one. For every close match, the week that
followed it tells us how a similar situation played out before.
"""

import logging
from typing import Sequence, Tuple

import numpy as np
import pandas as pd

from steadfast.behavior import analyze_behavior
from steadfast.config import SteadfastConfig
from steadfast.frames import DAY, EventFrames
from steadfast.models import BehavioralSnapshot, Relapse, SimilarPattern

logger = logging.getLogger(__name__)


def _features(s: BehavioralSnapshot) -> np.ndarray:
    """Snapshot projected onto [0, 1] features."""
    return np.clip(np.array([
        (s.avg_mood - 1) / 4,
        s.craving_frequency / 10,
        s.craving_success_rate,
        s.meeting_attendance / 7,
        s.meditation_frequency / 7,
        s.isolation_score / 100,
        s.stress_score / 100,
    ], dtype=np.float64), 0.0, 1.0)


def similarity(a: BehavioralSnapshot, b: BehavioralSnapshot) -> float:
    """1 - root-mean-square feature distance, in [0, 1]."""
    diff = _features(a) - _features(b)
    return float(np.clip(1.0 - np.sqrt(np.mean(diff ** 2)), 0.0, 1.0))


def _between(df: pd.DataFrame, start: pd.Timestamp, end: pd.Timestamp) -> pd.DataFrame:
    """Rows in (start, end]."""
    return df.loc[(df["date"] > start) & (df["date"] <= end)]


def _has_activity(frames: EventFrames, ref: pd.Timestamp, days: int) -> bool:
    return any(not _between(df, ref - days * DAY, ref).empty for df in frames)


def _outcome(
    frames: EventFrames,
    relapses: Sequence[Relapse],
    ref: pd.Timestamp,
    cfg: SteadfastConfig,
) -> Tuple[str, Tuple[str, ...], Tuple[str, ...]]:
    """Classify the week after ``ref`` and note what helped or didn't."""
    end = ref + cfg.windows.recent * DAY
    cravings = _between(frames.cravings, ref, end)
    meetings = _between(frames.meetings, ref, end)
    meditations = _between(frames.meditations, ref, end)
    check_ins = _between(frames.check_ins, ref, end)

    relapsed = any(ref < r.date <= end for r in relapses)
    rate = float(cravings["overcame"].mean()) if not cravings.empty else 1.0

    if relapsed:
        outcome = "relapse"
    elif rate >= cfg.similarity.success_rate:
        outcome = "success"
    else:
        outcome = "struggle"

    helped = []
    if outcome == "success":
        if len(meetings):
            helped.append(f"Attended {len(meetings)} meetings")
        if len(meditations):
            helped.append(f"Meditated {len(meditations)} times")
        if len(check_ins):
            helped.append(f"Checked in {len(check_ins)} times")

    didnt_help = []
    if outcome != "success":
        failed = cravings.loc[~cravings["overcame"], "trigger"]
        didnt_help = [f"Unmanaged trigger: {t}" for t in sorted(set(failed))]

    return outcome, tuple(helped), tuple(didnt_help)


def find_similar_periods(
    frames: EventFrames,
    relapses: Sequence[Relapse],
    current: BehavioralSnapshot,
    now: pd.Timestamp,
    cfg: SteadfastConfig,
) -> Tuple[SimilarPattern, ...]:
    """Past weekly reference points whose snapshot resembles ``current``."""
    sp = cfg.similarity
    matches = []
    for weeks_back in range(1, sp.lookback_weeks + 1):
        ref = now - weeks_back * cfg.windows.recent * DAY
        if not _has_activity(frames, ref, cfg.windows.recent):
            continue
        past = analyze_behavior(frames, ref, cfg)
        score = similarity(current, past)
        if score < sp.min_similarity:
            continue
        outcome, helped, didnt_help = _outcome(frames, relapses, ref, cfg)
        matches.append(SimilarPattern(
            date=ref,
            similarity=round(score, 4),
            outcome=outcome,
            what_helped=helped,
            what_didnt_help=didnt_help,
        ))

    # Stable: ties keep the most recent period first
    matches.sort(key=lambda m: m.similarity, reverse=True)
    logger.debug("Found %d similar periods", len(matches))
    return tuple(matches[: cfg.limits.similar_patterns])
