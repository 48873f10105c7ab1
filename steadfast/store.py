"""
Explicit state container for recorded events.

Mutations only touch memory and mark the container dirty. Persistence
happens when the caller calls ``commit()``, through an injected port; a
failed save raises PersistenceError and leaves the container dirty so the
same commit can be retried.
"""

import json
import logging
import os
import tempfile
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, Optional, Protocol, Union

from steadfast.models import (
    CheckIn,
    Craving,
    EventLog,
    Meeting,
    MeditationSession,
)

logger = logging.getLogger(__name__)


class PersistenceError(RuntimeError):
    """A load or save through the persistence port failed."""


class PersistencePort(Protocol):
    def load(self) -> Optional[Dict[str, Any]]:
        ...

    def save(self, state: Dict[str, Any]) -> None:
        ...


class MemoryPersistence:
    """Keeps the last saved state in memory (tests, ephemeral sessions)."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self.state = initial
        self.saves = 0

    def load(self) -> Optional[Dict[str, Any]]:
        return self.state

    def save(self, state: Dict[str, Any]) -> None:
        self.state = state
        self.saves += 1


class JsonFilePersistence:
    """Stores state as one JSON document, replaced atomically on save."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def load(self) -> Optional[Dict[str, Any]]:
        if not self.path.exists():
            return None
        with open(self.path, "r") as f:
            return json.load(f)

    def save(self, state: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(state, f, indent=2)
            os.replace(tmp, self.path)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise


class StateContainer:
    """In-memory event state with explicit, observable persistence."""

    def __init__(self, port: PersistencePort):
        self._port = port
        self._events = EventLog()
        self._dirty = False

    @property
    def events(self) -> EventLog:
        """Immutable view of the current events, ready for the engine."""
        return self._events

    @property
    def dirty(self) -> bool:
        return self._dirty

    def load(self) -> EventLog:
        try:
            state = self._port.load()
        except (OSError, ValueError) as e:
            raise PersistenceError(f"Failed to load state: {e}") from e
        self._events = EventLog.from_dict(state or {})
        self._dirty = False
        logger.info(
            "Loaded %d check-ins, %d cravings, %d meetings, %d meditations",
            len(self._events.check_ins), len(self._events.cravings),
            len(self._events.meetings), len(self._events.meditations),
        )
        return self._events

    def _append(self, attr: str, record: Any) -> None:
        if record is None:
            raise ValueError(f"Refusing to record malformed {attr[:-1].replace('_', ' ')}")
        self._events = replace(self._events, **{attr: getattr(self._events, attr) + (record,)})
        self._dirty = True

    def record_check_in(self, data: Union[CheckIn, Dict[str, Any]]) -> None:
        self._append("check_ins", CheckIn.from_dict(data))

    def record_craving(self, data: Union[Craving, Dict[str, Any]]) -> None:
        self._append("cravings", Craving.from_dict(data))

    def record_meeting(self, data: Union[Meeting, Dict[str, Any]]) -> None:
        self._append("meetings", Meeting.from_dict(data))

    def record_meditation(self, data: Union[MeditationSession, Dict[str, Any]]) -> None:
        self._append("meditations", MeditationSession.from_dict(data))

    def commit(self) -> bool:
        """
        Save through the port if anything changed.

        Returns True when a save happened. On failure the container stays
        dirty and PersistenceError is raised.
        """
        if not self._dirty:
            return False
        try:
            self._port.save(self._events.to_dict())
        except (OSError, TypeError, ValueError) as e:
            logger.warning("State commit failed: %s", e)
            raise PersistenceError(f"Failed to save state: {e}") from e
        self._dirty = False
        logger.info("State committed")
        return True
