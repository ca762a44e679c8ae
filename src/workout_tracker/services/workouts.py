"""Workout log service coordinating registry, storage and projections."""

import logging
from dataclasses import dataclass
from typing import Protocol

from workout_tracker.domain.errors import NotFoundError, PersistenceError
from workout_tracker.domain.workouts import SessionRecord, SessionSpec
from workout_tracker.services.codec import deserialize_sessions, serialize_sessions
from workout_tracker.services.projections import ProjectionTracker
from workout_tracker.services.registry import SessionRegistry

_logger = logging.getLogger(__name__)


class SessionStorage(Protocol):
    """Key-value persistence for the serialized sessions."""

    def load(self) -> bytes | None:
        """Return the stored blob, if any."""

    def save(self, blob: bytes) -> None:
        """Replace the stored blob."""


@dataclass
class WorkoutLogService:
    """Applies each user action to the registry, storage and projections.

    Every mutation updates the registry first, then persists, then touches
    the projections. Storage failures are logged and the in-memory state is
    kept.
    """

    registry: SessionRegistry
    tracker: ProjectionTracker
    storage: SessionStorage
    persistence_ok: bool = True

    def restore(self) -> int:
        """Load stored sessions and project them; returns how many were loaded."""
        try:
            blob = self.storage.load()
        except PersistenceError as exc:
            _logger.warning("Session storage unavailable: %s", exc)
            self.persistence_ok = False
            blob = None
        else:
            self.persistence_ok = True
        records = _drop_duplicate_ids(deserialize_sessions(blob) or [])
        self.tracker.on_reset()
        self.registry.seed(records)
        for record in records:
            self.tracker.on_created(record)
        _logger.info("Restored %s sessions", len(records))
        return len(records)

    def log_session(self, spec: SessionSpec) -> SessionRecord:
        """Create a session from parsed input."""
        record = self.registry.create(spec)
        self._persist()
        self.tracker.on_created(record)
        return record

    def delete_session(self, session_id: str) -> SessionRecord:
        """Delete a session and release its marker and list entry."""
        index = self.registry.index_of(session_id)
        try:
            record = self.registry.delete(session_id)
        except NotFoundError:
            _logger.warning("Delete requested for unknown session %s", session_id)
            raise
        _logger.debug("Deleted session %s at position %s", session_id, index)
        self._persist()
        self.tracker.on_deleted(record)
        return record

    def find_session(self, session_id: str) -> SessionRecord | None:
        """Return a session by id, if present."""
        return self.registry.find_by_id(session_id)

    def sessions(self) -> tuple[SessionRecord, ...]:
        """Return every session in logging order."""
        return self.registry.all()

    def sorted_sessions(self, ascending: bool = True) -> list[SessionRecord]:
        """Re-render the list sorted by distance and return that order."""
        ordered = self.registry.sort_by_distance(ascending=ascending)
        self.tracker.on_sorted(ordered)
        return ordered

    def focus_session(self, session_id: str) -> SessionRecord:
        """Pan the map to a session picked from the list."""
        record = self.registry.find_by_id(session_id)
        if record is None:
            _logger.warning("Focus requested for unknown session %s", session_id)
            raise NotFoundError(session_id)
        self.tracker.focus(record)
        return record

    def show_all(self) -> None:
        """Fit the map around every logged session."""
        self.tracker.fit_all(self.registry.all())

    def reset(self) -> int:
        """Remove every session; returns how many were removed."""
        removed = self.registry.clear()
        self._persist()
        self.tracker.on_reset()
        return len(removed)

    @property
    def has_sessions(self) -> bool:
        return len(self.registry) > 0

    def _persist(self) -> None:
        try:
            self.storage.save(serialize_sessions(self.registry.all()))
        except PersistenceError as exc:
            _logger.warning("Failed to persist sessions: %s", exc)
            self.persistence_ok = False
            return
        self.persistence_ok = True


def _drop_duplicate_ids(records: list[SessionRecord]) -> list[SessionRecord]:
    """Keep the first stored session for each id."""
    unique: dict[str, SessionRecord] = {}
    for record in records:
        if record.id in unique:
            _logger.warning("Dropping stored session with duplicate id %s", record.id)
            continue
        unique[record.id] = record
    return list(unique.values())
