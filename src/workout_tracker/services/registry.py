"""Authoritative in-memory collection of logged sessions."""

import math
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from workout_tracker.domain.errors import NotFoundError, ValidationError
from workout_tracker.domain.workouts import (
    Location,
    SessionKind,
    SessionRecord,
    SessionSpec,
    build_session,
    non_finite_derived_field,
)

_MAX_LATITUDE = 90.0
_MAX_LONGITUDE = 180.0


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class SessionRegistry:
    """Ordered collection of sessions in logging order."""

    clock: Callable[[], datetime] = _utc_now
    _sessions: list[SessionRecord] = field(default_factory=list, init=False)

    def create(self, spec: SessionSpec) -> SessionRecord:
        """Validate input, build a session and append it."""
        kind = _parse_kind(spec.kind)
        location = _parse_location(spec.location)
        distance = _positive_number("distance_km", spec.distance_km)
        duration = _positive_number("duration_min", spec.duration_min)
        if kind is SessionKind.RUN:
            extra: dict[str, object] = {
                "cadence_spm": _positive_number(
                    "cadence_spm", spec.extra.get("cadence_spm")
                )
            }
        else:
            extra = {
                "elevation_gain_m": _non_negative_number(
                    "elevation_gain_m", spec.extra.get("elevation_gain_m")
                )
            }

        record = build_session(
            kind=kind,
            created_at=self.clock(),
            location=location,
            distance_km=distance,
            duration_min=duration,
            extra=extra,
        )
        derived_field = non_finite_derived_field(record)
        if derived_field is not None:
            raise ValidationError(
                derived_field, "is not finite for the given distance and duration"
            )
        self._sessions.append(record)
        return record

    def delete(self, session_id: str) -> SessionRecord:
        """Remove a session, keeping the order of the others."""
        index = self.index_of(session_id)
        if index is None:
            raise NotFoundError(session_id)
        return self._sessions.pop(index)

    def index_of(self, session_id: str) -> int | None:
        """Return the position of a session in logging order."""
        for index, record in enumerate(self._sessions):
            if record.id == session_id:
                return index
        return None

    def find_by_id(self, session_id: str) -> SessionRecord | None:
        """Return a session by id, if present."""
        index = self.index_of(session_id)
        return None if index is None else self._sessions[index]

    def sort_by_distance(self, ascending: bool = True) -> list[SessionRecord]:
        """Return a new list sorted by distance; ties keep logging order."""
        if ascending:
            return sorted(self._sessions, key=lambda record: record.distance_km)
        # reverse=True keeps ties in logging order.
        return sorted(
            self._sessions, key=lambda record: record.distance_km, reverse=True
        )

    def all(self) -> tuple[SessionRecord, ...]:
        """Return every session in logging order."""
        return tuple(self._sessions)

    def seed(self, records: Iterable[SessionRecord]) -> None:
        """Replace the collection with previously stored sessions."""
        self._sessions = list(records)

    def clear(self) -> list[SessionRecord]:
        """Remove every session and return the removed records."""
        removed = self._sessions
        self._sessions = []
        return removed

    def __len__(self) -> int:
        return len(self._sessions)


def _parse_kind(value: SessionKind | str) -> SessionKind:
    try:
        return SessionKind(value)
    except ValueError:
        choices = ", ".join(kind.value for kind in SessionKind)
        raise ValidationError("kind", f"must be one of: {choices}") from None


def _finite_number(field_name: str, value: object) -> float:
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise ValidationError(field_name, "must be a number")
    try:
        number = float(value)
    except OverflowError:
        raise ValidationError(field_name, "must be a finite number") from None
    if not math.isfinite(number):
        raise ValidationError(field_name, "must be a finite number")
    return number


def _positive_number(field_name: str, value: object) -> float:
    number = _finite_number(field_name, value)
    if number <= 0:
        raise ValidationError(field_name, "must be greater than zero")
    return number


def _non_negative_number(field_name: str, value: object) -> float:
    number = _finite_number(field_name, value)
    if number < 0:
        raise ValidationError(field_name, "must not be negative")
    return number


def _parse_location(value: object) -> Location:
    if not isinstance(value, tuple | list) or len(value) != 2:  # noqa: PLR2004
        raise ValidationError("location", "must be a (latitude, longitude) pair")
    latitude = _finite_number("location", value[0])
    longitude = _finite_number("location", value[1])
    if abs(latitude) > _MAX_LATITUDE:
        raise ValidationError("location", "latitude must be within [-90, 90]")
    if abs(longitude) > _MAX_LONGITUDE:
        raise ValidationError("location", "longitude must be within [-180, 180]")
    return (latitude, longitude)
