"""Serialization of the session collection to a storage blob."""

import logging
from collections.abc import Sequence
from typing import Annotated, Literal

from pydantic import (
    AwareDatetime,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
)
from pydantic import ValidationError as PydanticValidationError

from workout_tracker.domain.errors import PersistenceError, RestoreError
from workout_tracker.domain.workouts import (
    RideDetails,
    RunDetails,
    SessionKind,
    SessionRecord,
    build_session,
    non_finite_derived_field,
)

_logger = logging.getLogger(__name__)


class _StoredSession(BaseModel):
    """Fields shared by every stored session."""

    model_config = ConfigDict(extra="ignore", allow_inf_nan=False)

    created_at: AwareDatetime
    location: tuple[float, float]
    distance_km: float = Field(gt=0)
    duration_min: float = Field(gt=0)
    # Written for readability only; recomputed on restore.
    id: str | None = None
    description: str | None = None


class StoredRun(_StoredSession):
    """Stored form of a run."""

    kind: Literal["run"]
    cadence_spm: float = Field(gt=0)
    pace_min_per_km: float | None = None


class StoredRide(_StoredSession):
    """Stored form of a ride."""

    kind: Literal["ride"]
    elevation_gain_m: float = Field(ge=0)
    speed_kmh: float | None = None


StoredEntry = Annotated[StoredRun | StoredRide, Field(discriminator="kind")]

_ADAPTER: TypeAdapter[list[StoredEntry]] = TypeAdapter(list[StoredEntry])


def serialize_sessions(records: Sequence[SessionRecord]) -> bytes:
    """Encode sessions as a JSON array, keeping the kind tag on every entry."""
    try:
        return _ADAPTER.dump_json([_to_stored(record) for record in records])
    except PydanticValidationError as exc:
        raise PersistenceError("Failed to encode sessions") from exc


def decode_sessions(blob: bytes) -> list[SessionRecord]:
    """Decode a stored blob, raising RestoreError if it is malformed."""
    try:
        entries = _ADAPTER.validate_json(blob)
    except PydanticValidationError as exc:
        raise RestoreError(
            f"Malformed session blob: {exc.error_count()} errors"
        ) from exc
    return [_from_stored(entry) for entry in entries]


def deserialize_sessions(blob: bytes | None) -> list[SessionRecord] | None:
    """Decode a stored blob, returning None when it is missing or malformed."""
    if blob is None:
        return None
    try:
        return decode_sessions(blob)
    except RestoreError as exc:
        _logger.warning("Discarding stored sessions: %s", exc)
        return None


def _to_stored(record: SessionRecord) -> StoredRun | StoredRide:
    if isinstance(record.details, RunDetails):
        return StoredRun(
            kind="run",
            id=record.id,
            description=record.description,
            created_at=record.created_at,
            location=record.location,
            distance_km=record.distance_km,
            duration_min=record.duration_min,
            cadence_spm=record.details.cadence_spm,
            pace_min_per_km=record.details.pace_min_per_km,
        )
    if isinstance(record.details, RideDetails):
        return StoredRide(
            kind="ride",
            id=record.id,
            description=record.description,
            created_at=record.created_at,
            location=record.location,
            distance_km=record.distance_km,
            duration_min=record.duration_min,
            elevation_gain_m=record.details.elevation_gain_m,
            speed_kmh=record.details.speed_kmh,
        )
    raise TypeError(f"Unsupported session details: {record.details!r}")


def _from_stored(entry: StoredRun | StoredRide) -> SessionRecord:
    if isinstance(entry, StoredRun):
        kind = SessionKind.RUN
        extra: dict[str, object] = {"cadence_spm": entry.cadence_spm}
    else:
        kind = SessionKind.RIDE
        extra = {"elevation_gain_m": entry.elevation_gain_m}
    record = build_session(
        kind=kind,
        created_at=entry.created_at,
        location=entry.location,
        distance_km=entry.distance_km,
        duration_min=entry.duration_min,
        extra=extra,
    )
    derived_field = non_finite_derived_field(record)
    if derived_field is not None:
        raise RestoreError(f"Stored session has a non-finite {derived_field}")
    return record
