"""Domain models for logged workout sessions."""

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

_MONTHS = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

_ID_DIGITS = 10


class SessionKind(str, Enum):
    """Discriminant for the session variants."""

    RUN = "run"
    RIDE = "ride"

    @property
    def icon(self) -> str:
        return "🏃‍♂️" if self is SessionKind.RUN else "🚴‍♀️"


Location = tuple[float, float]


@dataclass(frozen=True)
class RunDetails:
    """Run-specific inputs and derived pace."""

    cadence_spm: float
    pace_min_per_km: float


@dataclass(frozen=True)
class RideDetails:
    """Ride-specific inputs and derived speed."""

    elevation_gain_m: float
    speed_kmh: float


@dataclass(frozen=True)
class SessionRecord:
    """Represents a logged run or ride.

    ``details`` holds the variant payload matching ``kind``. Derived values
    are filled in by :func:`build_session` and never recomputed afterwards.
    """

    id: str
    kind: SessionKind
    created_at: datetime
    location: Location
    distance_km: float
    duration_min: float
    description: str
    details: RunDetails | RideDetails

    @property
    def pace_min_per_km(self) -> float | None:
        if isinstance(self.details, RunDetails):
            return self.details.pace_min_per_km
        return None

    @property
    def cadence_spm(self) -> float | None:
        if isinstance(self.details, RunDetails):
            return self.details.cadence_spm
        return None

    @property
    def speed_kmh(self) -> float | None:
        if isinstance(self.details, RideDetails):
            return self.details.speed_kmh
        return None

    @property
    def elevation_gain_m(self) -> float | None:
        if isinstance(self.details, RideDetails):
            return self.details.elevation_gain_m
        return None


@dataclass(frozen=True)
class SessionSpec:
    """Parsed user input for a new session."""

    kind: SessionKind | str
    location: Location
    distance_km: float
    duration_min: float
    extra: dict[str, object] = field(default_factory=dict)


def session_id_for(created_at: datetime) -> str:
    """Derive a session id from the last digits of its epoch milliseconds."""
    millis = round(created_at.timestamp() * 1000)
    return str(millis)[-_ID_DIGITS:]


def describe(kind: SessionKind, created_at: datetime) -> str:
    """Build the display title, e.g. ``Run on April 14``."""
    month = _MONTHS[created_at.month - 1]
    return f"{kind.value.capitalize()} on {month} {created_at.day}"


def build_session(  # noqa: PLR0913
    kind: SessionKind,
    created_at: datetime,
    location: Location,
    distance_km: float,
    duration_min: float,
    extra: dict[str, object],
) -> SessionRecord:
    """Construct a session of the given kind and compute its derived fields.

    No validation happens here; callers pass inputs that are already checked.
    """
    details: RunDetails | RideDetails
    if kind is SessionKind.RUN:
        cadence = float(extra["cadence_spm"])
        details = RunDetails(
            cadence_spm=cadence,
            pace_min_per_km=duration_min / distance_km,
        )
    elif kind is SessionKind.RIDE:
        elevation = float(extra["elevation_gain_m"])
        details = RideDetails(
            elevation_gain_m=elevation,
            speed_kmh=distance_km * 60 / duration_min,
        )
    else:
        raise ValueError(f"Unsupported session kind: {kind!r}")

    return SessionRecord(
        id=session_id_for(created_at),
        kind=kind,
        created_at=created_at,
        location=(float(location[0]), float(location[1])),
        distance_km=float(distance_km),
        duration_min=float(duration_min),
        description=describe(kind, created_at),
        details=details,
    )


def popup_text(record: SessionRecord) -> str:
    """Text shown in the map marker popup."""
    return f"{record.kind.icon} {record.description}"


def style_tag(record: SessionRecord) -> str:
    """Style class for the map marker popup."""
    return f"{record.kind.value}-popup"


def non_finite_derived_field(record: SessionRecord) -> str | None:
    """Name the derived field that overflowed for extreme inputs, if any."""
    if isinstance(record.details, RunDetails):
        if not math.isfinite(record.details.pace_min_per_km):
            return "pace_min_per_km"
    elif not math.isfinite(record.details.speed_kmh):
        return "speed_kmh"
    return None
