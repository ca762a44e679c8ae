"""Shared test fixtures."""

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import pytest

from workout_tracker.config import Settings
from workout_tracker.domain.errors import PersistenceError
from workout_tracker.domain.workouts import Location, SessionRecord, SessionSpec
from workout_tracker.services.projections import ListView, MapView, ProjectionTracker
from workout_tracker.services.registry import SessionRegistry
from workout_tracker.services.workouts import SessionStorage, WorkoutLogService


@dataclass
class TickingClock:
    """Clock that advances by a fixed step on every call."""

    current: datetime = datetime(2024, 4, 14, 9, 30, tzinfo=UTC)
    step: timedelta = timedelta(seconds=1)

    def __call__(self) -> datetime:
        value = self.current
        self.current = self.current + self.step
        return value


@dataclass
class InMemorySessionStorage(SessionStorage):
    """In-memory storage that can be told to fail."""

    blob: bytes | None = None
    fail_on_save: bool = False
    fail_on_load: bool = False
    saves: int = 0

    def load(self) -> bytes | None:
        if self.fail_on_load:
            raise PersistenceError("storage offline")
        return self.blob

    def save(self, blob: bytes) -> None:
        if self.fail_on_save:
            raise PersistenceError("storage offline")
        self.saves += 1
        self.blob = blob


@dataclass
class FakeMapView(MapView):
    """Fake map that records markers by handle."""

    markers: dict[int, tuple[Location, str, str]] = field(default_factory=dict)
    bounds: list[list[Location]] = field(default_factory=list)
    pans: list[Location] = field(default_factory=list)
    _next_handle: int = 0

    def place_marker(
        self, location: Location, popup_text: str, style_tag: str
    ) -> object:
        self._next_handle += 1
        self.markers[self._next_handle] = (location, popup_text, style_tag)
        return self._next_handle

    def remove_marker(self, handle: object) -> None:
        del self.markers[handle]

    def fit_bounds(self, locations: Sequence[Location]) -> None:
        self.bounds.append(list(locations))

    def pan_to(self, location: Location) -> None:
        self.pans.append(location)


@dataclass
class FakeListView(ListView):
    """Fake list that keeps rendered entries in display order."""

    entries: list[tuple[int, str]] = field(default_factory=list)
    clears: int = 0
    _next_handle: int = 0

    def append_entry(self, record: SessionRecord) -> object:
        self._next_handle += 1
        self.entries.append((self._next_handle, record.id))
        return self._next_handle

    def remove_entry(self, handle: object) -> None:
        self.entries = [entry for entry in self.entries if entry[0] != handle]

    def clear_all(self) -> None:
        self.clears += 1
        self.entries = []

    def displayed_ids(self) -> list[str]:
        return [session_id for _, session_id in self.entries]


def run_spec(
    distance_km: float = 5,
    duration_min: float = 25,
    cadence_spm: float = 170,
    location: Location = (40.0, -3.0),
) -> SessionSpec:
    return SessionSpec(
        kind="run",
        location=location,
        distance_km=distance_km,
        duration_min=duration_min,
        extra={"cadence_spm": cadence_spm},
    )


def ride_spec(
    distance_km: float = 20,
    duration_min: float = 60,
    elevation_gain_m: float = 150,
    location: Location = (40.1, -3.1),
) -> SessionSpec:
    return SessionSpec(
        kind="ride",
        location=location,
        distance_km=distance_km,
        duration_min=duration_min,
        extra={"elevation_gain_m": elevation_gain_m},
    )


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture
def registry(clock: TickingClock) -> SessionRegistry:
    return SessionRegistry(clock=clock)


@pytest.fixture
def map_view() -> FakeMapView:
    return FakeMapView()


@pytest.fixture
def list_view() -> FakeListView:
    return FakeListView()


@pytest.fixture
def tracker(map_view: FakeMapView, list_view: FakeListView) -> ProjectionTracker:
    return ProjectionTracker(map_view=map_view, list_view=list_view)


@pytest.fixture
def storage() -> InMemorySessionStorage:
    return InMemorySessionStorage()


@pytest.fixture
def workout_service(
    registry: SessionRegistry,
    tracker: ProjectionTracker,
    storage: InMemorySessionStorage,
) -> WorkoutLogService:
    return WorkoutLogService(registry=registry, tracker=tracker, storage=storage)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(storage_path=tmp_path / "workouts.json", timezone="UTC")
