"""Dependency container wiring for the application."""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from zoneinfo import ZoneInfo

from workout_tracker.adapters.file_storage import FileSessionStorage
from workout_tracker.config import Settings
from workout_tracker.services.projections import ListView, MapView, ProjectionTracker
from workout_tracker.services.registry import SessionRegistry
from workout_tracker.services.workouts import SessionStorage, WorkoutLogService


@dataclass
class AppContainer:
    """Holds the single workout log instance and its collaborators."""

    settings: Settings
    storage: SessionStorage
    registry: SessionRegistry
    tracker: ProjectionTracker
    workout_service: WorkoutLogService


def build_container(
    map_view: MapView,
    list_view: ListView,
    settings: Settings | None = None,
    storage: SessionStorage | None = None,
) -> AppContainer:
    """Create the default dependency container and restore stored sessions."""
    resolved_settings = settings or Settings()
    resolved_storage = storage or FileSessionStorage(resolved_settings.storage_path)
    registry = SessionRegistry(clock=_local_clock(resolved_settings.timezone))
    tracker = ProjectionTracker(map_view=map_view, list_view=list_view)
    workout_service = WorkoutLogService(
        registry=registry,
        tracker=tracker,
        storage=resolved_storage,
    )
    workout_service.restore()
    return AppContainer(
        settings=resolved_settings,
        storage=resolved_storage,
        registry=registry,
        tracker=tracker,
        workout_service=workout_service,
    )


def _local_clock(timezone: str) -> Callable[[], datetime]:
    zone = ZoneInfo(timezone)

    def now() -> datetime:
        return datetime.now(tz=zone)

    return now
