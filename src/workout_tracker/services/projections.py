"""Keeps map markers and list entries in step with the session registry."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Protocol

from workout_tracker.domain.workouts import (
    Location,
    SessionRecord,
    popup_text,
    style_tag,
)

_logger = logging.getLogger(__name__)


class MapView(Protocol):
    """Map widget operations used by the tracker."""

    def place_marker(
        self, location: Location, popup_text: str, style_tag: str
    ) -> object:
        """Place a marker with a popup and return its handle."""

    def remove_marker(self, handle: object) -> None:
        """Remove a previously placed marker."""

    def fit_bounds(self, locations: Sequence[Location]) -> None:
        """Zoom the map so every location is visible."""

    def pan_to(self, location: Location) -> None:
        """Center the map on a location."""


class ListView(Protocol):
    """Session list operations used by the tracker."""

    def append_entry(self, record: SessionRecord) -> object:
        """Render a list entry for a session and return its handle."""

    def remove_entry(self, handle: object) -> None:
        """Remove a rendered list entry."""

    def clear_all(self) -> None:
        """Remove every rendered list entry."""


@dataclass
class ProjectionTracker:
    """Owns one marker handle and one list-entry handle per live session.

    Handles are keyed by session id so deletes in any order release the
    right pair.
    """

    map_view: MapView
    list_view: ListView
    _markers: dict[str, object] = field(default_factory=dict, init=False)
    _entries: dict[str, object] = field(default_factory=dict, init=False)

    def on_created(self, record: SessionRecord) -> None:
        """Place a marker and render a list entry for a new session."""
        self._markers[record.id] = self.map_view.place_marker(
            record.location, popup_text(record), style_tag(record)
        )
        self._entries[record.id] = self.list_view.append_entry(record)

    def on_deleted(self, record: SessionRecord) -> None:
        """Release the marker and list entry of a deleted session."""
        marker = self._markers.pop(record.id, None)
        entry = self._entries.pop(record.id, None)
        if marker is None and entry is None:
            _logger.warning("No projections tracked for session %s", record.id)
            return
        if marker is not None:
            self.map_view.remove_marker(marker)
        if entry is not None:
            self.list_view.remove_entry(entry)

    def on_sorted(self, records: Sequence[SessionRecord]) -> None:
        """Re-render list entries in the given order; markers stay put."""
        self.list_view.clear_all()
        self._entries = {}
        for record in records:
            self._entries[record.id] = self.list_view.append_entry(record)

    def on_reset(self) -> None:
        """Remove every marker and list entry."""
        for marker in self._markers.values():
            self.map_view.remove_marker(marker)
        self.list_view.clear_all()
        self._markers = {}
        self._entries = {}

    def focus(self, record: SessionRecord) -> None:
        """Pan the map to a session's marker."""
        self.map_view.pan_to(record.location)

    def fit_all(self, records: Sequence[SessionRecord]) -> None:
        """Fit the map around every session, if there are any."""
        if not records:
            return
        self.map_view.fit_bounds([record.location for record in records])

    def tracked_ids(self) -> set[str]:
        return set(self._markers)

    def is_tracked(self, session_id: str) -> bool:
        return session_id in self._markers
