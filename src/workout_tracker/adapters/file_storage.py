"""File-backed storage for the session blob."""

import os
from dataclasses import dataclass
from pathlib import Path

from workout_tracker.domain.errors import PersistenceError
from workout_tracker.services.workouts import SessionStorage


@dataclass
class FileSessionStorage(SessionStorage):
    """Stores the session blob in a single file."""

    path: Path

    def load(self) -> bytes | None:
        """Return the stored blob, or None if nothing was saved yet."""
        try:
            return self.path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise PersistenceError(f"Failed to read {self.path}") from exc

    def save(self, blob: bytes) -> None:
        """Write the blob, replacing the previous one atomically."""
        temp_path = self.path.with_name(f"{self.path.name}.tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            temp_path.write_bytes(blob)
            os.replace(temp_path, self.path)
        except OSError as exc:
            raise PersistenceError(f"Failed to write {self.path}") from exc
