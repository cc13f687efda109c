"""Last known position persisted as a single JSON record.

File format::

    {
      "latitude": 51.5074,
      "longitude": -0.1278,
      "label": "London, United Kingdom",
      "last_updated": "2024-06-21T04:43:00+00:00"
    }

The record is overwritten wholesale on every save.  A missing, unreadable
or invalid file loads as ``None`` so a corrupt record never blocks startup.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path

from pydantic import ValidationError

from autotheme.config.config_manager import atomic_write_json
from autotheme.core.interfaces.collaborators import LocationStoreInterface
from autotheme.core.models.state import GeoPosition

_log = logging.getLogger(__name__)


class LocationStore(LocationStoreInterface):
    """JSON-file implementation of :class:`LocationStoreInterface`.

    Args:
        path: Location of the record.  Parent directories are created on
            first save.
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)
        self._lock = threading.Lock()
        self.save_count = 0

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> GeoPosition | None:
        with self._lock:
            if not self._path.is_file():
                _log.debug("No persisted location at %s", self._path)
                return None
            try:
                raw = json.loads(self._path.read_text(encoding="utf-8"))
                position = GeoPosition(
                    latitude=raw["latitude"],
                    longitude=raw["longitude"],
                    label=raw.get("label", ""),
                    observed_at=raw["last_updated"],
                )
            except (OSError, ValueError, KeyError, TypeError, ValidationError) as exc:
                _log.warning("Ignoring unreadable location record %s: %s", self._path, exc)
                return None
        _log.debug("Loaded persisted location %s", position.label or "(unnamed)")
        return position

    def save(self, position: GeoPosition) -> None:
        payload = {
            "latitude": position.latitude,
            "longitude": position.longitude,
            "label": position.label,
            "last_updated": position.observed_at.isoformat(),
        }
        with self._lock:
            atomic_write_json(self._path, payload)
            self.save_count += 1
        _log.info(
            "Persisted location %.4f, %.4f (%s)",
            position.latitude,
            position.longitude,
            position.label or "unnamed",
        )
