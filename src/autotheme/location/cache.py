"""Location cache — resolves the position the solar window is computed from.

Resolution order on every refresh attempt:

1. A fresh provider sample, if it moved at least ``threshold`` degrees
   from the cached position (replaces the cache and is persisted).
   A sample inside the threshold is discarded; cache and file are left
   untouched.
2. The in-memory cached position.
3. The persisted record from the :class:`LocationStoreInterface`.
4. Nothing — the caller falls back to a fixed default window.
"""

from __future__ import annotations

import logging

from autotheme.core.interfaces.collaborators import LocationStoreInterface
from autotheme.core.models.state import GeoPosition, LocationSource

_log = logging.getLogger(__name__)


class LocationCache:
    """Owns the current :class:`GeoPosition` and its provenance.

    Only the automation controller mutates the cache, from its own
    serialized tick, so no locking is needed here.

    Args:
        store: Durable store for the last known position.
        threshold: Minimum change in degrees (either axis) that counts as
            a real move.
    """

    def __init__(self, store: LocationStoreInterface, threshold: float) -> None:
        self._store = store
        self._threshold = threshold
        self._current: GeoPosition | None = None
        self._source = LocationSource.UNKNOWN
        self._store_checked = False

    @property
    def current(self) -> GeoPosition | None:
        return self._current

    @property
    def source(self) -> LocationSource:
        return self._source

    def accept(self, sample: GeoPosition) -> bool:
        """Fold a fresh provider sample into the cache.

        Returns:
            ``True`` if the sample replaced the cached position (and was
            persisted), ``False`` if it was discarded as noise.
        """
        baseline = self._current or self._load_persisted()
        self._source = LocationSource.FRESH

        if baseline is not None and not sample.differs_from(baseline, self._threshold):
            if self._current is None:
                self._current = baseline
            _log.debug(
                "Location sample within %.4f° of cached position — discarded",
                self._threshold,
            )
            return False

        self._current = sample
        try:
            self._store.save(sample)
        except OSError as exc:
            _log.warning("Could not persist location: %s", exc)
        return True

    def fallback(self) -> GeoPosition | None:
        """Best position available after the provider failed."""
        if self._current is not None:
            if self._source is LocationSource.FRESH:
                self._source = LocationSource.CACHED
            return self._current

        persisted = self._load_persisted()
        if persisted is not None:
            self._current = persisted
            self._source = LocationSource.PERSISTED
            _log.info("Using persisted location %s", persisted.label or "(unnamed)")
            return persisted

        self._source = LocationSource.UNKNOWN
        return None

    def _load_persisted(self) -> GeoPosition | None:
        # The store is read at most once; afterwards the in-memory copy wins.
        if self._store_checked:
            return None
        self._store_checked = True
        try:
            return self._store.load()
        except Exception:
            _log.exception("Location store failed to load — ignoring persisted record")
            return None
