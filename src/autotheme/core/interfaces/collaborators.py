"""Collaborator interfaces (ABCs) used by the automation controller.

Each external dependency of the controller has a matching abstract base
class here.  Production adapters and the in-memory test doubles both
implement these interfaces, so the controller never knows which one it is
talking to.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from autotheme.core.models.state import ApplyResult, DisplayState, GeoPosition, Severity


class LocationUnavailableError(Exception):
    """The provider could not produce a position (denied, timeout, no signal)."""


# ---------------------------------------------------------------------------
# Location
# ---------------------------------------------------------------------------

class LocationProvider(ABC):
    """Source of fresh positions (IP lookup, OS geolocation, …).

    ``fetch`` is blocking; the controller runs it in a worker thread.
    """

    @abstractmethod
    def fetch(self, timeout: float) -> GeoPosition:
        """Return the current position or raise :class:`LocationUnavailableError`."""


class LocationStoreInterface(ABC):
    """Durable single-record store for the last known position."""

    @abstractmethod
    def load(self) -> GeoPosition | None:
        """Return the persisted position, or ``None`` if there is none."""

    @abstractmethod
    def save(self, position: GeoPosition) -> None:
        """Overwrite the persisted record with *position*."""


# ---------------------------------------------------------------------------
# Theme
# ---------------------------------------------------------------------------

class ThemeApplier(ABC):
    """Performs the actual dark/light switch on the host.

    Implementations must be idempotent: applying the state that is already
    active is a no-op reported with ``changed=False``.
    """

    @abstractmethod
    def apply(self, state: DisplayState) -> ApplyResult:
        """Switch the host to *state*."""


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------

class NotificationSink(ABC):
    """Fire-and-forget user notifications (toasts, status line, log)."""

    @abstractmethod
    def notify(self, message: str, severity: Severity = Severity.INFO) -> None:
        """Surface *message*; must not block the caller."""
