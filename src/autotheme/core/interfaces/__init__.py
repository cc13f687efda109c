"""Abstract interfaces for the controller's external collaborators."""

from autotheme.core.interfaces.collaborators import (
    LocationProvider,
    LocationStoreInterface,
    LocationUnavailableError,
    NotificationSink,
    ThemeApplier,
)

__all__ = [
    "LocationProvider",
    "LocationStoreInterface",
    "LocationUnavailableError",
    "NotificationSink",
    "ThemeApplier",
]
