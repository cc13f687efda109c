"""Runtime state models and enumerations."""

from __future__ import annotations

from datetime import date as _date
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class DisplayState(str, Enum):
    """Visual state the desktop should be in."""

    DARK = "dark"
    LIGHT = "light"


class PolarCondition(str, Enum):
    """Why a day has no sunrise/sunset transition."""

    POLAR_DAY = "polar_day"
    POLAR_NIGHT = "polar_night"


class ControllerState(str, Enum):
    """Lifecycle of the automation controller."""

    INITIALIZING = "initializing"
    RUNNING = "running"
    PAUSED = "paused"
    STOPPED = "stopped"


class TickPhase(str, Enum):
    """Step of the tick currently being executed."""

    IDLE = "idle"
    REFRESHING_LOCATION = "refreshing_location"
    RECOMPUTING = "recomputing"
    TRANSITIONING = "transitioning"


class LocationSource(str, Enum):
    """Where the position used for the current window came from."""

    FRESH = "fresh"
    CACHED = "cached"
    PERSISTED = "persisted"
    UNKNOWN = "unknown"


class Severity(str, Enum):
    """Notification severity."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class GeoPosition(BaseModel):
    """An observed position.  Replaced wholesale, never mutated."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    latitude: float = Field(ge=-90.0, le=90.0, allow_inf_nan=False)
    longitude: float = Field(ge=-180.0, le=180.0, allow_inf_nan=False)
    label: str = Field(default="", max_length=120)
    observed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def differs_from(self, other: GeoPosition, threshold: float) -> bool:
        """``True`` if either axis moved by at least *threshold* degrees."""
        return (
            abs(self.latitude - other.latitude) >= threshold
            or abs(self.longitude - other.longitude) >= threshold
        )


class SolarWindow(BaseModel):
    """The ``[sunrise, sunset)`` interval for one calendar date."""

    model_config = ConfigDict(frozen=True)

    date: _date
    sunrise: datetime
    sunset: datetime


class NoTransition(BaseModel):
    """Marker for a date on which the sun neither rises nor sets."""

    model_config = ConfigDict(frozen=True)

    date: _date
    condition: PolarCondition

    @property
    def display_state(self) -> DisplayState:
        if self.condition is PolarCondition.POLAR_DAY:
            return DisplayState.LIGHT
        return DisplayState.DARK


class ApplyResult(BaseModel):
    """Outcome of a :class:`ThemeApplier` call."""

    model_config = ConfigDict(frozen=True)

    state: DisplayState
    ok: bool = True
    changed: bool = True
    detail: str = ""


class StatusSnapshot(BaseModel):
    """Immutable view of the controller handed to observers (UI, tests)."""

    model_config = ConfigDict(frozen=True)

    controller_state: ControllerState
    enabled: bool
    display_state: DisplayState | None = None
    applied_state: DisplayState | None = None
    transition_in_flight: bool = False
    position: GeoPosition | None = None
    location_source: LocationSource = LocationSource.UNKNOWN
    window: SolarWindow | None = None
    polar: PolarCondition | None = None
    next_switch: datetime | None = None
    updated_at: datetime | None = None
