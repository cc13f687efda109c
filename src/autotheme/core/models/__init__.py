"""Pydantic models for configuration, events, and automation state."""
from autotheme.core.models.config import (
    AutomationConfig,
    AutoThemeConfig,
    LocationConfig,
    SystemConfig,
    ThemeConfig,
)
from autotheme.core.models.event import Event
from autotheme.core.models.state import (
    ApplyResult,
    ControllerState,
    DisplayState,
    GeoPosition,
    LocationSource,
    NoTransition,
    PolarCondition,
    Severity,
    SolarWindow,
    StatusSnapshot,
    TickPhase,
)

__all__ = [
    "AutoThemeConfig",
    "AutomationConfig",
    "LocationConfig",
    "SystemConfig",
    "ThemeConfig",
    "Event",
    "ApplyResult",
    "ControllerState",
    "DisplayState",
    "GeoPosition",
    "LocationSource",
    "NoTransition",
    "PolarCondition",
    "Severity",
    "SolarWindow",
    "StatusSnapshot",
    "TickPhase",
]
