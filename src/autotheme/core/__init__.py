"""Core services: solar calculator, event bus, automation controller.

The controller lives in :mod:`autotheme.core.automation_controller` and is
imported from there; it depends on :mod:`autotheme.location`, which in
turn builds on the interfaces in this package.
"""

from autotheme.core.event_bus import EventBus
from autotheme.core.solar import CoordinateError, compute, fixed_window

__all__ = [
    "CoordinateError",
    "EventBus",
    "compute",
    "fixed_window",
]
