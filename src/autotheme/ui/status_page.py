"""Status page — single-page NiceGUI view of the automation controller.

Provides the ``@ui.page('/')`` route with:
* Location, sunrise, sunset and next-switch labels
* Current theme line
* Pause/Resume toggle and Quit button
* Toasts for ``notification.requested`` events

The page only reads :class:`StatusSnapshot` values delivered over the
event bus; it never touches controller state directly.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Awaitable, Callable

from nicegui import app, ui

from autotheme.core import events
from autotheme.core.event_bus import EventBus
from autotheme.core.models.event import Event
from autotheme.core.models.state import (
    ControllerState,
    LocationSource,
    PolarCondition,
    StatusSnapshot,
)

_log = logging.getLogger(__name__)

# Called with the new ``enabled`` value when the toggle is pressed.
ToggleHandler = Callable[[bool], Awaitable[None]]

_NOTIFY_TYPES = {"info": "info", "warning": "warning", "error": "negative"}


def _fmt_time(value: datetime | None) -> str:
    return value.strftime("%H:%M") if value is not None else "—"


def format_location(snap: StatusSnapshot) -> str:
    if snap.position is None or snap.location_source is LocationSource.UNKNOWN:
        return "Location detection failed"
    label = snap.position.label or f"{snap.position.latitude:.2f}, {snap.position.longitude:.2f}"
    if snap.location_source is LocationSource.FRESH:
        return label
    return f"{label} ({snap.location_source.value})"


def format_sunrise(snap: StatusSnapshot) -> str:
    if snap.polar is not None:
        return "Sunrise: none today"
    return f"Sunrise: {_fmt_time(snap.window.sunrise if snap.window else None)}"


def format_sunset(snap: StatusSnapshot) -> str:
    if snap.polar is not None:
        return "Sunset: none today"
    return f"Sunset: {_fmt_time(snap.window.sunset if snap.window else None)}"


def format_next_switch(snap: StatusSnapshot) -> str:
    if snap.controller_state is ControllerState.PAUSED:
        return "Next switch: paused"
    if snap.polar is PolarCondition.POLAR_DAY:
        return "Next switch: none (polar day)"
    if snap.polar is PolarCondition.POLAR_NIGHT:
        return "Next switch: none (polar night)"
    return f"Next switch: {_fmt_time(snap.next_switch)}"


def format_theme(snap: StatusSnapshot) -> str:
    state = snap.applied_state or snap.display_state
    name = state.value.capitalize() if state is not None else "Unknown"
    return f"Current theme: {name}"


def toggle_label(enabled: bool) -> str:
    return "⏯  Pause" if enabled else "⏯  Resume"


class StatusPage:
    """Manages the status page and keeps its labels in sync with the bus.

    Args:
        event_bus: The global event bus for status/notification events.
        on_toggle: Coroutine run with the new ``enabled`` value.
        initial: Snapshot shown before the first status event arrives.
    """

    def __init__(
        self,
        event_bus: EventBus,
        on_toggle: ToggleHandler,
        initial: StatusSnapshot | None = None,
    ) -> None:
        self._bus = event_bus
        self._on_toggle = on_toggle
        self._snapshot = initial

        self._lbl_location: ui.label | None = None
        self._lbl_sunrise: ui.label | None = None
        self._lbl_sunset: ui.label | None = None
        self._lbl_next: ui.label | None = None
        self._lbl_theme: ui.label | None = None
        self._btn_toggle: ui.button | None = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def snapshot(self) -> StatusSnapshot | None:
        return self._snapshot

    def subscribe(self) -> None:
        """Subscribe to controller events (call once the bus is started)."""
        self._bus.subscribe(events.STATUS_UPDATED, self._on_status_updated)
        self._bus.subscribe(events.NOTIFICATION_REQUESTED, self._on_notification)

    def setup_page(self) -> None:
        """Register the ``@ui.page('/')`` route."""

        @ui.page("/")
        def index():
            self._build_page()

    def _build_page(self) -> None:
        ui.dark_mode().auto()
        with ui.card().classes("items-center").style("width: 380px; margin: 32px auto;"):
            ui.label("Auto Theme Switcher").classes("text-h6")
            self._lbl_location = ui.label("Detecting location…")
            self._lbl_sunrise = ui.label("Sunrise: —")
            self._lbl_sunset = ui.label("Sunset: —")
            self._lbl_next = ui.label("Next switch: —")
            self._lbl_theme = ui.label("Current theme: Unknown").classes("text-bold")
            with ui.row():
                self._btn_toggle = ui.button(toggle_label(True), on_click=self._on_toggle_clicked)
                ui.button("✕  Quit", on_click=app.shutdown).props("flat")
        self._refresh_labels()

    # ------------------------------------------------------------------
    # Label helpers
    # ------------------------------------------------------------------

    def _refresh_labels(self) -> None:
        snap = self._snapshot
        if snap is None:
            return
        if self._lbl_location:
            self._lbl_location.text = format_location(snap)
        if self._lbl_sunrise:
            self._lbl_sunrise.text = format_sunrise(snap)
        if self._lbl_sunset:
            self._lbl_sunset.text = format_sunset(snap)
        if self._lbl_next:
            self._lbl_next.text = format_next_switch(snap)
        if self._lbl_theme:
            self._lbl_theme.text = format_theme(snap)
        if self._btn_toggle:
            self._btn_toggle.text = toggle_label(snap.enabled)

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    async def _on_toggle_clicked(self) -> None:
        enabled = not (self._snapshot.enabled if self._snapshot else True)
        await self._on_toggle(enabled)

    async def _on_status_updated(self, event: Event) -> None:
        snap = event.payload.get("snapshot")
        if isinstance(snap, StatusSnapshot):
            self._snapshot = snap
            self._refresh_labels()

    async def _on_notification(self, event: Event) -> None:
        message = event.payload.get("message", "")
        kind = _NOTIFY_TYPES.get(event.payload.get("severity", "info"), "info")
        try:
            ui.notify(message, type=kind)
        except RuntimeError:
            # No client connected yet; the message is already in the log.
            _log.debug("No client for notification: %s", message)
