"""Integration: config file → controller → bus → status page, with real stores."""

from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest

from autotheme.config.config_manager import load_config, save_automation_enabled
from autotheme.config.location_store import LocationStore
from autotheme.core import events
from autotheme.core.automation_controller import AutomationController
from autotheme.core.interfaces.collaborators import LocationUnavailableError
from autotheme.core.models.state import ControllerState, DisplayState, LocationSource
from autotheme.core.notifications import EventBusNotificationSink
from autotheme.theme.factory import create_theme_applier
from autotheme.theme.mock_applier import MockThemeApplier
from autotheme.ui import status_page
from autotheme.ui.status_page import StatusPage, format_location, format_theme
from tests.helpers.doubles import LONDON, FakeClock, StubProvider
from tests.helpers.runtime import capture, wait_for

UTC = timezone.utc


@pytest.fixture
def config_path(tmp_path):
    path = tmp_path / "autotheme_config.json"
    path.write_text(
        json.dumps(
            {
                "automation": {"poll_interval_seconds": 3600},
                "location": {"store_path": str(tmp_path / "location.json")},
                "system": {"dev_mode": True, "log_dir": str(tmp_path / "logs")},
            }
        )
    )
    return path


@pytest.fixture
def toasts(monkeypatch):
    shown: list[tuple[str, str]] = []
    monkeypatch.setattr(status_page.ui, "notify", lambda msg, type: shown.append((msg, type)))
    return shown


def _build(config, event_bus, provider, clock):
    applier = create_theme_applier(config)
    controller = AutomationController(
        config=config.automation,
        store=LocationStore(config.location.store_path),
        applier=applier,
        event_bus=event_bus,
        provider=provider,
        notifier=EventBusNotificationSink(event_bus),
        clock=clock,
        tz=UTC,
    )
    return controller, applier


async def test_startup_reaches_status_page(config_path, event_bus, toasts):
    config = load_config(config_path)
    clock = FakeClock(2024, 6, 21, 22, 0, tz=UTC)
    controller, applier = _build(config, event_bus, StubProvider(LONDON), clock)
    assert isinstance(applier, MockThemeApplier)

    page = StatusPage(event_bus=event_bus, on_toggle=controller.set_enabled)
    page.subscribe()
    await controller.start()
    await wait_for(lambda: page.snapshot is not None)
    await wait_for(lambda: ("The theme has been changed to dark mode", "info") in toasts)

    assert format_location(page.snapshot) == "London, United Kingdom"
    assert format_theme(page.snapshot) == "Current theme: Dark"
    assert LocationStore(config.location.store_path).load().label == LONDON.label
    await controller.stop()


async def test_restart_offline_uses_persisted_location(config_path, event_bus, toasts):
    config = load_config(config_path)
    clock = FakeClock(2024, 6, 21, 12, 0, tz=UTC)

    first, _ = _build(config, event_bus, StubProvider(LONDON), clock)
    await first.start()
    await first.stop()

    second, applier = _build(config, event_bus, StubProvider(LocationUnavailableError("offline")), clock)
    snap = await second.start()

    assert snap.location_source is LocationSource.PERSISTED
    assert snap.position.latitude == pytest.approx(LONDON.latitude)
    assert applier.current is DisplayState.LIGHT
    await wait_for(lambda: any("last known location" in msg for msg, _ in toasts))
    await second.stop()


async def test_toggle_round_trip_persists(config_path, event_bus, toasts):
    config = load_config(config_path)
    clock = FakeClock(2024, 6, 21, 12, 0, tz=UTC)
    controller, applier = _build(config, event_bus, None, clock)
    states = capture(event_bus, events.STATE_CHANGED)

    async def on_toggle(enabled: bool) -> None:
        await controller.set_enabled(enabled)
        save_automation_enabled(enabled, config_path)

    page = StatusPage(event_bus=event_bus, on_toggle=on_toggle)
    page.subscribe()
    await controller.start()
    await wait_for(lambda: page.snapshot is not None and page.snapshot.enabled)

    await page._on_toggle_clicked()
    await wait_for(lambda: page.snapshot.controller_state is ControllerState.PAUSED)
    assert load_config(config_path).automation.enabled is False

    clock.set(datetime(2024, 6, 21, 22, 0, tzinfo=UTC))
    await page._on_toggle_clicked()
    await wait_for(lambda: page.snapshot.controller_state is ControllerState.RUNNING)
    assert load_config(config_path).automation.enabled is True
    assert applier.transitions == [DisplayState.LIGHT, DisplayState.DARK]
    assert [e.payload["new"] for e in states] == ["running", "paused", "running"]
    await controller.stop()
