"""autotheme — Application entry point (NiceGUI composition root).

Wires together: Config → EventBus → LocationStore/Provider → ThemeApplier
→ AutomationController → StatusPage.  NiceGUI owns the event loop;
``app.on_startup`` / ``app.on_shutdown`` handle lifecycle.
"""

from __future__ import annotations

import logging
from pathlib import Path

from nicegui import app, ui

from autotheme.config.config_manager import load_config, save_automation_enabled
from autotheme.config.location_store import LocationStore
from autotheme.core.automation_controller import AutomationController
from autotheme.core.event_bus import EventBus
from autotheme.core.notifications import EventBusNotificationSink
from autotheme.location.ip_provider import IpApiLocationProvider
from autotheme.log_config.logger import setup_logging
from autotheme.theme.factory import create_theme_applier
from autotheme.ui.status_page import StatusPage

_log = logging.getLogger(__name__)


def main() -> None:
    """Synchronous entry point — bootstraps and starts NiceGUI."""

    # 1. Load configuration, then configure logging from it
    config = load_config()
    setup_logging(log_level=config.system.log_level, log_dir=config.system.log_dir)
    _log.info("Starting autotheme")

    # 2. Event bus (observer channel)
    bus = EventBus(queue_size=config.system.event_bus_queue_size)

    # 3. Collaborators
    store = LocationStore(Path(config.location.store_path).expanduser())
    provider = IpApiLocationProvider(url=config.location.provider_url)
    applier = create_theme_applier(config)

    # 4. Controller
    controller = AutomationController(
        config=config.automation,
        store=store,
        applier=applier,
        event_bus=bus,
        provider=provider,
        notifier=EventBusNotificationSink(bus),
    )

    # 5. Status page; the toggle is persisted so it survives restarts
    async def on_toggle(enabled: bool) -> None:
        await controller.set_enabled(enabled)
        try:
            save_automation_enabled(enabled)
        except OSError as exc:
            _log.warning("Could not persist toggle: %s", exc)

    page = StatusPage(event_bus=bus, on_toggle=on_toggle)
    page.setup_page()

    # 6. Wire lifecycle hooks
    async def on_startup() -> None:
        await bus.start()
        page.subscribe()
        await controller.start()
        _log.info("autotheme running on http://localhost:%d", config.system.webui_port)

    async def on_shutdown() -> None:
        _log.info("NiceGUI shutdown — stopping controller")
        await controller.stop()
        await bus.stop()
        _log.info("autotheme stopped")

    app.on_startup(on_startup)
    app.on_shutdown(on_shutdown)

    # 7. Launch NiceGUI (blocks until shutdown)
    ui.run(
        port=config.system.webui_port,
        title="Auto Theme Switcher",
        reload=False,
        show=False,
    )


if __name__ == "__main__":
    main()
