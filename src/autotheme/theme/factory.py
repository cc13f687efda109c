"""Theme applier factory — platform detection and backend selection.

Selects the registry backend on Windows, ``gsettings`` on GNOME desktops,
and the in-memory mock everywhere else (CI, headless, ``dev_mode``).
"""

from __future__ import annotations

import logging
import sys

from autotheme.core.interfaces.collaborators import ThemeApplier
from autotheme.core.models.config import AutoThemeConfig
from autotheme.theme.gnome_applier import GnomeThemeApplier, gsettings_available

_log = logging.getLogger(__name__)


def _detect_backend() -> str:
    if sys.platform == "win32":
        return "registry"
    if sys.platform.startswith("linux") and gsettings_available():
        return "gnome"
    return "mock"


def create_theme_applier(config: AutoThemeConfig) -> ThemeApplier:
    """Return the :class:`ThemeApplier` configured for this machine.

    ``theme.applier`` picks a backend explicitly; ``"auto"`` detects one.
    ``system.dev_mode`` always forces the mock so development never
    touches the real desktop.
    """
    backend = config.theme.applier
    if config.system.dev_mode:
        backend = "mock"
    elif backend == "auto":
        backend = _detect_backend()

    if backend == "registry":
        from autotheme.theme.registry_applier import RegistryThemeApplier

        _log.info("Using RegistryThemeApplier")
        return RegistryThemeApplier(
            change_apps=config.theme.change_apps,
            change_system=config.theme.change_system,
        )
    if backend == "gnome":
        _log.info("Using GnomeThemeApplier")
        return GnomeThemeApplier()

    from autotheme.theme.mock_applier import MockThemeApplier

    _log.info("Using MockThemeApplier (dev_mode=%s)", config.system.dev_mode)
    return MockThemeApplier()
