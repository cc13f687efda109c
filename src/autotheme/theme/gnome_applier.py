"""GNOME theme applier — ``org.gnome.desktop.interface color-scheme``."""

from __future__ import annotations

import logging
import shutil
import subprocess

from autotheme.core.interfaces.collaborators import ThemeApplier
from autotheme.core.models.state import ApplyResult, DisplayState

_log = logging.getLogger(__name__)

_SCHEMA = "org.gnome.desktop.interface"
_KEY = "color-scheme"
_SCHEMES = {DisplayState.DARK: "prefer-dark", DisplayState.LIGHT: "default"}


def gsettings_available() -> bool:
    return shutil.which("gsettings") is not None


class GnomeThemeApplier(ThemeApplier):
    """Switch GNOME's preferred colour scheme via ``gsettings``.

    Args:
        timeout: Seconds allowed for each ``gsettings`` invocation.
    """

    def __init__(self, timeout: float = 5.0) -> None:
        self._timeout = timeout

    def current_scheme(self) -> str:
        result = subprocess.run(
            ["gsettings", "get", _SCHEMA, _KEY],
            capture_output=True,
            text=True,
            check=True,
            timeout=self._timeout,
        )
        return result.stdout.strip().strip("'")

    def apply(self, state: DisplayState) -> ApplyResult:
        scheme = _SCHEMES[state]
        try:
            if self.current_scheme() == scheme:
                return ApplyResult(state=state, changed=False, detail="already active")
            subprocess.run(
                ["gsettings", "set", _SCHEMA, _KEY, scheme],
                check=True,
                timeout=self._timeout,
            )
        except (OSError, subprocess.SubprocessError) as exc:
            _log.error("gsettings failed: %s", exc)
            return ApplyResult(state=state, ok=False, changed=False, detail=str(exc))
        _log.info("GNOME color-scheme → %s", scheme)
        return ApplyResult(state=state, changed=True)
