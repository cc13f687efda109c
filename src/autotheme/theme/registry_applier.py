"""Windows theme applier — ``HKCU\\...\\Themes\\Personalize`` registry values.

Writes ``AppsUseLightTheme`` and/or ``SystemUsesLightTheme`` (0 = dark,
1 = light), skipping the write when the value already matches, then
broadcasts ``WM_SETTINGCHANGE("ImmersiveColorSet")`` so running apps
repaint without a logoff.
"""

from __future__ import annotations

import logging
import sys

from autotheme.core.interfaces.collaborators import ThemeApplier
from autotheme.core.models.state import ApplyResult, DisplayState

_log = logging.getLogger(__name__)

PERSONALIZE_KEY = r"Software\Microsoft\Windows\CurrentVersion\Themes\Personalize"
APPS_VALUE = "AppsUseLightTheme"
SYSTEM_VALUE = "SystemUsesLightTheme"

_HWND_BROADCAST = 0xFFFF
_WM_SETTINGCHANGE = 0x001A
_SMTO_ABORTIFHUNG = 0x0002


class RegistryThemeApplier(ThemeApplier):
    """Switch the Windows app/system theme through the registry.

    Args:
        change_apps: Write ``AppsUseLightTheme``.
        change_system: Write ``SystemUsesLightTheme``.
        broadcast_timeout_ms: Per-window timeout for the settings broadcast.
    """

    def __init__(
        self,
        change_apps: bool = True,
        change_system: bool = True,
        broadcast_timeout_ms: int = 5000,
    ) -> None:
        if sys.platform != "win32":
            raise RuntimeError("RegistryThemeApplier requires Windows")
        self._value_names = [
            name
            for name, wanted in ((APPS_VALUE, change_apps), (SYSTEM_VALUE, change_system))
            if wanted
        ]
        self._broadcast_timeout_ms = broadcast_timeout_ms

    def apply(self, state: DisplayState) -> ApplyResult:
        import winreg

        value = 0 if state is DisplayState.DARK else 1
        changed = False
        try:
            with winreg.OpenKey(
                winreg.HKEY_CURRENT_USER,
                PERSONALIZE_KEY,
                0,
                winreg.KEY_QUERY_VALUE | winreg.KEY_SET_VALUE,
            ) as key:
                for name in self._value_names:
                    try:
                        current, _ = winreg.QueryValueEx(key, name)
                    except FileNotFoundError:
                        current = None
                    if current == value:
                        continue
                    winreg.SetValueEx(key, name, 0, winreg.REG_DWORD, value)
                    changed = True
        except OSError as exc:
            _log.error("Registry write failed: %s", exc)
            return ApplyResult(state=state, ok=False, changed=False, detail=str(exc))

        if changed:
            self._broadcast()
        return ApplyResult(state=state, changed=changed)

    def _broadcast(self) -> None:
        import ctypes

        ctypes.windll.user32.SendMessageTimeoutW(  # type: ignore[attr-defined]
            _HWND_BROADCAST,
            _WM_SETTINGCHANGE,
            0,
            "ImmersiveColorSet",
            _SMTO_ABORTIFHUNG,
            self._broadcast_timeout_ms,
            None,
        )
