"""Theme appliers: Windows registry, GNOME gsettings, and in-memory mock."""

from autotheme.theme.factory import create_theme_applier
from autotheme.theme.mock_applier import MockThemeApplier

__all__ = ["create_theme_applier", "MockThemeApplier"]
