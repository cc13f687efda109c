"""Config manager — load JSON → apply env overrides → validate → AutoThemeConfig."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from autotheme.core.models.config import AutoThemeConfig

_log = logging.getLogger(__name__)

# Default config file shipped next to this module.
_DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent / "autotheme_config.json"

# Environment variable → config field mapping.
# Keys are env-var names; values are ``(section, field, type)`` tuples.
_ENV_OVERRIDES: dict[str, tuple[str, str, type]] = {
    "AUTOTHEME_LOG_LEVEL": ("system", "log_level", str),
    "AUTOTHEME_DEV_MODE": ("system", "dev_mode", bool),
    "AUTOTHEME_WEBUI_PORT": ("system", "webui_port", int),
    "AUTOTHEME_ENABLED": ("automation", "enabled", bool),
}


def _coerce(value: str, target_type: type) -> object:
    """Coerce a string env-var value to the expected Python type."""
    if target_type is bool:
        return value.strip().lower() in ("1", "true", "yes")
    return target_type(value)


def load_config(config_path: Path | str | None = None) -> AutoThemeConfig:
    """Load, override, and validate the configuration.

    Args:
        config_path: Path to ``autotheme_config.json``.  When *None*, falls
            back to the ``AUTOTHEME_CONFIG_FILE`` env-var and then the
            default file next to this module.

    Returns:
        A fully-validated :class:`AutoThemeConfig` instance.

    Raises:
        FileNotFoundError: If the config file does not exist.
        pydantic.ValidationError: If a value is out of range or unknown.
    """
    path = _resolve_config_path(config_path)
    _log.info("Loading config from %s", path)

    raw = json.loads(path.read_text(encoding="utf-8"))

    for env_key, (section, field, typ) in _ENV_OVERRIDES.items():
        env_val = os.environ.get(env_key)
        if env_val is not None:
            raw.setdefault(section, {})[field] = _coerce(env_val, typ)
            _log.debug("Env override: %s → %s.%s = %r", env_key, section, field, env_val)

    return AutoThemeConfig(**raw)


def save_automation_enabled(
    enabled: bool,
    config_path: Path | str | None = None,
) -> AutoThemeConfig:
    """Persist ``automation.enabled`` (the pause/resume toggle).

    Only the one key is rewritten; every other value in the file is kept
    as the user wrote it.
    """
    path = _resolve_config_path(config_path)
    raw = json.loads(path.read_text(encoding="utf-8"))
    raw.setdefault("automation", {})["enabled"] = bool(enabled)

    validated = AutoThemeConfig(**raw)
    atomic_write_json(path, raw)
    return validated


def atomic_write_json(path: Path, payload: dict[str, Any]) -> None:
    """Write *payload* to a temp file beside *path*, then rename over it."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f"{path.name}.", suffix=".tmp", dir=str(path.parent))
    try:
        with open(fd, "w", encoding="utf-8") as handle:
            json.dump(payload, handle, indent=2)
            handle.write("\n")
        Path(tmp_name).replace(path)
    finally:
        tmp_path = Path(tmp_name)
        if tmp_path.exists():
            tmp_path.unlink(missing_ok=True)


def _resolve_config_path(config_path: Path | str | None) -> Path:
    if config_path is not None:
        p = Path(config_path)
    else:
        env = os.environ.get("AUTOTHEME_CONFIG_FILE")
        p = Path(env) if env else _DEFAULT_CONFIG_PATH
    if not p.is_file():
        raise FileNotFoundError(
            f"Config file not found: {p}\n"
            "Create autotheme_config.json or set AUTOTHEME_CONFIG_FILE to a valid path."
        )
    return p
