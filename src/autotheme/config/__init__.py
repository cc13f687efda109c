"""Configuration: config manager, location store, and JSON files."""

from autotheme.config.config_manager import atomic_write_json, load_config, save_automation_enabled
from autotheme.config.location_store import LocationStore

__all__ = [
    "atomic_write_json",
    "load_config",
    "save_automation_enabled",
    "LocationStore",
]
