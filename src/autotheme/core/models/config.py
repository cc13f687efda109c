"""Configuration Pydantic models: AutoThemeConfig and its sections."""

from __future__ import annotations

from datetime import time
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class AutomationConfig(BaseModel):
    """Scheduling and caching policy for the automation controller.

    Only ``enabled`` changes at runtime (through the pause/resume toggle);
    everything else is fixed once the controller starts.
    """

    model_config = ConfigDict(extra="forbid")

    enabled: bool = Field(default=True, description="Automatic switching on/off")
    poll_interval_seconds: float = Field(
        default=60.0, gt=0, description="Seconds between scheduler ticks"
    )
    location_refresh_interval_seconds: float = Field(
        default=6 * 3600.0, gt=0, description="Maximum age of the cached location"
    )
    change_threshold_degrees: float = Field(
        default=0.001, ge=0, description="Minimum lat/lon delta treated as a real move"
    )
    location_timeout_seconds: float = Field(
        default=10.0, gt=0, description="Upper bound for one location lookup"
    )
    apply_timeout_seconds: float = Field(
        default=10.0, gt=0, description="Upper bound for one theme switch"
    )
    default_sunrise: time = Field(
        default=time(7, 0), description="Sunrise used while the location is unknown"
    )
    default_sunset: time = Field(
        default=time(19, 0), description="Sunset used while the location is unknown"
    )

    @model_validator(mode="after")
    def _check_default_window(self) -> AutomationConfig:
        if self.default_sunrise >= self.default_sunset:
            raise ValueError("default_sunrise must be earlier than default_sunset")
        return self


class LocationConfig(BaseModel):
    """Where positions come from and where the last one is kept."""

    model_config = ConfigDict(extra="forbid")

    provider_url: str = Field(
        default="http://ip-api.com/json/", description="IP geolocation endpoint"
    )
    store_path: str = Field(
        default="location.json", description="JSON file holding the last known position"
    )


class ThemeConfig(BaseModel):
    """Which applier performs the switch and what it touches."""

    model_config = ConfigDict(extra="forbid")

    applier: Literal["auto", "registry", "gnome", "mock"] = Field(
        default="auto", description="Theme backend; 'auto' picks one for the platform"
    )
    change_apps: bool = Field(default=True, description="Switch the app theme")
    change_system: bool = Field(default=True, description="Switch the system (shell) theme")


class SystemConfig(BaseModel):
    """Non-automation runtime settings."""

    model_config = ConfigDict(extra="forbid")

    log_level: str = Field(default="INFO", description="Root log level")
    log_dir: str = Field(default="logs", description="Directory for rotating log files")
    event_bus_queue_size: int = Field(default=1000, description="Max queued events")
    webui_port: int = Field(default=8080, description="NiceGUI listen port")
    dev_mode: bool = Field(default=False, description="Force the mock theme applier")


class AutoThemeConfig(BaseModel):
    """Top-level configuration loaded from ``autotheme_config.json``."""

    model_config = ConfigDict(extra="forbid")

    automation: AutomationConfig = Field(default_factory=AutomationConfig)
    location: LocationConfig = Field(default_factory=LocationConfig)
    theme: ThemeConfig = Field(default_factory=ThemeConfig)
    system: SystemConfig = Field(default_factory=SystemConfig)
