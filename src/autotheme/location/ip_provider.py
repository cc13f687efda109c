"""IP-based location lookup (ip-api.com JSON endpoint).

Response shape on success::

    {"status": "success", "lat": 51.5, "lon": -0.12,
     "city": "London", "country": "United Kingdom", ...}

and ``{"status": "fail", "message": "reserved range"}`` otherwise.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable

from pydantic import ValidationError

from autotheme._lib.http_helpers import fetch_json
from autotheme.core.interfaces.collaborators import LocationProvider, LocationUnavailableError
from autotheme.core.models.state import GeoPosition

_log = logging.getLogger(__name__)

DEFAULT_URL = "http://ip-api.com/json/"


def _label(data: dict[str, Any]) -> str:
    parts = [str(data[k]) for k in ("city", "country") if data.get(k)]
    return ", ".join(parts)


class IpApiLocationProvider(LocationProvider):
    """Resolve the machine's position from its public IP address.

    Args:
        url: Endpoint returning the ip-api.com JSON schema.
        clock: Source of ``observed_at`` timestamps (UTC).
    """

    def __init__(
        self,
        url: str = DEFAULT_URL,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._url = url
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def fetch(self, timeout: float) -> GeoPosition:
        try:
            data = fetch_json(
                self._url,
                params={"fields": "status,message,lat,lon,city,country"},
                timeout=timeout,
            )
        except RuntimeError as exc:
            raise LocationUnavailableError(f"Location lookup failed: {exc}") from exc

        if not isinstance(data, dict) or data.get("status") != "success":
            message = data.get("message", "unsuccessful status") if isinstance(data, dict) else "bad payload"
            raise LocationUnavailableError(f"Location service returned {message}")

        try:
            position = GeoPosition(
                latitude=data["lat"],
                longitude=data["lon"],
                label=_label(data),
                observed_at=self._clock(),
            )
        except (KeyError, ValidationError) as exc:
            raise LocationUnavailableError(f"Location service returned bad coordinates: {exc}") from exc

        _log.debug("IP lookup → %.4f, %.4f (%s)", position.latitude, position.longitude, position.label)
        return position
