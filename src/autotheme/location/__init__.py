"""Location sources and the controller's position cache."""

from autotheme.location.cache import LocationCache
from autotheme.location.ip_provider import IpApiLocationProvider

__all__ = ["IpApiLocationProvider", "LocationCache"]
