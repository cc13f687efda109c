"""Sunrise / sunset for one date and position (NOAA simplified algorithm).

Pure functions only: no clock, no I/O.  The fractional-year series and the
90.833° zenith (refraction plus solar-disk radius) follow the NOAA "General
Solar Position Calculations" notes, so results agree with other NOAA-based
implementations to well under a minute.
"""

from __future__ import annotations

import logging
import math
from datetime import date, datetime, time, timedelta, timezone, tzinfo

from autotheme.core.models.state import NoTransition, PolarCondition, SolarWindow

_log = logging.getLogger(__name__)

SUNRISE_ZENITH_DEG = 90.833
_COS_ZENITH = math.cos(math.radians(SUNRISE_ZENITH_DEG))


class CoordinateError(ValueError):
    """Latitude or longitude outside the valid range."""


def validate_coordinates(latitude: float, longitude: float) -> None:
    """Raise :class:`CoordinateError` unless both values are in range.

    NaN compares false against every bound, so it is rejected as well.
    """
    if not -90.0 <= latitude <= 90.0:
        raise CoordinateError(f"Latitude {latitude!r} outside [-90, 90]")
    if not -180.0 <= longitude <= 180.0:
        raise CoordinateError(f"Longitude {longitude!r} outside [-180, 180]")


def fractional_year(day_of_year: int, hour_utc: float) -> float:
    """Fractional year angle γ in radians."""
    return (2 * math.pi / 365) * (day_of_year - 1 + (hour_utc - 12) / 24)


def equation_of_time(gamma: float) -> float:
    """Equation of time in minutes."""
    return 229.18 * (
        0.000075
        + 0.001868 * math.cos(gamma)
        - 0.032077 * math.sin(gamma)
        - 0.014615 * math.cos(2 * gamma)
        - 0.040849 * math.sin(2 * gamma)
    )


def declination(gamma: float) -> float:
    """Solar declination in radians."""
    return (
        0.006918
        - 0.399912 * math.cos(gamma)
        + 0.070257 * math.sin(gamma)
        - 0.006758 * math.cos(2 * gamma)
        + 0.000907 * math.sin(2 * gamma)
        - 0.002697 * math.cos(3 * gamma)
        + 0.00148 * math.sin(3 * gamma)
    )


def sun_events_utc_minutes(
    day: date, latitude: float, longitude: float
) -> tuple[float, float] | PolarCondition:
    """Return ``(sunrise, sunset)`` in minutes after UTC midnight of *day*.

    Returns a :class:`PolarCondition` instead when the sun stays above or
    below the horizon all day.
    """
    # Solar noon is roughly 12:00 local mean time, i.e. 12 - lon/15 in UTC.
    hour_utc = 12.0 - longitude / 15.0
    gamma = fractional_year(day.timetuple().tm_yday, hour_utc)
    eqtime = equation_of_time(gamma)
    decl = declination(gamma)

    # cos(radians(±90)) is ~6e-17, never exactly zero, so the poles land in
    # the polar branches below instead of dividing by zero.
    lat_rad = math.radians(latitude)
    cos_h = (_COS_ZENITH - math.sin(lat_rad) * math.sin(decl)) / (
        math.cos(lat_rad) * math.cos(decl)
    )

    if cos_h < -1.0:
        return PolarCondition.POLAR_DAY
    if cos_h > 1.0:
        return PolarCondition.POLAR_NIGHT

    ha_deg = math.degrees(math.acos(cos_h))
    sunrise = 720.0 - 4.0 * (longitude + ha_deg) - eqtime
    sunset = 720.0 - 4.0 * (longitude - ha_deg) - eqtime
    return sunrise, sunset


def compute(
    day: date,
    latitude: float,
    longitude: float,
    tz: tzinfo | None = None,
) -> SolarWindow | NoTransition:
    """Sunrise and sunset for *day* at the given position.

    Args:
        day: Calendar date, interpreted in the observer's local zone.
        latitude: Decimal degrees, north positive.
        longitude: Decimal degrees, east positive.
        tz: Zone for the returned instants.  ``None`` uses the system's
            local zone (DST-correct for *day*).

    Returns:
        A :class:`SolarWindow` with timezone-aware instants, or a
        :class:`NoTransition` for polar day / polar night.

    Raises:
        CoordinateError: If *latitude* or *longitude* is out of range.
    """
    validate_coordinates(latitude, longitude)

    events = sun_events_utc_minutes(day, latitude, longitude)
    if isinstance(events, PolarCondition):
        _log.debug("No sunrise/sunset on %s at lat=%.4f (%s)", day, latitude, events.value)
        return NoTransition(date=day, condition=events)

    sunrise_min, sunset_min = events
    utc_midnight = datetime.combine(day, time(0, 0), tzinfo=timezone.utc)
    sunrise = utc_midnight + timedelta(minutes=sunrise_min)
    sunset = utc_midnight + timedelta(minutes=sunset_min)
    return SolarWindow(
        date=day,
        sunrise=sunrise.astimezone(tz),
        sunset=sunset.astimezone(tz),
    )


def fixed_window(day: date, sunrise: time, sunset: time, tz: tzinfo | None = None) -> SolarWindow:
    """Window built from wall-clock times, used while the location is unknown."""
    if tz is None:
        return SolarWindow(
            date=day,
            sunrise=datetime.combine(day, sunrise).astimezone(),
            sunset=datetime.combine(day, sunset).astimezone(),
        )
    return SolarWindow(
        date=day,
        sunrise=datetime.combine(day, sunrise, tzinfo=tz),
        sunset=datetime.combine(day, sunset, tzinfo=tz),
    )
