"""Tests for the NOAA sunrise/sunset calculator."""

import math
from datetime import date, datetime, time, timedelta, timezone

import pytest

from autotheme.core import solar
from autotheme.core.models.state import NoTransition, PolarCondition, SolarWindow
from autotheme.core.solar import CoordinateError, compute, fixed_window

MIDSUMMER = date(2024, 6, 21)
MIDWINTER = date(2024, 12, 21)


def _utc_minutes(value: datetime) -> float:
    value = value.astimezone(timezone.utc)
    return value.hour * 60 + value.minute + value.second / 60


class TestReferenceValues:
    def test_london_midsummer(self):
        window = compute(MIDSUMMER, 51.5074, -0.1278, tz=timezone.utc)
        assert isinstance(window, SolarWindow)
        # Published almanac values: 03:43 / 21:21 BST, i.e. 03:43 / 20:21 UTC.
        assert _utc_minutes(window.sunrise) == pytest.approx(3 * 60 + 43, abs=3)
        assert _utc_minutes(window.sunset) == pytest.approx(20 * 60 + 21, abs=3)

    def test_london_midwinter(self):
        window = compute(MIDWINTER, 51.5074, -0.1278, tz=timezone.utc)
        assert isinstance(window, SolarWindow)
        assert _utc_minutes(window.sunrise) == pytest.approx(8 * 60 + 4, abs=3)
        assert _utc_minutes(window.sunset) == pytest.approx(15 * 60 + 54, abs=3)

    def test_equator_day_is_about_twelve_hours(self):
        window = compute(date(2024, 3, 20), 0.0, 0.0, tz=timezone.utc)
        assert isinstance(window, SolarWindow)
        length = window.sunset - window.sunrise
        assert timedelta(hours=11, minutes=55) < length < timedelta(hours=12, minutes=20)

    def test_declination_at_solstice(self):
        gamma = solar.fractional_year(MIDSUMMER.timetuple().tm_yday, 12.0)
        assert math.degrees(solar.declination(gamma)) == pytest.approx(23.44, abs=0.3)

    def test_equation_of_time_in_february_is_negative(self):
        gamma = solar.fractional_year(date(2024, 2, 11).timetuple().tm_yday, 12.0)
        assert solar.equation_of_time(gamma) == pytest.approx(-14.2, abs=1.0)


class TestPolarCases:
    def test_arctic_circle_midsummer_is_polar_day(self):
        result = compute(MIDSUMMER, 67.0, 20.0)
        assert isinstance(result, NoTransition)
        assert result.condition is PolarCondition.POLAR_DAY
        assert result.date == MIDSUMMER

    def test_high_arctic_midwinter_is_polar_night(self):
        result = compute(MIDWINTER, 80.0, 15.0)
        assert isinstance(result, NoTransition)
        assert result.condition is PolarCondition.POLAR_NIGHT

    def test_southern_hemisphere_is_mirrored(self):
        assert compute(MIDSUMMER, -80.0, 0.0).condition is PolarCondition.POLAR_NIGHT
        assert compute(MIDWINTER, -67.0, 0.0).condition is PolarCondition.POLAR_DAY

    @pytest.mark.parametrize("latitude, expected", [
        (90.0, PolarCondition.POLAR_DAY),
        (-90.0, PolarCondition.POLAR_NIGHT),
    ])
    def test_poles_do_not_divide_by_zero(self, latitude, expected):
        result = compute(MIDSUMMER, latitude, 0.0)
        assert isinstance(result, NoTransition)
        assert result.condition is expected


class TestWindowProperties:
    @pytest.mark.parametrize("latitude", range(-65, 66, 5))
    def test_sunrise_before_sunset_on_same_utc_day(self, latitude):
        day = date(2024, 1, 1)
        while day.year == 2024:
            window = compute(day, float(latitude), 0.0, tz=timezone.utc)
            assert isinstance(window, SolarWindow), f"{day} lat={latitude}"
            assert window.sunrise < window.sunset
            assert window.sunrise.date() == day
            assert window.sunset.date() == day
            day += timedelta(days=7)

    def test_deterministic(self):
        first = compute(MIDSUMMER, 48.8566, 2.3522, tz=timezone.utc)
        second = compute(MIDSUMMER, 48.8566, 2.3522, tz=timezone.utc)
        assert first == second

    def test_result_uses_requested_zone(self):
        cest = timezone(timedelta(hours=2))
        window = compute(MIDSUMMER, 48.8566, 2.3522, tz=cest)
        assert window.sunrise.utcoffset() == timedelta(hours=2)
        assert window.sunset.utcoffset() == timedelta(hours=2)

    def test_default_zone_is_timezone_aware(self):
        window = compute(MIDSUMMER, 48.8566, 2.3522)
        assert window.sunrise.tzinfo is not None
        assert window.sunset.tzinfo is not None

    def test_zone_does_not_move_the_instant(self):
        utc = compute(MIDSUMMER, 40.7128, -74.006, tz=timezone.utc)
        eastern = compute(MIDSUMMER, 40.7128, -74.006, tz=timezone(timedelta(hours=-4)))
        assert utc.sunrise == eastern.sunrise
        assert utc.sunset == eastern.sunset


class TestValidation:
    @pytest.mark.parametrize("latitude, longitude", [
        (90.5, 0.0),
        (-91.0, 0.0),
        (0.0, 180.01),
        (0.0, -200.0),
        (float("nan"), 0.0),
        (0.0, float("nan")),
    ])
    def test_out_of_range_rejected(self, latitude, longitude):
        with pytest.raises(CoordinateError):
            compute(MIDSUMMER, latitude, longitude)

    def test_coordinate_error_is_value_error(self):
        with pytest.raises(ValueError):
            solar.validate_coordinates(100.0, 0.0)

    def test_boundaries_accepted(self):
        solar.validate_coordinates(90.0, 180.0)
        solar.validate_coordinates(-90.0, -180.0)


class TestFixedWindow:
    def test_explicit_zone(self):
        window = fixed_window(MIDSUMMER, time(7, 0), time(19, 0), tz=timezone.utc)
        assert window.date == MIDSUMMER
        assert window.sunrise == datetime(2024, 6, 21, 7, 0, tzinfo=timezone.utc)
        assert window.sunset == datetime(2024, 6, 21, 19, 0, tzinfo=timezone.utc)

    def test_local_zone_is_aware(self):
        window = fixed_window(MIDSUMMER, time(6, 30), time(20, 0))
        assert window.sunrise.tzinfo is not None
        assert (window.sunrise.hour, window.sunrise.minute) == (6, 30)
        assert window.sunset.hour == 20
