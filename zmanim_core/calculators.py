"""Solar position strategies returning UTC times of zenith crossings.

Two interchangeable algorithms are provided. :class:`NOAACalculator` follows
the NOAA solar calculator (itself based on Jean Meeus' *Astronomical
Algorithms*) and is the default. :class:`SunTimesCalculator` implements the
simpler US Naval Observatory almanac algorithm. Both report times as a
fractional UTC hour in ``[0, 24)`` on the requested date, or ``None`` when the
sun does not reach the requested zenith on that day.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from datetime import date
from typing import Dict, Optional, Type

import erfa
import numpy as np

from .location import Location

__all__ = [
    "SolarPositionCalculator",
    "NOAACalculator",
    "SunTimesCalculator",
    "CALCULATORS",
    "get_calculator",
]

GEOMETRIC_ZENITH = 90.0

JULIAN_DAY_JAN_1_2000 = 2451545.0
JULIAN_DAYS_PER_CENTURY = 36525.0
DEG_PER_HOUR = 360.0 / 24.0


class SolarPositionCalculator(ABC):
    """Capability interface for sunrise/sunset style zenith crossings."""

    name: str = "abstract"

    #: Average atmospheric refraction at the horizon, in degrees.
    refraction: float = 34 / 60.0
    #: Mean angular radius of the sun, in degrees.
    solar_radius: float = 16 / 60.0
    #: Earth radius in kilometers used for the elevation dip.
    earth_radius: float = 6356.9

    @abstractmethod
    def crossing_time(
        self,
        day: date,
        location: Location,
        zenith: float,
        adjust_for_elevation: bool,
        rising: bool,
    ) -> Optional[float]:
        """UTC fractional hour at which the sun crosses *zenith* on *day*."""

    @abstractmethod
    def solar_transit(self, day: date, location: Location) -> Optional[float]:
        """UTC fractional hour of the true solar transit, if the strategy has one."""

    def utc_sunrise(
        self, day: date, location: Location, zenith: float, adjust_for_elevation: bool
    ) -> Optional[float]:
        return self.crossing_time(day, location, zenith, adjust_for_elevation, rising=True)

    def utc_sunset(
        self, day: date, location: Location, zenith: float, adjust_for_elevation: bool
    ) -> Optional[float]:
        return self.crossing_time(day, location, zenith, adjust_for_elevation, rising=False)

    def elevation_adjustment(self, elevation: float) -> float:
        """Dip of the visible horizon in degrees for an observer *elevation* meters up."""

        return math.degrees(
            math.acos(self.earth_radius / (self.earth_radius + elevation / 1000.0))
        )

    def adjust_zenith(self, zenith: float, elevation: float) -> float:
        """Add solar radius, refraction and horizon dip to a 90 degree zenith.

        Any other zenith is returned unchanged: twilight zeniths describe a
        level of ambient light, which does not depend on the observer height.
        """

        if zenith != GEOMETRIC_ZENITH:
            return zenith
        return zenith + self.solar_radius + self.refraction + self.elevation_adjustment(elevation)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other)

    def __hash__(self) -> int:
        return hash(type(self))


def _normalize_hours(hours: float) -> float:
    while hours < 0.0:
        hours += 24.0
    while hours >= 24.0:
        hours -= 24.0
    return hours


class NOAACalculator(SolarPositionCalculator):
    """NOAA solar position algorithm.

    Accurate to within a minute between +/- 72 degrees latitude for dates
    between 1800 and 2100; less accurate closer to the poles.
    """

    name = "noaa"

    def crossing_time(
        self,
        day: date,
        location: Location,
        zenith: float,
        adjust_for_elevation: bool,
        rising: bool,
    ) -> Optional[float]:
        elevation = location.elevation if adjust_for_elevation else 0.0
        adjusted_zenith = self.adjust_zenith(zenith, elevation)
        minutes = _event_utc_minutes(
            _julian_day(day), location.latitude, -location.longitude, adjusted_zenith, rising
        )
        if minutes is None:
            return None
        return _normalize_hours(minutes / 60.0)

    def solar_transit(self, day: date, location: Location) -> Optional[float]:
        centuries = _julian_centuries(_julian_day(day))
        noon = _solar_noon_utc_minutes(centuries, -location.longitude)
        return _normalize_hours(noon / 60.0)


def _julian_day(day: date) -> float:
    """Julian day at 0h UTC of a proleptic Gregorian date."""

    djm0, djm = erfa.cal2jd(day.year, day.month, day.day)
    return float(djm0 + djm)


def _julian_centuries(julian_day: float) -> float:
    return (julian_day - JULIAN_DAY_JAN_1_2000) / JULIAN_DAYS_PER_CENTURY


def _julian_day_from_centuries(centuries: float) -> float:
    return centuries * JULIAN_DAYS_PER_CENTURY + JULIAN_DAY_JAN_1_2000


def _sun_geometric_mean_longitude(t: float) -> float:
    longitude = float(np.polyval([0.0003032, 36000.76983, 280.46646], t))
    return longitude % 360.0


def _sun_geometric_mean_anomaly(t: float) -> float:
    return float(np.polyval([-0.0001537, 35999.05029, 357.52911], t))


def _earth_orbit_eccentricity(t: float) -> float:
    return float(np.polyval([-0.0000001267, -0.000042037, 0.016708634], t))


def _sun_equation_of_center(t: float) -> float:
    m = math.radians(_sun_geometric_mean_anomaly(t))
    return (
        math.sin(m) * np.polyval([-0.000014, -0.004817, 1.914602], t)
        + math.sin(2 * m) * (0.019993 - 0.000101 * t)
        + math.sin(3 * m) * 0.000289
    )


def _sun_apparent_longitude(t: float) -> float:
    true_longitude = _sun_geometric_mean_longitude(t) + _sun_equation_of_center(t)
    omega = 125.04 - 1934.136 * t
    return true_longitude - 0.00569 - 0.00478 * math.sin(math.radians(omega))


def _obliquity_correction(t: float) -> float:
    seconds = float(np.polyval([0.001813, -0.00059, -46.8150, 21.448], t))
    mean_obliquity = 23.0 + (26.0 + seconds / 60.0) / 60.0
    omega = 125.04 - 1934.136 * t
    return mean_obliquity + 0.00256 * math.cos(math.radians(omega))


def _sun_declination(t: float) -> float:
    sint = math.sin(math.radians(_obliquity_correction(t))) * math.sin(
        math.radians(_sun_apparent_longitude(t))
    )
    return math.degrees(math.asin(sint))


def _equation_of_time(t: float) -> float:
    """Equation of time in minutes."""

    epsilon = math.radians(_obliquity_correction(t))
    l0 = math.radians(_sun_geometric_mean_longitude(t))
    e = _earth_orbit_eccentricity(t)
    m = math.radians(_sun_geometric_mean_anomaly(t))
    y = math.tan(epsilon / 2.0) ** 2
    equation = (
        y * math.sin(2.0 * l0)
        - 2.0 * e * math.sin(m)
        + 4.0 * e * y * math.sin(m) * math.cos(2.0 * l0)
        - 0.5 * y * y * math.sin(4.0 * l0)
        - 1.25 * e * e * math.sin(2.0 * m)
    )
    return math.degrees(equation) * 4.0


def _hour_angle(latitude: float, declination: float, zenith: float) -> Optional[float]:
    """Hour angle in radians of the rising sun; ``None`` if it never gets there."""

    lat = math.radians(latitude)
    dec = math.radians(declination)
    cos_ha = math.cos(math.radians(zenith)) / (math.cos(lat) * math.cos(dec)) - math.tan(
        lat
    ) * math.tan(dec)
    if not -1.0 <= cos_ha <= 1.0:
        return None
    return math.acos(cos_ha)


def _solar_noon_utc_minutes(centuries: float, west_longitude: float) -> float:
    julian_day = _julian_day_from_centuries(centuries)
    # First pass uses approximate solar noon to get the equation of time.
    t_noon = _julian_centuries(julian_day + west_longitude / 360.0)
    solar_noon = 720 + west_longitude * 4 - _equation_of_time(t_noon)
    t_noon = _julian_centuries(julian_day - 0.5 + solar_noon / 1440.0)
    return 720 + west_longitude * 4 - _equation_of_time(t_noon)


def _event_utc_minutes(
    julian_day: float, latitude: float, west_longitude: float, zenith: float, rising: bool
) -> Optional[float]:
    centuries = _julian_centuries(julian_day)
    noon = _solar_noon_utc_minutes(centuries, west_longitude)
    t = _julian_centuries(julian_day + noon / 1440.0)

    time_utc = None
    # Two passes: the second uses the declination at the first estimate.
    for _ in range(2):
        hour_angle = _hour_angle(latitude, _sun_declination(t), zenith)
        if hour_angle is None:
            return None
        if not rising:
            hour_angle = -hour_angle
        delta = west_longitude - math.degrees(hour_angle)
        time_utc = 720 + 4 * delta - _equation_of_time(t)
        t = _julian_centuries(julian_day + time_utc / 1440.0)
    return time_utc


class SunTimesCalculator(SolarPositionCalculator):
    """US Naval Observatory almanac algorithm.

    Has no notion of true solar transit; :meth:`solar_transit` returns
    ``None`` and callers fall back to the sunrise/sunset midpoint.
    """

    name = "usno"

    def crossing_time(
        self,
        day: date,
        location: Location,
        zenith: float,
        adjust_for_elevation: bool,
        rising: bool,
    ) -> Optional[float]:
        elevation = location.elevation if adjust_for_elevation else 0.0
        adjusted_zenith = self.adjust_zenith(zenith, elevation)
        day_of_year = day.timetuple().tm_yday
        hours_from_meridian = location.longitude / DEG_PER_HOUR

        approx_days = day_of_year + ((6.0 if rising else 18.0) - hours_from_meridian) / 24.0
        mean_anomaly = 0.9856 * approx_days - 3.289

        true_longitude = (
            mean_anomaly
            + 1.916 * _sin_deg(mean_anomaly)
            + 0.020 * _sin_deg(2 * mean_anomaly)
            + 282.634
        ) % 360.0

        right_ascension = math.degrees(math.atan(0.91764 * _tan_deg(true_longitude)))
        right_ascension += math.floor(true_longitude / 90.0) * 90.0 - math.floor(
            right_ascension / 90.0
        ) * 90.0
        right_ascension_hours = right_ascension / DEG_PER_HOUR

        sin_dec = 0.39782 * _sin_deg(true_longitude)
        cos_dec = math.cos(math.asin(sin_dec))
        cos_local_hour_angle = (
            math.cos(math.radians(adjusted_zenith)) - sin_dec * _sin_deg(location.latitude)
        ) / (cos_dec * math.cos(math.radians(location.latitude)))
        if not -1.0 <= cos_local_hour_angle <= 1.0:
            return None

        local_hour_angle = math.degrees(math.acos(cos_local_hour_angle))
        if rising:
            local_hour_angle = 360.0 - local_hour_angle
        local_hour = local_hour_angle / DEG_PER_HOUR

        local_mean_time = local_hour + right_ascension_hours - 0.06571 * approx_days - 6.622
        return _normalize_hours(local_mean_time - hours_from_meridian)

    def solar_transit(self, day: date, location: Location) -> Optional[float]:
        return None


def _sin_deg(degrees: float) -> float:
    return math.sin(math.radians(degrees))


def _tan_deg(degrees: float) -> float:
    return math.tan(math.radians(degrees))


CALCULATORS: Dict[str, Type[SolarPositionCalculator]] = {
    NOAACalculator.name: NOAACalculator,
    SunTimesCalculator.name: SunTimesCalculator,
}


def get_calculator(name: str) -> SolarPositionCalculator:
    """Return a fresh calculator for the registered strategy *name*."""

    try:
        calculator_cls = CALCULATORS[name.lower()]
    except KeyError as exc:
        raise ValueError(
            f"Unsupported calculator: {name} (expected one of {sorted(CALCULATORS)})"
        ) from exc
    return calculator_cls()
