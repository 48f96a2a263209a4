"""Astronomical calendar: sunrise, sunset and twilight instants for a date."""

from __future__ import annotations

import copy
import json
import logging
import math
from datetime import UTC, date, datetime, timedelta
from typing import Optional, Union

from .calculators import NOAACalculator, SolarPositionCalculator
from .location import Location

__all__ = [
    "AstronomicalCalendar",
    "GEOMETRIC_ZENITH",
    "CIVIL_ZENITH",
    "NAUTICAL_ZENITH",
    "ASTRONOMICAL_ZENITH",
]

LOGGER = logging.getLogger(__name__)

GEOMETRIC_ZENITH = 90.0
CIVIL_ZENITH = 96.0
NAUTICAL_ZENITH = 102.0
ASTRONOMICAL_ZENITH = 108.0

SUNRISE_DIP_STEP = 0.0001
SUNSET_DIP_STEP = 0.001
#: Deepest dip a search may reach, in degrees below the geometric horizon.
MAX_DIP_DEGREES = 90.0


class AstronomicalCalendar:
    """Sun events for one :class:`Location` on a mutable current date.

    Every property read recomputes from the calculator; nothing is cached, so
    changing :attr:`current_date` or :attr:`use_elevation` takes effect on the
    next read. Instances are not safe to share between threads; use
    :meth:`clone` to get an independent copy.

    Times are returned as timezone-aware datetimes in the location's zone, or
    ``None`` when the event does not happen on that date (for example sunrise
    during polar night).
    """

    def __init__(
        self,
        location: Optional[Location] = None,
        calculator: Optional[SolarPositionCalculator] = None,
        current_date: Optional[date] = None,
        use_elevation: bool = False,
    ) -> None:
        self.location = location if location is not None else Location()
        self.calculator = calculator if calculator is not None else NOAACalculator()
        self.current_date = current_date if current_date is not None else date.today()
        self.use_elevation = use_elevation

    @property
    def current_date(self) -> date:
        return self._current_date

    @current_date.setter
    def current_date(self, value: date) -> None:
        if isinstance(value, datetime):
            value = value.date()
        self._current_date = value

    @property
    def _adjusted_date(self) -> date:
        offset = self.location.antimeridian_adjustment(self._current_date)
        if offset == 0:
            return self._current_date
        return self._current_date + timedelta(days=offset)

    # -- raw calculator access -------------------------------------------

    def utc_sunrise(self, zenith: float) -> Optional[float]:
        return self.calculator.utc_sunrise(self._adjusted_date, self.location, zenith, True)

    def utc_sea_level_sunrise(self, zenith: float) -> Optional[float]:
        return self.calculator.utc_sunrise(self._adjusted_date, self.location, zenith, False)

    def utc_sunset(self, zenith: float) -> Optional[float]:
        return self.calculator.utc_sunset(self._adjusted_date, self.location, zenith, True)

    def utc_sea_level_sunset(self, zenith: float) -> Optional[float]:
        return self.calculator.utc_sunset(self._adjusted_date, self.location, zenith, False)

    # -- sunrise side ----------------------------------------------------

    @property
    def sunrise(self) -> Optional[datetime]:
        """Sunrise adjusted for the location's elevation."""

        return self.date_from_time(self.utc_sunrise(GEOMETRIC_ZENITH), is_sunrise=True)

    @property
    def sea_level_sunrise(self) -> Optional[datetime]:
        return self.date_from_time(
            self.utc_sea_level_sunrise(GEOMETRIC_ZENITH), is_sunrise=True
        )

    @property
    def elevation_adjusted_sunrise(self) -> Optional[datetime]:
        """:attr:`sunrise` when :attr:`use_elevation` is set, else sea level."""

        return self.sunrise if self.use_elevation else self.sea_level_sunrise

    @property
    def begin_civil_twilight(self) -> Optional[datetime]:
        return self.sunrise_offset_by_degrees(CIVIL_ZENITH)

    @property
    def begin_nautical_twilight(self) -> Optional[datetime]:
        return self.sunrise_offset_by_degrees(NAUTICAL_ZENITH)

    @property
    def begin_astronomical_twilight(self) -> Optional[datetime]:
        return self.sunrise_offset_by_degrees(ASTRONOMICAL_ZENITH)

    def sunrise_offset_by_degrees(self, offset_zenith: float) -> Optional[datetime]:
        """Time the sun is at *offset_zenith* on the rising side."""

        return self.date_from_time(self.utc_sunrise(offset_zenith), is_sunrise=True)

    # -- sunset side -----------------------------------------------------

    @property
    def sunset(self) -> Optional[datetime]:
        """Sunset adjusted for the location's elevation."""

        return self.date_from_time(self.utc_sunset(GEOMETRIC_ZENITH), is_sunrise=False)

    @property
    def sea_level_sunset(self) -> Optional[datetime]:
        return self.date_from_time(
            self.utc_sea_level_sunset(GEOMETRIC_ZENITH), is_sunrise=False
        )

    @property
    def elevation_adjusted_sunset(self) -> Optional[datetime]:
        return self.sunset if self.use_elevation else self.sea_level_sunset

    @property
    def end_civil_twilight(self) -> Optional[datetime]:
        return self.sunset_offset_by_degrees(CIVIL_ZENITH)

    @property
    def end_nautical_twilight(self) -> Optional[datetime]:
        return self.sunset_offset_by_degrees(NAUTICAL_ZENITH)

    @property
    def end_astronomical_twilight(self) -> Optional[datetime]:
        return self.sunset_offset_by_degrees(ASTRONOMICAL_ZENITH)

    def sunset_offset_by_degrees(self, offset_zenith: float) -> Optional[datetime]:
        return self.date_from_time(self.utc_sunset(offset_zenith), is_sunrise=False)

    # -- derived ---------------------------------------------------------

    @property
    def sea_level_temporal_hour(self) -> Optional[timedelta]:
        """Temporal hour of the day from sea-level sunrise to sea-level sunset."""

        return self.temporal_hour(self.sea_level_sunrise, self.sea_level_sunset)

    def temporal_hour(
        self, start: Optional[datetime], end: Optional[datetime]
    ) -> Optional[timedelta]:
        """One twelfth of the day between *start* and *end*.

        Returns ``None`` if either end of the day is undefined.
        """

        if start is None or end is None:
            return None
        return (end - start) / 12

    @property
    def sun_transit(self) -> Optional[datetime]:
        """Solar noon.

        Uses the calculator's true transit when it provides one, otherwise
        the midpoint between sea-level sunrise and sunset.
        """

        noon = self.calculator.solar_transit(self._adjusted_date, self.location)
        if noon is not None:
            return self.date_from_time(noon, is_sunrise=False)
        return self.sun_transit_between(self.sea_level_sunrise, self.sea_level_sunset)

    def sun_transit_between(
        self, start: Optional[datetime], end: Optional[datetime]
    ) -> Optional[datetime]:
        """Midpoint of a day bounded by *start* and *end*."""

        hour = self.temporal_hour(start, end)
        if hour is None:
            return None
        return self.time_offset(start, hour * 6)

    @property
    def fixed_local_chatzos(self) -> datetime:
        """Noon in local mean time.

        Derived from longitude only: ignores the equation of time and daylight
        saving, so it is the same instant whatever the elevation setting.
        """

        day = self._adjusted_date
        noon = datetime(day.year, day.month, day.day, 12, tzinfo=UTC) - timedelta(
            hours=self.location.longitude / 15
        )
        return noon.astimezone(self.location.tz)

    def date_from_time(self, time: Optional[float], is_sunrise: bool) -> Optional[datetime]:
        """Convert a UTC fractional hour on the working date to an instant.

        The calculators work on UTC days, so an event whose local date differs
        from its UTC date comes back on the wrong day. With ``local_hours`` the
        longitude's whole-hour offset, a sunrise later than 18:00 local is
        moved back one day and a sunset earlier than 06:00 local moved forward.
        """

        if time is None or math.isnan(time):
            return None
        calculated = time
        hours = int(calculated)
        calculated = (calculated - hours) * 60
        minutes = int(calculated)
        calculated = (calculated - minutes) * 60
        seconds = int(calculated)
        milliseconds = int((calculated - seconds) * 1000)

        day = self._adjusted_date
        local_hours = int(self.location.longitude / 15)
        if is_sunrise and local_hours + hours > 18:
            day -= timedelta(days=1)
        elif not is_sunrise and local_hours + hours < 6:
            day += timedelta(days=1)

        moment = datetime(
            day.year, day.month, day.day, hours, minutes, seconds, milliseconds * 1000, tzinfo=UTC
        )
        return moment.astimezone(self.location.tz)

    def time_offset(
        self, moment: Optional[datetime], offset: Union[timedelta, float, None]
    ) -> Optional[datetime]:
        """Return *moment* shifted by *offset* (a timedelta or minutes).

        The result is expressed in the location's zone, so a shift across a
        daylight-saving change carries the offset in force at the new instant.
        """

        if moment is None or offset is None:
            return None
        if not isinstance(offset, timedelta):
            offset = timedelta(minutes=offset)
        return (moment + offset).astimezone(self.location.tz)

    # -- solar dip search ------------------------------------------------

    def sunrise_solar_dip_from_offset(
        self, minutes: float, max_iterations: Optional[int] = None
    ) -> Optional[float]:
        """Degrees below the geometric horizon matching *minutes* before sea-level sunrise.

        Steps the zenith away from 90 degrees in 0.0001 degree increments until
        the degree based dawn reaches the fixed-minute target, so the result is
        the first step that crosses it. This is a slow linear search kept for
        compatibility with published tables; do not call it in a loop.
        The search never goes deeper than 90 degrees below the horizon, and
        *max_iterations* can tighten that bound. Returns ``None`` if there is
        no sunrise or no step within the bound crosses the target.
        """

        return self._solar_dip_search(minutes, SUNRISE_DIP_STEP, max_iterations, rising=True)

    def sunset_solar_dip_from_offset(
        self, minutes: float, max_iterations: Optional[int] = None
    ) -> Optional[float]:
        """Degrees below the horizon matching *minutes* after sea-level sunset.

        Same search as :meth:`sunrise_solar_dip_from_offset` with a 0.001
        degree step. Not suitable for hot loops.
        """

        return self._solar_dip_search(minutes, SUNSET_DIP_STEP, max_iterations, rising=False)

    def _solar_dip_search(
        self, minutes: float, step: float, max_iterations: Optional[int], rising: bool
    ) -> Optional[float]:
        boundary = self.sea_level_sunrise if rising else self.sea_level_sunset
        # Before sunrise for a rising search, after sunset for a setting one.
        target_offset = -minutes if rising else minutes
        target = self.time_offset(boundary, target_offset)
        if target is None:
            return None
        if target_offset == 0:
            return 0.0

        offset_events = self.sunrise_offset_by_degrees if rising else self.sunset_offset_by_degrees
        direction = 1 if minutes > 0 else -1
        limit = int(round(MAX_DIP_DEGREES / step))
        if max_iterations is not None:
            limit = min(limit, max_iterations)

        def crossed(event: datetime) -> bool:
            if target_offset < 0:
                return event <= target
            return event >= target

        steps = 0
        while True:
            if steps >= limit:
                self._log_dip_exhausted(minutes, rising, steps)
                return None
            steps += 1
            zenith = GEOMETRIC_ZENITH + round(direction * steps * step, 6)
            if not 0.0 <= zenith <= 180.0:
                self._log_dip_exhausted(minutes, rising, steps)
                return None
            event = offset_events(zenith)
            # The sun never reaches this zenith, so it cannot reach any further one.
            if event is None:
                self._log_dip_exhausted(minutes, rising, steps)
                return None
            if crossed(event):
                return round(direction * steps * step, 6)

    def _log_dip_exhausted(self, minutes: float, rising: bool, steps: int) -> None:
        LOGGER.warning(
            json.dumps(
                {
                    "event": "solar_dip_search_exhausted",
                    "date": self._current_date.isoformat(),
                    "latitude": self.location.latitude,
                    "longitude": self.location.longitude,
                    "minutes": minutes,
                    "side": "sunrise" if rising else "sunset",
                    "iterations": steps,
                }
            )
        )

    # -- housekeeping ----------------------------------------------------

    def clone(self) -> "AstronomicalCalendar":
        """Independent deep copy, for use by another thread or date."""

        return copy.deepcopy(self)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AstronomicalCalendar):
            return NotImplemented
        return (
            type(self) is type(other)
            and self.location == other.location
            and self.calculator == other.calculator
            and self._current_date == other._current_date
            and self.use_elevation == other.use_elevation
        )

    __hash__ = None  # mutable

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(location={self.location.name!r}, "
            f"calculator={self.calculator!r}, current_date={self._current_date.isoformat()}, "
            f"use_elevation={self.use_elevation})"
        )
