"""Geographic location value type used by every solar calculation."""

from __future__ import annotations

import math
from datetime import date, datetime, timedelta, tzinfo

import pytz
from pydantic import BaseModel, ConfigDict, Field, field_validator

__all__ = ["Location"]

WGS84_SEMI_MAJOR_AXIS_M = 6378137.0
WGS84_SEMI_MINOR_AXIS_M = 6356752.3142
WGS84_FLATTENING = 1.0 / 298.257223563

_DISTANCE = 0
_INITIAL_BEARING = 1
_FINAL_BEARING = 2


class Location(BaseModel):
    """An immutable observer location.

    Longitude is east-positive. Elevation is in meters above sea level and is
    only used for sunrise and sunset. ``timezone`` is an IANA zone name.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field("Greenwich, England", description="Display name")
    latitude: float = Field(51.4772, ge=-90.0, le=90.0, description="Latitude in degrees")
    longitude: float = Field(0.0, ge=-180.0, le=180.0, description="Longitude in degrees")
    elevation: float = Field(0.0, ge=0.0, description="Elevation above sea level in meters")
    timezone: str = Field("GMT", description="IANA timezone name")

    @field_validator("timezone")
    def validate_timezone(cls, value: str) -> str:
        try:
            pytz.timezone(value)
        except pytz.UnknownTimeZoneError as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @property
    def tz(self) -> tzinfo:
        return pytz.timezone(self.timezone)

    def raw_offset(self, on: date) -> timedelta:
        """Standard (non-DST) UTC offset of the zone on *on*."""

        local = self.tz.localize(datetime(on.year, on.month, on.day, 12))
        return local.utcoffset() - (local.dst() or timedelta(0))

    def local_mean_time_offset(self, on: date) -> timedelta:
        """Offset of local mean time from the zone's standard time.

        Positive east of the zone meridian. Daylight saving time is ignored.
        """

        return timedelta(minutes=self.longitude * 4) - self.raw_offset(on)

    def antimeridian_adjustment(self, on: date) -> int:
        """Days to shift the working date for zones across the antimeridian.

        A location such as Samoa (longitude -171.75, UTC+13) has a local mean
        time offset of almost a full day, so the UTC date its sun events fall
        on is one day behind its local calendar date.
        """

        local_hours_offset = self.local_mean_time_offset(on) / timedelta(hours=1)
        if local_hours_offset >= 20:
            return 1
        if local_hours_offset <= -20:
            return -1
        return 0

    def geodesic_distance(self, destination: "Location") -> float:
        """Vincenty distance in meters to *destination*."""

        return self._vincenty(destination, _DISTANCE)

    def geodesic_initial_bearing(self, destination: "Location") -> float:
        return self._vincenty(destination, _INITIAL_BEARING)

    def geodesic_final_bearing(self, destination: "Location") -> float:
        return self._vincenty(destination, _FINAL_BEARING)

    def _vincenty(self, destination: "Location", formula: int) -> float:
        a = WGS84_SEMI_MAJOR_AXIS_M
        b = WGS84_SEMI_MINOR_AXIS_M
        f = WGS84_FLATTENING
        big_l = math.radians(destination.longitude - self.longitude)
        u1 = math.atan((1 - f) * math.tan(math.radians(self.latitude)))
        u2 = math.atan((1 - f) * math.tan(math.radians(destination.latitude)))
        sin_u1, cos_u1 = math.sin(u1), math.cos(u1)
        sin_u2, cos_u2 = math.sin(u2), math.cos(u2)

        lam = big_l
        lam_prev = 2 * math.pi
        iterations_left = 20
        sin_lam = cos_lam = 0.0
        sin_sigma = cos_sigma = sigma = 0.0
        cos_sq_alpha = cos_2_sigma_m = 0.0
        while abs(lam - lam_prev) > 1e-12 and iterations_left > 0:
            iterations_left -= 1
            sin_lam = math.sin(lam)
            cos_lam = math.cos(lam)
            sin_sigma = math.sqrt(
                (cos_u2 * sin_lam) ** 2
                + (cos_u1 * sin_u2 - sin_u1 * cos_u2 * cos_lam) ** 2
            )
            if sin_sigma == 0:
                return 0.0  # coincident points
            cos_sigma = sin_u1 * sin_u2 + cos_u1 * cos_u2 * cos_lam
            sigma = math.atan2(sin_sigma, cos_sigma)
            sin_alpha = cos_u1 * cos_u2 * sin_lam / sin_sigma
            cos_sq_alpha = 1 - sin_alpha * sin_alpha
            if cos_sq_alpha == 0:
                cos_2_sigma_m = 0.0  # equatorial line
            else:
                cos_2_sigma_m = cos_sigma - 2 * sin_u1 * sin_u2 / cos_sq_alpha
            c = f / 16 * cos_sq_alpha * (4 + f * (4 - 3 * cos_sq_alpha))
            lam_prev = lam
            lam = big_l + (1 - c) * f * sin_alpha * (
                sigma
                + c * sin_sigma * (cos_2_sigma_m + c * cos_sigma * (-1 + 2 * cos_2_sigma_m ** 2))
            )
        if abs(lam - lam_prev) > 1e-12:
            return math.nan  # failed to converge

        u_sq = cos_sq_alpha * (a * a - b * b) / (b * b)
        big_a = 1 + u_sq / 16384 * (4096 + u_sq * (-768 + u_sq * (320 - 175 * u_sq)))
        big_b = u_sq / 1024 * (256 + u_sq * (-128 + u_sq * (74 - 47 * u_sq)))
        delta_sigma = big_b * sin_sigma * (
            cos_2_sigma_m
            + big_b / 4 * (
                cos_sigma * (-1 + 2 * cos_2_sigma_m ** 2)
                - big_b / 6 * cos_2_sigma_m * (-3 + 4 * sin_sigma ** 2) * (-3 + 4 * cos_2_sigma_m ** 2)
            )
        )
        if formula == _DISTANCE:
            return b * big_a * (sigma - delta_sigma)
        if formula == _INITIAL_BEARING:
            return math.degrees(
                math.atan2(cos_u2 * sin_lam, cos_u1 * sin_u2 - sin_u1 * cos_u2 * cos_lam)
            )
        return math.degrees(
            math.atan2(cos_u1 * sin_lam, -sin_u1 * cos_u2 + cos_u1 * sin_u2 * cos_lam)
        )
