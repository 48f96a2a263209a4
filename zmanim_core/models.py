"""Pydantic models for calendar configuration and zman payloads."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .calculators import get_calculator
from .engine import ZmanimCalendar
from .location import Location
from .metadata import DateBasedZman

__all__ = ["CalculatorName", "ZmanimSettings", "ZmanPayload", "zmanim_payload"]


class CalculatorName(str, Enum):
    """Supported solar position algorithms."""

    noaa = "noaa"
    usno = "usno"


class ZmanimSettings(BaseModel):
    """Validated settings for building a :class:`ZmanimCalendar`."""

    model_config = ConfigDict(populate_by_name=True)

    location: Location = Field(default_factory=Location, description="Observer location")
    calculator: CalculatorName = Field(CalculatorName.noaa, description="Solar algorithm")
    use_elevation: bool = Field(False, description="Elevation-adjust sunrise and sunset")
    candle_lighting_offset_minutes: float = Field(
        18.0,
        ge=0.0,
        le=120.0,
        description="Minutes before sea-level sunset for candle lighting",
    )
    ateret_torah_sunset_offset_minutes: float = Field(
        40.0,
        ge=0.0,
        le=120.0,
        description="Minutes after sunset for the Ateret Torah tzais",
    )

    @field_validator("calculator", mode="before")
    def validate_calculator(cls, value):
        if isinstance(value, str):
            return value.lower()
        return value

    def build_calendar(self, day: date, molad: Optional[datetime] = None) -> ZmanimCalendar:
        return ZmanimCalendar(
            location=self.location,
            calculator=get_calculator(self.calculator.value),
            current_date=day,
            use_elevation=self.use_elevation,
            candle_lighting_offset=timedelta(minutes=self.candle_lighting_offset_minutes),
            ateret_torah_sunset_offset=timedelta(minutes=self.ateret_torah_sunset_offset_minutes),
            molad=molad,
        )


class ZmanPayload(BaseModel):
    """Serializable record of one resolved zman."""

    name: str = Field(..., description="Definition name")
    type: str = Field(..., description="Zman type key")
    authorities: List[str] = Field(default_factory=list, description="Authorities followed")
    moment: Optional[str] = Field(None, description="Local instant (ISO-8601)")
    duration_seconds: Optional[float] = Field(
        None, description="Length of a temporal hour in seconds"
    )

    @classmethod
    def from_zman(cls, zman: DateBasedZman) -> "ZmanPayload":
        return cls(
            name=zman.name,
            type=zman.type.key,
            authorities=[authority.value for authority in zman.definition.authorities],
            moment=zman.moment.isoformat() if zman.moment is not None else None,
            duration_seconds=zman.duration.total_seconds() if zman.duration is not None else None,
        )


def zmanim_payload(calendar: ZmanimCalendar) -> List[ZmanPayload]:
    """Sorted payloads for every zman of the calendar's current date."""

    return [ZmanPayload.from_zman(zman) for zman in calendar.all_zmanim()]
