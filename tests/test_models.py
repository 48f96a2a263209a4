from __future__ import annotations

from datetime import date

import pytest
from pydantic import ValidationError

from zmanim_core.calculators import NOAACalculator, SunTimesCalculator
from zmanim_core.engine import ZmanimCalendar
from zmanim_core.location import Location
from zmanim_core.models import CalculatorName, ZmanimSettings, ZmanPayload, zmanim_payload


def test_settings_defaults() -> None:
    settings = ZmanimSettings()
    assert settings.calculator is CalculatorName.noaa
    assert settings.location == Location()
    assert settings.candle_lighting_offset_minutes == 18.0
    assert settings.ateret_torah_sunset_offset_minutes == 40.0


def test_settings_from_mapping(lakewood: Location) -> None:
    settings = ZmanimSettings.model_validate(
        {
            "location": lakewood.model_dump(),
            "calculator": "USNO",
            "use_elevation": True,
            "candle_lighting_offset_minutes": 40,
        }
    )
    calendar = settings.build_calendar(date(2024, 3, 1))
    assert isinstance(calendar, ZmanimCalendar)
    assert isinstance(calendar.calculator, SunTimesCalculator)
    assert calendar.location == lakewood
    assert calendar.use_elevation is True
    candle_lighting = calendar.zman("candle_lighting").moment
    assert (calendar.sea_level_sunset - candle_lighting).total_seconds() == 40 * 60


@pytest.mark.parametrize(
    "payload",
    [
        {"calculator": "vsop87"},
        {"candle_lighting_offset_minutes": -5},
        {"ateret_torah_sunset_offset_minutes": 500},
        {"location": {"latitude": 95.0}},
        {"location": {"timezone": "Nowhere/Special"}},
    ],
)
def test_settings_validation(payload: dict) -> None:
    with pytest.raises(ValidationError):
        ZmanimSettings.model_validate(payload)


def test_payload_serialization(lakewood: Location) -> None:
    calendar = ZmanimSettings(location=lakewood).build_calendar(date(2024, 3, 1))
    assert isinstance(calendar.calculator, NOAACalculator)
    payloads = zmanim_payload(calendar)
    assert len(payloads) == len(calendar.catalog)

    by_name = {payload.name: payload for payload in payloads}
    sunrise = by_name["sunrise"]
    assert sunrise.type == "hanaitz"
    assert sunrise.authorities == ["gra"]
    assert sunrise.moment == calendar.sea_level_sunrise.isoformat()

    hour = by_name["shaah_zmanis_gra"]
    assert hour.moment is None
    assert hour.duration_seconds == pytest.approx(
        calendar.sea_level_temporal_hour.total_seconds()
    )
    assert by_name["tchilas_zman_kidush_levana_3_days"].moment is None


def test_payload_from_zman(lakewood: Location) -> None:
    calendar = ZmanimSettings(location=lakewood).build_calendar(date(2024, 3, 1))
    payload = ZmanPayload.from_zman(calendar.zman("alos_16_1_degrees"))
    assert payload.authorities == ["mga"]
    assert payload.duration_seconds is None
    assert payload.model_dump()["name"] == "alos_16_1_degrees"
