from __future__ import annotations

from datetime import date, timedelta

import pytest
from pydantic import ValidationError

from zmanim_core.location import Location


def test_defaults_to_greenwich() -> None:
    location = Location()
    assert location.name == "Greenwich, England"
    assert location.raw_offset(date(2024, 7, 1)) == timedelta(0)


@pytest.mark.parametrize(
    "field, value",
    [("latitude", 90.5), ("latitude", -91), ("longitude", 181), ("elevation", -1)],
)
def test_rejects_out_of_range_values(field: str, value: float) -> None:
    with pytest.raises(ValidationError):
        Location(**{field: value})


def test_rejects_unknown_timezone() -> None:
    with pytest.raises(ValidationError):
        Location(timezone="Mars/Olympus_Mons")


def test_location_is_immutable(lakewood: Location) -> None:
    with pytest.raises(ValidationError):
        lakewood.latitude = 0.0


def test_raw_offset_ignores_daylight_saving(lakewood: Location) -> None:
    assert lakewood.raw_offset(date(2024, 1, 15)) == timedelta(hours=-5)
    assert lakewood.raw_offset(date(2024, 7, 15)) == timedelta(hours=-5)


def test_local_mean_time_offset(lakewood: Location) -> None:
    offset = lakewood.local_mean_time_offset(date(2024, 3, 1))
    assert offset.total_seconds() / 60 == pytest.approx(-74.222 * 4 + 300)


def test_antimeridian_adjustment() -> None:
    apia = Location(longitude=-171.75, timezone="Pacific/Apia")
    kiribati = Location(longitude=-157.47, timezone="Pacific/Kiritimati")
    pago = Location(longitude=-170.7, timezone="Pacific/Pago_Pago")
    assert apia.antimeridian_adjustment(date(2024, 6, 16)) == -1
    assert kiribati.antimeridian_adjustment(date(2024, 6, 16)) == -1
    assert pago.antimeridian_adjustment(date(2024, 6, 16)) == 0
    assert Location().antimeridian_adjustment(date(2024, 6, 16)) == 0


def test_geodesic_along_equator() -> None:
    origin = Location(latitude=0.0, longitude=0.0)
    east = Location(latitude=0.0, longitude=1.0)
    assert origin.geodesic_distance(east) == pytest.approx(111319.49, abs=1.0)
    assert origin.geodesic_initial_bearing(east) == pytest.approx(90.0)
    assert origin.geodesic_final_bearing(east) == pytest.approx(90.0)
    assert origin.geodesic_distance(origin) == 0.0


def test_geodesic_distance_is_symmetric(lakewood: Location, jerusalem: Location) -> None:
    there = lakewood.geodesic_distance(jerusalem)
    back = jerusalem.geodesic_distance(lakewood)
    assert there == pytest.approx(back)
    assert 9_000_000 < there < 9_500_000
