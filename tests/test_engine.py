from __future__ import annotations

import logging
from datetime import UTC, date, datetime, timedelta

import numpy as np
import pytest

from zmanim_core.calculators import SunTimesCalculator
from zmanim_core.catalog import ALOS_72, SUNRISE
from zmanim_core.engine import ZmanimCalendar
from zmanim_core.location import Location
from zmanim_core.metadata import (
    DateBasedZman,
    FixedDuration,
    UsesElevation,
    ZmanDefinition,
    ZmanType,
    occurs,
)

LAKEWOOD_DAY = date(2024, 3, 1)
DAWN_VARIANTS = ("alos_72", "alos_16_1_degrees", "misheyakir_11_5_degrees", "alos_120_zmanis")
TOLERANCE = timedelta(milliseconds=2)


@pytest.fixture()
def lakewood_zmanim(lakewood: Location) -> ZmanimCalendar:
    return ZmanimCalendar(lakewood, current_date=LAKEWOOD_DAY)


def _moment(calendar: ZmanimCalendar, name: str) -> datetime:
    return calendar.zman(name).moment


def test_lakewood_primitives_match_calendar(lakewood_zmanim: ZmanimCalendar) -> None:
    assert _moment(lakewood_zmanim, "sunrise") == lakewood_zmanim.sea_level_sunrise
    assert _moment(lakewood_zmanim, "elevation_sunrise") == lakewood_zmanim.sunrise
    assert _moment(lakewood_zmanim, "sea_level_sunset") == lakewood_zmanim.sea_level_sunset
    assert _moment(lakewood_zmanim, "chatzos") == lakewood_zmanim.sun_transit
    assert _moment(lakewood_zmanim, "elevation_sunrise") < _moment(lakewood_zmanim, "sunrise")


def test_lakewood_elevation_toggle(lakewood: Location) -> None:
    sea_level = ZmanimCalendar(lakewood, current_date=LAKEWOOD_DAY)
    elevated = ZmanimCalendar(lakewood, current_date=LAKEWOOD_DAY, use_elevation=True)

    assert _moment(elevated, "sunrise") < _moment(sea_level, "sunrise")
    assert _moment(elevated, "sea_level_sunrise") == _moment(sea_level, "sea_level_sunrise")
    assert _moment(elevated, "alos_16_1_degrees") == _moment(sea_level, "alos_16_1_degrees")
    for calendar in (sea_level, elevated):
        assert _moment(calendar, "mincha_gedola_gra") is not None
        assert _moment(calendar, "mincha_gedola_greater_than_30") is not None
    assert _moment(elevated, "fixed_local_chatzos") == _moment(sea_level, "fixed_local_chatzos")
    assert _moment(sea_level, "fixed_local_chatzos") == sea_level.fixed_local_chatzos


def test_fixed_local_chatzos_family(lakewood_zmanim: ZmanimCalendar) -> None:
    chatzos = _moment(lakewood_zmanim, "fixed_local_chatzos")
    assert _moment(lakewood_zmanim, "sof_zman_shma_fixed_local") == chatzos - timedelta(hours=3)
    assert _moment(lakewood_zmanim, "sof_zman_tfila_fixed_local") == chatzos - timedelta(hours=2)
    assert _moment(
        lakewood_zmanim, "mincha_gedola_gra_fixed_local_chatzos_30_minutes"
    ) == chatzos + timedelta(minutes=30)


def test_fixed_offsets(lakewood_zmanim: ZmanimCalendar) -> None:
    sunrise = _moment(lakewood_zmanim, "sunrise")
    sunset = _moment(lakewood_zmanim, "sunset")
    assert _moment(lakewood_zmanim, "alos_72") == sunrise - timedelta(minutes=72)
    assert _moment(lakewood_zmanim, "tzais_72") == sunset + timedelta(minutes=72)
    assert _moment(lakewood_zmanim, "bain_hashmashos_rt_58_5_minutes") == sunset + timedelta(
        minutes=58.5
    )
    assert _moment(lakewood_zmanim, "bain_hashmashos_yereim_18_minutes") == sunset - timedelta(
        minutes=18
    )
    assert _moment(lakewood_zmanim, "solar_midnight") == _moment(
        lakewood_zmanim, "chatzos"
    ) + timedelta(hours=12)


def test_degree_zmanim_use_horizon_crossings(lakewood_zmanim: ZmanimCalendar) -> None:
    alos = lakewood_zmanim.sunrise_offset_by_degrees(90 + 16.1)
    tzais = lakewood_zmanim.sunset_offset_by_degrees(90 + 8.5)
    assert _moment(lakewood_zmanim, "alos_16_1_degrees") == alos
    assert _moment(lakewood_zmanim, "tzais_geonim_8_5_degrees") == tzais
    yereim = _moment(lakewood_zmanim, "bain_hashmashos_yereim_3_05_degrees")
    assert yereim < _moment(lakewood_zmanim, "sunset")
    assert _moment(lakewood_zmanim, "sunrise_baal_hatanya") < _moment(lakewood_zmanim, "sunrise")


def test_zmaniyos_scale_with_temporal_hour(lakewood_zmanim: ZmanimCalendar) -> None:
    sunrise = _moment(lakewood_zmanim, "sunrise")
    hour = lakewood_zmanim.zman("shaah_zmanis_gra").duration
    assert hour == lakewood_zmanim.temporal_hour(sunrise, _moment(lakewood_zmanim, "sunset"))
    for name, hours in (
        ("sof_zman_shma_gra", 3),
        ("sof_zman_tfila_gra", 4),
        ("mincha_gedola_gra", 6.5),
        ("mincha_ketana_gra", 9.5),
        ("plag_hamincha_gra", 10.75),
    ):
        assert abs(_moment(lakewood_zmanim, name) - (sunrise + hour * hours)) <= TOLERANCE, name

    mga_hour = lakewood_zmanim.zman("shaah_zmanis_mga").duration
    alos = _moment(lakewood_zmanim, "alos_72")
    assert abs(_moment(lakewood_zmanim, "sof_zman_shma_mga") - (alos + mga_hour * 3)) <= TOLERANCE
    assert mga_hour > hour


def test_zmaniyos_dawn_uses_day_length(lakewood_zmanim: ZmanimCalendar) -> None:
    sunrise = _moment(lakewood_zmanim, "sunrise")
    hour = lakewood_zmanim.zman("shaah_zmanis_gra").duration
    alos = _moment(lakewood_zmanim, "alos_72_zmanis")
    assert abs(sunrise - alos - hour * 1.2) <= TOLERANCE
    assert _moment(lakewood_zmanim, "alos_72_zmanis") > _moment(lakewood_zmanim, "alos_72")


def test_chatzos_as_half_day(lakewood: Location) -> None:
    calendar = ZmanimCalendar(lakewood, SunTimesCalculator(), LAKEWOOD_DAY)
    half_day = _moment(calendar, "chatzos_as_half_day")
    assert abs(half_day - _moment(calendar, "chatzos")) <= TOLERANCE


def test_later_of(lakewood_zmanim: ZmanimCalendar) -> None:
    thirty = _moment(lakewood_zmanim, "mincha_gedola_30_minutes")
    gra = _moment(lakewood_zmanim, "mincha_gedola_gra")
    assert _moment(lakewood_zmanim, "mincha_gedola_greater_than_30") == max(thirty, gra)
    ahavat_shalom = _moment(lakewood_zmanim, "mincha_gedola_ahavat_shalom")
    assert ahavat_shalom >= thirty


def test_later_of_with_undefined_input(arctic: Location) -> None:
    calendar = ZmanimCalendar(arctic, current_date=date(2023, 12, 21))
    assert _moment(calendar, "mincha_gedola_gra") is None
    assert _moment(calendar, "mincha_gedola_30_minutes") is not None
    assert _moment(calendar, "mincha_gedola_greater_than_30") == _moment(
        calendar, "mincha_gedola_30_minutes"
    )


def test_arctic_winter(arctic: Location) -> None:
    calendar = ZmanimCalendar(arctic, current_date=date(2023, 12, 21))
    for name in (
        "sunrise",
        "sunset",
        "misheyakir_11_5_degrees",
        "tzais_geonim_8_5_degrees",
        "sof_zman_shma_gra",
        "plag_hamincha_gra",
        "alos_72",
    ):
        assert _moment(calendar, name) is None, name
    assert calendar.zman("shaah_zmanis_gra").duration is None
    chatzos = _moment(calendar, "chatzos")
    assert chatzos is not None
    assert _moment(calendar, "sof_zman_shma_3_hours_before_chatzos") == chatzos - timedelta(hours=3)


def test_arctic_summer(arctic: Location) -> None:
    calendar = ZmanimCalendar(arctic, current_date=date(2024, 6, 21))
    for name in ("sunrise", "alos_16_1_degrees", "tzais_geonim_8_5_degrees", "sof_zman_shma_mga"):
        assert _moment(calendar, name) is None, name
    assert _moment(calendar, "sof_zman_shma_3_hours_before_chatzos") is not None
    assert _moment(calendar, "fixed_local_chatzos") is not None


@pytest.mark.parametrize("place", ["lakewood", "jerusalem", "london", "melbourne"])
def test_dawn_precedes_sunrise(place: str, request: pytest.FixtureRequest) -> None:
    location = request.getfixturevalue(place)
    calendar = ZmanimCalendar(location)
    for offset in np.arange(0, 366, 15):
        calendar.current_date = date(2024, 1, 1) + timedelta(days=int(offset))
        results = calendar.resolve_all()
        sunrise = results["sea_level_sunrise"].moment
        sunset = results["sea_level_sunset"].moment
        assert sunrise is not None and sunset is not None
        assert sunrise < sunset
        for name in DAWN_VARIANTS:
            dawn = results[name].moment
            if dawn is not None:
                assert dawn < sunrise, (name, calendar.current_date)
        tzais = results["tzais_geonim_8_5_degrees"].moment
        if tzais is not None:
            assert tzais > sunset, calendar.current_date


def test_candle_lighting_offset(lakewood: Location) -> None:
    default = ZmanimCalendar(lakewood, current_date=LAKEWOOD_DAY, use_elevation=True)
    custom = ZmanimCalendar(
        lakewood,
        current_date=LAKEWOOD_DAY,
        use_elevation=True,
        candle_lighting_offset=timedelta(minutes=40),
    )
    sea_level_sunset = default.sea_level_sunset
    assert _moment(default, "candle_lighting") == sea_level_sunset - timedelta(minutes=18)
    assert _moment(custom, "candle_lighting") == sea_level_sunset - timedelta(minutes=40)


def test_ateret_torah(lakewood: Location) -> None:
    calendar = ZmanimCalendar(
        lakewood, current_date=LAKEWOOD_DAY, ateret_torah_sunset_offset=timedelta(minutes=50)
    )
    tzais = _moment(calendar, "tzais_ateret_torah")
    assert tzais == _moment(calendar, "sunset") + timedelta(minutes=50)
    hour = calendar.zman("shaah_zmanis_ateret_torah").duration
    alos = _moment(calendar, "alos_72_zmanis")
    assert hour == calendar.temporal_hour(alos, tzais)
    assert abs(_moment(calendar, "plag_hamincha_ateret_torah") - (alos + hour * 10.75)) <= TOLERANCE


def test_molad_zmanim(lakewood: Location) -> None:
    molad = datetime(2024, 3, 10, 9, 0, 25, tzinfo=UTC)
    calendar = ZmanimCalendar(lakewood, current_date=date(2024, 3, 13), molad=molad)
    start = _moment(calendar, "tchilas_zman_kidush_levana_3_days")
    assert start == molad + timedelta(days=3)
    assert start.tzinfo is not None
    assert _moment(calendar, "sof_zman_kidush_levana_15_days") == molad + timedelta(days=15)
    between = _moment(calendar, "sof_zman_kidush_levana_between_moldos")
    assert molad + timedelta(days=14) < between < molad + timedelta(days=15)

    calendar.molad = None
    assert _moment(calendar, "tchilas_zman_kidush_levana_7_days") is None


def test_naive_molad_rejected(lakewood: Location) -> None:
    with pytest.raises(ValueError):
        ZmanimCalendar(lakewood, molad=datetime(2024, 3, 10, 9))


def test_all_zmanim_sorted(lakewood_zmanim: ZmanimCalendar, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.DEBUG, logger="zmanim_core.engine"):
        zmanim = lakewood_zmanim.all_zmanim()
    assert "resolution_pass" in caplog.text
    assert len(zmanim) == len(lakewood_zmanim.catalog)
    assert all(isinstance(zman, DateBasedZman) for zman in zmanim)

    defined = [zman.moment for zman in zmanim if zman.moment is not None]
    assert defined == sorted(defined)
    first_undefined = next(index for index, zman in enumerate(zmanim) if zman.moment is None)
    assert all(zman.moment is None for zman in zmanim[first_undefined:])
    assert any(zman.duration is not None for zman in zmanim[first_undefined:])


def test_resolve_custom_definition(lakewood_zmanim: ZmanimCalendar) -> None:
    relationship = occurs(ZmanType.ALOS, FixedDuration(timedelta(minutes=30))).before(ALOS_72)
    early = ZmanDefinition(
        "alos_102_via_72",
        ZmanType.ALOS,
        method=relationship.calculation.affirm(),
        relationship=relationship,
    )
    zman = lakewood_zmanim.resolve(early)
    assert zman.moment == _moment(lakewood_zmanim, "sunrise") - timedelta(minutes=102)
    assert zman.name == "alos_102_via_72"
    assert lakewood_zmanim.resolve(SUNRISE).moment == lakewood_zmanim.sea_level_sunrise


def test_clone_keeps_catalog(lakewood_zmanim: ZmanimCalendar) -> None:
    cloned = lakewood_zmanim.clone()
    assert cloned == lakewood_zmanim
    assert cloned.catalog is lakewood_zmanim.catalog
    cloned.current_date = date(2024, 3, 2)
    assert _moment(cloned, "sunrise") != _moment(lakewood_zmanim, "sunrise")


def test_before_and_after_mirror_around_sunset(lakewood_zmanim: ZmanimCalendar) -> None:
    relationship = occurs(ZmanType.TZAIS, FixedDuration(timedelta(minutes=72))).before(ZmanType.SHKIAH)
    mirrored = ZmanDefinition(
        name="tzais_72_mirrored",
        type=ZmanType.TZAIS,
        method=relationship.calculation.affirm(),
        uses_elevation=UsesElevation.IF_SET,
        relationship=relationship,
    )
    sunset = _moment(lakewood_zmanim, "sunset")
    before = lakewood_zmanim.resolve(mirrored).moment
    assert sunset - before == timedelta(minutes=72)
    assert _moment(lakewood_zmanim, "tzais_72") - sunset == sunset - before


def test_zmaniyos_follow_day_length_across_dates(lakewood: Location) -> None:
    spans = []
    for day in (date(2024, 1, 1), date(2024, 6, 21)):
        calendar = ZmanimCalendar(lakewood, current_date=day)
        hour = calendar.zman("shaah_zmanis_gra").duration
        span = _moment(calendar, "sof_zman_shma_gra") - _moment(calendar, "sunrise")
        assert abs(span - hour * 3) <= TOLERANCE
        spans.append((span, hour))

    (winter_span, winter_hour), (summer_span, summer_hour) = spans
    assert summer_hour - winter_hour > timedelta(minutes=15)
    assert summer_span / winter_span == pytest.approx(summer_hour / winter_hour, rel=1e-6)


def test_molad_offsets_cross_daylight_saving(lakewood: Location) -> None:
    molad = datetime(2024, 3, 1, 9, tzinfo=UTC)
    calendar = ZmanimCalendar(lakewood, current_date=date(2024, 3, 16), molad=molad)
    end = _moment(calendar, "sof_zman_kidush_levana_15_days")
    assert end == molad + timedelta(days=15)
    assert end.utcoffset() == timedelta(hours=-4)
    assert (end.hour, end.minute) == (5, 0)


def test_outside_definition_validated_once(
    lakewood_zmanim: ZmanimCalendar, caplog: pytest.LogCaptureFixture
) -> None:
    relationship = occurs(ZmanType.ALOS, FixedDuration(timedelta(minutes=45))).before(SUNRISE)
    early = ZmanDefinition(
        name="alos_45_before_sunrise",
        type=ZmanType.ALOS,
        method=relationship.calculation.affirm(),
        relationship=relationship,
    )
    with caplog.at_level(logging.INFO, logger="zmanim_core.catalog"):
        first = lakewood_zmanim.resolve(early)
        second = lakewood_zmanim.resolve(early)
    assert first.moment == second.moment
    assert caplog.text.count("catalog_loaded") == 1
