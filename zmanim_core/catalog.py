"""The static catalog of zman definitions.

The catalog is built once at import time and validated as it loads:
references must point at registered definitions or at a primitive type,
methods must fit where they are used, and the dependency graph must be
acyclic. Malformed catalogs raise :class:`CatalogError`.
"""

from __future__ import annotations

import json
import logging
from datetime import timedelta
from typing import Dict, Iterable, Iterator, List, Tuple

from .metadata import (
    FIXED_LOCAL_CHATZOS,
    DayDefinition,
    Degrees,
    FixedDuration,
    FixedLocalChatzos,
    FixedMinutesFloat,
    LaterOf,
    Side,
    Unspecified,
    UsesElevation,
    ZmanAuthority,
    ZmanCalculationMethod,
    ZmanDefinition,
    ZmaniyosDuration,
    ZmanRelationship,
    ZmanType,
    occurs,
)

__all__ = [
    "CatalogError",
    "ZmanCatalog",
    "CATALOG",
    "PRIMITIVE_TYPES",
    "parametric_definitions",
]

LOGGER = logging.getLogger(__name__)

#: Types a relationship may reference directly instead of through a definition.
PRIMITIVE_TYPES = frozenset({ZmanType.HANAITZ, ZmanType.SHKIAH, ZmanType.CHATZOS, ZmanType.MOLAD})

_RELATIVE_METHODS = (Degrees, FixedDuration, ZmaniyosDuration, FixedMinutesFloat, Unspecified)
_STANDALONE_METHODS = (Unspecified, FixedLocalChatzos, LaterOf, DayDefinition)


class CatalogError(ValueError):
    """Raised when a set of zman definitions is inconsistent."""


class ZmanCatalog:
    """Ordered, validated, read-only collection of definitions."""

    def __init__(self, definitions: Iterable[ZmanDefinition]) -> None:
        self._definitions: Tuple[ZmanDefinition, ...] = tuple(definitions)
        self._by_name: Dict[str, ZmanDefinition] = {}
        for definition in self._definitions:
            if definition.name in self._by_name:
                raise CatalogError(f"Duplicate zman definition name: {definition.name}")
            self._by_name[definition.name] = definition
        self._order: Dict[str, int] = {
            definition.name: index for index, definition in enumerate(self._definitions)
        }
        self._check_acyclic()
        for definition in self._definitions:
            self._check_definition(definition)
        LOGGER.info(
            json.dumps({"event": "catalog_loaded", "definitions": len(self._definitions)})
        )

    def __iter__(self) -> Iterator[ZmanDefinition]:
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __getitem__(self, name: str) -> ZmanDefinition:
        try:
            return self._by_name[name]
        except KeyError as exc:
            raise KeyError(f"Unknown zman: {name}") from exc

    def __copy__(self) -> "ZmanCatalog":
        return self

    def __deepcopy__(self, memo: dict) -> "ZmanCatalog":
        return self

    def names(self) -> List[str]:
        return [definition.name for definition in self._definitions]

    def index_of(self, definition: ZmanDefinition) -> int:
        """Declaration order of *definition*; unknown definitions sort last."""

        return self._order.get(definition.name, len(self._definitions))

    def of_type(self, zman_type: ZmanType) -> List[ZmanDefinition]:
        return [definition for definition in self._definitions if definition.type is zman_type]

    def extended(self, definitions: Iterable[ZmanDefinition]) -> "ZmanCatalog":
        """New catalog with *definitions* appended, validated as a whole."""

        return ZmanCatalog(self._definitions + tuple(definitions))

    def _check_acyclic(self) -> None:
        # Walks by name so a cyclic graph is reported before anything hashes it.
        visiting: set = set()
        done: set = set()

        def visit(definition: ZmanDefinition, path: Tuple[str, ...]) -> None:
            if definition.name in done:
                return
            if definition.name in visiting:
                cycle = " -> ".join(path[path.index(definition.name):] + (definition.name,))
                raise CatalogError(f"Cyclic zman definitions: {cycle}")
            visiting.add(definition.name)
            for dependency in definition.dependencies():
                visit(dependency, path + (definition.name,))
            visiting.discard(definition.name)
            done.add(definition.name)

        for definition in self._definitions:
            visit(definition, ())

    def _check_definition(self, definition: ZmanDefinition) -> None:
        name = definition.name
        for dependency in definition.dependencies():
            if self._by_name.get(dependency.name) != dependency:
                raise CatalogError(f"{name} references unregistered definition {dependency.name}")

        relationship = definition.relationship
        if relationship is None:
            if definition.relative_methods:
                raise CatalogError(f"{name}: relative methods without a relationship")
            method = definition.method
            if not isinstance(method, _STANDALONE_METHODS):
                raise CatalogError(f"{name}: {type(method).__name__} needs a reference zman")
            if isinstance(method, Unspecified) and definition.type not in PRIMITIVE_TYPES:
                raise CatalogError(f"{name}: {definition.type.name} cannot be computed on its own")
            return

        if relationship.subject is not definition.type:
            raise CatalogError(
                f"{name}: relationship subject {relationship.subject.name} "
                f"does not match type {definition.type.name}"
            )
        reference = relationship.reference
        if isinstance(reference, ZmanType) and reference not in PRIMITIVE_TYPES:
            raise CatalogError(
                f"{name}: {reference.name} is not a primitive type reference"
            )
        calculation = relationship.calculation
        if not isinstance(calculation, _RELATIVE_METHODS):
            raise CatalogError(
                f"{name}: {type(calculation).__name__} cannot be measured from a reference"
            )
        if isinstance(calculation, Degrees) and relationship.reference_type.side is Side.NONE:
            raise CatalogError(
                f"{name}: degrees need a sunrise or sunset side reference, "
                f"not {relationship.reference_type.name}"
            )


def _minutes(value: float) -> timedelta:
    return timedelta(minutes=value)


def _hours(value: float) -> timedelta:
    return timedelta(hours=value)


def _define(
    name: str,
    relationship: ZmanRelationship,
    uses_elevation: UsesElevation = UsesElevation.UNSPECIFIED,
    day: DayDefinition = None,
    authorities: Tuple[ZmanAuthority, ...] = (),
    relative_methods: Tuple[Tuple[ZmanType, ZmanCalculationMethod], ...] = (),
) -> ZmanDefinition:
    """Definition whose main method is the relationship's, unsigned."""

    return ZmanDefinition(
        name=name,
        type=relationship.subject,
        method=relationship.calculation.affirm(),
        uses_elevation=uses_elevation,
        day_definition=day,
        authorities=authorities,
        relationship=relationship,
        relative_methods=relative_methods,
    )


GRA = (ZmanAuthority.GRA,)
MGA = (ZmanAuthority.MGA,)
GEONIM = (ZmanAuthority.GEONIM,)
IF_SET = UsesElevation.IF_SET
NEVER = UsesElevation.NEVER
ALWAYS = UsesElevation.ALWAYS

T = ZmanType

# -- sunrise, sunset, chatzos ------------------------------------------------

SUNRISE = ZmanDefinition("sunrise", T.HANAITZ, uses_elevation=IF_SET, authorities=GRA)
SEA_LEVEL_SUNRISE = ZmanDefinition("sea_level_sunrise", T.HANAITZ, uses_elevation=NEVER)
ELEVATION_SUNRISE = ZmanDefinition("elevation_sunrise", T.HANAITZ, uses_elevation=ALWAYS)
SUNSET = ZmanDefinition("sunset", T.SHKIAH, uses_elevation=IF_SET, authorities=GRA)
SEA_LEVEL_SUNSET = ZmanDefinition("sea_level_sunset", T.SHKIAH, uses_elevation=NEVER)
ELEVATION_SUNSET = ZmanDefinition("elevation_sunset", T.SHKIAH, uses_elevation=ALWAYS)

SUNRISE_BAAL_HATANYA = _define(
    "sunrise_baal_hatanya",
    occurs(T.HANAITZ, Degrees(1.583)).before(T.HANAITZ),
    NEVER,
    authorities=(ZmanAuthority.BAAL_HATANYA,),
)
SUNSET_BAAL_HATANYA = _define(
    "sunset_baal_hatanya",
    occurs(T.SHKIAH, Degrees(1.583)).after(T.SHKIAH),
    NEVER,
    authorities=(ZmanAuthority.BAAL_HATANYA,),
)

CHATZOS = ZmanDefinition("chatzos", T.CHATZOS, authorities=GRA)
FIXED_LOCAL_CHATZOS_DEF = ZmanDefinition(
    "fixed_local_chatzos",
    T.CHATZOS,
    method=FIXED_LOCAL_CHATZOS,
    uses_elevation=NEVER,
    authorities=(ZmanAuthority.FIXED_LOCAL_CHATZOS,),
)
CHATZOS_AS_HALF_DAY = _define(
    "chatzos_as_half_day",
    occurs(T.CHATZOS, ZmaniyosDuration(_hours(6))).after(SEA_LEVEL_SUNRISE),
    day=DayDefinition(SEA_LEVEL_SUNRISE, SEA_LEVEL_SUNSET),
    authorities=GRA,
)
SOLAR_MIDNIGHT = _define(
    "solar_midnight",
    occurs(T.CHATZOS_HALAYLA, FixedDuration(_hours(12))).after(CHATZOS),
)

# -- alos --------------------------------------------------------------------


def _alos_minutes(minutes: float) -> ZmanDefinition:
    return _define(
        f"alos_{minutes}",
        occurs(T.ALOS, FixedDuration(_minutes(minutes))).before(T.HANAITZ),
        IF_SET,
        authorities=MGA,
    )


def _alos_zmanis(minutes: float) -> ZmanDefinition:
    return _define(
        f"alos_{minutes}_zmanis",
        occurs(T.ALOS, ZmaniyosDuration(_minutes(minutes))).before(T.HANAITZ),
        IF_SET,
        authorities=MGA,
    )


def _degree_name(degrees: float) -> str:
    return f"{degrees:g}".replace(".", "_")


def _alos_degrees(degrees: float, **kwargs) -> ZmanDefinition:
    return _define(
        f"alos_{_degree_name(degrees)}_degrees",
        occurs(T.ALOS, Degrees(degrees)).before(T.HANAITZ),
        NEVER,
        **kwargs,
    )


ALOS_60 = _alos_minutes(60)
ALOS_72 = _alos_minutes(72)
ALOS_90 = _alos_minutes(90)
ALOS_96 = _alos_minutes(96)
ALOS_120 = _alos_minutes(120)
ALOS_72_ZMANIS = _alos_zmanis(72)
ALOS_90_ZMANIS = _alos_zmanis(90)
ALOS_96_ZMANIS = _alos_zmanis(96)
ALOS_120_ZMANIS = _alos_zmanis(120)
ALOS_16_1 = _alos_degrees(16.1, authorities=MGA)
ALOS_18 = _alos_degrees(18)
ALOS_19 = _alos_degrees(19)
ALOS_19_8 = _alos_degrees(19.8)
ALOS_26 = _alos_degrees(26)
ALOS_BAAL_HATANYA = _define(
    "alos_baal_hatanya",
    occurs(T.ALOS, Degrees(16.9)).before(T.HANAITZ),
    NEVER,
    authorities=(ZmanAuthority.BAAL_HATANYA,),
)

# -- misheyakir --------------------------------------------------------------


def _misheyakir(degrees: float) -> ZmanDefinition:
    return _define(
        f"misheyakir_{_degree_name(degrees)}_degrees",
        occurs(T.MISHEYAKIR, Degrees(degrees)).before(T.HANAITZ),
        NEVER,
    )


MISHEYAKIR_7_65 = _misheyakir(7.65)
MISHEYAKIR_9_5 = _misheyakir(9.5)
MISHEYAKIR_10_2 = _misheyakir(10.2)
MISHEYAKIR_11 = _misheyakir(11)
MISHEYAKIR_11_5 = _misheyakir(11.5)

# -- tzais -------------------------------------------------------------------


def _tzais_minutes(minutes: float) -> ZmanDefinition:
    return _define(
        f"tzais_{minutes}",
        occurs(T.TZAIS, FixedDuration(_minutes(minutes))).after(T.SHKIAH),
        IF_SET,
    )


def _tzais_zmanis(minutes: float) -> ZmanDefinition:
    return _define(
        f"tzais_{minutes}_zmanis",
        occurs(T.TZAIS, ZmaniyosDuration(_minutes(minutes))).after(T.SHKIAH),
        IF_SET,
        authorities=MGA,
    )


def _tzais_degrees(degrees: float, prefix: str = "tzais", **kwargs) -> ZmanDefinition:
    return _define(
        f"{prefix}_{_degree_name(degrees)}_degrees",
        occurs(T.TZAIS, Degrees(degrees)).after(T.SHKIAH),
        NEVER,
        **kwargs,
    )


def _tzais_geonim(degrees: float, **kwargs) -> ZmanDefinition:
    return _tzais_degrees(degrees, prefix="tzais_geonim", authorities=GEONIM, **kwargs)


TZAIS_GEONIM_3_7 = _tzais_geonim(3.7)
TZAIS_GEONIM_3_8 = _tzais_geonim(3.8)
TZAIS_GEONIM_5_95 = _tzais_geonim(5.95)
TZAIS_GEONIM_6_45 = _tzais_geonim(6.45)
TZAIS_GEONIM_7_083 = _tzais_geonim(7.083)
TZAIS_GEONIM_7_67 = _tzais_geonim(7.67)
TZAIS_GEONIM_8_5 = _tzais_geonim(8.5)
TZAIS_GEONIM_9_3 = _tzais_geonim(9.3)
TZAIS_GEONIM_9_75 = _tzais_geonim(9.75)
TZAIS_BAAL_HATANYA = _tzais_degrees(
    6, prefix="tzais_baal_hatanya", authorities=(ZmanAuthority.BAAL_HATANYA,)
)
TZAIS_16_1 = _tzais_degrees(16.1, authorities=MGA)
TZAIS_18 = _tzais_degrees(18)
TZAIS_19_8 = _tzais_degrees(19.8)
TZAIS_26 = _tzais_degrees(26)
TZAIS_50 = _tzais_minutes(50)
TZAIS_60 = _tzais_minutes(60)
TZAIS_72 = _define(
    "tzais_72",
    occurs(T.TZAIS, FixedDuration(_minutes(72))).after(T.SHKIAH),
    IF_SET,
    authorities=(ZmanAuthority.RABBEINU_TAM,),
)
TZAIS_90 = _tzais_minutes(90)
TZAIS_96 = _tzais_minutes(96)
TZAIS_120 = _tzais_minutes(120)
TZAIS_72_ZMANIS = _tzais_zmanis(72)
TZAIS_90_ZMANIS = _tzais_zmanis(90)
TZAIS_96_ZMANIS = _tzais_zmanis(96)
TZAIS_120_ZMANIS = _tzais_zmanis(120)

# -- temporal hours ----------------------------------------------------------


def _shaah(name: str, start: ZmanDefinition, end: ZmanDefinition, authorities=()) -> ZmanDefinition:
    return ZmanDefinition(
        f"shaah_zmanis_{name}",
        T.SHAAH_ZMANIS,
        method=DayDefinition(start, end),
        authorities=authorities,
    )


DAY_GRA = DayDefinition(SUNRISE, SUNSET)
DAY_BAAL_HATANYA = DayDefinition(SUNRISE_BAAL_HATANYA, SUNSET_BAAL_HATANYA)
DAY_MGA_72 = DayDefinition(ALOS_72, TZAIS_72)
DAY_MGA_72_ZMANIS = DayDefinition(ALOS_72_ZMANIS, TZAIS_72_ZMANIS)
DAY_MGA_90 = DayDefinition(ALOS_90, TZAIS_90)
DAY_MGA_90_ZMANIS = DayDefinition(ALOS_90_ZMANIS, TZAIS_90_ZMANIS)
DAY_MGA_96 = DayDefinition(ALOS_96, TZAIS_96)
DAY_MGA_96_ZMANIS = DayDefinition(ALOS_96_ZMANIS, TZAIS_96_ZMANIS)
DAY_MGA_120 = DayDefinition(ALOS_120, TZAIS_120)
DAY_16_1 = DayDefinition(ALOS_16_1, TZAIS_16_1)
DAY_18 = DayDefinition(ALOS_18, TZAIS_18)
DAY_19_8 = DayDefinition(ALOS_19_8, TZAIS_19_8)
DAY_26 = DayDefinition(ALOS_26, TZAIS_26)
DAY_ALOS_16_1_TO_SUNSET = DayDefinition(ALOS_16_1, SUNSET)
DAY_ALOS_16_1_TO_TZAIS_7_083 = DayDefinition(ALOS_16_1, TZAIS_GEONIM_7_083)
DAY_ALOS_16_1_TO_TZAIS_3_7 = DayDefinition(ALOS_16_1, TZAIS_GEONIM_3_7)

SHAAH_ZMANIS = [
    _shaah("gra", SUNRISE, SUNSET, GRA),
    _shaah("baal_hatanya", SUNRISE_BAAL_HATANYA, SUNSET_BAAL_HATANYA, (ZmanAuthority.BAAL_HATANYA,)),
    _shaah("mga", ALOS_72, TZAIS_72, MGA),
    _shaah("72_minutes_zmanis", ALOS_72_ZMANIS, TZAIS_72_ZMANIS, MGA),
    _shaah("90_minutes", ALOS_90, TZAIS_90),
    _shaah("90_minutes_zmanis", ALOS_90_ZMANIS, TZAIS_90_ZMANIS),
    _shaah("96_minutes", ALOS_96, TZAIS_96),
    _shaah("96_minutes_zmanis", ALOS_96_ZMANIS, TZAIS_96_ZMANIS),
    _shaah("120_minutes", ALOS_120, TZAIS_120),
    _shaah("120_minutes_zmanis", ALOS_120_ZMANIS, TZAIS_120_ZMANIS),
    _shaah("16_1_degrees", ALOS_16_1, TZAIS_16_1, MGA),
    _shaah("18_degrees", ALOS_18, TZAIS_18),
    _shaah("19_8_degrees", ALOS_19_8, TZAIS_19_8),
    _shaah("26_degrees", ALOS_26, TZAIS_26),
    _shaah("alos_16_1_to_tzais_3_7", ALOS_16_1, TZAIS_GEONIM_3_7),
    _shaah("alos_16_1_to_tzais_3_8", ALOS_16_1, TZAIS_GEONIM_3_8),
]

# -- hours into the day ------------------------------------------------------

_DAYS = {
    "gra": (SUNRISE, DAY_GRA, IF_SET, GRA),
    "baal_hatanya": (SUNRISE_BAAL_HATANYA, DAY_BAAL_HATANYA, NEVER, (ZmanAuthority.BAAL_HATANYA,)),
    "mga": (ALOS_72, DAY_MGA_72, UsesElevation.UNSPECIFIED, MGA),
    "mga_72_minutes_zmanis": (ALOS_72_ZMANIS, DAY_MGA_72_ZMANIS, UsesElevation.UNSPECIFIED, MGA),
    "mga_90_minutes": (ALOS_90, DAY_MGA_90, UsesElevation.UNSPECIFIED, MGA),
    "mga_90_minutes_zmanis": (ALOS_90_ZMANIS, DAY_MGA_90_ZMANIS, UsesElevation.UNSPECIFIED, MGA),
    "mga_96_minutes": (ALOS_96, DAY_MGA_96, UsesElevation.UNSPECIFIED, MGA),
    "mga_96_minutes_zmanis": (ALOS_96_ZMANIS, DAY_MGA_96_ZMANIS, UsesElevation.UNSPECIFIED, MGA),
    "mga_120_minutes": (ALOS_120, DAY_MGA_120, UsesElevation.UNSPECIFIED, MGA),
    "mga_16_1_degrees": (ALOS_16_1, DAY_16_1, NEVER, MGA),
    "mga_18_degrees": (ALOS_18, DAY_18, NEVER, MGA),
    "mga_19_8_degrees": (ALOS_19_8, DAY_19_8, NEVER, MGA),
    "mga_26_degrees": (ALOS_26, DAY_26, NEVER, MGA),
    "alos_16_1_to_sunset": (ALOS_16_1, DAY_ALOS_16_1_TO_SUNSET, UsesElevation.UNSPECIFIED, ()),
    "alos_16_1_to_tzais_geonim_7_083_degrees": (
        ALOS_16_1,
        DAY_ALOS_16_1_TO_TZAIS_7_083,
        NEVER,
        (),
    ),
}


def _hours_into(zman_type: ZmanType, prefix: str, hours: float, day: str, **kwargs) -> ZmanDefinition:
    start, day_definition, uses_elevation, authorities = _DAYS[day]
    return _define(
        f"{prefix}_{day}",
        occurs(zman_type, ZmaniyosDuration(_hours(hours))).after(start),
        uses_elevation,
        day=day_definition,
        authorities=authorities,
        **kwargs,
    )


def _family(zman_type: ZmanType, prefix: str, hours: float, days: Iterable[str]) -> List[ZmanDefinition]:
    return [_hours_into(zman_type, prefix, hours, day) for day in days]


SOF_ZMAN_SHMA_GRA = _hours_into(
    T.SOF_ZMAN_SHMA,
    "sof_zman_shma",
    3,
    "gra",
    relative_methods=((T.CHATZOS, ZmaniyosDuration(_hours(-3))),),
)
SOF_ZMAN_SHMA = [SOF_ZMAN_SHMA_GRA] + _family(
    T.SOF_ZMAN_SHMA,
    "sof_zman_shma",
    3,
    (
        "baal_hatanya",
        "mga",
        "mga_72_minutes_zmanis",
        "mga_90_minutes",
        "mga_90_minutes_zmanis",
        "mga_96_minutes",
        "mga_96_minutes_zmanis",
        "mga_120_minutes",
        "mga_16_1_degrees",
        "mga_18_degrees",
        "mga_19_8_degrees",
        "alos_16_1_to_sunset",
        "alos_16_1_to_tzais_geonim_7_083_degrees",
    ),
) + [
    _define(
        "sof_zman_shma_3_hours_before_chatzos",
        occurs(T.SOF_ZMAN_SHMA, FixedDuration(_hours(3))).before(T.CHATZOS),
        authorities=MGA,
    ),
    _define(
        "sof_zman_shma_fixed_local",
        occurs(T.SOF_ZMAN_SHMA, FixedDuration(_hours(3))).before(FIXED_LOCAL_CHATZOS_DEF),
        authorities=(ZmanAuthority.FIXED_LOCAL_CHATZOS,),
    ),
]

SOF_ZMAN_TFILA_GRA = _hours_into(T.SOF_ZMAN_TFILA, "sof_zman_tfila", 4, "gra")
SOF_ZMAN_TFILA = [SOF_ZMAN_TFILA_GRA] + _family(
    T.SOF_ZMAN_TFILA,
    "sof_zman_tfila",
    4,
    (
        "baal_hatanya",
        "mga",
        "mga_72_minutes_zmanis",
        "mga_90_minutes",
        "mga_90_minutes_zmanis",
        "mga_96_minutes",
        "mga_96_minutes_zmanis",
        "mga_120_minutes",
        "mga_16_1_degrees",
        "mga_18_degrees",
        "mga_19_8_degrees",
    ),
) + [
    _define(
        "sof_zman_tfila_2_hours_before_chatzos",
        occurs(T.SOF_ZMAN_TFILA, FixedDuration(_hours(2))).before(T.CHATZOS),
        authorities=MGA,
    ),
    _define(
        "sof_zman_tfila_fixed_local",
        occurs(T.SOF_ZMAN_TFILA, FixedDuration(_hours(2))).before(FIXED_LOCAL_CHATZOS_DEF),
        authorities=(ZmanAuthority.FIXED_LOCAL_CHATZOS,),
    ),
]

CHAMETZ = _family(
    T.SOF_ZMAN_ACHILAS_CHAMETZ,
    "sof_zman_achilas_chametz",
    4,
    ("gra", "baal_hatanya", "mga", "mga_16_1_degrees"),
) + _family(
    T.SOF_ZMAN_BIUR_CHAMETZ,
    "sof_zman_biur_chametz",
    5,
    ("gra", "baal_hatanya", "mga", "mga_16_1_degrees"),
)

MINCHA_GEDOLA_GRA = _hours_into(T.MINCHA_GEDOLA, "mincha_gedola", 6.5, "gra")
MINCHA_GEDOLA_30_MINUTES = _define(
    "mincha_gedola_30_minutes",
    occurs(T.MINCHA_GEDOLA, FixedDuration(_minutes(30))).after(CHATZOS),
)
MINCHA_GEDOLA_HALF_SHAAH_16_1_TO_3_7 = _define(
    "mincha_gedola_half_shaah_alos_16_1_to_tzais_3_7",
    occurs(T.MINCHA_GEDOLA, ZmaniyosDuration(_minutes(30))).after(CHATZOS),
    NEVER,
    day=DAY_ALOS_16_1_TO_TZAIS_3_7,
)
MINCHA_GEDOLA = [
    MINCHA_GEDOLA_GRA,
    MINCHA_GEDOLA_30_MINUTES,
    MINCHA_GEDOLA_HALF_SHAAH_16_1_TO_3_7,
    ZmanDefinition(
        "mincha_gedola_greater_than_30",
        T.MINCHA_GEDOLA,
        method=LaterOf(MINCHA_GEDOLA_30_MINUTES, MINCHA_GEDOLA_GRA),
        authorities=GRA,
    ),
    ZmanDefinition(
        "mincha_gedola_ahavat_shalom",
        T.MINCHA_GEDOLA,
        method=LaterOf(MINCHA_GEDOLA_30_MINUTES, MINCHA_GEDOLA_HALF_SHAAH_16_1_TO_3_7),
        authorities=(ZmanAuthority.AHAVAT_SHALOM,),
    ),
    _define(
        "mincha_gedola_gra_fixed_local_chatzos_30_minutes",
        occurs(T.MINCHA_GEDOLA, FixedDuration(_minutes(30))).after(FIXED_LOCAL_CHATZOS_DEF),
        authorities=(ZmanAuthority.FIXED_LOCAL_CHATZOS,),
    ),
] + _family(
    T.MINCHA_GEDOLA,
    "mincha_gedola",
    6.5,
    ("baal_hatanya", "mga", "mga_16_1_degrees"),
)

SAMUCH_LEMINCHA_KETANA = _family(
    T.SAMUCH_LEMINCHA_KETANA,
    "samuch_lemincha_ketana",
    9,
    ("gra", "mga", "mga_16_1_degrees"),
)

MINCHA_KETANA = [
    _hours_into(
        T.MINCHA_KETANA,
        "mincha_ketana",
        9.5,
        "gra",
        relative_methods=((T.SHKIAH, ZmaniyosDuration(_hours(-2.5))),),
    )
] + _family(
    T.MINCHA_KETANA,
    "mincha_ketana",
    9.5,
    ("baal_hatanya", "mga", "mga_16_1_degrees"),
)

PLAG_HAMINCHA = [
    _hours_into(
        T.PLAG_HAMINCHA,
        "plag_hamincha",
        10.75,
        "gra",
        relative_methods=((T.SHKIAH, ZmaniyosDuration(_hours(-1.25))),),
    )
] + _family(
    T.PLAG_HAMINCHA,
    "plag_hamincha",
    10.75,
    (
        "baal_hatanya",
        "mga",
        "mga_72_minutes_zmanis",
        "mga_90_minutes",
        "mga_90_minutes_zmanis",
        "mga_96_minutes",
        "mga_96_minutes_zmanis",
        "mga_120_minutes",
        "mga_16_1_degrees",
        "mga_18_degrees",
        "mga_19_8_degrees",
        "mga_26_degrees",
        "alos_16_1_to_sunset",
        "alos_16_1_to_tzais_geonim_7_083_degrees",
    ),
)

# -- bain hashmashos ---------------------------------------------------------

RABBEINU_TAM = (ZmanAuthority.RABBEINU_TAM,)
YEREIM = (ZmanAuthority.YEREIM,)

BAIN_HASHMASHOS = [
    _define(
        "bain_hashmashos_rt_13_24_degrees",
        occurs(T.BAIN_HASHMASHOS, Degrees(13.24)).after(T.SHKIAH),
        NEVER,
        authorities=RABBEINU_TAM,
    ),
    _define(
        "bain_hashmashos_rt_58_5_minutes",
        occurs(T.BAIN_HASHMASHOS, FixedMinutesFloat(58.5)).after(T.SHKIAH),
        IF_SET,
        authorities=RABBEINU_TAM,
    ),
    _define(
        "bain_hashmashos_rt_13_5_minutes_before_7_083_degrees",
        occurs(T.BAIN_HASHMASHOS, FixedMinutesFloat(13.5)).before(TZAIS_GEONIM_7_083),
        authorities=RABBEINU_TAM,
    ),
    _define(
        "bain_hashmashos_yereim_18_minutes",
        occurs(T.BAIN_HASHMASHOS, FixedDuration(_minutes(18))).before(T.SHKIAH),
        IF_SET,
        authorities=YEREIM,
    ),
    _define(
        "bain_hashmashos_yereim_16_875_minutes",
        occurs(T.BAIN_HASHMASHOS, FixedMinutesFloat(16.875)).before(T.SHKIAH),
        IF_SET,
        authorities=YEREIM,
    ),
    _define(
        "bain_hashmashos_yereim_13_5_minutes",
        occurs(T.BAIN_HASHMASHOS, FixedMinutesFloat(13.5)).before(T.SHKIAH),
        IF_SET,
        authorities=YEREIM,
    ),
    _define(
        "bain_hashmashos_yereim_3_05_degrees",
        occurs(T.BAIN_HASHMASHOS, Degrees(3.05)).before(T.SHKIAH),
        NEVER,
        authorities=YEREIM,
    ),
    _define(
        "bain_hashmashos_yereim_2_8_degrees",
        occurs(T.BAIN_HASHMASHOS, Degrees(2.8)).before(T.SHKIAH),
        NEVER,
        authorities=YEREIM,
    ),
    _define(
        "bain_hashmashos_yereim_2_1_degrees",
        occurs(T.BAIN_HASHMASHOS, Degrees(2.1)).before(T.SHKIAH),
        NEVER,
        authorities=YEREIM,
    ),
]

# -- kiddush levana ----------------------------------------------------------

#: Half of the mean synodic month (29d 12h 44m 3 1/3s).
HALF_LUNAR_MONTH = timedelta(days=14, hours=18, minutes=22, seconds=1, milliseconds=666)

KIDUSH_LEVANA = [
    _define(
        "tchilas_zman_kidush_levana_3_days",
        occurs(T.TCHILAS_ZMAN_KIDUSH_LEVANA, FixedDuration(timedelta(days=3))).after(T.MOLAD),
    ),
    _define(
        "tchilas_zman_kidush_levana_7_days",
        occurs(T.TCHILAS_ZMAN_KIDUSH_LEVANA, FixedDuration(timedelta(days=7))).after(T.MOLAD),
    ),
    _define(
        "sof_zman_kidush_levana_between_moldos",
        occurs(T.SOF_ZMAN_KIDUSH_LEVANA, FixedDuration(HALF_LUNAR_MONTH)).after(T.MOLAD),
    ),
    _define(
        "sof_zman_kidush_levana_15_days",
        occurs(T.SOF_ZMAN_KIDUSH_LEVANA, FixedDuration(timedelta(days=15))).after(T.MOLAD),
    ),
]

_DEFINITIONS: List[ZmanDefinition] = (
    [
        SUNRISE,
        SEA_LEVEL_SUNRISE,
        ELEVATION_SUNRISE,
        SUNRISE_BAAL_HATANYA,
        SUNSET,
        SEA_LEVEL_SUNSET,
        ELEVATION_SUNSET,
        SUNSET_BAAL_HATANYA,
        CHATZOS,
        FIXED_LOCAL_CHATZOS_DEF,
        CHATZOS_AS_HALF_DAY,
        SOLAR_MIDNIGHT,
        ALOS_60,
        ALOS_72,
        ALOS_90,
        ALOS_96,
        ALOS_120,
        ALOS_72_ZMANIS,
        ALOS_90_ZMANIS,
        ALOS_96_ZMANIS,
        ALOS_120_ZMANIS,
        ALOS_16_1,
        ALOS_18,
        ALOS_19,
        ALOS_19_8,
        ALOS_26,
        ALOS_BAAL_HATANYA,
        MISHEYAKIR_7_65,
        MISHEYAKIR_9_5,
        MISHEYAKIR_10_2,
        MISHEYAKIR_11,
        MISHEYAKIR_11_5,
        TZAIS_GEONIM_3_7,
        TZAIS_GEONIM_3_8,
        TZAIS_GEONIM_5_95,
        TZAIS_GEONIM_6_45,
        TZAIS_GEONIM_7_083,
        TZAIS_GEONIM_7_67,
        TZAIS_GEONIM_8_5,
        TZAIS_GEONIM_9_3,
        TZAIS_GEONIM_9_75,
        TZAIS_BAAL_HATANYA,
        TZAIS_16_1,
        TZAIS_18,
        TZAIS_19_8,
        TZAIS_26,
        TZAIS_50,
        TZAIS_60,
        TZAIS_72,
        TZAIS_90,
        TZAIS_96,
        TZAIS_120,
        TZAIS_72_ZMANIS,
        TZAIS_90_ZMANIS,
        TZAIS_96_ZMANIS,
        TZAIS_120_ZMANIS,
    ]
    + SHAAH_ZMANIS
    + SOF_ZMAN_SHMA
    + SOF_ZMAN_TFILA
    + CHAMETZ
    + MINCHA_GEDOLA
    + SAMUCH_LEMINCHA_KETANA
    + MINCHA_KETANA
    + PLAG_HAMINCHA
    + BAIN_HASHMASHOS
    + KIDUSH_LEVANA
)

CATALOG = ZmanCatalog(_DEFINITIONS)


def parametric_definitions(
    candle_lighting_offset: timedelta, ateret_torah_sunset_offset: timedelta
) -> List[ZmanDefinition]:
    """Definitions whose offsets are configuration rather than fixed law.

    Candle lighting is measured from sea-level sunset. The Ateret Torah day
    runs from 72 zmaniyos minutes before sunrise to a configurable number of
    minutes after sunset, and its temporal hours drive the other Ateret
    Torah zmanim.
    """

    candle_lighting = _define(
        "candle_lighting",
        occurs(T.CANDLE_LIGHTING, FixedDuration(candle_lighting_offset)).before(SEA_LEVEL_SUNSET),
    )
    tzais_ateret_torah = _define(
        "tzais_ateret_torah",
        occurs(T.TZAIS, FixedDuration(ateret_torah_sunset_offset)).after(T.SHKIAH),
        IF_SET,
        authorities=(ZmanAuthority.ATERET_TORAH,),
    )
    day = DayDefinition(ALOS_72_ZMANIS, tzais_ateret_torah)
    ateret_torah = (ZmanAuthority.ATERET_TORAH,)

    def hours_into(zman_type: ZmanType, prefix: str, hours: float) -> ZmanDefinition:
        return _define(
            f"{prefix}_ateret_torah",
            occurs(zman_type, ZmaniyosDuration(_hours(hours))).after(ALOS_72_ZMANIS),
            day=day,
            authorities=ateret_torah,
        )

    return [
        candle_lighting,
        tzais_ateret_torah,
        _shaah("ateret_torah", ALOS_72_ZMANIS, tzais_ateret_torah, ateret_torah),
        hours_into(T.SOF_ZMAN_SHMA, "sof_zman_shma", 3),
        hours_into(T.SOF_ZMAN_TFILA, "sof_zman_tfila", 4),
        hours_into(T.MINCHA_GEDOLA, "mincha_gedola", 6.5),
        hours_into(T.MINCHA_KETANA, "mincha_ketana", 9.5),
        hours_into(T.PLAG_HAMINCHA, "plag_hamincha", 10.75),
    ]
