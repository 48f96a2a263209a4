"""Declarative zman metadata: what a time point is, not how to compute it.

A :class:`ZmanDefinition` names a time point, the calculation method used for
it and, usually, a :class:`ZmanRelationship` to the zman it is measured from::

    occurs(ZmanType.TZAIS, Degrees(8.5)).after(ZmanType.SHKIAH)
    occurs(ZmanType.ALOS, ZmaniyosDuration(timedelta(minutes=72))).before(SUNRISE)

Everything here is immutable and hashable so definitions can be shared
between threads and used as keys while resolving.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Dict, Optional, Tuple, Union

__all__ = [
    "Side",
    "ZmanType",
    "ZmanAuthority",
    "UsesElevation",
    "ZmanCalculationMethod",
    "Degrees",
    "FixedDuration",
    "ZmaniyosDuration",
    "FixedMinutesFloat",
    "FixedLocalChatzos",
    "LaterOf",
    "DayDefinition",
    "Unspecified",
    "FIXED_LOCAL_CHATZOS",
    "UNSPECIFIED",
    "ZmanRelationship",
    "Occurrence",
    "occurs",
    "ZmanDefinition",
    "DateBasedZman",
]


class Side(Enum):
    """Which horizon crossing a zman is measured against."""

    MORNING = "morning"
    EVENING = "evening"
    NONE = "none"


class ZmanType(Enum):
    """Identity of a named time point. Carries no computation."""

    ALOS = ("alos", Side.MORNING)
    MISHEYAKIR = ("misheyakir", Side.MORNING)
    HANAITZ = ("hanaitz", Side.MORNING)
    SOF_ZMAN_SHMA = ("sof_zman_shma", Side.NONE)
    SOF_ZMAN_TFILA = ("sof_zman_tfila", Side.NONE)
    SOF_ZMAN_ACHILAS_CHAMETZ = ("sof_zman_achilas_chametz", Side.NONE)
    SOF_ZMAN_BIUR_CHAMETZ = ("sof_zman_biur_chametz", Side.NONE)
    CHATZOS = ("chatzos", Side.NONE)
    MINCHA_GEDOLA = ("mincha_gedola", Side.NONE)
    SAMUCH_LEMINCHA_KETANA = ("samuch_lemincha_ketana", Side.NONE)
    MINCHA_KETANA = ("mincha_ketana", Side.NONE)
    PLAG_HAMINCHA = ("plag_hamincha", Side.NONE)
    CANDLE_LIGHTING = ("candle_lighting", Side.EVENING)
    SHKIAH = ("shkiah", Side.EVENING)
    BAIN_HASHMASHOS = ("bain_hashmashos", Side.EVENING)
    TZAIS = ("tzais", Side.EVENING)
    CHATZOS_HALAYLA = ("chatzos_halayla", Side.NONE)
    SHAAH_ZMANIS = ("shaah_zmanis", Side.NONE)
    MOLAD = ("molad", Side.NONE)
    TCHILAS_ZMAN_KIDUSH_LEVANA = ("tchilas_zman_kidush_levana", Side.NONE)
    SOF_ZMAN_KIDUSH_LEVANA = ("sof_zman_kidush_levana", Side.NONE)

    def __init__(self, key: str, side: Side) -> None:
        self.key = key
        self.side = side


class ZmanAuthority(Enum):
    """Halachic authorities a definition follows."""

    GRA = "gra"
    MGA = "mga"
    BAAL_HATANYA = "baal_hatanya"
    RABBEINU_TAM = "rabbeinu_tam"
    GEONIM = "geonim"
    YEREIM = "yereim"
    ATERET_TORAH = "ateret_torah"
    AHAVAT_SHALOM = "ahavat_shalom"
    MINHAG_YERUSHALAYIM = "minhag_yerushalayim"
    FIXED_LOCAL_CHATZOS = "fixed_local_chatzos"


class UsesElevation(Enum):
    """Whether sunrise and sunset used by a definition are elevation adjusted."""

    IF_SET = "if_set"
    NEVER = "never"
    ALWAYS = "always"
    UNSPECIFIED = "unspecified"


class ZmanCalculationMethod:
    """Base of the calculation method variants.

    :meth:`negate` and :meth:`affirm` only change numeric variants; the
    others have no direction and return themselves.
    """

    def negate(self) -> "ZmanCalculationMethod":
        return _signed(self, -1)

    def affirm(self) -> "ZmanCalculationMethod":
        return _signed(self, 1)


@dataclass(frozen=True)
class Degrees(ZmanCalculationMethod):
    """Sun this many degrees from the geometric horizon."""

    degrees: float


@dataclass(frozen=True)
class FixedDuration(ZmanCalculationMethod):
    """Clock time offset."""

    duration: timedelta


@dataclass(frozen=True)
class ZmaniyosDuration(ZmanCalculationMethod):
    """Offset in proportional minutes: 60 of them make one temporal hour."""

    duration: timedelta


@dataclass(frozen=True)
class FixedMinutesFloat(ZmanCalculationMethod):
    """Clock offset in fractional minutes, such as 58.5."""

    minutes: float


@dataclass(frozen=True)
class FixedLocalChatzos(ZmanCalculationMethod):
    """Noon by local mean time."""


@dataclass(frozen=True)
class LaterOf(ZmanCalculationMethod):
    first: "ZmanDefinition"
    second: "ZmanDefinition"


@dataclass(frozen=True)
class DayDefinition(ZmanCalculationMethod):
    """The two zmanim bounding the day that temporal hours divide."""

    start: "ZmanDefinition"
    end: "ZmanDefinition"


@dataclass(frozen=True)
class Unspecified(ZmanCalculationMethod):
    """No calculation of its own: the referenced zman as is."""


FIXED_LOCAL_CHATZOS = FixedLocalChatzos()
UNSPECIFIED = Unspecified()


def _signed(method: ZmanCalculationMethod, sign: int) -> ZmanCalculationMethod:
    # Take the magnitude first so repeated negation never flips back.
    if isinstance(method, Degrees):
        return Degrees(sign * abs(method.degrees))
    if isinstance(method, FixedDuration):
        return FixedDuration(sign * abs(method.duration))
    if isinstance(method, ZmaniyosDuration):
        return ZmaniyosDuration(sign * abs(method.duration))
    if isinstance(method, FixedMinutesFloat):
        return FixedMinutesFloat(sign * abs(method.minutes))
    return method


Reference = Union[ZmanType, "ZmanDefinition"]


@dataclass(frozen=True)
class ZmanRelationship:
    """*subject* occurs by *calculation* relative to *reference*."""

    subject: ZmanType
    calculation: ZmanCalculationMethod
    reference: Reference

    @property
    def reference_type(self) -> ZmanType:
        if isinstance(self.reference, ZmanType):
            return self.reference
        return self.reference.type


@dataclass(frozen=True)
class Occurrence:
    """Half-built relationship: ``occurs(subject, method).after(reference)``."""

    subject: ZmanType
    calculation: ZmanCalculationMethod

    def after(self, reference: Reference) -> ZmanRelationship:
        return ZmanRelationship(self.subject, self.calculation.affirm(), reference)

    def before(self, reference: Reference) -> ZmanRelationship:
        return ZmanRelationship(self.subject, self.calculation.negate(), reference)


def occurs(subject: ZmanType, calculation: ZmanCalculationMethod) -> Occurrence:
    return Occurrence(subject, calculation)


@dataclass(frozen=True)
class ZmanDefinition:
    """A named, immutable definition of one zman.

    ``method`` is the main calculation method. When ``relationship`` is set
    the engine applies the relationship's signed method against its
    reference; otherwise ``method`` is evaluated on its own (sunrise, sunset,
    transit, fixed local chatzos, :class:`LaterOf` or a temporal hour from a
    :class:`DayDefinition`). ``relative_methods`` records equivalent methods
    measured from other reference types.
    """

    name: str
    type: ZmanType
    method: ZmanCalculationMethod = UNSPECIFIED
    uses_elevation: UsesElevation = UsesElevation.UNSPECIFIED
    day_definition: Optional[DayDefinition] = None
    authorities: Tuple[ZmanAuthority, ...] = ()
    relationship: Optional[ZmanRelationship] = None
    relative_methods: Tuple[Tuple[ZmanType, ZmanCalculationMethod], ...] = field(default=())

    @property
    def relative_method_map(self) -> Dict[ZmanType, ZmanCalculationMethod]:
        return dict(self.relative_methods)

    def method_relative_to(self, zman_type: ZmanType) -> Optional[ZmanCalculationMethod]:
        """Signed method placing this zman relative to *zman_type*, if known."""

        if self.relationship is not None and self.relationship.reference_type is zman_type:
            return self.relationship.calculation
        return self.relative_method_map.get(zman_type)

    def dependencies(self) -> Tuple["ZmanDefinition", ...]:
        """Definitions that must be resolved before this one."""

        found = []
        if self.relationship is not None and isinstance(self.relationship.reference, ZmanDefinition):
            found.append(self.relationship.reference)
        if self.day_definition is not None:
            found.extend((self.day_definition.start, self.day_definition.end))
        if isinstance(self.method, LaterOf):
            found.extend((self.method.first, self.method.second))
        elif isinstance(self.method, DayDefinition):
            found.extend((self.method.start, self.method.end))
        return tuple(found)

    def __repr__(self) -> str:
        return f"ZmanDefinition({self.name!r}, {self.type.name})"


@dataclass(frozen=True)
class DateBasedZman:
    """A definition resolved for one date.

    ``moment`` is ``None`` when the zman does not occur that day. Temporal
    hour definitions carry a ``duration`` instead of a moment.
    """

    definition: ZmanDefinition
    moment: Optional[datetime] = None
    duration: Optional[timedelta] = None

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def type(self) -> ZmanType:
        return self.definition.type
