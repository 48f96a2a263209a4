"""Resolution of zman definitions into instants for one date."""

from __future__ import annotations

import functools
import json
import logging
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional, Tuple

from .astro import GEOMETRIC_ZENITH, AstronomicalCalendar
from .calculators import SolarPositionCalculator
from .catalog import CATALOG, ZmanCatalog, parametric_definitions
from .location import Location
from .metadata import (
    DateBasedZman,
    DayDefinition,
    Degrees,
    FixedDuration,
    FixedLocalChatzos,
    FixedMinutesFloat,
    LaterOf,
    Side,
    UsesElevation,
    ZmanCalculationMethod,
    ZmanDefinition,
    ZmaniyosDuration,
    ZmanType,
)

__all__ = ["ZmanimCalendar"]

LOGGER = logging.getLogger(__name__)

ONE_HOUR = timedelta(hours=1)


@functools.lru_cache(maxsize=32)
def _catalog_with_parameters(
    catalog: ZmanCatalog, candle_lighting_offset: timedelta, ateret_torah_sunset_offset: timedelta
) -> ZmanCatalog:
    return catalog.extended(
        parametric_definitions(candle_lighting_offset, ateret_torah_sunset_offset)
    )


@functools.lru_cache(maxsize=256)
def _check_against_catalog(catalog: ZmanCatalog, definition: ZmanDefinition) -> None:
    catalog.extended((definition,))


class ZmanimCalendar(AstronomicalCalendar):
    """Astronomical calendar that also resolves the zman catalog.

    Parameters
    ----------
    catalog:
        Static definitions to resolve. The parametric definitions (candle
        lighting and the Ateret Torah family) are appended to it.
    candle_lighting_offset:
        Time before sea-level sunset for candle lighting.
    ateret_torah_sunset_offset:
        Time after sunset for the Ateret Torah tzais.
    molad:
        Timezone-aware instant of the molad, supplied by the caller. Without
        it molad-relative zmanim resolve to ``None``.

    Results are recomputed on every call; nothing is cached between calls.
    """

    def __init__(
        self,
        location: Optional[Location] = None,
        calculator: Optional[SolarPositionCalculator] = None,
        current_date: Optional[date] = None,
        use_elevation: bool = False,
        catalog: ZmanCatalog = CATALOG,
        candle_lighting_offset: timedelta = timedelta(minutes=18),
        ateret_torah_sunset_offset: timedelta = timedelta(minutes=40),
        molad: Optional[datetime] = None,
    ) -> None:
        super().__init__(location, calculator, current_date, use_elevation)
        self.candle_lighting_offset = candle_lighting_offset
        self.ateret_torah_sunset_offset = ateret_torah_sunset_offset
        self.catalog = _catalog_with_parameters(
            catalog, candle_lighting_offset, ateret_torah_sunset_offset
        )
        self.molad = molad

    @property
    def molad(self) -> Optional[datetime]:
        return self._molad

    @molad.setter
    def molad(self, value: Optional[datetime]) -> None:
        if value is not None and value.utcoffset() is None:
            raise ValueError("molad must be a timezone-aware datetime")
        self._molad = value

    def zman(self, name: str) -> DateBasedZman:
        """Resolve the catalog definition called *name*."""

        return self.resolve(self.catalog[name])

    def resolve(self, definition: ZmanDefinition) -> DateBasedZman:
        """Resolve one definition for :attr:`current_date`.

        Definitions outside the catalog are validated against it the first
        time they are seen.
        """

        if definition.name not in self.catalog or self.catalog[definition.name] != definition:
            _check_against_catalog(self.catalog, definition)
        return _ResolutionPass(self).resolve(definition)

    def resolve_all(self) -> Dict[str, DateBasedZman]:
        """Every catalog definition, keyed by name, in declaration order."""

        resolution = _ResolutionPass(self)
        results = {definition.name: resolution.resolve(definition) for definition in self.catalog}
        LOGGER.debug(
            json.dumps(
                {
                    "event": "resolution_pass",
                    "date": self.current_date.isoformat(),
                    "definitions": len(results),
                    "undefined": sum(
                        1 for zman in results.values() if zman.moment is None and zman.duration is None
                    ),
                }
            )
        )
        return results

    def all_zmanim(self) -> List[DateBasedZman]:
        """All resolved zmanim sorted by instant.

        Ties keep declaration order. Zmanim without an instant, including
        temporal hours, come last.
        """

        def sort_key(zman: DateBasedZman) -> Tuple[bool, float, int]:
            timestamp = zman.moment.timestamp() if zman.moment is not None else 0.0
            return (zman.moment is None, timestamp, self.catalog.index_of(zman.definition))

        return sorted(self.resolve_all().values(), key=sort_key)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ZmanimCalendar):
            return NotImplemented
        return (
            super().__eq__(other)
            and self.catalog is other.catalog
            and self.molad == other.molad
        )

    __hash__ = None


class _ResolutionPass:
    """Memoized evaluation of the definition graph for one date."""

    def __init__(self, calendar: ZmanimCalendar) -> None:
        self.calendar = calendar
        self._resolved: Dict[ZmanDefinition, DateBasedZman] = {}
        self._primitives: Dict[Tuple[ZmanType, bool], Optional[datetime]] = {}

    def resolve(self, definition: ZmanDefinition) -> DateBasedZman:
        zman = self._resolved.get(definition)
        if zman is None:
            zman = self._evaluate(definition)
            self._resolved[definition] = zman
        return zman

    def elevation_policy(self, definition: ZmanDefinition) -> UsesElevation:
        if definition.uses_elevation is not UsesElevation.UNSPECIFIED:
            return definition.uses_elevation
        relationship = definition.relationship
        if relationship is not None and isinstance(relationship.reference, ZmanDefinition):
            return self.elevation_policy(relationship.reference)
        day = definition.day_definition
        if day is None and isinstance(definition.method, DayDefinition):
            day = definition.method
        if day is not None:
            return self.elevation_policy(day.start)
        return UsesElevation.IF_SET

    def uses_elevation(self, definition: ZmanDefinition) -> bool:
        policy = self.elevation_policy(definition)
        if policy is UsesElevation.ALWAYS:
            return True
        if policy is UsesElevation.NEVER:
            return False
        return self.calendar.use_elevation

    def primitive(self, zman_type: ZmanType, elevation: bool) -> Optional[datetime]:
        key = (zman_type, elevation)
        if key not in self._primitives:
            self._primitives[key] = self._primitive(zman_type, elevation)
        return self._primitives[key]

    def _primitive(self, zman_type: ZmanType, elevation: bool) -> Optional[datetime]:
        calendar = self.calendar
        if zman_type is ZmanType.HANAITZ:
            return calendar.sunrise if elevation else calendar.sea_level_sunrise
        if zman_type is ZmanType.SHKIAH:
            return calendar.sunset if elevation else calendar.sea_level_sunset
        if zman_type is ZmanType.CHATZOS:
            return calendar.sun_transit
        if zman_type is ZmanType.MOLAD:
            if calendar.molad is None:
                return None
            return calendar.molad.astimezone(calendar.location.tz)
        return None

    def temporal_hour(self, definition: ZmanDefinition, elevation: bool) -> Optional[timedelta]:
        day = definition.day_definition
        if day is not None:
            return self.calendar.temporal_hour(
                self.resolve(day.start).moment, self.resolve(day.end).moment
            )
        return self.calendar.temporal_hour(
            self.primitive(ZmanType.HANAITZ, elevation), self.primitive(ZmanType.SHKIAH, elevation)
        )

    def _evaluate(self, definition: ZmanDefinition) -> DateBasedZman:
        elevation = self.uses_elevation(definition)
        relationship = definition.relationship
        if relationship is None:
            return self._evaluate_standalone(definition, elevation)

        reference = relationship.reference
        if isinstance(reference, ZmanType):
            anchor = self.primitive(reference, elevation)
        else:
            anchor = self.resolve(reference).moment
        moment = self._apply(
            relationship.calculation, relationship.reference_type, anchor, definition, elevation
        )
        return DateBasedZman(definition, moment)

    def _evaluate_standalone(self, definition: ZmanDefinition, elevation: bool) -> DateBasedZman:
        method = definition.method
        if isinstance(method, DayDefinition):
            duration = self.calendar.temporal_hour(
                self.resolve(method.start).moment, self.resolve(method.end).moment
            )
            return DateBasedZman(definition, duration=duration)
        if isinstance(method, LaterOf):
            moments = [
                moment
                for moment in (self.resolve(method.first).moment, self.resolve(method.second).moment)
                if moment is not None
            ]
            return DateBasedZman(definition, max(moments) if moments else None)
        if isinstance(method, FixedLocalChatzos):
            return DateBasedZman(definition, self.calendar.fixed_local_chatzos)
        return DateBasedZman(definition, self.primitive(definition.type, elevation))

    def _apply(
        self,
        method: ZmanCalculationMethod,
        reference_type: ZmanType,
        anchor: Optional[datetime],
        definition: ZmanDefinition,
        elevation: bool,
    ) -> Optional[datetime]:
        calendar = self.calendar
        if isinstance(method, Degrees):
            # Depression is measured from the horizon crossing, not the anchor.
            if reference_type.side is Side.MORNING:
                return calendar.sunrise_offset_by_degrees(GEOMETRIC_ZENITH - method.degrees)
            return calendar.sunset_offset_by_degrees(GEOMETRIC_ZENITH + method.degrees)
        if isinstance(method, FixedDuration):
            return calendar.time_offset(anchor, method.duration)
        if isinstance(method, FixedMinutesFloat):
            return calendar.time_offset(anchor, method.minutes)
        if isinstance(method, ZmaniyosDuration):
            hour = self.temporal_hour(definition, elevation)
            if anchor is None or hour is None:
                return None
            return calendar.time_offset(anchor, hour * (method.duration / ONE_HOUR))
        return anchor
