"""Solar and lunar zmanim for a location and date."""

from .astro import AstronomicalCalendar
from .calculators import NOAACalculator, SunTimesCalculator, get_calculator
from .catalog import CATALOG, CatalogError, ZmanCatalog
from .engine import ZmanimCalendar
from .location import Location
from .metadata import DateBasedZman, ZmanDefinition, ZmanType

__all__ = [
    "AstronomicalCalendar",
    "NOAACalculator",
    "SunTimesCalculator",
    "get_calculator",
    "CATALOG",
    "CatalogError",
    "ZmanCatalog",
    "ZmanimCalendar",
    "Location",
    "DateBasedZman",
    "ZmanDefinition",
    "ZmanType",
]
