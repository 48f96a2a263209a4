from __future__ import annotations

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pytest

from zmanim_core.location import Location


@pytest.fixture(scope="session")
def lakewood() -> Location:
    return Location(
        name="Lakewood, NJ",
        latitude=40.096,
        longitude=-74.222,
        elevation=29.02,
        timezone="America/New_York",
    )


@pytest.fixture(scope="session")
def jerusalem() -> Location:
    return Location(
        name="Jerusalem",
        latitude=31.778,
        longitude=35.2354,
        elevation=754,
        timezone="Asia/Jerusalem",
    )


@pytest.fixture(scope="session")
def london() -> Location:
    return Location(name="London", latitude=51.5074, longitude=-0.1278, timezone="Europe/London")


@pytest.fixture(scope="session")
def melbourne() -> Location:
    return Location(
        name="Melbourne",
        latitude=-37.8136,
        longitude=144.9631,
        elevation=31,
        timezone="Australia/Melbourne",
    )


@pytest.fixture(scope="session")
def arctic() -> Location:
    return Location(
        name="Ellesmere Island",
        latitude=81.74,
        longitude=-64.0,
        timezone="America/Toronto",
    )
