from zoneinfo import ZoneInfo

import pytest

from coverage_intervals.time_utils import _resolve_zone


WARSAW = ZoneInfo("Europe/Warsaw")


@pytest.fixture
def warsaw():
    return WARSAW


@pytest.fixture
def fresh_zone_cache():
    _resolve_zone.cache_clear()
    yield
    _resolve_zone.cache_clear()
