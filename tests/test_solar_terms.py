from __future__ import annotations

from datetime import datetime, timezone

import pytest

from edotime.astro import solar_longitude
from edotime.solar_terms import (
    MICRO_SEASONS,
    SOLAR_TERMS,
    micro_season_for,
    solar_term_for,
)


def test_table_sizes():
    assert len(SOLAR_TERMS) == 24
    assert len(MICRO_SEASONS) == 72
    assert len({term.name for term in SOLAR_TERMS}) == 24
    assert len({season.name for season in MICRO_SEASONS}) == 72


@pytest.mark.parametrize(
    "longitude, name",
    [
        (0.0, "春分"),
        (14.999, "春分"),
        (15.0, "清明"),
        (90.0, "夏至"),
        (180.0, "秋分"),
        (270.0, "冬至"),
        (315.0, "立春"),
        (359.9, "啓蟄"),
        (360.0, "春分"),
        (-10.0, "啓蟄"),
    ],
)
def test_solar_term_for(longitude: float, name: str):
    assert solar_term_for(longitude).name == name


@pytest.mark.parametrize(
    "longitude, index, name",
    [
        (315.0, 0, "東風解凍"),
        (320.0, 1, "黄鶯睍睆"),
        (359.9, 8, "菜虫化蝶"),
        (0.0, 9, "雀始巣"),
        (90.5, 27, "乃東枯"),
        (314.99, 71, "鶏始乳"),
    ],
)
def test_micro_season_for(longitude: float, index: int, name: str):
    season = micro_season_for(longitude)
    assert season.index == index
    assert season.name == name


def test_micro_season_table_nests_in_terms():
    for season in MICRO_SEASONS:
        assert season.term is solar_term_for(season.longitude)
        assert season.term.contains(season.longitude)


def test_classification_is_consistent_around_the_circle():
    for step in range(0, 7200):
        longitude = step * 0.05
        term = solar_term_for(longitude)
        season = micro_season_for(longitude)
        assert term.contains(longitude)
        assert season.contains(longitude)
        assert season.term is term


def test_term_contains_wraps_at_zero():
    keichitsu = SOLAR_TERMS[23]
    assert keichitsu.contains(350.0)
    assert not keichitsu.contains(0.0)
    assert keichitsu.end_longitude == 0.0


def test_solstice_day_is_geshi():
    longitude = solar_longitude(datetime(2026, 6, 22, 3, 0, tzinfo=timezone.utc))
    assert solar_term_for(longitude).name == "夏至"
    assert micro_season_for(longitude).name == "乃東枯"
