from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from edotime.astro import compute_sun_events
from edotime.engine import EdoTimeAggregator, calculate_edo_time
from edotime.location import DEFAULT_LOCATION, Location
from edotime.lunar import LunarDate, Rokuyo
from edotime.reference import ReferenceRepository
from edotime.time_system import Period
from edotime.timezone import get_zone

JST = get_zone("Asia/Tokyo")
UTC = timezone.utc


@pytest.fixture(scope="module")
def aggregator(repository: ReferenceRepository) -> EdoTimeAggregator:
    return EdoTimeAggregator(repository)


def test_daytime_aggregate(aggregator: EdoTimeAggregator):
    data = aggregator.calculate(datetime(2026, 6, 22, 12, 0, tzinfo=JST), DEFAULT_LOCATION)

    assert data.instant == datetime(2026, 6, 22, 3, 0, tzinfo=UTC)
    assert data.instant.utcoffset() == timedelta(0)
    assert data.civil_date == date(2026, 6, 22)
    assert data.solar_term.name == "夏至"
    assert data.micro_season.name == "乃東枯"
    assert data.micro_season.term is data.solar_term

    assert data.temporal_time.period is Period.day
    assert data.temporal_time.koku == 4
    assert data.juni_shin == "午"
    assert data.previous_dusk is None
    assert data.ake_mutsu == data.sun_events.dawn
    assert data.kure_mutsu == data.sun_events.dusk

    assert data.lunar_date == LunarDate(2026, 5, 8)
    assert data.rokuyo is Rokuyo.shakko
    assert data.lunar_error is None

    assert data.moon_age == pytest.approx(7.0042, abs=1e-3)
    assert data.moon_age_error is None


def test_pre_dawn_belongs_to_previous_night(aggregator: EdoTimeAggregator):
    data = aggregator.calculate(datetime(2026, 6, 22, 2, 0, tzinfo=JST), DEFAULT_LOCATION)

    previous = compute_sun_events(date(2026, 6, 21), DEFAULT_LOCATION)
    assert data.civil_date == date(2026, 6, 22)
    assert data.previous_dusk == previous.dusk
    assert data.temporal_time.period is Period.night
    assert data.temporal_time.koku == 5
    assert data.juni_shin == "丑"
    assert data.temporal_time.start >= previous.dusk
    assert data.temporal_time.end <= data.sun_events.dawn


def test_evening_is_first_night_koku(aggregator: EdoTimeAggregator):
    data = aggregator.calculate(datetime(2026, 6, 22, 20, 30, tzinfo=JST), DEFAULT_LOCATION)
    assert data.temporal_time.period is Period.night
    assert data.temporal_time.koku == 1
    assert data.temporal_time.kanji == "六"
    assert data.temporal_time.start == data.sun_events.dusk


def test_lunar_out_of_range_keeps_other_fields(aggregator: EdoTimeAggregator):
    data = aggregator.calculate(datetime(2029, 3, 1, 12, 0, tzinfo=JST), DEFAULT_LOCATION)
    assert data.lunar_date is None
    assert data.rokuyo is None
    assert data.lunar_error is not None
    assert data.lunar_error.code == "date_out_of_range"
    assert "2028-12-31" in data.lunar_error.reason
    assert data.moon_age is not None
    assert data.solar_term.name == "雨水"


def test_moon_out_of_range(aggregator: EdoTimeAggregator):
    data = aggregator.calculate(datetime(2050, 6, 1, 12, 0, tzinfo=JST), DEFAULT_LOCATION)
    assert data.moon_age is None
    assert data.moon_age_error is not None
    assert data.moon_age_error.code == "moon_data_out_of_range"
    assert data.lunar_error is not None
    assert data.temporal_time.koku in range(1, 7)


def test_lunar_gap_is_not_found(small_repository: ReferenceRepository):
    data = calculate_edo_time(
        datetime(2026, 1, 3, 12, 0, tzinfo=JST), DEFAULT_LOCATION, small_repository
    )
    assert data.lunar_error is not None
    assert data.lunar_error.code == "date_not_found"
    assert data.moon_age_error is not None
    assert data.moon_age_error.code == "moon_data_out_of_range"


def test_civil_date_follows_location_zone(aggregator: EdoTimeAggregator):
    # 2026-06-21T20:00Z is already June 22 in Tokyo but still June 21 in New York.
    instant = datetime(2026, 6, 21, 20, 0, tzinfo=UTC)
    new_york = Location(lat=40.7128, lon=-74.0060, tz="America/New_York")
    assert aggregator.calculate(instant, DEFAULT_LOCATION).civil_date == date(2026, 6, 22)
    assert aggregator.calculate(instant, new_york).civil_date == date(2026, 6, 21)


def test_polar_day_is_degraded_not_failed(aggregator: EdoTimeAggregator):
    svalbard = Location(lat=78.2232, lon=15.6469, tz="Arctic/Longyearbyen")
    data = aggregator.calculate(datetime(2026, 6, 21, 10, 0, tzinfo=UTC), svalbard)
    assert data.sun_events.degraded
    assert data.sun_events.dusk - data.sun_events.dawn == timedelta(hours=12)
    assert data.temporal_time.koku in range(1, 7)


def test_naive_instant_is_rejected(aggregator: EdoTimeAggregator):
    with pytest.raises(ValueError):
        aggregator.calculate(datetime(2026, 6, 22, 12, 0), DEFAULT_LOCATION)


def test_default_instant_is_now(aggregator: EdoTimeAggregator):
    before = datetime.now(UTC)
    data = aggregator.calculate()
    assert before <= data.instant <= datetime.now(UTC)
    assert data.location == DEFAULT_LOCATION


def test_functional_entry_point_matches(repository: ReferenceRepository):
    instant = datetime(2027, 11, 3, 6, 15, tzinfo=JST)
    assert calculate_edo_time(instant, DEFAULT_LOCATION, repository) == EdoTimeAggregator(
        repository
    ).calculate(instant, DEFAULT_LOCATION)


def test_location_validation():
    with pytest.raises(ValueError):
        Location(lat=91.0, lon=0.0)
    with pytest.raises(ValueError):
        Location(lat=0.0, lon=-181.0)


@pytest.mark.parametrize("month, day_longer", [(6, True), (12, False)])
def test_koku_lengths_follow_the_season(
    aggregator: EdoTimeAggregator, month: int, day_longer: bool
):
    day = aggregator.calculate(datetime(2026, month, 21, 12, 0, tzinfo=JST), DEFAULT_LOCATION)
    night = aggregator.calculate(datetime(2026, month, 21, 23, 30, tzinfo=JST), DEFAULT_LOCATION)
    assert day.temporal_time.period is Period.day
    assert night.temporal_time.period is Period.night
    assert (day.temporal_time.duration > night.temporal_time.duration) is day_longer


def test_late_kuremutsu_keeps_previous_day_koku(aggregator: EdoTimeAggregator):
    stavanger = Location(lat=58.97, lon=5.73, tz="Europe/Oslo")
    oslo = get_zone("Europe/Oslo")
    data = aggregator.calculate(datetime(2026, 6, 22, 0, 30, tzinfo=oslo), stavanger)

    assert data.civil_date == date(2026, 6, 22)
    assert data.previous_dusk is not None
    assert data.instant < data.previous_dusk < data.sun_events.dawn
    assert data.temporal_time.period is Period.day
    assert data.temporal_time.koku == 6
    assert data.temporal_time.start <= data.instant < data.temporal_time.end
    assert data.temporal_time.end == data.previous_dusk


def test_stavanger_midsummer_night_is_covered(aggregator: EdoTimeAggregator):
    stavanger = Location(lat=58.97, lon=5.73, tz="Europe/Oslo")
    now = datetime(2026, 6, 21, 20, 0, tzinfo=UTC)
    while now < datetime(2026, 6, 22, 4, 0, tzinfo=UTC):
        koku = aggregator.calculate(now, stavanger).temporal_time
        assert koku.start <= now < koku.end
        now += timedelta(minutes=10)
