"""Assembly of all Edo-time observations for one instant and location."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from typing import Optional

from .astro import SunEvents, as_utc, compute_sun_events, solar_longitude
from .errors import DateOutOfRangeError
from .location import DEFAULT_LOCATION, Location
from .lunar import LunarDate, Rokuyo
from .moon import MoonAgeResult
from .reference import ReferenceRepository
from .solar_terms import MicroSeason, SolarTerm, micro_season_for, solar_term_for
from .time_system import TemporalTime, temporal_time
from .timezone import TimeZoneResolver, ZoneInfoResolver

__all__ = [
    "FieldError",
    "EdoTimeData",
    "EdoTimeAggregator",
    "calculate_edo_time",
    "DATE_OUT_OF_RANGE",
    "DATE_NOT_FOUND",
    "MOON_DATA_OUT_OF_RANGE",
]

LOGGER = logging.getLogger(__name__)

DATE_OUT_OF_RANGE = "date_out_of_range"
DATE_NOT_FOUND = "date_not_found"
MOON_DATA_OUT_OF_RANGE = "moon_data_out_of_range"


@dataclass(frozen=True)
class FieldError:
    """Why a table-backed field of :class:`EdoTimeData` is unavailable."""

    code: str
    reason: str


@dataclass(frozen=True)
class EdoTimeData:
    instant: datetime
    location: Location
    civil_date: date
    solar_longitude: float
    solar_term: SolarTerm
    micro_season: MicroSeason
    sun_events: SunEvents
    temporal_time: TemporalTime
    moon: MoonAgeResult
    previous_dusk: Optional[datetime] = None
    lunar_date: Optional[LunarDate] = None
    rokuyo: Optional[Rokuyo] = None
    lunar_error: Optional[FieldError] = None

    @property
    def ake_mutsu(self) -> datetime:
        return self.sun_events.dawn

    @property
    def kure_mutsu(self) -> datetime:
        return self.sun_events.dusk

    @property
    def juni_shin(self) -> str:
        return self.temporal_time.juni_shin

    @property
    def moon_age(self) -> Optional[float]:
        return self.moon.moon_age

    @property
    def moon_age_error(self) -> Optional[FieldError]:
        if self.moon.error is None:
            return None
        return FieldError(code=MOON_DATA_OUT_OF_RANGE, reason=self.moon.error)


class EdoTimeAggregator:
    """Computes :class:`EdoTimeData` against an injected reference repository."""

    def __init__(
        self,
        repository: ReferenceRepository,
        resolver: Optional[TimeZoneResolver] = None,
    ) -> None:
        self.repository = repository
        self.resolver = resolver or ZoneInfoResolver()

    def calculate(
        self,
        instant: Optional[datetime] = None,
        location: Location = DEFAULT_LOCATION,
    ) -> EdoTimeData:
        """Compute every observation for *instant* (default: now) at *location*.

        Astronomical fields are always present. The lunar date/rokuyo pair and
        the moon age come from the reference tables and fail independently,
        carrying a reason instead of raising.
        """

        now = as_utc(instant) if instant is not None else datetime.now(UTC)
        civil_date = self.resolver.calendar_date(now, location.tz)

        longitude = solar_longitude(now)
        events = compute_sun_events(civil_date, location, self.resolver)

        previous_dusk: Optional[datetime] = None
        previous_dawn: Optional[datetime] = None
        if now < events.dawn:
            previous_day = civil_date - timedelta(days=1)
            previous = compute_sun_events(previous_day, location, self.resolver)
            previous_dawn, previous_dusk = previous.dawn, previous.dusk
        koku = temporal_time(events.dawn, events.dusk, now, previous_dusk, previous_dawn)

        lookup = self.repository.lunar_calendar.resolve(civil_date)
        lunar_error: Optional[FieldError] = None
        if lookup.error is not None:
            code = (
                DATE_OUT_OF_RANGE
                if isinstance(lookup.error, DateOutOfRangeError)
                else DATE_NOT_FOUND
            )
            lunar_error = FieldError(code=code, reason=str(lookup.error))

        moon = self.repository.moon_ages.calculate(now)

        LOGGER.debug(
            json.dumps(
                {
                    "event": "edo_time",
                    "instant": now.isoformat(),
                    "location": {"lat": location.lat, "lon": location.lon, "tz": location.tz},
                    "civil_date": civil_date.isoformat(),
                    "solar_longitude": longitude,
                    "dawn": events.dawn.isoformat(),
                    "dusk": events.dusk.isoformat(),
                    "degraded": events.degraded,
                    "period": koku.period.value,
                    "koku": koku.koku,
                    "lunar_error": lunar_error.code if lunar_error else None,
                    "moon_error": moon.error is not None,
                }
            )
        )

        return EdoTimeData(
            instant=now,
            location=location,
            civil_date=civil_date,
            solar_longitude=longitude,
            solar_term=solar_term_for(longitude),
            micro_season=micro_season_for(longitude),
            sun_events=events,
            temporal_time=koku,
            moon=moon,
            previous_dusk=previous_dusk,
            lunar_date=lookup.entry.lunar if lookup.entry else None,
            rokuyo=lookup.entry.rokuyo if lookup.entry else None,
            lunar_error=lunar_error,
        )


def calculate_edo_time(
    instant: Optional[datetime],
    location: Location,
    repository: ReferenceRepository,
    resolver: Optional[TimeZoneResolver] = None,
) -> EdoTimeData:
    return EdoTimeAggregator(repository, resolver).calculate(instant, location)
