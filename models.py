"""Pydantic models for API requests and responses."""

from __future__ import annotations

from datetime import date, datetime, tzinfo
from typing import List, Optional

from pydantic import BaseModel, Field

from edotime.astro import SunEvents
from edotime.engine import EdoTimeData
from edotime.engine import FieldError as EngineFieldError
from edotime.location import DEFAULT_LOCATION
from edotime.time_system import Period
from edotime.timezone import get_zone


class EdoTimeQueryParams(BaseModel):
    """Validated query parameters for the ``/edo-time`` endpoint."""

    lat: float = Field(
        DEFAULT_LOCATION.lat, ge=-90.0, le=90.0, description="Latitude in degrees"
    )
    lon: float = Field(
        DEFAULT_LOCATION.lon,
        ge=-180.0,
        le=180.0,
        description="Longitude in degrees, east positive",
    )
    tz: str = Field(DEFAULT_LOCATION.tz, min_length=1, description="IANA time zone name")
    at: Optional[datetime] = Field(
        None,
        description="Instant to evaluate (ISO-8601); naive values are read in tz, default now",
    )


class FieldError(BaseModel):
    code: str
    reason: str


class SunEventsModel(BaseModel):
    """Solar events of one civil day, rendered in the location's zone."""

    civil_date: date
    solar_noon: str
    sunrise: str
    sunset: str
    dawn: str = Field(..., description="Akemutsu, sun 7°21'40\" below the horizon")
    dusk: str = Field(..., description="Kuremutsu, sun 7°21'40\" below the horizon")
    sun_status: str
    twilight_status: str
    degraded: bool


class TemporalTimeModel(BaseModel):
    period: Period
    koku: int = Field(..., ge=1, le=6)
    kanji: str
    juni_shin: str
    start: str
    end: str
    duration_minutes: float


class SolarTermModel(BaseModel):
    index: int
    name: str
    reading: str
    english: str
    longitude: float


class MicroSeasonModel(BaseModel):
    index: int
    name: str
    reading: str
    longitude: float


class LunarModel(BaseModel):
    year: int
    month: int
    day: int
    is_leap_month: bool
    month_name: Optional[str] = None
    month_reading: Optional[str] = None


class MoonModel(BaseModel):
    age: Optional[float] = Field(None, description="Days since the latest new moon")
    phase: Optional[str] = None
    phase_reading: Optional[str] = None
    error: Optional[FieldError] = None


class EdoTimeResponse(BaseModel):
    """Successful Edo-time response payload."""

    ok: bool = True
    instant: str = Field(..., description="Evaluated instant in the location's zone")
    latitude: float
    longitude: float
    tz: str
    civil_date: date
    solar_longitude: float = Field(..., ge=0.0, lt=360.0)
    solar_term: SolarTermModel
    micro_season: MicroSeasonModel
    sun: SunEventsModel
    temporal_time: TemporalTimeModel
    lunar_date: Optional[LunarModel] = None
    rokuyo: Optional[str] = None
    lunar_error: Optional[FieldError] = None
    moon: MoonModel


class HealthResponse(BaseModel):
    """Health-check response."""

    ok: bool = True
    reference_loaded: bool
    lunar_range: List[date] = Field(default_factory=list)
    new_moon_range: List[str] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    """Error payload."""

    ok: bool = False
    code: str
    error: str


def format_local(dt: datetime, zone: tzinfo) -> str:
    return dt.astimezone(zone).isoformat()


def _field_error(error: Optional[EngineFieldError]) -> Optional[FieldError]:
    if error is None:
        return None
    return FieldError(code=error.code, reason=error.reason)


def _sun_events(events: SunEvents, zone: tzinfo) -> SunEventsModel:
    return SunEventsModel(
        civil_date=events.civil_date,
        solar_noon=format_local(events.solar_noon, zone),
        sunrise=format_local(events.sunrise, zone),
        sunset=format_local(events.sunset, zone),
        dawn=format_local(events.dawn, zone),
        dusk=format_local(events.dusk, zone),
        sun_status=events.sun_status,
        twilight_status=events.twilight_status,
        degraded=events.degraded,
    )


def build_edo_time_response(data: EdoTimeData) -> EdoTimeResponse:
    """Render an :class:`EdoTimeData` aggregate with instants in the location's zone."""

    zone = get_zone(data.location.tz)
    koku = data.temporal_time

    lunar: Optional[LunarModel] = None
    if data.lunar_date is not None:
        month_name = data.lunar_date.month_name
        lunar = LunarModel(
            year=data.lunar_date.year,
            month=data.lunar_date.month,
            day=data.lunar_date.day,
            is_leap_month=data.lunar_date.is_leap_month,
            month_name=month_name[0] if month_name else None,
            month_reading=month_name[1] if month_name else None,
        )

    phase = data.moon.phase
    return EdoTimeResponse(
        instant=format_local(data.instant, zone),
        latitude=data.location.lat,
        longitude=data.location.lon,
        tz=data.location.tz,
        civil_date=data.civil_date,
        solar_longitude=data.solar_longitude,
        solar_term=SolarTermModel(
            index=data.solar_term.index,
            name=data.solar_term.name,
            reading=data.solar_term.reading,
            english=data.solar_term.english,
            longitude=data.solar_term.longitude,
        ),
        micro_season=MicroSeasonModel(
            index=data.micro_season.index,
            name=data.micro_season.name,
            reading=data.micro_season.reading,
            longitude=data.micro_season.longitude,
        ),
        sun=_sun_events(data.sun_events, zone),
        temporal_time=TemporalTimeModel(
            period=koku.period,
            koku=koku.koku,
            kanji=koku.kanji,
            juni_shin=koku.juni_shin,
            start=format_local(koku.start, zone),
            end=format_local(koku.end, zone),
            duration_minutes=round(koku.duration.total_seconds() / 60.0, 3),
        ),
        lunar_date=lunar,
        rokuyo=data.rokuyo.value if data.rokuyo is not None else None,
        lunar_error=_field_error(data.lunar_error),
        moon=MoonModel(
            age=round(data.moon_age, 4) if data.moon_age is not None else None,
            phase=phase.name if phase else None,
            phase_reading=phase.reading if phase else None,
            error=_field_error(data.moon_age_error),
        ),
    )
