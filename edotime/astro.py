"""Solar position, solar noon and twilight computations.

All formulas are low-order closed-form approximations; event times carry an
error of a few minutes and are not meant as an ephemeris.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from typing import Dict, Optional, Tuple

import erfa

from .location import Location
from .timezone import TimeZoneResolver, ZoneInfoResolver, standard_meridian

__all__ = [
    "SUN_ALTITUDES",
    "DAWN_DEPRESSION_DEGREES",
    "SolarPosition",
    "EventPair",
    "SunEvents",
    "as_utc",
    "normalize_degrees",
    "days_since_j2000",
    "solar_position",
    "solar_longitude",
    "equation_of_time",
    "day_of_year",
    "solar_noon",
    "hour_angle",
    "event_pair",
    "compute_sun_events",
]

LOGGER = logging.getLogger(__name__)

# 7°21'40" below the horizon: the akemutsu/kuremutsu convention of the Kansei calendar.
DAWN_DEPRESSION_DEGREES = 7.0 + 21.0 / 60.0 + 40.0 / 3600.0

SUN_ALTITUDES: Dict[str, float] = {
    "sunrise": 0.0,
    "dawn": -DAWN_DEPRESSION_DEGREES,
}

STATUS_OK = "ok"
STATUS_POLAR_DAY = "polar_day"
STATUS_POLAR_NIGHT = "polar_night"

POLAR_FALLBACK_OFFSET = timedelta(hours=6)

_DEFAULT_RESOLVER = ZoneInfoResolver()


@dataclass(frozen=True)
class SolarPosition:
    """Geocentric solar quantities for a single instant (degrees)."""

    days_since_j2000: float
    mean_longitude: float
    mean_anomaly: float
    equation_of_center: float
    longitude: float
    obliquity: float
    declination: float


@dataclass(frozen=True)
class EventPair:
    """Rising/setting instants for one altitude threshold on one civil day."""

    rising: datetime
    setting: datetime
    status: str

    @property
    def degraded(self) -> bool:
        return self.status != STATUS_OK


@dataclass(frozen=True)
class SunEvents:
    """Sunrise, sunset, dawn and dusk for one civil day at one location."""

    civil_date: date
    civil_noon: datetime
    solar_noon: datetime
    sunrise: datetime
    sunset: datetime
    dawn: datetime
    dusk: datetime
    sun_status: str = STATUS_OK
    twilight_status: str = STATUS_OK

    @property
    def degraded(self) -> bool:
        return self.sun_status != STATUS_OK or self.twilight_status != STATUS_OK

    @property
    def day_length(self) -> timedelta:
        return self.dusk - self.dawn


def as_utc(dt: datetime) -> datetime:
    """Return *dt* converted to UTC; naive datetimes are rejected."""

    if dt.tzinfo is None:
        raise ValueError("datetime must be timezone-aware")
    return dt.astimezone(UTC)


def normalize_degrees(angle: float) -> float:
    """Fold *angle* into ``[0, 360)``."""

    normalized = angle % 360.0
    if normalized < 0.0:
        normalized += 360.0
    if normalized >= 360.0:  # -1e-20 % 360.0 == 360.0
        normalized = 0.0
    return normalized


def days_since_j2000(instant: datetime) -> float:
    """Days elapsed since J2000.0 (2000-01-01T12:00:00Z), UTC-equivalent."""

    dt_utc = as_utc(instant)
    djm0, djm = erfa.cal2jd(dt_utc.year, dt_utc.month, dt_utc.day)
    seconds = (
        dt_utc.hour * 3600
        + dt_utc.minute * 60
        + dt_utc.second
        + dt_utc.microsecond / 1_000_000
    )
    return float(djm0 - erfa.DJ00) + float(djm) + seconds / erfa.DAYSEC


def solar_position(instant: datetime) -> SolarPosition:
    """Compute the solar ecliptic longitude, obliquity and declination at *instant*.

    Parameters
    ----------
    instant:
        Timezone-aware datetime; treated as UTC.

    Returns
    -------
    SolarPosition
        Angles in degrees; ``longitude`` is normalized into ``[0, 360)``.
    """

    days = days_since_j2000(instant)
    centuries = days / erfa.DJC

    mean_longitude = 280.4665 + 36000.7698 * centuries
    mean_anomaly = 357.5291 + 35999.0503 * centuries
    m_rad = math.radians(mean_anomaly)

    center = (
        (1.9146 - 0.004817 * centuries - 0.000014 * centuries * centuries) * math.sin(m_rad)
        + (0.019993 - 0.000101 * centuries) * math.sin(2 * m_rad)
        + 0.000289 * math.sin(3 * m_rad)
    )
    longitude = normalize_degrees(mean_longitude + center)

    obliquity = 23.4393 - 0.0000004 * days
    declination = math.degrees(
        math.asin(math.sin(math.radians(longitude)) * math.sin(math.radians(obliquity)))
    )
    return SolarPosition(
        days_since_j2000=days,
        mean_longitude=mean_longitude,
        mean_anomaly=mean_anomaly,
        equation_of_center=center,
        longitude=longitude,
        obliquity=obliquity,
        declination=declination,
    )


def solar_longitude(instant: datetime) -> float:
    return solar_position(instant).longitude


def equation_of_time(day_of_year: int) -> float:
    """Equation of time in minutes (apparent minus mean solar time)."""

    b = 2.0 * math.pi * (day_of_year - 81) / 365.0
    return 9.87 * math.sin(2 * b) - 7.53 * math.cos(b) - 1.5 * math.sin(b)


def day_of_year(
    year: int,
    month: int,
    day: int,
    zone: str,
    resolver: Optional[TimeZoneResolver] = None,
) -> int:
    """Ordinal day (1-based) counted in civil days between January 1 noon and this noon."""

    resolver = resolver or _DEFAULT_RESOLVER
    noon = as_utc(resolver.noon_instant(year, month, day, zone))
    jan1_noon = as_utc(resolver.noon_instant(year, 1, 1, zone))
    return round((noon - jan1_noon).total_seconds() / 86400.0) + 1


def _dst_hours(clock_noon: datetime) -> float:
    dst = clock_noon.dst()
    if not dst:
        return 0.0
    return dst.total_seconds() / 3600.0


def solar_noon(
    civil_date: date,
    location: Location,
    resolver: Optional[TimeZoneResolver] = None,
) -> datetime:
    """Instant of apparent solar transit on *civil_date* at *location* (UTC).

    Clock noon is shifted by the longitude correction, four minutes per degree
    west of the zone's meridian, minus the equation of time.
    """

    resolver = resolver or _DEFAULT_RESOLVER
    clock_noon = resolver.noon_instant(
        civil_date.year, civil_date.month, civil_date.day, location.tz
    )
    meridian = standard_meridian(location.tz, clock_noon) + 15.0 * _dst_hours(clock_noon)

    longitude_correction = 4.0 * (meridian - location.lon)
    ordinal = day_of_year(
        civil_date.year, civil_date.month, civil_date.day, location.tz, resolver
    )
    eot = equation_of_time(ordinal)
    offset_minutes = longitude_correction - eot

    transit = as_utc(clock_noon) + timedelta(minutes=offset_minutes)
    LOGGER.debug(
        json.dumps(
            {
                "event": "solar_noon",
                "date": civil_date.isoformat(),
                "meridian": meridian,
                "longitude_correction": longitude_correction,
                "eot": eot,
                "offset_minutes": offset_minutes,
                "solar_noon": transit.isoformat(),
            }
        )
    )
    return transit


def hour_angle(
    latitude: float, declination: float, altitude: float
) -> Tuple[Optional[float], str]:
    """Hour angle (degrees) at which the sun reaches *altitude*.

    Returns ``(None, "polar_day")`` when the sun stays above the threshold all
    day and ``(None, "polar_night")`` when it never reaches it.
    """

    lat_rad = math.radians(latitude)
    dec_rad = math.radians(declination)
    alt_rad = math.radians(altitude)

    numerator = math.sin(alt_rad) - math.sin(lat_rad) * math.sin(dec_rad)
    denominator = math.cos(lat_rad) * math.cos(dec_rad)
    if abs(denominator) < 1e-12:
        return None, STATUS_POLAR_NIGHT if numerator > 0 else STATUS_POLAR_DAY

    cos_h = numerator / denominator
    if cos_h > 1.0:
        return None, STATUS_POLAR_NIGHT
    if cos_h < -1.0:
        return None, STATUS_POLAR_DAY
    return math.degrees(math.acos(cos_h)), STATUS_OK


def event_pair(
    civil_date: date,
    location: Location,
    altitude: float,
    resolver: Optional[TimeZoneResolver] = None,
    transit: Optional[datetime] = None,
) -> EventPair:
    """Rising and setting instants around the true solar noon for *altitude*.

    The declination is evaluated once, at civil noon. When the threshold is
    never crossed the pair degrades to solar noon -/+ 6 hours.
    """

    resolver = resolver or _DEFAULT_RESOLVER
    clock_noon = resolver.noon_instant(
        civil_date.year, civil_date.month, civil_date.day, location.tz
    )
    declination = solar_position(clock_noon).declination
    if transit is None:
        transit = solar_noon(civil_date, location, resolver)

    angle, status = hour_angle(location.lat, declination, altitude)
    if angle is None:
        offset = POLAR_FALLBACK_OFFSET
    else:
        offset = timedelta(minutes=angle / 15.0 * 60.0)
    return EventPair(rising=transit - offset, setting=transit + offset, status=status)


def compute_sun_events(
    civil_date: date,
    location: Location,
    resolver: Optional[TimeZoneResolver] = None,
) -> SunEvents:
    """Compute sunrise/sunset (altitude 0°) and dawn/dusk (-7°21'40").

    Parameters
    ----------
    civil_date:
        Calendar day in the location's time zone.
    location:
        Observer coordinates (east-positive longitude) and zone.
    resolver:
        Time-zone resolver; defaults to :class:`ZoneInfoResolver`.

    Returns
    -------
    SunEvents
        UTC instants plus a status per pair (``ok``, ``polar_day`` or ``polar_night``).
    """

    resolver = resolver or _DEFAULT_RESOLVER
    clock_noon = resolver.noon_instant(
        civil_date.year, civil_date.month, civil_date.day, location.tz
    )
    transit = solar_noon(civil_date, location, resolver)

    sun = event_pair(civil_date, location, SUN_ALTITUDES["sunrise"], resolver, transit)
    twilight = event_pair(civil_date, location, SUN_ALTITUDES["dawn"], resolver, transit)

    return SunEvents(
        civil_date=civil_date,
        civil_noon=as_utc(clock_noon),
        solar_noon=transit,
        sunrise=sun.rising,
        sunset=sun.setting,
        dawn=twilight.rising,
        dusk=twilight.setting,
        sun_status=sun.status,
        twilight_status=twilight.status,
    )
