"""Civil calendar and time-zone helpers used by the astronomical code."""

from __future__ import annotations

import json
import logging
from datetime import date, datetime, timedelta, timezone
from functools import lru_cache
from typing import Dict, Optional, Protocol
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

__all__ = [
    "TimeZoneResolver",
    "ZoneInfoResolver",
    "STANDARD_MERIDIANS",
    "FALLBACK_STANDARD_MERIDIAN",
    "standard_meridian",
    "get_zone",
]

LOGGER = logging.getLogger(__name__)

FALLBACK_STANDARD_MERIDIAN = 135.0  # JST

# Standard (non-DST) meridians in degrees east, keyed by IANA zone name.
STANDARD_MERIDIANS: Dict[str, float] = {
    "Asia/Tokyo": 135.0,
    "Asia/Seoul": 135.0,
    "Asia/Shanghai": 120.0,
    "Asia/Taipei": 120.0,
    "Asia/Hong_Kong": 120.0,
    "Asia/Singapore": 120.0,
    "Asia/Kolkata": 82.5,
    "Australia/Sydney": 150.0,
    "Pacific/Auckland": 180.0,
    "Pacific/Honolulu": -150.0,
    "Europe/London": 0.0,
    "Europe/Paris": 15.0,
    "Europe/Berlin": 15.0,
    "Europe/Oslo": 15.0,
    "Arctic/Longyearbyen": 15.0,
    "America/New_York": -75.0,
    "America/Chicago": -90.0,
    "America/Denver": -105.0,
    "America/Los_Angeles": -120.0,
    "UTC": 0.0,
    "Etc/UTC": 0.0,
}


class TimeZoneResolver(Protocol):
    """Conversion between instants and civil calendar days in a zone."""

    def calendar_date(self, instant: datetime, zone: str) -> date:
        ...

    def noon_instant(self, year: int, month: int, day: int, zone: str) -> datetime:
        ...


@lru_cache(maxsize=64)
def get_zone(name: str) -> ZoneInfo:
    """Return a cached :class:`ZoneInfo`; raises ``ZoneInfoNotFoundError`` for unknown names."""

    return ZoneInfo(name)


class ZoneInfoResolver:
    """:class:`TimeZoneResolver` backed by the system (or ``tzdata``) zone database."""

    def calendar_date(self, instant: datetime, zone: str) -> date:
        if instant.tzinfo is None:
            raise ValueError("datetime must be timezone-aware")
        return instant.astimezone(get_zone(zone)).date()

    def noon_instant(self, year: int, month: int, day: int, zone: str) -> datetime:
        return datetime(year, month, day, 12, 0, 0, tzinfo=get_zone(zone))


def standard_meridian(zone: str, at: Optional[datetime] = None) -> float:
    """Standard meridian for *zone* in degrees east.

    Unmapped zones take the meridian of their standard UTC offset at *at*
    (default now). Only a zone the database cannot resolve falls back to the
    JST meridian.
    """

    try:
        return STANDARD_MERIDIANS[zone]
    except KeyError:
        pass

    try:
        tz = get_zone(zone)
    except (ZoneInfoNotFoundError, ValueError):
        LOGGER.warning(
            json.dumps(
                {
                    "event": "standard_meridian_fallback",
                    "zone": zone,
                    "meridian": FALLBACK_STANDARD_MERIDIAN,
                }
            )
        )
        return FALLBACK_STANDARD_MERIDIAN

    local = (at or datetime.now(timezone.utc)).astimezone(tz)
    standard_offset = local.utcoffset() - (local.dst() or timedelta(0))
    return standard_offset.total_seconds() / 3600.0 * 15.0
