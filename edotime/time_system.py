"""Unequal-hour (futeijiho) time keeping.

Dawn to dusk is split into six day koku, dusk to the next dawn into six night
koku. Each period is divided evenly, so koku lengths change with the season.
"""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .astro import as_utc

__all__ = [
    "Period",
    "TemporalTime",
    "KOKU_PER_PERIOD",
    "koku_boundaries",
    "koku_intervals",
    "temporal_time",
    "koku_to_kanji",
    "juni_shin_for_koku",
]

KOKU_PER_PERIOD = 6
SOLAR_DAY = timedelta(hours=24)

# Koku are counted down from "six" at dawn and dusk: 六 五 四 九 八 七.
_KOKU_KANJI: Dict[int, str] = {1: "六", 2: "五", 3: "四", 4: "九", 5: "八", 6: "七"}


class Period(str, Enum):
    """Half of the temporal day."""

    day = "day"
    night = "night"


_JUNI_SHIN: Dict[Period, Tuple[str, ...]] = {
    Period.day: ("卯", "辰", "巳", "午", "未", "申"),
    Period.night: ("酉", "戌", "亥", "子", "丑", "寅"),
}


@dataclass(frozen=True)
class TemporalTime:
    """The koku containing a given instant."""

    period: Period
    koku: int
    start: datetime
    end: datetime

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    @property
    def kanji(self) -> str:
        return koku_to_kanji(self.koku)

    @property
    def juni_shin(self) -> str:
        return juni_shin_for_koku(self.period, self.koku)


def koku_boundaries(start: datetime, end: datetime) -> List[datetime]:
    """Seven boundaries splitting ``[start, end)`` into six equal koku.

    The first boundary is *start* and the last is exactly *end*, so the six
    intervals tile the period without gaps or overlaps.
    """

    total = end - start
    return [start + total * i / KOKU_PER_PERIOD for i in range(KOKU_PER_PERIOD + 1)]


def koku_intervals(start: datetime, end: datetime) -> List[Tuple[datetime, datetime]]:
    bounds = koku_boundaries(start, end)
    return list(zip(bounds[:-1], bounds[1:]))


def _classify(period: Period, start: datetime, end: datetime, now: datetime) -> TemporalTime:
    bounds = koku_boundaries(start, end)
    koku = bisect_right(bounds[:KOKU_PER_PERIOD], now)
    koku = min(max(koku, 1), KOKU_PER_PERIOD)
    return TemporalTime(period=period, koku=koku, start=bounds[koku - 1], end=bounds[koku])


def temporal_time(
    dawn: datetime,
    dusk: datetime,
    now: datetime,
    previous_dusk: Optional[datetime] = None,
    previous_dawn: Optional[datetime] = None,
) -> TemporalTime:
    """Classify *now* into a day or night koku.

    Parameters
    ----------
    dawn, dusk:
        Akemutsu and kuremutsu of the civil day containing *now*.
    now:
        Instant to classify.
    previous_dusk:
        Kuremutsu of the previous civil day. Used when *now* precedes *dawn*
        so the pre-dawn hours fall into the previous night's partition.
    previous_dawn:
        Akemutsu of the previous civil day. Only consulted when *now* is still
        before *previous_dusk*, which happens at high latitude when kuremutsu
        falls after local midnight. Estimated from today's day length if omitted.

    Returns
    -------
    TemporalTime
        Period, koku number (1-6) and the koku's interval, in UTC.
    """

    dawn = as_utc(dawn)
    dusk = as_utc(dusk)
    now = as_utc(now)

    if dawn <= now < dusk:
        return _classify(Period.day, dawn, dusk, now)

    night_length = SOLAR_DAY - (dusk - dawn)
    if now < dawn:
        night_start = dawn - night_length
        if previous_dusk is not None and as_utc(previous_dusk) < dawn:
            night_start = as_utc(previous_dusk)
            if now < night_start:
                # Still inside the previous civil day's daytime.
                if previous_dawn is not None:
                    day_start = as_utc(previous_dawn)
                else:
                    day_start = night_start - (dusk - dawn)
                return _classify(Period.day, day_start, night_start, now)
        return _classify(Period.night, night_start, dawn, now)

    return _classify(Period.night, dusk, dusk + night_length, now)


def koku_to_kanji(koku: int) -> str:
    try:
        return _KOKU_KANJI[koku]
    except KeyError as exc:
        raise ValueError(f"koku must be between 1 and 6: {koku}") from exc


def juni_shin_for_koku(period: Period, koku: int) -> str:
    """Zodiac-branch name of a koku: day 1 is 卯 (u), night 1 is 酉 (tori)."""

    if not 1 <= koku <= KOKU_PER_PERIOD:
        raise ValueError(f"koku must be between 1 and 6: {koku}")
    return _JUNI_SHIN[Period(period)][koku - 1]
