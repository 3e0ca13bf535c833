"""Lunisolar (kyureki) date and rokuyo lookup from a pre-computed table.

Lunar dates and rokuyo are civil facts taken from a published calendar; there
is no formula fallback, so a missing date is reported as an error.
"""

from __future__ import annotations

import csv
import unicodedata
from dataclasses import dataclass
from datetime import date
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Optional, Tuple, Union

from .errors import DateOutOfRangeError, NotFoundError, ReferenceDataError

__all__ = [
    "Rokuyo",
    "LunarDate",
    "LunarCalendarEntry",
    "LunarLookupResult",
    "LunarCalendarLookup",
    "WAFU_MONTH_NAMES",
    "normalize_rokuyo",
    "parse_lunar_calendar_csv",
    "wafu_month_name",
]

DateKey = Union[date, str]


class Rokuyo(str, Enum):
    """Six-day folk-calendar labels."""

    sensho = "先勝"
    tomobiki = "友引"
    senbu = "先負"
    butsumetsu = "仏滅"
    taian = "大安"
    shakko = "赤口"


# Traditional month names (wafu getsumei) with their kana readings.
WAFU_MONTH_NAMES: Dict[int, Tuple[str, str]] = {
    1: ("睦月", "むつき"),
    2: ("如月", "きさらぎ"),
    3: ("弥生", "やよい"),
    4: ("卯月", "うづき"),
    5: ("皐月", "さつき"),
    6: ("水無月", "みなづき"),
    7: ("文月", "ふみづき"),
    8: ("葉月", "はづき"),
    9: ("長月", "ながつき"),
    10: ("神無月", "かんなづき"),
    11: ("霜月", "しもつき"),
    12: ("師走", "しわす"),
}


def wafu_month_name(month: int) -> Optional[Tuple[str, str]]:
    return WAFU_MONTH_NAMES.get(month)


@dataclass(frozen=True)
class LunarDate:
    year: int
    month: int
    day: int
    is_leap_month: bool = False

    @property
    def month_name(self) -> Optional[Tuple[str, str]]:
        return wafu_month_name(self.month)


@dataclass(frozen=True)
class LunarCalendarEntry:
    date: date
    lunar: LunarDate
    rokuyo: Rokuyo


@dataclass(frozen=True)
class LunarLookupResult:
    """Outcome of a lookup that does not raise: exactly one of the fields is set."""

    entry: Optional[LunarCalendarEntry] = None
    error: Optional[NotFoundError] = None

    @property
    def ok(self) -> bool:
        return self.entry is not None


def normalize_rokuyo(label: str) -> Rokuyo:
    """Map a rokuyo label, including Kangxi-radical compatibility forms, to :class:`Rokuyo`."""

    folded = unicodedata.normalize("NFKC", label.strip())
    try:
        return Rokuyo(folded)
    except ValueError as exc:
        raise ReferenceDataError(f"Unknown rokuyo label: {label!r}") from exc


def _parse_flag(token: str) -> bool:
    return token.strip().upper() in {"TRUE", "1"}


def _parse_int(value: str, field: str, line_no: int) -> int:
    try:
        return int(value.strip())
    except ValueError as exc:
        raise ReferenceDataError(
            f"Invalid {field} on line {line_no}: {value!r}"
        ) from exc


def parse_lunar_calendar_csv(lines: Iterable[str]) -> Iterator[LunarCalendarEntry]:
    """Parse rows ``date,_,year,month,day,leap,_,rokuyo``; the first row is a header."""

    reader = csv.reader(lines)
    for line_no, row in enumerate(reader, start=1):
        if line_no == 1 or not row or not any(cell.strip() for cell in row):
            continue
        if len(row) < 8:
            raise ReferenceDataError(f"Expected 8 columns on line {line_no}, got {len(row)}")

        day_str, _, year, month, day, leap, _, rokuyo = row[:8]
        if not day_str.strip() or not rokuyo.strip():
            continue
        try:
            civil = date.fromisoformat(day_str.strip())
        except ValueError as exc:
            raise ReferenceDataError(f"Invalid date on line {line_no}: {day_str!r}") from exc

        yield LunarCalendarEntry(
            date=civil,
            lunar=LunarDate(
                year=_parse_int(year, "lunar year", line_no),
                month=_parse_int(month, "lunar month", line_no),
                day=_parse_int(day, "lunar day", line_no),
                is_leap_month=_parse_flag(leap),
            ),
            rokuyo=normalize_rokuyo(rokuyo),
        )


def _date_key(day: DateKey) -> str:
    if isinstance(day, date):
        return day.isoformat()
    return date.fromisoformat(day.strip()).isoformat()


class LunarCalendarLookup:
    """Immutable ``"YYYY-MM-DD"`` keyed lunar calendar table."""

    def __init__(self, entries: Iterable[LunarCalendarEntry]) -> None:
        table: Dict[str, LunarCalendarEntry] = {}
        for entry in entries:
            table[entry.date.isoformat()] = entry
        if not table:
            raise ReferenceDataError("Lunar calendar dataset contains no rows")
        self._entries = MappingProxyType(table)
        keys = sorted(table)
        self.first_date = date.fromisoformat(keys[0])
        self.last_date = date.fromisoformat(keys[-1])

    @classmethod
    def from_csv(cls, path: Union[str, Path]) -> "LunarCalendarLookup":
        csv_path = Path(path)
        try:
            with csv_path.open(newline="", encoding="utf-8-sig") as handle:
                return cls(parse_lunar_calendar_csv(handle))
        except OSError as exc:
            raise ReferenceDataError(f"Failed to read lunar calendar dataset {csv_path}: {exc}") from exc

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, day: object) -> bool:
        if not isinstance(day, (date, str)):
            return False
        try:
            return _date_key(day) in self._entries
        except ValueError:
            return False

    @property
    def date_range(self) -> Tuple[date, date]:
        return self.first_date, self.last_date

    def dates(self) -> List[date]:
        return [date.fromisoformat(key) for key in sorted(self._entries)]

    def lookup(self, day: DateKey) -> LunarCalendarEntry:
        """Return the row for civil *day*.

        Raises
        ------
        DateOutOfRangeError
            If *day* lies before or after the table's span.
        NotFoundError
            If *day* is inside the span but has no row.
        """

        key = _date_key(day)
        try:
            return self._entries[key]
        except KeyError:
            pass

        if key < self.first_date.isoformat():
            raise DateOutOfRangeError(
                f"Lunar calendar data starts at {self.first_date.isoformat()}; {key} is before the covered range",
                reason="before_range",
            )
        if key > self.last_date.isoformat():
            raise DateOutOfRangeError(
                f"Lunar calendar data ends at {self.last_date.isoformat()}; {key} is after the covered range",
                reason="after_range",
            )
        raise NotFoundError(f"Lunar calendar data has no row for {key}", reason="gap")

    def resolve(self, day: DateKey) -> LunarLookupResult:
        try:
            return LunarLookupResult(entry=self.lookup(day))
        except NotFoundError as exc:
            return LunarLookupResult(error=exc)

    def lunar_date(self, day: DateKey) -> LunarDate:
        return self.lookup(day).lunar

    def rokuyo(self, day: DateKey) -> Rokuyo:
        return self.lookup(day).rokuyo
