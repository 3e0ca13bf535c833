"""Locating and loading the reference tables (lunar calendar, new moons)."""

from __future__ import annotations

import csv
import json
import logging
import os
import re
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta, timezone
from pathlib import Path
from typing import List, Optional, Tuple, Union

from .errors import ReferenceDataError
from .lunar import LunarCalendarLookup
from .moon import MoonAgeCalculator

__all__ = [
    "DEFAULT_DATA_DIR",
    "LUNAR_CALENDAR_FILENAME",
    "NEW_MOON_FILENAME",
    "ReferenceRepository",
    "resolve_reference_paths",
    "load_reference_repository",
    "parse_moonface_csv",
    "year_from_moonface_filename",
]

LOGGER = logging.getLogger(__name__)

DEFAULT_DATA_DIR = Path(__file__).resolve().parent / "data"
LUNAR_CALENDAR_FILENAME = "lunar_2026_2028.csv"
NEW_MOON_FILENAME = "new_moon_dates.json"

NEW_MOON_MARKER = "新月"
_MOONFACE_YEAR = re.compile(r"moonface(\d{4})", re.IGNORECASE)

PathLike = Union[str, Path]


@dataclass(frozen=True)
class ReferenceRepository:
    """Both read-only reference tables, constructed once and shared across calls."""

    lunar_calendar: LunarCalendarLookup
    moon_ages: MoonAgeCalculator

    @classmethod
    def from_paths(cls, lunar_csv: PathLike, new_moons_json: PathLike) -> "ReferenceRepository":
        lunar_path = Path(lunar_csv).expanduser()
        moons_path = Path(new_moons_json).expanduser()
        for path in (lunar_path, moons_path):
            if not path.is_file():
                raise ReferenceDataError(f"Reference dataset not found: {path}")
        return cls(
            lunar_calendar=LunarCalendarLookup.from_csv(lunar_path),
            moon_ages=MoonAgeCalculator.from_json(moons_path),
        )


def resolve_reference_paths() -> Tuple[Path, Path]:
    """Return ``(lunar_csv, new_moons_json)`` honouring the environment overrides.

    ``EDO_TIME_DATA_DIR`` replaces the bundled data directory;
    ``EDO_TIME_LUNAR_CSV`` and ``EDO_TIME_NEW_MOONS`` point at individual files.
    """

    data_dir = Path(os.environ.get("EDO_TIME_DATA_DIR", str(DEFAULT_DATA_DIR))).expanduser()
    lunar_csv = os.environ.get("EDO_TIME_LUNAR_CSV")
    new_moons = os.environ.get("EDO_TIME_NEW_MOONS")
    return (
        Path(lunar_csv).expanduser() if lunar_csv else data_dir / LUNAR_CALENDAR_FILENAME,
        Path(new_moons).expanduser() if new_moons else data_dir / NEW_MOON_FILENAME,
    )


def load_reference_repository(
    lunar_csv: Optional[PathLike] = None,
    new_moons_json: Optional[PathLike] = None,
) -> ReferenceRepository:
    """Load the reference tables, defaulting to :func:`resolve_reference_paths`.

    Raises
    ------
    ReferenceDataError
        If a dataset is missing, unreadable or empty.
    """

    default_lunar, default_moons = resolve_reference_paths()
    lunar_path = Path(lunar_csv) if lunar_csv is not None else default_lunar
    moons_path = Path(new_moons_json) if new_moons_json is not None else default_moons

    repository = ReferenceRepository.from_paths(lunar_path, moons_path)
    first, last = repository.lunar_calendar.date_range
    LOGGER.info(
        json.dumps(
            {
                "event": "reference_loaded",
                "lunar_calendar": str(lunar_path),
                "lunar_rows": len(repository.lunar_calendar),
                "lunar_range": [first.isoformat(), last.isoformat()],
                "new_moons": str(moons_path),
                "new_moon_count": len(repository.moon_ages),
            }
        )
    )
    return repository


def year_from_moonface_filename(path: PathLike) -> Optional[int]:
    match = _MOONFACE_YEAR.search(Path(path).name)
    return int(match.group(1)) if match else None


def parse_moonface_csv(
    path: PathLike,
    year: Optional[int] = None,
    utc_offset_hours: float = 9.0,
) -> List[datetime]:
    """Extract new-moon instants (UTC) from a yearly lunar-phase table.

    Rows after the header read ``M/D,hour,minute,phase`` in local time; only
    rows whose phase mentions 新月 are kept.

    Parameters
    ----------
    path:
        CSV file, conventionally named ``moonfaceYYYY.csv``.
    year:
        Calendar year of the rows; taken from the file name when omitted.
    utc_offset_hours:
        Offset of the table's local time from UTC (JST by default).
    """

    csv_path = Path(path)
    if year is None:
        year = year_from_moonface_filename(csv_path)
    if year is None:
        raise ReferenceDataError(f"Cannot determine the year of {csv_path}; pass it explicitly")

    local = timezone(timedelta(hours=utc_offset_hours))
    instants: List[datetime] = []
    try:
        with csv_path.open(newline="", encoding="utf-8-sig") as handle:
            for line_no, row in enumerate(csv.reader(handle), start=1):
                if line_no == 1 or len(row) < 4:
                    continue
                day_str, hour, minute, phase = (cell.strip() for cell in row[:4])
                if NEW_MOON_MARKER not in phase:
                    continue
                try:
                    month, day = (int(part) for part in day_str.split("/"))
                    moment = datetime(year, month, day, int(hour), int(minute), tzinfo=local)
                except ValueError as exc:
                    raise ReferenceDataError(
                        f"Invalid moon phase row on line {line_no} of {csv_path}: {row!r}"
                    ) from exc
                instants.append(moment.astimezone(UTC))
    except OSError as exc:
        raise ReferenceDataError(f"Failed to read {csv_path}: {exc}") from exc
    return sorted(instants)
