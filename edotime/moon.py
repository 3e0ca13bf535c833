"""Moon age from a table of new-moon instants."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

import numpy as np

from .astro import as_utc
from .errors import DataRangeError, ReferenceDataError

__all__ = [
    "SYNODIC_MONTH",
    "COVERAGE_SYNODIC_MONTH",
    "MoonPhaseName",
    "MOON_PHASE_NAMES",
    "MoonAgeResult",
    "MoonAgeCalculator",
    "moon_phase_name",
    "parse_new_moon_instants",
]

SYNODIC_MONTH = 29.530588
# Coverage extends one (slightly rounded) lunation past the last new moon.
COVERAGE_SYNODIC_MONTH = 29.53059

_SECONDS_PER_DAY = 86400.0


@dataclass(frozen=True)
class MoonPhaseName:
    name: str
    reading: str
    start_age: float
    end_age: float


MOON_PHASE_NAMES: Tuple[MoonPhaseName, ...] = (
    MoonPhaseName("新月", "しんげつ", 0.0, 1.5),
    MoonPhaseName("二日月", "ふつかづき", 1.5, 2.5),
    MoonPhaseName("三日月", "みかづき", 2.5, 4.5),
    MoonPhaseName("五日月", "いつかづき", 4.5, 6.5),
    MoonPhaseName("上弦の月", "じょうげんのつき", 6.5, 8.5),
    MoonPhaseName("十日夜", "とおかんや", 8.5, 12.5),
    MoonPhaseName("十三夜", "じゅうさんや", 12.5, 13.5),
    MoonPhaseName("小望月", "こもちづき", 13.5, 14.5),
    MoonPhaseName("満月", "まんげつ", 14.5, 15.5),
    MoonPhaseName("十六夜", "いざよい", 15.5, 16.5),
    MoonPhaseName("立待月", "たちまちづき", 16.5, 17.5),
    MoonPhaseName("居待月", "いまちづき", 17.5, 18.5),
    MoonPhaseName("臥待月", "ねまちづき", 18.5, 19.5),
    MoonPhaseName("更待月", "ふけまちづき", 19.5, 20.5),
    MoonPhaseName("二十日余りの月", "はつかあまりのつき", 20.5, 21.5),
    MoonPhaseName("下弦の月", "かげんのつき", 21.5, 23.5),
    MoonPhaseName("二十三夜", "にじゅうさんや", 23.5, 25.5),
    MoonPhaseName("有明の月", "ありあけのつき", 25.5, 27.5),
    MoonPhaseName("二十九夜", "にじゅうくや", 27.5, 28.5),
    MoonPhaseName("三十日月", "みそかづき", 28.5, SYNODIC_MONTH),
)


def moon_phase_name(moon_age: float) -> MoonPhaseName:
    """Traditional name for a moon age in days."""

    age = moon_age % SYNODIC_MONTH
    for phase in MOON_PHASE_NAMES:
        if phase.start_age <= age < phase.end_age:
            return phase
    return MOON_PHASE_NAMES[0]


@dataclass(frozen=True)
class MoonAgeResult:
    """Moon age in days, or the reason it could not be computed."""

    moon_age: Optional[float] = None
    error: Optional[str] = None
    phase: Optional[MoonPhaseName] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _parse_instant(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.strip())
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def parse_new_moon_instants(values: Iterable[str]) -> List[datetime]:
    try:
        return sorted(_parse_instant(value) for value in values)
    except (TypeError, ValueError, AttributeError) as exc:
        raise ReferenceDataError(f"Invalid new-moon timestamp: {exc}") from exc


class MoonAgeCalculator:
    """Moon age lookup over a sorted, read-only list of new-moon instants."""

    def __init__(self, new_moons: Iterable[datetime]) -> None:
        instants = sorted(as_utc(moment) for moment in new_moons)
        if not instants:
            raise ReferenceDataError("New-moon dataset contains no instants")
        seconds = np.array([moment.timestamp() for moment in instants], dtype=np.float64)
        seconds.setflags(write=False)
        self._seconds = seconds
        self.first_new_moon = instants[0]
        self.last_new_moon = instants[-1]
        self.coverage_end = self.last_new_moon + timedelta(days=COVERAGE_SYNODIC_MONTH)

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "MoonAgeCalculator":
        json_path = Path(path)
        try:
            with json_path.open(encoding="utf-8") as handle:
                payload = json.load(handle)
        except (OSError, json.JSONDecodeError) as exc:
            raise ReferenceDataError(f"Failed to read new-moon dataset {json_path}: {exc}") from exc
        if not isinstance(payload, list):
            raise ReferenceDataError(f"New-moon dataset {json_path} must be a JSON array")
        return cls(parse_new_moon_instants(payload))

    def __len__(self) -> int:
        return int(self._seconds.size)

    def moon_age(self, instant: datetime) -> float:
        """Days since the latest tabulated new moon at or before *instant*.

        Raises
        ------
        DataRangeError
            If *instant* precedes the first new moon or lies more than one
            synodic month after the last one.
        """

        target = as_utc(instant)
        if target < self.first_new_moon:
            raise DataRangeError(
                f"{target.isoformat()} is outside the new-moon data range; "
                f"data starts at {self.first_new_moon.isoformat()}",
                reason="before_range",
            )
        if target > self.coverage_end:
            raise DataRangeError(
                f"{target.isoformat()} is outside the new-moon data range; "
                f"data covers up to {self.last_new_moon.isoformat()} plus one synodic month",
                reason="after_range",
            )

        target_seconds = target.timestamp()
        index = int(np.searchsorted(self._seconds, target_seconds, side="right")) - 1
        elapsed_days = (target_seconds - float(self._seconds[index])) / _SECONDS_PER_DAY
        age = elapsed_days % SYNODIC_MONTH
        if age < 0.0:
            age += SYNODIC_MONTH
        return age

    def calculate(self, instant: datetime) -> MoonAgeResult:
        try:
            age = self.moon_age(instant)
        except DataRangeError as exc:
            return MoonAgeResult(error=str(exc))
        return MoonAgeResult(moon_age=age, phase=moon_phase_name(age))
