from __future__ import annotations

import json
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pytest

from edotime.reference import ReferenceRepository, load_reference_repository

LUNAR_HEADER = "date,weekday,lunar_year,lunar_month,lunar_day,leap_month,kanshi,rokuyo"

# Kangxi-radical forms, as published calendars sometimes encode 大安 and 赤口.
KANGXI_TAIAN = "⼤安"
KANGXI_SHAKKO = "⾚⼝"

# 2026-01-03 is deliberately missing, 2026-01-05 has no rokuyo.
LUNAR_ROWS = [
    f"2026-01-01,木,2025,11,13,FALSE,乙亥,{KANGXI_TAIAN}",
    f"2026-01-02,金,2025,11,14,FALSE,丙子,{KANGXI_SHAKKO}",
    "2026-01-04,日,2025,11,16,FALSE,戊寅,友引",
    "2026-01-05,月,2025,11,17,FALSE,己卯,",
    "2026-01-06,火,2025,11,18,FALSE,庚辰,仏滅",
]

NEW_MOONS = [
    "2026-01-18T19:52:00Z",
    "2026-02-17T12:01:00Z",
]


@pytest.fixture(scope="session")
def fixture_dir(tmp_path_factory: pytest.TempPathFactory) -> Path:
    directory = tmp_path_factory.mktemp("reference")
    lunar_path = directory / "lunar_2026_2028.csv"
    lunar_path.write_text("\n".join([LUNAR_HEADER, *LUNAR_ROWS]) + "\n", encoding="utf-8")
    moons_path = directory / "new_moon_dates.json"
    moons_path.write_text(json.dumps(NEW_MOONS), encoding="utf-8")
    return directory


@pytest.fixture(scope="session")
def lunar_csv(fixture_dir: Path) -> Path:
    return fixture_dir / "lunar_2026_2028.csv"


@pytest.fixture(scope="session")
def new_moons_json(fixture_dir: Path) -> Path:
    return fixture_dir / "new_moon_dates.json"


@pytest.fixture(scope="session")
def small_repository(lunar_csv: Path, new_moons_json: Path) -> ReferenceRepository:
    return ReferenceRepository.from_paths(lunar_csv, new_moons_json)


@pytest.fixture(scope="session")
def repository() -> ReferenceRepository:
    """Bundled datasets shipped with the package."""

    return load_reference_repository()
