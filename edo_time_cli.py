"""Command line entry point: ``edo-time now`` and ``edo-time convert-moonface``."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import UTC, datetime
from pathlib import Path
from typing import List, Optional, Sequence
from zoneinfo import ZoneInfoNotFoundError

from edotime.engine import calculate_edo_time
from edotime.errors import ReferenceDataError
from edotime.location import DEFAULT_LOCATION, Location
from edotime.reference import load_reference_repository, parse_moonface_csv
from edotime.timezone import get_zone
from models import build_edo_time_response

LOGGER = logging.getLogger("edo-time-cli")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="edo-time", description="Edo temporal time and calendar tools"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    commands = parser.add_subparsers(dest="command", required=True)

    now = commands.add_parser("now", help="Print the Edo-time aggregate as JSON")
    now.add_argument("--lat", type=float, default=DEFAULT_LOCATION.lat)
    now.add_argument("--lon", type=float, default=DEFAULT_LOCATION.lon)
    now.add_argument("--tz", type=str, default=DEFAULT_LOCATION.tz, help="IANA time zone")
    now.add_argument(
        "--at",
        type=str,
        default=None,
        help="ISO-8601 instant (naive values are read in --tz; default: now)",
    )
    now.add_argument("--lunar-csv", type=Path, default=None)
    now.add_argument("--new-moons", type=Path, default=None)

    convert = commands.add_parser(
        "convert-moonface", help="Convert moonfaceYYYY.csv tables into a new-moon JSON array"
    )
    convert.add_argument("files", nargs="+", type=Path)
    convert.add_argument("--output", "-o", type=Path, required=True)
    convert.add_argument("--year", type=int, default=None, help="Year for every input file")
    convert.add_argument(
        "--utc-offset", type=float, default=9.0, help="Offset of the table's local time (hours)"
    )
    return parser


def _parse_instant(value: Optional[str], tz: str) -> datetime:
    if value is None:
        return datetime.now(UTC)
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=get_zone(tz))
    return parsed


def _run_now(args: argparse.Namespace) -> int:
    try:
        get_zone(args.tz)
        location = Location(lat=args.lat, lon=args.lon, tz=args.tz)
        instant = _parse_instant(args.at, args.tz)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        print(f"edo-time: error: {exc}", file=sys.stderr)
        return 2

    repository = load_reference_repository(args.lunar_csv, args.new_moons)
    data = calculate_edo_time(instant, location, repository)
    response = build_edo_time_response(data)
    print(json.dumps(response.model_dump(mode="json"), ensure_ascii=False, indent=2))
    return 0


def _run_convert(args: argparse.Namespace) -> int:
    instants: List[datetime] = []
    for path in args.files:
        instants.extend(parse_moonface_csv(path, year=args.year, utc_offset_hours=args.utc_offset))
    values = sorted({moment.strftime("%Y-%m-%dT%H:%M:%SZ") for moment in instants})

    output: Path = args.output
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(json.dumps(values, indent=2) + "\n", encoding="utf-8")
    LOGGER.info(
        json.dumps(
            {
                "event": "moonface_converted",
                "files": len(args.files),
                "new_moons": len(values),
                "output": str(output),
            }
        )
    )
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
        stream=sys.stderr,
    )
    try:
        if args.command == "now":
            return _run_now(args)
        return _run_convert(args)
    except ReferenceDataError as exc:
        LOGGER.error(json.dumps({"event": "error", "code": "reference_data", "message": str(exc)}))
        return 1


if __name__ == "__main__":
    sys.exit(main())
