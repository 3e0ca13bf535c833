"""Observer location value type."""

from __future__ import annotations

from dataclasses import dataclass

__all__ = ["Location", "DEFAULT_LOCATION"]


@dataclass(frozen=True)
class Location:
    """Observation point: geographic coordinates plus the civil time zone.

    Longitudes are east-positive degrees; ``tz`` is an IANA zone name.
    """

    lat: float
    lon: float
    tz: str = "Asia/Tokyo"

    def __post_init__(self) -> None:
        if not -90.0 <= self.lat <= 90.0:
            raise ValueError(f"latitude out of range: {self.lat}")
        if not -180.0 <= self.lon <= 180.0:
            raise ValueError(f"longitude out of range: {self.lon}")


DEFAULT_LOCATION = Location(lat=35.6762, lon=139.6503, tz="Asia/Tokyo")
