"""Core computations for the Edo Time API."""

from .astro import compute_sun_events, solar_longitude, solar_noon
from .engine import EdoTimeAggregator, EdoTimeData, FieldError, calculate_edo_time
from .location import DEFAULT_LOCATION, Location
from .reference import ReferenceRepository, load_reference_repository

__all__ = [
    "DEFAULT_LOCATION",
    "EdoTimeAggregator",
    "EdoTimeData",
    "FieldError",
    "Location",
    "ReferenceRepository",
    "calculate_edo_time",
    "compute_sun_events",
    "load_reference_repository",
    "solar_longitude",
    "solar_noon",
]
