"""FastAPI application exposing Edo temporal time computations."""

from __future__ import annotations

import json
import logging
import os
import time
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import List, Optional
from zoneinfo import ZoneInfoNotFoundError

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from edotime.engine import EdoTimeAggregator
from edotime.errors import ReferenceDataError
from edotime.location import Location
from edotime.reference import ReferenceRepository, load_reference_repository
from edotime.timezone import get_zone
from models import (
    EdoTimeQueryParams,
    EdoTimeResponse,
    ErrorResponse,
    HealthResponse,
    build_edo_time_response,
)

logging.basicConfig(level=logging.INFO, format="%(message)s")
LOGGER = logging.getLogger("edo-time-api")

APP_DESCRIPTION = (
    "Edo-period temporal time, solar terms and lunisolar calendar for any location"
)


def _cors_origins() -> List[str]:
    raw = os.environ.get("EDO_TIME_CORS_ORIGINS", "*")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        repository = load_reference_repository()
    except ReferenceDataError as exc:
        LOGGER.error(json.dumps({"event": "reference_load_failed", "error": str(exc)}))
        raise
    first, last = repository.lunar_calendar.date_range
    LOGGER.info(
        json.dumps(
            {
                "event": "startup",
                "lunar_range": [first.isoformat(), last.isoformat()],
                "new_moon_count": len(repository.moon_ages),
            }
        )
    )
    app.state.repository = repository
    app.state.aggregator = EdoTimeAggregator(repository)
    yield
    app.state.repository = None
    app.state.aggregator = None


app = FastAPI(
    title="Edo Time API",
    description=APP_DESCRIPTION,
    version="1.0.0",
    lifespan=lifespan,
)

_ORIGINS = _cors_origins()
app.add_middleware(
    CORSMiddleware,
    allow_origins=_ORIGINS,
    allow_credentials="*" not in _ORIGINS,
    allow_methods=["GET"],
    allow_headers=["*"],
)


def _error_response(status_code: int, code: str, message: str) -> JSONResponse:
    payload = ErrorResponse(code=code, error=message)
    LOGGER.error(json.dumps({"event": "error", "code": code, "message": message}))
    return JSONResponse(status_code=status_code, content=payload.model_dump())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    messages = ", ".join(error["msg"] for error in exc.errors())
    return _error_response(422, "validation_error", messages)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    detail = exc.detail
    if isinstance(detail, dict):
        message = detail.get("error") or detail.get("message") or str(detail)
    elif isinstance(detail, list):
        message = ", ".join(str(item) for item in detail)
    else:
        message = str(detail)
    return _error_response(exc.status_code, f"http_{exc.status_code}", message)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    LOGGER.exception("Unhandled exception", exc_info=exc)
    return _error_response(500, "internal_error", "Unhandled server error")


def _repository(request: Request) -> Optional[ReferenceRepository]:
    return getattr(request.app.state, "repository", None)


@app.get("/health", response_model=HealthResponse)
def health(request: Request) -> HealthResponse:
    repository = _repository(request)
    if repository is None:
        return HealthResponse(ok=False, reference_loaded=False)
    moons = repository.moon_ages
    return HealthResponse(
        ok=True,
        reference_loaded=True,
        lunar_range=list(repository.lunar_calendar.date_range),
        new_moon_range=[
            moons.first_new_moon.isoformat().replace("+00:00", "Z"),
            moons.last_new_moon.isoformat().replace("+00:00", "Z"),
        ],
    )


@app.get(
    "/edo-time",
    response_model=EdoTimeResponse,
    responses={
        400: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
def edo_time_endpoint(
    request: Request, params: EdoTimeQueryParams = Depends()
) -> EdoTimeResponse:
    start_time = time.perf_counter()
    aggregator: Optional[EdoTimeAggregator] = getattr(request.app.state, "aggregator", None)
    if aggregator is None:
        raise HTTPException(status_code=503, detail="Reference data not loaded")

    try:
        zone = get_zone(params.tz)
    except (ZoneInfoNotFoundError, ValueError):
        raise HTTPException(status_code=400, detail=f"Unknown time zone: {params.tz}")

    instant = params.at
    if instant is None:
        instant = datetime.now(UTC)
    elif instant.tzinfo is None:
        instant = instant.replace(tzinfo=zone)

    try:
        location = Location(lat=params.lat, lon=params.lon, tz=params.tz)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    data = aggregator.calculate(instant, location)
    response = build_edo_time_response(data)
    duration_ms = (time.perf_counter() - start_time) * 1000.0

    LOGGER.info(
        json.dumps(
            {
                "event": "edo_time",
                "lat": params.lat,
                "lon": params.lon,
                "tz": params.tz,
                "instant": response.instant,
                "period": data.temporal_time.period.value,
                "koku": data.temporal_time.koku,
                "degraded": data.sun_events.degraded,
                "lunar_error": data.lunar_error.code if data.lunar_error else None,
                "moon_error": data.moon.error is not None,
                "duration_ms": round(duration_ms, 3),
            }
        )
    )
    return response
