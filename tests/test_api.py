from __future__ import annotations

from typing import Iterable

import pytest
from fastapi.testclient import TestClient


@pytest.fixture(scope="module")
def api_client() -> Iterable[TestClient]:
    from edo_time_api import app

    with TestClient(app) as client:
        yield client


def test_health_endpoint(api_client: TestClient) -> None:
    response = api_client.get("/health")
    assert response.status_code == 200
    payload = response.json()
    assert payload["ok"] is True
    assert payload["reference_loaded"] is True
    assert payload["lunar_range"] == ["2026-01-01", "2028-12-31"]
    assert payload["new_moon_range"] == ["2000-01-06T18:14:00Z", "2049-12-24T17:52:00Z"]


def test_edo_time_naive_instant_is_read_in_zone(api_client: TestClient) -> None:
    response = api_client.get(
        "/edo-time",
        params={"lat": 35.6762, "lon": 139.6503, "tz": "Asia/Tokyo", "at": "2026-06-22T12:00:00"},
    )
    assert response.status_code == 200
    payload = response.json()
    assert payload["ok"] is True
    assert payload["instant"] == "2026-06-22T12:00:00+09:00"
    assert payload["civil_date"] == "2026-06-22"
    assert payload["solar_term"]["name"] == "夏至"
    assert payload["micro_season"]["name"] == "乃東枯"
    assert payload["sun"]["dawn"].startswith("2026-06-22T03:4")
    assert payload["sun"]["dusk"].startswith("2026-06-22T19:3")
    assert payload["sun"]["degraded"] is False
    assert payload["temporal_time"]["period"] == "day"
    assert payload["temporal_time"]["koku"] == 4
    assert payload["temporal_time"]["juni_shin"] == "午"
    assert payload["lunar_date"] == {
        "year": 2026,
        "month": 5,
        "day": 8,
        "is_leap_month": False,
        "month_name": "皐月",
        "month_reading": "さつき",
    }
    assert payload["rokuyo"] == "赤口"
    assert payload["lunar_error"] is None
    assert payload["moon"]["phase"] == "上弦の月"
    assert payload["moon"]["error"] is None


def test_edo_time_aware_instant(api_client: TestClient) -> None:
    response = api_client.get(
        "/edo-time", params={"at": "2026-06-21T17:00:00Z"}
    )
    assert response.status_code == 200
    payload = response.json()
    assert payload["instant"] == "2026-06-22T02:00:00+09:00"
    assert payload["temporal_time"]["period"] == "night"
    assert payload["temporal_time"]["juni_shin"] == "丑"


def test_edo_time_defaults_to_now(api_client: TestClient) -> None:
    response = api_client.get("/edo-time")
    assert response.status_code == 200
    payload = response.json()
    assert payload["tz"] == "Asia/Tokyo"
    assert payload["instant"].endswith("+09:00")


def test_lunar_error_is_reported_per_field(api_client: TestClient) -> None:
    response = api_client.get("/edo-time", params={"at": "2029-03-01T12:00:00"})
    assert response.status_code == 200
    payload = response.json()
    assert payload["lunar_date"] is None
    assert payload["rokuyo"] is None
    assert payload["lunar_error"]["code"] == "date_out_of_range"
    assert payload["moon"]["age"] is not None


def test_validation_error(api_client: TestClient) -> None:
    response = api_client.get(
        "/edo-time",
        params={
            "lat": 95,  # invalid latitude
            "lon": 0,
        },
    )
    assert response.status_code == 422
    payload = response.json()
    assert payload["code"] == "validation_error"
    assert payload["ok"] is False


def test_invalid_instant_is_validation_error(api_client: TestClient) -> None:
    response = api_client.get("/edo-time", params={"at": "tomorrow"})
    assert response.status_code == 422
    assert response.json()["code"] == "validation_error"


def test_unknown_time_zone(api_client: TestClient) -> None:
    response = api_client.get("/edo-time", params={"tz": "Mars/Olympus_Mons"})
    assert response.status_code == 400
    payload = response.json()
    assert payload == {
        "ok": False,
        "code": "http_400",
        "error": "Unknown time zone: Mars/Olympus_Mons",
    }
