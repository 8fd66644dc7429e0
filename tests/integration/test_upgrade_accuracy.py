from __future__ import annotations

from pathlib import Path

import pytest
import requests

from officegeo.cli import parse_args, run_command
from officegeo.common.constants import EXIT_SUCCESS
from officegeo.common.http import HttpClient, RetryConfig
from officegeo.common.models import Coordinate, Employee, GeocodeAccuracy, GeocodeStatus
from officegeo.geocoding.remote import RemoteGeocoder
from officegeo.pipeline.upgrade import full_address, upgrade_employee_accuracy
from officegeo.store.records import RecordStore, open_stores
from officegeo.store.storage import JsonFileStorage, MemoryStorage


class FakeResponse:
    def __init__(self, status_code: int, payload=None, reason: str = ""):
        self.status_code = status_code
        self.reason = reason
        self._payload = payload

    def json(self):
        return self._payload


def _hit(lon: float, lat: float) -> FakeResponse:
    return FakeResponse(200, {"features": [{"geometry": {"type": "Point", "coordinates": [lon, lat]}}]})


def _employee(employee_id: str, name: str, street: str | None) -> Employee:
    return Employee(
        id=employee_id,
        name=name,
        postcode="10115",
        team="Data",
        street=street,
        city="Berlin",
        coords=Coordinate(lat=52.5323, lon=13.3846),
        geocode_status=GeocodeStatus.SUCCESS,
    )


@pytest.mark.integration
def test_upgrade_replaces_centroid_with_address_coordinates(monkeypatch):
    store = RecordStore(MemoryStorage(), "employees-v1", Employee, "employees")
    store.set_all(
        [
            _employee("a", "Anna", "Invalidenstraße 116"),
            _employee("b", "Ben", "Unbekannter Weg 1"),
            _employee("c", "Clara", None),
        ]
    )
    client = HttpClient(retry=RetryConfig(max_attempts=1), rate_limits={"geocoder": 1000.0})
    geocoder = RemoteGeocoder("test-key", http_client=client)
    responses = [_hit(13.3777, 52.5301), FakeResponse(200, {"features": []})]
    monkeypatch.setattr(client.session, "request", lambda **kwargs: responses.pop(0))
    progress = []

    summary = upgrade_employee_accuracy(store, geocoder, progress.append)

    assert summary.attempted == 2
    assert summary.upgraded == 1
    assert summary.errors == ["Ben: No results found for address"]
    anna, ben, clara = store.records
    assert anna.geocode_accuracy is GeocodeAccuracy.ADDRESS
    assert anna.coords == Coordinate(lat=52.5301, lon=13.3777)
    assert ben.geocode_accuracy is GeocodeAccuracy.POSTCODE_CENTROID
    assert ben.coords == Coordinate(lat=52.5323, lon=13.3846)
    assert clara.geocode_accuracy is GeocodeAccuracy.POSTCODE_CENTROID
    assert [p.status for p in progress] == ["processing", "success", "processing", "failed"]


def test_full_address_joins_available_parts():
    assert full_address(_employee("a", "Anna", "Invalidenstraße 116")) == "Invalidenstraße 116, 10115 Berlin, Germany"


@pytest.mark.integration
def test_cli_upgrade_accuracy_uses_api_key_from_environment(tmp_path: Path, monkeypatch):
    data_dir = tmp_path / "data"
    overlay = tmp_path / "overlay"
    overlay.mkdir()
    (overlay / "settings.yml").write_text("remote_geocoder:\n  rate_limit_per_sec: 1000\n", encoding="utf-8")
    seen_params = []

    def fake_request(self, **kwargs):
        seen_params.append(kwargs["params"])
        return _hit(8.68, 50.11)

    monkeypatch.setenv("OFFICEGEO_API_KEY", "env-key")
    monkeypatch.setattr(requests.Session, "request", fake_request)
    base = ["--config-dir", "config", "--overlay-config-dir", str(overlay), "--data-dir", str(data_dir)]

    assert run_command(parse_args(["seed", *base])) == EXIT_SUCCESS
    assert run_command(parse_args(["upgrade-accuracy", *base])) == EXIT_SUCCESS

    employees = open_stores(JsonFileStorage(data_dir / "state")).employees
    assert all(employee.geocode_accuracy is GeocodeAccuracy.ADDRESS for employee in employees)
    assert len(seen_params) == 45
    assert seen_params[0]["apiKey"] == "env-key"
    assert seen_params[0]["filter"] == "countrycode:de"
