from __future__ import annotations

import requests

from officegeo.common.http import HttpClient, RetryConfig
from officegeo.common.models import Coordinate, GeocodeStatus
from officegeo.geocoding.remote import RemoteGeocoder


class FakeResponse:
    def __init__(self, status_code: int, payload=None, reason: str = ""):
        self.status_code = status_code
        self.reason = reason
        self._payload = payload

    def json(self):
        return self._payload


def _feature(lon: float, lat: float) -> dict:
    return {"type": "FeatureCollection", "features": [{"geometry": {"type": "Point", "coordinates": [lon, lat]}}]}


def _geocoder(api_key: str | None = "test-key") -> RemoteGeocoder:
    client = HttpClient(retry=RetryConfig(max_attempts=1), rate_limits={"geocoder": 1000.0})
    return RemoteGeocoder(api_key, http_client=client)


def test_success_reads_lon_lat_order_and_sends_contract_params(monkeypatch):
    geocoder = _geocoder()
    calls = []

    def fake_request(**kwargs):
        calls.append(kwargs)
        return FakeResponse(200, _feature(13.3846, 52.5323))

    monkeypatch.setattr(geocoder.http_client.session, "request", fake_request)

    result = geocoder.geocode_address("Invalidenstraße 116, 10115 Berlin, Germany")

    assert result.status is GeocodeStatus.SUCCESS
    assert result.coords == Coordinate(lat=52.5323, lon=13.3846)
    assert result.error is None
    params = calls[0]["params"]
    assert calls[0]["method"] == "GET"
    assert params["text"] == "Invalidenstraße 116, 10115 Berlin, Germany"
    assert params["filter"] == "countrycode:de"
    assert params["limit"] == 1
    assert params["apiKey"] == "test-key"


def test_empty_features_is_a_failed_result(monkeypatch):
    geocoder = _geocoder()
    monkeypatch.setattr(geocoder.http_client.session, "request", lambda **_kw: FakeResponse(200, {"features": []}))

    result = geocoder.geocode_address("Nowhere")

    assert result.status is GeocodeStatus.FAILED
    assert result.coords is None
    assert result.error == "No results found for address"


def test_http_error_is_a_failed_result(monkeypatch):
    geocoder = _geocoder()
    monkeypatch.setattr(
        geocoder.http_client.session,
        "request",
        lambda **_kw: FakeResponse(500, reason="Internal Server Error"),
    )

    result = geocoder.geocode_address("Somewhere")

    assert result.status is GeocodeStatus.FAILED
    assert result.error == "HTTP 500: Internal Server Error"


def test_network_error_is_a_failed_result(monkeypatch):
    geocoder = _geocoder()

    def boom(**_kwargs):
        raise requests.ConnectionError("connection refused")

    monkeypatch.setattr(geocoder.http_client.session, "request", boom)

    result = geocoder.geocode_address("Somewhere")

    assert result.status is GeocodeStatus.FAILED
    assert "connection refused" in result.error


def test_batch_keeps_order_and_continues_past_failures(monkeypatch):
    geocoder = _geocoder()
    responses = {
        "A": FakeResponse(200, _feature(13.4, 52.5)),
        "B": FakeResponse(404, reason="Not Found"),
        "C": FakeResponse(200, _feature(11.58, 48.13)),
    }
    monkeypatch.setattr(
        geocoder.http_client.session,
        "request",
        lambda **kw: responses[kw["params"]["text"]],
    )
    progress = []

    results = geocoder.batch_geocode(["A", "B", "C"], on_progress=progress.append)

    assert [r.address for r in results] == ["A", "B", "C"]
    assert [r.status for r in results] == [GeocodeStatus.SUCCESS, GeocodeStatus.FAILED, GeocodeStatus.SUCCESS]
    assert [(p.current, p.status) for p in progress] == [
        (1, "processing"),
        (1, "success"),
        (2, "processing"),
        (2, "failed"),
        (3, "processing"),
        (3, "success"),
    ]
    assert all(p.total == 3 for p in progress)


def test_missing_api_key_fails_every_item_without_requests(monkeypatch):
    geocoder = _geocoder(api_key=None)

    def unexpected(**_kwargs):
        raise AssertionError("no request expected")

    monkeypatch.setattr(geocoder.http_client.session, "request", unexpected)

    results = geocoder.batch_geocode(["A", "B"])

    assert [r.error for r in results] == ["No API key provided", "No API key provided"]
    assert geocoder.geocode_address("A").status is GeocodeStatus.FAILED


def test_malformed_payload_shapes_fail_per_item_without_aborting_batch(monkeypatch):
    geocoder = _geocoder()
    responses = iter(
        [
            FakeResponse(200, {"features": {"x": 1}}),
            FakeResponse(200, {"features": [{"geometry": {"coordinates": {"lon": 1, "lat": 2}}}]}),
            FakeResponse(200, ["not", "an", "object"]),
            FakeResponse(200, _feature(9.99, 53.55)),
        ]
    )
    monkeypatch.setattr(geocoder.http_client.session, "request", lambda **_kw: next(responses))

    results = geocoder.batch_geocode(["a", "b", "c", "d"])

    assert [r.status for r in results] == [GeocodeStatus.FAILED] * 3 + [GeocodeStatus.SUCCESS]
    assert all(r.error.startswith("Unexpected response shape") for r in results[:3])
    assert results[3].coords == Coordinate(lat=53.55, lon=9.99)
