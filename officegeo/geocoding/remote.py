"""Address-level geocoding through an external HTTP service.

Requests run strictly one after another through the client's rate limiter.
Every fault is folded into a ``failed`` result for that address so a batch
always runs to completion.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Sequence

import requests

from officegeo.common.http import HttpClient, HttpRequestError, RetryConfig, TimeoutConfig
from officegeo.common.models import Coordinate, GeocodeStatus

DEFAULT_ENDPOINT = "https://api.geoapify.com/v1/geocode/search"
DEFAULT_COUNTRY_FILTER = "countrycode:de"
SOURCE_TYPE = "geocoder"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RemoteGeocodeResult:
    address: str
    coords: Coordinate | None
    status: GeocodeStatus
    error: str | None = None


@dataclass(frozen=True)
class GeocodeProgress:
    current: int
    total: int
    address: str
    status: str  # processing / success / failed


ProgressCallback = Callable[[GeocodeProgress], None]


def _failed(address: str, error: str) -> RemoteGeocodeResult:
    return RemoteGeocodeResult(address=address, coords=None, status=GeocodeStatus.FAILED, error=error)


def _first_feature_coordinate(payload: dict) -> Coordinate | None:
    features = payload.get("features") or []
    if not isinstance(features, list):
        raise ValueError(f"'features' is {type(features).__name__}, expected a list")
    if not features:
        return None
    geometry = features[0].get("geometry") or {}
    coordinates = geometry.get("coordinates") or []
    if not isinstance(coordinates, (list, tuple)):
        raise ValueError(f"'coordinates' is {type(coordinates).__name__}, expected [lon, lat]")
    if len(coordinates) < 2:
        return None
    lon, lat = coordinates[0], coordinates[1]
    return Coordinate(lat=float(lat), lon=float(lon))


class RemoteGeocoder:
    def __init__(
        self,
        api_key: str | None,
        *,
        http_client: HttpClient | None = None,
        endpoint: str = DEFAULT_ENDPOINT,
        country_filter: str = DEFAULT_COUNTRY_FILTER,
        rate_limit_per_sec: float = 5.0,
        timeout_seconds: float = 20.0,
    ) -> None:
        self.api_key = api_key
        self.endpoint = endpoint
        self.country_filter = country_filter
        self.timeout = TimeoutConfig(connect=timeout_seconds, read=timeout_seconds)
        self._owns_client = http_client is None
        self.http_client = http_client or HttpClient(
            timeout=self.timeout,
            retry=RetryConfig(max_attempts=3),
            rate_limits={SOURCE_TYPE: rate_limit_per_sec},
        )

    def close(self) -> None:
        if self._owns_client:
            self.http_client.close()

    def __enter__(self) -> "RemoteGeocoder":
        return self

    def __exit__(self, *_exc_info) -> None:
        self.close()

    def geocode_address(self, address: str) -> RemoteGeocodeResult:
        if not self.api_key:
            return _failed(address, "No API key provided")

        params = {
            "text": address,
            "filter": self.country_filter,
            "limit": 1,
            "apiKey": self.api_key,
        }
        try:
            payload = self.http_client.get_json(
                self.endpoint,
                source_type=SOURCE_TYPE,
                params=params,
                timeout=self.timeout,
            )
            coords = _first_feature_coordinate(payload)
        except HttpRequestError as exc:
            return _failed(address, str(exc))
        except requests.RequestException as exc:
            return _failed(address, f"Network error: {exc}")
        except (TypeError, ValueError, AttributeError, KeyError, IndexError) as exc:
            return _failed(address, f"Unexpected response shape: {exc}")

        if coords is None:
            return _failed(address, "No results found for address")
        return RemoteGeocodeResult(address=address, coords=coords, status=GeocodeStatus.SUCCESS)

    def batch_geocode(
        self,
        addresses: Sequence[str],
        on_progress: ProgressCallback | None = None,
    ) -> list[RemoteGeocodeResult]:
        if not self.api_key:
            return [_failed(address, "No API key provided") for address in addresses]

        total = len(addresses)
        results: list[RemoteGeocodeResult] = []
        for index, address in enumerate(addresses, start=1):
            if on_progress is not None:
                on_progress(GeocodeProgress(current=index, total=total, address=address, status="processing"))

            result = self.geocode_address(address)
            results.append(result)
            if result.status is GeocodeStatus.FAILED:
                logger.debug("remote geocode failed for item %d/%d: %s", index, total, result.error)

            if on_progress is not None:
                on_progress(GeocodeProgress(current=index, total=total, address=address, status=result.status.value))

        return results
