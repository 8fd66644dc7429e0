"""JSON-over-HTTP client for external geocoding services.

Calls are spaced per source type, transient statuses are retried with
jittered exponential backoff, and every other failure surfaces as
``HttpRequestError``.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlparse

import requests
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential, wait_random

from officegeo.common.constants import USER_AGENT
from officegeo.common.errors import OfficeGeoError

RETRYABLE_STATUS_CODES = {408, 425, 429, 500, 502, 503, 504}
DEFAULT_RATE_LIMITS = {"geocoder": 5.0}


@dataclass(frozen=True)
class TimeoutConfig:
    connect: float = 10.0
    read: float = 20.0


@dataclass(frozen=True)
class RetryConfig:
    max_attempts: int = 3
    multiplier: float = 0.5
    max_wait: float = 8.0


class HttpRequestError(OfficeGeoError):
    error_code = "HTTP_ERROR"


class RetryableHttpError(HttpRequestError):
    pass


class RequestSpacer:
    """Enforce a minimum gap between consecutive calls (5/s -> one every 200 ms)."""

    def __init__(self, rate_per_sec: float) -> None:
        self.interval = 1.0 / rate_per_sec
        self.next_slot = 0.0
        self.lock = threading.Lock()

    def wait(self) -> None:
        with self.lock:
            now = time.monotonic()
            slot = max(now, self.next_slot)
            self.next_slot = slot + self.interval
        delay = slot - now
        if delay > 0:
            time.sleep(delay)


class HttpClient:
    def __init__(
        self,
        *,
        timeout: TimeoutConfig | None = None,
        retry: RetryConfig | None = None,
        rate_limits: dict[str, float] | None = None,
    ) -> None:
        self.timeout = timeout or TimeoutConfig()
        self.retry = retry or RetryConfig()
        self.session = requests.Session()
        self.session.headers.update({"User-Agent": USER_AGENT, "Accept": "application/json"})
        self.spacers = {
            source_type: RequestSpacer(rate) for source_type, rate in (rate_limits or DEFAULT_RATE_LIMITS).items()
        }

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "HttpClient":
        return self

    def __exit__(self, *_exc_info) -> None:
        self.close()

    def _check_status(self, response: requests.Response) -> None:
        status = response.status_code
        if status < 400:
            return
        message = f"HTTP {status}: {getattr(response, 'reason', '') or ''}".rstrip(": ")
        if status in RETRYABLE_STATUS_CODES:
            raise RetryableHttpError(message)
        raise HttpRequestError(message)

    def _get_once(
        self,
        url: str,
        source_type: str,
        params: dict[str, Any] | None,
        timeout: TimeoutConfig,
    ) -> dict[str, Any]:
        spacer = self.spacers.get(source_type)
        if spacer is not None:
            spacer.wait()

        response = self.session.request(
            method="GET",
            url=url,
            params=params,
            timeout=(timeout.connect, timeout.read),
        )
        self._check_status(response)
        try:
            return response.json()
        except ValueError as exc:
            raise HttpRequestError(f"Invalid JSON payload from {urlparse(url).netloc}") from exc

    def get_json(
        self,
        url: str,
        *,
        source_type: str,
        params: dict[str, Any] | None = None,
        timeout: TimeoutConfig | None = None,
    ) -> dict[str, Any]:
        retrying = Retrying(
            stop=stop_after_attempt(self.retry.max_attempts),
            wait=wait_exponential(multiplier=self.retry.multiplier, max=self.retry.max_wait) + wait_random(0, 0.5),
            retry=retry_if_exception_type(RetryableHttpError),
            reraise=True,
        )
        return retrying(self._get_once, url, source_type, params, timeout or self.timeout)
