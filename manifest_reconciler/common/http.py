"""JSON-over-HTTP client shared by the postal and geocoding lookups."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from types import TracebackType
from typing import Any
from urllib.parse import urlparse

import requests
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential_jitter

from manifest_reconciler.common.constants import USER_AGENT
from manifest_reconciler.common.errors import StageError

RETRYABLE_STATUS_CODES = {408, 425, 429, 500, 502, 503, 504}


@dataclass(frozen=True)
class TimeoutConfig:
    connect: float = 10.0
    read: float = 20.0

    @classmethod
    def from_config(cls, section: dict) -> "TimeoutConfig":
        timeouts = section.get("timeout_seconds") or {}
        return cls(
            connect=float(timeouts.get("connect", cls.connect)),
            read=float(timeouts.get("read", cls.read)),
        )


@dataclass(frozen=True)
class RetryConfig:
    max_attempts: int = 1
    multiplier: float = 1.0
    max_wait: float = 10.0

    @classmethod
    def from_config(cls, http_config: dict) -> "RetryConfig":
        retry_cfg = http_config.get("retry") or {}
        return cls(
            max_attempts=int(retry_cfg.get("max_attempts", cls.max_attempts)),
            multiplier=float(retry_cfg.get("multiplier", cls.multiplier)),
            max_wait=float(retry_cfg.get("max_wait", cls.max_wait)),
        )


class HttpRequestError(StageError):
    error_code = "HTTP_ERROR"


class RetryableHttpError(HttpRequestError):
    pass


class HttpNotFoundError(HttpRequestError):
    error_code = "HTTP_NOT_FOUND"


class HostThrottle:
    """Keeps at least ``1 / rate_per_sec`` seconds between calls to the same host."""

    def __init__(self, rate_per_sec: float) -> None:
        self.min_interval = 1.0 / rate_per_sec if rate_per_sec > 0 else 0.0
        self.next_slot: dict[str, float] = {}
        self.lock = threading.Lock()

    def wait(self, host: str) -> None:
        with self.lock:
            now = time.monotonic()
            slot = max(now, self.next_slot.get(host, now))
            self.next_slot[host] = slot + self.min_interval
        delay = slot - now
        if delay > 0:
            time.sleep(delay)


class HttpClient:
    def __init__(
        self,
        *,
        timeout: TimeoutConfig | None = None,
        retry: RetryConfig | None = None,
        rate_per_sec: float = 10.0,
    ) -> None:
        self.timeout = timeout or TimeoutConfig()
        self.retry = retry or RetryConfig()
        self.session = requests.Session()
        self.session.headers.update({"User-Agent": USER_AGENT, "Accept": "application/json"})
        self.throttle = HostThrottle(rate_per_sec)

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "HttpClient":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def _check_status(self, response: requests.Response) -> None:
        status = response.status_code
        if status in RETRYABLE_STATUS_CODES:
            raise RetryableHttpError(f"Retryable HTTP status: {status}")
        if status == 404:
            raise HttpNotFoundError("HTTP status: 404")
        if status >= 400:
            raise HttpRequestError(f"HTTP status: {status}")

    def _get_once(
        self,
        url: str,
        params: dict[str, Any] | None,
        headers: dict[str, str] | None,
        timeout: TimeoutConfig,
    ) -> Any:
        host = urlparse(url).netloc
        self.throttle.wait(host)
        try:
            response = self.session.request(
                method="GET",
                url=url,
                params=params,
                headers=headers,
                timeout=(timeout.connect, timeout.read),
            )
        except (requests.Timeout, requests.ConnectionError) as exc:
            raise RetryableHttpError(f"Transport failure for {host}: {exc.__class__.__name__}") from exc
        self._check_status(response)

        try:
            return response.json()
        except ValueError as exc:
            raise HttpRequestError(f"Invalid JSON payload from {host}") from exc

    def get_json(
        self,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout: TimeoutConfig | None = None,
    ) -> Any:
        """GET ``url`` and decode its JSON body.

        Timeouts, dropped connections and 408/425/429/5xx answers are retried up to
        ``retry.max_attempts`` times in total; the last failure is re-raised. A 404
        raises ``HttpNotFoundError`` straight away.
        """
        retrying = Retrying(
            stop=stop_after_attempt(self.retry.max_attempts),
            wait=wait_exponential_jitter(initial=self.retry.multiplier, max=self.retry.max_wait, jitter=1.0),
            retry=retry_if_exception_type(RetryableHttpError),
            reraise=True,
        )
        return retrying(self._get_once, url, params, headers, timeout or self.timeout)
