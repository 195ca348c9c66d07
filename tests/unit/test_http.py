from __future__ import annotations

import pytest
import requests

from manifest_reconciler.common.http import (
    HostThrottle,
    HttpClient,
    HttpNotFoundError,
    HttpRequestError,
    RetryableHttpError,
    RetryConfig,
    TimeoutConfig,
)


class FakeResponse:
    def __init__(self, status_code: int, payload=None, raises_json: bool = False):
        self.status_code = status_code
        self._payload = payload
        self._raises_json = raises_json

    def json(self):
        if self._raises_json:
            raise ValueError("bad json")
        return self._payload


def test_http_get_json_success(monkeypatch):
    client = HttpClient(retry=RetryConfig(max_attempts=1))

    monkeypatch.setattr(client.session, "request", lambda **_kwargs: FakeResponse(200, {"ok": True}))
    payload = client.get_json("https://example.com")

    assert payload == {"ok": True}


def test_http_list_payload_is_returned(monkeypatch):
    client = HttpClient(retry=RetryConfig(max_attempts=1))

    monkeypatch.setattr(client.session, "request", lambda **_kwargs: FakeResponse(200, [{"a": 1}]))

    assert client.get_json("https://example.com") == [{"a": 1}]


def test_http_retryable_status_raises_retryable_error(monkeypatch):
    client = HttpClient(retry=RetryConfig(max_attempts=1))
    monkeypatch.setattr(client.session, "request", lambda **_kwargs: FakeResponse(503, {"x": 1}))

    with pytest.raises(RetryableHttpError):
        client.get_json("https://example.com")


def test_http_not_found_status(monkeypatch):
    client = HttpClient(retry=RetryConfig(max_attempts=1))
    monkeypatch.setattr(client.session, "request", lambda **_kwargs: FakeResponse(404))

    with pytest.raises(HttpNotFoundError):
        client.get_json("https://example.com")


def test_http_timeout_becomes_request_error(monkeypatch):
    client = HttpClient(retry=RetryConfig(max_attempts=1))

    def _timeout(**_kwargs):
        raise requests.Timeout("slow")

    monkeypatch.setattr(client.session, "request", _timeout)

    with pytest.raises(HttpRequestError):
        client.get_json("https://example.com")


def test_http_retries_until_success(monkeypatch):
    client = HttpClient(retry=RetryConfig(max_attempts=3, multiplier=0.0, max_wait=0.0))
    responses = [FakeResponse(503), FakeResponse(200, {"ok": 1})]
    monkeypatch.setattr(client.session, "request", lambda **_kwargs: responses.pop(0))
    monkeypatch.setattr("time.sleep", lambda _seconds: None)

    assert client.get_json("https://example.com") == {"ok": 1}


def test_http_invalid_json_raises(monkeypatch):
    client = HttpClient(retry=RetryConfig(max_attempts=1))
    monkeypatch.setattr(client.session, "request", lambda **_kwargs: FakeResponse(200, raises_json=True))

    with pytest.raises(HttpRequestError):
        client.get_json("https://example.com")


def test_config_factories_read_sections():
    assert TimeoutConfig.from_config({"timeout_seconds": {"connect": 3, "read": 4}}) == TimeoutConfig(connect=3.0, read=4.0)
    assert RetryConfig.from_config({"retry": {"max_attempts": 2, "multiplier": 0.5, "max_wait": 5}}) == RetryConfig(
        max_attempts=2, multiplier=0.5, max_wait=5.0
    )


def test_host_throttle_spaces_calls_per_host(monkeypatch):
    clock = {"now": 100.0}
    sleeps: list[float] = []
    monkeypatch.setattr("time.monotonic", lambda: clock["now"])
    monkeypatch.setattr("time.sleep", sleeps.append)
    throttle = HostThrottle(rate_per_sec=2.0)

    throttle.wait("viacep.com.br")
    throttle.wait("viacep.com.br")
    throttle.wait("maps.googleapis.com")

    assert sleeps == [0.5]
