"""
Shared test doubles for outbound HTTP.

Handlers receive a FakeSession in place of requests.Session; it records every
call and answers with real requests.Response objects.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

import pytest
import requests

from app.config import ApiCredentialSettings, EmailRelaySettings, HTTPSettings

RELAY_URL = "https://relay.example.test/send"


def make_response(status_code: int = 200, body: Any = None, text: str | None = None) -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    if body is not None:
        response._content = json.dumps(body).encode("utf-8")
        response.headers["Content-Type"] = "application/json"
    else:
        response._content = (text or "").encode("utf-8")
    response.encoding = "utf-8"
    return response


@dataclass
class RecordedCall:
    method: str
    url: str
    kwargs: dict[str, Any] = field(default_factory=dict)

    @property
    def json(self) -> Any:
        return self.kwargs.get("json")

    @property
    def data(self) -> Any:
        return self.kwargs.get("data")

    @property
    def headers(self) -> dict[str, str]:
        return self.kwargs.get("headers") or {}


class FakeSession:
    """
    Route table of url -> response (or exception) with call recording.
    """

    def __init__(self, routes: dict[str, Any] | None = None) -> None:
        self.routes: dict[str, Any] = dict(routes or {})
        self.calls: list[RecordedCall] = []

    def request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        self.calls.append(RecordedCall(method=method, url=url, kwargs=kwargs))
        outcome = self.routes.get(url)
        if outcome is None:
            raise requests.ConnectionError(f"No route for {url}")
        if isinstance(outcome, Exception):
            raise outcome
        if callable(outcome):
            return outcome(method, url, kwargs)
        return outcome

    def post(self, url: str, **kwargs: Any) -> requests.Response:
        return self.request("POST", url, **kwargs)

    def calls_to(self, url: str) -> list[RecordedCall]:
        return [call for call in self.calls if call.url == url]


@pytest.fixture()
def http_settings() -> HTTPSettings:
    return HTTPSettings(timeout_seconds=5.0)


@pytest.fixture()
def relay_settings() -> EmailRelaySettings:
    return EmailRelaySettings(url=RELAY_URL)


@pytest.fixture()
def credentials() -> ApiCredentialSettings:
    return ApiCredentialSettings(opensats_api_key="test-key")
