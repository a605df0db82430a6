"""Shared fixtures: a fake upstream session and an app wired to it."""

import io
import json
from collections.abc import Iterator
from typing import Any

import pytest
import requests
from fastapi import FastAPI
from fastapi.testclient import TestClient

from openrouter_proxy.app.config import ProxySettings
from openrouter_proxy.fast_api_server import create_app

API_BASE = "https://upstream.test/api/v1"


class ChunkedRaw:
    """Raw stream that hands out one chunk per read, then optionally fails."""

    def __init__(self, chunks: list[bytes], error: Exception | None = None) -> None:
        self._chunks = list(chunks)
        self._error = error
        self.released = False

    def read(self, *args: Any, **kwargs: Any) -> bytes:
        if self._chunks:
            return self._chunks.pop(0)
        if self._error is not None:
            raise self._error
        return b""

    def close(self) -> None:
        pass

    def release_conn(self) -> None:
        self.released = True


def make_response(
    status_code: int = 200,
    json_body: Any = None,
    content: bytes = b"",
    raw: Any = None,
) -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    response.reason = "Test"
    response.url = API_BASE
    if json_body is not None:
        content = json.dumps(json_body).encode("utf-8")
    response.raw = raw if raw is not None else io.BytesIO(content)
    return response


class FakeSession:
    """Stands in for requests.Session; records calls and replays canned outcomes."""

    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []
        self.outcomes: dict[tuple[str, str], requests.Response | Exception] = {}

    def respond(self, method: str, path: str, outcome: requests.Response | Exception) -> None:
        self.outcomes[(method, f"{API_BASE}{path}")] = outcome

    def _dispatch(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        self.calls.append({"method": method, "url": url, **kwargs})
        outcome = self.outcomes[(method, url)]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def get(self, url: str, **kwargs: Any) -> requests.Response:
        return self._dispatch("GET", url, **kwargs)

    def post(self, url: str, **kwargs: Any) -> requests.Response:
        return self._dispatch("POST", url, **kwargs)


@pytest.fixture
def settings() -> ProxySettings:
    return ProxySettings(
        openrouter_api_key="sk-or-test",
        api_base=API_BASE,
        app_name="Test Proxy",
        app_url="https://proxy.test",
    )


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def app(settings: ProxySettings, session: FakeSession) -> FastAPI:
    return create_app(settings, session=session)  # type: ignore[arg-type]


@pytest.fixture
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app) as test_client:
        yield test_client
