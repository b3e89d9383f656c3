"""Shared fixtures for the redash-metrics test suite."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Mapping, Optional, Union

import httpx
import pytest

from redash_metrics.config import PluginConfig

FIXTURES_DIR = Path(__file__).resolve().parent / "fixtures"

API_KEY = "test"
BASE_URL = "http://httpmock"

# Body text, a status code with empty body, or an exception to raise.
Reply = Union[str, int, Exception]


def _load_text(path: Path) -> str:
    return path.read_text(encoding="utf-8")


@pytest.fixture(scope="session")
def fixtures_dir() -> Path:
    return FIXTURES_DIR


@pytest.fixture
def status_json() -> str:
    return _load_text(FIXTURES_DIR / "status.json")


@pytest.fixture
def tasks_json() -> str:
    return _load_text(FIXTURES_DIR / "tasks.json")


@pytest.fixture
def plugin_config() -> PluginConfig:
    return PluginConfig(url=BASE_URL, api_key=API_KEY, prefix="redash", timeout=5)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "REDASH_URL",
        "REDASH_API_KEY",
        "REDASH_METRIC_KEY_PREFIX",
        "REDASH_TIMEOUT",
        "REDASH_TEMPFILE",
        "MACKEREL_AGENT_PLUGIN_META",
    ):
        monkeypatch.delenv(name, raising=False)


class FakeRedash:
    """Routes requests by path to canned replies and records every request."""

    def __init__(self, routes: Optional[Mapping[str, Reply]] = None) -> None:
        self.routes: dict[str, Reply] = dict(routes or {})
        self.requests: list[httpx.Request] = []

    @property
    def paths(self) -> list[str]:
        return [request.url.path for request in self.requests]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        reply = self.routes.get(request.url.path, 404)
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, int):
            return httpx.Response(reply, text="")
        return httpx.Response(200, text=reply, headers={"Content-Type": "application/json"})

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def fake_redash() -> Callable[..., FakeRedash]:
    return FakeRedash
