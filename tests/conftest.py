"""Shared fixtures: an app rooted at ``tests/fixtures`` and a capturing ASGI send."""

from pathlib import Path
from typing import Any

import pytest

from yieldkit.app import App
from yieldkit.config import AppConfig
from yieldkit.http.headers import Headers
from yieldkit.http.request import Request
from yieldkit.layouts.loader import LayoutLoader
from yieldkit.templating.integration import create_environment
from yieldkit.templating.views import Views

FIXTURES = Path(__file__).parent / "fixtures"


def make_config(**overrides: Any) -> AppConfig:
    """AppConfig rooted at the fixture app, HTML layout by default."""
    overrides.setdefault("base_path", FIXTURES)
    overrides.setdefault("default_layouts", {"html": "application.html"})
    return AppConfig(**overrides)


def make_views(config: AppConfig | None = None) -> Views:
    config = config or make_config()
    env = create_environment(config, config.template_path)
    return Views(config=config, env=env, layouts=LayoutLoader(config))


def make_request(method: str = "GET", path: str = "/", fmt: str = "html") -> Request:
    return Request(method=method, path=path, headers=Headers(), format=fmt)


def make_app(**overrides: Any) -> App:
    return App(make_config(**overrides))


class SendRecorder:
    """ASGI send callable that keeps every message."""

    def __init__(self) -> None:
        self.messages: list[dict[str, Any]] = []

    async def __call__(self, message: dict[str, Any]) -> None:
        self.messages.append(message)

    @property
    def start(self) -> dict[str, Any] | None:
        for message in self.messages:
            if message["type"] == "http.response.start":
                return message
        return None

    @property
    def status(self) -> int | None:
        start = self.start
        return start["status"] if start else None

    @property
    def headers(self) -> dict[str, str]:
        start = self.start
        if start is None:
            return {}
        return {k.decode("latin-1"): v.decode("latin-1") for k, v in start["headers"]}

    @property
    def body_chunks(self) -> list[bytes]:
        return [
            m["body"]
            for m in self.messages
            if m["type"] == "http.response.body" and m.get("body")
        ]

    @property
    def body(self) -> bytes:
        return b"".join(self.body_chunks)


@pytest.fixture
def views() -> Views:
    return make_views()


@pytest.fixture
def send() -> SendRecorder:
    return SendRecorder()
