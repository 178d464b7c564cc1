"""Async test client for yieldkit applications.

Drives the ASGI interface directly, no sockets, and returns the frozen
``Response`` type. Headers are kept as sent, ``content-length`` included,
so tests can check what a buffered render declared.
"""

import inspect
from collections.abc import Callable
from typing import Any

from yieldkit.app import App
from yieldkit.http.response import HTML, Response


def _build_scope(method: str, path: str, headers: dict[str, str] | None) -> dict[str, Any]:
    path_part, _, query_string = path.partition("?")
    return {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": method.upper(),
        "path": path_part,
        "raw_path": path_part.encode("latin-1"),
        "query_string": query_string.encode("latin-1"),
        "root_path": "",
        "headers": [
            (name.lower().encode("latin-1"), value.encode("latin-1"))
            for name, value in (headers or {}).items()
        ],
        "server": ("testserver", 80),
        "client": ("127.0.0.1", 0),
    }


class _Capture:
    """The receive/send pair for one request, recording what the app sends."""

    __slots__ = ("_body", "_body_sent", "chunks", "raw_headers", "status")

    def __init__(self, body: bytes) -> None:
        self._body = body
        self._body_sent = False
        self.status = 200
        self.raw_headers: list[tuple[bytes, bytes]] = []
        self.chunks: list[bytes] = []

    async def receive(self) -> dict[str, Any]:
        if self._body_sent:
            return {"type": "http.disconnect"}
        self._body_sent = True
        return {"type": "http.request", "body": self._body, "more_body": False}

    async def send(self, message: dict[str, Any]) -> None:
        match message["type"]:
            case "http.response.start":
                self.status = message["status"]
                self.raw_headers = list(message.get("headers", []))
            case "http.response.body":
                self.chunks.append(message.get("body", b""))

    def to_response(self) -> Response:
        content_type = HTML
        headers: list[tuple[str, str]] = []
        for name_b, value_b in self.raw_headers:
            name, value = name_b.decode("latin-1"), value_b.decode("latin-1")
            if name == "content-type":
                content_type = value
            else:
                headers.append((name, value))
        return Response(
            body=b"".join(self.chunks),
            status=self.status,
            content_type=content_type,
            headers=tuple(headers),
        )


async def _run_hooks(hooks: list[Callable[..., Any]]) -> None:
    for hook in hooks:
        result = hook()
        if inspect.isawaitable(result):
            await result


class TestClient:
    __test__ = False  # Tell pytest this is not a test class
    """Async test client for yieldkit applications.

    Usage::

        async with TestClient(app) as client:
            response = await client.get("/Hotels/index")
            assert response.status == 200
    """

    __slots__ = ("app",)

    def __init__(self, app: App) -> None:
        self.app = app

    async def __aenter__(self) -> TestClient:
        self.app._ensure_frozen()
        await _run_hooks(self.app._startup_hooks)
        return self

    async def __aexit__(self, *args: object) -> None:
        await _run_hooks(self.app._shutdown_hooks)

    async def get(self, path: str, *, headers: dict[str, str] | None = None) -> Response:
        """Send a GET request."""
        return await self.request("GET", path, headers=headers)

    async def head(self, path: str, *, headers: dict[str, str] | None = None) -> Response:
        """Send a HEAD request. The body of the returned response is always empty."""
        return await self.request("HEAD", path, headers=headers)

    async def post(
        self,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
    ) -> Response:
        """Send a POST request."""
        return await self.request("POST", path, headers=headers, body=body)

    async def request(
        self,
        method: str,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
    ) -> Response:
        """Send an arbitrary request through the ASGI app."""
        capture = _Capture(body or b"")
        await self.app(_build_scope(method, path, headers), capture.receive, capture.send)
        return capture.to_response()
