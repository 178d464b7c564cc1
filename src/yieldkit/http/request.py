"""Immutable HTTP request.

Frozen metadata with async body access. Controllers read the request;
nothing in the render pipeline mutates it.
"""

from dataclasses import dataclass, field, replace
from typing import Any
from urllib.parse import parse_qsl

from yieldkit._internal.asgi import Receive
from yieldkit.http.headers import Headers

_FORMATS_BY_MEDIA_TYPE: tuple[tuple[str, str], ...] = (
    ("application/json", "json"),
    ("text/json", "json"),
    ("application/xml", "xml"),
    ("text/xml", "xml"),
    ("text/plain", "txt"),
)


def resolve_format(accept: str | None) -> str:
    """Map an ``Accept`` header to a template format suffix.

    The first recognised media type wins; anything else renders ``html``.
    """
    if not accept:
        return "html"
    for part in accept.split(","):
        media_type = part.split(";", 1)[0].strip().lower()
        for known, fmt in _FORMATS_BY_MEDIA_TYPE:
            if media_type == known:
                return fmt
        if media_type in ("text/html", "application/xhtml+xml"):
            return "html"
    return "html"


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    ``format`` is the template suffix the request renders with
    (``html``, ``json``, ``xml``, ``txt``). It comes from the ``Accept``
    header unless the dispatcher found an explicit extension on the path.
    """

    method: str
    path: str
    headers: Headers
    query_string: bytes = b""
    format: str = "html"
    http_version: str = "1.1"
    client: tuple[str, int] | None = None

    _receive: Receive | None = field(default=None, repr=False, compare=False)
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @property
    def query(self) -> dict[str, str]:
        """Query parameters, last value wins."""
        return dict(parse_qsl(self.query_string.decode("latin-1"), keep_blank_values=True))

    @property
    def is_head(self) -> bool:
        return self.method == "HEAD"

    def with_format(self, fmt: str) -> Request:
        """Return a copy rendering with another format."""
        return replace(self, format=fmt)

    async def body(self) -> bytes:
        """Read the full request body once and cache it."""
        if "_body" in self._cache:
            return self._cache["_body"]
        chunks: list[bytes] = []
        if self._receive is not None:
            while True:
                message = await self._receive()
                chunks.append(message.get("body", b""))
                if not message.get("more_body", False):
                    break
        result = b"".join(chunks)
        self._cache["_body"] = result
        return result

    @classmethod
    def from_asgi(cls, scope: dict[str, Any], receive: Receive) -> Request:
        """Create a Request from an ASGI scope and receive callable."""
        headers = Headers(tuple(scope.get("headers", ())))
        client = scope.get("client")
        return cls(
            method=scope["method"].upper(),
            path=scope["path"],
            headers=headers,
            query_string=scope.get("query_string", b""),
            format=resolve_format(headers.get("accept")),
            http_version=scope.get("http_version", "1.1"),
            client=tuple(client) if client else None,
            _receive=receive,
        )
