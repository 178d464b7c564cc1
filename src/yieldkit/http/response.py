"""HTTP response types.

``ResponseWriter`` is the mutable handle results write into while a
request is being served: headers and status can change until the first
``write_header``, after which only body bytes go out.

``Response`` is the frozen, fully received response the test client
returns.
"""

import logging
from dataclasses import dataclass

from yieldkit._internal.asgi import Send
from yieldkit.server.sender import body_allowed, send_body, send_start

logger = logging.getLogger("yieldkit.server")

HTML = "text/html; charset=utf-8"
PLAINTEXT = "text/plain; charset=utf-8"

CONTENT_TYPES: dict[str, str] = {
    "html": HTML,
    "json": "application/json",
    "xml": "application/xml; charset=utf-8",
    "txt": PLAINTEXT,
}


class ResponseWriter:
    """Mutable response over an ASGI ``send`` callable.

    Nothing is sent until ``write_header()`` (explicitly, or implicitly by
    the first ``write()``). A second ``write_header()`` is logged and
    ignored, mirroring what an HTTP server does with a superfluous status
    line. With ``discard_body`` set (HEAD requests) body bytes are counted
    but never sent.
    """

    __slots__ = (
        "_finished",
        "_send",
        "_started",
        "bytes_discarded",
        "bytes_written",
        "content_type",
        "discard_body",
        "headers",
        "status",
    )

    def __init__(self, send: Send, *, discard_body: bool = False) -> None:
        self._send = send
        self._started = False
        self._finished = False
        self.status = 200
        self.content_type: str | None = HTML
        self.headers: list[tuple[str, str]] = []
        self.discard_body = discard_body
        self.bytes_written = 0
        self.bytes_discarded = 0

    @property
    def started(self) -> bool:
        """True once the status line and headers have been sent."""
        return self._started

    @property
    def finished(self) -> bool:
        return self._finished

    def set_header(self, name: str, value: str) -> None:
        """Set a header, replacing any previous value with the same name."""
        lowered = name.lower()
        self.headers = [(n, v) for n, v in self.headers if n.lower() != lowered]
        self.headers.append((name, value))

    def get_header(self, name: str) -> str | None:
        lowered = name.lower()
        for n, v in self.headers:
            if n.lower() == lowered:
                return v
        return None

    def discard(self) -> None:
        """Stop sending body bytes for the rest of this response."""
        self.discard_body = True

    async def write_header(self, status: int, content_type: str | None = None) -> None:
        """Send the status line and headers."""
        if self._started:
            logger.warning(
                "Superfluous write_header(%d) after the response started with %d",
                status,
                self.status,
            )
            return
        self.status = status
        if content_type is not None:
            self.content_type = content_type
        self._started = True
        await send_start(self._send, self.status, self.content_type, self.headers)

    async def write(self, data: str | bytes) -> None:
        """Send body bytes, starting the response with the current status if needed."""
        if not self._started:
            await self.write_header(self.status)
        chunk = data.encode("utf-8") if isinstance(data, str) else data
        if not chunk or self._finished:
            return
        if self.discard_body or not body_allowed(self.status):
            self.bytes_discarded += len(chunk)
            return
        self.bytes_written += len(chunk)
        await send_body(self._send, chunk, more_body=True)

    async def finish(self) -> None:
        """Close the response. Safe to call more than once."""
        if self._finished:
            return
        if not self._started:
            await self.write_header(self.status)
        self._finished = True
        await send_body(self._send, b"", more_body=False)


@dataclass(frozen=True, slots=True)
class Response:
    """A complete HTTP response as received by a client."""

    body: bytes = b""
    status: int = 200
    content_type: str = HTML
    headers: tuple[tuple[str, str], ...] = ()

    @property
    def text(self) -> str:
        """Body as string."""
        return self.body.decode("utf-8")

    def header(self, name: str) -> str | None:
        """Return the first value of a header, case-insensitively."""
        lowered = name.lower()
        for n, v in self.headers:
            if n.lower() == lowered:
                return v
        return None
