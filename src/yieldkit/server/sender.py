"""ASGI message construction for response writers.

Keeps the byte-level header encoding and the no-body status rules in one
place; ``ResponseWriter`` decides *when* each message goes out.
"""

from collections.abc import Iterable

from yieldkit._internal.asgi import Send


def body_allowed(status: int) -> bool:
    """Whether an HTTP status code permits a response body."""
    # RFC: 1xx, 204, and 304 responses do not include a message body.
    return not (100 <= status < 200 or status in {204, 304})


def encode_headers(
    content_type: str | None,
    headers: Iterable[tuple[str, str]],
) -> list[tuple[bytes, bytes]]:
    """Encode headers as lowercase latin-1 byte pairs, content type first."""
    raw: list[tuple[bytes, bytes]] = []
    if content_type:
        raw.append((b"content-type", content_type.encode("latin-1")))
    raw.extend(
        (name.lower().encode("latin-1"), value.encode("latin-1"))
        for name, value in headers
        if name.lower() != "content-type"
    )
    return raw


async def send_start(
    send: Send,
    status: int,
    content_type: str | None,
    headers: Iterable[tuple[str, str]],
) -> None:
    await send(
        {
            "type": "http.response.start",
            "status": status,
            "headers": encode_headers(content_type, headers),
        }
    )


async def send_body(send: Send, body: bytes, *, more_body: bool) -> None:
    await send(
        {
            "type": "http.response.body",
            "body": body,
            "more_body": more_body,
        }
    )
