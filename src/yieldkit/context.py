"""Request-scoped context via ContextVar.

``request_var`` holds the current ``Request``. The request handler sets it
before dispatch and resets it afterwards; outside a request, accessing it
raises ``LookupError``.
"""

from contextvars import ContextVar

from yieldkit.http.request import Request

request_var: ContextVar[Request] = ContextVar("yieldkit_request")
"""The current request. Set by the request handler before dispatch."""


def get_request() -> Request:
    """Return the current request.

    Raises ``LookupError`` if called outside a request context.
    """
    return request_var.get()
