"""yieldkit exception hierarchy.

Shared by the template helpers, controllers, layout loader and the request
handler, so every module raises and catches the same types.
"""

from dataclasses import dataclass


class YieldKitError(Exception):
    """Base for all yieldkit-specific errors."""


class ConfigurationError(YieldKitError):
    """Raised when app configuration is invalid."""


class YieldArgumentError(YieldKitError, TypeError):
    """A ``yield`` helper was called with the wrong number or types of arguments."""


class YieldContextError(YieldKitError):
    """The render arguments a ``yield`` needs are missing or were overwritten."""


class TemplateLookupError(YieldKitError, LookupError):
    """A template or layout could not be resolved.

    ``tried`` lists every name that was looked up, in order.
    """

    def __init__(self, name: str, tried: tuple[str, ...] = ()) -> None:
        self.name = name
        self.tried = tried or (name,)
        names = ", ".join(repr(t) for t in self.tried)
        super().__init__(f"Template {name!r} not found (tried {names})")


class LayoutLoadError(YieldKitError):
    """The layout directory could not be scanned or compiled."""


class TemplatePanic(YieldKitError):
    """An unexpected, non-template exception escaped a render."""


@dataclass(frozen=True, slots=True)
class HTTPError(YieldKitError):
    """An error that maps directly to an HTTP status code.

    Raised by the dispatcher or by controller actions. The request handler
    turns it into a plaintext response with the same status.
    """

    status: int
    detail: str = ""

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404: no controller or action matched the request path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)
