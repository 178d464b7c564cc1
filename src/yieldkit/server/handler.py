"""ASGI request handler: translates ASGI scope/messages to yieldkit types.

Dispatch is by convention, with no route table: ``/<Controller>/<action>``
calls ``action`` on a fresh instance of the controller registered under
that name. An extension on the action (``/Hotels/show.json``) overrides
the format negotiated from the ``Accept`` header. ``/`` goes to the root
action when the app declares one.
"""

import inspect
import logging
from collections.abc import Callable, Mapping
from contextvars import Token
from typing import Any

from kida import TemplateError

from yieldkit._internal.asgi import Receive, Scope, Send
from yieldkit._internal.invoke import invoke
from yieldkit.context import request_var
from yieldkit.controller import Controller
from yieldkit.errors import HTTPError, NotFound, YieldKitError
from yieldkit.http.request import Request
from yieldkit.http.response import CONTENT_TYPES, ResponseWriter
from yieldkit.results import ErrorResult, PlaintextErrorResult, RenderTextResult, Result
from yieldkit.templating.views import Views

logger = logging.getLogger("yieldkit.server")


def parse_path(
    path: str, root: tuple[str, str] | None = None
) -> tuple[str, str, str | None]:
    """Split a request path into ``(controller, action, format)``.

    ``format`` is ``None`` unless the action carries a known extension.

    Raises:
        NotFound: The path is not ``/<Controller>/<action>[.<format>]``.
    """
    segments = [s for s in path.split("/") if s]
    if not segments:
        if root is None:
            raise NotFound("No root action configured")
        return root[0], root[1], None
    if len(segments) != 2:
        raise NotFound(f"No action for {path}")

    controller, action = segments
    fmt: str | None = None
    stem, dot, ext = action.rpartition(".")
    if dot and stem and ext in CONTENT_TYPES:
        action, fmt = stem, ext
    return controller, action, fmt


def resolve_controller(
    controllers: Mapping[str, type[Controller]], name: str, action: str
) -> type[Controller]:
    """Find the controller class serving *action*.

    Raises:
        NotFound: Unknown controller, or no such public action on it.
    """
    cls = controllers.get(name.lower())
    if cls is None:
        raise NotFound(f"Unknown controller {name!r}")
    if action not in cls.actions():
        raise NotFound(f"{cls.name} has no action {action!r}")
    return cls


# Query value conversion by annotation
_COERCIONS: dict[type, Callable[[str], Any]] = {
    str: str,
    int: int,
    float: float,
    bool: lambda v: v.lower() in ("true", "1", "yes", "on"),
}


def build_action_kwargs(action: Callable[..., Any], request: Request) -> dict[str, Any]:
    """Bind query parameters to the action's parameters by name.

    ``str``, ``int``, ``float`` and ``bool`` annotations are converted; a
    value that does not convert, or any other annotation, is passed as the
    raw string.
    """
    sig = inspect.signature(action, eval_str=True)
    query = request.query
    kwargs: dict[str, Any] = {}
    for name, param in sig.parameters.items():
        if name == "request" or param.annotation is Request:
            kwargs[name] = request
        elif name in query:
            value = query[name]
            coerce = _COERCIONS.get(param.annotation)
            if coerce is None:
                kwargs[name] = value
                continue
            try:
                kwargs[name] = coerce(value)
            except ValueError:
                kwargs[name] = value
    return kwargs


def to_result(value: Any) -> Result:
    """Normalize an action's return value to a ``Result``."""
    if isinstance(value, str):
        return RenderTextResult(value)
    if hasattr(value, "apply"):
        return value
    msg = f"Cannot convert {type(value).__name__} to a result"
    raise TypeError(msg)


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    controllers: Mapping[str, type[Controller]],
    views: Views,
    root: tuple[str, str] | None = None,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)
    response = ResponseWriter(send, discard_body=request.is_head)
    token: Token[Request] = request_var.set(request)

    controller: Controller | None = None
    try:
        try:
            name, action, fmt = parse_path(request.path, root)
            if fmt is not None:
                request = request.with_format(fmt)
                request_var.set(request)
            cls = resolve_controller(controllers, name, action)
            controller = cls(request, views, action)
            method = getattr(controller, action)
            result = to_result(await invoke(method, **build_action_kwargs(method, request)))
        except HTTPError as exc:
            result = PlaintextErrorResult(exc.detail or str(exc), status=exc.status)
        except (YieldKitError, TemplateError) as exc:
            logger.error("%s %s failed: %s", request.method, request.path, exc)
            render_args = controller.render_args if controller is not None else None
            result = ErrorResult.from_exception(views, exc, render_args)
        except Exception:
            logger.exception("Unhandled error in %s %s", request.method, request.path)
            result = PlaintextErrorResult("Internal Server Error")

        try:
            await result.apply(request, response)
        except Exception:
            logger.exception("Result failed in %s %s", request.method, request.path)
            if not response.started:
                await PlaintextErrorResult("Internal Server Error").apply(request, response)
    finally:
        request_var.reset(token)
        await response.finish()
