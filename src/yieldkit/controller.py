"""Base controller.

A controller is a class whose public methods are actions. The request
handler creates one instance per request, so per-request state (the
render arguments, the action name) lives on ``self``::

    @app.controller
    class Hotels(Controller):
        def index(self):
            self.render_args["hotels"] = list_hotels()
            return self.render_template("Hotels/index.html")
"""

from collections.abc import Callable
from typing import Any

from kida import TemplateError

from yieldkit.errors import YieldKitError
from yieldkit.http.request import Request
from yieldkit.http.response import PLAINTEXT
from yieldkit.layouts.result import LayoutTemplateResult
from yieldkit.results import ErrorResult, RenderTextResult, Result
from yieldkit.templating.views import Views

_RENDER_ARGS_ATTR = "__yieldkit_render_args__"


def render_args[F: Callable[..., Any]](*names: str) -> Callable[[F], F]:
    """Declare the render-argument names positional ``render()`` args bind to.

    Usage::

        @render_args("hotel", "booking")
        def confirm(self, hotel_id: str):
            ...
            return self.render(hotel, booking)

    Inside ``confirm`` the call above is the same as
    ``self.render(hotel=hotel, booking=booking)``.
    """

    def decorator(func: F) -> F:
        setattr(func, _RENDER_ARGS_ATTR, tuple(names))
        return func

    return decorator


def declared_render_args(func: Callable[..., Any] | None) -> tuple[str, ...]:
    """Names declared on an action with ``@render_args``, or ``()``."""
    if func is None:
        return ()
    return getattr(func, _RENDER_ARGS_ATTR, ())


class Controller:
    """Base class for application controllers.

    ``name`` defaults to the class name and is the first segment of the
    URL (``/Hotels/index``) and of the default template path
    (``Hotels/index.html``).
    """

    name: str = ""

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if "name" not in cls.__dict__:
            cls.name = cls.__name__

    def __init__(self, request: Request, views: Views, action: str = "") -> None:
        self.request = request
        self.views = views
        self.action = action
        self.render_args: dict[str, Any] = {
            "controller": self.name,
            "action": action,
        }

    @classmethod
    def actions(cls) -> frozenset[str]:
        """Public methods declared by application subclasses."""
        found: set[str] = set()
        for klass in cls.__mro__:
            if klass.__module__.startswith("yieldkit.") or klass is object:
                continue
            for attr, value in vars(klass).items():
                if attr.startswith("_") or not callable(value):
                    continue
                if isinstance(value, (classmethod, staticmethod)):
                    continue
                found.add(attr)
        return frozenset(found)

    @property
    def format(self) -> str:
        return self.request.format

    def render_template(self, path: str) -> Result:
        """Render a single template from the view index, without a layout."""
        try:
            template = self.views.template(path)
        except (YieldKitError, TemplateError) as exc:
            return self.render_error(exc)
        return LayoutTemplateResult(
            template=template,
            layout=None,
            render_args=self.render_args,
            views=self.views,
        )

    def render_text(
        self, text: str, status: int = 200, content_type: str = PLAINTEXT
    ) -> Result:
        return RenderTextResult(text, status=status, content_type=content_type)

    def render_error(self, exc: BaseException) -> Result:
        """Turn a lookup or template failure into a 500 error page."""
        return ErrorResult.from_exception(self.views, exc, self.render_args)
