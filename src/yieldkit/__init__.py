"""yieldkit: layouts, ``content_for`` and ``yield`` for kida-rendered controllers.

Basic usage::

    from yieldkit import App, AppConfig, LayoutController

    app = App(AppConfig(default_layouts={"html": "application.html"}))

    @app.controller
    class Hotels(LayoutController):
        def index(self):
            self.content_for("sidebar", "sidebar.html")
            return self.render(hotels=list_hotels())

    app.run()

``app/layouts/application.html``::

    <aside>{{ yield_content("sidebar") }}</aside>
    <main>{{ yield_content() }}</main>
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "ConfigurationError",
    "Controller",
    "HTTPError",
    "LayoutController",
    "LayoutLoadError",
    "LayoutTemplateResult",
    "NotFound",
    "Request",
    "TemplateLookupError",
    "YieldArgumentError",
    "YieldContextError",
    "YieldKitError",
    "could_yield",
    "get_request",
    "render_args",
    "yield_content",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import yieldkit`` fast while providing a clean top-level API.
    """
    if name == "App":
        from yieldkit.app import App

        return App

    if name == "AppConfig":
        from yieldkit.config import AppConfig

        return AppConfig

    if name == "Request":
        from yieldkit.http.request import Request

        return Request

    if name in ("Controller", "render_args"):
        from yieldkit import controller as _controller

        return getattr(_controller, name)

    if name == "LayoutController":
        from yieldkit.layouts.controller import LayoutController

        return LayoutController

    if name == "LayoutTemplateResult":
        from yieldkit.layouts.result import LayoutTemplateResult

        return LayoutTemplateResult

    if name in ("could_yield", "yield_content"):
        from yieldkit.templating import helpers as _helpers

        return getattr(_helpers, name)

    if name == "get_request":
        from yieldkit.context import get_request

        return get_request

    if name in (
        "ConfigurationError",
        "HTTPError",
        "LayoutLoadError",
        "NotFound",
        "TemplateLookupError",
        "YieldArgumentError",
        "YieldContextError",
        "YieldKitError",
    ):
        from yieldkit import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
