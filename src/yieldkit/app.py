"""yieldkit application class.

Mutable during setup (controller registration, filters, globals).
Frozen at runtime when ``app.run()`` or ``__call__()`` is first invoked.
"""

import inspect
import logging
import threading
from collections.abc import Callable
from typing import Any

from yieldkit._internal.asgi import Receive, Scope, Send
from yieldkit.config import AppConfig
from yieldkit.controller import Controller
from yieldkit.layouts.loader import LayoutLoader
from yieldkit.server.handler import handle_request
from yieldkit.templating.integration import create_environment
from yieldkit.templating.views import Views

logger = logging.getLogger("yieldkit.server")


class App:
    """The yieldkit application.

    Usage::

        app = App(AppConfig(default_layouts={"html": "application.html"}))

        @app.controller
        class Hotels(LayoutController):
            def index(self):
                return self.render()

        app.root(Hotels, "index")
        app.run()

    Thread safety:
        The setup phase is single-threaded (decorators at import time).
        The freeze transition uses a Lock + double-check so exactly one
        thread builds the template indexes, even when several workers call
        ``__call__()`` concurrently on first request.
    """

    __slots__ = (
        "_controllers",
        "_freeze_lock",
        "_frozen",
        "_root",
        "_shutdown_hooks",
        "_startup_hooks",
        "_template_filters",
        "_template_globals",
        "_views",
        "config",
    )

    def __init__(self, config: AppConfig | None = None) -> None:
        self.config: AppConfig = config or AppConfig()
        self._controllers: dict[str, type[Controller]] = {}
        self._root: tuple[str, str] | None = None
        self._template_filters: dict[str, Callable[..., Any]] = {}
        self._template_globals: dict[str, Any] = {}
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()

        # Compiled state, set during _freeze()
        self._views: Views | None = None

    # -- Controller registration --

    def controller[C: type[Controller]](self, cls: C) -> C:
        """Register a controller class under its ``name``.

        URLs match the name case-insensitively: ``/hotels/index`` and
        ``/Hotels/index`` reach the same action.
        """
        self._check_not_frozen()
        if not (isinstance(cls, type) and issubclass(cls, Controller)):
            msg = f"{cls!r} is not a Controller subclass"
            raise TypeError(msg)
        key = cls.name.lower()
        if key in self._controllers and self._controllers[key] is not cls:
            msg = f"Controller name {cls.name!r} is already registered"
            raise ValueError(msg)
        self._controllers[key] = cls
        return cls

    def root(self, controller: type[Controller] | str, action: str = "index") -> None:
        """Serve ``/`` with *action* of *controller*."""
        self._check_not_frozen()
        name = controller if isinstance(controller, str) else controller.name
        self._root = (name, action)

    @property
    def controllers(self) -> dict[str, type[Controller]]:
        """Registered controllers by lower-cased name."""
        return dict(self._controllers)

    # -- Template integration --

    def template_filter(
        self,
        name: str | None = None,
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Register a kida template filter in the view and layout indexes."""

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self._check_not_frozen()
            self._template_filters[name or func.__name__] = func
            return func

        return decorator

    def template_global(
        self,
        name: str | None = None,
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Register a kida template global in the view and layout indexes."""

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self._check_not_frozen()
            self._template_globals[name or func.__name__] = func
            return func

        return decorator

    # -- Lifecycle hooks --

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register a sync or async hook run during ASGI lifespan startup."""
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register a sync or async hook run during ASGI lifespan shutdown."""
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    # -- Runtime state --

    @property
    def views(self) -> Views:
        """The template indexes, freezing the app if needed."""
        self._ensure_frozen()
        assert self._views is not None
        return self._views

    # -- Server --

    def run(
        self,
        host: str | None = None,
        port: int | None = None,
        *,
        app_path: str | None = None,
    ) -> None:
        """Freeze the app and serve it with pounce.

        Development mode (``debug=True``) enables reload on file changes.
        """
        self._ensure_frozen()

        from yieldkit.server.dev import run_server

        run_server(
            self,
            host or self.config.host,
            port or self.config.port,
            reload=self.config.debug,
            reload_include=self.config.reload_include,
            reload_dirs=self.config.reload_dirs,
            app_path=app_path,
        )

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        self._ensure_frozen()
        assert self._views is not None

        await handle_request(
            scope,
            receive,
            send,
            controllers=self._controllers,
            views=self._views,
            root=self._root,
        )

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol.

        Freezes the app at startup, before the first HTTP request.
        """
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    self._ensure_frozen()
                    for hook in self._startup_hooks:
                        result = hook()
                        if inspect.isawaitable(result):
                            await result
                    await send({"type": "lifespan.startup.complete"})
                except Exception as exc:
                    logger.exception("Startup failed")
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return

            elif msg_type == "lifespan.shutdown":
                for hook in self._shutdown_hooks:
                    result = hook()
                    if inspect.isawaitable(result):
                        await result
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Build the view index, the (lazy) layout index and ``Views``.

        MUST only be called while holding _freeze_lock.
        """
        env = create_environment(
            self.config,
            self.config.template_path,
            self._template_filters,
            self._template_globals,
        )
        layouts = LayoutLoader(
            self.config,
            filters=self._template_filters,
            globals_=self._template_globals,
        )
        self._views = Views(config=self.config, env=env, layouts=layouts)

        if not self.config.template_path.is_dir():
            logger.warning("Template directory %s does not exist", self.config.template_path)
        logger.debug(
            "Frozen with %d controller(s): %s",
            len(self._controllers),
            ", ".join(sorted(c.name for c in self._controllers.values())),
        )
        self._frozen = True

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Register controllers and filters before calling app.run()."
            )
            raise RuntimeError(msg)
