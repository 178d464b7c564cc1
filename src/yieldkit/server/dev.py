"""Serve a yieldkit App with pounce.

pounce's ``run()`` takes an import string, but ``App.run()`` has the live
object, so ``pounce.server.Server`` is used directly with the ASGI callable.
"""

import logging

logger = logging.getLogger("yieldkit.server")


def run_server(
    app: object,
    host: str,
    port: int,
    *,
    reload: bool = False,
    reload_include: tuple[str, ...] = (),
    reload_dirs: tuple[str, ...] = (),
    app_path: str | None = None,
) -> None:
    """Start a single-worker pounce server for *app*.

    Args:
        app: ASGI callable (yieldkit App instance).
        host: Bind host address.
        port: Bind port number.
        reload: Restart on file changes (development mode).
        reload_include: Extra file extensions to watch when reload is
            active, e.g. ``(".html",)`` to pick up template edits.
        reload_dirs: Extra directories to watch alongside cwd.
        app_path: Optional ``"module:attribute"`` import string so pounce
            can reimport the app on each reload cycle.
    """
    from pounce.config import ServerConfig
    from pounce.server import Server

    config = ServerConfig(
        host=host,
        port=port,
        workers=1,
        reload=reload,
        reload_include=reload_include,
        reload_dirs=reload_dirs,
    )
    logger.info("Serving on http://%s:%d (reload=%s)", host, port, reload)
    Server(config, app, app_path=app_path).run()
