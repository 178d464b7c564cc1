"""Lazily loaded layout index.

Layouts live in their own directory (``AppConfig.layout_dir``) and their
own kida environment. The environment is built the first time a layout is
needed: every template in the directory is compiled up front so a broken
layout fails the first layout render instead of some later request.
"""

import logging
import threading
from collections.abc import Callable
from typing import Any

from kida import Environment, Template, TemplateNotFoundError, TemplateSyntaxError

from yieldkit.config import AppConfig
from yieldkit.errors import LayoutLoadError, TemplateLookupError
from yieldkit.templating.integration import create_environment

logger = logging.getLogger("yieldkit.layouts")


class LayoutLoader:
    """The layout template index, loaded on first use.

    Thread safety:
        Loading uses a Lock + double-check so exactly one thread scans the
        directory. A failed load is not cached; the next caller retries.
    """

    __slots__ = ("_config", "_env", "_filters", "_globals", "_lock")

    def __init__(
        self,
        config: AppConfig,
        *,
        filters: dict[str, Callable[..., Any]] | None = None,
        globals_: dict[str, Any] | None = None,
    ) -> None:
        self._config = config
        self._filters = filters or {}
        self._globals = globals_ or {}
        self._env: Environment | None = None
        self._lock = threading.Lock()

    @property
    def loaded(self) -> bool:
        return self._env is not None

    @property
    def environment(self) -> Environment:
        """The layout environment, loading it if needed.

        Raises:
            LayoutLoadError: The directory is missing or a layout does not compile.
        """
        env = self._env
        if env is not None:
            return env
        with self._lock:
            if self._env is None:
                self._env = self._load()
            return self._env

    def reset(self) -> None:
        """Forget the loaded layouts; the next use rescans the directory."""
        with self._lock:
            self._env = None

    def template(self, name: str, fmt: str) -> Template:
        """Resolve a layout by name, retrying with the request format appended.

        ``layout("application")`` therefore finds ``application.html`` for an
        HTML request and ``application.xml`` for an XML one.
        """
        if not name:
            raise TemplateLookupError(name, ("",))
        env = self.environment
        tried = (name, f"{name}.{fmt}")
        for candidate in tried:
            try:
                return env.get_template(candidate)
            except TemplateNotFoundError:
                continue
        raise TemplateLookupError(name, tried)

    def _load(self) -> Environment:
        path = self._config.layout_path
        if not path.is_dir():
            raise LayoutLoadError(f"Layout directory {str(path)!r} does not exist")

        env = create_environment(self._config, path, self._filters, self._globals)
        names = env.loader.list_templates()
        for name in names:
            try:
                env.get_template(name)
            except TemplateSyntaxError as exc:
                raise LayoutLoadError(f"Layout {name!r} failed to compile: {exc}") from exc

        logger.debug("Loaded %d layout(s) from %s", len(names), path)
        return env
