"""Kida environment setup.

Every environment yieldkit creates (the main view index and the layout
index) goes through ``create_environment`` so both carry the same yield
helpers and the same user filters and globals.
"""

from collections.abc import Callable
from pathlib import Path
from typing import Any

from kida import Environment, FileSystemLoader, TemplateNotFoundError

from yieldkit.config import AppConfig
from yieldkit.templating.helpers import YIELD_HELPERS


def create_environment(
    config: AppConfig,
    search_path: str | Path,
    filters: dict[str, Callable[..., Any]] | None = None,
    globals_: dict[str, Any] | None = None,
) -> Environment:
    """Create a kida Environment rooted at *search_path*.

    Called once per index while the app freezes (the layout index lazily,
    on first use). The returned environment is not mutated afterwards.
    """
    env = Environment(
        loader=FileSystemLoader(str(search_path)),
        autoescape=config.autoescape,
        auto_reload=config.debug,
        trim_blocks=config.trim_blocks,
        lstrip_blocks=config.lstrip_blocks,
    )

    if filters:
        env.update_filters(filters)

    for name, value in YIELD_HELPERS.items():
        env.add_global(name, value)

    # User globals may shadow the helpers on purpose
    for name, value in (globals_ or {}).items():
        env.add_global(name, value)

    return env


def template_source(env: Environment, name: str) -> str | None:
    """Return the raw source of *name* from *env*'s loader, or ``None``."""
    loader = getattr(env, "loader", None)
    if loader is None:
        return None
    try:
        source, _filename = loader.get_source(name)
    except (TemplateNotFoundError, OSError, UnicodeDecodeError):
        return None
    return source
