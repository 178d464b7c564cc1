"""Application configuration.

AppConfig is a frozen dataclass, immutable after creation and passed down
explicitly to everything that renders. Layout settings live here instead of
in module-level state, so they are fixed before the first request is served.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

from yieldkit.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(
            debug=True,
            default_layouts={"html": "application.html"},
        )
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False  # Development mode: always buffer, detailed error pages

    # Reload (development mode, requires debug=True)
    reload_include: tuple[str, ...] = ()
    reload_dirs: tuple[str, ...] = ()

    # Templates
    base_path: str | Path = "."
    template_dir: str | Path = "app/views"
    autoescape: bool = True
    trim_blocks: bool = True
    lstrip_blocks: bool = True

    # Layouts
    layout_dir: str | Path = "app/layouts"
    default_layouts: Mapping[str, str] = field(default_factory=dict)

    # Write the status first and stream the render (ignored in debug mode)
    chunked: bool = False

    def __post_init__(self) -> None:
        if not str(self.layout_dir):
            raise ConfigurationError("layout_dir must not be empty")
        for fmt, name in self.default_layouts.items():
            if not isinstance(fmt, str) or not isinstance(name, str):
                msg = f"default_layouts entries must map str to str, got {fmt!r}: {name!r}"
                raise ConfigurationError(msg)
        object.__setattr__(
            self, "default_layouts", MappingProxyType(dict(self.default_layouts))
        )

    @property
    def template_path(self) -> Path:
        """Directory of the main template index."""
        return Path(self.base_path) / self.template_dir

    @property
    def layout_path(self) -> Path:
        """Directory scanned for layouts."""
        return Path(self.base_path) / self.layout_dir

    def default_layout(self, fmt: str) -> str:
        """Return the default layout for a request format, or ``""``."""
        return self.default_layouts.get(fmt, "")
