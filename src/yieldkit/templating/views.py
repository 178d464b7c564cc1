"""The per-app view runtime handed to controllers and results."""

from dataclasses import dataclass

from kida import Environment, Template, TemplateNotFoundError

from yieldkit.config import AppConfig
from yieldkit.errors import TemplateLookupError
from yieldkit.layouts.loader import LayoutLoader
from yieldkit.templating.integration import template_source


@dataclass(frozen=True, slots=True)
class Views:
    """Configuration plus the two template indexes, built once at freeze time.

    ``env`` is the main view index (``AppConfig.template_dir``);
    ``layouts`` is the lazily loaded layout index.
    """

    config: AppConfig
    env: Environment
    layouts: LayoutLoader

    def template(self, path: str) -> Template:
        """Resolve a view template by path.

        Raises:
            TemplateLookupError: No template with that path exists.
        """
        try:
            return self.env.get_template(path)
        except TemplateNotFoundError as exc:
            raise TemplateLookupError(path) from exc

    def source_lines(self, name: str) -> tuple[str, ...]:
        """Source of a view or layout template, split into lines.

        Looks in the view index first, then in the layouts. A layout that
        failed to load is read straight from the layout directory. Returns
        an empty tuple when nothing has it.
        """
        source = template_source(self.env, name)
        if source is None and self.layouts.loaded:
            source = template_source(self.layouts.environment, name)
        if source is None:
            candidate = self.config.layout_path / name
            if candidate.is_file():
                source = candidate.read_text(encoding="utf-8")
        if source is None:
            return ()
        return tuple(source.splitlines())
