"""Layout-aware controller.

Adds layouts and named content regions to ``Controller``::

    @app.controller
    class Hotels(LayoutController):
        @render_args("hotel")
        def show(self, hotel_id: str = ""):
            hotel = find_hotel(hotel_id)
            self.content_for("sidebar", "sidebar.html")  # or Hotels/sidebar.html
            return self.render(hotel)

``render()`` picks ``Hotels/show.<format>`` from the view index and wraps
it in the layout chosen with ``layout()`` or configured per format in
``AppConfig.default_layouts``. The layout pulls the page in with
``{{ yield_content() }}`` and the sidebar with
``{{ yield_content("sidebar") }}``.
"""

import logging
from typing import Any

from kida import Template, TemplateError

from yieldkit.controller import Controller, declared_render_args
from yieldkit.errors import LayoutLoadError, TemplateLookupError, YieldKitError
from yieldkit.http.request import Request
from yieldkit.layouts.result import LayoutTemplateResult
from yieldkit.results import Result
from yieldkit.templating.views import Views

logger = logging.getLogger("yieldkit.layouts")


class LayoutController(Controller):
    """Controller with ``layout``, ``content_for`` and layout-aware ``render``."""

    def __init__(self, request: Request, views: Views, action: str = "") -> None:
        super().__init__(request, views, action)
        self.render_tmpl: dict[str, Template] = {}
        self.layout_path = ""
        self._no_layout = False

    @property
    def no_layout(self) -> bool:
        return self._no_layout

    def layout(self, name: str) -> None:
        """Use layout *name* for this render; ``""`` renders without a layout.

        Once disabled with ``""`` the layout stays off for the rest of the
        request, whatever is set later or configured for the format.
        """
        if not name:
            self._no_layout = True
            return
        self.layout_path = name

    def content_for(self, yield_name: str, template_name: str) -> None:
        """Register *template_name* as the content of region *yield_name*.

        The name is resolved as given, then scoped to this controller
        (``<ControllerName>/<template_name>``).

        Raises:
            TemplateLookupError: Neither name exists in the view index.
        """
        tried = (template_name, f"{self.name}/{template_name}")
        for candidate in tried:
            try:
                template = self.views.template(candidate)
            except TemplateLookupError:
                continue
            self.render_tmpl[yield_name] = template
            return
        raise TemplateLookupError(template_name, tried)

    def render(self, *args: Any, **kwargs: Any) -> Result:
        """Render ``<ControllerName>/<action>.<format>``, in a layout when one applies.

        Keyword arguments are added to the render arguments. Positional
        arguments bind to the names declared on the action with
        ``@render_args``; when the counts differ they are dropped with a
        warning and the page renders anyway.
        """
        if args:
            self._bind_positional(args)
        self.render_args.update(kwargs)

        path = f"{self.name}/{self.action}.{self.format}"
        if self.resolve_layout():
            return self.render_template_with_layout(path)
        return self.render_template(path)

    def resolve_layout(self) -> str:
        """The layout this render uses, or ``""`` for none.

        Disabled by ``layout("")``. Otherwise an explicit ``layout(name)``
        wins, then the default configured for the request format.
        """
        if self._no_layout:
            return ""
        if self.layout_path:
            return self.layout_path
        default = self.views.config.default_layout(self.format)
        if default:
            self.layout_path = default
        return default

    def render_template_with_layout(self, path: str) -> Result:
        """Render *path* wrapped in the current layout.

        Loads the layout index on first use, before the page is looked up,
        so a broken layout directory is reported ahead of a missing page.
        Load, lookup and compile failures become an error result instead of
        raising.
        """
        layout_name = self.layout_path or self.resolve_layout()
        try:
            layout = self.views.layouts.template(layout_name, self.format)
            template = self.views.template(path)
        except (YieldKitError, TemplateError) as exc:
            if isinstance(exc, LayoutLoadError):
                logger.error("Failed to load layouts: %s", exc)
            return self.render_error(exc)

        return LayoutTemplateResult(
            template=template,
            layout=layout,
            render_args=self.render_args,
            views=self.views,
            render_tmpl=self.render_tmpl,
        )

    def _bind_positional(self, args: tuple[Any, ...]) -> None:
        action = getattr(type(self), self.action, None) if self.action else None
        names = declared_render_args(action)
        if not names:
            logger.warning(
                "%s.%s: render() got %d positional argument(s) but the action "
                "declares no @render_args names; ignoring them",
                self.name,
                self.action,
                len(args),
            )
            return
        if len(names) != len(args):
            logger.warning(
                "%s.%s: render() got %d positional argument(s) for %d declared "
                "name(s) %s; ignoring them",
                self.name,
                self.action,
                len(args),
                len(names),
                names,
            )
            return
        self.render_args.update(zip(names, args, strict=True))
