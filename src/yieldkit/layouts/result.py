"""The result returned when a controller renders a view, with or without a layout.

``apply()`` publishes the content blocks to the yield helpers, renders
the layout (or the view when there is none) and writes the output.

Two write policies:

- **Buffered** (default, and always in debug mode): render the whole page
  first, then send ``Content-Length``, 200 and the body. A template error
  turns into a clean 500 page; no partial page ever reaches the client.
- **Direct** (``AppConfig(chunked=True)`` outside debug mode): send 200
  immediately and stream the output as it renders. Lower latency and
  memory, but an error late in the template can only be appended to a
  response that is already a partial 200.

Template errors (kida's ``TemplateError`` family and yieldkit's own
errors raised from helpers) become a structured error page pointing at
the failing template and line. Anything else is treated as a crash in the
render and reported as a plaintext 500.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

import anyio.to_thread
from kida import Template, TemplateError

from yieldkit.errors import TemplatePanic, YieldKitError
from yieldkit.http.request import Request
from yieldkit.http.response import CONTENT_TYPES, HTML, ResponseWriter
from yieldkit.results import ErrorResult, PlaintextErrorResult
from yieldkit.templating.diagnostics import TemplateErrorReport, describe_render_error
from yieldkit.templating.helpers import CONTENT_FOR_ITEMS, active_render_args
from yieldkit.templating.views import Views

logger = logging.getLogger("yieldkit.layouts")

RENDER_ERRORS = (TemplateError, YieldKitError)
"""Exceptions reported as structured template errors rather than crashes."""


@dataclass(frozen=True, slots=True)
class RenderOutcome:
    """Output of one render: the body, or the template error that stopped it."""

    body: str = ""
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(slots=True)
class LayoutTemplateResult:
    """Render ``template``, wrapped in ``layout`` when one is set.

    ``render_tmpl`` holds the named content blocks registered with
    ``content_for``; the page itself is added under ``""`` when applied.
    """

    template: Template
    layout: Template | None
    render_args: dict[str, Any]
    views: Views
    render_tmpl: dict[str, Template] = field(default_factory=dict)

    @property
    def target(self) -> Template:
        """The template rendered at the top level."""
        return self.layout if self.layout is not None else self.template

    async def apply(self, request: Request, response: ResponseWriter) -> None:
        try:
            await self._apply(request, response)
        except Exception as exc:
            logger.exception("Template execution panic in %s", self.template.name)
            panic = TemplatePanic(f"Template Execution Panic in {self.template.name}:\n{exc}")
            await PlaintextErrorResult(panic).apply(request, response)

    async def _apply(self, request: Request, response: ResponseWriter) -> None:
        config = self.views.config
        self.render_tmpl[""] = self.template
        self.render_args[CONTENT_FOR_ITEMS] = self.render_tmpl

        # HEAD: still render (to surface errors), never send the bytes
        if request.is_head:
            response.discard()

        if config.chunked and not config.debug:
            await self._apply_direct(request, response)
            return

        outcome = await anyio.to_thread.run_sync(self.render)
        if not outcome.ok:
            await self._render_error(request, response, outcome.error)
            return

        body = outcome.body.encode("utf-8")
        if not config.chunked:
            response.set_header("Content-Length", str(len(body)))
        await response.write_header(200, CONTENT_TYPES.get(request.format, HTML))
        await response.write(body)

    def render(self) -> RenderOutcome:
        """Render the target to a string.

        Template errors are returned in the outcome; any other exception
        propagates to ``apply()``.
        """
        with active_render_args(self.render_args):
            try:
                return RenderOutcome(body=self.target.render(self.render_args))
            except RENDER_ERRORS as exc:
                return RenderOutcome(error=exc)

    async def _apply_direct(self, request: Request, response: ResponseWriter) -> None:
        await response.write_header(200, CONTENT_TYPES.get(request.format, HTML))
        with active_render_args(self.render_args):
            try:
                for chunk in self.target.render_stream(self.render_args):
                    await response.write(chunk)
            except RENDER_ERRORS as exc:
                # Status and part of the page are already out
                logger.error(
                    "Template error after %d byte(s) were streamed: %s",
                    response.bytes_written,
                    exc,
                )
                await self._render_error(request, response, exc)

    async def _render_error(
        self, request: Request, response: ResponseWriter, exc: Exception
    ) -> None:
        template_name, line, description = describe_render_error(exc)
        if not template_name:
            template_name = self.target.name or ""
        source_lines = self.views.source_lines(template_name) if template_name else ()

        report = TemplateErrorReport(
            title="Layout Execution Error",
            path=template_name,
            description=description,
            line=line,
            source_lines=source_lines,
        )
        response.status = 500
        logger.error("Template Execution Error (in %s): %s", template_name, description)
        await ErrorResult(self.views, report, self.render_args).apply(request, response)
