"""Results: what controller actions return.

A result knows how to write itself into a ``ResponseWriter``. The request
handler calls ``apply()`` once per request and finishes the writer
afterwards, so results only write the status, headers and body.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

from kida import TemplateError, TemplateNotFoundError, TemplateSyntaxError

from yieldkit.errors import LayoutLoadError, TemplateLookupError
from yieldkit.http.request import Request
from yieldkit.http.response import CONTENT_TYPES, HTML, PLAINTEXT, ResponseWriter
from yieldkit.server.debug_page import render_error_page
from yieldkit.templating.diagnostics import TemplateErrorReport, describe_render_error
from yieldkit.templating.helpers import active_render_args
from yieldkit.templating.views import Views

logger = logging.getLogger("yieldkit.server")


class Result(Protocol):
    """Anything an action can return."""

    async def apply(self, request: Request, response: ResponseWriter) -> None: ...


async def _write_complete(
    response: ResponseWriter, status: int, content_type: str, body: str
) -> None:
    data = body.encode("utf-8")
    if not response.started:
        response.set_header("Content-Length", str(len(data)))
    await response.write_header(status, content_type)
    await response.write(data)


@dataclass(frozen=True, slots=True)
class RenderTextResult:
    """Write a fixed body."""

    text: str
    status: int = 200
    content_type: str = PLAINTEXT

    async def apply(self, request: Request, response: ResponseWriter) -> None:
        await _write_complete(response, self.status, self.content_type, self.text)


@dataclass(frozen=True, slots=True)
class PlaintextErrorResult:
    """Write an error message as ``text/plain``."""

    error: BaseException | str
    status: int = 500

    async def apply(self, request: Request, response: ResponseWriter) -> None:
        await _write_complete(response, self.status, PLAINTEXT, str(self.error))


@dataclass(slots=True)
class ErrorResult:
    """Render a structured template error as a 500 page.

    Uses the application's own ``errors/<status>.<format>`` template when
    there is one, with ``error`` (the report) and ``dev_mode`` added to the
    render arguments. Falls back to the built-in error page.
    """

    views: Views
    report: TemplateErrorReport
    render_args: dict[str, Any] = field(default_factory=dict)
    status: int = 500

    @classmethod
    def from_exception(
        cls,
        views: Views,
        exc: BaseException,
        render_args: dict[str, Any] | None = None,
    ) -> ErrorResult:
        """Build the report for a failure that happened before rendering started."""
        if isinstance(exc, TemplateLookupError):
            report = TemplateErrorReport(
                title="Template Not Found", path=exc.name, description=str(exc)
            )
        elif isinstance(exc, LayoutLoadError):
            cause = exc.__cause__
            name, line, _ = describe_render_error(cause) if cause else ("", 0, "")
            report = TemplateErrorReport(
                title="Layout Load Error",
                path=name,
                description=str(exc),
                line=line,
                source_lines=views.source_lines(name) if name else (),
            )
        elif isinstance(exc, TemplateError):
            name, line, description = describe_render_error(exc)
            report = TemplateErrorReport(
                title=(
                    "Template Compilation Error"
                    if isinstance(exc, TemplateSyntaxError)
                    else "Template Execution Error"
                ),
                path=name,
                description=description,
                line=line,
                source_lines=views.source_lines(name) if name else (),
            )
        else:
            report = TemplateErrorReport(
                title=type(exc).__name__, path="", description=str(exc)
            )
        return cls(views=views, report=report, render_args=dict(render_args or {}))

    async def apply(self, request: Request, response: ResponseWriter) -> None:
        body, content_type = self._render_page(request.format)
        await _write_complete(response, self.status, content_type, body)

    def _render_page(self, fmt: str) -> tuple[str, str]:
        name = f"errors/{self.status}.{fmt}"
        try:
            template = self.views.env.get_template(name)
        except TemplateNotFoundError:
            template = None
        except TemplateError:
            logger.exception("Error template %s failed to compile", name)
            template = None

        if template is not None:
            args = {**self.render_args, "error": self.report, "dev_mode": self.views.config.debug}
            try:
                with active_render_args(args):
                    return template.render(args), CONTENT_TYPES.get(fmt, HTML)
            except TemplateError:
                logger.exception("Error template %s failed to render", name)

        return render_error_page(self.report, debug=self.views.config.debug), HTML
