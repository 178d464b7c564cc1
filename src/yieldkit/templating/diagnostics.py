"""Template error diagnostics.

Turns a failed render into the structured report the error pages show:
which template, which line, what went wrong, and the template source
around it.

kida exceptions carry the template name and line as attributes; other
errors (including ones raised by helpers and re-wrapped) only have a
message, so the message is parsed for an embedded ``<path>:<line>:``
location as a fallback.
"""

import logging
import re
from dataclasses import dataclass

from kida import TemplateSyntaxError

logger = logging.getLogger("yieldkit.templating")

_LOCATION_RE = re.compile(r":(\d+):")


@dataclass(frozen=True, slots=True)
class TemplateErrorReport:
    """A compile or runtime template error, ready for display.

    ``line`` is 1-based; 0 means unknown. ``source_lines`` is the full
    template source split into lines (may be empty).
    """

    title: str
    path: str
    description: str
    line: int = 0
    source_lines: tuple[str, ...] = ()

    def context_lines(self, radius: int = 5) -> list[tuple[int, str]]:
        """Return ``(lineno, text)`` pairs around ``line`` for display."""
        if not self.source_lines:
            return []
        if self.line <= 0:
            return list(enumerate(self.source_lines, start=1))
        start = max(1, self.line - radius)
        end = min(len(self.source_lines), self.line + radius)
        return [(n, self.source_lines[n - 1]) for n in range(start, end + 1)]


def parse_template_error(message: str) -> tuple[str, int, str]:
    """Split a template error message into ``(template_name, line, description)``.

    Parses messages like::

        html/template:Application/Register.html:36: no such template "footer.html"

    into ``("Application/Register.html", 36, ' no such template "footer.html"')``.
    When no ``:<line>:`` location is present the name is empty, the line is
    0 and the description is the whole message.
    """
    match = _LOCATION_RE.search(message)
    if match is None:
        return "", 0, message

    try:
        line = int(match.group(1))
    except ValueError:
        logger.error("Failed to parse line number from error message: %r", message)
        line = 0

    template_name = message[: match.start()]
    _, colon, rest = template_name.partition(":")
    if colon:
        template_name = rest
    return template_name.strip(), line, message[match.end() :]


def describe_render_error(exc: BaseException) -> tuple[str, int, str]:
    """Return ``(template_name, line, description)`` for a render failure.

    Prefers the location kida attaches to its exceptions and falls back to
    parsing the message text.
    """
    if isinstance(exc, TemplateSyntaxError):
        name = exc.name
    else:
        # TemplateRuntimeError has template_name, UndefinedError has template
        name = getattr(exc, "template_name", None) or getattr(exc, "template", None)
    line = getattr(exc, "lineno", None)
    if isinstance(name, str) and name and isinstance(line, int):
        description = getattr(exc, "message", None) or str(exc)
        return name, line, str(description)
    return parse_template_error(str(exc))
