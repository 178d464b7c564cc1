"""Self-contained template error page.

Renders a ``TemplateErrorReport`` without going through kida, using plain
f-strings, so a broken template setup cannot prevent error reporting.

Two levels of detail:
- debug: title, template path and line, description, and the template
  source around the failing line
- production: a generic "Internal Server Error" page
"""

import html

from yieldkit.templating.diagnostics import TemplateErrorReport

_CSS = """\
* { margin: 0; padding: 0; box-sizing: border-box; }
body {
    font-family: ui-monospace, 'Cascadia Code', 'Source Code Pro', Menlo, Consolas,
                 'DejaVu Sans Mono', monospace;
    background: #1a1b26; color: #a9b1d6; line-height: 1.6;
    padding: 2rem; font-size: 14px;
}
.error-page { max-width: 960px; margin: 0 auto; }
h1 { color: #f7768e; font-size: 1.4rem; margin-bottom: 0.5rem; }
.location { color: #7dcfff; margin-bottom: 0.5rem; }
.description { color: #e0af68; font-size: 1rem; margin-bottom: 1rem; white-space: pre-wrap; word-break: break-word; }
.source { border: 1px solid #2f3549; border-radius: 6px; overflow-x: auto; }
.source-line { display: flex; padding: 0 0.8rem; font-size: 0.82rem; }
.source-line .lineno { color: #565f89; min-width: 3.5rem; text-align: right; padding-right: 1rem; user-select: none; flex-shrink: 0; }
.source-line .code { white-space: pre; }
.source-line.error-line { background: rgba(247, 118, 142, 0.15); }
.source-line.error-line .lineno { color: #f7768e; }
"""


def _esc(text: object) -> str:
    return html.escape(str(text), quote=True)


def _render_source_lines(report: TemplateErrorReport) -> str:
    rows: list[str] = []
    for lineno, code in report.context_lines():
        cls = " error-line" if lineno == report.line else ""
        rows.append(
            f'<div class="source-line{cls}">'
            f'<span class="lineno">{lineno}</span>'
            f'<span class="code">{_esc(code)}</span>'
            f"</div>"
        )
    if not rows:
        return ""
    return f'<div class="source">{"".join(rows)}</div>'


def render_error_page(report: TemplateErrorReport, *, debug: bool) -> str:
    """Render a full HTML error page for *report*."""
    if not debug:
        return (
            "<!DOCTYPE html><html><head><meta charset=\"utf-8\">"
            "<title>Internal Server Error</title></head>"
            "<body><h1>Internal Server Error</h1></body></html>"
        )

    location = _esc(report.path or "<template>")
    if report.line:
        location += f":{report.line}"

    return (
        "<!DOCTYPE html><html><head><meta charset=\"utf-8\">"
        f"<title>{_esc(report.title)}</title>"
        f"<style>{_CSS}</style></head><body>"
        '<div class="error-page">'
        f"<h1>{_esc(report.title)}</h1>"
        f'<div class="location">{location}</div>'
        f'<div class="description">{_esc(report.description.strip())}</div>'
        f"{_render_source_lines(report)}"
        "</div></body></html>"
    )
