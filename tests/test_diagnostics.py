"""Tests for template error parsing and reporting."""

from kida import Environment, TemplateRuntimeError, UndefinedError

from yieldkit.templating.diagnostics import (
    TemplateErrorReport,
    describe_render_error,
    parse_template_error,
)


class TestParseTemplateError:
    def test_engine_prefixed_message(self) -> None:
        message = 'html/template:Application/Register.html:36: no such template "footer.html"'

        assert parse_template_error(message) == (
            "Application/Register.html",
            36,
            ' no such template "footer.html"',
        )

    def test_message_without_prefix(self) -> None:
        name, line, description = parse_template_error("Hotels/show.html:7: boom")

        assert name == "Hotels/show.html"
        assert line == 7
        assert description == " boom"

    def test_no_location(self) -> None:
        assert parse_template_error("something broke") == ("", 0, "something broke")

    def test_first_location_wins(self) -> None:
        name, line, description = parse_template_error("a.html:3: included from b.html:9: x")

        assert (name, line) == ("a.html", 3)
        assert description == " included from b.html:9: x"


class TestDescribeRenderError:
    def test_undefined_variable_uses_attributes(self) -> None:
        env = Environment()
        template = env.from_string("line one\n{{ missing }}", name="Hotels/show.html")

        try:
            template.render()
        except UndefinedError as exc:
            name, line, description = describe_render_error(exc)
        else:
            raise AssertionError("expected UndefinedError")

        assert name == "Hotels/show.html"
        assert line == 2
        assert "missing" in description

    def test_runtime_error_with_location(self) -> None:
        exc = TemplateRuntimeError("division by zero", template_name="x.html", lineno=4)

        name, line, description = describe_render_error(exc)

        assert (name, line) == ("x.html", 4)
        assert "division by zero" in description

    def test_plain_exception_falls_back_to_message(self) -> None:
        exc = ValueError("layouts/app.html:12: bad value")

        assert describe_render_error(exc) == ("layouts/app.html", 12, " bad value")


class TestTemplateErrorReport:
    def test_context_lines_window(self) -> None:
        source = tuple(f"line {n}" for n in range(1, 21))
        report = TemplateErrorReport(
            title="t", path="p", description="d", line=10, source_lines=source
        )

        lines = report.context_lines(radius=2)

        assert [n for n, _ in lines] == [8, 9, 10, 11, 12]
        assert lines[2] == (10, "line 10")

    def test_context_lines_clamped_at_edges(self) -> None:
        report = TemplateErrorReport(
            title="t", path="p", description="d", line=1, source_lines=("a", "b")
        )

        assert report.context_lines() == [(1, "a"), (2, "b")]

    def test_unknown_line_shows_everything(self) -> None:
        report = TemplateErrorReport(
            title="t", path="p", description="d", source_lines=("a", "b", "c")
        )

        assert len(report.context_lines()) == 3

    def test_no_source(self) -> None:
        report = TemplateErrorReport(title="t", path="p", description="d", line=3)

        assert report.context_lines() == []
