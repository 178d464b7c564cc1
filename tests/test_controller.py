"""Tests for Controller and LayoutController."""

import logging

import pytest

from yieldkit.controller import Controller, declared_render_args, render_args
from yieldkit.errors import TemplateLookupError
from yieldkit.layouts.controller import LayoutController
from yieldkit.layouts.result import LayoutTemplateResult
from yieldkit.results import ErrorResult, RenderTextResult
from yieldkit.templating.views import Views

from conftest import make_config, make_request, make_views


class Hotels(LayoutController):
    def index(self):
        return self.render(title="All hotels", hotels=["Ritz"])

    @render_args("hotel")
    def show(self):
        return self.render("Ritz")

    def plain(self):
        return self.render()

    def _helper(self):
        return None


def _controller(views: Views, action: str = "index", fmt: str = "html") -> Hotels:
    return Hotels(make_request(path=f"/Hotels/{action}", fmt=fmt), views, action)


class TestController:
    def test_name_defaults_to_class_name(self) -> None:
        assert Hotels.name == "Hotels"

    def test_explicit_name(self) -> None:
        class Bookings(Controller):
            name = "Reservations"

        assert Bookings.name == "Reservations"

    def test_render_args_seeded(self, views: Views) -> None:
        c = _controller(views, "show")

        assert c.render_args == {"controller": "Hotels", "action": "show"}

    def test_actions_are_public_subclass_methods(self) -> None:
        actions = Hotels.actions()

        assert {"index", "show", "plain"} <= actions
        assert "_helper" not in actions
        assert "render" not in actions
        assert "content_for" not in actions
        assert "actions" not in actions

    def test_render_text(self, views: Views) -> None:
        result = _controller(views).render_text("hi", status=201)

        assert isinstance(result, RenderTextResult)
        assert (result.text, result.status) == ("hi", 201)

    def test_render_template_missing(self, views: Views) -> None:
        result = _controller(views).render_template("Hotels/nope.html")

        assert isinstance(result, ErrorResult)
        assert result.report.title == "Template Not Found"

    def test_render_args_decorator(self) -> None:
        @render_args("a", "b")
        def action(self): ...

        assert declared_render_args(action) == ("a", "b")
        assert declared_render_args(Hotels.index) == ()
        assert declared_render_args(None) == ()


class TestLayout:
    def test_default_layout_for_format(self, views: Views) -> None:
        c = _controller(views)

        assert c.resolve_layout() == "application.html"

    def test_explicit_layout_wins(self, views: Views) -> None:
        c = _controller(views)
        c.layout("minimal")

        assert c.resolve_layout() == "minimal"

    def test_empty_name_disables_default(self, views: Views) -> None:
        c = _controller(views)
        c.layout("")

        assert c.no_layout is True
        assert c.resolve_layout() == ""

    def test_no_default_for_format(self, views: Views) -> None:
        c = _controller(views, fmt="json")

        assert c.resolve_layout() == ""

    def test_disabled_layout_stays_disabled(self, views: Views) -> None:
        c = _controller(views)
        c.layout("")
        c.layout("minimal")

        assert c.no_layout is True
        assert c.resolve_layout() == ""
        assert c.layout_path == "minimal"

    def test_explicit_layout_without_any_default(self) -> None:
        views = make_views(make_config(default_layouts={}))
        c = _controller(views)
        c.layout("minimal")

        assert c.resolve_layout() == "minimal"


class TestContentFor:
    def test_bare_name_first(self, views: Views) -> None:
        c = _controller(views)
        c.content_for("sidebar", "sidebar.html")

        assert c.render_tmpl["sidebar"].name == "sidebar.html"

    def test_controller_scoped_fallback(self, views: Views) -> None:
        c = _controller(views)
        c.content_for("footer", "footer.html")

        assert c.render_tmpl["footer"].name == "Hotels/footer.html"

    def test_unknown_template(self, views: Views) -> None:
        c = _controller(views)

        with pytest.raises(TemplateLookupError) as exc_info:
            c.content_for("sidebar", "nowhere.html")

        assert exc_info.value.tried == ("nowhere.html", "Hotels/nowhere.html")
        assert "sidebar" not in c.render_tmpl

    def test_reregistering_replaces(self, views: Views) -> None:
        c = _controller(views)
        c.content_for("sidebar", "sidebar.html")
        c.content_for("sidebar", "Hotels/sidebar.html")

        assert c.render_tmpl["sidebar"].name == "Hotels/sidebar.html"


class TestRender:
    def test_renders_action_template_in_default_layout(self, views: Views) -> None:
        c = _controller(views)
        c.content_for("sidebar", "sidebar.html")

        result = c.index()

        assert isinstance(result, LayoutTemplateResult)
        assert result.template.name == "Hotels/index.html"
        assert result.layout is not None
        assert result.layout.name == "application.html"
        assert result.render_tmpl is c.render_tmpl
        assert result.render_args["title"] == "All hotels"

    def test_without_layout(self, views: Views) -> None:
        c = _controller(views, "plain")
        c.layout("")

        result = c.plain()

        assert isinstance(result, LayoutTemplateResult)
        assert result.layout is None
        assert result.template.name == "Hotels/plain.html"

    def test_format_picks_template_and_layout(self) -> None:
        views = make_views(make_config(default_layouts={"xml": "application"}))
        c = _controller(views, "show", fmt="xml")

        result = c.show()

        assert result.template.name == "Hotels/show.xml"
        assert result.layout.name == "application.xml"

    def test_positional_args_bind_to_declared_names(self, views: Views) -> None:
        c = _controller(views, "show")

        c.show()

        assert c.render_args["hotel"] == "Ritz"

    def test_positional_args_without_declaration_are_dropped(
        self, views: Views, caplog: pytest.LogCaptureFixture
    ) -> None:
        c = _controller(views, "plain")

        with caplog.at_level(logging.WARNING, logger="yieldkit.layouts"):
            result = c.render("stray")

        assert isinstance(result, LayoutTemplateResult)
        assert "stray" not in c.render_args.values()
        assert "declares no @render_args names" in caplog.text

    def test_positional_count_mismatch_is_a_warning(
        self, views: Views, caplog: pytest.LogCaptureFixture
    ) -> None:
        c = _controller(views, "show")

        with caplog.at_level(logging.WARNING, logger="yieldkit.layouts"):
            result = c.render("Ritz", "extra")

        assert isinstance(result, LayoutTemplateResult)
        assert "hotel" not in c.render_args
        assert "2 positional argument(s) for 1 declared" in caplog.text

    def test_missing_action_template(self, views: Views) -> None:
        c = _controller(views, "missing")

        result = c.render()

        assert isinstance(result, ErrorResult)
        assert result.report.path == "Hotels/missing.html"

    def test_missing_layout(self, views: Views) -> None:
        c = _controller(views)
        c.layout("nope")

        result = c.render()

        assert isinstance(result, ErrorResult)
        assert result.report.title == "Template Not Found"
        assert "nope.html" in result.report.description

    def test_layout_load_failure(self, tmp_path) -> None:
        views = make_views(make_config(layout_dir=tmp_path / "no-layouts"))
        c = _controller(views)

        result = c.render()

        assert isinstance(result, ErrorResult)
        assert result.report.title == "Layout Load Error"

    def test_layout_load_failure_reported_before_missing_page(self, tmp_path) -> None:
        views = make_views(make_config(layout_dir=tmp_path / "no-layouts"))
        c = _controller(views, "missing")

        result = c.render()

        assert isinstance(result, ErrorResult)
        assert result.report.title == "Layout Load Error"

    def test_empty_layout_path_with_layout_render(self, views: Views) -> None:
        c = _controller(views, fmt="json")

        result = c.render_template_with_layout("Hotels/index.html")

        assert isinstance(result, ErrorResult)
        assert result.report.title == "Template Not Found"
