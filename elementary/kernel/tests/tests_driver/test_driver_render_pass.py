"""
Elementary Render Driver -- Render Pass Tests

One call = compile the stored view against the latest model, then patch.

This matters because:
  - The driver is the only recovery boundary: a failed compile is logged and
    the page keeps showing the last good render
  - The view is sticky: later calls re-render it with new data
  - Map widgets attach only after their placeholder is in the document
"""

import asyncio
import logging

import pytest

from elementary.kernel.app import App
from elementary.kernel.driver import make_renderer
from elementary.kernel.types import DomEvent, EventTarget, RenderOptions, Timed

VIEWS = {
    "main": {"view": {"tag": "h1", "children": [{"text": "{{title}}"}]}},
    "broken": {"view": {"tag": "h1", "children": [{"unknown": True}]}},
    "map": {
        "view": {
            "tag": "section",
            "children": [{"map": {"id": "m", "center": {"get": "at"}, "markers": []}}],
        }
    },
    "form": {
        "view": {
            "tag": "input",
            "attrs": {"id": "title", "onInput": "rename"},
        }
    },
}

AT = {"lon": 1.0, "lat": 2.0}


# ============================================================================
# Rendering
# ============================================================================


class TestRenderPass:
    def test_renders_into_document(self, app):
        render = make_renderer("page", app=app)
        result = render(VIEWS, VIEWS["main"], {"title": "Hello"})

        assert result.rendered
        assert result.err is None
        assert result.view == ["h1", {}, "Hello"]
        assert app.root.html == "<h1>Hello</h1>"

    def test_view_is_remembered(self, app):
        render = make_renderer("page", app=app)
        render(VIEWS, VIEWS["main"], {"title": "one"})
        render(VIEWS, model={"title": "two"})
        assert app.root.html == "<h1>two</h1>"

    def test_new_view_replaces_old(self, app):
        render = make_renderer("page", app=app)
        render(VIEWS, VIEWS["main"], {"title": "one"})
        render(VIEWS, VIEWS["form"])
        assert app.root.html.startswith('<input id="title"')

    def test_ambient_reaches_the_view(self, app):
        render = make_renderer("page", RenderOptions(ambient={"title": "from config"}), app)
        render(VIEWS, VIEWS["main"])
        assert app.root.html == "<h1>from config</h1>"

    def test_model_overrides_ambient(self, app):
        render = make_renderer("page", RenderOptions(ambient={"title": "from config"}), app)
        render(VIEWS, VIEWS["main"], {"title": "from model"})
        assert app.root.html == "<h1>from model</h1>"

    def test_custom_timer_is_used(self, app):
        calls = []

        def fake_tc(fn):
            calls.append(fn)
            return Timed(res=fn(), millis=5.0)

        app.tc = fake_tc
        result = make_renderer("page", app=app)(VIEWS, VIEWS["main"], {"title": "t"})

        assert len(calls) == 2
        assert result.compile_millis == 5.0
        assert result.render_millis == 5.0

    def test_events_reach_update_with_component_name(self, app, recorder):
        render = make_renderer("editor", app=app)
        render(VIEWS, VIEWS["form"])

        delivered = app.root.dispatch("h1", "onInput", DomEvent(type="input", target=EventTarget(value=" Draft")))

        assert delivered
        assert recorder.messages == [{"effect": "editor", "event": "rename", "value": "Draft"}]


# ============================================================================
# Failures
# ============================================================================


class TestRenderFailures:
    def test_compile_failure_leaves_document_alone(self, app, caplog):
        render = make_renderer("page", app=app)
        render(VIEWS, VIEWS["main"], {"title": "good"})

        with caplog.at_level(logging.ERROR, logger="elementary.kernel.driver"):
            result = render(VIEWS, VIEWS["broken"])

        assert not result.rendered
        assert result.err.reason == "view_not_supported"
        assert app.root.html == "<h1>good</h1>"
        assert app.root.patches == 1
        assert "Can't compile view" in caplog.text

    def test_failed_view_is_still_remembered(self, app):
        render = make_renderer("page", app=app)
        render(VIEWS, VIEWS["broken"])
        assert render.view is VIEWS["broken"]

    def test_no_view_yet(self, app, caplog):
        render = make_renderer("page", app=app)
        with caplog.at_level(logging.ERROR, logger="elementary.kernel.driver"):
            result = render(VIEWS, model={"title": "x"})

        assert result.err.reason == "no_view_spec"
        assert app.root.html == ""
        assert "no_view_spec" in caplog.text


# ============================================================================
# Logging
# ============================================================================


class TestRenderLogging:
    def test_telemetry(self, app, caplog):
        render = make_renderer("page", RenderOptions(telemetry=True), app)
        with caplog.at_level(logging.INFO, logger="elementary.kernel.driver"):
            render(VIEWS, VIEWS["main"], {"title": "t"})

        assert "[page][compile " in caplog.text
        assert "ms][render " in caplog.text

    def test_quiet_by_default(self, app, caplog):
        render = make_renderer("page", app=app)
        with caplog.at_level(logging.DEBUG, logger="elementary.kernel.driver"):
            render(VIEWS, VIEWS["main"], {"title": "t"})
        assert caplog.text == ""

    def test_debug_logs_compiled_view(self, app, caplog):
        render = make_renderer("page", RenderOptions(debug=True), app)
        with caplog.at_level(logging.DEBUG, logger="elementary.kernel.driver"):
            render(VIEWS, VIEWS["main"], {"title": "t"})
        assert "[page] compiled view ['h1', {}, 't']" in caplog.text


# ============================================================================
# Deferred widgets
# ============================================================================


class TestDeferredWidgets:
    def test_runs_after_render_without_loop(self, app):
        render = make_renderer("page", app=app)
        result = render(VIEWS, VIEWS["map"], {"at": AT})

        assert result.deferred == 1
        assert app.root.has_element("m")
        assert app.root.widgets["m"].center == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_runs_on_next_loop_turn(self, app):
        render = make_renderer("page", app=app)
        render(VIEWS, VIEWS["map"], {"at": AT})

        assert app.root.html == '<section><div style="width: 100%; height: 300px" id="m"></div></section>'
        assert "m" not in app.root.widgets

        await asyncio.sleep(0)
        assert "m" in app.root.widgets

    def test_dropped_when_compile_fails(self, app):
        render = make_renderer("page", app=app)
        result = render(VIEWS, VIEWS["map"], {"at": None})

        assert result.err.reason == "map_config_invalid"
        assert app.root.widgets == {}

    def test_callback_failure_is_logged(self, caplog):
        class ExplodingWidget:
            def create(self, config):
                raise RuntimeError("no gl context")

            def add_marker(self, map_instance, marker):
                pass

        app = App(map_widget=ExplodingWidget())
        render = make_renderer("page", app=app)
        with caplog.at_level(logging.ERROR, logger="elementary.kernel.driver"):
            result = render(VIEWS, VIEWS["map"], {"at": AT})

        assert result.rendered
        assert "deferred widget callback failed" in caplog.text
