"""
Elementary Kernel: Render Driver

Coordinates one render pass: compile the last-known view against the latest
model, then patch the document. This is the only place that renders, and the
only recovery boundary for compile errors: a failed compile is logged and the
document is left exactly as it was.

Usage:
    render = make_renderer("todo", settings.render_options(), App(update=dispatch))
    render(views, views["main"], model)   # set the view and render
    render(views, model=new_model)        # re-render the same view

After a successful patch, widget callbacks collected during compilation (map
attachment) are handed to the running asyncio loop with call_soon, or run
straight away when no loop is running. They are dropped when compilation fails.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

from elementary.kernel.app import App
from elementary.kernel.compiler import compile_view
from elementary.kernel.context import with_ambient
from elementary.kernel.types import (
    NO_VIEW_SPEC,
    CompileError,
    Deferred,
    RenderOptions,
    RenderPass,
)

logger = logging.getLogger(__name__)


class RenderDriver:
    """Holds the last view spec and re-renders it on every call."""

    def __init__(self, name: str, options: RenderOptions | None = None, app: App | None = None) -> None:
        self.name = name
        self.options = options or RenderOptions()
        self.app = app or App()
        self.view: Mapping[str, Any] | None = None

    def __call__(
        self,
        views: Mapping[str, Any],
        view: Mapping[str, Any] | None = None,
        model: Mapping[str, Any] | None = None,
    ) -> RenderPass:
        """
        Render one pass.

        views: the registry, {name: {"view": spec}}
        view: optional registry entry to render from now on
        model: data merged over the ambient configuration
        """
        if view:
            self.view = view

        if self.view is None:
            err = CompileError(spec=None, data=with_ambient(self.options.ambient, model), reason=NO_VIEW_SPEC)
            logger.error("Can't compile view %r", err)
            return RenderPass(err=err)

        spec = self.view.get("view")
        deferred: list[Deferred] = []
        c = self.app.tc(
            lambda: compile_view(
                views,
                spec,
                model,
                name=self.name,
                app=self.app,
                options=self.options,
                deferred=deferred,
            )
        )
        if c.res.err:
            logger.error("Can't compile view %r", c.res.err)
            return RenderPass(err=c.res.err, compile_millis=c.millis)

        if self.options.debug:
            logger.debug("[%s] compiled view %r", self.name, c.res.view)

        r = self.app.tc(lambda: self.app.renderer.patch(self.app.root, self.app.adapter, c.res.view))
        if self.options.telemetry:
            logger.info("[%s][compile %.2fms][render %.2fms]", self.name, c.millis, r.millis)

        self._schedule(deferred)
        return RenderPass(
            view=c.res.view,
            compile_millis=c.millis,
            render_millis=r.millis,
            rendered=True,
            deferred=len(deferred),
        )

    def _schedule(self, deferred: list[Deferred]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None
        for callback in deferred:
            if loop is not None:
                loop.call_soon(_run_deferred, callback)
            else:
                _run_deferred(callback)


def make_renderer(name: str, options: RenderOptions | None = None, app: App | None = None) -> RenderDriver:
    """Build a driver for the component `name`. Its update messages carry `name` as effect."""
    return RenderDriver(name, options, app)


def _run_deferred(callback: Deferred) -> None:
    try:
        callback()
    except Exception:
        logger.exception("deferred widget callback failed")
