"""
Elementary Kernel: Collaborators

The compiler and render driver talk to the outside world only through an App:

  encode(expr, ctx) -> EncodeResult      expression evaluator
  update(message)                        state-update sink, fire and forget
  tc(fn) -> Timed                        timing wrapper
  renderer.patch(root, adapter, frag)    patch engine
  highlighter / markdown                 code and markdown formatters
  map_widget                             map construction API (deferred)

Every collaborator has a default; update discards messages unless one is given.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from elementary.kernel.dom import Document, HtmlRenderer
from elementary.kernel.encoder import encode as default_encode
from elementary.kernel.formatters import Highlighter, MarkdownRenderer, PygmentsHighlighter, PythonMarkdown
from elementary.kernel.fragments import JsonMLAdapter
from elementary.kernel.mapbox import DocumentMapWidget, MapWidget
from elementary.kernel.timing import tc as default_tc
from elementary.kernel.types import EncodeResult, Timed


def _discard(message: dict[str, Any]) -> None:
    return None


@dataclass
class App:
    update: Callable[[dict[str, Any]], Any] = _discard
    encode: Callable[[Any, dict[str, Any]], EncodeResult] = default_encode
    tc: Callable[[Callable[[], Any]], Timed] = default_tc
    root: Document = field(default_factory=Document)
    renderer: HtmlRenderer = field(default_factory=HtmlRenderer)
    adapter: JsonMLAdapter = field(default_factory=JsonMLAdapter)
    highlighter: Highlighter = field(default_factory=PygmentsHighlighter)
    markdown: MarkdownRenderer = field(default_factory=PythonMarkdown)
    map_widget: MapWidget | None = None

    def __post_init__(self) -> None:
        if self.map_widget is None:
            self.map_widget = DocumentMapWidget(self.root)
