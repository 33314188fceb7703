"""
Elementary Kernel: the view compiler.

Components:
  nodes: raw spec → tagged node variant (fixed priority order)
  resolver: view name (literal or expression) → registered view spec
  compiler: (views, spec, ctx) → Compiled  (never raises)
  events: event attributes → handlers forwarding to the update sink
  widgets: map / code / markdown adapters
  driver: compile-then-patch render passes

Default collaborators: encoder (chevron templates), HtmlRenderer + Document,
PygmentsHighlighter, PythonMarkdown, DocumentMapWidget.
"""

from elementary.kernel.app import App
from elementary.kernel.compiler import compile_view
from elementary.kernel.dom import Document, HtmlRenderer
from elementary.kernel.driver import RenderDriver, make_renderer
from elementary.kernel.encoder import encode
from elementary.kernel.resolver import resolve
from elementary.kernel.types import Compiled, CompileError, DomEvent, EventTarget, RenderOptions, RenderPass

__all__ = [
    "App",
    "compile_view",
    "Compiled",
    "CompileError",
    "Document",
    "DomEvent",
    "encode",
    "EventTarget",
    "HtmlRenderer",
    "make_renderer",
    "RenderDriver",
    "RenderOptions",
    "RenderPass",
    "resolve",
]
