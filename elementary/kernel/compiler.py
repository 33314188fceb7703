"""
Elementary Kernel: Node Compiler

Pure function (apart from deferred widget callbacks): (views, spec, ctx) → Compiled
No IO. Never raises for bad specs: every failure is a CompileError value, and
any nested failure replaces the whole result of its ancestors.

One recursive entry point, compile_node(), classifies the raw spec (see
nodes.py for the priority order) and hands the variant to its compiler:

  ListNode      → group of child fragments, first error wins
  ViewRefNode   → resolve name, params, condition; falsy → ["div"]
  TagNode       → [tag, attrs + bound handlers, *children]
  TextNode      → the evaluated value
  LoopNode      → one item-view per element of the evaluated sequence
  EitherNode    → either[0] when the condition holds, either[1] otherwise
  TimestampNode → the evaluated node
  MapNode / CodeNode / MarkdownNode → widgets.py
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from elementary.kernel import widgets
from elementary.kernel.app import App
from elementary.kernel.context import loop_context, with_ambient
from elementary.kernel.events import bind_handlers, split_event_attrs
from elementary.kernel.fragments import Group
from elementary.kernel.nodes import (
    CodeNode,
    EitherNode,
    ListNode,
    LoopNode,
    MapNode,
    MarkdownNode,
    TagNode,
    TextNode,
    TimestampNode,
    ViewRefNode,
    classify,
)
from elementary.kernel.resolver import resolve
from elementary.kernel.types import (
    ATTRS_NOT_MAPPING,
    LOOP_NOT_SEQUENCE,
    VIEW_NOT_SUPPORTED,
    VIEW_PARAMS_NOT_MAPPING,
    Compiled,
    Deferred,
    EncodeResult,
    RenderOptions,
    compiled,
    empty_element,
    failed,
)

DEFAULT_NAME = "elementary"


@dataclass
class CompileEnv:
    """Everything a compile pass needs besides the node and its context."""

    name: str
    views: Mapping[str, Any]
    app: App
    options: RenderOptions
    deferred: list[Deferred] = field(default_factory=list)

    @property
    def ambient(self) -> dict[str, Any]:
        return self.options.ambient

    def encode(self, expr: Any, ctx: dict[str, Any]) -> EncodeResult:
        return self.app.encode(expr, ctx)

    def defer(self, callback: Deferred) -> None:
        self.deferred.append(callback)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def compile_view(
    views: Mapping[str, Any],
    spec: Any,
    model: Mapping[str, Any] | None = None,
    *,
    name: str = DEFAULT_NAME,
    app: App | None = None,
    options: RenderOptions | None = None,
    deferred: list[Deferred] | None = None,
) -> Compiled:
    """
    Compile a spec against ambient configuration + model.
    Deferred widget callbacks are appended to `deferred` when given, otherwise
    dropped; running them is the render driver's job.
    """
    env = CompileEnv(
        name=name,
        views=views,
        app=app or App(),
        options=options or RenderOptions(),
        deferred=deferred if deferred is not None else [],
    )
    return compile_node(env, spec, with_ambient(env.ambient, model))


def compile_node(env: CompileEnv, raw: Any, ctx: dict[str, Any]) -> Compiled:
    """Compile one raw spec node against `ctx`."""
    node = classify(raw)
    if node is None:
        return failed(raw, ctx, VIEW_NOT_SUPPORTED)
    return _COMPILERS[type(node)](env, node, raw, ctx)


# ---------------------------------------------------------------------------
# Node compilers
# ---------------------------------------------------------------------------


def _compile_list(env: CompileEnv, node: ListNode, raw: Any, ctx: dict[str, Any]) -> Compiled:
    out = Group()
    for item in node.items:
        result = compile_node(env, item, ctx)
        if result.err:
            return result
        out.append(result.view)
    return compiled(out)


def _compile_view_ref(env: CompileEnv, node: ViewRefNode, raw: Any, ctx: dict[str, Any]) -> Compiled:
    resolved = resolve(env.views, node.name, ctx, env.encode)
    if resolved.err:
        return resolved

    params = env.encode(node.params, ctx)
    if params.err:
        return failed(raw, ctx, params.err.reason, params.err.message)
    if params.value is not None and not isinstance(params.value, Mapping):
        return failed(raw, ctx, VIEW_PARAMS_NOT_MAPPING)

    if node.has_condition:
        condition = env.encode(node.condition, ctx)
        if condition.err:
            return failed(raw, ctx, condition.err.reason, condition.err.message)
        if not condition.value:
            return compiled(empty_element())

    # Only ambient + params: the caller's context does not leak into the view
    return compile_node(env, resolved.view, with_ambient(env.ambient, params.value))


def _compile_tag(env: CompileEnv, node: TagNode, raw: Any, ctx: dict[str, Any]) -> Compiled:
    attrs_spec = node.attrs if node.attrs is not None else {}
    handler_specs: dict[str, Any] = {}
    if isinstance(attrs_spec, Mapping):
        attrs_spec, handler_specs = split_event_attrs(attrs_spec)

    evaluated = env.encode(attrs_spec, ctx)
    if evaluated.err:
        return failed(raw, ctx, evaluated.err.reason, evaluated.err.message)
    attrs = evaluated.value if evaluated.value is not None else {}
    if not isinstance(attrs, Mapping):
        return failed(raw, ctx, ATTRS_NOT_MAPPING)
    # attrs given as a single expression: its on* entries are handler expressions
    attrs, computed_handlers = split_event_attrs(attrs)
    handler_specs = {**computed_handlers, **handler_specs}

    children = node.children if node.children is not None else []
    if not isinstance(children, list | tuple):
        children = [children]
    kids = compile_node(env, list(children), ctx)
    if kids.err:
        return kids

    bound = bind_handlers(
        attrs,
        handler_specs,
        ctx,
        effect=env.name,
        encode=env.app.encode,
        update=env.app.update,
    )
    return compiled([node.tag, bound, *kids.view])


def _compile_text(env: CompileEnv, node: TextNode, raw: Any, ctx: dict[str, Any]) -> Compiled:
    result = env.encode(node.text, ctx)
    if result.err:
        return failed(raw, ctx, result.err.reason, result.err.message)
    return compiled(result.value)


def _compile_loop(env: CompileEnv, node: LoopNode, raw: Any, ctx: dict[str, Any]) -> Compiled:
    resolved = resolve(env.views, node.with_, ctx, env.encode)
    if resolved.err:
        return resolved
    item_view = resolved.view

    items = env.encode(node.loop, ctx)
    if items.err:
        return failed(raw, ctx, items.err.reason, items.err.message)
    if not items.value:
        return compiled(Group())
    if isinstance(items.value, str | bytes | Mapping) or not hasattr(items.value, "__iter__"):
        return failed(raw, ctx, LOOP_NOT_SEQUENCE)

    shared = env.encode(node.context, ctx)
    if shared.err:
        return failed(raw, ctx, shared.err.reason, shared.err.message)

    out = Group()
    for index, item in enumerate(items.value):
        result = compile_node(env, item_view, loop_context(env.ambient, item, index, shared.value))
        if result.err:
            return result
        out.append(result.view)
    return compiled(out)


def _compile_either(env: CompileEnv, node: EitherNode, raw: Any, ctx: dict[str, Any]) -> Compiled:
    holds = True
    if node.has_condition:
        condition = env.encode(node.condition, ctx)
        if condition.err:
            return failed(raw, ctx, condition.err.reason, condition.err.message)
        holds = bool(condition.value)

    branch = node.when_true if holds else node.when_false
    if branch is None:
        return compiled(empty_element())
    return compile_node(env, branch, ctx)


def _compile_timestamp(env: CompileEnv, node: TimestampNode, raw: Any, ctx: dict[str, Any]) -> Compiled:
    result = env.encode(node.expr, ctx)
    if result.err:
        return failed(raw, ctx, result.err.reason, result.err.message)
    return compiled(result.value)


_COMPILERS: dict[type, Callable[[CompileEnv, Any, Any, dict[str, Any]], Compiled]] = {
    ListNode: _compile_list,
    ViewRefNode: _compile_view_ref,
    TagNode: _compile_tag,
    TextNode: _compile_text,
    LoopNode: _compile_loop,
    EitherNode: _compile_either,
    MapNode: widgets.compile_map,
    TimestampNode: _compile_timestamp,
    CodeNode: widgets.compile_code,
    MarkdownNode: widgets.compile_markdown,
}
