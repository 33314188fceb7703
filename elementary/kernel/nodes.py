"""
Elementary Kernel: Spec Nodes

One frozen dataclass per node kind. `classify()` turns a raw spec value
(parsed JSON) into exactly one of them, testing shapes in a fixed priority
order. The first matching shape wins; a raw node that carries keys for two
shapes is classified by whichever comes first.

Priority order:
  1. list          → ListNode
  2. "name"        → ViewRefNode
  3. "tag"         → TagNode
  4. "text"        → TextNode
  5. "loop"        → LoopNode
  6. "either"      → EitherNode
  7. "map"         → MapNode
  8. "timestamp"   → TimestampNode
  9. "code"        → CodeNode
 10. "markdown"    → MarkdownNode
 anything else     → None (view_not_supported)
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class ListNode:
    items: list[Any]


@dataclass(frozen=True)
class ViewRefNode:
    name: Any
    params: Any = None
    condition: Any = None
    has_condition: bool = False


@dataclass(frozen=True)
class TagNode:
    tag: Any
    attrs: Any = None
    children: Any = None


@dataclass(frozen=True)
class TextNode:
    text: Any


@dataclass(frozen=True)
class LoopNode:
    with_: Any
    loop: Any
    context: Any = None


@dataclass(frozen=True)
class EitherNode:
    """
    Binary conditional.
    `when_true` is either[0], `when_false` is either[1]; a missing branch is None.
    """

    when_true: Any
    when_false: Any
    condition: Any = None
    has_condition: bool = False


@dataclass(frozen=True)
class MapNode:
    map: Mapping[str, Any]


@dataclass(frozen=True)
class TimestampNode:
    expr: Mapping[str, Any]


@dataclass(frozen=True)
class CodeNode:
    source: Any
    lang: Any


@dataclass(frozen=True)
class MarkdownNode:
    source: Any


SpecNode = Union[
    ListNode,
    ViewRefNode,
    TagNode,
    TextNode,
    LoopNode,
    EitherNode,
    MapNode,
    TimestampNode,
    CodeNode,
    MarkdownNode,
]


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


def classify(raw: Any) -> SpecNode | None:
    """
    Build the variant for a raw spec value, or None when no shape matches.
    Pure function. No evaluation happens here.
    """
    if isinstance(raw, list | tuple):
        return ListNode(items=list(raw))

    if not isinstance(raw, Mapping):
        return None

    for key, build in _SHAPES:
        if key in raw:
            return build(raw)
    return None


def _view_ref(raw: Mapping[str, Any]) -> ViewRefNode:
    return ViewRefNode(
        name=raw["name"],
        params=raw.get("params"),
        condition=raw.get("condition"),
        has_condition="condition" in raw,
    )


def _tag(raw: Mapping[str, Any]) -> TagNode:
    return TagNode(tag=raw["tag"], attrs=raw.get("attrs"), children=raw.get("children"))


def _text(raw: Mapping[str, Any]) -> TextNode:
    return TextNode(text=raw["text"])


def _loop(raw: Mapping[str, Any]) -> LoopNode:
    return LoopNode(with_=raw.get("with"), loop=raw["loop"], context=raw.get("context"))


def _either(raw: Mapping[str, Any]) -> EitherNode:
    branches = raw["either"]
    if not isinstance(branches, list | tuple):
        branches = [branches]
    when_true = branches[0] if len(branches) > 0 else None
    when_false = branches[1] if len(branches) > 1 else None
    return EitherNode(
        when_true=when_true,
        when_false=when_false,
        condition=raw.get("condition"),
        has_condition="condition" in raw,
    )


def _map(raw: Mapping[str, Any]) -> MapNode:
    config = raw["map"]
    return MapNode(map=config if isinstance(config, Mapping) else {})


def _timestamp(raw: Mapping[str, Any]) -> TimestampNode:
    return TimestampNode(expr=raw)


def _code(raw: Mapping[str, Any]) -> CodeNode:
    code = raw["code"]
    if not isinstance(code, Mapping):
        code = {}
    return CodeNode(source=code.get("source"), lang=code.get("lang"))


def _markdown(raw: Mapping[str, Any]) -> MarkdownNode:
    return MarkdownNode(source=raw["markdown"])


_SHAPES = (
    ("name", _view_ref),
    ("tag", _tag),
    ("text", _text),
    ("loop", _loop),
    ("either", _either),
    ("map", _map),
    ("timestamp", _timestamp),
    ("code", _code),
    ("markdown", _markdown),
)
