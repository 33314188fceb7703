"""
Elementary Kernel: Fragments

Fragment shapes produced by the compiler:

  "text"                           → text leaf (any scalar is rendered as text)
  ["div"]                          → element with no attributes, no children
  ["p", {"class": "x"}, ...]       → element: tag, attrs, children
  Group([frag, frag, ...])         → group (from List / Loop nodes), flattened

Groups are their own list type, so a group holding a single string is never
mistaken for an element. Any other list whose first item is a string and
whose second item, if there is one, is a mapping is an element; remaining
lists (host-built trees such as [["li"], ["li"]]) are groups too.

Tag and attribute names must start with an ASCII letter and continue with
word characters, "-", "." or ":". An element with any other tag is written
out as a group of escaped text; an attribute with any other name is dropped.
Both are logged.

JsonMLAdapter turns a fragment tree into HTML text, the way an incremental DOM
adapter would turn it into DOM calls. Callable attributes (bound event
handlers) are not serialized; they are collected and the element is tagged
with a data-handler id instead.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from html import escape
from typing import Any

from elementary.kernel.markup import VOID_ELEMENTS

logger = logging.getLogger(__name__)

HANDLER_ATTR = "data-handler"

_NAME = re.compile(r"[A-Za-z][\w:.-]*")


class Group(list):
    """Ordered child fragments from a List or Loop node. Never an element."""


def is_name(name: Any) -> bool:
    return isinstance(name, str) and _NAME.fullmatch(name) is not None


def is_element(fragment: Any) -> bool:
    return (
        isinstance(fragment, list | tuple)
        and not isinstance(fragment, Group)
        and len(fragment) > 0
        and isinstance(fragment[0], str)
        and (len(fragment) == 1 or isinstance(fragment[1], Mapping))
    )


def element_parts(fragment: list | tuple) -> tuple[str, Mapping[str, Any], list[Any]]:
    """Split an element into (tag, attrs, children)."""
    tag = fragment[0]
    attrs = fragment[1] if len(fragment) > 1 else {}
    return tag, attrs, list(fragment[2:])


def iter_elements(fragment: Any):
    """Yield every element in a fragment tree, depth first, groups flattened."""
    if is_element(fragment):
        yield fragment
        for child in element_parts(fragment)[2]:
            yield from iter_elements(child)
    elif isinstance(fragment, list | tuple):
        for child in fragment:
            yield from iter_elements(child)


@dataclass
class Markup:
    """What the adapter produces for one fragment tree."""

    html: str
    handlers: dict[str, dict[str, Callable[..., Any]]] = field(default_factory=dict)
    ids: set[str] = field(default_factory=set)


class JsonMLAdapter:
    """Serializes fragment trees to HTML text."""

    def render(self, fragment: Any) -> Markup:
        out = Markup(html="")
        parts: list[str] = []
        self._emit(fragment, parts, out)
        out.html = "".join(parts)
        return out

    def _emit(self, fragment: Any, parts: list[str], out: Markup) -> None:
        if fragment is None or fragment is False:
            return
        if isinstance(fragment, str):
            parts.append(escape(fragment, quote=False))
            return
        if is_element(fragment):
            self._emit_element(fragment, parts, out)
            return
        if isinstance(fragment, list | tuple):
            for child in fragment:
                self._emit(child, parts, out)
            return
        parts.append(escape(str(fragment), quote=False))

    def _emit_element(self, fragment: list | tuple, parts: list[str], out: Markup) -> None:
        tag, attrs, children = element_parts(fragment)
        if not is_name(tag):
            logger.warning("render: %r is not a tag name, writing it as text", tag)
            for item in fragment:
                if not isinstance(item, Mapping):
                    self._emit(item, parts, out)
            return

        bad_names = [k for k in attrs if not is_name(k)]
        if bad_names:
            logger.warning("render: dropping attributes with invalid names on <%s>: %r", tag, bad_names)
            attrs = {k: v for k, v in attrs.items() if is_name(k)}

        handlers = {k: v for k, v in attrs.items() if callable(v)}
        rendered_attrs = [_render_attr(k, v) for k, v in attrs.items() if not callable(v)]
        if handlers:
            handler_id = f"h{len(out.handlers) + 1}"
            out.handlers[handler_id] = handlers
            rendered_attrs.append(f'{HANDLER_ATTR}="{handler_id}"')

        element_id = attrs.get("id")
        if isinstance(element_id, str) and element_id:
            out.ids.add(element_id)

        attr_text = "".join(" " + a for a in rendered_attrs if a)
        parts.append(f"<{tag}{attr_text}>")
        if tag in VOID_ELEMENTS:
            return
        for child in children:
            self._emit(child, parts, out)
        parts.append(f"</{tag}>")


def _render_attr(name: str, value: Any) -> str:
    if value is None or value is False:
        return ""
    if value is True:
        return name
    if isinstance(value, Mapping):
        # style-like mappings: {"width": "100%"} → "width: 100%"
        value = "; ".join(f"{k}: {v}" for k, v in value.items() if v is not None)
    elif isinstance(value, list | tuple):
        value = " ".join(str(v) for v in value if v)
    return f'{name}="{escape(str(value), quote=True)}"'


def to_html(fragment: Any) -> str:
    """Convenience: fragment tree → HTML text, handlers dropped."""
    return JsonMLAdapter().render(fragment).html
