"""
Elementary Kernel: Markup → Fragments

The code and markdown widgets get HTML text back from their formatters. This
module parses that text into a small element tree and converts the tree into
the fragment shape used everywhere else:

  element  → [tag, {attr: value}, *children]
  text     → str, with a fixed set of references decoded: &lt; &gt; &quot;
             &amp; and numeric character references

Named entities outside that set are left as written.
"""

from __future__ import annotations

import re
from html.parser import HTMLParser
from typing import Any

VOID_ELEMENTS = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "param",
        "source",
        "track",
        "wbr",
    }
)

_NUMERIC_REF = re.compile(r"&#(?:(\d+)|[xX]([0-9a-fA-F]+));")


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


class _TreeBuilder(HTMLParser):
    """
    Build a list of top-level nodes from raw HTML.
    Entity and character references are kept verbatim in text so that
    decode_text() alone decides what gets decoded.
    """

    def __init__(self) -> None:
        super().__init__(convert_charrefs=False)
        self.root: dict[str, Any] = {"type": "element", "tag": "", "attributes": {}, "children": []}
        self._stack: list[dict[str, Any]] = [self.root]

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        elem = {"type": "element", "tag": tag, "attributes": dict(attrs), "children": []}
        self._stack[-1]["children"].append(elem)
        if tag not in VOID_ELEMENTS:
            self._stack.append(elem)

    def handle_startendtag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        elem = {"type": "element", "tag": tag, "attributes": dict(attrs), "children": []}
        self._stack[-1]["children"].append(elem)

    def handle_endtag(self, tag: str) -> None:
        # Close up to the nearest matching open tag; stray end tags are ignored
        for depth in range(len(self._stack) - 1, 0, -1):
            if self._stack[depth]["tag"] == tag:
                del self._stack[depth:]
                return

    def handle_data(self, data: str) -> None:
        self._append_text(data)

    def handle_entityref(self, name: str) -> None:
        self._append_text(f"&{name};")

    def handle_charref(self, name: str) -> None:
        self._append_text(f"&#{name};")

    def _append_text(self, text: str) -> None:
        children = self._stack[-1]["children"]
        if children and children[-1]["type"] == "text":
            children[-1]["content"] += text
        else:
            children.append({"type": "text", "content": text})


def parse_markup(markup: str) -> list[dict[str, Any]]:
    """Parse an HTML string into a list of top-level element/text nodes."""
    builder = _TreeBuilder()
    builder.feed(markup)
    builder.close()
    return builder.root["children"]


# ---------------------------------------------------------------------------
# Conversion
# ---------------------------------------------------------------------------


def decode_text(text: str) -> str:
    """Decode &lt; &gt; &quot; &amp; and numeric character references."""
    text = text.replace("&lt;", "<").replace("&gt;", ">").replace("&quot;", '"')
    text = _NUMERIC_REF.sub(_decode_numeric, text)
    # last, so "&amp;lt;" stays "&lt;"
    return text.replace("&amp;", "&")


def _decode_numeric(m: re.Match) -> str:
    decimal, hexadecimal = m.group(1), m.group(2)
    try:
        return chr(int(decimal) if decimal else int(hexadecimal, 16))
    except (ValueError, OverflowError):
        return m.group(0)


def to_fragment(node: dict[str, Any]) -> Any:
    """Convert one parsed node (and its subtree) to a fragment."""
    if node["type"] == "text":
        return decode_text(node["content"])
    return [node["tag"], dict(node["attributes"])] + to_fragments(node["children"])


def to_fragments(nodes: list[dict[str, Any]]) -> list[Any]:
    return [to_fragment(n) for n in nodes]


def is_blank(node: dict[str, Any]) -> bool:
    return node["type"] == "text" and not node["content"].strip()
