"""
Elementary Kernel: Widget Adapters

Compiler branches for nodes whose output comes from somewhere other than the
spec itself:

  map       → placeholder <div id=...> now, interactive map after render
  code      → highlighted source, parsed back into fragments
  markdown  → rendered markdown, parsed back into fragments

Each follows the compiler's discipline: evaluate, return Compiled, never raise.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from elementary.kernel.formatters import UnknownLanguage
from elementary.kernel.mapbox import MapConfig, attach_map
from elementary.kernel.markup import is_blank, parse_markup, to_fragment, to_fragments
from elementary.kernel.nodes import CodeNode, MapNode, MarkdownNode
from elementary.kernel.types import (
    CODE_HIGHLIGHT_ERROR,
    MAP_CONFIG_INVALID,
    MARKDOWN_ERROR,
    UNSUPPORTED_CODE_LANGUAGE,
    Compiled,
    compiled,
    failed,
)

if TYPE_CHECKING:
    from elementary.kernel.compiler import CompileEnv

logger = logging.getLogger(__name__)

MARKDOWN_CLASS = "markdown"


# ---------------------------------------------------------------------------
# Map
# ---------------------------------------------------------------------------


def compile_map(env: CompileEnv, node: MapNode, raw: Any, ctx: dict[str, Any]) -> Compiled:
    """
    Evaluate id/center/markers now; zoom and style are taken literally.
    Returns the placeholder and defers construction of the map itself.
    """
    evaluated: dict[str, Any] = {}
    for key in ("id", "center", "markers"):
        result = env.encode(node.map.get(key), ctx)
        if result.err:
            return failed(raw, ctx, result.err.reason, result.err.message)
        evaluated[key] = result.value

    fields: dict[str, Any] = {
        "container": evaluated["id"],
        "center": evaluated["center"],
        "markers": evaluated["markers"] or [],
        "access_token": env.options.map_access_token,
    }
    for key in ("style", "zoom"):
        if node.map.get(key) is not None:
            fields[key] = node.map[key]

    try:
        config = MapConfig.model_validate(fields)
    except ValidationError as e:
        return failed(raw, ctx, MAP_CONFIG_INVALID, str(e))

    if env.app.map_widget is not None:
        env.defer(attach_map(config, env.app.map_widget))

    return compiled(
        [
            "div",
            {
                "style": f"width: 100%; height: {env.options.map_height}",
                "id": config.container,
            },
        ]
    )


# ---------------------------------------------------------------------------
# Code
# ---------------------------------------------------------------------------


def compile_code(env: CompileEnv, node: CodeNode, raw: Any, ctx: dict[str, Any]) -> Compiled:
    source = env.encode(node.source, ctx)
    if source.err:
        return failed(raw, ctx, source.err.reason, source.err.message)
    lang = env.encode(node.lang, ctx)
    if lang.err:
        return failed(raw, ctx, lang.err.reason, lang.err.message)
    if not isinstance(lang.value, str) or not lang.value:
        return failed(raw, ctx, UNSUPPORTED_CODE_LANGUAGE)

    text = source.value
    if lang.value == "json" and isinstance(text, Mapping | list | tuple):
        text = json.dumps(text, indent=2)
    elif text is None:
        text = ""
    elif not isinstance(text, str):
        text = str(text)

    try:
        markup = env.app.highlighter.highlight(lang.value, text)
    except UnknownLanguage:
        return failed(raw, ctx, UNSUPPORTED_CODE_LANGUAGE)
    except Exception as e:
        logger.exception("code: highlighter failed for %s", lang.value)
        return failed(raw, ctx, CODE_HIGHLIGHT_ERROR, str(e))

    css_class = f"language-{lang.value}"
    children = to_fragments(parse_markup(markup))
    return compiled(["pre", {"class": css_class}, ["code", {"class": css_class}, *children]])


# ---------------------------------------------------------------------------
# Markdown
# ---------------------------------------------------------------------------


def compile_markdown(env: CompileEnv, node: MarkdownNode, raw: Any, ctx: dict[str, Any]) -> Compiled:
    result = env.encode(node.source, ctx)
    if result.err:
        return failed(raw, ctx, result.err.reason, result.err.message)

    text = result.value
    if text is None:
        text = ""
    elif not isinstance(text, str):
        text = str(text)

    try:
        html = env.app.markdown.render(text)
    except Exception as e:
        logger.exception("markdown: renderer failed")
        return failed(raw, ctx, MARKDOWN_ERROR, str(e))

    nodes = [n for n in parse_markup(html) if not is_blank(n)]
    if len(nodes) == 1 and nodes[0]["type"] == "element":
        return compiled(to_fragment(nodes[0]))
    return compiled(["div", {"class": MARKDOWN_CLASS}, *to_fragments(nodes)])
