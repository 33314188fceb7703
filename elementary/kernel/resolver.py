"""
Elementary Kernel: View Resolver

Pure function: (views, name_spec, ctx) → Compiled(view=<view spec>) | Compiled(err)

Two-phase resolution:
  - a literal string is looked up in the registry,
  - an expression (mapping or list) is evaluated first, and whatever it
    evaluates to is resolved again.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from elementary.kernel.types import (
    NO_SUCH_VIEW,
    UNSUPPORTED_VIEW_NAME_SPEC,
    VIEW_NAME_ENCODE_ERROR,
    Compiled,
    EncodeResult,
    compiled,
    failed,
)

Encode = Callable[[Any, Mapping[str, Any]], EncodeResult]

# Expressions may evaluate to further expressions; stop following after this many
MAX_NAME_DEPTH = 8


def resolve(
    views: Mapping[str, Any],
    name_spec: Any,
    ctx: dict[str, Any],
    encode: Encode,
    _depth: int = 0,
) -> Compiled:
    """
    Resolve a view name (literal or expression) to the registered view spec.
    Registry entries look like {"view": <spec node>}.
    """
    if isinstance(name_spec, str):
        entry = views.get(name_spec)
        if not entry:
            return failed(name_spec, ctx, NO_SUCH_VIEW)
        return compiled(entry.get("view") if isinstance(entry, Mapping) else None)

    if isinstance(name_spec, Mapping | list | tuple) and _depth < MAX_NAME_DEPTH:
        result = encode(name_spec, ctx)
        if result.err:
            return failed(name_spec, ctx, VIEW_NAME_ENCODE_ERROR, result.err.message)
        return resolve(views, result.value, ctx, encode, _depth + 1)

    return failed(name_spec, ctx, UNSUPPORTED_VIEW_NAME_SPEC)
