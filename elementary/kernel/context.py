"""
Elementary Kernel: Context Builder

Every compile step evaluates expressions against a context: a plain dict of
names to values. Contexts are never mutated by a nested call; each helper here
returns a new dict.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any


def with_ambient(ambient: Mapping[str, Any], *layers: Mapping[str, Any] | None) -> dict[str, Any]:
    """
    Ambient configuration merged with zero or more layers, later layers winning.
    Used for the top-level model, ViewRef params and loop iterations.
    """
    ctx: dict[str, Any] = dict(ambient)
    for layer in layers:
        if layer:
            ctx.update(layer)
    return ctx


def loop_context(ambient: Mapping[str, Any], item: Any, index: int, shared: Any) -> dict[str, Any]:
    """Context for one loop iteration. The enclosing context is not inherited."""
    return with_ambient(ambient, {"item": item, "context": shared, "index": index})


def event_context(ctx: Mapping[str, Any], key: str | None) -> dict[str, Any]:
    """Compile-time context plus the runtime event's properties."""
    merged = dict(ctx)
    merged["event"] = {"key": key}
    return merged
