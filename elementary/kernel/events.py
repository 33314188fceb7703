"""
Elementary Kernel: Event Binder

Rewrites event attributes (names starting with "on") into callables.
Nothing is evaluated at compile time: the handler expression is kept as-is and
evaluated against a fresh context each time the handler fires.

When a handler fires:
  1. ctx + {"event": {"key": ev.key}} is built,
  2. the handler expression is evaluated to get an event name,
  3. on success {"effect": <component>, "event": <name>, "value"?: ...}
     is forwarded to the update sink,
  4. on failure the error is logged and nothing is forwarded.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from elementary.kernel.context import event_context
from elementary.kernel.types import EVENT_PREFIX, DomEvent, EncodeResult, EventTarget

logger = logging.getLogger(__name__)

Encode = Callable[[Any, Mapping[str, Any]], EncodeResult]
Update = Callable[[dict[str, Any]], Any]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def is_event_attr(name: Any) -> bool:
    return isinstance(name, str) and name.startswith(EVENT_PREFIX)


def split_event_attrs(attrs: Mapping[str, Any]) -> tuple[dict[str, Any], dict[str, Any]]:
    """Split an attribute mapping into (plain attrs, event attrs)."""
    plain: dict[str, Any] = {}
    handlers: dict[str, Any] = {}
    for key, value in attrs.items():
        if is_event_attr(key):
            handlers[key] = value
        else:
            plain[key] = value
    return plain, handlers


def event_value(target: EventTarget | Any) -> Any:
    """
    The value an event carries: the target's files if any, else its value.
    Strings are left-trimmed; an empty string becomes None.
    """
    if target is None:
        return None
    value = getattr(target, "files", None) or getattr(target, "value", None)
    if isinstance(value, str):
        value = value.lstrip()
        return value or None
    return value


def make_update(effect: str, event_name: Any, value: Any = None) -> dict[str, Any]:
    """Build the message sent to the update sink. `value` is omitted when None."""
    message: dict[str, Any] = {"effect": effect, "event": event_name}
    if value is not None:
        message["value"] = value
    return message


class Handler:
    """A bound event handler. Call it with a DomEvent."""

    __slots__ = ("attr", "spec", "ctx", "effect", "_encode", "_update")

    def __init__(
        self,
        attr: str,
        spec: Any,
        ctx: dict[str, Any],
        effect: str,
        encode: Encode,
        update: Update,
    ) -> None:
        self.attr = attr
        self.spec = spec  # the handler expression, unevaluated
        self.ctx = ctx
        self.effect = effect
        self._encode = encode
        self._update = update

    def __call__(self, event: DomEvent) -> None:
        result = self._encode(self.spec, event_context(self.ctx, getattr(event, "key", None)))
        if result.err:
            logger.error(
                "Error encoding handler event %s spec=%r event=%r err=%r",
                self.attr,
                self.spec,
                event,
                result.err,
            )
            return
        self._update(make_update(self.effect, result.value, event_value(getattr(event, "target", None))))

    def __repr__(self) -> str:
        return f"Handler({self.attr!r}, effect={self.effect!r}, spec={self.spec!r})"


def bind_handlers(
    attrs: Mapping[str, Any],
    handler_specs: Mapping[str, Any],
    ctx: dict[str, Any],
    *,
    effect: str,
    encode: Encode,
    update: Update,
) -> dict[str, Any]:
    """
    Return a new attribute mapping: `attrs` plus one Handler per entry in
    `handler_specs`. The compile-time context is closed over, not copied per call.
    """
    bound = dict(attrs)
    for attr, spec in handler_specs.items():
        bound[attr] = Handler(attr, spec, ctx, effect, encode, update)
    return bound
