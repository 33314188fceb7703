"""
Elementary Kernel: Default Encoder

Pure function: (expr, ctx) → EncodeResult
No side effects. Never raises. Deterministic for a given context.

The compiler only depends on the contract `encode(expr, ctx) -> EncodeResult`;
applications can pass their own evaluator. This default covers what views
typically need:

  None / numbers / booleans     → themselves
  "plain string"                → itself
  "Hello {{user.name}}"         → mustache template rendered with chevron
  [a, b]                        → [encode(a), encode(b)]
  {"get": "item.tags.0"}        → dotted lookup into the context (missing → None)
  {"quote": x}                  → x, unevaluated
  {"not": e}                    → not encode(e)
  {"eq": [a, b]}                → encode(a) == encode(b)
  {"and": [...]}, {"or": [...]} → boolean fold, short-circuiting
  {"if": [cond, then, else]}    → then / else by truthiness of cond
  {"concat": [...]}             → "".join of the encoded parts
  {"timestamp": e, "format": f} → epoch seconds/millis or ISO-8601 → strftime(f)
  {"title": ..., "class": ...}  → any other mapping is evaluated value-wise
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any

import chevron

from elementary.kernel.types import (
    BAD_OPERAND,
    BAD_TIMESTAMP,
    TEMPLATE_ERROR,
    EncodeError,
    EncodeResult,
)

DEFAULT_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M"

# Epoch values above this are taken as milliseconds
_MILLIS_THRESHOLD = 100_000_000_000

# {{name}} → {{&name}}: values come out raw, escaping is the renderer's job
_ESCAPED_TAG = re.compile(r"(?<!\{)\{\{(?![{#/^>!&=])\s*")

# Operator keys and the extra keys each one accepts
_MODIFIERS: dict[str, set[str]] = {
    "get": set(),
    "quote": set(),
    "not": set(),
    "eq": set(),
    "and": set(),
    "or": set(),
    "if": set(),
    "concat": set(),
    "timestamp": {"format"},
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def encode(expr: Any, ctx: Mapping[str, Any]) -> EncodeResult:
    """
    Evaluate an expression-shaped spec fragment against a context.
    Returns a value or an error, never both. Never raises.
    """
    if expr is None or isinstance(expr, bool | int | float):
        return EncodeResult(value=expr)

    if isinstance(expr, str):
        return _encode_template(expr, ctx)

    if isinstance(expr, list | tuple):
        return _encode_sequence(expr, ctx)

    if isinstance(expr, Mapping):
        op = operator_of(expr)
        if op is None:
            return _encode_mapping(expr, ctx)
        return _OPERATORS[op](expr, ctx)

    # Anything else (callables, objects handed in by the host) passes through
    return EncodeResult(value=expr)


def operator_of(expr: Mapping[str, Any]) -> str | None:
    """
    The operator of a mapping expression, or None for a plain data mapping.
    A mapping is an operator call only when its keys are one operator plus
    that operator's own modifiers: {"title": ..., "timestamp": ...} is data.
    """
    keys = set(expr)
    for key in expr:
        if key in _MODIFIERS and keys - {key} <= _MODIFIERS[key]:
            return key
    return None


def lookup(ctx: Any, path: str) -> Any:
    """
    Dotted-path lookup: "item.tags.0" walks mappings by key and sequences by index.
    Missing segments resolve to None, and so does an empty path.
    """
    segments = [s for s in path.split(".") if s]
    if not segments:
        return None
    current = ctx
    for segment in segments:
        if isinstance(current, Mapping):
            current = current.get(segment)
        elif isinstance(current, list | tuple) and segment.lstrip("-").isdigit():
            index = int(segment)
            current = current[index] if -len(current) <= index < len(current) else None
        else:
            return None
        if current is None:
            return None
    return current


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _fail(reason: str, expr: Any, message: str = "") -> EncodeResult:
    return EncodeResult(err=EncodeError(reason=reason, expr=expr, message=message))


def _encode_template(template: str, ctx: Mapping[str, Any]) -> EncodeResult:
    if "{{" not in template:
        return EncodeResult(value=template)
    try:
        rendered = chevron.render(_ESCAPED_TAG.sub("{{&", template), dict(ctx))
    except Exception as e:
        return _fail(TEMPLATE_ERROR, template, str(e))
    return EncodeResult(value=rendered)


def _encode_sequence(items: list | tuple, ctx: Mapping[str, Any]) -> EncodeResult:
    out: list[Any] = []
    for item in items:
        result = encode(item, ctx)
        if result.err:
            return result
        out.append(result.value)
    return EncodeResult(value=out)


def _encode_mapping(expr: Mapping[str, Any], ctx: Mapping[str, Any]) -> EncodeResult:
    out: dict[str, Any] = {}
    for key, value in expr.items():
        result = encode(value, ctx)
        if result.err:
            return result
        out[key] = result.value
    return EncodeResult(value=out)


def _operands(expr: Mapping[str, Any], op: str, arity: int | None = None) -> list[Any] | None:
    """Operand list for list-taking operators, or None when malformed."""
    operands = expr[op]
    if not isinstance(operands, list | tuple):
        return None
    if arity is not None and len(operands) != arity:
        return None
    return list(operands)


def _op_get(expr: Mapping[str, Any], ctx: Mapping[str, Any]) -> EncodeResult:
    path = expr["get"]
    if not isinstance(path, str):
        return _fail(BAD_OPERAND, expr, "get expects a dotted path string")
    return EncodeResult(value=lookup(ctx, path))


def _op_quote(expr: Mapping[str, Any], ctx: Mapping[str, Any]) -> EncodeResult:
    return EncodeResult(value=expr["quote"])


def _op_not(expr: Mapping[str, Any], ctx: Mapping[str, Any]) -> EncodeResult:
    result = encode(expr["not"], ctx)
    if result.err:
        return result
    return EncodeResult(value=not result.value)


def _op_eq(expr: Mapping[str, Any], ctx: Mapping[str, Any]) -> EncodeResult:
    operands = _operands(expr, "eq", 2)
    if operands is None:
        return _fail(BAD_OPERAND, expr, "eq expects [a, b]")
    both = _encode_sequence(operands, ctx)
    if both.err:
        return both
    left, right = both.value
    return EncodeResult(value=left == right)


def _op_and(expr: Mapping[str, Any], ctx: Mapping[str, Any]) -> EncodeResult:
    operands = _operands(expr, "and")
    if operands is None:
        return _fail(BAD_OPERAND, expr, "and expects a list")
    value: Any = True
    for operand in operands:
        result = encode(operand, ctx)
        if result.err:
            return result
        value = result.value
        if not value:
            break
    return EncodeResult(value=value)


def _op_or(expr: Mapping[str, Any], ctx: Mapping[str, Any]) -> EncodeResult:
    operands = _operands(expr, "or")
    if operands is None:
        return _fail(BAD_OPERAND, expr, "or expects a list")
    value: Any = False
    for operand in operands:
        result = encode(operand, ctx)
        if result.err:
            return result
        value = result.value
        if value:
            break
    return EncodeResult(value=value)


def _op_if(expr: Mapping[str, Any], ctx: Mapping[str, Any]) -> EncodeResult:
    operands = _operands(expr, "if", 3)
    if operands is None:
        return _fail(BAD_OPERAND, expr, "if expects [cond, then, else]")
    cond = encode(operands[0], ctx)
    if cond.err:
        return cond
    return encode(operands[1] if cond.value else operands[2], ctx)


def _op_concat(expr: Mapping[str, Any], ctx: Mapping[str, Any]) -> EncodeResult:
    operands = _operands(expr, "concat")
    if operands is None:
        return _fail(BAD_OPERAND, expr, "concat expects a list")
    parts = _encode_sequence(operands, ctx)
    if parts.err:
        return parts
    return EncodeResult(value="".join("" if p is None else str(p) for p in parts.value))


def _op_timestamp(expr: Mapping[str, Any], ctx: Mapping[str, Any]) -> EncodeResult:
    result = encode(expr["timestamp"], ctx)
    if result.err:
        return result
    fmt = expr.get("format", DEFAULT_TIMESTAMP_FORMAT)
    if not isinstance(fmt, str):
        return _fail(BAD_OPERAND, expr, "timestamp format must be a string")

    moment = _to_datetime(result.value)
    if moment is None:
        return _fail(BAD_TIMESTAMP, expr, f"cannot read {result.value!r} as a timestamp")
    try:
        return EncodeResult(value=moment.strftime(fmt))
    except ValueError as e:
        return _fail(BAD_OPERAND, expr, f"timestamp format {fmt!r}: {e}")


def _to_datetime(value: Any) -> datetime | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        seconds = value / 1000 if abs(value) >= _MILLIS_THRESHOLD else value
        try:
            return datetime.fromtimestamp(seconds, tz=UTC)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        try:
            moment = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
        return moment if moment.tzinfo else moment.replace(tzinfo=UTC)
    return None


_OPERATORS: dict[str, Callable[[Mapping[str, Any], Mapping[str, Any]], EncodeResult]] = {
    "get": _op_get,
    "quote": _op_quote,
    "not": _op_not,
    "eq": _op_eq,
    "and": _op_and,
    "or": _op_or,
    "if": _op_if,
    "concat": _op_concat,
    "timestamp": _op_timestamp,
}
