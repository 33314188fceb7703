"""
Elementary Kernel: Shared Types

Data classes used across the encoder, compiler, event binder, widgets and
render driver. These are the contracts that bind the kernel together.

Key conventions:
- Nothing in the compile path raises. Every step returns a result object:
  `EncodeResult` from the encoder, `Compiled` from the compiler.
- A compile failure is a `CompileError` value carrying the offending spec node,
  the context active at failure, and a reason code.
- Fragments are plain lists/strings (JsonML-like), never classes, so they can be
  dumped as JSON or handed to any renderer that understands the shape.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

# ---------------------------------------------------------------------------
# Reason codes
# ---------------------------------------------------------------------------

VIEW_NAME_ENCODE_ERROR = "view_name_encode_error"
NO_SUCH_VIEW = "no_such_view"
UNSUPPORTED_VIEW_NAME_SPEC = "unsupported_view_name_spec"
VIEW_NOT_SUPPORTED = "view_not_supported"
VIEW_PARAMS_NOT_MAPPING = "view_params_not_mapping"
ATTRS_NOT_MAPPING = "attrs_not_mapping"
LOOP_NOT_SEQUENCE = "loop_not_sequence"
MAP_CONFIG_INVALID = "map_config_invalid"
UNSUPPORTED_CODE_LANGUAGE = "unsupported_code_language"
CODE_HIGHLIGHT_ERROR = "code_highlight_error"
MARKDOWN_ERROR = "markdown_error"
NO_VIEW_SPEC = "no_view_spec"

# Encoder reasons
BAD_OPERAND = "bad_operand"
TEMPLATE_ERROR = "template_error"
BAD_TIMESTAMP = "bad_timestamp"

# Attribute names starting with this are event handlers
EVENT_PREFIX = "on"

# The fragment a falsy condition collapses to: one generic container,
# no attributes, no children.
EMPTY_ELEMENT: tuple[str, ...] = ("div",)


def empty_element() -> list[Any]:
    """A fresh copy of the empty-element fragment."""
    return list(EMPTY_ELEMENT)


# ---------------------------------------------------------------------------
# Encoder results
# ---------------------------------------------------------------------------


@dataclass
class EncodeError:
    """Why an expression could not be evaluated."""

    reason: str
    expr: Any = None
    message: str = ""


@dataclass
class EncodeResult:
    """
    Result of evaluating one expression against a context.
    Exactly one of `value` / `err` is meaningful: `err is None` means success
    (and `value` may legitimately be None).
    """

    value: Any = None
    err: EncodeError | None = None

    @property
    def ok(self) -> bool:
        return self.err is None


# ---------------------------------------------------------------------------
# Compile results
# ---------------------------------------------------------------------------


@dataclass
class CompileError:
    """
    A failed compile step.

    spec: the spec node (or name-spec) that failed
    data: the context active at the time of failure
    reason: reason code (see constants above, or an encoder reason)
    """

    spec: Any
    data: dict[str, Any]
    reason: str
    message: str = ""


@dataclass
class Compiled:
    """
    Result of compiling a spec node.
    The compiler never throws: it always returns one of these.
    Results are never partial: when `err` is set, `view` is None.
    """

    view: Any = None
    err: CompileError | None = None

    @property
    def ok(self) -> bool:
        return self.err is None


def compiled(view: Any) -> Compiled:
    return Compiled(view=view)


def failed(spec: Any, data: dict[str, Any], reason: str, message: str = "") -> Compiled:
    return Compiled(err=CompileError(spec=spec, data=data, reason=reason, message=message))


# ---------------------------------------------------------------------------
# Runtime events
# ---------------------------------------------------------------------------


@dataclass
class EventTarget:
    """The element an event was dispatched on. Only value-bearing fields matter."""

    value: Any = None
    files: list[Any] | None = None


@dataclass
class DomEvent:
    """A runtime event as seen by a bound handler."""

    type: str = "click"
    key: str | None = None
    target: EventTarget = field(default_factory=EventTarget)


# ---------------------------------------------------------------------------
# Timing and render passes
# ---------------------------------------------------------------------------


@dataclass
class Timed:
    """What `tc(fn)` returns: fn's result, untouched, and how long it took."""

    res: Any
    millis: float


@dataclass
class RenderPass:
    """Outcome of one driver invocation: compile, then (maybe) render."""

    view: Any = None
    err: CompileError | None = None
    compile_millis: float = 0.0
    render_millis: float = 0.0
    rendered: bool = False
    deferred: int = 0


# A deferred callback registered during compilation, run after render
Deferred = Callable[[], None]


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------


@dataclass
class RenderOptions:
    """
    Per-driver options.

    ambient is the configuration merged into every compile context;
    debug/telemetry only control logging.
    """

    ambient: dict[str, Any] = field(default_factory=dict)
    debug: bool = False
    telemetry: bool = False
    map_access_token: str = ""
    map_height: str = "300px"
