"""
Elementary Kernel: Timing

tc(fn) runs fn and reports how long it took. Instrumentation only: the result
is passed through untouched, and exceptions propagate.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any

from elementary.kernel.types import Timed


def tc(fn: Callable[[], Any]) -> Timed:
    start = time.perf_counter()
    res = fn()
    return Timed(res=res, millis=(time.perf_counter() - start) * 1000)
