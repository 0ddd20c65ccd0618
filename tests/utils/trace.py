# tests/utils/trace.py

import builtins
import importlib
import os
from collections.abc import Callable

TRACE_ENABLED = os.environ.get("TRACE", "").lower() in {"1", "true", "yes"}


def make_trace(icon: str = "🧪") -> Callable[..., None]:
    def local_trace(label: str, *args: object) -> None:
        TRACE(f"{icon} {label}", *args)

    return local_trace


def TRACE(label: str, *args: object) -> None:  # noqa: N802
    """Lightweight debug print for the test suite, enabled with TRACE=1."""
    if not TRACE_ENABLED:
        return

    # Avoid using the possibly monkeypatched "time" from sys.modules
    _real_time = importlib.import_module("time")  # guaranteed pristine copy

    ts = _real_time.monotonic()
    builtins.print(f"[TRACE {ts:.6f}] {label}:", *args, flush=True)
