"""
debug_trace.py

Timing and call tracing for the situation plan editor.

Redraws, history steps and drags report what they did and how long it
took.  Everything is off unless SITPLAN_DEBUG_TRACE=1 is set; pointer
moves during a drag additionally need SITPLAN_TRACE_DRAG=1.
"""

import os
import sys
import time
import traceback
from contextlib import contextmanager
from datetime import datetime
from functools import wraps

DEBUG_TRACE = os.environ.get("SITPLAN_DEBUG_TRACE", "") == "1"

# One line per pointer move, only useful when chasing drag problems
TRACE_DRAG = os.environ.get("SITPLAN_TRACE_DRAG", "") == "1"

# Copy of the trace lines (None for stderr only)
LOG_FILE = os.environ.get("SITPLAN_TRACE_FILE") or None

_log_file = None


def _open_log_file():
    global _log_file
    if LOG_FILE and _log_file is None:
        try:
            _log_file = open(LOG_FILE, "w", encoding="utf-8")
        except OSError as e:
            print(f"debug_trace: cannot open {LOG_FILE}: {e}", file=sys.stderr)
    return _log_file


def _enabled(category: str) -> bool:
    if not DEBUG_TRACE:
        return False
    return category != "DRAG" or TRACE_DRAG


def trace(msg: str, category: str = "INFO"):
    """Write ``[time] [CATEGORY] msg`` to stderr and the trace file."""
    if not _enabled(category):
        return

    stamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]
    line = f"[{stamp}] [{category}] {msg}"
    print(line, file=sys.stderr, flush=True)

    log_file = _open_log_file()
    if log_file:
        log_file.write(line + "\n")
        log_file.flush()


@contextmanager
def trace_timing(what: str, category: str = "SYNC"):
    """Report how long the wrapped block took, e.g. ``Redraw took 1.20ms``."""
    start = time.perf_counter()
    try:
        yield
    finally:
        if _enabled(category):
            trace(f"{what} took {(time.perf_counter() - start) * 1000.0:.2f}ms", category)


def trace_exception(msg: str = "Exception"):
    if DEBUG_TRACE:
        trace(f"{msg}: {traceback.format_exc()}", "ERROR")


def trace_call(category: str = "CALL"):
    """Decorator reporting entry, exit and duration of a call.

    Tracing is decided when the module is imported; with tracing off the
    function is returned unwrapped.
    """
    def decorator(func):
        if not DEBUG_TRACE:
            return func

        @wraps(func)
        def wrapper(*args, **kwargs):
            name = func.__qualname__
            trace(f">>> {name}", category)
            start = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                trace(f"!!! {name} raised {type(e).__name__}: {e}", "ERROR")
                raise
            trace(f"<<< {name} ({(time.perf_counter() - start) * 1000.0:.2f}ms)", category)
            return result
        return wrapper
    return decorator


def close_log():
    global _log_file
    if _log_file:
        _log_file.close()
        _log_file = None
