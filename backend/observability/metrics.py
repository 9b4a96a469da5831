"""
Timing helpers for observability.

- Durations use monotonic time (immune to clock changes)
- Event timestamps (ts_ms) use wall-clock time for readability
- One metric = one METRIC_TIMER log event, never aggregated
- Prefer the `timed()` context manager to avoid leaked timers
"""

from __future__ import annotations

import time
import uuid
from contextlib import contextmanager
from typing import Any, Iterator

from observability.logger import log_event, now_ms


# timer_id -> (metric_name, start_time_ns)
_active_timers: dict[str, tuple[str, int]] = {}


def start_timer(name: str) -> str:
    """
    Start a monotonic timer.

    Returns an opaque timer_id. Callers MUST call stop_timer() in a finally
    block unless using `timed()`.
    """
    timer_id = f"timer_{uuid.uuid4().hex[:12]}"
    _active_timers[timer_id] = (name, time.monotonic_ns())
    return timer_id


def stop_timer(
    timer_id: str,
    *,
    session_id: str | None = None,
    details: dict[str, Any] | None = None,
) -> int | None:
    """
    Stop a timer and emit a METRIC_TIMER event.

    Returns:
        duration_ms if the timer existed, else None
    """
    entry = _active_timers.pop(timer_id, None)
    if entry is None:
        return None

    name, start_ns = entry
    duration_ms = (time.monotonic_ns() - start_ns) // 1_000_000

    log_event({
        "ts_ms": now_ms(),
        "event_type": "METRIC_TIMER",
        "metric": name,
        "value_ms": duration_ms,
        "session_id": session_id,
        "details": details or {},
    })

    return duration_ms


@contextmanager
def timed(
    name: str,
    *,
    session_id: str | None = None,
    details: dict[str, Any] | None = None,
) -> Iterator[dict[str, Any]]:
    """
    Measure the enclosed block and emit exactly one metric.

    Yields the (mutable) details dict so the block can attach outcome
    fields before the metric is written. Exceptions inside the block are
    not suppressed; the metric is still emitted.

    Usage:
        with timed("tx_airtime", session_id=sid) as extra:
            ...
            extra["tones"] = n
    """
    extra: dict[str, Any] = dict(details or {})
    timer_id = start_timer(name)
    try:
        yield extra
    finally:
        stop_timer(timer_id, session_id=session_id, details=extra)
