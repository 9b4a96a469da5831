"""
JSONL event logger.

- One JSON object per line
- Output to stdout
- No buffering, no batching
- No side effects beyond logging
"""

from __future__ import annotations

import json
import sys
import time
from enum import Enum
from typing import Any, Mapping, Callable


# ------------------------------------------------------------------
# Explicit output sink (patchable in tests)
# ------------------------------------------------------------------

def _stdout_print(line: str) -> None:
    sys.stdout.write(line + "\n")
    sys.stdout.flush()

_print: Callable[[str], None] = _stdout_print


def now_ms() -> int:
    """Wall-clock milliseconds, for event timestamps only."""
    return time.time_ns() // 1_000_000


def _default(value: Any) -> Any:
    # Enums (Mode, Phase, SignatureName) log as their wire value
    if isinstance(value, Enum):
        return value.value
    raise TypeError(f"{type(value).__name__} is not JSON serializable")


def log_event(event: Mapping[str, Any]) -> None:
    """
    Write a single JSONL event to stdout.

    The caller supplies a fully-formed event dict (ts_ms, event_type,
    session_id, ...). This function never raises: an unserializable
    payload is replaced by a LOGGER_SERIALIZATION_ERROR record.
    """
    try:
        line = json.dumps(event, ensure_ascii=False, separators=(",", ":"), default=_default)
    except (TypeError, ValueError) as e:
        # Last-resort fallback: logging must never crash a session
        fallback: dict[str, Any] = {
            "ts_ms": event.get("ts_ms"),
            "event_type": "LOGGER_SERIALIZATION_ERROR",
            "error": str(e),
            "original_event_repr": repr(event),
        }
        line = json.dumps(fallback, ensure_ascii=False, separators=(",", ":"))

    _print(line)
