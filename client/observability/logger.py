"""
JSONL diagnostic logger for the analytics client.

- Write one JSON object per line
- Output to stdout (patchable sink)
- No buffering, no batching
- Never raises into the host application

This is the client's own diagnostics channel, separate from the
analytics events it delivers.
"""

from __future__ import annotations

import json
import sys
import time
from typing import Any, Callable, Mapping


LEVEL_INFO = "INFO"
LEVEL_WARNING = "WARNING"
LEVEL_ERROR = "ERROR"


# ------------------------------------------------------------------
# Explicit output sink (patchable in tests)
# ------------------------------------------------------------------

def _stdout_print(line: str) -> None:
    sys.stdout.write(line + "\n")
    sys.stdout.flush()

_print: Callable[[str], None] = _stdout_print


def now_ms() -> int:
    """Wall-clock milliseconds."""
    return time.time_ns() // 1_000_000


def log_event(event: Mapping[str, Any]) -> None:
    """
    Write a single JSONL diagnostic record.

    The caller supplies event_type and any context (session_id, user_id).
    ts_ms and level are filled in when missing (level defaults to INFO).
    """
    record: dict[str, Any] = {"ts_ms": now_ms(), "level": LEVEL_INFO}
    record.update(event)

    try:
        line = json.dumps(record, ensure_ascii=False, separators=(",", ":"))
    except (TypeError, ValueError) as e:
        # Last-resort fallback - logging must never crash the host
        fallback: dict[str, Any] = {
            "ts_ms": record.get("ts_ms"),
            "level": LEVEL_ERROR,
            "event_type": "LOGGER_SERIALIZATION_ERROR",
            "error": str(e),
            "original_event_repr": repr(event),
        }
        line = json.dumps(fallback, ensure_ascii=False, separators=(",", ":"))

    try:
        _print(line)
    except (OSError, ValueError):
        # stdout closed or detached by the host
        pass
