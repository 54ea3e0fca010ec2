"""
Analytics session container.

- Owned and mutated by SessionManager only
- NOT a state machine
- Contains no transport or encoding logic
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass
class AnalyticsSession:
    """Mutable record of the current (or most recent) session."""

    # ------------------------------------------------------------------
    # Identity / lifecycle
    # ------------------------------------------------------------------

    session_id: str
    user_id: str
    started_at: datetime
    device_id: str | None = None

    # ------------------------------------------------------------------
    # Manager-controlled state
    # ------------------------------------------------------------------

    active: bool = False

    # Fragments already written into the session body (session-start included).
    # Drives the separator decision for the next fragment.
    events_written: int = 0

    @property
    def has_written_event(self) -> bool:
        return self.events_written > 0

    def log_context(self) -> dict[str, Any]:
        """Standard logging context for this session."""
        return {
            "session_id": self.session_id,
            "user_id": self.user_id,
        }
