"""
Session manager state enumeration.

Rules:
- This enum defines ONLY the lifecycle states.
- No behavior, no helper methods, no side effects.
- Transitions are defined exclusively in SessionManager.
"""

from __future__ import annotations

from enum import Enum


class SessionState(str, Enum):
    """
    IDLE:   no transport handle is open; record calls are dropped.
    ACTIVE: exactly one transport handle is open; record calls are written.
    """

    IDLE = "IDLE"
    ACTIVE = "ACTIVE"
