"""
CONSTANTS
---------
Single source of truth for wire names, defaults and limits.

Rules:
- If changing a value changes emitted bytes or runtime behavior, it belongs here.
- No magic strings elsewhere in the codebase.
- Other modules MUST import from this file.
"""

from __future__ import annotations

from typing import Final, Tuple

# =============================================================================
# Session framing
# =============================================================================

SESSION_START_EVENT_NAME: Final[str] = "Session.Start"
SESSION_END_EVENT_NAME: Final[str] = "Session.End"

# Deterministic session ids: "<user_id>-<started_at formatted>"
SESSION_ID_SEPARATOR: Final[str] = "-"
SESSION_ID_TIME_FORMAT: Final[str] = "%Y.%m.%d-%H.%M.%S"

# =============================================================================
# Event names for fixed-shape record kinds
# =============================================================================

ITEM_PURCHASE_EVENT_NAME: Final[str] = "ItemPurchase"
CURRENCY_PURCHASE_EVENT_NAME: Final[str] = "CurrencyPurchase"
CURRENCY_GIVEN_EVENT_NAME: Final[str] = "CurrencyGiven"
ERROR_EVENT_NAME: Final[str] = "Error"
PROGRESS_EVENT_NAME: Final[str] = "Progress"

# =============================================================================
# Network
# =============================================================================

PORT_MIN: Final[int] = 1
PORT_MAX: Final[int] = 65_535

DEFAULT_RESOLVE_TIMEOUT_S: Final[float] = 5.0
DEFAULT_CONNECT_TIMEOUT_S: Final[float] = 5.0

# =============================================================================
# File sink
# =============================================================================

DEFAULT_OUTPUT_DIR: Final[str] = "analytics"
DOCUMENT_FILE_SUFFIX: Final[str] = ".json"
LINES_FILE_SUFFIX: Final[str] = ".jsonl"

# =============================================================================
# Configuration
# =============================================================================

ENV_PREFIX: Final[str] = "TCPLOGGING_"

SINK_SOCKET: Final[str] = "socket"
SINK_FILE: Final[str] = "file"
SINK_BOTH: Final[str] = "both"
SINKS: Final[Tuple[str, ...]] = (SINK_SOCKET, SINK_FILE, SINK_BOTH)

PROFILE_RELEASE: Final[str] = "release"
PROFILES: Final[Tuple[str, ...]] = (PROFILE_RELEASE, "debug", "test", "development")

TRUTHY_VALUES: Final[Tuple[str, ...]] = ("1", "true", "yes", "y", "on")

# Keys understood by a host-supplied configuration delegate
CONFIG_KEY_HOST_NAME: Final[str] = "TCPLoggingHostName"
CONFIG_KEY_PORT: Final[str] = "TCPLoggingPort"
CONFIG_KEY_GENERATE_SESSION_GUID: Final[str] = "TCPLoggingGenerateSessionGuid"
CONFIG_KEY_TIMESTAMP_EVENTS: Final[str] = "TCPLoggingTimeStampEvents"
