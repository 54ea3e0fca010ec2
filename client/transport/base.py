"""
Transport contract.

This module defines the *interface only* - no encoding, framing decisions,
retries or session logic live here.

Key invariants:
- open() returns exactly one handle; the caller owns it until close().
- write() is synchronous: it returns once the bytes are handed to the OS
  (socket buffer or file system), not after remote acknowledgment.
- No reconnect and no retry. A failed write surfaces as WriteError.
- close() releases the underlying descriptor on every path and is idempotent.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from protocol.framing import Framing


# -------------------------
# Exceptions
# -------------------------

class TransportError(Exception):
    """Base class for transport errors."""


class ResolutionError(TransportError):
    """
    Raised when the collector host name cannot be resolved, or resolution
    did not complete within the configured timeout.
    """


class ConnectError(TransportError):
    """Raised when the collector refused or could not be reached."""


class SinkOpenError(TransportError):
    """Raised when a file sink cannot be created."""


class WriteError(TransportError):
    """
    Raised when bytes could not be fully written or flushed.

    The handle is left in an undefined state; the session must be ended
    explicitly by the caller.
    """


# -------------------------
# Contract
# -------------------------

class TransportHandle(ABC):
    """One open delivery channel for a single session."""

    @abstractmethod
    def write(self, data: bytes) -> None:
        """
        Write `data` in full.

        Raises:
            WriteError if the bytes could not be written.
        """
        raise NotImplementedError

    @abstractmethod
    def flush(self) -> None:
        """
        Push buffered bytes to the OS / durable storage.

        Raises:
            WriteError if the flush failed.
        """
        raise NotImplementedError

    @abstractmethod
    def close(self) -> None:
        """
        Release the underlying socket / file.

        Contract:
        - Never raises.
        - Idempotent: repeated calls are safe.
        """
        raise NotImplementedError


class Transport(ABC):
    """
    Factory for transport handles.

    Each transport is constructed with exactly one framing, which the
    session manager uses to frame everything it writes to handles of
    this transport.
    """

    framing: Framing

    @abstractmethod
    def open(self, session_id: str) -> TransportHandle:
        """
        Open a delivery channel for the given session.

        Raises:
            ResolutionError, ConnectError or SinkOpenError.
        """
        raise NotImplementedError

    def describe(self) -> dict[str, object]:
        """Observability summary of the target (no secrets)."""
        return {"transport": type(self).__name__, "framing": self.framing.value}
