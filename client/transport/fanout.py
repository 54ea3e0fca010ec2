"""
Dual-delivery transport.

Treats several transports as one: open() opens all of them, write() and
flush() reach every child, close() closes every child. All children must
share one framing so the same bytes are valid for each of them.
"""

from __future__ import annotations

from typing import Sequence

from transport.base import Transport, TransportError, TransportHandle, WriteError


class FanoutHandle(TransportHandle):
    def __init__(self, handles: Sequence[TransportHandle]) -> None:
        self._handles = tuple(handles)

    def write(self, data: bytes) -> None:
        # Every child gets the bytes even if an earlier one failed
        first_error: WriteError | None = None
        for handle in self._handles:
            try:
                handle.write(data)
            except WriteError as e:
                first_error = first_error or e
        if first_error is not None:
            raise first_error

    def flush(self) -> None:
        first_error: WriteError | None = None
        for handle in self._handles:
            try:
                handle.flush()
            except WriteError as e:
                first_error = first_error or e
        if first_error is not None:
            raise first_error

    def close(self) -> None:
        for handle in self._handles:
            handle.close()


class FanoutTransport(Transport):
    def __init__(self, transports: Sequence[Transport]) -> None:
        if not transports:
            raise ValueError("FanoutTransport needs at least one transport")

        framings = {t.framing for t in transports}
        if len(framings) != 1:
            raise ValueError(
                "FanoutTransport children must share one framing, got "
                + ", ".join(sorted(f.value for f in framings))
            )

        self._transports = tuple(transports)
        self.framing = transports[0].framing

    @property
    def transports(self) -> tuple[Transport, ...]:
        return self._transports

    def open(self, session_id: str) -> FanoutHandle:
        opened: list[TransportHandle] = []
        try:
            for transport in self._transports:
                opened.append(transport.open(session_id))
        except TransportError:
            for handle in opened:
                handle.close()
            raise
        return FanoutHandle(opened)

    def describe(self) -> dict[str, object]:
        return {
            **super().describe(),
            "children": [t.describe() for t in self._transports],
        }
