"""
Durable file transport.

One file per session at <output_dir>/<session id><suffix>, created or
truncated on open. Every write is appended; flush() forces pending bytes
to durable storage (fsync).
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import BinaryIO

from constants import DOCUMENT_FILE_SUFFIX, LINES_FILE_SUFFIX
from protocol.framing import Framing
from transport.base import SinkOpenError, Transport, TransportHandle, WriteError


_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def session_file_name(session_id: str, framing: Framing) -> str:
    """
    Filesystem-safe file name derived from a session id.

    GUID braces, path separators and the like are replaced with "_".
    """
    stem = _UNSAFE_FILENAME_CHARS.sub("_", session_id).strip(".") or "session"
    suffix = LINES_FILE_SUFFIX if framing is Framing.LINES else DOCUMENT_FILE_SUFFIX
    return stem + suffix


class FileHandle(TransportHandle):
    """Append-only handle on one session file."""

    def __init__(self, path: Path, fh: BinaryIO) -> None:
        self.path = path
        self._fh: BinaryIO | None = fh

    def write(self, data: bytes) -> None:
        if self._fh is None:
            raise WriteError(f"{self.path} is closed")
        try:
            self._fh.write(data)
        except OSError as e:
            raise WriteError(f"write to {self.path} failed: {e}") from e

    def flush(self) -> None:
        if self._fh is None:
            raise WriteError(f"{self.path} is closed")
        try:
            self._fh.flush()
            os.fsync(self._fh.fileno())
        except OSError as e:
            raise WriteError(f"flush of {self.path} failed: {e}") from e

    def close(self) -> None:
        fh, self._fh = self._fh, None
        if fh is None:
            return
        try:
            fh.flush()
            os.fsync(fh.fileno())
        except OSError:
            pass
        try:
            fh.close()
        except OSError:
            # close() re-flushes; the descriptor is released regardless
            pass


class FileTransport(Transport):
    def __init__(
        self,
        *,
        output_dir: str | Path,
        framing: Framing = Framing.DOCUMENT,
    ) -> None:
        self.output_dir = Path(output_dir)
        self.framing = framing

    def path_for(self, session_id: str) -> Path:
        return self.output_dir / session_file_name(session_id, self.framing)

    def open(self, session_id: str) -> FileHandle:
        path = self.path_for(session_id)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fh = path.open("wb")
        except OSError as e:
            raise SinkOpenError(f"cannot create {path}: {e}") from e
        return FileHandle(path, fh)

    def describe(self) -> dict[str, object]:
        return {**super().describe(), "output_dir": str(self.output_dir)}
