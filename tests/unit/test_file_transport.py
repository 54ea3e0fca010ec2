# pylint: disable=missing-module-docstring,missing-function-docstring

import json
from pathlib import Path
from typing import Any

import pytest

from config import AnalyticsConfig
from protocol.framing import Framing
from session.identity import StaticIdentityResolver
from session.manager import SessionManager
from transport.base import SinkOpenError, WriteError
from transport.file_transport import FileHandle, FileTransport, session_file_name


def make_manager(transport: FileTransport) -> SessionManager:
    return SessionManager(
        config=AnalyticsConfig(sink="file"),
        transport=transport,
        identity=StaticIdentityResolver("alice"),
    )


# ---------------------------------------------------------------------
# Naming
# ---------------------------------------------------------------------

def test_session_file_name_is_filesystem_safe() -> None:
    assert session_file_name("alice-2024.05.17-09.30.15", Framing.DOCUMENT) == (
        "alice-2024.05.17-09.30.15.json"
    )
    assert session_file_name("{AB/CD}", Framing.LINES) == "_AB_CD_.jsonl"
    assert session_file_name("..", Framing.DOCUMENT) == "session.json"


# ---------------------------------------------------------------------
# Durable sessions
# ---------------------------------------------------------------------

def test_document_file_parses_after_session(tmp_path: Path) -> None:
    transport = FileTransport(output_dir=tmp_path / "analytics")
    manager = make_manager(transport)
    manager.set_session_id("s-1")

    manager.start_session()
    manager.record_event("Login", {"method": "password"})
    manager.record_progress("Start", "Level1")
    manager.end_session()

    doc = json.loads((tmp_path / "analytics" / "s-1.json").read_text(encoding="utf-8"))

    assert doc["sessionId"] == "s-1"
    assert [e["eventName"] for e in doc["events"]] == ["Session.Start", "Login", "Progress"]


def test_flushed_bytes_are_on_disk_before_end(tmp_path: Path) -> None:
    transport = FileTransport(output_dir=tmp_path)
    manager = make_manager(transport)
    manager.set_session_id("s-2")

    manager.start_session()
    manager.record_event("Login")
    assert manager.flush_events() is True

    on_disk = (tmp_path / "s-2.json").read_text(encoding="utf-8")
    assert '{"eventName":"Login"}' in on_disk

    manager.end_session()


def test_reopening_same_session_truncates(tmp_path: Path) -> None:
    transport = FileTransport(output_dir=tmp_path, framing=Framing.LINES)

    handle = transport.open("same")
    handle.write(b"stale data that must disappear\n")
    handle.close()

    handle = transport.open("same")
    handle.write(b"{}\n")
    handle.close()

    assert (tmp_path / "same.jsonl").read_bytes() == b"{}\n"


def test_unwritable_output_dir_raises_sink_open_error(tmp_path: Path) -> None:
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("file in the way", encoding="utf-8")

    with pytest.raises(SinkOpenError):
        FileTransport(output_dir=blocker).open("s")


def test_start_session_fails_cleanly_on_sink_error(tmp_path: Path) -> None:
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("file in the way", encoding="utf-8")
    manager = make_manager(FileTransport(output_dir=blocker))

    assert manager.start_session() is False
    assert not manager.is_active


def test_close_is_idempotent_and_blocks_writes(tmp_path: Path) -> None:
    handle = FileTransport(output_dir=tmp_path).open("s")

    handle.close()
    handle.close()

    with pytest.raises(WriteError):
        handle.write(b"late")
    with pytest.raises(WriteError):
        handle.flush()


class DiskFullFile:
    """File object whose flush and close fail the way a full disk does."""

    def __init__(self) -> None:
        self.close_calls = 0

    def write(self, data: bytes) -> int:
        return len(data)

    def flush(self) -> None:
        raise OSError(28, "No space left on device")

    def fileno(self) -> int:
        raise OSError(9, "Bad file descriptor")

    def close(self) -> None:
        self.close_calls += 1
        raise OSError(28, "No space left on device")


def test_close_never_raises_on_full_disk(tmp_path: Path) -> None:
    fh: Any = DiskFullFile()
    handle = FileHandle(tmp_path / "s.json", fh)

    handle.close()
    handle.close()

    assert fh.close_calls == 1
    with pytest.raises(WriteError):
        handle.write(b"late")


def test_flush_on_full_disk_raises_write_error(tmp_path: Path) -> None:
    fh: Any = DiskFullFile()
    handle = FileHandle(tmp_path / "s.json", fh)

    with pytest.raises(WriteError):
        handle.flush()
