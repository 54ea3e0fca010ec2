# pylint: disable=missing-module-docstring,missing-function-docstring

import json
from typing import Any

import pytest

from observability import logger


@pytest.fixture
def captured(monkeypatch: pytest.MonkeyPatch) -> list[str]:
    lines: list[str] = []
    monkeypatch.setattr(logger, "_print", lines.append)
    return lines


def test_log_event_emits_one_jsonl_line(captured: list[str]) -> None:
    payload: dict[str, Any] = {
        "event_type": "SESSION_STARTED",
        "session_id": "s-1",
        "user_id": "alice",
    }

    logger.log_event(payload)

    assert len(captured) == 1
    decoded = json.loads(captured[0])

    # Caller fields preserved, defaults filled in
    assert {k: decoded[k] for k in payload} == payload
    assert decoded["level"] == logger.LEVEL_INFO
    assert isinstance(decoded["ts_ms"], int)


def test_caller_level_and_timestamp_win(captured: list[str]) -> None:
    logger.log_event({"event_type": "WRITE_FAILED", "level": logger.LEVEL_ERROR, "ts_ms": 5})

    decoded = json.loads(captured[0])

    assert decoded["level"] == "ERROR"
    assert decoded["ts_ms"] == 5


def test_unserializable_payload_falls_back(captured: list[str]) -> None:
    logger.log_event({"event_type": "BAD", "value": object()})

    decoded = json.loads(captured[0])

    assert decoded["event_type"] == "LOGGER_SERIALIZATION_ERROR"
    assert decoded["level"] == "ERROR"
    assert "BAD" in decoded["original_event_repr"]


def test_closed_sink_never_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    def broken_print(line: str) -> None:
        raise ValueError("I/O operation on closed file")

    monkeypatch.setattr(logger, "_print", broken_print)

    logger.log_event({"event_type": "SESSION_ENDED"})
