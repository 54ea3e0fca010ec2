# pylint: disable=missing-module-docstring,missing-function-docstring

from typing import Any

import pytest

import provider as provider_mod
from config import AnalyticsConfig, ConfigInvalid, parse_bool, parse_port
from protocol.framing import Framing
from provider import build_transport, create_from_values, create_session_manager
from session.manager import SessionManager
from transport.fanout import FanoutTransport
from transport.file_transport import FileTransport
from transport.socket_transport import SocketTransport


# ---------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------

def test_parse_bool() -> None:
    assert parse_bool("true")
    assert parse_bool(" YES ")
    assert parse_bool("1")
    assert not parse_bool("false")
    assert not parse_bool(None)
    assert parse_bool("", default=True)


def test_parse_port() -> None:
    assert parse_port("9999") == 9999
    assert parse_port("") == 0
    assert parse_port(None) == 0
    with pytest.raises(ConfigInvalid):
        parse_port("abc")


# ---------------------------------------------------------------------
# Environment loading
# ---------------------------------------------------------------------

def test_load_from_env() -> None:
    config = AnalyticsConfig.load_from_env({
        "TCPLOGGING_HOST_NAME": " collector.local ",
        "TCPLOGGING_PORT": "7000",
        "TCPLOGGING_GENERATE_SESSION_GUID": "true",
        "TCPLOGGING_TIMESTAMP_EVENTS": "0",
        "TCPLOGGING_SINK": "Both",
        "TCPLOGGING_OUTPUT_DIR": "/tmp/out",
        "TCPLOGGING_CONNECT_TIMEOUT_S": "2.5",
    })

    assert config.host_name == "collector.local"
    assert config.port == 7000
    assert config.generate_session_guid is True
    assert config.timestamp_events is False
    assert config.sink == "both"
    assert config.output_dir == "/tmp/out"
    assert config.connect_timeout_s == 2.5
    assert config.resolve_timeout_s == 5.0
    assert config.profile == "release"


def test_empty_env_gives_defaults() -> None:
    config = AnalyticsConfig.load_from_env({})

    assert config == AnalyticsConfig()


def test_profile_override_and_blank_fallback() -> None:
    env = {
        "TCPLOGGING_HOST_NAME": "prod.example",
        "TCPLOGGING_PORT": "7000",
        "TCPLOGGING_DEBUG_HOST_NAME": "localhost",
        "TCPLOGGING_DEBUG_PORT": "   ",
    }

    config = AnalyticsConfig.load_from_env(env, profile="debug")

    assert config.profile == "debug"
    assert config.host_name == "localhost"
    assert config.port == 7000


def test_profile_selected_from_env() -> None:
    env = {
        "TCPLOGGING_PROFILE": "test",
        "TCPLOGGING_HOST_NAME": "prod.example",
        "TCPLOGGING_TEST_HOST_NAME": "test.example",
    }

    assert AnalyticsConfig.load_from_env(env).host_name == "test.example"


def test_malformed_number_raises() -> None:
    with pytest.raises(ConfigInvalid):
        AnalyticsConfig.load_from_env({"TCPLOGGING_RESOLVE_TIMEOUT_S": "soon"})


# ---------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------

@pytest.mark.parametrize(
    "config",
    [
        AnalyticsConfig(host_name="", port=9999),
        AnalyticsConfig(host_name="h", port=0),
        AnalyticsConfig(host_name="h", port=65536),
        AnalyticsConfig(host_name="h", port=1, sink="carrier-pigeon"),
        AnalyticsConfig(host_name="h", port=1, profile="staging"),
        AnalyticsConfig(sink="file", output_dir=" "),
        AnalyticsConfig(host_name="h", port=1, connect_timeout_s=0),
    ],
)
def test_validate_rejects(config: AnalyticsConfig) -> None:
    with pytest.raises(ConfigInvalid):
        config.validate()


def test_file_sink_needs_no_host() -> None:
    AnalyticsConfig(sink="file").validate()


def test_from_values_delegate() -> None:
    values = {
        "TCPLoggingHostName": "collector.local",
        "TCPLoggingPort": "7000",
        "TCPLoggingGenerateSessionGuid": "yes",
    }

    config = AnalyticsConfig.from_values(values.get)

    assert config.host_name == "collector.local"
    assert config.port == 7000
    assert config.generate_session_guid is True
    assert config.timestamp_events is False
    assert config.sink == "socket"


# ---------------------------------------------------------------------
# Provider
# ---------------------------------------------------------------------

@pytest.fixture
def logs(monkeypatch: pytest.MonkeyPatch) -> list[dict[str, Any]]:
    emitted: list[dict[str, Any]] = []
    monkeypatch.setattr(provider_mod, "log_event", emitted.append)
    return emitted


def test_invalid_config_yields_no_manager(logs: list[dict[str, Any]]) -> None:
    assert create_session_manager(AnalyticsConfig(host_name="", port=9999)) is None

    assert len(logs) == 1
    assert logs[0]["event_type"] == "CONFIG_INVALID"
    assert logs[0]["level"] == "ERROR"


def test_malformed_delegate_port_yields_no_manager(logs: list[dict[str, Any]]) -> None:
    values = {"TCPLoggingHostName": "h", "TCPLoggingPort": "nope"}

    assert create_from_values(values.get) is None
    assert [e["event_type"] for e in logs] == ["CONFIG_INVALID"]


def test_valid_config_yields_idle_manager() -> None:
    manager = create_session_manager(AnalyticsConfig(host_name="localhost", port=9999))

    assert isinstance(manager, SessionManager)
    assert not manager.is_active
    assert isinstance(manager.transport, SocketTransport)


def test_build_transport_per_sink(tmp_path) -> None:
    file_transport = build_transport(AnalyticsConfig(sink="file", output_dir=str(tmp_path)))
    socket_transport = build_transport(AnalyticsConfig(host_name="h", port=1))
    both = build_transport(
        AnalyticsConfig(host_name="h", port=1, sink="both", output_dir=str(tmp_path))
    )

    assert isinstance(file_transport, FileTransport)
    assert file_transport.framing is Framing.DOCUMENT

    assert isinstance(socket_transport, SocketTransport)
    assert socket_transport.framing is Framing.LINES

    assert isinstance(both, FanoutTransport)
    assert both.framing is Framing.LINES
    assert [type(t) for t in both.transports] == [SocketTransport, FileTransport]
