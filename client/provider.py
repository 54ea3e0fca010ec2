"""
Analytics provider factory.

Builds a SessionManager and its transport from an AnalyticsConfig.
Each call returns a fresh, independently owned manager; there is no
process-wide provider instance.
"""

from __future__ import annotations

import atexit
from datetime import datetime
from typing import Callable

from config import AnalyticsConfig, ConfigInvalid
from constants import SINK_FILE, SINK_SOCKET
from observability.logger import LEVEL_ERROR, log_event
from protocol.framing import Framing
from session.identity import IdentityResolver
from session.manager import SessionManager
from transport.base import Transport
from transport.fanout import FanoutTransport
from transport.file_transport import FileTransport
from transport.socket_transport import SocketTransport


def build_transport(config: AnalyticsConfig) -> Transport:
    """
    Transport for a validated config.

    socket -> line-framed TCP
    file   -> one JSON document per session
    both   -> TCP + file, both line-framed so the fan-out writes identical bytes
    """
    if config.sink == SINK_FILE:
        return FileTransport(output_dir=config.output_dir, framing=Framing.DOCUMENT)

    socket_transport = SocketTransport(
        host_name=config.host_name,
        port=config.port,
        framing=Framing.LINES,
        resolve_timeout_s=config.resolve_timeout_s,
        connect_timeout_s=config.connect_timeout_s,
    )
    if config.sink == SINK_SOCKET:
        return socket_transport

    return FanoutTransport([
        socket_transport,
        FileTransport(output_dir=config.output_dir, framing=Framing.LINES),
    ])


def create_session_manager(
    config: AnalyticsConfig,
    *,
    identity: IdentityResolver | None = None,
    transport: Transport | None = None,
    clock: Callable[[], datetime] | None = None,
    register_shutdown: bool = False,
) -> SessionManager | None:
    """
    Validate `config` and build a manager for it.

    Returns:
        None (after logging once) if the config is invalid.

    register_shutdown installs an atexit hook that ends an active session
    at interpreter exit.
    """
    try:
        config.validate()
    except ConfigInvalid as e:
        log_event({
            "level": LEVEL_ERROR,
            "event_type": "CONFIG_INVALID",
            "error": str(e),
            "sink": config.sink,
            "profile": config.profile,
        })
        return None

    manager = SessionManager(
        config=config,
        transport=transport or build_transport(config),
        identity=identity,
        clock=clock,
    )

    if register_shutdown:
        atexit.register(manager.shutdown)

    return manager


def create_from_values(
    get_value: Callable[[str], str | None],
    *,
    identity: IdentityResolver | None = None,
) -> SessionManager | None:
    """
    Build a socket manager from a host-supplied configuration delegate.

    Returns:
        None (after logging once) if a value is missing or malformed.
    """
    try:
        config = AnalyticsConfig.from_values(get_value)
    except ConfigInvalid as e:
        log_event({
            "level": LEVEL_ERROR,
            "event_type": "CONFIG_INVALID",
            "error": str(e),
        })
        return None

    return create_session_manager(config, identity=identity)
