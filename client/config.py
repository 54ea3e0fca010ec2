"""
Analytics client configuration.

Responsibilities:
- Read configuration from environment variables or a host-supplied delegate
- Resolve per-build-profile overrides (debug / test / development -> release)
- Provide a typed, immutable config object
- Validate it before any session is attempted

Non-responsibilities:
- No transport construction (see provider)
- No runtime mutation
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Callable, Mapping

from constants import (
    CONFIG_KEY_GENERATE_SESSION_GUID,
    CONFIG_KEY_HOST_NAME,
    CONFIG_KEY_PORT,
    CONFIG_KEY_TIMESTAMP_EVENTS,
    DEFAULT_CONNECT_TIMEOUT_S,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_RESOLVE_TIMEOUT_S,
    ENV_PREFIX,
    PORT_MAX,
    PORT_MIN,
    PROFILE_RELEASE,
    PROFILES,
    SINK_FILE,
    SINK_SOCKET,
    SINKS,
    TRUTHY_VALUES,
)


class ConfigInvalid(ValueError):
    """Configuration cannot produce a working analytics provider."""


# ------------------------------------------------------------------
# Parsing helpers
# ------------------------------------------------------------------

def parse_bool(raw: str | None, default: bool = False) -> bool:
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in TRUTHY_VALUES


def parse_port(raw: str | None) -> int:
    """Missing/blank -> 0 (rejected later by validate())."""
    if raw is None or not raw.strip():
        return 0
    try:
        return int(raw.strip())
    except ValueError as e:
        raise ConfigInvalid(f"invalid port number: {raw!r}") from e


def _parse_float(name: str, raw: str | None, default: float) -> float:
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw.strip())
    except ValueError as e:
        raise ConfigInvalid(f"invalid {name}: {raw!r}") from e


@dataclass(frozen=True)
class AnalyticsConfig:
    """
    Immutable analytics client configuration.

    Constructed once and handed to the provider factory.
    """

    # ------------------------------------------------------------------
    # Collector
    # ------------------------------------------------------------------

    host_name: str = ""
    port: int = 0

    # ------------------------------------------------------------------
    # Session identity
    # ------------------------------------------------------------------

    generate_session_guid: bool = False
    timestamp_events: bool = False

    # ------------------------------------------------------------------
    # Delivery
    # ------------------------------------------------------------------

    sink: str = SINK_SOCKET
    output_dir: str = DEFAULT_OUTPUT_DIR
    resolve_timeout_s: float = DEFAULT_RESOLVE_TIMEOUT_S
    connect_timeout_s: float = DEFAULT_CONNECT_TIMEOUT_S

    profile: str = PROFILE_RELEASE

    @property
    def uses_socket(self) -> bool:
        return self.sink != SINK_FILE

    @property
    def uses_file(self) -> bool:
        return self.sink != SINK_SOCKET

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(self) -> None:
        """
        Raises:
            ConfigInvalid on the first problem found.
        """
        if self.sink not in SINKS:
            raise ConfigInvalid(f"unknown sink {self.sink!r}; expected one of {SINKS}")
        if self.profile not in PROFILES:
            raise ConfigInvalid(f"unknown profile {self.profile!r}; expected one of {PROFILES}")

        if self.uses_socket:
            if not self.host_name.strip():
                raise ConfigInvalid("missing host name")
            if not PORT_MIN <= self.port <= PORT_MAX:
                raise ConfigInvalid(f"port must be {PORT_MIN}-{PORT_MAX}, got {self.port}")

        if self.uses_file and not self.output_dir.strip():
            raise ConfigInvalid("missing output directory for file sink")

        if self.resolve_timeout_s <= 0 or self.connect_timeout_s <= 0:
            raise ConfigInvalid("timeouts must be > 0")

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------

    @staticmethod
    def load_from_env(
        environ: Mapping[str, str] | None = None,
        *,
        profile: str | None = None,
    ) -> AnalyticsConfig:
        """
        Load configuration from TCPLOGGING_* environment variables.

        For a non-release profile, TCPLOGGING_<PROFILE>_<KEY> overrides
        TCPLOGGING_<KEY>; a missing or blank override falls back to the
        release value.

        Raises:
            ConfigInvalid if a numeric value cannot be parsed.
        """
        env = os.environ if environ is None else environ
        selected = (profile or env.get(ENV_PREFIX + "PROFILE") or PROFILE_RELEASE).strip().lower()

        def get(key: str) -> str | None:
            if selected != PROFILE_RELEASE:
                override = env.get(f"{ENV_PREFIX}{selected.upper()}_{key}")
                if override is not None and override.strip():
                    return override
            return env.get(ENV_PREFIX + key)

        return AnalyticsConfig(
            host_name=(get("HOST_NAME") or "").strip(),
            port=parse_port(get("PORT")),
            generate_session_guid=parse_bool(get("GENERATE_SESSION_GUID")),
            timestamp_events=parse_bool(get("TIMESTAMP_EVENTS")),
            sink=(get("SINK") or SINK_SOCKET).strip().lower(),
            output_dir=get("OUTPUT_DIR") or DEFAULT_OUTPUT_DIR,
            resolve_timeout_s=_parse_float(
                "resolve timeout", get("RESOLVE_TIMEOUT_S"), DEFAULT_RESOLVE_TIMEOUT_S
            ),
            connect_timeout_s=_parse_float(
                "connect timeout", get("CONNECT_TIMEOUT_S"), DEFAULT_CONNECT_TIMEOUT_S
            ),
            profile=selected,
        )

    @staticmethod
    def from_values(get_value: Callable[[str], str | None]) -> AnalyticsConfig:
        """
        Build a socket configuration from a host-supplied lookup delegate.

        Keys: TCPLoggingHostName, TCPLoggingPort,
        TCPLoggingGenerateSessionGuid, TCPLoggingTimeStampEvents.

        Raises:
            ConfigInvalid if the port is not a number.
        """
        return AnalyticsConfig(
            host_name=(get_value(CONFIG_KEY_HOST_NAME) or "").strip(),
            port=parse_port(get_value(CONFIG_KEY_PORT)),
            generate_session_guid=parse_bool(get_value(CONFIG_KEY_GENERATE_SESSION_GUID)),
            timestamp_events=parse_bool(get_value(CONFIG_KEY_TIMESTAMP_EVENTS)),
        )
