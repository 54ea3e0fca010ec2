"""
Identity suppliers for analytics sessions.

The session manager treats identities as opaque strings. Resolvers are
injected; no retry or caching logic belongs in the manager.
"""

from __future__ import annotations

import getpass
import uuid
from typing import Protocol


def new_guid() -> str:
    """Random GUID in canonical 8-4-4-4-12 form."""
    return str(uuid.uuid4())


class IdentityResolver(Protocol):
    """Injected identity capability."""

    def get_user_id(self) -> str:
        """Stable per installation / login."""
        ...

    def new_session_guid(self) -> str:
        """Fresh random GUID string."""
        ...

    def get_device_id(self) -> str:
        """Stable per machine."""
        ...


class PlatformIdentityResolver:
    """
    Identities derived from the running platform.

    user id:   login name of the current process owner
    device id: hardware (MAC) address as 12 hex digits
    """

    def get_user_id(self) -> str:
        try:
            return getpass.getuser()
        except (KeyError, OSError):
            # No passwd entry / no login env (containers)
            return "unknown"

    def new_session_guid(self) -> str:
        return new_guid()

    def get_device_id(self) -> str:
        return f"{uuid.getnode():012X}"


class StaticIdentityResolver:
    """Fixed identities supplied by the host application."""

    def __init__(self, user_id: str, device_id: str = "") -> None:
        self._user_id = user_id
        self._device_id = device_id

    def get_user_id(self) -> str:
        return self._user_id

    def new_session_guid(self) -> str:
        return new_guid()

    def get_device_id(self) -> str:
        return self._device_id
