"""
TCP socket transport.

Responsibilities:
- Resolve the collector host name within a bounded time
- Connect one stream socket per session
- Send each write in full (partial sends continue until done or failure)

Non-responsibilities:
- No reconnect-on-failure
- No retries, no buffering across sessions
- No framing decisions (declared via `framing`, applied by the caller)
"""

from __future__ import annotations

import socket
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from typing import Any, Callable, Sequence

from constants import DEFAULT_CONNECT_TIMEOUT_S, DEFAULT_RESOLVE_TIMEOUT_S
from protocol.framing import Framing
from transport.base import (
    ConnectError,
    ResolutionError,
    Transport,
    TransportHandle,
    WriteError,
)


# (family, type, proto, canonname, sockaddr) as returned by getaddrinfo
AddrInfo = tuple[Any, Any, int, str, Any]
Resolver = Callable[..., Sequence[AddrInfo]]


class SocketHandle(TransportHandle):
    """One connected stream socket."""

    def __init__(self, sock: socket.socket) -> None:
        self._sock: socket.socket | None = sock

    def write(self, data: bytes) -> None:
        if self._sock is None:
            raise WriteError("socket is closed")
        try:
            self._sock.sendall(data)
        except OSError as e:
            raise WriteError(f"send failed: {e}") from e

    def flush(self) -> None:
        # TCP_NODELAY is set on connect; sendall already handed everything to the OS
        if self._sock is None:
            raise WriteError("socket is closed")

    def close(self) -> None:
        sock, self._sock = self._sock, None
        if sock is None:
            return
        try:
            sock.close()
        except OSError:
            pass


class SocketTransport(Transport):
    """
    Connect-then-send transport.

    `resolver` defaults to socket.getaddrinfo and is injectable for tests.
    """

    def __init__(
        self,
        *,
        host_name: str,
        port: int,
        framing: Framing = Framing.LINES,
        resolve_timeout_s: float = DEFAULT_RESOLVE_TIMEOUT_S,
        connect_timeout_s: float = DEFAULT_CONNECT_TIMEOUT_S,
        resolver: Resolver = socket.getaddrinfo,
    ) -> None:
        if resolve_timeout_s <= 0:
            raise ValueError("resolve_timeout_s must be > 0")
        if connect_timeout_s <= 0:
            raise ValueError("connect_timeout_s must be > 0")

        self.host_name = host_name
        self.port = port
        self.framing = framing
        self._resolve_timeout_s = resolve_timeout_s
        self._connect_timeout_s = connect_timeout_s
        self._resolver = resolver

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve(self) -> Sequence[AddrInfo]:
        """
        Resolve host_name to stream socket addresses.

        The lookup runs on a worker thread so the wait is bounded by
        resolve_timeout_s even though getaddrinfo itself cannot be
        interrupted. A timed-out lookup is abandoned, not cancelled.
        """
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="tcplog-resolve")
        try:
            future = executor.submit(
                self._resolver,
                self.host_name,
                self.port,
                0,
                socket.SOCK_STREAM,
            )
            infos = future.result(timeout=self._resolve_timeout_s)
        except FuturesTimeoutError as e:
            raise ResolutionError(
                f"resolving {self.host_name!r} timed out after {self._resolve_timeout_s}s"
            ) from e
        except (OSError, UnicodeError) as e:
            # UnicodeError: IDNA encoding rejected a malformed host name
            raise ResolutionError(f"cannot resolve {self.host_name!r}: {e}") from e
        finally:
            executor.shutdown(wait=False)

        if not infos:
            raise ResolutionError(f"no addresses for {self.host_name!r}")
        return infos

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def open(self, session_id: str) -> SocketHandle:
        infos = self.resolve()

        last_error: OSError | None = None
        for family, socktype, proto, _canonname, sockaddr in infos:
            sock: socket.socket | None = None
            try:
                sock = socket.socket(family, socktype, proto)
                sock.settimeout(self._connect_timeout_s)
                sock.connect(sockaddr)
                sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
                # Writes block until handed to the OS; no send timeout
                sock.settimeout(None)
            except OSError as e:
                last_error = e
                if sock is not None:
                    sock.close()
                continue
            return SocketHandle(sock)

        raise ConnectError(
            f"cannot connect to {self.host_name}:{self.port}: {last_error}"
        ) from last_error

    def describe(self) -> dict[str, object]:
        return {
            **super().describe(),
            "host_name": self.host_name,
            "port": self.port,
        }
