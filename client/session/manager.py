"""
Analytics session manager.

Responsibilities:
- Owns the IDLE / ACTIVE lifecycle and the current AnalyticsSession
- Owns exactly one open TransportHandle while ACTIVE
- Resolves user / session / device identities at session start
- Encodes and frames events, forwards bytes to the handle
- Reports every failure via the diagnostic logger

NOT responsible for:
- Configuration loading (see config / provider)
- Retrying, buffering or batching dropped events
- Reconnecting a failed transport

Failures degrade to "drop and report"; nothing here raises into the host
for transport or ordering problems.
"""

from __future__ import annotations

import threading
from datetime import datetime, timezone
from types import TracebackType
from typing import Any, Callable, Iterable, Mapping, Sequence, Union

from analytics.attributes import Attribute, attributes_from
from analytics.events import (
    AnalyticsEvent,
    CurrencyGiven,
    CurrencyPurchase,
    CustomEvent,
    ErrorEvent,
    ItemPurchase,
    ProgressEvent,
)
from config import AnalyticsConfig
from constants import SESSION_ID_SEPARATOR, SESSION_ID_TIME_FORMAT
from observability.logger import LEVEL_ERROR, LEVEL_WARNING, log_event
from protocol.encoder import encode_event, event_name
from protocol.framing import frame_event, session_header, session_trailer
from session.analytics_session import AnalyticsSession
from session.identity import IdentityResolver, PlatformIdentityResolver
from session.state import SessionState
from transport.base import Transport, TransportError, TransportHandle, WriteError


AttributesLike = Union[Sequence[Attribute], Mapping[str, Any]]


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------

def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def derive_session_id(user_id: str, started_at: datetime) -> str:
    """Reproducible session id: "<user_id>-<YYYY.MM.DD-HH.MM.SS>"."""
    return user_id + SESSION_ID_SEPARATOR + started_at.strftime(SESSION_ID_TIME_FORMAT)


def _as_attributes(attributes: AttributesLike | Iterable[Attribute]) -> tuple[Attribute, ...]:
    if isinstance(attributes, Mapping):
        return attributes_from(attributes)
    return tuple(attributes)


# ------------------------------------------------------------------
# SessionManager
# ------------------------------------------------------------------

class SessionManager:
    """
    One manager == at most one live session == at most one open handle.

    All public methods are serialized by a re-entrant lock, so start / end /
    record cannot interleave partial writes into the transport.
    """

    def __init__(
        self,
        *,
        config: AnalyticsConfig,
        transport: Transport,
        identity: IdentityResolver | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._config = config
        self._transport = transport
        self._identity: IdentityResolver = identity or PlatformIdentityResolver()
        self._clock = clock or _utc_now

        self._lock = threading.RLock()
        self._state = SessionState.IDLE
        self._handle: TransportHandle | None = None

        # Most recent session; inert (active=False) once ended
        self.session: AnalyticsSession | None = None

        # Set while IDLE, applied by the next start_session
        self._user_id_override: str | None = None
        self._pending_session_id: str | None = None

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state is SessionState.ACTIVE

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def user_id(self) -> str:
        with self._lock:
            if self.is_active and self.session is not None:
                return self.session.user_id
            if self._user_id_override is not None:
                return self._user_id_override
            return self._identity.get_user_id()

    @property
    def session_id(self) -> str:
        with self._lock:
            if not self.is_active and self._pending_session_id is not None:
                return self._pending_session_id
            return self.session.session_id if self.session is not None else ""

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start_session(self, initial_attributes: AttributesLike = ()) -> bool:
        """
        Start a new session, ending the current one first if ACTIVE.

        Returns:
            True if the transport opened and the session header was written.
            False otherwise; the manager is then IDLE with nothing written.
        """
        attributes = _as_attributes(initial_attributes)

        with self._lock:
            if self.is_active:
                self._end_session_locked()

            session = self._new_session()

            try:
                handle = self._transport.open(session.session_id)
            except TransportError as e:
                self._log(
                    session,
                    level=LEVEL_ERROR,
                    event_type="SESSION_START_FAILED",
                    error_type=type(e).__name__,
                    error=str(e),
                    **self._transport.describe(),
                )
                return False

            timestamp = (
                session.started_at.isoformat(timespec="milliseconds")
                if self._config.timestamp_events
                else None
            )
            header = session_header(
                session,
                attributes,
                framing=self._transport.framing,
                timestamp=timestamp,
            )

            try:
                handle.write(header.encode("utf-8"))
            except WriteError as e:
                self._close_handle(session, handle)
                self._log(
                    session,
                    level=LEVEL_ERROR,
                    event_type="SESSION_START_FAILED",
                    error_type=type(e).__name__,
                    error=str(e),
                )
                return False

            # Session-start event is the first fragment of the body
            session.events_written = 1
            session.active = True

            self.session = session
            self._handle = handle
            self._state = SessionState.ACTIVE
            self._pending_session_id = None

            self._log(
                session,
                event_type="SESSION_STARTED",
                device_id=session.device_id,
                attribute_count=len(attributes),
                **self._transport.describe(),
            )
            return True

    def end_session(self) -> None:
        """Write the trailer and close the handle. No-op while IDLE."""
        with self._lock:
            self._end_session_locked()

    def shutdown(self) -> None:
        """Final teardown; behaves like end_session()."""
        self.end_session()

    def __enter__(self) -> SessionManager:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.shutdown()

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    def record(self, event: AnalyticsEvent) -> bool:
        """
        Encode, frame and write one event.

        Returns:
            True if the bytes were written.
            False if IDLE (event dropped) or the write failed (event dropped).
        """
        with self._lock:
            session, handle = self.session, self._handle
            if not self.is_active or session is None or handle is None:
                self._log_out_of_order("record", event_name=event_name(event))
                return False

            fragment = encode_event(event)
            data = frame_event(
                fragment,
                first=not session.has_written_event,
                framing=self._transport.framing,
            ).encode("utf-8")

            try:
                handle.write(data)
            except WriteError as e:
                self._log(
                    session,
                    level=LEVEL_ERROR,
                    event_type="WRITE_FAILED",
                    event_name=event_name(event),
                    error=str(e),
                )
                return False

            session.events_written += 1
            self._log(
                session,
                event_type="EVENT_RECORDED",
                event_kind=event.kind.value,
                event_name=event_name(event),
                attribute_count=len(event.attributes),
            )
            return True

    def record_event(self, name: str, attributes: AttributesLike = ()) -> bool:
        return self.record(CustomEvent(name=name, attributes=_as_attributes(attributes)))

    def record_item_purchase(
        self,
        item_id: str,
        item_quantity: int,
        attributes: AttributesLike = (),
        *,
        currency: str | None = None,
        per_item_cost: int | None = None,
    ) -> bool:
        return self.record(
            ItemPurchase(
                item_id=item_id,
                item_quantity=item_quantity,
                currency=currency,
                per_item_cost=per_item_cost,
                attributes=_as_attributes(attributes),
            )
        )

    def record_currency_purchase(
        self,
        game_currency_type: str,
        game_currency_amount: int,
        attributes: AttributesLike = (),
        *,
        real_currency_type: str | None = None,
        real_money_cost: float | None = None,
        payment_provider: str | None = None,
    ) -> bool:
        return self.record(
            CurrencyPurchase(
                game_currency_type=game_currency_type,
                game_currency_amount=game_currency_amount,
                real_currency_type=real_currency_type,
                real_money_cost=real_money_cost,
                payment_provider=payment_provider,
                attributes=_as_attributes(attributes),
            )
        )

    def record_currency_given(
        self,
        game_currency_type: str,
        game_currency_amount: int,
        attributes: AttributesLike = (),
    ) -> bool:
        return self.record(
            CurrencyGiven(
                game_currency_type=game_currency_type,
                game_currency_amount=game_currency_amount,
                attributes=_as_attributes(attributes),
            )
        )

    def record_error(self, error: str, attributes: AttributesLike = ()) -> bool:
        return self.record(ErrorEvent(error=error, attributes=_as_attributes(attributes)))

    def record_progress(
        self,
        progress_type: str,
        progress_name: str,
        attributes: AttributesLike = (),
    ) -> bool:
        return self.record(
            ProgressEvent(
                progress_type=progress_type,
                progress_name=progress_name,
                attributes=_as_attributes(attributes),
            )
        )

    def flush_events(self) -> bool:
        """Force the transport to flush. State is unchanged."""
        with self._lock:
            session, handle = self.session, self._handle
            if not self.is_active or session is None or handle is None:
                self._log_out_of_order("flush_events")
                return False

            try:
                handle.flush()
            except WriteError as e:
                self._log(session, level=LEVEL_ERROR, event_type="FLUSH_FAILED", error=str(e))
                return False

            self._log(session, event_type="EVENTS_FLUSHED")
            return True

    # ------------------------------------------------------------------
    # Identity (IDLE only)
    # ------------------------------------------------------------------

    def set_user_id(self, user_id: str) -> bool:
        with self._lock:
            if self.is_active:
                self._log_out_of_order("set_user_id")
                return False
            self._user_id_override = user_id
            log_event({"event_type": "USER_ID_SET", "user_id": user_id})
            return True

    def set_session_id(self, session_id: str) -> bool:
        """
        Use `session_id` for the next session instead of a generated one.

        Returns:
            False (ignored) while a session is ACTIVE.
        """
        with self._lock:
            if self.is_active:
                self._log_out_of_order("set_session_id")
                return False
            self._pending_session_id = session_id
            log_event({"event_type": "SESSION_ID_SET", "session_id": session_id})
            return True

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _new_session(self) -> AnalyticsSession:
        started_at = self._clock()
        if self._user_id_override is not None:
            user_id = self._user_id_override
        else:
            user_id = self._identity.get_user_id()

        device_id: str | None = None
        if self._config.generate_session_guid:
            device_id = self._identity.get_device_id()

        if self._pending_session_id is not None:
            session_id = self._pending_session_id
        elif self._config.generate_session_guid:
            session_id = self._identity.new_session_guid()
        else:
            session_id = derive_session_id(user_id, started_at)

        return AnalyticsSession(
            session_id=session_id,
            user_id=user_id,
            started_at=started_at,
            device_id=device_id,
        )

    def _end_session_locked(self) -> None:
        session, handle = self.session, self._handle
        if not self.is_active or session is None or handle is None:
            return

        try:
            trailer = session_trailer(session, framing=self._transport.framing)
            handle.write(trailer.encode("utf-8"))
            handle.flush()
        except WriteError as e:
            self._log(
                session,
                level=LEVEL_ERROR,
                event_type="SESSION_TRAILER_FAILED",
                error=str(e),
            )
        finally:
            self._handle = None
            session.active = False
            self._state = SessionState.IDLE
            self._close_handle(session, handle)

        self._log(
            session,
            event_type="SESSION_ENDED",
            events_written=session.events_written,
        )

    def _close_handle(self, session: AnalyticsSession, handle: TransportHandle) -> None:
        try:
            handle.close()
        except OSError as e:
            self._log(
                session,
                level=LEVEL_ERROR,
                event_type="HANDLE_CLOSE_FAILED",
                error=str(e),
            )

    def _log(self, session: AnalyticsSession, **fields: Any) -> None:
        log_event({**session.log_context(), **fields})

    def _log_out_of_order(self, operation: str, **fields: Any) -> None:
        log_event({
            "level": LEVEL_WARNING,
            "event_type": "CALLED_OUT_OF_ORDER",
            "operation": operation,
            "state": self._state.value,
            **fields,
        })
