# client/protocol/framing.py
"""
Session framing around encoded event fragments.

Two explicit framings, one per transport:

DOCUMENT (file sink) - one JSON document per session:

    {"sessionId":"<id>","userId":"<id>"[,"deviceId":"<id>"][,"timestamp":"<iso8601>"],"events":[
    {"eventName":"Session.Start"[,"attributes":[...]]},
    <fragment>,
    <fragment>
    ]}

LINES (network sink) - newline-delimited JSON, one object per write:

    {"eventName":"Session.Start","sessionId":...,"userId":...[,"attributes":[...]]}
    <fragment>
    {"eventName":"Session.End","sessionId":...,"userId":...}

Pure functions; the caller tracks whether a fragment was already written.
"""

from __future__ import annotations

from enum import Enum
from typing import Sequence

from analytics.attributes import Attribute, AttributeValue
from constants import SESSION_END_EVENT_NAME, SESSION_START_EVENT_NAME
from protocol.encoder import Field, encode_object
from session.analytics_session import AnalyticsSession


class Framing(str, Enum):
    DOCUMENT = "document"
    LINES = "lines"


def _identity_fields(
    session: AnalyticsSession,
    *,
    timestamp: str | None,
) -> list[Field]:
    fields: list[Field] = [
        ("sessionId", AttributeValue.of_text(session.session_id)),
        ("userId", AttributeValue.of_text(session.user_id)),
    ]
    if session.device_id is not None:
        fields.append(("deviceId", AttributeValue.of_text(session.device_id)))
    if timestamp is not None:
        fields.append(("timestamp", AttributeValue.of_text(timestamp)))
    return fields


def session_header(
    session: AnalyticsSession,
    initial_attributes: Sequence[Attribute] = (),
    *,
    framing: Framing,
    timestamp: str | None = None,
) -> str:
    """
    Opening bytes of a session, including the session-start event.

    The session-start event counts as the first fragment written.
    """
    start_name = ("eventName", AttributeValue.of_text(SESSION_START_EVENT_NAME))

    if framing is Framing.LINES:
        fields = [start_name] + _identity_fields(session, timestamp=timestamp)
        return encode_object(fields, initial_attributes) + "\n"

    envelope = encode_object(_identity_fields(session, timestamp=timestamp))
    start_event = encode_object([start_name], initial_attributes)
    # Re-open the envelope object to append the events array
    return envelope[:-1] + ',"events":[\n' + start_event


def frame_event(fragment: str, *, first: bool, framing: Framing) -> str:
    """
    Wrap one event fragment for writing.

    DOCUMENT: every fragment after the first is preceded by exactly one comma.
    """
    if framing is Framing.LINES:
        return fragment + "\n"
    if first:
        return fragment
    return ",\n" + fragment


def session_trailer(session: AnalyticsSession, *, framing: Framing) -> str:
    """Closing bytes of a session."""
    if framing is Framing.LINES:
        fields: list[Field] = [
            ("eventName", AttributeValue.of_text(SESSION_END_EVENT_NAME)),
            ("sessionId", AttributeValue.of_text(session.session_id)),
            ("userId", AttributeValue.of_text(session.user_id)),
        ]
        return encode_object(fields) + "\n"
    return "\n]}\n"
