# client/protocol/encoder.py
"""
JSON fragment encoding for analytics events.

Fragment layout:

    {"eventName":"<name>"[,<fixed fields>][,"attributes":[{"name":"<n>","value":<v>}, ...]]}

- Fixed fields come first, `attributes` always last.
- `attributes` is omitted entirely when the list is empty.
- NUMERIC values are emitted raw, TEXT values as JSON strings.
- Names and TEXT values escape quotes, backslashes and control characters only.

Usage example:

    fragment = encode_event(
        CustomEvent(
            name="Login",
            attributes=(Attribute.of("method", "password"),),
        )
    )
    # {"eventName":"Login","attributes":[{"name":"method","value":"password"}]}

Pure functions; never raise on content. Unencodable text is replaced,
invalid numeric text is emitted quoted.
"""

from __future__ import annotations

import json
import re
from typing import Sequence

from analytics.attributes import Attribute, AttributeValue
from analytics.events import (
    AnalyticsEvent,
    CurrencyGiven,
    CurrencyPurchase,
    CustomEvent,
    ErrorEvent,
    EventKind,
    ItemPurchase,
    ProgressEvent,
)
from constants import (
    CURRENCY_GIVEN_EVENT_NAME,
    CURRENCY_PURCHASE_EVENT_NAME,
    ERROR_EVENT_NAME,
    ITEM_PURCHASE_EVENT_NAME,
    PROGRESS_EVENT_NAME,
)


Field = tuple[str, AttributeValue]

_JSON_NUMBER = re.compile(r"-?(?:0|[1-9][0-9]*)(?:\.[0-9]+)?(?:[eE][+-]?[0-9]+)?")


# -------------------------
# Low-level helpers
# -------------------------

def quote(text: str) -> str:
    """Return `text` as a JSON string literal, non-ASCII kept as-is."""
    try:
        text.encode("utf-8")
    except UnicodeEncodeError:
        # Lone surrogates cannot reach the wire as UTF-8
        text = text.encode("utf-8", "replace").decode("utf-8")
    return json.dumps(text, ensure_ascii=False)


def is_json_number(text: str) -> bool:
    return _JSON_NUMBER.fullmatch(text) is not None


def encode_value(value: AttributeValue) -> str:
    if value.is_numeric and is_json_number(value.text):
        return value.text
    return quote(value.text)


def encode_attribute(attribute: Attribute) -> str:
    return (
        '{"name":' + quote(attribute.name)
        + ',"value":' + encode_value(attribute.value)
        + "}"
    )


def encode_object(
    fields: Sequence[Field],
    attributes: Sequence[Attribute] = (),
) -> str:
    """
    Encode one JSON object from fixed fields plus a trailing attribute array.

    Field order is preserved; duplicate attribute names are kept.
    """
    parts = [quote(name) + ":" + encode_value(value) for name, value in fields]

    if attributes:
        parts.append(
            '"attributes":['
            + ",".join(encode_attribute(attribute) for attribute in attributes)
            + "]"
        )

    return "{" + ",".join(parts) + "}"


# -------------------------
# Event variants
# -------------------------

def _text(value: str) -> AttributeValue:
    return AttributeValue.of_text(value)


def _number(value: int | float) -> AttributeValue:
    return AttributeValue.numeric(value)


_FIXED_EVENT_NAMES: dict[EventKind, str] = {
    EventKind.ITEM_PURCHASE: ITEM_PURCHASE_EVENT_NAME,
    EventKind.CURRENCY_PURCHASE: CURRENCY_PURCHASE_EVENT_NAME,
    EventKind.CURRENCY_GIVEN: CURRENCY_GIVEN_EVENT_NAME,
    EventKind.ERROR: ERROR_EVENT_NAME,
    EventKind.PROGRESS: PROGRESS_EVENT_NAME,
}


def event_name(event: AnalyticsEvent) -> str:
    """Wire name emitted as `eventName` for an event."""
    if isinstance(event, CustomEvent):
        return event.name
    return _FIXED_EVENT_NAMES[event.kind]


def fixed_fields(event: AnalyticsEvent) -> tuple[Field, ...]:
    """Fixed named fields for an event, in wire order."""
    fields: list[Field] = []

    if isinstance(event, CustomEvent):
        pass

    elif isinstance(event, ItemPurchase):
        fields.append(("itemId", _text(event.item_id)))
        fields.append(("itemQuantity", _number(event.item_quantity)))
        if event.currency is not None:
            fields.append(("currency", _text(event.currency)))
        if event.per_item_cost is not None:
            fields.append(("perItemCost", _number(event.per_item_cost)))

    elif isinstance(event, CurrencyPurchase):
        fields.append(("gameCurrencyType", _text(event.game_currency_type)))
        fields.append(("gameCurrencyAmount", _number(event.game_currency_amount)))
        if event.real_currency_type is not None:
            fields.append(("realCurrencyType", _text(event.real_currency_type)))
        if event.real_money_cost is not None:
            fields.append(("realMoneyCost", _number(event.real_money_cost)))
        if event.payment_provider is not None:
            fields.append(("paymentProvider", _text(event.payment_provider)))

    elif isinstance(event, CurrencyGiven):
        fields.append(("gameCurrencyType", _text(event.game_currency_type)))
        fields.append(("gameCurrencyAmount", _number(event.game_currency_amount)))

    elif isinstance(event, ErrorEvent):
        fields.append(("error", _text(event.error)))

    elif isinstance(event, ProgressEvent):
        fields.append(("progressType", _text(event.progress_type)))
        fields.append(("progressName", _text(event.progress_name)))

    else:
        raise TypeError(f"Unknown analytics event: {event!r}")

    return tuple(fields)


def encode_event(event: AnalyticsEvent) -> str:
    """
    Encode one event as a standalone JSON object fragment.

    No separator and no trailing newline; framing adds those.
    """
    fields = (("eventName", _text(event_name(event))),) + fixed_fields(event)
    return encode_object(fields, event.attributes)
