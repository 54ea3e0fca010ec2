"""
Analytics event definitions (v1).

Rules:
- Events describe occurrences submitted for recording.
- Events carry data only (no behavior, no encoding).
- Every record kind is one variant of a single tagged union.
- Fixed fields are declared on the variant; open-ended data goes in `attributes`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Union

from analytics.attributes import Attribute


# =============================================================================
# Event Kind Enumeration
# =============================================================================

class EventKind(str, Enum):
    """
    Discriminant for analytics events.

    The encoder handles every kind explicitly.
    """

    CUSTOM = "CUSTOM"
    ITEM_PURCHASE = "ITEM_PURCHASE"
    CURRENCY_PURCHASE = "CURRENCY_PURCHASE"
    CURRENCY_GIVEN = "CURRENCY_GIVEN"
    ERROR = "ERROR"
    PROGRESS = "PROGRESS"


# =============================================================================
# Variants
# =============================================================================

@dataclass(frozen=True)
class CustomEvent:
    """Caller-named event with an open attribute list."""

    kind: ClassVar[EventKind] = EventKind.CUSTOM

    name: str
    attributes: tuple[Attribute, ...] = ()


@dataclass(frozen=True)
class ItemPurchase:
    """
    In-game item purchase.

    currency / per_item_cost are optional; when both are omitted the
    event carries only the item id and quantity.
    """

    kind: ClassVar[EventKind] = EventKind.ITEM_PURCHASE

    item_id: str
    item_quantity: int
    currency: str | None = None
    per_item_cost: int | None = None
    attributes: tuple[Attribute, ...] = ()


@dataclass(frozen=True)
class CurrencyPurchase:
    """Game currency bought, optionally with real-money details."""

    kind: ClassVar[EventKind] = EventKind.CURRENCY_PURCHASE

    game_currency_type: str
    game_currency_amount: int
    real_currency_type: str | None = None
    real_money_cost: float | None = None
    payment_provider: str | None = None
    attributes: tuple[Attribute, ...] = ()


@dataclass(frozen=True)
class CurrencyGiven:
    """Game currency granted to the user."""

    kind: ClassVar[EventKind] = EventKind.CURRENCY_GIVEN

    game_currency_type: str
    game_currency_amount: int
    attributes: tuple[Attribute, ...] = ()


@dataclass(frozen=True)
class ErrorEvent:
    kind: ClassVar[EventKind] = EventKind.ERROR

    error: str
    attributes: tuple[Attribute, ...] = ()


@dataclass(frozen=True)
class ProgressEvent:
    """Progress marker, e.g. progress_type="Start", progress_name="Level1"."""

    kind: ClassVar[EventKind] = EventKind.PROGRESS

    progress_type: str
    progress_name: str
    attributes: tuple[Attribute, ...] = ()


AnalyticsEvent = Union[
    CustomEvent,
    ItemPurchase,
    CurrencyPurchase,
    CurrencyGiven,
    ErrorEvent,
    ProgressEvent,
]
