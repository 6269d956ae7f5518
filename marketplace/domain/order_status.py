# marketplace/domain/order_status.py
from enum import Enum
from typing import Dict, FrozenSet

from marketplace.domain.errors import InvalidTransition


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    SHIPPED = "SHIPPED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


# graf przejsc: PENDING -> PAID -> SHIPPED -> COMPLETED, anulowanie z PENDING i PAID
TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.PAID, OrderStatus.CANCELLED}),
    OrderStatus.PAID: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.COMPLETED}),
    OrderStatus.COMPLETED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

_DESCRIPTIONS = {
    OrderStatus.PENDING: "Oczekuje na platnosc",
    OrderStatus.PAID: "Oplacone",
    OrderStatus.SHIPPED: "Wyslane",
    OrderStatus.COMPLETED: "Zrealizowane",
    OrderStatus.CANCELLED: "Anulowane",
}


def parse_status(value) -> OrderStatus:
    if isinstance(value, OrderStatus):
        return value
    try:
        return OrderStatus(str(value).strip().upper())
    except ValueError:
        raise InvalidTransition(f"Nieznany status zamowienia: {value}")


def is_terminal(status) -> bool:
    return not TRANSITIONS[parse_status(status)]


def can_transition(current, target) -> bool:
    return parse_status(target) in TRANSITIONS[parse_status(current)]


def describe(status) -> str:
    return _DESCRIPTIONS[parse_status(status)]
