"""Escrow state machine.

The table below is the single source of truth for legal transitions. Every
mutating engine operation calls ensure_transition() before writing anything.
COMPLETED and REFUNDED are terminal.
"""
from dataclasses import replace
from datetime import datetime
from typing import Any

from src.bx_common.enums import EscrowStatus
from src.bx_common.errors import InvalidTransitionError
from src.bx_order.domain.models import Order

ALLOWED_TRANSITIONS: dict[EscrowStatus, frozenset[EscrowStatus]] = {
    EscrowStatus.FUNDS_HELD: frozenset({EscrowStatus.SHIPPED, EscrowStatus.REFUNDED}),
    EscrowStatus.SHIPPED: frozenset(
        {EscrowStatus.DELIVERED, EscrowStatus.DISPUTED, EscrowStatus.REFUNDED}
    ),
    EscrowStatus.DELIVERED: frozenset({EscrowStatus.COMPLETED, EscrowStatus.DISPUTED}),
    EscrowStatus.DISPUTED: frozenset({EscrowStatus.COMPLETED, EscrowStatus.REFUNDED}),
    EscrowStatus.COMPLETED: frozenset(),
    EscrowStatus.REFUNDED: frozenset(),
}

TERMINAL_STATES: frozenset[EscrowStatus] = frozenset(
    s for s, targets in ALLOWED_TRANSITIONS.items() if not targets
)

# Orders still holding buyer funds
OPEN_STATES: frozenset[EscrowStatus] = frozenset(ALLOWED_TRANSITIONS) - TERMINAL_STATES

_TIMESTAMP_FIELDS: dict[EscrowStatus, str] = {
    EscrowStatus.FUNDS_HELD: "funded_at",
    EscrowStatus.SHIPPED: "shipped_at",
    EscrowStatus.DELIVERED: "delivered_at",
    EscrowStatus.DISPUTED: "disputed_at",
    EscrowStatus.COMPLETED: "completed_at",
    EscrowStatus.REFUNDED: "refunded_at",
}


def can_transition(current: str, target: EscrowStatus) -> bool:
    try:
        source = EscrowStatus(current)
    except ValueError:
        return False
    return target in ALLOWED_TRANSITIONS[source]


def ensure_transition(order: Order, target: EscrowStatus) -> None:
    """Raise InvalidTransitionError unless current -> target is in the table."""
    if not can_transition(order.status, target):
        raise InvalidTransitionError(order.id, order.status, target.value)


def apply_transition(
    order: Order, target: EscrowStatus, at: datetime, **changes: Any
) -> Order:
    """Return a copy of order moved to target, stamping its timestamp once.

    The input order is left untouched; persistence decides whether the copy wins.
    """
    ensure_transition(order, target)
    field_name = _TIMESTAMP_FIELDS[target]
    if getattr(order, field_name) is None:
        changes[field_name] = at
    return replace(order, status=target.value, **changes)
