"""Tests for the escrow transition table."""
from datetime import UTC, datetime

import pytest
from factories import FIXED_NOW, make_order

from src.bx_common.enums import EscrowStatus
from src.bx_common.errors import InvalidTransitionError
from src.bx_order.domain.state_machine import (
    ALLOWED_TRANSITIONS,
    OPEN_STATES,
    TERMINAL_STATES,
    apply_transition,
    can_transition,
    ensure_transition,
)

LEGAL = {
    ("FUNDS_HELD", EscrowStatus.SHIPPED),
    ("FUNDS_HELD", EscrowStatus.REFUNDED),
    ("SHIPPED", EscrowStatus.DELIVERED),
    ("SHIPPED", EscrowStatus.DISPUTED),
    ("SHIPPED", EscrowStatus.REFUNDED),
    ("DELIVERED", EscrowStatus.COMPLETED),
    ("DELIVERED", EscrowStatus.DISPUTED),
    ("DISPUTED", EscrowStatus.COMPLETED),
    ("DISPUTED", EscrowStatus.REFUNDED),
}


def test_table_matches_legal_pairs_exactly() -> None:
    for source in EscrowStatus:
        for target in EscrowStatus:
            assert can_transition(source.value, target) == ((source.value, target) in LEGAL)


def test_terminal_and_open_states() -> None:
    assert TERMINAL_STATES == {EscrowStatus.COMPLETED, EscrowStatus.REFUNDED}
    assert OPEN_STATES == set(ALLOWED_TRANSITIONS) - TERMINAL_STATES


def test_delivered_cannot_be_refunded() -> None:
    assert not can_transition("DELIVERED", EscrowStatus.REFUNDED)


def test_unknown_status_is_never_transitionable() -> None:
    assert not can_transition("PENDING", EscrowStatus.SHIPPED)


def test_ensure_transition_raises_with_states() -> None:
    order = make_order(status="COMPLETED")
    with pytest.raises(InvalidTransitionError) as exc_info:
        ensure_transition(order, EscrowStatus.REFUNDED)
    assert exc_info.value.current == "COMPLETED"
    assert exc_info.value.target == "REFUNDED"


class TestApplyTransition:
    def test_returns_copy_with_new_status_and_timestamp(self) -> None:
        order = make_order(status="FUNDS_HELD")
        shipped = apply_transition(order, EscrowStatus.SHIPPED, FIXED_NOW)
        assert shipped.status == "SHIPPED"
        assert shipped.shipped_at == FIXED_NOW
        assert order.status == "FUNDS_HELD"
        assert order.shipped_at is None

    def test_timestamp_set_only_once(self) -> None:
        earlier = datetime(2026, 1, 1, tzinfo=UTC)
        order = make_order(status="SHIPPED", shipped_at=earlier)
        disputed = apply_transition(order, EscrowStatus.DISPUTED, FIXED_NOW)
        assert disputed.shipped_at == earlier
        assert disputed.disputed_at == FIXED_NOW

    def test_extra_changes_applied(self) -> None:
        order = make_order(status="DELIVERED")
        done = apply_transition(order, EscrowStatus.COMPLETED, FIXED_NOW, buyer_confirmed=True)
        assert done.buyer_confirmed is True
        assert done.completed_at == FIXED_NOW

    def test_illegal_transition_leaves_order_untouched(self) -> None:
        order = make_order(status="REFUNDED", refunded_at=FIXED_NOW)
        with pytest.raises(InvalidTransitionError):
            apply_transition(order, EscrowStatus.SHIPPED, FIXED_NOW)
        assert order.status == "REFUNDED"
        assert order.shipped_at is None
