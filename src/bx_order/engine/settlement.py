"""SettlementEngine — escrow lifecycle of a purchase.

Every operation runs its reads, checks and writes inside one transaction
(run_in_transaction), so either all of its effects commit or none do:

  create_order           listing decrement (+ SOLD flip) + order insert
  mark_shipped           FUNDS_HELD -> SHIPPED
  mark_delivered         SHIPPED    -> DELIVERED
  confirm_delivery       DELIVERED  -> COMPLETED   (buyer; releases seller_net)
  open_dispute           SHIPPED/DELIVERED -> DISPUTED
  complete_after_dispute DISPUTED   -> COMPLETED   (admin; releases seller_net)
  refund                 FUNDS_HELD/SHIPPED/DISPUTED -> REFUNDED
                         (admin; listing quantity restored in the same transaction)

Concurrency:
  - Listing stock is taken with a conditional UPDATE (LIVE and quantity >= q),
    never read-then-write.
  - Order transitions are compare-and-set on (status, version); a racing loser
    gets InvalidTransitionError.

Ledger and notification calls happen after commit and are best effort.
"""
import logging
from collections.abc import Awaitable, Callable
from decimal import Decimal
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.bx_common.actor import Actor
from src.bx_common.clock import Clock, utc_now
from src.bx_common.enums import EscrowStatus, ListingStatus, NotificationEvent
from src.bx_common.errors import (
    AppError,
    ForbiddenError,
    InsufficientQuantityError,
    InvalidActorError,
    InvalidTransitionError,
    ListingNotFoundError,
    ListingUnavailableError,
    OrderNotFoundError,
    ValidationError,
)
from src.bx_common.id_generator import generate_id, generate_transaction_ref
from src.bx_common.money import QUANTITY_STEP, to_decimal
from src.bx_common.transaction import run_in_transaction
from src.bx_ledger.domain.sink import LedgerSinkProtocol
from src.bx_listing.domain.repository import ListingRepositoryProtocol
from src.bx_notify.domain.notifier import NotifierProtocol
from src.bx_order.domain.commission import (
    SettlementAmounts,
    compute_settlement,
    validate_commission_rate,
)
from src.bx_order.domain.models import Order
from src.bx_order.domain.repository import OrderRepositoryProtocol
from src.bx_order.domain.state_machine import apply_transition, ensure_transition

logger = logging.getLogger(__name__)

MAX_DISPUTE_REASON_LENGTH = 500

Authorizer = Callable[[Order, Actor], None]


# ---------------------------------------------------------------------------
# Input validation
# ---------------------------------------------------------------------------


def parse_quantity(value: object) -> Decimal:
    """Validate a purchase quantity: numeric, finite, > 0, at most 4 decimals."""
    if value is None:
        raise ValidationError("quantity is required")
    try:
        quantity = to_decimal(value)
    except ValueError:
        raise ValidationError(f"quantity must be a number, got {value!r}") from None
    if quantity <= 0:
        raise ValidationError(f"quantity must be positive, got {quantity}")
    if quantity != quantity.quantize(QUANTITY_STEP):
        raise ValidationError(f"quantity supports at most 4 decimal places, got {quantity}")
    return quantity


def parse_dispute_reason(reason: str | None) -> str:
    cleaned = (reason or "").strip()
    if not cleaned:
        raise ValidationError("dispute reason is required")
    if len(cleaned) > MAX_DISPUTE_REASON_LENGTH:
        raise ValidationError(
            f"dispute reason must be at most {MAX_DISPUTE_REASON_LENGTH} characters"
        )
    return cleaned


# ---------------------------------------------------------------------------
# Actor rules
# ---------------------------------------------------------------------------


def _seller_or_admin(action: str) -> Authorizer:
    def check(order: Order, actor: Actor) -> None:
        if not (actor.is_admin or actor.user_id == order.seller_id):
            raise ForbiddenError(action)

    return check


def _buyer_only(action: str) -> Authorizer:
    def check(order: Order, actor: Actor) -> None:
        if actor.user_id != order.buyer_id:
            raise ForbiddenError(action)

    return check


def _party_only(action: str) -> Authorizer:
    def check(order: Order, actor: Actor) -> None:
        if not order.is_party(actor.user_id):
            raise ForbiddenError(action)

    return check


def _admin_only(action: str) -> Authorizer:
    def check(order: Order, actor: Actor) -> None:
        if not actor.is_admin:
            raise ForbiddenError(action)

    return check


def _event_payload(order: Order, **extra: Any) -> dict[str, Any]:
    return {
        "order_id": order.id,
        "transaction_ref": order.transaction_ref,
        "listing_id": order.listing_id,
        "quantity": str(order.quantity),
        "unit": order.unit,
        "total_amount": str(order.total_amount),
        "status": order.status,
        **extra,
    }


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


class SettlementEngine:
    def __init__(
        self,
        orders: OrderRepositoryProtocol,
        listings: ListingRepositoryProtocol,
        ledger: LedgerSinkProtocol,
        notifier: NotifierProtocol,
        commission_rate: Decimal | None = None,
        clock: Clock = utc_now,
    ) -> None:
        self._orders = orders
        self._listings = listings
        self._ledger = ledger
        self._notifier = notifier
        self._commission_rate = validate_commission_rate(
            settings.COMMISSION_RATE if commission_rate is None else commission_rate
        )
        self._clock = clock

    # -- purchase -----------------------------------------------------------

    async def create_order(
        self, db: AsyncSession, buyer: Actor, listing_id: str, quantity: object
    ) -> Order:
        qty = parse_quantity(quantity)

        async def work() -> Order:
            listing = await self._listings.get_by_id(db, listing_id)
            if listing is None:
                raise ListingNotFoundError(listing_id)
            if not listing.is_live:
                raise ListingUnavailableError(listing_id, listing.status)
            if listing.seller_id == buyer.user_id:
                raise InvalidActorError("sellers cannot buy their own listing")
            if qty > listing.quantity:
                raise InsufficientQuantityError(qty, listing.quantity, listing.unit)
            self._price(qty, listing.price_per_unit)

            # The pre-read above is advisory; this conditional update is the real guard.
            taken = await self._listings.atomic_decrement_quantity(db, listing_id, qty)
            if taken is None:
                raise await self._decrement_failure(db, listing_id, qty)
            if taken.quantity == 0:
                await self._listings.set_status(db, listing_id, ListingStatus.SOLD.value)

            amounts = self._price(qty, taken.price_per_unit)
            now = self._clock()
            order = Order(
                id=generate_id(),
                transaction_ref=generate_transaction_ref(),
                listing_id=listing_id,
                buyer_id=buyer.user_id,
                seller_id=taken.seller_id,
                unit=taken.unit,
                quantity=qty,
                unit_price=taken.price_per_unit,
                commission_rate=self._commission_rate,
                total_amount=amounts.total_amount,
                commission_amount=amounts.commission_amount,
                seller_net=amounts.seller_net,
                status=EscrowStatus.FUNDS_HELD.value,
                created_at=now,
                funded_at=now,
                updated_at=now,
            )
            await self._orders.save(db, order)
            return order

        order = await run_in_transaction(db, work, "create_order")
        logger.info(
            "Order %s created: listing=%s buyer=%s qty=%s total=%s commission=%s",
            order.id, listing_id, order.buyer_id, order.quantity,
            order.total_amount, order.commission_amount,
        )
        await self._best_effort(
            "hold_funds",
            lambda: self._ledger.hold_funds(order.id, order.buyer_id, order.total_amount),
        )
        await self._best_effort(
            "notify_purchase_created",
            lambda: self._notifier.notify(
                order.seller_id,
                NotificationEvent.PURCHASE_CREATED.value,
                _event_payload(order),
            ),
        )
        return order

    def _price(self, qty: Decimal, unit_price: Decimal) -> SettlementAmounts:
        amounts = compute_settlement(qty, unit_price, self._commission_rate)
        if amounts.total_amount <= 0:
            raise ValidationError(
                f"quantity {qty} is too small to price at {unit_price} per unit"
            )
        return amounts

    async def _decrement_failure(
        self, db: AsyncSession, listing_id: str, qty: Decimal
    ) -> AppError:
        """Explain why the conditional decrement matched no row."""
        current = await self._listings.get_by_id(db, listing_id)
        if current is None:
            return ListingNotFoundError(listing_id)
        # A racing purchase that took the last units also flips the listing to SOLD
        if current.quantity < qty:
            return InsufficientQuantityError(qty, current.quantity, current.unit)
        return ListingUnavailableError(listing_id, current.status)

    # -- transitions --------------------------------------------------------

    async def mark_shipped(self, db: AsyncSession, actor: Actor, order_id: str) -> Order:
        order = await self._transition(
            db, actor, order_id, EscrowStatus.SHIPPED, _seller_or_admin("mark the order shipped")
        )
        await self._notify(order.buyer_id, NotificationEvent.ORDER_SHIPPED, order)
        return order

    async def mark_delivered(self, db: AsyncSession, actor: Actor, order_id: str) -> Order:
        order = await self._transition(
            db, actor, order_id, EscrowStatus.DELIVERED,
            _seller_or_admin("mark the order delivered"),
        )
        await self._notify(order.buyer_id, NotificationEvent.ORDER_DELIVERED, order)
        return order

    async def confirm_delivery(self, db: AsyncSession, actor: Actor, order_id: str) -> Order:
        order = await self._transition(
            db, actor, order_id, EscrowStatus.COMPLETED,
            _buyer_only("confirm delivery"),
            required_source=EscrowStatus.DELIVERED,
            buyer_confirmed=True,
        )
        await self._release(order)
        return order

    async def open_dispute(
        self, db: AsyncSession, actor: Actor, order_id: str, reason: str | None
    ) -> Order:
        cleaned = parse_dispute_reason(reason)
        order = await self._transition(
            db, actor, order_id, EscrowStatus.DISPUTED,
            _party_only("open a dispute"),
            dispute_reason=cleaned,
        )
        await self._notify(
            order.counterparty_of(actor.user_id),
            NotificationEvent.DISPUTE_OPENED,
            order,
            opened_by=actor.user_id,
            reason=cleaned,
        )
        return order

    async def complete_after_dispute(
        self, db: AsyncSession, actor: Actor, order_id: str
    ) -> Order:
        order = await self._transition(
            db, actor, order_id, EscrowStatus.COMPLETED,
            _admin_only("resolve disputes"),
            required_source=EscrowStatus.DISPUTED,
        )
        await self._release(order)
        return order

    async def refund(self, db: AsyncSession, actor: Actor, order_id: str) -> Order:
        order = await self._transition(
            db, actor, order_id, EscrowStatus.REFUNDED,
            _admin_only("refund orders"),
            on_applied=lambda o: self._restore_listing(db, o),
        )
        await self._best_effort(
            "refund_funds",
            lambda: self._ledger.refund_funds(order.id, order.buyer_id, order.total_amount),
        )
        await self._notify(order.buyer_id, NotificationEvent.ORDER_REFUNDED, order)
        await self._notify(order.seller_id, NotificationEvent.ORDER_REFUNDED, order)
        return order

    async def _transition(
        self,
        db: AsyncSession,
        actor: Actor,
        order_id: str,
        target: EscrowStatus,
        authorize: Authorizer,
        required_source: EscrowStatus | None = None,
        on_applied: Callable[[Order], Awaitable[None]] | None = None,
        **changes: Any,
    ) -> Order:
        async def work() -> Order:
            order = await self._orders.get_by_id(db, order_id)
            if order is None:
                raise OrderNotFoundError(order_id)
            authorize(order, actor)
            # COMPLETED is reachable from two states, each through its own operation
            if required_source is not None and order.status != required_source.value:
                raise InvalidTransitionError(order.id, order.status, target.value)
            ensure_transition(order, target)

            updated = apply_transition(order, target, self._clock(), **changes)
            stored = await self._orders.compare_and_set(
                db, updated, expected_status=order.status, expected_version=order.version
            )
            if stored is None:
                current = await self._orders.get_by_id(db, order_id)
                raise InvalidTransitionError(
                    order.id, current.status if current else order.status, target.value
                )
            if on_applied is not None:
                await on_applied(stored)
            return stored

        stored = await run_in_transaction(db, work, f"transition_to_{target.value.lower()}")
        logger.info(
            "Order %s -> %s by %s (%s)", stored.id, stored.status, actor.user_id, actor.role.value
        )
        return stored

    async def _restore_listing(self, db: AsyncSession, order: Order) -> None:
        listing = await self._listings.restore_quantity(db, order.listing_id, order.quantity)
        if listing is None:
            logger.warning(
                "Refund of order %s: listing %s no longer exists, quantity not restored",
                order.id, order.listing_id,
            )
            return
        if listing.status == ListingStatus.SOLD:
            await self._listings.set_status(db, listing.id, ListingStatus.LIVE.value)

    # -- side effects -------------------------------------------------------

    async def _release(self, order: Order) -> None:
        await self._best_effort(
            "release_funds",
            lambda: self._ledger.release_funds(order.id, order.seller_id, order.seller_net),
        )
        await self._best_effort(
            "record_commission",
            lambda: self._ledger.record_commission(order.id, order.commission_amount),
        )
        await self._notify(order.seller_id, NotificationEvent.ORDER_COMPLETED, order)

    async def _notify(
        self, user_id: str, event: NotificationEvent, order: Order, **extra: Any
    ) -> None:
        await self._best_effort(
            f"notify_{event.value.lower()}",
            lambda: self._notifier.notify(user_id, event.value, _event_payload(order, **extra)),
        )

    async def _best_effort(self, label: str, call: Callable[[], Awaitable[None]]) -> None:
        try:
            await call()
        except Exception:
            logger.exception("Side effect %s failed after commit; state change kept", label)
