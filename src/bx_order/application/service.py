# src/bx_order/application/service.py
"""OrderApplicationService — schema layer over the SettlementEngine.

Mutations delegate to the engine, which owns the transaction. Reads go
straight to the repository and need no commit.
"""
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from src.bx_common.actor import Actor
from src.bx_common.enums import EscrowStatus
from src.bx_common.errors import ForbiddenError, OrderNotFoundError
from src.bx_common.money import money_to_display
from src.bx_ledger.application.sink import LedgerSink
from src.bx_listing.infrastructure.persistence import ListingRepository
from src.bx_notify.infrastructure.redis_notifier import RedisNotifier
from src.bx_order.application.schemas import (
    BuyerSummary,
    OrderListResponse,
    OrderResponse,
    OrderScope,
    PlaceOrderRequest,
    SellerSummary,
    cursor_decode,
    cursor_encode,
)
from src.bx_order.domain.models import StatusAggregate
from src.bx_order.domain.repository import OrderRepositoryProtocol
from src.bx_order.domain.state_machine import OPEN_STATES
from src.bx_order.engine.settlement import SettlementEngine
from src.bx_order.infrastructure.persistence import OrderRepository

_engine: SettlementEngine | None = None


def get_settlement_engine() -> SettlementEngine:
    global _engine  # noqa: PLW0603
    if _engine is None:
        _engine = SettlementEngine(
            orders=OrderRepository(),
            listings=ListingRepository(),
            ledger=LedgerSink(),
            notifier=RedisNotifier(),
        )
    return _engine


def _tally(aggregates: list[StatusAggregate]) -> dict[str, StatusAggregate]:
    return {a.status: a for a in aggregates}


def _count(by_status: dict[str, StatusAggregate], statuses: frozenset[EscrowStatus]) -> int:
    return sum(by_status[s.value].order_count for s in statuses if s.value in by_status)


class OrderApplicationService:
    def __init__(
        self,
        engine: SettlementEngine | None = None,
        repo: OrderRepositoryProtocol | None = None,
    ) -> None:
        self._engine_override = engine
        self._repo: OrderRepositoryProtocol = repo or OrderRepository()

    @property
    def _engine(self) -> SettlementEngine:
        return self._engine_override or get_settlement_engine()

    # -- mutations ----------------------------------------------------------

    async def place_order(
        self, db: AsyncSession, actor: Actor, req: PlaceOrderRequest
    ) -> OrderResponse:
        order = await self._engine.create_order(db, actor, req.listing_id, req.quantity)
        return OrderResponse.from_domain(order)

    async def mark_shipped(self, db: AsyncSession, actor: Actor, order_id: str) -> OrderResponse:
        return OrderResponse.from_domain(await self._engine.mark_shipped(db, actor, order_id))

    async def mark_delivered(
        self, db: AsyncSession, actor: Actor, order_id: str
    ) -> OrderResponse:
        return OrderResponse.from_domain(await self._engine.mark_delivered(db, actor, order_id))

    async def confirm_delivery(
        self, db: AsyncSession, actor: Actor, order_id: str
    ) -> OrderResponse:
        return OrderResponse.from_domain(await self._engine.confirm_delivery(db, actor, order_id))

    async def open_dispute(
        self, db: AsyncSession, actor: Actor, order_id: str, reason: str
    ) -> OrderResponse:
        order = await self._engine.open_dispute(db, actor, order_id, reason)
        return OrderResponse.from_domain(order)

    async def complete_after_dispute(
        self, db: AsyncSession, actor: Actor, order_id: str
    ) -> OrderResponse:
        order = await self._engine.complete_after_dispute(db, actor, order_id)
        return OrderResponse.from_domain(order)

    async def refund(self, db: AsyncSession, actor: Actor, order_id: str) -> OrderResponse:
        return OrderResponse.from_domain(await self._engine.refund(db, actor, order_id))

    # -- reads --------------------------------------------------------------

    async def get_order(self, db: AsyncSession, actor: Actor, order_id: str) -> OrderResponse:
        order = await self._repo.get_by_id(db, order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        if not (actor.is_admin or order.is_party(actor.user_id)):
            raise ForbiddenError("view this order")
        return OrderResponse.from_domain(order)

    async def list_orders(
        self,
        db: AsyncSession,
        actor: Actor,
        scope: OrderScope,
        status: str | None,
        limit: int,
        cursor: str | None,
    ) -> OrderListResponse:
        orders = await self._repo.list_orders(
            db,
            buyer_id=actor.user_id if scope == "buyer" else None,
            seller_id=actor.user_id if scope == "seller" else None,
            status=status,
            limit=limit + 1,
            cursor_id=cursor_decode(cursor),
        )
        has_more = len(orders) > limit
        page = orders[:limit]
        next_cursor = cursor_encode(page[-1].id) if has_more and page else None
        return OrderListResponse(
            items=[OrderResponse.from_domain(o) for o in page],
            next_cursor=next_cursor,
            has_more=has_more,
        )

    async def buyer_summary(self, db: AsyncSession, actor: Actor) -> BuyerSummary:
        by_status = _tally(
            await self._repo.aggregate_by_status(db, buyer_id=actor.user_id, seller_id=None)
        )
        completed = by_status.get(EscrowStatus.COMPLETED.value)
        spent = completed.total_amount if completed else Decimal("0.00")
        return BuyerSummary(
            total=sum(a.order_count for a in by_status.values()),
            pending=_count(by_status, OPEN_STATES),
            completed=completed.order_count if completed else 0,
            refunded=_count(by_status, frozenset({EscrowStatus.REFUNDED})),
            total_spent=spent,
            total_spent_display=money_to_display(spent),
        )

    async def seller_summary(self, db: AsyncSession, actor: Actor) -> SellerSummary:
        by_status = _tally(
            await self._repo.aggregate_by_status(db, buyer_id=None, seller_id=actor.user_id)
        )
        completed = by_status.get(EscrowStatus.COMPLETED.value)
        revenue = completed.seller_net if completed else Decimal("0.00")
        return SellerSummary(
            total_sales=sum(a.order_count for a in by_status.values()),
            pending=_count(by_status, OPEN_STATES),
            completed=completed.order_count if completed else 0,
            refunded=_count(by_status, frozenset({EscrowStatus.REFUNDED})),
            total_revenue=revenue,
            total_revenue_display=money_to_display(revenue),
            commission_paid=completed.commission_amount if completed else Decimal("0.00"),
        )
