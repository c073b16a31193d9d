# src/bx_admin/application/service.py
"""Admin application service: platform-wide order views and escrow totals."""
from decimal import Decimal
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.bx_common.enums import EscrowStatus
from src.bx_common.errors import OrderNotFoundError
from src.bx_common.money import money_to_display
from src.bx_ledger.application.schemas import LedgerEntryItem
from src.bx_ledger.application.service import LedgerApplicationService
from src.bx_order.application.schemas import (
    OrderListResponse,
    OrderResponse,
    cursor_decode,
    cursor_encode,
)
from src.bx_order.domain.repository import OrderRepositoryProtocol
from src.bx_order.domain.state_machine import OPEN_STATES
from src.bx_order.infrastructure.persistence import OrderRepository

_ZERO = Decimal("0.00")


class AdminService:
    def __init__(
        self,
        orders: OrderRepositoryProtocol | None = None,
        ledger: LedgerApplicationService | None = None,
    ) -> None:
        self._orders: OrderRepositoryProtocol = orders or OrderRepository()
        self._ledger = ledger or LedgerApplicationService()

    async def list_transactions(
        self,
        db: AsyncSession,
        status: str | None,
        limit: int,
        cursor: str | None,
    ) -> OrderListResponse:
        orders = await self._orders.list_orders(
            db,
            buyer_id=None,
            seller_id=None,
            status=status,
            limit=limit + 1,
            cursor_id=cursor_decode(cursor),
        )
        has_more = len(orders) > limit
        page = orders[:limit]
        return OrderListResponse(
            items=[OrderResponse.from_domain(o) for o in page],
            next_cursor=cursor_encode(page[-1].id) if has_more and page else None,
            has_more=has_more,
        )

    async def get_stats(self, db: AsyncSession) -> dict[str, Any]:
        aggregates = await self._orders.aggregate_by_status(db, buyer_id=None, seller_id=None)
        by_status = {a.status: a for a in aggregates}
        open_values = {s.value for s in OPEN_STATES}

        gross_volume = sum(
            (a.total_amount for a in aggregates if a.status != EscrowStatus.REFUNDED.value),
            _ZERO,
        )
        in_escrow = sum(
            (a.total_amount for a in aggregates if a.status in open_values), _ZERO
        )
        completed = by_status.get(EscrowStatus.COMPLETED.value)
        commission = completed.commission_amount if completed else _ZERO

        return {
            "orders_by_status": {
                s.value: by_status[s.value].order_count if s.value in by_status else 0
                for s in EscrowStatus
            },
            "total_orders": sum(a.order_count for a in aggregates),
            "gross_volume": str(gross_volume),
            "gross_volume_display": money_to_display(gross_volume),
            "commission_earned": str(commission),
            "commission_earned_display": money_to_display(commission),
            "funds_in_escrow": str(in_escrow),
            "funds_in_escrow_display": money_to_display(in_escrow),
        }

    async def order_ledger(self, db: AsyncSession, order_id: str) -> list[LedgerEntryItem]:
        if await self._orders.get_by_id(db, order_id) is None:
            raise OrderNotFoundError(order_id)
        return await self._ledger.list_for_order(db, order_id)
