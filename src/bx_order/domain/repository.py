# src/bx_order/domain/repository.py
"""OrderRepository Protocol — interface contract for persistence layer."""
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.bx_order.domain.models import Order, StatusAggregate


class OrderRepositoryProtocol(Protocol):
    async def save(self, db: AsyncSession, order: Order) -> None: ...

    async def get_by_id(self, db: AsyncSession, order_id: str) -> Order | None: ...

    async def compare_and_set(
        self,
        db: AsyncSession,
        order: Order,
        expected_status: str,
        expected_version: int,
    ) -> Order | None:
        """Persist order iff the stored row still has expected_status/version.

        Returns the stored order (version bumped), or None if another writer won.
        """
        ...

    async def list_orders(
        self,
        db: AsyncSession,
        buyer_id: str | None,
        seller_id: str | None,
        status: str | None,
        limit: int,
        cursor_id: str | None,
    ) -> list[Order]: ...

    async def aggregate_by_status(
        self,
        db: AsyncSession,
        buyer_id: str | None,
        seller_id: str | None,
    ) -> list[StatusAggregate]: ...
