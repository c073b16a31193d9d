# src/bx_order/infrastructure/persistence.py
"""OrderRepository — raw SQL persistence implementation.

State changes go through compare_and_set(): a conditional UPDATE keyed on
(id, status, version). Two racing transitions on one order cannot both match,
the loser sees 0 rows.
"""
from decimal import Decimal
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.bx_order.domain.models import Order, StatusAggregate

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

_SELECT_COLUMNS = """
    id, transaction_ref, listing_id, buyer_id, seller_id, unit,
    quantity, unit_price, commission_rate,
    total_amount, commission_amount, seller_net,
    status, buyer_confirmed, dispute_reason, version,
    created_at, funded_at, shipped_at, delivered_at,
    completed_at, disputed_at, refunded_at, updated_at
"""

_INSERT_ORDER_SQL = text("""
    INSERT INTO orders (id, transaction_ref, listing_id, buyer_id, seller_id, unit,
        quantity, unit_price, commission_rate,
        total_amount, commission_amount, seller_net,
        status, buyer_confirmed, version, created_at, funded_at)
    VALUES (:id, :transaction_ref, :listing_id, :buyer_id, :seller_id, :unit,
        :quantity, :unit_price, :commission_rate,
        :total_amount, :commission_amount, :seller_net,
        :status, :buyer_confirmed, :version, :created_at, :funded_at)
""")

_COMPARE_AND_SET_SQL = text(f"""
    UPDATE orders
    SET status = :status,
        buyer_confirmed = :buyer_confirmed,
        dispute_reason = :dispute_reason,
        shipped_at = :shipped_at,
        delivered_at = :delivered_at,
        completed_at = :completed_at,
        disputed_at = :disputed_at,
        refunded_at = :refunded_at,
        version = version + 1,
        updated_at = NOW()
    WHERE id = :id
      AND status = :expected_status
      AND version = :expected_version
    RETURNING {_SELECT_COLUMNS}
""")

_GET_ORDER_BY_ID_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM orders WHERE id = :id
""")

_LIST_ORDERS_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM orders
    WHERE (CAST(:buyer_id AS TEXT) IS NULL OR buyer_id = :buyer_id)
      AND (CAST(:seller_id AS TEXT) IS NULL OR seller_id = :seller_id)
      AND (CAST(:status AS TEXT) IS NULL OR status = :status)
      AND (CAST(:cursor_id AS TEXT) IS NULL OR id < :cursor_id)
    ORDER BY id DESC
    LIMIT :limit
""")

_AGGREGATE_SQL = text("""
    SELECT status,
           COUNT(*) AS order_count,
           COALESCE(SUM(total_amount), 0) AS total_amount,
           COALESCE(SUM(commission_amount), 0) AS commission_amount,
           COALESCE(SUM(seller_net), 0) AS seller_net
    FROM orders
    WHERE (CAST(:buyer_id AS TEXT) IS NULL OR buyer_id = :buyer_id)
      AND (CAST(:seller_id AS TEXT) IS NULL OR seller_id = :seller_id)
    GROUP BY status
""")


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_order(row: Any) -> Order:
    """Convert a DB result row to an Order domain object."""
    return Order(
        id=row.id,
        transaction_ref=row.transaction_ref,
        listing_id=row.listing_id,
        buyer_id=row.buyer_id,
        seller_id=row.seller_id,
        unit=row.unit,
        quantity=Decimal(row.quantity),
        unit_price=Decimal(row.unit_price),
        commission_rate=Decimal(row.commission_rate),
        total_amount=Decimal(row.total_amount),
        commission_amount=Decimal(row.commission_amount),
        seller_net=Decimal(row.seller_net),
        status=row.status,
        buyer_confirmed=row.buyer_confirmed,
        dispute_reason=row.dispute_reason,
        version=row.version,
        created_at=row.created_at,
        funded_at=row.funded_at,
        shipped_at=row.shipped_at,
        delivered_at=row.delivered_at,
        completed_at=row.completed_at,
        disputed_at=row.disputed_at,
        refunded_at=row.refunded_at,
        updated_at=row.updated_at,
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class OrderRepository:
    """Concrete implementation of OrderRepositoryProtocol using raw SQL."""

    async def save(self, db: AsyncSession, order: Order) -> None:
        await db.execute(
            _INSERT_ORDER_SQL,
            {
                "id": order.id,
                "transaction_ref": order.transaction_ref,
                "listing_id": order.listing_id,
                "buyer_id": order.buyer_id,
                "seller_id": order.seller_id,
                "unit": order.unit,
                "quantity": order.quantity,
                "unit_price": order.unit_price,
                "commission_rate": order.commission_rate,
                "total_amount": order.total_amount,
                "commission_amount": order.commission_amount,
                "seller_net": order.seller_net,
                "status": order.status,
                "buyer_confirmed": order.buyer_confirmed,
                "version": order.version,
                "created_at": order.created_at,
                "funded_at": order.funded_at,
            },
        )

    async def get_by_id(self, db: AsyncSession, order_id: str) -> Order | None:
        result = await db.execute(_GET_ORDER_BY_ID_SQL, {"id": order_id})
        row = result.fetchone()
        return _row_to_order(row) if row else None

    async def compare_and_set(
        self,
        db: AsyncSession,
        order: Order,
        expected_status: str,
        expected_version: int,
    ) -> Order | None:
        result = await db.execute(
            _COMPARE_AND_SET_SQL,
            {
                "id": order.id,
                "status": order.status,
                "buyer_confirmed": order.buyer_confirmed,
                "dispute_reason": order.dispute_reason,
                "shipped_at": order.shipped_at,
                "delivered_at": order.delivered_at,
                "completed_at": order.completed_at,
                "disputed_at": order.disputed_at,
                "refunded_at": order.refunded_at,
                "expected_status": expected_status,
                "expected_version": expected_version,
            },
        )
        row = result.fetchone()
        return _row_to_order(row) if row else None

    async def list_orders(
        self,
        db: AsyncSession,
        buyer_id: str | None,
        seller_id: str | None,
        status: str | None,
        limit: int,
        cursor_id: str | None,
    ) -> list[Order]:
        result = await db.execute(
            _LIST_ORDERS_SQL,
            {
                "buyer_id": buyer_id,
                "seller_id": seller_id,
                "status": status,
                "cursor_id": cursor_id,
                "limit": limit,
            },
        )
        rows = result.fetchall()
        return [_row_to_order(row) for row in rows]

    async def aggregate_by_status(
        self,
        db: AsyncSession,
        buyer_id: str | None,
        seller_id: str | None,
    ) -> list[StatusAggregate]:
        result = await db.execute(
            _AGGREGATE_SQL, {"buyer_id": buyer_id, "seller_id": seller_id}
        )
        return [
            StatusAggregate(
                status=row.status,
                order_count=int(row.order_count),
                total_amount=Decimal(row.total_amount),
                commission_amount=Decimal(row.commission_amount),
                seller_net=Decimal(row.seller_net),
            )
            for row in result.fetchall()
        ]
