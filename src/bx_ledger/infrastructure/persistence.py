"""LedgerRepository — append-only ledger_entries access.

Rows are only ever inserted. Transaction ownership: the CALLER commits.
"""

from decimal import Decimal
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.bx_common.errors import InternalError
from src.bx_ledger.domain.models import LedgerEntry

_COLUMNS = "id, order_id, user_id, entry_type, amount, description, created_at"

_INSERT_LEDGER_SQL = text(f"""
    INSERT INTO ledger_entries
        (order_id, user_id, entry_type, amount, description)
    VALUES
        (:order_id, :user_id, :entry_type, :amount, :description)
    RETURNING {_COLUMNS}
""")

_LIST_BY_USER_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM ledger_entries
    WHERE user_id = :user_id
      AND (CAST(:cursor_id AS BIGINT) IS NULL OR id < :cursor_id)
    ORDER BY id DESC
    LIMIT :limit
""")

_LIST_BY_ORDER_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM ledger_entries
    WHERE order_id = :order_id
    ORDER BY id ASC
""")


def _row_to_ledger(row: Any) -> LedgerEntry:
    return LedgerEntry(
        id=row.id,
        order_id=row.order_id,
        user_id=row.user_id,
        entry_type=row.entry_type,
        amount=Decimal(row.amount),
        description=row.description,
        created_at=row.created_at,
    )


class LedgerRepository:
    async def insert_entry(
        self,
        db: AsyncSession,
        order_id: str,
        user_id: str,
        entry_type: str,
        amount: Decimal,
        description: str,
    ) -> LedgerEntry:
        result = await db.execute(
            _INSERT_LEDGER_SQL,
            {
                "order_id": order_id,
                "user_id": user_id,
                "entry_type": entry_type,
                "amount": amount,
                "description": description,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Ledger insert returned no rows")
        return _row_to_ledger(row)

    async def list_by_user(
        self,
        db: AsyncSession,
        user_id: str,
        cursor_id: int | None,
        limit: int,
    ) -> list[LedgerEntry]:
        result = await db.execute(
            _LIST_BY_USER_SQL,
            {"user_id": user_id, "cursor_id": cursor_id, "limit": limit},
        )
        return [_row_to_ledger(row) for row in result.fetchall()]

    async def list_by_order(self, db: AsyncSession, order_id: str) -> list[LedgerEntry]:
        result = await db.execute(_LIST_BY_ORDER_SQL, {"order_id": order_id})
        return [_row_to_ledger(row) for row in result.fetchall()]
