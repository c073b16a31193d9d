"""ListingRepository — raw SQL implementation of ListingRepositoryProtocol.

Quantity mutations are single conditional UPDATE ... RETURNING statements, so a
check-and-decrement can never interleave with another purchase of the same row.
A result of 0 rows means the condition (LIVE, enough stock) did not hold.

Transaction ownership: the CALLER commits or rolls back.
"""

from decimal import Decimal
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.bx_listing.domain.models import Listing

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_COLUMNS = """
    id, seller_id, title, category, quantity, unit,
    price_per_unit, status, created_at, updated_at
"""

_GET_LISTING_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM listings WHERE id = :id
""")

_DECREMENT_QUANTITY_SQL = text(f"""
    UPDATE listings
    SET quantity = quantity - :amount,
        updated_at = NOW()
    WHERE id = :id
      AND status = 'LIVE'
      AND quantity >= :amount
    RETURNING {_COLUMNS}
""")

_RESTORE_QUANTITY_SQL = text(f"""
    UPDATE listings
    SET quantity = quantity + :amount,
        updated_at = NOW()
    WHERE id = :id
    RETURNING {_COLUMNS}
""")

_SET_STATUS_SQL = text("""
    UPDATE listings
    SET status = :status, updated_at = NOW()
    WHERE id = :id
""")


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_listing(row: Any) -> Listing:
    return Listing(
        id=row.id,
        seller_id=row.seller_id,
        title=row.title,
        category=row.category,
        quantity=Decimal(row.quantity),
        unit=row.unit,
        price_per_unit=Decimal(row.price_per_unit),
        status=row.status,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class ListingRepository:
    """Concrete repository — every mutation atomic at the SQL level."""

    async def get_by_id(self, db: AsyncSession, listing_id: str) -> Listing | None:
        result = await db.execute(_GET_LISTING_SQL, {"id": listing_id})
        row = result.fetchone()
        return _row_to_listing(row) if row else None

    async def atomic_decrement_quantity(
        self, db: AsyncSession, listing_id: str, amount: Decimal
    ) -> Listing | None:
        result = await db.execute(
            _DECREMENT_QUANTITY_SQL, {"id": listing_id, "amount": amount}
        )
        row = result.fetchone()
        return _row_to_listing(row) if row else None

    async def restore_quantity(
        self, db: AsyncSession, listing_id: str, amount: Decimal
    ) -> Listing | None:
        result = await db.execute(
            _RESTORE_QUANTITY_SQL, {"id": listing_id, "amount": amount}
        )
        row = result.fetchone()
        return _row_to_listing(row) if row else None

    async def set_status(self, db: AsyncSession, listing_id: str, status: str) -> None:
        await db.execute(_SET_STATUS_SQL, {"id": listing_id, "status": status})
