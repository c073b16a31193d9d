"""Listing Store Protocol — the settlement engine's view of inventory.

Unit tests inject a fake that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from decimal import Decimal
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.bx_listing.domain.models import Listing


class ListingRepositoryProtocol(Protocol):
    async def get_by_id(self, db: AsyncSession, listing_id: str) -> Listing | None: ...

    async def atomic_decrement_quantity(
        self, db: AsyncSession, listing_id: str, amount: Decimal
    ) -> Listing | None:
        """Decrement iff the listing is LIVE and holds >= amount.

        Returns the updated listing, or None when the conditional update
        matched no row.
        """
        ...

    async def restore_quantity(
        self, db: AsyncSession, listing_id: str, amount: Decimal
    ) -> Listing | None: ...

    async def set_status(self, db: AsyncSession, listing_id: str, status: str) -> None: ...
