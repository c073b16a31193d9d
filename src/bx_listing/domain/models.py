"""Listing domain model — pure dataclass, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from src.bx_common.enums import ListingStatus


@dataclass
class Listing:
    id: str
    seller_id: str
    title: str
    category: str            # MineralCategory value
    quantity: Decimal        # available, never negative
    unit: str                # UnitOfMeasure value
    price_per_unit: Decimal  # > 0 while LIVE
    status: str              # ListingStatus value
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_live(self) -> bool:
        return self.status == ListingStatus.LIVE
