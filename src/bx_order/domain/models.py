"""Order domain model — pure dataclass, no SQLAlchemy dependency.

Seller, unit, unit price and commission rate are snapshots taken from the
listing row at purchase time. They are never re-joined against the live
listing, so later price or ownership edits cannot reprice an open order.
"""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from src.bx_common.enums import EscrowStatus


@dataclass
class Order:
    id: str
    transaction_ref: str  # TXN-<ms>-<suffix>, shown to buyer/seller
    listing_id: str
    buyer_id: str
    # Snapshot of the listing at purchase time
    seller_id: str
    unit: str
    quantity: Decimal
    unit_price: Decimal
    commission_rate: Decimal
    # Settlement amounts: commission_amount + seller_net == total_amount
    total_amount: Decimal
    commission_amount: Decimal
    seller_net: Decimal
    # Escrow state
    status: str = EscrowStatus.FUNDS_HELD.value
    buyer_confirmed: bool = False
    dispute_reason: str | None = None
    version: int = 0
    # Lifecycle timestamps, each set once
    created_at: datetime | None = None
    funded_at: datetime | None = None
    shipped_at: datetime | None = None
    delivered_at: datetime | None = None
    completed_at: datetime | None = None
    disputed_at: datetime | None = None
    refunded_at: datetime | None = None
    updated_at: datetime | None = None

    def is_party(self, user_id: str) -> bool:
        return user_id in (self.buyer_id, self.seller_id)

    def counterparty_of(self, user_id: str) -> str:
        return self.seller_id if user_id == self.buyer_id else self.buyer_id


@dataclass
class StatusAggregate:
    """Per-status totals used by dashboards and admin stats."""

    status: str
    order_count: int
    total_amount: Decimal
    commission_amount: Decimal
    seller_net: Decimal
