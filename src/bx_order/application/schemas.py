# src/bx_order/application/schemas.py
import base64
import json
from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, field_validator

from src.bx_common.money import money_to_display
from src.bx_order.domain.models import Order

OrderScope = Literal["buyer", "seller"]

# ---------------------------------------------------------------------------
# Cursor utilities (order ids are snowflake strings, sortable)
# ---------------------------------------------------------------------------


def cursor_encode(last_order_id: str) -> str:
    return base64.b64encode(json.dumps({"id": last_order_id}).encode()).decode()


def cursor_decode(cursor: str | None) -> str | None:
    """Decode cursor -> order id, or None on error."""
    if cursor is None:
        return None
    try:
        return str(json.loads(base64.b64decode(cursor.encode()).decode())["id"])
    except Exception:
        return None


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class PlaceOrderRequest(BaseModel):
    listing_id: str
    # Positivity is enforced by the engine so the error carries its own code
    quantity: Decimal

    @field_validator("listing_id")
    @classmethod
    def no_whitespace(cls, v: str) -> str:
        if not v or v != v.strip() or " " in v:
            raise ValueError("listing_id must not contain whitespace")
        return v


class DisputeRequest(BaseModel):
    reason: str


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class OrderResponse(BaseModel):
    id: str
    transaction_ref: str
    listing_id: str
    buyer_id: str
    seller_id: str
    quantity: Decimal
    unit: str
    unit_price: Decimal
    commission_rate: Decimal
    total_amount: Decimal
    total_amount_display: str
    commission_amount: Decimal
    seller_net: Decimal
    seller_net_display: str
    status: str
    buyer_confirmed: bool
    dispute_reason: str | None = None
    created_at: datetime | None = None
    funded_at: datetime | None = None
    shipped_at: datetime | None = None
    delivered_at: datetime | None = None
    completed_at: datetime | None = None
    disputed_at: datetime | None = None
    refunded_at: datetime | None = None

    @classmethod
    def from_domain(cls, o: Order) -> "OrderResponse":
        return cls(
            id=o.id,
            transaction_ref=o.transaction_ref,
            listing_id=o.listing_id,
            buyer_id=o.buyer_id,
            seller_id=o.seller_id,
            quantity=o.quantity,
            unit=o.unit,
            unit_price=o.unit_price,
            commission_rate=o.commission_rate,
            total_amount=o.total_amount,
            total_amount_display=money_to_display(o.total_amount),
            commission_amount=o.commission_amount,
            seller_net=o.seller_net,
            seller_net_display=money_to_display(o.seller_net),
            status=o.status,
            buyer_confirmed=o.buyer_confirmed,
            dispute_reason=o.dispute_reason,
            created_at=o.created_at,
            funded_at=o.funded_at,
            shipped_at=o.shipped_at,
            delivered_at=o.delivered_at,
            completed_at=o.completed_at,
            disputed_at=o.disputed_at,
            refunded_at=o.refunded_at,
        )


class OrderListResponse(BaseModel):
    items: list[OrderResponse]
    next_cursor: str | None
    has_more: bool


class BuyerSummary(BaseModel):
    total: int
    pending: int            # funds still in escrow
    completed: int
    refunded: int
    total_spent: Decimal    # completed orders only
    total_spent_display: str


class SellerSummary(BaseModel):
    total_sales: int
    pending: int
    completed: int
    refunded: int
    total_revenue: Decimal  # seller_net of completed orders
    total_revenue_display: str
    commission_paid: Decimal
