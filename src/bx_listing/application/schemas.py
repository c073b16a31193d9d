"""Pydantic schemas for bx_listing API responses."""

from decimal import Decimal

from pydantic import BaseModel

from src.bx_common.money import money_to_display
from src.bx_listing.domain.models import Listing


class ListingDetail(BaseModel):
    id: str
    seller_id: str
    title: str
    category: str
    status: str
    available_quantity: Decimal
    unit: str
    price_per_unit: Decimal
    price_per_unit_display: str
    purchasable: bool

    @classmethod
    def from_domain(cls, listing: Listing) -> "ListingDetail":
        return cls(
            id=listing.id,
            seller_id=listing.seller_id,
            title=listing.title,
            category=listing.category,
            status=listing.status,
            available_quantity=listing.quantity,
            unit=listing.unit,
            price_per_unit=listing.price_per_unit,
            price_per_unit_display=money_to_display(listing.price_per_unit),
            purchasable=listing.is_live and listing.quantity > 0,
        )
