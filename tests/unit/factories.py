"""Builders and in-memory collaborators for SettlementEngine tests.

The fakes yield to the event loop on every read, so two coroutines racing on
the same listing or order both see the pre-race state before either writes.
Writes (decrement, compare-and-set) are atomic, like the conditional UPDATEs
they stand in for.
"""
import asyncio
from dataclasses import replace
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

from src.bx_common.actor import Actor
from src.bx_common.enums import ActorRole
from src.bx_listing.domain.models import Listing
from src.bx_order.domain.models import Order, StatusAggregate

FIXED_NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)

BUYER = Actor("buyer-1", ActorRole.BUYER)
OTHER_BUYER = Actor("buyer-2", ActorRole.BUYER)
SELLER = Actor("seller-1", ActorRole.SELLER)
OTHER_SELLER = Actor("seller-2", ActorRole.SELLER)
ADMIN = Actor("admin-1", ActorRole.ADMIN)


def make_listing(**kwargs: Any) -> Listing:
    defaults: dict[str, Any] = {
        "id": "lst-1",
        "seller_id": SELLER.user_id,
        "title": "Alluvial gold nuggets",
        "category": "GOLD",
        "quantity": Decimal("100"),
        "unit": "GRAMS",
        "price_per_unit": Decimal("1850.00"),
        "status": "LIVE",
    }
    defaults.update(kwargs)
    return Listing(**defaults)


def make_order(**kwargs: Any) -> Order:
    defaults: dict[str, Any] = {
        "id": "ord-1",
        "transaction_ref": "TXN-1700000000000-ABCDEFGHI",
        "listing_id": "lst-1",
        "buyer_id": BUYER.user_id,
        "seller_id": SELLER.user_id,
        "unit": "GRAMS",
        "quantity": Decimal("2"),
        "unit_price": Decimal("1850.00"),
        "commission_rate": Decimal("0.075"),
        "total_amount": Decimal("3700.00"),
        "commission_amount": Decimal("277.50"),
        "seller_net": Decimal("3422.50"),
        "status": "FUNDS_HELD",
        "funded_at": FIXED_NOW,
        "created_at": FIXED_NOW,
    }
    defaults.update(kwargs)
    return Order(**defaults)


class FakeListingRepo:
    def __init__(self) -> None:
        self.rows: dict[str, Listing] = {}

    def add(self, listing: Listing) -> Listing:
        self.rows[listing.id] = listing
        return listing

    async def get_by_id(self, db: Any, listing_id: str) -> Listing | None:
        await asyncio.sleep(0)
        row = self.rows.get(listing_id)
        return replace(row) if row else None

    async def atomic_decrement_quantity(
        self, db: Any, listing_id: str, amount: Decimal
    ) -> Listing | None:
        row = self.rows.get(listing_id)
        if row is None or row.status != "LIVE" or row.quantity < amount:
            return None
        row.quantity -= amount
        return replace(row)

    async def restore_quantity(
        self, db: Any, listing_id: str, amount: Decimal
    ) -> Listing | None:
        row = self.rows.get(listing_id)
        if row is None:
            return None
        row.quantity += amount
        return replace(row)

    async def set_status(self, db: Any, listing_id: str, status: str) -> None:
        if listing_id in self.rows:
            self.rows[listing_id].status = status


class FakeOrderRepo:
    def __init__(self) -> None:
        self.rows: dict[str, Order] = {}

    def add(self, order: Order) -> Order:
        self.rows[order.id] = order
        return order

    async def save(self, db: Any, order: Order) -> None:
        self.rows[order.id] = replace(order)

    async def get_by_id(self, db: Any, order_id: str) -> Order | None:
        await asyncio.sleep(0)
        row = self.rows.get(order_id)
        return replace(row) if row else None

    async def compare_and_set(
        self, db: Any, order: Order, expected_status: str, expected_version: int
    ) -> Order | None:
        row = self.rows.get(order.id)
        if row is None or row.status != expected_status or row.version != expected_version:
            return None
        stored = replace(order, version=expected_version + 1)
        self.rows[order.id] = stored
        return replace(stored)

    async def list_orders(
        self,
        db: Any,
        buyer_id: str | None,
        seller_id: str | None,
        status: str | None,
        limit: int,
        cursor_id: str | None,
    ) -> list[Order]:
        rows = sorted(self.rows.values(), key=lambda o: o.id, reverse=True)
        rows = [
            o for o in rows
            if (buyer_id is None or o.buyer_id == buyer_id)
            and (seller_id is None or o.seller_id == seller_id)
            and (status is None or o.status == status)
            and (cursor_id is None or o.id < cursor_id)
        ]
        return rows[:limit]

    async def aggregate_by_status(
        self, db: Any, buyer_id: str | None, seller_id: str | None
    ) -> list[StatusAggregate]:
        buckets: dict[str, StatusAggregate] = {}
        for o in self.rows.values():
            if buyer_id is not None and o.buyer_id != buyer_id:
                continue
            if seller_id is not None and o.seller_id != seller_id:
                continue
            agg = buckets.setdefault(
                o.status,
                StatusAggregate(o.status, 0, Decimal("0"), Decimal("0"), Decimal("0")),
            )
            agg.order_count += 1
            agg.total_amount += o.total_amount
            agg.commission_amount += o.commission_amount
            agg.seller_net += o.seller_net
        return list(buckets.values())


class RecordingLedger:
    def __init__(self) -> None:
        self.calls: list[tuple[str, ...]] = []
        self.fail = False

    async def _record(self, *call: Any) -> None:
        if self.fail:
            raise ConnectionError("ledger unavailable")
        self.calls.append(call)

    async def hold_funds(self, order_id: str, buyer_id: str, amount: Decimal) -> None:
        await self._record("hold", order_id, buyer_id, amount)

    async def release_funds(self, order_id: str, seller_id: str, amount: Decimal) -> None:
        await self._record("release", order_id, seller_id, amount)

    async def record_commission(self, order_id: str, amount: Decimal) -> None:
        await self._record("commission", order_id, amount)

    async def refund_funds(self, order_id: str, buyer_id: str, amount: Decimal) -> None:
        await self._record("refund", order_id, buyer_id, amount)

    def of_kind(self, kind: str) -> list[tuple[str, ...]]:
        return [c for c in self.calls if c[0] == kind]


class RecordingNotifier:
    def __init__(self) -> None:
        self.sent: list[tuple[str, str, dict[str, Any]]] = []
        self.fail = False

    async def notify(self, user_id: str, event_type: str, payload: dict[str, Any]) -> None:
        if self.fail:
            raise ConnectionError("redis down")
        self.sent.append((user_id, event_type, payload))
