"""Racing SettlementEngine operations on the same listing or order."""
import asyncio
from decimal import Decimal

from factories import ADMIN, BUYER, OTHER_BUYER, make_listing, make_order

from src.bx_common.errors import InsufficientQuantityError, InvalidTransitionError


async def test_last_units_race_has_exactly_one_winner(engine, db, listings, orders) -> None:
    listings.add(make_listing(quantity=Decimal("10")))

    results = await asyncio.gather(
        engine.create_order(db, BUYER, "lst-1", 7),
        engine.create_order(db, OTHER_BUYER, "lst-1", 7),
        return_exceptions=True,
    )

    failures = [r for r in results if isinstance(r, Exception)]
    successes = [r for r in results if not isinstance(r, Exception)]
    assert len(successes) == 1
    assert len(failures) == 1
    assert isinstance(failures[0], InsufficientQuantityError)
    assert failures[0].available == Decimal("3")
    assert listings.rows["lst-1"].quantity == Decimal("3")
    assert len(orders.rows) == 1


async def test_last_unit_race_loser_sees_insufficient_quantity(engine, db, listings) -> None:
    listings.add(make_listing(quantity=Decimal("1")))

    results = await asyncio.gather(
        engine.create_order(db, BUYER, "lst-1", 1),
        engine.create_order(db, OTHER_BUYER, "lst-1", 1),
        return_exceptions=True,
    )

    failures = [r for r in results if isinstance(r, Exception)]
    assert len(failures) == 1
    assert isinstance(failures[0], InsufficientQuantityError)
    assert failures[0].available == Decimal("0")
    assert listings.rows["lst-1"].status == "SOLD"


async def test_many_buyers_never_oversell(engine, db, listings, orders) -> None:
    listings.add(make_listing(quantity=Decimal("5")))

    results = await asyncio.gather(
        *(engine.create_order(db, BUYER, "lst-1", 1) for _ in range(8)),
        return_exceptions=True,
    )

    assert sum(not isinstance(r, Exception) for r in results) == 5
    assert all(
        isinstance(r, InsufficientQuantityError) for r in results if isinstance(r, Exception)
    )
    assert listings.rows["lst-1"].quantity == Decimal("0")
    assert listings.rows["lst-1"].status == "SOLD"


async def test_concurrent_confirms_release_once(engine, db, orders, ledger) -> None:
    orders.add(make_order(status="DELIVERED"))

    results = await asyncio.gather(
        engine.confirm_delivery(db, BUYER, "ord-1"),
        engine.confirm_delivery(db, BUYER, "ord-1"),
        return_exceptions=True,
    )

    assert sum(isinstance(r, InvalidTransitionError) for r in results) == 1
    assert len(ledger.of_kind("release")) == 1
    assert orders.rows["ord-1"].status == "COMPLETED"


async def test_double_refund_restores_quantity_once(engine, db, listings, orders) -> None:
    listings.add(make_listing(quantity=Decimal("98")))
    orders.add(make_order(status="FUNDS_HELD"))

    results = await asyncio.gather(
        engine.refund(db, ADMIN, "ord-1"),
        engine.refund(db, ADMIN, "ord-1"),
        return_exceptions=True,
    )

    loser = [r for r in results if isinstance(r, Exception)]
    assert len(loser) == 1
    assert isinstance(loser[0], InvalidTransitionError)
    assert loser[0].current == "REFUNDED"
    # Quantity comes back exactly once
    assert listings.rows["lst-1"].quantity == Decimal("100")
