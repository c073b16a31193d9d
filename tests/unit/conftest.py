"""Fixtures wiring a SettlementEngine to in-memory collaborators."""
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
from factories import (
    FIXED_NOW,
    FakeListingRepo,
    FakeOrderRepo,
    RecordingLedger,
    RecordingNotifier,
)

from src.bx_order.engine.settlement import SettlementEngine


@pytest.fixture
def db() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def listings() -> FakeListingRepo:
    return FakeListingRepo()


@pytest.fixture
def orders() -> FakeOrderRepo:
    return FakeOrderRepo()


@pytest.fixture
def ledger() -> RecordingLedger:
    return RecordingLedger()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def engine(
    orders: FakeOrderRepo,
    listings: FakeListingRepo,
    ledger: RecordingLedger,
    notifier: RecordingNotifier,
) -> SettlementEngine:
    return SettlementEngine(
        orders=orders,
        listings=listings,
        ledger=ledger,
        notifier=notifier,
        commission_rate=Decimal("0.075"),
        clock=lambda: FIXED_NOW,
    )
