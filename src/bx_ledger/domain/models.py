"""Ledger domain model — pure dataclass, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

# Ledger owner for commission revenue
PLATFORM_ACCOUNT_ID = "PLATFORM"


@dataclass
class LedgerEntry:
    id: int                          # BIGSERIAL
    order_id: str
    user_id: str                     # buyer, seller or PLATFORM_ACCOUNT_ID
    entry_type: str                  # LedgerEntryType value
    amount: Decimal                  # positive=credit to user_id, negative=debit
    description: str | None = None
    created_at: datetime | None = None
