"""LedgerSink — writes escrow money movements in their own short transactions.

Each call opens a fresh session from the session factory, independent of the
request session that carried the order state change.
"""

import logging
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.bx_common.database import async_session_factory
from src.bx_common.enums import LedgerEntryType
from src.bx_ledger.domain.models import PLATFORM_ACCOUNT_ID
from src.bx_ledger.infrastructure.persistence import LedgerRepository

logger = logging.getLogger(__name__)


class LedgerSink:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        repo: LedgerRepository | None = None,
    ) -> None:
        self._session_factory = session_factory or async_session_factory
        self._repo = repo or LedgerRepository()

    async def hold_funds(self, order_id: str, buyer_id: str, amount: Decimal) -> None:
        await self._write(
            order_id, buyer_id, LedgerEntryType.ESCROW_HOLD, -amount,
            "Buyer payment held in escrow",
        )

    async def release_funds(self, order_id: str, seller_id: str, amount: Decimal) -> None:
        await self._write(
            order_id, seller_id, LedgerEntryType.ESCROW_RELEASE, amount,
            "Escrow released to seller",
        )

    async def record_commission(self, order_id: str, amount: Decimal) -> None:
        await self._write(
            order_id, PLATFORM_ACCOUNT_ID, LedgerEntryType.COMMISSION_REVENUE, amount,
            "Platform commission",
        )

    async def refund_funds(self, order_id: str, buyer_id: str, amount: Decimal) -> None:
        await self._write(
            order_id, buyer_id, LedgerEntryType.ESCROW_REFUND, amount,
            "Escrow refunded to buyer",
        )

    async def _write(
        self,
        order_id: str,
        user_id: str,
        entry_type: LedgerEntryType,
        amount: Decimal,
        description: str,
    ) -> None:
        async with self._session_factory() as db:
            try:
                entry = await self._repo.insert_entry(
                    db, order_id, user_id, entry_type.value, amount, description
                )
                await db.commit()
            except Exception:
                await db.rollback()
                raise
        logger.info(
            "Ledger %s order=%s user=%s amount=%s entry=%s",
            entry_type.value, order_id, user_id, amount, entry.id,
        )
