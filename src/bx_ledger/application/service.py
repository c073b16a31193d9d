"""LedgerApplicationService — read-only ledger views."""

from sqlalchemy.ext.asyncio import AsyncSession

from src.bx_ledger.application.schemas import (
    LedgerEntryItem,
    LedgerResponse,
    cursor_decode,
    cursor_encode,
)
from src.bx_ledger.infrastructure.persistence import LedgerRepository


class LedgerApplicationService:
    def __init__(self, repo: LedgerRepository | None = None) -> None:
        self._repo = repo or LedgerRepository()

    async def list_for_user(
        self, db: AsyncSession, user_id: str, cursor: str | None, limit: int
    ) -> LedgerResponse:
        cursor_id = cursor_decode(cursor)
        # Fetch limit+1 to detect has_more without a COUNT(*) query
        entries = await self._repo.list_by_user(db, user_id, cursor_id, limit + 1)
        has_more = len(entries) > limit
        page = entries[:limit]
        next_cursor = cursor_encode(page[-1].id) if has_more and page else None
        return LedgerResponse(
            items=[LedgerEntryItem.from_domain(e) for e in page],
            next_cursor=next_cursor,
            has_more=has_more,
        )

    async def list_for_order(self, db: AsyncSession, order_id: str) -> list[LedgerEntryItem]:
        entries = await self._repo.list_by_order(db, order_id)
        return [LedgerEntryItem.from_domain(e) for e in entries]
