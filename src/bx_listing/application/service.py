"""ListingApplicationService — read-only view of a listing's sellable state."""

from sqlalchemy.ext.asyncio import AsyncSession

from src.bx_common.errors import ListingNotFoundError
from src.bx_listing.application.schemas import ListingDetail
from src.bx_listing.domain.repository import ListingRepositoryProtocol
from src.bx_listing.infrastructure.persistence import ListingRepository


class ListingApplicationService:
    def __init__(self, repo: ListingRepositoryProtocol | None = None) -> None:
        self._repo: ListingRepositoryProtocol = repo or ListingRepository()

    async def get_listing(self, db: AsyncSession, listing_id: str) -> ListingDetail:
        listing = await self._repo.get_by_id(db, listing_id)
        if listing is None:
            raise ListingNotFoundError(listing_id)
        return ListingDetail.from_domain(listing)
