"""bx_listing REST endpoints.

GET /listings/{listing_id} — availability and price as the engine sees them
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.bx_common.actor import Actor
from src.bx_common.database import get_db_session
from src.bx_common.response import ApiResponse, respond
from src.bx_gateway.auth.dependencies import get_current_actor
from src.bx_listing.application.service import ListingApplicationService

router = APIRouter(prefix="/listings", tags=["listings"])

_service = ListingApplicationService()


@router.get("/{listing_id}")
async def get_listing(
    listing_id: str,
    request: Request,
    actor: Annotated[Actor, Depends(get_current_actor)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.get_listing(db, listing_id)
    return respond(request, result.model_dump(mode="json"))
