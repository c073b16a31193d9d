"""bx_ledger REST API — caller's own fund movements."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.bx_common.actor import Actor
from src.bx_common.database import get_db_session
from src.bx_common.response import ApiResponse, respond
from src.bx_gateway.auth.dependencies import get_current_actor
from src.bx_ledger.application.service import LedgerApplicationService

router = APIRouter(prefix="/ledger", tags=["ledger"])

_service = LedgerApplicationService()


@router.get("")
async def list_ledger(
    request: Request,
    actor: Annotated[Actor, Depends(get_current_actor)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    cursor: str | None = Query(None, description="Pagination cursor (opaque Base64)"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
) -> ApiResponse:
    data = await _service.list_for_user(db, actor.user_id, cursor, limit)
    return respond(request, data.model_dump(mode="json"))
