"""bx_notify REST API — caller's recent notifications."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from src.bx_common.actor import Actor
from src.bx_common.response import ApiResponse, respond
from src.bx_gateway.auth.dependencies import get_current_actor
from src.bx_notify.infrastructure.redis_notifier import RedisNotifier

router = APIRouter(prefix="/notifications", tags=["notifications"])

_notifier = RedisNotifier()


@router.get("")
async def list_notifications(
    request: Request,
    actor: Annotated[Actor, Depends(get_current_actor)],
    limit: int = Query(20, ge=1, le=100),
) -> ApiResponse:
    items = await _notifier.recent(actor.user_id, limit)
    return respond(request, {"items": items})
