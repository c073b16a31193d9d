"""Admin REST API — dispute resolution and platform oversight."""
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.bx_admin.application.service import AdminService
from src.bx_common.actor import Actor
from src.bx_common.database import get_db_session
from src.bx_common.enums import EscrowStatus
from src.bx_common.response import ApiResponse, respond
from src.bx_gateway.auth.dependencies import require_admin
from src.bx_order.application.service import OrderApplicationService

router = APIRouter(prefix="/admin", tags=["admin"])
_service = AdminService()
_orders = OrderApplicationService()


@router.post("/orders/{order_id}/refund")
async def refund_order(
    order_id: str,
    request: Request,
    admin: Annotated[Actor, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    order = await _orders.refund(db, admin, order_id)
    return respond(request, order.model_dump(mode="json"), "Order refunded to buyer.")


@router.post("/orders/{order_id}/complete")
async def complete_order(
    order_id: str,
    request: Request,
    admin: Annotated[Actor, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    order = await _orders.complete_after_dispute(db, admin, order_id)
    return respond(
        request, order.model_dump(mode="json"), "Dispute resolved. Funds released to seller."
    )


@router.get("/orders/{order_id}/ledger")
async def order_ledger(
    order_id: str,
    request: Request,
    admin: Annotated[Actor, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    items = await _service.order_ledger(db, order_id)
    return respond(request, {"items": [i.model_dump(mode="json") for i in items]})


@router.get("/transactions")
async def list_transactions(
    request: Request,
    admin: Annotated[Actor, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    status: EscrowStatus | None = Query(None, description="Filter by escrow status"),
    limit: int = Query(50, ge=1, le=200),
    cursor: str | None = Query(None),
) -> ApiResponse:
    data = await _service.list_transactions(
        db, status.value if status else None, limit, cursor
    )
    return respond(request, data.model_dump(mode="json"))


@router.get("/stats")
async def platform_stats(
    request: Request,
    admin: Annotated[Actor, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    return respond(request, await _service.get_stats(db))
