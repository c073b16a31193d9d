"""bx_order REST endpoints.

POST /orders                     — purchase (buyer funds go into escrow)
GET  /orders                     — buyer or seller dashboard list
GET  /orders/summary             — buyer or seller dashboard totals
GET  /orders/{order_id}          — detail, visible to both parties and admins
POST /orders/{order_id}/ship     — seller (or admin)
POST /orders/{order_id}/deliver  — seller (or admin)
POST /orders/{order_id}/confirm  — buyer; releases funds to the seller
POST /orders/{order_id}/dispute  — buyer or seller
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.bx_common.actor import Actor
from src.bx_common.database import get_db_session
from src.bx_common.enums import EscrowStatus
from src.bx_common.response import ApiResponse, respond
from src.bx_gateway.auth.dependencies import get_current_actor
from src.bx_order.application.schemas import DisputeRequest, OrderScope, PlaceOrderRequest
from src.bx_order.application.service import OrderApplicationService

router = APIRouter(prefix="/orders", tags=["orders"])

_service = OrderApplicationService()


@router.post("", status_code=201)
async def place_order(
    req: PlaceOrderRequest,
    request: Request,
    actor: Annotated[Actor, Depends(get_current_actor)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    order = await _service.place_order(db, actor, req)
    return respond(
        request,
        order.model_dump(mode="json"),
        f"Purchase successful! Transaction ID: {order.transaction_ref}. "
        "Funds are held in escrow.",
    )


@router.get("")
async def list_orders(
    request: Request,
    actor: Annotated[Actor, Depends(get_current_actor)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    scope: OrderScope = Query("buyer", description="List as buyer or as seller"),
    status: EscrowStatus | None = Query(None, description="Filter by escrow status"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
    cursor: str | None = Query(None, description="Pagination cursor (opaque Base64)"),
) -> ApiResponse:
    data = await _service.list_orders(
        db, actor, scope, status.value if status else None, limit, cursor
    )
    return respond(request, data.model_dump(mode="json"))


@router.get("/summary")
async def order_summary(
    request: Request,
    actor: Annotated[Actor, Depends(get_current_actor)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    scope: OrderScope = Query("buyer"),
) -> ApiResponse:
    if scope == "seller":
        data = await _service.seller_summary(db, actor)
    else:
        data = await _service.buyer_summary(db, actor)
    return respond(request, data.model_dump(mode="json"))


@router.get("/{order_id}")
async def get_order(
    order_id: str,
    request: Request,
    actor: Annotated[Actor, Depends(get_current_actor)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    order = await _service.get_order(db, actor, order_id)
    return respond(request, order.model_dump(mode="json"))


@router.post("/{order_id}/ship")
async def mark_shipped(
    order_id: str,
    request: Request,
    actor: Annotated[Actor, Depends(get_current_actor)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    order = await _service.mark_shipped(db, actor, order_id)
    return respond(request, order.model_dump(mode="json"), "Order marked as shipped.")


@router.post("/{order_id}/deliver")
async def mark_delivered(
    order_id: str,
    request: Request,
    actor: Annotated[Actor, Depends(get_current_actor)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    order = await _service.mark_delivered(db, actor, order_id)
    return respond(request, order.model_dump(mode="json"), "Order marked as delivered.")


@router.post("/{order_id}/confirm")
async def confirm_delivery(
    order_id: str,
    request: Request,
    actor: Annotated[Actor, Depends(get_current_actor)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    order = await _service.confirm_delivery(db, actor, order_id)
    return respond(
        request, order.model_dump(mode="json"), "Delivery confirmed. Funds released to seller."
    )


@router.post("/{order_id}/dispute")
async def open_dispute(
    order_id: str,
    req: DisputeRequest,
    request: Request,
    actor: Annotated[Actor, Depends(get_current_actor)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    order = await _service.open_dispute(db, actor, order_id, req.reason)
    return respond(request, order.model_dump(mode="json"), "Dispute opened.")
