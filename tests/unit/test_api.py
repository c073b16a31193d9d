"""HTTP layer tests: routers, envelope and error mapping over httpx."""
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
from factories import ADMIN, BUYER, SELLER, make_listing, make_order
from httpx import AsyncClient

from src.bx_admin.application.service import AdminService
from src.bx_common.database import get_db_session
from src.bx_gateway.auth.dependencies import get_current_actor
from src.bx_gateway.auth.jwt_handler import create_access_token
from src.bx_listing.application.service import ListingApplicationService
from src.bx_order.application.service import OrderApplicationService
from src.main import app


@pytest.fixture
def as_actor(monkeypatch, engine, orders, listings):
    """Route every service at the in-memory engine and act as the given actor."""
    service = OrderApplicationService(engine=engine, repo=orders)
    monkeypatch.setattr("src.bx_order.api.router._service", service)
    monkeypatch.setattr("src.bx_admin.api.router._orders", service)
    monkeypatch.setattr("src.bx_admin.api.router._service", AdminService(orders=orders))
    monkeypatch.setattr(
        "src.bx_listing.api.router._service", ListingApplicationService(repo=listings)
    )

    async def _db():
        yield AsyncMock()

    app.dependency_overrides[get_db_session] = _db

    def use(actor):
        app.dependency_overrides[get_current_actor] = lambda: actor

    return use


async def test_health(client: AsyncClient) -> None:
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


async def test_missing_token_is_401(client: AsyncClient) -> None:
    resp = await client.get("/api/v1/orders/ord-1")
    assert resp.status_code == 401


async def test_place_order_returns_201(client, as_actor, listings) -> None:
    listings.add(make_listing())
    as_actor(BUYER)

    resp = await client.post("/api/v1/orders", json={"listing_id": "lst-1", "quantity": "2"})

    assert resp.status_code == 201
    body = resp.json()
    assert body["code"] == 0
    assert "Funds are held in escrow." in body["message"]
    assert body["data"]["status"] == "FUNDS_HELD"
    assert Decimal(body["data"]["total_amount"]) == Decimal("3700.00")
    assert body["request_id"].startswith("req_")


async def test_insufficient_quantity_envelope(client, as_actor, listings) -> None:
    listings.add(make_listing(quantity=Decimal("5")))
    as_actor(BUYER)

    resp = await client.post("/api/v1/orders", json={"listing_id": "lst-1", "quantity": "10"})

    assert resp.status_code == 422
    body = resp.json()
    assert body["code"] == 3003
    assert body["data"] is None
    assert "5" in body["message"]


async def test_invalid_transition_is_409(client, as_actor, orders) -> None:
    orders.add(make_order(status="FUNDS_HELD"))
    as_actor(BUYER)
    resp = await client.post("/api/v1/orders/ord-1/confirm")
    assert resp.status_code == 409
    assert resp.json()["code"] == 4003


async def test_seller_ships(client, as_actor, orders) -> None:
    orders.add(make_order())
    as_actor(SELLER)
    resp = await client.post("/api/v1/orders/ord-1/ship")
    assert resp.status_code == 200
    assert resp.json()["data"]["status"] == "SHIPPED"


async def test_dispute_with_reason(client, as_actor, orders) -> None:
    orders.add(make_order(status="SHIPPED"))
    as_actor(BUYER)
    resp = await client.post("/api/v1/orders/ord-1/dispute", json={"reason": "wrong weight"})
    assert resp.status_code == 200
    assert resp.json()["data"]["dispute_reason"] == "wrong weight"


async def test_summary_route_not_shadowed(client, as_actor, orders) -> None:
    orders.add(make_order(status="COMPLETED"))
    as_actor(SELLER)
    resp = await client.get("/api/v1/orders/summary", params={"scope": "seller"})
    assert resp.status_code == 200
    assert Decimal(resp.json()["data"]["total_revenue"]) == Decimal("3422.50")


async def test_admin_endpoints_reject_non_admin(client, as_actor, orders) -> None:
    orders.add(make_order())
    as_actor(BUYER)
    resp = await client.post("/api/v1/admin/orders/ord-1/refund")
    assert resp.status_code == 403
    assert resp.json()["code"] == 1003


async def test_admin_refund(client, as_actor, orders, listings) -> None:
    listings.add(make_listing(quantity=Decimal("98")))
    orders.add(make_order())
    as_actor(ADMIN)

    resp = await client.post("/api/v1/admin/orders/ord-1/refund")

    assert resp.status_code == 200
    assert resp.json()["data"]["status"] == "REFUNDED"
    assert listings.rows["lst-1"].quantity == Decimal("100")


async def test_admin_stats(client, as_actor, orders) -> None:
    orders.add(make_order(status="SHIPPED"))
    as_actor(ADMIN)
    resp = await client.get("/api/v1/admin/stats")
    assert resp.status_code == 200
    assert resp.json()["data"]["orders_by_status"]["SHIPPED"] == 1


async def test_listing_detail(client, as_actor, listings) -> None:
    listings.add(make_listing())
    as_actor(BUYER)
    resp = await client.get("/api/v1/listings/lst-1")
    assert resp.status_code == 200
    assert resp.json()["data"]["purchasable"] is True


async def test_real_token_accepted(client, as_actor, orders) -> None:
    orders.add(make_order())
    app.dependency_overrides.pop(get_current_actor, None)
    token = create_access_token(BUYER.user_id, BUYER.role)
    resp = await client.get(
        "/api/v1/orders/ord-1", headers={"Authorization": f"Bearer {token}"}
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["buyer_id"] == BUYER.user_id


async def test_malformed_body_uses_validation_envelope(client, as_actor) -> None:
    as_actor(BUYER)
    resp = await client.post("/api/v1/orders", json={"listing_id": "lst-1", "quantity": "lots"})
    assert resp.status_code == 422
    body = resp.json()
    assert body["code"] == 4001
    assert "quantity" in body["message"]


async def test_request_id_echoed(client: AsyncClient) -> None:
    resp = await client.get("/health", headers={"X-Request-ID": "req_from_caller"})
    assert resp.headers["X-Request-ID"] == "req_from_caller"


async def test_error_envelope_carries_request_id(client, as_actor) -> None:
    as_actor(BUYER)
    resp = await client.get("/api/v1/orders/ord-missing", headers={"X-Request-ID": "req_abc"})
    assert resp.status_code == 404
    assert resp.json()["request_id"] == "req_abc"
    assert resp.json()["code"] == 4004
