"""BixiRoad settlement service: FastAPI application.

Run with: uvicorn src.main:app --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from config.settings import settings
from src.bx_admin.api.router import router as admin_router
from src.bx_common.database import engine, ping_database
from src.bx_common.errors import AppError, InternalError, ValidationError
from src.bx_common.redis_client import close_redis, ping_redis
from src.bx_common.response import error_response
from src.bx_gateway.middleware.request_log import RequestLogMiddleware
from src.bx_ledger.api.router import router as ledger_router
from src.bx_listing.api.router import router as listing_router
from src.bx_notify.api.router import router as notify_router
from src.bx_order.api.router import router as order_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    await ping_database()
    await ping_redis()
    logger.info(
        "%s started (commission_rate=%s)", settings.APP_NAME, settings.COMMISSION_RATE
    )
    yield
    await engine.dispose()
    await close_redis()


app = FastAPI(title=settings.APP_NAME, version="0.1.0", lifespan=lifespan)
app.add_middleware(RequestLogMiddleware)


def _error_json(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc.code, exc.message)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return JSONResponse(status_code=exc.http_status, content=resp.model_dump())


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return _error_json(request, exc)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    detail = f"{field}: {first.get('msg', 'invalid input')}" if field else "invalid input"
    return _error_json(request, ValidationError(detail))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error_json(request, InternalError())


for router in (order_router, admin_router, listing_router, ledger_router, notify_router):
    app.include_router(router, prefix=API_PREFIX)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
