"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from config.settings import settings
from src.om_common.database import async_session_factory, check_database, engine
from src.om_common.errors import AppError
from src.om_common.redis_client import check_redis, close_redis
from src.om_common.response import from_app_error
from src.om_gateway.middleware.request_log import RequestLogMiddleware
from src.om_offer.api.router import router as offer_router
from src.om_offer.application.expiration import ExpirationSweeper
from src.om_offer.application.service import get_offer_service
from src.om_offer.infrastructure.persistence import OfferRepository


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: require the DB, probe Redis, start the expiry sweep. Shutdown: reverse."""
    await check_database()
    await check_redis()

    sweeper = ExpirationSweeper(
        OfferRepository(),
        get_offer_service().engine.resolver,
        async_session_factory,
        interval_seconds=settings.EXPIRY_SWEEP_INTERVAL_SECONDS,
        batch_size=settings.EXPIRY_SWEEP_BATCH_SIZE,
    )
    sweeper.start()
    yield
    await sweeper.stop()
    await engine.dispose()
    await close_redis()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    resp = from_app_error(exc, getattr(request.state, "request_id", None))
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


app.include_router(offer_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
