"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
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
from sqlalchemy import text

from config.settings import settings
from src.pf_account.api.adjustment_router import router as adjustment_router
from src.pf_account.api.router import router as account_router
from src.pf_common.database import engine
from src.pf_common.errors import AppError, ValidationError
from src.pf_common.logging_config import setup_logging
from src.pf_common.redis_client import close_redis, ping_redis
from src.pf_common.response import error_response
from src.pf_gateway.middleware.rate_limit import RateLimitMiddleware
from src.pf_gateway.middleware.request_log import RequestLogMiddleware
from src.pf_transaction.api.router import router as transaction_router
from src.pf_transaction.api.transfer_router import router as transfer_router

logger = logging.getLogger(__name__)

APP_VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: configure logging, verify DB (+ Redis when rate limiting). Shutdown: dispose."""
    # Startup
    setup_logging(settings.LOG_LEVEL)
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    if settings.RATE_LIMIT_ENABLED:
        await ping_redis()
    logger.info("%s %s started", settings.APP_NAME, APP_VERSION)
    yield
    # Shutdown
    await engine.dispose()
    await close_redis()


app = FastAPI(
    title=settings.APP_NAME,
    version=APP_VERSION,
    lifespan=lifespan,
)


# Last added runs first: request ids exist before the rate limiter answers.
if settings.RATE_LIMIT_ENABLED:
    app.add_middleware(RateLimitMiddleware, limit_per_minute=settings.RATE_LIMIT_PER_MINUTE)
app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.http_status >= 500:
        logger.error("%s (%d): %s", type(exc).__name__, exc.code, exc.message)
    resp = error_response(exc, getattr(request.state, "request_id", None))
    return JSONResponse(status_code=exc.http_status, content=resp.model_dump())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    err = ValidationError(
        "Request validation failed",
        details={
            "errors": [
                {"loc": [str(p) for p in e["loc"]], "msg": e["msg"], "type": e["type"]}
                for e in exc.errors()
            ]
        },
    )
    resp = error_response(err, getattr(request.state, "request_id", None))
    return JSONResponse(status_code=err.http_status, content=resp.model_dump())


app.include_router(account_router, prefix="/api/v1")
app.include_router(adjustment_router, prefix="/api/v1")
app.include_router(transaction_router, prefix="/api/v1")
app.include_router(transfer_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": APP_VERSION}
