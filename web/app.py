from __future__ import annotations

import logging
import traceback
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from tariffcalc.db import dispose_engine, initialize_db
from tariffcalc.errors import BillingError, InvalidBillingRequest, ProviderNotFound
from tariffcalc.logging import configure_logging, reconfigure
from web.deps import DBConnectionMiddleware
from web.routes.bills import router as bills_router
from web.routes.providers import router as providers_router

configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    initialize_db()
    # Re-apply logging config; Alembic's fileConfig may have overridden it
    reconfigure()
    logger.info("Application started")
    yield
    dispose_engine()
    logger.info("Application stopped")


app = FastAPI(title="Electricity Bill Calculator", lifespan=lifespan)

app.add_middleware(DBConnectionMiddleware)

app.include_router(bills_router)
app.include_router(providers_router)


def _status_for(exc: BillingError) -> int:
    if isinstance(exc, InvalidBillingRequest):
        return 422
    if isinstance(exc, ProviderNotFound):
        return 404
    return 503


@app.exception_handler(BillingError)
async def billing_error_handler(request: Request, exc: BillingError):
    status_code = _status_for(exc)
    logger.info("%s %s -> %d %s: %s", request.method, request.url.path, status_code, exc.code, exc.message)
    return JSONResponse({"error": exc.code, "detail": exc.message}, status_code=status_code)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    # Only locations and messages; the rejected input may not be JSON-encodable (NaN).
    detail = "; ".join(".".join(str(part) for part in err["loc"]) + ": " + err["msg"] for err in exc.errors())
    logger.info("%s %s -> 422 %s: %s", request.method, request.url.path, InvalidBillingRequest.code, detail)
    return JSONResponse({"error": InvalidBillingRequest.code, "detail": detail}, status_code=422)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(
        "Unhandled exception on %s %s:\n%s",
        request.method,
        request.url.path,
        traceback.format_exc(),
    )
    return JSONResponse({"error": "internal_error", "detail": "Internal Server Error"}, status_code=500)


@app.get("/health")
async def health():
    return {"status": "ok"}
