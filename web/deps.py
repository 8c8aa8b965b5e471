from __future__ import annotations

import logging

from fastapi import Request
from starlette.types import ASGIApp, Receive, Scope, Send

from tariffcalc.db import get_engine
from tariffcalc.repositories.sqlalchemy import SQLAlchemyTariffRepository
from tariffcalc.services.bill_calculator import BillCalculator
from tariffcalc.services.resolvers import get_resolver
from tariffcalc.services.tariff_service import TariffService

logger = logging.getLogger(__name__)


class DBConnectionMiddleware:
    """Pure ASGI middleware: creates a single DB connection per request."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope)
        request.state.db_conn = None
        try:
            await self.app(scope, receive, send)
        finally:
            conn = getattr(request.state, "db_conn", None)
            if conn is not None:
                conn.close()
                logger.debug("DB connection closed for %s %s", request.method, request.url.path)


def _get_conn(request: Request):
    """Lazy per-request connection, created on first use and closed by middleware."""
    if request.state.db_conn is None:
        logger.debug("Creating DB connection for %s %s", request.method, request.url.path)
        request.state.db_conn = get_engine().connect()
    return request.state.db_conn


def get_bill_calculator(request: Request, schema: str) -> BillCalculator:
    return BillCalculator(get_resolver(schema, _get_conn(request)))


def get_tariff_service(request: Request) -> TariffService:
    return TariffService(SQLAlchemyTariffRepository(_get_conn(request)))
