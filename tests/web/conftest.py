"""Web test fixtures: TestClient with shared in-memory SQLite."""

from __future__ import annotations

from decimal import Decimal

import pytest
from sqlalchemy import create_engine, event, text
from sqlalchemy.pool import StaticPool

from tariffcalc.models.provider import Provider, Slab
from tariffcalc.repositories.sqlalchemy import SQLAlchemyTariffRepository
from tariffcalc.services.tariff_service import TariffService
from tests.conftest import CESC_SLABS, SCHEMA_DDL


def _make_test_engine():
    """Create a fresh in-memory SQLite engine with shared connection pool."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _set_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys = ON")
        cursor.close()

    with engine.connect() as conn:
        for statement in SCHEMA_DDL.strip().split(";"):
            stmt = statement.strip()
            if stmt:
                conn.execute(text(stmt))
        conn.commit()

    return engine


def create_provider_in_db(engine, code="CESC", slabs=None, **overrides) -> Provider:
    """Create a provider with a slab table in the test DB."""
    defaults = dict(code=code, name=f"{code} Limited", fixed_charge_per_kva=Decimal("15"), meter_rent=Decimal("10"))
    defaults.update(overrides)
    rows = CESC_SLABS if slabs is None else slabs
    with engine.connect() as conn:
        service = TariffService(SQLAlchemyTariffRepository(conn))
        provider = service.create_provider(Provider(**defaults))
        service.replace_slabs(code, [Slab(min_unit=lo, max_unit=hi, rate_paise_per_kwh=rate) for lo, hi, rate in rows])
    return provider


@pytest.fixture(autouse=True)
def web_test_db(monkeypatch):
    """Set up in-memory DB and patch the web app to use it."""
    engine = _make_test_engine()

    import web.deps as deps_module

    monkeypatch.setattr(deps_module, "get_engine", lambda: engine)

    import web.app as app_module

    monkeypatch.setattr(app_module, "initialize_db", lambda: None)

    yield engine

    engine.dispose()


@pytest.fixture()
def test_engine(web_test_db):
    return web_test_db


@pytest.fixture()
def client():
    from starlette.testclient import TestClient

    from web.app import app

    return TestClient(app)
