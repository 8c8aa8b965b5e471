"""Root conftest: in-memory SQLite engine and fixtures for the full schema."""

from __future__ import annotations

from decimal import Decimal

import pytest
from sqlalchemy import Connection, create_engine, event, text
from sqlalchemy.engine import Engine

from tariffcalc.models.provider import Provider, Slab
from tariffcalc.models.tariff import TariffConfig

# Matches Alembic head: b52e7f0c9d14 (create tariff version and free units tables)
SCHEMA_DDL = """
CREATE TABLE providers (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    code VARCHAR(32) NOT NULL UNIQUE,
    name VARCHAR(255) NOT NULL DEFAULT '',
    is_active BOOLEAN NOT NULL DEFAULT 1,
    fixed_charge_per_kva NUMERIC(10, 2) NOT NULL DEFAULT 0,
    meter_rent NUMERIC(10, 2) NOT NULL DEFAULT 0,
    supports_lifeline BOOLEAN NOT NULL DEFAULT 0,
    lifeline_requires_registration BOOLEAN NOT NULL DEFAULT 0,
    lifeline_unit_threshold INTEGER NOT NULL DEFAULT 0,
    supports_timely_rebate BOOLEAN NOT NULL DEFAULT 0,
    created_at DATETIME NOT NULL,
    updated_at DATETIME NOT NULL
);

CREATE TABLE slabs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    provider_id INTEGER NOT NULL REFERENCES providers(id) ON DELETE CASCADE,
    min_unit INTEGER NOT NULL,
    max_unit INTEGER,
    rate_paise_per_kwh INTEGER NOT NULL,
    position INTEGER NOT NULL DEFAULT 0
);

CREATE TABLE fppca_rates (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    provider_id INTEGER NOT NULL REFERENCES providers(id) ON DELETE CASCADE,
    year INTEGER NOT NULL,
    month INTEGER NOT NULL,
    rate_per_kwh NUMERIC(10, 4) NOT NULL,
    UNIQUE(provider_id, year, month)
);

CREATE TABLE duty_rates (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    provider_id INTEGER NOT NULL REFERENCES providers(id) ON DELETE CASCADE,
    name VARCHAR(100) NOT NULL DEFAULT '',
    percent NUMERIC(6, 3) NOT NULL
);

CREATE TABLE rebate_rules (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    provider_id INTEGER NOT NULL REFERENCES providers(id) ON DELETE CASCADE,
    code VARCHAR(50) NOT NULL,
    percent NUMERIC(6, 3) NOT NULL,
    active BOOLEAN NOT NULL DEFAULT 1,
    UNIQUE(provider_id, code)
);

CREATE TABLE electricity_providers (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name VARCHAR(64) NOT NULL UNIQUE,
    is_active BOOLEAN NOT NULL DEFAULT 1
);

CREATE TABLE electricity_slabs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    provider_id INTEGER NOT NULL REFERENCES electricity_providers(id) ON DELETE CASCADE,
    min_unit INTEGER NOT NULL,
    max_unit INTEGER,
    rate_paise_per_kwh INTEGER NOT NULL
);

CREATE TABLE electricity_provider_config (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    provider_id INTEGER NOT NULL UNIQUE REFERENCES electricity_providers(id) ON DELETE CASCADE,
    fixed_charge_per_kva NUMERIC(10, 2),
    duty_percentage NUMERIC(6, 3),
    meter_rent NUMERIC(10, 2),
    timely_payment_rebate NUMERIC(6, 3)
);

CREATE TABLE electricity_fppca_rates (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    provider_id INTEGER NOT NULL REFERENCES electricity_providers(id) ON DELETE CASCADE,
    year INTEGER NOT NULL,
    month INTEGER NOT NULL,
    rate_per_unit NUMERIC(10, 4) NOT NULL,
    UNIQUE(provider_id, year, month)
);

CREATE TABLE tariff_versions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    provider_id INTEGER NOT NULL REFERENCES providers(id) ON DELETE CASCADE,
    code VARCHAR(64) NOT NULL DEFAULT '',
    category VARCHAR(32) NOT NULL,
    effective_from DATE NOT NULL,
    is_active BOOLEAN NOT NULL DEFAULT 1
);

CREATE TABLE tariff_slabs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    tariff_version_id INTEGER NOT NULL REFERENCES tariff_versions(id) ON DELETE CASCADE,
    min_unit INTEGER NOT NULL,
    max_unit INTEGER,
    rate_paise_per_kwh INTEGER NOT NULL,
    position INTEGER NOT NULL DEFAULT 0
);

CREATE TABLE free_units_rules (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    provider_id INTEGER NOT NULL REFERENCES providers(id) ON DELETE CASCADE,
    free_units NUMERIC(10, 2) NOT NULL,
    effective_from DATE NOT NULL,
    effective_to DATE,
    is_active BOOLEAN NOT NULL DEFAULT 1
);
"""

# The worked example: 0-50 @ 5.00, 51-100 @ 6.50, 101+ @ 8.00
CESC_SLABS = [(0, 50, 500), (51, 100, 650), (101, None, 800)]


@pytest.fixture()
def db_engine() -> Engine:
    engine = create_engine("sqlite:///:memory:")

    @event.listens_for(engine, "connect")
    def _set_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys = ON")
        cursor.close()

    return engine


@pytest.fixture()
def db_connection(db_engine: Engine) -> Connection:
    conn = db_engine.connect()
    for statement in SCHEMA_DDL.strip().split(";"):
        stmt = statement.strip()
        if stmt:
            conn.execute(text(stmt))
    conn.commit()
    yield conn
    conn.close()


def _sample_slabs(rows=None) -> list[Slab]:
    rows = CESC_SLABS if rows is None else rows
    return [Slab(min_unit=lo, max_unit=hi, rate_paise_per_kwh=rate, position=i) for i, (lo, hi, rate) in enumerate(rows)]


def _sample_provider(**overrides) -> Provider:
    defaults = dict(
        code="CESC",
        name="CESC Limited",
        fixed_charge_per_kva=Decimal("15"),
        meter_rent=Decimal("10"),
    )
    defaults.update(overrides)
    return Provider(**defaults)


def _sample_config(**overrides) -> TariffConfig:
    defaults = dict(
        provider_id=1,
        provider_code="CESC",
        fixed_charge_per_kva=Decimal("15"),
        meter_rent=Decimal("10"),
        slabs=_sample_slabs(),
    )
    defaults.update(overrides)
    return TariffConfig(**defaults)


@pytest.fixture()
def sample_slabs():
    return _sample_slabs


@pytest.fixture()
def sample_provider():
    return _sample_provider


@pytest.fixture()
def sample_config():
    return _sample_config
