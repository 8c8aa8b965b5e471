import pytest
from sqlalchemy import Connection, text

from tariffcalc.repositories.sqlalchemy import (
    SQLAlchemyEnhancedTariffRepository,
    SQLAlchemyTariffRepository,
    SQLAlchemyVersionedTariffRepository,
)


@pytest.fixture()
def tariff_repo(db_connection: Connection) -> SQLAlchemyTariffRepository:
    return SQLAlchemyTariffRepository(db_connection)


@pytest.fixture()
def enhanced_repo(db_connection: Connection) -> SQLAlchemyEnhancedTariffRepository:
    return SQLAlchemyEnhancedTariffRepository(db_connection)


@pytest.fixture()
def versioned_repo(db_connection: Connection) -> SQLAlchemyVersionedTariffRepository:
    return SQLAlchemyVersionedTariffRepository(db_connection)

@pytest.fixture()
def insert_enhanced_provider(db_connection: Connection):
    def _insert(name: str = "CESC", is_active: bool = True) -> int:
        result = db_connection.execute(
            text("INSERT INTO electricity_providers (name, is_active) VALUES (:name, :active)"),
            {"name": name, "active": is_active},
        )
        db_connection.commit()
        return result.lastrowid

    return _insert
