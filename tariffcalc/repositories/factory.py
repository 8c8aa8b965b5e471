from tariffcalc.repositories.base import TariffRepository


def get_tariff_repository() -> TariffRepository:
    from tariffcalc.db import get_connection
    from tariffcalc.repositories.sqlalchemy import SQLAlchemyTariffRepository

    return SQLAlchemyTariffRepository(get_connection())
