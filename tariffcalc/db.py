import logging
import os

from alembic.config import Config
from sqlalchemy import Connection, create_engine, event
from sqlalchemy.engine import Engine, make_url

from alembic import command
from tariffcalc.settings import settings

logger = logging.getLogger(__name__)

_engine: Engine | None = None
_connection: Connection | None = None


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # Slab, FPPCA, duty and rebate rows cascade from their provider.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys = ON")
    cursor.close()


def _create_engine(url: str) -> Engine:
    if make_url(url).get_backend_name() == "sqlite":
        # The web app hands connections to worker threads.
        engine = create_engine(url, connect_args={"check_same_thread": False})
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine
    return create_engine(url, pool_pre_ping=True, pool_recycle=1800)


def get_engine() -> Engine:
    global _engine
    if _engine is None:
        _engine = _create_engine(settings.db_url)
        logger.info("Database engine created (%s)", _engine.url.get_backend_name())
    return _engine


def get_connection() -> Connection:
    """Return the process-wide connection used by the CLI and the seed script.

    Web requests open their own connection through DBConnectionMiddleware.
    """
    global _connection
    if _connection is None:
        _connection = get_engine().connect()
        logger.debug("Singleton DB connection created")
    return _connection


def dispose_engine() -> None:
    global _engine, _connection
    if _connection is not None:
        _connection.close()
        _connection = None
    if _engine is not None:
        _engine.dispose()
        _engine = None
        logger.info("Database engine disposed")


def _get_alembic_config() -> Config:
    project_root = os.path.dirname(os.path.dirname(__file__))
    ini_path = os.path.join(project_root, "alembic.ini")
    if not os.path.exists(ini_path):
        ini_path = os.path.join(os.getcwd(), "alembic.ini")
    cfg = Config(ini_path)
    # ConfigParser interpolation: escape % in passwords
    cfg.set_main_option("sqlalchemy.url", settings.db_url.replace("%", "%%"))
    return cfg


def initialize_db() -> None:
    """Upgrade the tariff schema to the latest Alembic revision."""
    cfg = _get_alembic_config()
    logger.info("Upgrading tariff schema to head")
    command.upgrade(cfg, "head")
    logger.info("Tariff schema is up to date")
