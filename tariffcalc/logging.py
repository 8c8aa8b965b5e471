import logging
import sys

from tariffcalc.settings import settings

TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

# Third-party loggers that are too chatty at INFO.
QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "alembic.runtime.migration")


def _build_formatter() -> logging.Formatter:
    if settings.log_json:
        from pythonjsonlogger.json import JsonFormatter

        return JsonFormatter(
            fmt=JSON_FORMAT,
            rename_fields={"asctime": "timestamp", "levelname": "level", "name": "logger"},
            static_fields={"service": "tariffcalc", "tariff_schema": settings.get_tariff_schema()},
        )
    return logging.Formatter(TEXT_FORMAT)


def configure_logging(level: str | None = None) -> None:
    """Install a single stderr handler on the root logger.

    ``level`` overrides ``settings.log_level``. Unknown level names fall back
    to INFO. Alembic's ``fileConfig`` replaces the root handlers, so callers
    run ``reconfigure()`` after migrations.
    """
    name = (level or settings.log_level).upper()
    resolved = logging.getLevelName(name)
    if not isinstance(resolved, int):
        resolved = logging.INFO

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(_build_formatter())

    root = logging.getLogger()
    root.setLevel(resolved)
    root.handlers.clear()
    root.addHandler(handler)

    if resolved > logging.DEBUG:
        for quiet in QUIET_LOGGERS:
            logging.getLogger(quiet).setLevel(logging.WARNING)


reconfigure = configure_logging
