"""
Logging setup for the booking service.

Production and staging write one JSON object per line via python-json-logger;
development gets a plain text format. Booking fields passed through ``extra``
(user, seat, booking, date) end up as top-level JSON keys.
"""
import logging
import sys
from typing import Any, Dict, Optional

from pythonjsonlogger import jsonlogger

from core.settings import Settings, settings as default_settings


JSON_ENVIRONMENTS = ("production", "staging")

QUIET_LOGGERS = {
    "uvicorn": logging.INFO,
    "uvicorn.access": logging.WARNING,
    "sqlalchemy.engine": logging.WARNING,
    "urllib3": logging.WARNING,
}


class BookingJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter stamping each record with service and storage details."""

    def __init__(
        self,
        *args: Any,
        app_name: str = "",
        environment: str = "",
        storage_backend: str = "",
        **kwargs: Any
    ):
        super().__init__(*args, **kwargs)
        self.app_name = app_name
        self.environment = environment
        self.storage_backend = storage_backend

    def add_fields(
        self,
        log_record: Dict[str, Any],
        record: logging.LogRecord,
        message_dict: Dict[str, Any]
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record['timestamp'] = self.formatTime(record, self.datefmt)
        log_record['level'] = record.levelname
        log_record['logger'] = record.name
        log_record['location'] = f"{record.module}:{record.funcName}:{record.lineno}"

        log_record['app_name'] = self.app_name
        log_record['environment'] = self.environment
        log_record['storage_backend'] = self.storage_backend

        if record.exc_info:
            log_record['exc_info'] = self.formatException(record.exc_info)


def build_formatter(settings: Settings) -> logging.Formatter:
    """Pick the JSON or text formatter for the configured environment."""
    if settings.app_env in JSON_ENVIRONMENTS:
        return BookingJsonFormatter(
            fmt='%(timestamp)s %(level)s %(name)s %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S',
            app_name=settings.app_name,
            environment=settings.app_env,
            storage_backend=settings.storage_backend,
        )
    return logging.Formatter(
        fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )


def setup_logging(settings: Optional[Settings] = None) -> None:
    """
    Configure the root logger for the booking service.

    Args:
        settings: Settings to read level and environment from
    """
    settings = settings or default_settings

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(build_formatter(settings))

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, settings.log_level))
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    for name, level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(level)

    # SQL echo only when debugging locally
    if settings.is_development and settings.debug:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)

    logging.info(
        "Logging configured",
        extra={
            "log_level": settings.log_level,
            "storage_backend": settings.storage_backend,
            "json_logging": settings.app_env in JSON_ENVIRONMENTS,
        }
    )


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


class LogContext:
    """
    Binds booking fields (user, seat, counts) to every message logged through it.

    Usable as a context manager; an exception escaping the block is logged
    with the bound fields and then propagates.
    """

    def __init__(self, logger: Optional[logging.Logger] = None, **fields: Any):
        self.fields = fields
        self.logger = logger or get_logger(__name__)

    def __enter__(self) -> 'LogContext':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if exc_type is not None:
            self.logger.error(
                f"{exc_type.__name__} while handling {self._describe()}",
                extra=self.fields,
                exc_info=True
            )

    def bind(self, **fields: Any) -> 'LogContext':
        """Return a new context with extra fields added."""
        return LogContext(self.logger, **{**self.fields, **fields})

    def log(self, level: str, message: str, **extra_fields: Any) -> None:
        log_method = getattr(self.logger, level.lower())
        log_method(message, extra={**self.fields, **extra_fields})

    def _describe(self) -> str:
        return ", ".join(f"{key}={value}" for key, value in self.fields.items()) or "request"
