from os import environ
from datetime import datetime
from zoneinfo import ZoneInfo
from contextlib import contextmanager
from contextvars import ContextVar, Token
from logging import Filter, Formatter, LogRecord, StreamHandler, Logger, NOTSET
from typing import Iterator, Optional
from colorlog import ColoredFormatter

LOG_FORMAT = "%(log_color)s%(asctime)s | %(levelname)s | %(correlation_id)s | %(msg)s"
NO_CORRELATION_ID = "-"


class SingletonMeta(type):
    _instance = {}

    def __call__(cls, *args, **kwargs):
        if cls not in cls._instance:
            instance = super().__call__(*args, **kwargs)
            cls._instance[cls] = instance
        return cls._instance[cls]


class CorrelationIdFilter(Filter):
    """Stamps every record with the correlation id of the running cycle."""

    def __init__(self, correlation_id_var: ContextVar):
        super().__init__()
        self.correlation_id_var = correlation_id_var

    def filter(self, record: LogRecord) -> bool:
        record.correlation_id = self.correlation_id_var.get() or NO_CORRELATION_ID
        return True


class ParamCatalogLogger(Logger, metaclass=SingletonMeta):
    correlation_id_var: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)
    _initialized = False

    def __init__(self):
        if ParamCatalogLogger._initialized:
            return

        super().__init__(name="ParamCatalogLogger", level=environ.get("LOG_LEVEL", NOTSET))

        self.timezone = ZoneInfo(environ.get("LOG_TIMEZONE", "UTC"))
        Formatter.converter = self.local_time
        local_formatter = ColoredFormatter(
            LOG_FORMAT,
            datefmt="%d-%m-%Y, %H:%M:%S",
            log_colors={
                "DEBUG": "blue",
                "INFO": "",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "bold_red",
            },
        )

        console_handler = StreamHandler()
        console_handler.setFormatter(local_formatter)
        console_handler.addFilter(CorrelationIdFilter(self.correlation_id_var))
        self.addHandler(console_handler)

        ParamCatalogLogger._initialized = True

    def set_correlation_id(self, correlation_id: Optional[str]) -> Token:
        return self.correlation_id_var.set(correlation_id)

    def get_correlation_id(self) -> Optional[str]:
        return self.correlation_id_var.get()

    @contextmanager
    def correlation_scope(self, correlation_id: str) -> Iterator[str]:
        """Tag log lines emitted inside the block with ``correlation_id``."""
        token = self.set_correlation_id(correlation_id)
        try:
            yield correlation_id
        finally:
            self.correlation_id_var.reset(token)

    def local_time(self, *args):
        return datetime.now(tz=self.timezone).timetuple()


logger = ParamCatalogLogger()
