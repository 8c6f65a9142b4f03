"""JSON line logging for the conversion service"""
import json
import logging
import sys
import time
from typing import Any, Dict

# Attributes every LogRecord carries; anything else arrived through ``extra=``
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "color_message"}

# Chatty third-party loggers held at WARNING unless the service runs at DEBUG
QUIET_LOGGERS = ("sqlalchemy.engine", "aiosqlite", "uvicorn.access")


class JsonFormatter(logging.Formatter):
    """One JSON object per line.

    Fields passed with ``extra=`` (currency codes, pair direction, error
    codes) are emitted next to the standard ones so a conversion can be
    traced by pair without parsing ``message``.
    """

    def __init__(self, service: str | None = None) -> None:
        super().__init__()
        self.service = service

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        base: Dict[str, Any] = {
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "time": time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(record.created)),
        }
        if self.service:
            base["service"] = self.service
        for key, value in vars(record).items():
            if key not in _RECORD_ATTRS and key not in base:
                base[key] = value
        if record.exc_info:
            base["exc_info"] = self.formatException(record.exc_info)
        # Decimal amounts and other non-JSON values are written as strings
        return json.dumps(base, ensure_ascii=False, default=str)


def init_logging(level: str = "INFO", service: str | None = None) -> None:
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level.upper())

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter(service))
    root.addHandler(handler)

    if root.level > logging.DEBUG:
        for name in QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
