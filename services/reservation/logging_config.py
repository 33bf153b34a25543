# ============================================================
# logging_config.py - Journalisation du service
# ------------------------------------------------------------
# Format : 2026-01-06T14:05:52Z [reservation] LEVEL message
# Appelé une fois au démarrage :
#   configure_logging(source="reservation", level="DEBUG")
# ============================================================

import logging
import sys
from datetime import datetime, timezone


class ISO8601Formatter(logging.Formatter):
    # horodatage ISO8601 en UTC, source entre crochets

    def __init__(self, source: str = "app"):
        self.source = source
        super().__init__()

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
        message = record.getMessage()
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        return f"{timestamp} [{self.source}] {record.levelname} {message}"


class HealthCheckFilter(logging.Filter):
    # masque les logs d'accès /health, sauf en DEBUG

    HEALTH_PATHS = {"/health"}

    def filter(self, record: logging.LogRecord) -> bool:
        if record.levelno == logging.DEBUG:
            return True
        message = record.getMessage()
        return all(not (path in message and "GET" in message) for path in self.HEALTH_PATHS)


def configure_logging(source: str = "reservation", level: str | int = "INFO") -> logging.Logger:
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(ISO8601Formatter(source=source))
    handler.addFilter(HealthCheckFilter())
    root_logger.addHandler(handler)

    # uvicorn installe ses propres handlers : on les remplace
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers.clear()
        uvicorn_logger.addHandler(handler)
        uvicorn_logger.setLevel(level)
        uvicorn_logger.propagate = False

    logging.getLogger("pika").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)

    return root_logger
