"""
Logging configuration for the Université Quiz backend
Sets up console logging plus rotating JSON log files
"""

import json
import logging
import logging.handlers
import sys
from datetime import datetime, timezone
from pathlib import Path

from app.core.config import settings

# Attributes every LogRecord carries; anything else came in through `extra=`
_RESERVED_ATTRS = set(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


class JSONFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging"""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON"""
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "message": record.getMessage(),
            "environment": settings.ENVIRONMENT,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                log_data[key] = value

        return json.dumps(log_data, default=str)


def _rotating_handler(filename: str, level: int) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=filename,
        maxBytes=settings.LOG_MAX_BYTES,
        backupCount=settings.LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter())
    return handler


def setup_logging() -> None:
    """
    Configure application logging
    Sets up console and file handlers with appropriate formatters
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

    # Clear existing handlers
    root_logger.handlers = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.DEBUG if settings.DEBUG else logging.INFO)

    if settings.is_production():
        console_handler.setFormatter(JSONFormatter())
    else:
        console_handler.setFormatter(
            logging.Formatter(fmt=settings.LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
        )
    root_logger.addHandler(console_handler)

    if settings.LOG_TO_FILE:
        Path(settings.LOG_DIR).mkdir(parents=True, exist_ok=True)
        Path(settings.LOG_FILE).parent.mkdir(parents=True, exist_ok=True)
        root_logger.addHandler(_rotating_handler(settings.LOG_FILE, logging.DEBUG))
        root_logger.addHandler(
            _rotating_handler(str(Path(settings.LOG_DIR) / "error.log"), logging.ERROR)
        )

    # Configure third-party loggers
    logging.getLogger("uvicorn").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.ERROR)

    root_logger.info(
        "Logging configured",
        extra={
            "environment": settings.ENVIRONMENT,
            "log_level": settings.LOG_LEVEL,
            "log_to_file": settings.LOG_TO_FILE,
        },
    )


class LoggerFactory:
    """Factory for creating loggers with consistent configuration"""

    @staticmethod
    def get_logger(name: str) -> logging.Logger:
        return logging.getLogger(name)

    @staticmethod
    def get_request_logger() -> logging.Logger:
        """Get logger for request/response logging"""
        return logging.getLogger("universite_quiz.request")

    @staticmethod
    def get_security_logger() -> logging.Logger:
        """Get logger for authentication and admin-panel events"""
        logger = logging.getLogger("universite_quiz.security")

        if settings.LOG_TO_FILE and not logger.handlers:
            Path(settings.LOG_DIR).mkdir(parents=True, exist_ok=True)
            logger.addHandler(
                _rotating_handler(str(Path(settings.LOG_DIR) / "security.log"), logging.INFO)
            )

        return logger
