import logging
import logging.config
import json
from datetime import datetime
from typing import Dict, Any
from pathlib import Path

from headpress.core.config import settings

# LogRecord attributes copied into the JSON line when present
EXTRA_FIELDS = (
    "request_id", "service", "endpoint", "method", "status_code",
    "response_time_ms", "user_id", "event", "error_code",
)


class StructuredFormatter(logging.Formatter):
    """One JSON object per line, for log shippers."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "process": record.process,
            "thread": record.thread,
        }

        for field in EXTRA_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log_entry[field] = value

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_entry, ensure_ascii=False, default=str)


def _rotating(filename: str, level: str, backups: int = 10) -> Dict[str, Any]:
    return {
        "class": "logging.handlers.RotatingFileHandler",
        "formatter": "structured",
        "filename": filename,
        "maxBytes": 10485760,  # 10MB
        "backupCount": backups,
        "level": level,
    }


def setup_logging(log_dir: str = None, level: str = None) -> None:
    """
    Configures console output plus rotating JSON log files.
    """
    log_path = Path(log_dir or settings.LOG_DIR)
    log_path.mkdir(parents=True, exist_ok=True)
    level = (level or settings.LOG_LEVEL).upper()

    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "structured": {
                "()": StructuredFormatter,
            },
            "simple": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S"
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "simple",
                "level": level,
                "stream": "ext://sys.stdout"
            },
            "file_all": _rotating(str(log_path / "app.log"), level),
            "file_errors": _rotating(str(log_path / "errors.log"), "ERROR"),
            "file_api": _rotating(str(log_path / "api.log"), level),
            "file_webhooks": _rotating(str(log_path / "webhooks.log"), level, backups=5),
        },
        "loggers": {
            "headpress": {
                "level": level,
                "handlers": ["console", "file_all", "file_errors"],
                "propagate": False
            },
            "headpress.services.webhook": {
                "level": level,
                "handlers": ["console", "file_webhooks", "file_errors"],
                "propagate": False
            },
            "middleware.request_logging": {
                "level": level,
                "handlers": ["file_api", "file_errors"],
                "propagate": False
            },
            "uvicorn": {
                "level": "INFO",
                "handlers": ["console", "file_api"],
                "propagate": False
            },
            "uvicorn.access": {
                "level": "INFO",
                "handlers": ["file_api"],
                "propagate": False
            },
            "fastapi": {
                "level": "INFO",
                "handlers": ["console", "file_api"],
                "propagate": False
            }
        },
        "root": {
            "level": "WARNING",
            "handlers": ["console", "file_all"]
        }
    }

    logging.config.dictConfig(logging_config)

    logger = logging.getLogger("headpress")
    logger.info("Logging system initialized successfully")
    logger.info(f"Log files will be stored in: {log_path.absolute()}")


def log_api_request(logger: logging.Logger, method: str, endpoint: str,
                    status_code: int = None, response_time_ms: int = None,
                    user_id: int = None, **kwargs):
    """
    Logs one API request with structured context.

    Args:
        logger: Logger to use
        method: HTTP method
        endpoint: Path that was hit
        status_code: Response status
        response_time_ms: Elapsed time in milliseconds
        user_id: Caller id, when authenticated
        **kwargs: Extra fields
    """
    extra = {
        "method": method,
        "endpoint": endpoint,
        "service": "api"
    }

    if status_code:
        extra["status_code"] = status_code
    if response_time_ms is not None:
        extra["response_time_ms"] = response_time_ms
    if user_id:
        extra["user_id"] = user_id

    extra.update(kwargs)

    if status_code and status_code >= 500:
        logger.error(f"API request failed: {method} {endpoint}", extra=extra)
    elif status_code and status_code >= 400:
        logger.warning(f"API request rejected: {method} {endpoint}", extra=extra)
    else:
        logger.info(f"API request: {method} {endpoint}", extra=extra)
