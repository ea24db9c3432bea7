import logging
import logging.config
import os
from typing import Optional

from packages.mis_core.request_id import get_request_id


class RequestIdFilter(logging.Filter):
    """Inject the current request_id into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id() or "-"
        return True


def build_logging_config(log_dir: str) -> dict:
    agent_log_dir = os.path.join(log_dir, "agent")
    os.makedirs(agent_log_dir, exist_ok=True)

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "request_id": {
                "()": RequestIdFilter,
            },
        },
        "formatters": {
            "standard": {
                "format": "[%(asctime)s] [%(levelname)s] [%(request_id)s] [%(name)s] [%(filename)s:%(lineno)d] %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "console": {
                "level": "INFO",
                "class": "logging.StreamHandler",
                "formatter": "standard",
                "filters": ["request_id"],
            },
            "file_agent": {
                "level": "DEBUG",
                "class": "logging.handlers.TimedRotatingFileHandler",
                "filename": os.path.join(agent_log_dir, "agent.log"),
                "when": "midnight",
                "interval": 1,
                "backupCount": 30,
                "encoding": "utf-8",
                "formatter": "standard",
                "filters": ["request_id"],
            },
            "file_error": {
                "level": "ERROR",
                "class": "logging.handlers.TimedRotatingFileHandler",
                "filename": os.path.join(agent_log_dir, "agent.error.log"),
                "when": "midnight",
                "interval": 1,
                "backupCount": 30,
                "encoding": "utf-8",
                "formatter": "standard",
                "filters": ["request_id"],
            },
        },
        "root": {
            "handlers": ["console", "file_agent", "file_error"],
            "level": "DEBUG",
        },
    }


def setup_logging(log_dir: Optional[str] = None):
    """Apply default logging configuration."""
    if log_dir is None:
        log_dir = os.environ.get("LOG_DIR", "logs")
    logging.config.dictConfig(build_logging_config(os.path.abspath(log_dir)))


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with standard configuration."""
    # Ensure configuration is applied at least once
    if not logging.getLogger().handlers:
        setup_logging()

    return logging.getLogger(name)
