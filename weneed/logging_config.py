"""
Centralized logging configuration for the bot.
Provides structured logging with JSON formatting for production environments
and optionally mirrors every record into a log file.
"""
import logging
import sys
import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional
import os


# Extra record attributes that both formatters know how to render.
CONTEXT_FIELDS = (
    "conversation_id",
    "update_id",
    "request_id",
    "duration_ms",
    "status_code",
    "endpoint",
    "method",
)


class JSONFormatter(logging.Formatter):
    """
    Custom JSON formatter for structured logging.
    Outputs logs in JSON format for easy parsing by log aggregation tools.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        # Add exception info if present
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for field in CONTEXT_FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)

        return json.dumps(log_data, default=str)


class ColoredFormatter(logging.Formatter):
    """
    Colored console formatter for development environments.
    Makes logs easier to read in the terminal.
    """

    # ANSI color codes
    COLORS = {
        'DEBUG': '\033[2m',       # Dim
        'INFO': '\033[37m',       # White
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[1;31m',    # Bold red
        'CRITICAL': '\033[35m',   # Magenta
    }
    RESET = '\033[0m'

    def __init__(self, use_color: bool = True) -> None:
        super().__init__()
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        if self.use_color:
            log_color = self.COLORS.get(record.levelname, self.RESET)
            formatted = f"{log_color}[{record.levelname}]{self.RESET} "
        else:
            formatted = f"[{record.levelname}] "
        formatted += f"{record.name} - {record.getMessage()}"

        extras = []
        if hasattr(record, "conversation_id"):
            extras.append(f"conversation={record.conversation_id}")
        if hasattr(record, "update_id"):
            extras.append(f"update={record.update_id}")
        if hasattr(record, "request_id"):
            extras.append(f"request_id={record.request_id}")
        if hasattr(record, "duration_ms"):
            extras.append(f"duration={record.duration_ms}ms")
        if hasattr(record, "status_code"):
            extras.append(f"status={record.status_code}")

        if extras:
            formatted += f" ({', '.join(extras)})"

        # Add exception info if present
        if record.exc_info:
            formatted += "\n" + self.formatException(record.exc_info)

        return formatted


def setup_logging(
    log_level: Optional[str] = None,
    use_json: Optional[bool] = None,
    logger_name: Optional[str] = None,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """
    Configure and return a logger instance.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
                   Defaults to LOG_LEVEL env var or INFO.
        use_json: Whether to use JSON formatting. Defaults to True in production.
                  Determined by ENVIRONMENT env var or LOG_FORMAT env var.
        logger_name: Name of the logger to configure. If None, configures root logger.
        log_file: Optional path of a file that receives a plain-text copy of
                  every record. Defaults to LOG_FILE env var.

    Returns:
        Configured logger instance.
    """
    if log_level is None:
        log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    level = getattr(logging, log_level.upper(), logging.INFO)

    if use_json is None:
        environment = os.getenv("ENVIRONMENT", "development").lower()
        log_format = os.getenv("LOG_FORMAT", "").lower()

        # Use JSON in production or if explicitly set
        use_json = environment == "production" or log_format == "json"

    if log_file is None:
        log_file = os.getenv("LOG_FILE") or None

    logger = logging.getLogger(logger_name)
    logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(JSONFormatter() if use_json else ColoredFormatter())
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(
            JSONFormatter() if use_json else ColoredFormatter(use_color=False)
        )
        logger.addHandler(file_handler)

    # Prevent propagation to avoid duplicate logs
    if logger_name:
        logger.propagate = False

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a specific module.

    Module loggers propagate to the root logger configured by
    ``setup_logging``, so the log file and level apply everywhere.

    Args:
        name: Name of the logger (typically __name__ from the calling module).

    Returns:
        Logger instance.
    """
    return logging.getLogger(name)


# Configure root logger on import
setup_logging()
