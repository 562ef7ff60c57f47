"""
Logging configuration for the order books system.

Provides a JSON format for machine-read logs and a human-readable format
for the console. The engine itself never logs; the manager and the menu
do, through loggers under the "orderbooks" namespace.
"""

import logging
import json
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union


ROOT_LOGGER_NAME = "orderbooks"

CONSOLE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Extra attributes copied into JSON records when a call site passes them
_CONTEXT_FIELDS = ("book_index", "instrument", "order_id", "execution_id", "reason")


class JSONFormatter(logging.Formatter):
    """Format log records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        for name in _CONTEXT_FIELDS:
            if hasattr(record, name):
                log_data[name] = str(getattr(record, name))

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def _make_formatter(use_json: bool) -> logging.Formatter:
    if use_json:
        return JSONFormatter()
    return logging.Formatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT)


def configure_logging(
    log_level: str = "INFO",
    log_dir: Optional[Union[str, Path]] = None,
    use_json: bool = False,
    stream=None,
) -> logging.Logger:
    """
    Configure the "orderbooks" logger hierarchy.

    Calling it again replaces the handlers installed by a previous call.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory for an orderbooks.log file (None for console only)
        use_json: Use JSON formatting
        stream: Console stream (defaults to stderr so menu output stays clean)

    Returns:
        The configured root "orderbooks" logger
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(getattr(logging, log_level.upper()))
    logger.handlers.clear()
    logger.propagate = False

    console_handler = logging.StreamHandler(stream or sys.stderr)
    console_handler.setFormatter(_make_formatter(use_json))
    logger.addHandler(console_handler)

    if log_dir:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_dir / "orderbooks.log")
        file_handler.setFormatter(_make_formatter(use_json))
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger below the "orderbooks" namespace.

    Args:
        name: Module name; prefixed with "orderbooks." if needed
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)
