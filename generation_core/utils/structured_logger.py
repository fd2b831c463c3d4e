"""
Structured logging utilities for the generation core.

This module provides JSON-formatted logging so that cache and retry events
logged with ``extra={...}`` context can be queried by field.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Union

# Attributes every LogRecord carries; anything else came from extra={...}
_RECORD_FIELDS = frozenset({
    'name', 'msg', 'args', 'created', 'filename', 'funcName',
    'levelname', 'levelno', 'lineno', 'module', 'msecs',
    'message', 'pathname', 'process', 'processName', 'relativeCreated',
    'thread', 'threadName', 'exc_info', 'exc_text', 'stack_info', 'taskName'
})


class StructuredFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Formats log records as JSON with consistent fields including:
    - timestamp: ISO 8601 timestamp
    - level: Log level (DEBUG, INFO, WARNING, ERROR)
    - component: Logger name
    - message: Log message
    - Additional fields from extra dict (operation_id, cache_key, ...)
    """

    def format(self, record: logging.LogRecord) -> str:
        """
        Format log record as JSON.

        Args:
            record: Log record to format

        Returns:
            JSON-formatted log string
        """
        log_entry = {
            'timestamp': datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat().replace('+00:00', 'Z'),
            'level': record.levelname,
            'component': record.name,
            'message': record.getMessage()
        }

        for key, value in record.__dict__.items():
            if key in _RECORD_FIELDS or key.startswith('_'):
                continue
            try:
                json.dumps(value)
                log_entry[key] = value
            except (TypeError, ValueError):
                log_entry[key] = str(value)

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_entry)


def configure_structured_logging(
    level: Union[int, str] = logging.INFO,
    use_json: bool = True
) -> None:
    """
    Configure structured logging for the entire application.

    Replaces the root logger's handlers with a single stdout handler.

    Args:
        level: Logging level or level name (default: INFO)
        use_json: Whether to use JSON formatting (default: True)
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)

    if use_json:
        formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    root_logger.info(
        f"Configured structured logging: level={logging.getLevelName(level)}, json={use_json}"
    )
