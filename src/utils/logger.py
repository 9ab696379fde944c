"""
Enhanced Logging Utilities

Provides structured logging with:
- JSON formatting for production
- Timing of provisioning steps
- Schema / table context on records
"""

import logging
import json
import sys
import time
from datetime import datetime
from typing import Optional
from pathlib import Path
from contextlib import contextmanager


# Extra record attributes copied into JSON log lines
CONTEXT_FIELDS = ('schema', 'table', 'pair', 'strategy', 'operation', 'execution_time')


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record):
        log_entry = {
            'timestamp': datetime.fromtimestamp(record.created).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno
        }

        for field in CONTEXT_FIELDS:
            if hasattr(record, field):
                log_entry[field] = getattr(record, field)

        # Add exception info if present
        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_entry)


class PerformanceLogger:
    """Logger for timing provisioning operations."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    @contextmanager
    def timer(self, operation: str, **context):
        """Context manager for timing operations. Logs only on success."""
        start_time = time.perf_counter()
        yield
        execution_time = time.perf_counter() - start_time
        extra = {'operation': operation, 'execution_time': execution_time, **context}
        self.logger.info(
            f"Operation completed: {operation} ({execution_time * 1000:.1f} ms)",
            extra=extra
        )


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    json_format: bool = True
) -> logging.Logger:
    """
    Setup logging configuration.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional log file path
        json_format: Use JSON formatting

    Returns:
        Configured root logger
    """
    # Enum members from unvalidated config defaults carry the name in .value
    level_name = getattr(log_level, "value", log_level)

    logger = logging.getLogger()
    logger.setLevel(getattr(logging, level_name.upper()))

    # Clear existing handlers
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    if json_format:
        formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def get_performance_logger(name: str) -> PerformanceLogger:
    """Get a performance logger instance."""
    return PerformanceLogger(logging.getLogger(name))
