"""
Structured JSON logging for the revenue leakage pipeline.

Every module logs through a child of the "revenue_leakage" logger, which is
configured once with a single stderr handler (stdout carries the CLI's
report). Records are JSON by default; set LOG_FORMAT=text for local runs.
"""
import logging
import os
import sys
import time
from datetime import datetime, timezone

from pythonjsonlogger import jsonlogger

PACKAGE_LOGGER = "revenue_leakage"

TEXT_FORMAT = "%(asctime)s %(levelname)-8s [%(threadName)s] %(name)s: %(message)s"
JSON_FORMAT = "%(timestamp)s %(level)s %(logger)s %(function)s %(thread)s %(message)s"


class PipelineJsonFormatter(jsonlogger.JsonFormatter):
    """
    JSON formatter for pipeline records.

    Adds an ISO-8601 UTC timestamp, the level name, the logger and function
    names and the thread name. Stages fan out on a thread pool, so the thread
    name tells concurrent tasks apart.
    """

    def add_fields(self, log_record: dict, record: logging.LogRecord, message_dict: dict) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(
            timespec="milliseconds"
        )
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["function"] = record.funcName
        log_record["thread"] = record.threadName


def _level_from(value: str | None) -> int:
    level = logging.getLevelName((value or os.getenv("LOG_LEVEL", "INFO")).upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logger(
    name: str = PACKAGE_LOGGER,
    level: str | None = None,
    format_type: str | None = None,
) -> logging.Logger:
    """
    Configure a logger with one stderr handler, replacing earlier handlers.

    Args:
        name: Logger name
        level: Level name; defaults to LOG_LEVEL, then INFO
        format_type: "json" or "text"; defaults to LOG_FORMAT, then "json"

    Returns:
        Configured logger instance
    """
    format_type = (format_type or os.getenv("LOG_FORMAT", "json")).lower()

    handler = logging.StreamHandler(sys.stderr)
    if format_type == "json":
        handler.setFormatter(PipelineJsonFormatter(JSON_FORMAT))
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))

    logger = logging.getLogger(name)
    logger.setLevel(_level_from(level))
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def get_logger(name: str = PACKAGE_LOGGER) -> logging.Logger:
    """
    Logger for a module of this package.

    The package logger is configured on first use; module loggers
    (``get_logger(__name__)``) inherit its level and handler.
    """
    if not logging.getLogger(PACKAGE_LOGGER).handlers:
        setup_logger(PACKAGE_LOGGER)
    return logging.getLogger(name)


class log_operation:
    """
    Context manager logging the start and outcome of one operation.

    The elapsed time is kept on ``duration`` after the block exits.
    Exceptions are logged with their traceback and re-raised.

    Usage:
        with log_operation("reconciliation", logger=logger, entity_kind="order"):
            ...
    """

    def __init__(self, operation_name: str, logger: logging.Logger | None = None, **extra_fields):
        self.operation_name = operation_name
        self.logger = logger or get_logger()
        self.fields = {"operation": operation_name, **extra_fields}
        self.duration: float | None = None
        self._started: float | None = None

    def __enter__(self):
        self._started = time.perf_counter()
        self.logger.info(f"Starting: {self.operation_name}", extra=self.fields)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.duration = time.perf_counter() - self._started
        fields = {**self.fields, "duration_seconds": round(self.duration, 3)}

        if exc_type is None:
            self.logger.info(f"Completed: {self.operation_name}", extra={**fields, "status": "success"})
        else:
            fields.update(status="error", error_type=exc_type.__name__, error_message=str(exc_val))
            self.logger.error(f"Failed: {self.operation_name}", extra=fields, exc_info=True)
        return False
