"""Structured logging configuration with JSON formatting and detection pass ids."""

import contextvars
import logging
import sys
import traceback
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from pythonjsonlogger import jsonlogger

# Hey future me, the pass id ties together every log line of ONE detection pass! The grouper
# scopes a fresh id to each pass (pass_id_scope), so when a user says "the scan from 10 minutes ago
# found weird groups" you grep for the pass_id and see the config, the counts and the timing.
# contextvars keeps it per thread/task - two services running passes side by side don't clash.
pass_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("pass_id", default="")


def get_pass_id() -> str:
    """Get the current detection pass id from context.

    Returns:
        Current pass id or empty string if not set
    """
    return pass_id_var.get()


# Auto-generates a short id when none is given (the common case). Call this ONCE per pass -
# calling it per pair would give every log line its own id!
def set_pass_id(pass_id: str | None = None) -> str:
    """Set detection pass id in context.

    Args:
        pass_id: Id to set. If None, generates a new one

    Returns:
        The pass id that was set
    """
    if pass_id is None:
        pass_id = uuid.uuid4().hex[:12]
    pass_id_var.set(pass_id)
    return pass_id


@contextmanager
def pass_id_scope(pass_id: str | None = None) -> Iterator[str]:
    """Set a pass id for the duration of a block, then restore the previous one.

    Args:
        pass_id: Id to set. If None, generates a new one

    Yields:
        The pass id active inside the block
    """
    token = pass_id_var.set(pass_id or uuid.uuid4().hex[:12])
    try:
        yield pass_id_var.get()
    finally:
        pass_id_var.reset(token)


class PassIdFilter(logging.Filter):
    """Add the detection pass id to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Add pass_id to record if available."""
        record.pass_id = get_pass_id()
        return True


class CompactExceptionFormatter(logging.Formatter):
    """Formatter that shows compact exception chains without verbose traceback boilerplate.

    Hey future me - only frames from OUR package are shown, each exception of the chain
    gets a ╰─► marker:

    WARNING │ soundsift.application.services.duplicate_grouper:380 │ ⏹️ Duplicate Detection Cancelled
    ╰─► DetectionCancelledError: Duplicate detection was cancelled
        File "duplicate_grouper.py", line 382, in _evaluate
          raise DetectionCancelledError(comparisons_completed=completed)
    """

    def formatException(self, ei: Any) -> str:
        """Format exception chain in a compact, readable way.

        Args:
            ei: Exception info tuple (type, value, traceback)

        Returns:
            Formatted exception string with compact chain representation
        """
        _, exc_value, _ = ei
        if exc_value is None:
            return ""

        # Walk the chain, then show the root cause first
        exceptions: list[BaseException] = []
        current: BaseException | None = exc_value
        while current is not None and current not in exceptions:
            exceptions.append(current)
            current = current.__cause__ or current.__context__
        exceptions.reverse()

        lines: list[str] = []
        for exc in exceptions:
            lines.append(f"╰─► {exc.__class__.__name__}: {exc}")
            if exc.__traceback__ is None:
                continue
            for frame in traceback.extract_tb(exc.__traceback__):
                if "/site-packages/" in frame.filename or "soundsift" not in frame.filename:
                    continue
                lines.append(f'    File "{Path(frame.filename).name}", line {frame.lineno}, in {frame.name}')
                if frame.line:
                    lines.append(f"      {frame.line.strip()}")

        return "\n".join(lines)


class CustomJsonFormatter(jsonlogger.JsonFormatter):  # type: ignore[name-defined,misc]
    """Custom JSON formatter with additional fields."""

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        """Add custom fields to log record.

        Args:
            log_record: Dictionary to be logged as JSON
            record: Python logging record
            message_dict: Message dictionary from format string
        """
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = self.formatTime(record, self.datefmt)
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["module"] = record.module
        log_record["function"] = record.funcName
        log_record["line"] = record.lineno

        pass_id = getattr(record, "pass_id", "")
        if pass_id:
            log_record["pass_id"] = pass_id

        if record.exc_info:
            log_record["exc_info"] = self.formatException(record.exc_info)

        if record.stack_info:
            log_record["stack_info"] = self.formatStack(record.stack_info)


# Listen future me, this is a LIBRARY - we never call configure_logging() ourselves! The host
# (CLI, desktop app, tests) calls it once at startup if it wants our format. It replaces the
# root logger's handlers, so a host with its own logging setup should simply not call it.
def configure_logging(
    log_level: str = "INFO",
    json_format: bool = False,
    app_name: str = "soundsift",
) -> None:
    """Configure structured logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Use JSON format for logs (recommended for log aggregation)
        app_name: Application name to include in logs
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    level = getattr(logging, log_level.upper(), logging.INFO)
    root_logger.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.addFilter(PassIdFilter())

    if json_format:
        formatter: logging.Formatter = CustomJsonFormatter(
            "%(timestamp)s %(level)s %(name)s %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    else:
        # timestamp | level | module:line | message
        formatter = CompactExceptionFormatter(
            fmt="%(asctime)s │ %(levelname)-7s │ %(name)s:%(lineno)d │ %(message)s",
            datefmt="%H:%M:%S",
        )

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    logger = logging.getLogger(__name__)
    logger.info(
        "Logging configured",
        extra={
            "app_name": app_name,
            "log_level": log_level,
            "json_format": json_format,
        },
    )


__all__ = [
    "CompactExceptionFormatter",
    "CustomJsonFormatter",
    "PassIdFilter",
    "configure_logging",
    "get_pass_id",
    "pass_id_scope",
    "set_pass_id",
]
