"""
Centralized logging configuration.
Writes structured JSON logs and human-readable logs, and provides helpers
for consistent structured events across the application.
"""

import json
import logging
import logging.handlers
import sys
import traceback
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Dict, Any

# Context variable to store request ID for the current request
_request_id: ContextVar[Optional[str]] = ContextVar('request_id', default=None)

# Context variable to store operation name
_operation: ContextVar[Optional[str]] = ContextVar('operation', default=None)


class StructuredJSONFormatter(logging.Formatter):
    """Formatter that outputs one JSON object per log record."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "function": record.funcName,
            "line": record.lineno,
        }

        request_id = _request_id.get()
        if request_id:
            log_data["request_id"] = request_id

        operation = _operation.get()
        if operation:
            log_data["operation"] = operation

        if hasattr(record, 'event'):
            log_data["event"] = record.event

        log_data["message"] = record.getMessage()

        if getattr(record, 'context', None):
            log_data["context"] = record.context

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": traceback.format_exception(*record.exc_info)
            }

        return json.dumps(log_data, ensure_ascii=False, default=str)


class HumanReadableFormatter(logging.Formatter):
    """Formatter that outputs a one-line summary followed by indented context."""

    max_value_length = 500

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
        lines = [f"{timestamp} {record.levelname:8s} [{record.name}] {record.getMessage()}"]

        request_id = _request_id.get()
        if request_id:
            lines.append(f"  request_id: {request_id}")

        if getattr(record, 'event', None):
            lines.append(f"  event: {record.event}")

        context = getattr(record, 'context', None)
        if isinstance(context, dict):
            for key, value in context.items():
                if isinstance(value, (dict, list)):
                    value_str = json.dumps(value, indent=2, ensure_ascii=False, default=str)
                    lines.append(f"  {key}:")
                    lines.extend('    ' + line for line in value_str.split('\n'))
                else:
                    value_str = str(value)
                    if len(value_str) > self.max_value_length:
                        value_str = value_str[:self.max_value_length] + "... (truncated)"
                    lines.append(f"  {key}: {value_str}")
        elif context:
            lines.append(f"  context: {context}")

        if record.exc_info:
            exc_type, exc_value, exc_traceback = record.exc_info
            lines.append(f"  exception_type: {exc_type.__name__ if exc_type else 'Unknown'}")
            lines.append(f"  exception_message: {exc_value if exc_value else 'N/A'}")
            if exc_traceback:
                lines.append("  traceback:")
                for tb_line in traceback.format_exception(exc_type, exc_value, exc_traceback):
                    lines.extend(f"    {line}" for line in tb_line.rstrip().split('\n'))

        return '\n'.join(lines)


def setup_logging(
    log_level: str = "INFO",
    log_dir: Optional[Path] = None,
    console: bool = True
) -> None:
    """
    Initialize the logging system.

    Outputs:
    - ``application.log.json``: structured JSON lines, rotated daily
    - ``application.log``: human-readable text, rotated daily
    - stderr (optional): human-readable text

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory for log files. If None, only the console handler is used
        console: Whether to also log to stderr
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    json_log_file = None
    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)

        json_log_file = log_dir / "application.log.json"
        json_file_handler = logging.handlers.TimedRotatingFileHandler(
            filename=str(json_log_file),
            when='midnight',
            interval=1,
            backupCount=14,
            encoding='utf-8',
            delay=True
        )
        json_file_handler.setLevel(level)
        json_file_handler.setFormatter(StructuredJSONFormatter())
        root_logger.addHandler(json_file_handler)

        text_file_handler = logging.handlers.TimedRotatingFileHandler(
            filename=str(log_dir / "application.log"),
            when='midnight',
            interval=1,
            backupCount=14,
            encoding='utf-8',
            delay=True
        )
        text_file_handler.setLevel(level)
        text_file_handler.setFormatter(HumanReadableFormatter())
        root_logger.addHandler(text_file_handler)

    if console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        console_handler.setFormatter(HumanReadableFormatter())
        root_logger.addHandler(console_handler)

    log_event(
        level="INFO",
        logger="app.core.logging",
        operation="logging_setup",
        event="logging_initialized",
        message="Logging system initialized",
        context={
            "log_level": log_level,
            "log_dir": str(log_dir) if log_dir else None,
            "json_log_file": str(json_log_file) if json_log_file else None,
            "console": console,
        }
    )


def get_request_id() -> Optional[str]:
    """Get the current request ID from context."""
    return _request_id.get()


def set_request_id(request_id: Optional[str]) -> None:
    """Set the request ID in context."""
    _request_id.set(request_id)


def generate_request_id() -> str:
    """Generate a unique request ID."""
    return f"req_{uuid.uuid4().hex[:12]}"


def get_operation() -> Optional[str]:
    """Get the current operation name from context."""
    return _operation.get()


def log_event(
    level: str,
    logger: str,
    operation: Optional[str] = None,
    event: Optional[str] = None,
    message: str = "",
    context: Optional[Dict[str, Any]] = None,
    exc_info: Optional[BaseException] = None
) -> None:
    """
    Log a structured event.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        logger: Logger name (usually module path)
        operation: High-level operation name
        event: Specific event type
        message: Human-readable message
        context: Operation-specific data
        exc_info: Exception to attach
    """
    logger_instance = logging.getLogger(logger)
    log_method = getattr(logger_instance, level.lower(), logger_instance.info)

    extra = {}
    if event:
        extra['event'] = event
    if context:
        extra['context'] = context

    if operation:
        token = _operation.set(operation)
        try:
            log_method(message, extra=extra, exc_info=exc_info)
        finally:
            _operation.reset(token)
    else:
        log_method(message, extra=extra, exc_info=exc_info)


def log_operation_start(
    logger: str,
    operation: str,
    message: str = "",
    context: Optional[Dict[str, Any]] = None
) -> None:
    """Log the start of an operation."""
    log_event(
        level="INFO",
        logger=logger,
        operation=operation,
        event="operation_start",
        message=message or f"Starting {operation}",
        context=context
    )


def log_operation_complete(
    logger: str,
    operation: str,
    message: str = "",
    context: Optional[Dict[str, Any]] = None,
    duration: Optional[float] = None
) -> None:
    """Log the completion of an operation."""
    context = dict(context or {})
    if duration is not None:
        context["duration_seconds"] = round(duration, 4)

    log_event(
        level="INFO",
        logger=logger,
        operation=operation,
        event="operation_complete",
        message=message or f"Completed {operation}",
        context=context
    )


def log_operation_error(
    logger: str,
    operation: str,
    error: Exception,
    message: str = "",
    context: Optional[Dict[str, Any]] = None,
    level: str = "ERROR"
) -> None:
    """Log an operation error. Expected failures can pass ``level="WARNING"``."""
    context = dict(context or {})
    context["error_type"] = type(error).__name__
    context["error_message"] = str(error)

    log_event(
        level=level,
        logger=logger,
        operation=operation,
        event="operation_error",
        message=message or f"Error in {operation}",
        context=context,
        exc_info=error if level == "ERROR" else None
    )
