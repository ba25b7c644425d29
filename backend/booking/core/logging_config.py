"""
Logging setup for the booking service.

Console output is human readable in development and JSON in production.
Optional rotating files under ``backend/logs`` hold everything (``app.log``),
errors only (``booking_errors.log``) and the booking/cancellation trail
written by the ``booking.services`` loggers (``booking_audit.log``).

Structured fields are passed as ``extra={"context": {...}}``; inside a
request every record also carries the request id and the caller's user id.

Usage:
    from booking.core.logging_config import setup_logging

    setup_logging(app, log_level="INFO")

    logger = logging.getLogger(__name__)
    logger.info("Booking created", extra={"context": {"appointment_id": 12}})
"""

import json
import logging
import logging.handlers
import sys
import time
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Union

from flask import Flask, g, has_request_context, request
from sqlalchemy import event
from sqlalchemy.engine import Engine

LOG_DIR = Path(__file__).resolve().parents[2] / "logs"
MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUPS = 5


class RequestContextFilter(logging.Filter):
    """Stamp records emitted during a request with its id and user."""

    def filter(self, record: logging.LogRecord) -> bool:
        if has_request_context():
            record.request_id = g.get("request_id")
            record.user_id = g.get("current_user_id")
        else:
            record.request_id = None
            record.user_id = None
        return True


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        for attr in ("request_id", "user_id"):
            value = getattr(record, attr, None)
            if value is not None:
                payload[attr] = value
        if hasattr(record, "context"):
            payload["context"] = record.context
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


class ConsoleFormatter(logging.Formatter):
    """Colored level names plus any structured context appended as key=value."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self) -> None:
        super().__init__(
            "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        original = record.levelname
        color = self.COLORS.get(original, self.RESET)
        record.levelname = f"{color}{original:8}{self.RESET}"
        try:
            line = super().format(record)
        finally:
            record.levelname = original

        context = getattr(record, "context", None)
        if context:
            line += " | " + " ".join(f"{k}={v}" for k, v in context.items())
        return line


_sql_timing_registered = False


def _register_sql_timing() -> None:
    """Debug-log every statement with its duration on the ``sqlalchemy.performance`` logger."""
    global _sql_timing_registered
    if _sql_timing_registered:
        return

    perf_logger = logging.getLogger("sqlalchemy.performance")

    @event.listens_for(Engine, "before_cursor_execute")
    def _start(conn, cursor, statement, parameters, context, executemany):
        conn.info.setdefault("query_start_time", []).append(time.perf_counter())

    @event.listens_for(Engine, "after_cursor_execute")
    def _finish(conn, cursor, statement, parameters, context, executemany):
        starts = conn.info.get("query_start_time")
        if not starts:
            return
        elapsed_ms = round((time.perf_counter() - starts.pop()) * 1000, 2)
        perf_logger.debug(
            "Query executed in %sms",
            elapsed_ms,
            extra={"context": {"sql": statement[:500], "duration_ms": elapsed_ms}},
        )

    _sql_timing_registered = True


def _rotating_handler(
    filename: str, level: int, formatter: logging.Formatter
) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        LOG_DIR / filename,
        maxBytes=MAX_LOG_BYTES,
        backupCount=LOG_BACKUPS,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def _add_file_handlers(root: logging.Logger, level: int) -> None:
    try:
        LOG_DIR.mkdir(exist_ok=True)
        formatter = JSONFormatter()
        root.addHandler(_rotating_handler("app.log", level, formatter))
        root.addHandler(_rotating_handler("booking_errors.log", logging.ERROR, formatter))

        audit = _rotating_handler("booking_audit.log", logging.INFO, formatter)
        audit.addFilter(logging.Filter("booking.services"))
        root.addHandler(audit)
    except OSError as e:
        root.warning(
            "File logging unavailable (%s); logging to console only",
            e,
            extra={"context": {"component": "logging_setup", "log_dir": str(LOG_DIR)}},
        )


def _register_request_hooks(app: Flask) -> None:
    req_logger = logging.getLogger("booking.http")

    @app.before_request
    def _log_request():
        g.request_start_time = time.perf_counter()
        g.request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        req_logger.debug(
            "%s %s",
            request.method,
            request.path,
            extra={"context": {"remote_addr": request.remote_addr}},
        )

    @app.after_request
    def _log_response(response):
        started = g.get("request_start_time")
        if started is not None:
            duration_ms = round((time.perf_counter() - started) * 1000, 2)
            req_logger.info(
                "%s %s %s in %sms",
                request.method,
                request.path,
                response.status_code,
                duration_ms,
                extra={
                    "context": {
                        "route": request.url_rule.rule if request.url_rule else None,
                        "status_code": response.status_code,
                        "duration_ms": duration_ms,
                    }
                },
            )
        response.headers["X-Request-ID"] = g.get("request_id", "")
        return response


def setup_logging(
    app: Optional[Flask] = None,
    log_level: Union[int, str] = "INFO",
    enable_sql_echo: bool = False,
    log_to_file: bool = True,
    use_json_format: bool = False,
) -> None:
    """
    Configure the root logger and, when ``app`` is given, request logging.

    Args:
        app: Flask application to attach request/response hooks to
        log_level: Logging level (int like logging.INFO or string "INFO")
        enable_sql_echo: Log SQL statement timings at DEBUG
        log_to_file: Also write rotating JSON files under backend/logs
        use_json_format: JSON on the console instead of the colored format
    """
    if isinstance(log_level, str):
        level = getattr(logging, log_level.upper(), logging.INFO)
    else:
        level = log_level

    root = logging.getLogger()
    root.setLevel(level)
    for handler in root.handlers[:]:
        handler.close()
        root.removeHandler(handler)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(JSONFormatter() if use_json_format else ConsoleFormatter())
    root.addHandler(console)

    if log_to_file:
        _add_file_handlers(root, level)

    context_filter = RequestContextFilter()
    for handler in root.handlers:
        handler.addFilter(context_filter)

    if enable_sql_echo:
        _register_sql_timing()

    if app is not None:
        _register_request_hooks(app)

    logging.getLogger("werkzeug").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    logging.getLogger("booking").info(
        "Logging configured",
        extra={
            "context": {
                "level": logging.getLevelName(level),
                "sql_timing": enable_sql_echo,
                "log_to_file": log_to_file,
                "json": use_json_format,
            }
        },
    )
