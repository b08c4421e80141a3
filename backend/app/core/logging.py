"""
Structured logging for the course generation service

- JSON records for production log shipping
- Colorized single-line records for local development
- Job / course / request correlation ids carried through contextvars
- Secret redaction for anything that looks like a credential
- LogTimer for stage timing
"""

import json
import logging
import os
import sys
from contextvars import ContextVar
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

SENSITIVE_KEY_TOKENS = (
    "password",
    "secret",
    "token",
    "api_key",
    "apikey",
    "authorization",
    "xi-api-key",
)
REDACTED = "***REDACTED***"

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
job_id_var: ContextVar[Optional[str]] = ContextVar("job_id", default=None)
course_id_var: ContextVar[Optional[str]] = ContextVar("course_id", default=None)

# Attributes every LogRecord carries; anything else came in through `extra=`
_STANDARD_RECORD_ATTRS = frozenset({
    "name", "msg", "args", "levelname", "levelno", "pathname", "filename",
    "module", "exc_info", "exc_text", "stack_info", "lineno", "funcName",
    "created", "msecs", "relativeCreated", "thread", "threadName",
    "processName", "process", "message", "taskName",
})


def _correlation_ids() -> Dict[str, str]:
    ids: Dict[str, str] = {}
    for key, var in (
        ("request_id", request_id_var),
        ("job_id", job_id_var),
        ("course_id", course_id_var),
    ):
        value = var.get()
        if value:
            ids[key] = value
    return ids


def _is_sensitive_key(key: str) -> bool:
    lowered = key.lower()
    return any(token in lowered for token in SENSITIVE_KEY_TOKENS)


def _sanitize_for_logging(key: str, value: Any) -> Any:
    if isinstance(value, dict):
        return {
            child_key: REDACTED if _is_sensitive_key(str(child_key))
            else _sanitize_for_logging(str(child_key), child_value)
            for child_key, child_value in value.items()
        }
    if isinstance(value, (list, tuple)):
        return type(value)(_sanitize_for_logging(key, item) for item in value)
    if isinstance(value, str) and _is_sensitive_key(key):
        return REDACTED
    return value


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging in production"""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        log_data.update(_correlation_ids())

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info),
            }

        extra: Dict[str, Any] = {}
        for key, value in vars(record).items():
            if key in _STANDARD_RECORD_ATTRS or key.startswith("_") or callable(value):
                continue
            # correlation ids are already top-level
            if key in log_data:
                continue
            extra[key] = value

        if extra:
            log_data["extra"] = _sanitize_for_logging("extra", extra)

        return json.dumps(log_data, default=str)


class DevelopmentFormatter(logging.Formatter):
    """Human-readable formatter for development"""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
        "RESET": "\033[0m",
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.COLORS["RESET"])
        reset = self.COLORS["RESET"]
        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S.%f")[:-3]

        ids = _correlation_ids()
        context_parts = []
        if "request_id" in ids:
            context_parts.append(f"req:{ids['request_id'][:8]}")
        if "job_id" in ids:
            context_parts.append(f"job:{ids['job_id'][:8]}")
        if "course_id" in ids:
            context_parts.append(f"course:{ids['course_id'][:8]}")
        context = f" [{', '.join(context_parts)}]" if context_parts else ""

        log_line = (
            f"{color}{timestamp}{reset} "
            f"{color}{record.levelname:8s}{reset} "
            f"{record.name:30s}{context} "
            f"{record.getMessage()}"
        )
        if record.exc_info:
            log_line += "\n" + self.formatException(record.exc_info)
        return log_line


class LoggerAdapter(logging.LoggerAdapter):
    """Merges bound context into every record's `extra`"""

    def process(self, msg: str, kwargs: Any) -> tuple:
        extra = dict(self.extra or {})
        extra.update(kwargs.get("extra") or {})
        kwargs["extra"] = extra
        return msg, kwargs


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    use_json: bool = False,
) -> None:
    """
    Configure application logging

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional rotating JSON log file
        use_json: If True, console output is JSON as well
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(StructuredFormatter() if use_json else DevelopmentFormatter())
    root_logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=int(os.getenv("LOG_MAX_BYTES", str(20 * 1024 * 1024))),
            backupCount=int(os.getenv("LOG_BACKUP_COUNT", "5")),
            encoding="utf-8",
        )
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(StructuredFormatter())
        root_logger.addHandler(file_handler)

    for noisy in ("httpx", "httpcore", "hpack", "asyncio", "urllib3"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name: str, **extra: Any) -> LoggerAdapter:
    """
    Get a logger with optional bound context

    Example:
        logger = get_logger(__name__, component="narration")
        logger.info("Synthesized episode", extra={"episode": 2})
    """
    return LoggerAdapter(logging.getLogger(name), extra)


def set_request_id(request_id: Optional[str]) -> None:
    request_id_var.set(request_id)


def set_job_id(job_id: Optional[str]) -> None:
    job_id_var.set(job_id)


def set_course_id(course_id: Optional[str]) -> None:
    course_id_var.set(course_id)


def clear_context() -> None:
    """Clear correlation context"""
    request_id_var.set(None)
    job_id_var.set(None)
    course_id_var.set(None)


class LogTimer:
    """Context manager that logs start, completion and duration of an operation"""

    def __init__(self, logger: Any, operation: str, level: int = logging.INFO):
        self.logger = logger
        self.operation = operation
        self.level = level
        self.start_time: Optional[float] = None
        self.duration: Optional[float] = None

    def __enter__(self) -> "LogTimer":
        self.start_time = datetime.now().timestamp()
        self.logger.log(self.level, f"Starting: {self.operation}")
        return self

    def __exit__(self, exc_type, exc_val, _exc_tb) -> None:
        self.duration = datetime.now().timestamp() - self.start_time
        if exc_type:
            self.logger.error(
                f"Failed: {self.operation}",
                extra={"duration_seconds": round(self.duration, 3), "error": str(exc_val)},
                exc_info=True,
            )
        else:
            self.logger.log(
                self.level,
                f"Completed: {self.operation}",
                extra={"duration_seconds": round(self.duration, 3)},
            )
