"""Logging setup for the Knowledge Import service.

Everything logs under the ``knowledge_import`` logger to stdout. Production
writes one JSON object per line; other environments write a readable line.
Structured values travel on the record as ``fields`` and are rendered by
both formatters.
"""

import json
import logging
import sys
from contextvars import ContextVar
from typing import Any, Dict, Optional

from knowledge_import.config import get_settings
from knowledge_import.utils.errors import KnowledgeImportException

ROOT_LOGGER = "knowledge_import"

# Set per request by the request context middleware
request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

_QUIET_LOGGERS = ("uvicorn.access", "httpx", "httpcore", "openpyxl", "multipart")

_configured: Optional[logging.Logger] = None


def _fields(record: logging.LogRecord) -> Dict[str, Any]:
    return getattr(record, "fields", None) or {}


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        request_id = request_id_var.get()
        if request_id:
            entry["request_id"] = request_id
        entry.update(_fields(record))
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str, ensure_ascii=False)


class ConsoleFormatter(logging.Formatter):
    """Readable single-line records with the request id and trailing key=value fields."""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s %(levelname)-8s %(name)s [%(request_id)s] %(message)s",
            datefmt="%H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        record.request_id = request_id_var.get() or "-"
        line = super().format(record)
        fields = _fields(record)
        if fields:
            line += " | " + " ".join(f"{key}={value}" for key, value in fields.items())
        return line


def setup_logging() -> logging.Logger:
    """Attach the stdout handler to the service logger once."""
    global _configured

    if _configured is not None:
        return _configured

    settings = get_settings()
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter() if settings.is_production else ConsoleFormatter())

    logger = logging.getLogger(ROOT_LOGGER)
    logger.handlers[:] = [handler]
    logger.setLevel(settings.log_level)
    logger.propagate = False

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    _configured = logger
    logger.info(
        "Logging configured",
        extra={"fields": {"level": settings.log_level, "json": settings.is_production}},
    )
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """``knowledge_import`` or one of its children."""
    if name:
        return logging.getLogger(f"{ROOT_LOGGER}.{name}")
    return logging.getLogger(ROOT_LOGGER)


def log_request(
    method: str,
    path: str,
    status_code: int,
    duration_ms: float,
    upload_bytes: Optional[int] = None,
) -> None:
    """Access line for one HTTP request; ``upload_bytes`` is the declared body size."""
    fields: Dict[str, Any] = {
        "method": method,
        "path": path,
        "status_code": status_code,
        "duration_ms": round(duration_ms, 2),
    }
    if upload_bytes is not None:
        fields["upload_bytes"] = upload_bytes
    get_logger("http").info(
        f"{method} {path} {status_code} {duration_ms:.1f}ms", extra={"fields": fields}
    )


def log_document_parsed(
    filename: str,
    file_type: str,
    size: int,
    sections: int,
    tables: int,
    words: int,
    low_confidence: bool,
) -> None:
    """Summary of one successful parse."""
    get_logger("parser").info(
        f"Parsed {file_type.upper()} {filename}",
        extra={
            "fields": {
                "filename": filename,
                "file_type": file_type,
                "size": size,
                "sections": sections,
                "tables": tables,
                "words": words,
                "low_confidence": low_confidence,
            }
        },
    )


def log_provider_response(model: str, status_code: int, duration_ms: float) -> None:
    """Outcome of one chat-completions call."""
    get_logger("provider").info(
        f"Completion provider answered {status_code}",
        extra={
            "fields": {
                "model": model,
                "provider_status": status_code,
                "duration_ms": round(duration_ms, 2),
            }
        },
    )


def log_error(
    error: Exception,
    context: Optional[Dict[str, Any]] = None,
    expected: bool = False,
) -> None:
    """
    Log an error raised while handling a request.

    Service errors (bad uploads, provider refusals) and errors the caller
    marks ``expected`` are logged as warnings. Service errors carry their code
    and details, such as ``filename``, ``file_type`` or ``provider_status``.
    Anything else is an error with a traceback.
    """
    fields: Dict[str, Any] = dict(context or {})
    fields["error_type"] = type(error).__name__
    logger = get_logger("error")

    if isinstance(error, KnowledgeImportException):
        fields.update(error.details)
        fields["code"] = error.code
        fields["status_code"] = error.status_code
        logger.warning(error.message, extra={"fields": fields})
        return

    if expected:
        logger.warning(f"{type(error).__name__}: {error}", extra={"fields": fields})
        return

    logger.error(f"{type(error).__name__}: {error}", exc_info=error, extra={"fields": fields})
