from __future__ import annotations

import json
import logging
import re
from datetime import datetime, timezone

from crm.core.config import ERROR_LOG_PATH, LOG_LEVEL
from crm.core.request_context import get_request_id

ERROR_LOGGER_NAME = "crm.errors"

_SENSITIVE_PATTERNS = [
    re.compile(r"(authorization\s*[:=]\s*bearer\s+)([^\s\"]+)", re.IGNORECASE),
    re.compile(r"(token\s*[:=]\s*)([^\s\",}]+)", re.IGNORECASE),
    re.compile(r"(password\s*[:=]\s*)([^\s\",}]+)", re.IGNORECASE),
    re.compile(r"(secret\s*[:=]\s*)([^\s\",}]+)", re.IGNORECASE),
]


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        record.message = record.getMessage()
        payload = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "request_id": getattr(record, "request_id", None) or get_request_id(),
            "module": record.name,
            "message": self._mask(self.formatMessage(record)),
            "duration_ms": getattr(record, "duration_ms", None),
        }
        endpoint = getattr(record, "endpoint", None)
        method = getattr(record, "method", None)
        status_code = getattr(record, "status_code", None)
        if endpoint is not None:
            payload["endpoint"] = endpoint
        if method is not None:
            payload["method"] = method
        if status_code is not None:
            payload["status_code"] = status_code
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)

    def _mask(self, value: str) -> str:
        masked = value
        for pattern in _SENSITIVE_PATTERNS:
            masked = pattern.sub(r"\1***", masked)
        return masked


class ErrorLogFormatter(logging.Formatter):
    """One plain-text entry per failure: ``[timestamp] METHOD URL - traceback``."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat()
        method = getattr(record, "method", None) or "-"
        url = getattr(record, "url", None) or "-"
        detail = record.getMessage()
        if record.exc_info:
            detail = self.formatException(record.exc_info)
        return f"[{timestamp}] {method} {url} - {detail}"


def configure_error_log(path: str = ERROR_LOG_PATH) -> logging.Logger:
    error_logger = logging.getLogger(ERROR_LOGGER_NAME)
    for handler in list(error_logger.handlers):
        if isinstance(handler, logging.FileHandler):
            error_logger.removeHandler(handler)
            handler.close()

    file_handler = logging.FileHandler(path, mode="a", encoding="utf-8", delay=True)
    file_handler.setLevel(logging.ERROR)
    file_handler.setFormatter(ErrorLogFormatter())
    error_logger.addHandler(file_handler)
    error_logger.setLevel(logging.ERROR)
    return error_logger


def configure_logging() -> None:
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(LOG_LEVEL)

    handler = logging.StreamHandler()
    formatter = JsonFormatter("%(message)s")
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    for logger_name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(logger_name).setLevel(LOG_LEVEL)

    configure_error_log()
