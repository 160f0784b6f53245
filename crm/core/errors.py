from __future__ import annotations

import logging
from dataclasses import asdict, dataclass

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from crm.core.logging_setup import ERROR_LOGGER_NAME

error_logger = logging.getLogger(ERROR_LOGGER_NAME)

GENERIC_SERVER_ERROR = "Server error"


@dataclass(frozen=True)
class FieldViolation:
    field: str
    rule: str
    message: str

    def as_dict(self) -> dict[str, str]:
        return asdict(self)


class CRMError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str = GENERIC_SERVER_ERROR) -> None:
        super().__init__(message)
        self.message = message


class ValidationFailed(CRMError):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, violations: list[FieldViolation]) -> None:
        super().__init__("Validation failed")
        self.violations = list(violations)


class ConflictError(CRMError):
    status_code = status.HTTP_409_CONFLICT


class NotFoundError(CRMError):
    status_code = status.HTTP_404_NOT_FOUND


class PersistenceError(CRMError):
    """Any database failure that is not a conflict or a missing owner."""


def _log_server_error(request: Request, exc: BaseException) -> None:
    error_logger.error(
        "%s %s failed",
        request.method,
        request.url,
        exc_info=(type(exc), exc, exc.__traceback__),
        extra={"method": request.method, "url": str(request.url)},
    )


async def validation_failed_handler(_: Request, exc: ValidationFailed) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"errors": [violation.as_dict() for violation in exc.violations]},
    )


async def request_validation_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    errors = []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        if error.get("type") == "json_invalid":
            # loc carries a byte offset, not a field
            location = []
        errors.append(
            {
                "field": ".".join(location) or "body",
                "rule": str(error.get("type", "invalid")),
                "message": str(error.get("msg", "Invalid value")),
            }
        )
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"errors": errors})


async def crm_error_handler(request: Request, exc: CRMError) -> JSONResponse:
    if exc.status_code >= 500:
        _log_server_error(request, exc)
        return JSONResponse(status_code=exc.status_code, content={"error": GENERIC_SERVER_ERROR})
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    _log_server_error(request, exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": GENERIC_SERVER_ERROR},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ValidationFailed, validation_failed_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(CRMError, crm_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
