from __future__ import annotations

import logging
from typing import Any

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class IntakeServiceError(Exception):
    """Base class for domain failures that map onto a client-facing status."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "intake_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidIntakeIdError(IntakeServiceError):
    code = "invalid_intake_id"


class IntakeNotFoundError(IntakeServiceError):
    """A metric referenced an intake that is not in ``jrm``."""

    code = "intake_not_found"


class DuplicateMetricError(IntakeServiceError):
    status_code = status.HTTP_409_CONFLICT
    code = "duplicate_metric"


class MetricNotFoundError(IntakeServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "metric_not_found"


class ErrorEnvelope(JSONResponse):
    def __init__(
        self,
        *,
        status_code: int,
        code: str,
        message: str,
        details: Any | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        # ``error`` is the key the existing front end reads.
        payload: dict[str, Any] = {"error": message, "code": code}
        if details is not None:
            payload["details"] = details
        super().__init__(payload, status_code=status_code, headers=headers)


def store_error_message(exc: SQLAlchemyError) -> str:
    """Return the driver's own message, without SQLAlchemy's decoration."""

    if isinstance(exc, DBAPIError) and exc.orig is not None:
        return str(exc.orig)
    return str(exc)


async def intake_error_handler(request: Request, exc: IntakeServiceError):
    return ErrorEnvelope(status_code=exc.status_code, code=exc.code, message=exc.message)


async def store_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error("store.error", exc_info=exc, extra={"extra_data": {"path": request.url.path}})
    return ErrorEnvelope(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        code="store_error",
        message=store_error_message(exc),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    detail = exc.detail
    message = detail if isinstance(detail, str) else "Error"
    details = detail if isinstance(detail, dict) else None
    return ErrorEnvelope(status_code=exc.status_code, code="http_error", message=message, details=details)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return ErrorEnvelope(
        status_code=422,
        code="validation_error",
        message="Validation failed",
        details={"errors": jsonable_encoder(exc.errors())},
    )
