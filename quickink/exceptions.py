"""
Custom exceptions and error handlers.
"""
import logging
from typing import Optional

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from quickink.pdf.errors import (
    FetchError,
    SignedDocumentError,
    SignerValidationError,
)
from quickink.utils.logging import get_request_id

logger = logging.getLogger(__name__)


class AppException(HTTPException):
    """Base application exception."""

    def __init__(
        self,
        status_code: int,
        code: str,
        message: str,
        details: Optional[dict] = None,
    ):
        self.code = code
        self.message = message
        self.details = details
        super().__init__(status_code=status_code, detail=message)


class ValidationException(AppException):
    """Validation error."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            status_code=400,
            code="VALIDATION_ERROR",
            message=message,
            details=details,
        )


class DocumentSourceException(AppException):
    """Source document could not be fetched."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            status_code=502,
            code="FETCH_ERROR",
            message=message,
            details=details,
        )


class DocumentGenerationException(AppException):
    """Signed document could not be produced."""

    def __init__(self, message: str, code: str = "SIGNED_DOCUMENT_ERROR"):
        super().__init__(
            status_code=422,
            code=code,
            message=message,
        )


class StorageException(AppException):
    """Upload to storage failed."""

    def __init__(self, message: str):
        super().__init__(
            status_code=502,
            code="STORAGE_ERROR",
            message=message,
        )


def to_app_exception(exc: SignedDocumentError) -> AppException:
    """Map a generation error onto its HTTP representation."""
    if isinstance(exc, SignerValidationError):
        details = {"field": exc.field} if exc.field else None
        return ValidationException(exc.message, details=details)
    if isinstance(exc, FetchError):
        details = {"status_code": exc.status_code} if exc.status_code is not None else None
        return DocumentSourceException(exc.message, details=details)
    return DocumentGenerationException(exc.message, code=exc.code)


def build_error_response(
    status_code: int,
    code: str,
    message: str,
    details: Optional[dict] = None,
) -> dict:
    """Build standardized error response."""
    response = {
        "error": True,
        "code": code,
        "message": message,
        "request_id": get_request_id(),
    }
    if details:
        response["details"] = details
    return response


async def app_exception_handler(
    request: Request,
    exc: AppException,
) -> JSONResponse:
    """Handle application exceptions."""
    logger.warning(f"AppException: {exc.code} - {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=build_error_response(
            exc.status_code,
            exc.code,
            exc.message,
            exc.details,
        ),
    )


async def http_exception_handler(
    request: Request,
    exc: HTTPException,
) -> JSONResponse:
    """Handle HTTP exceptions."""
    logger.warning(f"HTTPException: {exc.status_code} - {exc.detail}")

    if isinstance(exc.detail, dict):
        code = exc.detail.get("code", "HTTP_ERROR")
        message = exc.detail.get("message", str(exc.detail))
    else:
        code = "HTTP_ERROR"
        message = str(exc.detail)

    return JSONResponse(
        status_code=exc.status_code,
        content=build_error_response(exc.status_code, code, message),
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Handle request body validation errors."""
    logger.warning(f"ValidationError: {exc.errors()}")

    errors = []
    for error in exc.errors():
        errors.append({
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        })

    return JSONResponse(
        status_code=422,
        content=build_error_response(
            422,
            "VALIDATION_ERROR",
            "Request validation failed",
            {"errors": errors},
        ),
    )


async def generic_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")

    return JSONResponse(
        status_code=500,
        content=build_error_response(
            500,
            "INTERNAL_ERROR",
            "An unexpected error occurred",
        ),
    )
