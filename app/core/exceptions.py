"""
Custom exceptions and error handlers for the Université Quiz backend
Provides consistent error responses and logging
"""

import logging
from typing import Any, List, Optional

import sentry_sdk
from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings

logger = logging.getLogger(__name__)


class QuizAppException(Exception):
    """Base exception for the application"""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_code: Optional[str] = None,
        details: Optional[Any] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code or "INTERNAL_ERROR"
        self.details = details
        super().__init__(self.message)


class DatabaseException(QuizAppException):
    """Storage failure; the caller only ever sees a generic message"""

    def __init__(self, message: str = "Erreur serveur.", details: Optional[Any] = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code="DATABASE_ERROR",
            details=details,
        )


class AuthenticationException(QuizAppException):
    """Missing, invalid or expired credential"""

    def __init__(
        self,
        message: str = "Non authentifié.",
        error_code: str = "AUTHENTICATION_ERROR",
        details: Optional[Any] = None,
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_401_UNAUTHORIZED,
            error_code=error_code,
            details=details,
        )


class InvalidAdminTokenException(AuthenticationException):
    """Admin bearer token unknown or expired; the client must log in again"""

    def __init__(self, message: str = "Token admin invalide."):
        super().__init__(message=message, error_code="INVALID_TOKEN")


class ValidationException(QuizAppException):
    """Malformed or missing input"""

    def __init__(
        self,
        message: str = "Données invalides.",
        error_code: str = "VALIDATION_ERROR",
        details: Optional[Any] = None,
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code=error_code,
            details=details,
        )


class WeakPasswordException(ValidationException):
    """Password rejected by the signup policy, carrying every violated rule"""

    def __init__(self, issues: List[str]):
        self.issues = list(issues)
        super().__init__(message="Mot de passe faible", error_code="WEAK_PASSWORD", details=self.issues)


class NotFoundException(QuizAppException):
    """Resource not found exception"""

    def __init__(self, message: str = "Introuvable.", details: Optional[Any] = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="NOT_FOUND",
            details=details,
        )


class ConflictException(QuizAppException):
    """Duplicate unique key"""

    def __init__(self, message: str = "Conflit.", details: Optional[Any] = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_409_CONFLICT,
            error_code="DUPLICATE_ERROR",
            details=details,
        )


def create_error_response(
    request: Request,
    status_code: int,
    error_code: str,
    message: str,
    details: Optional[Any] = None,
) -> JSONResponse:
    """
    Create standardized error response

    Args:
        request: FastAPI request object
        status_code: HTTP status code
        error_code: Application error code
        message: Error message
        details: Additional error details

    Returns:
        JSON response with error information
    """
    content = {"success": False, "message": message, "code": error_code}
    if details:
        content["details"] = details

    # Add request ID if available
    if hasattr(request.state, "request_id"):
        content["request_id"] = request.state.request_id

    return JSONResponse(status_code=status_code, content=content)


async def quiz_app_exception_handler(request: Request, exc: QuizAppException) -> JSONResponse:
    """Handle application exceptions"""
    log = logger.error if exc.status_code >= 500 else logger.info
    log(
        f"Application exception: {exc.message}",
        extra={
            "error_code": exc.error_code,
            "status_code": exc.status_code,
            "path": request.url.path,
        },
    )

    if settings.SENTRY_DSN and exc.status_code >= 500:
        sentry_sdk.capture_exception(exc)

    return create_error_response(
        request=request,
        status_code=exc.status_code,
        error_code=exc.error_code,
        message=exc.message,
        details=exc.details,
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle FastAPI HTTP exceptions"""
    logger.warning(
        f"HTTP exception: {exc.detail}",
        extra={"status_code": exc.status_code, "path": request.url.path},
    )

    return create_error_response(
        request=request,
        status_code=exc.status_code,
        error_code="HTTP_ERROR",
        message=str(exc.detail),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle request body/query validation errors as 400"""
    errors = []
    for error in exc.errors():
        errors.append(
            {
                "field": ".".join(str(loc) for loc in error["loc"]),
                "message": error["msg"],
                "type": error["type"],
            }
        )

    logger.info("Validation error", extra={"errors": errors, "path": request.url.path})

    return create_error_response(
        request=request,
        status_code=status.HTTP_400_BAD_REQUEST,
        error_code="VALIDATION_ERROR",
        message="Données invalides.",
        details=errors,
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions without leaking internals"""
    logger.error(
        f"Unexpected error: {str(exc)}",
        extra={"exception_type": type(exc).__name__, "path": request.url.path},
        exc_info=True,
    )

    if settings.SENTRY_DSN:
        sentry_sdk.capture_exception(exc)

    return create_error_response(
        request=request,
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_code="INTERNAL_ERROR",
        message="Erreur serveur.",
    )


def register_exception_handlers(app):
    """
    Register all exception handlers with the FastAPI app

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(QuizAppException, quiz_app_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    # Catch-all handler for unexpected exceptions
    app.add_exception_handler(Exception, generic_exception_handler)

    logger.info("Exception handlers registered")
