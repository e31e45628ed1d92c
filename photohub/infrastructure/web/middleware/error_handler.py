"""
Global error handler middleware for the FastAPI application.
Catches and formats all exceptions consistently.
"""

import logging
import traceback
from typing import Any, Dict

from fastapi import status
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from photohub.config import settings
from photohub.domain.models.base import (
    AuthorizationDenied,
    DomainException,
    EntityNotFoundError,
    UnsupportedOperationError,
    ValidationError,
)
from photohub.infrastructure.auth.oauth_client import OAuthError
from photohub.infrastructure.authz.policy_client import PolicyServerError
from photohub.infrastructure.storage.image_storage import ImageStorageError

logger = logging.getLogger(__name__)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Middleware to handle all uncaught exceptions and format error responses.
    """

    async def dispatch(self, request: Request, call_next):
        """
        Process the request and handle any exceptions.
        """
        try:
            response = await call_next(request)
            return response
        except Exception as exc:
            return await self.handle_exception(request, exc)

    async def handle_exception(self, request: Request, exc: Exception) -> JSONResponse:
        """
        Handle different types of exceptions and return appropriate responses.
        """
        error_response = self.format_error_response(exc)
        status_code = error_response["status_code"]

        log_context = {
            "request_path": request.url.path,
            "request_method": request.method,
            "client_host": request.client.host if request.client else None
        }
        if status_code >= 500:
            logger.error(
                f"Unhandled exception: {type(exc).__name__}: {str(exc)}",
                exc_info=True,
                extra=log_context
            )
        else:
            logger.info(f"{type(exc).__name__}: {str(exc)}", extra=log_context)

        # In development, add more debug information
        if settings.debug:
            error_response["debug"] = {
                "exception_type": type(exc).__name__,
                "traceback": traceback.format_exc().split("\n")
            }

        return JSONResponse(
            status_code=status_code,
            content=error_response
        )

    def format_error_response(self, exc: Exception) -> Dict[str, Any]:
        """
        Format exception into a consistent error response structure.
        """
        # Default error response
        error_response = {
            "error": "Internal Server Error",
            "message": "An unexpected error occurred",
            "status_code": status.HTTP_500_INTERNAL_SERVER_ERROR
        }

        if isinstance(exc, ValidationError):
            error_response.update({
                "error": "Bad Request",
                "message": exc.message,
                "code": exc.code,
                "status_code": status.HTTP_400_BAD_REQUEST
            })
            if exc.field:
                error_response["field"] = exc.field
        elif isinstance(exc, EntityNotFoundError):
            error_response.update({
                "error": "Not Found",
                "message": exc.message,
                "code": exc.code,
                "status_code": status.HTTP_404_NOT_FOUND
            })
        elif isinstance(exc, AuthorizationDenied):
            error_response.update({
                "error": "Forbidden",
                "message": exc.message,
                "code": exc.code,
                "status_code": status.HTTP_403_FORBIDDEN
            })
        elif isinstance(exc, UnsupportedOperationError):
            error_response.update({
                "error": "Not Implemented",
                "message": exc.message,
                "code": exc.code,
                "status_code": status.HTTP_501_NOT_IMPLEMENTED
            })
        elif isinstance(exc, DomainException):
            error_response.update({
                "error": "Bad Request",
                "message": exc.message,
                "code": exc.code,
                "status_code": status.HTTP_400_BAD_REQUEST
            })
        elif isinstance(exc, PolicyServerError):
            error_response.update({
                "error": "Service Unavailable",
                "message": "Authorization service unavailable",
                "status_code": status.HTTP_503_SERVICE_UNAVAILABLE
            })
        elif isinstance(exc, (OAuthError, ImageStorageError)):
            error_response.update({
                "error": "Bad Gateway",
                "message": "An upstream service failed",
                "status_code": status.HTTP_502_BAD_GATEWAY
            })
        elif isinstance(exc, TimeoutError):
            error_response.update({
                "error": "Request Timeout",
                "message": "The request took too long to process",
                "status_code": status.HTTP_408_REQUEST_TIMEOUT
            })

        return error_response
