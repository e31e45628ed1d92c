"""
Unit tests for the error handler middleware.
"""

from unittest.mock import Mock

from fastapi import FastAPI
from fastapi.testclient import TestClient

from photohub.domain.models.base import (
    EntityNotFoundError,
    UnauthorizedToEdit,
    UnsupportedOperationError,
    ValidationError,
)
from photohub.infrastructure.auth.oauth_client import OAuthError
from photohub.infrastructure.authz.policy_client import PolicyServerError
from photohub.infrastructure.storage.image_storage import ImageStorageError
from photohub.infrastructure.web.middleware.error_handler import ErrorHandlerMiddleware


class TestFormatErrorResponse:
    """Test cases for mapping exceptions to responses."""

    def setup_method(self):
        self.middleware = ErrorHandlerMiddleware(Mock())

    def test_validation_error(self):
        """Test that validation errors are 400 with the offending field."""
        response = self.middleware.format_error_response(ValidationError("Bad title", field="title"))

        assert response["status_code"] == 400
        assert response["field"] == "title"
        assert response["code"] == "VALIDATION_ERROR"

    def test_not_found(self):
        """Test that missing entities are 404."""
        response = self.middleware.format_error_response(EntityNotFoundError("Photo", "42"))

        assert response["status_code"] == 404
        assert response["message"] == "Photo with id 42 not found"

    def test_denied(self):
        """Test that policy denials are 403."""
        response = self.middleware.format_error_response(UnauthorizedToEdit("Album", "7"))

        assert response["status_code"] == 403
        assert response["code"] == "UNAUTHORIZED_TO_EDIT"

    def test_unsupported_operation(self):
        """Test that refused operations are 501."""
        response = self.middleware.format_error_response(UnsupportedOperationError("No transforms"))

        assert response["status_code"] == 501
        assert response["code"] == "UNSUPPORTED_OPERATION"

    def test_policy_server_error(self):
        """Test that authorization outages are 503 without internals."""
        response = self.middleware.format_error_response(PolicyServerError("connect timeout to 10.0.0.3"))

        assert response["status_code"] == 503
        assert "10.0.0.3" not in response["message"]

    def test_upstream_errors(self):
        """Test that storage and identity provider failures are 502."""
        assert self.middleware.format_error_response(ImageStorageError("s3"))["status_code"] == 502
        assert self.middleware.format_error_response(OAuthError("idp"))["status_code"] == 502

    def test_unexpected_error(self):
        """Test that anything else is a generic 500."""
        response = self.middleware.format_error_response(RuntimeError("secret detail"))

        assert response["status_code"] == 500
        assert "secret detail" not in response["message"]


class TestErrorHandlerMiddleware:
    """Test cases for the middleware in a running app."""

    def test_uncaught_exception_becomes_json(self):
        """Test that a route raising is answered with a JSON error body."""
        app = FastAPI()
        app.add_middleware(ErrorHandlerMiddleware)

        @app.get("/boom")
        async def boom():
            raise EntityNotFoundError("Album", "1")

        response = TestClient(app).get("/boom")

        assert response.status_code == 404
        assert response.json()["error"] == "Not Found"
