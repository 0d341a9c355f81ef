"""Tests for API middleware and error envelopes."""

import httpx
import pytest
from fastapi import FastAPI

from app.api.middleware import ErrorHandlerMiddleware, RequestIdMiddleware, setup_middleware


class TestRequestIdMiddleware:
    """Tests for request ID correlation middleware."""

    @pytest.mark.asyncio
    async def test_generates_request_id_if_not_provided(self, client: httpx.AsyncClient) -> None:
        """Should generate request ID if not in request headers."""
        response = await client.get("/health")
        assert response.status_code == 200
        assert "X-Request-ID" in response.headers
        # UUID format
        assert len(response.headers["X-Request-ID"]) == 36

    @pytest.mark.asyncio
    async def test_uses_provided_request_id(self, client: httpx.AsyncClient) -> None:
        """Should use request ID from request headers."""
        custom_id = "custom-request-id-12345"
        response = await client.get("/health", headers={"X-Request-ID": custom_id})
        assert response.status_code == 200
        assert response.headers["X-Request-ID"] == custom_id


class TestErrorEnvelope:
    """Tests for error responses."""

    @pytest.mark.asyncio
    async def test_domain_error_carries_request_id(self, client: httpx.AsyncClient) -> None:
        """Domain errors use the standard envelope with the request ID."""
        response = await client.get(
            "/api/categories/missing",
            headers={"X-Request-ID": "req-404"},
        )

        assert response.status_code == 404
        data = response.json()
        assert data["error_code"] == "NOT_FOUND"
        assert data["message"] == "Category not found with id: missing"
        assert data["details"]["field"] == "id"
        assert data["request_id"] == "req-404"

    @pytest.mark.asyncio
    async def test_no_auth_required(self, client: httpx.AsyncClient) -> None:
        """Catalog endpoints are open."""
        response = await client.get("/api/products")
        assert response.status_code == 200


class TestMiddlewareSetup:
    """Tests for middleware ordering."""

    def test_request_id_wraps_error_handler(self) -> None:
        """Request ID middleware runs outside the error handler."""
        app = FastAPI()
        setup_middleware(app)

        order = [middleware.cls for middleware in app.user_middleware]
        assert order == [RequestIdMiddleware, ErrorHandlerMiddleware]
