"""
Unit tests for middleware components.
"""

from __future__ import annotations

import pytest
import structlog
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from vacation_booking.middleware import RequestIDMiddleware


@pytest.fixture
def client() -> TestClient:
    """FastAPI test client with RequestIDMiddleware."""
    app = FastAPI()
    app.add_middleware(RequestIDMiddleware)

    @app.get("/test")
    async def test_endpoint(request: Request) -> dict[str, object]:
        """Test endpoint that returns the request ID and bound log context."""
        return {
            "request_id": request.state.request_id,
            "log_context": structlog.contextvars.get_contextvars(),
        }

    return TestClient(app)


@pytest.mark.unit
def test_request_id_middleware_adds_header(client: TestClient) -> None:
    """Test that RequestIDMiddleware adds X-Request-ID header to response."""
    response = client.get("/test")

    assert response.status_code == 200
    assert len(response.headers["X-Request-ID"]) == 36  # UUID length


@pytest.mark.unit
def test_request_id_matches_header_and_state(client: TestClient) -> None:
    """Test that request ID in header matches request ID in state."""
    response = client.get("/test")

    assert response.headers["X-Request-ID"] == response.json()["request_id"]


@pytest.mark.unit
def test_request_id_unique_per_request(client: TestClient) -> None:
    """Test that each request gets a unique request ID."""
    first = client.get("/test").headers["X-Request-ID"]
    second = client.get("/test").headers["X-Request-ID"]

    assert first != second


@pytest.mark.unit
def test_incoming_request_id_is_reused(client: TestClient) -> None:
    """Test that an upstream X-Request-ID is propagated."""
    response = client.get("/test", headers={"X-Request-ID": "edge-abc-123"})

    assert response.headers["X-Request-ID"] == "edge-abc-123"
    assert response.json()["request_id"] == "edge-abc-123"


@pytest.mark.unit
def test_request_id_bound_to_log_context(client: TestClient) -> None:
    """Test that log events inside the request carry the request ID."""
    response = client.get("/test")

    assert response.json()["log_context"] == {"request_id": response.headers["X-Request-ID"]}
