"""Integration tests for the CORS middleware on a FastAPI application."""

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from cors_protocol import CorsMiddleware, setup_cors
from cors_protocol.infrastructure.config import Settings


CORS_ORIGIN = "http://cors.test"
PREFLIGHT_HEADERS = {
    "Origin": CORS_ORIGIN,
    "Access-Control-Request-Method": "POST",
    "Access-Control-Request-Headers": "content-type",
}


def create_app() -> FastAPI:
    """Create a FastAPI application with a few endpoints (no middleware)."""
    test_app = FastAPI()
    test_app.state.calls = 0

    @test_app.get("/items")
    async def list_items(request: Request):
        request.app.state.calls += 1
        return {"items": []}

    @test_app.post("/items")
    async def create_item(request: Request):
        request.app.state.calls += 1
        return await request.json()

    @test_app.get("/fail")
    async def fail():
        raise ValueError("endpoint failed")

    return test_app


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def app() -> FastAPI:
    """Create a test FastAPI application with CORS middleware.

    Returns:
        FastAPI: App instance with CorsMiddleware using default options
    """
    test_app = create_app()
    test_app.add_middleware(CorsMiddleware)
    return test_app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Create a test client for the application.

    Args:
        app: FastAPI application

    Returns:
        TestClient: Test client for making requests
    """
    return TestClient(app)


# ============================================================================
# Test Classes
# ============================================================================


class TestSameOriginRequests:
    """Test requests that are not cross-origin."""

    def test_request_without_origin_has_no_cors_headers(self, client: TestClient) -> None:
        """Test responses to same-origin requests are untouched.

        Arrange: Client with CORS middleware
        Act: GET /items without Origin
        Assert: No Access-Control-* or Vary headers
        """
        # Act
        response = client.get("/items")

        # Assert
        assert response.status_code == 200
        assert "access-control-allow-origin" not in response.headers
        assert "vary" not in response.headers

    def test_origin_of_test_server_is_same_origin(self, client: TestClient) -> None:
        """Test an Origin equal to the server's origin is not cross-origin."""
        response = client.get("/items", headers={"Origin": "http://testserver"})

        assert "access-control-allow-origin" not in response.headers


class TestCrossOriginRequests:
    """Test cross-origin simple requests."""

    def test_echoes_origin(self, client: TestClient) -> None:
        """Test the Origin is echoed with Vary: origin.

        Arrange: Client with default options
        Act: GET /items from another origin
        Assert: Allow-Origin equals Origin, body intact
        """
        # Act
        response = client.get("/items", headers={"Origin": CORS_ORIGIN})

        # Assert
        assert response.status_code == 200
        assert response.json() == {"items": []}
        assert response.headers["access-control-allow-origin"] == CORS_ORIGIN
        assert response.headers["vary"] == "origin"
        assert response.headers["content-type"] == "application/json"

    def test_request_body_reaches_endpoint(self, client: TestClient) -> None:
        """Test CORS processing leaves the request body for the endpoint."""
        response = client.post("/items", json={"name": "a"}, headers={"Origin": CORS_ORIGIN})

        assert response.json() == {"name": "a"}
        assert response.headers["access-control-allow-origin"] == CORS_ORIGIN

    def test_endpoint_error_propagates(self, client: TestClient) -> None:
        """Test endpoint failures are not swallowed by default."""
        with pytest.raises(ValueError, match="endpoint failed"):
            client.get("/fail", headers={"Origin": CORS_ORIGIN})


class TestPreflightRequests:
    """Test preflight handling."""

    def test_preflight_is_answered_by_middleware(self, app: FastAPI, client: TestClient) -> None:
        """Test preflight gets a 204 without reaching the endpoint.

        Arrange: Client with default options
        Act: OPTIONS /items with preflight headers
        Assert: 204, echoed values, endpoint not called
        """
        # Act
        response = client.options("/items", headers=PREFLIGHT_HEADERS)

        # Assert
        assert response.status_code == 204
        assert response.content == b""
        assert response.headers["access-control-allow-origin"] == CORS_ORIGIN
        assert response.headers["access-control-allow-methods"] == "POST"
        assert response.headers["access-control-allow-headers"] == "content-type"
        assert response.headers["vary"] == (
            "origin, access-control-request-headers, access-control-request-methods"
        )
        assert "content-type" not in response.headers
        assert "content-length" not in response.headers
        assert app.state.calls == 0


class TestMiddlewareOptions:
    """Test middleware configuration."""

    def test_keyword_options(self) -> None:
        """Test options passed to add_middleware are applied."""
        # Arrange
        test_app = create_app()
        test_app.add_middleware(CorsMiddleware, allow_origin="*", max_age=600)
        client = TestClient(test_app)

        # Act
        response = client.options("/items", headers=PREFLIGHT_HEADERS)

        # Assert
        assert response.headers["access-control-allow-origin"] == "*"
        assert response.headers["access-control-max-age"] == "600"

    def test_catch_handler_errors(self) -> None:
        """Test endpoint failures become a bare 500 when enabled.

        Arrange: Middleware with catch_handler_errors
        Act: GET /fail from another origin
        Assert: 500 without CORS headers
        """
        # Arrange
        test_app = create_app()
        test_app.add_middleware(CorsMiddleware, catch_handler_errors=True)
        client = TestClient(test_app)

        # Act
        response = client.get("/fail", headers={"Origin": CORS_ORIGIN})

        # Assert
        assert response.status_code == 500
        assert response.content == b""
        assert "access-control-allow-origin" not in response.headers

    def test_computation_reading_response_body_keeps_final_body(self) -> None:
        """Test computations can read the streamed call_next body.

        Arrange: expose_headers computation draining the context response body
        Act: GET /items from another origin
        Assert: Computation saw the body, client receives it intact
        """
        # Arrange
        seen: list[bytes] = []

        async def expose_headers(context) -> str:
            seen.append(b"".join([chunk async for chunk in context.response.body_iterator]))
            return "x-total-count"

        test_app = create_app()
        test_app.add_middleware(CorsMiddleware, expose_headers=expose_headers)
        client = TestClient(test_app)

        # Act
        response = client.get("/items", headers={"Origin": CORS_ORIGIN})

        # Assert
        assert seen == [b'{"items":[]}']
        assert response.json() == {"items": []}
        assert response.headers["access-control-expose-headers"] == "x-total-count"

    def test_computation_reading_request_body(self) -> None:
        """Test computations and the endpoint both read the request body."""

        async def allow_origin(origin: str, context) -> str:
            return origin if (await context.request.json()).get("name") else "null"

        test_app = create_app()
        test_app.add_middleware(CorsMiddleware, allow_origin=allow_origin)
        client = TestClient(test_app)

        response = client.post("/items", json={"name": "a"}, headers={"Origin": CORS_ORIGIN})

        assert response.json() == {"name": "a"}
        assert response.headers["access-control-allow-origin"] == CORS_ORIGIN


class TestSetupCors:
    """Test setup_cors."""

    def test_applies_settings(self) -> None:
        """Test CORS_* settings drive the middleware.

        Arrange: Settings with origin, credentials and methods
        Act: setup_cors, then preflight
        Assert: Configured values returned
        """
        # Arrange
        settings = Settings(
            cors_allow_origin="https://app.test",
            cors_allow_credentials=True,
            cors_allow_methods="GET,POST",
            cors_max_age=300,
        )
        test_app = create_app()
        setup_cors(test_app, settings)
        client = TestClient(test_app)

        # Act
        response = client.options("/items", headers=PREFLIGHT_HEADERS)

        # Assert
        assert response.status_code == 204
        assert response.headers["access-control-allow-origin"] == "https://app.test"
        assert response.headers["access-control-allow-credentials"] == "true"
        assert response.headers["access-control-allow-methods"] == "GET, POST"
        assert response.headers["access-control-max-age"] == "300"

    def test_overrides_take_precedence(self, test_settings: Settings) -> None:
        """Test keyword overrides replace settings values."""
        test_app = create_app()
        setup_cors(test_app, test_settings, expose_headers="x-total-count")
        client = TestClient(test_app)

        response = client.get("/items", headers={"Origin": CORS_ORIGIN})

        assert response.headers["access-control-expose-headers"] == "x-total-count"
        assert "access-control-allow-credentials" not in response.headers
