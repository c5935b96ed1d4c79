"""Test data factories for Starlette requests, responses and handlers.

Requests are built directly from an ASGI scope so the classifier and the
decorator can be exercised without a running application.
"""

from collections.abc import Callable
from typing import Any
from urllib.parse import urlsplit

from starlette.requests import Request
from starlette.responses import Response


API_URL = "http://api.test/"
CORS_ORIGIN = "http://cors.test"


def request_factory(
    url: str = API_URL,
    method: str = "GET",
    headers: dict[str, str] | None = None,
    body: bytes = b"",
) -> Request:
    """Factory function for creating Request instances.

    Args:
        url: Absolute request URL (scheme, host, port and path are honoured)
        method: HTTP method
        headers: Request headers (names are lowercased as ASGI requires)
        body: Request body, delivered through the receive channel

    Returns:
        Request instance

    Examples:
        >>> request = request_factory(headers={"Origin": "http://cors.test"})
        >>> request.headers["origin"]
        'http://cors.test'
    """
    parts = urlsplit(url)
    default_port = 443 if parts.scheme in ("https", "wss") else 80
    scope: dict[str, Any] = {
        "type": "http",
        "http_version": "1.1",
        "method": method,
        "scheme": parts.scheme,
        "server": (parts.hostname, parts.port or default_port),
        "path": parts.path or "/",
        "raw_path": (parts.path or "/").encode("latin-1"),
        "query_string": parts.query.encode("latin-1"),
        "root_path": "",
        "client": ("127.0.0.1", 50000),
        "headers": [
            (key.lower().encode("latin-1"), value.encode("latin-1"))
            for key, value in (headers or {}).items()
        ],
    }

    sent = False

    async def receive() -> dict[str, Any]:
        nonlocal sent
        if sent:
            return {"type": "http.disconnect"}
        sent = True
        return {"type": "http.request", "body": body, "more_body": False}

    return Request(scope, receive)


def cors_request_factory(
    url: str = API_URL, origin: str = CORS_ORIGIN, method: str = "GET", **headers: str
) -> Request:
    """Factory function for a cross-origin simple request."""
    return request_factory(url, method=method, headers={"origin": origin, **headers})


def preflight_request_factory(
    url: str = API_URL,
    origin: str = CORS_ORIGIN,
    request_method: str = "POST",
    request_headers: str = "content-type",
) -> Request:
    """Factory function for a preflight request."""
    return request_factory(
        url,
        method="OPTIONS",
        headers={
            "origin": origin,
            "access-control-request-method": request_method,
            "access-control-request-headers": request_headers,
        },
    )


def handler_factory(response: Response | None = None) -> Callable[[Request], Response]:
    """Factory function for a sync handler that records its calls.

    The returned handler exposes ``calls``, the list of requests it received.
    """
    calls: list[Request] = []

    def handler(request: Request) -> Response:
        calls.append(request)
        return response if response is not None else Response()

    handler.calls = calls  # type: ignore[attr-defined]
    return handler


def header_dict(response: Response) -> dict[str, str]:
    """Response headers as a plain dict of lowercase names."""
    return dict(response.headers.items())
