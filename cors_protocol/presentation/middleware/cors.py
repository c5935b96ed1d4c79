"""CORS middleware for Starlette and FastAPI applications.

Applies the same decoration as :func:`cors_protocol.with_cors` to every
request reaching the application, using ``call_next`` as the wrapped handler.
"""

from collections.abc import Awaitable, Callable
from typing import Any

from starlette.applications import Starlette
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from cors_protocol.domain.options import CorsOptions
from cors_protocol.infrastructure.config import Settings, get_settings
from cors_protocol.presentation.handlers import build_options, process_request


class CorsMiddleware(BaseHTTPMiddleware):
    """Add CORS response headers and answer preflight requests.

    Example:
        >>> app = FastAPI()
        >>> app.add_middleware(CorsMiddleware, allow_origin="*", max_age=600)
    """

    def __init__(self, app: ASGIApp, options: CorsOptions | None = None, **option_fields: Any):
        super().__init__(app)
        self.options = build_options(options, **option_fields)

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        """Run CORS processing around the rest of the application."""
        return await process_request(call_next, request, self.options)


def setup_cors(app: Starlette, settings: Settings | None = None, **overrides: Any) -> None:
    """Configure CORS middleware from settings.

    Args:
        app: Starlette or FastAPI application
        settings: Settings to read ``CORS_*`` values from (defaults to the
            cached environment settings)
        **overrides: ``CorsOptions`` fields taking precedence over settings
    """
    settings = settings or get_settings()
    app.add_middleware(CorsMiddleware, options=CorsOptions.from_settings(settings, **overrides))
