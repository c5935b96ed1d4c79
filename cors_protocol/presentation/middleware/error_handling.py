"""Last-resort handling of failures inside a CORS-wrapped handler.

Only used when ``CorsOptions.catch_handler_errors`` is enabled. Otherwise
exceptions propagate so upstream error-handling middleware sees them unchanged.
"""

from starlette import status
from starlette.requests import Request
from starlette.responses import Response

from cors_protocol.infrastructure.logging.config import get_logger


logger = get_logger(__name__)


def handler_failure_response(request: Request, exc: Exception) -> Response:
    """Convert an unexpected exception into a bare 500 response.

    Logs full exception details for debugging and returns a response with no
    body. No CORS headers are attached: the request is not re-classified on
    the failure path.

    Args:
        request: Inbound request
        exc: Exception raised while producing the response

    Returns:
        Empty response with status 500
    """
    logger.exception(
        "cors_handler_failed",
        exception_type=type(exc).__name__,
        error=str(exc),
        method=request.method,
        path=request.url.path,
    )
    return Response(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
