"""Request classification: same-origin, cross-origin, or preflight.

Same-origin is decided by strict comparison of serialized origins
(Fetch Living Standard, 3.2.2 HTTP requests). The ``Origin`` header and the
request URL are both reduced to ``scheme://host[:port]`` and compared. An
``Origin`` header that cannot be parsed is treated as same-origin, so no CORS
headers are applied to it.
"""

from dataclasses import dataclass
from urllib.parse import urlsplit

from starlette.requests import Request

from cors_protocol.infrastructure.constants import (
    OPAQUE_ORIGIN,
    PREFLIGHT_METHOD,
    SPECIAL_SCHEME_PORTS,
    RequestHeaders,
)
from cors_protocol.infrastructure.logging.config import get_logger


logger = get_logger(__name__)


@dataclass(frozen=True)
class SameOrigin:
    """The request is not cross-origin; CORS processing is skipped."""


@dataclass(frozen=True)
class CrossOrigin:
    """A cross-origin simple (actual) request.

    Attributes:
        origin: Raw ``Origin`` header value
    """

    origin: str


@dataclass(frozen=True)
class Preflight:
    """A CORS preflight request.

    Attributes:
        origin: Raw ``Origin`` header value
        request_method: Raw ``Access-Control-Request-Method`` value (may be empty)
        request_headers: Raw ``Access-Control-Request-Headers`` value (may be empty)
    """

    origin: str
    request_method: str
    request_headers: str


Classification = SameOrigin | CrossOrigin | Preflight


def serialize_origin(url: str) -> str | None:
    """Serialize the origin of ``url``.

    Special schemes produce ``scheme://host[:port]`` with the scheme and host
    lowercased and the scheme's default port dropped. Other schemes produce the
    opaque origin ``"null"``.

    Args:
        url: Absolute URL or ``Origin`` header value

    Returns:
        Serialized origin, or None when ``url`` cannot be parsed
    """
    try:
        parts = urlsplit(url)
        port = parts.port
    except ValueError:
        return None

    scheme = parts.scheme.lower()
    if not scheme:
        return None
    if scheme not in SPECIAL_SCHEME_PORTS:
        return OPAQUE_ORIGIN

    host = parts.hostname
    if not host:
        return None
    if ":" in host:
        host = f"[{host}]"

    if port is None or port == SPECIAL_SCHEME_PORTS[scheme]:
        return f"{scheme}://{host}"
    return f"{scheme}://{host}:{port}"


def is_same_origin(left: str, right: str) -> bool:
    """Whether two URLs share scheme, host and port.

    Unparseable input is never same-origin with anything.

    Example:
        >>> is_same_origin("http://localhost:80/a", "http://localhost/b")
        True
        >>> is_same_origin("http://localhost", "http://localhost:8080")
        False
    """
    left_origin = serialize_origin(left)
    right_origin = serialize_origin(right)
    if left_origin is None or right_origin is None:
        return False
    return left_origin == right_origin


def is_cross_origin_request(request: Request) -> bool:
    """Whether the request carries an ``Origin`` different from its own URL."""
    origin = request.headers.get(RequestHeaders.ORIGIN)
    if not origin:
        return False

    if serialize_origin(origin) is None:
        logger.debug("origin_unparseable", origin=origin)
        return False

    return not is_same_origin(origin, str(request.url))


def is_preflight_request(request: Request) -> bool:
    """Whether the request is a CORS preflight.

    A preflight is a cross-origin ``OPTIONS`` request carrying both
    ``Access-Control-Request-Method`` and ``Access-Control-Request-Headers``.
    Empty header values still count as present.
    """
    return (
        request.method.upper() == PREFLIGHT_METHOD
        and RequestHeaders.REQUEST_METHOD in request.headers
        and RequestHeaders.REQUEST_HEADERS in request.headers
        and is_cross_origin_request(request)
    )


def classify(request: Request) -> Classification:
    """Classify a request for CORS processing.

    Args:
        request: Inbound request

    Returns:
        SameOrigin, CrossOrigin or Preflight
    """
    if not is_cross_origin_request(request):
        return SameOrigin()

    headers = request.headers
    origin = headers[RequestHeaders.ORIGIN]

    if is_preflight_request(request):
        return Preflight(
            origin=origin,
            request_method=headers[RequestHeaders.REQUEST_METHOD],
            request_headers=headers[RequestHeaders.REQUEST_HEADERS],
        )

    return CrossOrigin(origin=origin)
