"""CORS protocol support for Starlette request handlers.

Classifies requests as same-origin, cross-origin or preflight, resolves the
``Access-Control-*`` headers from declarative options and merges them onto
the handler's response.
"""

from cors_protocol.app.merge import merge_headers, strip_framing_headers
from cors_protocol.app.resolver import resolve_preflight_headers, resolve_simple_headers
from cors_protocol.domain.classification import (
    CrossOrigin,
    Preflight,
    SameOrigin,
    classify,
    is_cross_origin_request,
    is_preflight_request,
    is_same_origin,
)
from cors_protocol.domain.exceptions import CorsConfigurationError, CorsError
from cors_protocol.domain.options import (
    CorsOptions,
    MergeStrategy,
    PreflightContext,
    SimpleRequestContext,
)
from cors_protocol.infrastructure.constants import CorsHeaders, RequestHeaders, VaryValues
from cors_protocol.infrastructure.logging.config import configure_logging
from cors_protocol.presentation.handlers import cors, with_cors
from cors_protocol.presentation.middleware.cors import CorsMiddleware, setup_cors


__version__ = "0.1.0"

__all__ = [
    "CorsConfigurationError",
    "CorsError",
    "CorsHeaders",
    "CorsMiddleware",
    "CorsOptions",
    "CrossOrigin",
    "MergeStrategy",
    "Preflight",
    "PreflightContext",
    "RequestHeaders",
    "SameOrigin",
    "SimpleRequestContext",
    "VaryValues",
    "classify",
    "configure_logging",
    "cors",
    "is_cross_origin_request",
    "is_preflight_request",
    "is_same_origin",
    "merge_headers",
    "resolve_preflight_headers",
    "resolve_simple_headers",
    "setup_cors",
    "strip_framing_headers",
    "with_cors",
]
