"""Handler decoration that adds CORS to any Starlette request handler.

Per request, the wrapper:
1. Classifies the request (same-origin, cross-origin simple, or preflight)
2. Same-origin: returns the handler's response object untouched
3. Simple: calls the handler, resolves simple headers and merges them
4. Preflight: resolves preflight headers and answers 204 without calling
   the handler

Example:
    >>> from starlette.responses import PlainTextResponse
    >>> @cors(allow_credentials=True)
    ... async def hello(request):
    ...     return PlainTextResponse("hello")
"""

import dataclasses
import functools
from collections.abc import Awaitable, Callable
from typing import Any

from starlette import status
from starlette.requests import Request
from starlette.responses import Response

from cors_protocol.app.merge import merge_headers, strip_framing_headers
from cors_protocol.app.resolver import resolve_preflight_headers, resolve_simple_headers
from cors_protocol.domain.classification import CrossOrigin, Preflight, SameOrigin, classify
from cors_protocol.domain.options import (
    CorsOptions,
    Handler,
    MergeStrategy,
    PreflightContext,
    SimpleRequestContext,
)
from cors_protocol.infrastructure.logging.config import get_logger
from cors_protocol.presentation.middleware.error_handling import handler_failure_response
from cors_protocol.utils.awaitables import resolve
from cors_protocol.utils.cloning import clone_request, tee_response, with_headers


logger = get_logger(__name__)

AsyncHandler = Callable[[Request], Awaitable[Response]]


def build_options(options: CorsOptions | None = None, **option_fields: Any) -> CorsOptions:
    """Combine an optional ``CorsOptions`` with keyword overrides."""
    if options is None:
        return CorsOptions(**option_fields)
    if option_fields:
        return dataclasses.replace(options, **option_fields)
    return options


async def _simple_response(
    handler: Handler, request: Request, classification: CrossOrigin, options: CorsOptions
) -> Response:
    # Buffers the body before the handler can consume it as a stream
    context_request = await clone_request(request)
    response, context_response = tee_response(await resolve(handler(request)))
    context = SimpleRequestContext(
        request=context_request,
        response=context_response,
        handler=handler,
    )
    headers = await resolve_simple_headers(options, classification.origin, context)

    if options.on_simple_request is not None:
        return await resolve(options.on_simple_request(headers, context))

    return with_headers(response, merge_headers(headers, response.headers, options.merge_strategy))


async def _preflight_response(
    handler: Handler, request: Request, classification: Preflight, options: CorsOptions
) -> Response:
    context_request = await clone_request(request)
    response = context_response = None
    if options.invoke_handler_on_preflight:
        response, context_response = tee_response(await resolve(handler(request)))

    context = PreflightContext(
        request=context_request,
        response=context_response,
        handler=handler,
    )
    headers = await resolve_preflight_headers(
        options,
        classification.origin,
        classification.request_method,
        classification.request_headers,
        context,
    )

    logger.debug(
        "cors_preflight_handled",
        origin=classification.origin,
        request_method=classification.request_method,
        handler_invoked=response is not None,
    )

    if options.on_preflight_request is not None:
        return await resolve(options.on_preflight_request(headers, context))

    if response is not None:
        headers = merge_headers(headers, response.headers, MergeStrategy.APPEND)

    return Response(status_code=status.HTTP_204_NO_CONTENT, headers=strip_framing_headers(headers))


async def process_request(handler: Handler, request: Request, options: CorsOptions) -> Response:
    """Produce the CORS-decorated response for one request.

    Args:
        handler: Wrapped handler, sync or async
        request: Inbound request, passed to the handler as is
        options: CORS options

    Returns:
        The handler's own response for same-origin requests, otherwise a new
        response carrying the resolved CORS headers
    """
    try:
        classification = classify(request)
        logger.debug(
            "cors_request_classified",
            classification=type(classification).__name__,
            method=request.method,
            path=request.url.path,
        )

        if isinstance(classification, SameOrigin):
            return await resolve(handler(request))
        if isinstance(classification, Preflight):
            return await _preflight_response(handler, request, classification, options)
        return await _simple_response(handler, request, classification, options)
    except Exception as exc:
        if not options.catch_handler_errors:
            raise
        return handler_failure_response(request, exc)


def with_cors(
    handler: Handler, options: CorsOptions | None = None, **option_fields: Any
) -> AsyncHandler:
    """Add CORS to a handler, returning a new async handler.

    Args:
        handler: Function from request to response (sync or async)
        options: Prepared options, shared read-only across requests
        **option_fields: ``CorsOptions`` fields, overriding ``options``

    Returns:
        Async handler with the same signature

    Example:
        >>> async def endpoint(request):
        ...     return Response("ok")
        >>> endpoint = with_cors(endpoint, allow_origin="*", max_age=600)
    """
    resolved_options = build_options(options, **option_fields)

    @functools.wraps(handler)
    async def cors_handler(request: Request) -> Response:
        return await process_request(handler, request, resolved_options)

    return cors_handler


def cors(
    options: CorsOptions | None = None, **option_fields: Any
) -> Callable[[Handler], AsyncHandler]:
    """Decorator form of :func:`with_cors`."""

    def decorator(handler: Handler) -> AsyncHandler:
        return with_cors(handler, options, **option_fields)

    return decorator
