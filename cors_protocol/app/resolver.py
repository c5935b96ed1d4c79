"""Resolution of CORS options into concrete response headers.

Required fields (``allow_origin``, and on preflight ``allow_methods`` and
``allow_headers``) fall back to echoing the corresponding request value when
unset or when a computation yields no value. Optional fields are omitted in
that case. ``Vary`` is always emitted, including for a ``*`` origin.
"""

from typing import Any

from starlette.datastructures import MutableHeaders

from cors_protocol.domain.options import (
    CorsOptions,
    OptionValue,
    PreflightContext,
    SimpleRequestContext,
    StaticValue,
    to_definition,
    to_field_value,
)
from cors_protocol.infrastructure.constants import CorsHeaders, FieldNames, VaryValues
from cors_protocol.utils.awaitables import resolve


async def _resolve_required(
    value: OptionValue, default: str, context: Any, option: str
) -> str:
    """Resolve a field that always produces a header."""
    definition = to_definition(value, option)
    if isinstance(definition, StaticValue):
        return definition.value if definition.value is not None else default

    result = await resolve(definition.compute(default, context))
    field_value = to_field_value(result, option)
    return field_value if field_value is not None else default


async def _resolve_optional(value: OptionValue, context: Any, option: str) -> str | None:
    """Resolve a field whose header is omitted when it has no value."""
    definition = to_definition(value, option)
    if isinstance(definition, StaticValue):
        return definition.value

    result = await resolve(definition.compute(context))
    return to_field_value(result, option)


async def resolve_simple_headers(
    options: CorsOptions, origin: str, context: SimpleRequestContext
) -> MutableHeaders:
    """Resolve headers for a cross-origin simple (actual) response.

    Args:
        options: CORS options
        origin: Request ``Origin`` value
        context: Cloned request and handler response

    Returns:
        Access-Control-Allow-Origin, optional Allow-Credentials and
        Expose-Headers, and ``Vary: origin``
    """
    headers = MutableHeaders()
    headers[CorsHeaders.ALLOW_ORIGIN] = await _resolve_required(
        options.allow_origin, origin, context, "allow_origin"
    )

    allow_credentials = await _resolve_optional(
        options.allow_credentials, context, "allow_credentials"
    )
    if allow_credentials is not None:
        headers[CorsHeaders.ALLOW_CREDENTIALS] = allow_credentials

    expose_headers = await _resolve_optional(options.expose_headers, context, "expose_headers")
    if expose_headers is not None:
        headers[CorsHeaders.EXPOSE_HEADERS] = expose_headers

    headers[FieldNames.VARY] = VaryValues.SIMPLE
    return headers


async def resolve_preflight_headers(
    options: CorsOptions,
    origin: str,
    request_method: str,
    request_headers: str,
    context: PreflightContext,
) -> MutableHeaders:
    """Resolve headers for a preflight response.

    Args:
        options: CORS options
        origin: Request ``Origin`` value
        request_method: ``Access-Control-Request-Method`` value
        request_headers: ``Access-Control-Request-Headers`` value
        context: Cloned request (and handler response when invoked)

    Returns:
        Allow-Origin, Allow-Methods, Allow-Headers, optional Allow-Credentials
        and Max-Age, and the preflight ``Vary`` value
    """
    headers = MutableHeaders()
    headers[CorsHeaders.ALLOW_ORIGIN] = await _resolve_required(
        options.allow_origin, origin, context, "allow_origin"
    )
    headers[CorsHeaders.ALLOW_METHODS] = await _resolve_required(
        options.allow_methods, request_method, context, "allow_methods"
    )
    headers[CorsHeaders.ALLOW_HEADERS] = await _resolve_required(
        options.allow_headers, request_headers, context, "allow_headers"
    )

    allow_credentials = await _resolve_optional(
        options.allow_credentials, context, "allow_credentials"
    )
    if allow_credentials is not None:
        headers[CorsHeaders.ALLOW_CREDENTIALS] = allow_credentials

    max_age = await _resolve_optional(options.max_age, context, "max_age")
    if max_age is not None:
        headers[CorsHeaders.MAX_AGE] = max_age

    headers[FieldNames.VARY] = VaryValues.PREFLIGHT
    return headers
