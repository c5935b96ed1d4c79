"""Header names and fixed values of the CORS wire contract."""


class CorsHeaders:
    """Response headers set by CORS resolution.

    Names are lowercase, matching what Starlette emits on the wire.
    """

    ALLOW_ORIGIN = "access-control-allow-origin"
    ALLOW_CREDENTIALS = "access-control-allow-credentials"
    ALLOW_METHODS = "access-control-allow-methods"
    ALLOW_HEADERS = "access-control-allow-headers"
    EXPOSE_HEADERS = "access-control-expose-headers"
    MAX_AGE = "access-control-max-age"

    PREFIX = "access-control-"


class RequestHeaders:
    """Request headers inspected by the classifier."""

    ORIGIN = "origin"
    REQUEST_METHOD = "access-control-request-method"
    REQUEST_HEADERS = "access-control-request-headers"


class FieldNames:
    """General HTTP field names."""

    VARY = "vary"
    CONTENT_LENGTH = "content-length"
    CONTENT_TYPE = "content-type"


class VaryValues:
    """Vary values for CORS responses (exact spelling is part of the contract)."""

    SIMPLE = "origin"
    PREFLIGHT = "origin, access-control-request-headers, access-control-request-methods"


# Schemes with a tuple origin; anything else serializes to the opaque origin
SPECIAL_SCHEME_PORTS: dict[str, int | None] = {
    "http": 80,
    "https": 443,
    "ws": 80,
    "wss": 443,
    "ftp": 21,
}

OPAQUE_ORIGIN = "null"

PREFLIGHT_METHOD = "OPTIONS"

# Headers that describe a body and must not appear on empty responses
FRAMING_HEADERS = (FieldNames.CONTENT_LENGTH, FieldNames.CONTENT_TYPE)
