"""Combining resolved CORS headers with a response's existing headers."""

from starlette.datastructures import Headers, MutableHeaders

from cors_protocol.domain.options import MergeStrategy
from cors_protocol.infrastructure.constants import FRAMING_HEADERS, CorsHeaders, FieldNames


def _split_tokens(value: str) -> list[str]:
    return [token.strip() for token in value.split(",") if token.strip()]


def _merge_vary(headers: MutableHeaders, value: str) -> None:
    """Add Vary tokens not already listed (case-insensitive)."""
    existing = [
        token for line in headers.getlist(FieldNames.VARY) for token in _split_tokens(line)
    ]
    if not existing:
        headers[FieldNames.VARY] = value
        return

    seen = {token.lower() for token in existing}
    missing = [token for token in _split_tokens(value) if token.lower() not in seen]
    headers[FieldNames.VARY] = ", ".join(existing + missing)


def merge_headers(
    computed: Headers,
    existing: Headers,
    strategy: MergeStrategy = MergeStrategy.OVERWRITE,
) -> MutableHeaders:
    """Merge resolved CORS headers onto a response's headers.

    Neither argument is modified. Headers unrelated to CORS pass through from
    ``existing`` unchanged and in order.

    Args:
        computed: Headers produced by resolution
        existing: Headers of the response being decorated
        strategy: For ``Access-Control-*`` headers present on both sides,
            OVERWRITE keeps the computed value and APPEND joins the existing
            and computed values with ``", "``

    Returns:
        New header collection
    """
    merged = MutableHeaders(raw=list(existing.raw))

    for key, value in computed.items():
        if key == FieldNames.VARY:
            _merge_vary(merged, value)
        elif (
            strategy is MergeStrategy.APPEND
            and key.startswith(CorsHeaders.PREFIX)
            and key in merged
        ):
            merged[key] = ", ".join([*merged.getlist(key), value])
        else:
            merged[key] = value

    return merged


def strip_framing_headers(headers: Headers) -> MutableHeaders:
    """Copy ``headers`` without Content-Length and Content-Type.

    Apply only to responses whose body is empty.
    """
    raw = [
        (key, value)
        for key, value in headers.raw
        if key.decode("latin-1").lower() not in FRAMING_HEADERS
    ]
    return MutableHeaders(raw=raw)
