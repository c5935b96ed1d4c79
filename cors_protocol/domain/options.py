"""Declarative CORS options and their normalized header definitions.

Each header option accepts a literal or a callable. Literals are coerced to
their wire representation once; callables are evaluated per request with an
explicit, read-only context built from clones of the request and response.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from starlette.datastructures import MutableHeaders
from starlette.requests import Request
from starlette.responses import Response

from cors_protocol.domain.exceptions import CorsConfigurationError
from cors_protocol.infrastructure.logging.config import get_logger


if TYPE_CHECKING:
    from cors_protocol.infrastructure.config import Settings


logger = get_logger(__name__)

# Request handler, sync or async
Handler = Callable[[Request], Response | Awaitable[Response]]

# Literal option value or a computation returning one (possibly awaitable)
OptionValue = str | int | float | bool | Callable[..., Any] | None


class MergeStrategy(str, Enum):
    """How computed ``Access-Control-*`` headers combine with existing ones."""

    OVERWRITE = "overwrite"
    APPEND = "append"


@dataclass(frozen=True)
class SimpleRequestContext:
    """Context passed to computations for a cross-origin simple request.

    Attributes:
        request: Clone of the inbound request, body readable
        response: Clone of the wrapped handler's response with its own body
        handler: The wrapped handler, so a hook can call it again
    """

    request: Request
    response: Response
    handler: Handler | None = None


@dataclass(frozen=True)
class PreflightContext:
    """Context passed to computations for a preflight request.

    Attributes:
        request: Clone of the inbound request, body readable
        response: Clone of the handler's response, only when the handler is
            invoked on preflight
        handler: The wrapped handler
    """

    request: Request
    response: Response | None = None
    handler: Handler | None = None


SimpleRequestHook = Callable[
    [MutableHeaders, SimpleRequestContext], Response | Awaitable[Response]
]
PreflightHook = Callable[[MutableHeaders, PreflightContext], Response | Awaitable[Response]]


@dataclass(frozen=True)
class StaticValue:
    """A literal option value, already in wire form (None means no value)."""

    value: str | None


@dataclass(frozen=True)
class DynamicValue:
    """An option value computed per request."""

    compute: Callable[..., Any]


HeaderDefinition = StaticValue | DynamicValue


def to_field_value(value: Any, option: str = "value") -> str | None:
    """Coerce an option value to its header field representation.

    ``True`` renders as ``"true"``, integers and integral floats as decimal
    strings. ``None`` and ``False`` mean no value. Any other type is logged and
    treated as no value.

    Args:
        value: Literal value or result of a computation
        option: Option name, used for logging

    Returns:
        Header value, or None when the header should fall back or be omitted

    Example:
        >>> to_field_value(True)
        'true'
        >>> to_field_value(600.0)
        '600'
    """
    if value is None or value is False:
        return None
    if value is True:
        return "true"
    if isinstance(value, str):
        return value
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else str(value)

    logger.warning(
        "invalid_cors_option",
        option=option,
        value_type=type(value).__name__,
    )
    return None


def to_definition(value: OptionValue, option: str = "value") -> HeaderDefinition:
    """Normalize an option value into a static or dynamic definition."""
    if callable(value):
        return DynamicValue(compute=value)
    return StaticValue(value=to_field_value(value, option))


@dataclass(frozen=True)
class CorsOptions:
    """CORS configuration, built once and shared read-only by all requests.

    Header options (all optional):
        allow_origin: ``Access-Control-Allow-Origin``; defaults to the request
            ``Origin``. Callable form: ``fn(origin, context)``.
        allow_credentials: ``Access-Control-Allow-Credentials``; omitted by
            default. Callable form: ``fn(context)``.
        allow_methods: ``Access-Control-Allow-Methods`` (preflight only);
            defaults to ``Access-Control-Request-Method``. Callable form:
            ``fn(request_method, context)``.
        allow_headers: ``Access-Control-Allow-Headers`` (preflight only);
            defaults to ``Access-Control-Request-Headers``. Callable form:
            ``fn(request_headers, context)``.
        expose_headers: ``Access-Control-Expose-Headers`` (simple only);
            omitted by default. Callable form: ``fn(context)``.
        max_age: ``Access-Control-Max-Age`` (preflight only); omitted by
            default. Callable form: ``fn(context)``.

    Behaviour options:
        on_simple_request: Builds the final simple response from the resolved
            headers instead of merging them onto the handler's response.
        on_preflight_request: Builds the final preflight response from the
            resolved headers instead of the default 204.
        merge_strategy: Whether resolved ``Access-Control-*`` headers replace
            or are appended to headers the handler already set.
        invoke_handler_on_preflight: Call the handler on preflight and compose
            its headers with the resolved ones.
        catch_handler_errors: Turn failures into a bare 500 response instead
            of propagating them.
    """

    allow_origin: OptionValue = None
    allow_credentials: OptionValue = None
    allow_methods: OptionValue = None
    allow_headers: OptionValue = None
    expose_headers: OptionValue = None
    max_age: OptionValue = None

    on_simple_request: SimpleRequestHook | None = None
    on_preflight_request: PreflightHook | None = None
    merge_strategy: MergeStrategy = MergeStrategy.OVERWRITE
    invoke_handler_on_preflight: bool = False
    catch_handler_errors: bool = False

    def __post_init__(self) -> None:
        """Validate behaviour options and normalize the merge strategy."""
        try:
            strategy = MergeStrategy(self.merge_strategy)
        except ValueError as e:
            raise CorsConfigurationError(
                f"Unknown merge strategy: {self.merge_strategy!r}",
                details={"allowed": [s.value for s in MergeStrategy]},
            ) from e
        object.__setattr__(self, "merge_strategy", strategy)

        for name in ("on_simple_request", "on_preflight_request"):
            hook = getattr(self, name)
            if hook is not None and not callable(hook):
                raise CorsConfigurationError(
                    f"{name} must be callable",
                    details={"type": type(hook).__name__},
                )

    @classmethod
    def from_settings(cls, settings: "Settings", **overrides: Any) -> "CorsOptions":
        """Build options from environment settings.

        Args:
            settings: Loaded settings
            **overrides: Option fields taking precedence over settings
                (hooks and computed values cannot come from the environment)

        Returns:
            CorsOptions instance
        """

        def join(values: list[str] | None) -> str | None:
            return ", ".join(values) if values else None

        fields: dict[str, Any] = {
            "allow_origin": settings.cors_allow_origin,
            "allow_credentials": settings.cors_allow_credentials,
            "allow_methods": join(settings.cors_allow_methods),
            "allow_headers": join(settings.cors_allow_headers),
            "expose_headers": join(settings.cors_expose_headers),
            "max_age": settings.cors_max_age,
            "merge_strategy": settings.cors_merge_strategy,
            "catch_handler_errors": settings.cors_catch_handler_errors,
        }
        fields.update(overrides)
        return cls(**fields)
