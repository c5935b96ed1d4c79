"""Exceptions raised by the CORS layer.

Only wrap-time configuration mistakes raise. Per-request problems (a malformed
``Origin`` header, an option value of the wrong type) never surface as errors,
so a CORS decoration can not keep the wrapped handler's response from being
returned.
"""

from typing import Any


class CorsError(Exception):
    """Base exception for all CORS-layer errors.

    Attributes:
        code: Machine-readable error code
        message: Human-readable error message
        details: Optional additional error context (dict or list)
    """

    code: str = "CORS_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | list[Any] | None = None) -> None:
        """Initialize CORS exception.

        Args:
            message: Human-readable error description
            details: Optional additional context about the error
        """
        self.message = message
        self.details = details
        super().__init__(self.message)


class CorsConfigurationError(CorsError):
    """Raised when ``CorsOptions`` are built with an unusable value.

    Examples are an unknown merge strategy or a hook that is not callable.
    """

    code = "CORS_CONFIGURATION_ERROR"
