"""Infrastructure layer: configuration, logging and protocol constants."""

__all__ = [
    "config",
    "constants",
    "logging",
]
