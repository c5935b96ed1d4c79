"""Handler decoration and ASGI middleware."""
