"""Helpers for values that may or may not be awaitable."""

import inspect
from typing import Any


async def resolve(value: Any) -> Any:
    """Await ``value`` if it is awaitable, otherwise return it unchanged.

    Lets handlers, hooks and computed option values be plain functions or
    coroutine functions interchangeably.
    """
    if inspect.isawaitable(value):
        return await value
    return value
