"""Independent copies of Starlette requests and responses.

Classification, computed option values and the wrapped handler may all need to
look at the same request or response. Copies made here share immutable data
(scope values, body bytes) but never the parts a reader can consume or mutate:
a cloned request replays the buffered body through its own receive channel,
and a cloned response owns its header list and, when streaming, its own body
iterator.
"""

import copy
from collections import deque
from collections.abc import AsyncIterable, AsyncIterator
from typing import Any

from starlette.datastructures import Headers
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import Message, Receive


def _replay(body: bytes) -> Receive:
    """Receive channel delivering ``body`` once, then a disconnect."""
    sent = False

    async def receive() -> Message:
        nonlocal sent
        if sent:
            return {"type": "http.disconnect"}
        sent = True
        return {"type": "http.request", "body": body, "more_body": False}

    return receive


async def clone_request(request: Request) -> Request:
    """Copy a request, including a readable body.

    The original body is buffered on ``request`` first (Starlette caches it),
    so reading the clone never drains the stream the handler reads from.
    """
    body = await request.body()
    return Request(dict(request.scope), _replay(body))


def _tee(iterable: AsyncIterable[Any], n: int = 2) -> tuple[AsyncIterator[Any], ...]:
    """Split an async iterable into ``n`` independent iterators.

    Chunks are pulled from the source lazily and kept until every branch has
    seen them.
    """
    source = iterable.__aiter__()
    buffers: list[deque[Any]] = [deque() for _ in range(n)]

    async def branch(buffer: deque[Any]) -> AsyncIterator[Any]:
        while True:
            if not buffer:
                try:
                    chunk = await source.__anext__()
                except StopAsyncIteration:
                    return
                for pending in buffers:
                    pending.append(chunk)
            yield buffer.popleft()

    return tuple(branch(buffer) for buffer in buffers)


def with_headers(response: Response, headers: Headers) -> Response:
    """Return a new response with ``headers`` and the same body and status.

    Works for any ``Response`` subclass. A streaming body iterator is carried
    over as is; use :func:`tee_response` when both copies will be read.
    ``response`` is not modified.
    """
    clone = copy.copy(response)
    clone.raw_headers = list(headers.raw)
    # Starlette caches a MutableHeaders view bound to the old raw list
    clone.__dict__.pop("_headers", None)
    return clone


def clone_response(response: Response) -> Response:
    """Copy a response so its headers can be inspected without aliasing."""
    return with_headers(response, response.headers)


def tee_response(response: Response) -> tuple[Response, Response]:
    """Two independent copies of ``response``.

    Each copy has its own header list. Streaming responses (including the
    responses ``call_next`` returns inside ``BaseHTTPMiddleware``) get one
    body iterator per copy, so draining one leaves the other intact.
    """
    first, second = clone_response(response), clone_response(response)
    body_iterator = getattr(response, "body_iterator", None)
    if body_iterator is not None:
        branches = _tee(body_iterator)
        first.body_iterator, second.body_iterator = branches  # type: ignore[attr-defined]
    return first, second
