"""Handler and middleware types.

A handler is an async function from request to response::

    async def hello(request: Request) -> Response: ...

A middleware transforms a handler into a wrapped handler::

    def timing(inner: Handler) -> Handler:
        async def wrapped(request: Request) -> Response:
            start = time.monotonic()
            response = await inner(request)
            return response.with_header("X-Time", f"{time.monotonic() - start:.3f}")
        return wrapped

Writing that closure by hand is rarely necessary: ``middleware()`` turns
any ``(request, next)`` callable into one. No base class required. The
framework checks the shape, not the lineage.
"""

from collections.abc import Awaitable, Callable
from typing import Protocol, TypeAlias

from reverie.http.request import Request
from reverie.http.response import Response

# Anything that can answer a request
Handler: TypeAlias = Callable[[Request], Awaitable[Response]]

# Handler -> handler
Middleware: TypeAlias = Callable[[Handler], Handler]

# The inner handler as seen by a (request, next) middleware
Next: TypeAlias = Handler


class Link(Protocol):
    """Protocol for ``(request, next)`` middleware.

    Accepts both functions and callable objects::

        # Function middleware
        async def powered_by(request: Request, next: Next) -> Response:
            response = await next(request)
            return response.with_header("X-Powered-By", "reverie")

        # Class middleware
        class RateLimiter:
            async def __call__(self, request: Request, next: Next) -> Response:
                ...
    """

    async def __call__(self, request: Request, next: Next) -> Response: ...
