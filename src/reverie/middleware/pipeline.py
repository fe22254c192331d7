"""Composition of middlewares.

``pipeline([a, b, c])(handler)`` is ``a(b(c(handler)))``: ``a`` sees the
request first and the response last. The empty pipeline is ``identity``.
"""

from collections.abc import Iterable

from reverie.http.request import Request
from reverie.http.response import Response
from reverie.middleware.protocol import Handler, Link, Middleware


def identity(handler: Handler) -> Handler:
    """The middleware that does nothing: ``identity(h) is h``."""
    return handler


def pipeline(middlewares: Iterable[Middleware]) -> Middleware:
    """Compose *middlewares* into one, outermost first."""
    chain = tuple(middlewares)
    if not chain:
        return identity
    if len(chain) == 1:
        return chain[0]

    def composed(handler: Handler) -> Handler:
        for mw in reversed(chain):
            handler = mw(handler)
        return handler

    return composed


def middleware(link: Link) -> Middleware:
    """Adapt a ``(request, next)`` callable into a ``Middleware``.

    ::

        async def powered_by(request, next):
            response = await next(request)
            return response.with_header("X-Powered-By", "reverie")

        app = App(pipeline([middleware(powered_by)])(handler))
    """

    def wrap(inner: Handler) -> Handler:
        async def wrapped(request: Request) -> Response:
            return await link(request, inner)

        return wrapped

    return wrap
