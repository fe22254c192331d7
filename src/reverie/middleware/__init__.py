"""Middleware: handler-to-handler functions, composed with ``pipeline``.

A handler is ``async def handler(request) -> Response``. A middleware
takes a handler and returns a wrapped one. ``middleware()`` builds one
from a ``(request, next)`` callable.

Built-in middleware:
    logger -- Request/response logging
    sessions -- Server-side sessions keyed by a signed cookie
    sessions_in_memory -- ``sessions`` with an in-memory table per app
"""

from reverie.middleware.logger import logger
from reverie.middleware.pipeline import identity, middleware, pipeline
from reverie.middleware.protocol import Handler, Link, Middleware, Next
from reverie.middleware.sessions import sessions, sessions_in_memory

__all__ = [
    "Handler",
    "Link",
    "Middleware",
    "Next",
    "identity",
    "logger",
    "middleware",
    "pipeline",
    "sessions",
    "sessions_in_memory",
]
