"""Request-scoped context via ContextVar.

Provides ``request_var``: the current ``Request`` for this task/thread.

Set by the ASGI host around each dispatch and reset afterwards. Outside
a request, accessing it raises ``LookupError``. The log filter reads it
to stamp records with the request id when no request is passed
explicitly.

Thread safety:
    ``ContextVar`` is task-local under asyncio and copied into worker
    threads started with ``anyio.to_thread``. No locks needed.
"""

from contextvars import ContextVar

from reverie.http.request import Request

request_var: ContextVar[Request] = ContextVar("reverie_request")
"""The current request. Set by the ASGI host before dispatch."""


def get_request() -> Request:
    """Return the current request.

    Raises ``LookupError`` if called outside a request context.
    """
    return request_var.get()
