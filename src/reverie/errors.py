"""Reverie exception hierarchy.

Shared across the router, the middleware and the ASGI host so every
module raises and catches the same types.

Failures of a *request* are not exceptions of this hierarchy: they are
reported to the error dispatcher (``reverie.server.errors``) as ``Error``
records. These classes describe programmer mistakes.
"""


class ReverieError(Exception):
    """Base for all reverie-specific errors."""


class ConfigurationError(ReverieError):
    """Raised when the route tree or app configuration is invalid.

    Route patterns are parsed when ``router()`` is built, so these
    surface at startup rather than on the first request.
    """


class MissingCrumb(ReverieError, LookupError):  # noqa: N818
    """A path parameter was requested that no matched route ever bound.

    ``crumb("id", request)`` inside a handler whose route has no ``:id``
    segment is a logic error, not a recoverable condition.
    """

    def __init__(self, name: str, path: str) -> None:
        self.name = name
        self.path = path
        super().__init__(
            f"Path parameter {name!r} was not captured for {path!r}. "
            f"Check that the route pattern contains ':{name}'."
        )


class ClientDisconnected(ReverieError, ConnectionError):  # noqa: N818
    """The client went away before sending the whole request body.

    Raised from ``await request.body()``; the bytes read so far are not
    returned as if they were the complete body.
    """

    def __init__(self, received: int) -> None:
        self.received = received
        super().__init__(f"Client disconnected after {received} body bytes.")
