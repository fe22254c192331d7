"""Route builders.

::

    routes = [
        get("/", index),
        scope("/api", [middleware(require_token)], [
            get("/users/:id", show_user),
            post("/users", create_user),
        ]),
        any_method("/static/**", static_files),
    ]
"""

from collections.abc import Iterable

from reverie.http.method import Method
from reverie.middleware.protocol import Handler, Middleware
from reverie.routing.route import Route, RouteTree, Scope


def get(pattern: str, handler: Handler) -> Route:
    return Route(Method.GET, pattern, handler)


def post(pattern: str, handler: Handler) -> Route:
    return Route(Method.POST, pattern, handler)


def put(pattern: str, handler: Handler) -> Route:
    return Route(Method.PUT, pattern, handler)


def delete(pattern: str, handler: Handler) -> Route:
    return Route(Method.DELETE, pattern, handler)


def head(pattern: str, handler: Handler) -> Route:
    return Route(Method.HEAD, pattern, handler)


def connect(pattern: str, handler: Handler) -> Route:
    return Route(Method.CONNECT, pattern, handler)


def options(pattern: str, handler: Handler) -> Route:
    return Route(Method.OPTIONS, pattern, handler)


def trace(pattern: str, handler: Handler) -> Route:
    return Route(Method.TRACE, pattern, handler)


def patch(pattern: str, handler: Handler) -> Route:
    return Route(Method.PATCH, pattern, handler)


def any_method(pattern: str, handler: Handler) -> Route:
    """A route that matches every method."""
    return Route(None, pattern, handler)


def scope(prefix: str, middlewares: Iterable[Middleware], routes: Iterable[RouteTree]) -> Scope:
    """Group *routes* under *prefix*, each wrapped in *middlewares*."""
    return Scope(prefix, tuple(middlewares), tuple(routes))
