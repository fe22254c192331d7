"""Compiled router with ordered, first-match path matching.

The route tree is flattened when the router is built: scope prefixes
are joined onto their children's patterns and scope middlewares are
composed onto each handler, once. Matching then walks the flat list in
declaration order.
"""

from collections.abc import Iterable

from reverie._internal.paths import split_path
from reverie.errors import ConfigurationError
from reverie.http.request import Request, crumbs_var
from reverie.http.response import Response, response
from reverie.http.status import Status
from reverie.middleware.pipeline import middleware, pipeline
from reverie.middleware.protocol import Middleware, Next
from reverie.routing.route import (
    CompiledRoute,
    PathSegment,
    Route,
    RouteMatch,
    RouteTree,
    Scope,
    SegmentKind,
)


def parse_pattern(pattern: str) -> list[PathSegment]:
    """Parse a route pattern into segments.

    Examples::

        "/users"       -> [PathSegment(LITERAL, "users")]
        "/users/:id"   -> [PathSegment(LITERAL, "users"), PathSegment(PARAM, "id")]
        "/static/**"   -> [PathSegment(LITERAL, "static"), PathSegment(CATCH_ALL)]

    Raises ``ConfigurationError`` for ``:`` without a name and for
    ``{name}`` placeholders.
    """
    segments: list[PathSegment] = []
    for part in split_path(pattern):
        if part == "**":
            segments.append(PathSegment(SegmentKind.CATCH_ALL))
        elif part.startswith(":"):
            name = part[1:]
            if not name:
                msg = f"Route pattern {pattern!r} has a ':' segment without a parameter name."
                raise ConfigurationError(msg)
            segments.append(PathSegment(SegmentKind.PARAM, name))
        elif part.startswith("{") and part.endswith("}"):
            msg = (
                f"Route pattern {pattern!r} uses {part!r}. "
                f"Path parameters are written ':{part[1:-1]}'."
            )
            raise ConfigurationError(msg)
        else:
            segments.append(PathSegment(SegmentKind.LITERAL, part))
    return segments


def _check_catch_all(pattern: str, segments: list[PathSegment]) -> None:
    for seg in segments[:-1]:
        if seg.kind is SegmentKind.CATCH_ALL:
            msg = f"Route pattern {pattern!r} has '**' before its last segment."
            raise ConfigurationError(msg)


def compile_routes(routes: Iterable[RouteTree]) -> list[CompiledRoute]:
    """Flatten a route tree into compiled routes, in declaration order."""
    compiled: list[CompiledRoute] = []
    _flatten(routes, "", [], (), compiled)
    return compiled


def _flatten(
    routes: Iterable[RouteTree],
    prefix: str,
    prefix_segments: list[PathSegment],
    middlewares: tuple[Middleware, ...],
    out: list[CompiledRoute],
) -> None:
    for node in routes:
        match node:
            case Route():
                pattern = prefix + node.pattern
                segments = prefix_segments + parse_pattern(node.pattern)
                _check_catch_all(pattern, segments)
                out.append(
                    CompiledRoute(
                        method=node.method,
                        pattern=pattern,
                        segments=tuple(segments),
                        handler=pipeline(middlewares)(node.handler),
                    )
                )
            case Scope():
                _flatten(
                    node.routes,
                    prefix + node.prefix,
                    prefix_segments + parse_pattern(node.prefix),
                    middlewares + node.middlewares,
                    out,
                )
            case _:
                msg = f"Expected a Route or Scope in the route tree, got {node!r}."
                raise ConfigurationError(msg)


def _match_segments(route: CompiledRoute, parts: list[str]) -> RouteMatch | None:
    crumbs: dict[str, str] = {}
    for i, seg in enumerate(route.segments):
        if seg.kind is SegmentKind.CATCH_ALL:
            return RouteMatch(route, crumbs, consumed=parts[:i], rest=parts[i:])
        if i >= len(parts):
            return None
        if seg.kind is SegmentKind.PARAM:
            crumbs[seg.value] = parts[i]
        elif seg.value != parts[i]:
            return None
    if len(parts) != len(route.segments):
        return None
    return RouteMatch(route, crumbs)


class Router:
    """Compiled router.

    Usage::

        r = Router([get("/echo/:word", echo)])
        match = r.match(request)     # RouteMatch or None

    As a ``(request, next)`` middleware it answers matched requests with
    the route's handler and passes everything else to ``next``.
    """

    __slots__ = ("_routes",)

    def __init__(self, routes: Iterable[RouteTree]) -> None:
        self._routes = tuple(compile_routes(routes))

    @property
    def routes(self) -> tuple[CompiledRoute, ...]:
        """All compiled routes, in matching order."""
        return self._routes

    def match(self, request: Request) -> RouteMatch | None:
        """Find the first route matching the request's method and remaining path."""
        parts = split_path(request.path)
        for route in self._routes:
            if route.method is not None and route.method != request.method:
                continue
            result = _match_segments(route, parts)
            if result is not None:
                return result
        return None

    async def __call__(self, request: Request, next: Next) -> Response:
        found = self.match(request)
        if found is None:
            return await next(request)

        if found.crumbs:
            existing = request.local(crumbs_var) or {}
            request = request.with_local(crumbs_var, {**existing, **found.crumbs})
        if found.route.is_catch_all:
            consumed = "/".join(found.consumed)
            request = request.with_prefix(
                f"{request.prefix}/{consumed}",
                "/".join(found.rest),
            )
        return await found.route.handler(request)


def router(routes: Iterable[RouteTree]) -> Middleware:
    """Build a middleware that dispatches to the first matching route.

    Requests that match no route go to the wrapped handler, so routers
    stack and a final ``not_found`` handler catches the rest::

        app = App(router([get("/", index)])(not_found))

    Invalid patterns raise ``ConfigurationError`` here, not per request.
    """
    return middleware(Router(routes))


async def not_found(request: Request) -> Response:
    """Terminal handler that answers every request with an empty 404."""
    return response(status=Status.NOT_FOUND)
