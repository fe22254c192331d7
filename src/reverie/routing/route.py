"""Route tree nodes and their compiled form."""

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import TypeAlias

from reverie.http.method import AnyMethod
from reverie.middleware.protocol import Handler, Middleware


class SegmentKind(Enum):
    LITERAL = "literal"
    PARAM = "param"
    CATCH_ALL = "catch_all"


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed segment of a route pattern.

    Literal:   ``users``  (kind=LITERAL, value="users")
    Param:     ``:id``    (kind=PARAM, value="id")
    Catch-all: ``**``     (kind=CATCH_ALL, must be last)
    """

    kind: SegmentKind
    value: str = ""


@dataclass(frozen=True, slots=True)
class Route:
    """A leaf of the route tree: one method, one pattern, one handler.

    ``method=None`` matches any method.
    """

    method: AnyMethod | None
    pattern: str
    handler: Handler


@dataclass(frozen=True, slots=True)
class Scope:
    """An inner node of the route tree.

    Applies *prefix* and *middlewares* to every route below it.
    Middlewares run outermost first, and outer scopes wrap inner ones.
    """

    prefix: str
    middlewares: tuple[Middleware, ...]
    routes: tuple["RouteTree", ...]


RouteTree: TypeAlias = Route | Scope


@dataclass(frozen=True, slots=True)
class CompiledRoute:
    """A route flattened out of the tree, with its scope middlewares applied.

    Created once when the router is built.
    """

    method: AnyMethod | None
    pattern: str
    segments: tuple[PathSegment, ...]
    handler: Handler

    @property
    def is_catch_all(self) -> bool:
        return bool(self.segments) and self.segments[-1].kind is SegmentKind.CATCH_ALL


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route match.

    *consumed* and *rest* are only meaningful for catch-all routes: the
    segments the pattern matched and the ones left for a nested router.
    """

    route: CompiledRoute
    crumbs: dict[str, str]
    consumed: Sequence[str] = ()
    rest: Sequence[str] = ()
