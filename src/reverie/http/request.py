"""Immutable HTTP request.

Frozen metadata plus the shared ``Message`` machinery. Routing state is
part of the request: ``prefix`` is the part of ``target`` already
consumed by the site prefix and by enclosing routers, ``path`` is what
is left for the next one, and the crumbs local holds the path
parameters bound so far.
"""

from dataclasses import dataclass, field
from typing import Self

from reverie._internal.asgi import Receive, Scope, format_client, parse_http_version
from reverie._internal.paths import join_path, join_prefix, split_path
from reverie.errors import MissingCrumb
from reverie.http.body import Body
from reverie.http.cookies import parse_cookies
from reverie.http.headers import Headers
from reverie.http.message import Message
from reverie.http.method import AnyMethod, Method, to_method
from reverie.variables import GlobalStore, Local, default_store, new_local


def _format_crumbs(crumbs: dict[str, str]) -> tuple[str, str]:
    return "crumbs", ", ".join(f"{name}={value}" for name, value in crumbs.items())


crumbs_var: Local[dict[str, str]] = new_local(name="crumbs", debug=_format_crumbs)
"""Path parameters bound by every router the request has passed through."""


@dataclass(frozen=True, slots=True, kw_only=True, eq=False)
class Request(Message):
    """An immutable HTTP request.

    Build one with ``Request.from_asgi`` (the host does) or
    ``reverie.testing.make_request`` (tests do). *path* defaults to
    *target*; afterwards the two only drift apart through
    ``with_prefix``.
    """

    method: AnyMethod = Method.GET
    target: str = "/"
    prefix: str = ""
    path: str = ""
    query: str = ""
    version: tuple[int, int] = (1, 1)
    client: str = ""

    # Store for global variables; owned by the App that created the request
    globals: GlobalStore = field(default=default_store, repr=False)

    def __post_init__(self) -> None:
        Message.__post_init__(self)
        if not self.path:
            object.__setattr__(self, "path", self.target)

    # -- Factory --

    @classmethod
    def from_asgi(
        cls,
        scope: Scope,
        receive: Receive,
        *,
        globals: GlobalStore = default_store,
    ) -> "Request":
        """Create a Request from an ASGI ``http`` scope and receive callable.

        Raises ``KeyError`` or ``ValueError`` for a malformed scope.
        """
        return cls(
            method=to_method(scope["method"]),
            target=scope["path"],
            query=scope.get("query_string", b"").decode("latin-1"),
            version=parse_http_version(scope.get("http_version", "1.1")),
            client=format_client(scope.get("client")),
            headers=Headers.from_asgi(scope.get("headers", ())),
            globals=globals,
            _body=Body.from_asgi(receive),
        )

    # -- Computed properties --

    @property
    def url(self) -> str:
        """Request target with the query string, as the client sent it."""
        if self.query:
            return f"{self.target}?{self.query}"
        return self.target

    # -- Derivation --

    def with_client(self, client: str) -> Self:
        return self._derive(client=client)

    def with_method(self, method: AnyMethod | str) -> Self:
        if isinstance(method, str) and not isinstance(method, Method):
            method = to_method(method)
        return self._derive(method=method)

    def with_version(self, version: tuple[int, int]) -> Self:
        return self._derive(version=version)

    def with_prefix(self, prefix: str, path: str) -> Self:
        """Move the boundary between the consumed prefix and the remaining path.

        Both are normalized: empty segments are dropped, the prefix has
        no trailing slash and the path always starts with one.
        """
        return self._derive(
            prefix=join_prefix(split_path(prefix)),
            path=join_path(split_path(path)),
        )

    # -- Cookies --

    def cookie(self, name: str) -> str | None:
        """Value of the first cookie named *name*, if the client sent one."""
        for key, value in self.all_cookies():
            if key == name:
                return value
        return None

    def all_cookies(self) -> list[tuple[str, str]]:
        """All cookies from every ``Cookie`` header, in request order."""
        return parse_cookies(self.header_list("Cookie"))

    # -- Path parameters --

    def crumb(self, name: str) -> str:
        """Value of the path parameter *name*.

        Raises ``MissingCrumb`` if no route bound it; that is a mismatch
        between the handler and its route pattern.
        """
        crumbs = self.local(crumbs_var) or {}
        try:
            return crumbs[name]
        except KeyError:
            raise MissingCrumb(name, self.target) from None


def crumb(name: str, request: Request) -> str:
    """Functional spelling of ``request.crumb(name)``."""
    return request.crumb(name)
