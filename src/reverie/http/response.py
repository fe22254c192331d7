"""HTTP response with the chainable ``.with_*()`` API.

Each transformation returns a new Response. ``response()`` and
``respond()`` are the usual way to build one inside a handler::

    async def hello(request):
        return await respond("Hello!", headers={"Content-Type": "text/plain"})
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Self

from reverie.http.cookies import SetCookie
from reverie.http.headers import Headers, as_headers
from reverie.http.message import Message
from reverie.http.status import Status, status_to_reason, to_status

HeadersLike = Headers | Mapping[str, str] | Iterable[tuple[str, str]]


@dataclass(frozen=True, slots=True, kw_only=True, eq=False)
class Response(Message):
    """An HTTP response built through immutable transformations."""

    status: int = 200

    @property
    def reason(self) -> str | None:
        """Standard reason phrase for the status, ``None`` for unknown codes."""
        return status_to_reason(self.status)

    def with_status(self, status: Status | int) -> Self:
        """Return a new Response with a different status code."""
        return self._derive(status=to_status(int(status)))

    def add_set_cookie(
        self,
        name: str,
        value: str,
        *,
        expires: datetime | None = None,
        max_age: int | None = None,
        path: str | None = "/",
        domain: str | None = None,
        secure: bool = False,
        http_only: bool = True,
        same_site: str | None = "Lax",
    ) -> Self:
        """Return a new Response with an additional ``Set-Cookie`` header."""
        cookie = SetCookie(
            name=name,
            value=value,
            expires=expires,
            max_age=max_age,
            path=path,
            domain=domain,
            secure=secure,
            http_only=http_only,
            same_site=same_site,
        )
        return self.add_header("Set-Cookie", cookie.to_header_value())

    def drop_cookie(self, name: str, *, path: str | None = "/", domain: str | None = None) -> Self:
        """Return a new Response telling the client to delete a cookie (Max-Age=0)."""
        return self.add_set_cookie(name, "", max_age=0, path=path, domain=domain)


def response(
    body: str | bytes = "",
    *,
    status: Status | int | None = None,
    code: int | None = None,
    headers: HeadersLike = (),
    set_content_length: bool = True,
) -> Response:
    """Build a response.

    *status* wins over *code* when both are given; with neither the
    status is 200. ``Content-Length`` is set from the body unless
    *set_content_length* is false.
    """
    if status is None:
        status = Status.OK if code is None else code
    initial = Response(status=to_status(int(status)), headers=as_headers(headers))
    return initial.with_body(body, set_content_length=set_content_length)


async def respond(
    body: str | bytes = "",
    *,
    status: Status | int | None = None,
    code: int | None = None,
    headers: HeadersLike = (),
    set_content_length: bool = True,
) -> Response:
    """``response()`` for handlers that want to ``return await respond(...)``."""
    return response(
        body,
        status=status,
        code=code,
        headers=headers,
        set_content_length=set_content_length,
    )


def html(body: str, *, status: Status | int | None = None, headers: HeadersLike = ()) -> Response:
    """A ``text/html`` response."""
    return response(body, status=status, headers=headers).with_header(
        "Content-Type", "text/html; charset=utf-8"
    )


def json(body: str, *, status: Status | int | None = None, headers: HeadersLike = ()) -> Response:
    """An ``application/json`` response. *body* is already-serialized JSON."""
    return response(body, status=status, headers=headers).with_header(
        "Content-Type", "application/json"
    )


def redirect(location: str, *, status: Status | int = Status.SEE_OTHER) -> Response:
    """A redirect to *location*, ``303 See Other`` by default."""
    return response(status=status, headers=[("Location", location)])


def empty(status: Status | int) -> Response:
    """A response with no body."""
    return response(status=status)
