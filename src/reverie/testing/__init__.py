"""Test utilities for reverie applications.

``make_request`` and ``run_test`` exercise a handler directly, without
an app or ASGI::

    async def test_echo():
        response = await run_test(app_handler, make_request("/echo/foo"))
        assert await response.text() == "foo"

``TestClient`` drives a whole ``App`` through its ASGI interface.
"""

from collections.abc import Iterable

from reverie.http.body import Body
from reverie.http.headers import Headers
from reverie.http.method import AnyMethod, Method, to_method
from reverie.http.request import Request
from reverie.http.response import Response, response
from reverie.http.status import Status
from reverie.middleware.protocol import Handler
from reverie.server.handler import strip_site_prefix
from reverie.testing.client import TestClient
from reverie.variables import GlobalStore, default_store


def make_request(
    target: str = "/",
    *,
    method: AnyMethod | str = Method.GET,
    headers: Iterable[tuple[str, str]] = (),
    body: str | bytes = "",
    client: str = "127.0.0.1:0",
    version: tuple[int, int] = (1, 1),
    globals: GlobalStore = default_store,
) -> Request:
    """Build a request as the host would, for calling handlers in tests.

    A ``?query`` suffix of *target* becomes the request's query string.
    """
    if isinstance(method, str) and not isinstance(method, Method):
        method = to_method(method)
    path, _, query = target.partition("?")
    content = body.encode("utf-8") if isinstance(body, str) else body
    return Request(
        method=method,
        target=path or "/",
        query=query,
        version=version,
        client=client,
        headers=Headers(headers),
        globals=globals,
        _body=Body(content),
    )


async def run_test(
    handler: Handler,
    request: Request | None = None,
    *,
    prefix: str = "",
) -> Response:
    """Await *handler* on *request* (default ``GET /``), applying a site prefix.

    Requests outside *prefix* get an empty ``404``, as from the host. No
    error handler runs: exceptions propagate to the test.
    """
    if request is None:
        request = make_request()
    inner = strip_site_prefix(request, prefix)
    if inner is None:
        return response(status=Status.NOT_FOUND)
    return await handler(inner)


__all__ = [
    "TestClient",
    "make_request",
    "run_test",
]
