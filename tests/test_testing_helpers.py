"""Tests for reverie.testing: make_request, run_test and TestClient."""

from reverie.app import App
from reverie.http.method import Method, OtherMethod
from reverie.http.request import Request
from reverie.http.response import Response, respond
from reverie.routing.builders import any_method, get
from reverie.routing.router import not_found, router
from reverie.testing import TestClient, make_request, run_test


async def _where(request: Request) -> Response:
    return await respond(f"{request.prefix}|{request.path}")


class TestMakeRequest:
    def test_defaults(self) -> None:
        request = make_request()
        assert request.method is Method.GET
        assert request.target == "/"
        assert request.path == "/"
        assert request.client == "127.0.0.1:0"
        assert request.version == (1, 1)

    def test_query_split(self) -> None:
        request = make_request("/search?q=x")
        assert request.target == "/search"
        assert request.query == "q=x"

    def test_method_string(self) -> None:
        assert make_request(method="post").method is Method.POST
        assert make_request(method="BREW").method == OtherMethod("BREW")

    async def test_body(self) -> None:
        request = make_request(body="data")
        assert await request.body() == b"data"

    def test_headers(self) -> None:
        request = make_request(headers=[("Accept", "text/html")])
        assert request.header("accept") == "text/html"


class TestRunTest:
    async def test_default_request(self) -> None:
        result = await run_test(_where)
        assert await result.text() == "|/"

    async def test_prefix(self) -> None:
        result = await run_test(_where, make_request("/app/x"), prefix="/app")
        assert await result.text() == "/app|/x"

    async def test_outside_prefix(self) -> None:
        result = await run_test(_where, make_request("/x"), prefix="/app")
        assert result.status == 404


class TestTestClient:
    async def test_cookie_jar(self) -> None:
        async def set_cookie(request: Request) -> Response:
            return (await respond()).add_set_cookie("theme", "dark")

        async def read_cookie(request: Request) -> Response:
            return await respond(request.cookie("theme") or "none")

        async def clear_cookie(request: Request) -> Response:
            return (await respond()).drop_cookie("theme")

        app = App(
            router(
                [get("/set", set_cookie), get("/read", read_cookie), get("/clear", clear_cookie)]
            )(not_found)
        )
        async with TestClient(app) as client:
            await client.get("/set")
            assert client.cookies == {"theme": "dark"}
            assert await (await client.get("/read")).text() == "dark"
            await client.get("/clear")
            assert client.cookies == {}
            assert await (await client.get("/read")).text() == "none"

    async def test_request_headers(self) -> None:
        async def accept(request: Request) -> Response:
            return await respond(request.header("Accept") or "")

        app = App(router([get("/", accept)])(not_found))
        async with TestClient(app) as client:
            response = await client.get("/", headers={"Accept": "text/plain"})
        assert await response.text() == "text/plain"

    async def test_methods(self) -> None:
        async def method(request: Request) -> Response:
            return await respond(str(request.method))

        app = App(router([any_method("/", method)])(not_found))
        async with TestClient(app) as client:
            put = await client.put("/", body="x")
            delete = await client.delete("/")
            other = await client.request("purge", "/")
        assert await put.text() == "PUT"
        assert await delete.text() == "DELETE"
        assert await other.text() == "PURGE"
