"""Tests for reverie.middleware.sessions: signed-cookie server-side sessions."""

import time

import pytest
from itsdangerous import URLSafeTimedSerializer

from reverie.app import App
from reverie.errors import ConfigurationError
from reverie.http.request import Request
from reverie.http.response import Response, respond
from reverie.middleware.pipeline import pipeline
from reverie.middleware.sessions import (
    COOKIE_NAME,
    MemoryBackend,
    MemorySession,
    all_session_values,
    invalidate_session,
    session,
    session_expires_at,
    session_id,
    session_key,
    sessions,
    sessions_in_memory,
    set_session,
)
from reverie.routing.builders import get
from reverie.routing.router import not_found, router
from reverie.testing import TestClient, make_request, run_test


async def _visits(request: Request) -> Response:
    count = int(session("visits", request) or 0) + 1
    await set_session("visits", str(count), request)
    return await respond(str(count))


async def _login(request: Request) -> Response:
    before = session_id(request)
    await invalidate_session(request)
    await set_session("user", "ann", request)
    return await respond(f"{before}->{session_id(request)}")


async def _whoami(request: Request) -> Response:
    return await respond(session("user", request) or "anonymous")


def _app() -> App:
    routes = router([get("/visits", _visits), get("/login", _login), get("/whoami", _whoami)])
    return App(pipeline([sessions_in_memory(), routes])(not_found))


class TestSessionsThroughApp:
    async def test_new_session_sets_cookie(self) -> None:
        async with TestClient(_app()) as client:
            response = await client.get("/visits")
        cookie = response.header("Set-Cookie")
        assert cookie is not None
        assert cookie.startswith(f"{COOKIE_NAME}=")
        assert "HttpOnly" in cookie
        assert "SameSite=Lax" in cookie
        assert "Max-Age=" in cookie

    async def test_values_persist(self) -> None:
        async with TestClient(_app()) as client:
            first = await client.get("/visits")
            second = await client.get("/visits")
            third = await client.get("/visits")
        assert [await r.text() for r in (first, second, third)] == ["1", "2", "3"]

    async def test_cookie_not_resent_for_known_session(self) -> None:
        async with TestClient(_app()) as client:
            await client.get("/visits")
            second = await client.get("/visits")
        assert not second.has_header("Set-Cookie")

    async def test_clients_are_separate(self) -> None:
        app = _app()
        async with TestClient(app) as a:
            await a.get("/visits")
            await a.get("/visits")
            b = TestClient(app)
            response = await b.get("/visits")
        assert await response.text() == "1"

    async def test_invalidate_rekeys(self) -> None:
        async with TestClient(_app()) as client:
            await client.get("/visits")
            old_cookie = client.cookies[COOKIE_NAME]
            login = await client.get("/login")
            who = await client.get("/whoami")
            visits = await client.get("/visits")
        before, after = (await login.text()).split("->")
        assert before != after
        assert login.has_header("Set-Cookie")
        assert client.cookies[COOKIE_NAME] != old_cookie
        assert await who.text() == "ann"
        # Values from before the login are gone
        assert await visits.text() == "1"

    async def test_old_key_is_dead_after_invalidate(self) -> None:
        app = _app()
        async with TestClient(app) as client:
            await client.get("/visits")
            old_cookie = client.cookies[COOKIE_NAME]
            await client.get("/login")
            client.cookies[COOKIE_NAME] = old_cookie
            response = await client.get("/whoami")
        assert await response.text() == "anonymous"

    async def test_bad_signature_starts_new_session(self) -> None:
        async with TestClient(_app()) as client:
            await client.get("/visits")
            client.cookies[COOKIE_NAME] = client.cookies[COOKIE_NAME] + "x"
            response = await client.get("/visits")
        assert await response.text() == "1"
        assert response.has_header("Set-Cookie")

    async def test_foreign_secret_rejected(self) -> None:
        forged = URLSafeTimedSerializer("other", salt=COOKIE_NAME).dumps("made-up")
        async with TestClient(_app()) as client:
            client.cookies[COOKIE_NAME] = forged
            response = await client.get("/visits")
        assert await response.text() == "1"

    async def test_apps_have_separate_tables(self) -> None:
        mw = sessions_in_memory(secret="shared")
        routes = router([get("/visits", _visits)])
        one = App(pipeline([mw, routes])(not_found))
        two = App(pipeline([mw, routes])(not_found))
        async with TestClient(one) as client:
            await client.get("/visits")
            cookie = client.cookies[COOKIE_NAME]
        async with TestClient(two) as client:
            client.cookies[COOKIE_NAME] = cookie
            response = await client.get("/visits")
        assert await response.text() == "1"


class TestSessionsDirect:
    async def test_needs_secret_outside_app(self) -> None:
        handler = sessions(MemoryBackend())(_visits)
        with pytest.raises(ConfigurationError, match="Sessions need a secret"):
            await run_test(handler, make_request())

    async def test_explicit_backend(self) -> None:
        backend = MemoryBackend()
        handler = sessions(backend, secret="s")(_visits)
        await run_test(handler, make_request())
        assert len(backend) == 1

    async def test_helpers(self) -> None:
        seen: dict[str, object] = {}

        async def inspect(request: Request) -> Response:
            await set_session("a", "1", request)
            seen["key"] = session_key(request)
            seen["id"] = session_id(request)
            seen["expires"] = session_expires_at(request)
            seen["all"] = all_session_values(request)
            return await respond()

        await run_test(sessions(MemoryBackend(lifetime=60), secret="s")(inspect))
        assert seen["all"] == [("a", "1")]
        assert seen["key"] != seen["id"]
        assert time.time() < seen["expires"] <= time.time() + 60  # type: ignore[operator]

    async def test_no_session_middleware(self) -> None:
        with pytest.raises(LookupError, match="No active session"):
            session("a", make_request())

    async def test_custom_cookie_name(self) -> None:
        handler = sessions(MemoryBackend(), secret="s", cookie_name="sid")(_visits)
        response = await run_test(handler)
        cookie = response.header("Set-Cookie")
        assert cookie is not None
        assert cookie.startswith("sid=")


class TestMemoryBackend:
    async def test_create_and_load(self) -> None:
        backend = MemoryBackend()
        created = await backend.create()
        assert await backend.load(created.key) is created

    async def test_unknown_key(self) -> None:
        assert await MemoryBackend().load("nope") is None

    async def test_expired_session_discarded(self) -> None:
        backend = MemoryBackend(lifetime=0)
        created = await backend.create()
        assert await backend.load(created.key) is None
        assert len(backend) == 0

    async def test_invalidate(self) -> None:
        backend = MemoryBackend()
        created = await backend.create()
        await created.set("a", "1")
        old_key, old_id = created.key, created.id
        await created.invalidate()
        assert created.key != old_key
        assert created.id != old_id
        assert created.all() == []
        assert await backend.load(old_key) is None
        assert await backend.load(created.key) is created

    def test_repr(self) -> None:
        backend = MemoryBackend()
        assert repr(MemorySession(backend)).startswith("<MemorySession ")
