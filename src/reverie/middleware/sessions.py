"""Session middleware: server-side sessions keyed by a signed cookie.

The cookie carries only the session *key*, signed with ``itsdangerous``
so it cannot be forged; the values live in a ``SessionBackend``.
``sessions_in_memory()`` keeps them in a table owned by the app (a
global variable), so they last as long as the server process::

    app = App(pipeline([sessions_in_memory()])(handler))

    async def handler(request):
        visits = int(session("visits", request) or 0) + 1
        await set_session("visits", str(visits), request)
        return response(f"Visits: {visits}")

Each session also has a public ``id``, safe to log, and an expiry.
``invalidate_session`` swaps the request's session for a fresh, empty
one with a new key; call it on login and logout to prevent fixation.
"""

import threading
import time
from typing import Protocol

from itsdangerous import BadData, URLSafeTimedSerializer

from reverie.errors import ConfigurationError
from reverie.http.request import Request
from reverie.http.response import Response
from reverie.log import sub_log
from reverie.middleware.protocol import Handler, Middleware
from reverie.security import random, secret_var, to_base64url
from reverie.variables import Global, Local, new_global, new_local

_log = sub_log("sessions")

DEFAULT_LIFETIME = 14 * 24 * 60 * 60  # two weeks, in seconds
COOKIE_NAME = "reverie.session"


class Session(Protocol):
    """One client's session, as seen by handlers."""

    @property
    def id(self) -> str:
        """Public identifier, safe to log."""

    @property
    def key(self) -> str:
        """Secret identifier carried in the cookie."""

    @property
    def expires_at(self) -> float:
        """Unix time after which the session is discarded."""

    def get(self, name: str) -> str | None: ...

    def all(self) -> list[tuple[str, str]]: ...

    async def set(self, name: str, value: str) -> None: ...

    async def invalidate(self) -> None:
        """Replace this session's key and id and drop all its values."""


class SessionBackend(Protocol):
    """Where sessions are stored."""

    async def load(self, key: str) -> Session | None:
        """The live session with *key*, or ``None`` if unknown or expired."""

    async def create(self) -> Session:
        """A new, empty session."""


# -- In-memory backend --


def _new_key() -> str:
    return to_base64url(random(33))


def _new_id() -> str:
    return to_base64url(random(9))


class MemorySession:
    """A session held in a ``MemoryBackend``'s table."""

    __slots__ = ("_backend", "_values", "expires_at", "id", "key")

    def __init__(self, backend: "MemoryBackend") -> None:
        self._backend = backend
        self._values: dict[str, str] = {}
        self.key = _new_key()
        self.id = _new_id()
        self.expires_at = time.time() + backend.lifetime

    def get(self, name: str) -> str | None:
        return self._values.get(name)

    def all(self) -> list[tuple[str, str]]:
        return list(self._values.items())

    async def set(self, name: str, value: str) -> None:
        self._values[name] = value

    async def invalidate(self) -> None:
        self._backend.forget(self.key)
        self._values = {}
        self.key = _new_key()
        self.id = _new_id()
        self.expires_at = time.time() + self._backend.lifetime
        self._backend.remember(self)

    def __repr__(self) -> str:
        return f"<MemorySession {self.id}>"


class MemoryBackend:
    """Sessions in a dict. Lost when the process exits.

    Thread safety:
        The table is guarded by a lock, since requests of one app may be
        handled on several threads.
    """

    __slots__ = ("_lock", "_sessions", "lifetime")

    def __init__(self, lifetime: float = DEFAULT_LIFETIME) -> None:
        self.lifetime = lifetime
        self._sessions: dict[str, MemorySession] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._sessions)

    def remember(self, session: MemorySession) -> None:
        with self._lock:
            self._sessions[session.key] = session

    def forget(self, key: str) -> None:
        with self._lock:
            self._sessions.pop(key, None)

    async def load(self, key: str) -> MemorySession | None:
        with self._lock:
            session = self._sessions.get(key)
            if session is None:
                return None
            if session.expires_at <= time.time():
                del self._sessions[key]
                return None
            return session

    async def create(self) -> MemorySession:
        session = MemorySession(self)
        self.remember(session)
        return session


# -- Middleware --


def _format_session(session: Session) -> tuple[str, str]:
    return "session", session.id


session_var: Local[Session] = new_local(name="session", debug=_format_session)
"""The request's session, set by the ``sessions`` middleware."""


def sessions(
    backend: SessionBackend | Global[SessionBackend],
    *,
    secret: str | None = None,
    lifetime: float = DEFAULT_LIFETIME,
    cookie_name: str = COOKIE_NAME,
) -> Middleware:
    """Attach a session from *backend* to every request.

    *backend* may be a global variable holding the backend, so each app
    gets its own. The cookie is signed with *secret*, defaulting to the
    app's secret (``AppConfig.secret``, or a random one per process).
    Signatures older than *lifetime* seconds are rejected.
    """

    def resolve_secret(request: Request) -> str:
        value = secret or request.local(secret_var)
        if not value:
            msg = (
                "Sessions need a secret. Pass sessions(..., secret=...) "
                "or run the handler inside an App."
            )
            raise ConfigurationError(msg)
        return value

    async def load_or_create(
        store: SessionBackend, serializer: URLSafeTimedSerializer, request: Request
    ) -> tuple[Session, str | None]:
        cookie = request.cookie(cookie_name)
        if cookie:
            try:
                key = serializer.loads(cookie, max_age=lifetime)
            except BadData:
                _log.debug("Rejected session cookie with bad signature", request=request)
            else:
                if isinstance(key, str):
                    found = await store.load(key)
                    if found is not None:
                        return found, key
        created = await store.create()
        _log.debug("Session %s created", created.id, request=request)
        return created, None

    def wrap(inner: Handler) -> Handler:
        async def with_session(request: Request) -> Response:
            store = backend.get(request) if isinstance(backend, Global) else backend
            serializer = URLSafeTimedSerializer(resolve_secret(request), salt=cookie_name)

            current, cookie_key = await load_or_create(store, serializer, request)
            response = await inner(request.with_local(session_var, current))

            # The client holds no cookie for this key yet
            if current.key != cookie_key:
                max_age = max(0, int(current.expires_at - time.time()))
                response = response.add_set_cookie(
                    cookie_name,
                    serializer.dumps(current.key),
                    max_age=max_age,
                    http_only=True,
                    same_site="Lax",
                )
            return response

        return with_session

    return wrap


def sessions_in_memory(
    *,
    secret: str | None = None,
    lifetime: float = DEFAULT_LIFETIME,
    cookie_name: str = COOKIE_NAME,
) -> Middleware:
    """``sessions`` backed by an in-memory table, one per app."""

    def make_backend() -> SessionBackend:
        return MemoryBackend(lifetime)

    table: Global[SessionBackend] = new_global(make_backend, name="sessions_in_memory")
    return sessions(table, secret=secret, lifetime=lifetime, cookie_name=cookie_name)


# -- Helpers --


def _session(request: Request) -> Session:
    found = request.local(session_var)
    if found is None:
        msg = (
            "No active session. Ensure the sessions middleware wraps "
            "the handler before accessing the session."
        )
        raise LookupError(msg)
    return found


def session(name: str, request: Request) -> str | None:
    """Value of session field *name*, if set."""
    return _session(request).get(name)


async def set_session(name: str, value: str, request: Request) -> None:
    await _session(request).set(name, value)


def all_session_values(request: Request) -> list[tuple[str, str]]:
    return _session(request).all()


async def invalidate_session(request: Request) -> None:
    """Replace the request's session with a fresh, empty one."""
    await _session(request).invalidate()


def session_key(request: Request) -> str:
    return _session(request).key


def session_id(request: Request) -> str:
    return _session(request).id


def session_expires_at(request: Request) -> float:
    return _session(request).expires_at
