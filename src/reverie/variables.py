"""Typed variables attached to messages and to servers.

Two scopes:

- **Local** (per-message): ``new_local()`` declares a slot that starts out
  unset in every message. ``message.with_local(slot, value)`` returns a new
  message carrying the value; ``message.local(slot)`` reads it back.
- **Global** (per-server): ``new_global(factory)`` declares a slot whose
  value is created by ``factory()`` the first time any request of a server
  reads it, then shared by every later request of that server.

Slots are keyed by object identity, so any number of independently
written middlewares can declare their own without a central registry and
without their value types having anything in common::

    user_var: Local[User] = new_local(name="user")

    async def authenticate(request, next):
        return await next(request.with_local(user_var, await load_user(request)))

Globals are the sanctioned home for state shared across requests. The
value itself cannot be replaced, so it is usually a mutable container::

    hits: Global[Counter[str]] = new_global(Counter, name="hits")

    async def count(request):
        hits.get(request)[request.path] += 1
        ...

Thread safety:
    ``GlobalStore`` guards first access with a re-entrant lock and a double
    check, so a factory runs at most once per store even when worker
    threads race on a cold slot. A factory may read other globals.
"""

import threading
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Generic, TypeVar

if TYPE_CHECKING:
    from reverie.http.request import Request

T = TypeVar("T")

# Renders a value for debug dumps as (key, text)
DebugFormatter = Callable[[Any], tuple[str, str]]


class Local(Generic[T]):
    """A per-message variable slot. See ``new_local``."""

    __slots__ = ("debug", "name")

    def __init__(
        self,
        name: str | None = None,
        debug: Callable[[T], tuple[str, str]] | None = None,
    ) -> None:
        self.name = name
        self.debug = debug

    def __repr__(self) -> str:
        return f"<Local {self.name or hex(id(self))}>"


class Global(Generic[T]):
    """A per-server variable slot. See ``new_global``."""

    __slots__ = ("debug", "factory", "name")

    def __init__(
        self,
        factory: Callable[[], T],
        name: str | None = None,
        debug: Callable[[T], tuple[str, str]] | None = None,
    ) -> None:
        self.factory = factory
        self.name = name
        self.debug = debug

    def get(self, request: "Request") -> T:
        """Return this slot's value in the server that owns *request*."""
        return request.globals.get(self)

    def __repr__(self) -> str:
        return f"<Global {self.name or hex(id(self))}>"


class GlobalStore:
    """Values of global slots for one server.

    Each ``App`` owns one. Requests built outside an app share
    ``default_store``, the process-wide store.
    """

    __slots__ = ("_lock", "_values")

    def __init__(self) -> None:
        self._values: dict[Global[Any], Any] = {}
        self._lock = threading.RLock()

    def get(self, slot: Global[T]) -> T:
        """Return the slot's value, running its factory on first access."""
        try:
            return self._values[slot]
        except KeyError:
            pass
        with self._lock:
            if slot not in self._values:
                self._values[slot] = slot.factory()
            return self._values[slot]

    def __contains__(self, slot: object) -> bool:
        return slot in self._values

    def items(self) -> list[tuple[Global[Any], Any]]:
        """Snapshot of initialized slots, for debug output."""
        return list(self._values.items())


default_store = GlobalStore()
"""The process-wide store used by requests that no app created."""


def new_local(
    *,
    name: str | None = None,
    debug: Callable[[T], tuple[str, str]] | None = None,
) -> Local[T]:
    """Declare a fresh per-message variable.

    *debug*, if given, converts a value to a ``(key, text)`` pair so the
    default error handler can include it in debug dumps.
    """
    return Local(name=name, debug=debug)


def new_global(
    factory: Callable[[], T],
    *,
    name: str | None = None,
    debug: Callable[[T], tuple[str, str]] | None = None,
) -> Global[T]:
    """Declare a fresh per-server variable initialized by *factory*."""
    return Global(factory, name=name, debug=debug)
