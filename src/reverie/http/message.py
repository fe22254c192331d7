"""Immutable messages with a shared derivation chain.

``Message`` is the common base of ``Request`` and ``Response``: headers,
body, per-message variables, and the chain that links every message to
the one it was originally derived from.

Every ``with_*`` / ``add_*`` / ``drop_*`` method returns a new message
and leaves the receiver untouched. The one deliberately shared, mutable
piece is the chain cell: all messages derived from the same original
point at one ``_Chain``, and each derivation records itself there as
``last``. That lets an error handler holding the first request of an
exchange see the request as it looked when things went wrong, without
any earlier snapshot changing.
"""

from collections.abc import AsyncIterator, Mapping
from dataclasses import dataclass, field, replace
from typing import Any, Self, TypeVar

from reverie.http.body import Body
from reverie.http.headers import Headers
from reverie.variables import Local

T = TypeVar("T")


class _Chain:
    """Shared cell recording the original and the latest derived message."""

    __slots__ = ("first", "last")

    def __init__(self, message: "Message") -> None:
        self.first = message
        self.last = message


@dataclass(frozen=True, slots=True, kw_only=True, eq=False)
class Message:
    """Fields and operations shared by requests and responses.

    Messages compare by identity. Derive new ones with the ``with_*``
    methods; never construct one by copying fields by hand, or it will
    start a chain of its own.
    """

    headers: Headers = field(default_factory=Headers)

    _body: Body = field(default_factory=Body, repr=False)
    _variables: Mapping[Local[Any], Any] = field(default_factory=dict, repr=False)
    _chain: _Chain | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self._chain is None:
            object.__setattr__(self, "_chain", _Chain(self))

    def _derive(self, **changes: Any) -> Self:
        derived = replace(self, **changes)
        assert self._chain is not None
        self._chain.last = derived
        return derived

    # -- Derivation chain --

    @property
    def first(self) -> Self:
        """The original message this one was (transitively) derived from."""
        assert self._chain is not None
        return self._chain.first

    @property
    def last(self) -> Self:
        """The most recently derived message in this message's chain."""
        assert self._chain is not None
        return self._chain.last

    # -- Headers --

    def header(self, name: str) -> str | None:
        """First header named *name* (case-insensitive), if any."""
        return self.headers.get(name)

    def header_list(self, name: str) -> list[str]:
        """All headers named *name*, in order."""
        return self.headers.get_list(name)

    def has_header(self, name: str) -> bool:
        return name in self.headers

    def all_headers(self) -> list[tuple[str, str]]:
        return list(self.headers.pairs)

    def add_header(self, name: str, value: str) -> Self:
        """New message with one more header. Same-named headers are kept."""
        return self._derive(headers=self.headers.add(name, value))

    def drop_header(self, name: str) -> Self:
        """New message without any header named *name*."""
        return self._derive(headers=self.headers.drop(name))

    def with_header(self, name: str, value: str) -> Self:
        """New message whose only *name* header has *value*."""
        return self._derive(headers=self.headers.replace(name, value))

    # -- Body --

    async def body(self) -> bytes:
        """Read the full body, streaming it to completion first if needed.

        The stream is consumed once; later calls, and calls through any
        message sharing this body, return the cached bytes.
        """
        return await self._body.read()

    async def text(self) -> str:
        """Read the body as UTF-8 text."""
        return (await self.body()).decode("utf-8")

    @property
    def has_body(self) -> bool:
        """True for a non-empty body or a body that has not been streamed yet.

        Does not stream the body: this can be True and a later read can
        still turn out empty.
        """
        return self._body.might_have_content

    def with_body(self, data: str | bytes, *, set_content_length: bool = True) -> Self:
        """New message with *data* as its body."""
        content = data.encode("utf-8") if isinstance(data, str) else data
        headers = self.headers
        if set_content_length:
            headers = headers.replace("Content-Length", str(len(content)))
        return self._derive(headers=headers, _body=Body(content))

    def with_stream(self, chunks: AsyncIterator[bytes]) -> Self:
        """New message whose body will be read from *chunks* on demand."""
        return self._derive(
            headers=self.headers.drop("Content-Length"),
            _body=Body.from_stream(chunks),
        )

    # -- Local variables --

    def local(self, slot: Local[T]) -> T | None:
        """Value of the per-message variable *slot*, or None if unset."""
        return self._variables.get(slot)

    def with_local(self, slot: Local[T], value: T) -> Self:
        """New message with *slot* set to *value*."""
        return self._derive(_variables={**self._variables, slot: value})

    def local_items(self) -> list[tuple[Local[Any], Any]]:
        """Every set local, for debug output."""
        return list(self._variables.items())
