"""Message bodies: materialized bytes or a pending async stream.

A ``Body`` is shared by every message derived from the one it was
created for, so reading it through any of them consumes the underlying
stream at most once. Concurrent readers wait on a lock and all receive
the same cached bytes.
"""

from collections.abc import AsyncIterator

import anyio

from reverie._internal.asgi import Receive
from reverie.errors import ClientDisconnected


class Body:
    """A message body.

    Either *content* (already materialized) or *stream* (pending). Once a
    stream has been read to completion it is dropped and only the bytes
    are kept. A stream that fails is dropped too, and every later read
    raises the same exception.
    """

    __slots__ = ("_content", "_failure", "_lock", "_stream")

    def __init__(
        self,
        content: bytes | None = b"",
        stream: AsyncIterator[bytes] | None = None,
    ) -> None:
        if stream is not None:
            content = None
        self._content: bytes | None = content
        self._stream: AsyncIterator[bytes] | None = stream
        self._failure: Exception | None = None
        self._lock: anyio.Lock | None = None

    @classmethod
    def from_stream(cls, stream: AsyncIterator[bytes]) -> "Body":
        return cls(stream=stream)

    @classmethod
    def from_asgi(cls, receive: Receive) -> "Body":
        """A pending body fed by ASGI ``http.request`` messages."""
        return cls(stream=_receive_chunks(receive))

    @property
    def is_materialized(self) -> bool:
        return self._content is not None

    @property
    def might_have_content(self) -> bool:
        """True for a non-empty materialized body or any pending stream.

        Does not force the stream, so a pending stream that turns out to
        be empty still reports True here.
        """
        if self._content is None:
            return True
        return len(self._content) > 0

    async def read(self) -> bytes:
        """Materialize the body. Idempotent; safe under concurrent callers."""
        if self._content is not None:
            return self._content
        if self._failure is not None:
            raise self._failure
        # Created lazily so a Body can be built outside an event loop.
        # No await between the check and the assignment.
        if self._lock is None:
            self._lock = anyio.Lock()
        async with self._lock:
            if self._failure is not None:
                raise self._failure
            if self._content is None:
                assert self._stream is not None
                stream, self._stream = self._stream, None
                try:
                    chunks = [chunk async for chunk in stream]
                except Exception as exc:
                    self._failure = exc
                    raise
                self._content = b"".join(chunks)
        return self._content

    def __repr__(self) -> str:
        if self._failure is not None:
            return f"Body(<failed stream: {type(self._failure).__name__}>)"
        if self._content is None:
            return "Body(<pending stream>)"
        return f"Body({len(self._content)} bytes)"


async def _receive_chunks(receive: Receive) -> AsyncIterator[bytes]:
    """Yield body chunks until the client signals the last one.

    Raises ``ClientDisconnected`` if the client goes away before the last
    chunk.
    """
    received = 0
    while True:
        message = await receive()
        if message.get("type") == "http.disconnect":
            raise ClientDisconnected(received)
        body = message.get("body", b"")
        if body:
            received += len(body)
            yield body
        if not message.get("more_body", False):
            break
