"""ASGI type aliases and scope decoding helpers.

The ASGI server is the transport collaborator: it owns sockets, HTTP/1.1
and HTTP/2 framing and TLS. These helpers turn the pieces of a raw scope
into the plain values the message model stores. Users never see them.
"""

from collections.abc import Awaitable, Callable, MutableMapping
from typing import Any, TypeAlias

# Raw ASGI types
Scope: TypeAlias = MutableMapping[str, Any]
Receive: TypeAlias = Callable[[], Awaitable[MutableMapping[str, Any]]]
Send: TypeAlias = Callable[[MutableMapping[str, Any]], Awaitable[None]]


def parse_http_version(value: str) -> tuple[int, int]:
    """``"1.1"`` -> ``(1, 1)``, ``"2"`` -> ``(2, 0)``."""
    major, _, minor = value.partition(".")
    return int(major), int(minor or 0)


def format_client(client: Any) -> str:
    """Render the ASGI ``client`` entry as ``host:port``.

    Servers may omit it (e.g. unix sockets), in which case the result is
    an empty string.
    """
    if not client:
        return ""
    host, port = client[0], client[1]
    return f"{host}:{port}"
