"""HTTP request methods.

The nine standard methods are ``Method`` members. Any other token a
client sends is kept verbatim as an ``OtherMethod`` so nothing is lost
in translation.
"""

from dataclasses import dataclass
from enum import Enum
from typing import TypeAlias


class Method(str, Enum):
    """Standard HTTP methods."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    HEAD = "HEAD"
    CONNECT = "CONNECT"
    OPTIONS = "OPTIONS"
    TRACE = "TRACE"
    PATCH = "PATCH"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class OtherMethod:
    """A method token outside the standard set, e.g. ``PROPFIND``."""

    token: str

    def __str__(self) -> str:
        return self.token


AnyMethod: TypeAlias = Method | OtherMethod

_BY_NAME: dict[str, Method] = {m.value: m for m in Method}


def to_method(token: str) -> AnyMethod:
    """Convert a method token to a ``Method`` member, or ``OtherMethod``.

    Standard methods are recognized case-insensitively; unknown tokens
    keep their original spelling.
    """
    return _BY_NAME.get(token.upper()) or OtherMethod(token)


def method_to_string(method: AnyMethod) -> str:
    """Inverse of ``to_method``."""
    return str(method)
