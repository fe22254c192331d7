"""Random bytes, base64url text and the per-app secret.

Session keys and ids come from ``random``; anything that travels in a
URL or cookie is encoded with ``to_base64url``. The URL-safe codec is
itsdangerous's, the same one its signers use for the payloads they
produce.
"""

import re
import secrets
from typing import TYPE_CHECKING

from itsdangerous import BadData
from itsdangerous.encoding import base64_decode, base64_encode

from reverie.variables import Local, new_local

if TYPE_CHECKING:
    from reverie.http.request import Request

_BASE64URL = re.compile(r"[A-Za-z0-9_-]*")

secret_var: Local[str] = new_local(name="secret")
"""The app's signing secret, set on every request by the host."""


def random(n: int) -> bytes:
    """*n* cryptographically secure random bytes."""
    return secrets.token_bytes(n)


def to_base64url(data: bytes) -> str:
    """URL-safe base64 without padding."""
    return base64_encode(data).decode("ascii")


def from_base64url(text: str) -> bytes:
    """Inverse of ``to_base64url``.

    Raises ``ValueError`` for text that is not unpadded URL-safe base64.
    """
    if not _BASE64URL.fullmatch(text):
        msg = f"Not URL-safe base64: {text!r}"
        raise ValueError(msg)
    try:
        return base64_decode(text)
    except BadData as exc:
        msg = f"Not URL-safe base64: {text!r}"
        raise ValueError(msg) from exc


def new_secret() -> str:
    """A fresh random secret, for apps that don't configure one."""
    return to_base64url(random(32))


def secret(request: "Request") -> str | None:
    """The secret of the app handling *request*."""
    return request.local(secret_var)
