"""Cookie parsing and Set-Cookie serialization.

The read side (``parse_cookies``, used by ``Request.cookie``) and the
write side (``SetCookie``, used by ``Response.add_set_cookie``) live in
one module.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import format_datetime


def parse_cookies(headers: list[str]) -> list[tuple[str, str]]:
    """Parse ``Cookie`` header values into ``(name, value)`` pairs.

    Pairs keep request order. A name sent twice appears twice; callers
    that want a single value take the first. Fragments without ``=`` are
    skipped.
    """
    cookies: list[tuple[str, str]] = []
    for header in headers:
        for pair in header.split(";"):
            pair = pair.strip()
            if "=" in pair:
                key, _, value = pair.partition("=")
                value = value.strip()
                if len(value) >= 2 and value[0] == value[-1] == '"':
                    value = value[1:-1]
                cookies.append((key.strip(), value))
    return cookies


@dataclass(frozen=True, slots=True)
class SetCookie:
    """A ``Set-Cookie`` directive."""

    name: str
    value: str
    expires: datetime | None = None
    max_age: int | None = None
    path: str | None = "/"
    domain: str | None = None
    secure: bool = False
    http_only: bool = True
    same_site: str | None = "Lax"

    def to_header_value(self) -> str:
        """Serialize to a ``Set-Cookie`` header value."""
        parts = [f"{self.name}={self.value}"]
        if self.expires is not None:
            expires = self.expires
            if expires.tzinfo is None:
                expires = expires.replace(tzinfo=timezone.utc)
            parts.append(f"Expires={format_datetime(expires.astimezone(timezone.utc), usegmt=True)}")
        if self.max_age is not None:
            parts.append(f"Max-Age={self.max_age}")
        if self.path:
            parts.append(f"Path={self.path}")
        if self.domain:
            parts.append(f"Domain={self.domain}")
        if self.secure:
            parts.append("Secure")
        if self.http_only:
            parts.append("HttpOnly")
        if self.same_site:
            parts.append(f"SameSite={self.same_site}")
        return "; ".join(parts)
