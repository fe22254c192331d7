"""Immutable, case-insensitive HTTP headers.

Implements ``Mapping[str, str]`` plus multi-value access. Pairs are kept
in the order and spelling they were received; only lookups ignore case.
Every "mutation" returns a new ``Headers``.
"""

from collections.abc import Iterable, Iterator, Mapping


class Headers(Mapping[str, str]):
    """Immutable, case-insensitive HTTP headers.

    ``__getitem__`` returns the first matching value.
    ``get_list`` returns all values for a header (e.g. multiple ``Set-Cookie``).
    """

    __slots__ = ("_pairs",)

    def __init__(self, pairs: Iterable[tuple[str, str]] = ()) -> None:
        object.__setattr__(self, "_pairs", tuple(pairs))

    @classmethod
    def from_asgi(cls, raw: Iterable[tuple[bytes, bytes]]) -> "Headers":
        """Decode raw ASGI header byte pairs."""
        return cls((name.decode("latin-1"), value.decode("latin-1")) for name, value in raw)

    def __getitem__(self, key: str) -> str:
        key_lower = key.lower()
        for name, value in self._pairs:
            if name.lower() == key_lower:
                return value
        raise KeyError(key)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        key_lower = key.lower()
        return any(name.lower() == key_lower for name, _ in self._pairs)

    def __iter__(self) -> Iterator[str]:
        seen: set[str] = set()
        for name, _ in self._pairs:
            key = name.lower()
            if key not in seen:
                seen.add(key)
                yield key

    def __len__(self) -> int:
        return len(set(self))

    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {v!r}" for k, v in self._pairs)
        return f"Headers([{items}])"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        """Return the first value for *key*, or *default* if missing."""
        try:
            return self[key]
        except KeyError:
            return default

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key*, in received order."""
        key_lower = key.lower()
        return [value for name, value in self._pairs if name.lower() == key_lower]

    # -- Derivation --

    def add(self, name: str, value: str) -> "Headers":
        """New headers with one more pair. Existing same-named pairs stay."""
        return Headers((*self._pairs, (name, value)))

    def drop(self, name: str) -> "Headers":
        """New headers without any pair named *name*."""
        name_lower = name.lower()
        return Headers(pair for pair in self._pairs if pair[0].lower() != name_lower)

    def replace(self, name: str, value: str) -> "Headers":
        """Equivalent to ``drop(name).add(name, value)``."""
        return self.drop(name).add(name, value)

    @property
    def pairs(self) -> tuple[tuple[str, str], ...]:
        """All ``(name, value)`` pairs, including duplicates."""
        return self._pairs

    @property
    def raw(self) -> list[tuple[bytes, bytes]]:
        """Encode for ASGI. Names are lower-cased as ASGI requires."""
        return [
            (name.lower().encode("latin-1"), value.encode("latin-1"))
            for name, value in self._pairs
        ]


def sort_headers(pairs: Iterable[tuple[str, str]]) -> list[tuple[str, str]]:
    """Sort header pairs by name.

    Pairs with the same name keep their relative order, since order is
    significant for some headers (RFC 7230 §3.2.2). Useful for comparing
    output in tests.
    """
    return sorted(pairs, key=lambda pair: pair[0].lower())


def as_headers(value: "Headers | Mapping[str, str] | Iterable[tuple[str, str]]") -> Headers:
    """Coerce a mapping or pair sequence to ``Headers``."""
    if isinstance(value, Headers):
        return value
    if isinstance(value, Mapping):
        return Headers(value.items())
    return Headers(value)
