"""Path splitting shared by the router and the site-prefix check.

Empty segments are dropped, so ``/a//b/`` and ``/a/b`` are the same path.
"""


def split_path(path: str) -> list[str]:
    """``"/a//b/"`` -> ``["a", "b"]``."""
    return [segment for segment in path.split("/") if segment]


def join_path(segments: list[str]) -> str:
    """``["a", "b"]`` -> ``"/a/b"``; no segments -> ``"/"``."""
    return "/" + "/".join(segments)


def join_prefix(segments: list[str]) -> str:
    """Like ``join_path`` but the empty prefix is ``""``, not ``"/"``."""
    return join_path(segments) if segments else ""
