"""Tests for reverie._internal: ASGI scope decoding, paths and invoke."""

import pytest

from reverie._internal.asgi import format_client, parse_http_version
from reverie._internal.invoke import invoke
from reverie._internal.paths import join_path, join_prefix, split_path


class TestScopeDecoding:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [("1.0", (1, 0)), ("1.1", (1, 1)), ("2", (2, 0)), ("3", (3, 0))],
    )
    def test_http_version(self, value: str, expected: tuple[int, int]) -> None:
        assert parse_http_version(value) == expected

    def test_bad_http_version(self) -> None:
        with pytest.raises(ValueError):
            parse_http_version("x.y")

    def test_client(self) -> None:
        assert format_client(("127.0.0.1", 54321)) == "127.0.0.1:54321"
        assert format_client(["::1", 80]) == "::1:80"

    def test_missing_client(self) -> None:
        assert format_client(None) == ""


class TestPaths:
    def test_split(self) -> None:
        assert split_path("/a//b/") == ["a", "b"]
        assert split_path("/") == []
        assert split_path("") == []

    def test_join(self) -> None:
        assert join_path(["a", "b"]) == "/a/b"
        assert join_path([]) == "/"

    def test_join_prefix(self) -> None:
        assert join_prefix(["a"]) == "/a"
        assert join_prefix([]) == ""


class TestInvoke:
    async def test_sync(self) -> None:
        assert await invoke(lambda x: x + 1, 1) == 2

    async def test_async(self) -> None:
        async def double(x: int, *, times: int = 2) -> int:
            return x * times

        assert await invoke(double, 3, times=3) == 9
