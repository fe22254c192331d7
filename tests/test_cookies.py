"""Tests for reverie.http.cookies: Cookie parsing and Set-Cookie output."""

from datetime import datetime

from reverie.http.cookies import SetCookie, parse_cookies


class TestParseCookies:
    def test_single(self) -> None:
        assert parse_cookies(["a=1"]) == [("a", "1")]

    def test_several_in_one_header(self) -> None:
        assert parse_cookies(["a=1; b=2;c=3"]) == [("a", "1"), ("b", "2"), ("c", "3")]

    def test_several_headers(self) -> None:
        assert parse_cookies(["a=1", "b=2"]) == [("a", "1"), ("b", "2")]

    def test_quoted_value(self) -> None:
        assert parse_cookies(['name="quoted value"']) == [("name", "quoted value")]

    def test_value_with_equals(self) -> None:
        assert parse_cookies(["token=abc=="]) == [("token", "abc==")]

    def test_skips_fragments_without_equals(self) -> None:
        assert parse_cookies(["junk; a=1"]) == [("a", "1")]

    def test_empty(self) -> None:
        assert parse_cookies([]) == []
        assert parse_cookies([""]) == []


class TestSetCookie:
    def test_minimal(self) -> None:
        cookie = SetCookie("a", "1", path=None, http_only=False, same_site=None)
        assert cookie.to_header_value() == "a=1"

    def test_naive_expires_is_utc(self) -> None:
        cookie = SetCookie("a", "1", expires=datetime(2030, 1, 2, 3, 4, 5), path=None)
        value = cookie.to_header_value()
        assert "Expires=Wed, 02 Jan 2030 03:04:05 GMT" in value

    def test_defaults(self) -> None:
        assert SetCookie("a", "1").to_header_value() == "a=1; Path=/; HttpOnly; SameSite=Lax"
