"""Tests for reverie.server.debug_dump: plain-text error descriptions."""

from reverie.http.request import crumbs_var
from reverie.http.response import response
from reverie.log import LogLevel, request_id_var
from reverie.server.debug_dump import debug_dump, format_condition
from reverie.server.errors import CausedBy, Error, Layer
from reverie.testing import make_request
from reverie.variables import GlobalStore, new_global, new_local


class TestFormatCondition:
    def test_response(self) -> None:
        assert format_condition(response(status=404)) == "404 Not Found"

    def test_unknown_status(self) -> None:
        assert format_condition(response(code=599)) == "599 599"

    def test_string(self) -> None:
        assert format_condition("bad framing") == "bad framing"

    def test_exception(self) -> None:
        try:
            raise ValueError("boom")
        except ValueError as exc:
            text = format_condition(exc)
        assert text.startswith("Traceback (most recent call last):")
        assert text.endswith("ValueError: boom")


class TestDebugDump:
    def test_without_request(self) -> None:
        error = Error(
            "TLS handshake failed",
            Layer.TLS,
            CausedBy.CLIENT,
            client="10.0.0.1:443",
            severity=LogLevel.WARNING,
        )
        assert debug_dump(error) == (
            "TLS handshake failed\n\n"
            "From: TLS\n"
            "Blame: Client\n"
            "Severity: warning\n\n"
            "Client: 10.0.0.1:443"
        )

    def test_request_section(self) -> None:
        request = make_request("/divide/0?x=1", headers=[("Host", "localhost")])
        error = Error("boom", Layer.APP, CausedBy.SERVER, request=request)
        text = debug_dump(error)
        assert "From: Application\nBlame: Server\nSeverity: error" in text
        assert "GET /divide/0?x=1\nPrefix: -\nPath: /divide/0\nVersion: HTTP/1.1" in text
        assert "Headers:\n  Host: localhost" in text

    def test_uses_last_request(self) -> None:
        first = make_request("/a/b")
        first.with_prefix("/a", "/b").add_header("X-Late", "1")
        text = debug_dump(Error("boom", Layer.APP, CausedBy.SERVER, request=first))
        assert "Prefix: /a" in text
        assert "Path: /b" in text
        assert "X-Late: 1" in text

    def test_variables_with_debug_formatters(self) -> None:
        hidden = new_local(name="hidden")
        request = (
            make_request()
            .with_local(request_id_var, "7")
            .with_local(crumbs_var, {"divisor": "0"})
            .with_local(hidden, "secret")
        )
        text = debug_dump(Error("boom", Layer.APP, CausedBy.SERVER, request=request))
        assert "Variables:\n  id: 7\n  crumbs: divisor=0" in text
        assert "secret" not in text

    def test_global_variables(self) -> None:
        store = GlobalStore()
        hits = new_global(lambda: 3, debug=lambda n: ("hits", str(n)))
        store.get(hits)
        request = make_request(globals=store)
        text = debug_dump(Error("boom", Layer.APP, CausedBy.SERVER, request=request))
        assert "  hits: 3" in text

    def test_layers(self) -> None:
        for layer, name in [(Layer.HTTP2, "HTTP/2"), (Layer.WEBSOCKET, "WebSocket")]:
            text = debug_dump(Error("x", layer, CausedBy.CLIENT))
            assert f"From: {name}" in text
