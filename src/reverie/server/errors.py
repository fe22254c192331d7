"""Central error dispatch.

Every failure ends up here as an ``Error`` record: exceptions escaping
the handler, ``4xx``/``5xx`` responses it returned, malformed requests
the host could not parse, and protocol errors reported by transport code
through ``App.report``. One error handler decides, for all of them, what
to log and what (if anything) to send.

The default handler logs string and exception conditions at the
error's severity and answers with an empty response of the suggested
status. Customize the response only, keeping the logging, with
``error_template``::

    async def branded(response, *, debug_dump):
        body = debug_dump or status_to_string(response.status)
        return response.with_body(f"<h1>{body}</h1>").with_header("Content-Type", "text/html")

    app = App(handler, error_handler=error_template(branded))
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import TypeAlias

from reverie._internal.invoke import invoke
from reverie.http.request import Request
from reverie.http.response import Response, response
from reverie.http.status import Status
from reverie.log import LogLevel, sub_log
from reverie.server.debug_dump import debug_dump

_error_log = sub_log("error")
_double_fault_log = sub_log("error.double_fault")


class Layer(Enum):
    """Where an error was detected."""

    TLS = "tls"
    HTTP = "http"
    HTTP2 = "http2"
    WEBSOCKET = "websocket"
    APP = "app"


class CausedBy(Enum):
    """Which side most likely caused an error.

    Server errors suggest bugs and map to ``5xx``. Client errors may be
    noise, buggy clients or attacks, and map to ``4xx``.
    """

    SERVER = "server"
    CLIENT = "client"


Condition: TypeAlias = Response | str | BaseException


@dataclass(frozen=True, slots=True)
class Error:
    """Everything known about one failure.

    ``condition`` is the error itself: a ``4xx``/``5xx`` response the
    application returned, a description, or an exception. ``response``
    is a response suggested by the context, if it has one. When
    ``will_send_response`` is false there is nobody left to answer (a
    failed TLS handshake, a WebSocket) and handlers must not build one.
    """

    condition: Condition
    layer: Layer
    caused_by: CausedBy
    request: Request | None = None
    response: Response | None = None
    client: str | None = None
    severity: LogLevel = LogLevel.ERROR
    debug: bool = False
    will_send_response: bool = True


ErrorHandler: TypeAlias = Callable[[Error], Awaitable[Response | None]]

# (suggested_response, *, debug_dump) -> response
Template: TypeAlias = Callable[..., Awaitable[Response]]

_LAYER_PREFIXES = {
    Layer.TLS: "TLS: ",
    Layer.HTTP: "HTTP: ",
    Layer.HTTP2: "HTTP/2: ",
    Layer.WEBSOCKET: "WebSocket: ",
    Layer.APP: "",
}


def suggested_response(error: Error) -> Response:
    """The response to send if the handler has no better idea.

    The condition itself when it is a response, then the context's
    suggestion, then an empty ``400`` or ``500`` by ``caused_by``.
    """
    if isinstance(error.condition, Response):
        return error.condition
    if error.response is not None:
        return error.response
    if error.caused_by is CausedBy.CLIENT:
        return response(status=Status.BAD_REQUEST)
    return response(status=Status.INTERNAL_SERVER_ERROR)


def log_error(error: Error) -> None:
    """Log *error* the way the default handler does.

    Response conditions are not logged: the application produced them on
    purpose, and the request logger already records their status.
    """
    condition = error.condition
    prefix = _LAYER_PREFIXES[error.layer]
    match condition:
        case Response():
            return
        case BaseException():
            _error_log.at(
                error.severity,
                "%s%s: %s",
                prefix,
                type(condition).__name__,
                condition,
                request=error.request,
                exc_info=(type(condition), condition, condition.__traceback__),
            )
        case _:
            _error_log.at(error.severity, "%s%s", prefix, condition, request=error.request)


def error_template(template: Template) -> ErrorHandler:
    """Build an error handler that logs like the default one and answers with *template*.

    *template* receives the suggested response and, when the error has
    ``debug`` set, a ``debug_dump`` string (else ``None``). It is not
    called at all when the error does not expect a response.
    """

    async def handle(error: Error) -> Response | None:
        log_error(error)
        if not error.will_send_response:
            return None
        dump = debug_dump(error) if error.debug else None
        return await invoke(template, suggested_response(error), debug_dump=dump)

    return handle


async def _default_template(suggested: Response, *, debug_dump: str | None) -> Response:
    if debug_dump is None:
        return suggested
    return suggested.with_body(debug_dump).with_header(
        "Content-Type", "text/plain; charset=utf-8"
    )


default_error_handler: ErrorHandler = error_template(_default_template)
"""Bodiless responses normally; the debug dump as ``text/plain`` in debug mode."""


def _describe(error: Error) -> str:
    condition = error.condition
    if isinstance(condition, Response):
        return f"response {int(condition.status)}"
    if isinstance(condition, BaseException):
        return f"{type(condition).__name__}: {condition}"
    return str(condition)


async def dispatch_error(
    error: Error,
    handler: ErrorHandler = default_error_handler,
) -> Response | None:
    """Run *handler* on *error*, containing any failure of the handler itself.

    Returns the response to send, or ``None`` when no response is
    expected. If the handler raises, or returns ``None`` although a
    response is expected, that double fault is logged to the
    ``reverie.error.double_fault`` logger and an empty ``500`` is sent
    instead.
    """
    try:
        result = await invoke(handler, error)
    except Exception:
        _double_fault_log.error(
            "Error handler raised while handling %s",
            _describe(error),
            request=error.request,
            exc_info=True,
        )
        if error.will_send_response:
            return response(status=Status.INTERNAL_SERVER_ERROR)
        return None

    if not error.will_send_response:
        return None
    if not isinstance(result, Response):
        _double_fault_log.error(
            "Error handler returned %r instead of a response while handling %s",
            result,
            _describe(error),
            request=error.request,
        )
        return response(status=Status.INTERNAL_SERVER_ERROR)
    return result
