"""Plain-text error descriptions for developers.

The default error handler puts this text in the response body when the
app runs with ``debug=True``. It is never produced otherwise, so none of
it reaches clients of a production app.

Example::

    ZeroDivisionError: division by zero
    Traceback (most recent call last):
      ...

    From: Application
    Blame: Server
    Severity: error

    Client: 127.0.0.1:56001

    GET /divide/0
    Prefix: -
    Path: /divide/0
    Version: HTTP/1.1
    Headers:
      Host: localhost:8080
    Variables:
      id: 7
      crumbs: divisor=0
"""

import traceback
from typing import TYPE_CHECKING, Any

from reverie.http.method import method_to_string
from reverie.http.response import Response
from reverie.http.status import status_to_string

if TYPE_CHECKING:
    from reverie.server.errors import Error

_LAYER_NAMES = {
    "tls": "TLS",
    "http": "HTTP",
    "http2": "HTTP/2",
    "websocket": "WebSocket",
    "app": "Application",
}


def format_condition(condition: Response | str | BaseException) -> str:
    """One paragraph describing what went wrong."""
    match condition:
        case Response():
            return f"{int(condition.status)} {status_to_string(condition.status)}"
        case BaseException():
            return "".join(traceback.format_exception(condition)).rstrip()
        case _:
            return str(condition)


def _format_variables(items: list[tuple[Any, Any]]) -> list[str]:
    lines: list[str] = []
    for slot, value in items:
        if slot.debug is None:
            continue
        key, text = slot.debug(value)
        lines.append(f"  {key}: {text}")
    return lines


def debug_dump(error: "Error") -> str:
    """Describe *error* and the latest state of its request."""
    sections: list[str] = [format_condition(error.condition)]

    sections.append(
        "\n".join(
            [
                f"From: {_LAYER_NAMES[error.layer.value]}",
                f"Blame: {error.caused_by.value.title()}",
                f"Severity: {error.severity.value}",
            ]
        )
    )

    if error.client:
        sections.append(f"Client: {error.client}")

    if error.request is not None:
        # The handler may have derived further requests from the one the
        # host created; the last of them shows the state at the failure.
        request = error.request.last
        lines = [
            f"{method_to_string(request.method)} {request.url}",
            f"Prefix: {request.prefix or '-'}",
            f"Path: {request.path}",
            f"Version: HTTP/{request.version[0]}.{request.version[1]}",
        ]
        headers = request.all_headers()
        if headers:
            lines.append("Headers:")
            lines.extend(f"  {name}: {value}" for name, value in headers)
        variables = _format_variables(request.local_items())
        variables.extend(_format_variables(request.globals.items()))
        if variables:
            lines.append("Variables:")
            lines.extend(variables)
        sections.append("\n".join(lines))

    return "\n\n".join(sections)
