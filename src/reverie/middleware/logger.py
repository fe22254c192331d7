"""Request logging middleware.

Logs each request on the way in and its status and duration on the way
out, to the ``reverie.logger`` logger::

    GET /users/7 127.0.0.1:56001 curl/8.4.0
    200 in 1.3 ms

Successful and redirect responses are logged at info, ``4xx`` at
warning and ``5xx`` at error. Exceptions from the inner handler are
logged at warning (the error handler logs them in full) and re-raised.
"""

import time

from reverie.http.method import method_to_string
from reverie.http.request import Request
from reverie.http.response import Response
from reverie.http.status import is_client_error, is_server_error
from reverie.log import LogLevel, sub_log
from reverie.middleware.protocol import Handler

_log = sub_log("logger")


def logger(inner: Handler) -> Handler:
    """Wrap *inner* with request/response logging."""

    async def logged(request: Request) -> Response:
        user_agent = request.header("User-Agent") or "-"
        _log.info(
            "%s %s %s %s",
            method_to_string(request.method),
            request.url,
            request.client or "-",
            user_agent,
            request=request,
        )

        start = time.perf_counter()
        try:
            response = await inner(request)
        except Exception as exc:
            _log.warning("Aborted by: %s: %s", type(exc).__name__, exc, request=request)
            raise

        elapsed_ms = (time.perf_counter() - start) * 1000
        if is_server_error(response.status):
            severity = LogLevel.ERROR
        elif is_client_error(response.status):
            severity = LogLevel.WARNING
        else:
            severity = LogLevel.INFO
        _log.at(
            severity,
            "%d in %.1f ms",
            int(response.status),
            elapsed_ms,
            request=request,
        )
        return response

    return logged
