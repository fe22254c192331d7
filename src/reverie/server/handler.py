"""ASGI handler: translates ASGI scope/messages to reverie types.

The only component that touches raw ASGI directly. Converts scope dicts
to typed Request objects, runs the application handler, funnels every
failure through the error dispatcher and sends the resulting Response
back through ASGI send().
"""

from contextvars import Token

from reverie._internal.asgi import Receive, Scope, Send, format_client
from reverie._internal.paths import join_path, split_path
from reverie.config import AppConfig
from reverie.context import request_var
from reverie.errors import ClientDisconnected
from reverie.http.method import Method
from reverie.http.request import Request
from reverie.http.response import Response, response
from reverie.http.status import Status, is_client_error
from reverie.log import LogLevel, request_id_var, sub_log
from reverie.middleware.protocol import Handler
from reverie.security import secret_var
from reverie.server.errors import CausedBy, Error, ErrorHandler, Layer, dispatch_error
from reverie.server.sender import send_response
from reverie.variables import GlobalStore

_log = sub_log("http")
_double_fault_log = sub_log("error.double_fault")


def strip_site_prefix(request: Request, prefix: str) -> Request | None:
    """Move the site prefix out of the request's path.

    Returns ``None`` when the request lies outside the prefix.
    """
    expected = split_path(prefix)
    if not expected:
        return request
    parts = split_path(request.path)
    if parts[: len(expected)] != expected:
        return None
    return request.with_prefix(prefix, join_path(parts[len(expected) :]))


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    handler: Handler,
    error_handler: ErrorHandler,
    config: AppConfig,
    globals: GlobalStore,
    request_id: str,
    secret: str,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    client = format_client(scope.get("client"))

    # Build Request from ASGI scope
    try:
        request = Request.from_asgi(scope, receive, globals=globals)
    except (KeyError, TypeError, ValueError) as exc:
        error = Error(
            f"Malformed request scope: {exc!r}",
            Layer.HTTP,
            CausedBy.CLIENT,
            client=client or None,
            severity=LogLevel.WARNING,
            debug=config.debug,
        )
        result = await dispatch_error(error, error_handler)
        if result is not None:
            await _respond(result, send, None, error_handler, config, client)
        return

    request = request.with_local(request_id_var, request_id).with_local(secret_var, secret)

    # Set request context var (reset after dispatch)
    token: Token[Request] = request_var.set(request)
    try:
        result = await _dispatch(request, handler, error_handler, config, client)
    finally:
        request_var.reset(token)

    if result is not None:
        await _respond(
            result, send, request, error_handler, config, client, head=request.method is Method.HEAD
        )


async def _dispatch(
    request: Request,
    handler: Handler,
    error_handler: ErrorHandler,
    config: AppConfig,
    client: str,
) -> Response | None:
    inner = strip_site_prefix(request, config.prefix)
    if inner is None:
        _log.debug("%s is outside the site prefix %s", request.target, config.prefix)
        result = response(status=Status.NOT_FOUND)
    else:
        try:
            result = await handler(inner)
            if not isinstance(result, Response):
                msg = f"Handler returned {type(result).__name__}, expected a Response."
                raise TypeError(msg)
        except ClientDisconnected as exc:
            error = Error(
                exc,
                Layer.HTTP,
                CausedBy.CLIENT,
                request=request,
                client=client or None,
                severity=LogLevel.INFO,
                debug=config.debug,
                will_send_response=False,
            )
            return await dispatch_error(error, error_handler)
        except Exception as exc:
            error = Error(
                exc,
                Layer.APP,
                CausedBy.SERVER,
                request=request,
                client=client or None,
                severity=LogLevel.ERROR,
                debug=config.debug,
            )
            return await dispatch_error(error, error_handler)

    if result.status < 400:
        return result

    caused_by = CausedBy.CLIENT if is_client_error(result.status) else CausedBy.SERVER
    error = Error(
        result,
        Layer.APP,
        caused_by,
        request=request,
        response=result,
        client=client or None,
        severity=LogLevel.WARNING if caused_by is CausedBy.CLIENT else LogLevel.ERROR,
        debug=config.debug,
    )
    return await dispatch_error(error, error_handler)


async def _respond(
    result: Response,
    send: Send,
    request: Request | None,
    error_handler: ErrorHandler,
    config: AppConfig,
    client: str,
    *,
    head: bool = False,
) -> None:
    """Send *result*, reporting any failure to the error dispatcher.

    The body is read before ``http.response.start`` goes out, so a body
    that fails can still be replaced by an error response. A failure of
    ``send`` itself leaves nothing to answer.
    """
    try:
        await result.body()
    except Exception as exc:
        error = Error(
            exc,
            Layer.APP,
            CausedBy.SERVER,
            request=request,
            client=client or None,
            severity=LogLevel.ERROR,
            debug=config.debug,
        )
        replacement = await dispatch_error(error, error_handler)
        if replacement is None:
            return
        try:
            await replacement.body()
        except Exception:
            _double_fault_log.error(
                "Error response body failed while handling %s",
                type(exc).__name__,
                request=request,
                exc_info=True,
            )
            replacement = response(status=Status.INTERNAL_SERVER_ERROR)
        result = replacement

    try:
        await send_response(result, send, head=head)
    except Exception as exc:
        error = Error(
            exc,
            Layer.HTTP,
            CausedBy.SERVER,
            request=request,
            client=client or None,
            severity=LogLevel.ERROR,
            debug=config.debug,
            will_send_response=False,
        )
        await dispatch_error(error, error_handler)


async def reject_websocket(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    error_handler: ErrorHandler,
    config: AppConfig,
) -> None:
    """Report and close a WebSocket connection attempt.

    There is no HTTP exchange to answer, so the error handler is told not
    to build a response.
    """
    client = format_client(scope.get("client"))
    error = Error(
        f"WebSocket connections are not supported ({scope.get('path', '?')})",
        Layer.WEBSOCKET,
        CausedBy.CLIENT,
        client=client or None,
        severity=LogLevel.WARNING,
        debug=config.debug,
        will_send_response=False,
    )
    await dispatch_error(error, error_handler)

    message = await receive()
    if message.get("type") == "websocket.connect":
        await send({"type": "websocket.close", "code": 1000})


async def send_unavailable(send: Send) -> None:
    """Answer a request that arrived after ``App.stop()``."""
    await send_response(
        response(status=Status.SERVICE_UNAVAILABLE, headers=[("Connection", "close")]),
        send,
    )
