"""Reverie application class.

An ``App`` wraps one handler (usually a pipeline ending in a router)
with the things a server needs around it: configuration, the error
handler, global variables, lifecycle hooks and graceful shutdown.
"""

import itertools
import threading
from collections.abc import Callable
from typing import Any

import anyio

from reverie._internal.asgi import Receive, Scope, Send
from reverie._internal.invoke import invoke
from reverie.config import AppConfig
from reverie.errors import ConfigurationError
from reverie.http.response import Response
from reverie.log import LogLevel, initialize_log, sub_log
from reverie.middleware.protocol import Handler
from reverie.security import new_secret
from reverie.server.errors import Error, ErrorHandler, default_error_handler, dispatch_error
from reverie.server.handler import handle_request, reject_websocket, send_unavailable
from reverie.variables import GlobalStore

_log = sub_log("app")


class App:
    """The reverie application.

    ``App`` is an ASGI 3.0 callable: hand it to any ASGI server, or call
    ``run()`` to serve it with pounce::

        app = App(
            pipeline([logger, sessions_in_memory()])(
                router([get("/", index)])(not_found)
            ),
            AppConfig(port=3000),
        )
        app.run()

    Thread safety:
        Requests may be handled on several worker threads at once. The
        in-flight counter and request id sequence are guarded by a lock;
        global variables are initialized under the ``GlobalStore`` lock.
    """

    __slots__ = (
        "_error_handler",
        "_globals",
        "_handler",
        "_in_flight",
        "_ids",
        "_lock",
        "_secret",
        "_shutdown_hooks",
        "_startup_hooks",
        "_stopping",
        "config",
    )

    def __init__(
        self,
        handler: Handler,
        config: AppConfig | None = None,
        *,
        error_handler: ErrorHandler = default_error_handler,
    ) -> None:
        self.config: AppConfig = config or AppConfig()
        _check_config(self.config)
        self._handler = handler
        self._error_handler = error_handler
        self._globals = GlobalStore()
        self._secret = self.config.secret or new_secret()
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._in_flight = 0
        self._stopping = False

    # -- Lifecycle hooks --

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Decorator: run *func* (plain or ``async``) from ``startup()``.

        The server calls ``startup()`` on the lifespan startup event, so
        hooks finish before the first request arrives::

            @app.on_startup
            async def connect():
                await database.connect()
        """
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Decorator: run *func* from ``shutdown()``, once requests have drained."""
        self._shutdown_hooks.append(func)
        return func

    # -- State --

    @property
    def globals(self) -> GlobalStore:
        """Values of global variables for this app."""
        return self._globals

    @property
    def in_flight(self) -> int:
        """Number of HTTP requests currently being handled."""
        return self._in_flight

    @property
    def stopping(self) -> bool:
        return self._stopping

    # -- Graceful stop --

    def stop(self) -> None:
        """Stop taking requests. New ones get ``503``; in-flight ones finish."""
        if not self._stopping:
            _log.info("Stopping; %d request(s) in flight", self._in_flight)
        self._stopping = True

    async def drain(self, grace: float | None = None) -> bool:
        """Wait up to *grace* seconds for in-flight requests to finish.

        Defaults to ``config.graceful_stop``. Returns whether all of them
        did.
        """
        timeout = self.config.graceful_stop if grace is None else grace
        with anyio.move_on_after(timeout):
            while self._in_flight > 0:
                await anyio.sleep(0.01)
        if self._in_flight > 0:
            _log.warning("%d request(s) still running after %.1fs", self._in_flight, timeout)
            return False
        return True

    # -- Errors from outside the handler --

    async def report(self, error: Error) -> Response | None:
        """Hand an error detected by transport code to the error handler.

        Returns the response to send, or ``None`` when the connection
        should just be closed.
        """
        return await dispatch_error(error, self._error_handler)

    # -- Serving --

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Serve the app with pounce until interrupted.

        Installs reverie's log handler at ``config.log_level`` first.
        """
        from reverie.server.runner import run_server

        _host = host or self.config.host
        _port = port or self.config.port

        initialize_log(self.config.log_level)
        if self.config.greeting:
            _log.info("Running at http://%s:%d%s", _host, _port, self.config.prefix or "/")
            _log.info("Type Ctrl+C to stop")
        run_server(self, _host, _port)

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point.

        Handles lifespan scopes directly, rejects WebSocket scopes through
        the error handler, and delegates HTTP scopes to the request
        handler pipeline.
        """
        scope_type = scope["type"]
        if scope_type == "lifespan":
            await self._handle_lifespan(scope, receive, send)
            return
        if scope_type == "websocket":
            await reject_websocket(
                scope, receive, send, error_handler=self._error_handler, config=self.config
            )
            return
        if scope_type != "http":
            return

        if self._stopping:
            await send_unavailable(send)
            return

        with self._lock:
            self._in_flight += 1
            request_id = str(next(self._ids))
        try:
            await handle_request(
                scope,
                receive,
                send,
                handler=self._handler,
                error_handler=self._error_handler,
                config=self.config,
                globals=self._globals,
                request_id=request_id,
                secret=self._secret,
            )
        finally:
            with self._lock:
                self._in_flight -= 1

    async def startup(self) -> None:
        """Run startup hooks in registration order."""
        for hook in self._startup_hooks:
            await invoke(hook)

    async def shutdown(self) -> None:
        """Stop taking requests, drain in-flight ones, then run shutdown hooks."""
        self.stop()
        await self.drain()
        for hook in self._shutdown_hooks:
            await invoke(hook)

    async def _handle_lifespan(
        self,
        scope: Scope,
        receive: Receive,
        send: Send,
    ) -> None:
        """Run the ASGI lifespan protocol.

        Runs ``startup()`` and ``shutdown()`` at the matching events and
        signals completion back to the server.
        """
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    await self.startup()
                    await send({"type": "lifespan.startup.complete"})
                except Exception as exc:
                    _log.error("Startup failed: %s", exc, exc_info=exc)
                    await send(
                        {
                            "type": "lifespan.startup.failed",
                            "message": str(exc),
                        }
                    )
                    return

            elif msg_type == "lifespan.shutdown":
                await self.shutdown()
                await send({"type": "lifespan.shutdown.complete"})
                return


def _check_config(config: AppConfig) -> None:
    if config.prefix and not config.prefix.startswith("/"):
        msg = f"AppConfig.prefix must start with '/', got {config.prefix!r}."
        raise ConfigurationError(msg)
    if config.graceful_stop < 0:
        msg = f"AppConfig.graceful_stop must not be negative, got {config.graceful_stop!r}."
        raise ConfigurationError(msg)
    if not 0 < config.port < 65536:
        msg = f"AppConfig.port must be between 1 and 65535, got {config.port!r}."
        raise ConfigurationError(msg)
    if config.log_level.lower() not in {level.value for level in LogLevel}:
        msg = (
            "AppConfig.log_level must be one of error, warning, info, debug; "
            f"got {config.log_level!r}."
        )
        raise ConfigurationError(msg)
