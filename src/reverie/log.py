"""Logging on top of the standard ``logging`` module.

Every reverie logger lives under ``reverie.*``. Application code gets
its own named loggers through ``sub_log``::

    db_log = sub_log("app.db")

    async def show_user(request):
        db_log.info("loading user %s", request.crumb("id"), request=request)

Passing ``request=`` tags the record with that request's id. Without it
the id of the request currently being handled (``request_var``) is used,
and ``-`` outside any request.

Nothing is printed until a handler is installed: ``App.run`` calls
``initialize_log``, tests use pytest's ``caplog``, and embedding
programs configure ``logging`` however they like.
"""

import logging
import sys
from enum import Enum
from typing import TYPE_CHECKING, Any

from reverie.variables import Local, new_local

if TYPE_CHECKING:
    from reverie.http.request import Request

_ROOT = "reverie"

_FORMAT = "%(asctime)s.%(msecs)03d %(name)20s %(request_id)6s %(levelname)-7s %(message)s"
_DATE_FORMAT = "%d.%m.%y %H:%M:%S"


class LogLevel(str, Enum):
    """Severity of a log record, and of an error report."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"
    DEBUG = "debug"

    @property
    def level(self) -> int:
        """The matching ``logging`` level number."""
        return _LEVELS[self]


_LEVELS: dict[LogLevel, int] = {
    LogLevel.ERROR: logging.ERROR,
    LogLevel.WARNING: logging.WARNING,
    LogLevel.INFO: logging.INFO,
    LogLevel.DEBUG: logging.DEBUG,
}


request_id_var: Local[str] = new_local(name="request_id", debug=lambda rid: ("id", rid))
"""Per-request id assigned by the ASGI host."""


def request_id(request: "Request") -> str | None:
    """The id the host assigned to *request*, if any."""
    return request.local(request_id_var)


class RequestIdFilter(logging.Filter):
    """Fill ``record.request_id`` for the log format.

    Takes the id from the request passed to ``SubLog`` methods, else from
    the request being handled in the current context, else ``-``.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "request_id", None):
            return True
        request = getattr(record, "request", None)
        if request is None:
            from reverie.context import request_var

            request = request_var.get(None)
        rid = request.local(request_id_var) if request is not None else None
        record.request_id = rid or "-"
        return True


class SubLog:
    """A named logger with an optional ``request=`` argument on every method."""

    __slots__ = ("_logger",)

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    @property
    def name(self) -> str:
        return self._logger.name

    @property
    def logger(self) -> logging.Logger:
        """The underlying ``logging.Logger``."""
        return self._logger

    def _log(
        self,
        level: int,
        msg: str,
        args: tuple[Any, ...],
        request: "Request | None",
        **kwargs: Any,
    ) -> None:
        if self._logger.isEnabledFor(level):
            self._logger.log(
                level, msg, *args, extra={"request": request}, stacklevel=3, **kwargs
            )

    def error(
        self, msg: str, *args: Any, request: "Request | None" = None, exc_info: Any = None
    ) -> None:
        self._log(logging.ERROR, msg, args, request, exc_info=exc_info)

    def warning(
        self, msg: str, *args: Any, request: "Request | None" = None, exc_info: Any = None
    ) -> None:
        self._log(logging.WARNING, msg, args, request, exc_info=exc_info)

    def info(self, msg: str, *args: Any, request: "Request | None" = None) -> None:
        self._log(logging.INFO, msg, args, request)

    def debug(self, msg: str, *args: Any, request: "Request | None" = None) -> None:
        self._log(logging.DEBUG, msg, args, request)

    def at(
        self,
        severity: LogLevel,
        msg: str,
        *args: Any,
        request: "Request | None" = None,
        exc_info: Any = None,
    ) -> None:
        """Log at a level chosen at runtime."""
        self._log(severity.level, msg, args, request, exc_info=exc_info)


def sub_log(name: str) -> SubLog:
    """Return the sub-log *name*, creating it on first use.

    Names are nested under ``reverie``: ``sub_log("app.db")`` logs to
    the ``reverie.app.db`` logger, so one level setting covers them all.
    """
    if name != _ROOT and not name.startswith(_ROOT + "."):
        name = f"{_ROOT}.{name}"
    return SubLog(logging.getLogger(name))


_default = sub_log("app")


def log(msg: str, *args: Any, request: "Request | None" = None) -> None:
    """Log at info level to the default application log."""
    _default.info(msg, *args, request=request)


def error(msg: str, *args: Any, request: "Request | None" = None) -> None:
    _default.error(msg, *args, request=request)


def warning(msg: str, *args: Any, request: "Request | None" = None) -> None:
    _default.warning(msg, *args, request=request)


def info(msg: str, *args: Any, request: "Request | None" = None) -> None:
    _default.info(msg, *args, request=request)


def debug(msg: str, *args: Any, request: "Request | None" = None) -> None:
    _default.debug(msg, *args, request=request)


class _ReverieHandler(logging.StreamHandler):
    """Marker type so repeated ``initialize_log`` calls replace, not stack."""


def initialize_log(level: LogLevel | str = LogLevel.INFO, *, enable: bool = True) -> None:
    """Install one stream handler on the ``reverie`` logger.

    Safe to call more than once; the previous handler is replaced. With
    ``enable=False`` reverie's logging is switched off entirely.
    """
    root = logging.getLogger(_ROOT)
    for existing in list(root.handlers):
        if isinstance(existing, _ReverieHandler):
            root.removeHandler(existing)

    if not enable:
        root.setLevel(logging.CRITICAL + 1)
        return

    severity = level if isinstance(level, LogLevel) else LogLevel(level.lower())
    root.setLevel(severity.level)
    handler = _ReverieHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT))
    handler.addFilter(RequestIdFilter())
    root.addHandler(handler)
    root.propagate = False
