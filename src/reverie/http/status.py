"""HTTP status codes.

``Status`` is an ``IntEnum``, so members compare equal to plain ints and
responses can store either. Codes outside the standard set are carried
as bare ``int`` values; ``to_status`` returns whichever applies.
"""

from enum import IntEnum


class Status(IntEnum):
    """Standard HTTP status codes, grouped by class."""

    # 1xx informational
    CONTINUE = 100
    SWITCHING_PROTOCOLS = 101

    # 2xx successful
    OK = 200
    CREATED = 201
    ACCEPTED = 202
    NON_AUTHORITATIVE_INFORMATION = 203
    NO_CONTENT = 204
    RESET_CONTENT = 205
    PARTIAL_CONTENT = 206

    # 3xx redirection
    MULTIPLE_CHOICES = 300
    MOVED_PERMANENTLY = 301
    FOUND = 302
    SEE_OTHER = 303
    NOT_MODIFIED = 304
    TEMPORARY_REDIRECT = 307
    PERMANENT_REDIRECT = 308

    # 4xx client error
    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    PAYMENT_REQUIRED = 402
    FORBIDDEN = 403
    NOT_FOUND = 404
    METHOD_NOT_ALLOWED = 405
    NOT_ACCEPTABLE = 406
    PROXY_AUTHENTICATION_REQUIRED = 407
    REQUEST_TIMEOUT = 408
    CONFLICT = 409
    GONE = 410
    LENGTH_REQUIRED = 411
    PRECONDITION_FAILED = 412
    PAYLOAD_TOO_LARGE = 413
    URI_TOO_LONG = 414
    UNSUPPORTED_MEDIA_TYPE = 415
    RANGE_NOT_SATISFIABLE = 416
    EXPECTATION_FAILED = 417
    MISDIRECTED_REQUEST = 421
    TOO_EARLY = 425
    UPGRADE_REQUIRED = 426
    PRECONDITION_REQUIRED = 428
    TOO_MANY_REQUESTS = 429
    REQUEST_HEADER_FIELDS_TOO_LARGE = 431
    UNAVAILABLE_FOR_LEGAL_REASONS = 451

    # 5xx server error
    INTERNAL_SERVER_ERROR = 500
    NOT_IMPLEMENTED = 501
    BAD_GATEWAY = 502
    SERVICE_UNAVAILABLE = 503
    GATEWAY_TIMEOUT = 504
    HTTP_VERSION_NOT_SUPPORTED = 505

    @property
    def phrase(self) -> str:
        """Reason phrase, e.g. ``"Not Found"``."""
        return _PHRASES.get(self, self.name.replace("_", " ").title())


# Phrases that don't follow from the member name
_PHRASES: dict[int, str] = {
    200: "OK",
    203: "Non-Authoritative Information",
    414: "URI Too Long",
    505: "HTTP Version Not Supported",
}

_BY_CODE: dict[int, Status] = {s.value: s for s in Status}


def to_status(code: int) -> Status | int:
    """Return the ``Status`` member for *code*, or *code* itself if unknown."""
    return _BY_CODE.get(code, code)


def status_to_int(status: Status | int) -> int:
    return int(status)


def status_to_reason(status: Status | int) -> str | None:
    """Reason phrase for a standard status, ``None`` for other codes."""
    known = _BY_CODE.get(int(status))
    return known.phrase if known is not None else None


def status_to_string(status: Status | int) -> str:
    """Reason phrase if known, otherwise the decimal code."""
    return status_to_reason(status) or str(int(status))


def is_informational(status: Status | int) -> bool:
    return 100 <= status < 200


def is_successful(status: Status | int) -> bool:
    return 200 <= status < 300


def is_redirection(status: Status | int) -> bool:
    return 300 <= status < 400


def is_client_error(status: Status | int) -> bool:
    return 400 <= status < 500


def is_server_error(status: Status | int) -> bool:
    return 500 <= status < 600
