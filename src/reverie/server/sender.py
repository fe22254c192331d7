"""ASGI response sending: translates a reverie Response into ASGI messages."""

import logging

from reverie._internal.asgi import Send
from reverie.http.response import Response

logger = logging.getLogger("reverie.http")


def _body_allowed(status: int) -> bool:
    """Whether an HTTP status code permits a response body."""
    # RFC: 1xx, 204, and 304 responses do not include a message body.
    return not (100 <= status < 200 or status in {204, 304})


async def send_response(response: Response, send: Send, *, head: bool = False) -> None:
    """Translate a Response into ASGI ``send()`` calls.

    A streamed body is read to completion first. For *head* requests the
    headers (including ``Content-Length``) are those of the full
    response and the body is left out.
    """
    status = int(response.status)
    raw_headers = response.headers.raw

    if _body_allowed(status):
        body = await response.body()
        if "content-length" not in response.headers:
            raw_headers.append((b"content-length", str(len(body)).encode("latin-1")))
    else:
        body = b""
        raw_headers = [pair for pair in raw_headers if pair[0] != b"content-length"]

    await send(
        {
            "type": "http.response.start",
            "status": status,
            "headers": raw_headers,
        }
    )
    await send(
        {
            "type": "http.response.body",
            "body": b"" if head else body,
        }
    )
    logger.debug("Sent %d (%d bytes)", status, 0 if head else len(body))
