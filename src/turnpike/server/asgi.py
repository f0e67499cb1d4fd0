"""ASGI adapter — lets an ASGI server host a Router.

The only component that touches raw ASGI directly. Reads the request
body, converts the scope to a ``Request``, runs the synchronous dispatch
in a worker thread, and sends the ``Response`` back through ``send()``.

Usage::

    from turnpike.server.asgi import ASGIAdapter

    app = ASGIAdapter(router)   # serve with any ASGI server
"""

import logging

import anyio.to_thread

from turnpike._internal.asgi import Receive, Scope, Send
from turnpike.errors import HTTPError
from turnpike.http.request import Request
from turnpike.http.response import Response
from turnpike.routing.router import Router, error_response

logger = logging.getLogger("turnpike.server")


def _body_allowed(status: int) -> bool:
    """Whether an HTTP status code permits a response body."""
    # RFC: 1xx, 204, and 304 responses do not include a message body.
    return not (100 <= status < 200 or status in {204, 304})


async def read_body(receive: Receive, limit: int) -> bytes:
    """Drain ``http.request`` messages into one bytes object.

    Raises ``HTTPError(413)`` once more than *limit* bytes arrive.
    """
    chunks: list[bytes] = []
    size = 0
    while True:
        message = await receive()
        if message["type"] == "http.disconnect":
            break
        chunk = message.get("body", b"")
        if chunk:
            size += len(chunk)
            if size > limit:
                raise HTTPError(status=413, detail="Request body too large")
            chunks.append(chunk)
        if not message.get("more_body", False):
            break
    return b"".join(chunks)


async def send_response(response: Response, send: Send) -> None:
    """Translate a turnpike Response into ASGI send() calls."""
    raw_headers: list[tuple[bytes, bytes]] = [
        (b"content-type", response.content_type.encode("latin-1")),
    ]
    for name, value in response.headers:
        raw_headers.append((name.lower().encode("latin-1"), value.encode("latin-1")))

    body = response.body_bytes if _body_allowed(response.status) else b""

    raw_headers.append((b"content-length", str(len(body)).encode("latin-1")))

    await send(
        {
            "type": "http.response.start",
            "status": response.status,
            "headers": raw_headers,
        }
    )
    await send(
        {
            "type": "http.response.body",
            "body": body,
        }
    )


def internal_error_response(exc: Exception, *, debug: bool) -> Response:
    """Plain 500 response; includes the exception in debug mode."""
    body = f"Internal Server Error: {type(exc).__name__}: {exc}" if debug else "Internal Server Error"
    return Response(body=body, status=500, content_type="text/plain; charset=utf-8")


async def handle_request(scope: Scope, receive: Receive, send: Send, *, router: Router) -> None:
    """Process a single HTTP request through the router."""
    config = router.config
    try:
        body = await read_body(receive, config.max_content_length)
        request = Request.from_asgi(scope, body)
        response = await anyio.to_thread.run_sync(router.dispatch, request)
    except HTTPError as exc:
        logger.debug("%d %s %s: %s", exc.status, scope.get("method"), scope.get("path"), exc.detail)
        response = error_response(exc)
    except Exception as exc:
        logger.exception("500 %s %s", scope.get("method"), scope.get("path"))
        response = internal_error_response(exc, debug=config.debug)

    await send_response(response, send)


class ASGIAdapter:
    """ASGI 3.0 application wrapping a ``Router``.

    Freezes the router during lifespan startup (running validation when
    ``RouterConfig.strict`` is set) so a broken route table fails the
    server start instead of the first request.
    """

    __slots__ = ("router",)

    def __init__(self, router: Router) -> None:
        self.router = router

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return
        if scope["type"] != "http":
            return
        await handle_request(scope, receive, send, router=self.router)

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    self.router.freeze()
                except Exception as exc:
                    logger.exception("Router failed to start")
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return
