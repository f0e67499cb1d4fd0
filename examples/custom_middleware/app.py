"""Custom Middleware — function, instance, and per-request class middleware.

Demonstrates:
- Function middleware (timing — adds X-Response-Time header)
- Shared instance middleware (rate limiter — 5 req/min per client, 429 when exceeded)
- Class middleware instantiated per request (request id stored as an attribute)
- Serving the router under any ASGI server through ``ASGIAdapter``

Run:
    cd examples/custom_middleware && uvicorn app:app
"""

import itertools
import threading
import time
from typing import Any

from turnpike import Request, Response, Router
from turnpike.middleware.protocol import Next
from turnpike.server.asgi import ASGIAdapter

router = Router()


# ---------------------------------------------------------------------------
# Function middleware: timing
# ---------------------------------------------------------------------------


def timing(request: Request, next: Next) -> Response:
    """Add X-Response-Time header to every response."""
    start = time.monotonic()
    response = next(request)
    elapsed = time.monotonic() - start
    return response.with_header("X-Response-Time", f"{elapsed:.3f}s")


# ---------------------------------------------------------------------------
# Instance middleware: rate limiter
# ---------------------------------------------------------------------------


class RateLimiter:
    """Per-client rate limiter. Returns 429 when limit exceeded."""

    def __init__(self, max_requests: int, window: float) -> None:
        self.max_requests = max_requests
        self.window = window
        self._counts: dict[str, list[float]] = {}
        self._lock = threading.Lock()

    def handle(self, request: Request, next: Next) -> Any:
        client = request.header("x-forwarded-for", "127.0.0.1")
        if "," in client:
            client = client.split(",")[0].strip()

        with self._lock:
            now = time.monotonic()
            hits = self._counts.setdefault(client, [])
            hits[:] = [t for t in hits if now - t < self.window]

            if len(hits) >= self.max_requests:
                return Response("Too Many Requests").with_status(429)
            hits.append(now)

        return next(request)


# ---------------------------------------------------------------------------
# Class middleware: a fresh instance per request
# ---------------------------------------------------------------------------

_request_ids = itertools.count(1)


class RequestId:
    """Tag each request with an increasing id, visible to the handler."""

    def __init__(self) -> None:
        self.request_id = next(_request_ids)

    def handle(self, request: Request, next: Next) -> Response:
        request.set("request_id", self.request_id)
        return next(request).with_header("X-Request-Id", str(self.request_id))


# ---------------------------------------------------------------------------
# Middleware stack (first added is outermost)
# ---------------------------------------------------------------------------

router.add_middleware(timing)
router.add_middleware(RateLimiter(max_requests=5, window=60.0))


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


router.get("/", lambda: "OK")
router.get("/whoami", lambda request: f"request {request.get('request_id')}").middleware(
    RequestId
)

app = ASGIAdapter(router)
