"""Test client for turnpike routers.

Uses the same Request and Response types as production. Builds requests
directly and dispatches them in-process without ASGI or HTTP.
"""

from collections.abc import Mapping
from typing import Any

from turnpike.http.request import Request
from turnpike.http.response import Response
from turnpike.routing.router import Router

_NO_JSON: Any = object()


def assert_status(response: Response, status: int) -> None:
    """Assert the response has *status*, showing the body on failure."""
    assert response.status == status, (
        f"Expected status {status}, got {response.status}.\n"
        f"Response body: {response.text[:500]}"
    )


def assert_body(response: Response, text: str) -> None:
    """Assert the response body equals *text* exactly."""
    assert response.text == text, f"Expected body {text!r}, got {response.text[:500]!r}"


class TestClient:
    __test__ = False  # Tell pytest this is not a test class
    """Synchronous test client for turnpike routers.

    Usage::

        client = TestClient(router)
        response = client.get("/users/42")
        assert response.status == 200

    ``last_request`` holds the most recent Request so tests can inspect
    route params and middleware-set attributes after dispatch.
    """

    __slots__ = ("last_request", "router")

    def __init__(self, router: Router) -> None:
        self.router = router
        self.last_request: Request | None = None

    def request(
        self,
        method: str,
        path: str,
        *,
        headers: Mapping[str, str] | None = None,
        query: Mapping[str, Any] | None = None,
        json: Any = _NO_JSON,
        data: Mapping[str, Any] | None = None,
        body: bytes | None = None,
    ) -> Response:
        """Build a request and dispatch it through the router."""
        kwargs: dict[str, Any] = {"headers": headers, "query": query, "data": data, "body": body}
        if json is not _NO_JSON:
            kwargs["json"] = json
        request = Request.build(method, path, **kwargs)
        self.last_request = request
        return self.router.dispatch(request)

    def get(self, path: str, **kwargs: Any) -> Response:
        """Send a GET request."""
        return self.request("GET", path, **kwargs)

    def post(self, path: str, **kwargs: Any) -> Response:
        """Send a POST request."""
        return self.request("POST", path, **kwargs)

    def put(self, path: str, **kwargs: Any) -> Response:
        """Send a PUT request."""
        return self.request("PUT", path, **kwargs)

    def patch(self, path: str, **kwargs: Any) -> Response:
        """Send a PATCH request."""
        return self.request("PATCH", path, **kwargs)

    def delete(self, path: str, **kwargs: Any) -> Response:
        """Send a DELETE request."""
        return self.request("DELETE", path, **kwargs)
