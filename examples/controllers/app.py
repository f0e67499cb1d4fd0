"""Controllers — a small site wired with every kind of handler.

Demonstrates:
- Closures, ``"Controller@method"`` strings and ``(Controller, "method")`` pairs
- Global middleware (request logging) and route middleware (auth)
- Groups with prefix, middleware and namespace, including nested groups
- Named routes and ``url_for``
- A fallback for unmatched requests

Run:
    cd examples/controllers && python app.py
"""

import logging
from typing import Any

from turnpike import Request, Router
from turnpike.middleware import RequestLogger
from turnpike.middleware.protocol import Next
from turnpike.testing import TestClient

router = Router()


# ---------------------------------------------------------------------------
# Controllers
# ---------------------------------------------------------------------------


@router.controller(namespace="app.controllers")
class UserController:
    def show(self, request: Request) -> str:
        return f"User detail: {request.param('id')}"

    def list(self, request: Request) -> str:
        return "User list"


@router.controller(namespace="app.controllers")
class AdminController:
    def dashboard(self, request: Request) -> str:
        return "Admin dashboard"


@router.controller(namespace="app.controllers")
class ProfileController:
    def show(self, request: Request) -> str:
        return f"Profile: {request.param('id')}"


# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------


class AuthMiddleware:
    """Reject requests without an Authorization header; attach the user otherwise."""

    def handle(self, request: Request, next: Next) -> Any:
        if not request.header("authorization"):
            return "Unauthorized", 401
        request.set("user", {"id": 1, "name": "Test User"})
        return next(request)


router.add_middleware(RequestLogger())
router.alias_middleware("auth", AuthMiddleware)


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

router.get("/hello", lambda request: "Hello, World!")


@router.fallback
def not_found() -> str:
    return "Page not found!"


def receive_data(request: Request) -> str:
    return f"Received: {request.input()}"


router.post("/api/data", receive_data)
router.get("/users/{id}", "app.controllers.UserController@show")
router.get("/users", (UserController, "list"))
router.get("/secret", lambda: "Secret area!").middleware([AuthMiddleware])

with router.group(
    {"prefix": "/admin", "middleware": ["auth"], "namespace": "app.controllers"}
) as admin:
    admin.get("/dashboard", "AdminController@dashboard")
    admin.get("/users", "UserController@list")

with router.group(prefix="/api") as api, api.group(prefix="/v1") as v1:
    v1.get("/ping", lambda: "pong")

router.get("/profile/{id}", "app.controllers.ProfileController@show").name("profile.show")

router.put("/put-example", lambda: "PUT request")
router.patch("/patch-example", lambda: "PATCH request")
router.delete("/delete-example", lambda: "DELETE request")


router.get(
    "/search/{term}",
    lambda request, term: f"Search: {term}, page: {request.query_param('page', 1)}",
).name("search")

router.post("/json", lambda request: {"received": request.input()})


def me(request: Request) -> str:
    user = request.user or {}
    return f"Signed in as: {user.get('name', 'Anonymous')}"


router.get("/me", me).middleware("auth")
router.get("/multi/{foo}/{bar}", lambda request: request.params)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    client = TestClient(router)
    print(router.url_for("profile.show", id=42))
    for path in ("/hello", "/users/7", "/admin/dashboard", "/api/v1/ping", "/nowhere"):
        response = client.get(path)
        print(response.status, path, response.text)
