"""
Unit tests for the demo handlers and the user store.
"""

from dataclasses import replace
import json
import threading
import time

import pytest

from minirouter.handlers import (
    UserHandlers,
    UserStore,
    handle_admin,
    handle_hello,
    handle_home,
    handle_not_found,
    handle_time,
)
from minirouter.http.request import Request
from minirouter.http.response import Response


def call(handler, method: str, target: str, path_params: dict = None, **kwargs) -> Response:
    """Run a handler against a fresh response and return it."""
    request = Request.from_target(method, target, **kwargs)
    if path_params:
        request = replace(request, path_params=path_params)
    response = Response()
    handler(request, response)
    return response


@pytest.fixture
def users() -> UserHandlers:
    return UserHandlers(UserStore())


class TestDemoHandlers:
    """Tests for the stateless handlers."""

    def test_home(self):
        """Home page lists the endpoints as HTML."""
        response = call(handle_home, "GET", "/")

        assert response.status_code == 200
        assert response.content_type == "text/html"
        assert "/api/users" in response.body

    def test_hello_default_guest(self):
        """Missing name greets Guest."""
        before = int(time.time())
        body = json.loads(call(handle_hello, "GET", "/api/hello").body)

        assert body["message"] == "Hello, Guest!"
        assert body["timestamp"] >= before

    def test_hello_with_name(self):
        """The name query parameter is used."""
        body = json.loads(call(handle_hello, "GET", "/api/hello?name=Alice").body)
        assert body["message"] == "Hello, Alice!"

    def test_time(self):
        """Time returns ctime text and a unix timestamp."""
        response = call(handle_time, "GET", "/api/time")
        body = json.loads(response.body)

        assert response.status_code == 200
        assert isinstance(body["current_time"], str)
        assert isinstance(body["unix_timestamp"], int)

    def test_admin(self):
        """Admin handler welcomes the caller."""
        response = call(handle_admin, "GET", "/admin")
        assert json.loads(response.body) == {"message": "Welcome to admin panel"}

    def test_not_found(self):
        """Not-found handler returns 404."""
        response = call(handle_not_found, "GET", "/x")
        assert response.status_code == 404
        assert json.loads(response.body) == {"error": "Route not found"}


class TestUserHandlers:
    """Tests for UserHandlers."""

    def test_list(self, users):
        """Seeded store lists three users."""
        body = json.loads(call(users.list, "GET", "/api/users").body)

        assert body["count"] == 3
        assert body["users"][0] == {"id": 1, "name": "Alice", "email": "alice@example.com"}

    def test_create_defaults(self, users):
        """Without a form body the default name and email are used."""
        response = call(users.create, "POST", "/api/users")
        body = json.loads(response.body)

        assert response.status_code == 201
        assert body == {
            "id": 4,
            "name": "New User",
            "email": "newuser@example.com",
            "created": True,
        }

    def test_create_from_form(self, users):
        """Form-encoded name and email are used."""
        response = call(
            users.create, "POST", "/api/users",
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            body=b"name=John&email=john%40example.com",
        )
        body = json.loads(response.body)

        assert body["name"] == "John"
        assert body["email"] == "john@example.com"
        assert len(users.store) == 4

    def test_create_logs_body(self, users, caplog):
        """The received body is logged."""
        with caplog.at_level("INFO", logger="minirouter.handlers.users"):
            call(users.create, "POST", "/api/users", body=b"hello-body")
        assert "hello-body" in caplog.text

    def test_get(self, users):
        """Existing users are returned by id."""
        response = call(users.get, "GET", "/api/users/1", path_params={"id": "1"})

        assert response.status_code == 200
        assert json.loads(response.body)["name"] == "Alice"

    @pytest.mark.parametrize("user_id", ["99", "0", "-1", "abc"])
    def test_get_not_found(self, users, user_id):
        """Unknown or invalid ids are 404."""
        response = call(users.get, "GET", f"/api/users/{user_id}", path_params={"id": user_id})

        assert response.status_code == 404
        assert json.loads(response.body) == {"error": "User not found"}

    def test_delete(self, users):
        """Deleting an existing user succeeds and removes it."""
        response = call(users.delete, "DELETE", "/api/users/2", path_params={"id": "2"})

        assert response.status_code == 200
        assert json.loads(response.body) == {"message": "User 2 deleted", "success": True}
        assert users.store.get(2) is None

    def test_delete_twice(self, users):
        """Deleting the same user twice is a 404 the second time."""
        call(users.delete, "DELETE", "/api/users/2", path_params={"id": "2"})
        response = call(users.delete, "DELETE", "/api/users/2", path_params={"id": "2"})
        assert response.status_code == 404


class TestUserStore:
    """Tests for UserStore."""

    def test_seeded(self):
        """Default store holds Alice, Bob and Charlie."""
        assert [user.name for user in UserStore().list()] == ["Alice", "Bob", "Charlie"]

    def test_empty_seed(self):
        """An empty seed gives an empty store."""
        assert len(UserStore(seed=[])) == 0

    def test_ids_not_reused(self):
        """Deleted ids are never handed out again."""
        store = UserStore()
        store.delete(3)
        assert store.create("Dana", "dana@example.com").id == 4

    def test_concurrent_creates(self):
        """Concurrent creates get distinct ids."""
        store = UserStore(seed=[])

        def worker():
            for _ in range(50):
                store.create("u", "u@example.com")

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        ids = [user.id for user in store.list()]
        assert len(ids) == 200
        assert len(set(ids)) == 200
