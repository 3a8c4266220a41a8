"""
=============================================================================
USER HANDLERS
=============================================================================

CRUD-style demo endpoints over an in-memory user list.

    GET    /api/users       →  200 {"users": [...], "count": 3}
    POST   /api/users       →  201 {"id": 4, "name": ..., "email": ..., "created": true}
    GET    /api/users/:id   →  200 {"id": 1, ...}   or 404 {"error": "User not found"}
    DELETE /api/users/:id   →  200 {"message": "User 1 deleted", "success": true}
                                or 404

=============================================================================
SHARED STATE
=============================================================================

The store is the only mutable state shared between requests. It is passed
into UserHandlers instead of living in a module-level variable, and every
operation takes its lock:

    ┌───────────────┐        ┌──────────────────────────────┐
    │ UserHandlers  │──────► │ UserStore                    │
    │  list/create  │        │   _lock: threading.Lock      │
    │  get/delete   │        │   _users: Dict[int, User]    │
    └───────────────┘        │   _next_id: int              │
                             └──────────────────────────────┘

The server accepts one connection at a time, so the lock is never
contended there; it keeps the store correct if handlers run on several
threads (e.g. in tests or behind a different transport).

=============================================================================
"""

from dataclasses import asdict, dataclass
from typing import Dict, Iterable, List, Optional
import logging
import threading

from ..http.request import Request
from ..http.response import Response, error_response, json_response
from ..http.status_codes import HTTPStatus


logger = logging.getLogger(__name__)


DEFAULT_NAME = "New User"
DEFAULT_EMAIL = "newuser@example.com"


@dataclass(frozen=True)
class User:
    id: int
    name: str
    email: str

    def to_dict(self) -> dict:
        return asdict(self)


SEED_USERS = (
    ("Alice", "alice@example.com"),
    ("Bob", "bob@example.com"),
    ("Charlie", "charlie@example.com"),
)


class UserStore:
    """
    Thread-safe in-memory user store.

    Ids start at 1 and are never reused, so deleting user 3 and creating a
    new one yields id 4, not 3.

    Usage:
        store = UserStore()              # seeded with Alice, Bob, Charlie
        store = UserStore(seed=[])       # empty
        user = store.create("Dana", "dana@example.com")
    """

    def __init__(self, seed: Optional[Iterable[tuple]] = None):
        self._lock = threading.Lock()
        self._users: Dict[int, User] = {}
        self._next_id = 1

        for name, email in (SEED_USERS if seed is None else seed):
            self.create(name, email)

    def list(self) -> List[User]:
        """All users, ordered by id."""
        with self._lock:
            return [self._users[user_id] for user_id in sorted(self._users)]

    def get(self, user_id: int) -> Optional[User]:
        with self._lock:
            return self._users.get(user_id)

    def create(self, name: str, email: str) -> User:
        with self._lock:
            user = User(id=self._next_id, name=name, email=email)
            self._users[user.id] = user
            self._next_id += 1
            return user

    def delete(self, user_id: int) -> bool:
        """
        Remove a user.

        Returns:
            True if the user existed.
        """
        with self._lock:
            return self._users.pop(user_id, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._users)


def _parse_user_id(request: Request) -> Optional[int]:
    """The :id path parameter as a positive int, or None."""
    try:
        user_id = int(request.path_params.get("id", ""))
    except ValueError:
        return None
    return user_id if user_id > 0 else None


class UserHandlers:
    """
    Route handlers bound to one UserStore.

    Usage:
        users = UserHandlers(UserStore())
        routes.register("GET", "/api/users", users.list)
        routes.register("GET", "/api/users/:id", users.get)
    """

    def __init__(self, store: UserStore):
        self.store = store

    def list(self, request: Request, response: Response) -> None:
        users = self.store.list()
        json_response(response, HTTPStatus.OK, {
            "users": [user.to_dict() for user in users],
            "count": len(users),
        })

    def create(self, request: Request, response: Response) -> None:
        """
        Create a user from a form-encoded body.

        Fields missing from the body (or a body of any other content type)
        fall back to "New User" / "newuser@example.com".
        """
        logger.info(f"Received POST body: {request.text}")

        form = request.form
        user = self.store.create(
            name=form.get("name") or DEFAULT_NAME,
            email=form.get("email") or DEFAULT_EMAIL,
        )
        json_response(response, HTTPStatus.CREATED, {**user.to_dict(), "created": True})

    def get(self, request: Request, response: Response) -> None:
        user_id = _parse_user_id(request)
        user = self.store.get(user_id) if user_id is not None else None
        if user is None:
            error_response(response, HTTPStatus.NOT_FOUND, "User not found")
            return
        json_response(response, HTTPStatus.OK, user.to_dict())

    def delete(self, request: Request, response: Response) -> None:
        user_id = _parse_user_id(request)
        if user_id is None or not self.store.delete(user_id):
            error_response(response, HTTPStatus.NOT_FOUND, "User not found")
            return
        json_response(response, HTTPStatus.OK, {
            "message": f"User {user_id} deleted",
            "success": True,
        })
