"""Registration, login, handle generation and profile updates."""
import logging
import re
from typing import TYPE_CHECKING

from pydantic import EmailStr, TypeAdapter, ValidationError

from huddle.errors import InvalidInput, NotFound
from huddle.models import User
from huddle.services.auth import (
    create_access_token,
    hash_password,
    new_session_id,
    resolve_session,
    session_of,
    verify_password,
)
from huddle.services.stats import init_user_stats

if TYPE_CHECKING:
    from huddle.services.store import WorkspaceStore

logger = logging.getLogger(__name__)

email_adapter = TypeAdapter(EmailStr)

MIN_PASSWORD_LENGTH = 6
MAX_NAME_LENGTH = 50
MIN_HANDLE_LENGTH = 3
MAX_HANDLE_LENGTH = 20


def validate_email(email: str) -> str:
    """Normalized address, or ``InvalidInput`` for anything email-validator rejects."""
    try:
        return email_adapter.validate_python(email)
    except ValidationError:
        raise InvalidInput("Invalid email address")


def _check_names(name_first: str, name_last: str) -> None:
    if not 1 <= len(name_first) <= MAX_NAME_LENGTH:
        raise InvalidInput("First name must be 1 to 50 characters")
    if not 1 <= len(name_last) <= MAX_NAME_LENGTH:
        raise InvalidInput("Last name must be 1 to 50 characters")


def _active_users(store: "WorkspaceStore") -> list[User]:
    return [u for u in store.users.values() if not u.is_removed]


def _email_taken(store: "WorkspaceStore", email: str) -> bool:
    return any(u.email == email for u in _active_users(store))


def generate_handle(store: "WorkspaceStore", name_first: str, name_last: str) -> str:
    """Lowercase alphanumeric first+last name, cut to 20 characters.

    Taken handles get the smallest free numeric suffix (``0``, ``1``, ...),
    which may push the handle past 20 characters.
    """
    base = re.sub(r"[^a-z0-9]", "", f"{name_first}{name_last}".lower())
    base = base[:MAX_HANDLE_LENGTH]
    taken = {u.handle for u in _active_users(store)}
    if base not in taken:
        return base
    suffix = 0
    while f"{base}{suffix}" in taken:
        suffix += 1
    return f"{base}{suffix}"


def _open_session(user: User) -> dict:
    session_id = new_session_id()
    user.sessions.append(session_id)
    return {
        "token": create_access_token(user.u_id, session_id),
        "auth_user_id": user.u_id,
    }


async def register_user(
    store: "WorkspaceStore",
    email: str,
    password: str,
    name_first: str,
    name_last: str,
) -> dict:
    email = validate_email(email)
    if len(password) < MIN_PASSWORD_LENGTH:
        raise InvalidInput("Password must be at least 6 characters")
    _check_names(name_first, name_last)

    password_hash = hash_password(password)

    async with store.lock:
        if _email_taken(store, email):
            raise InvalidInput("Email address already in use")

        u_id = max(store.users, default=0) + 1
        user = User(
            u_id=u_id,
            email=email,
            password_hash=password_hash,
            name_first=name_first,
            name_last=name_last,
            handle=generate_handle(store, name_first, name_last),
            # The first user to register owns the workspace
            is_global_owner=not store.users,
        )
        init_user_stats(user, store.now())
        store.users[u_id] = user
        logger.info("Registered user %d (%s)", u_id, user.handle)
        return _open_session(user)


async def login(store: "WorkspaceStore", email: str, password: str) -> dict:
    async with store.lock:
        user = next((u for u in _active_users(store) if u.email == email), None)
        if user is None:
            raise InvalidInput("Email address not registered")
        if not verify_password(password, user.password_hash):
            raise InvalidInput("Incorrect password")
        return _open_session(user)


async def logout(store: "WorkspaceStore", token: str | None) -> dict:
    async with store.lock:
        u_id = resolve_session(store, token)
        store.users[u_id].sessions.remove(session_of(token))
        return {}


# ---------------------------------------------------------------------------
# Profiles
# ---------------------------------------------------------------------------

async def user_profile(store: "WorkspaceStore", token: str | None, u_id: int) -> dict:
    """Profile of any user, removed users included."""
    async with store.lock:
        resolve_session(store, token)
        user = store.get_user(u_id)
        if user is None:
            raise NotFound("User not found")
        return user.profile()


async def list_users(store: "WorkspaceStore", token: str | None) -> dict:
    async with store.lock:
        resolve_session(store, token)
        return {"users": [u.profile() for u in _active_users(store)]}


async def set_name(
    store: "WorkspaceStore", token: str | None, name_first: str, name_last: str
) -> dict:
    async with store.lock:
        u_id = resolve_session(store, token)
        _check_names(name_first, name_last)
        user = store.users[u_id]
        user.name_first = name_first
        user.name_last = name_last
        return {}


async def set_email(store: "WorkspaceStore", token: str | None, email: str) -> dict:
    async with store.lock:
        u_id = resolve_session(store, token)
        email = validate_email(email)
        if _email_taken(store, email):
            raise InvalidInput("Email address already in use")
        store.users[u_id].email = email
        return {}


async def set_handle(store: "WorkspaceStore", token: str | None, handle_str: str) -> dict:
    """Rename the caller's handle. Later @mentions match the new handle only."""
    async with store.lock:
        u_id = resolve_session(store, token)
        if not MIN_HANDLE_LENGTH <= len(handle_str) <= MAX_HANDLE_LENGTH:
            raise InvalidInput("Handle must be 3 to 20 characters")
        if not handle_str.isascii() or not handle_str.isalnum():
            raise InvalidInput("Handle must be alphanumeric")
        if any(u.handle == handle_str for u in _active_users(store)):
            raise InvalidInput("Handle is already in use")

        user = store.users[u_id]
        logger.info("User %d changed handle %s -> %s", u_id, user.handle, handle_str)
        user.handle = handle_str
        return {}
