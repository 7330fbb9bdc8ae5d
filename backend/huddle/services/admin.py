"""Workspace administration: removing users and changing global permissions.

Only global owners may call these. Both feed the owner checks the message
engine relies on, so the workspace always keeps at least one global owner.
"""
import logging
from typing import TYPE_CHECKING

from huddle.errors import Forbidden, InvalidInput, NotFound
from huddle.models import User
from huddle.services.auth import resolve_session

if TYPE_CHECKING:
    from huddle.services.store import WorkspaceStore

logger = logging.getLogger(__name__)

GLOBAL_OWNER = 1
GLOBAL_MEMBER = 2
REMOVED_MESSAGE = "Removed user"


def _require_global_owner(store: "WorkspaceStore", token: str | None) -> int:
    u_id = resolve_session(store, token)
    if not store.users[u_id].is_global_owner:
        raise Forbidden("Global owner permissions required")
    return u_id


def _target(store: "WorkspaceStore", u_id: int) -> User:
    user = store.get_user(u_id)
    if user is None or user.is_removed:
        raise NotFound("Invalid u_id")
    return user


def _is_only_global_owner(store: "WorkspaceStore", u_id: int) -> bool:
    return not any(
        u.is_global_owner and not u.is_removed and u.u_id != u_id
        for u in store.users.values()
    )


async def remove_user(store: "WorkspaceStore", token: str | None, u_id: int) -> dict:
    """Take a user out of every channel and DM and blank their messages.

    The profile stays readable as "Removed user"; the email and handle are
    free for new registrations.
    """
    async with store.lock:
        actor_id = _require_global_owner(store, token)
        user = _target(store, u_id)
        if _is_only_global_owner(store, u_id):
            raise InvalidInput("Cannot remove the only global owner")

        for channel in store.channels.values():
            if u_id in channel.members:
                channel.members.remove(u_id)
            if u_id in channel.owners:
                channel.owners.remove(u_id)
        for dm in store.dms.values():
            if u_id in dm.members:
                dm.members.remove(u_id)
        for container in [*store.channels.values(), *store.dms.values()]:
            for msg in container.messages:
                if msg.u_id == u_id:
                    msg.message = REMOVED_MESSAGE

        user.name_first = "Removed"
        user.name_last = "user"
        user.is_removed = True
        user.is_global_owner = False
        user.sessions = []
        user.notifications = []
        logger.info("User %d removed user %d", actor_id, u_id)
        return {}


async def change_permission(
    store: "WorkspaceStore", token: str | None, u_id: int, permission_id: int
) -> dict:
    async with store.lock:
        actor_id = _require_global_owner(store, token)
        user = _target(store, u_id)
        make_owner = permission_id == GLOBAL_OWNER
        if permission_id == GLOBAL_MEMBER and _is_only_global_owner(store, u_id):
            raise InvalidInput("Cannot demote the only global owner")
        if permission_id not in (GLOBAL_OWNER, GLOBAL_MEMBER):
            raise InvalidInput("Invalid permission_id")
        if user.is_global_owner == make_owner:
            raise Forbidden("User already has this permission")

        user.is_global_owner = make_owner
        logger.info(
            "User %d set permission of user %d to %d", actor_id, u_id, permission_id
        )
        return {}
