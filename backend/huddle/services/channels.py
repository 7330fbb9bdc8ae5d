"""Channel and DM membership.

These operations produce the membership and ownership facts the message
engine relies on, plus the "added you" notifications and the
channel/DM statistics.
"""
import logging
from typing import TYPE_CHECKING

from huddle.errors import Forbidden, InvalidInput, NotFound
from huddle.models import Channel, Dm
from huddle.services.auth import resolve_session
from huddle.services.messages import require_member
from huddle.services.notifications import notify_added
from huddle.services.stats import (
    record_channel_created,
    record_channel_joined,
    record_channel_left,
    record_dm_created,
    record_dm_left,
    record_dm_removed,
)

if TYPE_CHECKING:
    from huddle.services.store import WorkspaceStore

logger = logging.getLogger(__name__)

MAX_CHANNEL_NAME_LENGTH = 20


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def get_channel(store: "WorkspaceStore", channel_id: int) -> Channel:
    channel = store.channels.get(channel_id)
    if channel is None:
        raise NotFound("Invalid channel_id")
    return channel


def get_dm(store: "WorkspaceStore", dm_id: int) -> Dm:
    dm = store.dms.get(dm_id)
    if dm is None:
        raise NotFound("Invalid dm_id")
    return dm


def _build_dm_name(store: "WorkspaceStore", member_ids: list[int]) -> str:
    """Sorted member handles, comma-separated."""
    return ", ".join(sorted(store.handle_of(uid) for uid in member_ids))


def _require_user(store: "WorkspaceStore", u_id: int) -> None:
    if store.get_user(u_id) is None or store.users[u_id].is_removed:
        raise NotFound("Invalid u_id")


def _profiles(store: "WorkspaceStore", u_ids: list[int]) -> list[dict]:
    return [store.users[uid].profile() for uid in u_ids]


def _join(store: "WorkspaceStore", channel: Channel, u_id: int) -> None:
    channel.add_member(u_id)
    record_channel_joined(store, u_id)


# ---------------------------------------------------------------------------
# Channels
# ---------------------------------------------------------------------------

async def create_channel(
    store: "WorkspaceStore", token: str | None, name: str, is_public: bool
) -> dict:
    async with store.lock:
        u_id = resolve_session(store, token)
        if not 1 <= len(name) <= MAX_CHANNEL_NAME_LENGTH:
            raise InvalidInput("Channel name must be 1 to 20 characters")

        channel_id = max(store.channels, default=0) + 1
        channel = Channel(
            channel_id=channel_id,
            name=name,
            is_public=is_public,
            owners=[u_id],
        )
        store.channels[channel_id] = channel
        record_channel_created(store)
        _join(store, channel, u_id)
        logger.info("User %d created channel %d (%s)", u_id, channel_id, name)
        return {"channel_id": channel_id}


async def list_channels(store: "WorkspaceStore", token: str | None) -> dict:
    async with store.lock:
        u_id = resolve_session(store, token)
        return {
            "channels": [
                {"channel_id": c.channel_id, "name": c.name}
                for c in store.channels.values()
                if c.has_member(u_id)
            ]
        }


async def join_channel(store: "WorkspaceStore", token: str | None, channel_id: int) -> dict:
    async with store.lock:
        u_id = resolve_session(store, token)
        channel = get_channel(store, channel_id)
        if channel.has_member(u_id):
            raise InvalidInput("User is already a member of this channel")
        if not channel.is_public and not store.users[u_id].is_global_owner:
            raise Forbidden("Channel is private")

        _join(store, channel, u_id)
        return {}


async def invite_to_channel(
    store: "WorkspaceStore", token: str | None, channel_id: int, u_id: int
) -> dict:
    async with store.lock:
        inviter_id = resolve_session(store, token)
        channel = get_channel(store, channel_id)
        _require_user(store, u_id)
        if channel.has_member(u_id):
            raise InvalidInput("User is already a member of this channel")
        if not channel.has_member(inviter_id):
            raise Forbidden("User is not a member of this channel")

        _join(store, channel, u_id)
        notify_added(store, u_id, inviter_id, channel)
        return {}


async def list_all_channels(store: "WorkspaceStore", token: str | None) -> dict:
    """Every channel, private ones included."""
    async with store.lock:
        resolve_session(store, token)
        return {
            "channels": [
                {"channel_id": c.channel_id, "name": c.name}
                for c in store.channels.values()
            ]
        }


async def channel_details(store: "WorkspaceStore", token: str | None, channel_id: int) -> dict:
    async with store.lock:
        u_id = resolve_session(store, token)
        channel = get_channel(store, channel_id)
        require_member(channel, u_id)
        return {
            "name": channel.name,
            "is_public": channel.is_public,
            "owner_members": _profiles(store, channel.owners),
            "all_members": _profiles(store, channel.members),
        }


async def leave_channel(store: "WorkspaceStore", token: str | None, channel_id: int) -> dict:
    """Drop the caller from members and owners. Their messages stay."""
    async with store.lock:
        u_id = resolve_session(store, token)
        channel = get_channel(store, channel_id)
        require_member(channel, u_id)
        if channel.standup is not None and channel.standup.starter_id == u_id:
            raise InvalidInput("Cannot leave while running a standup in this channel")

        channel.members.remove(u_id)
        if u_id in channel.owners:
            channel.owners.remove(u_id)
        record_channel_left(store, u_id)
        return {}


async def add_owner(
    store: "WorkspaceStore", token: str | None, channel_id: int, u_id: int
) -> dict:
    async with store.lock:
        actor_id = resolve_session(store, token)
        channel = get_channel(store, channel_id)
        _require_user(store, u_id)
        if not channel.has_member(u_id):
            raise InvalidInput("User is not a member of this channel")
        if u_id in channel.owners:
            raise InvalidInput("User is already an owner of this channel")
        if not store.has_owner_privilege(actor_id, channel.location):
            raise Forbidden("Owner permissions required")

        channel.owners.append(u_id)
        logger.info("User %d made user %d owner of channel %d", actor_id, u_id, channel_id)
        return {}


async def remove_owner(
    store: "WorkspaceStore", token: str | None, channel_id: int, u_id: int
) -> dict:
    async with store.lock:
        actor_id = resolve_session(store, token)
        channel = get_channel(store, channel_id)
        _require_user(store, u_id)
        if u_id not in channel.owners:
            raise InvalidInput("User is not an owner of this channel")
        if channel.owners == [u_id]:
            raise InvalidInput("Cannot remove the only owner of a channel")
        if not store.has_owner_privilege(actor_id, channel.location):
            raise Forbidden("Owner permissions required")

        channel.owners.remove(u_id)
        return {}


# ---------------------------------------------------------------------------
# DMs
# ---------------------------------------------------------------------------

async def create_dm(store: "WorkspaceStore", token: str | None, u_ids: list[int]) -> dict:
    async with store.lock:
        creator_id = resolve_session(store, token)
        if len(set(u_ids)) != len(u_ids):
            raise InvalidInput("u_ids contains duplicates")
        for uid in u_ids:
            _require_user(store, uid)
        if creator_id in u_ids:
            raise InvalidInput("u_ids must not contain the creator")

        member_ids = [creator_id, *u_ids]
        dm_id = max(store.dms, default=0) + 1
        dm = Dm(
            dm_id=dm_id,
            name=_build_dm_name(store, member_ids),
            creator_id=creator_id,
            members=member_ids,
        )
        store.dms[dm_id] = dm
        record_dm_created(store, member_ids)

        for uid in u_ids:
            notify_added(store, uid, creator_id, dm)
        return {"dm_id": dm_id}


async def list_dms(store: "WorkspaceStore", token: str | None) -> dict:
    async with store.lock:
        u_id = resolve_session(store, token)
        return {
            "dms": [
                {"dm_id": d.dm_id, "name": d.name}
                for d in store.dms.values()
                if d.has_member(u_id)
            ]
        }


async def remove_dm(store: "WorkspaceStore", token: str | None, dm_id: int) -> dict:
    """Empty the DM. Its messages stay in the log but nobody can see them."""
    async with store.lock:
        u_id = resolve_session(store, token)
        dm = get_dm(store, dm_id)
        if dm.creator_id != u_id or not dm.has_member(u_id):
            raise Forbidden("Only the DM creator can remove it")

        former_members = list(dm.members)
        dm.members = []
        dm.is_removed = True
        record_dm_removed(store, former_members)
        logger.info("User %d removed DM %d", u_id, dm_id)
        return {}


async def dm_details(store: "WorkspaceStore", token: str | None, dm_id: int) -> dict:
    async with store.lock:
        u_id = resolve_session(store, token)
        dm = get_dm(store, dm_id)
        require_member(dm, u_id)
        return {"name": dm.name, "members": _profiles(store, dm.members)}


async def leave_dm(store: "WorkspaceStore", token: str | None, dm_id: int) -> dict:
    """Drop the caller from the DM. The DM and its name stay as they are."""
    async with store.lock:
        u_id = resolve_session(store, token)
        dm = get_dm(store, dm_id)
        require_member(dm, u_id)

        dm.members.remove(u_id)
        record_dm_left(store, u_id)
        return {}
