"""Message engine: send, edit, remove, share, paginate, react, pin, send later.

Every public coroutine takes the store lock for its whole duration. The
private helpers assume the lock is already held so they can be reused by
scheduler work items.
"""
import logging
from typing import TYPE_CHECKING

from huddle.errors import Forbidden, InvalidInput, NotFound
from huddle.models import (
    NO_CONTAINER,
    VALID_REACT_IDS,
    Container,
    ContainerKind,
    Dm,
    Location,
    Message,
)
from huddle.services.auth import resolve_session
from huddle.services.mentions import fan_out_mentions
from huddle.services.notifications import notify_reacted
from huddle.services.stats import record_message_removed, record_message_sent

if TYPE_CHECKING:
    from huddle.services.store import MessageRef, WorkspaceStore

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 1000
PAGE_SIZE = 50
NO_MORE_MESSAGES = -1


# ---------------------------------------------------------------------------
# Helpers (store lock held)
# ---------------------------------------------------------------------------

def _open_container(store: "WorkspaceStore", location: Location) -> Container:
    container = store.get_container(location)
    if container is None:
        raise NotFound(f"Invalid {location.kind.value}_id")
    return container


def _check_length(body: str) -> None:
    if not 1 <= len(body) <= MAX_MESSAGE_LENGTH:
        raise InvalidInput("Message must be 1 to 1000 characters")


def require_member(container: Container, u_id: int) -> None:
    if not container.has_member(u_id):
        raise Forbidden(f"User is not a member of this {container.location.kind.value}")


def _resolve(store: "WorkspaceStore", message_id: int) -> "MessageRef":
    ref = store.resolve(message_id)
    if ref is None:
        raise NotFound("Invalid message_id")
    return ref


def deliver(
    store: "WorkspaceStore",
    location: Location,
    message: Message,
    scan_mentions: bool = True,
) -> None:
    """Make ``message`` visible in its container and run the fan-out."""
    container = _open_container(store, location)
    store.prepend(location, message)
    if scan_mentions:
        fan_out_mentions(store, message, container)
    record_message_sent(store, message.u_id)


def _authorize_change(store: "WorkspaceStore", u_id: int, ref: "MessageRef") -> None:
    if ref.message.u_id == u_id:
        return
    if not store.has_owner_privilege(u_id, ref.location):
        raise Forbidden("Not permitted to change this message")


def _remove(store: "WorkspaceStore", token: str | None, message_id: int) -> dict:
    u_id = resolve_session(store, token)
    ref = _resolve(store, message_id)
    _authorize_change(store, u_id, ref)
    store.delete(ref)
    record_message_removed(store)
    return {}


def paginate_log(log: list[Message], start: int) -> tuple[list[Message], int]:
    """Cut one page out of a newest-first log.

    ``start >= 0`` skips that many of the newest messages.

    ``start = -k`` counts from the oldest end: the page holds up to 50
    messages starting ``k`` places after the oldest one, returned newest
    first. Any ``k`` that reaches the oldest block (``k >= 50``, or
    ``k >= n`` for short logs) returns that block. ``end`` is ``-1`` once
    the oldest message is on the page; otherwise it is ``-50``, the offset
    of the oldest block still to be read.
    """
    n = len(log)
    if n == 0:
        return [], NO_MORE_MESSAGES

    if start >= 0:
        page = log[start:start + PAGE_SIZE]
        end = start + PAGE_SIZE if start + PAGE_SIZE < n else NO_MORE_MESSAGES
        return page, end

    k = -start
    if k >= min(PAGE_SIZE, n):
        return log[max(0, n - PAGE_SIZE):], NO_MORE_MESSAGES
    return log[max(0, n - k - PAGE_SIZE):n - k], -PAGE_SIZE


# ---------------------------------------------------------------------------
# Send
# ---------------------------------------------------------------------------

async def _send(
    store: "WorkspaceStore", token: str | None, location: Location, body: str
) -> dict:
    async with store.lock:
        u_id = resolve_session(store, token)
        container = _open_container(store, location)
        _check_length(body)
        require_member(container, u_id)

        message = Message(
            message_id=store.data.counter.allocate(),
            u_id=u_id,
            message=body,
            time_sent=store.now(),
        )
        deliver(store, location, message)
        return {"message_id": message.message_id}


async def send_message(
    store: "WorkspaceStore", token: str | None, channel_id: int, message: str
) -> dict:
    return await _send(store, token, Location(ContainerKind.CHANNEL, channel_id), message)


async def send_dm(
    store: "WorkspaceStore", token: str | None, dm_id: int, message: str
) -> dict:
    return await _send(store, token, Location(ContainerKind.DM, dm_id), message)


# ---------------------------------------------------------------------------
# Edit / remove / share
# ---------------------------------------------------------------------------

async def edit_message(
    store: "WorkspaceStore", token: str | None, message_id: int, message: str
) -> dict:
    async with store.lock:
        if message == "":
            return _remove(store, token, message_id)

        u_id = resolve_session(store, token)
        ref = _resolve(store, message_id)
        if len(message) > MAX_MESSAGE_LENGTH:
            raise InvalidInput("Message must be at most 1000 characters")
        _authorize_change(store, u_id, ref)

        ref.message.message = message
        return {}


async def remove_message(
    store: "WorkspaceStore", token: str | None, message_id: int
) -> dict:
    async with store.lock:
        return _remove(store, token, message_id)


async def share_message(
    store: "WorkspaceStore",
    token: str | None,
    og_message_id: int,
    message: str,
    channel_id: int,
    dm_id: int,
) -> dict:
    async with store.lock:
        u_id = resolve_session(store, token)

        if (channel_id == NO_CONTAINER) == (dm_id == NO_CONTAINER):
            raise InvalidInput("Exactly one of channel_id and dm_id must be -1")
        if channel_id != NO_CONTAINER:
            location = Location(ContainerKind.CHANNEL, channel_id)
        else:
            location = Location(ContainerKind.DM, dm_id)
        container = _open_container(store, location)

        original = _resolve(store, og_message_id).message
        if len(message) > MAX_MESSAGE_LENGTH:
            raise InvalidInput("Message must be at most 1000 characters")
        require_member(container, u_id)

        body = f"{original.message} {message}" if message else original.message
        shared = Message(
            message_id=store.data.counter.allocate(),
            u_id=u_id,
            message=body,
            time_sent=store.now(),
        )
        deliver(store, location, shared)
        return {"shared_message_id": shared.message_id}


# ---------------------------------------------------------------------------
# Pagination and search
# ---------------------------------------------------------------------------

async def _messages(
    store: "WorkspaceStore", token: str | None, location: Location, start: int
) -> dict:
    async with store.lock:
        u_id = resolve_session(store, token)
        container = _open_container(store, location)
        if start > len(container.messages):
            raise InvalidInput("start is greater than the total number of messages")
        require_member(container, u_id)

        page, end = paginate_log(container.messages, start)
        return {
            "messages": [m.to_dict(u_id) for m in page],
            "start": start,
            "end": end,
        }


async def channel_messages(
    store: "WorkspaceStore", token: str | None, channel_id: int, start: int
) -> dict:
    return await _messages(store, token, Location(ContainerKind.CHANNEL, channel_id), start)


async def dm_messages(
    store: "WorkspaceStore", token: str | None, dm_id: int, start: int
) -> dict:
    return await _messages(store, token, Location(ContainerKind.DM, dm_id), start)


async def search_messages(store: "WorkspaceStore", token: str | None, query_str: str) -> dict:
    async with store.lock:
        u_id = resolve_session(store, token)
        if not 1 <= len(query_str) <= MAX_MESSAGE_LENGTH:
            raise InvalidInput("Query must be 1 to 1000 characters")

        needle = query_str.lower()
        found = [
            m.to_dict(u_id)
            for container in store.containers_of(u_id)
            for m in container.messages
            if needle in m.message.lower()
        ]
        return {"messages": found}


# ---------------------------------------------------------------------------
# Reactions and pins
# ---------------------------------------------------------------------------

def _member_message(store: "WorkspaceStore", u_id: int, message_id: int) -> "MessageRef":
    """Resolve a message the caller can see; anything else is a 400."""
    ref = _resolve(store, message_id)
    if not ref.container.has_member(u_id):
        raise NotFound("Invalid message_id")
    return ref


def _check_react_id(react_id: int) -> None:
    if react_id not in VALID_REACT_IDS:
        raise InvalidInput("Invalid react_id")


async def react_message(
    store: "WorkspaceStore", token: str | None, message_id: int, react_id: int
) -> dict:
    async with store.lock:
        u_id = resolve_session(store, token)
        _check_react_id(react_id)
        ref = _member_message(store, u_id, message_id)

        reaction = ref.message.reaction(react_id)
        if reaction.has_user(u_id):
            raise InvalidInput("Already reacted to this message")
        reaction.u_ids.append(u_id)

        notify_reacted(store, ref.message.u_id, u_id, ref.container)
        return {}


async def unreact_message(
    store: "WorkspaceStore", token: str | None, message_id: int, react_id: int
) -> dict:
    async with store.lock:
        u_id = resolve_session(store, token)
        _check_react_id(react_id)
        ref = _member_message(store, u_id, message_id)

        reaction = ref.message.reaction(react_id)
        if not reaction.has_user(u_id):
            raise InvalidInput("Not reacted to this message")
        reaction.u_ids.remove(u_id)
        return {}


async def _set_pinned(
    store: "WorkspaceStore", token: str | None, message_id: int, pinned: bool
) -> dict:
    async with store.lock:
        u_id = resolve_session(store, token)
        ref = _member_message(store, u_id, message_id)
        if ref.message.is_pinned == pinned:
            raise InvalidInput("Message is already pinned" if pinned else "Message is not pinned")
        if not store.has_owner_privilege(u_id, ref.location):
            raise Forbidden("Owner permissions required")

        ref.message.is_pinned = pinned
        return {}


async def pin_message(store: "WorkspaceStore", token: str | None, message_id: int) -> dict:
    return await _set_pinned(store, token, message_id, True)


async def unpin_message(store: "WorkspaceStore", token: str | None, message_id: int) -> dict:
    return await _set_pinned(store, token, message_id, False)


# ---------------------------------------------------------------------------
# Send later
# ---------------------------------------------------------------------------

def _materialize_later(store: "WorkspaceStore", location: Location, message: Message):
    def work() -> None:
        container = store.get_container(location)
        if container is None or (isinstance(container, Dm) and container.is_removed):
            logger.warning(
                "Dropping deferred message %d: %s %d no longer exists",
                message.message_id,
                location.kind.value,
                location.container_id,
            )
            return
        deliver(store, location, message)
        logger.info(
            "Delivered deferred message %d to %s %d",
            message.message_id,
            location.kind.value,
            location.container_id,
        )

    return work


async def _send_later(
    store: "WorkspaceStore",
    token: str | None,
    location: Location,
    body: str,
    time_sent: int,
) -> dict:
    async with store.lock:
        u_id = resolve_session(store, token)
        container = _open_container(store, location)
        _check_length(body)
        if time_sent < store.now():
            raise InvalidInput("time_sent is in the past")
        require_member(container, u_id)

        message = Message(
            message_id=store.data.counter.allocate(),
            u_id=u_id,
            message=body,
            time_sent=time_sent,
        )
        store.scheduler.submit(
            time_sent,
            _materialize_later(store, location, message),
            label=f"deferred message {message.message_id}",
        )
        return {"message_id": message.message_id}


async def send_later(
    store: "WorkspaceStore",
    token: str | None,
    channel_id: int,
    message: str,
    time_sent: int,
) -> dict:
    return await _send_later(
        store, token, Location(ContainerKind.CHANNEL, channel_id), message, time_sent
    )


async def send_later_dm(
    store: "WorkspaceStore",
    token: str | None,
    dm_id: int,
    message: str,
    time_sent: int,
) -> dict:
    return await _send_later(
        store, token, Location(ContainerKind.DM, dm_id), message, time_sent
    )
