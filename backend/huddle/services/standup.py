import logging
from typing import TYPE_CHECKING

from huddle.errors import InvalidInput
from huddle.models import Message, StandupSession
from huddle.services.auth import resolve_session
from huddle.services.channels import get_channel
from huddle.services.messages import MAX_MESSAGE_LENGTH, deliver, require_member

if TYPE_CHECKING:
    from huddle.services.store import WorkspaceStore

logger = logging.getLogger(__name__)


def _finish_standup(store: "WorkspaceStore", channel_id: int, session: StandupSession):
    def work() -> None:
        channel = store.channels.get(channel_id)
        if channel is None or channel.standup is not session:
            return
        channel.standup = None
        if not session.lines:
            logger.info("Standup in channel %d ended with no messages", channel_id)
            return

        summary = Message(
            message_id=store.data.counter.allocate(),
            u_id=session.starter_id,
            message="\n".join(session.lines),
            time_sent=session.time_finish,
        )
        # Standup summaries are not scanned for tags
        deliver(store, channel.location, summary, scan_mentions=False)
        logger.info(
            "Standup in channel %d ended, posted message %d",
            channel_id,
            summary.message_id,
        )

    return work


async def start_standup(
    store: "WorkspaceStore", token: str | None, channel_id: int, length: int
) -> dict:
    async with store.lock:
        u_id = resolve_session(store, token)
        channel = get_channel(store, channel_id)
        if length < 0:
            raise InvalidInput("Standup length cannot be negative")
        if channel.standup is not None:
            raise InvalidInput("A standup is already running in this channel")
        require_member(channel, u_id)

        session = StandupSession(starter_id=u_id, time_finish=store.now() + length)
        channel.standup = session
        store.scheduler.submit(
            session.time_finish,
            _finish_standup(store, channel_id, session),
            label=f"standup end in channel {channel_id}",
        )
        return {"time_finish": session.time_finish}


async def standup_active(store: "WorkspaceStore", token: str | None, channel_id: int) -> dict:
    async with store.lock:
        u_id = resolve_session(store, token)
        channel = get_channel(store, channel_id)
        require_member(channel, u_id)

        if channel.standup is None:
            return {"is_active": False, "time_finish": None}
        return {"is_active": True, "time_finish": channel.standup.time_finish}


async def send_standup(
    store: "WorkspaceStore", token: str | None, channel_id: int, message: str
) -> dict:
    async with store.lock:
        u_id = resolve_session(store, token)
        channel = get_channel(store, channel_id)
        if not 1 <= len(message) <= MAX_MESSAGE_LENGTH:
            raise InvalidInput("Message must be 1 to 1000 characters")
        if channel.standup is None:
            raise InvalidInput("No standup is running in this channel")
        require_member(channel, u_id)

        channel.standup.lines.append(f"{store.handle_of(u_id)}: {message}")
        return {}
