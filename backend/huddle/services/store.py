"""In-memory workspace store.

One store object owns every user, channel, DM and message. All services
receive it explicitly and serialize on ``store.lock``; the delivery
scheduler takes the same lock before running its work items.
"""
import asyncio
import time
from typing import Callable, NamedTuple

from huddle.models import (
    Channel,
    Container,
    ContainerKind,
    Dm,
    Location,
    Message,
    User,
    WorkspaceData,
)
from huddle.services.scheduler import DeliveryScheduler
from huddle.services.stats import init_workspace_stats


class MessageRef(NamedTuple):
    location: Location
    container: Container
    index: int
    message: Message


class WorkspaceStore:
    def __init__(
        self,
        data: WorkspaceData | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.clock = clock
        self.lock = asyncio.Lock()
        self.scheduler = DeliveryScheduler(self)
        self._index: dict[int, Location] = {}
        self.data = WorkspaceData()
        self.load(data)

    def now(self) -> int:
        return int(self.clock())

    # ------------------------------------------------------------------
    # Whole-state handling
    # ------------------------------------------------------------------

    def load(self, data: WorkspaceData | None) -> None:
        """Replace the whole state. ``None`` starts an empty workspace."""
        self.scheduler.cancel_all()
        self.data = data if data is not None else WorkspaceData()
        if not self.data.stats.messages_exist:
            init_workspace_stats(self)
        self.rebuild_index()

    def reset(self) -> None:
        self.load(None)

    def rebuild_index(self) -> None:
        self._index = {}
        for channel in self.data.channels.values():
            for msg in channel.messages:
                self._index[msg.message_id] = channel.location
        for dm in self.data.dms.values():
            for msg in dm.messages:
                self._index[msg.message_id] = dm.location

    def dump_json(self) -> str:
        return self.data.model_dump_json()

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    @property
    def users(self) -> dict[int, User]:
        return self.data.users

    @property
    def channels(self) -> dict[int, Channel]:
        return self.data.channels

    @property
    def dms(self) -> dict[int, Dm]:
        return self.data.dms

    def get_user(self, u_id: int) -> User | None:
        return self.data.users.get(u_id)

    def handle_of(self, u_id: int) -> str:
        return self.data.users[u_id].handle

    def get_container(self, location: Location) -> Container | None:
        if location.kind is ContainerKind.CHANNEL:
            return self.data.channels.get(location.container_id)
        return self.data.dms.get(location.container_id)

    def resolve(self, message_id: int) -> MessageRef | None:
        location = self._index.get(message_id)
        if location is None:
            return None
        container = self.get_container(location)
        if container is None:
            return None
        for index, msg in enumerate(container.messages):
            if msg.message_id == message_id:
                return MessageRef(location, container, index, msg)
        return None

    def has_owner_privilege(self, u_id: int, location: Location) -> bool:
        """Owner rights inside one container.

        Global owners count as channel owners for channels they belong to.
        In DMs only the creator holds owner rights, and only while still a member.
        """
        container = self.get_container(location)
        if container is None:
            return False
        if isinstance(container, Dm):
            return container.creator_id == u_id and container.has_member(u_id)
        if u_id in container.owners:
            return True
        user = self.get_user(u_id)
        return bool(user and user.is_global_owner and container.has_member(u_id))

    def containers_of(self, u_id: int) -> list[Container]:
        containers: list[Container] = [
            c for c in self.data.channels.values() if c.has_member(u_id)
        ]
        containers.extend(d for d in self.data.dms.values() if d.has_member(u_id))
        return containers

    # ------------------------------------------------------------------
    # Message log mutation
    # ------------------------------------------------------------------

    def prepend(self, location: Location, message: Message) -> None:
        container = self.get_container(location)
        if container is None:
            raise KeyError(f"Unknown container {location}")
        container.messages.insert(0, message)
        self._index[message.message_id] = location

    def delete(self, ref: MessageRef) -> Message:
        removed = ref.container.messages.pop(ref.index)
        self._index.pop(removed.message_id, None)
        return removed
