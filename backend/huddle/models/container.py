import enum
from typing import NamedTuple, Union

from pydantic import BaseModel, Field

from huddle.models.message import Message

NO_CONTAINER = -1


class ContainerKind(str, enum.Enum):
    CHANNEL = "channel"
    DM = "dm"


class Location(NamedTuple):
    """Identity of a container: channel ids and DM ids are separate namespaces."""

    kind: ContainerKind
    container_id: int

    @property
    def channel_id(self) -> int:
        return self.container_id if self.kind is ContainerKind.CHANNEL else NO_CONTAINER

    @property
    def dm_id(self) -> int:
        return self.container_id if self.kind is ContainerKind.DM else NO_CONTAINER


class StandupSession(BaseModel):
    starter_id: int
    time_finish: int
    lines: list[str] = []


class Channel(BaseModel):
    channel_id: int
    name: str
    is_public: bool = True
    owners: list[int] = []
    members: list[int] = []
    # Newest first
    messages: list[Message] = []
    # Standup timers are not persisted, so neither is the session
    standup: StandupSession | None = Field(default=None, exclude=True)

    @property
    def location(self) -> Location:
        return Location(ContainerKind.CHANNEL, self.channel_id)

    def has_member(self, u_id: int) -> bool:
        return u_id in self.members

    def add_member(self, u_id: int) -> None:
        if u_id not in self.members:
            self.members.append(u_id)


class Dm(BaseModel):
    dm_id: int
    name: str
    creator_id: int
    members: list[int] = []
    # Newest first
    messages: list[Message] = []
    is_removed: bool = False

    @property
    def location(self) -> Location:
        return Location(ContainerKind.DM, self.dm_id)

    def has_member(self, u_id: int) -> bool:
        return u_id in self.members


Container = Union[Channel, Dm]
