from pydantic import BaseModel

from huddle.models.container import Channel, Dm
from huddle.models.user import CountSample, User


class MessageCounter(BaseModel):
    """Message id allocator plus the live message count.

    ``next_id`` only ever moves forward so ids are never handed out twice,
    even after deletions. ``live_count`` tracks how many messages currently
    exist and feeds the workspace statistics only.
    """

    next_id: int = 1
    live_count: int = 0

    def allocate(self) -> int:
        message_id = self.next_id
        self.next_id += 1
        return message_id

    def message_added(self) -> int:
        self.live_count += 1
        return self.live_count

    def message_removed(self) -> int:
        self.live_count = max(0, self.live_count - 1)
        return self.live_count


class WorkspaceStats(BaseModel):
    channels_exist: list[CountSample] = []
    dms_exist: list[CountSample] = []
    messages_exist: list[CountSample] = []


class WorkspaceData(BaseModel):
    """Everything that goes into a snapshot."""

    users: dict[int, User] = {}
    channels: dict[int, Channel] = {}
    dms: dict[int, Dm] = {}
    counter: MessageCounter = MessageCounter()
    stats: WorkspaceStats = WorkspaceStats()
