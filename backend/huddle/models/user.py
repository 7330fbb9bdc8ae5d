from pydantic import BaseModel

from huddle.models.container import NO_CONTAINER


class CountSample(BaseModel):
    count: int
    time_stamp: int


class Notification(BaseModel):
    channel_id: int = NO_CONTAINER
    dm_id: int = NO_CONTAINER
    notification_message: str


class UserStats(BaseModel):
    channels_joined: list[CountSample] = []
    dms_joined: list[CountSample] = []
    messages_sent: list[CountSample] = []


class User(BaseModel):
    u_id: int
    email: str
    password_hash: str
    name_first: str
    name_last: str
    handle: str
    is_global_owner: bool = False
    # Removed users keep their id and messages but free their email and handle
    is_removed: bool = False
    # Active session ids; a token is only valid while its session is listed
    sessions: list[str] = []
    # Newest first
    notifications: list[Notification] = []
    stats: UserStats = UserStats()

    def profile(self) -> dict:
        return {
            "u_id": self.u_id,
            "email": self.email,
            "name_first": self.name_first,
            "name_last": self.name_last,
            "handle_str": self.handle,
        }
