from pydantic import BaseModel

from huddle.schemas.user import UserOut


class ChannelCreate(BaseModel):
    name: str
    is_public: bool = True


class ChannelInvite(BaseModel):
    u_id: int


class ChannelIdOut(BaseModel):
    channel_id: int


class ChannelOut(BaseModel):
    channel_id: int
    name: str


class DmCreate(BaseModel):
    u_ids: list[int] = []


class DmIdOut(BaseModel):
    dm_id: int


class DmOut(BaseModel):
    dm_id: int
    name: str


class StandupStart(BaseModel):
    length: int


class StandupSend(BaseModel):
    message: str


class StandupStartOut(BaseModel):
    time_finish: int


class StandupActiveOut(BaseModel):
    is_active: bool
    time_finish: int | None = None


class ChannelOwner(BaseModel):
    u_id: int


class ChannelDetailsOut(BaseModel):
    name: str
    is_public: bool
    owner_members: list[UserOut]
    all_members: list[UserOut]


class DmDetailsOut(BaseModel):
    name: str
    members: list[UserOut]
