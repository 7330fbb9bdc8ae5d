from pydantic import BaseModel

from huddle.models import NO_CONTAINER


class MessageCreate(BaseModel):
    message: str


class MessageLaterCreate(BaseModel):
    message: str
    time_sent: int


class MessageUpdate(BaseModel):
    message: str


class MessageShare(BaseModel):
    message: str = ""
    channel_id: int = NO_CONTAINER
    dm_id: int = NO_CONTAINER


class ReactionCreate(BaseModel):
    react_id: int


class ReactOut(BaseModel):
    react_id: int
    u_ids: list[int] = []
    is_this_user_reacted: bool = False


class MessageOut(BaseModel):
    message_id: int
    u_id: int
    message: str
    time_sent: int
    reacts: list[ReactOut] = []
    is_pinned: bool = False


class MessageIdOut(BaseModel):
    message_id: int


class SharedMessageIdOut(BaseModel):
    shared_message_id: int


class MessagePage(BaseModel):
    messages: list[MessageOut]
    start: int
    end: int


class SearchResult(BaseModel):
    messages: list[MessageOut]
