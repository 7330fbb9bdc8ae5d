from fastapi import APIRouter, Depends

from huddle.deps import get_store
from huddle.schemas.channel import (
    ChannelCreate,
    ChannelDetailsOut,
    ChannelIdOut,
    ChannelInvite,
    ChannelOut,
    ChannelOwner,
    StandupActiveOut,
    StandupSend,
    StandupStart,
    StandupStartOut,
)
from huddle.schemas.message import (
    MessageCreate,
    MessageIdOut,
    MessageLaterCreate,
    MessagePage,
)
from huddle.services.auth import oauth2_scheme
from huddle.services.channels import (
    add_owner,
    channel_details,
    create_channel,
    invite_to_channel,
    join_channel,
    leave_channel,
    list_all_channels,
    list_channels,
    remove_owner,
)
from huddle.services.messages import channel_messages, send_later, send_message
from huddle.services.standup import send_standup, standup_active, start_standup
from huddle.services.store import WorkspaceStore

router = APIRouter(prefix="/api/channels", tags=["channels"])


@router.post("/", response_model=ChannelIdOut, status_code=201)
async def create(
    data: ChannelCreate,
    token: str | None = Depends(oauth2_scheme),
    store: WorkspaceStore = Depends(get_store),
):
    return await create_channel(store, token, data.name, data.is_public)


@router.get("/", response_model=dict[str, list[ChannelOut]])
async def list_my_channels(
    token: str | None = Depends(oauth2_scheme),
    store: WorkspaceStore = Depends(get_store),
):
    return await list_channels(store, token)


@router.get("/all", response_model=dict[str, list[ChannelOut]])
async def list_every_channel(
    token: str | None = Depends(oauth2_scheme),
    store: WorkspaceStore = Depends(get_store),
):
    return await list_all_channels(store, token)


@router.get("/{channel_id}", response_model=ChannelDetailsOut)
async def details(
    channel_id: int,
    token: str | None = Depends(oauth2_scheme),
    store: WorkspaceStore = Depends(get_store),
):
    return await channel_details(store, token, channel_id)


@router.post("/{channel_id}/join")
async def join(
    channel_id: int,
    token: str | None = Depends(oauth2_scheme),
    store: WorkspaceStore = Depends(get_store),
):
    return await join_channel(store, token, channel_id)


@router.post("/{channel_id}/invite")
async def invite(
    channel_id: int,
    data: ChannelInvite,
    token: str | None = Depends(oauth2_scheme),
    store: WorkspaceStore = Depends(get_store),
):
    return await invite_to_channel(store, token, channel_id, data.u_id)


@router.post("/{channel_id}/leave")
async def leave(
    channel_id: int,
    token: str | None = Depends(oauth2_scheme),
    store: WorkspaceStore = Depends(get_store),
):
    return await leave_channel(store, token, channel_id)


@router.post("/{channel_id}/owners")
async def add_channel_owner(
    channel_id: int,
    data: ChannelOwner,
    token: str | None = Depends(oauth2_scheme),
    store: WorkspaceStore = Depends(get_store),
):
    return await add_owner(store, token, channel_id, data.u_id)


@router.delete("/{channel_id}/owners/{u_id}")
async def remove_channel_owner(
    channel_id: int,
    u_id: int,
    token: str | None = Depends(oauth2_scheme),
    store: WorkspaceStore = Depends(get_store),
):
    return await remove_owner(store, token, channel_id, u_id)


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------

@router.get("/{channel_id}/messages", response_model=MessagePage)
async def list_messages(
    channel_id: int,
    start: int = 0,
    token: str | None = Depends(oauth2_scheme),
    store: WorkspaceStore = Depends(get_store),
):
    return await channel_messages(store, token, channel_id, start)


@router.post("/{channel_id}/messages", response_model=MessageIdOut, status_code=201)
async def create_message(
    channel_id: int,
    data: MessageCreate,
    token: str | None = Depends(oauth2_scheme),
    store: WorkspaceStore = Depends(get_store),
):
    return await send_message(store, token, channel_id, data.message)


@router.post("/{channel_id}/messages/later", response_model=MessageIdOut, status_code=201)
async def create_message_later(
    channel_id: int,
    data: MessageLaterCreate,
    token: str | None = Depends(oauth2_scheme),
    store: WorkspaceStore = Depends(get_store),
):
    return await send_later(store, token, channel_id, data.message, data.time_sent)


# ---------------------------------------------------------------------------
# Standups
# ---------------------------------------------------------------------------

@router.post("/{channel_id}/standup/start", response_model=StandupStartOut)
async def standup_start(
    channel_id: int,
    data: StandupStart,
    token: str | None = Depends(oauth2_scheme),
    store: WorkspaceStore = Depends(get_store),
):
    return await start_standup(store, token, channel_id, data.length)


@router.get("/{channel_id}/standup/active", response_model=StandupActiveOut)
async def standup_status(
    channel_id: int,
    token: str | None = Depends(oauth2_scheme),
    store: WorkspaceStore = Depends(get_store),
):
    return await standup_active(store, token, channel_id)


@router.post("/{channel_id}/standup/send")
async def standup_send(
    channel_id: int,
    data: StandupSend,
    token: str | None = Depends(oauth2_scheme),
    store: WorkspaceStore = Depends(get_store),
):
    return await send_standup(store, token, channel_id, data.message)
