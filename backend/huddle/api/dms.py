from fastapi import APIRouter, Depends

from huddle.deps import get_store
from huddle.schemas.channel import DmCreate, DmDetailsOut, DmIdOut, DmOut
from huddle.schemas.message import (
    MessageCreate,
    MessageIdOut,
    MessageLaterCreate,
    MessagePage,
)
from huddle.services.auth import oauth2_scheme
from huddle.services.channels import (
    create_dm,
    dm_details,
    leave_dm,
    list_dms,
    remove_dm,
)
from huddle.services.messages import dm_messages, send_dm, send_later_dm
from huddle.services.store import WorkspaceStore

router = APIRouter(prefix="/api/dms", tags=["dms"])


@router.post("/", response_model=DmIdOut, status_code=201)
async def create(
    data: DmCreate,
    token: str | None = Depends(oauth2_scheme),
    store: WorkspaceStore = Depends(get_store),
):
    return await create_dm(store, token, data.u_ids)


@router.get("/", response_model=dict[str, list[DmOut]])
async def list_my_dms(
    token: str | None = Depends(oauth2_scheme),
    store: WorkspaceStore = Depends(get_store),
):
    return await list_dms(store, token)


@router.get("/{dm_id}", response_model=DmDetailsOut)
async def details(
    dm_id: int,
    token: str | None = Depends(oauth2_scheme),
    store: WorkspaceStore = Depends(get_store),
):
    return await dm_details(store, token, dm_id)


@router.delete("/{dm_id}")
async def remove(
    dm_id: int,
    token: str | None = Depends(oauth2_scheme),
    store: WorkspaceStore = Depends(get_store),
):
    return await remove_dm(store, token, dm_id)


@router.post("/{dm_id}/leave")
async def leave(
    dm_id: int,
    token: str | None = Depends(oauth2_scheme),
    store: WorkspaceStore = Depends(get_store),
):
    return await leave_dm(store, token, dm_id)


@router.get("/{dm_id}/messages", response_model=MessagePage)
async def list_messages(
    dm_id: int,
    start: int = 0,
    token: str | None = Depends(oauth2_scheme),
    store: WorkspaceStore = Depends(get_store),
):
    return await dm_messages(store, token, dm_id, start)


@router.post("/{dm_id}/messages", response_model=MessageIdOut, status_code=201)
async def create_message(
    dm_id: int,
    data: MessageCreate,
    token: str | None = Depends(oauth2_scheme),
    store: WorkspaceStore = Depends(get_store),
):
    return await send_dm(store, token, dm_id, data.message)


@router.post("/{dm_id}/messages/later", response_model=MessageIdOut, status_code=201)
async def create_message_later(
    dm_id: int,
    data: MessageLaterCreate,
    token: str | None = Depends(oauth2_scheme),
    store: WorkspaceStore = Depends(get_store),
):
    return await send_later_dm(store, token, dm_id, data.message, data.time_sent)
