from fastapi import APIRouter, Depends

from huddle.deps import get_store
from huddle.schemas.message import (
    MessageShare,
    MessageUpdate,
    ReactionCreate,
    SearchResult,
    SharedMessageIdOut,
)
from huddle.services.auth import oauth2_scheme
from huddle.services.messages import (
    edit_message,
    pin_message,
    react_message,
    remove_message,
    search_messages,
    share_message,
    unpin_message,
    unreact_message,
)
from huddle.services.store import WorkspaceStore

router = APIRouter(prefix="/api/messages", tags=["messages"])


@router.get("/search", response_model=SearchResult)
async def search(
    query_str: str,
    token: str | None = Depends(oauth2_scheme),
    store: WorkspaceStore = Depends(get_store),
):
    return await search_messages(store, token, query_str)


@router.put("/{message_id}")
async def edit(
    message_id: int,
    data: MessageUpdate,
    token: str | None = Depends(oauth2_scheme),
    store: WorkspaceStore = Depends(get_store),
):
    return await edit_message(store, token, message_id, data.message)


@router.delete("/{message_id}")
async def remove(
    message_id: int,
    token: str | None = Depends(oauth2_scheme),
    store: WorkspaceStore = Depends(get_store),
):
    return await remove_message(store, token, message_id)


@router.post("/{message_id}/share", response_model=SharedMessageIdOut, status_code=201)
async def share(
    message_id: int,
    data: MessageShare,
    token: str | None = Depends(oauth2_scheme),
    store: WorkspaceStore = Depends(get_store),
):
    return await share_message(
        store, token, message_id, data.message, data.channel_id, data.dm_id
    )


@router.post("/{message_id}/react")
async def react(
    message_id: int,
    data: ReactionCreate,
    token: str | None = Depends(oauth2_scheme),
    store: WorkspaceStore = Depends(get_store),
):
    return await react_message(store, token, message_id, data.react_id)


@router.post("/{message_id}/unreact")
async def unreact(
    message_id: int,
    data: ReactionCreate,
    token: str | None = Depends(oauth2_scheme),
    store: WorkspaceStore = Depends(get_store),
):
    return await unreact_message(store, token, message_id, data.react_id)


@router.post("/{message_id}/pin")
async def pin(
    message_id: int,
    token: str | None = Depends(oauth2_scheme),
    store: WorkspaceStore = Depends(get_store),
):
    return await pin_message(store, token, message_id)


@router.post("/{message_id}/unpin")
async def unpin(
    message_id: int,
    token: str | None = Depends(oauth2_scheme),
    store: WorkspaceStore = Depends(get_store),
):
    return await unpin_message(store, token, message_id)
