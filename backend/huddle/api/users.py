from fastapi import APIRouter, Depends

from huddle.deps import get_store
from huddle.schemas.user import (
    NotificationList,
    UserEmailUpdate,
    UserHandleUpdate,
    UserList,
    UserNameUpdate,
    UserOut,
)
from huddle.services.auth import oauth2_scheme
from huddle.services.notifications import get_notifications
from huddle.services.stats import user_stats, workspace_stats
from huddle.services.store import WorkspaceStore
from huddle.services.users import (
    list_users,
    set_email,
    set_handle,
    set_name,
    user_profile,
)

router = APIRouter(prefix="/api", tags=["users"])


@router.get("/notifications/", response_model=NotificationList)
async def list_notifications(
    token: str | None = Depends(oauth2_scheme),
    store: WorkspaceStore = Depends(get_store),
):
    return await get_notifications(store, token)


@router.get("/users/", response_model=UserList)
async def all_users(
    token: str | None = Depends(oauth2_scheme),
    store: WorkspaceStore = Depends(get_store),
):
    return await list_users(store, token)


@router.put("/users/me/name")
async def update_name(
    data: UserNameUpdate,
    token: str | None = Depends(oauth2_scheme),
    store: WorkspaceStore = Depends(get_store),
):
    return await set_name(store, token, data.name_first, data.name_last)


@router.put("/users/me/email")
async def update_email(
    data: UserEmailUpdate,
    token: str | None = Depends(oauth2_scheme),
    store: WorkspaceStore = Depends(get_store),
):
    return await set_email(store, token, data.email)


@router.put("/users/me/handle")
async def update_handle(
    data: UserHandleUpdate,
    token: str | None = Depends(oauth2_scheme),
    store: WorkspaceStore = Depends(get_store),
):
    return await set_handle(store, token, data.handle_str)


@router.get("/users/me/stats")
async def my_stats(
    token: str | None = Depends(oauth2_scheme),
    store: WorkspaceStore = Depends(get_store),
):
    return await user_stats(store, token)


@router.get("/users/stats")
async def all_stats(
    token: str | None = Depends(oauth2_scheme),
    store: WorkspaceStore = Depends(get_store),
):
    return await workspace_stats(store, token)


@router.get("/users/{u_id}", response_model=UserOut)
async def profile(
    u_id: int,
    token: str | None = Depends(oauth2_scheme),
    store: WorkspaceStore = Depends(get_store),
):
    return await user_profile(store, token, u_id)
