from fastapi import APIRouter, Depends

from huddle.deps import get_store
from huddle.schemas.user import PermissionChange
from huddle.services.admin import change_permission, remove_user
from huddle.services.auth import oauth2_scheme
from huddle.services.store import WorkspaceStore

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.delete("/users/{u_id}")
async def delete_user(
    u_id: int,
    token: str | None = Depends(oauth2_scheme),
    store: WorkspaceStore = Depends(get_store),
):
    return await remove_user(store, token, u_id)


@router.post("/users/{u_id}/permission")
async def set_permission(
    u_id: int,
    data: PermissionChange,
    token: str | None = Depends(oauth2_scheme),
    store: WorkspaceStore = Depends(get_store),
):
    return await change_permission(store, token, u_id, data.permission_id)
