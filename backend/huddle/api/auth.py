from fastapi import APIRouter, Depends

from huddle.deps import get_store
from huddle.schemas.user import Token, UserCreate, UserLogin
from huddle.services.auth import oauth2_scheme
from huddle.services.store import WorkspaceStore
from huddle.services.users import login, logout, register_user

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", response_model=Token, status_code=201)
async def register(data: UserCreate, store: WorkspaceStore = Depends(get_store)):
    return await register_user(
        store, data.email, data.password, data.name_first, data.name_last
    )


@router.post("/login", response_model=Token)
async def login_user(data: UserLogin, store: WorkspaceStore = Depends(get_store)):
    return await login(store, data.email, data.password)


@router.post("/logout")
async def logout_user(
    token: str | None = Depends(oauth2_scheme),
    store: WorkspaceStore = Depends(get_store),
):
    return await logout(store, token)
