import uuid
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext

from huddle.config import settings
from huddle.errors import Unauthenticated

if TYPE_CHECKING:
    from huddle.services.store import WorkspaceStore

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
# Missing tokens are reported by resolve_session as 403, not by FastAPI as 401
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def new_session_id() -> str:
    return uuid.uuid4().hex


def create_access_token(u_id: int, session_id: str) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.jwt_expire_minutes)
    payload = {"sub": str(u_id), "sid": session_id, "exp": expire}
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def _decode(token: str) -> tuple[int, str]:
    try:
        payload = jwt.decode(
            token, settings.jwt_secret, algorithms=[settings.jwt_algorithm]
        )
        return int(payload["sub"]), str(payload["sid"])
    except (JWTError, KeyError, ValueError):
        raise Unauthenticated("Invalid token")


def session_of(token: str | None) -> str:
    if not token:
        raise Unauthenticated("Invalid token")
    return _decode(token)[1]


def resolve_session(store: "WorkspaceStore", token: str | None) -> int:
    """Return the user id behind ``token`` or raise ``Unauthenticated``.

    A well-formed token is only accepted while its session id is still
    active on the user, so logout revokes it.
    """
    if not token:
        raise Unauthenticated("Invalid token")
    u_id, session_id = _decode(token)
    user = store.get_user(u_id)
    if user is None or session_id not in user.sessions:
        raise Unauthenticated("Invalid token")
    return u_id
