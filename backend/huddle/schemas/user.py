from pydantic import BaseModel


class UserCreate(BaseModel):
    email: str
    password: str
    name_first: str
    name_last: str


class UserLogin(BaseModel):
    email: str
    password: str


class Token(BaseModel):
    token: str
    auth_user_id: int
    token_type: str = "bearer"


class UserOut(BaseModel):
    u_id: int
    email: str
    name_first: str
    name_last: str
    handle_str: str


class NotificationOut(BaseModel):
    channel_id: int
    dm_id: int
    notification_message: str


class NotificationList(BaseModel):
    notifications: list[NotificationOut]


class UserList(BaseModel):
    users: list[UserOut]


class UserNameUpdate(BaseModel):
    name_first: str
    name_last: str


class UserEmailUpdate(BaseModel):
    email: str


class UserHandleUpdate(BaseModel):
    handle_str: str


class PermissionChange(BaseModel):
    permission_id: int
