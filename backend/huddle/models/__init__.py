from huddle.models.container import (
    NO_CONTAINER,
    Channel,
    Container,
    ContainerKind,
    Dm,
    Location,
    StandupSession,
)
from huddle.models.message import THUMBS_UP, VALID_REACT_IDS, Message, Reaction
from huddle.models.user import CountSample, Notification, User, UserStats
from huddle.models.workspace import MessageCounter, WorkspaceData, WorkspaceStats

__all__ = [
    "NO_CONTAINER",
    "Channel",
    "Container",
    "ContainerKind",
    "Dm",
    "Location",
    "StandupSession",
    "THUMBS_UP",
    "VALID_REACT_IDS",
    "Message",
    "Reaction",
    "CountSample",
    "Notification",
    "User",
    "UserStats",
    "MessageCounter",
    "WorkspaceData",
    "WorkspaceStats",
]
