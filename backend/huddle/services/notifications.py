from typing import TYPE_CHECKING

from huddle.models import Container, Notification
from huddle.services.auth import resolve_session

if TYPE_CHECKING:
    from huddle.services.store import WorkspaceStore

NOTIFICATION_LIMIT = 20
PREVIEW_LENGTH = 20


def notify(store: "WorkspaceStore", u_id: int, container: Container, text: str) -> None:
    """Push a notification to the front of a user's list."""
    location = container.location
    store.users[u_id].notifications.insert(
        0,
        Notification(
            channel_id=location.channel_id,
            dm_id=location.dm_id,
            notification_message=text,
        ),
    )


def notify_tagged(
    store: "WorkspaceStore", u_id: int, author_id: int, container: Container, body: str
) -> None:
    text = (
        f"@{store.handle_of(author_id)} tagged you in {container.name}: "
        f"{body[:PREVIEW_LENGTH]}"
    )
    notify(store, u_id, container, text)


def notify_added(
    store: "WorkspaceStore", u_id: int, actor_id: int, container: Container
) -> None:
    notify(store, u_id, container, f"@{store.handle_of(actor_id)} added you to {container.name}")


def notify_reacted(
    store: "WorkspaceStore", u_id: int, actor_id: int, container: Container
) -> None:
    if u_id == actor_id:
        return
    notify(
        store,
        u_id,
        container,
        f"@{store.handle_of(actor_id)} reacted to your message in {container.name}",
    )


async def get_notifications(store: "WorkspaceStore", token: str | None) -> dict:
    async with store.lock:
        u_id = resolve_session(store, token)
        recent = store.users[u_id].notifications[:NOTIFICATION_LIMIT]
        return {"notifications": [n.model_dump() for n in recent]}
