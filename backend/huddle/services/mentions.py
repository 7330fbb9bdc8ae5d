"""@Mention-Erkennung und Benachrichtigung in Nachrichten."""
import re
from typing import TYPE_CHECKING

from huddle.models import Container, Message
from huddle.services.notifications import notify_tagged

if TYPE_CHECKING:
    from huddle.services.store import WorkspaceStore

# Regex: @handle
# Handles bestehen nur aus Buchstaben und Ziffern; das erste andere Zeichen
# beendet den Handle, daher matcht @alice nicht in @alice1.
MENTION_PATTERN = re.compile(r"@([A-Za-z0-9]+)")


def extract_mentions(content: str) -> list[str]:
    """Extrahiert alle @mentions aus dem Nachrichtentext, in Reihenfolge."""
    return [match.group(1) for match in MENTION_PATTERN.finditer(content)]


def resolve_mentions(
    store: "WorkspaceStore",
    mentions: list[str],
    container: Container,
) -> list[int]:
    """Loest Mention-Strings auf User-IDs der aktuellen Mitglieder auf.

    Jeder User kommt hoechstens einmal vor, auch wenn er mehrfach erwaehnt wird.
    """
    if not mentions:
        return []

    handles = {store.handle_of(uid): uid for uid in container.members}

    resolved_ids: list[int] = []
    for mention_text in mentions:
        uid = handles.get(mention_text)
        if uid is not None and uid not in resolved_ids:
            resolved_ids.append(uid)
    return resolved_ids


def fan_out_mentions(
    store: "WorkspaceStore", message: Message, container: Container
) -> list[int]:
    """Benachrichtigt alle erwaehnten Mitglieder, auch den Autor selbst."""
    mentioned = resolve_mentions(store, extract_mentions(message.message), container)
    for uid in mentioned:
        notify_tagged(store, uid, message.u_id, container, message.message)
    return mentioned
