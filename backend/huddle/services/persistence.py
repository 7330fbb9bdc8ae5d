"""Whole-workspace snapshots in a small SQLite file."""
import asyncio
import logging
import os
from datetime import datetime, timezone
from typing import TYPE_CHECKING

import aiosqlite

from huddle.config import settings
from huddle.models import WorkspaceData

if TYPE_CHECKING:
    from huddle.services.store import WorkspaceStore

logger = logging.getLogger(__name__)

SNAPSHOT_SCHEMA = """
CREATE TABLE IF NOT EXISTS snapshots (
    id INTEGER PRIMARY KEY CHECK (id = 1),
    payload TEXT NOT NULL,
    saved_at TEXT NOT NULL
);
"""


def _db_path() -> str:
    return os.path.join(settings.data_dir, settings.snapshot_file)


async def init_snapshot_db() -> None:
    os.makedirs(settings.data_dir, exist_ok=True)
    async with aiosqlite.connect(_db_path()) as db:
        await db.executescript(SNAPSHOT_SCHEMA)
        await db.commit()


async def save_snapshot(store: "WorkspaceStore") -> str:
    """Serialize the store under its lock, then write it outside the lock."""
    async with store.lock:
        payload = store.dump_json()
    now = datetime.now(timezone.utc).isoformat()

    await init_snapshot_db()
    async with aiosqlite.connect(_db_path()) as db:
        await db.execute(
            """INSERT INTO snapshots (id, payload, saved_at) VALUES (1, ?, ?)
               ON CONFLICT(id) DO UPDATE SET payload = excluded.payload,
                                             saved_at = excluded.saved_at""",
            (payload, now),
        )
        await db.commit()
    logger.debug("Saved workspace snapshot (%d bytes)", len(payload))
    return now


async def load_snapshot() -> WorkspaceData | None:
    path = _db_path()
    if not os.path.exists(path):
        return None

    async with aiosqlite.connect(path) as db:
        db.row_factory = aiosqlite.Row
        cursor = await db.execute("SELECT payload, saved_at FROM snapshots WHERE id = 1")
        row = await cursor.fetchone()
    if row is None:
        return None

    logger.info("Loading workspace snapshot saved at %s", row["saved_at"])
    return WorkspaceData.model_validate_json(row["payload"])


async def restore(store: "WorkspaceStore") -> bool:
    data = await load_snapshot()
    if data is None:
        return False
    async with store.lock:
        store.load(data)
    return True


async def autosave(store: "WorkspaceStore", interval: int | None = None) -> None:
    """Save the store every ``interval`` seconds until cancelled."""
    interval = interval or settings.snapshot_interval_seconds
    while True:
        await asyncio.sleep(interval)
        try:
            await save_snapshot(store)
        except (OSError, aiosqlite.Error) as exc:
            logger.warning("Workspace snapshot failed: %s", exc)
