"""
Pytest-Konfiguration: frischer In-Memory-Workspace pro Test, steuerbare Uhr
und temporaeres Verzeichnis fuer Snapshot-Dateien.
"""
import os

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from huddle.main import app
from huddle.services.channels import create_channel, create_dm, invite_to_channel
from huddle.services.store import WorkspaceStore
from huddle.services.users import register_user

START_TIME = 1_700_000_000


class FakeClock:
    """Uhr fuer den Store, die nur auf Befehl weiterlaeuft."""

    def __init__(self, start: float = START_TIME):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest_asyncio.fixture
async def store(clock):
    workspace = WorkspaceStore(clock=clock)
    yield workspace
    await workspace.scheduler.shutdown()


@pytest.fixture
def tmp_data_dir(tmp_path, monkeypatch):
    data_dir = str(tmp_path / "data")
    os.makedirs(data_dir, exist_ok=True)
    monkeypatch.setattr("huddle.config.settings.data_dir", data_dir)
    return data_dir


@pytest_asyncio.fixture
async def client():
    """AsyncClient der FastAPI-App mit frischem Workspace."""
    workspace = WorkspaceStore()
    app.state.store = workspace
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    await workspace.scheduler.shutdown()


async def register(
    store: WorkspaceStore,
    name_first: str = "Test",
    name_last: str = "User",
    email: str | None = None,
    password: str = "Test1234!",
) -> dict:
    """Hilfsfunktion: Registriert einen Benutzer und liefert Token, ID und Handle."""
    email = email or f"{name_first}.{name_last}@example.com".lower()
    auth = await register_user(store, email, password, name_first, name_last)
    return {
        "token": auth["token"],
        "u_id": auth["auth_user_id"],
        "handle": store.handle_of(auth["auth_user_id"]),
    }


async def make_channel(
    store: WorkspaceStore, owner: dict, *members: dict, name: str = "general", is_public: bool = True
) -> int:
    """Hilfsfunktion: Channel anlegen und weitere Mitglieder einladen."""
    channel_id = (await create_channel(store, owner["token"], name, is_public))["channel_id"]
    for member in members:
        await invite_to_channel(store, owner["token"], channel_id, member["u_id"])
    return channel_id


async def make_dm(store: WorkspaceStore, creator: dict, *members: dict) -> int:
    result = await create_dm(store, creator["token"], [m["u_id"] for m in members])
    return result["dm_id"]


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
