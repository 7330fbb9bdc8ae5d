"""Tests fuer Standups: Start, Status, Beitraege und Zusammenfassung."""
import pytest

from huddle.errors import Forbidden, InvalidInput, NotFound
from huddle.services.messages import channel_messages
from huddle.services.notifications import get_notifications
from huddle.services.standup import send_standup, standup_active, start_standup

from tests.conftest import START_TIME, make_channel, register


async def _finish(store, clock, seconds):
    clock.advance(seconds)
    async with store.lock:
        store.scheduler.run_due()


@pytest.mark.asyncio
async def test_standup_lifecycle(store, clock):
    alice = await register(store, "Alice", "Smith")
    bob = await register(store, "Bob", "Jones")
    channel_id = await make_channel(store, alice, bob)

    result = await start_standup(store, alice["token"], channel_id, 60)
    assert result == {"time_finish": START_TIME + 60}
    assert await standup_active(store, bob["token"], channel_id) == {
        "is_active": True,
        "time_finish": START_TIME + 60,
    }

    await send_standup(store, alice["token"], channel_id, "erledigt: API")
    await send_standup(store, bob["token"], channel_id, "heute: Tests @alicesmith")

    # Waehrend des Standups erscheint nichts im Channel
    assert (await channel_messages(store, alice["token"], channel_id, 0))["messages"] == []

    await _finish(store, clock, 60)

    assert await standup_active(store, alice["token"], channel_id) == {
        "is_active": False,
        "time_finish": None,
    }
    messages = (await channel_messages(store, alice["token"], channel_id, 0))["messages"]
    assert len(messages) == 1
    assert messages[0]["u_id"] == alice["u_id"]
    assert messages[0]["time_sent"] == START_TIME + 60
    assert messages[0]["message"] == "alicesmith: erledigt: API\nbobjones: heute: Tests @alicesmith"

    # Zusammenfassungen loesen keine Tags aus
    notes = (await get_notifications(store, alice["token"]))["notifications"]
    assert not any("tagged you" in n["notification_message"] for n in notes)


@pytest.mark.asyncio
async def test_empty_standup_posts_nothing(store, clock):
    alice = await register(store, "Alice", "Smith")
    channel_id = await make_channel(store, alice)

    await start_standup(store, alice["token"], channel_id, 10)
    await _finish(store, clock, 10)

    assert (await channel_messages(store, alice["token"], channel_id, 0))["messages"] == []
    assert (await standup_active(store, alice["token"], channel_id))["is_active"] is False


@pytest.mark.asyncio
async def test_standup_start_errors(store):
    alice = await register(store, "Alice", "Smith")
    bob = await register(store, "Bob", "Jones")
    channel_id = await make_channel(store, alice)

    with pytest.raises(NotFound):
        await start_standup(store, alice["token"], 99, 10)
    with pytest.raises(InvalidInput):
        await start_standup(store, alice["token"], channel_id, -1)
    with pytest.raises(Forbidden):
        await start_standup(store, bob["token"], channel_id, 10)

    await start_standup(store, alice["token"], channel_id, 10)
    with pytest.raises(InvalidInput):
        await start_standup(store, alice["token"], channel_id, 10)


@pytest.mark.asyncio
async def test_standup_send_errors(store):
    alice = await register(store, "Alice", "Smith")
    bob = await register(store, "Bob", "Jones")
    channel_id = await make_channel(store, alice)

    with pytest.raises(InvalidInput):
        await send_standup(store, alice["token"], channel_id, "kein Standup")

    await start_standup(store, alice["token"], channel_id, 10)
    with pytest.raises(InvalidInput):
        await send_standup(store, alice["token"], channel_id, "")
    with pytest.raises(InvalidInput):
        await send_standup(store, alice["token"], channel_id, "x" * 1001)
    with pytest.raises(Forbidden):
        await send_standup(store, bob["token"], channel_id, "hallo")
    with pytest.raises(NotFound):
        await send_standup(store, alice["token"], 99, "hallo")


@pytest.mark.asyncio
async def test_standup_active_requires_member(store):
    alice = await register(store, "Alice", "Smith")
    bob = await register(store, "Bob", "Jones")
    channel_id = await make_channel(store, alice)

    with pytest.raises(Forbidden):
        await standup_active(store, bob["token"], channel_id)
