"""Tests fuer zeitversetzte Nachrichten und den Scheduler."""
import asyncio

import pytest

from huddle.errors import Forbidden, InvalidInput, NotFound
from huddle.services.channels import remove_dm
from huddle.services.messages import (
    channel_messages,
    dm_messages,
    send_later,
    send_later_dm,
    send_message,
)
from huddle.services.notifications import get_notifications
from huddle.services.store import WorkspaceStore

from tests.conftest import START_TIME, make_channel, make_dm, register


async def _run_due(store) -> int:
    async with store.lock:
        return store.scheduler.run_due()


@pytest.mark.asyncio
async def test_send_later_invisible_until_due(store, clock):
    alice = await register(store, "Alice", "Smith")
    channel_id = await make_channel(store, alice)

    msg_id = (await send_later(store, alice["token"], channel_id, "spaeter", START_TIME + 60))[
        "message_id"
    ]

    assert store.resolve(msg_id) is None
    assert (await channel_messages(store, alice["token"], channel_id, 0))["messages"] == []
    assert store.scheduler.pending == 1

    clock.advance(30)
    assert await _run_due(store) == 0

    clock.advance(30)
    assert await _run_due(store) == 1

    page = await channel_messages(store, alice["token"], channel_id, 0)
    assert [m["message_id"] for m in page["messages"]] == [msg_id]
    assert page["messages"][0]["time_sent"] == START_TIME + 60
    assert store.scheduler.pending == 0


@pytest.mark.asyncio
async def test_send_later_id_reserved_at_request(store, clock):
    alice = await register(store, "Alice", "Smith")
    channel_id = await make_channel(store, alice)

    later_id = (await send_later(store, alice["token"], channel_id, "spaeter", START_TIME + 10))[
        "message_id"
    ]
    now_id = (await send_message(store, alice["token"], channel_id, "jetzt"))["message_id"]
    assert now_id > later_id

    clock.advance(10)
    await _run_due(store)

    page = await channel_messages(store, alice["token"], channel_id, 0)
    # Der Log ist nach Zustellung geordnet, nicht nach Id
    assert [m["message"] for m in page["messages"]] == ["spaeter", "jetzt"]


@pytest.mark.asyncio
async def test_send_later_mentions_at_delivery(store, clock):
    alice = await register(store, "Alice", "Smith")
    bob = await register(store, "Bob", "Jones")
    dm_id = await make_dm(store, alice, bob)

    await send_later_dm(store, alice["token"], dm_id, "@bobjones denk dran", START_TIME + 5)

    def tagged(notes):
        return [n for n in notes if "tagged you" in n["notification_message"]]

    assert tagged((await get_notifications(store, bob["token"]))["notifications"]) == []

    clock.advance(5)
    await _run_due(store)

    assert len(tagged((await get_notifications(store, bob["token"]))["notifications"])) == 1
    assert (await dm_messages(store, bob["token"], dm_id, 0))["messages"][0]["message"] == (
        "@bobjones denk dran"
    )


@pytest.mark.asyncio
async def test_send_later_validation(store):
    alice = await register(store, "Alice", "Smith")
    bob = await register(store, "Bob", "Jones")
    channel_id = await make_channel(store, alice)

    with pytest.raises(NotFound):
        await send_later(store, alice["token"], 99, "x", START_TIME + 10)
    with pytest.raises(InvalidInput):
        await send_later(store, alice["token"], channel_id, "", START_TIME + 10)
    with pytest.raises(InvalidInput):
        await send_later(store, alice["token"], channel_id, "x", START_TIME - 1)
    with pytest.raises(Forbidden):
        await send_later(store, bob["token"], channel_id, "x", START_TIME + 10)
    assert store.scheduler.pending == 0


@pytest.mark.asyncio
async def test_send_later_dropped_when_dm_removed(store, clock, caplog):
    alice = await register(store, "Alice", "Smith")
    bob = await register(store, "Bob", "Jones")
    dm_id = await make_dm(store, alice, bob)

    msg_id = (await send_later_dm(store, bob["token"], dm_id, "zu spaet", START_TIME + 5))[
        "message_id"
    ]
    await remove_dm(store, alice["token"], dm_id)

    clock.advance(5)
    await _run_due(store)

    assert store.resolve(msg_id) is None
    assert store.dms[dm_id].messages == []
    assert "Dropping deferred message" in caplog.text


@pytest.mark.asyncio
async def test_reset_cancels_pending_deliveries(store, clock):
    alice = await register(store, "Alice", "Smith")
    channel_id = await make_channel(store, alice)
    await send_later(store, alice["token"], channel_id, "nie", START_TIME + 5)

    async with store.lock:
        store.reset()

    assert store.scheduler.pending == 0


@pytest.mark.asyncio
async def test_send_later_real_time_delivery():
    """Zustellung ueber den echten Timer, ohne manuelles run_due."""
    store = WorkspaceStore()
    try:
        alice = await register(store, "Alice", "Smith")
        channel_id = await make_channel(store, alice)

        msg_id = (await send_later(store, alice["token"], channel_id, "gleich", store.now() + 1))[
            "message_id"
        ]
        assert store.resolve(msg_id) is None

        await asyncio.sleep(2.5)

        assert store.resolve(msg_id) is not None
        assert store.scheduler.pending == 0
    finally:
        await store.scheduler.shutdown()


@pytest.mark.asyncio
async def test_wake_up_retries_while_clock_lags(store, clock):
    """Zeigt die Uhr beim Aufwachen noch knapp vor due_at, wird erneut gewartet."""
    ran = []
    clock.now = START_TIME + 4.99
    async with store.lock:
        store.scheduler.submit(START_TIME + 5, lambda: ran.append(1), label="lagging")

    await asyncio.sleep(0.1)
    assert ran == []
    assert store.scheduler.pending == 1

    clock.now = START_TIME + 5
    await asyncio.sleep(0.1)
    assert ran == [1]
    assert store.scheduler.pending == 0


@pytest.mark.asyncio
async def test_failing_work_item_does_not_stop_the_queue(store, clock, caplog):
    ran = []

    def broken():
        raise RuntimeError("kaputt")

    async with store.lock:
        store.scheduler.submit(START_TIME + 1, broken, label="broken item")
        store.scheduler.submit(START_TIME + 1, lambda: ran.append("ok"), label="good item")

    clock.advance(1)
    assert await _run_due(store) == 2

    assert ran == ["ok"]
    assert store.scheduler.pending == 0
    assert "Scheduled broken item failed" in caplog.text
