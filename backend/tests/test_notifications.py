"""Tests fuer Benachrichtigungen: hinzugefuegt, reagiert, Limit."""
import pytest

from huddle.errors import Unauthenticated
from huddle.services.messages import react_message, send_dm, send_message
from huddle.services.notifications import NOTIFICATION_LIMIT, get_notifications

from tests.conftest import make_channel, make_dm, register


@pytest.mark.asyncio
async def test_added_to_channel(store):
    alice = await register(store, "Alice", "Smith")
    bob = await register(store, "Bob", "Jones")
    channel_id = await make_channel(store, alice, bob, name="projekt")

    result = await get_notifications(store, bob["token"])
    assert result == {
        "notifications": [
            {
                "channel_id": channel_id,
                "dm_id": -1,
                "notification_message": "@alicesmith added you to projekt",
            }
        ]
    }
    # Der Ersteller bekommt keine Benachrichtigung
    assert (await get_notifications(store, alice["token"]))["notifications"] == []


@pytest.mark.asyncio
async def test_added_to_dm(store):
    alice = await register(store, "Alice", "Smith")
    bob = await register(store, "Bob", "Jones")
    dm_id = await make_dm(store, alice, bob)

    notes = (await get_notifications(store, bob["token"]))["notifications"]
    assert notes == [
        {
            "channel_id": -1,
            "dm_id": dm_id,
            "notification_message": "@alicesmith added you to alicesmith, bobjones",
        }
    ]


@pytest.mark.asyncio
async def test_reaction_notifies_author(store):
    alice = await register(store, "Alice", "Smith")
    bob = await register(store, "Bob", "Jones")
    channel_id = await make_channel(store, alice, bob)
    msg_id = (await send_message(store, alice["token"], channel_id, "hallo"))["message_id"]

    await react_message(store, bob["token"], msg_id, 1)

    notes = (await get_notifications(store, alice["token"]))["notifications"]
    assert notes[0]["notification_message"] == "@bobjones reacted to your message in general"
    assert notes[0]["channel_id"] == channel_id


@pytest.mark.asyncio
async def test_own_reaction_not_notified(store):
    alice = await register(store, "Alice", "Smith")
    channel_id = await make_channel(store, alice)
    msg_id = (await send_message(store, alice["token"], channel_id, "hallo"))["message_id"]

    await react_message(store, alice["token"], msg_id, 1)

    assert (await get_notifications(store, alice["token"]))["notifications"] == []


@pytest.mark.asyncio
async def test_newest_first_and_limited(store):
    alice = await register(store, "Alice", "Smith")
    bob = await register(store, "Bob", "Jones")
    dm_id = await make_dm(store, alice, bob)

    for i in range(NOTIFICATION_LIMIT + 5):
        await send_dm(store, alice["token"], dm_id, f"@bobjones nr {i}")

    notes = (await get_notifications(store, bob["token"]))["notifications"]
    assert len(notes) == NOTIFICATION_LIMIT
    assert notes[0]["notification_message"].endswith("nr 24")
    assert notes[-1]["notification_message"].endswith("nr 5")


@pytest.mark.asyncio
async def test_notifications_require_session(store):
    with pytest.raises(Unauthenticated):
        await get_notifications(store, None)
