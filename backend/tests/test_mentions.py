"""Tests fuer @Mention-Erkennung und Tag-Benachrichtigungen."""
import pytest

from huddle.services.mentions import extract_mentions, resolve_mentions
from huddle.services.messages import edit_message, send_dm, send_message, share_message
from huddle.services.notifications import get_notifications
from huddle.services.users import set_handle

from tests.conftest import make_channel, make_dm, register


def _tagged(notifications: list[dict]) -> list[dict]:
    return [n for n in notifications if "tagged you" in n["notification_message"]]


# ---------------------------------------------------------------------------
# extract_mentions
# ---------------------------------------------------------------------------

def test_extract_single_mention():
    assert extract_mentions("Hallo @alice") == ["alice"]


def test_extract_multiple_mentions_in_order():
    assert extract_mentions("@alice hi @bob @alice") == ["alice", "bob", "alice"]


def test_extract_stops_at_non_alphanumeric():
    assert extract_mentions("@alice, @bob.jones @carol!") == ["alice", "bob", "carol"]


def test_extract_no_mentions():
    assert extract_mentions("Keine Erwaehnungen hier") == []
    assert extract_mentions("nur ein @ zeichen") == []


def test_extract_email_like_text():
    assert extract_mentions("mail an bob@example") == ["example"]


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_each_mentioned_member_notified_once(store):
    author = await register(store, "Max", "Muster")
    alice = await register(store, "Alice", "Smith")
    bob = await register(store, "Bob", "Jones")
    channel_id = await make_channel(store, author, alice, bob)

    await send_message(store, author["token"], channel_id, "@alicesmith hi @bobjones @alicesmith")

    for user in (alice, bob):
        tagged = _tagged((await get_notifications(store, user["token"]))["notifications"])
        assert len(tagged) == 1
        assert tagged[0]["channel_id"] == channel_id
        assert tagged[0]["dm_id"] == -1
        assert tagged[0]["notification_message"] == (
            "@maxmuster tagged you in general: @alicesmith hi @bobj"
        )


@pytest.mark.asyncio
async def test_prefix_handle_is_not_mentioned(store):
    author = await register(store, "Max", "Muster")
    short = await register(store, "Al", "Ice")
    longer = await register(store, "Al", "Ice", email="al.ice2@example.com")
    channel_id = await make_channel(store, author, short, longer)
    assert short["handle"] == "alice"
    assert longer["handle"] == "alice0"

    await send_message(store, author["token"], channel_id, "hey @alice0")

    assert _tagged((await get_notifications(store, short["token"]))["notifications"]) == []
    assert len(_tagged((await get_notifications(store, longer["token"]))["notifications"])) == 1


@pytest.mark.asyncio
async def test_self_mention_notifies_author(store):
    author = await register(store, "Max", "Muster")
    channel_id = await make_channel(store, author)

    await send_message(store, author["token"], channel_id, "Notiz an @maxmuster")

    tagged = _tagged((await get_notifications(store, author["token"]))["notifications"])
    assert len(tagged) == 1


@pytest.mark.asyncio
async def test_non_member_not_notified(store):
    author = await register(store, "Max", "Muster")
    outsider = await register(store, "Otto", "Aussen")
    channel_id = await make_channel(store, author)

    await send_message(store, author["token"], channel_id, "@ottoaussen bist du da?")

    assert _tagged((await get_notifications(store, outsider["token"]))["notifications"]) == []


@pytest.mark.asyncio
async def test_dm_mention_carries_dm_id(store):
    author = await register(store, "Max", "Muster")
    alice = await register(store, "Alice", "Smith")
    dm_id = await make_dm(store, author, alice)

    await send_dm(store, author["token"], dm_id, "@alicesmith kurz")

    tagged = _tagged((await get_notifications(store, alice["token"]))["notifications"])
    assert tagged[0]["channel_id"] == -1
    assert tagged[0]["dm_id"] == dm_id
    assert tagged[0]["notification_message"] == (
        "@maxmuster tagged you in alicesmith, maxmuster: @alicesmith kurz"
    )


@pytest.mark.asyncio
async def test_shared_message_scanned_for_mentions(store):
    author = await register(store, "Max", "Muster")
    alice = await register(store, "Alice", "Smith")
    source = await make_channel(store, author)
    target = await make_channel(store, author, alice, name="ziel")
    og_id = (await send_message(store, author["token"], source, "Wichtig"))["message_id"]

    await share_message(store, author["token"], og_id, "@alicesmith", target, -1)

    tagged = _tagged((await get_notifications(store, alice["token"]))["notifications"])
    assert len(tagged) == 1
    assert tagged[0]["channel_id"] == target


@pytest.mark.asyncio
async def test_edit_does_not_rescan_mentions(store):
    author = await register(store, "Max", "Muster")
    alice = await register(store, "Alice", "Smith")
    channel_id = await make_channel(store, author, alice)
    msg_id = (await send_message(store, author["token"], channel_id, "ohne"))["message_id"]

    await edit_message(store, author["token"], msg_id, "jetzt mit @alicesmith")

    assert _tagged((await get_notifications(store, alice["token"]))["notifications"]) == []


@pytest.mark.asyncio
async def test_resolve_mentions_only_members(store):
    author = await register(store, "Max", "Muster")
    alice = await register(store, "Alice", "Smith")
    await register(store, "Bob", "Jones")
    channel_id = await make_channel(store, author, alice)
    channel = store.channels[channel_id]

    ids = resolve_mentions(store, ["bobjones", "alicesmith", "alicesmith", "nobody"], channel)
    assert ids == [alice["u_id"]]


@pytest.mark.asyncio
async def test_mention_follows_changed_handle(store):
    alice = await register(store, "Alice", "Smith")
    bob = await register(store, "Bob", "Jones")
    channel_id = await make_channel(store, alice, bob)

    await set_handle(store, bob["token"], "bobby")
    await send_message(store, alice["token"], channel_id, "@bobjones alt")
    assert _tagged((await get_notifications(store, bob["token"]))["notifications"]) == []

    await send_message(store, alice["token"], channel_id, "@bobby neu")
    tagged = _tagged((await get_notifications(store, bob["token"]))["notifications"])
    assert [n["notification_message"] for n in tagged] == [
        "@alicesmith tagged you in general: @bobby neu"
    ]
