"""User and workspace statistics.

Every counter is an append-only time series: each change appends a new
``CountSample`` holding the new value and the time it changed.
"""
from typing import TYPE_CHECKING

from huddle.errors import NotFound
from huddle.models import CountSample, User
from huddle.services.auth import resolve_session

if TYPE_CHECKING:
    from huddle.services.store import WorkspaceStore


def _append(series: list[CountSample], delta: int, now: int) -> None:
    current = series[-1].count if series else 0
    series.append(CountSample(count=max(0, current + delta), time_stamp=now))


def init_workspace_stats(store: "WorkspaceStore") -> None:
    now = store.now()
    stats = store.data.stats
    for series in (stats.channels_exist, stats.dms_exist, stats.messages_exist):
        if not series:
            series.append(CountSample(count=0, time_stamp=now))


def init_user_stats(user: User, now: int) -> None:
    stats = user.stats
    for series in (stats.channels_joined, stats.dms_joined, stats.messages_sent):
        if not series:
            series.append(CountSample(count=0, time_stamp=now))


def record_message_sent(store: "WorkspaceStore", u_id: int) -> None:
    now = store.now()
    _append(store.users[u_id].stats.messages_sent, 1, now)
    live = store.data.counter.message_added()
    store.data.stats.messages_exist.append(CountSample(count=live, time_stamp=now))


def record_message_removed(store: "WorkspaceStore") -> None:
    live = store.data.counter.message_removed()
    store.data.stats.messages_exist.append(
        CountSample(count=live, time_stamp=store.now())
    )


def record_channel_created(store: "WorkspaceStore") -> None:
    _append(store.data.stats.channels_exist, 1, store.now())


def record_channel_joined(store: "WorkspaceStore", u_id: int) -> None:
    _append(store.users[u_id].stats.channels_joined, 1, store.now())


def record_channel_left(store: "WorkspaceStore", u_id: int) -> None:
    _append(store.users[u_id].stats.channels_joined, -1, store.now())


def record_dm_created(store: "WorkspaceStore", member_ids: list[int]) -> None:
    now = store.now()
    _append(store.data.stats.dms_exist, 1, now)
    for u_id in member_ids:
        _append(store.users[u_id].stats.dms_joined, 1, now)


def record_dm_removed(store: "WorkspaceStore", member_ids: list[int]) -> None:
    now = store.now()
    _append(store.data.stats.dms_exist, -1, now)
    for u_id in member_ids:
        _append(store.users[u_id].stats.dms_joined, -1, now)


def record_dm_left(store: "WorkspaceStore", u_id: int) -> None:
    _append(store.users[u_id].stats.dms_joined, -1, store.now())


def _latest(series: list[CountSample]) -> int:
    return series[-1].count if series else 0


def _dump(series: list[CountSample], key: str) -> list[dict]:
    return [{key: s.count, "time_stamp": s.time_stamp} for s in series]


async def user_stats(store: "WorkspaceStore", token: str | None) -> dict:
    async with store.lock:
        u_id = resolve_session(store, token)
        user = store.get_user(u_id)
        if user is None:
            raise NotFound("User not found")
        stats = user.stats
        ws = store.data.stats

        joined = (
            _latest(stats.channels_joined)
            + _latest(stats.dms_joined)
            + _latest(stats.messages_sent)
        )
        existing = (
            _latest(ws.channels_exist) + _latest(ws.dms_exist) + _latest(ws.messages_exist)
        )
        involvement = min(1.0, joined / existing) if existing else 0.0

        return {
            "channels_joined": _dump(stats.channels_joined, "num_channels_joined"),
            "dms_joined": _dump(stats.dms_joined, "num_dms_joined"),
            "messages_sent": _dump(stats.messages_sent, "num_messages_sent"),
            "involvement_rate": involvement,
        }


async def workspace_stats(store: "WorkspaceStore", token: str | None) -> dict:
    async with store.lock:
        resolve_session(store, token)
        ws = store.data.stats

        involved = {
            u_id
            for container in list(store.channels.values()) + list(store.dms.values())
            for u_id in container.members
        }
        total_users = sum(1 for u in store.users.values() if not u.is_removed)
        utilization = len(involved) / total_users if total_users else 0.0

        return {
            "channels_exist": _dump(ws.channels_exist, "num_channels_exist"),
            "dms_exist": _dump(ws.dms_exist, "num_dms_exist"),
            "messages_exist": _dump(ws.messages_exist, "num_messages_exist"),
            "utilization_rate": utilization,
        }
