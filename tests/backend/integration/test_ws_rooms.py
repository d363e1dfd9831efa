"""
WebSocket room tests.
The endpoint coroutine is driven directly with a fake socket so that it runs
on the same event loop as the test database.
"""
import asyncio

import pytest

from business_hub.api.v1.routers.ws_rooms import ws_rooms
from business_hub.core.pubsub import channel, room_topic
from business_hub.models.room import Participant
from business_hub.services import rooms


pytestmark = [pytest.mark.asyncio, pytest.mark.usefixtures("db")]


async def test_unauthenticated_connection_is_closed(fake_ws):
    ws = fake_ws(None, [{"type": "join", "roomId": "abc123"}])
    await ws_rooms(ws)

    assert ws.accepted is True
    assert ws.sent == [{"type": "error", "code": "AUTH_REQUIRED", "message": "Sign in to join rooms"}]
    assert ws.closed_code == 4401


async def test_join_chat_and_disconnect_cleans_presence(fake_ws, create_user):
    host, _ = await create_user()
    guest, _ = await create_user(display_name="Guest")
    room, _ = await rooms.create_room(host, "Standup")

    ws = fake_ws(guest, [
        {"type": "join", "roomId": room.id},
        {"type": "message", "content": "hello"},
    ])
    # Connection drops without a leave once the frames run out
    await ws_rooms(ws)

    snapshot = ws.of_type("snapshot")[0]
    assert snapshot["room"]["id"] == room.id
    assert {p["id"] for p in snapshot["participants"]} == {str(host.id), str(guest.id)}
    assert snapshot["messages"] == []

    participants_event = ws.of_type("participants")[0]
    assert len(participants_event["participants"]) == 2

    # The sender receives its own message through the room topic
    assert ws.of_type("message")[0]["message"]["content"] == "hello"

    assert await Participant.filter(room_id=room.id).count() == 1
    assert channel.subscribers(room_topic(room.id)) == set()
    assert channel.armed(ws) == {}


async def test_explicit_leave(fake_ws, create_user):
    host, _ = await create_user()
    guest, _ = await create_user()
    room, _ = await rooms.create_room(host, "Standup")

    ws = fake_ws(guest, [
        {"type": "join", "roomId": room.id},
        {"type": "leave"},
        {"type": "message", "content": "anyone?"},
    ])
    await ws_rooms(ws)

    assert ws.of_type("left") == [{"type": "left", "roomId": room.id}]
    assert ws.of_type("error")[0]["code"] == "NOT_JOINED"
    assert await Participant.filter(room_id=room.id, user_id=guest.id).count() == 0


async def test_join_full_room_is_refused(fake_ws, create_user):
    host, _ = await create_user()
    guest, _ = await create_user()
    room, _ = await rooms.create_room(host, "Solo", max_members=1)

    ws = fake_ws(guest, [{"type": "join", "roomId": room.id}])
    await ws_rooms(ws)

    assert ws.of_type("snapshot") == []
    assert ws.of_type("error")[0]["code"] == "ROOM_FULL"
    assert await Participant.filter(room_id=room.id).count() == 1


async def test_join_missing_room(fake_ws, create_user):
    guest, _ = await create_user()
    ws = fake_ws(guest, [{"type": "join", "roomId": "nope42"}])
    await ws_rooms(ws)
    assert ws.of_type("error")[0]["code"] == "ROOM_NOT_FOUND"


async def test_host_disconnect_keeps_room_but_drops_presence(fake_ws, create_user):
    host, _ = await create_user()
    room, _ = await rooms.create_room(host, "Standup")

    ws = fake_ws(host, [{"type": "join", "roomId": room.id}])
    await ws_rooms(ws)

    # Rejoin by the creator is accepted; disconnect then removes the entry
    assert ws.of_type("snapshot")[0]["room"]["participantCount"] == 1
    assert await Participant.filter(room_id=room.id).count() == 0
    assert await rooms.get_room(room.id)


async def test_bad_frames_get_errors(fake_ws, create_user):
    guest, _ = await create_user()
    ws = fake_ws(guest, ["{not json", {"type": "dance"}, {"type": "join"}])
    await ws_rooms(ws)

    codes = [m["code"] for m in ws.of_type("error")]
    assert codes == ["BAD_REQUEST", "BAD_REQUEST", "BAD_REQUEST"]


async def wait_for_snapshot(ws, attempts: int = 500) -> None:
    for _ in range(attempts):
        if ws.of_type("snapshot"):
            return
        await asyncio.sleep(0.01)
    raise AssertionError("socket never joined")


async def test_second_tab_closing_keeps_presence(fake_ws, create_user):
    host, _ = await create_user()
    guest, _ = await create_user()
    room, _ = await rooms.create_room(host, "Standup")

    first_open = asyncio.Event()
    first = fake_ws(guest, [{"type": "join", "roomId": room.id}], hold=first_open)
    first_tab = asyncio.create_task(ws_rooms(first))
    await wait_for_snapshot(first)

    # Same user, second tab: joins, then vanishes
    second = fake_ws(guest, [{"type": "join", "roomId": room.id}])
    await ws_rooms(second)

    assert second.of_type("snapshot")
    assert await Participant.filter(room_id=room.id, user_id=guest.id).count() == 1
    assert channel.subscribers(room_topic(room.id)) == {first}

    first_open.set()
    await first_tab
    assert await Participant.filter(room_id=room.id, user_id=guest.id).count() == 0


async def test_leave_from_one_tab_keeps_presence_for_the_other(fake_ws, create_user):
    host, _ = await create_user()
    guest, _ = await create_user()
    room, _ = await rooms.create_room(host, "Standup")

    first_open = asyncio.Event()
    first = fake_ws(guest, [{"type": "join", "roomId": room.id}], hold=first_open)
    first_tab = asyncio.create_task(ws_rooms(first))
    await wait_for_snapshot(first)

    second = fake_ws(guest, [{"type": "join", "roomId": room.id}, {"type": "leave"}])
    await ws_rooms(second)

    assert second.of_type("left") == [{"type": "left", "roomId": room.id}]
    assert await Participant.filter(room_id=room.id, user_id=guest.id).count() == 1

    first_open.set()
    await first_tab
    assert await Participant.filter(room_id=room.id, user_id=guest.id).count() == 0
