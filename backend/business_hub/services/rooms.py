"""
Room Presence & Messaging

Co-working rooms with live membership and an append-only chat log.

Per-client lifecycle: NOT_JOINED -> JOINING -> JOINED -> (LEFT | DISCONNECTED).
Joining writes a presence entry and arms a disconnect hook on the client's
connection, so the entry is removed even when the client vanishes without
leaving. Every change is published on the room's topic.
"""
import logging
import secrets
import string
from dataclasses import dataclass
from typing import List, Optional

from tortoise.exceptions import IntegrityError
from tortoise.transactions import in_transaction

from ..config import settings
from ..core.errors import NotRoomHost, RoomFull, RoomNotFound, StoreUnavailable, ValidationError
from ..core.pubsub import channel, room_topic
from ..models.room import Message, Participant, Room
from ..models.user import User
from .content_generator import MeetingSummary, content_generator
from .credits import DebitResult, Feature, require_credits

logger = logging.getLogger("uvicorn.error")

ROOM_ID_ALPHABET = string.ascii_letters + string.digits + "_-"
ROOM_ID_ATTEMPTS = 5


@dataclass
class JoinResult:
    room: Room
    participant: Participant
    rejoined: bool  # True when the user was already a member


def new_room_id(length: int = settings.room_id_length) -> str:
    return "".join(secrets.choice(ROOM_ID_ALPHABET) for _ in range(length))


def presence_key(room_id: str, user_id) -> str:
    """Key under which a connection's presence cleanup is armed"""
    return f"presence:{room_id}:{user_id}"


def room_to_dict(room: Room, participant_count: Optional[int] = None) -> dict:
    out = {
        "id": room.id,
        "name": room.name,
        "organizationLabel": room.organization_label,
        "creatorId": str(room.creator_id),
        "maxMembers": room.max_members,
        "createdAt": room.created_at.isoformat() if room.created_at else None,
    }
    if participant_count is not None:
        out["participantCount"] = participant_count
        out["isFull"] = participant_count >= room.max_members
    return out


# -------- reads --------
async def get_room(room_id: str) -> Room:
    room = await Room.get_or_none(id=room_id)
    if room is None:
        raise RoomNotFound()
    return room


async def list_participants(room_id: str) -> List[Participant]:
    return await Participant.filter(room_id=room_id).order_by("joined_at", "id")


async def list_messages(room_id: str) -> List[Message]:
    """Full message log of a room in store insertion order."""
    await get_room(room_id)
    return await Message.filter(room_id=room_id).order_by("id")


async def room_snapshot(room_id: str) -> dict:
    """Initial state handed to a client that has just joined."""
    room = await get_room(room_id)
    participants = await list_participants(room_id)
    messages = await Message.filter(room_id=room_id).order_by("id")
    return {
        "room": room_to_dict(room, len(participants)),
        "participants": [p.to_dict() for p in participants],
        "messages": [m.to_dict() for m in messages],
    }


# -------- fan-out --------
async def publish_participants(room_id: str) -> None:
    participants = await list_participants(room_id)
    await channel.publish(room_topic(room_id), {
        "type": "participants",
        "roomId": room_id,
        "participants": [p.to_dict() for p in participants],
    })


# -------- writes --------
async def create_room(
    user: User,
    name: str,
    organization_label: str = "",
    max_members: Optional[int] = None,
) -> tuple[Room, DebitResult]:
    """
    Create a room owned by `user`, who becomes its first participant.

    Charges the co-working-room cost first; raises InsufficientCredits when
    the balance is too low, before anything is written.
    """
    name = (name or "").strip()
    if not name:
        raise ValidationError("Room name is required.")
    if max_members is None:
        max_members = settings.default_max_members
    if max_members < 1:
        raise ValidationError("Max members must be at least 1.")

    charge = await require_credits(user, Feature.CO_WORKING_ROOM)

    for _ in range(ROOM_ID_ATTEMPTS):
        room_id = new_room_id()
        try:
            async with in_transaction() as conn:
                room = await Room.create(
                    id=room_id,
                    name=name,
                    organization_label=(organization_label or "").strip(),
                    creator_id=user.id,
                    max_members=max_members,
                    using_db=conn,
                )
                await Participant.create(
                    room_id=room.id,
                    user_id=user.id,
                    display_name=user.display_name or "Anonymous",
                    avatar_url=user.avatar_url or "",
                    using_db=conn,
                )
        except IntegrityError:
            logger.info("[rooms] room id collision on %s, retrying", room_id)
            continue
        logger.info("[rooms] created room=%s creator=%s max=%s", room.id, user.id, max_members)
        return room, charge

    raise StoreUnavailable("Could not allocate a room id. Please try again.")


async def join_room(room_id: str, user: User) -> JoinResult:
    """
    Admit `user` to a room.

    - Missing room: RoomNotFound
    - Already a member: accepted, presence entry refreshed
    - Otherwise at capacity: RoomFull

    Count and insert share a transaction that locks the room row on backends
    with SELECT ... FOR UPDATE, which makes the cap hard there.
    """
    display_name = user.display_name or "Anonymous"
    avatar_url = user.avatar_url or ""
    try:
        async with in_transaction() as conn:
            room = await Room.filter(id=room_id).using_db(conn).select_for_update().first()
            if room is None:
                raise RoomNotFound()

            existing = await Participant.filter(room_id=room_id, user_id=user.id).using_db(conn).first()
            if existing is not None:
                existing.display_name = display_name
                existing.avatar_url = avatar_url
                await existing.save(using_db=conn, update_fields=["display_name", "avatar_url"])
                return JoinResult(room=room, participant=existing, rejoined=True)

            count = await Participant.filter(room_id=room_id).using_db(conn).count()
            if count >= room.max_members:
                logger.info("[rooms] join rejected room=%s user=%s full (%s/%s)",
                            room_id, user.id, count, room.max_members)
                raise RoomFull()

            participant = await Participant.create(
                room_id=room_id,
                user_id=user.id,
                display_name=display_name,
                avatar_url=avatar_url,
                using_db=conn,
            )
    except IntegrityError:
        # Same user joined concurrently from another connection
        participant = await Participant.get(room_id=room_id, user_id=user.id)
        return JoinResult(room=await get_room(room_id), participant=participant, rejoined=True)

    logger.info("[rooms] joined room=%s user=%s", room_id, user.id)
    return JoinResult(room=room, participant=participant, rejoined=False)


async def leave_room(room_id: str, user_id) -> bool:
    """
    Remove a presence entry and tell the room. Returns False if there was none.
    Also serves as the disconnect hook body.
    """
    removed = await Participant.filter(room_id=room_id, user_id=user_id).delete()
    if removed:
        logger.info("[rooms] left room=%s user=%s", room_id, user_id)
        await publish_participants(room_id)
    return bool(removed)


async def send_message(room_id: str, user: User, content: str) -> Message:
    """Append a message to the room log and broadcast it."""
    if not (content or "").strip():
        raise ValidationError("Message content is required.")
    await get_room(room_id)
    message = await Message.create(
        room_id=room_id,
        sender_id=str(user.id),
        sender_display_name=user.display_name or "Anonymous",
        sender_avatar_url=user.avatar_url or "",
        content=content,
    )
    await channel.publish(room_topic(room_id), {
        "type": "message",
        "roomId": room_id,
        "message": message.to_dict(),
    })
    return message


async def delete_room(room_id: str, user: User) -> None:
    """
    Host-only removal of a room with its presence entries and messages.
    Live subscribers get a `room_deleted` event and are detached.
    """
    room = await get_room(room_id)
    if str(room.creator_id) != str(user.id):
        raise NotRoomHost("Only the host can delete this room.")

    async with in_transaction() as conn:
        await Message.filter(room_id=room_id).using_db(conn).delete()
        await Participant.filter(room_id=room_id).using_db(conn).delete()
        await room.delete(using_db=conn)

    topic = room_topic(room_id)
    await channel.publish(topic, {"type": "room_deleted", "roomId": room_id})
    prefix = presence_key(room_id, "")
    for ws in channel.close_topic(topic):
        for key in channel.armed(ws):
            if key.startswith(prefix):
                channel.disarm(ws, key)
    logger.info("[rooms] deleted room=%s by=%s", room_id, user.id)


async def summarize_room(room_id: str) -> MeetingSummary:
    """Summarize the room's conversation with the meeting assistant."""
    messages = await list_messages(room_id)
    if not messages:
        raise ValidationError("There are no messages to summarize.")
    transcript = "\n".join(f"{m.sender_display_name}: {m.content}" for m in messages)
    return await content_generator.summarize_meeting(transcript)
