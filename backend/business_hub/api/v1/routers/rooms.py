# business_hub/api/v1/routers/rooms.py
from fastapi import APIRouter, Depends
from business_hub.api.v1.deps import get_current_user
from business_hub.models.user import User
from business_hub.schemas.room import CreateRoomIn, SendMessageIn
from business_hub.services import rooms

router = APIRouter(prefix="/rooms", tags=["rooms"])

@router.post("")
async def create_room(body: CreateRoomIn, user: User = Depends(get_current_user)):
    """
    Create a co-working room; the creator becomes its host and first participant.

    Costs the co-working-room credit price.

    Returns:
        dict: room data plus the charge:
            - room: room object
            - credits: {"approved", "cost", "newBalance"}

    Error codes:
        - INSUFFICIENT_CREDITS (402)
        - VALIDATION_ERROR (422)
    """
    room, charge = await rooms.create_room(user, body.name, body.organizationLabel, body.maxMembers)
    return {"success": True, "data": {"room": rooms.room_to_dict(room, 1), "credits": charge.to_dict()}}

@router.get("/{room_id}")
async def get_room(room_id: str, user: User = Depends(get_current_user)):
    """
    Join preview: room details, current participant count and whether the
    caller could get in right now (members always can).
    """
    room = await rooms.get_room(room_id)
    participants = await rooms.list_participants(room_id)
    is_member = any(str(p.user_id) == str(user.id) for p in participants)
    data = rooms.room_to_dict(room, len(participants))
    data["isMember"] = is_member
    data["canJoin"] = is_member or not data["isFull"]
    return {"success": True, "data": data}

@router.get("/{room_id}/participants")
async def list_participants(room_id: str, user: User = Depends(get_current_user)):
    await rooms.get_room(room_id)
    items = await rooms.list_participants(room_id)
    return {"success": True, "data": {"items": [p.to_dict() for p in items]}}

@router.get("/{room_id}/messages")
async def list_messages(room_id: str, user: User = Depends(get_current_user)):
    items = await rooms.list_messages(room_id)
    return {"success": True, "data": {"items": [m.to_dict() for m in items]}}

@router.post("/{room_id}/messages")
async def send_message(room_id: str, body: SendMessageIn, user: User = Depends(get_current_user)):
    """
    Append a message; it is broadcast to every live subscriber of the room.
    """
    msg = await rooms.send_message(room_id, user, body.content)
    return {"success": True, "data": msg.to_dict()}

@router.delete("/{room_id}")
async def delete_room(room_id: str, user: User = Depends(get_current_user)):
    """
    Delete a room with all of its participants and messages (host only).

    Error codes:
        - ROOM_NOT_FOUND (404)
        - NOT_ROOM_HOST (403)
    """
    await rooms.delete_room(room_id, user)
    return {"success": True, "data": {"id": room_id, "deleted": True}}

@router.post("/{room_id}/summary")
async def summarize_room(room_id: str, user: User = Depends(get_current_user)):
    """
    Meeting assistant: summary and actionable notes from the room's messages.
    """
    summary = await rooms.summarize_room(room_id)
    return {"success": True, "data": summary.model_dump()}
