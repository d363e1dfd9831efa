import json
import logging

from fastapi import APIRouter, WebSocket
from starlette.websockets import WebSocketDisconnect

from business_hub.api.v1.deps import websocket_user
from business_hub.core.errors import AppError
from business_hub.core.pubsub import channel, room_topic
from business_hub.models.user import User
from business_hub.services import rooms

logger = logging.getLogger("uvicorn.error")

router = APIRouter()

async def _send(ws: WebSocket, payload: dict) -> None:
    await ws.send_text(json.dumps(payload, default=str))

async def _join(ws: WebSocket, user: User, room_id: str | None) -> bool:
    """
    JOINING -> JOINED: admit the user, subscribe the socket to the room topic,
    arm the presence cleanup on this connection and send the snapshot.
    """
    if not room_id:
        await _send(ws, {"type": "error", "code": "BAD_REQUEST", "message": "roomId is required"})
        return False
    try:
        await rooms.join_room(room_id, user)
    except AppError as e:
        await _send(ws, {"type": "error", **e.to_dict()})
        return False

    key = rooms.presence_key(room_id, user.id)

    async def _drop_presence():
        # One entry per (room, user); it stays while another of the user's sockets holds it
        if channel.holders(key):
            return
        await rooms.leave_room(room_id, user.id)

    channel.subscribe(room_topic(room_id), ws)
    channel.arm_disconnect(ws, key, _drop_presence)
    await _send(ws, {"type": "snapshot", **(await rooms.room_snapshot(room_id))})
    await rooms.publish_participants(room_id)
    return True

async def _leave(ws: WebSocket, user: User, room_id: str) -> None:
    """JOINED -> LEFT: presence removed before the ack unless another socket of the user holds it."""
    key = rooms.presence_key(room_id, user.id)
    channel.disarm(ws, key)
    channel.unsubscribe(room_topic(room_id), ws)
    if not channel.holders(key):
        await rooms.leave_room(room_id, user.id)
    await _send(ws, {"type": "left", "roomId": room_id})

@router.websocket("/ws/rooms")
async def ws_rooms(ws: WebSocket):
    """
    WebSocket endpoint for live room membership and chat.

    Message flow:
    1. Client connects with ?token=<accessToken> (or the accessToken cookie)
    2. Client sends: {"type": "join", "roomId": "..."}
    3. Server replies {"type": "snapshot", "room", "participants", "messages"}
       or {"type": "error", "code": "ROOM_FULL" | "ROOM_NOT_FOUND"}
    4. Client sends {"type": "message", "content": "..."}; every subscriber
       (sender included) receives {"type": "message", "message": {...}}
    5. Client sends {"type": "leave"} or just goes away

    Whatever ends the connection, the armed disconnect hook removes the
    client's presence entry once the user has no other socket in the room.
    """
    await ws.accept()
    user = await websocket_user(ws)
    if user is None:
        await _send(ws, {"type": "error", "code": "AUTH_REQUIRED", "message": "Sign in to join rooms"})
        await ws.close(code=4401)
        return

    logger.info("[ws_rooms] connected user=%s", user.id)
    room_id = None
    try:
        while True:
            raw = await ws.receive_text()
            try:
                msg = json.loads(raw)
            except ValueError:
                await _send(ws, {"type": "error", "code": "BAD_REQUEST", "message": "Invalid JSON"})
                continue

            kind = msg.get("type")
            if kind == "join":
                target = msg.get("roomId")
                if room_id and room_id != target:
                    await _leave(ws, user, room_id)
                    room_id = None
                if await _join(ws, user, target):
                    room_id = target
            elif kind == "message":
                if not room_id:
                    await _send(ws, {"type": "error", "code": "NOT_JOINED", "message": "Join a room first"})
                    continue
                try:
                    await rooms.send_message(room_id, user, msg.get("content") or "")
                except AppError as e:
                    await _send(ws, {"type": "error", **e.to_dict()})
            elif kind == "leave":
                if room_id:
                    await _leave(ws, user, room_id)
                    room_id = None
            else:
                await _send(ws, {"type": "error", "code": "BAD_REQUEST", "message": f"Unknown message type: {kind}"})
    except WebSocketDisconnect:
        logger.info("[ws_rooms] disconnected user=%s", user.id)
    except Exception:
        logger.exception("[ws_rooms] connection error user=%s", user.id)
    finally:
        await channel.run_disconnect(ws)
