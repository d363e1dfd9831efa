# business_hub/core/pubsub.py
"""
PubSub module for WebSocket fan-out.
Provides topic-based broadcasting plus per-connection disconnect hooks, the
in-process half of the realtime store: the database holds the state, this
channel pushes every change to the sockets subscribed to its path.
"""
import json
import logging
from typing import Awaitable, Callable, Dict, Set

from starlette.websockets import WebSocket

logger = logging.getLogger("uvicorn.error")

DisconnectHook = Callable[[], Awaitable[None]]


def room_topic(room_id: str) -> str:
    """Topic carrying participant, message and deletion events for one room."""
    return f"rooms/{room_id}"


class Channel:
    """
    Topic-based PubSub channel for WebSocket broadcasting.

    Architecture:
    - Router is responsible for ws.accept(); this module only handles routing
    - A change published on a topic reaches every subscriber, including the sender
    - Each connection can arm cleanup callbacks that run exactly once when it
      goes away, whether it left cleanly or vanished

    Data structure:
    - _topics: Dict[topic, Set[WebSocket]]
    - _hooks: Dict[WebSocket, Dict[key, DisconnectHook]]
    """
    def __init__(self):
        # Example: {"rooms/ab12Cd": {ws1, ws2}}
        self._topics: Dict[str, Set[WebSocket]] = {}
        self._hooks: Dict[WebSocket, Dict[str, DisconnectHook]] = {}

    # -------- subscribe / unsubscribe (no accept, only register) --------
    def subscribe(self, topic: str, ws: WebSocket) -> None:
        self._topics.setdefault(topic, set()).add(ws)

    def unsubscribe(self, topic: str, ws: WebSocket) -> None:
        subs = self._topics.get(topic)
        if subs is None:
            return
        subs.discard(ws)
        if not subs:
            del self._topics[topic]

    def subscribers(self, topic: str) -> Set[WebSocket]:
        return set(self._topics.get(topic, set()))

    def close_topic(self, topic: str) -> Set[WebSocket]:
        """Drop every subscription to a topic and return the former subscribers."""
        return self._topics.pop(topic, set())

    # -------- publish --------
    async def publish(self, topic: str, payload: dict) -> None:
        """
        Publish a JSON message to all subscribers of a topic.

        Sockets that fail to receive are unsubscribed; their own disconnect
        hooks still run when their receive loop notices the drop.
        """
        conns = list(self._topics.get(topic, set()))
        msg = json.dumps(payload, default=str)
        for s in conns:
            try:
                await s.send_text(msg)
            except Exception as e:
                logger.info("[pubsub] dropping dead subscriber on %s: %r", topic, e)
                self.unsubscribe(topic, s)

    # -------- disconnect hooks --------
    def arm_disconnect(self, ws: WebSocket, key: str, hook: DisconnectHook) -> None:
        """
        Register a cleanup to run when `ws` disconnects.
        Re-arming the same key replaces the previous hook.
        """
        self._hooks.setdefault(ws, {})[key] = hook

    def disarm(self, ws: WebSocket, key: str) -> None:
        hooks = self._hooks.get(ws)
        if hooks is None:
            return
        hooks.pop(key, None)
        if not hooks:
            del self._hooks[ws]

    def armed(self, ws: WebSocket) -> Dict[str, DisconnectHook]:
        return dict(self._hooks.get(ws, {}))

    def holders(self, key: str) -> Set[WebSocket]:
        """Connections that currently have a cleanup armed under `key`."""
        return {ws for ws, hooks in self._hooks.items() if key in hooks}

    async def run_disconnect(self, ws: WebSocket) -> None:
        """
        Tear down a connection: unsubscribe it everywhere, then run each armed
        hook once. A failing hook is logged and does not stop the others.
        """
        for topic in [t for t, subs in self._topics.items() if ws in subs]:
            self.unsubscribe(topic, ws)
        hooks = self._hooks.pop(ws, {})
        for key, hook in hooks.items():
            try:
                await hook()
            except Exception:
                logger.exception("[pubsub] disconnect hook %s failed", key)


# Global channel instance (singleton pattern)
channel = Channel()
