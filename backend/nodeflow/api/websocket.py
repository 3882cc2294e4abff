"""Push channel for execution events.

Each editor tab subscribes to one session id over ``/ws/execution/{id}``;
every message produced while that session's pass runs is fanned out to all
of its subscribers as JSON text frames.
"""
import json
import logging
from typing import Any

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Session id -> subscribed sockets, in subscription order."""

    def __init__(self):
        self._subscribers: dict[str, list[WebSocket]] = {}

    async def connect(self, session_id: str, websocket: WebSocket):
        await websocket.accept()
        self._subscribers.setdefault(session_id, []).append(websocket)
        logger.debug(
            "Session %s: subscriber added (%d total)",
            session_id, len(self._subscribers[session_id]),
        )

    def disconnect(self, session_id: str, websocket: WebSocket):
        sockets = self._subscribers.get(session_id)
        if sockets is None:
            return
        remaining = [ws for ws in sockets if ws is not websocket]
        if remaining:
            self._subscribers[session_id] = remaining
        else:
            del self._subscribers[session_id]

    async def send_to_session(self, session_id: str, data: dict[str, Any]):
        """Send one event to every subscriber of a session.

        Values JSON cannot encode (node outputs, exceptions) are sent as their
        ``str()``. A socket that fails to receive is unsubscribed; the others
        still get the event.
        """
        sockets = tuple(self._subscribers.get(session_id, ()))
        if not sockets:
            return
        message = json.dumps(data, default=str)
        for ws in sockets:
            try:
                await ws.send_text(message)
            except Exception as e:
                logger.debug(
                    "Session %s: dropping subscriber after failed %s send: %s",
                    session_id, data.get("type"), e,
                )
                self.disconnect(session_id, ws)


manager = ConnectionManager()
