"""WS /ws — real-time relay: canvas snapshots in, assistant replies and drawings out.

Every message is a JSON envelope ``{"type": ..., ...}``. One editor session
per connection, dropped on disconnect.
"""

from __future__ import annotations

import json
import logging
import time
from collections import deque
from typing import Any

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from app.dependencies import get_message_handler
from app.models.requests import SessionSettingsRequest
from app.session.handler import MessageHandler
from app.session.state import EditorState
from app.session.store import SessionStore, get_session_store

logger = logging.getLogger(__name__)

router = APIRouter()

CONNECTED_MESSAGE = "🎨 Connected to Work With Me!"
SNAPSHOT_LIMIT = 5


def _now_ms() -> int:
    return int(time.time() * 1000)


class RelayConnection:
    """Per-connection relay state: the editor session and its recent snapshots."""

    def __init__(self, ws: WebSocket, state: EditorState, handler: MessageHandler, store: SessionStore) -> None:
        self.ws = ws
        self.state = state
        self.handler = handler
        self.store = store
        self.snapshots: deque[dict[str, Any]] = deque(maxlen=SNAPSHOT_LIMIT)

    async def dispatch(self, message: dict[str, Any]) -> None:
        kind = message.get("type")
        route = getattr(self, f"_on_{kind}", None) if isinstance(kind, str) else None
        if route is None:
            await self.ws.send_json({"type": "error", "message": "Unknown message type"})
            return
        await route(message)

    async def _on_canvas_update(self, message: dict[str, Any]) -> None:
        image = message.get("imageData")
        self.snapshots.append({"timestamp": _now_ms(), "data": image})
        if image:
            async with self.state.lock:
                self.state.load_canvas(image)
        await self.ws.send_json({"type": "ack", "message": "Canvas updated"})

    async def _on_analyze_canvas(self, message: dict[str, Any]) -> None:
        turn = await self.handler.analyze(self.state, message.get("userMessage"), message.get("imageData"))
        await self._send_replies(turn.messages)

    async def _on_chat_message(self, message: dict[str, Any]) -> None:
        turn = await self.handler.handle(
            self.state,
            str(message.get("content") or ""),
            message.get("canvasImage"),
            include_canvas=bool(message.get("includeCanvas")),
        )
        self.store.turns_handled += 1
        await self._send_replies(turn.messages)
        if turn.drew:
            self.store.drawings_executed += 1
            await self.ws.send_json({
                "type": "ai_drawing",
                "commands": turn.operations,
                "description": turn.messages[0] if turn.messages else None,
                "fromSession": self.state.session_id,
                "canvas": self.state.canvas.to_data_url(),
                "timestamp": _now_ms(),
            })

    async def _on_request_drawing(self, message: dict[str, Any]) -> None:
        await self.ws.send_json({
            "type": "draw_command",
            "shapes": message.get("shapes") or [],
            "timestamp": _now_ms(),
        })

    async def _on_broadcast_drawing(self, message: dict[str, Any]) -> None:
        # Echoed to the originator only; no fan-out to other sessions
        await self.ws.send_json({
            "type": "ai_drawing",
            "commands": message.get("commands"),
            "description": message.get("description"),
            "fromSession": self.state.session_id,
            "timestamp": _now_ms(),
        })

    async def _on_update_settings(self, message: dict[str, Any]) -> None:
        req = SessionSettingsRequest.model_validate(message)
        self.state.update_settings(req.ai_can_draw, req.ai_enabled, req.reset_offline)
        await self.ws.send_json({
            "type": "settings",
            "aiCanDraw": self.state.ai_can_draw,
            "aiEnabled": self.state.ai_enabled,
            "offline": self.state.offline,
        })

    async def _on_ping(self, message: dict[str, Any]) -> None:
        await self.ws.send_json({"type": "pong"})

    async def _send_replies(self, messages: list[str]) -> None:
        for content in messages:
            await self.ws.send_json({"type": "ai_response", "content": content, "timestamp": _now_ms()})


@router.websocket("/ws")
async def websocket_endpoint(ws: WebSocket) -> None:
    store = get_session_store()
    handler = get_message_handler()
    await ws.accept()

    state = store.create()
    conn = RelayConnection(ws, state, handler, store)
    logger.info("Relay session connected: %s", state.session_id)

    try:
        await ws.send_json({"type": "connected", "sessionId": state.session_id, "message": CONNECTED_MESSAGE})
        while True:
            data = await ws.receive_text()
            try:
                message = json.loads(data)
                if not isinstance(message, dict):
                    raise ValueError("Envelope must be a JSON object")
                await conn.dispatch(message)
            except WebSocketDisconnect:
                raise
            except Exception as e:
                logger.exception("Relay message handling failed for session %s", state.session_id)
                await ws.send_json({"type": "error", "message": f"Sorry, I couldn't handle that message: {e}"})
    except WebSocketDisconnect:
        logger.info("Relay session disconnected: %s", state.session_id)
    finally:
        store.drop(state.session_id)
