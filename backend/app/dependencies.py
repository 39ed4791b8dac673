"""FastAPI dependency injection."""

from __future__ import annotations

from fastapi import Depends, HTTPException

from app.config import settings
from app.session.handler import MessageHandler
from app.session.state import EditorState
from app.session.store import SessionNotFound, SessionStore, get_session_store

_handler: MessageHandler | None = None


def get_settings():
    return settings


def get_message_handler() -> MessageHandler:
    global _handler
    if _handler is None:
        _handler = MessageHandler()
    return _handler


def lookup_session(session_id: str, store: SessionStore) -> EditorState:
    try:
        return store.get(session_id)
    except SessionNotFound:
        raise HTTPException(status_code=404, detail=f"Unknown session: {session_id}") from None


def get_session(session_id: str, store: SessionStore = Depends(get_session_store)) -> EditorState:
    """Path-parameter session lookup (``/canvas/{session_id}/...``)."""
    return lookup_session(session_id, store)
