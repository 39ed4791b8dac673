"""In-process session registry."""

from __future__ import annotations

import logging

from app.config import settings
from app.session.state import EditorState

logger = logging.getLogger(__name__)


class SessionNotFound(KeyError):
    pass


class SessionStore:
    """Maps session ids to editor state. Counters feed ``/api/stats``."""

    def __init__(self) -> None:
        self._sessions: dict[str, EditorState] = {}
        self.turns_handled = 0
        self.drawings_executed = 0

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def create(self, width: int | None = None, height: int | None = None) -> EditorState:
        state = EditorState.create(
            width or settings.canvas_width,
            height or settings.canvas_height,
            history_limit=settings.history_limit,
            max_turns=settings.conversation_turns,
        )
        self._sessions[state.session_id] = state
        logger.info("Session %s created (%dx%d)", state.session_id, state.canvas.width, state.canvas.height)
        return state

    def get(self, session_id: str) -> EditorState:
        try:
            return self._sessions[session_id]
        except KeyError:
            raise SessionNotFound(session_id) from None

    def drop(self, session_id: str) -> bool:
        state = self._sessions.pop(session_id, None)
        if state is None:
            return False
        state.request_cancel()
        logger.info("Session %s dropped", session_id)
        return True

    def offline_count(self) -> int:
        return sum(1 for s in self._sessions.values() if s.offline)


_store: SessionStore | None = None


def get_session_store() -> SessionStore:
    global _store
    if _store is None:
        _store = SessionStore()
    return _store
