"""POST/PATCH/DELETE /api/sessions — editor session lifecycle and toggles."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response

from app.dependencies import get_session
from app.models.requests import CreateSessionRequest, SessionSettingsRequest
from app.models.responses import SessionResponse, SessionSettingsResponse
from app.session.state import EditorState
from app.session.store import SessionStore, get_session_store

router = APIRouter()


@router.post("/sessions", response_model=SessionResponse, status_code=201)
async def create_session(
    req: CreateSessionRequest | None = None,
    store: SessionStore = Depends(get_session_store),
) -> SessionResponse:
    req = req or CreateSessionRequest()
    state = store.create(req.width, req.height)
    if req.canvas:
        try:
            state.load_canvas(req.canvas)
        except (ValueError, OSError) as e:
            store.drop(state.session_id)
            raise HTTPException(status_code=400, detail=f"Invalid canvas image: {e}") from e
    return SessionResponse(
        session_id=state.session_id,
        width=state.canvas.width,
        height=state.canvas.height,
        canvas=state.canvas.to_data_url(),
    )


@router.delete("/sessions/{session_id}", status_code=204)
async def delete_session(session_id: str, store: SessionStore = Depends(get_session_store)) -> Response:
    if not store.drop(session_id):
        raise HTTPException(status_code=404, detail=f"Unknown session: {session_id}")
    return Response(status_code=204)


def settings_response(state: EditorState) -> SessionSettingsResponse:
    return SessionSettingsResponse(
        session_id=state.session_id,
        ai_can_draw=state.ai_can_draw,
        ai_enabled=state.ai_enabled,
        offline=state.offline,
    )


@router.patch("/sessions/{session_id}", response_model=SessionSettingsResponse)
async def update_session(req: SessionSettingsRequest, state: EditorState = Depends(get_session)) -> SessionSettingsResponse:
    """Toggle drawing / proactive feedback, or leave offline mode to retry the model."""
    state.update_settings(req.ai_can_draw, req.ai_enabled, req.reset_offline)
    return settings_response(state)
