"""Canvas endpoints — undo/redo/clear, stats, upload, cancel, feedback."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from app.dependencies import get_message_handler, get_session
from app.models.requests import CanvasUploadRequest
from app.models.responses import CanvasResponse, CanvasStats, FeedbackResponse
from app.session.handler import MessageHandler
from app.session.state import EditorState

router = APIRouter(prefix="/canvas")


def _canvas_response(state: EditorState) -> CanvasResponse:
    return CanvasResponse(
        session_id=state.session_id,
        canvas=state.canvas.to_data_url(),
        can_undo=state.history.can_undo,
        can_redo=state.history.can_redo,
        stats=state.stats(),
    )


@router.get("/{session_id}", response_model=CanvasResponse)
async def get_canvas(state: EditorState = Depends(get_session)) -> CanvasResponse:
    return _canvas_response(state)


@router.put("/{session_id}", response_model=CanvasResponse)
async def upload_canvas(req: CanvasUploadRequest, state: EditorState = Depends(get_session)) -> CanvasResponse:
    async with state.lock:
        try:
            state.load_canvas(req.canvas)
        except (ValueError, OSError) as e:
            raise HTTPException(status_code=400, detail=f"Invalid canvas image: {e}") from e
    return _canvas_response(state)


@router.post("/{session_id}/undo", response_model=CanvasResponse)
async def undo(state: EditorState = Depends(get_session)) -> CanvasResponse:
    async with state.lock:
        state.undo()
    return _canvas_response(state)


@router.post("/{session_id}/redo", response_model=CanvasResponse)
async def redo(state: EditorState = Depends(get_session)) -> CanvasResponse:
    async with state.lock:
        state.redo()
    return _canvas_response(state)


@router.post("/{session_id}/clear", response_model=CanvasResponse)
async def clear(state: EditorState = Depends(get_session)) -> CanvasResponse:
    async with state.lock:
        state.clear_canvas()
    return _canvas_response(state)


@router.get("/{session_id}/stats", response_model=CanvasStats)
async def stats(state: EditorState = Depends(get_session)) -> CanvasStats:
    return state.stats()


@router.post("/{session_id}/cancel", status_code=202)
async def cancel(state: EditorState = Depends(get_session)) -> dict[str, bool]:
    """Stop an in-flight drawing sequence before its next command. Takes no lock."""
    state.request_cancel()
    return {"cancelled": True}


@router.post("/{session_id}/feedback", response_model=FeedbackResponse)
async def feedback(
    state: EditorState = Depends(get_session),
    handler: MessageHandler = Depends(get_message_handler),
) -> FeedbackResponse:
    turn = await handler.feedback(state)
    return FeedbackResponse(
        session_id=state.session_id,
        message="\n\n".join(turn.messages) or None,
        stats=state.stats(),
    )
