"""POST /api/chat — one conversational turn; POST /api/classify — intent only."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from app.dependencies import get_message_handler, lookup_session
from app.intent.classifier import classify_message
from app.models.intent import Classification
from app.models.requests import ChatRequest, ClassifyRequest
from app.models.responses import TurnResponse
from app.session.handler import MessageHandler, TurnResult
from app.session.state import EditorState
from app.session.store import SessionStore, get_session_store

router = APIRouter()


def turn_response(state: EditorState, turn: TurnResult) -> TurnResponse:
    return TurnResponse(
        session_id=state.session_id,
        messages=turn.messages,
        classification=turn.classification,
        drew=turn.drew,
        operations=turn.operations,
        offline=turn.offline,
        canvas=state.canvas.to_data_url(),
    )


@router.post("/classify", response_model=Classification)
async def classify(req: ClassifyRequest) -> Classification:
    return classify_message(req.message, has_pending_offer=req.has_pending_offer)


@router.post("/chat", response_model=TurnResponse)
async def chat(
    req: ChatRequest,
    store: SessionStore = Depends(get_session_store),
    handler: MessageHandler = Depends(get_message_handler),
) -> TurnResponse:
    state = lookup_session(req.session_id, store)
    try:
        turn = await handler.handle(state, req.message, req.canvas)
    except (ValueError, OSError) as e:
        raise HTTPException(status_code=400, detail=f"Invalid canvas image: {e}") from e

    store.turns_handled += 1
    if turn.drew:
        store.drawings_executed += 1
    return turn_response(state, turn)
