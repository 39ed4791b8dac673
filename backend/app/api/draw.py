"""POST /api/draw — execute a drawing plan on a session canvas."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import ValidationError

from app.dependencies import get_message_handler, lookup_session
from app.engine.interpreter import DrawingInterpreter
from app.engine.plan_parser import parse_drawing_plan
from app.models.drawing import DrawingPlan
from app.models.requests import DrawRequest
from app.models.responses import DrawResponse
from app.session.handler import MessageHandler
from app.session.store import SessionStore, get_session_store

router = APIRouter()


@router.post("/draw", response_model=DrawResponse)
async def draw(
    req: DrawRequest,
    store: SessionStore = Depends(get_session_store),
    handler: MessageHandler = Depends(get_message_handler),
) -> DrawResponse:
    """Accepts either a plan object or raw model text containing one."""
    state = lookup_session(req.session_id, store)

    if req.plan is not None:
        try:
            plan = DrawingPlan.model_validate(req.plan)
        except ValidationError as e:
            raise HTTPException(status_code=422, detail=f"Invalid drawing plan: {e}") from e
    elif req.text is not None:
        plan = parse_drawing_plan(req.text)
    else:
        raise HTTPException(status_code=422, detail="Provide either 'plan' or 'text'")

    async with state.lock:
        if req.canvas:
            try:
                state.load_canvas(req.canvas)
            except (ValueError, OSError) as e:
                raise HTTPException(status_code=400, detail=f"Invalid canvas image: {e}") from e
        interpreter = DrawingInterpreter(state.canvas, state.history, pacing_s=handler.pacing_s)
        result = await interpreter.execute(plan, req.prompt, cancel_event=state.begin_drawing())

    if result.drew:
        store.drawings_executed += 1
    return DrawResponse(
        session_id=state.session_id,
        messages=result.messages,
        executed=result.executed,
        skipped=result.skipped,
        cancelled=result.cancelled,
        operations=result.operations,
        canvas=state.canvas.to_data_url(),
    )
