"""Health check + meta endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from app.config import settings
from app.models.responses import HealthResponse, StatsResponse
from app.session.store import SessionStore, get_session_store

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(
        status="ok",
        version="0.1.0",
        llm_configured=bool(settings.anthropic_api_key),
    )


@router.get("/stats", response_model=StatsResponse)
async def stats(store: SessionStore = Depends(get_session_store)) -> StatsResponse:
    return StatsResponse(
        active_sessions=len(store),
        offline_sessions=store.offline_count(),
        turns_handled=store.turns_handled,
        drawings_executed=store.drawings_executed,
    )


@router.get("/prompts")
async def prompts() -> dict[str, str]:
    from app.llm.prompts import get_all_templates

    return get_all_templates()
