"""API response models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from app.models.intent import Classification


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"
    llm_configured: bool = False


class StatsResponse(BaseModel):
    active_sessions: int = 0
    offline_sessions: int = 0
    turns_handled: int = 0
    drawings_executed: int = 0


class CanvasStats(BaseModel):
    coverage_percent: float = Field(default=0.0, description="Share of drawn pixels, 0-100")
    color_count: int = Field(default=0, description="Distinct colour buckets among drawn pixels")


class SessionResponse(BaseModel):
    session_id: str
    width: int
    height: int
    canvas: str = Field(..., description="PNG data URL of the session canvas")


class CanvasResponse(BaseModel):
    session_id: str
    canvas: str
    can_undo: bool = False
    can_redo: bool = False
    stats: CanvasStats = Field(default_factory=CanvasStats)


class DrawResponse(BaseModel):
    session_id: str
    messages: list[str] = Field(default_factory=list)
    executed: int = 0
    skipped: int = 0
    cancelled: bool = False
    operations: list[dict[str, Any]] = Field(default_factory=list)
    canvas: str = ""


class TurnResponse(BaseModel):
    session_id: str
    messages: list[str] = Field(default_factory=list)
    classification: Classification = Field(default_factory=Classification)
    drew: bool = False
    operations: list[dict[str, Any]] = Field(
        default_factory=list,
        description="Paint operations issued this turn, replayable by a thin client",
    )
    offline: bool = False
    canvas: str = ""


class FeedbackResponse(BaseModel):
    session_id: str
    message: str | None = None
    stats: CanvasStats = Field(default_factory=CanvasStats)


class SessionSettingsResponse(BaseModel):
    session_id: str
    ai_can_draw: bool
    ai_enabled: bool
    offline: bool
