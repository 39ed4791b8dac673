"""API request models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class CreateSessionRequest(BaseModel):
    width: int | None = Field(default=None, gt=0, le=4096, description="Canvas width (defaults to settings)")
    height: int | None = Field(default=None, gt=0, le=4096, description="Canvas height (defaults to settings)")
    canvas: str | None = Field(default=None, description="Optional PNG data URL to start from")


class ClassifyRequest(BaseModel):
    message: str = Field(..., description="User chat message")
    has_pending_offer: bool = Field(default=False, description="Whether the assistant has an open draw offer")


class ChatRequest(BaseModel):
    session_id: str = Field(..., description="Session returned by POST /api/sessions")
    message: str = Field(..., description="User chat message")
    canvas: str | None = Field(default=None, description="Latest client canvas as a PNG data URL")


class DrawRequest(BaseModel):
    session_id: str = Field(..., description="Session returned by POST /api/sessions")
    plan: dict[str, Any] | None = Field(default=None, description="Drawing plan object")
    text: str | None = Field(default=None, description="Raw model output containing a drawing plan")
    prompt: str = Field(default="", description="User prompt the plan answers (used by the text filter)")
    canvas: str | None = Field(default=None, description="Latest client canvas as a PNG data URL")


class CanvasUploadRequest(BaseModel):
    canvas: str = Field(..., description="PNG data URL")


class SessionSettingsRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    ai_can_draw: bool | None = Field(default=None, alias="aiCanDraw", description="Let the assistant paint on the canvas")
    ai_enabled: bool | None = Field(default=None, alias="aiEnabled", description="Proactive feedback on/off")
    reset_offline: bool = Field(default=False, alias="resetOffline", description="Retry the model after offline mode")
