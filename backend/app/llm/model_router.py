"""Task → model selection. Cheap model for plain chat, vision-capable mid tier for canvas work."""

from __future__ import annotations

from app.config import settings

_TASK_MODEL_MAP = {
    "chat": "cheap",
    "vision": "mid",
    "draw": "mid",
    "feedback": "mid",
}


def get_model_for_task(task: str) -> str:
    tier = _TASK_MODEL_MAP.get(task, "cheap")
    if tier == "mid":
        return settings.model_mid
    return settings.model_cheap
