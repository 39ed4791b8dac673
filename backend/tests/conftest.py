"""Shared test fixtures."""

from __future__ import annotations

import numpy as np
import pytest

from app import dependencies
from app.canvas.surface import CanvasSurface
from app.config import settings
from app.models.drawing import DrawingPlan
from app.session.state import EditorState


WHITE = (255, 255, 255, 255)
BLACK = (0, 0, 0, 255)


def blank_raster(width: int = 800, height: int = 600) -> np.ndarray:
    raster = np.empty((height, width, 4), dtype=np.uint8)
    raster[...] = WHITE
    return raster


def paint_block(raster: np.ndarray, x0: int, y0: int, x1: int, y1: int, color=BLACK) -> np.ndarray:
    """Fill the half-open pixel box [x0, x1) x [y0, y1)."""
    raster[y0:y1, x0:x1] = color
    return raster


class FakeTransport:
    """Scripted stand-in for the model provider."""

    def __init__(self, replies=None, plan=None, fail=False):
        self.replies = list(replies or [])
        self.plan = plan or DrawingPlan(
            description="A small sun",
            commands=[{"action": "circle", "x": 100, "y": 100, "radius": 20, "color": "#FFD700", "fill": True}],
        )
        self.fail = fail
        self.chat_calls: list[tuple[str, bool]] = []
        self.draw_prompts: list[str] = []

    @property
    def configured(self) -> bool:
        return True

    async def chat(self, history, message, image_data_url=None, **kwargs):
        from app.llm.client import TransportError

        self.chat_calls.append((message, image_data_url is not None))
        if self.fail:
            raise TransportError("provider unavailable")
        return self.replies.pop(0) if self.replies else "Sounds lovely!"

    async def request_drawing_plan(self, prompt, image_data_url=None, **kwargs):
        from app.llm.client import TransportError

        self.draw_prompts.append(prompt)
        if self.fail:
            raise TransportError("provider unavailable")
        return self.plan


@pytest.fixture(autouse=True)
def offline_settings(monkeypatch):
    """No API key and no pacing: tests never reach a model and never sleep."""
    monkeypatch.setattr(settings, "anthropic_api_key", "")
    monkeypatch.setattr(settings, "draw_pacing_ms", 0)
    monkeypatch.setattr(dependencies, "_handler", None)


@pytest.fixture
def canvas() -> CanvasSurface:
    return CanvasSurface(800, 600)


@pytest.fixture
def state() -> EditorState:
    return EditorState.create(400, 300)
