"""Intent classification model — what a single chat message asks for."""

from __future__ import annotations

import enum

from pydantic import BaseModel


class IntentKind(str, enum.Enum):
    ANALYSIS = "analysis"  # "what is on my canvas": vision, never draws
    ERASE = "erase"  # wipe the whole canvas
    DRAW = "draw"  # explicit request to draw / change the canvas
    AFFIRM = "affirm"  # "yes" to a pending offer
    DENY = "deny"  # "no" to a pending offer
    NONE = "none"


class EraseIntent(BaseModel):
    entire_canvas: bool = True


class Classification(BaseModel):
    kind: IntentKind = IntentKind.NONE
    needs_vision: bool = False
    # Independent of ``kind``: "yes draw it" is AFFIRM with explicit_draw=True
    explicit_draw: bool = False
    erase: EraseIntent | None = None
