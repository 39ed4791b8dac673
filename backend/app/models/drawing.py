"""Drawing plan + drawing command models — the wire format the LLM draws with.

Coordinates and lengths are deliberately loose (``Any``): the model may send a
number, a percentage string such as ``"50%"``, or nothing at all. Resolution to
pixels happens in ``app.engine.coordinates``, never at validation time.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

DEFAULT_COLOR = "#000000"
DEFAULT_STROKE_WIDTH = 3.0


class _DrawCommand(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    action: str
    color: Any = None  # CSS colour string; anything else paints in the default
    # Tri-state: None = decide from the shape (filled shapes snap), True/False = forced
    snap_to_existing: bool | None = Field(default=None, alias="snapToExisting")
    min_samples: float | None = Field(default=None, alias="minSamples")
    max_shift: float | None = Field(default=None, alias="maxShift")
    relative: bool | None = False
    coordinate_system: str | None = Field(default=None, alias="coordinateSystem")


class PathCommand(_DrawCommand):
    action: Literal["path"] = "path"
    points: list[Any] = Field(default_factory=list)  # [x, y] pairs or {"x", "y"} objects
    width: Any = None  # stroke width
    fill: Any = False  # truthy means filled (models also send a colour here)


class CircleCommand(_DrawCommand):
    action: Literal["circle"] = "circle"
    x: Any = None
    y: Any = None
    radius: Any = None
    width: Any = None  # stroke width
    fill: Any = False  # truthy means filled (models also send a colour here)


class RectCommand(_DrawCommand):
    action: Literal["rect"] = "rect"
    x: Any = None  # top-left
    y: Any = None
    width: Any = None  # geometry, not stroke
    height: Any = None
    line_width: Any = Field(
        default=None,
        validation_alias=AliasChoices("lineWidth", "strokeWidth", "stroke_width", "line_width"),
    )
    fill: Any = False  # truthy means filled (models also send a colour here)


class TextCommand(_DrawCommand):
    action: Literal["text"] = "text"
    x: Any = None
    y: Any = None
    text: Any = ""
    size: Any = None
    font: Any = None
    align: Any = None
    baseline: Any = None
    force_text: bool | None = Field(default=False, alias="forceText")


class LineCommand(_DrawCommand):
    action: Literal["line"] = "line"
    x1: Any = None
    y1: Any = None
    x2: Any = None
    y2: Any = None
    width: Any = None  # stroke width


DrawCommand = PathCommand | CircleCommand | RectCommand | TextCommand | LineCommand

COMMAND_TYPES: dict[str, type[_DrawCommand]] = {
    "path": PathCommand,
    "circle": CircleCommand,
    "rect": RectCommand,
    "text": TextCommand,
    "line": LineCommand,
}


def command_tag(raw: Any) -> str | None:
    """Return the command tag (``action``, or ``type`` as a fallback) of a raw command."""
    if not isinstance(raw, dict):
        return None
    tag = raw.get("action", raw.get("type"))
    return tag if isinstance(tag, str) else None


class DrawingPlan(BaseModel):
    """Structured drawing output requested from the LLM."""

    model_config = ConfigDict(populate_by_name=True)

    description: str | None = None
    # Raw command dicts; each is validated individually so one bad command
    # cannot reject the whole plan.
    commands: list[Any] = Field(default_factory=list)
    coordinate_system: str | None = Field(default=None, alias="coordinateSystem")  # "absolute" | "relative"

    @property
    def is_relative(self) -> bool:
        return self.coordinate_system == "relative"
