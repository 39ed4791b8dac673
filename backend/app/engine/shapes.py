"""Canned drawings used when no model is available (demo / offline mode).

Each builder returns a ``DrawingPlan`` in absolute canvas coordinates, so the
canned shapes go through the same interpreter as model-authored plans.
"""

from __future__ import annotations

import math
from typing import Any

from app.models.drawing import DEFAULT_COLOR, DrawingPlan

SHAPES = ("star", "circle", "square", "heart", "triangle", "flower", "smiley")
RANDOM_SHAPES = ("star", "circle", "heart", "flower", "smiley")

# Message keyword → shape, first match wins
_SHAPE_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("star", ("star",)),
    ("circle", ("circle", "round")),
    ("square", ("square", "box")),
    ("heart", ("heart",)),
    ("triangle", ("triangle",)),
    ("flower", ("flower",)),
    ("smiley", ("smiley", "face")),
)

SHAPE_REPLIES = {
    "star": "I drew a star! ⭐ Now it's your turn. Try adding to it or create something new!",
    "circle": "Here's a circle! Try adding details to it or draw around it! 🔵",
    "square": "I drew a square! Maybe turn it into a house or robot? 🏠",
    "heart": "Here's a heart for you! ❤️ Feel free to decorate it!",
    "triangle": "Triangle drawn! 🔺 Great for geometry or creative designs!",
    "flower": "A flower for you! 🌸 Try adding a stem and leaves!",
    "smiley": "Here's a smiley face! 😊 Spread some joy!",
}

MATH_EXAMPLE_REPLY = "See how I solved it step by step? Draw your own equation and I'll help you solve it!"

_TRANSLUCENT = "40"  # ~25% alpha suffix for #rrggbb fills
_OUTLINE = "#333333"


def shape_from_message(lower_message: str) -> str | None:
    for shape, keywords in _SHAPE_KEYWORDS:
        if any(k in lower_message for k in keywords):
            return shape
    return None


def shapes_mentioned(reply: str) -> list[str]:
    """Shapes a chat reply says it will draw ("draw a star", "draw heart", ...)."""
    lower = reply.lower()
    return [s for s in SHAPES if f"draw a {s}" in lower or f"draw {s}" in lower]


# ---------------------------------------------------------------------------
# Command helpers
# ---------------------------------------------------------------------------

def _absolute(cmd: dict[str, Any]) -> dict[str, Any]:
    # Canned geometry is exact; never let it wander toward existing ink
    cmd.setdefault("snapToExisting", False)
    return cmd


def _translucent(color: str) -> str:
    if color.startswith("#") and len(color) == 7:
        return color + _TRANSLUCENT
    return color


def _round(points: list[tuple[float, float]]) -> list[list[float]]:
    return [[round(x, 2), round(y, 2)] for x, y in points]


def _cubic(p0, p1, p2, p3, steps: int = 12) -> list[tuple[float, float]]:
    out = []
    for i in range(1, steps + 1):
        t = i / steps
        mt = 1 - t
        x = mt**3 * p0[0] + 3 * mt**2 * t * p1[0] + 3 * mt * t**2 * p2[0] + t**3 * p3[0]
        y = mt**3 * p0[1] + 3 * mt**2 * t * p1[1] + 3 * mt * t**2 * p2[1] + t**3 * p3[1]
        out.append((x, y))
    return out


# ---------------------------------------------------------------------------
# Shapes
# ---------------------------------------------------------------------------

def _star(cx: float, cy: float, spikes: int = 5, outer: float = 50, inner: float = 25,
          color: str = "#FFD700") -> list[dict[str, Any]]:
    points = []
    rot = math.pi / 2 * 3
    step = math.pi / spikes
    for _ in range(spikes):
        points.append((cx + math.cos(rot) * outer, cy + math.sin(rot) * outer))
        rot += step
        points.append((cx + math.cos(rot) * inner, cy + math.sin(rot) * inner))
        rot += step
    return [_absolute({"action": "path", "points": _round(points), "color": color, "width": 2, "fill": True})]


def _circle(cx: float, cy: float, radius: float, color: str) -> list[dict[str, Any]]:
    return [
        _absolute({"action": "circle", "x": cx, "y": cy, "radius": radius,
                   "color": _translucent(color), "width": 3, "fill": True}),
        _absolute({"action": "circle", "x": cx, "y": cy, "radius": radius, "color": color, "width": 3}),
    ]


def _square(x: float, y: float, size: float, color: str) -> list[dict[str, Any]]:
    return [
        _absolute({"action": "rect", "x": x, "y": y, "width": size, "height": size,
                   "color": _translucent(color), "lineWidth": 3, "fill": True}),
        _absolute({"action": "rect", "x": x, "y": y, "width": size, "height": size,
                   "color": color, "lineWidth": 3}),
    ]


def _heart(cx: float, cy: float, size: float, color: str = "#FF6B9D") -> list[dict[str, Any]]:
    top = size * 0.3
    start = (cx, cy + top)
    points = [start]
    points += _cubic(start, (cx, cy), (cx - size / 2, cy), (cx - size / 2, cy + top))
    points += _cubic(points[-1], (cx - size / 2, cy + (size + top) / 2), (cx, cy + (size + top) / 1.2), (cx, cy + size))
    points += _cubic(points[-1], (cx, cy + (size + top) / 1.2), (cx + size / 2, cy + (size + top) / 2), (cx + size / 2, cy + top))
    points += _cubic(points[-1], (cx + size / 2, cy), (cx, cy), start)
    return [_absolute({"action": "path", "points": _round(points), "color": color, "width": 2, "fill": True})]


def _triangle(cx: float, top_y: float, size: float, color: str) -> list[dict[str, Any]]:
    points = [(cx, top_y), (cx - size / 2, top_y + size), (cx + size / 2, top_y + size)]
    return [
        _absolute({"action": "path", "points": _round(points), "color": _translucent(color), "width": 3, "fill": True}),
        _absolute({"action": "path", "points": _round(points + [points[0]]), "color": color, "width": 3}),
    ]


def _flower(cx: float, cy: float, petal: float = 40, petal_color: str = "#FF69B4",
            center_color: str = "#FFD700") -> list[dict[str, Any]]:
    commands = []
    for i in range(6):
        angle = math.pi * 2 * i / 6
        commands.append(_absolute({
            "action": "circle",
            "x": round(cx + math.cos(angle) * petal * 0.8, 2),
            "y": round(cy + math.sin(angle) * petal * 0.8, 2),
            "radius": petal / 2,
            "color": petal_color,
            "fill": True,
        }))
    commands.append(_absolute({"action": "circle", "x": cx, "y": cy, "radius": petal / 2.5,
                               "color": center_color, "fill": True}))
    return commands


def _smiley(cx: float, cy: float, radius: float = 50, color: str = "#FFD700") -> list[dict[str, Any]]:
    mouth = [
        (cx + math.cos(math.pi * i / 12) * radius / 2, cy + math.sin(math.pi * i / 12) * radius / 2)
        for i in range(13)
    ]
    return [
        _absolute({"action": "circle", "x": cx, "y": cy, "radius": radius, "color": color, "fill": True}),
        _absolute({"action": "circle", "x": cx, "y": cy, "radius": radius, "color": _OUTLINE, "width": 2}),
        _absolute({"action": "circle", "x": cx - radius / 3, "y": cy - radius / 4, "radius": radius / 8,
                   "color": _OUTLINE, "fill": True}),
        _absolute({"action": "circle", "x": cx + radius / 3, "y": cy - radius / 4, "radius": radius / 8,
                   "color": _OUTLINE, "fill": True}),
        _absolute({"action": "path", "points": _round(mouth), "color": _OUTLINE, "width": 3}),
    ]


def canned_shape_plan(shape: str, width: int, height: int, color: str = DEFAULT_COLOR) -> DrawingPlan:
    """Plan for one canned shape centred on a ``width`` x ``height`` canvas."""
    cx, cy = width / 2, height / 2
    if shape == "star":
        commands = _star(cx, cy)
    elif shape == "circle":
        commands = _circle(cx, cy, 60, color)
    elif shape == "square":
        commands = _square(cx - 50, cy - 50, 100, color)
    elif shape == "heart":
        commands = _heart(cx, cy, 60)
    elif shape == "triangle":
        commands = _triangle(cx, cy - 40, 80, color)
    elif shape == "flower":
        commands = _flower(cx, cy)
    elif shape == "smiley":
        commands = _smiley(cx, cy)
    else:
        raise ValueError(f"Unknown canned shape: {shape}")
    return DrawingPlan(commands=commands, coordinate_system="absolute")


def math_example_plan() -> DrawingPlan:
    """Worked "2x + 5 = 15" example with a green check mark."""
    x, y = 100, 100
    text = {"action": "text", "align": "left", "baseline": "alphabetic", "forceText": True}
    return DrawingPlan(
        commands=[
            _absolute({**text, "x": x, "y": y, "text": "Example: 2x + 5 = 15", "size": 24, "color": "#667eea"}),
            _absolute({**text, "x": x + 20, "y": y + 40, "text": "Step 1: 2x = 15 - 5", "size": 18, "color": _OUTLINE}),
            _absolute({**text, "x": x + 20, "y": y + 70, "text": "Step 2: 2x = 10", "size": 18, "color": _OUTLINE}),
            _absolute({**text, "x": x + 20, "y": y + 100, "text": "Step 3: x = 5", "size": 18, "color": _OUTLINE}),
            _absolute({"action": "path", "points": [[x + 200, y + 90], [x + 210, y + 100], [x + 230, y + 70]],
                       "color": "#00FF00", "width": 3}),
        ],
        coordinate_system="absolute",
    )
