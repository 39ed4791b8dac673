"""Drawing-command interpreter — turns a DrawingPlan into bounded canvas paint.

Every command goes through the same steps: resolve coordinates (any
convention the model used), optionally snap toward nearby ink, clamp to the
canvas, paint. Bad commands are logged and skipped; a plan never fails as a
whole.
"""

from __future__ import annotations

import asyncio
import logging
import math
import re
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from app.canvas.history import SnapshotHistory
from app.canvas.surface import CanvasSurface
from app.engine.coordinates import CoordinateResolver, to_number
from app.engine.snap import snap_point_to_existing_content
from app.models.drawing import (
    COMMAND_TYPES,
    DEFAULT_COLOR,
    DEFAULT_STROKE_WIDTH,
    CircleCommand,
    DrawingPlan,
    LineCommand,
    PathCommand,
    RectCommand,
    TextCommand,
    command_tag,
)

logger = logging.getLogger(__name__)

DEFAULT_PACING_S = 0.3
CLOSING_MESSAGE = "Done! What do you think? Want to add to it?"
CANCELLED_MESSAGE = "Okay, I stopped drawing. Let me know if you want me to continue."

# Fills covering more than this share of the canvas would bury the user's work
LARGE_FILL_FRACTION = 0.6

_TEXT_HINTS = (
    "write", "text", "label", "word", "words", "caption", "annotate",
    "spell", "equation", "solution", "answer", "formula",
)
_MATH_CHARS_RE = re.compile(r"[0-9=+\-*/^]|[∫Σπ∞√≈≠≤≥]")
_CANNED_ACK_RE = re.compile(r"(yes|ok|okay|done|sure|hi|hello|thanks|thank you)", re.IGNORECASE)
_ALPHA_ONLY_RE = re.compile(r"[a-z\s]+", re.IGNORECASE)


@dataclass
class ExecutionResult:
    messages: list[str] = field(default_factory=list)
    executed: int = 0
    skipped: int = 0
    cancelled: bool = False
    # Paint operations issued by this run, in order
    operations: list[dict[str, Any]] = field(default_factory=list)

    @property
    def drew(self) -> bool:
        return self.executed > 0


# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------

def should_skip_large_fill_rect(width: float, height: float, canvas_width: float, canvas_height: float) -> bool:
    """Veto the fill (not the outline) of shapes covering >60% of the canvas."""
    if width <= 0 or height <= 0:
        return False
    area = min(canvas_width, abs(width)) * min(canvas_height, abs(height))
    return area > canvas_width * canvas_height * LARGE_FILL_FRACTION


def should_allow_text_command(cmd: TextCommand, original_prompt: str = "", description: str = "") -> bool:
    """Keep the model from littering the canvas with stray captions."""
    if cmd.force_text:
        return True

    text = _text(cmd.text).strip()
    if not text:
        return False

    lower_prompt = original_prompt.lower()
    lower_description = (description or "").lower()
    if any(hint in lower_prompt or hint in lower_description for hint in _TEXT_HINTS):
        return True

    if _MATH_CHARS_RE.search(text):
        return True

    if _CANNED_ACK_RE.fullmatch(text):
        return False

    if len(text.split()) <= 3 and _ALPHA_ONLY_RE.fullmatch(text):
        return False

    return True


def _should_snap(cmd: PathCommand | CircleCommand | RectCommand) -> bool:
    # Filled shapes snap unless told not to; outlines only when asked
    if cmd.snap_to_existing is False:
        return False
    return cmd.snap_to_existing is True or bool(cmd.fill)


def _stroke_width(value: Any) -> float:
    width = to_number(value)
    if not math.isfinite(width) or width <= 0:
        return DEFAULT_STROKE_WIDTH
    return width


def _color(value: Any) -> str:
    return value.strip() if isinstance(value, str) and value.strip() else DEFAULT_COLOR


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _or_default(value: Any, default: Any) -> Any:
    return value if value not in (None, "", 0) else default


def _point_xy(point: Any) -> tuple[Any, Any]:
    if isinstance(point, dict):
        return point.get("x"), point.get("y")
    if isinstance(point, (list, tuple)):
        x = point[0] if len(point) > 0 else None
        y = point[1] if len(point) > 1 else None
        return x, y
    return None, None


# ---------------------------------------------------------------------------
# Interpreter
# ---------------------------------------------------------------------------

class DrawingInterpreter:
    """Executes drawing plans against one canvas."""

    def __init__(
        self,
        canvas: CanvasSurface,
        history: SnapshotHistory | None = None,
        pacing_s: float = DEFAULT_PACING_S,
    ) -> None:
        self.canvas = canvas
        self.history = history
        self.pacing_s = pacing_s

    @property
    def resolver(self) -> CoordinateResolver:
        # The canvas may be resized by a client upload between plans
        return CoordinateResolver(self.canvas.width, self.canvas.height)

    async def execute(
        self,
        plan: DrawingPlan,
        original_prompt: str = "",
        *,
        cancel_event: asyncio.Event | None = None,
        closing_message: str | None = CLOSING_MESSAGE,
    ) -> ExecutionResult:
        result = ExecutionResult()
        if not plan.commands:
            logger.warning("No drawing commands to execute")
            if plan.description:
                result.messages.append(plan.description)
            return result

        if plan.description:
            result.messages.append(f"✏️ {plan.description}")

        commands = self._filter_commands(plan, original_prompt)
        result.skipped = len(plan.commands) - len(commands)
        if not commands:
            logger.warning("All drawing commands were filtered out; nothing to execute")
            return result

        first_op = self.canvas.mark()
        for raw in commands:
            if await self._pause(cancel_event):
                result.cancelled = True
                break
            if self.run_command(raw, plan.is_relative):
                result.executed += 1
            else:
                result.skipped += 1

        result.operations = self.canvas.operations_since(first_op)
        if self.history is not None:
            self.history.push(self.canvas.image)

        if result.cancelled:
            result.messages.append(CANCELLED_MESSAGE)
        elif closing_message:
            result.messages.append(closing_message)
        logger.info(
            "Drawing plan finished: %d executed, %d skipped%s",
            result.executed, result.skipped, " (cancelled)" if result.cancelled else "",
        )
        return result

    async def _pause(self, cancel_event: asyncio.Event | None) -> bool:
        """Wait out the pacing delay. Returns True when cancellation was requested."""
        if cancel_event is None:
            await asyncio.sleep(self.pacing_s)
            return False
        if cancel_event.is_set():
            return True
        try:
            await asyncio.wait_for(cancel_event.wait(), timeout=self.pacing_s)
        except asyncio.TimeoutError:
            return False
        return True

    def _filter_commands(self, plan: DrawingPlan, original_prompt: str) -> list[Any]:
        kept: list[Any] = []
        for raw in plan.commands:
            if command_tag(raw) == "text":
                try:
                    cmd = TextCommand.model_validate(raw)
                except ValidationError:
                    # Left in so run_command reports it
                    kept.append(raw)
                    continue
                if not should_allow_text_command(cmd, original_prompt, plan.description or ""):
                    logger.info("Skipping AI text command for clarity: %r", cmd.text)
                    continue
            kept.append(raw)
        return kept

    def run_command(self, raw: Any, plan_relative: bool = False) -> bool:
        """Paint one raw command. Returns False when it was skipped."""
        tag = command_tag(raw)
        model = COMMAND_TYPES.get(tag or "")
        if model is None:
            logger.warning("Unknown drawing action: %r", tag)
            return False

        try:
            cmd = model.model_validate(raw)
        except ValidationError as e:
            logger.warning("Invalid %s command skipped: %s", tag, e)
            return False

        is_relative = plan_relative or bool(cmd.relative) or cmd.coordinate_system == "relative"
        try:
            return getattr(self, f"_draw_{tag}")(cmd, is_relative)
        except Exception as e:
            logger.warning("Error executing drawing command %s: %s", tag, e)
            return False

    # ------------------------------------------------------------------
    # Per-shape routines
    # ------------------------------------------------------------------

    def _draw_path(self, cmd: PathCommand, is_relative: bool) -> bool:
        if len(cmd.points) < 2:
            logger.debug("Path with fewer than 2 points skipped")
            return False

        resolver = self.resolver
        points = [
            (resolver.resolve(x, "x", is_relative), resolver.resolve(y, "y", is_relative))
            for x, y in (_point_xy(p) for p in cmd.points)
        ]
        xs = [p[0] for p in points]
        ys = [p[1] for p in points]
        span_w = max(xs) - min(xs)
        span_h = max(ys) - min(ys)

        if _should_snap(cmd):
            side = max(span_w, span_h)
            cx = sum(xs) / len(xs)
            cy = sum(ys) / len(ys)
            snapped = snap_point_to_existing_content(
                self.canvas.pixels(), cx, cy, side,
                min_samples=cmd.min_samples or 20,
                max_shift=cmd.max_shift or max(side * 1.25, 50),
            )
            if snapped:
                shift_x, shift_y = snapped.x - cx, snapped.y - cy
                points = [(x + shift_x, y + shift_y) for x, y in points]

        color = _color(cmd.color)
        filled = (
            bool(cmd.fill)
            and len(points) > 2
            and not should_skip_large_fill_rect(span_w, span_h, self.canvas.width, self.canvas.height)
        )
        if filled:
            self.canvas.fill_path(points, color)
        self.canvas.stroke_path(points, color, _stroke_width(cmd.width), closed=filled)
        return True

    def _draw_circle(self, cmd: CircleCommand, is_relative: bool) -> bool:
        resolver = self.resolver
        width, height = self.canvas.width, self.canvas.height
        radius = resolver.length(_or_default(cmd.radius, 30), min(width, height))
        cx = resolver.resolve(cmd.x, "x", is_relative)
        cy = resolver.resolve(cmd.y, "y", is_relative)

        if _should_snap(cmd):
            snapped = snap_point_to_existing_content(
                self.canvas.pixels(), cx, cy, radius,
                min_samples=cmd.min_samples or 30,
                max_shift=cmd.max_shift or max(radius * 1.5, 60),
            )
            if snapped:
                cx, cy = snapped.x, snapped.y

        # Keep the whole circle on the canvas
        cx = min(max(radius, cx), width - radius)
        cy = min(max(radius, cy), height - radius)

        self.canvas.arc(cx, cy, radius, _color(cmd.color), _stroke_width(cmd.width), fill=bool(cmd.fill))
        return True

    def _draw_rect(self, cmd: RectCommand, is_relative: bool) -> bool:
        resolver = self.resolver
        width, height = self.canvas.width, self.canvas.height
        w = resolver.length(_or_default(cmd.width, 50), width)
        h = resolver.length(_or_default(cmd.height, 50), height)
        x = resolver.resolve(cmd.x, "x", is_relative)
        y = resolver.resolve(cmd.y, "y", is_relative)

        if _should_snap(cmd):
            snapped = snap_point_to_existing_content(
                self.canvas.pixels(), x + w / 2, y + h / 2, max(w, h),
                min_samples=cmd.min_samples or 30,
                max_shift=cmd.max_shift or max(max(w, h) * 1.2, 60),
            )
            if snapped:
                x, y = snapped.x - w / 2, snapped.y - h / 2

        x = 0.0 if w >= width else min(max(0.0, x), width - w)
        y = 0.0 if h >= height else min(max(0.0, y), height - h)

        color = _color(cmd.color)
        if cmd.fill and not should_skip_large_fill_rect(w, h, width, height):
            self.canvas.fill_rect(x, y, w, h, color)
        self.canvas.stroke_rect(x, y, w, h, color, _stroke_width(cmd.line_width))
        return True

    def _draw_text(self, cmd: TextCommand, is_relative: bool) -> bool:
        resolver = self.resolver
        width, height = self.canvas.width, self.canvas.height
        raw_size = to_number(cmd.size)
        if not math.isfinite(raw_size) or raw_size == 0:
            raw_size = 20.0
        font_size = min(max(10.0, raw_size), min(width, height) * 0.25)

        x = resolver.resolve(cmd.x, "x", is_relative)
        y = resolver.resolve(cmd.y, "y", is_relative)

        if cmd.snap_to_existing:
            snapped = snap_point_to_existing_content(
                self.canvas.pixels(), x, y, font_size * 1.2,
                min_samples=cmd.min_samples or 15,
                max_shift=cmd.max_shift or max(font_size * 2, 40),
            )
            if snapped:
                x, y = snapped.x, snapped.y

        self.canvas.fill_text(
            _text(cmd.text),
            resolver.clamp(x, "x"),
            resolver.clamp(y, "y"),
            _color(cmd.color),
            font_size,
            font=cmd.font if isinstance(cmd.font, str) else "Arial",
            align=cmd.align if isinstance(cmd.align, str) else "center",
            baseline=cmd.baseline if isinstance(cmd.baseline, str) else "middle",
        )
        return True

    def _draw_line(self, cmd: LineCommand, is_relative: bool) -> bool:
        resolver = self.resolver
        sx = resolver.resolve(cmd.x1, "x", is_relative)
        sy = resolver.resolve(cmd.y1, "y", is_relative)
        ex = resolver.resolve(cmd.x2, "x", is_relative)
        ey = resolver.resolve(cmd.y2, "y", is_relative)

        if cmd.snap_to_existing:
            length = math.hypot(ex - sx, ey - sy)
            mx, my = (sx + ex) / 2, (sy + ey) / 2
            snapped = snap_point_to_existing_content(
                self.canvas.pixels(), mx, my, length / 2,
                min_samples=cmd.min_samples or 15,
                max_shift=cmd.max_shift or max(length * 0.9, 40),
            )
            if snapped:
                shift_x, shift_y = snapped.x - mx, snapped.y - my
                sx, ex = sx + shift_x, ex + shift_x
                sy, ey = sy + shift_y, ey + shift_y

        start = (resolver.clamp(sx, "x"), resolver.clamp(sy, "y"))
        end = (resolver.clamp(ex, "x"), resolver.clamp(ey, "y"))
        self.canvas.stroke_path([start, end], _color(cmd.color), _stroke_width(cmd.width))
        return True
