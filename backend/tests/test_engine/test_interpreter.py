"""Tests for the drawing-command interpreter (no pacing, no LLM)."""

from __future__ import annotations

import asyncio
import math

import numpy as np
import pytest

from app.canvas.history import SnapshotHistory
from app.canvas.surface import CanvasSurface
from app.engine.interpreter import (
    CANCELLED_MESSAGE,
    CLOSING_MESSAGE,
    DrawingInterpreter,
    should_allow_text_command,
    should_skip_large_fill_rect,
)
from app.models.drawing import DrawingPlan, TextCommand


def _run(interpreter: DrawingInterpreter, plan: DrawingPlan, prompt: str = "", **kwargs):
    return asyncio.run(interpreter.execute(plan, prompt, **kwargs))


def _ops(result) -> list[str]:
    return [op["op"] for op in result.operations]


# ── Filters ──


def test_large_fill_threshold():
    # 800x600 canvas: 61% area is vetoed, 59% is allowed
    assert should_skip_large_fill_rect(800, 366, 800, 600)
    assert not should_skip_large_fill_rect(800, 354, 800, 600)


def test_large_fill_ignores_degenerate_sizes():
    assert not should_skip_large_fill_rect(0, 600, 800, 600)
    assert not should_skip_large_fill_rect(-10, 600, 800, 600)


def test_large_fill_caps_oversized_dimensions():
    assert should_skip_large_fill_rect(5000, 5000, 800, 600)


def test_text_math_allowed():
    assert should_allow_text_command(TextCommand(text="5+5="), "add something", "")


def test_text_short_word_rejected():
    assert not should_allow_text_command(TextCommand(text="hello"), "draw a cat", "")


def test_text_canned_ack_rejected():
    assert not should_allow_text_command(TextCommand(text="Done"), "draw a tree", "a tree")


def test_text_allowed_when_prompt_asks_for_words():
    assert should_allow_text_command(TextCommand(text="hello"), "write hello on it", "")
    assert should_allow_text_command(TextCommand(text="Cat"), "", "A cat with a label")


def test_text_force_flag_wins():
    assert should_allow_text_command(TextCommand(text="hello", forceText=True), "draw a cat", "")
    assert should_allow_text_command(TextCommand(text="", forceText=True), "draw a cat", "")


def test_text_empty_rejected():
    assert not should_allow_text_command(TextCommand(text="   "), "write something", "")


def test_text_long_sentence_allowed():
    assert should_allow_text_command(TextCommand(text="this is a happy little tree"), "draw a tree", "")


# ── Execution ──


def test_empty_plan_emits_description_only(canvas):
    result = _run(DrawingInterpreter(canvas, pacing_s=0), DrawingPlan(description="I can't draw that", commands=[]))
    assert result.messages == ["I can't draw that"]
    assert result.executed == 0
    assert not canvas.operations


def test_plan_executes_and_closes(canvas):
    plan = DrawingPlan(
        description="A red ball",
        commands=[{"action": "circle", "x": 400, "y": 300, "radius": 40, "color": "#FF0000", "fill": True}],
    )
    result = _run(DrawingInterpreter(canvas, pacing_s=0), plan)
    assert result.messages == ["✏️ A red ball", CLOSING_MESSAGE]
    assert result.executed == 1
    assert result.drew
    assert _ops(result) == ["arc"]
    assert tuple(canvas.pixels()[300, 400][:3]) == (255, 0, 0)


def test_unknown_and_invalid_commands_skipped(canvas):
    plan = DrawingPlan(commands=[
        {"action": "spiral", "x": 1},
        {"action": "path", "points": "not a list"},
        "garbage",
        {"type": "line", "x1": 10, "y1": 10, "x2": 100, "y2": 100},
    ])
    result = _run(DrawingInterpreter(canvas, pacing_s=0), plan)
    assert result.executed == 1
    assert result.skipped == 3
    assert _ops(result) == ["stroke_path"]


def test_path_with_single_point_skipped(canvas):
    plan = DrawingPlan(commands=[{"action": "path", "points": [[10, 10]]}])
    result = _run(DrawingInterpreter(canvas, pacing_s=0), plan)
    assert result.executed == 0
    assert result.skipped == 1


def test_all_text_filtered_returns_early(canvas):
    history = SnapshotHistory()
    plan = DrawingPlan(description="Greeting", commands=[{"action": "text", "text": "hello", "x": 10, "y": 10}])
    result = _run(DrawingInterpreter(canvas, history, pacing_s=0), plan, "draw a cat")
    assert result.messages == ["✏️ Greeting"]
    assert result.skipped == 1
    assert len(history) == 0


def test_large_rect_fill_vetoed_outline_kept(canvas):
    plan = DrawingPlan(commands=[
        {"action": "rect", "x": 0, "y": 0, "width": 800, "height": 600, "color": "#00FF00", "fill": True},
    ])
    result = _run(DrawingInterpreter(canvas, pacing_s=0), plan)
    assert _ops(result) == ["stroke_rect"]
    # Interior stays white
    assert tuple(canvas.pixels()[300, 400][:3]) == (255, 255, 255)


def test_rect_width_is_geometry_not_stroke(canvas):
    plan = DrawingPlan(commands=[
        {"action": "rect", "x": 100, "y": 100, "width": 120, "height": 60, "lineWidth": 5, "snapToExisting": False},
    ])
    result = _run(DrawingInterpreter(canvas, pacing_s=0), plan)
    op = result.operations[0]
    assert op["w"] == 120
    assert op["h"] == 60
    assert op["width"] == 5


def test_rect_larger_than_canvas_pinned_to_origin(canvas):
    plan = DrawingPlan(commands=[{"action": "rect", "x": 300, "y": 200, "width": 800, "height": 100}])
    result = _run(DrawingInterpreter(canvas, pacing_s=0), plan)
    op = result.operations[0]
    assert op["x"] == 0
    assert op["y"] == 200


def test_circle_kept_on_canvas(canvas):
    plan = DrawingPlan(commands=[{"action": "circle", "x": 5, "y": 595, "radius": 50}])
    result = _run(DrawingInterpreter(canvas, pacing_s=0), plan)
    op = result.operations[0]
    assert op["cx"] == 50
    assert op["cy"] == 550


def test_relative_plan_offsets_from_center(canvas):
    plan = DrawingPlan(
        coordinateSystem="relative",
        commands=[{"action": "circle", "x": 100, "y": -50, "radius": 10}],
    )
    result = _run(DrawingInterpreter(canvas, pacing_s=0), plan)
    op = result.operations[0]
    assert op["cx"] == 500
    assert op["cy"] == 250


def test_percentage_line_endpoints(canvas):
    plan = DrawingPlan(commands=[{"action": "line", "x1": "0%", "y1": "50%", "x2": "100%", "y2": "50%"}])
    result = _run(DrawingInterpreter(canvas, pacing_s=0), plan)
    assert result.operations[0]["points"] == [(0.0, 300.0), (800.0, 300.0)]


def test_filled_circle_snaps_toward_ink(canvas):
    canvas.fill_rect(420, 280, 40, 40, "#000000")
    plan = DrawingPlan(commands=[{"action": "circle", "x": 400, "y": 300, "radius": 20, "fill": True, "color": "#FF0000"}])
    result = _run(DrawingInterpreter(canvas, pacing_s=0), plan)
    arc = next(op for op in result.operations if op["op"] == "arc")
    assert arc["cx"] > 400


def test_snap_disabled_keeps_position(canvas):
    canvas.fill_rect(420, 280, 40, 40, "#000000")
    plan = DrawingPlan(commands=[
        {"action": "circle", "x": 400, "y": 300, "radius": 20, "fill": True, "snapToExisting": False},
    ])
    result = _run(DrawingInterpreter(canvas, pacing_s=0), plan)
    arc = next(op for op in result.operations if op["op"] == "arc")
    assert arc["cx"] == 400


def _ink_block(canvas: CanvasSurface) -> None:
    canvas.fill_rect(400, 300, 40, 40, "#000000")


def _square_at(x, y, **extra) -> dict:
    return {"action": "rect", "x": x, "y": y, "width": 40, "height": 40, "fill": True, **extra}


def test_filled_rect_snaps_toward_ink(canvas):
    _ink_block(canvas)
    result = _run(DrawingInterpreter(canvas, pacing_s=0), DrawingPlan(commands=[_square_at(380, 280)]))
    rect = next(op for op in result.operations if op["op"] == "fill_rect")
    assert 380 < rect["x"] < 420
    assert 280 < rect["y"] < 320


def test_rect_snap_respects_max_shift(canvas):
    _ink_block(canvas)
    plan = DrawingPlan(commands=[_square_at(380, 280, maxShift=5)])
    rect = _run(DrawingInterpreter(canvas, pacing_s=0), plan).operations[0]
    assert math.hypot(rect["x"] - 380, rect["y"] - 280) == pytest.approx(5)


def test_rect_snap_needs_min_samples(canvas):
    _ink_block(canvas)
    plan = DrawingPlan(commands=[_square_at(380, 280, minSamples=10_000)])
    rect = _run(DrawingInterpreter(canvas, pacing_s=0), plan).operations[0]
    assert (rect["x"], rect["y"]) == (380, 280)


def test_filled_path_snaps_toward_ink(canvas):
    _ink_block(canvas)
    plan = DrawingPlan(commands=[
        {"action": "path", "points": [[380, 280], [420, 280], [400, 320]], "fill": True},
    ])
    result = _run(DrawingInterpreter(canvas, pacing_s=0), plan)
    polygon = next(op for op in result.operations if op["op"] == "fill_path")
    first_x, first_y = polygon["points"][0]
    assert first_x > 380
    assert first_y > 280


def test_outline_path_does_not_snap(canvas):
    _ink_block(canvas)
    plan = DrawingPlan(commands=[{"action": "path", "points": [[380, 280], [420, 280]]}])
    result = _run(DrawingInterpreter(canvas, pacing_s=0), plan)
    assert result.operations[0]["points"][0] == (380.0, 280.0)


def test_text_size_clamped(canvas):
    plan = DrawingPlan(commands=[{"action": "text", "text": "x = 5", "x": 100, "y": 100, "size": 500}])
    result = _run(DrawingInterpreter(canvas, pacing_s=0), plan)
    assert result.operations[0]["size"] == 150


def test_loose_field_values_still_paint(canvas):
    plan = DrawingPlan(commands=[
        {"action": "circle", "x": 100, "y": 100, "radius": 20, "fill": "#ff0000", "color": "#ff0000"},
        {"action": "text", "text": 42, "x": 300, "y": 300, "forceText": True, "align": 7},
        {"action": "line", "x1": 10, "y1": 500, "x2": 200, "y2": 500, "color": 12},
    ])
    result = _run(DrawingInterpreter(canvas, pacing_s=0), plan)
    assert result.executed == 3
    assert result.skipped == 0

    arc = next(op for op in result.operations if op["op"] == "arc")
    assert arc["fill"] is True
    text = next(op for op in result.operations if op["op"] == "fill_text")
    assert text["text"] == "42"
    assert text["align"] == "center"
    line = next(op for op in result.operations if op["op"] == "stroke_path")
    assert line["color"] == "#000000"


def test_history_pushed_after_run(canvas):
    history = SnapshotHistory()
    history.push(canvas.image)
    plan = DrawingPlan(commands=[{"action": "circle", "x": 100, "y": 100, "radius": 10, "fill": True}])
    _run(DrawingInterpreter(canvas, history, pacing_s=0), plan)
    assert len(history) == 2
    assert history.can_undo


def test_cancel_stops_before_next_command(canvas):
    event = asyncio.Event()
    event.set()
    plan = DrawingPlan(commands=[{"action": "circle", "x": 100, "y": 100, "radius": 10}])
    result = _run(DrawingInterpreter(canvas, pacing_s=0), plan, cancel_event=event)
    assert result.cancelled
    assert result.executed == 0
    assert result.messages[-1] == CANCELLED_MESSAGE


def test_cancel_during_pacing_skips_pending_command(canvas):
    plan = DrawingPlan(commands=[
        {"action": "circle", "x": 100 + 100 * i, "y": 100, "radius": 10} for i in range(3)
    ])
    interpreter = DrawingInterpreter(canvas, pacing_s=0.2)

    async def run_and_cancel():
        event = asyncio.Event()
        task = asyncio.create_task(interpreter.execute(plan, cancel_event=event))
        await asyncio.sleep(0.05)
        event.set()
        return await task

    result = asyncio.run(run_and_cancel())
    assert result.cancelled
    assert result.executed == 0
    assert not canvas.operations
    assert result.messages == [CANCELLED_MESSAGE]


def test_cancel_after_first_command(canvas):
    plan = DrawingPlan(commands=[
        {"action": "circle", "x": 100 + 100 * i, "y": 100, "radius": 10} for i in range(3)
    ])
    interpreter = DrawingInterpreter(canvas, pacing_s=0.2)

    async def run_and_cancel():
        event = asyncio.Event()
        task = asyncio.create_task(interpreter.execute(plan, cancel_event=event))
        await asyncio.sleep(0.3)
        event.set()
        return await task

    result = asyncio.run(run_and_cancel())
    assert result.cancelled
    assert result.executed == 1


def test_custom_closing_message(canvas):
    plan = DrawingPlan(commands=[{"action": "circle", "x": 100, "y": 100, "radius": 10}])
    result = _run(DrawingInterpreter(canvas, pacing_s=0), plan, closing_message=None)
    assert result.messages == []
    assert np.any(canvas.pixels()[..., :3] < 250)
