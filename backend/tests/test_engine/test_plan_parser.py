"""Tests for parsing model output into drawing plans."""

from __future__ import annotations

from app.engine.plan_parser import extract_json_object, parse_drawing_plan


def test_direct_json():
    plan = parse_drawing_plan('{"description": "A sun", "commands": [{"action": "circle", "x": 10, "y": 10}]}')
    assert plan.description == "A sun"
    assert len(plan.commands) == 1


def test_json_in_markdown_fence():
    text = 'Here you go:\n```json\n{"description": "Tree", "commands": []}\n```\nEnjoy!'
    plan = parse_drawing_plan(text)
    assert plan.description == "Tree"
    assert plan.commands == []


def test_json_wrapped_in_prose():
    text = 'Sure! {"description": "Cloud", "commands": [], "coordinateSystem": "relative"} Have fun.'
    plan = parse_drawing_plan(text)
    assert plan.description == "Cloud"
    assert plan.is_relative


def test_first_balanced_object_wins():
    text = '{"description": "first", "commands": []} and later {"description": "second"}'
    assert extract_json_object(text) == '{"description": "first", "commands": []}'


def test_braces_inside_strings_ignored():
    text = '{"description": "a } tricky { one", "commands": []}'
    assert parse_drawing_plan(text).description == "a } tricky { one"


def test_malformed_plan_falls_back_to_description():
    text = "I drew a {lovely sun for you"
    plan = parse_drawing_plan(text)
    assert plan.description == text
    assert plan.commands == []


def test_invalid_json_falls_back():
    text = "{description: no quotes}"
    plan = parse_drawing_plan(text)
    assert plan.description == text
    assert plan.commands == []


def test_no_json_at_all():
    plan = parse_drawing_plan("I'd rather not draw that.")
    assert plan.description == "I'd rather not draw that."
    assert plan.commands == []


def test_wrong_shape_falls_back():
    text = '{"commands": "circle"}'
    plan = parse_drawing_plan(text)
    assert plan.description == text
    assert plan.commands == []
