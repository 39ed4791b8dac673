"""Tests for turn handling: intent order, offers, erase, transport failures."""

from __future__ import annotations

import asyncio
import random

from app.intent.offers import PendingOffer
from app.models.intent import IntentKind
from app.session.fallback import EMPTY_CANVAS_REPLY, DRAW_INTRO, HeuristicResponder
from app.session.handler import (
    CONNECTION_TROUBLE,
    DRAW_NOTICE,
    DRAW_TROUBLE,
    ERASE_REPLY,
    VISION_NOTICE,
    MessageHandler,
)
from app.engine.interpreter import CLOSING_MESSAGE
from app.engine.shapes import SHAPE_REPLIES
from tests.conftest import FakeTransport


def _handler(transport=None) -> MessageHandler:
    return MessageHandler(transport=transport, responder=HeuristicResponder(random.Random(7)), pacing_s=0)


def _turn(handler, state, message, **kwargs):
    return asyncio.run(handler.handle(state, message, **kwargs))


# ── Offline / no API key ──


def test_erase_clears_canvas_and_offer(state):
    state.canvas.fill_rect(10, 10, 50, 50, "#000000")
    state.pending_offer = PendingOffer(subject="a sun", ai_message="...")
    turn = _turn(_handler(), state, "clear the canvas")
    assert turn.messages == [ERASE_REPLY]
    assert turn.classification.kind is IntentKind.ERASE
    assert state.pending_offer is None
    assert state.stats().coverage_percent == 0
    assert [op["op"] for op in turn.operations] == ["clear"]


def test_erase_can_be_undone(state):
    state.canvas.fill_rect(10, 10, 50, 50, "#000000")
    state.history.push(state.canvas.image)
    _turn(_handler(), state, "erase everything")
    assert state.undo()
    assert state.stats().coverage_percent > 0


def test_analysis_query_never_draws(state):
    turn = _turn(_handler(), state, "What did I draw?")
    assert turn.messages == [VISION_NOTICE, EMPTY_CANVAS_REPLY]
    assert not turn.drew
    assert turn.operations == []


def test_explicit_draw_uses_canned_shape(state):
    turn = _turn(_handler(), state, "draw a star")
    assert turn.messages == [DRAW_INTRO, SHAPE_REPLIES["star"]]
    assert turn.drew
    assert any(op["op"] == "fill_path" for op in turn.operations)


def test_heuristic_help_reply(state):
    turn = _turn(_handler(), state, "help")
    assert turn.messages[0].startswith("Here's how to use the app")
    assert not turn.drew


def test_empty_message_is_ignored(state):
    turn = _turn(_handler(), state, "   ")
    assert turn.messages == []


# ── With a model ──


def test_offer_round_trip(state):
    transport = FakeTransport(replies=["Would you like me to add a sun to the canvas?", "Great!"])
    handler = _handler(transport)

    first = _turn(handler, state, "I finished my landscape")
    assert first.messages == ["Would you like me to add a sun to the canvas?"]
    assert state.pending_offer is not None
    assert state.pending_offer.subject == "a sun"

    second = _turn(handler, state, "yes")
    assert second.classification.kind is IntentKind.AFFIRM
    assert transport.draw_prompts == ["Please add a sun to the canvas exactly as you described."]
    assert state.pending_offer is None
    assert second.drew
    assert second.messages == ["Great!", DRAW_NOTICE, "✏️ A small sun", CLOSING_MESSAGE]


def test_declined_offer_is_dropped(state):
    transport = FakeTransport(replies=["Want me to add some stars?", "No problem!"])
    handler = _handler(transport)
    _turn(handler, state, "my night sky is done")
    assert state.pending_offer is not None
    _turn(handler, state, "no thanks")
    assert state.pending_offer is None
    assert transport.draw_prompts == []


def test_explicit_draw_requests_plan(state):
    transport = FakeTransport()
    turn = _turn(_handler(transport), state, "draw a sun in the corner")
    assert transport.draw_prompts == ["draw a sun in the corner"]
    assert transport.chat_calls == []
    assert turn.drew


def test_vision_turn_sends_canvas(state):
    transport = FakeTransport(replies=["I see a circle."])
    turn = _turn(_handler(transport), state, "What do you see?")
    assert turn.messages == [VISION_NOTICE, "I see a circle."]
    assert transport.chat_calls == [("What do you see?", True)]
    assert state.conversation[0]["content"] == "What do you see? [canvas image was analyzed]"


def test_include_canvas_forces_vision(state):
    transport = FakeTransport(replies=["Looks nice."])
    _turn(_handler(transport), state, "thoughts?", include_canvas=True)
    assert transport.chat_calls == [("thoughts?", True)]


def test_reply_mentioning_shape_draws_it(state):
    transport = FakeTransport(replies=["Let me draw a heart for you!"])
    turn = _turn(_handler(transport), state, "I feel happy today")
    assert turn.drew
    assert turn.messages == ["Let me draw a heart for you!"]


def test_transport_failures_switch_to_offline(state):
    transport = FakeTransport(fail=True)
    handler = _handler(transport)

    first = _turn(handler, state, "tell me a story")
    assert first.messages == [CONNECTION_TROUBLE]
    assert not state.offline

    second = _turn(handler, state, "tell me another story")
    assert second.offline
    assert state.offline

    third = _turn(handler, state, "tell me one more story")
    assert len(transport.chat_calls) == 2
    assert third.messages
    assert CONNECTION_TROUBLE not in third.messages


def test_success_resets_failure_count(state):
    transport = FakeTransport(replies=["Hi!"])
    state.transport_failures = 1
    _turn(_handler(transport), state, "hello")
    assert state.transport_failures == 0


def test_draw_failure_falls_back_to_canned_shape(state):
    transport = FakeTransport(fail=True)
    turn = _turn(_handler(transport), state, "draw a heart")
    assert turn.messages[:3] == [DRAW_NOTICE, DRAW_TROUBLE, DRAW_INTRO]
    assert turn.drew


def test_conversation_bounded(state):
    transport = FakeTransport()
    handler = _handler(transport)
    for i in range(15):
        _turn(handler, state, f"message number {i}")
    assert len(state.conversation) == state.max_turns


# ── Feedback ──


def test_feedback_skips_blank_canvas(state):
    turn = asyncio.run(_handler().feedback(state))
    assert turn.messages == []
    assert state.feedback_count == 1


def test_feedback_needs_noticeable_change(state):
    handler = _handler()
    state.canvas.fill_rect(0, 0, 100, 100, "#FF0000")
    first = asyncio.run(handler.feedback(state))
    assert len(first.messages) == 1
    second = asyncio.run(handler.feedback(state))
    assert second.messages == []


def test_feedback_paused_when_ai_disabled(state):
    state.canvas.fill_rect(0, 0, 100, 100, "#FF0000")
    state.update_settings(ai_enabled=False)
    turn = asyncio.run(_handler().feedback(state))
    assert turn.messages == []
    assert state.feedback_count == 0


# ── Session toggles ──


def test_drawing_disabled_keeps_canvas_untouched(state):
    state.update_settings(ai_can_draw=False)
    turn = _turn(_handler(), state, "draw a star")
    assert not turn.drew
    assert turn.operations == []
    assert state.stats().coverage_percent == 0


def test_drawing_disabled_with_model_chats_instead(state):
    transport = FakeTransport(replies=["Let me draw a heart for you!"])
    state.update_settings(ai_can_draw=False)
    turn = _turn(_handler(transport), state, "draw a sun")
    assert transport.draw_prompts == []
    assert transport.chat_calls == [("draw a sun", False)]
    assert not turn.drew


def test_reset_offline_retries_model(state):
    transport = FakeTransport(replies=["Back online!"])
    state.offline = True
    state.transport_failures = 2

    offline_turn = _turn(_handler(transport), state, "hello there")
    assert transport.chat_calls == []
    assert offline_turn.offline

    state.update_settings(reset_offline=True)
    assert state.transport_failures == 0
    turn = _turn(_handler(transport), state, "hello again")
    assert turn.messages == ["Back online!"]
    assert not turn.offline
