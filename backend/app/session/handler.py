"""One conversational turn, end to end.

``MessageHandler.handle`` runs the intent checks in a fixed order: analysis
questions (never draw), whole-canvas erase, vision need and explicit draw,
pending-offer replies, then either a drawing plan or a chat reply. Model
failures are handled here once; the heuristic responder covers offline mode.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

from app.config import settings
from app.engine.interpreter import CLOSING_MESSAGE, DrawingInterpreter, ExecutionResult
from app.engine.shapes import canned_shape_plan, shapes_mentioned
from app.intent.classifier import classify_message
from app.intent.offers import analyze_ai_message_for_draw_offers, build_draw_prompt_from_offer
from app.llm.client import LLMTransport, TransportError
from app.models.drawing import DrawingPlan
from app.models.intent import Classification, IntentKind
from app.session.fallback import HeuristicResponder, analyze_drawing
from app.session.state import EditorState

logger = logging.getLogger(__name__)

ERASE_REPLY = "I've cleared the canvas so you can start fresh. What would you like to create next?"
VISION_NOTICE = "👁️ Let me take a look at your canvas..."
DRAW_NOTICE = "🎨 Let me draw that for you..."
DRAW_TROUBLE = "⚠️ I had trouble creating that drawing. Let me try a simpler approach..."
CONNECTION_TROUBLE = (
    "⚠️ I'm having trouble connecting to my AI brain. Please check your API key or switch to demo mode."
)
FEEDBACK_TROUBLE = "Hmm, I'm having trouble connecting."

_ANALYZE_PROMPT = "Analyze the current canvas drawing and provide feedback."

_FEEDBACK_PROMPT = (
    "The user just drew something on the canvas. Canvas coverage: {coverage:.2f}%, "
    "Colors used: {colors}. Provide brief, encouraging feedback about their progress."
)
# Below this change in coverage the canvas is considered unchanged for feedback
_FEEDBACK_MIN_DELTA = 2.0
_FEEDBACK_MIN_COVERAGE = 0.5


class Transport(Protocol):
    @property
    def configured(self) -> bool: ...

    async def chat(self, history: list[dict[str, str]], message: str, image_data_url: str | None = None,
                   **kwargs: Any) -> str: ...

    async def request_drawing_plan(self, prompt: str, image_data_url: str | None = None,
                                   **kwargs: Any) -> DrawingPlan: ...


@dataclass
class TurnResult:
    messages: list[str] = field(default_factory=list)
    classification: Classification = field(default_factory=Classification)
    drew: bool = False
    executed: int = 0
    operations: list[dict[str, Any]] = field(default_factory=list)
    offline: bool = False


class MessageHandler:
    def __init__(
        self,
        transport: Transport | None = None,
        responder: HeuristicResponder | None = None,
        pacing_s: float | None = None,
        max_failures: int | None = None,
    ) -> None:
        self.transport = transport or LLMTransport()
        self.responder = responder or HeuristicResponder()
        self.pacing_s = settings.draw_pacing_ms / 1000 if pacing_s is None else pacing_s
        self.max_failures = settings.max_transport_failures if max_failures is None else max_failures

    # ------------------------------------------------------------------
    # Public entry points
    # ------------------------------------------------------------------

    async def handle(
        self,
        state: EditorState,
        message: str,
        canvas_image: str | None = None,
        include_canvas: bool = False,
    ) -> TurnResult:
        """Handle one user message. One turn runs at a time per session.

        ``canvas_image`` (a PNG data URL) replaces the session canvas first.
        ``include_canvas`` forces the model to look at the canvas.
        """
        async with state.lock:
            if canvas_image:
                state.load_canvas(canvas_image)
            first_op = state.canvas.mark()
            turn = await self._handle(state, message.strip(), include_canvas)
            turn.operations = state.canvas.operations_since(first_op)
            turn.offline = state.offline
            return turn

    async def collaborative_draw(self, state: EditorState, prompt: str, turn: TurnResult) -> None:
        """Ask the model for a plan and paint it; canned shapes when the model is out of reach."""
        if not self._model_available(state):
            await self._canned_draw(state, prompt, turn)
            return

        turn.messages.append(DRAW_NOTICE)
        try:
            plan = await self.transport.request_drawing_plan(
                prompt,
                state.canvas.to_data_url(),
                width=state.canvas.width,
                height=state.canvas.height,
            )
        except TransportError as e:
            logger.warning("Session %s: collaborative drawing failed: %s", state.session_id, e)
            self._note_failure(state)
            turn.messages.append(DRAW_TROUBLE)
            await self._canned_draw(state, prompt, turn)
            return

        state.transport_succeeded()
        await self._execute(state, plan, prompt, turn)

    async def analyze(
        self,
        state: EditorState,
        user_message: str | None = None,
        canvas_image: str | None = None,
    ) -> TurnResult:
        """Look at the canvas and describe it. Never draws."""
        async with state.lock:
            if canvas_image:
                state.load_canvas(canvas_image)
            turn = TurnResult(classification=Classification(kind=IntentKind.ANALYSIS, needs_vision=True))
            message = user_message or _ANALYZE_PROMPT

            if self._model_available(state):
                try:
                    reply = await self.transport.chat(
                        state.conversation,
                        message,
                        state.canvas.to_data_url(),
                        width=state.canvas.width,
                        height=state.canvas.height,
                    )
                except TransportError as e:
                    logger.warning("Session %s: canvas analysis failed: %s", state.session_id, e)
                    self._note_failure(state)
                    turn.messages.append(CONNECTION_TROUBLE)
                else:
                    state.transport_succeeded()
                    self._record_exchange(state, message, reply, with_image=True)
                    state.pending_offer = analyze_ai_message_for_draw_offers(reply, state.pending_offer)
                    turn.messages.append(reply)
                    turn.offline = state.offline
                    return turn

            turn.messages.append(analyze_drawing(state.stats()))
            turn.offline = state.offline
            return turn

    async def feedback(self, state: EditorState) -> TurnResult:
        """Unprompted progress feedback, only when enabled and the canvas changed noticeably."""
        async with state.lock:
            first_op = state.canvas.mark()
            turn = TurnResult()
            if not state.ai_enabled:
                return turn
            stats = state.stats()
            coverage = stats.coverage_percent

            if (
                state.feedback_count > 0
                and state.last_feedback_coverage is not None
                and abs(coverage - state.last_feedback_coverage) < _FEEDBACK_MIN_DELTA
            ):
                return turn
            state.last_feedback_coverage = coverage
            state.feedback_count += 1
            if coverage < _FEEDBACK_MIN_COVERAGE:
                return turn

            if self._model_available(state):
                prompt = _FEEDBACK_PROMPT.format(coverage=coverage, colors=stats.color_count)
                try:
                    reply = await self.transport.chat(
                        state.conversation,
                        prompt,
                        state.canvas.to_data_url(),
                        width=state.canvas.width,
                        height=state.canvas.height,
                    )
                except TransportError as e:
                    logger.warning("Session %s: feedback request failed: %s", state.session_id, e)
                    self._note_failure(state)
                    turn.messages.append(FEEDBACK_TROUBLE)
                else:
                    state.transport_succeeded()
                    self._record_exchange(state, prompt, reply, with_image=True)
                    turn.messages.append(reply)
                    await self._draw_mentioned_shapes(state, reply, turn)
                    turn.operations = state.canvas.operations_since(first_op)
                    turn.offline = state.offline
                    return turn

            message = self.responder.feedback(stats, state.feedback_count)
            if message:
                turn.messages.append(message)
            turn.offline = state.offline
            return turn

    # ------------------------------------------------------------------
    # Turn composition
    # ------------------------------------------------------------------

    async def _handle(self, state: EditorState, message: str, include_canvas: bool = False) -> TurnResult:
        if not message:
            return TurnResult()

        classification = classify_message(message, has_pending_offer=state.pending_offer is not None)
        if include_canvas:
            classification.needs_vision = True
        turn = TurnResult(classification=classification)
        logger.debug("Session %s: message classified as %s", state.session_id, classification.kind.value)

        if classification.kind is IntentKind.ERASE:
            state.clear_canvas()
            turn.messages.append(ERASE_REPLY)
            return turn

        analysis_only = classification.kind is IntentKind.ANALYSIS

        auto_draw_prompt = None
        if classification.kind is IntentKind.AFFIRM:
            auto_draw_prompt = build_draw_prompt_from_offer(state.pending_offer)
            state.pending_offer = None
        elif classification.kind is IntentKind.DENY:
            state.pending_offer = None

        explicit_draw = not analysis_only and state.ai_can_draw and classification.explicit_draw

        if classification.needs_vision:
            turn.messages.append(VISION_NOTICE)

        if self._model_available(state):
            await self._with_model(state, message, turn, analysis_only, explicit_draw, auto_draw_prompt)
        else:
            await self._without_model(state, message, turn, analysis_only, explicit_draw, auto_draw_prompt)
        return turn

    async def _with_model(
        self,
        state: EditorState,
        message: str,
        turn: TurnResult,
        analysis_only: bool,
        explicit_draw: bool,
        auto_draw_prompt: str | None,
    ) -> None:
        if explicit_draw:
            await self.collaborative_draw(state, message, turn)
            return

        needs_vision = turn.classification.needs_vision
        stats = state.stats()
        try:
            reply = await self.transport.chat(
                state.conversation,
                message,
                state.canvas.to_data_url() if needs_vision else None,
                width=state.canvas.width,
                height=state.canvas.height,
                canvas_summary=f"Canvas coverage: {stats.coverage_percent:.2f}%, Colors used: {stats.color_count}",
            )
        except TransportError as e:
            logger.warning("Session %s: chat request failed: %s", state.session_id, e)
            self._note_failure(state)
            turn.messages.append(CONNECTION_TROUBLE)
            if not analysis_only and auto_draw_prompt:
                await self.collaborative_draw(state, auto_draw_prompt, turn)
            return

        state.transport_succeeded()
        self._record_exchange(state, message, reply, with_image=needs_vision)
        turn.messages.append(reply)
        state.pending_offer = analyze_ai_message_for_draw_offers(reply, state.pending_offer)

        if analysis_only:
            return

        await self._draw_mentioned_shapes(state, reply, turn)
        if auto_draw_prompt:
            await self.collaborative_draw(state, auto_draw_prompt, turn)

    async def _without_model(
        self,
        state: EditorState,
        message: str,
        turn: TurnResult,
        analysis_only: bool,
        explicit_draw: bool,
        auto_draw_prompt: str | None,
    ) -> None:
        if analysis_only:
            turn.messages.append(analyze_drawing(state.stats()))
            return
        if explicit_draw:
            await self.collaborative_draw(state, message, turn)
            return
        if auto_draw_prompt:
            await self.collaborative_draw(state, auto_draw_prompt, turn)
            return

        reply = self.responder.respond(
            message,
            state.stats(),
            width=state.canvas.width,
            height=state.canvas.height,
            ai_can_draw=state.ai_can_draw,
        )
        turn.messages.extend(reply.messages)
        if reply.plan is not None:
            await self._execute(state, reply.plan, message, turn, closing_message=reply.after_draw)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _model_available(self, state: EditorState) -> bool:
        return state.uses_model and self.transport.configured

    def _note_failure(self, state: EditorState) -> None:
        state.transport_failed(self.max_failures)

    def _record_exchange(self, state: EditorState, message: str, reply: str, with_image: bool) -> None:
        state.record_turn("user", f"{message} [canvas image was analyzed]" if with_image else message)
        state.record_turn("assistant", reply)

    async def _canned_draw(self, state: EditorState, prompt: str, turn: TurnResult) -> None:
        reply = self.responder.canned_draw(prompt, state.canvas.width, state.canvas.height)
        turn.messages.extend(reply.messages)
        if reply.plan is not None:
            await self._execute(state, reply.plan, prompt, turn, closing_message=reply.after_draw)

    async def _draw_mentioned_shapes(self, state: EditorState, reply: str, turn: TurnResult) -> None:
        if not state.ai_can_draw:
            return
        for shape in shapes_mentioned(reply):
            plan = canned_shape_plan(shape, state.canvas.width, state.canvas.height)
            await self._execute(state, plan, reply, turn, closing_message=None)

    async def _execute(
        self,
        state: EditorState,
        plan: DrawingPlan,
        prompt: str,
        turn: TurnResult,
        closing_message: str | None = CLOSING_MESSAGE,
    ) -> ExecutionResult:
        interpreter = DrawingInterpreter(state.canvas, state.history, pacing_s=self.pacing_s)
        result = await interpreter.execute(
            plan, prompt, cancel_event=state.begin_drawing(), closing_message=closing_message,
        )
        turn.messages.extend(result.messages)
        turn.executed += result.executed
        turn.drew = turn.drew or result.drew
        return result
