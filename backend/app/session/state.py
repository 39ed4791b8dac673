"""Per-session editor state: canvas, undo history, conversation, pending offer."""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from dataclasses import dataclass, field

from app.canvas.history import SnapshotHistory
from app.canvas.stats import compute_canvas_stats
from app.canvas.surface import CanvasSurface
from app.intent.offers import PendingOffer
from app.models.responses import CanvasStats

logger = logging.getLogger(__name__)


@dataclass
class EditorState:
    canvas: CanvasSurface
    history: SnapshotHistory
    session_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    pending_offer: PendingOffer | None = None
    # role/content pairs, oldest first; bounded by ``max_turns``
    conversation: list[dict[str, str]] = field(default_factory=list)
    max_turns: int = 20
    ai_can_draw: bool = True
    # Proactive feedback on/off; chat turns are unaffected
    ai_enabled: bool = True
    transport_failures: int = 0
    offline: bool = False
    last_feedback_coverage: float | None = None
    feedback_count: int = 0
    created_at: float = field(default_factory=time.time)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)
    cancel_event: asyncio.Event = field(default_factory=asyncio.Event, repr=False)

    @classmethod
    def create(cls, width: int, height: int, history_limit: int = 30, max_turns: int = 20) -> EditorState:
        state = cls(canvas=CanvasSurface(width, height), history=SnapshotHistory(history_limit), max_turns=max_turns)
        state.history.push(state.canvas.image)
        return state

    # ------------------------------------------------------------------
    # Canvas
    # ------------------------------------------------------------------

    def load_canvas(self, data_url: str) -> None:
        """Adopt a client snapshot as the current canvas and record it for undo."""
        self.canvas.load_data_url(data_url)
        self.history.push(self.canvas.image)

    def clear_canvas(self) -> None:
        self.canvas.clear()
        self.history.push(self.canvas.image)
        self.pending_offer = None
        logger.info("Session %s: canvas cleared", self.session_id)

    def undo(self) -> bool:
        image = self.history.undo()
        if image is None:
            return False
        self.canvas.replace_image(image)
        return True

    def redo(self) -> bool:
        image = self.history.redo()
        if image is None:
            return False
        self.canvas.replace_image(image)
        return True

    def stats(self) -> CanvasStats:
        return compute_canvas_stats(self.canvas.pixels())

    # ------------------------------------------------------------------
    # Conversation
    # ------------------------------------------------------------------

    def record_turn(self, role: str, content: str) -> None:
        self.conversation.append({"role": role, "content": content})
        overflow = len(self.conversation) - self.max_turns
        if overflow > 0:
            del self.conversation[:overflow]

    # ------------------------------------------------------------------
    # Transport health
    # ------------------------------------------------------------------

    @property
    def uses_model(self) -> bool:
        return not self.offline

    def transport_failed(self, max_failures: int) -> bool:
        """Count a failed model call. Returns True when the session just went offline."""
        self.transport_failures += 1
        if not self.offline and self.transport_failures >= max_failures:
            self.offline = True
            logger.warning(
                "Session %s: %d consecutive transport failures, switching to offline mode",
                self.session_id, self.transport_failures,
            )
            return True
        return False

    def transport_succeeded(self) -> None:
        self.transport_failures = 0

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def update_settings(
        self,
        ai_can_draw: bool | None = None,
        ai_enabled: bool | None = None,
        reset_offline: bool = False,
    ) -> None:
        """Apply the client's toggles. ``None`` leaves a toggle unchanged."""
        if ai_can_draw is not None:
            self.ai_can_draw = ai_can_draw
        if ai_enabled is not None:
            self.ai_enabled = ai_enabled
        if reset_offline:
            self.offline = False
            self.transport_failures = 0
        logger.info(
            "Session %s settings: ai_can_draw=%s ai_enabled=%s offline=%s",
            self.session_id, self.ai_can_draw, self.ai_enabled, self.offline,
        )

    # ------------------------------------------------------------------
    # Drawing cancellation
    # ------------------------------------------------------------------

    def request_cancel(self) -> None:
        self.cancel_event.set()

    def begin_drawing(self) -> asyncio.Event:
        self.cancel_event.clear()
        return self.cancel_event
