"""Chat intent classification and pending-offer tracking."""

from app.intent.classifier import (
    classify_message,
    detect_erase_intent,
    is_affirmative_response,
    is_analysis_only_query,
    is_negative_response,
    should_trigger_draw_from_message,
    should_use_vision,
)
from app.intent.offers import (
    PendingOffer,
    analyze_ai_message_for_draw_offers,
    build_draw_prompt_from_offer,
    extract_canvas_subject,
)

__all__ = [
    "classify_message",
    "detect_erase_intent",
    "is_affirmative_response",
    "is_analysis_only_query",
    "is_negative_response",
    "should_trigger_draw_from_message",
    "should_use_vision",
    "PendingOffer",
    "analyze_ai_message_for_draw_offers",
    "build_draw_prompt_from_offer",
    "extract_canvas_subject",
]
