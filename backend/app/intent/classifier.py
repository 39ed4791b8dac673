"""Intent classification over a single chat message.

Pure keyword / regex heuristics, each rule testable on its own. The
``classify_message`` composition mirrors the order the session handler acts on
them: analysis first (never draws), then erase (short-circuits everything),
then vision need and explicit draw independently, then offer replies.
"""

from __future__ import annotations

import re

from app.models.intent import Classification, EraseIntent, IntentKind

_ANALYSIS_PHRASES = (
    "what have i drawn",
    "what've i drawn",
    "what did i draw",
    "what am i drawing",
    "what's on my canvas",
    "what is on my canvas",
    "what's on the canvas",
    "what is on the canvas",
    "what is on this canvas",
    "what is on my drawing",
    "what have i been drawing",
    "what do you see on my canvas",
    "describe my canvas",
    "describe my drawing",
)

_VISION_KEYWORDS = (
    "what am i drawing",
    "what did i draw",
    "what is this",
    "what do you see",
    "can you see",
    "look at",
    "analyze",
    "describe",
    "what does this look like",
    "recognize",
    "identify",
    "what shape",
    "what color",
    "read this",
    "what equation",
    "solve this",
    "what number",
    "what letter",
    "what word",
    "on my canvas",
    "on the canvas",
    "in my drawing",
    "draw with me",
)

_DRAW_PATTERNS = tuple(
    re.compile(p)
    for p in (
        r"\bdraw\b",
        r"\bsketch\b",
        r"\billustrate\b",
        r"\bpaint\b",
        r"\bfill\b",
        r"\bfill\s+in",
        r"\bshade\b",
        r"\bcolor\b",
        r"\badd\s+(?:some\s+)?(?:color|colour)",
        r"\badd\s+.*\b(on|to|onto)\s+the\s+canvas",
        r"\bput\s+.*\b(on|to|onto)\s+the\s+canvas",
        r"\bplace\s+.*\b(on|to|onto)\s+the\s+canvas",
        r"\bmake\s+.*\b(on|to|onto)\s+the\s+canvas",
        r"\berase\b",
        r"\bremove\b",
        r"\bclear\b",
    )
)

_DRAW_PHRASES = (
    "draw me", "draw a", "draw the",
    "sketch me", "sketch a", "sketch the",
    "illustrate a", "paint me", "paint a",
    "create a drawing of",
    "can you add", "please add", "could you add",
    "could you make", "can you make", "can you make it",
    "fill it", "fill this", "fill that",
    "make it bigger", "make it smaller",
    "adjust it", "move it",
    "erase it", "erase that", "clear it", "clean it up",
    "fix it", "touch it up", "refine it", "polish it",
    "can you help with",
    "finish it", "finish the", "can you complete",
)

_AFFIRMATIONS = (
    "yes", "yes!", "yeah", "yep", "sure", "sure thing", "absolutely",
    "of course", "definitely", "please do", "please", "go ahead", "do it",
    "ok", "okay", "sounds good", "that'd be great", "that would be great",
    "please add it", "please add that",
)

_NEGATIONS = (
    "no", "no thanks", "not yet", "maybe later", "not right now",
    "don't", "do not", "don't add", "no thank you", "please don't",
)

# Erase detection vocabularies
_ERASE_VERBS = ("erase", "clear", "wipe", "remove", "reset")
# Whole words only: "small" and "wall" do not name the whole canvas
_UNIVERSAL_TARGETS_RE = re.compile(r"\b(?:everything|all)\b")
_CANVAS_TARGETS = ("my canvas", "the canvas", "canvas", "drawing")
_POLITE_TRIGGERS = ("can you", "could you", "would you", "will you", "please", "help me", "need you to")
_ERASE_IDIOMS = ("wipe it clean", "reset the canvas", "reset my canvas", "clear my board", "clear the board")

_TRAILING_PUNCT_RE = re.compile(r"[!.?]+$")
_WHITESPACE_RE = re.compile(r"\s+")


def is_analysis_only_query(lower_message: str) -> bool:
    return any(phrase in lower_message for phrase in _ANALYSIS_PHRASES)


def should_use_vision(message: str) -> bool:
    lower = message.lower()
    return any(keyword in lower for keyword in _VISION_KEYWORDS)


def should_trigger_draw_from_message(lower_message: str) -> bool:
    """Broad on purpose: a false positive only routes to the collaborative-draw path."""
    if any(pattern.search(lower_message) for pattern in _DRAW_PATTERNS):
        return True
    return any(phrase in lower_message for phrase in _DRAW_PHRASES)


def _matches_short_reply(lower_message: str, vocabulary: tuple[str, ...]) -> bool:
    normalized = lower_message.strip()
    if not normalized:
        return False
    sanitized = _TRAILING_PUNCT_RE.sub("", normalized)
    return any(sanitized == phrase or sanitized.startswith(f"{phrase} ") for phrase in vocabulary)


def is_affirmative_response(lower_message: str) -> bool:
    return _matches_short_reply(lower_message, _AFFIRMATIONS)


def is_negative_response(lower_message: str) -> bool:
    return _matches_short_reply(lower_message, _NEGATIONS)


def detect_erase_intent(lower_message: str) -> EraseIntent | None:
    """Detect "wipe the whole canvas" requests.

    Strict tier: the message starts with an erase verb and names everything /
    the canvas. Loose tier: verb and target anywhere, but only together with a
    request marker ("can you", "please", ...), so "clear" as an adjective does
    not wipe anyone's work. Plus a few fixed idioms.
    """
    compact = _WHITESPACE_RE.sub(" ", lower_message).strip()
    if not compact:
        return None

    has_target = bool(_UNIVERSAL_TARGETS_RE.search(compact)) or any(t in compact for t in _CANVAS_TARGETS)

    if has_target and any(compact.startswith(f"{verb} ") for verb in _ERASE_VERBS):
        return EraseIntent(entire_canvas=True)

    if (
        has_target
        and any(verb in compact for verb in _ERASE_VERBS)
        and any(trigger in compact for trigger in _POLITE_TRIGGERS)
    ):
        return EraseIntent(entire_canvas=True)

    if any(idiom in compact for idiom in _ERASE_IDIOMS):
        return EraseIntent(entire_canvas=True)

    return None


def classify_message(message: str, *, has_pending_offer: bool = False) -> Classification:
    """Classify one user message into a tagged intent."""
    lower = message.lower()

    if is_analysis_only_query(lower):
        return Classification(kind=IntentKind.ANALYSIS, needs_vision=True)

    erase = detect_erase_intent(lower)
    if erase is not None:
        return Classification(kind=IntentKind.ERASE, erase=erase)

    needs_vision = should_use_vision(message)
    explicit_draw = should_trigger_draw_from_message(lower)

    kind = IntentKind.NONE
    if has_pending_offer and is_affirmative_response(lower):
        kind = IntentKind.AFFIRM
    elif has_pending_offer and is_negative_response(lower):
        kind = IntentKind.DENY
    elif explicit_draw:
        kind = IntentKind.DRAW

    return Classification(kind=kind, needs_vision=needs_vision, explicit_draw=explicit_draw)
