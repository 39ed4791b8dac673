"""Pending draw offers — "Would you like me to add a sun?" → "yes" → draw the sun."""

from __future__ import annotations

import re
import time
from dataclasses import dataclass, field

_OFFER_PATTERNS = tuple(
    re.compile(p)
    for p in (
        r"would you like me to add",
        r"do you want me to add",
        r"should i add",
        r"want me to add",
        r"would you like me to put",
        r"do you want me to put",
        r"should i put",
    )
)

_COMMITMENT_PATTERNS = tuple(
    re.compile(p)
    for p in (
        r"i['’]ll add",
        r"i will add",
        r"let me add",
        r"adding it now",
        r"i['’]m adding",
        r"i will put",
    )
)

_SUBJECT_RE = re.compile(r"(?:add|put|place)\s+(.*?)\s+(?:onto|to|on)\s+the\s+canvas", re.IGNORECASE)


@dataclass
class PendingOffer:
    subject: str | None
    ai_message: str
    created_at: float = field(default_factory=time.time)


def extract_canvas_subject(message: str) -> str | None:
    match = _SUBJECT_RE.search(message)
    if match and match.group(1):
        return match.group(1).strip()
    return None


def analyze_ai_message_for_draw_offers(message: str, current: PendingOffer | None) -> PendingOffer | None:
    """Return the pending-offer state after the assistant says ``message``.

    An offer phrase replaces any previous offer. A commitment phrase ("I'll add
    ...") only backfills the subject of an existing subject-less offer.
    Anything else leaves ``current`` untouched.
    """
    lower = message.lower()

    if any(p.search(lower) for p in _OFFER_PATTERNS):
        return PendingOffer(subject=extract_canvas_subject(message), ai_message=message)

    if current is not None and current.subject is None and any(p.search(lower) for p in _COMMITMENT_PATTERNS):
        current.subject = extract_canvas_subject(message)

    return current


def build_draw_prompt_from_offer(offer: PendingOffer | None) -> str:
    if offer is None:
        return "Please add the update you just described to the canvas."
    if offer.subject:
        return f"Please add {offer.subject} to the canvas exactly as you described."
    return "Please add the update you just mentioned to the canvas."
