"""Heuristic responder used when no model is reachable (demo / offline mode).

Keyword routing over the message, first match wins: math, help, draw,
colour advice, improvement tips, "what did I draw", generic reply. Drawing
replies carry a canned ``DrawingPlan`` for the interpreter to execute.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field

from app.engine.shapes import (
    MATH_EXAMPLE_REPLY,
    RANDOM_SHAPES,
    SHAPE_REPLIES,
    canned_shape_plan,
    math_example_plan,
    shape_from_message,
)
from app.models.drawing import DEFAULT_COLOR, DrawingPlan
from app.models.responses import CanvasStats

DRAW_INTRO = "I'd love to draw with you! Let me add something to the canvas..."

MATH_HELP = """I can help with math! Here are some things I can do:

• Solve equations step by step
• Draw graphs and diagrams
• Visualize geometric concepts
• Show working for calculations

Try drawing the equation on the canvas, and I'll help you solve it! For example:
- Draw "2x + 5 = 15" and I'll guide you through solving it
- Sketch a triangle and I can help with angles and sides
- Draw a graph and I'll help analyze it"""

USAGE_HELP = """Here's how to use the app:

**Tools:**
• Pen - Draw freehand lines
• Eraser - Remove parts of your drawing
• Fill - Fill enclosed areas with color
• Line - Draw straight lines
• Circle - Draw circles

**Tips:**
• Adjust brush size for different effects
• Use preset colors for quick access
• I'm watching your canvas and will offer real-time feedback
• Ask me to draw something and I can demonstrate

What would you like to create?"""

_COLOR_ADVICE = """Here are some color theory tips:

• **Complementary colors** (opposite on color wheel) create vibrant contrast
• **Analogous colors** (next to each other) create harmony
• Use lighter colors for highlights
• Darker colors work well for shadows and depth

Current color: {color}

Try experimenting with the color picker or preset colors!"""

IMPROVEMENT_TIPS = (
    "**Composition tip:** Try using the rule of thirds - divide your canvas into 9 sections and place focal points at intersections.",
    "**Technique tip:** Vary your brush sizes to create depth. Use larger brushes for background and smaller ones for details.",
    "**Color tip:** Start with a light sketch, then gradually build up darker colors for better control.",
    "**Practice tip:** Try drawing basic shapes first (circles, squares, triangles) to warm up your hand.",
)

GENERAL_REPLIES = (
    "That's interesting! Tell me more about what you'd like to create.",
    "I'm here to help! Would you like some drawing tips or shall we work on something specific?",
    "Great question! Feel free to start drawing and I'll provide feedback as you go.",
    "I'm analyzing your canvas. What would you like to focus on?",
)

EMPTY_CANVAS_REPLY = "I don't see much on the canvas yet! Start drawing and I'll help you analyze it. 🎨"


@dataclass
class FallbackReply:
    messages: list[str] = field(default_factory=list)
    plan: DrawingPlan | None = None
    # Sent once the plan has been painted
    after_draw: str | None = None


def analyze_drawing(stats: CanvasStats) -> str:
    """Local canvas analysis from coverage and colour-count bands."""
    coverage, colors = stats.coverage_percent, stats.color_count
    if coverage < 0.5:
        return EMPTY_CANVAS_REPLY

    lines = ["Let me analyze your drawing! 🔍", ""]
    if coverage < 5:
        lines.append("• You have a light sketch started")
    elif coverage < 15:
        lines.append("• Your drawing is taking shape nicely")
    elif coverage < 30:
        lines.append("• You have a substantial piece developing")
    else:
        lines.append("• This is a detailed, well-filled composition")

    if colors == 1:
        lines.append("• Using a single color - great for focused studies")
    elif colors == 2:
        lines.append("• Using 2 colors - nice minimal palette")
    elif colors <= 4:
        lines.append(f"• Using {colors} colors - good variety without overwhelming")
    else:
        lines.append(f"• Using {colors} colors - vibrant and diverse!")

    lines += ["", "Keep going, or ask me for specific help! 🌟"]
    return "\n".join(lines)


class HeuristicResponder:
    """Rule-based replies. ``rng`` is injectable so tests can pin the random picks."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self.rng = rng or random.Random()

    def respond(
        self,
        message: str,
        stats: CanvasStats,
        *,
        width: int,
        height: int,
        ai_can_draw: bool = True,
        color: str = DEFAULT_COLOR,
    ) -> FallbackReply:
        lower = message.lower()

        if "math" in lower or "equation" in lower or "solve" in lower:
            reply = FallbackReply(messages=[MATH_HELP])
            if ai_can_draw:
                reply.plan = math_example_plan()
                reply.after_draw = MATH_EXAMPLE_REPLY
            return reply

        if "help" in lower or "how" in lower:
            return FallbackReply(messages=[USAGE_HELP])

        if ai_can_draw and ("draw" in lower or "show" in lower or "make" in lower):
            return self.canned_draw(message, width, height, color)

        if "color" in lower or "colour" in lower:
            return FallbackReply(messages=[_COLOR_ADVICE.format(color=color)])

        if "improve" in lower or "better" in lower or "tip" in lower:
            return FallbackReply(messages=[self.rng.choice(IMPROVEMENT_TIPS)])

        if "what" in lower and ("drew" in lower or "draw" in lower):
            return FallbackReply(messages=[analyze_drawing(stats)])

        return FallbackReply(messages=[self.rng.choice(GENERAL_REPLIES)])

    def canned_draw(self, message: str, width: int, height: int, color: str = DEFAULT_COLOR) -> FallbackReply:
        shape = shape_from_message(message.lower())
        reply = FallbackReply(messages=[DRAW_INTRO])
        if shape is None:
            shape = self.rng.choice(RANDOM_SHAPES)
        else:
            reply.after_draw = SHAPE_REPLIES[shape]
        reply.plan = canned_shape_plan(shape, width, height, color)
        return reply

    def feedback(self, stats: CanvasStats, feedback_count: int) -> str | None:
        """Encouragement by coverage band; None once the canvas is well filled."""
        coverage, colors = stats.coverage_percent, stats.color_count
        if coverage < 3:
            options = (
                "Nice start! I see you're sketching something. 🎨",
                "Interesting! What are you planning to create?",
                "Good technique! Your strokes look confident.",
                "I'm watching! Keep going, this looks promising.",
            )
        elif coverage < 8:
            options = (
                "Great use of colors! The variety really adds depth."
                if colors > 2 else "Looking good! Have you considered adding more colors?",
                "Your composition is taking shape nicely!",
                "I can see your vision coming together! 🖌️",
                "Nice work! The proportions look balanced.",
            )
        elif coverage < 20:
            options = (
                "This is really coming along! Want me to help with anything specific?",
                "Beautiful color palette! You have a good eye for color harmony."
                if colors > 3 else "Your drawing has great structure. Maybe try experimenting with more colors?",
                "Impressive! Are you working on homework or just creating art?",
                "I'm loving this! The details are really emerging.",
            )
        elif coverage < 40 and feedback_count < 8:
            options = (
                "Wow! This is getting detailed. You're doing great! 🌟",
                "Your artwork is really filling out beautifully!",
                "I can see you're putting a lot of thought into this. Keep it up!",
                "This is looking fantastic! Need any suggestions or help?",
            )
        else:
            return None
        return self.rng.choice(options)
