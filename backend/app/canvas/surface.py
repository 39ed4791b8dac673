"""Server-side canvas — a Pillow RGBA raster with a small drawing-context API.

The browser owns the real canvas; this mirror receives its PNG snapshots,
takes the AI's paint operations and hands back both the updated raster and the
list of operations (so a thin client can replay them instead of re-uploading).
"""

from __future__ import annotations

import base64
import io
import logging
from collections import deque
from collections.abc import Sequence
from typing import Any

import numpy as np
from numpy.typing import NDArray
from PIL import Image, ImageColor, ImageDraw, ImageFont

logger = logging.getLogger(__name__)

Point = tuple[float, float]

_BACKGROUND = (255, 255, 255, 255)
_FALLBACK_INK = (0, 0, 0, 255)
_DATA_URL_PREFIX = "data:image/png;base64,"
# Only the most recent paint operations are retained for replay
OPERATION_LOG_LIMIT = 500

# Canvas textAlign / textBaseline → Pillow anchor characters
_ALIGN_ANCHOR = {"left": "l", "start": "l", "center": "m", "right": "r", "end": "r"}
_BASELINE_ANCHOR = {
    "top": "t",
    "hanging": "a",
    "middle": "m",
    "alphabetic": "s",
    "ideographic": "d",
    "bottom": "b",
}


def parse_color(color: str | None) -> tuple[int, int, int, int]:
    """Hex / CSS colour → RGBA tuple. Unparseable colours fall back to black."""
    if not color:
        return _FALLBACK_INK
    try:
        rgb = ImageColor.getrgb(color)
    except ValueError:
        logger.debug("Unparseable colour %r, using black", color)
        return _FALLBACK_INK
    if len(rgb) == 3:
        return (rgb[0], rgb[1], rgb[2], 255)
    return rgb  # type: ignore[return-value]


def _load_font(family: str, size: float) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    try:
        return ImageFont.truetype(f"{family}.ttf", size)
    except OSError:
        return ImageFont.load_default(size=size)


class CanvasSurface:
    """Fixed-size RGBA raster on a white background."""

    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.image = Image.new("RGBA", (width, height), _BACKGROUND)
        self._draw = ImageDraw.Draw(self.image, "RGBA")
        # Recent paint operations (replayable by the client); ``recorded`` counts all of them
        self.operations: deque[dict[str, Any]] = deque(maxlen=OPERATION_LOG_LIMIT)
        self.recorded = 0

    # ------------------------------------------------------------------
    # Raster access
    # ------------------------------------------------------------------

    def pixels(self) -> NDArray[np.uint8]:
        """Copy of the pixel buffer, shape ``(height, width, 4)``."""
        return np.array(self.image, dtype=np.uint8)

    def replace_image(self, image: Image.Image) -> None:
        """Adopt ``image`` as the canvas content (size included)."""
        image = image.convert("RGBA")
        flattened = Image.new("RGBA", image.size, _BACKGROUND)
        flattened.alpha_composite(image)
        self.image = flattened
        self.width, self.height = flattened.size
        self._draw = ImageDraw.Draw(self.image, "RGBA")

    def load_data_url(self, data_url: str) -> None:
        """Load a ``data:image/png;base64,...`` snapshot from the client."""
        _, _, payload = data_url.partition(",")
        raw = base64.b64decode(payload or data_url)
        with Image.open(io.BytesIO(raw)) as img:
            self.replace_image(img)

    def to_png_bytes(self) -> bytes:
        buf = io.BytesIO()
        self.image.save(buf, format="PNG")
        return buf.getvalue()

    def to_data_url(self) -> str:
        return _DATA_URL_PREFIX + base64.b64encode(self.to_png_bytes()).decode("ascii")

    # ------------------------------------------------------------------
    # Drawing context
    # ------------------------------------------------------------------

    def clear(self) -> None:
        self._draw.rectangle([0, 0, self.width, self.height], fill=_BACKGROUND)
        self._record("clear")

    def stroke_path(
        self,
        points: Sequence[Point],
        color: str | None,
        width: float,
        closed: bool = False,
    ) -> None:
        if len(points) < 2:
            return
        xy = [tuple(p) for p in points]
        if closed:
            xy.append(xy[0])
        self._draw.line(xy, fill=parse_color(color), width=_px(width), joint="curve")
        self._record("stroke_path", points=xy, color=color, width=width)

    def fill_path(self, points: Sequence[Point], color: str | None) -> None:
        if len(points) < 3:
            return
        xy = [tuple(p) for p in points]
        self._draw.polygon(xy, fill=parse_color(color))
        self._record("fill_path", points=xy, color=color)

    def arc(
        self,
        cx: float,
        cy: float,
        radius: float,
        color: str | None,
        width: float,
        fill: bool = False,
    ) -> None:
        """Full circle; filled first, then stroked."""
        box = [cx - radius, cy - radius, cx + radius, cy + radius]
        ink = parse_color(color)
        self._draw.ellipse(box, fill=ink if fill else None, outline=ink, width=_px(width))
        self._record("arc", cx=cx, cy=cy, radius=radius, color=color, width=width, fill=fill)

    def fill_rect(self, x: float, y: float, w: float, h: float, color: str | None) -> None:
        self._draw.rectangle([x, y, x + w, y + h], fill=parse_color(color))
        self._record("fill_rect", x=x, y=y, w=w, h=h, color=color)

    def stroke_rect(self, x: float, y: float, w: float, h: float, color: str | None, width: float) -> None:
        self._draw.rectangle([x, y, x + w, y + h], outline=parse_color(color), width=_px(width))
        self._record("stroke_rect", x=x, y=y, w=w, h=h, color=color, width=width)

    def fill_text(
        self,
        text: str,
        x: float,
        y: float,
        color: str | None,
        size: float,
        font: str = "Arial",
        align: str = "center",
        baseline: str = "middle",
    ) -> None:
        anchor = _ALIGN_ANCHOR.get(align, "m") + _BASELINE_ANCHOR.get(baseline, "m")
        self._draw.text(
            (x, y),
            text,
            fill=parse_color(color),
            font=_load_font(font, size),
            anchor=anchor,
        )
        self._record(
            "fill_text", text=text, x=x, y=y, color=color, size=size,
            font=font, align=align, baseline=baseline,
        )

    def mark(self) -> int:
        """Position in the operation log; pass it to ``operations_since`` later."""
        return self.recorded

    def operations_since(self, mark: int) -> list[dict[str, Any]]:
        count = min(self.recorded - mark, len(self.operations))
        if count <= 0:
            return []
        return list(self.operations)[-count:]

    def _record(self, op: str, **params: Any) -> None:
        self.operations.append({"op": op, **params})
        self.recorded += 1


def _px(width: float) -> int:
    return max(1, int(round(width)))
