"""Doodle pad drawing surface backed by Pillow."""

import base64
import io
import re
from typing import List, Tuple

from PIL import Image, ImageDraw

CANVAS_WIDTH = 400
CANVAS_HEIGHT = 400
STROKE_COLOR = (0, 0, 0, 255)
STROKE_WIDTH = 2

_DATA_URL_RE = re.compile(r"^data:image/[\w.+-]+;base64,(?P<payload>.+)$", re.DOTALL)


class DoodleCanvas:
    """A transparent RGBA canvas that records the strokes drawn on it."""

    def __init__(self, width: int = CANVAS_WIDTH, height: int = CANVAS_HEIGHT):
        self.width = width
        self.height = height
        self.image = Image.new("RGBA", (width, height), (0, 0, 0, 0))
        self._draw = ImageDraw.Draw(self.image)
        self.strokes: List[List[Tuple[float, float]]] = []
        # Data URL the canvas was loaded from, returned unchanged until drawn on
        self._source_url = None

    def draw_segment(self, start: Tuple[float, float], end: Tuple[float, float]) -> None:
        """Ink one straight segment with round caps."""
        self._draw.line([start, end], fill=STROKE_COLOR, width=STROKE_WIDTH)
        radius = STROKE_WIDTH / 2
        for x, y in (start, end):
            self._draw.ellipse([x - radius, y - radius, x + radius, y + radius], fill=STROKE_COLOR)
        self._source_url = None

    def begin_stroke(self, point: Tuple[float, float]) -> None:
        self.strokes.append([tuple(point)])

    def extend_stroke(self, point: Tuple[float, float]) -> None:
        last = self.strokes[-1][-1]
        self.draw_segment(last, point)
        self.strokes[-1].append(tuple(point))

    def is_blank(self) -> bool:
        return self.image.getbbox() is None

    def to_data_url(self) -> str:
        """Encode the canvas as a PNG data URL."""
        if self._source_url is not None:
            return self._source_url
        buffer = io.BytesIO()
        self.image.save(buffer, format="PNG")
        encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
        return f"data:image/png;base64,{encoded}"

    def load_data_url(self, data_url: str) -> bool:
        """
        Paint a saved image onto the canvas.

        Returns:
            True if the data URL decoded into an image, False otherwise
        """
        match = _DATA_URL_RE.match(data_url or "")
        if not match:
            return False
        try:
            raw = base64.b64decode(match.group("payload"))
            with Image.open(io.BytesIO(raw)) as loaded:
                self.image.paste(loaded.convert("RGBA"), (0, 0))
        except (ValueError, OSError):
            return False
        self._draw = ImageDraw.Draw(self.image)
        self._source_url = data_url
        return True
