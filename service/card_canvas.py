"""Pillow drawing surface with the primitives the citation card needs."""

from __future__ import annotations

import math
from typing import Iterator, Sequence, Tuple

from PIL import Image, ImageDraw, ImageFont

from service.text_fit import LINE_GAP, measure_line_height, measure_line_width

TRANSPARENT_RGBA = (0, 0, 0, 0)
TEXT_ALIGNMENTS = ("left", "center", "right")

Color = Tuple[int, int, int] | Tuple[int, int, int, int]


class CardCanvas:
    """RGBA drawing surface addressed in card pixel coordinates.

    Lines are stroked like a 2D canvas: a stroke of width ``w`` along
    ``y`` covers ``y - w / 2`` to ``y + w / 2``.
    """

    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.image = Image.new("RGBA", (width, height), TRANSPARENT_RGBA)
        self.draw = ImageDraw.Draw(self.image)

    def clear(self) -> None:
        """Reset every pixel to transparent."""
        self.draw.rectangle((0, 0, self.width, self.height), fill=TRANSPARENT_RGBA)

    def fill_rect(self, x: float, y: float, width: float, height: float, color: Color) -> None:
        """Fill an axis-aligned rectangle; empty rectangles draw nothing."""
        self._fill_box(x, y, x + width, y + height, color)

    def line(
        self,
        start: Tuple[float, float],
        end: Tuple[float, float],
        color: Color,
        line_width: float = 1,
    ) -> None:
        """Stroke a solid horizontal or vertical line."""
        self._stroke(start, end, color, (), line_width)

    def dotted_line(
        self,
        start: Tuple[float, float],
        end: Tuple[float, float],
        color: Color,
        pattern: Sequence[float],
        line_width: float = 1,
    ) -> None:
        """Stroke an axis-aligned line with an on/off dash pattern.

        An empty pattern strokes a solid line. The pattern restarts at
        ``start`` and runs towards ``end``.
        """
        self._stroke(start, end, color, pattern, line_width)

    def fill_text(
        self,
        text_value: str,
        x: float,
        y: float,
        font: ImageFont.FreeTypeFont,
        color: Color,
        align: str = "left",
    ) -> None:
        """Draw text with its first baseline at ``y``, one line at a time."""
        if align not in TEXT_ALIGNMENTS:
            raise ValueError(f"unsupported text alignment: {align!r}")
        advance = measure_line_height(font) + LINE_GAP
        baseline = y
        for line_value in text_value.split("\n"):
            if line_value:
                line_width = measure_line_width(line_value, font)
                if align == "center":
                    line_x = x - line_width / 2
                elif align == "right":
                    line_x = x - line_width
                else:
                    line_x = x
                self.draw.text(
                    (line_x, baseline), line_value, font=font, fill=color, anchor="ls"
                )
            baseline += advance

    def draw_image(self, image: Image.Image, x: float, y: float) -> None:
        """Composite an image with its own alpha, clipped to the surface."""
        source = image if image.mode == "RGBA" else image.convert("RGBA")
        box = clip_box(int(math.floor(x)), int(math.floor(y)), source.size, self.image.size)
        if box is None:
            return
        left, top, crop = box
        self.image.alpha_composite(source.crop(crop), dest=(left, top))

    def _stroke(
        self,
        start: Tuple[float, float],
        end: Tuple[float, float],
        color: Color,
        pattern: Sequence[float],
        line_width: float,
    ) -> None:
        (start_x, start_y), (end_x, end_y) = start, end
        if start_x != end_x and start_y != end_y:
            raise ValueError("only horizontal and vertical lines are supported")
        horizontal = start_y == end_y
        origin = start_x if horizontal else start_y
        delta = (end_x - start_x) if horizontal else (end_y - start_y)
        direction = 1 if delta >= 0 else -1
        half_width = line_width / 2

        for offset, dash_length in iter_dashes(abs(delta), pattern):
            dash_start = origin + direction * offset
            dash_end = origin + direction * (offset + dash_length)
            low, high = min(dash_start, dash_end), max(dash_start, dash_end)
            if horizontal:
                self._fill_box(low, start_y - half_width, high, start_y + half_width, color)
            else:
                self._fill_box(start_x - half_width, low, start_x + half_width, high, color)

    def _fill_box(
        self, left: float, top: float, right: float, bottom: float, color: Color
    ) -> None:
        box = tuple(math.floor(value + 0.5) for value in (left, top, right, bottom))
        if box[2] <= box[0] or box[3] <= box[1]:
            return
        self.draw.rectangle((box[0], box[1], box[2] - 1, box[3] - 1), fill=color)


def iter_dashes(length: float, pattern: Sequence[float]) -> Iterator[Tuple[float, float]]:
    """Yield (offset, length) for the "on" parts of a dash pattern."""
    if length <= 0:
        return
    if not pattern or sum(pattern) <= 0:
        yield 0.0, float(length)
        return
    dash_pattern = list(pattern)
    if len(dash_pattern) % 2:
        dash_pattern = dash_pattern * 2
    offset = 0.0
    index = 0
    while offset < length:
        segment = dash_pattern[index % len(dash_pattern)]
        if index % 2 == 0 and segment > 0:
            yield offset, min(float(segment), length - offset)
        offset += segment
        index += 1


def clip_box(
    x: int, y: int, source_size: Tuple[int, int], target_size: Tuple[int, int]
) -> Tuple[int, int, Tuple[int, int, int, int]] | None:
    """Return the visible destination and source crop box, or None when hidden."""
    source_width, source_height = source_size
    target_width, target_height = target_size
    left = max(0, x)
    top = max(0, y)
    right = min(target_width, x + source_width)
    bottom = min(target_height, y + source_height)
    if right <= left or bottom <= top:
        return None
    return left, top, (left - x, top - y, right - x, bottom - y)
