"""Text measurement, wrapping and truncation for render_citation."""

from __future__ import annotations

from PIL import ImageFont

LINE_GAP = 2


def measure_line_width(line_value: str, font: ImageFont.FreeTypeFont) -> float:
    """Measure the advance width of a single line."""
    if not line_value:
        return 0.0
    return float(font.getlength(line_value))


def measure_text_width(text_value: str, font: ImageFont.FreeTypeFont) -> float:
    """Measure the widest line of possibly multi-line text."""
    return max(
        (measure_line_width(line, font) for line in text_value.split("\n")),
        default=0.0,
    )


def measure_line_height(font: ImageFont.FreeTypeFont) -> int:
    """Return the ascent plus descent of the font."""
    ascent, descent = font.getmetrics()
    return ascent + descent


def measure_text_height(text_value: str, font: ImageFont.FreeTypeFont) -> int:
    """Measure the height of a block drawn line by line with LINE_GAP spacing."""
    if not text_value:
        return 0
    line_count = len(text_value.split("\n"))
    return line_count * measure_line_height(font) + (line_count - 1) * LINE_GAP


def text_fits_width(
    text_value: str, font: ImageFont.FreeTypeFont, max_width: float
) -> bool:
    """Return True when the text is no wider than max_width."""
    return measure_text_width(text_value, font) <= max_width


def text_fits_height(
    text_value: str, font: ImageFont.FreeTypeFont, max_height: float
) -> bool:
    """Return True when the text block is no taller than max_height."""
    return measure_text_height(text_value, font) <= max_height


def fit_width(text_value: str, font: ImageFont.FreeTypeFont, max_width: float) -> str:
    """Drop trailing characters from a single line until it fits max_width.

    When the overflow is larger than the budget itself, several characters
    are skipped at once (width divided by the glyph height) before the
    one-character step. A skip is only taken while the shortened text still
    overflows, so the result is the longest prefix that fits.
    """
    max_width = max(0.0, float(max_width))
    glyph_height = max(1, measure_line_height(font))
    width = measure_line_width(text_value, font)
    while text_value and width > max_width:
        if width - max_width > max_width:
            skip = int(width / glyph_height)
            candidate = text_value[: max(0, len(text_value) - skip)]
            if skip > 0 and measure_line_width(candidate, font) > max_width:
                text_value = candidate
        text_value = text_value[:-1]
        width = measure_line_width(text_value, font)
    return text_value


def fit_lines_width(
    text_value: str, font: ImageFont.FreeTypeFont, max_width: float
) -> str:
    """Apply fit_width to every line of multi-line text."""
    return "\n".join(fit_width(line, font, max_width) for line in text_value.split("\n"))


def wrap_text(text_value: str, font: ImageFont.FreeTypeFont, max_width: float) -> str:
    """Greedily pack words into lines no wider than max_width.

    Existing line breaks are kept. A single word wider than max_width is
    left on its own line unsplit.
    """
    wrapped_lines: list[str] = []
    for paragraph in text_value.split("\n"):
        words = paragraph.split(" ")
        current_line = words[0]
        for word in words[1:]:
            candidate = f"{current_line} {word}"
            if measure_line_width(candidate, font) <= max_width:
                current_line = candidate
            else:
                wrapped_lines.append(current_line)
                current_line = word
        wrapped_lines.append(current_line)
    return "\n".join(wrapped_lines)


def fit_height(
    text_value: str, font: ImageFont.FreeTypeFont, max_height: float
) -> str:
    """Drop trailing lines until the block fits max_height."""
    lines = text_value.split("\n") if text_value else []
    while lines and measure_text_height("\n".join(lines), font) > max_height:
        lines.pop()
    return "\n".join(lines)


def fit_block(
    text_value: str,
    font: ImageFont.FreeTypeFont,
    max_width: float,
    max_height: float,
) -> str:
    """Wrap, then truncate to height, then clip every line to max_width."""
    wrapped = fit_height(wrap_text(text_value, font, max_width), font, max_height)
    if not wrapped:
        return ""
    return fit_lines_width(wrapped, font, max_width)
