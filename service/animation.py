"""Slide-in reveal animation for a rendered citation card."""

from __future__ import annotations

from io import BytesIO
import logging
import math
from typing import Iterable, Iterator, Sequence, Tuple

from PIL import Image

from domain.citation import INVALID_CONFIG_CODE, CardConfig, CitationValidationError
from service.card_canvas import CardCanvas
from service.card_renderer import RenderedCard
from service.geometry import GeometryProfile

STEP_PIXELS = 2
SEPARATOR_PAUSE_FRAMES = 14
REVEALED_PAUSE_FRAMES = 100
HIDDEN_PAUSE_FRAMES = 50
DEFAULT_DELAY_MS = 10
GIF_TRANSPARENT_INDEX = 255
LOGGER = logging.getLogger("render_citation.animation")


def compute_stops(config: CardConfig, geometry: GeometryProfile) -> Tuple[int, int, int]:
    """Return the start offset and the two separator stops."""
    start = geometry.side_dots_from_top
    stop_one = geometry.top_separator_from_top + STEP_PIXELS
    stop_two = config.height - geometry.bottom_separator_from_bottom + STEP_PIXELS
    return start, stop_one, stop_two


def build_reveal_timeline(
    config: CardConfig, geometry: GeometryProfile
) -> Tuple[int, ...]:
    """Build the visible-height offset of the card for every frame.

    The card slides up to the first separator, pauses, slides to the second
    separator, pauses, reveals fully, holds, then slides back down and stays
    hidden for a while before the loop restarts.
    """
    start, stop_one, stop_two = compute_stops(config, geometry)
    height = config.height

    timeline: list[int] = []
    timeline.extend(range(start, stop_one, STEP_PIXELS))
    timeline.extend([stop_one] * SEPARATOR_PAUSE_FRAMES)
    timeline.extend(range(stop_one, stop_two, STEP_PIXELS))
    timeline.extend([stop_two] * SEPARATOR_PAUSE_FRAMES)
    timeline.extend(range(stop_two, height, STEP_PIXELS))
    timeline.extend([height] * REVEALED_PAUSE_FRAMES)
    timeline.extend(range(height - STEP_PIXELS, -1, -STEP_PIXELS))
    timeline.extend([0] * HIDDEN_PAUSE_FRAMES)
    return tuple(timeline)


def expected_timeline_length(config: CardConfig, geometry: GeometryProfile) -> int:
    """Closed-form frame count of build_reveal_timeline."""
    start, stop_one, stop_two = compute_stops(config, geometry)

    def ramp(begin: int, end: int) -> int:
        return max(0, math.ceil((end - begin) / STEP_PIXELS))

    return (
        ramp(start, stop_one)
        + SEPARATOR_PAUSE_FRAMES
        + ramp(stop_one, stop_two)
        + SEPARATOR_PAUSE_FRAMES
        + ramp(stop_two, config.height)
        + REVEALED_PAUSE_FRAMES
        + config.height // STEP_PIXELS
        + HIDDEN_PAUSE_FRAMES
    )


def compose_frames(
    card_image: Image.Image, timeline: Iterable[int]
) -> Iterator[Image.Image]:
    """Yield one frame per offset with the card shifted down by height - offset."""
    width, height = card_image.size
    scratch = CardCanvas(width, height)
    for offset in timeline:
        scratch.clear()
        scratch.draw_image(card_image, 0, height - offset)
        yield scratch.image.copy()


def to_gif_frame(frame: Image.Image) -> Image.Image:
    """Quantize an RGBA frame to a palette image with a transparent index."""
    alpha = frame.getchannel("A")
    palette_frame = frame.convert("RGB").quantize(colors=GIF_TRANSPARENT_INDEX)
    transparent_mask = alpha.point(lambda value: 255 if value < 128 else 0)
    palette_frame.paste(GIF_TRANSPARENT_INDEX, mask=transparent_mask)
    palette_frame.info["transparency"] = GIF_TRANSPARENT_INDEX
    return palette_frame


def encode_gif(
    frames: Iterable[Image.Image],
    frame_count: int,
    delay_ms: int = DEFAULT_DELAY_MS,
    loop: int = 0,
) -> bytes:
    """Encode frames as a looping, transparent GIF and return its bytes.

    Every frame is shown for ``delay_ms``. Pillow stores a run of identical
    consecutive frames as one frame with the summed delay, so pauses keep
    their length while the file holds fewer frames than the timeline.
    """
    if delay_ms <= 0:
        raise CitationValidationError(INVALID_CONFIG_CODE, "delay_ms must be positive")
    gif_frames: list[Image.Image] = []
    for index, frame in enumerate(frames):
        gif_frames.append(to_gif_frame(frame))
        LOGGER.debug("Encoding frame %d of %d", index + 1, frame_count)
    if not gif_frames:
        raise CitationValidationError(INVALID_CONFIG_CODE, "animation has no frames")

    buffer = BytesIO()
    gif_frames[0].save(
        buffer,
        format="GIF",
        save_all=True,
        append_images=gif_frames[1:],
        duration=delay_ms,
        loop=loop,
        transparency=GIF_TRANSPARENT_INDEX,
        disposal=2,
        optimize=False,
    )
    LOGGER.info("render_citation.animation: encoded %d frames", len(gif_frames))
    return buffer.getvalue()


def render_animation(
    card: RenderedCard,
    timeline: Sequence[int] | None = None,
    delay_ms: int = DEFAULT_DELAY_MS,
) -> bytes:
    """Animate a rendered card; an explicit timeline replaces the generated one."""
    if timeline is None:
        timeline = build_reveal_timeline(card.config, card.geometry)
    return encode_gif(
        compose_frames(card.image, timeline), len(timeline), delay_ms=delay_ms
    )
