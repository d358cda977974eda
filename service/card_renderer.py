"""Draw a citation card onto a Pillow surface."""

from __future__ import annotations

from dataclasses import dataclass
from io import BytesIO
import logging
import os
from typing import Callable, Tuple

import numpy as np
from PIL import Image, ImageFont

from domain.citation import (
    ASSETS_MISSING_CODE,
    ASSETS_UNLOADABLE_CODE,
    CardConfig,
    CitationValidationError,
    parse_hex_color_to_rgb,
)
from service.auto_resize import auto_resize
from service.card_canvas import CardCanvas
from service.geometry import GeometryProfile, barcode_left, compute_geometry
from service.text_fit import fit_block, fit_lines_width

FONT_FILE_NAME = os.path.join("fonts", "DejaVuSansMono.ttf")
LOGO_FILE_NAME = "logo.png"
LOGO_OFFSET_X = 1
LOGO_OFFSET_Y = 4
PENALTY_OFFSET_X = 3
LOGGER = logging.getLogger("render_citation.renderer")


@dataclass(frozen=True)
class CitationAssets:
    """Font file and logo image used to render a card."""

    font_path: str
    logo: Image.Image


@dataclass(frozen=True)
class RenderedCard:
    """Rendered card image together with the config that produced it."""

    image: Image.Image
    config: CardConfig
    geometry: GeometryProfile


@dataclass(frozen=True)
class BarcodeSegment:
    """One vertical bar of the barcode."""

    x: float
    top: float
    bottom: float
    filled: bool


def load_assets(
    data_dir: str, font_path: str | None = None, logo_path: str | None = None
) -> CitationAssets:
    """Resolve and load the font and logo, refusing to continue without them."""
    if not os.path.isdir(data_dir):
        raise CitationValidationError(
            ASSETS_MISSING_CODE, f"data directory does not exist: {data_dir}"
        )
    resolved_font = font_path or os.path.join(data_dir, FONT_FILE_NAME)
    resolved_logo = logo_path or os.path.join(data_dir, LOGO_FILE_NAME)
    if not os.path.isfile(resolved_font):
        raise CitationValidationError(
            ASSETS_MISSING_CODE, f"font file not found: {resolved_font}"
        )
    if not os.path.isfile(resolved_logo):
        raise CitationValidationError(
            ASSETS_MISSING_CODE, f"logo file not found: {resolved_logo}"
        )
    load_font(resolved_font, 12)
    try:
        with Image.open(resolved_logo) as logo_file:
            logo = logo_file.convert("RGBA")
    except Exception as exc:
        raise CitationValidationError(
            ASSETS_UNLOADABLE_CODE, f"failed to read logo: {resolved_logo}"
        ) from exc
    return CitationAssets(font_path=resolved_font, logo=logo)


def load_font(font_path: str, font_size: int) -> ImageFont.FreeTypeFont:
    """Load a TrueType font at the requested pixel size."""
    try:
        return ImageFont.truetype(
            font_path, size=font_size, layout_engine=ImageFont.Layout.BASIC
        )
    except Exception as exc:
        raise CitationValidationError(
            ASSETS_UNLOADABLE_CODE, f"failed to load font {font_path} at size {font_size}"
        ) from exc


def tint_logo(logo: Image.Image, color: Tuple[int, int, int]) -> Image.Image:
    """Recolor every pixel of the logo, keeping its alpha channel."""
    pixels = np.array(logo.convert("RGBA"), dtype=np.uint8)
    pixels[:, :, 0:3] = np.array(color, dtype=np.uint8)
    return Image.fromarray(pixels)


def barcode_segments(
    x: float, y: float, barcode: Tuple[int, ...], bar_height: int, bar_width: int
) -> list[BarcodeSegment]:
    """Lay out one vertical segment per barcode bit."""
    return [
        BarcodeSegment(
            x=x + bar_width * index + bar_width / 2,
            top=y,
            bottom=y + bar_height,
            filled=bit == 1,
        )
        for index, bit in enumerate(barcode)
    ]


def render_card(
    config: CardConfig,
    assets: CitationAssets,
    tint: bool = False,
    canvas_factory: Callable[[int, int], CardCanvas] = CardCanvas,
) -> RenderedCard:
    """Resize if requested, then draw every card element in z-order."""
    font = load_font(assets.font_path, config.font_size)
    if config.resize_reason:
        resized = auto_resize(config, font)
        config, geometry = resized.config, resized.geometry
        LOGGER.debug(
            "render_citation.resize: %dx%d after %d iterations",
            config.width,
            config.height,
            resized.iterations,
        )
    else:
        geometry = compute_geometry(config)

    background = parse_hex_color_to_rgb(config.moa_bg)
    foreground = parse_hex_color_to_rgb(config.moa_fg)
    text_color = parse_hex_color_to_rgb(config.moa_ft)
    logo = tint_logo(assets.logo, foreground) if tint else assets.logo

    width, height = config.width, config.height
    canvas = canvas_factory(width, height)
    canvas.fill_rect(0, 0, width, height, background)

    canvas.draw_image(
        logo,
        width / 2 - logo.height / 2 - LOGO_OFFSET_X,
        height - (geometry.bottom_separator_from_bottom + logo.height / 2) + LOGO_OFFSET_Y,
    )

    # Borders
    border = config.top_bottom_dot_size
    border_pattern = (border, border)
    canvas.dotted_line((0, border / 2), (width, border / 2), foreground, border_pattern, border)
    canvas.dotted_line(
        (border, height - border / 2), (width, height - border / 2), foreground, border_pattern, border
    )

    side = config.side_dot_size
    side_pattern = (side, side * 2)
    left_x = geometry.side_dots_from_left + side / 2
    right_x = width - geometry.side_dots_from_right - side / 2
    for side_x in (left_x, right_x):
        canvas.dotted_line(
            (side_x, geometry.side_dots_from_top),
            (side_x, height - border),
            foreground,
            side_pattern,
            side,
        )

    separator = config.separator_dot_size
    separator_pattern = (separator, separator)
    separator_end = width - geometry.separator_from_right
    top_y = geometry.top_separator_from_top + separator / 2
    bottom_y = height - (geometry.bottom_separator_from_bottom + separator / 2)
    for separator_y in (top_y, bottom_y):
        canvas.dotted_line(
            (geometry.separator_from_left, separator_y),
            (separator_end, separator_y),
            text_color,
            separator_pattern,
            separator,
        )

    canvas.line((width - border / 2, 0), (width - border / 2, height), foreground, border)

    # Barcode
    bars_x = barcode_left(config, geometry)
    for segment in barcode_segments(
        bars_x, geometry.barcode_from_top, config.barcode, config.barcode_height, config.barcode_width
    ):
        canvas.line(
            (segment.x, segment.top),
            (segment.x, segment.bottom),
            text_color if segment.filled else background,
            config.barcode_width,
        )
    canvas.fill_rect(
        bars_x - config.barcode_width * 3,
        geometry.barcode_from_top,
        config.barcode_width * 2,
        config.barcode_height / 2,
        text_color,
    )

    # Text
    canvas.fill_text(
        fit_lines_width(config.title, font, geometry.title_max_width),
        geometry.text_from_left,
        geometry.title_from_top,
        font,
        text_color,
    )
    canvas.fill_text(
        fit_block(config.reason, font, geometry.reason_max_width, geometry.reason_max_height),
        geometry.text_from_left,
        geometry.reason_from_top,
        font,
        text_color,
    )
    canvas.fill_text(
        fit_lines_width(config.penalty, font, geometry.reason_max_width),
        width / 2 - PENALTY_OFFSET_X,
        height - geometry.penalty_from_bottom,
        font,
        text_color,
        align="center",
    )

    return RenderedCard(image=canvas.image, config=config, geometry=geometry)


def encode_png(card: RenderedCard) -> bytes:
    """Encode a rendered card as a PNG buffer."""
    buffer = BytesIO()
    card.image.save(buffer, format="PNG")
    return buffer.getvalue()
