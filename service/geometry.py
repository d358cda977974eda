"""Derived card geometry for render_citation."""

from __future__ import annotations

from dataclasses import dataclass

from domain.citation import CardConfig

SIDE_DOTS_RIGHT_PADDING = 2
SEPARATOR_PADDING = 6
SEPARATOR_BOTTOM_PADDING = 10
BARCODE_RIGHT_PADDING = 8
BARCODE_TOP_PADDING = 4
TEXT_LEFT_PADDING = 12
TITLE_TOP_PADDING = 2
REASON_TOP_PADDING = 4
PENALTY_BOTTOM_PADDING = 10


@dataclass(frozen=True)
class GeometryProfile:
    """Pixel offsets and text budgets derived from a CardConfig."""

    side_dots_from_left: int
    side_dots_from_top: int
    side_dots_from_right: int
    separator_from_left: int
    separator_from_right: int
    top_separator_from_top: int
    bottom_separator_from_bottom: int
    barcode_from_right: int
    barcode_from_top: int
    text_from_left: int
    title_from_top: int
    title_max_width: int
    reason_from_top: int
    reason_max_width: int
    reason_max_height: int
    penalty_from_bottom: int


def compute_geometry(config: CardConfig) -> GeometryProfile:
    """Compute the geometry profile for a config in closed form."""
    side_dots_from_left = config.side_dot_spacing
    side_dots_from_top = config.side_dot_spacing + config.top_bottom_dot_size
    side_dots_from_right = (
        config.side_dot_spacing + config.top_bottom_dot_size + SIDE_DOTS_RIGHT_PADDING
    )
    # Fixed formula; the title's glyph metrics never move the separator.
    top_separator_from_top = config.top_bottom_dot_size + config.font_size * 2
    bottom_separator_from_bottom = (
        config.top_bottom_dot_size + config.font_size * 2 + SEPARATOR_BOTTOM_PADDING
    )
    barcode_from_right = side_dots_from_right + config.side_dot_size + BARCODE_RIGHT_PADDING
    text_from_left = config.side_dot_spacing + config.side_dot_size + TEXT_LEFT_PADDING

    barcode_length = len(config.barcode)
    title_max_width = config.width - (
        barcode_from_right
        + barcode_length * config.barcode_width
        + config.barcode_width * 3
        + text_from_left
        + config.font_size
    )
    reason_from_top = (
        top_separator_from_top
        + config.separator_dot_size
        + config.font_size
        + REASON_TOP_PADDING
    )
    reason_max_width = config.width - (
        text_from_left + side_dots_from_right + config.side_dot_size
    )
    reason_max_height = config.height - (
        top_separator_from_top + bottom_separator_from_bottom + config.font_size
    )

    return GeometryProfile(
        side_dots_from_left=side_dots_from_left,
        side_dots_from_top=side_dots_from_top,
        side_dots_from_right=side_dots_from_right,
        separator_from_left=side_dots_from_left + config.side_dot_size + SEPARATOR_PADDING,
        separator_from_right=side_dots_from_right + config.side_dot_size + SEPARATOR_PADDING,
        top_separator_from_top=top_separator_from_top,
        bottom_separator_from_bottom=bottom_separator_from_bottom,
        barcode_from_right=barcode_from_right,
        barcode_from_top=config.top_bottom_dot_size + BARCODE_TOP_PADDING,
        text_from_left=text_from_left,
        title_from_top=config.top_bottom_dot_size + config.font_size + TITLE_TOP_PADDING,
        title_max_width=title_max_width,
        reason_from_top=reason_from_top,
        reason_max_width=reason_max_width,
        reason_max_height=reason_max_height,
        penalty_from_bottom=(
            bottom_separator_from_bottom - config.font_size - PENALTY_BOTTOM_PADDING
        ),
    )


def barcode_left(config: CardConfig, geometry: GeometryProfile) -> int:
    """Return the x coordinate where the first barcode bar starts."""
    return config.width - geometry.barcode_from_right - len(config.barcode) * config.barcode_width
