"""Domain types and parsing for render_citation."""

from __future__ import annotations

from dataclasses import dataclass, replace
import logging
import random
import re
from typing import Iterable, Tuple

INVALID_DIMENSION_CODE = "render_citation.input.invalid_dimension"
ODD_DIMENSION_CODE = "render_citation.input.odd_dimension"
INVALID_BARCODE_CODE = "render_citation.input.invalid_barcode"
INVALID_COLOR_CODE = "render_citation.input.invalid_color"
INVALID_CONFIG_CODE = "render_citation.input.invalid_config"
ASSETS_MISSING_CODE = "render_citation.input.assets_missing"
ASSETS_UNLOADABLE_CODE = "render_citation.input.assets_unloadable"

MIN_WIDTH = 100
MIN_HEIGHT = 110
DEFAULT_WIDTH = 366
DEFAULT_HEIGHT = 160
DEFAULT_BARCODE = (1, 0, 1, 0, 1, 0, 1, 1, 0, 1, 1)
DEFAULT_TITLE = "M.O.A. CITATION"
DEFAULT_REASON = "Protocol Violated.\nEntry Permit: Invalid Name"
DEFAULT_PENALTY = "LAST WARNING - NO PENALTY"
DEFAULT_BACKGROUND = "#F3D7E6"
DEFAULT_FOREGROUND = "#BFA8A8"
DEFAULT_TEXT_COLOR = "#5A5559"
HEX_COLOR_PATTERN = re.compile(r"#([0-9a-fA-F]{6})")
LOGGER = logging.getLogger("render_citation")


class CitationValidationError(ValueError):
    """Validation error with a stable error code."""

    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code


@dataclass(frozen=True)
class CardConfig:
    """Validated configuration for a citation card.

    Odd dimensions are rounded up to even with a warning. Instances are
    immutable; derived spacing is never stored here and is
    recomputed from the config by ``service.geometry.compute_geometry``.
    """

    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    top_bottom_dot_size: int = 2
    side_dot_size: int = 6
    side_dot_spacing: int = 4
    separator_dot_size: int = 2
    barcode_width: int = 2
    barcode_height: int = 12
    font_size: int = 16
    barcode: Tuple[int, ...] = DEFAULT_BARCODE
    title: str = DEFAULT_TITLE
    reason: str = DEFAULT_REASON
    penalty: str = DEFAULT_PENALTY
    resize_reason: bool = False
    resize_limit: int | None = None
    moa_bg: str = DEFAULT_BACKGROUND
    moa_fg: str = DEFAULT_FOREGROUND
    moa_ft: str = DEFAULT_TEXT_COLOR

    def __post_init__(self) -> None:
        for name in ("width", "height"):
            object.__setattr__(self, name, normalize_dimension(getattr(self, name), name))
        for name in (
            "top_bottom_dot_size",
            "side_dot_size",
            "side_dot_spacing",
            "separator_dot_size",
            "barcode_width",
            "barcode_height",
            "font_size",
        ):
            value = getattr(self, name)
            if not is_int_value(value) or value <= 0:
                raise CitationValidationError(
                    INVALID_CONFIG_CODE, f"{name} must be a positive integer"
                )
        if not isinstance(self.barcode, tuple):
            raise CitationValidationError(
                INVALID_BARCODE_CODE, "barcode must be a tuple of bits"
            )
        validate_barcode(self.barcode)
        for name in ("title", "reason", "penalty"):
            if not isinstance(getattr(self, name), str):
                raise CitationValidationError(
                    INVALID_CONFIG_CODE, f"{name} must be a string"
                )
        if self.resize_limit is not None and not is_int_value(self.resize_limit):
            raise CitationValidationError(
                INVALID_CONFIG_CODE, "resize_limit must be an integer"
            )
        for name in ("moa_bg", "moa_fg", "moa_ft"):
            parse_hex_color_to_rgb(getattr(self, name))


def is_int_value(value: object) -> bool:
    """Return True for integers, excluding booleans."""
    return isinstance(value, int) and not isinstance(value, bool)


def normalize_dimension(value: object, name: str) -> int:
    """Validate a width/height value and round odd values up to even."""
    if not is_int_value(value):
        raise CitationValidationError(
            INVALID_DIMENSION_CODE, f"{name} {value!r} is not a number"
        )
    minimum = MIN_WIDTH if name == "width" else MIN_HEIGHT
    if value < minimum:
        raise CitationValidationError(
            INVALID_DIMENSION_CODE, f"{name} must be at least {minimum}"
        )
    if value % 2:
        LOGGER.warning(
            "%s: %s %d is not even, using %d", ODD_DIMENSION_CODE, name, value, value + 1
        )
        value += 1
    return value


def parse_dimension(text_value: str, name: str) -> int:
    """Parse a CLI dimension string into a normalized integer."""
    try:
        value = int(text_value.strip())
    except ValueError as exc:
        raise CitationValidationError(
            INVALID_DIMENSION_CODE, f"{name} {text_value!r} is not a number"
        ) from exc
    return normalize_dimension(value, name)


def validate_barcode(values: Iterable[object]) -> Tuple[int, ...]:
    """Return the barcode as a tuple, rejecting anything but ones and zeros."""
    bits = tuple(values)
    for bit in bits:
        if not is_int_value(bit) or bit not in (0, 1):
            raise CitationValidationError(
                INVALID_BARCODE_CODE, "barcode can only contain ones and zeros"
            )
    return bits


def parse_barcode(text_value: str) -> Tuple[int, ...]:
    """Parse ``10110`` or ``1,0,1,1,0`` into barcode bits."""
    cleaned = text_value.replace(",", "").replace(" ", "")
    if not cleaned:
        raise CitationValidationError(INVALID_BARCODE_CODE, "barcode is empty")
    bits: list[int] = []
    for character in cleaned:
        if character not in "01":
            raise CitationValidationError(
                INVALID_BARCODE_CODE,
                f"barcode can only contain ones and zeros: {text_value!r}",
            )
        bits.append(int(character))
    return tuple(bits)


def random_barcode(size: int, rng: random.Random) -> Tuple[int, ...]:
    """Build a random barcode biased towards empty bars."""
    return tuple(
        1 if rng.random() + rng.random() + rng.random() > 1.4 else 0
        for _ in range(size)
    )


def parse_hex_color_to_rgb(color_value: str) -> Tuple[int, int, int]:
    """Parse a ``#RRGGBB`` color token into an RGB tuple."""
    match_value = HEX_COLOR_PATTERN.fullmatch(str(color_value).strip())
    if not match_value:
        raise CitationValidationError(
            INVALID_COLOR_CODE, f"invalid color value: {color_value!r}"
        )
    rgb_hex = match_value.group(1)
    return (int(rgb_hex[0:2], 16), int(rgb_hex[2:4], 16), int(rgb_hex[4:6], 16))


def build_card_config(**overrides: object) -> CardConfig:
    """Build a CardConfig, accepting any iterable of bits for the barcode."""
    values = dict(overrides)
    if "barcode" in values:
        values["barcode"] = validate_barcode(values["barcode"])
    return CardConfig(**values)


def with_dimensions(
    config: CardConfig, width: int | None = None, height: int | None = None
) -> CardConfig:
    """Return a copy of the config with new, normalized dimensions."""
    return replace(
        config,
        width=config.width if width is None else width,
        height=config.height if height is None else height,
    )
