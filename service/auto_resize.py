"""Grow a citation card until its text fits."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import math
from typing import Callable, Tuple

from PIL import ImageFont

from domain.citation import CardConfig, with_dimensions
from service.geometry import GeometryProfile, compute_geometry
from service.text_fit import measure_text_height, measure_text_width, wrap_text

GROWTH_RATIO = 0.1
MIN_GROWTH_STEP = 2
MAX_RESIZE_ITERATIONS = 1000
RESIZE_LIMIT_CODE = "render_citation.resize.iteration_limit"
RESIZE_CLAMPED_CODE = "render_citation.resize.clamped"
LOGGER = logging.getLogger("render_citation.resize")


@dataclass(frozen=True)
class ResizeResult:
    """Outcome of auto-resizing a config."""

    config: CardConfig
    geometry: GeometryProfile
    iterations: int
    converged: bool
    clamped: bool


def compute_growth_step(overflow: float) -> int:
    """Return an even growth step covering a tenth of the overflow."""
    step = int(math.ceil(overflow * GROWTH_RATIO))
    step += step % 2
    return max(MIN_GROWTH_STEP, step)


def title_overflow(
    config: CardConfig, geometry: GeometryProfile, font: ImageFont.FreeTypeFont
) -> float:
    return measure_text_width(config.title, font) - geometry.title_max_width


def penalty_overflow(
    config: CardConfig, geometry: GeometryProfile, font: ImageFont.FreeTypeFont
) -> float:
    return measure_text_width(config.penalty, font) - geometry.title_max_width


def reason_overflow(
    config: CardConfig, geometry: GeometryProfile, font: ImageFont.FreeTypeFont
) -> float:
    wrapped = wrap_text(config.reason, font, geometry.reason_max_width)
    return measure_text_height(wrapped, font) - geometry.reason_max_height


def resolve_height_ceiling(config: CardConfig) -> int | None:
    """Return the resize limit when it applies to this config."""
    if config.resize_limit is None or config.resize_limit <= config.height:
        return None
    return config.resize_limit + config.resize_limit % 2


def auto_resize(
    config: CardConfig,
    font: ImageFont.FreeTypeFont,
    max_iterations: int = MAX_RESIZE_ITERATIONS,
) -> ResizeResult:
    """Grow width for title and penalty, then height for the wrapped reason.

    Geometry is recomputed after every step since the text budgets depend on
    the current dimensions. Dimensions only ever grow. When the iteration
    budget runs out the partially grown config is returned with
    ``converged`` set to False.
    """
    height_ceiling = resolve_height_ceiling(config)
    geometry = compute_geometry(config)
    iterations = 0
    clamped = False

    stages: Tuple[Tuple[str, Callable[..., float]], ...] = (
        ("width", title_overflow),
        ("width", penalty_overflow),
        ("height", reason_overflow),
    )
    for dimension, overflow_of in stages:
        overflow = overflow_of(config, geometry, font)
        while overflow > 0:
            if iterations >= max_iterations:
                LOGGER.warning(
                    "%s: stopped after %d iterations at %dx%d",
                    RESIZE_LIMIT_CODE,
                    iterations,
                    config.width,
                    config.height,
                )
                return ResizeResult(config, geometry, iterations, False, clamped)
            iterations += 1
            step = compute_growth_step(overflow)
            if dimension == "width":
                config = with_dimensions(config, width=config.width + step)
            else:
                new_height = config.height + step
                if height_ceiling is not None and new_height >= height_ceiling:
                    config = with_dimensions(config, height=height_ceiling)
                    geometry = compute_geometry(config)
                    clamped = overflow_of(config, geometry, font) > 0
                    if clamped:
                        LOGGER.info(
                            "%s: height clamped to %d", RESIZE_CLAMPED_CODE, height_ceiling
                        )
                    break
                config = with_dimensions(config, height=new_height)
            geometry = compute_geometry(config)
            overflow = overflow_of(config, geometry, font)

    return ResizeResult(config, geometry, iterations, True, clamped)
