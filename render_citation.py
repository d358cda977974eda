#!/usr/bin/env -S uv run
# /// script
# requires-python = ">=3.11"
# dependencies = [
#   "pillow>=10",
#   "numpy>=1.26"
# ]
# ///
"""Render a citation card as a PNG or an animated sliding-reveal GIF."""

from __future__ import annotations

import argparse
import logging
import os
import random
import sys
from dataclasses import dataclass
from typing import Sequence

from domain.citation import (
    DEFAULT_BACKGROUND,
    DEFAULT_BARCODE,
    DEFAULT_FOREGROUND,
    DEFAULT_TEXT_COLOR,
    INVALID_CONFIG_CODE,
    CardConfig,
    CitationValidationError,
    build_card_config,
    parse_barcode,
    parse_dimension,
    random_barcode,
)
from service.animation import DEFAULT_DELAY_MS, render_animation
from service.card_renderer import CitationAssets, encode_png, load_assets, render_card

DEFAULT_DATA_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "assets")
OUTPUT_WRITE_CODE = "render_citation.output.write_error"
RANDOM_BARCODE = "random"
LOGGER = logging.getLogger("render_citation")


class CitationPipelineError(RuntimeError):
    """Runtime error with a stable error code."""

    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code


@dataclass(frozen=True)
class RenderRequest:
    """Parsed CLI request and runtime options."""

    config: CardConfig
    output_path: str
    gif: bool
    delay_ms: int
    tint_logo: bool
    data_dir: str
    font_file: str | None
    logo_file: str | None


def configure_logging() -> None:
    """Configure logging for CLI output."""
    logging.basicConfig(level=logging.INFO, format="%(message)s")


def parse_args(argv: Sequence[str]) -> RenderRequest:
    """Parse CLI arguments into a RenderRequest."""
    parser = argparse.ArgumentParser(prog="render_citation.py", add_help=True)
    parser.add_argument("--output", required=True)
    parser.add_argument("--width", default=None)
    parser.add_argument("--height", default=None)
    parser.add_argument("--title", required=True)
    parser.add_argument("--reason", required=True, help="use \\n for line breaks")
    parser.add_argument("--penalty", required=True)
    parser.add_argument(
        "--barcode", required=True, help="bits such as 10101101, or random"
    )
    parser.add_argument("--seed", type=int, default=None, help="seed for --barcode random")
    parser.add_argument("--resize", action="store_true")
    parser.add_argument("--resize-limit", type=int, default=None)
    parser.add_argument("--gif", action="store_true")
    parser.add_argument("--delay-ms", type=int, default=DEFAULT_DELAY_MS)
    parser.add_argument("--data-dir", default=DEFAULT_DATA_DIR)
    parser.add_argument("--font-file", default=None)
    parser.add_argument("--logo-file", default=None)
    parser.add_argument("--tint-logo", action="store_true")
    parser.add_argument("--background", default=DEFAULT_BACKGROUND)
    parser.add_argument("--foreground", default=DEFAULT_FOREGROUND)
    parser.add_argument("--text-color", default=DEFAULT_TEXT_COLOR)

    parsed = parser.parse_args(argv)
    if parsed.resize_limit is not None and not parsed.resize:
        raise CitationValidationError(
            INVALID_CONFIG_CODE, "resize-limit requires resize"
        )
    if parsed.delay_ms <= 0:
        raise CitationValidationError(INVALID_CONFIG_CODE, "delay-ms must be positive")

    overrides: dict[str, object] = {
        "title": parsed.title,
        "reason": parsed.reason.replace("\\n", "\n"),
        "penalty": parsed.penalty,
        "resize_reason": parsed.resize,
        "resize_limit": parsed.resize_limit,
        "moa_bg": parsed.background,
        "moa_fg": parsed.foreground,
        "moa_ft": parsed.text_color,
    }
    if parsed.width is not None:
        overrides["width"] = parse_dimension(parsed.width, "width")
    if parsed.height is not None:
        overrides["height"] = parse_dimension(parsed.height, "height")
    if parsed.barcode == RANDOM_BARCODE:
        overrides["barcode"] = random_barcode(len(DEFAULT_BARCODE), random.Random(parsed.seed))
    else:
        overrides["barcode"] = parse_barcode(parsed.barcode)

    return RenderRequest(
        config=build_card_config(**overrides),
        output_path=parsed.output,
        gif=parsed.gif,
        delay_ms=parsed.delay_ms,
        tint_logo=parsed.tint_logo,
        data_dir=parsed.data_dir,
        font_file=parsed.font_file,
        logo_file=parsed.logo_file,
    )


def render(request: RenderRequest, assets: CitationAssets) -> bytes:
    """Render the requested card into an encoded image buffer."""
    card = render_card(request.config, assets, tint=request.tint_logo)
    if request.gif:
        return render_animation(card, delay_ms=request.delay_ms)
    return encode_png(card)


def write_output(output_path: str, data: bytes) -> None:
    """Write the encoded image to disk."""
    try:
        with open(output_path, "wb") as file_handle:
            file_handle.write(data)
    except OSError as exc:
        raise CitationPipelineError(
            OUTPUT_WRITE_CODE, f"failed to write {output_path}: {exc.strerror}"
        ) from exc


def main() -> int:
    """CLI entrypoint."""
    configure_logging()

    try:
        request = parse_args(sys.argv[1:])
        assets = load_assets(request.data_dir, request.font_file, request.logo_file)
        data = render(request, assets)
        write_output(request.output_path, data)
        LOGGER.info("render_citation.output: wrote %d bytes to %s", len(data), request.output_path)
        return 0
    except CitationValidationError as exc:
        LOGGER.error("%s: %s", exc.code, str(exc).strip())
        return 1
    except CitationPipelineError as exc:
        LOGGER.error("%s: %s", exc.code, str(exc).strip())
        return 1
    except Exception as exc:
        LOGGER.error("render_citation.unhandled_error: %s", str(exc).strip())
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
