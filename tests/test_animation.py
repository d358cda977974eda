"""Unit tests for the reveal timeline and GIF encoding."""

from __future__ import annotations

from io import BytesIO
from pathlib import Path

from PIL import Image, ImageSequence

from domain.citation import CardConfig, build_card_config
from service.animation import (
    HIDDEN_PAUSE_FRAMES,
    REVEALED_PAUSE_FRAMES,
    SEPARATOR_PAUSE_FRAMES,
    build_reveal_timeline,
    compose_frames,
    encode_gif,
    expected_timeline_length,
    render_animation,
)
from service.card_renderer import load_assets, render_card
from service.geometry import compute_geometry

ASSETS_DIR = Path(__file__).resolve().parents[1] / "assets"


def total_duration_ms(image: Image.Image) -> int:
    return sum(frame.info["duration"] for frame in ImageSequence.Iterator(image))


def longest_run(timeline: tuple[int, ...], value: int) -> int:
    best = current = 0
    for offset in timeline:
        current = current + 1 if offset == value else 0
        best = max(best, current)
    return best


def test_default_timeline_length() -> None:
    """366x160 at font size 16 yields a fixed frame count."""
    config = CardConfig(width=366, height=160, font_size=16)
    geometry = compute_geometry(config)
    timeline = build_reveal_timeline(config, geometry)
    assert len(timeline) == 335
    assert expected_timeline_length(config, geometry) == 335


def test_timeline_length_matches_formula_for_other_configs() -> None:
    for config in (
        build_card_config(height=300, font_size=20),
        build_card_config(width=500, height=222, side_dot_spacing=7),
    ):
        geometry = compute_geometry(config)
        assert len(build_reveal_timeline(config, geometry)) == expected_timeline_length(
            config, geometry
        )


def test_timeline_shape() -> None:
    config = CardConfig()
    timeline = build_reveal_timeline(config, compute_geometry(config))
    assert timeline[0] == 6
    assert timeline[-1] == 0
    assert max(timeline) == config.height
    assert longest_run(timeline, 36) >= SEPARATOR_PAUSE_FRAMES
    assert longest_run(timeline, 118) >= SEPARATOR_PAUSE_FRAMES
    assert longest_run(timeline, config.height) == REVEALED_PAUSE_FRAMES
    assert longest_run(timeline, 0) == HIDDEN_PAUSE_FRAMES + 1
    steps = {abs(right - left) for left, right in zip(timeline, timeline[1:])}
    assert steps <= {0, 2}


def test_timeline_is_deterministic() -> None:
    config = CardConfig()
    geometry = compute_geometry(config)
    assert build_reveal_timeline(config, geometry) == build_reveal_timeline(config, geometry)


def test_compose_frames_shifts_card() -> None:
    card_image = Image.new("RGBA", (120, 120), (255, 0, 0, 255))
    frames = list(compose_frames(card_image, [0, 20, 120]))
    assert len(frames) == 3
    assert frames[0].getpixel((10, 119))[3] == 0
    assert frames[1].getpixel((10, 99))[3] == 0
    assert frames[1].getpixel((10, 100)) == (255, 0, 0, 255)
    assert frames[2].getpixel((10, 0)) == (255, 0, 0, 255)


def test_encode_gif_produces_animation() -> None:
    card_image = Image.new("RGBA", (120, 120), (0, 0, 255, 255))
    data = encode_gif(compose_frames(card_image, [40, 80, 120]), 3, delay_ms=20)
    assert data.startswith(b"GIF89a")
    with Image.open(BytesIO(data)) as decoded:
        assert decoded.size == (120, 120)
        assert decoded.n_frames == 3
        assert total_duration_ms(decoded) == 60


def test_explicit_timeline_overrides_generated_one() -> None:
    card = render_card(CardConfig(), load_assets(str(ASSETS_DIR)))
    data = render_animation(card, timeline=[160, 80])
    with Image.open(BytesIO(data)) as decoded:
        assert decoded.n_frames == 2
        assert decoded.size == (366, 160)


def test_repeated_offsets_keep_their_duration() -> None:
    """Identical consecutive frames collapse but their delays add up."""
    card_image = Image.new("RGBA", (120, 120), (0, 0, 255, 255))
    data = encode_gif(compose_frames(card_image, [40, 40, 40, 80]), 4, delay_ms=10)
    with Image.open(BytesIO(data)) as decoded:
        assert decoded.n_frames == 2
        assert total_duration_ms(decoded) == 40


def test_default_animation_duration_covers_whole_timeline() -> None:
    config = CardConfig()
    card = render_card(config, load_assets(str(ASSETS_DIR)))
    data = render_animation(card, delay_ms=10)
    with Image.open(BytesIO(data)) as decoded:
        assert total_duration_ms(decoded) == 10 * expected_timeline_length(
            config, compute_geometry(config)
        )
