"""Unit tests for citation config validation and parsing."""

from __future__ import annotations

import dataclasses
import logging
import random

import pytest

from domain.citation import (
    DEFAULT_BARCODE,
    INVALID_BARCODE_CODE,
    INVALID_COLOR_CODE,
    INVALID_CONFIG_CODE,
    INVALID_DIMENSION_CODE,
    ODD_DIMENSION_CODE,
    CardConfig,
    CitationValidationError,
    build_card_config,
    normalize_dimension,
    parse_barcode,
    parse_dimension,
    parse_hex_color_to_rgb,
    random_barcode,
    validate_barcode,
    with_dimensions,
)


def test_defaults_match_classic_card() -> None:
    """Default config describes the classic 366x160 card."""
    config = CardConfig()
    assert (config.width, config.height) == (366, 160)
    assert config.font_size == 16
    assert config.barcode == DEFAULT_BARCODE
    assert "\n" in config.reason


def test_odd_width_is_incremented(caplog: pytest.LogCaptureFixture) -> None:
    """Odd dimensions are rounded up with a warning instead of failing."""
    with caplog.at_level(logging.WARNING, logger="render_citation"):
        config = build_card_config(width=365, height=161)
    assert config.width == 366
    assert config.height == 162
    assert ODD_DIMENSION_CODE in caplog.text


def test_even_dimension_is_unchanged() -> None:
    assert normalize_dimension(200, "width") == 200


@pytest.mark.parametrize("value", ["366", 366.0, None, True])
def test_non_integer_dimension_rejected(value: object) -> None:
    with pytest.raises(CitationValidationError) as error:
        normalize_dimension(value, "width")
    assert error.value.code == INVALID_DIMENSION_CODE


def test_dimension_below_minimum_rejected() -> None:
    with pytest.raises(CitationValidationError) as error:
        build_card_config(width=98)
    assert error.value.code == INVALID_DIMENSION_CODE
    with pytest.raises(CitationValidationError):
        build_card_config(height=108)


def test_direct_construction_rounds_odd_dimensions(caplog: pytest.LogCaptureFixture) -> None:
    """The frozen config never holds odd dimensions, however it is built."""
    with caplog.at_level(logging.WARNING, logger="render_citation"):
        assert CardConfig(width=365).width == 366
        assert dataclasses.replace(CardConfig(), height=161).height == 162
    assert caplog.text.count(ODD_DIMENSION_CODE) == 2


def test_direct_construction_rejects_bad_dimensions() -> None:
    for overrides in ({"width": 98}, {"height": "160"}, {"width": 366.0}):
        with pytest.raises(CitationValidationError) as error:
            CardConfig(**overrides)
        assert error.value.code == INVALID_DIMENSION_CODE


def test_parse_dimension_rejects_text() -> None:
    with pytest.raises(CitationValidationError) as error:
        parse_dimension("wide", "width")
    assert error.value.code == INVALID_DIMENSION_CODE
    assert parse_dimension(" 201 ", "height") == 202


def test_barcode_with_two_fails_validation() -> None:
    with pytest.raises(CitationValidationError) as error:
        build_card_config(barcode=[1, 0, 2, 1])
    assert error.value.code == INVALID_BARCODE_CODE


def test_barcode_list_is_stored_as_tuple() -> None:
    config = build_card_config(barcode=[1, 0, 1, 1])
    assert config.barcode == (1, 0, 1, 1)
    assert validate_barcode([0, 1]) == (0, 1)


def test_parse_barcode_formats() -> None:
    assert parse_barcode("1011") == (1, 0, 1, 1)
    assert parse_barcode("1, 0, 1") == (1, 0, 1)
    with pytest.raises(CitationValidationError) as error:
        parse_barcode("1021")
    assert error.value.code == INVALID_BARCODE_CODE
    with pytest.raises(CitationValidationError):
        parse_barcode("")


def test_random_barcode_is_seeded() -> None:
    first = random_barcode(11, random.Random(3))
    second = random_barcode(11, random.Random(3))
    assert first == second
    assert len(first) == 11
    assert set(first) <= {0, 1}


def test_parse_hex_color() -> None:
    assert parse_hex_color_to_rgb("#F3D7E6") == (0xF3, 0xD7, 0xE6)
    with pytest.raises(CitationValidationError) as error:
        parse_hex_color_to_rgb("pink")
    assert error.value.code == INVALID_COLOR_CODE


def test_invalid_color_rejected_on_construction() -> None:
    with pytest.raises(CitationValidationError) as error:
        CardConfig(moa_fg="#12345")
    assert error.value.code == INVALID_COLOR_CODE


def test_non_positive_spacing_rejected() -> None:
    with pytest.raises(CitationValidationError) as error:
        CardConfig(font_size=0)
    assert error.value.code == INVALID_CONFIG_CODE


def test_config_is_immutable() -> None:
    config = CardConfig()
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.width = 400  # type: ignore[misc]


def test_with_dimensions_returns_new_config() -> None:
    config = CardConfig()
    resized = with_dimensions(config, width=401)
    assert resized.width == 402
    assert resized.height == config.height
    assert config.width == 366
