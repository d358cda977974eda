"""Unit tests for derived card geometry."""

from __future__ import annotations

import dataclasses

from domain.citation import CardConfig, with_dimensions
from service.geometry import GeometryProfile, barcode_left, compute_geometry


def test_default_geometry_values() -> None:
    """Default config produces the classic card offsets."""
    geometry = compute_geometry(CardConfig())
    assert geometry == GeometryProfile(
        side_dots_from_left=4,
        side_dots_from_top=6,
        side_dots_from_right=8,
        separator_from_left=16,
        separator_from_right=20,
        top_separator_from_top=34,
        bottom_separator_from_bottom=44,
        barcode_from_right=22,
        barcode_from_top=6,
        text_from_left=22,
        title_from_top=20,
        title_max_width=278,
        reason_from_top=56,
        reason_max_width=330,
        reason_max_height=66,
        penalty_from_bottom=18,
    )


def test_geometry_is_referentially_transparent() -> None:
    config = CardConfig(font_size=20, barcode=(1, 1, 0))
    assert compute_geometry(config) == compute_geometry(config)


def test_geometry_follows_dimension_changes() -> None:
    """Budgets track the config they are computed from, never a stale copy."""
    config = CardConfig()
    before = compute_geometry(config)
    after = compute_geometry(with_dimensions(config, width=500, height=300))
    assert after.title_max_width == before.title_max_width + 134
    assert after.reason_max_width == before.reason_max_width + 134
    assert after.reason_max_height == before.reason_max_height + 140
    assert after.top_separator_from_top == before.top_separator_from_top


def test_title_budget_shrinks_with_barcode_length() -> None:
    short = compute_geometry(CardConfig(barcode=(1, 0)))
    long = compute_geometry(CardConfig(barcode=(1, 0) * 10))
    assert short.title_max_width - long.title_max_width == 18 * 2


def test_font_size_moves_separators_and_text() -> None:
    geometry = compute_geometry(dataclasses.replace(CardConfig(), font_size=10))
    assert geometry.top_separator_from_top == 22
    assert geometry.bottom_separator_from_bottom == 32
    assert geometry.title_from_top == 14
    assert geometry.reason_from_top == 22 + 2 + 10 + 4
    assert geometry.penalty_from_bottom == 12


def test_barcode_left_edge() -> None:
    config = CardConfig()
    assert barcode_left(config, compute_geometry(config)) == 366 - 22 - 22
