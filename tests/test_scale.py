"""Unit tests for resolution and page size arithmetic."""

from __future__ import annotations

import math

import pytest

from scanbind.errors import InvalidSettingError, ResizeError
from scanbind.scale import (
    POINTS_PER_INCH,
    ScaleConfig,
    compute_page_spec,
    compute_scale,
    round_half_up,
)


class TestComputeScale:
    def test_output_dpi_is_source_over_divisor(self):
        scale = compute_scale(source_dpi=300, divisor=2)
        assert scale.output_dpi == 150

    def test_output_dpi_is_not_rounded(self):
        scale = compute_scale(source_dpi=600, divisor=7)
        assert scale.output_dpi == pytest.approx(600 / 7)

    def test_fractional_divisor(self):
        scale = compute_scale(source_dpi=300, divisor=1.5)
        assert scale.output_dpi == pytest.approx(200)

    def test_numeric_strings_accepted(self):
        scale = compute_scale(source_dpi="300", divisor="2")
        assert scale == ScaleConfig(source_dpi=300.0, divisor=2.0)

    @pytest.mark.parametrize("value", [0, -1, math.inf, math.nan])
    def test_rejects_bad_dpi(self, value):
        with pytest.raises(InvalidSettingError, match="Source resolution"):
            compute_scale(source_dpi=value, divisor=2)

    @pytest.mark.parametrize("value", [0, -0.5, "abc", None])
    def test_rejects_bad_divisor(self, value):
        with pytest.raises(InvalidSettingError, match="Divisor"):
            compute_scale(source_dpi=300, divisor=value)

    def test_config_is_immutable(self):
        scale = compute_scale(source_dpi=300, divisor=2)
        with pytest.raises(AttributeError):
            scale.divisor = 3  # type: ignore[misc]


class TestRoundHalfUp:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [(0.4, 0), (0.5, 1), (1.5, 2), (2.5, 3), (2.49, 2), (-2.5, -3), (7.0, 7)],
    )
    def test_rounds_halves_away_from_zero(self, value, expected):
        assert round_half_up(value) == expected


class TestComputePageSpec:
    def test_reference_example(self):
        scale = compute_scale(source_dpi=300, divisor=2)
        spec = compute_page_spec(600, 800, scale)

        assert (spec.width_px, spec.height_px) == (300, 400)
        assert spec.width_pts == pytest.approx(144)
        assert spec.height_pts == pytest.approx(192)

    def test_divisor_one_keeps_size(self):
        scale = compute_scale(source_dpi=72, divisor=1)
        spec = compute_page_spec(612, 792, scale)

        assert (spec.width_px, spec.height_px) == (612, 792)
        assert (spec.width_pts, spec.height_pts) == pytest.approx((612, 792))

    def test_odd_dimensions_round_half_up(self):
        scale = compute_scale(source_dpi=300, divisor=2)
        spec = compute_page_spec(601, 799, scale)

        assert (spec.width_px, spec.height_px) == (301, 400)

    @pytest.mark.parametrize("divisor", [1, 2, 3, 4.5, 10])
    @pytest.mark.parametrize(("width", "height"), [(2480, 3508), (1001, 77)])
    def test_points_follow_resized_pixels(self, divisor, width, height):
        scale = compute_scale(source_dpi=300, divisor=divisor)
        spec = compute_page_spec(width, height, scale)

        assert spec.width_px == round_half_up(width / divisor)
        assert spec.height_px == round_half_up(height / divisor)
        assert spec.width_pts == pytest.approx(
            spec.width_px * POINTS_PER_INCH / scale.output_dpi
        )
        assert spec.height_pts == pytest.approx(
            spec.height_px * POINTS_PER_INCH / scale.output_dpi
        )

    def test_dimension_rounding_to_zero_raises(self):
        scale = compute_scale(source_dpi=300, divisor=100)

        with pytest.raises(ResizeError, match="0x"):
            compute_page_spec(40, 4000, scale)

    def test_dimension_rounding_up_to_one_is_kept(self):
        scale = compute_scale(source_dpi=300, divisor=100)
        spec = compute_page_spec(50, 4000, scale)

        assert (spec.width_px, spec.height_px) == (1, 40)
