"""Tests for scale descriptor parsing.

Verifies:
    - All four grammars (D, D/D, DxD, D/DxD/D)
    - Shrink prefix and effective ratios
    - Rejection order: syntax, then direction, then sign
    - Zero denominators and non-finite factors

Run: pytest tests/test_scale.py -v
"""
import pytest

from pnmdump.raster.errors import (
    InconsistentDirectionError,
    NonPositiveScaleError,
    ScaleParseError,
    ScaleSyntaxError,
)
from pnmdump.raster.scale import ScaleDirection, ScaleFactor, parse_scale


class TestGrammars:
    """Accepted descriptor forms."""

    @pytest.mark.parametrize("descriptor, expected", [
        ("2", (2.0, 2.0)),
        ("0.5", (0.5, 0.5)),
        (".25", (0.25, 0.25)),
        ("1", (1.0, 1.0)),
        ("1/2", (0.5, 0.5)),
        ("3/2", (1.5, 1.5)),
        ("2x3", (2.0, 3.0)),
        ("0.5x0.25", (0.5, 0.25)),
        ("3/2x5/4", (1.5, 1.25)),
        ("1e0", (1.0, 1.0)),
    ])
    def test_factors(self, descriptor, expected):
        factor = parse_scale(descriptor)
        assert (factor.w_scale, factor.h_scale) == expected
        assert factor.direction is ScaleDirection.ENLARGE

    def test_unit_scale_is_identity_ratio(self):
        assert parse_scale("1").ratios() == (1.0, 1.0)

    def test_equal_per_axis_and_uniform(self):
        assert parse_scale("2x2") == parse_scale("2")


class TestShrinkPrefix:
    """The ``m`` prefix requests shrinking."""

    def test_direction(self):
        assert parse_scale("m2").direction is ScaleDirection.SHRINK

    def test_whole_factor_is_inverted(self):
        assert parse_scale("m2").ratios() == (0.5, 0.5)

    def test_fraction_used_as_written(self):
        assert parse_scale("m1/2").ratios() == (0.5, 0.5)

    def test_per_axis(self):
        assert parse_scale("m2x4").ratios() == (0.5, 0.25)

    def test_enlarge_ratios_unchanged(self):
        assert ScaleFactor(2.0, 3.0).ratios() == (2.0, 3.0)

    def test_bare_prefix_is_syntax_error(self):
        with pytest.raises(ScaleSyntaxError):
            parse_scale("m")


class TestRejection:
    """Invalid descriptors."""

    @pytest.mark.parametrize("descriptor", [
        "", "abc", "2x", "x2", "1/2x3", "2 x 3", "2,5", "2X3", "1//2", "2x3x4", "M2",
    ])
    def test_syntax(self, descriptor):
        with pytest.raises(ScaleSyntaxError):
            parse_scale(descriptor)

    @pytest.mark.parametrize("descriptor", ["1/0", "1/2x3/0", "0/0"])
    def test_zero_denominator(self, descriptor):
        with pytest.raises(ScaleSyntaxError):
            parse_scale(descriptor)

    def test_non_finite(self):
        with pytest.raises(ScaleSyntaxError):
            parse_scale("1e999")

    @pytest.mark.parametrize("descriptor", ["2x0.5", "0.5x2", "3/2x1/2"])
    def test_inconsistent_direction(self, descriptor):
        with pytest.raises(InconsistentDirectionError):
            parse_scale(descriptor)

    @pytest.mark.parametrize("descriptor", ["0", "-2", "0x0", "1x0", "-1/2"])
    def test_non_positive(self, descriptor):
        with pytest.raises(NonPositiveScaleError):
            parse_scale(descriptor)

    def test_direction_checked_before_sign(self):
        # 2 enlarges while -1 shrinks
        with pytest.raises(InconsistentDirectionError):
            parse_scale("2x-1")

    def test_errors_are_value_errors(self):
        with pytest.raises(ValueError):
            parse_scale("nope")
        assert issubclass(ScaleParseError, ValueError)
