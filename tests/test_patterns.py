"""Tests for procedural patterns."""

import pytest

from lumentrace.vec3 import Point3, Color, BLACK, WHITE
from lumentrace.transform import Transform, NonInvertibleTransformError
from lumentrace.patterns import (
    Pattern, StripePattern, GradientPattern, RingPattern, CheckersPattern
)
from lumentrace.shapes import Sphere, Group


class PointPattern(Pattern):
    """Returns the pattern space point as a color, to expose the transforms."""

    def pattern_at(self, point):
        return Color(point.x, point.y, point.z)


class TestPatternTransforms:
    """Test how world points reach pattern space."""

    def test_default_transform(self):
        assert PointPattern().transform == Transform.identity()

    def test_singular_transform_rejected(self):
        with pytest.raises(NonInvertibleTransformError):
            PointPattern(Transform.scaling(0, 0, 0))

    def test_object_transform(self):
        shape = Sphere(Transform.scaling(2, 2, 2))
        c = PointPattern().pattern_at_shape(shape, Point3(2, 3, 4))
        assert c == Color(1, 1.5, 2)

    def test_pattern_transform(self):
        shape = Sphere()
        c = PointPattern(Transform.scaling(2, 2, 2)).pattern_at_shape(shape, Point3(2, 3, 4))
        assert c == Color(1, 1.5, 2)

    def test_both_transforms(self):
        shape = Sphere(Transform.scaling(2, 2, 2))
        pattern = PointPattern(Transform.translation(0.5, 1, 1.5))
        c = pattern.pattern_at_shape(shape, Point3(2.5, 3, 3.5))
        assert c == Color(0.75, 0.5, 0.25)

    def test_group_transforms_apply(self):
        shape = Sphere(Transform.translation(1, 0, 0))
        g = Group([shape], transform=Transform.scaling(2, 2, 2))
        c = PointPattern().pattern_at_shape(shape, Point3(4, 2, 2))
        assert c == Color(1, 1, 1)
        assert shape.parent is g


class TestStripePattern:
    """Test StripePattern."""

    def test_default_colors(self):
        p = StripePattern()
        assert p.a == WHITE
        assert p.b == BLACK

    def test_constant_in_y_and_z(self):
        p = StripePattern(WHITE, BLACK)
        for point in (Point3(0, 0, 0), Point3(0, 1, 0), Point3(0, 2, 0),
                      Point3(0, 0, 1), Point3(0, 0, 2)):
            assert p.pattern_at(point) == WHITE

    @pytest.mark.parametrize("x,expected", [
        (0, WHITE), (0.9, WHITE), (1, BLACK), (-0.1, BLACK), (-1, BLACK), (-1.1, WHITE),
    ])
    def test_alternates_in_x(self, x, expected):
        assert StripePattern(WHITE, BLACK).pattern_at(Point3(x, 0, 0)) == expected

    def test_with_object_transform(self):
        shape = Sphere(Transform.scaling(2, 2, 2))
        assert StripePattern(WHITE, BLACK).pattern_at_shape(shape, Point3(1.5, 0, 0)) == WHITE

    def test_with_pattern_transform(self):
        p = StripePattern(WHITE, BLACK, Transform.scaling(2, 2, 2))
        assert p.pattern_at_shape(Sphere(), Point3(1.5, 0, 0)) == WHITE

    def test_with_both_transforms(self):
        shape = Sphere(Transform.scaling(2, 2, 2))
        p = StripePattern(WHITE, BLACK, Transform.translation(0.5, 0, 0))
        assert p.pattern_at_shape(shape, Point3(2.5, 0, 0)) == WHITE


class TestGradientPattern:
    """Test GradientPattern."""

    @pytest.mark.parametrize("x,expected", [
        (0, (1, 1, 1)),
        (0.25, (0.75, 0.75, 0.75)),
        (0.5, (0.5, 0.5, 0.5)),
        (0.75, (0.25, 0.25, 0.25)),
    ])
    def test_linear_interpolation(self, x, expected):
        p = GradientPattern(WHITE, BLACK)
        assert p.pattern_at(Point3(x, 0, 0)) == Color(*expected)


class TestRingPattern:
    """Test RingPattern."""

    def test_extends_in_x_and_z(self):
        p = RingPattern(WHITE, BLACK)
        assert p.pattern_at(Point3(0, 0, 0)) == WHITE
        assert p.pattern_at(Point3(1, 0, 0)) == BLACK
        assert p.pattern_at(Point3(0, 0, 1)) == BLACK
        assert p.pattern_at(Point3(0.708, 0, 0.708)) == BLACK


class TestCheckersPattern:
    """Test CheckersPattern."""

    def test_repeats_in_x(self):
        p = CheckersPattern(WHITE, BLACK)
        assert p.pattern_at(Point3(0, 0, 0)) == WHITE
        assert p.pattern_at(Point3(0.99, 0, 0)) == WHITE
        assert p.pattern_at(Point3(1.01, 0, 0)) == BLACK

    def test_repeats_in_y(self):
        p = CheckersPattern(WHITE, BLACK)
        assert p.pattern_at(Point3(0, 0.99, 0)) == WHITE
        assert p.pattern_at(Point3(0, 1.01, 0)) == BLACK

    def test_repeats_in_z(self):
        p = CheckersPattern(WHITE, BLACK)
        assert p.pattern_at(Point3(0, 0, 0.99)) == WHITE
        assert p.pattern_at(Point3(0, 0, 1.01)) == BLACK
