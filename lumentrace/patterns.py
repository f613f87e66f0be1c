"""
Procedural patterns for the ray tracer.

Implements:
- Stripes (alternating along x)
- Gradient (linear blend along x)
- Rings (concentric in the x-z plane)
- 3D checkers

A pattern is sampled in its own space: the world point is carried into the
shape's object space, then through the pattern's own transform.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Optional, TYPE_CHECKING
import math

from .vec3 import Color, Point3, BLACK, WHITE
from .transform import Transform

if TYPE_CHECKING:
    from .shapes import Shape


class Pattern(ABC):
    """Abstract base class for patterns."""

    def __init__(self, transform: Optional[Transform] = None):
        self.transform = transform if transform is not None else Transform.identity()

    @property
    def transform(self) -> Transform:
        return self._transform

    @transform.setter
    def transform(self, value: Transform) -> None:
        # Fail on assignment rather than on the first sample.
        value.inverse
        self._transform = value

    @abstractmethod
    def pattern_at(self, point: Point3) -> Color:
        """Get the pattern color at a point in pattern space.

        Args:
            point: Point already carried into pattern space

        Returns:
            Color at this location
        """
        pass

    def pattern_at_shape(self, shape: Shape, world_point: Point3) -> Color:
        """Sample the pattern at a world point on the given shape."""
        object_point = shape.world_to_object(world_point)
        pattern_point = self.transform.inverse.apply_point(object_point)
        return self.pattern_at(pattern_point)


class _TwoColorPattern(Pattern):
    """Shared constructor for patterns alternating between two colors."""

    def __init__(self, a: Color = WHITE, b: Color = BLACK, transform: Optional[Transform] = None):
        super().__init__(transform)
        self.a = a
        self.b = b

    def __repr__(self) -> str:
        return f"{type(self).__name__}(a={self.a}, b={self.b})"


class StripePattern(_TwoColorPattern):
    """Stripes of a and b alternating every unit along x."""

    def pattern_at(self, point: Point3) -> Color:
        if math.floor(point.x) % 2 == 0:
            return self.a
        return self.b


class GradientPattern(_TwoColorPattern):
    """Linear blend from a to b, repeating every unit along x."""

    def pattern_at(self, point: Point3) -> Color:
        fraction = point.x - math.floor(point.x)
        return self.a + (self.b - self.a) * fraction


class RingPattern(_TwoColorPattern):
    """Concentric rings around the y axis."""

    def pattern_at(self, point: Point3) -> Color:
        if math.floor(math.sqrt(point.x * point.x + point.z * point.z)) % 2 == 0:
            return self.a
        return self.b


class CheckersPattern(_TwoColorPattern):
    """A 3D checker pattern with unit cells."""

    def pattern_at(self, point: Point3) -> Color:
        if (math.floor(point.x) + math.floor(point.y) + math.floor(point.z)) % 2 == 0:
            return self.a
        return self.b
