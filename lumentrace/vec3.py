"""
Vector3 class for 3D math operations.

This is the fundamental building block of the ray tracer, used for:
- Points in 3D space
- Direction vectors
- RGB color values

Also home to the shared floating point tolerance (``Margin``) that every
degenerate-case check in the tracer compares against.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Union
import numpy as np


@dataclass(frozen=True)
class Margin:
    """Floating point tolerance used for approximate comparisons.

    Passed explicitly through intersection, normal and shading code so that
    tests (or a scene file) can change precision without touching globals.
    """
    epsilon: float = 1e-4

    def __post_init__(self):
        if not self.epsilon > 0:
            raise ValueError(f"epsilon must be positive, got {self.epsilon}")

    def is_zero(self, a: float) -> bool:
        return abs(a) < self.epsilon


DEFAULT_MARGIN = Margin()


class Vec3:
    """A 3D vector class supporting common vector operations.

    Uses numpy internally for efficient computation while providing
    a clean, Pythonic API.
    """

    __slots__ = ('_data',)

    def __init__(self, x: float = 0.0, y: float = 0.0, z: float = 0.0):
        self._data = np.array([x, y, z], dtype=np.float64)

    @classmethod
    def from_array(cls, arr: np.ndarray) -> Vec3:
        """Create Vec3 from numpy array."""
        v = cls.__new__(cls)
        v._data = np.asarray(arr, dtype=np.float64)
        return v

    @property
    def x(self) -> float:
        return float(self._data[0])

    @property
    def y(self) -> float:
        return float(self._data[1])

    @property
    def z(self) -> float:
        return float(self._data[2])

    # Aliases for color operations
    @property
    def r(self) -> float:
        return self.x

    @property
    def g(self) -> float:
        return self.y

    @property
    def b(self) -> float:
        return self.z

    def __repr__(self) -> str:
        return f"Vec3({self.x:.5f}, {self.y:.5f}, {self.z:.5f})"

    def __eq__(self, other: object) -> bool:
        # Approximate, so Vec3 is unhashable
        if not isinstance(other, Vec3):
            return NotImplemented
        return np.allclose(self._data, other._data)

    def __neg__(self) -> Vec3:
        return Vec3.from_array(-self._data)

    # Vector operands combine component-wise (the Hadamard product for
    # colors); scalars broadcast.

    def __add__(self, other: Operand) -> Vec3:
        return Vec3.from_array(self._data + _operand(other))

    __radd__ = __add__

    def __sub__(self, other: Operand) -> Vec3:
        return Vec3.from_array(self._data - _operand(other))

    def __mul__(self, other: Operand) -> Vec3:
        return Vec3.from_array(self._data * _operand(other))

    __rmul__ = __mul__

    def __truediv__(self, other: Operand) -> Vec3:
        return Vec3.from_array(self._data / _operand(other))

    def __getitem__(self, index: int) -> float:
        return float(self._data[index])

    def __iter__(self):
        return (float(c) for c in self._data)

    def length(self) -> float:
        """Return the magnitude (length) of the vector."""
        return float(np.linalg.norm(self._data))

    def length_squared(self) -> float:
        """Return the squared magnitude (avoids sqrt for comparisons)."""
        return float(np.dot(self._data, self._data))

    def normalize(self) -> Vec3:
        """Return a unit vector in the same direction."""
        length = self.length()
        if length == 0:
            return Vec3(0, 0, 0)
        return Vec3.from_array(self._data / length)

    def dot(self, other: Vec3) -> float:
        """Compute dot product with another vector."""
        return float(np.dot(self._data, other._data))

    def cross(self, other: Vec3) -> Vec3:
        """Compute cross product with another vector."""
        return Vec3.from_array(np.cross(self._data, other._data))

    def reflect(self, normal: Vec3) -> Vec3:
        """Reflect this vector around the given normal."""
        return self - normal * 2 * self.dot(normal)

    def approx_eq(self, other: Vec3, margin: Margin = DEFAULT_MARGIN) -> bool:
        """Component-wise comparison within the margin's epsilon."""
        return bool(np.all(np.abs(self._data - other._data) < margin.epsilon))

    def to_array(self) -> np.ndarray:
        """Return the underlying numpy array (copy)."""
        return self._data.copy()


Operand = Union[Vec3, float]


def _operand(other: Operand):
    """The numpy view of a vector operand; scalars pass through."""
    if isinstance(other, Vec3):
        return other._data
    return other


# Convenience type aliases
Point3 = Vec3
Color = Vec3

BLACK = Color(0.0, 0.0, 0.0)
WHITE = Color(1.0, 1.0, 1.0)
