"""
Affine transforms as 4x4 matrices.

Every shape and pattern carries a Transform that maps its local space into
its parent's space. The inverse and inverse-transpose are needed on every ray
and normal, so both are computed once and cached.

Example:
    >>> t = Transform.identity().rotate_x(math.pi / 2).scale(5, 5, 5).translate(10, 5, 7)
    >>> t.apply_point(Point3(1, 0, 1))
    Vec3(15.00000, 0.00000, 7.00000)
"""

from __future__ import annotations
import math
from typing import Optional

import numpy as np

from .vec3 import Vec3, Point3


class NonInvertibleTransformError(ValueError):
    """Raised when the inverse of a singular matrix is requested."""
    pass


class Transform:
    """An immutable 4x4 affine transformation matrix."""

    __slots__ = ('_matrix', '_inverse', '_inverse_transpose')

    def __init__(self, matrix=None):
        if matrix is None:
            matrix = np.identity(4)
        m = np.array(matrix, dtype=np.float64)
        if m.shape != (4, 4):
            raise ValueError(f"Transform needs a 4x4 matrix, got shape {m.shape}")
        m.setflags(write=False)
        self._matrix = m
        self._inverse: Optional[Transform] = None
        self._inverse_transpose: Optional[Transform] = None

    # Constructors

    @classmethod
    def identity(cls) -> Transform:
        return cls()

    @classmethod
    def translation(cls, x: float, y: float, z: float) -> Transform:
        m = np.identity(4)
        m[:3, 3] = (x, y, z)
        return cls(m)

    @classmethod
    def scaling(cls, x: float, y: float, z: float) -> Transform:
        return cls(np.diag([x, y, z, 1.0]))

    @classmethod
    def rotation_x(cls, radians: float) -> Transform:
        c, s = math.cos(radians), math.sin(radians)
        return cls([
            [1, 0, 0, 0],
            [0, c, -s, 0],
            [0, s, c, 0],
            [0, 0, 0, 1],
        ])

    @classmethod
    def rotation_y(cls, radians: float) -> Transform:
        c, s = math.cos(radians), math.sin(radians)
        return cls([
            [c, 0, s, 0],
            [0, 1, 0, 0],
            [-s, 0, c, 0],
            [0, 0, 0, 1],
        ])

    @classmethod
    def rotation_z(cls, radians: float) -> Transform:
        c, s = math.cos(radians), math.sin(radians)
        return cls([
            [c, -s, 0, 0],
            [s, c, 0, 0],
            [0, 0, 1, 0],
            [0, 0, 0, 1],
        ])

    @classmethod
    def shearing(cls, xy: float, xz: float, yx: float, yz: float, zx: float, zy: float) -> Transform:
        """Shear each axis in proportion to the other two.

        ``xy`` moves x in proportion to y, ``xz`` moves x in proportion to z,
        and so on.
        """
        return cls([
            [1, xy, xz, 0],
            [yx, 1, yz, 0],
            [zx, zy, 1, 0],
            [0, 0, 0, 1],
        ])

    @classmethod
    def view_transform(cls, from_point: Point3, to: Point3, up: Vec3) -> Transform:
        """Orient the world relative to an eye at from_point looking at to.

        Args:
            from_point: Eye position
            to: Point the eye looks at
            up: Approximate up direction (need not be orthogonal)

        Returns:
            Transform moving the world so the eye sits at the origin looking down -z
        """
        forward = (to - from_point).normalize()
        left = forward.cross(up.normalize())
        true_up = left.cross(forward)
        orientation = cls([
            [left.x, left.y, left.z, 0],
            [true_up.x, true_up.y, true_up.z, 0],
            [-forward.x, -forward.y, -forward.z, 0],
            [0, 0, 0, 1],
        ])
        return orientation @ cls.translation(-from_point.x, -from_point.y, -from_point.z)

    # Fluent chaining, in application order

    def translate(self, x: float, y: float, z: float) -> Transform:
        return Transform.translation(x, y, z) @ self

    def scale(self, x: float, y: float, z: float) -> Transform:
        return Transform.scaling(x, y, z) @ self

    def rotate_x(self, radians: float) -> Transform:
        return Transform.rotation_x(radians) @ self

    def rotate_y(self, radians: float) -> Transform:
        return Transform.rotation_y(radians) @ self

    def rotate_z(self, radians: float) -> Transform:
        return Transform.rotation_z(radians) @ self

    def shear(self, xy: float, xz: float, yx: float, yz: float, zx: float, zy: float) -> Transform:
        return Transform.shearing(xy, xz, yx, yz, zx, zy) @ self

    # Matrix algebra

    @property
    def matrix(self) -> np.ndarray:
        return self._matrix

    def __matmul__(self, other: Transform) -> Transform:
        if not isinstance(other, Transform):
            return NotImplemented
        return Transform(self._matrix @ other._matrix)

    def __eq__(self, other: object) -> bool:
        # Approximate, so Transform is unhashable
        if not isinstance(other, Transform):
            return NotImplemented
        return np.allclose(self._matrix, other._matrix)

    def __repr__(self) -> str:
        rows = ', '.join(
            '[' + ', '.join(f"{v:.5g}" for v in row) + ']' for row in self._matrix
        )
        return f"Transform([{rows}])"

    def determinant(self) -> float:
        return float(np.linalg.det(self._matrix))

    def is_invertible(self) -> bool:
        # Singular only when the determinant is exactly zero.
        det = self.determinant()
        return det != 0.0 and math.isfinite(det)

    @property
    def inverse(self) -> Transform:
        """The inverse transform.

        Raises:
            NonInvertibleTransformError: if the matrix is singular
        """
        if self._inverse is None:
            if not self.is_invertible():
                raise NonInvertibleTransformError(
                    f"Transform is not invertible (determinant {self.determinant():.3g})"
                )
            try:
                inverse = np.linalg.inv(self._matrix)
            except np.linalg.LinAlgError as err:
                raise NonInvertibleTransformError(f"Transform is not invertible: {err}") from err
            if not np.all(np.isfinite(inverse)):
                raise NonInvertibleTransformError("Transform inverse is not finite")
            self._inverse = Transform(inverse)
        return self._inverse

    def transpose(self) -> Transform:
        return Transform(self._matrix.T)

    @property
    def inverse_transpose(self) -> Transform:
        """Transpose of the inverse, used to carry normals into parent space."""
        if self._inverse_transpose is None:
            self._inverse_transpose = self.inverse.transpose()
        return self._inverse_transpose

    # Application

    def apply_point(self, point: Point3) -> Point3:
        """Transform a point (w = 1), including translation."""
        m = self._matrix
        return Vec3.from_array(m[:3, :3] @ point._data + m[:3, 3])

    def apply_vector(self, vector: Vec3) -> Vec3:
        """Transform a direction (w = 0).

        Only the upper 3x3 block is used, so translation never leaks into a
        direction, including when this is an inverse-transpose.
        """
        return Vec3.from_array(self._matrix[:3, :3] @ vector._data)
