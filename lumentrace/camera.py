"""
Camera module for generating primary rays.

A pinhole camera sits at the origin of its own space looking down -z at a
canvas one unit away. The view transform places it in the world.
"""

from __future__ import annotations
import math
from typing import Optional

from .vec3 import Vec3, Point3
from .ray import Ray
from .transform import Transform


class Camera:
    """A pinhole camera with perspective projection."""

    def __init__(
        self,
        hsize: int,
        vsize: int,
        field_of_view: float,
        transform: Optional[Transform] = None
    ):
        """Create a camera.

        Args:
            hsize: Horizontal size of the canvas in pixels
            vsize: Vertical size of the canvas in pixels
            field_of_view: Angle covered by the wider canvas edge, in radians
            transform: View transform (identity if None)
        """
        if hsize <= 0 or vsize <= 0:
            raise ValueError(f"Camera size must be positive, got {hsize}x{vsize}")
        if not 0 < field_of_view < math.pi:
            raise ValueError(f"field_of_view must be in (0, pi), got {field_of_view}")

        self.hsize = hsize
        self.vsize = vsize
        self.field_of_view = field_of_view
        self.transform = transform if transform is not None else Transform.identity()

        half_view = math.tan(field_of_view / 2)
        aspect = hsize / vsize
        if aspect >= 1:
            self.half_width = half_view
            self.half_height = half_view / aspect
        else:
            self.half_width = half_view * aspect
            self.half_height = half_view
        self.pixel_size = (self.half_width * 2) / hsize

    @property
    def transform(self) -> Transform:
        return self._transform

    @transform.setter
    def transform(self, value: Transform) -> None:
        value.inverse
        self._transform = value

    def look_at(self, from_point: Point3, to: Point3, up: Vec3 = Vec3(0, 1, 0)) -> Camera:
        """Point the camera; returns self for chaining."""
        self.transform = Transform.view_transform(from_point, to, up)
        return self

    def ray_for_pixel(self, px: int, py: int) -> Ray:
        """Ray from the eye through the center of pixel (px, py)."""
        xoffset = (px + 0.5) * self.pixel_size
        yoffset = (py + 0.5) * self.pixel_size

        # The camera looks toward -z, so +x is to the left
        world_x = self.half_width - xoffset
        world_y = self.half_height - yoffset

        inv = self.transform.inverse
        pixel = inv.apply_point(Point3(world_x, world_y, -1))
        origin = inv.apply_point(Point3(0, 0, 0))
        direction = (pixel - origin).normalize()

        return Ray(origin, direction)

    def __repr__(self) -> str:
        return f"Camera({self.hsize}x{self.vsize}, fov={math.degrees(self.field_of_view):.1f})"
