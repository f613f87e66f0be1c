"""
World: the scene aggregate and the recursive shading pipeline.

color_at(ray, remaining)
    -> intersect every shape, pick the hit
    -> prepare_computations against the full intersection list
    -> shade_hit: Phong surface term per light
                  + reflected_color  (recurses with remaining - 1)
                  + refracted_color  (recurses with remaining - 1)
                  blended by Schlick when the surface both reflects and refracts

Recursion stops when remaining reaches 0 or the surface is neither reflective
nor transparent, so every call terminates.
"""

from __future__ import annotations
from typing import Iterable, Optional
import logging
import math

from .vec3 import Point3, Color, Margin, DEFAULT_MARGIN, BLACK
from .ray import Ray
from .transform import Transform
from .lights import PointLight
from .materials import Material
from .shapes import Shape, Sphere
from .intersection import Intersections, Computations

logger = logging.getLogger(__name__)

# Default bound on reflection/refraction bounces
MAX_DEPTH = 5


def _check_depth(remaining: int) -> None:
    if remaining < 0:
        raise ValueError(f"remaining depth must be non-negative, got {remaining}")


class World:
    """A collection of shapes and point lights."""

    def __init__(
        self,
        objects: Optional[Iterable[Shape]] = None,
        lights: Optional[Iterable[PointLight]] = None,
        margin: Margin = DEFAULT_MARGIN
    ):
        """Create a world.

        Args:
            objects: Top-level shapes (groups carry their own children)
            lights: Point lights
            margin: Tolerance used for every intersection and offset
        """
        self.objects: list[Shape] = list(objects) if objects is not None else []
        self.lights: list[PointLight] = list(lights) if lights is not None else []
        self.margin = margin

    @classmethod
    def default(cls) -> World:
        """Two concentric spheres lit from the upper left, as used by the tests."""
        outer = Sphere(material=Material(color=Color(0.8, 1.0, 0.6), diffuse=0.7, specular=0.2))
        inner = Sphere(transform=Transform.scaling(0.5, 0.5, 0.5))
        light = PointLight(Point3(-10, 10, -10), Color(1, 1, 1))
        return cls([outer, inner], [light])

    def add(self, shape: Shape) -> None:
        """Add a top-level shape."""
        if shape.parent is not None:
            raise ValueError(f"{shape!r} belongs to a group; add the group instead")
        self.objects.append(shape)
        logger.debug("Added %r to world (%d objects)", shape, len(self.objects))

    def add_light(self, light: PointLight) -> None:
        self.lights.append(light)

    def __len__(self) -> int:
        return len(self.objects)

    def __iter__(self):
        return iter(self.objects)

    def intersect(self, ray: Ray) -> Intersections:
        """All intersections of the ray with every shape, sorted by t."""
        xs = []
        for obj in self.objects:
            xs.extend(obj.intersect(ray, self.margin))
        return Intersections(*xs)

    def is_shadowed(self, point: Point3, light: Optional[PointLight] = None) -> bool:
        """True if some shape sits between point and the light.

        Args:
            point: World space point (normally an over point)
            light: Light to test against; the first light if None
        """
        if light is None:
            if not self.lights:
                return False
            light = self.lights[0]

        v = light.position - point
        distance = v.length()
        ray = Ray(point, v.normalize())

        h = self.intersect(ray).hit()
        return h is not None and h.t < distance

    def shade_hit(self, comps: Computations, remaining: int = MAX_DEPTH) -> Color:
        """Color at a prepared hit: surface lighting plus reflection and refraction."""
        _check_depth(remaining)
        material = comps.object.material

        surface = BLACK
        for light in self.lights:
            shadowed = self.is_shadowed(comps.over_point, light)
            surface = surface + material.lighting(
                comps.object,
                light,
                comps.over_point,
                comps.eyev,
                comps.normalv,
                shadowed,
            )

        reflected = self.reflected_color(comps, remaining)
        refracted = self.refracted_color(comps, remaining)

        is_zero = self.margin.is_zero
        if not is_zero(material.reflective) and not is_zero(material.transparency):
            reflectance = comps.schlick()
            return surface + reflected * reflectance + refracted * (1 - reflectance)
        return surface + reflected + refracted

    def reflected_color(self, comps: Computations, remaining: int = MAX_DEPTH) -> Color:
        """Color seen in the mirror direction, weighted by the material's reflectivity."""
        _check_depth(remaining)
        reflective = comps.object.material.reflective
        if remaining == 0 or self.margin.is_zero(reflective):
            return BLACK

        reflect_ray = Ray(comps.over_point, comps.reflectv)
        color = self.color_at(reflect_ray, remaining - 1)
        return color * reflective

    def refracted_color(self, comps: Computations, remaining: int = MAX_DEPTH) -> Color:
        """Color seen through the surface, bent by Snell's law."""
        _check_depth(remaining)
        transparency = comps.object.material.transparency
        if remaining == 0 or self.margin.is_zero(transparency):
            return BLACK

        n_ratio = comps.n1 / comps.n2
        cos_i = comps.eyev.dot(comps.normalv)
        sin2_t = n_ratio * n_ratio * (1 - cos_i * cos_i)
        if sin2_t > 1:
            # Total internal reflection
            return BLACK

        cos_t = math.sqrt(1.0 - sin2_t)
        direction = comps.normalv * (n_ratio * cos_i - cos_t) - comps.eyev * n_ratio
        refract_ray = Ray(comps.under_point, direction)
        return self.color_at(refract_ray, remaining - 1) * transparency

    def color_at(self, ray: Ray, remaining: int = MAX_DEPTH) -> Color:
        """Color seen along a ray; black when nothing is hit."""
        _check_depth(remaining)
        xs = self.intersect(ray)
        h = xs.hit()
        if h is None:
            return BLACK

        comps = h.prepare_computations(ray, xs, self.margin)
        return self.shade_hit(comps, remaining)
