"""
Surface materials and the Phong reflection model.

A Material holds the coefficients of the Phong model plus the reflective and
refractive properties consumed by the world's recursive shading.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Optional, TYPE_CHECKING

from .vec3 import Vec3, Point3, Color, BLACK
from .lights import PointLight
from .patterns import Pattern

if TYPE_CHECKING:
    from .shapes import Shape


class MaterialError(ValueError):
    """A material coefficient is outside its valid range."""
    pass


@dataclass
class Material:
    """Phong material.

    Attributes:
        color: Base surface color, used when no pattern is set
        ambient: Fraction of light reflected regardless of light direction
        diffuse: Lambertian reflection coefficient
        specular: Highlight coefficient
        shininess: Highlight exponent (larger is tighter)
        reflective: Mirror reflection weight, 0 to 1
        transparency: Refraction weight, 0 to 1
        refractive_index: Index of refraction (1.0 = vacuum, 1.5 = glass)
        pattern: Optional pattern overriding color
    """
    color: Color = field(default_factory=lambda: Color(1, 1, 1))
    ambient: float = 0.1
    diffuse: float = 0.9
    specular: float = 0.9
    shininess: float = 200.0
    reflective: float = 0.0
    transparency: float = 0.0
    refractive_index: float = 1.0
    pattern: Optional[Pattern] = None

    def __post_init__(self):
        for name in ('ambient', 'diffuse', 'specular'):
            if getattr(self, name) < 0:
                raise MaterialError(f"{name} must be non-negative, got {getattr(self, name)}")
        if self.shininess <= 0:
            raise MaterialError(f"shininess must be positive, got {self.shininess}")
        for name in ('reflective', 'transparency'):
            if not 0.0 <= getattr(self, name) <= 1.0:
                raise MaterialError(f"{name} must be in [0, 1], got {getattr(self, name)}")
        if self.refractive_index <= 0:
            raise MaterialError(f"refractive_index must be positive, got {self.refractive_index}")

    def replace(self, **changes) -> Material:
        """Return a copy with the given fields changed (validated again)."""
        return replace(self, **changes)

    def lighting(
        self,
        shape: Shape,
        light: PointLight,
        point: Point3,
        eyev: Vec3,
        normalv: Vec3,
        in_shadow: bool = False
    ) -> Color:
        """Evaluate the Phong model at a surface point.

        Args:
            shape: Shape being shaded (needed to sample a pattern)
            light: The light source
            point: World space point being lit
            eyev: Unit vector toward the eye
            normalv: Unit surface normal
            in_shadow: If True only the ambient term is returned

        Returns:
            ambient + diffuse + specular, unclamped
        """
        if self.pattern is not None:
            color = self.pattern.pattern_at_shape(shape, point)
        else:
            color = self.color

        effective_color = color * light.intensity
        ambient = effective_color * self.ambient
        if in_shadow:
            return ambient

        lightv = (light.position - point).normalize()
        light_dot_normal = lightv.dot(normalv)
        if light_dot_normal < 0:
            # Light is on the other side of the surface
            return ambient

        diffuse = effective_color * self.diffuse * light_dot_normal

        reflectv = (-lightv).reflect(normalv)
        reflect_dot_eye = reflectv.dot(eyev)
        if reflect_dot_eye <= 0:
            specular = BLACK
        else:
            factor = reflect_dot_eye ** self.shininess
            specular = light.intensity * self.specular * factor

        return ambient + diffuse + specular
