"""
Light sources for the ray tracer.

Only point lights are supported: a position and an intensity, no falloff.
"""

from __future__ import annotations
from dataclasses import dataclass, field

from .vec3 import Point3, Color


@dataclass(frozen=True)
class PointLight:
    """A point light source.

    Point lights emit light equally in all directions from a single point.
    They produce hard shadows.

    Attributes:
        position: Position of the light
        intensity: Color and brightness of the light
    """
    position: Point3 = field(default_factory=lambda: Point3(0, 0, 0))
    intensity: Color = field(default_factory=lambda: Color(1, 1, 1))
