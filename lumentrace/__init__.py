"""
Lumentrace - A Python Whitted-style Ray Tracer

A small, deterministic CPU ray tracer with support for:
- Spheres, planes, cubes, cylinders and cones
- Nested groups with their own transforms
- Phong lighting with hard shadows and procedural patterns
- Recursive reflection and refraction (Fresnel via Schlick)
- YAML/JSON scene files
- PPM output (PNG and friends through Pillow)
"""

__version__ = "0.1.0"
__author__ = "Lumentrace Team"

from .vec3 import Vec3, Point3, Color, Margin, DEFAULT_MARGIN, BLACK, WHITE
from .transform import Transform, NonInvertibleTransformError
from .ray import Ray
from .lights import PointLight
from .patterns import Pattern, StripePattern, GradientPattern, RingPattern, CheckersPattern
from .materials import Material, MaterialError
from .intersection import Intersection, Intersections, Computations, hit
from .shapes import Shape, Sphere, Plane, Cube, Cylinder, Cone, Group, GroupNormalError, glass_sphere
from .world import World, MAX_DEPTH
from .camera import Camera
from .canvas import Canvas
from .renderer import Renderer, RenderSettings
from .scene_parser import SceneParser, SceneParseError, load_scene, parse_scene
