"""
Scene description language parser.

Supports a YAML (or JSON) scene description format with:
- Render settings
- Camera configuration
- Point lights
- Materials library (with patterns)
- Objects (shapes, groups, transforms and materials)

Example scene file:
```yaml
render:
  width: 400
  height: 200
  max_depth: 5

camera:
  from: [0, 1.5, -5]
  to: [0, 1, 0]
  up: [0, 1, 0]
  field_of_view: 60

lights:
  - position: [-10, 10, -10]
    intensity: [1, 1, 1]

materials:
  floor:
    color: [1, 0.9, 0.9]
    specular: 0
    reflective: 0.3
    pattern:
      type: checkers
      a: [1, 1, 1]
      b: [0.2, 0.2, 0.2]

  glass:
    color: [0.1, 0.1, 0.1]
    transparency: 0.9
    reflective: 0.9
    refractive_index: 1.5

objects:
  - type: plane
    material: floor

  - type: sphere
    transform:
      - [scale, 0.5, 0.5, 0.5]
      - [translate, 0, 1, 0.5]
    material: glass

  - type: group
    transform:
      - [rotate_y, 30]
    children:
      - type: cylinder
        minimum: 0
        maximum: 1
        closed: true
        material: {extends: glass, transparency: 0.5}
```

Transform steps apply in the order listed; rotations are in degrees.
"""

from __future__ import annotations
from pathlib import Path
from typing import Dict, Any, Optional, Tuple
import dataclasses
import json
import logging
import math

from .vec3 import Vec3, Color
from .transform import Transform, NonInvertibleTransformError
from .camera import Camera
from .lights import PointLight
from .materials import Material, MaterialError
from .patterns import Pattern, StripePattern, GradientPattern, RingPattern, CheckersPattern
from .shapes import Shape, Sphere, Plane, Cube, Cylinder, Cone, Group, glass_sphere
from .renderer import RenderSettings
from .world import World

logger = logging.getLogger(__name__)

PATTERN_TYPES = {
    'stripes': StripePattern,
    'gradient': GradientPattern,
    'rings': RingPattern,
    'checkers': CheckersPattern,
}

_MATERIAL_FIELDS = (
    'ambient', 'diffuse', 'specular', 'shininess',
    'reflective', 'transparency', 'refractive_index',
)


class SceneParseError(Exception):
    """Error during scene parsing."""
    pass


class SceneParser:
    """Parser for scene description files."""

    def __init__(self):
        self.materials: Dict[str, Material] = {}
        self.settings: RenderSettings = RenderSettings()
        self.world: World = World()
        self.camera: Optional[Camera] = None

    def parse_file(self, filepath: str) -> Tuple[World, Camera, RenderSettings]:
        """Parse a scene file.

        Args:
            filepath: Path to the scene file (YAML or JSON)

        Returns:
            Tuple of (world, camera, settings)
        """
        path = Path(filepath)
        if not path.exists():
            raise SceneParseError(f"Scene file not found: {filepath}")

        content = path.read_text()

        if path.suffix == '.json':
            try:
                data = json.loads(content)
            except json.JSONDecodeError as err:
                raise SceneParseError(f"Invalid JSON in {filepath}: {err}") from err
        else:
            import yaml
            try:
                data = yaml.safe_load(content)
            except yaml.YAMLError as err:
                raise SceneParseError(f"Invalid YAML in {filepath}: {err}") from err

        if not isinstance(data, dict):
            raise SceneParseError(f"Scene file must contain a mapping: {filepath}")

        logger.info("Loading scene %s", path)
        return self.parse_dict(data)

    def parse_dict(self, data: Dict[str, Any]) -> Tuple[World, Camera, RenderSettings]:
        """Parse a scene from a dictionary.

        Args:
            data: Scene description dictionary

        Returns:
            Tuple of (world, camera, settings)
        """
        try:
            # Settings first: the world's margin depends on them
            if 'render' in data:
                self.settings = RenderSettings.from_dict(data['render'])
            if 'camera' in data and 'field_of_view' in data['camera']:
                self.settings = dataclasses.replace(
                    self.settings, field_of_view=float(data['camera']['field_of_view'])
                )
            self.world = World(margin=self.settings.margin)

            # Parse materials before objects (objects reference them)
            if 'materials' in data:
                self._parse_materials(data['materials'])

            for obj_data in data.get('objects', []):
                self.world.add(self._parse_object(obj_data))

            for light_data in data.get('lights', []):
                self.world.add_light(self._parse_light(light_data))

            self._parse_camera(data.get('camera', {}))
        except SceneParseError:
            raise
        except (MaterialError, NonInvertibleTransformError, ValueError, TypeError, KeyError) as err:
            raise SceneParseError(str(err)) from err

        if not self.world.lights:
            logger.warning("Scene has no lights; only reflections of nothing will be visible")
        logger.debug(
            "Parsed scene: %d objects, %d lights, %d materials",
            len(self.world), len(self.world.lights), len(self.materials)
        )
        return self.world, self.camera, self.settings

    def _parse_vec3(self, data: Any) -> Vec3:
        """Parse a Vec3 from various formats."""
        if isinstance(data, (list, tuple)):
            if len(data) != 3:
                raise SceneParseError(f"Vec3 must have 3 components, got {len(data)}")
            return Vec3(float(data[0]), float(data[1]), float(data[2]))
        elif isinstance(data, dict):
            return Vec3(
                float(data.get('x', 0)),
                float(data.get('y', 0)),
                float(data.get('z', 0))
            )
        else:
            raise SceneParseError(f"Cannot parse Vec3 from: {data}")

    def _parse_color(self, data: Any) -> Color:
        """Parse a Color from various formats."""
        if isinstance(data, (list, tuple)):
            if len(data) != 3:
                raise SceneParseError(f"Color must have 3 components, got {len(data)}")
            return Color(float(data[0]), float(data[1]), float(data[2]))
        elif isinstance(data, dict):
            return Color(
                float(data.get('r', 0)),
                float(data.get('g', 0)),
                float(data.get('b', 0))
            )
        elif isinstance(data, str):
            # Handle hex colors
            if data.startswith('#') and len(data) == 7:
                r = int(data[1:3], 16) / 255.0
                g = int(data[3:5], 16) / 255.0
                b = int(data[5:7], 16) / 255.0
                return Color(r, g, b)
            raise SceneParseError(f"Cannot parse color from string: {data}")
        else:
            raise SceneParseError(f"Cannot parse Color from: {data}")

    def _parse_transform(self, steps: Any) -> Transform:
        """Compose a list of [op, args...] steps, applied in order."""
        if not isinstance(steps, list):
            raise SceneParseError(f"transform must be a list of steps, got: {steps}")

        t = Transform.identity()
        for step in steps:
            if not isinstance(step, list) or not step:
                raise SceneParseError(f"Invalid transform step: {step}")
            op, args = step[0], [float(a) for a in step[1:]]

            if op in ('translate', 'scale') and len(args) == 3:
                t = getattr(t, op)(*args)
            elif op in ('rotate_x', 'rotate_y', 'rotate_z') and len(args) == 1:
                t = getattr(t, op)(math.radians(args[0]))
            elif op == 'shear' and len(args) == 6:
                t = t.shear(*args)
            else:
                raise SceneParseError(f"Unknown transform step: {step}")
        return t

    def _parse_pattern(self, pattern_data: Dict[str, Any]) -> Pattern:
        pattern_type = pattern_data.get('type', 'stripes').lower()
        if pattern_type not in PATTERN_TYPES:
            raise SceneParseError(f"Unknown pattern type: {pattern_type}")

        a = self._parse_color(pattern_data.get('a', [1, 1, 1]))
        b = self._parse_color(pattern_data.get('b', [0, 0, 0]))
        transform = self._parse_transform(pattern_data.get('transform', []))
        return PATTERN_TYPES[pattern_type](a, b, transform)

    def _build_material(self, mat_data: Dict[str, Any], base: Optional[Material] = None) -> Material:
        """Build a material from a mapping, starting from base if given."""
        changes: Dict[str, Any] = {}
        for key, value in mat_data.items():
            if key == 'extends':
                continue
            if key == 'color':
                changes['color'] = self._parse_color(value)
            elif key == 'pattern':
                changes['pattern'] = self._parse_pattern(value)
            elif key in _MATERIAL_FIELDS:
                changes[key] = float(value)
            else:
                raise SceneParseError(f"Unknown material property: {key}")

        if 'extends' in mat_data:
            base = self._get_material(mat_data['extends'])
        if base is None:
            return Material(**changes)
        return base.replace(**changes)

    def _parse_materials(self, materials_data: Dict[str, Any]) -> None:
        """Parse materials section."""
        for name, mat_data in materials_data.items():
            self.materials[name] = self._build_material(mat_data)

    def _get_material(self, mat_ref: Any) -> Optional[Material]:
        """Get a material by name or inline definition."""
        if mat_ref is None:
            return None
        if isinstance(mat_ref, str):
            if mat_ref not in self.materials:
                raise SceneParseError(f"Unknown material: {mat_ref}")
            return self.materials[mat_ref]
        elif isinstance(mat_ref, dict):
            return self._build_material(mat_ref)
        else:
            raise SceneParseError(f"Invalid material reference: {mat_ref}")

    def _parse_object(self, obj_data: Dict[str, Any]) -> Shape:
        """Parse one object (recursing into group children)."""
        obj_type = obj_data.get('type', 'sphere').lower()
        transform = self._parse_transform(obj_data.get('transform', []))
        material = self._get_material(obj_data.get('material'))

        if obj_type == 'sphere':
            return Sphere(transform, material)

        elif obj_type == 'glass_sphere':
            shape = glass_sphere(transform)
            if material is not None:
                shape.material = material
            return shape

        elif obj_type == 'plane':
            return Plane(transform, material)

        elif obj_type == 'cube':
            return Cube(transform, material)

        elif obj_type in ('cylinder', 'cone'):
            cls = Cylinder if obj_type == 'cylinder' else Cone
            return cls(
                minimum=float(obj_data.get('minimum', -math.inf)),
                maximum=float(obj_data.get('maximum', math.inf)),
                closed=bool(obj_data.get('closed', False)),
                transform=transform,
                material=material
            )

        elif obj_type == 'group':
            group = Group(transform=transform, material=material)
            for child_data in obj_data.get('children', []):
                group.add_child(self._parse_object(child_data))
            return group

        raise SceneParseError(f"Unknown object type: {obj_type}")

    def _parse_light(self, light_data: Dict[str, Any]) -> PointLight:
        light_type = light_data.get('type', 'point').lower()
        if light_type != 'point':
            raise SceneParseError(f"Unknown light type: {light_type}")

        position = self._parse_vec3(light_data.get('position', [-10, 10, -10]))
        intensity = self._parse_color(light_data.get('intensity', [1, 1, 1]))
        return PointLight(position, intensity)

    def _parse_camera(self, camera_data: Dict[str, Any]) -> None:
        """Parse camera section."""
        from_point = self._parse_vec3(camera_data.get('from', [0, 1.5, -5]))
        to = self._parse_vec3(camera_data.get('to', [0, 1, 0]))
        up = self._parse_vec3(camera_data.get('up', [0, 1, 0]))

        self.camera = self.settings.make_camera().look_at(from_point, to, up)


def load_scene(filepath: str) -> Tuple[World, Camera, RenderSettings]:
    """Convenience function to load a scene file.

    Args:
        filepath: Path to the scene file

    Returns:
        Tuple of (world, camera, settings)
    """
    parser = SceneParser()
    return parser.parse_file(filepath)


def parse_scene(data: Dict[str, Any]) -> Tuple[World, Camera, RenderSettings]:
    """Convenience function to parse a scene from a dictionary.

    Args:
        data: Scene description dictionary

    Returns:
        Tuple of (world, camera, settings)
    """
    parser = SceneParser()
    return parser.parse_dict(data)
