"""
Renderer module: drives the camera over the canvas.

Each pixel gets exactly one primary ray; its color is whatever
``World.color_at`` returns for the configured recursion depth.
"""

from __future__ import annotations
import logging
import math
import time
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

from .vec3 import Margin
from .camera import Camera
from .canvas import Canvas
from .world import World, MAX_DEPTH

logger = logging.getLogger(__name__)


@dataclass
class RenderSettings:
    """Configuration for the renderer."""
    width: int = 400
    height: int = 200
    field_of_view: float = 60.0  # degrees
    max_depth: int = MAX_DEPTH
    epsilon: float = 1e-4
    gamma: float = 1.0

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Image size must be positive, got {self.width}x{self.height}")
        if not 0 < self.field_of_view < 180:
            raise ValueError(f"field_of_view must be in (0, 180) degrees, got {self.field_of_view}")
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {self.max_depth}")
        if self.epsilon <= 0:
            raise ValueError(f"epsilon must be positive, got {self.epsilon}")
        if self.gamma <= 0:
            raise ValueError(f"gamma must be positive, got {self.gamma}")

    @property
    def margin(self) -> Margin:
        return Margin(self.epsilon)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> RenderSettings:
        """Build settings from a mapping, ignoring unknown keys.

        ``depth`` and ``fov`` are accepted as short aliases.
        """
        aliases = {'depth': 'max_depth', 'fov': 'field_of_view'}
        known = {f.name for f in fields(cls)}
        values = {}
        for key, value in data.items():
            name = aliases.get(key, key)
            if name not in known:
                logger.warning("Ignoring unknown render setting %r", key)
                continue
            values[name] = int(value) if name in ('width', 'height', 'max_depth') else float(value)
        return cls(**values)

    def make_camera(self) -> Camera:
        return Camera(self.width, self.height, math.radians(self.field_of_view))


class Renderer:
    """Single-threaded whole-image renderer."""

    def __init__(self, settings: Optional[RenderSettings] = None):
        """Create a renderer with the given settings.

        Args:
            settings: Render configuration (uses defaults if None)
        """
        self.settings = settings if settings else RenderSettings()
        self._progress_callback: Optional[Callable[[float], None]] = None

    def set_progress_callback(self, callback: Callable[[float], None]) -> None:
        """Set a callback function for progress updates.

        Args:
            callback: Function that takes progress as float (0.0 to 1.0)
        """
        self._progress_callback = callback

    def render(self, world: World, camera: Camera) -> Canvas:
        """Render the world as seen by the camera.

        The canvas size comes from the camera; the recursion depth from the
        settings.
        """
        canvas = Canvas(camera.hsize, camera.vsize)
        depth = self.settings.max_depth

        logger.info(
            "Rendering %dx%d, %d objects, %d lights, depth %d",
            camera.hsize, camera.vsize, len(world), len(world.lights), depth
        )
        start = time.perf_counter()

        for y in range(camera.vsize):
            for x in range(camera.hsize):
                ray = camera.ray_for_pixel(x, y)
                canvas.write_pixel(x, y, world.color_at(ray, depth))

            if self._progress_callback:
                self._progress_callback((y + 1) / camera.vsize)

        logger.info("Render finished in %.2fs", time.perf_counter() - start)
        return canvas

    def save_image(self, canvas: Canvas, filename: Union[str, Path]) -> None:
        """Save the canvas, creating parent directories as needed."""
        path = Path(filename)
        path.parent.mkdir(parents=True, exist_ok=True)
        canvas.save(path, gamma=self.settings.gamma)
        logger.info("Saved %s", path)
