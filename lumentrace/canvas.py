"""
Canvas: a floating point pixel buffer and its image encoders.

Colors are stored unclamped; clamping (and optional gamma) happen only when
the canvas is encoded.
"""

from __future__ import annotations
from pathlib import Path
from typing import Union

import numpy as np

from .vec3 import Color

# Plain PPM readers are only required to handle lines up to 70 characters
PPM_LINE_LIMIT = 70


class Canvas:
    """A width x height grid of colors, all black initially."""

    def __init__(self, width: int, height: int):
        if width <= 0 or height <= 0:
            raise ValueError(f"Canvas size must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self.pixels = np.zeros((height, width, 3), dtype=np.float64)

    def write_pixel(self, x: int, y: int, color: Color) -> None:
        """Set a pixel; coordinates outside the canvas are ignored."""
        if 0 <= x < self.width and 0 <= y < self.height:
            self.pixels[y, x] = color.to_array()

    def pixel_at(self, x: int, y: int) -> Color:
        return Color.from_array(self.pixels[y, x].copy())

    def to_image(self, gamma: float = 1.0) -> np.ndarray:
        """Convert to an 8-bit (height, width, 3) array.

        Args:
            gamma: Display gamma; 1.0 leaves values linear

        Returns:
            Image as uint8 array
        """
        data = np.clip(self.pixels, 0.0, 1.0)
        if gamma != 1.0:
            data = np.power(data, 1.0 / gamma)
        return np.round(data * 255).astype(np.uint8)

    def to_ppm(self, gamma: float = 1.0) -> str:
        """Encode as plain (P3) PPM text."""
        image = self.to_image(gamma)
        lines = ["P3", f"{self.width} {self.height}", "255"]
        for row in image:
            lines.extend(_wrap(str(int(v)) for v in row.reshape(-1)))
        return "\n".join(lines) + "\n"

    def save(self, filename: Union[str, Path], gamma: float = 1.0) -> None:
        """Save to a file; .ppm is written directly, other formats through Pillow."""
        path = Path(filename)
        if path.suffix.lower() == '.ppm':
            path.write_text(self.to_ppm(gamma))
        else:
            from PIL import Image as PILImage
            PILImage.fromarray(self.to_image(gamma), 'RGB').save(path)


def _wrap(values) -> list[str]:
    """Join values with spaces, breaking lines before they exceed the PPM limit."""
    lines = []
    current = ""
    for v in values:
        if not current:
            current = v
        elif len(current) + 1 + len(v) > PPM_LINE_LIMIT:
            lines.append(current)
            current = v
        else:
            current = f"{current} {v}"
    if current:
        lines.append(current)
    return lines
