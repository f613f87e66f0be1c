"""
Ray-object intersections and the per-hit shading state derived from them.

An Intersection is just a t value and the shape that produced it. For the
intersection chosen as the hit, ``prepare_computations`` derives everything the
shading code needs: points, vectors, and the refractive indices on both sides
of the surface.
"""

from __future__ import annotations
from dataclasses import dataclass
from collections.abc import Sequence
from typing import Iterable, Iterator, Optional, TYPE_CHECKING, Union
import math

from .vec3 import Vec3, Point3, Margin, DEFAULT_MARGIN
from .ray import Ray

if TYPE_CHECKING:
    from .shapes import Shape


@dataclass(frozen=True, eq=False)
class Intersection:
    """A hit at distance t along a ray.

    Attributes:
        t: Ray parameter at the hit; negative means behind the origin
        object: The (leaf) shape that was hit
    """
    t: float
    object: Shape

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Intersection):
            return NotImplemented
        return self.t == other.t and self.object is other.object

    def __hash__(self) -> int:
        return hash((self.t, id(self.object)))

    def __lt__(self, other: Intersection) -> bool:
        return self.t < other.t

    def prepare_computations(
        self,
        ray: Ray,
        xs: Optional[Iterable[Intersection]] = None,
        margin: Margin = DEFAULT_MARGIN
    ) -> Computations:
        """Derive the shading state for this intersection.

        Args:
            ray: The ray that produced the intersections
            xs: Every intersection of the ray, sorted by t. Needed to find
                which transparent objects the ray is inside; defaults to
                this intersection alone.
            margin: Offset used for the over and under points

        Returns:
            Computations for this hit

        Raises:
            ValueError: if this intersection is not in xs
        """
        point = ray.at(self.t)
        eyev = -ray.direction
        normalv = self.object.normal_at(point, margin)

        inside = normalv.dot(eyev) < 0
        if inside:
            normalv = -normalv

        reflectv = ray.direction.reflect(normalv)
        n1, n2 = self._refractive_indices(xs if xs is not None else (self,))

        return Computations(
            t=self.t,
            object=self.object,
            point=point,
            over_point=point + normalv * margin.epsilon,
            under_point=point - normalv * margin.epsilon,
            eyev=eyev,
            normalv=normalv,
            reflectv=reflectv,
            inside=inside,
            n1=n1,
            n2=n2,
        )

    def _refractive_indices(self, xs: Iterable[Intersection]) -> tuple[float, float]:
        """Walk the ray's intersections keeping a stack of the shapes it is inside.

        n1 is the index of the innermost shape before crossing this hit, n2
        the one after. Empty space has index 1.0.
        """
        containers: list[Shape] = []
        n1 = 1.0
        for i in xs:
            if i == self:
                n1 = containers[-1].material.refractive_index if containers else 1.0

            if i.object in containers:
                containers.remove(i.object)
            else:
                containers.append(i.object)

            if i == self:
                n2 = containers[-1].material.refractive_index if containers else 1.0
                return n1, n2

        raise ValueError(f"{self!r} is not among the ray's intersections")


def hit(xs: Iterable[Intersection]) -> Optional[Intersection]:
    """Return the intersection with the smallest non-negative t, or None."""
    visible = [i for i in xs if i.t >= 0]
    if not visible:
        return None
    return min(visible, key=lambda i: i.t)


class Intersections(Sequence):
    """An immutable list of intersections sorted by t."""

    __slots__ = ('_items',)

    def __init__(self, *items: Intersection):
        self._items: tuple[Intersection, ...] = tuple(sorted(items, key=lambda i: i.t))

    @classmethod
    def from_iterable(cls, items: Iterable[Intersection]) -> Intersections:
        return cls(*items)

    def __getitem__(self, index: Union[int, slice]):
        return self._items[index]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Intersection]:
        return iter(self._items)

    def __add__(self, other: Iterable[Intersection]) -> Intersections:
        return Intersections(*self._items, *other)

    def __repr__(self) -> str:
        return f"Intersections({', '.join(f'{i.t:.5g}' for i in self._items)})"

    def hit(self) -> Optional[Intersection]:
        """Return the intersection with the smallest non-negative t, or None."""
        # Sorted, so the first non-negative entry wins
        for i in self._items:
            if i.t >= 0:
                return i
        return None


@dataclass(frozen=True)
class Computations:
    """Shading state for one hit.

    Attributes:
        t: Ray parameter of the hit
        object: Shape that was hit
        point: World space hit point
        over_point: point nudged along the normal, origin for shadow and reflection rays
        under_point: point nudged against the normal, origin for refraction rays
        eyev: Unit vector back toward the ray origin
        normalv: Surface normal, flipped to face the eye
        reflectv: Ray direction reflected about the normal
        inside: True if the ray started inside the shape
        n1: Refractive index of the medium being left
        n2: Refractive index of the medium being entered
    """
    t: float
    object: Shape
    point: Point3
    over_point: Point3
    under_point: Point3
    eyev: Vec3
    normalv: Vec3
    reflectv: Vec3
    inside: bool
    n1: float
    n2: float

    def schlick(self) -> float:
        """Fraction of light reflected at this hit, by Schlick's approximation."""
        cos = self.eyev.dot(self.normalv)

        if self.n1 > self.n2:
            n = self.n1 / self.n2
            sin2_t = n * n * (1.0 - cos * cos)
            if sin2_t > 1.0:
                # Total internal reflection
                return 1.0
            cos = math.sqrt(1.0 - sin2_t)

        r0 = ((self.n1 - self.n2) / (self.n1 + self.n2)) ** 2
        return r0 + (1 - r0) * (1 - cos) ** 5
