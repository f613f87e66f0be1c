"""
Geometric shapes for the ray tracer.

Every shape lives in its own unit-sized object space. The Shape base class
carries the object-to-world transform and the material, and converts rays and
points between world and object space. Subclasses only implement the
primitive's equation in object space:

- ``local_intersect(ray, margin)``: intersections with an object-space ray
- ``local_normal_at(point, margin)``: surface normal at an object-space point

Shapes may be nested in Groups; a child keeps a weak reference to its group so
that normals and pattern lookups can walk up the hierarchy.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Iterable, Optional
import itertools
import math
import sys
import weakref

from .vec3 import Vec3, Point3, Margin, DEFAULT_MARGIN
from .ray import Ray
from .transform import Transform
from .materials import Material
from .intersection import Intersection

# Stand-in for 1/0 in the cube slab test; finite so 0 * _HUGE is 0, not nan.
_HUGE = sys.float_info.max

_shape_ids = itertools.count(1)


class GroupNormalError(RuntimeError):
    """A surface normal was requested from a Group, which has no surface."""
    pass


class Shape(ABC):
    """Abstract base class for all objects that can be hit by rays."""

    def __init__(self, transform: Optional[Transform] = None, material: Optional[Material] = None):
        """Create a shape.

        Args:
            transform: Object-to-parent transform (identity if None)
            material: Surface material (default Material if None)

        Raises:
            NonInvertibleTransformError: if the transform cannot be inverted
        """
        self.id = next(_shape_ids)
        self._parent: Optional[weakref.ref] = None
        self.transform = transform if transform is not None else Transform.identity()
        self.material = material if material is not None else Material()

    @property
    def transform(self) -> Transform:
        return self._transform

    @transform.setter
    def transform(self, value: Transform) -> None:
        # Computing the inverse here rejects singular transforms at scene
        # setup instead of producing nan normals mid-render.
        value.inverse
        self._transform = value

    @property
    def parent(self) -> Optional[Group]:
        """The containing group, or None."""
        if self._parent is None:
            return None
        return self._parent()

    # World space operations

    def intersect(self, ray: Ray, margin: Margin = DEFAULT_MARGIN) -> list[Intersection]:
        """Intersect a world (or parent) space ray with this shape.

        t values are unchanged by the transform, since they are measured
        along the transformed ray.
        """
        local_ray = ray.transform(self.transform.inverse)
        return self.local_intersect(local_ray, margin)

    def world_to_object(self, point: Point3) -> Point3:
        """Carry a world space point through every enclosing group into object space."""
        parent = self.parent
        if parent is not None:
            point = parent.world_to_object(point)
        return self.transform.inverse.apply_point(point)

    def normal_to_world(self, normal: Vec3) -> Vec3:
        """Carry an object space normal out through every enclosing group."""
        normal = self.transform.inverse_transpose.apply_vector(normal).normalize()
        parent = self.parent
        if parent is not None:
            normal = parent.normal_to_world(normal)
        return normal

    def normal_at(self, world_point: Point3, margin: Margin = DEFAULT_MARGIN) -> Vec3:
        """Unit surface normal at a world space point."""
        local_point = self.world_to_object(world_point)
        local_normal = self.local_normal_at(local_point, margin)
        return self.normal_to_world(local_normal)

    # Object space operations

    @abstractmethod
    def local_intersect(self, ray: Ray, margin: Margin = DEFAULT_MARGIN) -> list[Intersection]:
        """Intersect an object space ray with the primitive.

        Args:
            ray: Ray already carried into object space
            margin: Tolerance for parallel / degenerate cases

        Returns:
            Intersections in no particular order (possibly empty)
        """
        pass

    @abstractmethod
    def local_normal_at(self, point: Point3, margin: Margin = DEFAULT_MARGIN) -> Vec3:
        """Object space normal at an object space point (not normalized)."""
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id})"


class Sphere(Shape):
    """A unit sphere centered at the origin."""

    def local_intersect(self, ray: Ray, margin: Margin = DEFAULT_MARGIN) -> list[Intersection]:
        """Solve |O + tD|^2 = 1 with the quadratic formula."""
        sphere_to_ray = ray.origin
        a = ray.direction.length_squared()
        b = 2 * ray.direction.dot(sphere_to_ray)
        c = sphere_to_ray.length_squared() - 1

        discriminant = b * b - 4 * a * c
        if discriminant < 0:
            return []

        sqrtd = math.sqrt(discriminant)
        t1 = (-b - sqrtd) / (2 * a)
        t2 = (-b + sqrtd) / (2 * a)
        return [Intersection(t1, self), Intersection(t2, self)]

    def local_normal_at(self, point: Point3, margin: Margin = DEFAULT_MARGIN) -> Vec3:
        return point - Point3(0, 0, 0)


def glass_sphere(transform: Optional[Transform] = None, refractive_index: float = 1.5) -> Sphere:
    """A fully transparent sphere, handy for refraction scenes."""
    return Sphere(transform, Material(transparency=1.0, refractive_index=refractive_index))


class Plane(Shape):
    """The infinite x-z plane (y = 0)."""

    def local_intersect(self, ray: Ray, margin: Margin = DEFAULT_MARGIN) -> list[Intersection]:
        # Parallel or coplanar rays see nothing
        if margin.is_zero(ray.direction.y):
            return []
        t = -ray.origin.y / ray.direction.y
        return [Intersection(t, self)]

    def local_normal_at(self, point: Point3, margin: Margin = DEFAULT_MARGIN) -> Vec3:
        return Vec3(0, 1, 0)


class Cube(Shape):
    """An axis-aligned cube spanning [-1, 1] on every axis."""

    def local_intersect(self, ray: Ray, margin: Margin = DEFAULT_MARGIN) -> list[Intersection]:
        """Slab test: the ray is inside the cube where all three slabs overlap."""
        xtmin, xtmax = _check_axis(ray.origin.x, ray.direction.x, margin)
        ytmin, ytmax = _check_axis(ray.origin.y, ray.direction.y, margin)
        ztmin, ztmax = _check_axis(ray.origin.z, ray.direction.z, margin)

        tmin = max(xtmin, ytmin, ztmin)
        tmax = min(xtmax, ytmax, ztmax)

        if tmin > tmax:
            return []
        return [Intersection(tmin, self), Intersection(tmax, self)]

    def local_normal_at(self, point: Point3, margin: Margin = DEFAULT_MARGIN) -> Vec3:
        """Normal of the face whose axis has the largest absolute coordinate."""
        abs_x, abs_y, abs_z = abs(point.x), abs(point.y), abs(point.z)
        maxc = max(abs_x, abs_y, abs_z)

        if maxc == abs_x:
            return Vec3(point.x, 0, 0)
        if maxc == abs_y:
            return Vec3(0, point.y, 0)
        return Vec3(0, 0, point.z)


def _check_axis(origin: float, direction: float, margin: Margin) -> tuple[float, float]:
    """Entry and exit t of a ray against the slab [-1, 1] on one axis."""
    tmin_numerator = -1 - origin
    tmax_numerator = 1 - origin

    if abs(direction) >= margin.epsilon:
        tmin = tmin_numerator / direction
        tmax = tmax_numerator / direction
    else:
        tmin = tmin_numerator * _HUGE
        tmax = tmax_numerator * _HUGE

    if tmin > tmax:
        tmin, tmax = tmax, tmin
    return tmin, tmax


def _solve_clamped(a: float, b: float, c: float, margin: Margin) -> Optional[tuple[float, float]]:
    """Roots of a t^2 + b t + c = 0 in ascending order, or None.

    A discriminant within epsilon below zero is treated as a tangent hit.
    """
    disc = b * b - 4 * a * c
    if disc < 0:
        if disc <= -margin.epsilon:
            return None
        disc = 0.0
    sqrtd = math.sqrt(disc)
    t0 = (-b - sqrtd) / (2 * a)
    t1 = (-b + sqrtd) / (2 * a)
    if t0 > t1:
        t0, t1 = t1, t0
    return t0, t1


class _CappedShape(Shape):
    """Common state for y-aligned shapes truncated to (minimum, maximum)."""

    def __init__(
        self,
        minimum: float = -math.inf,
        maximum: float = math.inf,
        closed: bool = False,
        transform: Optional[Transform] = None,
        material: Optional[Material] = None
    ):
        """Create a truncated shape.

        Args:
            minimum: Lower y bound (exclusive)
            maximum: Upper y bound (exclusive)
            closed: Whether the ends are capped
            transform: Object-to-parent transform
            material: Surface material
        """
        super().__init__(transform, material)
        if minimum > maximum:
            raise ValueError(f"minimum ({minimum}) must not exceed maximum ({maximum})")
        self.minimum = minimum
        self.maximum = maximum
        self.closed = closed

    def with_caps(self, bottom: float, top: float) -> _CappedShape:
        """Close the shape between bottom and top; returns self for chaining."""
        if bottom > top:
            raise ValueError(f"bottom ({bottom}) must not exceed top ({top})")
        self.minimum = bottom
        self.maximum = top
        self.closed = True
        return self

    @abstractmethod
    def _cap_radius(self, y: float) -> float:
        """Radius of the shape's cross-section at height y."""
        pass

    def _in_bounds(self, ray: Ray, t: float) -> bool:
        y = ray.origin.y + t * ray.direction.y
        return self.minimum < y < self.maximum

    def _check_cap(self, ray: Ray, t: float, y: float, margin: Margin) -> bool:
        """Is the point at t within the cap disk at height y?"""
        x = ray.origin.x + t * ray.direction.x
        z = ray.origin.z + t * ray.direction.z
        radius = self._cap_radius(y)
        return x * x + z * z <= radius * radius + margin.epsilon

    def _intersect_caps(self, ray: Ray, xs: list[Intersection], margin: Margin) -> list[Intersection]:
        if not self.closed or margin.is_zero(ray.direction.y):
            return xs

        for y in (self.minimum, self.maximum):
            # An open-ended side has no cap to hit
            if not math.isfinite(y):
                continue
            t = (y - ray.origin.y) / ray.direction.y
            if self._check_cap(ray, t, y, margin):
                xs.append(Intersection(t, self))
        return xs

    def _on_cap(self, point: Point3, dist: float, margin: Margin) -> Optional[Vec3]:
        """Cap normal if point lies on an end cap, else None."""
        if point.y >= self.maximum - margin.epsilon and dist < self._cap_radius(self.maximum) ** 2:
            return Vec3(0, 1, 0)
        if point.y <= self.minimum + margin.epsilon and dist < self._cap_radius(self.minimum) ** 2:
            return Vec3(0, -1, 0)
        return None

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(id={self.id}, minimum={self.minimum}, "
            f"maximum={self.maximum}, closed={self.closed})"
        )


class Cylinder(_CappedShape):
    """A unit-radius cylinder around the y axis, optionally truncated and capped."""

    def _cap_radius(self, y: float) -> float:
        return 1.0

    def local_intersect(self, ray: Ray, margin: Margin = DEFAULT_MARGIN) -> list[Intersection]:
        d, o = ray.direction, ray.origin
        a = d.x * d.x + d.z * d.z

        # Parallel to the axis: only the caps can be hit
        if margin.is_zero(a):
            return self._intersect_caps(ray, [], margin)

        b = 2 * o.x * d.x + 2 * o.z * d.z
        c = o.x * o.x + o.z * o.z - 1

        roots = _solve_clamped(a, b, c, margin)
        if roots is None:
            return []

        xs = [Intersection(t, self) for t in roots if self._in_bounds(ray, t)]
        return self._intersect_caps(ray, xs, margin)

    def local_normal_at(self, point: Point3, margin: Margin = DEFAULT_MARGIN) -> Vec3:
        dist = point.x * point.x + point.z * point.z
        cap = self._on_cap(point, dist, margin)
        if cap is not None:
            return cap
        return Vec3(point.x, 0, point.z)


class Cone(_CappedShape):
    """A double-napped cone x^2 + z^2 = y^2, optionally truncated and capped."""

    def _cap_radius(self, y: float) -> float:
        return abs(y)

    def local_intersect(self, ray: Ray, margin: Margin = DEFAULT_MARGIN) -> list[Intersection]:
        d, o = ray.direction, ray.origin
        a = d.x * d.x - d.y * d.y + d.z * d.z
        b = 2 * o.x * d.x - 2 * o.y * d.y + 2 * o.z * d.z
        c = o.x * o.x - o.y * o.y + o.z * o.z

        if margin.is_zero(a):
            if margin.is_zero(b):
                # Ray runs along the surface through the apex; no single crossing
                return self._intersect_caps(ray, [], margin)
            # Ray parallel to one nappe crosses the other exactly once
            t = -c / (2 * b)
            xs = [Intersection(t, self)] if self._in_bounds(ray, t) else []
            return self._intersect_caps(ray, xs, margin)

        roots = _solve_clamped(a, b, c, margin)
        if roots is None:
            return []

        xs = [Intersection(t, self) for t in roots if self._in_bounds(ray, t)]
        return self._intersect_caps(ray, xs, margin)

    def local_normal_at(self, point: Point3, margin: Margin = DEFAULT_MARGIN) -> Vec3:
        dist = point.x * point.x + point.z * point.z
        cap = self._on_cap(point, dist, margin)
        if cap is not None:
            return cap

        y = math.sqrt(dist)
        if point.y > 0:
            y = -y
        return Vec3(point.x, y, point.z)


class Group(Shape):
    """An ordered collection of child shapes sharing a transform.

    A group is not a surface: it forwards rays to its children and never
    appears as the object of an intersection.
    """

    def __init__(
        self,
        children: Optional[Iterable[Shape]] = None,
        transform: Optional[Transform] = None,
        material: Optional[Material] = None
    ):
        super().__init__(transform, material)
        self.children: list[Shape] = []
        for child in children or ():
            self.add_child(child)

    def add_child(self, child: Shape) -> Group:
        """Append a child and point its parent reference at this group.

        Raises:
            ValueError: if the child already belongs to a group, or adding
                it would make the hierarchy cyclic
        """
        if child.parent is not None:
            raise ValueError(f"{child!r} already belongs to {child.parent!r}")
        ancestor: Optional[Shape] = self
        while ancestor is not None:
            if ancestor is child:
                raise ValueError(f"Adding {child!r} to {self!r} would create a cycle")
            ancestor = ancestor.parent

        child._parent = weakref.ref(self)
        self.children.append(child)
        return self

    def local_intersect(self, ray: Ray, margin: Margin = DEFAULT_MARGIN) -> list[Intersection]:
        xs: list[Intersection] = []
        for child in self.children:
            xs.extend(child.intersect(ray, margin))
        xs.sort(key=lambda i: i.t)
        return xs

    def local_normal_at(self, point: Point3, margin: Margin = DEFAULT_MARGIN) -> Vec3:
        raise GroupNormalError(
            "Groups have no surface; normals come from the child that was hit"
        )

    def __len__(self) -> int:
        return len(self.children)

    def __iter__(self):
        return iter(self.children)

    def __repr__(self) -> str:
        return f"Group(id={self.id}, children={len(self.children)})"
