"""Tests for the world and its recursive shading."""

import pytest
import math

from lumentrace.vec3 import Vec3, Point3, Color, Margin, BLACK, WHITE
from lumentrace.ray import Ray
from lumentrace.transform import Transform
from lumentrace.lights import PointLight
from lumentrace.materials import Material
from lumentrace.patterns import Pattern
from lumentrace.shapes import Sphere, Plane, Group
from lumentrace.intersection import Intersection, Intersections
from lumentrace.world import World, MAX_DEPTH

SQRT2_2 = math.sqrt(2) / 2


class PointPattern(Pattern):
    """Returns the pattern space point as a color."""

    def pattern_at(self, point):
        return Color(point.x, point.y, point.z)


def close(a, b, tol=1e-4):
    return all(abs(x - y) < tol for x, y in zip(a, b))


class TestWorldCreation:
    """Test World construction."""

    def test_empty_world(self):
        w = World()
        assert len(w) == 0
        assert w.lights == []

    def test_default_world(self):
        w = World.default()
        assert len(w) == 2
        assert w.lights == [PointLight(Point3(-10, 10, -10), Color(1, 1, 1))]
        outer, inner = w.objects
        assert outer.material.color == Color(0.8, 1.0, 0.6)
        assert outer.material.diffuse == 0.7
        assert outer.material.specular == 0.2
        assert inner.transform == Transform.scaling(0.5, 0.5, 0.5)

    def test_add_rejects_group_children(self):
        s = Sphere()
        g = Group([s])
        w = World()
        with pytest.raises(ValueError):
            w.add(s)
        w.add(g)
        assert list(w) == [g]

    def test_max_depth(self):
        assert MAX_DEPTH == 5


class TestWorldIntersect:
    """Test intersecting rays with the whole world."""

    def test_intersect_default_world(self):
        w = World.default()
        xs = w.intersect(Ray(Point3(0, 0, -5), Vec3(0, 0, 1)))
        assert isinstance(xs, Intersections)
        assert [round(i.t, 6) for i in xs] == [4, 4.5, 5.5, 6]

    def test_groups_are_flattened(self):
        w = World()
        s = Sphere()
        w.add(Group([s], transform=Transform.translation(0, 0, 1)))
        xs = w.intersect(Ray(Point3(0, 0, -5), Vec3(0, 0, 1)))
        assert [round(i.t, 6) for i in xs] == [5, 7]
        assert all(i.object is s for i in xs)


class TestShading:
    """Test shade_hit and color_at."""

    def test_shade_intersection(self):
        w = World.default()
        ray = Ray(Point3(0, 0, -5), Vec3(0, 0, 1))
        i = Intersection(4, w.objects[0])
        comps = i.prepare_computations(ray)
        assert close(w.shade_hit(comps), (0.38066, 0.47583, 0.2855))

    def test_shade_intersection_from_inside(self):
        w = World.default()
        w.lights = [PointLight(Point3(0, 0.25, 0), Color(1, 1, 1))]
        ray = Ray(Point3(0, 0, 0), Vec3(0, 0, 1))
        i = Intersection(0.5, w.objects[1])
        comps = i.prepare_computations(ray)
        assert close(w.shade_hit(comps), (0.90498, 0.90498, 0.90498))

    def test_shade_intersection_in_shadow(self):
        s1 = Sphere()
        s2 = Sphere(Transform.translation(0, 0, 10))
        w = World([s1, s2], [PointLight(Point3(0, 0, -10), Color(1, 1, 1))])
        ray = Ray(Point3(0, 0, 5), Vec3(0, 0, 1))
        i = Intersection(4, s2)
        comps = i.prepare_computations(ray)
        assert close(w.shade_hit(comps), (0.1, 0.1, 0.1))

    def test_color_when_ray_misses(self):
        w = World.default()
        assert w.color_at(Ray(Point3(0, 0, -5), Vec3(0, 1, 0))) == BLACK

    def test_color_when_ray_hits(self):
        w = World.default()
        c = w.color_at(Ray(Point3(0, 0, -5), Vec3(0, 0, 1)))
        assert close(c, (0.38066, 0.47583, 0.2855))

    def test_color_with_intersection_behind_ray(self):
        w = World.default()
        outer, inner = w.objects
        outer.material = outer.material.replace(ambient=1.0)
        inner.material = inner.material.replace(ambient=1.0)
        c = w.color_at(Ray(Point3(0, 0, 0.75), Vec3(0, 0, -1)))
        assert c == inner.material.color

    def test_multiple_lights_add_up(self):
        ray = Ray(Point3(0, 0, -5), Vec3(0, 0, 1))
        light = PointLight(Point3(-10, 10, -10), Color(1, 1, 1))
        one = World([Sphere()], [light]).color_at(ray)
        two = World([Sphere()], [light, light]).color_at(ray)
        assert two.approx_eq(one * 2)

    def test_world_without_lights_is_black(self):
        w = World([Sphere()])
        assert w.color_at(Ray(Point3(0, 0, -5), Vec3(0, 0, 1))) == BLACK

    def test_negative_depth_rejected(self):
        w = World.default()
        ray = Ray(Point3(0, 0, -5), Vec3(0, 0, 1))
        with pytest.raises(ValueError):
            w.color_at(ray, -1)
        comps = Intersection(4, w.objects[0]).prepare_computations(ray)
        with pytest.raises(ValueError):
            w.shade_hit(comps, -1)


class TestShadows:
    """Test is_shadowed."""

    @pytest.mark.parametrize("point,shadowed", [
        ((0, 10, 0), False),
        ((10, -10, 10), True),
        ((-20, 20, -20), False),
        ((-2, 2, -2), False),
    ])
    def test_default_world(self, point, shadowed):
        assert World.default().is_shadowed(Point3(*point)) is shadowed

    def test_explicit_light(self):
        w = World.default()
        behind = PointLight(Point3(10, -10, 10), Color(1, 1, 1))
        assert w.is_shadowed(Point3(-2, 2, -2), behind) is True

    def test_no_lights_never_shadowed(self):
        assert World([Sphere()]).is_shadowed(Point3(0, 0, 5)) is False

    def test_over_point_avoids_acne(self):
        w = World.default()
        ray = Ray(Point3(0, 0, -5), Vec3(0, 0, 1))
        comps = Intersection(4, w.objects[0]).prepare_computations(ray)
        assert w.is_shadowed(comps.over_point) is False


class TestReflection:
    """Test reflected_color."""

    def _reflective_floor(self, w, reflective=0.5):
        floor = Plane(
            Transform.translation(0, -1, 0),
            Material(reflective=reflective)
        )
        w.add(floor)
        ray = Ray(Point3(0, 0, -3), Vec3(0, -SQRT2_2, SQRT2_2))
        i = Intersection(math.sqrt(2), floor)
        return ray, i

    def test_nonreflective_material(self):
        w = World.default()
        inner = w.objects[1]
        inner.material = inner.material.replace(ambient=1.0)
        ray = Ray(Point3(0, 0, 0), Vec3(0, 0, 1))
        comps = Intersection(1, inner).prepare_computations(ray)
        assert w.reflected_color(comps) == BLACK

    def test_reflective_material(self):
        w = World.default()
        ray, i = self._reflective_floor(w)
        comps = i.prepare_computations(ray)
        assert close(w.reflected_color(comps), (0.19032, 0.2379, 0.14274), 1e-3)

    def test_shade_hit_includes_reflection(self):
        w = World.default()
        ray, i = self._reflective_floor(w)
        comps = i.prepare_computations(ray)
        assert close(w.shade_hit(comps), (0.87677, 0.92436, 0.82918), 1e-3)

    def test_reflection_at_zero_depth(self):
        w = World.default()
        ray, i = self._reflective_floor(w)
        comps = i.prepare_computations(ray)
        assert w.reflected_color(comps, 0) == BLACK

    def test_mutually_reflective_surfaces_terminate(self):
        w = World(lights=[PointLight(Point3(0, 0, 0), Color(1, 1, 1))])
        w.add(Plane(Transform.translation(0, -1, 0), Material(reflective=1.0)))
        w.add(Plane(Transform.translation(0, 1, 0), Material(reflective=1.0)))
        c = w.color_at(Ray(Point3(0, 0, 0), Vec3(0, 1, 0)))
        assert isinstance(c, Color)


class TestRefraction:
    """Test refracted_color and the Schlick blend."""

    def test_opaque_surface(self):
        w = World.default()
        shape = w.objects[0]
        ray = Ray(Point3(0, 0, -5), Vec3(0, 0, 1))
        xs = Intersections(Intersection(4, shape), Intersection(6, shape))
        comps = xs[0].prepare_computations(ray, xs)
        assert w.refracted_color(comps, 5) == BLACK

    def test_at_zero_depth(self):
        w = World.default()
        shape = w.objects[0]
        shape.material = shape.material.replace(transparency=1.0, refractive_index=1.5)
        ray = Ray(Point3(0, 0, -5), Vec3(0, 0, 1))
        xs = Intersections(Intersection(4, shape), Intersection(6, shape))
        comps = xs[0].prepare_computations(ray, xs)
        assert w.refracted_color(comps, 0) == BLACK

    def test_total_internal_reflection(self):
        w = World.default()
        shape = w.objects[0]
        shape.material = shape.material.replace(transparency=1.0, refractive_index=1.5)
        ray = Ray(Point3(0, 0, SQRT2_2), Vec3(0, 1, 0))
        xs = Intersections(Intersection(-SQRT2_2, shape), Intersection(SQRT2_2, shape))
        comps = xs[1].prepare_computations(ray, xs)
        assert w.refracted_color(comps, 5) == BLACK

    def test_refracted_ray(self):
        w = World.default()
        a, b = w.objects
        a.material = a.material.replace(ambient=1.0, pattern=PointPattern())
        b.material = b.material.replace(transparency=1.0, refractive_index=1.5)
        ray = Ray(Point3(0, 0, 0.1), Vec3(0, 1, 0))
        xs = Intersections(
            Intersection(-0.9899, a), Intersection(-0.4899, b),
            Intersection(0.4899, b), Intersection(0.9899, a),
        )
        comps = xs[2].prepare_computations(ray, xs)
        assert close(w.refracted_color(comps, 5), (0, 0.99888, 0.04725), 1e-3)

    def _glass_floor(self, w, reflective=0.0):
        floor = Plane(
            Transform.translation(0, -1, 0),
            Material(transparency=0.5, refractive_index=1.5, reflective=reflective)
        )
        ball = Sphere(
            Transform.translation(0, -3.5, -0.5),
            Material(color=Color(1, 0, 0), ambient=0.5)
        )
        w.add(floor)
        w.add(ball)
        ray = Ray(Point3(0, 0, -3), Vec3(0, -SQRT2_2, SQRT2_2))
        xs = Intersections(Intersection(math.sqrt(2), floor))
        return ray, xs

    def test_shade_hit_with_transparent_material(self):
        w = World.default()
        ray, xs = self._glass_floor(w)
        comps = xs[0].prepare_computations(ray, xs)
        assert close(w.shade_hit(comps, 5), (0.93642, 0.68642, 0.68642), 1e-3)

    def test_shade_hit_with_reflective_transparent_material(self):
        w = World.default()
        ray, xs = self._glass_floor(w, reflective=0.5)
        comps = xs[0].prepare_computations(ray, xs)
        assert close(w.shade_hit(comps, 5), (0.93391, 0.69643, 0.69243), 1e-3)


class TestWorldMargin:
    """Test that the world threads its margin into geometry."""

    def test_margin_offsets_over_point(self):
        w = World.default()
        w.margin = Margin(0.01)
        ray = Ray(Point3(0, 0, -5), Vec3(0, 0, 1))
        xs = w.intersect(ray)
        comps = xs.hit().prepare_computations(ray, xs, w.margin)
        assert abs(comps.over_point.z - (-1.01)) < 1e-9
