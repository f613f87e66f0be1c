#!/usr/bin/env python3
"""
Lumentrace - A Python Ray Tracer

Main entry point for rendering scenes.
"""

import argparse
import dataclasses
import logging
import math
import sys

from lumentrace.vec3 import Vec3, Color, Point3
from lumentrace.transform import Transform
from lumentrace.camera import Camera
from lumentrace.lights import PointLight
from lumentrace.materials import Material
from lumentrace.patterns import CheckersPattern, StripePattern
from lumentrace.shapes import Sphere, Plane, Cube, Cylinder, Cone, Group, glass_sphere
from lumentrace.renderer import Renderer, RenderSettings
from lumentrace.scene_parser import SceneParseError, load_scene
from lumentrace.world import World

logger = logging.getLogger("lumentrace")


def create_demo_scene() -> World:
    """Create a demo scene showing every primitive, patterns, reflection and refraction."""
    world = World()

    # Checkered, slightly reflective floor
    floor = Plane(material=Material(
        pattern=CheckersPattern(Color(0.9, 0.9, 0.9), Color(0.2, 0.2, 0.2)),
        specular=0.0,
        reflective=0.2
    ))
    world.add(floor)

    # Striped back wall
    wall = Plane(
        Transform.identity().rotate_x(math.pi / 2).translate(0, 0, 10),
        Material(
            pattern=StripePattern(
                Color(0.6, 0.4, 0.3), Color(0.5, 0.35, 0.25),
                Transform.scaling(0.5, 0.5, 0.5).rotate_y(math.pi / 4)
            ),
            specular=0.0
        )
    )
    world.add(wall)

    # Center sphere - glass
    glass = glass_sphere(Transform.translation(0, 1, 0))
    glass.material = glass.material.replace(
        color=Color(0.05, 0.05, 0.05), diffuse=0.1, reflective=0.9, shininess=300
    )
    world.add(glass)

    # Left: a capped cylinder and a cone sharing a group transform
    pillar = Group(transform=Transform.translation(-3, 0, 1))
    pillar.add_child(Cylinder(0, 1.5, closed=True, material=Material(
        color=Color(0.2, 0.4, 0.8), diffuse=0.7, specular=0.3
    )))
    pillar.add_child(Cone(
        -1, 0, closed=True,
        transform=Transform.translation(0, 2.5, 0),
        material=Material(color=Color(0.9, 0.5, 0.1), diffuse=0.7)
    ))
    world.add(pillar)

    # Right: a mirrored cube
    cube = Cube(
        Transform.scaling(0.75, 0.75, 0.75).rotate_y(math.pi / 5).translate(3, 0.75, 1),
        Material(color=Color(0.1, 0.1, 0.1), reflective=0.7, diffuse=0.3)
    )
    world.add(cube)

    # Small matte sphere in front
    world.add(Sphere(
        Transform.scaling(0.4, 0.4, 0.4).translate(1.2, 0.4, -1.5),
        Material(color=Color(0.8, 0.1, 0.1), diffuse=0.8, specular=0.5)
    ))

    world.add_light(PointLight(Point3(-10, 10, -10), Color(0.9, 0.9, 0.9)))
    world.add_light(PointLight(Point3(6, 8, -8), Color(0.3, 0.3, 0.3)))
    return world


def create_scene(name: str, settings: RenderSettings):
    """Build a built-in scene; returns (world, camera)."""
    camera = settings.make_camera()
    if name == 'default':
        world = World.default()
        camera.look_at(Point3(0, 0, -5), Point3(0, 0, 0), Vec3(0, 1, 0))
    else:
        world = create_demo_scene()
        camera.look_at(Point3(0, 3, -8), Point3(0, 1, 0), Vec3(0, 1, 0))
    return world, camera


def rebuild_camera(settings: RenderSettings, camera: Camera) -> Camera:
    """A camera sized by settings that keeps the old camera's view transform."""
    new_camera = settings.make_camera()
    new_camera.transform = camera.transform
    return new_camera


def configure_logging(verbose: bool, quiet: bool) -> None:
    level = logging.INFO
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def main(argv=None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description='Lumentrace - A Python Ray Tracer',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  python main.py --scene demo --output render.png
  python main.py --scene default --width 200 --height 200 --output default.ppm
  python main.py --scene scenes/glass.yaml --depth 8 --output glass.png
        '''
    )

    parser.add_argument('--scene', type=str, default='demo',
                        help="Built-in scene ('demo' or 'default') or a YAML/JSON scene file")
    parser.add_argument('--width', type=int, help='Image width (overrides the scene)')
    parser.add_argument('--height', type=int, help='Image height (overrides the scene)')
    parser.add_argument('--depth', type=int, help='Max reflection/refraction depth (default: 5)')
    parser.add_argument('--fov', type=float, help='Field of view in degrees (default: 60)')
    parser.add_argument('--output', type=str, default='output/render.png', help='Output filename')
    parser.add_argument('-v', '--verbose', action='store_true', help='Log debug messages')
    parser.add_argument('-q', '--quiet', action='store_true', help='Only log warnings and errors')

    args = parser.parse_args(argv)
    configure_logging(args.verbose, args.quiet)

    overrides = {
        'width': args.width,
        'height': args.height,
        'max_depth': args.depth,
        'field_of_view': args.fov,
    }
    overrides = {k: v for k, v in overrides.items() if v is not None}

    try:
        if args.scene in ('demo', 'default'):
            settings = dataclasses.replace(RenderSettings(), **overrides)
            world, camera = create_scene(args.scene, settings)
        else:
            world, camera, settings = load_scene(args.scene)
            if overrides:
                settings = dataclasses.replace(settings, **overrides)
                camera = rebuild_camera(settings, camera)
    except SceneParseError as err:
        logger.error("Could not load scene %s: %s", args.scene, err)
        return 1
    except ValueError as err:
        logger.error("Invalid render settings: %s", err)
        return 1

    logger.info("Scene %s: %d objects, %d lights", args.scene, len(world), len(world.lights))

    renderer = Renderer(settings)

    last_progress = [0]

    def progress_callback(progress: float):
        pct = int(progress * 100)
        if pct >= last_progress[0] + 10:
            last_progress[0] = pct
            logger.info("Rendering: %d%%", pct)

    renderer.set_progress_callback(progress_callback)

    canvas = renderer.render(world, camera)
    renderer.save_image(canvas, args.output)
    return 0


if __name__ == '__main__':
    sys.exit(main())
