"""Demo gallery scene: a material showcase on a ground plane.

The layout places objects at three depth bands in front of the camera so the
focus controls have something to work with:

- Near (2.5 to 3 units): clear glass sphere, brushed steel sphere
- Middle (4.5 to 5.5 units): gold centre sphere, pale metal, glass
- Far (7 to 9 units): orange diffuse, mirror, green diffuse
- Small emissive spheres as point-like lights, from a warm lamp near the
  middle band to tiny bright lights far behind the scene

Example:
    >>> from aperture.scene.gallery import create_gallery_scene
    >>> world, camera = create_gallery_scene()
    >>> len(world)
    18
"""

from __future__ import annotations

from aperture.camera.thin_lens import ApertureShape, CameraModel, ThinLensCamera
from aperture.materials import Diffuse, Emissive, Glass, Metal, Mirror

from .world import World

# Camera defaults for the gallery
CAMERA_POSITION = (0.0, 1.5, -5.0)
CAMERA_LOOK_AT = (0.0, 0.0, 5.0)
FOCUS_DISTANCE = 5.0

# (center, radius, emission)
GALLERY_LIGHTS = [
    ((2.5, 2.0, 4.0), 0.15, (6.0, 5.0, 4.0)),
    ((2.5, 1.5, 8.0), 0.03, (4.0, 6.0, 8.0)),
    ((-2.5, 1.5, 8.0), 0.03, (8.0, 4.0, 6.0)),
    ((3.0, 2.0, 20.0), 0.01, (15.0, 15.0, 10.0)),
    ((-3.0, 2.0, 20.0), 0.01, (6.0, 8.0, 10.0)),
    ((0.0, 3.0, 25.0), 0.008, (20.0, 20.0, 20.0)),
    ((1.5, 2.5, 22.0), 0.008, (10.0, 6.0, 4.0)),
    ((-1.5, 2.5, 22.0), 0.008, (4.0, 10.0, 6.0)),
]


def build_gallery(world: World) -> World:
    """Add the gallery objects to an existing world and return it."""
    world.add_plane((0.0, -1.0, 0.0), (0.0, 1.0, 0.0), Diffuse((0.5, 0.5, 0.5)))

    # Near
    world.add_sphere((-1.5, -0.3, 2.5), 0.5, Glass(ior=1.5))
    world.add_sphere((1.2, -0.5, 3.0), 0.4, Metal((0.5, 0.5, 0.55), roughness=0.2))

    # Middle
    world.add_sphere((0.0, 0.0, 5.0), 1.0, Metal((1.0, 0.75, 0.2), roughness=0.15))
    world.add_sphere((-2.0, -0.5, 4.5), 0.6, Metal((0.9, 0.9, 0.9), roughness=0.3))
    world.add_sphere((2.5, 0.2, 5.5), 0.7, Glass(ior=1.5))

    # Far
    world.add_sphere((-1.0, 0.0, 7.0), 0.8, Diffuse((0.9, 0.5, 0.2)))
    world.add_sphere((1.8, -0.2, 8.0), 0.6, Mirror())
    world.add_sphere((0.0, 0.5, 9.0), 0.5, Diffuse((0.5, 0.9, 0.3)))

    # A small box on the ground between the near and middle bands
    world.add_box((-0.6, -0.8, 3.8), (0.4, 0.4, 0.4), Diffuse((0.7, 0.7, 0.75)))

    for center, radius, emission in GALLERY_LIGHTS:
        world.add_sphere(center, radius, Emissive(emission))

    return world


def create_gallery_scene(
    fog_density: float = 0.0,
    aperture_fstop: float = 50.0,
    aperture_shape: ApertureShape | str = ApertureShape.STAR,
) -> tuple[World, ThinLensCamera]:
    """Create the gallery world and a thin-lens camera focused on its centre.

    Args:
        fog_density: Fog density of the world (0 disables fog).
        aperture_fstop: f-number of the camera.
        aperture_shape: Aperture shape, visible in out-of-focus highlights.

    Returns:
        Tuple of (world, camera).
    """
    world = build_gallery(World(fog_density=fog_density))
    camera = ThinLensCamera(
        position=CAMERA_POSITION,
        look_at=CAMERA_LOOK_AT,
        model=CameraModel.THIN_LENS,
        focus_distance=FOCUS_DISTANCE,
        aperture_fstop=aperture_fstop,
        aperture_shape=aperture_shape,
    )
    return world, camera
