"""Pytest configuration for path tracer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session, a scripted random
source for deterministic scattering tests, and small scenes.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


class ScriptedRandom:
    """Random source returning a fixed sequence of values, then repeating the last.

    Counts how many values were drawn so tests can check random consumption.
    """

    def __init__(self, *values):
        self.values = list(values) or [0.5]
        self.draws = 0

    def random(self):
        index = min(self.draws, len(self.values) - 1)
        self.draws += 1
        return self.values[index]


@pytest.fixture
def scripted():
    """Factory fixture building ScriptedRandom sources."""
    return ScriptedRandom


@pytest.fixture
def empty_world():
    """A world with no objects: every ray sees the sky."""
    from aperture.scene.world import World

    return World()


@pytest.fixture
def pinhole_camera():
    """Pinhole camera at the origin looking down -Z.

    The f-number is above the pinhole aperture threshold, so every primary ray
    starts exactly at the camera position.
    """
    from aperture.camera.thin_lens import CameraModel, ThinLensCamera

    return ThinLensCamera(
        position=(0.0, 0.0, 0.0),
        look_at=(0.0, 0.0, -1.0),
        model=CameraModel.PINHOLE,
        aperture_fstop=32.0,
        focus_distance=5.0,
    )


@pytest.fixture
def glowing_world():
    """A world enclosed in a large white emissive sphere centred at the origin."""
    from aperture.materials import Emissive
    from aperture.scene.world import World

    world = World()
    world.add_sphere((0.0, 0.0, 0.0), 100.0, Emissive((1.0, 1.0, 1.0)))
    return world


@pytest.fixture
def diffuse_world():
    """Ground plane and a diffuse sphere lit only by the sky."""
    from aperture.materials import Diffuse
    from aperture.scene.world import World

    world = World()
    world.add_plane((0.0, -1.0, 0.0), (0.0, 1.0, 0.0), Diffuse((0.5, 0.5, 0.5)))
    world.add_sphere((0.0, 0.0, -3.0), 1.0, Diffuse((0.8, 0.3, 0.3)))
    return world
