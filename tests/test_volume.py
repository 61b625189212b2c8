"""Unit tests for fog scattering.

Tests cover:
- Gating on the volumetric switch and fog density
- Free-flight sampling in the reference scene
- Volume versus surface precedence
- Isotropic scattering and fog tinting
"""

import math

import numpy as np
import pytest

from aperture.core.ray import length, make_ray, vec3
from aperture.core.volume import (
    VOLUME_CUTOFF,
    sample_volume_event,
    scatter_isotropic,
    tint_by_fog,
    volume_enabled,
    volume_takes_precedence,
)
from aperture.materials import Diffuse
from aperture.scene.hit import Hit, VolumeHit
from aperture.scene.world import World


def _surface_hit(t):
    return Hit(point=vec3(0.0, 0.0, -t), normal=vec3(0.0, 0.0, 1.0), material=Diffuse(), t=t)


class TestVolumeEnabled:
    """Tests for the volume gate."""

    def test_requires_switch_and_density(self):
        """Test both the switch and a positive density are needed."""
        assert volume_enabled(World(fog_density=0.1), True)
        assert not volume_enabled(World(fog_density=0.1), False)
        assert not volume_enabled(World(fog_density=0.0), True)


class TestSampleVolume:
    """Tests for free-flight sampling."""

    def test_distance_follows_exponential(self, scripted):
        """Test t = -ln(1 - U) / density."""
        world = World(fog_density=0.5)
        ray = make_ray((0, 0, 0), (0, 0, -1))
        event = world.sample_volume(ray, 100.0, scripted(0.5))
        assert event is not None
        assert event.t == pytest.approx(math.log(2.0) / 0.5)
        assert np.allclose(event.point, (0.0, 0.0, -event.t))

    def test_no_event_beyond_max_distance(self, scripted):
        """Test events past the surface are discarded."""
        world = World(fog_density=0.5)
        ray = make_ray((0, 0, 0), (0, 0, -1))
        assert world.sample_volume(ray, 1.0, scripted(0.5)) is None

    def test_zero_density_draws_nothing(self, scripted):
        """Test fog-free scenes consume no randomness."""
        rng = scripted(0.5)
        assert World().sample_volume(make_ray((0, 0, 0), (0, 0, -1)), 10.0, rng) is None
        assert rng.draws == 0

    def test_miss_uses_cutoff(self, scripted):
        """Test the cutoff bounds the flight when no surface is hit."""
        world = World(fog_density=0.001)
        ray = make_ray((0, 0, 0), (0, 0, -1))
        # t = -ln(0.5) / 0.001 ~ 693 < cutoff
        assert sample_volume_event(world, ray, None, scripted(0.5)) is not None
        # t = -ln(1e-6) / 0.001 ~ 13816 > cutoff
        assert sample_volume_event(world, ray, None, scripted(1.0 - 1e-6)) is None
        assert VOLUME_CUTOFF == 1000.0

    def test_surface_distance_bounds_flight(self, scripted):
        """Test the nearest surface distance is the upper bound."""
        world = World(fog_density=1.0)
        ray = make_ray((0, 0, 0), (0, 0, -1))
        # t = ln 2 ~ 0.69
        assert sample_volume_event(world, ray, _surface_hit(0.5), scripted(0.5)) is None
        assert sample_volume_event(world, ray, _surface_hit(2.0), scripted(0.5)) is not None


class TestPrecedence:
    """Tests for volume versus surface precedence."""

    def test_closer_volume_wins(self):
        """Test a volume event strictly before the surface takes precedence."""
        assert volume_takes_precedence(VolumeHit(1.0, vec3(0, 0, -1)), _surface_hit(2.0))

    def test_equal_distance_prefers_surface(self):
        """Test ties go to the surface."""
        assert not volume_takes_precedence(VolumeHit(2.0, vec3(0, 0, -2)), _surface_hit(2.0))

    def test_volume_wins_on_miss(self):
        """Test any volume event wins when there is no surface."""
        assert volume_takes_precedence(VolumeHit(5.0, vec3(0, 0, -5)), None)

    def test_no_volume_event(self):
        """Test without an event the surface is used."""
        assert not volume_takes_precedence(None, _surface_hit(1.0))
        assert not volume_takes_precedence(None, None)


class TestScatterAndTint:
    """Tests for isotropic scattering and fog colour."""

    def test_scattered_ray_starts_at_event(self):
        """Test the new ray leaves from the scatter point in a unit direction."""
        event = VolumeHit(3.0, vec3(1.0, 2.0, 3.0))
        ray = scatter_isotropic(event, np.random.default_rng(0))
        assert np.allclose(ray.origin, (1.0, 2.0, 3.0))
        assert length(ray.direction) == pytest.approx(1.0)

    def test_tint_multiplies_componentwise(self):
        """Test gathered light is multiplied by the fog colour."""
        result = tint_by_fog(vec3(1.0, 0.5, 2.0), (0.7, 0.8, 0.9))
        assert np.allclose(result, (0.7, 0.4, 1.8))
