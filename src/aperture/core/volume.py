"""Volumetric scattering in participating media (fog).

A simplified single-scattering model: when the scene reports a positive fog
density and volumetric scattering is enabled, the scene is asked for a free
flight distance up to the nearest surface. If a scatter event happens first,
the ray continues from the scatter point in an isotropic direction and the
radiance it gathers is tinted by the fog colour. There is no extinction term
beyond this binary gate.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from aperture.core.ray import RandomSource, Ray, Vec3, random_unit_vector

if TYPE_CHECKING:
    from aperture.scene.hit import Hit, SceneProtocol, VolumeHit

# Distance cutoff used when no surface bounds the ray
VOLUME_CUTOFF = 1000.0


def volume_enabled(scene: SceneProtocol, enable_volumetric_scattering: bool) -> bool:
    """Return True when the scene must be queried for volume events."""
    return enable_volumetric_scattering and scene.fog_density > 0.0


def sample_volume_event(
    scene: SceneProtocol,
    ray: Ray,
    surface_hit: Hit | None,
    rng: RandomSource,
) -> VolumeHit | None:
    """Ask the scene for a scatter event before the nearest surface.

    Args:
        scene: The scene being traced.
        ray: The current ray.
        surface_hit: The nearest surface hit, or None on a miss.
        rng: Random source passed through to the scene.

    Returns:
        The volume event, or None if the ray reaches the surface (or the
        cutoff) without scattering.
    """
    max_distance = surface_hit.t if surface_hit is not None else VOLUME_CUTOFF
    return scene.sample_volume(ray, max_distance, rng)


def volume_takes_precedence(volume_hit: VolumeHit | None, surface_hit: Hit | None) -> bool:
    """A volume event wins if it is strictly closer than the surface (or there is none)."""
    if volume_hit is None:
        return False
    if surface_hit is None:
        return True
    return volume_hit.t < surface_hit.t


def scatter_isotropic(volume_hit: VolumeHit, rng: RandomSource) -> Ray:
    """Build the scattered ray leaving a volume event.

    Args:
        volume_hit: The scatter event.
        rng: Random source (two draws).

    Returns:
        A ray from the scatter point in a uniformly random direction.
    """
    return Ray(origin=volume_hit.point, direction=random_unit_vector(rng))


def tint_by_fog(color: Vec3, fog_color: tuple[float, float, float]) -> Vec3:
    """Multiply gathered radiance by the fog colour, component-wise."""
    return color * np.asarray(fog_color, dtype=np.float64)
