"""Lambertian (ideal diffuse) material implementation.

This module implements the diffuse scattering rule. The scattered direction is
the surface normal plus a uniformly distributed point on the unit sphere,
normalized, which yields a cosine-weighted distribution about the normal.

The reflected radiance is attenuated by the albedo:
    L_out = albedo * L_in

Example:
    >>> import numpy as np
    >>> from aperture.core.ray import vec3
    >>> from aperture.materials.lambertian import Diffuse, scatter_lambertian
    >>> rng = np.random.default_rng(7)
    >>> direction, attenuation, did_scatter = scatter_lambertian(
    ...     Diffuse(albedo=(0.8, 0.3, 0.3)), vec3(0.0, 1.0, 0.0), rng
    ... )
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from aperture.core.ray import (
    RandomSource,
    Vec3,
    near_zero,
    normalize,
    random_unit_vector,
)


@dataclass(frozen=True)
class Diffuse:
    """Lambertian (diffuse) material properties.

    Attributes:
        albedo: The diffuse reflectance (RGB, each component in [0, 1]).
    """

    albedo: tuple[float, float, float] = (0.8, 0.8, 0.8)

    def __post_init__(self) -> None:
        if any(c < 0.0 for c in self.albedo):
            raise ValueError(f"Albedo {self.albedo} must be non-negative")


def scatter_lambertian(
    material: Diffuse,
    normal: Vec3,
    rng: RandomSource,
) -> tuple[Vec3, Vec3, bool]:
    """Sample a scattered direction for a diffuse surface.

    Args:
        material: The diffuse material.
        normal: The surface normal at the hit point (unit length).
        rng: Random source (two draws).

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter) where:
        - scattered_direction: normalize(normal + random_unit_vector()).
        - attenuation: The material albedo.
        - did_scatter: Always True; diffuse surfaces never absorb the path.
    """
    target = normal + random_unit_vector(rng)

    # The random vector can cancel the normal exactly
    if near_zero(target):
        target = normal

    scattered_direction = normalize(target)
    attenuation = np.array(material.albedo, dtype=np.float64)
    return scattered_direction, attenuation, True
