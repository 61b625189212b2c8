"""Metal (specular reflective) material implementation.

This module implements the metal BSDF, which models specular reflection with
optional roughness (fuzziness). Perfect metals (roughness=0) produce mirror-like
reflections, while rougher metals scatter reflected rays within a cone.

The reflection formula is:
    R = I - 2(I . N)N

where I is the incident direction and N is the surface normal.

For rough metals the reflected direction is perturbed by roughness times a
random unit vector and renormalized. A perturbed direction that points into
the surface is absorbed.

Example:
    >>> import numpy as np
    >>> from aperture.core.ray import vec3, normalize
    >>> from aperture.materials.metal import Metal, scatter_metal
    >>> rng = np.random.default_rng(1)
    >>> direction, attenuation, did_scatter = scatter_metal(
    ...     Metal(albedo=(0.9, 0.9, 0.9), roughness=0.1),
    ...     normalize(vec3(1.0, -1.0, 0.0)),
    ...     vec3(0.0, 1.0, 0.0),
    ...     rng,
    ... )
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from aperture.core.ray import (
    RandomSource,
    Vec3,
    dot,
    normalize,
    random_unit_vector,
    reflect,
)


@dataclass(frozen=True)
class Metal:
    """Metal (specular reflective) material properties.

    Attributes:
        albedo: The reflective color (RGB, each component in [0, 1]).
            Represents the color tint of reflected light.
        roughness: The surface roughness/fuzziness in [0, 1].
            0 = perfect mirror, 1 = maximum fuzziness.
    """

    albedo: tuple[float, float, float] = (0.9, 0.9, 0.9)
    roughness: float = 0.0

    def __post_init__(self) -> None:
        if not 0.0 <= self.roughness <= 1.0:
            raise ValueError(f"Roughness = {self.roughness} must be in [0, 1]")
        if any(c < 0.0 for c in self.albedo):
            raise ValueError(f"Albedo {self.albedo} must be non-negative")


def scatter_metal(
    material: Metal,
    incident_direction: Vec3,
    normal: Vec3,
    rng: RandomSource,
) -> tuple[Vec3, Vec3, bool]:
    """Compute scattered ray direction for metal material.

    Reflects the incident ray about the surface normal, then perturbs the
    reflected direction based on roughness. The ray is absorbed if the
    scattered direction ends up on or below the surface.

    Args:
        material: The metal material.
        incident_direction: The incoming ray direction (should be normalized).
        normal: The surface normal (should be normalized).
        rng: Random source (two draws, consumed even for roughness 0).

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter) where:
        - scattered_direction: The reflected direction (normalized), or the
          zero vector when absorbed.
        - attenuation: The color attenuation (equals albedo for metals).
        - did_scatter: True if the ray scattered above surface, False if absorbed.
    """
    reflected = reflect(incident_direction, normal)

    # Scale random offset by roughness (0 = perfect mirror, 1 = max fuzz)
    fuzz_offset = material.roughness * random_unit_vector(rng)
    scattered_direction = normalize(reflected + fuzz_offset)

    attenuation = np.array(material.albedo, dtype=np.float64)

    if dot(scattered_direction, normal) <= 0.0:
        return np.zeros(3, dtype=np.float64), attenuation, False

    return scattered_direction, attenuation, True
