"""Dielectric (glass) material implementation.

This module implements the glass BSDF, which models transparent materials
with refraction and Fresnel reflectance.

Key physics:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Schlick's approximation for Fresnel reflectance
    - Total internal reflection when sin^2(theta_t) > 1

Whether the ray enters or leaves the medium is decided by the sign of
dot(incident, normal): the normal is flipped to face the ray and the relative
index becomes 1/ior on entry and ior on exit. When refraction is possible the
material randomly chooses between reflection and refraction based on the
Fresnel reflectance probability, which increases at grazing angles. Glass is
non-absorbing, so the attenuation is always white.

Example:
    >>> import numpy as np
    >>> from aperture.core.ray import vec3
    >>> from aperture.materials.dielectric import Glass, scatter_dielectric
    >>> rng = np.random.default_rng(3)
    >>> direction, attenuation, did_scatter = scatter_dielectric(
    ...     Glass(ior=1.5), vec3(0.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0), rng
    ... )
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from aperture.core.ray import (
    RandomSource,
    Vec3,
    dot,
    reflect,
    refract,
    schlick_fresnel,
)


@dataclass(frozen=True)
class Glass:
    """Dielectric (glass/water) material properties.

    Attributes:
        ior: Index of refraction. Common values:
            - Air: 1.0
            - Water: 1.33
            - Glass: 1.5
            - Diamond: 2.4
    """

    ior: float = 1.5

    def __post_init__(self) -> None:
        if self.ior < 1.0:
            raise ValueError(
                f"Index of refraction = {self.ior} is less than 1.0. "
                "IOR must be >= 1.0 for physically meaningful materials."
            )


def _orient(ior: float, incident_direction: Vec3, normal: Vec3) -> tuple[Vec3, float]:
    """Return the normal facing the ray and the relative refractive index."""
    entering = dot(incident_direction, normal) < 0.0
    if entering:
        return normal, 1.0 / ior
    return -normal, ior


def will_reflect(ior: float, incident_direction: Vec3, normal: Vec3) -> bool:
    """Determine if total internal reflection will occur.

    Args:
        ior: Index of refraction of the material.
        incident_direction: The incoming ray direction (should be normalized).
        normal: The outward surface normal (should be normalized).

    Returns:
        True if sin^2(theta_t) > 1, so no refracted direction exists.
    """
    facing_normal, eta = _orient(ior, incident_direction, normal)
    cos_i = -dot(incident_direction, facing_normal)
    return eta * eta * (1.0 - cos_i * cos_i) > 1.0


def fresnel_reflectance(ior: float, incident_direction: Vec3, normal: Vec3) -> float:
    """Compute the Schlick reflectance for a ray meeting the surface.

    Args:
        ior: Index of refraction of the material.
        incident_direction: The incoming ray direction (should be normalized).
        normal: The outward surface normal (should be normalized).

    Returns:
        The Fresnel reflectance coefficient in [0, 1].
    """
    facing_normal, _ = _orient(ior, incident_direction, normal)
    cosine = min(-dot(incident_direction, facing_normal), 1.0)
    return schlick_fresnel(cosine, ior)


def scatter_dielectric(
    material: Glass,
    incident_direction: Vec3,
    normal: Vec3,
    rng: RandomSource,
) -> tuple[Vec3, Vec3, bool]:
    """Compute scattered ray direction for glass.

    Args:
        material: The glass material.
        incident_direction: The incoming ray direction (should be normalized).
        normal: The outward surface normal (should be normalized). Its
            orientation relative to the ray decides entry versus exit.
        rng: Random source. One draw when refraction is possible, none on
            total internal reflection.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter) where:
        - scattered_direction: The reflected or refracted direction.
        - attenuation: White; glass does not absorb.
        - did_scatter: Always True for dielectrics.
    """
    attenuation = np.ones(3, dtype=np.float64)
    facing_normal, eta = _orient(material.ior, incident_direction, normal)

    refracted = refract(incident_direction, facing_normal, eta)
    if refracted is None:
        # Total internal reflection
        return reflect(incident_direction, facing_normal), attenuation, True

    cosine = min(-dot(incident_direction, facing_normal), 1.0)
    reflectance = schlick_fresnel(cosine, material.ior)

    if rng.random() < reflectance:
        return reflect(incident_direction, facing_normal), attenuation, True
    return refracted, attenuation, True
