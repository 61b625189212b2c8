"""Perfect mirror material.

A mirror reflects the incident direction about the normal with no roughness
perturbation and no attenuation. It consumes no random numbers.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from aperture.core.ray import Vec3, reflect


@dataclass(frozen=True)
class Mirror:
    """Ideal specular reflector (no parameters)."""


def scatter_mirror(
    incident_direction: Vec3,
    normal: Vec3,
) -> tuple[Vec3, Vec3, bool]:
    """Reflect the incident ray perfectly.

    Returns:
        A tuple of (reflected_direction, white attenuation, True).
    """
    return reflect(incident_direction, normal), np.ones(3, dtype=np.float64), True
