"""Emissive (light source) material implementation.

An emissive surface terminates the path: the integrator returns its emission
directly, whatever the incoming direction and bounce depth, and no further
rays are traced.

Example:
    >>> from aperture.materials.emissive import Emissive, emitted
    >>> lamp = Emissive(emission=(6.0, 5.0, 4.0))
    >>> emitted(lamp)
    array([6., 5., 4.])
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from aperture.core.ray import Vec3


@dataclass(frozen=True)
class Emissive:
    """Light-emitting material.

    Attributes:
        emission: Emitted radiance (RGB, linear, may exceed 1).
    """

    emission: tuple[float, float, float] = (1.0, 1.0, 1.0)

    def __post_init__(self) -> None:
        if any(c < 0.0 for c in self.emission):
            raise ValueError(f"Emission {self.emission} must be non-negative")


def emitted(material: Emissive) -> Vec3:
    """Return the radiance emitted by the material."""
    return np.array(material.emission, dtype=np.float64)
