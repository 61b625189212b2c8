"""Radial lens distortion applied to image-plane coordinates.

Distortion is applied to normalized device coordinates (u, v), roughly in
[-1, 1], before the camera turns them into a primary ray. With
r = sqrt(u^2 + v^2) the supported models are:

    barrel      r' = r (1 + k r^2),  k = 0.5 * amount   (wide angle)
    pincushion  r' = r (1 - k r^2),  k = 0.3 * amount   (telephoto)
    fisheye     r' = sin(r * pi/2 * (1 + 0.5 * amount))

The radial scale r' / (r + 1e-4) is applied to both coordinates. A zero (or
negative) amount, or the NONE model, leaves the coordinates untouched.

Example:
    >>> from aperture.core.distortion import DistortionType, apply_distortion
    >>> apply_distortion(0.5, 0.5, DistortionType.BARREL, 0.4)
    (0.5499..., 0.5499...)
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

# Guards the radial scale at the image centre
RADIUS_EPSILON = 1e-4

BARREL_STRENGTH = 0.5
PINCUSHION_STRENGTH = 0.3
FISHEYE_FOV_GROWTH = 0.5


class DistortionType(str, Enum):
    """Supported lens distortion models.

    The string values match the camera's ``distortion_type`` setting, so
    ``DistortionType("barrel")`` works for plain string configuration.
    """

    NONE = "none"
    BARREL = "barrel"
    PINCUSHION = "pincushion"
    FISHEYE = "fisheye"


@dataclass(frozen=True)
class DistortionParams:
    """Lens distortion configuration read from the camera.

    Attributes:
        type: The distortion model.
        amount: Strength of the effect, typically in [0, 1].
    """

    type: DistortionType = DistortionType.NONE
    amount: float = 0.0

    @property
    def is_identity(self) -> bool:
        return self.type is DistortionType.NONE or self.amount <= 0.0


def _distorted_radius(r: float, distortion_type: DistortionType, amount: float) -> float:
    if distortion_type is DistortionType.BARREL:
        k = amount * BARREL_STRENGTH
        return r * (1.0 + k * r * r)
    if distortion_type is DistortionType.PINCUSHION:
        k = amount * PINCUSHION_STRENGTH
        return r * (1.0 - k * r * r)
    if distortion_type is DistortionType.FISHEYE:
        theta = r * (math.pi / 2.0) * (1.0 + amount * FISHEYE_FOV_GROWTH)
        return math.sin(theta)
    return r


def apply_distortion(
    u: float,
    v: float,
    distortion_type: DistortionType | str,
    amount: float,
) -> tuple[float, float]:
    """Map image-plane coordinates through a radial distortion.

    Args:
        u: Horizontal normalized coordinate.
        v: Vertical normalized coordinate.
        distortion_type: The distortion model (enum member or its string value).
        amount: Distortion strength.

    Returns:
        The distorted (u', v'). Returns (u, v) unchanged for NONE or when
        amount <= 0.
    """
    distortion_type = DistortionType(distortion_type)
    if distortion_type is DistortionType.NONE or amount <= 0.0:
        return u, v

    r = math.sqrt(u * u + v * v)
    scale = _distorted_radius(r, distortion_type, amount) / (r + RADIUS_EPSILON)
    return u * scale, v * scale


def distort(u: float, v: float, params: DistortionParams) -> tuple[float, float]:
    """Apply a DistortionParams bundle; see apply_distortion."""
    return apply_distortion(u, v, params.type, params.amount)
