"""Depth-of-field visualisation.

When enabled, samples whose first interaction lies close to the camera's
focus distance are tinted green, making the in-focus band visible while
adjusting the lens. The tint weight falls off linearly from 1 at the focus
distance to 0 at the tolerance.

The auto tolerance is half the thin-lens depth of field
``DOF = 2 N c s^2 / f^2`` (N the f-number, c the circle of confusion,
s the focus distance, f the focal length in metres), but never less than 1%
of the focus distance.
"""

from __future__ import annotations

from typing import Protocol

import numpy as np

from aperture.core.ray import Vec3

# 0.03 mm circle of confusion for 35 mm film, in metres
CIRCLE_OF_CONFUSION = 0.00003

# Auto tolerance floor as a fraction of the focus distance
MIN_TOLERANCE_FRACTION = 0.01

FOCUS_TINT = np.array((0.3, 1.0, 0.3), dtype=np.float64)


class LensParameters(Protocol):
    focus_distance: float
    aperture_fstop: float
    focal_length: float


def depth_of_field(focus_distance: float, aperture_fstop: float, focal_length_mm: float) -> float:
    """Total depth of field in scene units for a thin lens."""
    focal_length = focal_length_mm / 1000.0
    return (
        2.0 * aperture_fstop * CIRCLE_OF_CONFUSION * focus_distance * focus_distance
    ) / (focal_length * focal_length)


def focus_tolerance(camera: LensParameters, manual_percent: float = 0.0) -> float:
    """Distance from the focus plane within which samples are tinted.

    Args:
        camera: Supplies focus distance, f-number and focal length (mm).
        manual_percent: 0 selects the automatic tolerance; any positive value
            is a percentage of the focus distance.

    Returns:
        The tolerance in scene units.
    """
    focus_distance = camera.focus_distance
    if manual_percent > 0.0:
        return focus_distance * (manual_percent / 100.0)
    dof = depth_of_field(focus_distance, camera.aperture_fstop, camera.focal_length)
    return max(dof / 2.0, focus_distance * MIN_TOLERANCE_FRACTION)


def tint_in_focus(color: Vec3, distance: float, focus_distance: float, tolerance: float) -> Vec3:
    """Blend a sample toward green by how close it lies to the focus plane.

    Misses (distance <= 0) and samples outside the tolerance are returned
    unchanged.
    """
    if distance <= 0.0 or tolerance <= 0.0:
        return color
    diff = abs(distance - focus_distance)
    if diff >= tolerance:
        return color
    green = 1.0 - diff / tolerance
    return color * (1.0 - green * 0.5) + green * FOCUS_TINT
