"""Camera module for primary ray generation.

This module provides the camera model used by the renderer:

Components:
    thin_lens: Pinhole and thin-lens camera with shaped apertures

Camera responsibilities:
    - Transform (u, v) film coordinates in [-1, 1] to world-space rays
    - Sample the aperture for depth of field
    - Compute field of view from sensor size and focal length
    - Carry the lens distortion settings the renderer applies

The renderer only relies on ``generate_ray(u, v, rng)`` and the attributes
``focus_distance``, ``aperture_fstop``, ``focal_length``, ``distortion_type``,
``distortion_amount`` and ``aspect_ratio``.
"""

from .thin_lens import (
    ApertureShape,
    CameraModel,
    ThinLensCamera,
    rotate_point,
    sample_aperture,
)

__all__ = [
    "ThinLensCamera",
    "CameraModel",
    "ApertureShape",
    "sample_aperture",
    "rotate_point",
]
