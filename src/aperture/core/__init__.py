"""Core rendering module.

This module contains the fundamental building blocks for path tracing:

Components:
    ray: Ray data structure and vector/colour utilities
    distortion: Radial lens distortion of image-plane coordinates
    volume: Fog scattering events
    integrator: Recursive path tracing with material dispatch
    sampling: Per-pixel random streams, jitter and tiling
    focus: Depth-of-field visualisation
    buffers: Taichi accumulation buffer and render targets
    config: Renderer options
    progressive: Progressive tiled renderer

Paths are traced on the CPU with NumPy; the per-pixel image work of
accumulating passes and resolving them for display runs in Taichi kernels.
"""

from .distortion import DistortionParams, DistortionType, apply_distortion, distort
from .ray import (
    RandomSource,
    Ray,
    black,
    dot,
    is_finite,
    length,
    length_squared,
    make_ray,
    near_zero,
    normalize,
    random_unit_vector,
    ray_at,
    reflect,
    refract,
    sanitize_color,
    schlick_fresnel,
    vec3,
)

# Note: integrator and progressive are NOT imported here to avoid circular imports
# with aperture.materials and aperture.scene. Import them directly:
#   from aperture.core.integrator import PathIntegrator
#   from aperture.core.progressive import ProgressiveRenderer

__all__ = [
    "Ray",
    "RandomSource",
    "ray_at",
    "make_ray",
    "vec3",
    "black",
    "length",
    "length_squared",
    "normalize",
    "dot",
    "reflect",
    "refract",
    "schlick_fresnel",
    "near_zero",
    "is_finite",
    "sanitize_color",
    "random_unit_vector",
    "DistortionParams",
    "DistortionType",
    "apply_distortion",
    "distort",
]
