"""Ray data structure and vector utilities for CPU path tracing.

This module provides the immutable Ray dataclass and the small set of vector
and colour operations the integrator needs. Vectors and colours are NumPy
float64 arrays of shape (3,); every function here is pure and returns a new
array.

Random sampling helpers take the random source as an explicit argument. Any
object with a ``random() -> float`` method in [0, 1) works, which includes
``numpy.random.Generator``.

Example:
    >>> import numpy as np
    >>> from aperture.core.ray import Ray, ray_at, vec3
    >>> ray = Ray(origin=vec3(0.0, 0.0, 0.0), direction=vec3(0.0, 0.0, -1.0))
    >>> ray_at(ray, 5.0)  # Point 5 units along the ray
    array([ 0.,  0., -5.])
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Protocol

import numpy as np
import numpy.typing as npt

Vec3 = npt.NDArray[np.float64]


class RandomSource(Protocol):
    """Minimal random source interface (satisfied by numpy.random.Generator)."""

    def random(self) -> float: ...


def vec3(x: float, y: float, z: float) -> Vec3:
    """Build a 3-component float64 vector."""
    return np.array((x, y, z), dtype=np.float64)


def black() -> Vec3:
    """Return a fresh black colour (0, 0, 0)."""
    return np.zeros(3, dtype=np.float64)


@dataclass(frozen=True)
class Ray:
    """A ray with an origin point and direction vector.

    Rays are created fresh at every bounce and never modified afterwards.

    Attributes:
        origin: The starting point of the ray.
        direction: The direction of the ray. Unit length for rays produced by
            the camera and the scattering functions.
    """

    origin: Vec3
    direction: Vec3


def make_ray(origin: npt.ArrayLike, direction: npt.ArrayLike) -> Ray:
    """Create a ray from any array-like origin and direction."""
    return Ray(
        origin=np.asarray(origin, dtype=np.float64),
        direction=np.asarray(direction, dtype=np.float64),
    )


def ray_at(ray: Ray, t: float) -> Vec3:
    """Compute the point ray.origin + t * ray.direction."""
    return ray.origin + t * ray.direction


# =============================================================================
# Vector Utility Functions
# =============================================================================


def add(a: Vec3, b: Vec3) -> Vec3:
    return a + b


def subtract(a: Vec3, b: Vec3) -> Vec3:
    return a - b


def scale(v: Vec3, s: float) -> Vec3:
    return v * s


def multiply(a: Vec3, b: Vec3) -> Vec3:
    """Component-wise product, used to attenuate colours."""
    return a * b


def dot(a: Vec3, b: Vec3) -> float:
    return float(a[0] * b[0] + a[1] * b[1] + a[2] * b[2])


def length_squared(v: Vec3) -> float:
    return dot(v, v)


def length(v: Vec3) -> float:
    return math.sqrt(length_squared(v))


def normalize(v: Vec3) -> Vec3:
    """Normalize a vector to unit length.

    Args:
        v: The input vector.

    Returns:
        A unit vector in the same direction as v. A zero-length input yields
        the zero vector instead of dividing by zero.
    """
    norm = length(v)
    if norm > 0.0:
        return v / norm
    return np.zeros(3, dtype=np.float64)


def near_zero(v: Vec3) -> bool:
    """Check if a vector is near zero in all components.

    Used to catch degenerate scatter directions.
    """
    s = 1e-8
    return bool(abs(v[0]) < s and abs(v[1]) < s and abs(v[2]) < s)


def reflect(incident: Vec3, normal: Vec3) -> Vec3:
    """Reflect an incident vector about a normal: v - 2 (v . n) n.

    Args:
        incident: The incoming direction (pointing toward the surface).
        normal: The surface normal (unit length).

    Returns:
        The reflected direction.
    """
    return incident - 2.0 * dot(incident, normal) * normal


def refract(incident: Vec3, normal: Vec3, eta: float) -> Vec3 | None:
    """Refract an incident vector through a surface using Snell's law.

    Args:
        incident: The incoming direction (unit length).
        normal: The surface normal facing against the incident ray.
        eta: Ratio of refractive indices (n_incident / n_transmitted).

    Returns:
        The normalized refracted direction, or None when
        sin^2(theta_t) = eta^2 (1 - cos^2(theta_i)) exceeds 1 (total internal
        reflection).
    """
    cos_i = -dot(incident, normal)
    sin2_t = eta * eta * (1.0 - cos_i * cos_i)
    if sin2_t > 1.0:
        return None
    cos_t = math.sqrt(1.0 - sin2_t)
    return normalize(eta * incident + (eta * cos_i - cos_t) * normal)


def schlick_fresnel(cosine: float, ior: float) -> float:
    """Compute Fresnel reflectance using Schlick's approximation.

    Args:
        cosine: Cosine of the angle between the incident direction and normal.
        ior: Index of refraction of the material.

    Returns:
        r0 + (1 - r0) (1 - cosine)^5 with r0 = ((1 - ior) / (1 + ior))^2.
    """
    r0 = ((1.0 - ior) / (1.0 + ior)) ** 2
    return r0 + (1.0 - r0) * (1.0 - cosine) ** 5


# =============================================================================
# Colour Guards
# =============================================================================


def is_finite(v: Vec3) -> bool:
    return bool(np.all(np.isfinite(v)))


def sanitize_color(color: Vec3) -> Vec3:
    """Replace a colour holding NaN or Infinity with black."""
    if is_finite(color):
        return color
    return black()


# =============================================================================
# Random Sampling Utilities for Monte Carlo
# =============================================================================


def random_unit_vector(rng: RandomSource) -> Vec3:
    """Generate a random unit vector uniformly distributed on the sphere.

    Uses the rejection-free construction z = 2 U1 - 1, phi = 2 pi U2,
    r = sqrt(1 - z^2), giving (r cos phi, r sin phi, z).

    Args:
        rng: Random source; exactly two draws are consumed.

    Returns:
        A random unit vector.
    """
    z = rng.random() * 2.0 - 1.0
    phi = rng.random() * 2.0 * math.pi
    r = math.sqrt(max(0.0, 1.0 - z * z))
    return vec3(r * math.cos(phi), r * math.sin(phi), z)
