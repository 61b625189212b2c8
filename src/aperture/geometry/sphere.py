"""Sphere primitive with robust ray-sphere intersection.

This module provides a Sphere dataclass and intersection function using the
robust quadratic formula from Ray Tracing Gems to avoid floating-point artifacts.

The robust quadratic formula avoids catastrophic cancellation when b^2 is
nearly equal to 4ac by using a reformulated calculation that maintains
numerical stability.

Both roots are tried, so a ray starting inside the sphere hits the far side.
The reported normal always points outward from the centre; materials that care
about the side (glass) compare it with the ray direction themselves.

Example:
    >>> from aperture.core.ray import make_ray, vec3
    >>> from aperture.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(center=vec3(0.0, 0.0, -1.0), radius=0.5)
    >>> record = hit_sphere(make_ray((0, 0, 0), (0, 0, -1)), sphere, 0.001, 1e10)
    >>> round(record.t, 6)
    0.5
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from aperture.core.ray import Ray, Vec3, dot, normalize, ray_at


@dataclass(frozen=True)
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere.
        radius: The radius of the sphere (positive float).
    """

    center: Vec3
    radius: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "center", np.asarray(self.center, dtype=np.float64))
        if self.radius <= 0.0:
            raise ValueError(f"Sphere radius must be positive, got {self.radius}")


@dataclass(frozen=True)
class HitRecord:
    """Geometric part of a ray-primitive intersection.

    Attributes:
        t: The parameter value along the ray where intersection occurred.
        point: The 3D point where the ray intersected the surface.
        normal: The unit surface normal at the intersection point.
    """

    t: float
    point: Vec3
    normal: Vec3


def _solve_quadratic_robust(h: float, a: float, c: float, sqrt_d: float) -> tuple[float, float]:
    """Solve a*t^2 + 2*h*t + c = 0 using a numerically stable method.

    Returns:
        Tuple of (t0, t1) where t0 <= t1.
    """
    # q = -(h + sign(h) * sqrt(discriminant))
    sign_h = -1.0 if h < 0.0 else 1.0
    q = -(h + sign_h * sqrt_d)

    if abs(q) < 1e-10:
        # Tangent ray; fall back to the standard formula
        t0 = (-h - sqrt_d) / a
        t1 = (-h + sqrt_d) / a
    else:
        t0 = q / a
        t1 = c / q

    if t0 > t1:
        t0, t1 = t1, t0
    return t0, t1


def hit_sphere(ray: Ray, sphere: Sphere, t_min: float, t_max: float) -> HitRecord | None:
    """Test for ray-sphere intersection using robust quadratic formula.

    The ray-sphere intersection is found by solving:
        |origin + t * direction - center|^2 = radius^2

    which expands to a*t^2 + 2*h*t + c = 0 with
        a = dot(direction, direction)
        h = dot(direction, oc)
        c = dot(oc, oc) - radius^2
        oc = origin - center

    Args:
        ray: The ray to test.
        sphere: The sphere to test intersection against.
        t_min: Minimum t value to consider a valid hit (avoids self-intersection).
        t_max: Maximum t value to consider a valid hit.

    Returns:
        The nearest HitRecord in (t_min, t_max), or None.
    """
    oc = ray.origin - sphere.center

    a = dot(ray.direction, ray.direction)
    h = dot(ray.direction, oc)
    c = dot(oc, oc) - sphere.radius * sphere.radius

    discriminant = h * h - a * c
    if discriminant < 0.0 or a == 0.0:
        return None

    t0, t1 = _solve_quadratic_robust(h, a, c, math.sqrt(discriminant))

    t = t0
    if not t_min < t < t_max:
        t = t1
        if not t_min < t < t_max:
            return None

    point = ray_at(ray, t)
    outward_normal = normalize((point - sphere.center) / sphere.radius)
    return HitRecord(t=t, point=point, normal=outward_normal)
