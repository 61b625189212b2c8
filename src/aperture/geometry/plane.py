"""Infinite plane primitive.

A plane is defined by a point on it and a normal. Unlike spheres, planes are
two-sided: the reported normal is flipped to face the incoming ray.

Example:
    >>> from aperture.core.ray import make_ray, vec3
    >>> from aperture.geometry.plane import Plane, hit_plane
    >>> ground = Plane(point=vec3(0.0, -1.0, 0.0), normal=vec3(0.0, 1.0, 0.0))
    >>> hit_plane(make_ray((0, 0, 0), (0, -1, 0)), ground, 0.001, 1e10).t
    1.0
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from aperture.core.ray import Ray, Vec3, dot, normalize, ray_at

from .sphere import HitRecord

# Rays closer to parallel than this never hit
PARALLEL_EPSILON = 1e-4


@dataclass(frozen=True)
class Plane:
    """An infinite plane through ``point`` with unit ``normal``."""

    point: Vec3
    normal: Vec3

    def __post_init__(self) -> None:
        object.__setattr__(self, "point", np.asarray(self.point, dtype=np.float64))
        normal = normalize(np.asarray(self.normal, dtype=np.float64))
        if not normal.any():
            raise ValueError("Plane normal must be non-zero")
        object.__setattr__(self, "normal", normal)


def hit_plane(ray: Ray, plane: Plane, t_min: float, t_max: float) -> HitRecord | None:
    """Intersect a ray with a plane.

    Args:
        ray: The ray to test.
        plane: The plane.
        t_min: Minimum valid t.
        t_max: Maximum valid t.

    Returns:
        A HitRecord with the normal facing the ray, or None when the ray is
        parallel to the plane or the hit lies outside (t_min, t_max).
    """
    denom = dot(plane.normal, ray.direction)
    if abs(denom) < PARALLEL_EPSILON:
        return None

    t = dot(plane.point - ray.origin, plane.normal) / denom
    if not t_min < t < t_max:
        return None

    normal = plane.normal if denom < 0.0 else -plane.normal
    return HitRecord(t=t, point=ray_at(ray, t), normal=normal)
