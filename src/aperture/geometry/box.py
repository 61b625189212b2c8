"""Axis-aligned box primitive using the slab test.

Example:
    >>> from aperture.core.ray import make_ray, vec3
    >>> from aperture.geometry.box import Box, hit_box
    >>> box = Box(center=vec3(0.0, 0.0, -3.0), size=vec3(1.0, 1.0, 1.0))
    >>> hit_box(make_ray((0, 0, 0), (0, 0, -1)), box, 0.001, 1e10).t
    2.5
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from aperture.core.ray import Ray, Vec3, ray_at

from .sphere import HitRecord


@dataclass(frozen=True)
class Box:
    """An axis-aligned box given by its center and edge lengths."""

    center: Vec3
    size: Vec3

    def __post_init__(self) -> None:
        object.__setattr__(self, "center", np.asarray(self.center, dtype=np.float64))
        size = np.asarray(self.size, dtype=np.float64)
        if np.any(size <= 0.0):
            raise ValueError(f"Box size must be positive in every axis, got {size}")
        object.__setattr__(self, "size", size)

    @property
    def minimum(self) -> Vec3:
        return self.center - 0.5 * self.size

    @property
    def maximum(self) -> Vec3:
        return self.center + 0.5 * self.size


def _face_normal(local_point: Vec3, half_size: Vec3) -> Vec3:
    # Axis whose face the point lies closest to, relative to the box extent
    distances = np.abs(np.abs(local_point) - half_size)
    axis = int(np.argmin(distances))
    normal = np.zeros(3, dtype=np.float64)
    normal[axis] = 1.0 if local_point[axis] > 0.0 else -1.0
    return normal


def hit_box(ray: Ray, box: Box, t_min: float, t_max: float) -> HitRecord | None:
    """Intersect a ray with an axis-aligned box.

    Returns the entry point when it lies in (t_min, t_max), otherwise the exit
    point (the ray starts inside the box). The normal points outward.
    """
    with np.errstate(divide="ignore", invalid="ignore"):
        inv_dir = 1.0 / ray.direction
        t1 = (box.minimum - ray.origin) * inv_dir
        t2 = (box.maximum - ray.origin) * inv_dir

    # 0 * inf on a slab boundary; treat the axis as unbounded
    t_low = np.where(np.isnan(t1), -np.inf, np.minimum(t1, t2))
    t_high = np.where(np.isnan(t2), np.inf, np.maximum(t1, t2))

    t_near = float(np.max(t_low))
    t_far = float(np.min(t_high))
    if t_near > t_far:
        return None

    if t_min < t_near < t_max:
        t = t_near
    elif t_min < t_far < t_max:
        t = t_far
    else:
        return None

    point = ray_at(ray, t)
    normal = _face_normal(point - box.center, 0.5 * box.size)
    return HitRecord(t=t, point=point, normal=normal)
