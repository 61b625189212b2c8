"""Geometry module for shape primitives.

This module provides geometric primitives and intersection algorithms:

Components:
    sphere: Sphere primitive with robust ray-sphere intersection
    plane: Infinite two-sided plane
    box: Axis-aligned box (slab test)

Every intersection routine has the form
``hit_<shape>(ray, shape, t_min, t_max) -> HitRecord | None`` and returns only
geometry; the scene attaches the material.
"""

from .box import Box, hit_box
from .plane import Plane, hit_plane
from .sphere import HitRecord, Sphere, hit_sphere

__all__ = [
    "HitRecord",
    "Sphere",
    "hit_sphere",
    "Plane",
    "hit_plane",
    "Box",
    "hit_box",
]
