"""Reference scene: primitives with materials, sky gradient and fog.

This module provides the World class, a plain Python scene implementing the
queries the integrator needs (``SceneProtocol``):

- ``intersect(ray)``: nearest surface hit among spheres, planes and boxes
- ``sample_volume(ray, max_distance, rng)``: exponential free-flight sampling
  through homogeneous fog
- ``sky_color(direction)``: vertical white-to-blue gradient
- ``fog_density`` and ``fog_color`` attributes

Scenes can be exported to and loaded from plain dictionaries for JSON
serialization.

Example:
    >>> from aperture.materials import Diffuse, Glass, Metal
    >>> from aperture.scene.world import World
    >>> world = World()
    >>> world.add_plane((0, -1, 0), (0, 1, 0), Diffuse((0.5, 0.5, 0.5)))
    >>> world.add_sphere((0, 0, -3), 1.0, Glass(ior=1.5))
    >>> world.add_sphere((2, 0, -3), 1.0, Metal((0.9, 0.8, 0.6), roughness=0.1))
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Union

import numpy as np
import numpy.typing as npt

from aperture.core.ray import RandomSource, Ray, Vec3, ray_at, vec3
from aperture.geometry import (
    Box,
    HitRecord,
    Plane,
    Sphere,
    hit_box,
    hit_plane,
    hit_sphere,
)
from aperture.materials import Diffuse, Emissive, Glass, Material, Metal, Mirror

from .hit import Hit, VolumeHit

# Minimum hit distance, avoids self-intersection at the ray origin
T_MIN = 0.001
T_MAX = math.inf

DEFAULT_FOG_COLOR = (0.7, 0.8, 0.9)

Shape = Union[Sphere, Plane, Box]


@dataclass(frozen=True)
class SceneObject:
    """A shape paired with its material."""

    shape: Shape
    material: Material


def _intersect_shape(ray: Ray, shape: Shape, t_max: float) -> HitRecord | None:
    match shape:
        case Sphere():
            return hit_sphere(ray, shape, T_MIN, t_max)
        case Plane():
            return hit_plane(ray, shape, T_MIN, t_max)
        case Box():
            return hit_box(ray, shape, T_MIN, t_max)
    raise TypeError(f"Unsupported shape: {shape!r}")


@dataclass
class World:
    """A collection of objects lit by a sky, optionally filled with fog.

    Attributes:
        objects: The scene objects, in insertion order.
        sky_intensity: Multiplier on the sky gradient.
        fog_density: Scattering events per unit distance; 0 disables fog.
        fog_color: Tint applied to light scattered by the fog.
    """

    objects: list[SceneObject] = field(default_factory=list)
    sky_intensity: float = 1.0
    fog_density: float = 0.0
    fog_color: tuple[float, float, float] = DEFAULT_FOG_COLOR

    # =========================================================================
    # Building
    # =========================================================================

    def add(self, shape: Shape, material: Material) -> SceneObject:
        obj = SceneObject(shape, material)
        self.objects.append(obj)
        return obj

    def add_sphere(
        self, center: npt.ArrayLike, radius: float, material: Material | None = None
    ) -> SceneObject:
        """Add a sphere. The material defaults to light grey diffuse."""
        return self.add(Sphere(np.asarray(center, dtype=np.float64), radius), material or Diffuse())

    def add_plane(
        self, point: npt.ArrayLike, normal: npt.ArrayLike, material: Material | None = None
    ) -> SceneObject:
        """Add an infinite plane through point with the given normal."""
        return self.add(
            Plane(np.asarray(point, dtype=np.float64), np.asarray(normal, dtype=np.float64)),
            material or Diffuse(),
        )

    def add_box(
        self, center: npt.ArrayLike, size: npt.ArrayLike, material: Material | None = None
    ) -> SceneObject:
        """Add an axis-aligned box."""
        return self.add(
            Box(np.asarray(center, dtype=np.float64), np.asarray(size, dtype=np.float64)),
            material or Diffuse(),
        )

    def clear(self) -> None:
        """Remove every object; sky and fog settings are kept."""
        self.objects.clear()

    def __len__(self) -> int:
        return len(self.objects)

    # =========================================================================
    # Queries
    # =========================================================================

    def intersect(self, ray: Ray) -> Hit | None:
        """Find the nearest hit with t > T_MIN, or None."""
        closest: HitRecord | None = None
        material: Material | None = None
        t_max = T_MAX

        for obj in self.objects:
            record = _intersect_shape(ray, obj.shape, t_max)
            if record is not None:
                closest = record
                material = obj.material
                t_max = record.t

        if closest is None:
            return None
        return Hit(point=closest.point, normal=closest.normal, material=material, t=closest.t)

    def sample_volume(
        self, ray: Ray, max_distance: float, rng: RandomSource
    ) -> VolumeHit | None:
        """Sample a scattering event in homogeneous fog.

        The free-flight distance is t = -ln(1 - U) / fog_density. One random
        draw is consumed whenever the density is positive.

        Returns:
            A VolumeHit when t < max_distance, otherwise None. Always None
            when fog_density <= 0.
        """
        if self.fog_density <= 0.0:
            return None
        t = -math.log(1.0 - rng.random()) / self.fog_density
        if t < max_distance:
            return VolumeHit(t=t, point=ray_at(ray, t))
        return None

    def sky_color(self, direction: Vec3) -> Vec3:
        """Vertical gradient from white at the horizon to light blue overhead."""
        t = 0.5 * float(direction[1]) + 0.5
        color = vec3((1.0 - t) + t * 0.5, (1.0 - t) + t * 0.7, 1.0)
        return color * self.sky_intensity

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization)."""
        return {
            "sky_intensity": self.sky_intensity,
            "fog_density": self.fog_density,
            "fog_color": list(self.fog_color),
            "objects": [
                {"shape": shape_to_dict(obj.shape), "material": material_to_dict(obj.material)}
                for obj in self.objects
            ],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> World:
        """Load a scene from a dictionary produced by to_dict.

        Raises:
            ValueError: If a shape or material type is unknown.
        """
        world = cls(
            sky_intensity=data.get("sky_intensity", 1.0),
            fog_density=data.get("fog_density", 0.0),
            fog_color=tuple(data.get("fog_color", DEFAULT_FOG_COLOR)),
        )
        for entry in data.get("objects", []):
            world.add(shape_from_dict(entry["shape"]), material_from_dict(entry["material"]))
        return world


# =============================================================================
# Dictionary conversion
# =============================================================================


def _triple(values: Sequence[float]) -> tuple[float, float, float]:
    return (float(values[0]), float(values[1]), float(values[2]))


def material_to_dict(material: Material) -> dict[str, Any]:
    match material:
        case Emissive():
            return {"type": "emissive", "emission": list(material.emission)}
        case Diffuse():
            return {"type": "diffuse", "albedo": list(material.albedo)}
        case Metal():
            return {
                "type": "metal",
                "albedo": list(material.albedo),
                "roughness": material.roughness,
            }
        case Glass():
            return {"type": "glass", "ior": material.ior}
        case Mirror():
            return {"type": "mirror"}
    raise ValueError(f"Unknown material: {material!r}")


def material_from_dict(data: dict[str, Any]) -> Material:
    mat_type = data.get("type", "").lower()
    if mat_type == "emissive":
        return Emissive(_triple(data.get("emission", (1.0, 1.0, 1.0))))
    if mat_type in ("diffuse", "lambertian"):
        return Diffuse(_triple(data.get("albedo", (0.8, 0.8, 0.8))))
    if mat_type in ("metal", "glossy"):
        return Metal(_triple(data.get("albedo", (0.9, 0.9, 0.9))), data.get("roughness", 0.0))
    if mat_type in ("glass", "dielectric"):
        return Glass(data.get("ior", 1.5))
    if mat_type == "mirror":
        return Mirror()
    raise ValueError(f"Unknown material type: {mat_type}")


def shape_to_dict(shape: Shape) -> dict[str, Any]:
    match shape:
        case Sphere():
            return {"type": "sphere", "center": shape.center.tolist(), "radius": shape.radius}
        case Plane():
            return {"type": "plane", "point": shape.point.tolist(), "normal": shape.normal.tolist()}
        case Box():
            return {"type": "box", "center": shape.center.tolist(), "size": shape.size.tolist()}
    raise ValueError(f"Unknown shape: {shape!r}")


def shape_from_dict(data: dict[str, Any]) -> Shape:
    shape_type = data.get("type", "").lower()
    if shape_type == "sphere":
        return Sphere(np.asarray(data["center"], dtype=np.float64), float(data["radius"]))
    if shape_type == "plane":
        return Plane(
            np.asarray(data["point"], dtype=np.float64),
            np.asarray(data["normal"], dtype=np.float64),
        )
    if shape_type == "box":
        return Box(
            np.asarray(data["center"], dtype=np.float64),
            np.asarray(data["size"], dtype=np.float64),
        )
    raise ValueError(f"Unknown shape type: {shape_type}")
