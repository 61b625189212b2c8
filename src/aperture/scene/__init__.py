"""Scene module for scene description and queries.

Components:
    hit: Hit records and the SceneProtocol interface used by the integrator
    world: Reference scene of spheres, planes and boxes with sky and fog
    gallery: Demo scene showcasing every material
"""

from .gallery import build_gallery, create_gallery_scene
from .hit import Hit, SceneProtocol, VolumeHit
from .world import (
    SceneObject,
    World,
    material_from_dict,
    material_to_dict,
    shape_from_dict,
    shape_to_dict,
)

__all__ = [
    "Hit",
    "VolumeHit",
    "SceneProtocol",
    "World",
    "SceneObject",
    "material_to_dict",
    "material_from_dict",
    "shape_to_dict",
    "shape_from_dict",
    "build_gallery",
    "create_gallery_scene",
]
