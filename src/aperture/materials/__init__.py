"""Materials module for the scattering rules of each surface kind.

Materials form a closed set of variants, each an immutable dataclass holding
exactly the parameters it needs:

Components:
    emissive: Light sources; terminate the path with their emission
    lambertian: Ideal diffuse reflection (``Diffuse``)
    metal: Specular reflection with optional roughness
    dielectric: Glass with refraction and Schlick Fresnel (``Glass``)
    mirror: Perfect reflection without attenuation

Each scattering function returns a tuple of
(scattered_direction, attenuation, did_scatter); the integrator dispatches on
the variant with a ``match`` statement and recurses along the new direction.
"""

from typing import Union

from .dielectric import (
    Glass,
    fresnel_reflectance,
    scatter_dielectric,
    will_reflect,
)
from .emissive import Emissive, emitted
from .lambertian import Diffuse, scatter_lambertian
from .metal import Metal, scatter_metal
from .mirror import Mirror, scatter_mirror

# Closed sum type over the supported material variants
Material = Union[Emissive, Diffuse, Metal, Glass, Mirror]

__all__ = [
    "Material",
    # Emissive
    "Emissive",
    "emitted",
    # Diffuse
    "Diffuse",
    "scatter_lambertian",
    # Metal
    "Metal",
    "scatter_metal",
    # Glass
    "Glass",
    "scatter_dielectric",
    "fresnel_reflectance",
    "will_reflect",
    # Mirror
    "Mirror",
    "scatter_mirror",
]
