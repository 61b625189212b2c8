"""Hit records and the scene interface consumed by the integrator.

The integrator never looks inside a scene: it only calls the four queries of
``SceneProtocol``. ``World`` in ``aperture.scene.world`` is the reference
implementation; any object providing the same methods and attributes can be
rendered.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from aperture.core.ray import RandomSource, Ray, Vec3
    from aperture.materials import Material


@dataclass(frozen=True)
class Hit:
    """Record of the nearest ray-surface intersection.

    Attributes:
        point: The 3D point where the ray met the surface.
        normal: The unit surface normal at the point. Spheres report the
            outward normal; planes report the side facing the ray.
        material: The material of the surface that was hit.
        t: Distance along the ray to the hit point.
    """

    point: Vec3
    normal: Vec3
    material: Material
    t: float


@dataclass(frozen=True)
class VolumeHit:
    """A scattering event inside participating media.

    Attributes:
        t: Distance along the ray to the scatter point.
        point: The scatter point.
    """

    t: float
    point: Vec3


class SceneProtocol(Protocol):
    """Queries the integrator performs against a scene."""

    fog_density: float
    fog_color: tuple[float, float, float]

    def intersect(self, ray: Ray) -> Hit | None: ...

    def sample_volume(
        self, ray: Ray, max_distance: float, rng: RandomSource
    ) -> VolumeHit | None: ...

    def sky_color(self, direction: Vec3) -> Vec3: ...
