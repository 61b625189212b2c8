"""Recursive path tracing integrator.

This module implements the trace function that solves the rendering equation
for a single ray. Rays bounce off surfaces according to their material, or
scatter inside fog when volumetric scattering is enabled, until they reach a
light, escape to the sky, or exhaust the bounce budget.

Key features:
    - Material dispatch over the closed ``Material`` union with ``match``
    - Fixed bounce budget (no Russian roulette)
    - Volume-versus-surface precedence for participating media
    - Non-finite colours replaced with black in every branch

Each call returns a ``TraceResult`` holding the radiance and the distance to
the first interaction. The distance is only used for focus visualisation; a
miss (or an exhausted budget) reports ``NO_HIT_DISTANCE``.

Example:
    >>> import numpy as np
    >>> from aperture.core.integrator import PathIntegrator
    >>> from aperture.core.ray import make_ray
    >>> from aperture.scene.gallery import create_gallery_scene
    >>>
    >>> scene, camera = create_gallery_scene()
    >>> integrator = PathIntegrator(scene, max_bounces=3)
    >>> result = integrator.trace(
    ...     make_ray((0, 0, 5), (0, 0, -1)), 0, np.random.default_rng(1)
    ... )
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from aperture.core.ray import (
    RandomSource,
    Ray,
    Vec3,
    black,
    normalize,
    sanitize_color,
)
from aperture.core.volume import (
    sample_volume_event,
    scatter_isotropic,
    tint_by_fog,
    volume_enabled,
    volume_takes_precedence,
)
from aperture.materials import (
    Diffuse,
    Emissive,
    Glass,
    Metal,
    Mirror,
    emitted,
    scatter_dielectric,
    scatter_lambertian,
    scatter_metal,
    scatter_mirror,
)

if TYPE_CHECKING:
    from aperture.scene.hit import Hit, SceneProtocol

# =============================================================================
# Rendering Constants
# =============================================================================

# Default maximum ray bounces (path length)
DEFAULT_MAX_BOUNCES = 3

# Distance reported when a ray hits nothing
NO_HIT_DISTANCE = -1.0


@dataclass(frozen=True)
class TraceResult:
    """Radiance carried back along a ray.

    Attributes:
        color: Linear RGB radiance, unclamped and always finite.
        distance: Distance to the first interaction, or NO_HIT_DISTANCE.
    """

    color: Vec3
    distance: float

    @property
    def hit(self) -> bool:
        return self.distance >= 0.0


class PathIntegrator:
    """Unidirectional path tracer with a fixed bounce budget.

    The integrator borrows the scene and never modifies it. All randomness
    comes from the ``rng`` argument of ``trace``, so a path is fully
    reproducible from its random stream.

    Attributes:
        scene: Object implementing ``SceneProtocol``.
        max_bounces: Depth at which recursion stops and black is returned.
        enable_volumetric_scattering: Whether fog is sampled when the scene
            reports a positive density.
    """

    def __init__(
        self,
        scene: SceneProtocol,
        max_bounces: int = DEFAULT_MAX_BOUNCES,
        enable_volumetric_scattering: bool = False,
    ) -> None:
        if max_bounces < 1:
            raise ValueError(f"max_bounces must be >= 1, got {max_bounces}")
        self.scene = scene
        self.max_bounces = max_bounces
        self.enable_volumetric_scattering = enable_volumetric_scattering

    def trace(self, ray: Ray, depth: int, rng: RandomSource) -> TraceResult:
        """Trace a ray through the scene and return its radiance.

        Args:
            ray: The ray to trace. Its direction should be unit length.
            depth: Number of bounces already taken along this path.
            rng: Random source for every stochastic choice on the path.

        Returns:
            A TraceResult. The colour is exactly black when depth has reached
            max_bounces.
        """
        if depth >= self.max_bounces:
            return TraceResult(black(), NO_HIT_DISTANCE)

        scene = self.scene
        hit = scene.intersect(ray)

        volume_hit = None
        if volume_enabled(scene, self.enable_volumetric_scattering):
            volume_hit = sample_volume_event(scene, ray, hit, rng)

        if volume_takes_precedence(volume_hit, hit):
            scattered = scatter_isotropic(volume_hit, rng)
            incoming = self.trace(scattered, depth + 1, rng).color
            color = tint_by_fog(incoming, scene.fog_color)
            return TraceResult(sanitize_color(color), volume_hit.t)

        if hit is None:
            sky = np.asarray(scene.sky_color(ray.direction), dtype=np.float64)
            return TraceResult(sanitize_color(sky), NO_HIT_DISTANCE)

        return TraceResult(self.shade(ray, hit, depth, rng), hit.t)

    def shade(self, ray: Ray, hit: Hit, depth: int, rng: RandomSource) -> Vec3:
        """Evaluate the material at a surface hit.

        Args:
            ray: The incoming ray.
            hit: The surface hit record.
            depth: Current bounce depth.
            rng: Random source.

        Returns:
            The finite radiance leaving the hit point along -ray.direction.
        """
        incident = normalize(ray.direction)

        match hit.material:
            case Emissive():
                return sanitize_color(emitted(hit.material))
            case Diffuse():
                direction, attenuation, did_scatter = scatter_lambertian(
                    hit.material, hit.normal, rng
                )
            case Metal():
                direction, attenuation, did_scatter = scatter_metal(
                    hit.material, incident, hit.normal, rng
                )
            case Glass():
                direction, attenuation, did_scatter = scatter_dielectric(
                    hit.material, incident, hit.normal, rng
                )
            case Mirror():
                direction, attenuation, did_scatter = scatter_mirror(incident, hit.normal)
            case _:
                raise TypeError(f"Unsupported material: {hit.material!r}")

        if not did_scatter:
            # Absorbed
            return black()

        incoming = self.trace(Ray(origin=hit.point, direction=direction), depth + 1, rng)
        return sanitize_color(attenuation * incoming.color)
