"""Renderer configuration."""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from aperture.core.sampling import DEFAULT_TILE_SIZE

# Option names used by the browser front end, mapped to field names
_CAMEL_CASE_ALIASES = {
    "maxBounces": "max_bounces",
    "samplesPerPixel": "samples_per_pixel",
    "enableVolumetricScattering": "enable_volumetric_scattering",
    "enableVPT": "enable_volumetric_scattering",
    "renderScale": "render_scale",
    "visualizeFocus": "visualize_focus",
    "focusTolerance": "focus_tolerance",
    "tileSize": "tile_size",
    "temporalBlend": "temporal_blend",
}


@dataclass
class RendererConfig:
    """Options recognised by ProgressiveRenderer.

    Attributes:
        max_bounces: Bounce budget per path.
        samples_per_pixel: Number of progressive passes before the image is
            considered converged.
        enable_volumetric_scattering: Sample fog when the scene has a
            positive fog density.
        render_scale: Fraction of the canvas size rendered, in (0, 1].
        visualize_focus: Tint samples near the focus distance green.
        focus_tolerance: 0 for the automatic depth-of-field tolerance,
            otherwise a percentage of the focus distance.
        tile_size: Edge length of the square tiles a pass is split into.
        seed: Root seed of the per-pixel random streams.
        temporal_blend: Weight of the previous frame when presenting a new
            one, in [0, 1). 0 presents each frame unchanged.
        workers: Number of threads rendering tiles; 0 renders inline.
    """

    max_bounces: int = 3
    samples_per_pixel: int = 1
    enable_volumetric_scattering: bool = False
    render_scale: float = 0.5
    visualize_focus: bool = False
    focus_tolerance: float = 0.0
    tile_size: int = DEFAULT_TILE_SIZE
    seed: int = 0
    temporal_blend: float = 0.0
    workers: int = 0

    def __post_init__(self) -> None:
        if self.max_bounces < 1:
            raise ValueError(f"max_bounces must be >= 1, got {self.max_bounces}")
        if self.samples_per_pixel < 1:
            raise ValueError(
                f"samples_per_pixel must be >= 1, got {self.samples_per_pixel}"
            )
        if not 0.0 < self.render_scale <= 1.0:
            raise ValueError(f"render_scale must be in (0, 1], got {self.render_scale}")
        if self.focus_tolerance < 0.0:
            raise ValueError(
                f"focus_tolerance must be >= 0, got {self.focus_tolerance}"
            )
        if self.tile_size < 1:
            raise ValueError(f"tile_size must be >= 1, got {self.tile_size}")
        if not 0.0 <= self.temporal_blend < 1.0:
            raise ValueError(
                f"temporal_blend must be in [0, 1), got {self.temporal_blend}"
            )
        if self.workers < 0:
            raise ValueError(f"workers must be >= 0, got {self.workers}")
        if self.seed < 0:
            raise ValueError(f"seed must be >= 0, got {self.seed}")

    @classmethod
    def from_dict(cls, options: Mapping[str, Any]) -> RendererConfig:
        """Build a config from snake_case or camelCase option names.

        Raises:
            ValueError: On an unknown option name or an invalid value.
        """
        return cls(**_normalize_keys(options))

    def replace(self, **changes: Any) -> RendererConfig:
        """Return a validated copy with some options changed."""
        return dataclasses.replace(self, **_normalize_keys(changes))

    def to_dict(self) -> dict[str, Any]:
        return dataclasses.asdict(self)


def _normalize_keys(options: Mapping[str, Any]) -> dict[str, Any]:
    known = {f.name for f in dataclasses.fields(RendererConfig)}
    normalized: dict[str, Any] = {}
    for key, value in options.items():
        name = _CAMEL_CASE_ALIASES.get(key, key)
        if name not in known:
            raise ValueError(f"Unknown renderer option: {key!r}")
        normalized[name] = value
    return normalized
