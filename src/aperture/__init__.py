"""Progressive Monte-Carlo path tracer.

This package provides a CPU path tracer that refines an image over successive
passes, with support for:
- Recursive light transport with a fixed bounce budget
- Emissive, diffuse, metal, glass and mirror materials
- Participating-media fog (single isotropic scattering)
- Lens distortion and in-focus region visualisation
- Tiled progressive accumulation into Taichi render buffers

Subpackages:
    core: Vector math, distortion, integrator, sampling and the progressive renderer
    materials: Scattering rules for each material variant
    scene: Hit records, the reference scene and demo scene factories
    geometry: Sphere, plane and box intersection routines
    camera: Thin-lens / pinhole camera used to generate primary rays
    preview: Export, Matplotlib display and the interactive preview window
"""

__version__ = "0.1.0"
