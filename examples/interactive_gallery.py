#!/usr/bin/env python3
"""Interactive gallery renderer with live parameter controls.

This script opens a Taichi GGUI window on the gallery scene. The window loop
calls the renderer once per frame, so the image refines one sample per pixel
per frame until the configured sample count is reached.

Usage:
    python examples/interactive_gallery.py

Controls:
    - Fog density: Thickness of the participating medium
    - Samples/pixel: Target sample count
    - Volumetric: Toggle volumetric scattering
    - Show focus: Tint surfaces lying within the depth of field
    - Export PNG: Save current render with timestamp

Any change restarts accumulation from zero samples.
"""

from __future__ import annotations

import logging
import sys

import taichi as ti

CANVAS_WIDTH = 640
CANVAS_HEIGHT = 360


def main() -> int:
    """Main entry point for the interactive gallery renderer.

    Returns:
        Exit code (0 for success, non-zero for error).
    """
    logging.basicConfig(level=logging.INFO)
    ti.init(arch=ti.cpu)

    from aperture.core.config import RendererConfig
    from aperture.core.progressive import ProgressiveRenderer
    from aperture.preview.interactive import InteractivePreview
    from aperture.scene.gallery import create_gallery_scene

    if not InteractivePreview.is_display_available():
        print("Error: No display available. Cannot run interactive preview.")
        print("This script requires a graphical display environment.")
        return 1

    scene, camera = create_gallery_scene(fog_density=0.05)
    config = RendererConfig(
        samples_per_pixel=64,
        render_scale=0.25,
        enable_volumetric_scattering=True,
        workers=4,
    )
    renderer = ProgressiveRenderer(scene, camera, CANVAS_WIDTH, CANVAS_HEIGHT, config)

    print(f"Creating interactive preview window ({CANVAS_WIDTH}x{CANVAS_HEIGHT})...")
    preview = InteractivePreview(renderer)

    print("Starting interactive rendering...")
    print("  - Adjust sliders to modify the scene and renderer")
    print("  - Click 'Export PNG' to save current render")
    print("  - Close window to exit")
    print()

    try:
        preview.run()
    except KeyboardInterrupt:
        print("\nInterrupted by user.")
    finally:
        preview.close()
        print("Preview window closed.")

    return 0


if __name__ == "__main__":
    sys.exit(main())
