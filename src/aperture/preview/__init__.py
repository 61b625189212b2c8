"""Preview module for output and visualization.

Components:
    display: Matplotlib-based preview display
    export: Upscaling and PNG export with Pillow
    interactive: Taichi GGUI window acting as the host render loop

Example:
    >>> from aperture.preview import save_png, show_preview
    >>> renderer.render_to_convergence()
    >>> show_preview(renderer)
    >>> save_png(renderer, "output.png")

For interactive GGUI preview:
    >>> from aperture.preview import InteractivePreview
    >>> InteractivePreview(renderer).run()
"""

from aperture.preview.display import preview_title, show_comparison, show_preview
from aperture.preview.export import (
    UpscaleMethod,
    canvas_pixels,
    compute_rmse,
    save_png,
    save_png_from_array,
    to_pil_image,
    upscale,
)
from aperture.preview.interactive import InteractivePreview, pixels_to_canvas_image

__all__ = [
    # Interactive preview
    "InteractivePreview",
    "pixels_to_canvas_image",
    # Display functions
    "show_preview",
    "show_comparison",
    "preview_title",
    # Export functions
    "UpscaleMethod",
    "upscale",
    "canvas_pixels",
    "to_pil_image",
    "save_png",
    "save_png_from_array",
    "compute_rmse",
]
