"""Image export utilities for rendered images.

The renderer produces RGBA8 pixels at ``render_scale`` times the canvas size.
This module upscales them back to the canvas with Pillow and writes PNG files.

Supported formats:
    - PNG (8-bit sRGB via Pillow)

Example:
    >>> from aperture.preview.export import save_png
    >>> renderer.render_to_convergence()
    >>> save_png(renderer, "output.png")
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

if TYPE_CHECKING:
    from aperture.core.progressive import ProgressiveRenderer


# Type alias for upscale filters
UpscaleMethod = Literal["nearest", "bilinear"]

_RESAMPLE_FILTERS = {
    "nearest": PILImage.Resampling.NEAREST,
    "bilinear": PILImage.Resampling.BILINEAR,
}


def to_pil_image(pixels: npt.NDArray[np.uint8]) -> PILImage.Image:
    """Wrap an (H, W, 4) RGBA or (H, W, 3) RGB uint8 array as a Pillow image."""
    pixels = np.ascontiguousarray(pixels, dtype=np.uint8)
    if pixels.ndim != 3 or pixels.shape[2] not in (3, 4):
        raise ValueError(f"Expected an (H, W, 3) or (H, W, 4) array, got {pixels.shape}")
    return PILImage.fromarray(pixels)


def upscale(
    pixels: npt.NDArray[np.uint8],
    size: tuple[int, int],
    method: UpscaleMethod = "bilinear",
) -> npt.NDArray[np.uint8]:
    """Resize rendered pixels to a display size.

    Args:
        pixels: Image array of shape (H, W, C) with dtype uint8.
        size: Target (width, height) in pixels.
        method: "nearest" or "bilinear".

    Returns:
        Array of shape (height, width, C).

    Raises:
        ValueError: If the method is unknown.
    """
    if method not in _RESAMPLE_FILTERS:
        raise ValueError(f"Unknown upscale method: {method}")
    image = to_pil_image(pixels)
    if image.size == tuple(size):
        return np.asarray(image).copy()
    return np.asarray(image.resize(tuple(size), resample=_RESAMPLE_FILTERS[method]))


def canvas_pixels(
    renderer: ProgressiveRenderer,
    method: UpscaleMethod = "bilinear",
) -> npt.NDArray[np.uint8]:
    """Presented frame of a renderer, upscaled to its canvas size."""
    return upscale(renderer.get_pixels(), renderer.canvas_size, method)


def save_png(
    renderer: ProgressiveRenderer,
    filepath: str,
    *,
    upscale_to_canvas: bool = True,
    method: UpscaleMethod = "bilinear",
) -> None:
    """Save the presented frame as a PNG file.

    Args:
        renderer: The ProgressiveRenderer instance to save.
        filepath: Output file path (should end in .png).
        upscale_to_canvas: Resize to the canvas size instead of the rendered
            size.
        method: Upscale filter.
    """
    if upscale_to_canvas:
        pixels = canvas_pixels(renderer, method)
    else:
        pixels = renderer.get_pixels()
    save_png_from_array(pixels, filepath)


def save_png_from_array(pixels: npt.NDArray[np.uint8], filepath: str) -> None:
    """Save an RGB or RGBA uint8 array as a PNG file."""
    to_pil_image(pixels).save(filepath)


def compute_rmse(
    image_a: npt.NDArray[np.number],
    image_b: npt.NDArray[np.number],
) -> float:
    """Compute root mean squared error between two images.

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(
            f"Image shapes must match: {image_a.shape} vs {image_b.shape}"
        )

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
