"""Matplotlib-based preview display for rendered images.

Features:
    - Static preview of the presented frame, upscaled to the canvas
    - Sample count and rays traced in the title
    - Side-by-side comparison of two frames with a difference view

Example:
    >>> from aperture.preview.display import show_preview
    >>> renderer.render_to_convergence()
    >>> show_preview(renderer)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt

from aperture.preview.export import UpscaleMethod, canvas_pixels, compute_rmse

if TYPE_CHECKING:
    from aperture.core.progressive import ProgressiveRenderer


def preview_title(renderer: ProgressiveRenderer) -> str:
    """Default figure title: sample progress and rays in the last pass."""
    return (
        f"Render Preview - {renderer.sample_count}/"
        f"{renderer.config.samples_per_pixel} SPP, {renderer.rays_traced} rays"
    )


def show_preview(
    renderer: ProgressiveRenderer,
    *,
    method: UpscaleMethod = "bilinear",
    title: str | None = None,
    figsize: tuple[float, float] = (8, 6),
    block: bool = True,
) -> None:
    """Display the presented frame as a Matplotlib figure.

    Args:
        renderer: The ProgressiveRenderer instance to display.
        method: Upscale filter from rendered size to canvas size.
        title: Custom title (default shows sample count).
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until figure is closed.
    """
    import matplotlib.pyplot as plt

    pixels = canvas_pixels(renderer, method)

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    ax.imshow(pixels[..., :3])
    ax.axis("off")
    ax.set_title(title if title is not None else preview_title(renderer))

    plt.tight_layout()
    plt.show(block=block)


def show_comparison(
    image_a: npt.NDArray[np.uint8],
    image_b: npt.NDArray[np.uint8],
    *,
    labels: tuple[str, str] = ("A", "B"),
    diff_scale: float = 10.0,
    figsize: tuple[float, float] = (16, 6),
    block: bool = True,
) -> float:
    """Display two 8-bit frames side by side with their amplified difference.

    Args:
        image_a: First frame (H, W, 3 or 4), uint8.
        image_b: Second frame of the same shape.
        labels: Labels for the two images.
        diff_scale: Scale factor for difference amplification.
        figsize: Figure size in inches.
        block: Whether to block execution until figure is closed.

    Returns:
        RMSE between the two frames on a [0, 1] scale.
    """
    import matplotlib.pyplot as plt

    display_a = image_a[..., :3].astype(np.float64) / 255.0
    display_b = image_b[..., :3].astype(np.float64) / 255.0
    rmse = compute_rmse(display_a, display_b)

    diff_amplified = np.clip(np.abs(display_a - display_b) * diff_scale, 0.0, 1.0)

    fig, axes = plt.subplots(1, 3, figsize=figsize)

    axes[0].imshow(display_a)
    axes[0].set_title(labels[0])
    axes[0].axis("off")

    axes[1].imshow(display_b)
    axes[1].set_title(labels[1])
    axes[1].axis("off")

    axes[2].imshow(diff_amplified)
    axes[2].set_title(f"Difference ({diff_scale}x) - RMSE: {rmse:.6f}")
    axes[2].axis("off")

    plt.tight_layout()
    plt.show(block=block)

    return rmse
