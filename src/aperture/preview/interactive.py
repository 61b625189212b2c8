"""Interactive preview window using Taichi GGUI.

The window plays the role of the host animation loop: every frame it asks the
renderer for one more pass (``renderer.render()``), upscales the presented
RGBA8 frame to the window size and shows it.

Features:
    - Progressive refinement until samples_per_pixel is reached
    - Sliders for fog density and samples per pixel
    - Toggles for volumetric scattering and focus visualisation
    - Export PNG button

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from aperture.core.progressive import ProgressiveRenderer
    >>> from aperture.preview.interactive import InteractivePreview
    >>> from aperture.scene.gallery import create_gallery_scene
    >>>
    >>> scene, camera = create_gallery_scene()
    >>> renderer = ProgressiveRenderer(scene, camera, 640, 360)
    >>> InteractivePreview(renderer).run()
"""

from __future__ import annotations

import logging
import os
from datetime import datetime
from typing import TYPE_CHECKING

import numpy as np
import taichi as ti

from aperture.preview.export import UpscaleMethod, canvas_pixels, save_png

if TYPE_CHECKING:
    import numpy.typing as npt

    from aperture.core.progressive import ProgressiveRenderer

logger = logging.getLogger(__name__)

MAX_FOG_DENSITY = 0.5
MAX_SAMPLES_PER_PIXEL = 256


def pixels_to_canvas_image(pixels: npt.NDArray[np.uint8]) -> npt.NDArray[np.float32]:
    """Convert (H, W, C) uint8 pixels to a (W, H, 3) float image for GGUI.

    Taichi canvases index images as (x, y) with the origin at the bottom
    left, so rows are flipped and the axes transposed.
    """
    rgb = pixels[..., :3].astype(np.float32) / 255.0
    return np.ascontiguousarray(np.transpose(np.flipud(rgb), (1, 0, 2)))


class InteractivePreview:
    """Interactive preview window driving a ProgressiveRenderer.

    Attributes:
        renderer: The renderer being displayed.
        width: Window width in pixels (the renderer's canvas width).
        height: Window height in pixels (the renderer's canvas height).
        display_image: Taichi field storing the display image (RGB float).
    """

    def __init__(
        self,
        renderer: ProgressiveRenderer,
        *,
        title: str = "Aperture - Interactive Preview",
        method: UpscaleMethod = "bilinear",
    ) -> None:
        self.renderer = renderer
        self.width, self.height = renderer.canvas_size
        self.method = method
        self._title = title

        # Defer window creation until run() to support headless checks
        self._window: ti.ui.Window | None = None
        self._canvas: ti.ui.Canvas | None = None

        self.display_image = ti.Vector.field(3, dtype=ti.f32, shape=(self.width, self.height))

    def _initialize_window(self) -> None:
        if self._window is not None:
            return
        self._window = ti.ui.Window(
            name=self._title,
            res=(self.width, self.height),
            vsync=True,
        )
        self._canvas = self._window.get_canvas()

    @property
    def window(self) -> ti.ui.Window:
        if self._window is None:
            self._initialize_window()
        return self._window

    @property
    def canvas(self) -> ti.ui.Canvas:
        if self._canvas is None:
            self._initialize_window()
        return self._canvas

    def update_image(self) -> None:
        """Copy the renderer's presented frame into the display field."""
        pixels = canvas_pixels(self.renderer, self.method)
        self.display_image.from_numpy(pixels_to_canvas_image(pixels))

    def is_running(self) -> bool:
        return self.window.running

    def show_frame(self) -> None:
        self.canvas.set_image(self.display_image)
        self.window.show()

    def step(self) -> bool:
        """Render at most one pass and refresh the display image.

        Returns:
            True if a new pass was rendered.
        """
        rendered = self.renderer.render()
        if rendered:
            self.update_image()
        return rendered

    def run(self) -> None:
        """Run the window event loop until the window is closed."""
        self._initialize_window()
        self.update_image()

        while self.is_running():
            self.step()
            self._draw_gui_panel()
            self.show_frame()

    def close(self) -> None:
        if self._window is not None:
            self._window.running = False

    @staticmethod
    def is_display_available() -> bool:
        """Check if a display is available for GUI rendering."""
        display = os.environ.get("DISPLAY")
        wayland = os.environ.get("WAYLAND_DISPLAY")

        if os.name == "nt":
            return True

        if os.uname().sysname == "Darwin":
            # SSH session without X forwarding
            return not (os.environ.get("SSH_CONNECTION") and not display)

        return bool(display or wayland)

    # =========================================================================
    # GUI
    # =========================================================================

    def set_fog_density(self, density: float) -> None:
        """Change the scene's fog density and restart accumulation."""
        self.renderer.scene.fog_density = density
        self.renderer.invalidate()

    def _draw_gui_panel(self) -> None:
        renderer = self.renderer
        config = renderer.config

        with self.window.GUI.sub_window("Renderer", 0.02, 0.02, 0.3, 0.28) as gui:
            gui.text(f"Samples: {renderer.sample_count}/{config.samples_per_pixel}")
            gui.text(f"Rays last pass: {renderer.rays_traced}")

            fog = gui.slider_float(
                "Fog density", renderer.scene.fog_density, minimum=0.0, maximum=MAX_FOG_DENSITY
            )
            spp = gui.slider_int(
                "Samples/pixel", config.samples_per_pixel, minimum=1, maximum=MAX_SAMPLES_PER_PIXEL
            )
            volumetric = gui.checkbox("Volumetric", config.enable_volumetric_scattering)
            focus = gui.checkbox("Show focus", config.visualize_focus)
            export = gui.button("Export PNG")

        if abs(fog - renderer.scene.fog_density) > 1e-6:
            self.set_fog_density(fog)

        changes = {}
        if spp != config.samples_per_pixel:
            changes["samples_per_pixel"] = spp
        if volumetric != config.enable_volumetric_scattering:
            changes["enable_volumetric_scattering"] = volumetric
        if focus != config.visualize_focus:
            changes["visualize_focus"] = focus
        if changes:
            renderer.configure(**changes)

        if export:
            self._export_png()

    def _export_png(self) -> str:
        """Save the current frame to a timestamped PNG and return its name."""
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filename = f"aperture_{timestamp}.png"
        save_png(self.renderer, filename, method=self.method)
        logger.info("Exported %s (%d SPP)", filename, self.renderer.sample_count)
        return filename
