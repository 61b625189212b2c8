"""Progressive renderer with tiled passes and sample accumulation.

This module ties the pieces of the renderer together:
- Tile scheduling of full-image passes (optionally over a thread pool)
- Jittered sub-pixel sampling and lens distortion
- Recursive path tracing through ``PathIntegrator``
- Accumulation into Taichi buffers and gamma-corrected RGBA8 read-out
- Reset on resize, configuration change or scene/camera invalidation

A host calls ``render()`` once per animation frame. Each call adds at most one
sample per pixel until ``samples_per_pixel`` passes have been accumulated,
after which it does nothing until the state is invalidated.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from aperture.core.progressive import ProgressiveRenderer
    >>> from aperture.core.config import RendererConfig
    >>> from aperture.scene.gallery import create_gallery_scene
    >>>
    >>> scene, camera = create_gallery_scene()
    >>> renderer = ProgressiveRenderer(
    ...     scene, camera, 320, 240, RendererConfig(samples_per_pixel=4)
    ... )
    >>> while renderer.render():
    ...     pass
    >>> pixels = renderer.get_pixels()  # (120, 160, 4) uint8
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable, Generator
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

import numpy as np
import numpy.typing as npt

from aperture.core.buffers import AccumulationBuffer, RenderTargets
from aperture.core.config import RendererConfig
from aperture.core.distortion import DistortionParams, DistortionType, distort
from aperture.core.focus import focus_tolerance, tint_in_focus
from aperture.core.integrator import PathIntegrator
from aperture.core.ray import RandomSource, Ray, Vec3, sanitize_color
from aperture.core.sampling import PixelRandomStreams, Tile, iter_tiles, jittered_ndc

if TYPE_CHECKING:
    from aperture.scene.hit import SceneProtocol

logger = logging.getLogger(__name__)

# Type alias for progress callback
# Callback receives (current_sample, samples_per_pixel)
ProgressCallback = Callable[[int, int], None]

# Builds the random source for pixel (x, y) at a given sample index
RandomFactory = Callable[[int, int, int], RandomSource]


class CameraProtocol(Protocol):
    """Camera queries and settings used by the renderer."""

    focus_distance: float
    aperture_fstop: float
    focal_length: float
    distortion_type: Any
    distortion_amount: float
    aspect_ratio: float

    def generate_ray(self, u: float, v: float, rng: RandomSource) -> Ray: ...


@dataclass
class RenderState:
    """Progress of the current accumulation.

    Attributes:
        current_sample: Passes accumulated since the last reset.
        needs_reset: Set by resize, configuration change or invalidate();
            cleared by the next render() call.
    """

    current_sample: int = 0
    needs_reset: bool = True


def output_size(canvas_width: int, canvas_height: int, render_scale: float) -> tuple[int, int]:
    """Rendered resolution for a canvas: floor(canvas * scale), at least 1."""
    width = max(1, math.floor(canvas_width * render_scale))
    height = max(1, math.floor(canvas_height * render_scale))
    return width, height


class ProgressiveRenderer:
    """A progressive path tracer that refines its image one pass at a time.

    The renderer owns its accumulation buffer, render targets and render
    state. It reads from the scene and camera but never modifies them, except
    for the camera's ``aspect_ratio`` which it sets on resize.

    Attributes:
        scene: The scene being rendered.
        camera: The camera generating primary rays.
        config: Current renderer options.
        state: Current RenderState.
        rays_traced: Primary rays traced during the last pass.
        surface_available: False once the render buffers could not be
            allocated. A renderer in that state never renders again.
    """

    def __init__(
        self,
        scene: SceneProtocol,
        camera: CameraProtocol,
        canvas_width: int,
        canvas_height: int,
        config: RendererConfig | None = None,
        *,
        rng_factory: RandomFactory | None = None,
    ) -> None:
        """Initialize the renderer and allocate its buffers.

        Args:
            scene: Object implementing SceneProtocol.
            camera: Object implementing CameraProtocol.
            canvas_width: Display width in pixels.
            canvas_height: Display height in pixels.
            config: Renderer options. Defaults to RendererConfig().
            rng_factory: Optional replacement for the per-pixel random
                streams, called as rng_factory(x, y, sample_index).
        """
        self.scene = scene
        self.camera = camera
        self.config = config if config is not None else RendererConfig()
        self.state = RenderState()
        self.rays_traced = 0
        self.surface_available = True

        self._custom_rng_factory = rng_factory
        self._rng_factory: RandomFactory = rng_factory or PixelRandomStreams(self.config.seed)
        self._integrator = self._build_integrator()

        self._canvas_width = canvas_width
        self._canvas_height = canvas_height
        self._width = 0
        self._height = 0
        self._accumulation: AccumulationBuffer | None = None
        self._targets: RenderTargets | None = None

        self._allocate()
        if self.surface_available:
            logger.info(
                "Renderer ready: canvas %dx%d, rendering %dx%d, %d spp, %d bounces",
                canvas_width,
                canvas_height,
                self._width,
                self._height,
                self.config.samples_per_pixel,
                self.config.max_bounces,
            )

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def width(self) -> int:
        """Rendered image width in pixels."""
        return self._width

    @property
    def height(self) -> int:
        """Rendered image height in pixels."""
        return self._height

    @property
    def canvas_size(self) -> tuple[int, int]:
        return self._canvas_width, self._canvas_height

    @property
    def sample_count(self) -> int:
        """Passes accumulated since the last reset."""
        return self.state.current_sample

    @property
    def converged(self) -> bool:
        return (
            not self.state.needs_reset
            and self.state.current_sample >= self.config.samples_per_pixel
        )

    @property
    def targets(self) -> RenderTargets | None:
        return self._targets

    # -------------------------------------------------------------------------
    # State changes
    # -------------------------------------------------------------------------

    def resize(self, canvas_width: int, canvas_height: int) -> None:
        """Reallocate buffers for a new canvas size and reset accumulation.

        The rendered size is floor(canvas * render_scale) in each dimension
        (at least 1), and the camera's aspect ratio is updated to match.
        Does nothing once the render surface has been lost.
        """
        if not self.surface_available:
            return
        self._canvas_width = canvas_width
        self._canvas_height = canvas_height
        self._allocate()
        if self.surface_available:
            logger.info(
                "Resized to canvas %dx%d, rendering %dx%d",
                canvas_width,
                canvas_height,
                self._width,
                self._height,
            )

    def invalidate(self) -> None:
        """Discard accumulated samples, e.g. after the scene or camera changed."""
        self.state.needs_reset = True

    def configure(self, **changes: Any) -> None:
        """Change renderer options and reset accumulation.

        Accepts the same snake_case or camelCase names as
        RendererConfig.from_dict. A render_scale change reallocates buffers.

        Raises:
            ValueError: On an unknown option or invalid value.
        """
        previous = self.config
        self.config = previous.replace(**changes)
        if self._custom_rng_factory is None and self.config.seed != previous.seed:
            self._rng_factory = PixelRandomStreams(self.config.seed)
        self._integrator = self._build_integrator()
        if self.config.render_scale != previous.render_scale and self.surface_available:
            self._allocate()
        self.state.needs_reset = True

    def reset(self) -> None:
        """Zero the accumulation buffer and start again from sample 0."""
        self.state.current_sample = 0
        self.state.needs_reset = False
        if self._accumulation is not None:
            self._accumulation.clear()

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def render(self) -> bool:
        """Advance progressive rendering by at most one pass.

        Returns:
            True if a pass was rendered, False if the image had already
            converged or the render surface is unavailable.
        """
        if not self.surface_available:
            return False

        if self.state.needs_reset:
            self.reset()

        if self.state.current_sample >= self.config.samples_per_pixel:
            return False

        self.render_pass()
        self.state.current_sample += 1
        return True

    def render_progressive(
        self,
        callback: ProgressCallback | None = None,
    ) -> Generator[tuple[int, int], None, None]:
        """Render passes until converged, yielding progress after each one.

        Args:
            callback: Optional function also called after each pass.

        Yields:
            Tuple of (current_sample, samples_per_pixel).

        Example:
            >>> for current, target in renderer.render_progressive():
            ...     print(f"Progress: {current}/{target} samples")
        """
        while self.render():
            progress = (self.state.current_sample, self.config.samples_per_pixel)
            if callback is not None:
                callback(*progress)
            yield progress

    def render_to_convergence(self, callback: ProgressCallback | None = None) -> int:
        """Render all remaining passes and return the final sample count."""
        for _ in self.render_progressive(callback):
            pass
        return self.state.current_sample

    def render_pass(self) -> None:
        """Trace one jittered sample for every pixel and present the result.

        The pass is split into tiles. Each pixel draws from its own random
        stream keyed by (x, y, sample index), so the image does not depend on
        tile size, tile order or the number of workers.
        """
        if self._accumulation is None or self._targets is None:
            return

        start = time.perf_counter()
        sample_index = self.state.current_sample
        colors = np.zeros((self._height, self._width, 3), dtype=np.float32)
        tiles = list(iter_tiles(self._width, self._height, self.config.tile_size))
        pass_setup = self._pass_setup()

        if self.config.workers > 0:
            with ThreadPoolExecutor(max_workers=self.config.workers) as executor:
                futures = [
                    executor.submit(self._render_tile, tile, sample_index, colors, pass_setup)
                    for tile in tiles
                ]
                rays = sum(future.result() for future in futures)
        else:
            rays = sum(
                self._render_tile(tile, sample_index, colors, pass_setup) for tile in tiles
            )

        self._accumulation.accumulate(colors)
        self._present(blend=sample_index > 0)
        self.rays_traced = rays

        logger.debug(
            "Pass %d/%d: %d rays in %.3fs",
            sample_index + 1,
            self.config.samples_per_pixel,
            rays,
            time.perf_counter() - start,
        )

    def trace_pixel(self, x: int, y: int, sample_index: int) -> Vec3:
        """Compute the colour of one sample for pixel (x, y)."""
        return self._sample_pixel(x, y, sample_index, self._pass_setup())

    # -------------------------------------------------------------------------
    # Output
    # -------------------------------------------------------------------------

    def get_pixels(self) -> npt.NDArray[np.uint8]:
        """Presented RGBA8 pixels, shape (height, width, 4), row 0 at the top."""
        if self._targets is None:
            return np.zeros((0, 0, 4), dtype=np.uint8)
        return self._targets.front_numpy()

    def get_image_numpy(self) -> npt.NDArray[np.float32]:
        """Linear average colour, shape (height, width, 3)."""
        if self._accumulation is None:
            return np.zeros((0, 0, 3), dtype=np.float32)
        return self._accumulation.average_numpy()

    def get_image_uint8(self) -> npt.NDArray[np.uint8]:
        """Presented pixels without the alpha channel, shape (height, width, 3)."""
        return self.get_pixels()[..., :3]

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _build_integrator(self) -> PathIntegrator:
        return PathIntegrator(
            self.scene,
            max_bounces=self.config.max_bounces,
            enable_volumetric_scattering=self.config.enable_volumetric_scattering,
        )

    def _allocate(self) -> None:
        width, height = output_size(
            self._canvas_width, self._canvas_height, self.config.render_scale
        )
        if self._accumulation is not None and (width, height) == (self._width, self._height):
            self.camera.aspect_ratio = width / height
            self.state.needs_reset = True
            return

        self._release()
        accumulation = None
        try:
            accumulation = AccumulationBuffer(width, height)
            targets = RenderTargets(width, height)
        except (ValueError, RuntimeError) as exc:
            if accumulation is not None:
                accumulation.destroy()
            logger.error(
                "Failed to acquire a %dx%d render surface, rendering disabled: %s",
                width,
                height,
                exc,
            )
            self.surface_available = False
            return

        self._width = width
        self._height = height
        self._accumulation = accumulation
        self._targets = targets
        self.camera.aspect_ratio = width / height
        self.state.needs_reset = True

    def _release(self) -> None:
        if self._accumulation is not None:
            self._accumulation.destroy()
        if self._targets is not None:
            self._targets.destroy()
        self._accumulation = None
        self._targets = None

    def _pass_setup(self) -> _PassSetup:
        camera = self.camera
        distortion = DistortionParams(
            DistortionType(camera.distortion_type), camera.distortion_amount
        )
        tolerance = 0.0
        if self.config.visualize_focus:
            tolerance = focus_tolerance(camera, self.config.focus_tolerance)
        return _PassSetup(
            width=self._width,
            height=self._height,
            distortion=distortion,
            visualize_focus=self.config.visualize_focus,
            focus_distance=camera.focus_distance,
            tolerance=tolerance,
        )

    def _render_tile(
        self,
        tile: Tile,
        sample_index: int,
        out: npt.NDArray[np.float32],
        setup: _PassSetup,
    ) -> int:
        rays = 0
        for x, y in tile.pixels():
            out[y, x] = self._sample_pixel(x, y, sample_index, setup)
            rays += 1
        return rays

    def _sample_pixel(self, x: int, y: int, sample_index: int, setup: _PassSetup) -> Vec3:
        rng = self._rng_factory(x, y, sample_index)
        u, v = jittered_ndc(x, y, setup.width, setup.height, rng)

        if not setup.distortion.is_identity:
            u, v = distort(u, v, setup.distortion)

        # Row index grows downwards, camera v grows upwards
        ray = self.camera.generate_ray(u, -v, rng)
        result = self._integrator.trace(ray, 0, rng)
        color = result.color

        if setup.visualize_focus and result.hit:
            color = tint_in_focus(color, result.distance, setup.focus_distance, setup.tolerance)

        return sanitize_color(color)

    def _present(self, blend: bool) -> None:
        targets = self._targets
        self._accumulation.resolve_into(targets.back)
        if blend:
            targets.blend_back(self.config.temporal_blend)
        targets.swap()

    def __repr__(self) -> str:
        return (
            f"ProgressiveRenderer(width={self._width}, height={self._height}, "
            f"samples={self.state.current_sample}/{self.config.samples_per_pixel})"
        )


@dataclass(frozen=True)
class _PassSetup:
    """Camera and focus parameters fixed for the duration of one pass."""

    width: int
    height: int
    distortion: DistortionParams
    visualize_focus: bool
    focus_distance: float
    tolerance: float
