"""Tests for the progressive renderer.

This module tests the ProgressiveRenderer class including:
- Initialization, render scale and camera aspect ratio
- Progressive sample accumulation and convergence
- Progress callbacks and generators
- Reset on invalidate, configure and resize
- Render surface failure
- Independence from tile size and worker count
- Temporal blending and focus visualisation

Note: Imports are done inside test methods to avoid Taichi initialization issues.
The conftest.py fixture initializes Taichi before tests run.
"""

import logging

import numpy as np
import pytest


class TestProgressiveRendererInit:
    """Test ProgressiveRenderer initialization."""

    def test_render_scale_sets_size(self, empty_world, pinhole_camera):
        """Test the rendered size is floor(canvas * render_scale)."""
        from aperture.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(empty_world, pinhole_camera, 17, 12)

        assert renderer.width == 8
        assert renderer.height == 6
        assert renderer.canvas_size == (17, 12)
        assert renderer.sample_count == 0
        assert renderer.surface_available

    def test_camera_aspect_ratio_updated(self, empty_world, pinhole_camera):
        """Test the renderer sets the camera aspect ratio to width / height."""
        from aperture.core.config import RendererConfig
        from aperture.core.progressive import ProgressiveRenderer

        ProgressiveRenderer(empty_world, pinhole_camera, 20, 10, RendererConfig(render_scale=1.0))
        assert pinhole_camera.aspect_ratio == pytest.approx(2.0)

    def test_output_size_minimum(self):
        """Test tiny canvases still render at least one pixel."""
        from aperture.core.progressive import output_size

        assert output_size(1, 1, 0.1) == (1, 1)
        assert output_size(100, 50, 0.25) == (25, 12)


class TestAccumulation:
    """Test progressive sample accumulation."""

    def test_render_until_converged(self, empty_world, pinhole_camera):
        """Test render() adds one pass per call until samples_per_pixel."""
        from aperture.core.config import RendererConfig
        from aperture.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(
            empty_world, pinhole_camera, 8, 8, RendererConfig(samples_per_pixel=3)
        )

        assert renderer.render()
        assert renderer.render()
        assert renderer.render()
        assert renderer.sample_count == 3
        assert renderer.converged
        assert not renderer.render()
        assert renderer.sample_count == 3

    def test_rays_traced_per_pass(self, empty_world, pinhole_camera):
        """Test one primary ray is traced per pixel per pass."""
        from aperture.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(empty_world, pinhole_camera, 10, 6)
        renderer.render()
        assert renderer.rays_traced == 5 * 3

    def test_render_progressive_yields_progress(self, empty_world, pinhole_camera):
        """Test the generator yields (current, target) after each pass."""
        from aperture.core.config import RendererConfig
        from aperture.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(
            empty_world, pinhole_camera, 8, 8, RendererConfig(samples_per_pixel=3)
        )
        calls = []
        progress = list(renderer.render_progressive(lambda c, t: calls.append((c, t))))

        assert progress == [(1, 3), (2, 3), (3, 3)]
        assert calls == progress

    def test_render_to_convergence(self, empty_world, pinhole_camera):
        """Test render_to_convergence returns the final sample count."""
        from aperture.core.config import RendererConfig
        from aperture.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(
            empty_world, pinhole_camera, 8, 8, RendererConfig(samples_per_pixel=4)
        )
        assert renderer.render_to_convergence() == 4

    def test_emissive_enclosure_is_white(self, glowing_world, pinhole_camera):
        """Test a camera inside a white light sees 255 everywhere."""
        from aperture.core.config import RendererConfig
        from aperture.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(
            glowing_world, pinhole_camera, 12, 8, RendererConfig(samples_per_pixel=2)
        )
        renderer.render_to_convergence()

        pixels = renderer.get_pixels()
        assert pixels.shape == (4, 6, 4)
        assert pixels.dtype == np.uint8
        assert np.all(pixels == 255)
        assert np.allclose(renderer.get_image_numpy(), 1.0)
        assert renderer.get_image_uint8().shape == (4, 6, 3)

    def test_sky_gradient_orientation(self, empty_world, pinhole_camera):
        """Test the top row sees more of the blue zenith than the bottom row."""
        from aperture.core.config import RendererConfig
        from aperture.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(
            empty_world, pinhole_camera, 16, 16, RendererConfig(render_scale=1.0)
        )
        renderer.render()
        image = renderer.get_image_numpy()
        # Red falls off toward the zenith
        assert image[0, :, 0].mean() < image[-1, :, 0].mean()


class TestReset:
    """Test reset triggers."""

    def test_invalidate_restarts_accumulation(self, empty_world, pinhole_camera):
        """Test invalidate() discards samples on the next render."""
        from aperture.core.config import RendererConfig
        from aperture.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(
            empty_world, pinhole_camera, 8, 8, RendererConfig(samples_per_pixel=2)
        )
        renderer.render_to_convergence()
        renderer.invalidate()

        assert not renderer.converged
        assert renderer.render()
        assert renderer.sample_count == 1

    def test_configure_resets(self, empty_world, pinhole_camera):
        """Test changing an option restarts from zero samples."""
        from aperture.core.config import RendererConfig
        from aperture.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(
            empty_world, pinhole_camera, 8, 8, RendererConfig(samples_per_pixel=2)
        )
        renderer.render_to_convergence()
        renderer.configure(samplesPerPixel=3)

        assert renderer.config.samples_per_pixel == 3
        renderer.render()
        assert renderer.sample_count == 1

    def test_configure_rejects_unknown_option(self, empty_world, pinhole_camera):
        """Test configure() raises on an unknown option."""
        from aperture.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(empty_world, pinhole_camera, 8, 8)
        with pytest.raises(ValueError):
            renderer.configure(exposure=2.0)

    def test_configure_render_scale_reallocates(self, empty_world, pinhole_camera):
        """Test a render scale change resizes the buffers."""
        from aperture.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(empty_world, pinhole_camera, 16, 8)
        renderer.configure(render_scale=0.25)
        assert (renderer.width, renderer.height) == (4, 2)

    def test_resize(self, empty_world, pinhole_camera):
        """Test resize reallocates, updates the aspect ratio and resets."""
        from aperture.core.config import RendererConfig
        from aperture.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(
            empty_world, pinhole_camera, 8, 8, RendererConfig(samples_per_pixel=2)
        )
        renderer.render_to_convergence()
        renderer.resize(24, 12)

        assert (renderer.width, renderer.height) == (12, 6)
        assert renderer.canvas_size == (24, 12)
        assert pinhole_camera.aspect_ratio == pytest.approx(2.0)
        assert renderer.render()
        assert renderer.sample_count == 1
        assert renderer.get_pixels().shape == (6, 12, 4)

    def test_resize_to_same_size_reuses_buffers(self, empty_world, pinhole_camera):
        """Test a resize that keeps the output size keeps the buffers and resets."""
        from aperture.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(empty_world, pinhole_camera, 8, 8)
        renderer.render()
        targets = renderer.targets

        # 9 * 0.5 floors to the same 4 pixels
        renderer.resize(9, 9)
        assert renderer.targets is targets
        assert targets.alive
        assert renderer.render()
        assert renderer.sample_count == 1

    def test_resize_frees_previous_buffers(self, empty_world, pinhole_camera):
        """Test buffers replaced by a resize are destroyed."""
        from aperture.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(empty_world, pinhole_camera, 8, 8)
        targets = renderer.targets
        accumulation = renderer._accumulation

        renderer.resize(12, 8)
        assert not targets.alive
        assert not accumulation.alive
        assert renderer.targets.alive
        assert renderer.render()


class TestSurfaceFailure:
    """Test behaviour when buffers cannot be allocated."""

    def test_oversized_canvas_disables_rendering(self, empty_world, pinhole_camera, caplog):
        """Test an unsupported size logs an error and leaves the renderer inert."""
        from aperture.core.config import RendererConfig
        from aperture.core.progressive import ProgressiveRenderer

        with caplog.at_level(logging.ERROR, logger="aperture.core.progressive"):
            renderer = ProgressiveRenderer(
                empty_world, pinhole_camera, 5000, 10, RendererConfig(render_scale=1.0)
            )

        assert not renderer.surface_available
        assert any(record.levelno == logging.ERROR for record in caplog.records)
        assert not renderer.render()
        assert renderer.get_pixels().shape == (0, 0, 4)

        renderer.resize(8, 8)
        assert not renderer.surface_available
        assert not renderer.render()


class TestDeterminism:
    """Test that the image depends only on the seed."""

    def test_tile_size_does_not_change_image(self, diffuse_world, pinhole_camera):
        """Test identical images for different tile sizes."""
        from aperture.core.config import RendererConfig
        from aperture.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(
            diffuse_world, pinhole_camera, 20, 14, RendererConfig(samples_per_pixel=2, seed=3)
        )
        renderer.render_to_convergence()
        reference = renderer.get_image_numpy()

        renderer.configure(tile_size=3)
        renderer.render_to_convergence()
        assert np.array_equal(renderer.get_image_numpy(), reference)

    def test_workers_do_not_change_image(self, diffuse_world, pinhole_camera):
        """Test identical images when tiles are rendered on a thread pool."""
        from aperture.core.config import RendererConfig
        from aperture.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(
            diffuse_world,
            pinhole_camera,
            20,
            14,
            RendererConfig(samples_per_pixel=2, seed=3, tile_size=4),
        )
        renderer.render_to_convergence()
        reference = renderer.get_image_numpy()

        renderer.configure(workers=3)
        renderer.render_to_convergence()
        assert np.array_equal(renderer.get_image_numpy(), reference)

    def test_seed_changes_image(self, diffuse_world, pinhole_camera):
        """Test a different seed gives a different noisy image."""
        from aperture.core.config import RendererConfig
        from aperture.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(
            diffuse_world, pinhole_camera, 20, 14, RendererConfig(seed=1)
        )
        renderer.render()
        first = renderer.get_image_numpy()

        renderer.configure(seed=2)
        renderer.render()
        assert not np.array_equal(renderer.get_image_numpy(), first)

    def test_trace_pixel_is_reproducible(self, diffuse_world, pinhole_camera):
        """Test a (pixel, sample) pair always yields the same colour."""
        from aperture.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(diffuse_world, pinhole_camera, 20, 14)
        assert np.array_equal(renderer.trace_pixel(4, 3, 5), renderer.trace_pixel(4, 3, 5))


class TestPresentation:
    """Test temporal blending and focus visualisation."""

    def test_blend_skipped_on_first_pass(self, glowing_world, pinhole_camera):
        """Test the first frame after a reset is not blended with the old frame."""
        from aperture.core.config import RendererConfig
        from aperture.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(
            glowing_world, pinhole_camera, 8, 8, RendererConfig(temporal_blend=0.5)
        )
        renderer.render()
        assert np.all(renderer.get_pixels() == 255)

    def test_blend_mixes_consecutive_frames(self, diffuse_world, pinhole_camera):
        """Test the second frame is an even mix of the resolved frames."""
        from aperture.core.config import RendererConfig
        from aperture.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(
            diffuse_world,
            pinhole_camera,
            16,
            12,
            RendererConfig(samples_per_pixel=2, seed=5),
        )
        renderer.render()
        first = renderer.get_pixels().astype(np.float64)
        renderer.render()
        second = renderer.get_pixels().astype(np.float64)

        renderer.configure(temporal_blend=0.5)
        renderer.render()
        renderer.render()
        blended = renderer.get_pixels().astype(np.float64)

        expected = np.floor(0.5 * first + 0.5 * second + 0.5)
        assert np.array_equal(blended[..., :3], expected[..., :3])

    def test_focus_tint_on_focus_plane(self, pinhole_camera):
        """Test surfaces exactly at the focus distance are tinted green."""
        from aperture.core.config import RendererConfig
        from aperture.core.progressive import ProgressiveRenderer
        from aperture.materials import Emissive
        from aperture.scene.world import World

        # Every primary ray travels exactly the focus distance of 5
        world = World()
        world.add_sphere((0.0, 0.0, 0.0), 5.0, Emissive((1.0, 1.0, 1.0)))
        renderer = ProgressiveRenderer(
            world, pinhole_camera, 8, 8, RendererConfig(visualize_focus=True)
        )
        renderer.render()
        pixels = renderer.get_pixels()

        assert np.all(pixels[..., 1] == 255)
        assert np.all(pixels[..., 0] < 255)
        assert np.all(pixels[..., 0] == pixels[..., 2])

    def test_focus_tint_skips_sky(self, empty_world, pinhole_camera):
        """Test rays that miss every surface are never tinted."""
        from aperture.core.config import RendererConfig
        from aperture.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(empty_world, pinhole_camera, 8, 8, RendererConfig(seed=3))
        renderer.render()
        plain = renderer.get_pixels()

        renderer.configure(visualize_focus=True, focus_tolerance=100.0)
        renderer.render()
        assert np.array_equal(renderer.get_pixels(), plain)

    def test_repr(self, empty_world, pinhole_camera):
        """Test the repr shows size and progress."""
        from aperture.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(empty_world, pinhole_camera, 8, 8)
        assert repr(renderer) == "ProgressiveRenderer(width=4, height=4, samples=0/1)"
