#!/usr/bin/env python3
"""Render the material gallery scene to a PNG.

This script renders the gallery scene offline: it creates the world and
thin-lens camera, accumulates the requested number of passes and writes the
presented frame, upscaled to the canvas size.

Usage:
    python examples/render_gallery.py [options]

Options:
    --width WIDTH       Canvas width in pixels (default: 320)
    --height HEIGHT     Canvas height in pixels (default: 180)
    --samples SAMPLES   Samples per pixel (default: 16)
    --scale SCALE       Render scale relative to the canvas (default: 0.5)
    --fog DENSITY       Fog density, enables volumetric scattering if > 0
    --aperture SHAPE    circular, hexagonal, square or star (default: star)
    --fstop FSTOP       Aperture f-number (default: 50)
    --workers N         Worker threads for tile rendering (default: 0)
    --output OUTPUT     Output file path (default: gallery.png)
    --quiet             Suppress progress output

Example:
    python examples/render_gallery.py --width 160 --height 90 --samples 8
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

import taichi as ti

from aperture.camera import ApertureShape


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the material gallery scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--width", type=int, default=320, help="Canvas width (default: 320)")
    parser.add_argument("--height", type=int, default=180, help="Canvas height (default: 180)")
    parser.add_argument(
        "--samples", type=int, default=16, help="Samples per pixel (default: 16)"
    )
    parser.add_argument(
        "--scale", type=float, default=0.5, help="Render scale (default: 0.5)"
    )
    parser.add_argument(
        "--fog",
        type=float,
        default=0.0,
        help="Fog density; values above 0 enable volumetric scattering (default: 0)",
    )
    parser.add_argument(
        "--aperture",
        type=str,
        default="star",
        choices=[shape.value for shape in ApertureShape],
        help="Aperture shape (default: star)",
    )
    parser.add_argument(
        "--fstop", type=float, default=50.0, help="Aperture f-number (default: 50)"
    )
    parser.add_argument(
        "--workers", type=int, default=0, help="Tile worker threads (default: 0)"
    )
    parser.add_argument(
        "--output", type=str, default="gallery.png", help="Output path (default: gallery.png)"
    )
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    return parser.parse_args(argv)


def render_gallery(
    width: int = 320,
    height: int = 180,
    num_samples: int = 16,
    render_scale: float = 0.5,
    fog_density: float = 0.0,
    aperture: str = "star",
    fstop: float = 50.0,
    workers: int = 0,
    output_path: str = "gallery.png",
    quiet: bool = False,
) -> Path:
    """Render the gallery scene and save it to a PNG file.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports so Taichi is initialized before buffers are created
    from aperture.core.config import RendererConfig
    from aperture.core.progressive import ProgressiveRenderer
    from aperture.preview.export import save_png
    from aperture.scene.gallery import create_gallery_scene

    if not quiet:
        print(f"Creating gallery scene ({width}x{height}, scale {render_scale})...")

    scene, camera = create_gallery_scene(
        fog_density=fog_density, aperture_fstop=fstop, aperture_shape=aperture
    )
    config = RendererConfig(
        samples_per_pixel=num_samples,
        render_scale=render_scale,
        enable_volumetric_scattering=fog_density > 0.0,
        workers=workers,
    )
    renderer = ProgressiveRenderer(scene, camera, width, height, config)
    if not renderer.surface_available:
        raise RuntimeError(f"Could not allocate a render surface for {width}x{height}")

    if not quiet:
        print(f"Rendering {num_samples} samples per pixel at {renderer.width}x{renderer.height}...")

    start_time = time.time()

    def progress_callback(current: int, target: int) -> None:
        if not quiet:
            elapsed = time.time() - start_time
            progress_pct = (current / target) * 100 if target > 0 else 0
            samples_per_sec = current / elapsed if elapsed > 0 else 0
            print(
                f"\r  Progress: {current}/{target} samples "
                f"({progress_pct:.1f}%) - {samples_per_sec:.2f} spp/s",
                end="",
                flush=True,
            )

    renderer.render_to_convergence(progress_callback)

    if not quiet:
        print()

    output_file = Path(output_path)
    save_png(renderer, str(output_file))

    total_time = time.time() - start_time
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    logging.basicConfig(level=logging.WARNING if args.quiet else logging.INFO)

    ti.init(arch=ti.cpu)

    try:
        render_gallery(
            width=args.width,
            height=args.height,
            num_samples=args.samples,
            render_scale=args.scale,
            fog_density=args.fog,
            aperture=args.aperture,
            fstop=args.fstop,
            workers=args.workers,
            output_path=args.output,
            quiet=args.quiet,
        )
        return 0
    except (ValueError, RuntimeError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
