"""Per-pixel random streams, jittered sample positions and tile traversal.

Every (pixel, sample) pair owns an independent generator derived from a single
root seed, so the random numbers a pixel sees do not depend on which tile it
belongs to, in which order tiles are visited, or which worker renders it.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

import numpy as np

from aperture.core.ray import RandomSource

DEFAULT_TILE_SIZE = 16


class PixelRandomStreams:
    """Factory of reproducible per-(pixel, sample) random generators.

    Streams are built with ``numpy.random.SeedSequence`` spawn keys, which
    guarantees statistically independent sequences for distinct keys.

    Example:
        >>> streams = PixelRandomStreams(seed=7)
        >>> a = streams.stream(3, 4, 0).random()
        >>> b = streams.stream(3, 4, 0).random()
        >>> a == b
        True
    """

    def __init__(self, seed: int = 0) -> None:
        self.seed = seed

    def stream(self, x: int, y: int, sample_index: int) -> np.random.Generator:
        sequence = np.random.SeedSequence(self.seed, spawn_key=(sample_index, y, x))
        return np.random.default_rng(sequence)

    def __call__(self, x: int, y: int, sample_index: int) -> RandomSource:
        return self.stream(x, y, sample_index)


def jittered_ndc(
    x: int, y: int, width: int, height: int, rng: RandomSource
) -> tuple[float, float]:
    """Pick a random point inside pixel (x, y) in normalized device coordinates.

    Args:
        x: Pixel column, 0 at the left.
        y: Pixel row, 0 at the top.
        width: Image width in pixels.
        height: Image height in pixels.
        rng: Random source; two draws (u first, then v).

    Returns:
        (u, v) in [-1, 1]. ``v`` grows downwards like the row index, so the
        caller flips its sign before handing it to the camera.
    """
    u = ((x + rng.random()) / width) * 2.0 - 1.0
    v = ((y + rng.random()) / height) * 2.0 - 1.0
    return u, v


@dataclass(frozen=True)
class Tile:
    """A rectangular block of pixels, [x0, x1) x [y0, y1)."""

    x0: int
    y0: int
    x1: int
    y1: int

    def pixels(self) -> Iterator[tuple[int, int]]:
        for y in range(self.y0, self.y1):
            for x in range(self.x0, self.x1):
                yield x, y

    @property
    def pixel_count(self) -> int:
        return (self.x1 - self.x0) * (self.y1 - self.y0)


def iter_tiles(width: int, height: int, tile_size: int = DEFAULT_TILE_SIZE) -> Iterator[Tile]:
    """Partition an image into row-major tiles of at most tile_size squared.

    Edge tiles are clipped to the image bounds.
    """
    if tile_size < 1:
        raise ValueError(f"tile_size must be >= 1, got {tile_size}")
    for y0 in range(0, height, tile_size):
        for x0 in range(0, width, tile_size):
            yield Tile(x0, y0, min(x0 + tile_size, width), min(y0 + tile_size, height))
