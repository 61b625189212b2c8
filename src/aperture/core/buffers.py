"""Taichi render buffers: accumulation sums and double-buffered RGBA8 targets.

The renderer traces paths on the CPU in Python and hands each finished pass to
this module as a NumPy array. Per-pixel work on whole images (accumulating a
pass, resolving averages to display pixels, blending consecutive frames) runs
in Taichi kernels over fields owned by a single renderer.

All fields are indexed ``[row, column]`` with row 0 at the top of the image,
matching NumPy image layout so that ``to_numpy()`` yields ``(height, width, C)``
arrays directly.

Read-out of a pixel is::

    avg = sum / count
    out = min(255, floor(clamp(avg, 0, 1) ** (1 / 2.2) * 255 + 0.5))

Taichi must be initialised (``ti.init``) before any buffer is created.
"""

import numpy as np
import numpy.typing as npt
import taichi as ti

# Maximum supported image dimensions
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

DISPLAY_GAMMA = 2.2


def check_dimensions(width: int, height: int) -> None:
    """Validate render buffer dimensions.

    Raises:
        ValueError: If either dimension is outside 1..MAX.
    """
    if not (1 <= width <= MAX_IMAGE_WIDTH and 1 <= height <= MAX_IMAGE_HEIGHT):
        raise ValueError(
            f"Image dimensions ({width}x{height}) outside supported range "
            f"(1x1 to {MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )


def _place_fields(shape: tuple[int, int], *fields):
    """Place fields densely in their own SNode tree so they can be freed.

    Returns:
        The finalized tree; call destroy() on it to release the memory.
    """
    builder = ti.FieldsBuilder()
    builder.dense(ti.ij, shape).place(*fields)
    return builder.finalize()


# =============================================================================
# Kernels
# =============================================================================


@ti.kernel
def _accumulate(sums: ti.template(), counts: ti.template(), samples: ti.template()):
    """Add one pass worth of samples into the running sums."""
    for i, j in samples:
        sums[i, j] += samples[i, j]
        counts[i, j] += 1.0


@ti.kernel
def _resolve(sums: ti.template(), counts: ti.template(), target: ti.template(), inv_gamma: ti.f32):
    """Average, gamma correct and quantise the sums into an RGBA8 target."""
    for i, j in sums:
        n = counts[i, j]
        avg = ti.Vector([0.0, 0.0, 0.0])
        if n > 0.0:
            avg = sums[i, j] / n
        for c in ti.static(range(3)):
            v = ti.min(ti.max(avg[c], 0.0), 1.0)
            q = ti.floor(v**inv_gamma * 255.0 + 0.5)
            target[i, j][c] = ti.cast(ti.min(q, 255.0), ti.u8)
        target[i, j][3] = ti.cast(255, ti.u8)


@ti.kernel
def _blend(previous: ti.template(), current: ti.template(), weight: ti.f32):
    """Exponential moving average of two RGBA8 frames, written into current."""
    for i, j in current:
        for c in ti.static(range(3)):
            prev = ti.cast(previous[i, j][c], ti.f32)
            cur = ti.cast(current[i, j][c], ti.f32)
            mixed = weight * prev + (1.0 - weight) * cur
            current[i, j][c] = ti.cast(ti.min(ti.floor(mixed + 0.5), 255.0), ti.u8)


# =============================================================================
# Accumulation Buffer
# =============================================================================


class AccumulationBuffer:
    """Per-pixel running colour sums and sample counts.

    Invariant: every pixel's count equals the number of passes accumulated
    since the last clear.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
    """

    def __init__(self, width: int, height: int) -> None:
        check_dimensions(width, height)
        self.width = width
        self.height = height
        self._sums = ti.Vector.field(3, dtype=ti.f32)
        self._counts = ti.field(dtype=ti.f32)
        self._staging = ti.Vector.field(3, dtype=ti.f32)
        self._tree = _place_fields((height, width), self._sums, self._counts, self._staging)
        self.clear()

    @property
    def sums(self):
        return self._sums

    @property
    def counts(self):
        return self._counts

    @property
    def alive(self) -> bool:
        return self._tree is not None

    def destroy(self) -> None:
        """Release the Taichi memory of this buffer. It is unusable afterwards."""
        if self._tree is not None:
            self._tree.destroy()
            self._tree = None

    def clear(self) -> None:
        """Zero all sums and counts."""
        self._sums.fill(0.0)
        self._counts.fill(0.0)

    def accumulate(self, samples: npt.NDArray[np.floating]) -> None:
        """Add one pass of linear colours, shaped (height, width, 3)."""
        samples = np.ascontiguousarray(samples, dtype=np.float32)
        if samples.shape != (self.height, self.width, 3):
            raise ValueError(
                f"Sample array shape {samples.shape} does not match buffer "
                f"({self.height}, {self.width}, 3)"
            )
        self._staging.from_numpy(samples)
        _accumulate(self._sums, self._counts, self._staging)

    def resolve_into(self, target, gamma: float = DISPLAY_GAMMA) -> None:
        """Write gamma-corrected RGBA8 pixels into a target field."""
        _resolve(self._sums, self._counts, target, 1.0 / gamma)

    def sample_counts(self) -> npt.NDArray[np.float32]:
        return self._counts.to_numpy()

    def average_numpy(self) -> npt.NDArray[np.float32]:
        """Linear average colour, shaped (height, width, 3), 0 where unsampled."""
        sums = self._sums.to_numpy()
        counts = self._counts.to_numpy()[..., None]
        return np.divide(sums, counts, out=np.zeros_like(sums), where=counts > 0)


# =============================================================================
# Render Targets
# =============================================================================


class RenderTargets:
    """Two RGBA8 images: the presented front target and a back target.

    Each resolve writes into the back target, which is then swapped to the
    front. Keeping the previous frame around allows temporal blending.
    """

    def __init__(self, width: int, height: int) -> None:
        check_dimensions(width, height)
        self.width = width
        self.height = height
        self._front = ti.Vector.field(4, dtype=ti.u8)
        self._back = ti.Vector.field(4, dtype=ti.u8)
        self._tree = _place_fields((height, width), self._front, self._back)
        self.clear()

    @property
    def front(self):
        return self._front

    @property
    def back(self):
        return self._back

    @property
    def alive(self) -> bool:
        return self._tree is not None

    def destroy(self) -> None:
        """Release the Taichi memory of both targets."""
        if self._tree is not None:
            self._tree.destroy()
            self._tree = None

    def clear(self) -> None:
        self._front.fill(0)
        self._back.fill(0)

    def swap(self) -> None:
        """Exchange front and back targets."""
        self._front, self._back = self._back, self._front

    def blend_back(self, weight: float) -> None:
        """Blend the previous front frame into the back target.

        back = weight * front + (1 - weight) * back, for weight in [0, 1).
        """
        if weight > 0.0:
            _blend(self._front, self._back, weight)

    def front_numpy(self) -> npt.NDArray[np.uint8]:
        """Presented pixels shaped (height, width, 4)."""
        return self._front.to_numpy()
