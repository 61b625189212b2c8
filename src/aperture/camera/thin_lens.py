"""Physically parameterised camera with a thin lens and shaped aperture.

This module implements the camera the renderer asks for primary rays. The
camera supports:
- Look-at positioning (position, look_at, up)
- Field of view derived from focal length and sensor size
- Pinhole and thin-lens models with depth of field
- Circular, hexagonal, square and star-shaped apertures (bokeh)
- Film and aperture shift and tilt (tilt-shift, Scheimpflug), film curvature
- Orbiting around the look-at point by yaw and pitch
- Lens distortion settings, read by the renderer

The camera builds an orthonormal basis (u, v, w) from the view parameters:
- w: points from look_at toward position (opposite view direction)
- u: points right in the image plane
- v: points up in the image plane

Film geometry follows the thin lens equation 1/f = 1/do + 1/di: the film sits
at di = f * do / (do - f) behind the lens, with f the focal length in metres
and do the focus distance. The vertical half extent of the image is derived
from a sensor height of 0.6 times the film diagonal.

Example:
    >>> import numpy as np
    >>> from aperture.camera.thin_lens import ThinLensCamera
    >>> camera = ThinLensCamera(
    ...     position=(0.0, 1.5, -5.0),
    ...     look_at=(0.0, 0.0, 5.0),
    ...     aperture_fstop=2.8,
    ...     focus_distance=5.0,
    ... )
    >>> ray = camera.generate_ray(0.0, 0.0, np.random.default_rng(0))
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

import numpy as np

from aperture.core.distortion import DistortionParams, DistortionType
from aperture.core.ray import RandomSource, Ray, Vec3, normalize

# Below this f-number the pinhole model also samples the aperture
PINHOLE_APERTURE_FSTOP = 16.0

# Sensor height as a fraction of the film diagonal
SENSOR_HEIGHT_FRACTION = 0.6

STAR_POINTS = 6
POLYGON_SIDES = 6

# Film depth offset per unit of curvature and squared film radius
FILM_CURVATURE_SCALE = 0.02


class CameraModel(str, Enum):
    PINHOLE = "pinhole"
    THIN_LENS = "thin-lens"


class ApertureShape(str, Enum):
    CIRCULAR = "circular"
    HEXAGONAL = "hexagonal"
    SQUARE = "square"
    STAR = "star"


# =============================================================================
# Aperture Sampling
# =============================================================================


def sample_circle(rng: RandomSource) -> tuple[float, float]:
    """Uniform point in the unit disk."""
    r = math.sqrt(rng.random())
    theta = rng.random() * 2.0 * math.pi
    return r * math.cos(theta), r * math.sin(theta)


def sample_square(rng: RandomSource) -> tuple[float, float]:
    return rng.random() * 2.0 - 1.0, rng.random() * 2.0 - 1.0


def sample_polygon(rng: RandomSource, sides: int = POLYGON_SIDES) -> tuple[float, float]:
    """Point inside a regular polygon, picking one of its triangular wedges."""
    wedge = 2.0 * math.pi / sides
    angle = rng.random() * wedge
    r = math.sqrt(rng.random()) * math.cos(math.pi / sides)
    base_angle = math.floor(rng.random() * sides) * wedge
    return r * math.cos(base_angle + angle), r * math.sin(base_angle + angle)


def sample_star(rng: RandomSource, points: int = STAR_POINTS) -> tuple[float, float]:
    """Point inside a star with thin spikes.

    The disk radius is modulated by angle: 1.0 at the centre of a spike and
    0.2 in the valley between two spikes.
    """
    r = math.sqrt(rng.random())
    theta = rng.random() * 2.0 * math.pi
    segment = 2.0 * math.pi / points
    t = (theta % segment) / segment
    if t < 0.5:
        star_radius = 1.0 - t * 1.6
    else:
        star_radius = 0.2 + (t - 0.5) * 1.6
    return r * star_radius * math.cos(theta), r * star_radius * math.sin(theta)


def sample_aperture(shape: ApertureShape | str, rng: RandomSource) -> tuple[float, float]:
    """Sample a point on the unit aperture of the given shape."""
    shape = ApertureShape(shape)
    if shape is ApertureShape.CIRCULAR:
        return sample_circle(rng)
    if shape is ApertureShape.HEXAGONAL:
        return sample_polygon(rng, POLYGON_SIDES)
    if shape is ApertureShape.SQUARE:
        return sample_square(rng)
    return sample_star(rng, STAR_POINTS)


# =============================================================================
# Camera
# =============================================================================


def rotate_point(point: Vec3, tilt_x: float, tilt_y: float) -> Vec3:
    """Rotate a camera-space point about the X axis, then the Y axis.

    Args:
        point: Point (or direction) to rotate.
        tilt_x: Rotation about X in radians.
        tilt_y: Rotation about Y in radians.
    """
    x, y, z = (float(c) for c in point)
    if tilt_x != 0.0:
        cos, sin = math.cos(tilt_x), math.sin(tilt_x)
        y, z = y * cos - z * sin, y * sin + z * cos
    if tilt_y != 0.0:
        cos, sin = math.cos(tilt_y), math.sin(tilt_y)
        x, z = x * cos + z * sin, -x * sin + z * cos
    return np.array((x, y, z), dtype=np.float64)


@dataclass
class ThinLensCamera:
    """Camera configuration and primary ray generation.

    Shifts are in metres and tilts in degrees, all in camera space (x right,
    y up, z backward). Tilting the aperture tilts the plane of focus with it;
    tilting the film relative to the lens gives the Scheimpflug effect.

    Attributes:
        position: Camera position in world space.
        look_at: Point the camera is looking at.
        up: Up direction for camera orientation.
        model: "pinhole" or "thin-lens".
        focal_length: Focal length in millimetres.
        focus_distance: Distance to the plane in focus, in scene units.
        aperture_fstop: f-number; the aperture radius is
            focal_length / aperture_fstop / 2 (converted to metres).
        aperture_shape: Shape of the aperture, visible in the bokeh.
        aperture_shift: (x, y, z) offset of the aperture centre.
        aperture_tilt_x: Aperture rotation about the camera X axis.
        aperture_tilt_y: Aperture rotation about the camera Y axis.
        film_size: Film diagonal in millimetres.
        film_shift: (x, y, z) offset of the film; z moves it along the axis.
        film_tilt_x: Film rotation about the camera X axis.
        film_tilt_y: Film rotation about the camera Y axis.
        film_curvature: Bends the film away from the lens toward its edges.
        aspect_ratio: Width divided by height; set by the renderer.
        distortion_type: Lens distortion model applied to film coordinates.
        distortion_amount: Lens distortion strength in [0, 1].
    """

    position: tuple[float, float, float] = (0.0, 1.5, -5.0)
    look_at: tuple[float, float, float] = (0.0, 0.0, 5.0)
    up: tuple[float, float, float] = (0.0, 1.0, 0.0)
    model: CameraModel = CameraModel.THIN_LENS
    focal_length: float = 50.0
    focus_distance: float = 5.0
    aperture_fstop: float = 50.0
    aperture_shape: ApertureShape = ApertureShape.CIRCULAR
    aperture_shift: tuple[float, float, float] = (0.0, 0.0, 0.0)
    aperture_tilt_x: float = 0.0
    aperture_tilt_y: float = 0.0
    film_size: float = 43.0
    film_shift: tuple[float, float, float] = (0.0, 0.0, 0.0)
    film_tilt_x: float = 0.0
    film_tilt_y: float = 0.0
    film_curvature: float = 0.0
    aspect_ratio: float = 16.0 / 9.0
    distortion_type: DistortionType = DistortionType.NONE
    distortion_amount: float = 0.0

    def __post_init__(self) -> None:
        self.model = CameraModel(self.model)
        self.aperture_shape = ApertureShape(self.aperture_shape)
        self.distortion_type = DistortionType(self.distortion_type)
        if self.focal_length <= 0.0:
            raise ValueError(f"focal_length must be positive, got {self.focal_length}")
        if self.aperture_fstop <= 0.0:
            raise ValueError(f"aperture_fstop must be positive, got {self.aperture_fstop}")
        if self.focus_distance <= self.focal_length / 1000.0:
            raise ValueError(
                f"focus_distance {self.focus_distance} must exceed the focal length "
                f"({self.focal_length} mm)"
            )
        if self.film_curvature < 0.0:
            raise ValueError(f"film_curvature must be non-negative, got {self.film_curvature}")

    # -------------------------------------------------------------------------
    # Derived quantities
    # -------------------------------------------------------------------------

    @property
    def distortion(self) -> DistortionParams:
        return DistortionParams(DistortionType(self.distortion_type), self.distortion_amount)

    def aperture_radius(self) -> float:
        """Aperture radius in metres: (focal_length / f-number / 2) / 1000."""
        return (self.focal_length / self.aperture_fstop / 2.0) / 1000.0

    def film_distance(self) -> float:
        """Lens-to-film distance di from the thin lens equation."""
        f = self.focal_length / 1000.0
        return (f * self.focus_distance) / (self.focus_distance - f)

    def film_position(self) -> float:
        """Z of the film plane in camera space, including the film shift."""
        return -self.film_distance() + self.film_shift[2]

    def field_of_view(self) -> float:
        """Vertical field of view in radians."""
        sensor_height = (self.film_size / 1000.0) * SENSOR_HEIGHT_FRACTION
        return 2.0 * math.atan(sensor_height / (2.0 * self.focal_length / 1000.0))

    def film_half_extent(self) -> tuple[float, float]:
        """Half width and half height of the film in metres."""
        half_height = math.tan(self.field_of_view() / 2.0) * abs(self.film_position())
        return half_height * self.aspect_ratio, half_height

    def basis(self) -> tuple[Vec3, Vec3, Vec3]:
        """Orthonormal camera basis (u right, v up, w backward)."""
        position = np.asarray(self.position, dtype=np.float64)
        look_at = np.asarray(self.look_at, dtype=np.float64)
        up = np.asarray(self.up, dtype=np.float64)
        w = normalize(position - look_at)
        u = normalize(np.cross(up, w))
        v = np.cross(w, u)
        return u, v, w

    def orbit(self, yaw: float, pitch: float, distance: float | None = None) -> None:
        """Move the camera on a sphere around look_at.

        Args:
            yaw: Rotation about the vertical axis in degrees; 180 places the
                camera on the -Z side of look_at.
            pitch: Elevation above look_at in degrees.
            distance: Orbit radius; defaults to the current distance.
        """
        look_at = np.asarray(self.look_at, dtype=np.float64)
        if distance is None:
            distance = float(np.linalg.norm(np.asarray(self.position, dtype=np.float64) - look_at))
        yaw_rad = math.radians(yaw)
        pitch_rad = math.radians(pitch)
        self.position = (
            float(look_at[0] + distance * math.sin(yaw_rad) * math.cos(pitch_rad)),
            float(look_at[1] + distance * math.sin(pitch_rad)),
            float(look_at[2] + distance * math.cos(yaw_rad) * math.cos(pitch_rad)),
        )

    # -------------------------------------------------------------------------
    # Ray generation
    # -------------------------------------------------------------------------

    def generate_ray(self, u: float, v: float, rng: RandomSource) -> Ray:
        """Generate a primary ray through film coordinates (u, v).

        Args:
            u: Horizontal film coordinate in [-1, 1], left to right.
            v: Vertical film coordinate in [-1, 1], bottom to top.
            rng: Random source for aperture sampling.

        Returns:
            A world-space ray with unit direction.
        """
        half_width, half_height = self.film_half_extent()
        film_point = np.array(
            (u * half_width, v * half_height, self.film_position()), dtype=np.float64
        )

        if self.model is CameraModel.PINHOLE:
            origin, direction = self._pinhole(film_point, rng)
        else:
            origin, direction = self._thin_lens(film_point, rng)

        basis_u, basis_v, basis_w = self.basis()
        world_origin = origin[0] * basis_u + origin[1] * basis_v + origin[2] * basis_w
        world_direction = (
            direction[0] * basis_u + direction[1] * basis_v + direction[2] * basis_w
        )
        return Ray(
            origin=np.asarray(self.position, dtype=np.float64) + world_origin,
            direction=normalize(world_direction),
        )

    def _aperture_center(self) -> Vec3:
        return np.asarray(self.aperture_shift, dtype=np.float64)

    def _aperture_tilt(self) -> tuple[float, float]:
        return math.radians(self.aperture_tilt_x), math.radians(self.aperture_tilt_y)

    def _lens_point(self, rng: RandomSource) -> Vec3:
        ax, ay = sample_aperture(self.aperture_shape, rng)
        radius = self.aperture_radius()
        return np.array((ax * radius, ay * radius, 0.0), dtype=np.float64)

    def _pinhole(self, film_point: Vec3, rng: RandomSource) -> tuple[Vec3, Vec3]:
        origin = np.zeros(3, dtype=np.float64)
        if self.aperture_fstop < PINHOLE_APERTURE_FSTOP:
            origin = self._lens_point(rng) + self._aperture_center()
        return origin, normalize(film_point - origin)

    def _shape_film_point(self, film_point: Vec3) -> Vec3:
        """Apply film shift, tilt and curvature to a point on the film."""
        point = film_point.copy()
        point[0] += self.film_shift[0]
        point[1] += self.film_shift[1]
        if self.film_tilt_x != 0.0 or self.film_tilt_y != 0.0:
            point = rotate_point(
                point, math.radians(self.film_tilt_x), math.radians(self.film_tilt_y)
            )
        if self.film_curvature > 0.0:
            r_squared = point[0] * point[0] + point[1] * point[1]
            point[2] -= r_squared * self.film_curvature * FILM_CURVATURE_SCALE
        return point

    def focus_point(self, film_point: Vec3) -> Vec3:
        """Camera-space point where the chief ray of a film point meets focus.

        The plane of focus lies focus_distance in front of the aperture centre,
        perpendicular to the (possibly tilted) optical axis. The chief ray is
        the line through the film point and the aperture centre.
        """
        center = self._aperture_center()
        tilt_x, tilt_y = self._aperture_tilt()
        axis = rotate_point(np.array((0.0, 0.0, -1.0)), tilt_x, tilt_y)

        chief = normalize(center - self._shape_film_point(film_point))
        denom = float(np.dot(chief, axis))
        t = self.focus_distance / denom if denom != 0.0 else self.focus_distance
        return center + chief * t

    def _thin_lens(self, film_point: Vec3, rng: RandomSource) -> tuple[Vec3, Vec3]:
        focus_point = self.focus_point(film_point)

        tilt_x, tilt_y = self._aperture_tilt()
        lens_point = self._lens_point(rng)
        if tilt_x != 0.0 or tilt_y != 0.0:
            lens_point = rotate_point(lens_point, tilt_x, tilt_y)
        lens_point = lens_point + self._aperture_center()
        return lens_point, normalize(focus_point - lens_point)
