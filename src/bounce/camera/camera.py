"""Look-at camera with optional defocus blur.

The camera turns a flat set of named settings into the geometry used to
generate primary rays:

- Look-at positioning (lookfrom, lookat, vup)
- Vertical field of view
- Image width and aspect ratio (the height is derived)
- Thin-lens defocus blur (defocus_angle, focus_dist)

The camera builds an orthonormal basis (u, v, w) from the view parameters:
- w: points from lookat toward lookfrom (opposite view direction)
- u: points right in the image plane
- v: points up in the image plane

Pixel (0, 0) is the upper-left pixel; rows run top to bottom.

Derived state is computed on the host with NumPy (initialize) and uploaded
to Taichi fields (setup_camera) before each render, so the camera can be
reconfigured between renders.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from bounce.camera.camera import Camera
    >>> from bounce.scene.presets import showcase_scene
    >>> camera = Camera(aspect_ratio=16.0 / 9.0, image_width=400, samples_per_pixel=50)
    >>> image = camera.render(showcase_scene(), "showcase.ppm")
"""

import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import numpy as np
import taichi as ti
import taichi.math as tm

from bounce.core.ray import Ray, make_ray, random_in_unit_disk
from bounce.core.rng import random_range

logger = logging.getLogger(__name__)

vec3 = tm.vec3

Vector3 = tuple[float, float, float]

# Below this length the cross product of vup and the view direction is
# treated as zero (vup parallel to the view)
_DEGENERATE_EPSILON = 1e-12


# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass(frozen=True)
class CameraState:
    """Derived camera geometry, ready to upload to the render fields.

    Attributes:
        image_width: Image width in pixels.
        image_height: Image height in pixels.
        center: Camera position (ray origin without defocus).
        pixel00: Center of the upper-left pixel.
        pixel_delta_u: Offset from one pixel to the next to the right.
        pixel_delta_v: Offset from one pixel to the next row down.
        u: Camera right vector.
        v: Camera up vector.
        w: Camera backward vector.
        defocus_disk_u: Horizontal radius vector of the defocus disk.
        defocus_disk_v: Vertical radius vector of the defocus disk.
        defocus_enabled: Whether ray origins are sampled from the disk.
    """

    image_width: int
    image_height: int
    center: Vector3
    pixel00: Vector3
    pixel_delta_u: Vector3
    pixel_delta_v: Vector3
    u: Vector3
    v: Vector3
    w: Vector3
    defocus_disk_u: Vector3
    defocus_disk_v: Vector3
    defocus_enabled: bool


def _as_tuple(array: np.ndarray) -> Vector3:
    return (float(array[0]), float(array[1]), float(array[2]))


@dataclass
class Camera:
    """Render configuration: image size, sampling and view parameters.

    Attributes:
        aspect_ratio: Ideal width / height ratio; the height is derived from it.
        image_width: Image width in pixels.
        samples_per_pixel: Random samples averaged for each pixel.
        max_depth: Maximum number of ray bounces.
        vfov: Vertical field of view in degrees.
        lookfrom: Camera position.
        lookat: Point the camera looks at.
        vup: Camera-relative up direction.
        defocus_angle: Cone angle (degrees) of rays through each pixel;
            0 disables defocus blur.
        focus_dist: Distance from lookfrom to the plane of perfect focus.
        seed: Seed of the per-row random generators.
    """

    aspect_ratio: float = 1.0
    image_width: int = 100
    samples_per_pixel: int = 100
    max_depth: int = 10
    vfov: float = 90.0
    lookfrom: Vector3 = (0.0, 0.0, 0.0)
    lookat: Vector3 = (0.0, 0.0, -1.0)
    vup: Vector3 = (0.0, 1.0, 0.0)
    defocus_angle: float = 0.0
    focus_dist: float = 1.0
    seed: int = 0

    @property
    def image_height(self) -> int:
        """Image height in pixels, at least 1."""
        return max(1, int(self.image_width / self.aspect_ratio))

    def validate(self) -> None:
        """Check the configuration.

        Raises:
            ValueError: If any setting is out of range.
        """
        if self.image_width < 1:
            raise ValueError(f"image_width must be at least 1, got {self.image_width}")
        if self.samples_per_pixel < 1:
            raise ValueError(
                f"samples_per_pixel must be at least 1, got {self.samples_per_pixel}"
            )
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {self.max_depth}")
        if not self.aspect_ratio > 0.0:
            raise ValueError(f"aspect_ratio must be positive, got {self.aspect_ratio}")
        if not 0.0 < self.vfov < 180.0:
            raise ValueError(f"vfov must be in (0, 180) degrees, got {self.vfov}")
        if not self.focus_dist > 0.0:
            raise ValueError(f"focus_dist must be positive, got {self.focus_dist}")
        if self.defocus_angle >= 180.0:
            raise ValueError(f"defocus_angle must be below 180 degrees, got {self.defocus_angle}")
        if self.seed < 0 or self.seed > 0xFFFFFFFF:
            raise ValueError(f"seed must fit in 32 bits, got {self.seed}")

    def initialize(self) -> CameraState:
        """Compute the camera geometry from the configuration.

        Returns:
            The derived CameraState.

        Raises:
            ValueError: If the configuration is invalid, lookfrom equals
                lookat, or vup is parallel to the view direction.
        """
        self.validate()

        image_height = self.image_height
        center = np.array(self.lookfrom, dtype=np.float64)
        lookat = np.array(self.lookat, dtype=np.float64)
        vup = np.array(self.vup, dtype=np.float64)

        # Viewport dimensions at the focus distance
        theta = math.radians(self.vfov)
        h = math.tan(theta / 2.0)
        viewport_height = 2.0 * h * self.focus_dist
        viewport_width = viewport_height * (self.image_width / image_height)

        # w points from lookat toward lookfrom (backward)
        w = center - lookat
        w_length = np.linalg.norm(w)
        if w_length == 0.0:
            raise ValueError("lookfrom and lookat must be different points")
        w = w / w_length

        # u points right (perpendicular to w and vup)
        u = np.cross(vup, w)
        u_length = np.linalg.norm(u)
        if u_length < _DEGENERATE_EPSILON:
            raise ValueError("vup must not be parallel to the view direction")
        u = u / u_length

        # v points up in the camera's frame
        v = np.cross(w, u)

        # Viewport edges: across the top, and down the left side
        viewport_u = viewport_width * u
        viewport_v = -viewport_height * v

        pixel_delta_u = viewport_u / self.image_width
        pixel_delta_v = viewport_v / image_height

        upper_left = center - self.focus_dist * w - viewport_u / 2.0 - viewport_v / 2.0
        pixel00 = upper_left + 0.5 * (pixel_delta_u + pixel_delta_v)

        defocus_radius = self.focus_dist * math.tan(math.radians(self.defocus_angle / 2.0))

        return CameraState(
            image_width=self.image_width,
            image_height=image_height,
            center=_as_tuple(center),
            pixel00=_as_tuple(pixel00),
            pixel_delta_u=_as_tuple(pixel_delta_u),
            pixel_delta_v=_as_tuple(pixel_delta_v),
            u=_as_tuple(u),
            v=_as_tuple(v),
            w=_as_tuple(w),
            defocus_disk_u=_as_tuple(u * defocus_radius),
            defocus_disk_v=_as_tuple(v * defocus_radius),
            defocus_enabled=self.defocus_angle > 0.0,
        )

    def render(self, world, output: Any = None) -> np.ndarray:
        """Render a world and optionally write the image.

        Args:
            world: The World to render.
            output: Where to write the image: an object with a
                write_image(image) method, a file path (".png" is written
                with Pillow, anything else as PPM) or a text stream
                (PPM). None only returns the image.

        Returns:
            The gamma-encoded image, shape (height, width, 3), float64.

        Raises:
            ValueError: If the configuration is invalid.
            RuntimeError: If the image exceeds the render capacity.
            OSError: If writing the output fails.
        """
        from bounce.core.integrator import render_image
        from bounce.output import write_image

        image = render_image(self, world)
        if output is not None:
            write_image(output, image)
            if isinstance(output, (str, Path)):
                logger.info("Wrote %s", output)
        return image


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_center = ti.Vector.field(3, dtype=ti.f64, shape=())
_pixel00 = ti.Vector.field(3, dtype=ti.f64, shape=())
_pixel_delta_u = ti.Vector.field(3, dtype=ti.f64, shape=())
_pixel_delta_v = ti.Vector.field(3, dtype=ti.f64, shape=())

# Orthonormal basis vectors
_camera_u = ti.Vector.field(3, dtype=ti.f64, shape=())  # Right
_camera_v = ti.Vector.field(3, dtype=ti.f64, shape=())  # Up
_camera_w = ti.Vector.field(3, dtype=ti.f64, shape=())  # Backward

# Defocus disk
_defocus_disk_u = ti.Vector.field(3, dtype=ti.f64, shape=())
_defocus_disk_v = ti.Vector.field(3, dtype=ti.f64, shape=())
_defocus_enabled = ti.field(dtype=ti.i32, shape=())


def setup_camera(state: CameraState) -> None:
    """Upload derived camera geometry to the render fields.

    Must be called from Python scope before launching a render kernel.
    """
    _camera_center[None] = list(state.center)
    _pixel00[None] = list(state.pixel00)
    _pixel_delta_u[None] = list(state.pixel_delta_u)
    _pixel_delta_v[None] = list(state.pixel_delta_v)
    _camera_u[None] = list(state.u)
    _camera_v[None] = list(state.v)
    _camera_w[None] = list(state.w)
    _defocus_disk_u[None] = list(state.defocus_disk_u)
    _defocus_disk_v[None] = list(state.defocus_disk_v)
    _defocus_enabled[None] = 1 if state.defocus_enabled else 0


# =============================================================================
# Ray Generation
# =============================================================================


@ti.func
def pixel_sample_point(i: ti.i32, j: ti.i32, offset_x: ti.f64, offset_y: ti.f64) -> vec3:
    """Point on the viewport at column i, row j plus a sub-pixel offset."""
    return (
        _pixel00[None]
        + (ti.cast(i, ti.f64) + offset_x) * _pixel_delta_u[None]
        + (ti.cast(j, ti.f64) + offset_y) * _pixel_delta_v[None]
    )


@ti.func
def defocus_disk_sample(state: ti.u32):
    """Random ray origin on the camera's defocus disk.

    Returns:
        A tuple of (origin, new_state).
    """
    p, s = random_in_unit_disk(state)
    origin = _camera_center[None] + p[0] * _defocus_disk_u[None] + p[1] * _defocus_disk_v[None]
    return origin, s


@ti.func
def get_ray(i: ti.i32, j: ti.i32, state: ti.u32):
    """Generate a jittered camera ray through pixel (i, j).

    The sample point is offset uniformly within the pixel square. The ray
    starts at the camera center, or at a random point of the defocus disk
    when defocus blur is enabled. The direction is not normalized.

    Args:
        i: Pixel column (0 = left).
        j: Pixel row (0 = top).
        state: The caller's generator state.

    Returns:
        A tuple of (ray, new_state).
    """
    offset_x, s = random_range(state, -0.5, 0.5)
    offset_y, s = random_range(s, -0.5, 0.5)
    pixel_sample = pixel_sample_point(i, j, offset_x, offset_y)

    origin = _camera_center[None]
    if _defocus_enabled[None] == 1:
        origin, s = defocus_disk_sample(s)

    ray = make_ray(origin, pixel_sample - origin)
    return ray, s


@ti.func
def get_camera_center() -> vec3:
    """Get the camera position in world space."""
    return _camera_center[None]


# =============================================================================
# Utility Functions
# =============================================================================


def _field_tuple(value) -> Vector3:
    return (float(value[0]), float(value[1]), float(value[2]))


def get_camera_info() -> dict[str, Vector3]:
    """Get the uploaded camera state for debugging.

    Returns:
        Dictionary with center, pixel00, pixel deltas, u, v, w and the
        defocus disk vectors.
    """
    return {
        "center": _field_tuple(_camera_center[None]),
        "pixel00": _field_tuple(_pixel00[None]),
        "pixel_delta_u": _field_tuple(_pixel_delta_u[None]),
        "pixel_delta_v": _field_tuple(_pixel_delta_v[None]),
        "u": _field_tuple(_camera_u[None]),
        "v": _field_tuple(_camera_v[None]),
        "w": _field_tuple(_camera_w[None]),
        "defocus_disk_u": _field_tuple(_defocus_disk_u[None]),
        "defocus_disk_v": _field_tuple(_defocus_disk_v[None]),
    }
