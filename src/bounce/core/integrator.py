"""Path tracing integrator and the row-parallel render kernel.

This module estimates the color seen along camera rays with Monte Carlo path
tracing. A ray is followed through the world, bouncing off surfaces according
to their materials, until it escapes to the sky, is absorbed, or runs out of
bounce depth.

Key features:
    - Material dispatch through the material registry
    - Sky gradient background for escaped rays
    - Per-row random generators, so a fixed seed gives identical images
    - Gamma 2 (square root) encoding of the averaged samples

The render kernel's outermost loop runs over image rows, which Taichi
parallelizes. Each row seeds its own generator from (seed, row) and walks its
columns and samples serially, writing into a caller-owned float64 array.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from bounce.camera.camera import Camera
    >>> from bounce.core.integrator import render_image
    >>> from bounce.scene.presets import showcase_scene
    >>>
    >>> image = render_image(Camera(image_width=200, samples_per_pixel=20), showcase_scene())
    >>> image.shape
    (200, 200, 3)
"""

import logging
import time

import numpy as np
import taichi as ti
import taichi.math as tm

from bounce.camera.camera import Camera, get_ray, setup_camera
from bounce.core.interval import INFINITY, make_interval
from bounce.core.ray import Ray, normalize
from bounce.core.rng import seed_row
from bounce.materials.registry import scatter
from bounce.scene.world import hit_world

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Path Tracing Constants
# =============================================================================

# Lower bound of the accepted hit window; keeps scattered rays from
# re-hitting the surface they start on
T_MIN = 0.001

# Largest image the render kernel accepts
MAX_IMAGE_WIDTH = 4096
MAX_IMAGE_HEIGHT = 4096


# =============================================================================
# Radiance Estimation
# =============================================================================


@ti.func
def background_color(direction: vec3) -> vec3:
    """Sky color seen along a direction.

    Blends linearly from white to light blue as the direction's y goes
    from -1 to 1.
    """
    unit_direction = normalize(direction)
    a = 0.5 * (unit_direction.y + 1.0)
    return (1.0 - a) * vec3(1.0, 1.0, 1.0) + a * vec3(0.5, 0.7, 1.0)


@ti.func
def ray_color(ray: Ray, max_depth: ti.i32, state: ti.u32):
    """Estimate the color seen along a ray.

    Each bounce multiplies the throughput by the material's attenuation. The
    path ends when the ray misses everything (throughput times the sky color),
    is absorbed (black) or has used max_depth bounces (black).

    Args:
        ray: The ray to follow.
        max_depth: Maximum number of ray segments; 0 or less returns black.
        state: The caller's generator state.

    Returns:
        A tuple of (color, new_state).
    """
    color = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    current = ray
    s = state

    # Active flag for path continuation
    active = 1

    for _ in range(max_depth):
        if active == 1:
            rec = hit_world(current, make_interval(T_MIN, INFINITY))

            if rec.hit == 0:
                # Ray escaped
                color = throughput * background_color(current.direction)
                active = 0
            else:
                did_scatter, attenuation, scattered, s = scatter(current, rec, s)
                if did_scatter == 0:
                    # Ray was absorbed
                    active = 0
                else:
                    throughput *= attenuation
                    current = scattered

    return color, s


@ti.func
def sample_pixel(i: ti.i32, j: ti.i32, samples_per_pixel: ti.i32, max_depth: ti.i32, state: ti.u32):
    """Average samples_per_pixel jittered samples of pixel (i, j).

    Returns:
        A tuple of (gamma_encoded_color, new_state).
    """
    total = vec3(0.0, 0.0, 0.0)
    s = state
    for _ in range(samples_per_pixel):
        ray, s = get_ray(i, j, s)
        color, s = ray_color(ray, max_depth, s)
        total += color

    # Gamma 2: square root of the linear average
    average = total / ti.cast(samples_per_pixel, ti.f64)
    return ti.sqrt(tm.max(average, vec3(0.0, 0.0, 0.0))), s


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_rows(
    image: ti.types.ndarray(dtype=ti.f64, ndim=3),
    width: ti.i32,
    height: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
    seed: ti.u32,
):
    """Render every pixel into image[row, column, channel].

    The outermost loop is parallelized over rows.
    """
    for j in range(height):
        state = seed_row(seed, j)
        for i in range(width):
            color, state = sample_pixel(i, j, samples_per_pixel, max_depth, state)
            for c in ti.static(range(3)):
                image[j, i, c] = color[c]


@ti.kernel
def _render_single_pixel(
    pixel_i: ti.i32, pixel_j: ti.i32, samples_per_pixel: ti.i32, max_depth: ti.i32, seed: ti.u32
) -> vec3:
    """Render one pixel with a freshly seeded row generator."""
    state = seed_row(seed, pixel_j)
    color, state = sample_pixel(pixel_i, pixel_j, samples_per_pixel, max_depth, state)
    return color


# =============================================================================
# Public Rendering API
# =============================================================================


def _prepare(camera: Camera, world):
    state = camera.initialize()
    if state.image_width > MAX_IMAGE_WIDTH or state.image_height > MAX_IMAGE_HEIGHT:
        raise RuntimeError(
            f"Image size {state.image_width}x{state.image_height} exceeds the maximum "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )
    world.check_resident()
    setup_camera(state)
    return state


def render_image(camera: Camera, world) -> np.ndarray:
    """Render a world as seen by a camera.

    Args:
        camera: The camera configuration.
        world: The World to render; it must be the resident world.

    Returns:
        The gamma-encoded image as a float64 array of shape
        (height, width, 3), rows top to bottom.

    Raises:
        ValueError: If the camera configuration is invalid.
        RuntimeError: If the image is too large or the world is not resident.
    """
    state = _prepare(camera, world)
    width, height = state.image_width, state.image_height

    logger.info(
        "Rendering %dx%d, %d samples/pixel, max depth %d, %d spheres",
        width,
        height,
        camera.samples_per_pixel,
        camera.max_depth,
        len(world),
    )
    start = time.perf_counter()

    image = np.zeros((height, width, 3), dtype=np.float64)
    _render_rows(image, width, height, camera.samples_per_pixel, camera.max_depth, camera.seed)
    ti.sync()

    logger.info("Render finished in %.2fs", time.perf_counter() - start)
    return image


def render_pixel(camera: Camera, world, pixel_i: int, pixel_j: int) -> tuple[float, float, float]:
    """Render a single pixel, gamma encoded.

    Useful for testing and debugging. The pixel's generator is seeded as if
    it were the first pixel of its row, so the value matches render_image()
    exactly only for column 0.

    Raises:
        ValueError: If the camera configuration is invalid or the pixel is
            outside the image.
        RuntimeError: If the world is not resident.
    """
    state = _prepare(camera, world)
    if not (0 <= pixel_i < state.image_width and 0 <= pixel_j < state.image_height):
        raise ValueError(
            f"Pixel ({pixel_i}, {pixel_j}) is outside the "
            f"{state.image_width}x{state.image_height} image"
        )
    color = _render_single_pixel(
        pixel_i, pixel_j, camera.samples_per_pixel, camera.max_depth, camera.seed
    )
    return (float(color[0]), float(color[1]), float(color[2]))
