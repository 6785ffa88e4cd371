"""Ray data structure and vector utilities for the path tracer.

This module provides the fundamental Ray dataclass and vector utility functions
for Monte Carlo ray tracing. All operations are Taichi functions so they can be
called from the render kernel; vectors are ``taichi.math.vec3`` values, which
resolve to double precision when Taichi is initialised with
``default_fp=ti.f64``.

Random sampling helpers take the caller's generator state and return the
advanced state alongside the sample (see :mod:`bounce.core.rng`).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> origin = ti.math.vec3(0.0, 0.0, 0.0)
    >>> direction = ti.math.vec3(0.0, 0.0, -1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray_at(ray, 5.0)  # Point 5 units along the ray
"""

import taichi as ti
import taichi.math as tm

from bounce.core.rng import random_range

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Upper bound on rejection sampling attempts
MAX_REJECTION_TRIES = 64

# Per-component threshold below which a vector counts as zero
NEAR_ZERO_EPSILON = 1e-8


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Not required to be
            unit length.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f64) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length(v: vec3) -> ti.f64:
    """Compute the Euclidean length of a vector."""
    return tm.length(v)


@ti.func
def length_squared(v: vec3) -> ti.f64:
    """Compute the squared length of a vector.

    Cheaper than length() when only comparing magnitudes.
    """
    return tm.dot(v, v)


@ti.func
def normalize(v: vec3) -> vec3:
    """Normalize a vector to unit length."""
    return tm.normalize(v)


@ti.func
def dot(a: vec3, b: vec3) -> ti.f64:
    """Compute the dot product a . b."""
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product a x b."""
    return tm.cross(a, b)


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Mirror an incident vector about a normal.

    Computes ``d - 2 (d . n) n``. The normal must be unit length; the
    incident vector keeps its length.

    Args:
        incident: The incoming direction vector (pointing toward the surface).
        normal: The surface normal (unit length).

    Returns:
        The reflected direction vector.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def refract(unit_incident: vec3, normal: vec3, eta_ratio: ti.f64) -> vec3:
    """Refract a unit incident vector through a surface.

    Splits the refracted direction into the components perpendicular and
    parallel to the normal (Snell's law). The caller is responsible for
    checking that refraction is possible; under total internal reflection
    the result is not meaningful.

    Args:
        unit_incident: The incoming direction (unit length).
        normal: The surface normal, facing against the incoming ray.
        eta_ratio: Ratio of refractive indices (n_incident / n_transmitted).

    Returns:
        The refracted direction vector (unit length).
    """
    cos_theta = tm.min(-tm.dot(unit_incident, normal), 1.0)
    r_out_perp = eta_ratio * (unit_incident + cos_theta * normal)
    r_out_parallel = -tm.sqrt(ti.abs(1.0 - tm.dot(r_out_perp, r_out_perp))) * normal
    return r_out_perp + r_out_parallel


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Check if a vector is near zero in all components.

    Returns:
        1 if every component is below NEAR_ZERO_EPSILON in magnitude, 0 otherwise.
    """
    s = NEAR_ZERO_EPSILON
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s


# =============================================================================
# Random Sampling Utilities for Monte Carlo
# =============================================================================


@ti.func
def random_in_unit_sphere(state: ti.u32):
    """Generate a random point inside the unit ball.

    Uses rejection sampling from the enclosing cube.

    Args:
        state: The caller's generator state.

    Returns:
        A tuple of (point, new_state) with length(point) < 1.
    """
    p = vec3(0.0, 0.0, 0.0)
    s = state
    found = 0
    for _ in range(MAX_REJECTION_TRIES):
        if found == 0:
            x, s = random_range(s, -1.0, 1.0)
            y, s = random_range(s, -1.0, 1.0)
            z, s = random_range(s, -1.0, 1.0)
            candidate = vec3(x, y, z)
            lensq = length_squared(candidate)
            # Reject the centre too so the candidate can be normalized
            if lensq < 1.0 and lensq > 1e-160:
                p = candidate
                found = 1
    return p, s


@ti.func
def random_unit_vector(state: ti.u32):
    """Generate a random unit vector uniformly distributed on the sphere.

    Returns:
        A tuple of (unit_vector, new_state).
    """
    p, s = random_in_unit_sphere(state)
    result = vec3(0.0, 1.0, 0.0)
    if length_squared(p) > 0.0:
        result = normalize(p)
    return result, s


@ti.func
def random_on_hemisphere(normal: vec3, state: ti.u32):
    """Generate a random unit vector in the hemisphere around a normal.

    Returns:
        A tuple of (unit_vector, new_state) with dot(unit_vector, normal) >= 0.
    """
    on_sphere, s = random_unit_vector(state)
    result = on_sphere
    if tm.dot(on_sphere, normal) < 0.0:
        result = -on_sphere
    return result, s


@ti.func
def random_in_unit_disk(state: ti.u32):
    """Generate a random point inside the unit disk in the xy-plane.

    Used for sampling the camera's defocus disk.

    Returns:
        A tuple of (point, new_state) with point = (x, y, 0), x^2 + y^2 < 1.
    """
    p = vec3(0.0, 0.0, 0.0)
    s = state
    found = 0
    for _ in range(MAX_REJECTION_TRIES):
        if found == 0:
            x, s = random_range(s, -1.0, 1.0)
            y, s = random_range(s, -1.0, 1.0)
            if x * x + y * y < 1.0:
                p = vec3(x, y, 0.0)
                found = 1
    return p, s
