"""Sphere primitive with half-b ray-sphere intersection.

This module provides the Sphere and HitRecord dataclasses and the sphere
intersection routine used by the scene scan.

The ray-sphere intersection is found by solving:
    |origin + t * direction - center|^2 = radius^2

which expands to the quadratic a*t^2 + 2*h*t + c = 0 with
    a = dot(direction, direction)
    h = dot(origin - center, direction)   (half of the usual b)
    c = dot(origin - center, origin - center) - radius^2

Working with h instead of b removes the factors of 2 and 4 from the
discriminant and the roots, which saves multiplications and rounding.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from bounce.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, -1), radius=0.5, material_id=0)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from bounce.core.interval import Interval, interval_surrounds
from bounce.core.ray import Ray, ray_at

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere. Must be positive; host-side
            constructors validate it.
        material_id: Index of the sphere's material in the material registry.
    """

    center: vec3
    radius: ti.f64
    material_id: ti.i32


@ti.dataclass
class HitRecord:
    """Record of a ray-surface intersection.

    Attributes:
        hit: 1 if the ray intersected the surface, 0 otherwise. The remaining
            fields are only meaningful when hit == 1.
        t: The ray parameter of the intersection.
        point: The intersection point.
        normal: Unit surface normal, always facing against the incoming ray.
        front_face: 1 if the ray arrived from outside the surface, 0 if it
            hit the surface from within.
        material_id: Material of the hit surface, -1 on a miss.
    """

    hit: ti.i32
    t: ti.f64
    point: vec3
    normal: vec3
    front_face: ti.i32
    material_id: ti.i32


@ti.func
def make_miss_record() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        material_id=-1,
    )


@ti.func
def set_face_normal(ray_direction: vec3, outward_normal: vec3):
    """Orient a unit outward normal against the incoming ray.

    Args:
        ray_direction: The incoming ray direction.
        outward_normal: The geometric normal pointing out of the surface
            (unit length).

    Returns:
        A tuple of (normal, front_face) where normal opposes the ray and
        front_face is 1 when the ray arrived from outside.
    """
    front_face = 1
    normal = outward_normal
    if tm.dot(ray_direction, outward_normal) >= 0.0:
        front_face = 0
        normal = -outward_normal
    return normal, front_face


@ti.func
def hit_sphere(ray: Ray, sphere: Sphere, ray_t: Interval) -> HitRecord:
    """Intersect a ray with a sphere inside an open parameter window.

    The nearer root is tried first and the farther root only when the nearer
    one lies outside ``ray_t``, so the closest acceptable hit wins and hits
    behind the origin or past the caller's bound are rejected.

    A negative discriminant, or a zero-length direction, is a miss.

    Args:
        ray: The ray to test (direction need not be normalized).
        sphere: The sphere to test against.
        ray_t: Accepted range of the ray parameter (exclusive bounds).

    Returns:
        A HitRecord; check its hit field to see if an intersection occurred.
    """
    oc = ray.origin - sphere.center
    a = tm.dot(ray.direction, ray.direction)
    half_b = tm.dot(oc, ray.direction)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius
    discriminant = half_b * half_b - a * c

    # Taichi requires outer-scope declaration of the result fields
    did_hit = 0
    hit_t = 0.0
    hit_point = vec3(0.0, 0.0, 0.0)
    hit_normal = vec3(0.0, 0.0, 0.0)
    is_front_face = 0
    material_id = -1

    if discriminant >= 0.0 and a > 0.0:
        sqrt_d = tm.sqrt(discriminant)

        root = (-half_b - sqrt_d) / a
        valid = interval_surrounds(ray_t, root)
        if not valid:
            root = (-half_b + sqrt_d) / a
            valid = interval_surrounds(ray_t, root)

        if valid:
            did_hit = 1
            hit_t = root
            hit_point = ray_at(ray, root)
            outward_normal = (hit_point - sphere.center) / sphere.radius
            hit_normal, is_front_face = set_face_normal(ray.direction, outward_normal)
            material_id = sphere.material_id

    return HitRecord(
        hit=did_hit,
        t=hit_t,
        point=hit_point,
        normal=hit_normal,
        front_face=is_front_face,
        material_id=material_id,
    )


def validate_radius(radius: float) -> float:
    """Check the sphere radius precondition on the host.

    Raises:
        ValueError: If radius is not strictly positive.
    """
    radius = float(radius)
    if not radius > 0.0:
        raise ValueError(f"Sphere radius must be positive, got {radius}")
    return radius
