"""The world: an ordered collection of spheres with materials.

This module stores the scene's spheres in preallocated Taichi fields and
provides the nearest-hit scan used by the path tracer, together with the
host-side World class that builds the scene, assigns materials and
serializes scenes to plain dictionaries / JSON.

The nearest-hit scan is linear: every sphere is tested, and the upper bound
of the accepted parameter window shrinks to the closest hit found so far.

Only one world is resident at a time; constructing a World (or calling
clear()) resets the sphere and material storage.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from bounce.scene.world import World
    >>> from bounce.materials.palette import GROUND, GLASS
    >>> world = World()
    >>> world.add_sphere((0.0, -100.5, -1.0), 100.0, GROUND)
    >>> world.add_sphere((0.0, 0.0, -1.0), 0.5, GLASS)
    >>> # Use hit_world within a Taichi kernel
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import taichi as ti
import taichi.math as tm

from bounce.core.interval import Interval, make_interval
from bounce.core.ray import Ray, make_ray
from bounce.geometry.sphere import HitRecord, Sphere, hit_sphere, make_miss_record, validate_radius
from bounce.materials.dielectric import Dielectric
from bounce.materials.lambertian import Lambertian
from bounce.materials.metal import Metal
from bounce.materials.registry import (
    MaterialSpec,
    MaterialType,
    clear_materials,
    get_material_count,
    material_type_of,
    register_material,
)

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3

# Maximum number of spheres supported in the scene
MAX_SPHERES = 4096

# Sphere storage: Structure of Arrays layout
sphere_centers = ti.Vector.field(3, dtype=ti.f64, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f64, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())

# Incremented every time the sphere storage is cleared
_storage_generation = 0


def clear_spheres() -> None:
    """Remove all spheres from the resident world.

    The field data is not cleared but will be overwritten when new spheres
    are added.
    """
    global _storage_generation
    num_spheres[None] = 0
    _storage_generation += 1


def get_storage_generation() -> int:
    """Get the number of times the sphere storage has been cleared."""
    return _storage_generation


def get_sphere_count() -> int:
    """Get the number of spheres in the resident world."""
    return int(num_spheres[None])


@ti.func
def hit_world(ray: Ray, ray_t: Interval) -> HitRecord:
    """Find the nearest intersection of a ray with the world.

    Args:
        ray: The ray to test.
        ray_t: Accepted range of the ray parameter (exclusive bounds).

    Returns:
        The HitRecord of the closest hit inside ray_t, or a miss record.
    """
    closest_so_far = ray_t.upper
    result = make_miss_record()

    for i in range(num_spheres[None]):
        sphere = Sphere(
            center=sphere_centers[i],
            radius=sphere_radii[i],
            material_id=sphere_material_ids[i],
        )
        rec = hit_sphere(ray, sphere, make_interval(ray_t.lower, closest_so_far))
        if rec.hit == 1:
            closest_so_far = rec.t
            result = rec

    return result


# Single-ray query output, for host-side intersection tests
_query_hit = ti.field(dtype=ti.i32, shape=())
_query_t = ti.field(dtype=ti.f64, shape=())
_query_point = ti.Vector.field(3, dtype=ti.f64, shape=())
_query_normal = ti.Vector.field(3, dtype=ti.f64, shape=())
_query_front_face = ti.field(dtype=ti.i32, shape=())
_query_material_id = ti.field(dtype=ti.i32, shape=())


@ti.kernel
def _intersect_kernel(origin: vec3, direction: vec3, t_min: ti.f64, t_max: ti.f64):
    rec = hit_world(make_ray(origin, direction), make_interval(t_min, t_max))
    _query_hit[None] = rec.hit
    _query_t[None] = rec.t
    _query_point[None] = rec.point
    _query_normal[None] = rec.normal
    _query_front_face[None] = rec.front_face
    _query_material_id[None] = rec.material_id


@dataclass(frozen=True)
class HitInfo:
    """Host-side copy of a HitRecord.

    Attributes:
        t: The ray parameter of the intersection.
        point: The intersection point.
        normal: Unit normal facing against the ray.
        front_face: Whether the ray arrived from outside.
        material_id: The material id of the hit sphere.
    """

    t: float
    point: tuple[float, float, float]
    normal: tuple[float, float, float]
    front_face: bool
    material_id: int


@dataclass
class MaterialInfo:
    """Information about a registered material.

    Attributes:
        material_id: The material id in the registry.
        material: The material description.
    """

    material_id: int
    material: MaterialSpec


@dataclass
class SphereInfo:
    """Information about a sphere in the world.

    Attributes:
        sphere_index: The index in the sphere storage arrays.
        center: The center of the sphere.
        radius: The radius of the sphere.
        material_id: The material id assigned to the sphere.
    """

    sphere_index: int
    center: tuple[float, float, float]
    radius: float
    material_id: int


@dataclass
class SceneConfig:
    """Serializable description of a world.

    Attributes:
        materials: List of material configurations, indexed by material id.
        spheres: List of sphere configurations.
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    spheres: list[dict[str, Any]] = field(default_factory=list)


def material_to_config(material: MaterialSpec) -> dict[str, Any]:
    """Describe a material as a plain dictionary."""
    material_type = material_type_of(material)
    config: dict[str, Any] = {"type": material_type.name.lower()}
    if material_type == MaterialType.DIELECTRIC:
        config["ior"] = material.ior
    else:
        config["albedo"] = list(material.albedo)
    return config


def material_from_config(config: dict[str, Any]) -> MaterialSpec:
    """Build a material description from a plain dictionary.

    Raises:
        ValueError: If the type is unknown or the parameters are invalid.
    """
    mat_type = str(config.get("type", "")).lower()
    if mat_type == "lambertian":
        return Lambertian(albedo=tuple(config.get("albedo", (0.5, 0.5, 0.5))))
    if mat_type == "metal":
        return Metal(albedo=tuple(config.get("albedo", (0.8, 0.8, 0.8))))
    if mat_type == "dielectric":
        return Dielectric(ior=config.get("ior", 1.5))
    raise ValueError(f"Unknown material type: {mat_type!r}")


@dataclass(frozen=True)
class SphereSpec:
    """A sphere to be added to a World.

    Attributes:
        center: The center point (x, y, z).
        radius: The radius; must be positive.
        material: The material description.
    """

    center: tuple[float, float, float]
    radius: float
    material: MaterialSpec


def _as_point(values: Any) -> tuple[float, float, float]:
    point = tuple(float(v) for v in values)
    if len(point) != 3:
        raise ValueError(f"Expected 3 coordinates, got {len(point)}")
    return point  # type: ignore[return-value]


class World:
    """Composite scene of spheres sharing a material registry.

    The World keeps host-side records of what it uploaded so the scene can be
    inspected and serialized. Materials are registered on first use; adding
    many spheres with the same material description stores it once.

    Attributes:
        materials: MaterialInfo for every registered material, by id.
        spheres: SphereInfo for every sphere, in insertion order.

    Example:
        >>> world = World()
        >>> world.add_sphere((0, 0, -1), 0.5, Lambertian(albedo=(0.1, 0.2, 0.5)))
        >>> world.add_sphere((1, 0, -1), 0.5, COPPER)
        >>> len(world)
        2
    """

    def __init__(self) -> None:
        """Initialize an empty world, replacing any resident one."""
        self.materials: list[MaterialInfo] = []
        self.spheres: list[SphereInfo] = []
        self._material_ids: dict[MaterialSpec, int] = {}
        self._generation = -1
        self._clear_all()

    def _clear_all(self) -> None:
        clear_spheres()
        clear_materials()
        self._generation = get_storage_generation()
        self.materials.clear()
        self.spheres.clear()
        self._material_ids.clear()

    def clear(self) -> None:
        """Remove all spheres and materials."""
        self._clear_all()

    def __len__(self) -> int:
        return len(self.spheres)

    def __repr__(self) -> str:
        return f"World(spheres={len(self.spheres)}, materials={len(self.materials)})"

    # =========================================================================
    # Building
    # =========================================================================

    def material_id(self, material: MaterialSpec) -> int:
        """Return the registry id of a material, registering it on first use.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            TypeError: If material is not a supported description.
        """
        existing = self._material_ids.get(material)
        if existing is not None:
            return existing

        material_id = register_material(material)
        self._material_ids[material] = material_id
        self.materials.append(MaterialInfo(material_id=material_id, material=material))
        return material_id

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        material: MaterialSpec,
    ) -> int:
        """Add a sphere to the world.

        Args:
            center: The center point of the sphere as (x, y, z).
            radius: The radius of the sphere; must be positive.
            material: The material description.

        Returns:
            The index of the added sphere.

        Raises:
            ValueError: If radius is not positive or center is not 3D.
            RuntimeError: If the maximum number of spheres is exceeded.
        """
        center = _as_point(center)
        radius = validate_radius(radius)

        idx = num_spheres[None]
        if idx >= MAX_SPHERES:
            raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")

        material_id = self.material_id(material)
        sphere_centers[idx] = list(center)
        sphere_radii[idx] = radius
        sphere_material_ids[idx] = material_id
        num_spheres[None] = idx + 1

        self.spheres.append(
            SphereInfo(sphere_index=idx, center=center, radius=radius, material_id=material_id)
        )
        return idx

    def add(self, sphere: SphereSpec) -> int:
        """Add a sphere described by a SphereSpec. See add_sphere()."""
        return self.add_sphere(sphere.center, sphere.radius, sphere.material)

    # =========================================================================
    # Queries
    # =========================================================================

    def intersect(
        self,
        origin: tuple[float, float, float],
        direction: tuple[float, float, float],
        t_min: float = 0.001,
        t_max: float = float("inf"),
    ) -> HitInfo | None:
        """Intersect a single ray with the world from Python scope.

        Returns:
            The nearest hit inside the open window (t_min, t_max), or None.
        """
        _intersect_kernel(vec3(*_as_point(origin)), vec3(*_as_point(direction)), t_min, t_max)
        if _query_hit[None] == 0:
            return None
        point = _query_point[None]
        normal = _query_normal[None]
        return HitInfo(
            t=float(_query_t[None]),
            point=(float(point[0]), float(point[1]), float(point[2])),
            normal=(float(normal[0]), float(normal[1]), float(normal[2])),
            front_face=bool(_query_front_face[None]),
            material_id=int(_query_material_id[None]),
        )

    def check_resident(self) -> None:
        """Check that this world's data is what the render kernel will see.

        Raises:
            RuntimeError: If another World has replaced this one's storage.
        """
        if (
            self._generation != get_storage_generation()
            or get_sphere_count() != len(self.spheres)
            or get_material_count() != len(self.materials)
        ):
            raise RuntimeError(
                "World storage was replaced by another World; rebuild this scene before rendering"
            )

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the world to a configuration object."""
        config = SceneConfig()
        for info in self.materials:
            config.materials.append(material_to_config(info.material))
        for sphere in self.spheres:
            config.spheres.append(
                {
                    "center": list(sphere.center),
                    "radius": sphere.radius,
                    "material_id": sphere.material_id,
                }
            )
        return config

    def from_config(self, config: SceneConfig) -> None:
        """Load a world from a configuration object, replacing the current one.

        The whole configuration is validated first; when it is invalid the
        current world is left as it was.

        Raises:
            ValueError: If the configuration contains invalid data.
        """
        materials = [material_from_config(mat_config) for mat_config in config.materials]

        entries = []
        for sphere_config in config.spheres:
            material_index = int(sphere_config.get("material_id", 0))
            if not 0 <= material_index < len(materials):
                raise ValueError(f"Sphere refers to unknown material id {material_index}")
            entries.append(
                SphereSpec(
                    center=_as_point(sphere_config.get("center", (0.0, 0.0, 0.0))),
                    radius=validate_radius(sphere_config.get("radius", 1.0)),
                    material=materials[material_index],
                )
            )
        if len(entries) > MAX_SPHERES:
            raise ValueError(f"Scene has {len(entries)} spheres; the maximum is {MAX_SPHERES}")

        self.clear()
        for entry in entries:
            self.add(entry)
        logger.debug("Loaded world with %d spheres", len(self.spheres))

    def to_dict(self) -> dict[str, Any]:
        """Export the world to a dictionary (for JSON serialization)."""
        config = self.to_config()
        return {"materials": config.materials, "spheres": config.spheres}

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a world from a dictionary with 'materials' and 'spheres' keys."""
        self.from_config(
            SceneConfig(
                materials=list(data.get("materials", [])),
                spheres=list(data.get("spheres", [])),
            )
        )

    def save(self, path: str | Path) -> None:
        """Write the world to a JSON file."""
        Path(path).write_text(json.dumps(self.to_dict(), indent=2))

    @classmethod
    def load(cls, path: str | Path) -> "World":
        """Build a world from a JSON file written by save()."""
        world = cls()
        world.from_dict(json.loads(Path(path).read_text()))
        return world

    @staticmethod
    def get_max_spheres() -> int:
        """Get the maximum number of spheres supported."""
        return MAX_SPHERES


def load_world(path: str | Path) -> World:
    """Load a world from a JSON scene file.

    Raises:
        OSError: If the file cannot be read.
        ValueError: If the file is not valid JSON or describes an invalid scene.
    """
    world = World.load(path)
    logger.info("Loaded scene %s (%d spheres)", path, len(world))
    return world


def save_world(world: World, path: str | Path) -> None:
    """Write a world to a JSON scene file."""
    world.save(path)
    logger.info("Saved scene %s (%d spheres)", path, len(world))
