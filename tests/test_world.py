"""Tests for the world (composite scene).

Tests cover:
- Adding spheres and sharing materials
- Nearest-hit selection across spheres
- Capacity and validation errors
- Dictionary / JSON round trips
- Preset scenes
"""

import json

import pytest


class TestWorldBuilding:
    """Tests for adding spheres and materials."""

    def test_add_sphere_returns_indices(self):
        """Test sphere indices follow insertion order."""
        from bounce.materials.palette import CONCRETE, GLASS
        from bounce.scene.world import World, get_sphere_count

        world = World()
        assert world.add_sphere((0.0, 0.0, -1.0), 0.5, CONCRETE) == 0
        assert world.add_sphere((1.0, 0.0, -1.0), 0.5, GLASS) == 1
        assert len(world) == 2
        assert get_sphere_count() == 2

    def test_add_sphere_spec(self):
        """Test World.add with a SphereSpec."""
        from bounce.materials.palette import SILVER
        from bounce.scene.world import SphereSpec, World

        world = World()
        idx = world.add(SphereSpec(center=(0.0, 1.0, 2.0), radius=0.25, material=SILVER))
        assert idx == 0
        assert world.spheres[0].center == (0.0, 1.0, 2.0)
        assert world.spheres[0].radius == 0.25

    def test_shared_material_registered_once(self):
        """Test equal material descriptions share one registry entry."""
        from bounce.materials.lambertian import Lambertian
        from bounce.materials.registry import get_material_count
        from bounce.scene.world import World

        world = World()
        world.add_sphere((0.0, 0.0, -1.0), 0.5, Lambertian(albedo=(0.2, 0.4, 0.6)))
        world.add_sphere((1.0, 0.0, -1.0), 0.5, Lambertian(albedo=(0.2, 0.4, 0.6)))
        world.add_sphere((2.0, 0.0, -1.0), 0.5, Lambertian(albedo=(0.6, 0.4, 0.2)))

        assert get_material_count() == 2
        assert [s.material_id for s in world.spheres] == [0, 0, 1]

    def test_new_world_replaces_resident(self):
        """Test constructing a World clears the previous one."""
        from bounce.materials.palette import CONCRETE
        from bounce.scene.world import World, get_sphere_count

        first = World()
        first.add_sphere((0.0, 0.0, -1.0), 0.5, CONCRETE)
        World()
        assert get_sphere_count() == 0
        with pytest.raises(RuntimeError, match="replaced"):
            first.check_resident()

    def test_replacement_with_equal_counts_detected(self):
        """Test replacement is detected when the new world has the same counts."""
        from bounce.materials.palette import CONCRETE, GLASS
        from bounce.scene.world import World, get_sphere_count

        first = World()
        first.add_sphere((0.0, 0.0, -1.0), 0.5, CONCRETE)
        second = World()
        second.add_sphere((50.0, 0.0, -1.0), 0.5, GLASS)

        assert get_sphere_count() == len(first)
        with pytest.raises(RuntimeError, match="replaced"):
            first.check_resident()
        second.check_resident()

    def test_clear_spheres_invalidates_world(self):
        """Test clearing the sphere storage directly invalidates a built world."""
        from bounce.materials.palette import CONCRETE
        from bounce.scene.world import World, clear_spheres, get_storage_generation

        world = World()
        world.add_sphere((0.0, 0.0, -1.0), 0.5, CONCRETE)
        before = get_storage_generation()
        clear_spheres()
        assert get_storage_generation() == before + 1
        with pytest.raises(RuntimeError, match="replaced"):
            world.check_resident()

    def test_clear(self):
        """Test clear removes spheres and materials."""
        from bounce.materials.palette import CONCRETE
        from bounce.scene.world import World

        world = World()
        world.add_sphere((0.0, 0.0, -1.0), 0.5, CONCRETE)
        world.clear()
        assert len(world) == 0
        assert world.materials == []
        world.check_resident()

    @pytest.mark.parametrize("radius", [0.0, -0.5])
    def test_invalid_radius(self, radius):
        """Test non-positive radii are rejected before anything is stored."""
        from bounce.materials.palette import CONCRETE
        from bounce.scene.world import World

        world = World()
        with pytest.raises(ValueError):
            world.add_sphere((0.0, 0.0, 0.0), radius, CONCRETE)
        assert len(world) == 0

    def test_invalid_center(self):
        """Test centers must have three coordinates."""
        from bounce.materials.palette import CONCRETE
        from bounce.scene.world import World

        with pytest.raises(ValueError):
            World().add_sphere((0.0, 0.0), 1.0, CONCRETE)

    def test_unsupported_material(self):
        """Test non-material objects are rejected."""
        from bounce.scene.world import World

        with pytest.raises(TypeError):
            World().add_sphere((0.0, 0.0, 0.0), 1.0, "glass")

    def test_sphere_capacity(self, monkeypatch):
        """Test exceeding the sphere capacity raises RuntimeError."""
        from bounce.materials.palette import CONCRETE
        from bounce.scene import world as world_module

        monkeypatch.setattr(world_module, "MAX_SPHERES", 2)
        world = world_module.World()
        world.add_sphere((0.0, 0.0, 0.0), 1.0, CONCRETE)
        world.add_sphere((3.0, 0.0, 0.0), 1.0, CONCRETE)
        with pytest.raises(RuntimeError, match="Maximum number of spheres"):
            world.add_sphere((6.0, 0.0, 0.0), 1.0, CONCRETE)

    def test_material_capacity(self, monkeypatch):
        """Test exceeding the material capacity raises RuntimeError."""
        from bounce.materials import registry
        from bounce.materials.lambertian import Lambertian

        monkeypatch.setattr(registry, "MAX_MATERIALS", 1)
        registry.register_material(Lambertian(albedo=(0.1, 0.1, 0.1)))
        with pytest.raises(RuntimeError, match="Maximum number of materials"):
            registry.register_material(Lambertian(albedo=(0.2, 0.2, 0.2)))


class TestNearestHit:
    """Tests for hit_world through World.intersect."""

    def test_empty_world_misses(self):
        """Test an empty world never reports a hit."""
        from bounce.scene.world import World

        assert World().intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0)) is None

    def test_nearest_sphere_wins(self):
        """Test the closest of several spheres along the ray is returned."""
        from bounce.materials.palette import CONCRETE, COPPER, GLASS
        from bounce.scene.world import World

        world = World()
        world.add_sphere((0.0, 0.0, -10.0), 1.0, CONCRETE)
        world.add_sphere((0.0, 0.0, -3.0), 1.0, COPPER)
        world.add_sphere((0.0, 0.0, -6.0), 1.0, GLASS)

        hit = world.intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert hit is not None
        assert hit.t == pytest.approx(2.0)
        assert hit.material_id == world.material_id(COPPER)
        assert hit.front_face
        assert hit.normal == pytest.approx((0.0, 0.0, 1.0))

    def test_insertion_order_does_not_matter(self):
        """Test the nearest hit is found regardless of insertion order."""
        from bounce.materials.palette import CONCRETE, COPPER
        from bounce.scene.world import World

        world = World()
        world.add_sphere((0.0, 0.0, -3.0), 1.0, COPPER)
        world.add_sphere((0.0, 0.0, -10.0), 1.0, CONCRETE)
        hit = world.intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert hit.t == pytest.approx(2.0)

    def test_t_max_limits_search(self):
        """Test hits beyond t_max are ignored."""
        from bounce.materials.palette import CONCRETE
        from bounce.scene.world import World

        world = World()
        world.add_sphere((0.0, 0.0, -10.0), 1.0, CONCRETE)
        assert world.intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), t_max=5.0) is None


class TestSerialization:
    """Tests for scene dictionaries and JSON files."""

    def _build(self):
        from bounce.materials.palette import COPPER, GLASS, GROUND
        from bounce.scene.world import World

        world = World()
        world.add_sphere((0.0, -100.5, -1.0), 100.0, GROUND)
        world.add_sphere((0.0, 0.0, -1.0), 0.5, GLASS)
        world.add_sphere((1.0, 0.0, -1.0), 0.5, COPPER)
        return world

    def test_to_dict(self):
        """Test the dictionary lists materials by id and spheres in order."""
        data = self._build().to_dict()
        assert [m["type"] for m in data["materials"]] == ["lambertian", "dielectric", "metal"]
        assert data["materials"][1] == {"type": "dielectric", "ior": 1.5}
        assert data["spheres"][2] == {"center": [1.0, 0.0, -1.0], "radius": 0.5, "material_id": 2}

    def test_dict_round_trip(self):
        """Test from_dict rebuilds the same scene."""
        from bounce.scene.world import World

        data = self._build().to_dict()
        rebuilt = World()
        rebuilt.from_dict(data)
        assert rebuilt.to_dict() == data
        assert len(rebuilt) == 3

    def test_json_file_round_trip(self, tmp_path):
        """Test save_world / load_world through a JSON file."""
        from bounce.scene.world import load_world, save_world

        world = self._build()
        path = tmp_path / "scene.json"
        save_world(world, path)
        assert json.loads(path.read_text()) == world.to_dict()

        loaded = load_world(path)
        assert loaded.to_dict() == world.to_dict()
        hit = loaded.intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert hit.t == pytest.approx(0.5)

    def test_unknown_material_type(self):
        """Test an unknown material type is a ValueError."""
        from bounce.scene.world import World

        with pytest.raises(ValueError, match="Unknown material type"):
            World().from_dict({"materials": [{"type": "plasma"}], "spheres": []})

    def test_bad_material_reference(self):
        """Test a sphere referring to a missing material is a ValueError."""
        from bounce.scene.world import World

        data = {
            "materials": [{"type": "metal", "albedo": [0.5, 0.5, 0.5]}],
            "spheres": [{"center": [0, 0, 0], "radius": 1.0, "material_id": 3}],
        }
        with pytest.raises(ValueError, match="unknown material id"):
            World().from_dict(data)

    @pytest.mark.parametrize(
        "data",
        [
            {"materials": [{"type": "plasma"}], "spheres": []},
            {
                "materials": [{"type": "metal", "albedo": [0.5, 0.5, 0.5]}],
                "spheres": [
                    {"center": [0, 0, 0], "radius": 1.0, "material_id": 0},
                    {"center": [0, 0, 0], "radius": -1.0, "material_id": 0},
                ],
            },
            {
                "materials": [{"type": "dielectric", "ior": 1.5}],
                "spheres": [{"center": [0, 0], "radius": 1.0, "material_id": 0}],
            },
        ],
    )
    def test_invalid_config_keeps_current_world(self, data):
        """Test a rejected configuration leaves the loaded world untouched."""
        from bounce.materials.palette import CONCRETE, GLASS
        from bounce.scene.world import World, get_sphere_count

        world = World()
        world.add_sphere((0.0, 0.0, -1.0), 0.5, CONCRETE)
        world.add_sphere((1.0, 0.0, -1.0), 0.5, GLASS)
        before = world.to_dict()

        with pytest.raises(ValueError):
            world.from_dict(data)

        assert world.to_dict() == before
        assert get_sphere_count() == 2
        world.check_resident()
        assert world.intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0)) is not None

    def test_invalid_json(self, tmp_path):
        """Test a malformed scene file raises ValueError."""
        from bounce.scene.world import load_world

        path = tmp_path / "broken.json"
        path.write_text("{not json")
        with pytest.raises(ValueError):
            load_world(path)

    def test_missing_file(self, tmp_path):
        """Test a missing scene file raises OSError."""
        from bounce.scene.world import load_world

        with pytest.raises(OSError):
            load_world(tmp_path / "missing.json")


class TestPresets:
    """Tests for the preset scenes."""

    def test_showcase_has_every_material_kind(self):
        """Test the showcase scene uses diffuse, metal and glass."""
        from bounce.materials.registry import MaterialType, material_type_of
        from bounce.scene.presets import showcase_scene

        world = showcase_scene()
        kinds = {material_type_of(info.material) for info in world.materials}
        assert kinds == {MaterialType.LAMBERTIAN, MaterialType.METAL, MaterialType.DIELECTRIC}

    def test_random_scene_is_reproducible(self):
        """Test the same seed builds the same scene."""
        from bounce.scene.presets import random_scene

        first = random_scene(seed=5, count=20).to_dict()
        second = random_scene(seed=5, count=20).to_dict()
        assert first == second
        assert len(first["spheres"]) == 21

    def test_random_scene_seeds_differ(self):
        """Test different seeds build different scenes."""
        from bounce.scene.presets import random_scene

        first = random_scene(seed=1, count=10).to_dict()
        second = random_scene(seed=2, count=10).to_dict()
        assert first != second

    def test_random_scene_negative_count(self):
        from bounce.scene.presets import random_scene

        with pytest.raises(ValueError):
            random_scene(count=-1)
