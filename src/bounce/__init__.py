"""bounce: a Monte Carlo path tracer for scenes of spheres.

The renderer runs as Taichi kernels in double precision. Call
``ti.init(arch=..., default_fp=ti.f64)`` before importing the modules that
declare fields: bounce.materials.registry, bounce.scene, bounce.camera and
bounce.core.integrator.

Packages:
    core: Rays, intervals, random generation and the path integrator
    geometry: Sphere intersection
    materials: Lambertian, metal and dielectric scattering
    scene: The world and preset scenes
    camera: Camera configuration and ray generation
    output: PPM and PNG writers
"""

__version__ = "0.1.0"
