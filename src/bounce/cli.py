"""Command-line renderer.

Builds a scene (a preset or a JSON scene file), configures the camera from
flags and writes the image as PPM or PNG.

Usage:
    bounce [options]
    python -m bounce [options]

Example:
    bounce --scene showcase --width 400 --aspect 1.7778 --samples 50 \\
        --lookfrom -2 2 1 --lookat 0 0 -1 --vfov 40 --output showcase.png
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

import taichi as ti

from bounce import __version__

logger = logging.getLogger("bounce")

DEFAULT_OUTPUT = "image.ppm"


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="bounce",
        description="Render a scene of spheres with Monte Carlo path tracing.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--scene",
        default="showcase",
        help="Preset name (showcase, single, random, empty) or a JSON scene file",
    )
    parser.add_argument("--count", type=int, default=100, help="Spheres in the random scene")
    parser.add_argument("--width", type=int, default=100, help="Image width in pixels")
    parser.add_argument("--aspect", type=float, default=1.0, help="Aspect ratio (width / height)")
    parser.add_argument("--samples", type=int, default=100, help="Samples per pixel")
    parser.add_argument("--depth", type=int, default=10, help="Maximum ray bounces")
    parser.add_argument("--vfov", type=float, default=90.0, help="Vertical field of view (degrees)")
    parser.add_argument(
        "--lookfrom", type=float, nargs=3, default=(0.0, 0.0, 0.0), metavar=("X", "Y", "Z")
    )
    parser.add_argument(
        "--lookat", type=float, nargs=3, default=(0.0, 0.0, -1.0), metavar=("X", "Y", "Z")
    )
    parser.add_argument(
        "--vup", type=float, nargs=3, default=(0.0, 1.0, 0.0), metavar=("X", "Y", "Z")
    )
    parser.add_argument(
        "--defocus-angle", type=float, default=0.0, help="Defocus cone angle (degrees)"
    )
    parser.add_argument("--focus-dist", type=float, default=1.0, help="Distance to the focus plane")
    parser.add_argument("--seed", type=int, default=0, help="Random seed")
    parser.add_argument("--arch", choices=["cpu", "gpu"], default="cpu", help="Taichi backend")
    parser.add_argument(
        "--output",
        default=DEFAULT_OUTPUT,
        help="Output file (.png for PNG, anything else for PPM; '-' for stdout)",
    )
    parser.add_argument("--save-scene", default=None, help="Also write the scene to a JSON file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def build_camera(args: argparse.Namespace):
    """Camera configured from the parsed flags."""
    from bounce.camera.camera import Camera

    return Camera(
        aspect_ratio=args.aspect,
        image_width=args.width,
        samples_per_pixel=args.samples,
        max_depth=args.depth,
        vfov=args.vfov,
        lookfrom=tuple(args.lookfrom),
        lookat=tuple(args.lookat),
        vup=tuple(args.vup),
        defocus_angle=args.defocus_angle,
        focus_dist=args.focus_dist,
        seed=args.seed,
    )


def build_world(args: argparse.Namespace):
    """World selected by --scene.

    Raises:
        ValueError: If the scene name is unknown or the scene file is invalid.
        OSError: If the scene file cannot be read.
    """
    from bounce.scene.presets import SCENES, random_scene
    from bounce.scene.world import load_world

    if args.scene.lower().endswith(".json"):
        return load_world(args.scene)
    if args.scene == "random":
        return random_scene(seed=args.seed, count=args.count)
    builder = SCENES.get(args.scene)
    if builder is None:
        raise ValueError(
            f"Unknown scene {args.scene!r}; expected one of {', '.join(SCENES)} or a .json file"
        )
    return builder()


def run(args: argparse.Namespace) -> int:
    """Render with an already initialized Taichi runtime.

    Returns:
        Process exit status: 0 on success, 1 on error.
    """
    try:
        world = build_world(args)
        logger.debug("Scene %r: %r", args.scene, world)
        if args.save_scene:
            from bounce.scene.world import save_world

            save_world(world, args.save_scene)

        camera = build_camera(args)
        if args.output == "-":
            camera.render(world, sys.stdout)
        else:
            camera.render(world, args.output)
            print(f"Saved to: {Path(args.output).absolute()}", file=sys.stderr)
        return 0
    except (ValueError, RuntimeError, OSError) as e:
        logger.error("%s", e)
        return 1


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    arch = ti.gpu if args.arch == "gpu" else ti.cpu
    ti.init(arch=arch, default_fp=ti.f64, log_level=ti.DEBUG if args.verbose else ti.WARN)

    return run(args)


if __name__ == "__main__":
    sys.exit(main())
