"""Camera module for view setup and primary ray generation.

Components:
    camera: Camera configuration, derived CameraState, field upload and
        jittered ray generation with optional defocus blur

Pixel coordinates are integer (column, row) indices with (0, 0) at the
upper-left corner of the image.

The camera state lives in Taichi fields, so this package must be imported
after ti.init().
"""

from .camera import (
    Camera,
    CameraState,
    get_camera_center,
    get_camera_info,
    get_ray,
    setup_camera,
)

__all__ = [
    "Camera",
    "CameraState",
    "setup_camera",
    "get_ray",
    "get_camera_center",
    "get_camera_info",
]
