"""Image output module.

Components:
    ppm: Plain-text PPM (P3) encoder and stream writer
    png: 8-bit PNG writer using Pillow

Images are float64 arrays of shape (height, width, 3) holding gamma-encoded
colors in [0, 1], rows top to bottom.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import numpy.typing as npt

from .png import image_to_pil, write_png
from .ppm import (
    PPMWriter,
    encode_channel,
    encode_ppm,
    gradient_image,
    quantize,
    validate_image,
    write_ppm,
)


def write_image(output: Any, image: npt.ArrayLike) -> None:
    """Write an image to an output target.

    Args:
        output: An object with a write_image(image) method (an image sink),
            a file path (".png" is written as PNG, anything else as PPM) or a
            writable text stream (PPM).
        image: The (h, w, 3) image.

    Raises:
        ValueError: If the image does not have shape (h, w, 3).
        OSError: If writing fails.
    """
    if hasattr(output, "write_image"):
        output.write_image(image)
    elif isinstance(output, (str, Path)):
        if Path(output).suffix.lower() == ".png":
            write_png(output, image)
        else:
            write_ppm(output, image)
    else:
        PPMWriter(output).write_image(image)


__all__ = [
    "PPMWriter",
    "encode_channel",
    "encode_ppm",
    "gradient_image",
    "quantize",
    "validate_image",
    "write_ppm",
    "image_to_pil",
    "write_png",
    "write_image",
]
