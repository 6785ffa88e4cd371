"""PNG image output via Pillow.

Uses the same channel quantization as the PPM writer, so a PNG and a PPM of
the same image hold identical 8-bit values.
"""

from __future__ import annotations

from pathlib import Path

import numpy.typing as npt
from PIL import Image as PILImage

from bounce.output.ppm import quantize


def image_to_pil(image: npt.ArrayLike) -> PILImage.Image:
    """Convert a gamma-encoded (h, w, 3) image to an 8-bit RGB Pillow image.

    Raises:
        ValueError: If the image does not have shape (h, w, 3).
    """
    return PILImage.fromarray(quantize(image))


def write_png(path: str | Path, image: npt.ArrayLike) -> None:
    """Save a gamma-encoded (h, w, 3) image as a PNG file.

    Raises:
        ValueError: If the image does not have shape (h, w, 3).
        OSError: If the file cannot be written.
    """
    image_to_pil(image).save(path, format="PNG")
