"""Plain-text PPM (P3) image output.

A P3 file is a three-line header followed by one whitespace-separated
"r g b" triple per pixel, rows top to bottom:

    P3
    <width> <height>
    255
    r g b
    ...

Channel values arrive gamma encoded in [0, 1] and are quantized with
round(clamp(255.999 * c, 0, 255)), rounding halves up.

Example:
    >>> import io
    >>> from bounce.output.ppm import PPMWriter, gradient_image
    >>> stream = io.StringIO()
    >>> PPMWriter(stream).write_image(gradient_image(4, 2))
    >>> stream.getvalue().splitlines()[:3]
    ['P3', '4 2', '255']
"""

from __future__ import annotations

import io
import math
from pathlib import Path
from typing import TextIO

import numpy as np
import numpy.typing as npt

from bounce.core.interval import clamp

# Clamp range of scaled channel values
CHANNEL_BOUNDS = (0.0, 255.0)

# Scale from [0, 1] to [0, 256)
CHANNEL_SCALE = 255.999


def encode_channel(value: float) -> int:
    """Quantize one gamma-encoded channel value to 0..255."""
    return int(math.floor(clamp(CHANNEL_BOUNDS, CHANNEL_SCALE * value) + 0.5))


def quantize(image: npt.NDArray[np.float64]) -> npt.NDArray[np.uint8]:
    """Quantize a whole (h, w, 3) image with the same rule as encode_channel.

    Raises:
        ValueError: If the image does not have shape (h, w, 3).
    """
    image = validate_image(image)
    scaled = np.clip(CHANNEL_SCALE * image, *CHANNEL_BOUNDS)
    return np.floor(scaled + 0.5).astype(np.uint8)


def validate_image(image: npt.ArrayLike) -> npt.NDArray[np.float64]:
    """Check that an image is a non-empty (h, w, 3) array.

    Returns:
        The image as a float64 array.

    Raises:
        ValueError: If the image has the wrong shape.
    """
    array = np.asarray(image, dtype=np.float64)
    if array.ndim != 3 or array.shape[2] != 3:
        raise ValueError(f"Expected an image of shape (height, width, 3), got {array.shape}")
    if array.shape[0] < 1 or array.shape[1] < 1:
        raise ValueError(f"Image must have at least one pixel, got {array.shape}")
    return array


class PPMWriter:
    """Image sink writing P3 text to a stream.

    The stream is written to as pixels arrive; nothing is buffered here.
    Write errors from the stream propagate to the caller.

    Attributes:
        stream: The text stream to write to.
    """

    def __init__(self, stream: TextIO) -> None:
        self.stream = stream

    def write_header(self, width: int, height: int) -> None:
        self.stream.write(f"P3\n{width} {height}\n255\n")

    def write_color(self, color: tuple[float, float, float]) -> None:
        """Write one pixel line from a gamma-encoded color."""
        r, g, b = (encode_channel(c) for c in color)
        self.stream.write(f"{r} {g} {b}\n")

    def write_image(self, image: npt.ArrayLike) -> None:
        """Write a complete (h, w, 3) image: header then pixels in row-major order.

        Raises:
            ValueError: If the image does not have shape (h, w, 3).
        """
        pixels = quantize(image)
        height, width = pixels.shape[:2]
        self.write_header(width, height)
        self.stream.write("".join(f"{r} {g} {b}\n" for r, g, b in pixels.reshape(-1, 3).tolist()))


def encode_ppm(image: npt.ArrayLike) -> str:
    """Encode a (h, w, 3) image as P3 text.

    Raises:
        ValueError: If the image does not have shape (h, w, 3).
    """
    stream = io.StringIO()
    PPMWriter(stream).write_image(image)
    return stream.getvalue()


def write_ppm(path: str | Path, image: npt.ArrayLike) -> None:
    """Write a (h, w, 3) image to a P3 file.

    Raises:
        ValueError: If the image does not have shape (h, w, 3).
        OSError: If the file cannot be written.
    """
    # Validate before the file is created
    image = validate_image(image)
    with open(path, "w", newline="\n") as f:
        PPMWriter(f).write_image(image)


def gradient_image(width: int, height: int) -> npt.NDArray[np.float64]:
    """Test image: red grows left to right, green grows top to bottom.

    Pixel (i, j) is (i / (width - 1), j / (height - 1), 0), with 0 used for
    single-pixel dimensions.

    Raises:
        ValueError: If width or height is less than 1.
    """
    if width < 1 or height < 1:
        raise ValueError(f"Image dimensions must be at least 1, got {width}x{height}")
    red = np.linspace(0.0, 1.0, width) if width > 1 else np.zeros(1)
    green = np.linspace(0.0, 1.0, height) if height > 1 else np.zeros(1)
    image = np.zeros((height, width, 3), dtype=np.float64)
    image[:, :, 0] = red[np.newaxis, :]
    image[:, :, 1] = green[:, np.newaxis]
    return image
