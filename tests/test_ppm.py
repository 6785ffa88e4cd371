"""Tests for PPM output.

Tests cover:
- Channel quantization and clamping
- Exact header and pixel line formatting
- Stream and file writers
- Shape validation
"""

import io

import numpy as np
import pytest


class TestEncodeChannel:
    """Tests for encode_channel."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (0.0, 0),
            (1.0, 255),
            (0.5, 128),  # 127.9995 rounds up
            (0.25, 64),  # 63.99975
            (-0.3, 0),
            (1.7, 255),
            (0.1, 26),  # 25.5999
            (0.0019, 0),  # 0.486
            (0.002, 1),  # 0.512
        ],
    )
    def test_values(self, value, expected):
        from bounce.output.ppm import encode_channel

        assert encode_channel(value) == expected

    def test_quantize_matches_encode_channel(self):
        """Test the vectorized path agrees with the scalar rule."""
        from bounce.output.ppm import encode_channel, quantize

        values = np.linspace(-0.1, 1.1, 1201)
        image = np.stack([values, values[::-1], np.full_like(values, 0.5)], axis=-1)[np.newaxis]
        pixels = quantize(image)
        expected = [[encode_channel(c) for c in px] for px in image[0]]
        np.testing.assert_array_equal(pixels[0], expected)
        assert pixels.dtype == np.uint8


class TestEncodePPM:
    """Tests for encode_ppm and PPMWriter."""

    def test_exact_text(self):
        """Test header and one line per pixel in row-major order."""
        from bounce.output.ppm import encode_ppm

        image = np.array(
            [
                [[0.0, 0.0, 0.0], [1.0, 1.0, 1.0], [0.5, 0.25, 0.1]],
                [[1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [0.0, 0.0, 1.0]],
            ]
        )
        assert encode_ppm(image) == (
            "P3\n3 2\n255\n"
            "0 0 0\n255 255 255\n128 64 26\n"
            "255 0 0\n0 255 0\n0 0 255\n"
        )

    def test_writer_incremental(self):
        """Test write_header and write_color build the same text."""
        from bounce.output.ppm import PPMWriter, encode_ppm, gradient_image

        image = gradient_image(4, 3)
        stream = io.StringIO()
        writer = PPMWriter(stream)
        writer.write_header(4, 3)
        for row in image:
            for pixel in row:
                writer.write_color(tuple(pixel))
        assert stream.getvalue() == encode_ppm(image)

    def test_write_ppm_file(self, tmp_path):
        from bounce.output.ppm import encode_ppm, gradient_image, write_ppm

        image = gradient_image(5, 2)
        path = tmp_path / "out.ppm"
        write_ppm(path, image)
        assert path.read_text() == encode_ppm(image)

    def test_write_to_missing_directory(self, tmp_path):
        """Test I/O failures propagate as OSError."""
        from bounce.output.ppm import gradient_image, write_ppm

        with pytest.raises(OSError):
            write_ppm(tmp_path / "missing" / "out.ppm", gradient_image(2, 2))

    @pytest.mark.parametrize("shape", [(4, 4), (4, 4, 4), (0, 4, 3), (2, 2, 3, 1)])
    def test_bad_shape(self, shape, tmp_path):
        """Test images that are not (h, w, 3) are rejected without writing."""
        from bounce.output.ppm import encode_ppm, write_ppm

        with pytest.raises(ValueError):
            encode_ppm(np.zeros(shape))
        with pytest.raises(ValueError):
            write_ppm(tmp_path / "bad.ppm", np.zeros(shape))
        assert not (tmp_path / "bad.ppm").exists()


class TestGradientImage:
    """Tests for the gradient test image."""

    def test_corners(self):
        from bounce.output.ppm import gradient_image

        image = gradient_image(3, 5)
        assert image.shape == (5, 3, 3)
        np.testing.assert_allclose(image[0, 0], [0.0, 0.0, 0.0])
        np.testing.assert_allclose(image[0, -1], [1.0, 0.0, 0.0])
        np.testing.assert_allclose(image[-1, 0], [0.0, 1.0, 0.0])

    def test_single_pixel(self):
        from bounce.output.ppm import gradient_image

        np.testing.assert_array_equal(gradient_image(1, 1), np.zeros((1, 1, 3)))

    def test_invalid_size(self):
        from bounce.output.ppm import gradient_image

        with pytest.raises(ValueError):
            gradient_image(0, 3)
