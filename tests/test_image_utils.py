import io

import numpy as np
import pytest
from PIL import Image

from pixel_cipher.embedder import embed_payload
from pixel_cipher.errors import ArtifactIOError
from pixel_cipher.image_utils import (
    RasterSurface,
    load_image_rgba,
    rgba_to_png_bytes,
    save_image_rgba,
)


@pytest.fixture
def pixels():
    return embed_payload(bytes(range(200, 255)) + bytes(range(1, 30)))


def test_png_is_lossless(pixels):
    png = rgba_to_png_bytes(pixels)
    assert png.startswith(b"\x89PNG")
    np.testing.assert_array_equal(load_image_rgba(png), pixels)


def test_save_and_load_path(tmp_path, pixels):
    path = tmp_path / "out.png"
    save_image_rgba(path, pixels)
    with Image.open(path) as img:
        assert img.mode == "RGBA"
        assert img.size == (pixels.shape[1], pixels.shape[0])
    np.testing.assert_array_equal(load_image_rgba(str(path)), pixels)


def test_load_file_object(pixels):
    loaded = load_image_rgba(io.BytesIO(rgba_to_png_bytes(pixels)))
    np.testing.assert_array_equal(loaded, pixels)


def test_load_rgb_image_keeps_red_channel():
    rgb = np.zeros((2, 2, 3), dtype=np.uint8)
    rgb[:, :, 0] = [[1, 2], [3, 4]]
    buf = io.BytesIO()
    Image.fromarray(rgb).save(buf, format="PNG")
    loaded = load_image_rgba(buf.getvalue())
    assert loaded.shape == (2, 2, 4)
    assert loaded[:, :, 0].tolist() == [[1, 2], [3, 4]]
    assert (loaded[:, :, 3] == 255).all()


def test_load_garbage_raises():
    with pytest.raises(ArtifactIOError):
        load_image_rgba(b"definitely not an image")


def test_load_missing_file_raises(tmp_path):
    with pytest.raises(ArtifactIOError):
        load_image_rgba(tmp_path / "missing.png")


def test_save_to_missing_directory_raises(tmp_path, pixels):
    with pytest.raises(ArtifactIOError):
        save_image_rgba(tmp_path / "nope" / "out.png", pixels)


def test_png_requires_rgba():
    with pytest.raises(ValueError):
        rgba_to_png_bytes(np.zeros((2, 2, 3), dtype=np.uint8))


def test_surface_allocate():
    buf = RasterSurface().allocate(5, 3)
    assert buf.shape == (3, 5, 4)
    assert buf.dtype == np.uint8
    assert not buf.any()
