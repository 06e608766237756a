from __future__ import annotations

import io
import os
from typing import BinaryIO, Union

import numpy as np
from PIL import Image, UnidentifiedImageError

from .embedder import CHANNELS
from .errors import ArtifactIOError

ImageSource = Union[str, "os.PathLike[str]", bytes, bytearray, BinaryIO, np.ndarray, Image.Image]


def load_image_rgba(source: ImageSource) -> np.ndarray:
    """Load an image from a path, raw bytes, file object or PIL image.

    Returns a (height, width, 4) uint8 array.
    """
    if isinstance(source, np.ndarray):
        return source
    if isinstance(source, Image.Image):
        return np.array(source.convert("RGBA"), dtype=np.uint8)
    if isinstance(source, (bytes, bytearray)):
        source = io.BytesIO(bytes(source))
    try:
        with Image.open(source) as img:
            return np.array(img.convert("RGBA"), dtype=np.uint8)
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise ArtifactIOError(f"Could not load image: {e}") from e


def rgba_to_png_bytes(pixels: np.ndarray) -> bytes:
    """Encode a (height, width, 4) uint8 array as lossless PNG."""
    arr = np.ascontiguousarray(pixels, dtype=np.uint8)
    if arr.ndim != 3 or arr.shape[2] != CHANNELS:
        raise ValueError(f"Expected an RGBA buffer, got shape {arr.shape}")
    buf = io.BytesIO()
    Image.fromarray(arr).save(buf, format="PNG")
    return buf.getvalue()


def save_image_rgba(path: Union[str, "os.PathLike[str]"], pixels: np.ndarray) -> None:
    data = rgba_to_png_bytes(pixels)
    try:
        with open(path, "wb") as f:
            f.write(data)
    except OSError as e:
        raise ArtifactIOError(f"Could not write image: {e}") from e


class RasterSurface:
    """Pixel buffer allocation and lossless image IO backed by Pillow."""

    def allocate(self, width: int, height: int) -> np.ndarray:
        return np.zeros((height, width, CHANNELS), dtype=np.uint8)

    def load(self, source: ImageSource) -> np.ndarray:
        return load_image_rgba(source)

    def to_png(self, pixels: np.ndarray) -> bytes:
        return rgba_to_png_bytes(pixels)

    def save(self, path: Union[str, "os.PathLike[str]"], pixels: np.ndarray) -> None:
        save_image_rgba(path, pixels)
