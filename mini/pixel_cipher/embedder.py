from __future__ import annotations

import logging
import math
from typing import Optional, Tuple

import numpy as np

logger = logging.getLogger(__name__)

CHANNELS = 4
CARRIER_CHANNEL = 0
ALPHA_CHANNEL = 3
OPAQUE = 255
SENTINEL = 0


def payload_dimensions(length: int) -> Tuple[int, int]:
    """Return (width, height) of the smallest near-square grid holding `length` bytes.

    An empty payload still gets a 1x1 image so it can be saved as PNG.
    """
    if length < 0:
        raise ValueError("Payload length must be non-negative")
    if length == 0:
        return 1, 1
    width = math.isqrt(length)
    if width * width < length:
        width += 1
    height = (length + width - 1) // width
    return width, height


def embed_payload(payload: bytes, out: Optional[np.ndarray] = None) -> np.ndarray:
    """Lay the payload out one byte per pixel, row-major, in the red channel.

    Carrier pixels are fully opaque; padding pixels stay all-zero. `out` may be
    a zeroed (height, width, 4) buffer to fill instead of allocating one.
    """
    width, height = payload_dimensions(len(payload))
    if out is None:
        out = np.zeros((height, width, CHANNELS), dtype=np.uint8)
    elif out.shape != (height, width, CHANNELS):
        raise ValueError(f"Buffer shape {out.shape} does not fit a {width}x{height} image")
    pixels = out.reshape(height * width, CHANNELS)
    data = np.frombuffer(payload, dtype=np.uint8)
    pixels[: len(data), CARRIER_CHANNEL] = data
    pixels[: len(data), ALPHA_CHANNEL] = OPAQUE
    zeros = np.flatnonzero(data == SENTINEL)
    if zeros.size:
        logger.warning(
            "Payload byte %d of %d is zero; extraction will stop there", int(zeros[0]), len(data)
        )
    return out


def extract_payload(pixels: np.ndarray) -> bytes:
    """Read the red channel row-major until the first zero or the end of the image.

    The zero is an end-of-data marker and is not part of the result, so a
    payload that itself contains a zero byte comes back truncated.
    """
    arr = np.asarray(pixels)
    if arr.ndim == 2:
        carrier = arr.reshape(-1)
    elif arr.ndim == 3 and arr.shape[2] >= 1:
        carrier = arr[:, :, CARRIER_CHANNEL].reshape(-1)
    else:
        raise ValueError(f"Unsupported pixel buffer shape {arr.shape}")
    carrier = np.clip(carrier, 0, 255).astype(np.uint8)
    stops = np.flatnonzero(carrier == SENTINEL)
    end = int(stops[0]) if stops.size else carrier.size
    return carrier[:end].tobytes()
