from typing import Any, cast
import numpy as np
from inksplit.kernel.types import ImageBuffer, PlateBuffer
from inksplit.kernel.errors import BufferGeometryError, EmptyImageError
from inksplit.kernel.image.logic import luma

_DEPTH_TO_MODE = {1: "L", 3: "RGB", 4: "RGBA"}


def _to_uint8(arr: np.ndarray) -> np.ndarray:
    if arr.dtype == np.uint8:
        return arr
    if np.issubdtype(arr.dtype, np.floating):
        # Floating point images are treated as 0.0 - 1.0
        return np.clip(np.rint(arr * 255.0), 0, 255).astype(np.uint8)
    return np.clip(arr, 0, 255).astype(np.uint8)


def ensure_image(arr: Any) -> ImageBuffer:
    """
    Validates a decoded raster and returns it as an 8-bit RGBA ImageBuffer.
    Grayscale and RGB inputs are promoted, missing alpha becomes opaque.
    """
    if not isinstance(arr, np.ndarray):
        raise TypeError(f"Expected numpy.ndarray, got {type(arr)}")

    if arr.ndim not in (2, 3):
        raise BufferGeometryError(f"Unsupported raster shape {arr.shape}")
    if arr.shape[0] == 0 or arr.shape[1] == 0:
        raise EmptyImageError(f"Image has zero dimension {arr.shape[:2]}")

    arr = _to_uint8(arr)

    if arr.ndim == 2:
        arr = np.repeat(arr[:, :, None], 3, axis=2)

    depth = arr.shape[2]
    if depth == 1:
        arr = np.repeat(arr, 3, axis=2)
        depth = 3
    if depth == 3:
        alpha = np.full(arr.shape[:2] + (1,), 255, dtype=np.uint8)
        arr = np.concatenate([arr, alpha], axis=2)
    elif depth != 4:
        raise BufferGeometryError(f"Unsupported channel depth {depth}")

    return cast(ImageBuffer, np.ascontiguousarray(arr))


def ensure_plate(arr: Any) -> PlateBuffer:
    """
    Returns a single channel 8-bit plate. Color rasters are reduced to luma.
    """
    if not isinstance(arr, np.ndarray):
        raise TypeError(f"Expected numpy.ndarray, got {type(arr)}")
    if arr.ndim == 2:
        if arr.shape[0] == 0 or arr.shape[1] == 0:
            raise EmptyImageError(f"Plate has zero dimension {arr.shape}")
        return cast(PlateBuffer, np.ascontiguousarray(_to_uint8(arr)))

    return luma(ensure_image(arr))


def image_from_buffer(data: bytes, width: int, height: int, depth: int) -> ImageBuffer:
    """
    Builds a raster from a raw row-major pixel buffer.
    Fails when the buffer does not exactly fill width * height * depth bytes.
    """
    if depth not in _DEPTH_TO_MODE:
        raise BufferGeometryError(f"Unsupported channel depth {depth}")
    if width <= 0 or height <= 0:
        raise EmptyImageError(f"Image has zero dimension ({height}, {width})")

    expected = width * height * depth
    if len(data) != expected:
        raise BufferGeometryError(
            f"Buffer holds {len(data)} bytes, expected {expected} "
            f"for {width}x{height}x{depth}"
        )

    arr = np.frombuffer(data, dtype=np.uint8).reshape(height, width, depth)
    return ensure_image(arr.copy())
