import io
import os
from typing import Optional
import numpy as np
from PIL import Image
from inksplit.kernel.types import ImageBuffer
from inksplit.kernel.errors import ProcessingError, StorageError
from inksplit.kernel.validation import ensure_image
from inksplit.kernel.image.logic import flatten_alpha
from inksplit.kernel.system.logging import get_logger

logger = get_logger(__name__)

SUPPORTED_IMAGE_EXTS = {".png", ".jpg", ".jpeg"}

_FORMAT_EXT = {"JPEG": "jpeg", "PNG": "png"}


def format_extension(fmt: str) -> str:
    try:
        return _FORMAT_EXT[fmt.upper()]
    except KeyError as e:
        raise ProcessingError(f"Unsupported output format: {fmt}") from e


def _pil_to_buffer(pil_img: Image.Image) -> ImageBuffer:
    if pil_img.mode != "RGBA":
        pil_img = pil_img.convert("RGBA")
    return ensure_image(np.asarray(pil_img))


def load_image(path: str) -> ImageBuffer:
    """
    Decodes an image file to an 8-bit RGBA buffer.
    """
    try:
        with open(path, "rb") as f:
            data = f.read()
    except OSError as e:
        raise StorageError(f"Failed to read image: {path} ({e})") from e
    return decode_image(data)


def decode_image(data: bytes) -> ImageBuffer:
    try:
        with Image.open(io.BytesIO(data)) as pil_img:
            pil_img.load()
            return _pil_to_buffer(pil_img)
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        raise ProcessingError(f"Failed to decode image: {e}") from e


def _to_pil(img: np.ndarray, fmt: str) -> Image.Image:
    if fmt.upper() == "JPEG":
        # JPEG carries no alpha
        img = flatten_alpha(img)
    # Mode is inferred from the array shape: L, RGB or RGBA
    return Image.fromarray(np.ascontiguousarray(img))


def encode_image(img: np.ndarray, fmt: str, quality: Optional[int] = None) -> bytes:
    """
    Encodes a raster to PNG or JPEG bytes.
    """
    pil_img = _to_pil(img, fmt)
    buffer = io.BytesIO()
    params = {}
    if fmt.upper() == "JPEG" and quality is not None:
        params["quality"] = quality
    try:
        pil_img.save(buffer, format=fmt.upper(), **params)
    except (OSError, ValueError, KeyError) as e:
        raise ProcessingError(f"Failed to encode image: {e}") from e
    return buffer.getvalue()


def save_image(
    img: np.ndarray, path: str, fmt: str, quality: Optional[int] = None
) -> str:
    payload = encode_image(img, fmt, quality)
    try:
        parent = os.path.dirname(path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        with open(path, "wb") as out_f:
            out_f.write(payload)
    except OSError as e:
        raise StorageError(f"Failed to write image: {path} ({e})") from e
    logger.debug(f"Saved {fmt.upper()} {path} ({len(payload)} bytes)")
    return path
