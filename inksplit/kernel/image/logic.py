import hashlib
import numpy as np
from inksplit.kernel.types import ImageBuffer, PlateBuffer, LUMA_COEFFS


def luma(img: ImageBuffer) -> PlateBuffer:
    """
    Rec.709 luma of an RGB(A) raster as an 8-bit plate.
    Fully transparent pixels become white.
    """
    rgb = img[..., :3].astype(np.float32)
    res = np.clip(np.rint(rgb @ LUMA_COEFFS), 0, 255).astype(np.uint8)
    if img.shape[2] == 4:
        res[img[..., 3] == 0] = 255
    return res


def flatten_alpha(img: np.ndarray) -> np.ndarray:
    """
    Composites an RGBA raster over white. Plates and RGB rasters are returned as is.
    """
    if img.ndim == 2 or img.shape[2] != 4:
        return img
    alpha = img[..., 3:4].astype(np.float32) / 255.0
    rgb = img[..., :3].astype(np.float32) * alpha + 255.0 * (1.0 - alpha)
    return np.clip(np.rint(rgb), 0, 255).astype(np.uint8)


def calculate_image_hash(img: np.ndarray) -> str:
    """
    Stable MD5 fingerprint of a raster (shape and pixel bytes).
    """
    digest = hashlib.md5(str(img.shape).encode("utf-8"))
    digest.update(np.ascontiguousarray(img).tobytes())
    return digest.hexdigest()
