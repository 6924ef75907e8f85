import numpy as np
import cv2
from inksplit.kernel.types import ImageBuffer, LUMA_COEFFS
from inksplit.kernel.validation import ensure_image
from inksplit.kernel.system.config import FILTER_CONSTANTS
from inksplit.kernel.system.performance import time_function


def _with_rgb(img: ImageBuffer, rgb: np.ndarray) -> ImageBuffer:
    """
    New RGBA buffer with replaced color and the source alpha.
    """
    res = np.empty_like(img)
    res[..., :3] = rgb
    res[..., 3] = img[..., 3]
    return res


def _clip_u8(arr: np.ndarray) -> np.ndarray:
    # truncates like an integer cast
    return np.clip(arr, 0, 255).astype(np.uint8)


def apply_grayscale(img: ImageBuffer) -> ImageBuffer:
    img = ensure_image(img)
    rgb = img[..., :3].astype(np.float32)
    gray = np.clip(np.rint(rgb @ LUMA_COEFFS), 0, 255)
    return _with_rgb(img, gray.astype(np.uint8)[..., None])


def apply_sepia(img: ImageBuffer) -> ImageBuffer:
    img = ensure_image(img)
    matrix = np.array(FILTER_CONSTANTS["sepia_matrix"], dtype=np.float32).reshape(3, 3)
    rgb = img[..., :3].astype(np.float32)
    return _with_rgb(img, _clip_u8(rgb @ matrix.T))


def apply_invert(img: ImageBuffer) -> ImageBuffer:
    img = ensure_image(img)
    return _with_rgb(img, 255 - img[..., :3])


def apply_pixelate(img: ImageBuffer) -> ImageBuffer:
    """
    Nearest-neighbour downscale by the block size, then back up.
    """
    img = ensure_image(img)
    h, w = img.shape[:2]
    block = int(FILTER_CONSTANTS["pixelate_block"])
    small = cv2.resize(
        img,
        (max(1, w // block), max(1, h // block)),
        interpolation=cv2.INTER_NEAREST,
    )
    return np.ascontiguousarray(
        cv2.resize(small, (w, h), interpolation=cv2.INTER_NEAREST)
    ).reshape(h, w, 4)


def adjust_brightness(img: ImageBuffer, offset: int) -> ImageBuffer:
    img = ensure_image(img)
    rgb = img[..., :3].astype(np.int16) + offset
    return _with_rgb(img, _clip_u8(rgb))


def apply_brighten(img: ImageBuffer) -> ImageBuffer:
    return adjust_brightness(img, int(FILTER_CONSTANTS["brightness_offset"]))


def apply_darken(img: ImageBuffer) -> ImageBuffer:
    return adjust_brightness(img, -int(FILTER_CONSTANTS["brightness_offset"]))


def apply_contrast(img: ImageBuffer) -> ImageBuffer:
    """
    Stretches every channel around mid gray.
    """
    img = ensure_image(img)
    contrast = float(FILTER_CONSTANTS["contrast"])
    percent = ((100.0 + contrast) / 100.0) ** 2
    rgb = img[..., :3].astype(np.float32) / 255.0
    res = ((rgb - 0.5) * percent + 0.5) * 255.0
    return _with_rgb(img, _clip_u8(res))


@time_function
def apply_blur(img: ImageBuffer) -> ImageBuffer:
    img = ensure_image(img)
    sigma = float(FILTER_CONSTANTS["blur_sigma"])
    res = cv2.GaussianBlur(
        img, (0, 0), sigmaX=sigma, sigmaY=sigma, borderType=cv2.BORDER_REPLICATE
    )
    return np.ascontiguousarray(res).reshape(img.shape)


@time_function
def apply_sharpen(img: ImageBuffer) -> ImageBuffer:
    img = ensure_image(img)
    kernel = np.array(FILTER_CONSTANTS["sharpen_kernel"], dtype=np.float32).reshape(3, 3)
    rgb = np.ascontiguousarray(img[..., :3])
    res = cv2.filter2D(rgb, -1, kernel, borderType=cv2.BORDER_REPLICATE)
    return _with_rgb(img, res.reshape(rgb.shape))
