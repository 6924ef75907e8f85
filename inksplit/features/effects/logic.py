import numpy as np
from numba import njit, prange  # type: ignore
from inksplit.kernel.types import PlateBuffer
from inksplit.kernel.validation import ensure_plate
from inksplit.kernel.system.config import EFFECT_CONSTANTS
from inksplit.kernel.system.performance import time_function, parallel_kernel


@njit(nogil=True)
def _floyd_steinberg_jit(gray: np.ndarray, threshold: float) -> np.ndarray:
    """
    Error diffusion in row-major order. Each pixel depends on the
    diffusion of every earlier one, so this must stay single-threaded.
    """
    h = gray.shape[0]
    w = gray.shape[1]
    buf = gray.astype(np.float64)
    res = np.empty((h, w), dtype=np.uint8)
    for y in range(h):
        for x in range(w):
            old = buf[y, x]
            if old >= threshold:
                res[y, x] = 255
                err = old - 255.0
            else:
                res[y, x] = 0
                err = old

            if x + 1 < w:
                buf[y, x + 1] += err * 7.0 / 16.0
            if y + 1 < h:
                if x > 0:
                    buf[y + 1, x - 1] += err * 3.0 / 16.0
                buf[y + 1, x] += err * 5.0 / 16.0
                if x + 1 < w:
                    buf[y + 1, x + 1] += err * 1.0 / 16.0
    return res


@njit(parallel=True, nogil=True)
def _halftone_jit(gray: np.ndarray, cell: int, max_radius: float) -> np.ndarray:
    """
    One dot per cell, cell rows are independent.
    """
    h = gray.shape[0]
    w = gray.shape[1]
    res = np.empty((h, w), dtype=np.uint8)
    res[:, :] = 255
    rows = (h + cell - 1) // cell
    cols = (w + cell - 1) // cell
    half = cell / 2.0
    for cy in prange(rows):
        y0 = cy * cell
        y1 = min(y0 + cell, h)
        for cx in range(cols):
            x0 = cx * cell
            x1 = min(x0 + cell, w)

            total = 0.0
            for y in range(y0, y1):
                for x in range(x0, x1):
                    total += gray[y, x]
            mean = total / ((y1 - y0) * (x1 - x0))

            radius = (1.0 - mean / 255.0) * max_radius
            if radius <= 0.0:
                continue
            r2 = radius * radius
            center_y = y0 + half
            center_x = x0 + half
            for y in range(y0, y1):
                dy = y + 0.5 - center_y
                for x in range(x0, x1):
                    dx = x + 0.5 - center_x
                    if dx * dx + dy * dy <= r2:
                        res[y, x] = 0
    return res


@time_function
def apply_dither(img: np.ndarray) -> PlateBuffer:
    """
    Floyd-Steinberg dithering to pure black and white.
    """
    gray = ensure_plate(img)
    return _floyd_steinberg_jit(gray, float(EFFECT_CONSTANTS["dither_threshold"]))


@time_function
@parallel_kernel
def apply_halftone(img: np.ndarray) -> PlateBuffer:
    """
    Replaces each cell with a black dot sized by the cell's mean darkness.
    """
    gray = ensure_plate(img)
    cell = int(EFFECT_CONSTANTS["halftone_cell"])
    max_radius = cell / float(EFFECT_CONSTANTS["halftone_radius_divisor"])
    return _halftone_jit(gray, cell, max_radius)


def apply_threshold(img: np.ndarray) -> PlateBuffer:
    """
    Binary cut: strictly above the cutoff is white, anything else black.
    """
    gray = ensure_plate(img)
    cutoff = int(EFFECT_CONSTANTS["threshold_cutoff"])
    return np.where(gray > cutoff, 255, 0).astype(np.uint8)


def apply_posterize(img: np.ndarray) -> PlateBuffer:
    gray = ensure_plate(img)
    levels = max(2, int(EFFECT_CONSTANTS["posterize_levels"]))
    step = 255 // (levels - 1)
    return ((gray // step) * step).astype(np.uint8)


def apply_original(img: np.ndarray) -> PlateBuffer:
    return ensure_plate(img).copy()
