import numpy as np
from numba import njit, prange  # type: ignore
from inksplit.kernel.types import ImageBuffer, PlateBuffer
from inksplit.kernel.system.performance import time_function, parallel_kernel
from inksplit.features.color.logic import rgb_to_cmyk

# Ink colors used for tinted plates, indexed like the C, M, Y, K planes
INK_COLORS = np.array(
    [
        [0, 255, 255],
        [255, 0, 255],
        [255, 255, 0],
        [0, 0, 0],
    ],
    dtype=np.uint8,
)


@njit(parallel=True, nogil=True)
def _separate_cmyk_jit(img: np.ndarray) -> np.ndarray:
    """
    Row-parallel split into 4 plates. Plate value is 255 - ink,
    transparent pixels carry no ink.
    """
    h = img.shape[0]
    w = img.shape[1]
    res = np.empty((4, h, w), dtype=np.uint8)
    for y in prange(h):
        for x in range(w):
            if img[y, x, 3] == 0:
                res[0, y, x] = 255
                res[1, y, x] = 255
                res[2, y, x] = 255
                res[3, y, x] = 255
            else:
                c, m, ye, k = rgb_to_cmyk(img[y, x, 0], img[y, x, 1], img[y, x, 2])
                res[0, y, x] = 255 - c
                res[1, y, x] = 255 - m
                res[2, y, x] = 255 - ye
                res[3, y, x] = 255 - k
    return res


@njit(parallel=True, nogil=True)
def _tint_plate_jit(plate: np.ndarray, ink: np.ndarray) -> np.ndarray:
    h = plate.shape[0]
    w = plate.shape[1]
    res = np.empty((h, w, 3), dtype=np.uint8)
    for y in prange(h):
        for x in range(w):
            coverage = (255.0 - plate[y, x]) / 255.0
            for i in range(3):
                v = 255.0 - coverage * (255.0 - ink[i])
                res[y, x, i] = np.uint8(int(v + 0.5))
    return res


@time_function
@parallel_kernel
def separate_cmyk(img: ImageBuffer) -> np.ndarray:
    """
    Splits an RGBA image into a (4, H, W) stack of C, M, Y, K plates.
    Darker plate pixels mean more ink. Fully transparent pixels are white
    on every plate, pure black is full ink on K and none on C, M, Y.
    """
    return _separate_cmyk_jit(np.ascontiguousarray(img))


@time_function
@parallel_kernel
def tint_plate(plate: PlateBuffer, plane: int) -> np.ndarray:
    """
    Renders a plate in its ink color over white paper (RGB).
    """
    return _tint_plate_jit(np.ascontiguousarray(plate), INK_COLORS[plane])


def split_rgb(img: ImageBuffer) -> np.ndarray:
    """
    Splits an RGBA image into a (3, H, W) stack of R, G, B gray plates.
    """
    return np.ascontiguousarray(np.moveaxis(img[..., :3], 2, 0))
