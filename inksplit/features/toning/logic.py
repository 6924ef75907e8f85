from typing import Optional, Sequence, Tuple
import numpy as np
from numba import njit, prange  # type: ignore
from inksplit.kernel.types import ColorStops, ImageBuffer, RGBA, WHITE, LUMA_R, LUMA_G, LUMA_B
from inksplit.kernel.errors import InvalidInputError, NoChannelsProducedError
from inksplit.kernel.validation import ensure_image
from inksplit.kernel.image.logic import flatten_alpha
from inksplit.kernel.system.performance import time_function, parallel_kernel
from inksplit.features.color.logic import parse_color

GAMMA = 2.2


@njit(nogil=True)
def _gamma_gray(r: float, g: float, b: float) -> float:
    """
    Perceptual gray (0.0 - 1.0) from luminance computed in linear light.
    """
    lum = (
        LUMA_R * (r / 255.0) ** GAMMA
        + LUMA_G * (g / 255.0) ** GAMMA
        + LUMA_B * (b / 255.0) ** GAMMA
    )
    return lum ** (1.0 / GAMMA)


@njit(nogil=True)
def _blend_channel(a: float, b: float, ratio: float) -> int:
    a_lin = (a / 255.0) ** GAMMA
    b_lin = (b / 255.0) ** GAMMA
    mixed = (1.0 - ratio) * a_lin + ratio * b_lin
    v = int(mixed ** (1.0 / GAMMA) * 255.0 + 0.5)
    return min(max(v, 0), 255)


@njit(parallel=True, nogil=True)
def _gradient_map_jit(img: np.ndarray, stops: np.ndarray) -> np.ndarray:
    """
    Maps every opaque pixel onto a piecewise gradient of >= 2 stops,
    N stops give N - 1 equal segments.
    """
    h = img.shape[0]
    w = img.shape[1]
    segments = stops.shape[0] - 1
    seg_size = 1.0 / segments
    res = np.empty_like(img)
    for y in prange(h):
        for x in range(w):
            if img[y, x, 3] == 0:
                for i in range(4):
                    res[y, x, i] = img[y, x, i]
                continue

            gray = _gamma_gray(
                float(img[y, x, 0]), float(img[y, x, 1]), float(img[y, x, 2])
            )
            idx = int(np.floor(gray * segments))
            if idx > segments - 1:
                idx = segments - 1
            if idx < 0:
                idx = 0
            ratio = (gray - idx * seg_size) / seg_size
            if ratio < 0.0:
                ratio = 0.0
            elif ratio > 1.0:
                ratio = 1.0

            for i in range(3):
                res[y, x, i] = _blend_channel(
                    float(stops[idx, i]), float(stops[idx + 1, i]), ratio
                )
            # alpha is interpolated without linearization
            alpha = (1.0 - ratio) * stops[idx, 3] + ratio * stops[idx + 1, 3]
            res[y, x, 3] = min(int(alpha + 0.5), 255)
    return res


def _expand_stops(stops: ColorStops) -> ColorStops:
    """
    A single stop is a monotone: the color against white.
    """
    if stops.shape[0] == 1:
        return np.vstack([stops, np.array([WHITE], dtype=np.uint8)])
    return np.ascontiguousarray(stops, dtype=np.uint8)


@time_function
@parallel_kernel
def _run_gradient_map(img: ImageBuffer, stops: ColorStops) -> ImageBuffer:
    return _gradient_map_jit(img, stops)


def apply_gradient_map(
    img: np.ndarray, stops: ColorStops, alpha: Optional[np.ndarray] = None
) -> ImageBuffer:
    """
    Recolors an image (or gray plate) through a 0, 1, 2 or N color gradient.
    Zero stops return the input unchanged.

    `alpha` replaces the alpha channel before mapping, so a plate separated
    from a transparent source keeps its transparent pixels.
    """
    img = ensure_image(img)
    if alpha is not None:
        if alpha.shape != img.shape[:2]:
            raise InvalidInputError(
                f"Alpha mask {alpha.shape} does not match image {img.shape[:2]}"
            )
        img = img.copy()
        img[..., 3] = alpha
    stops = np.asarray(stops, dtype=np.uint8).reshape(-1, 4)
    if stops.shape[0] == 0:
        return img.copy()
    return _run_gradient_map(img, _expand_stops(stops))


def gradient_pixel(pixel: Sequence[int], stops: ColorStops) -> RGBA:
    """
    Recolors a single RGBA pixel.
    """
    if len(pixel) != 4:
        raise InvalidInputError(f"Expected an RGBA pixel, got {tuple(pixel)}")
    img = np.array(pixel, dtype=np.uint8).reshape(1, 1, 4)
    r, g, b, a = apply_gradient_map(img, stops)[0, 0]
    return int(r), int(g), int(b), int(a)


def apply_colormap(img: np.ndarray, color: str) -> ImageBuffer:
    """
    Single ink tint in sRGB space: dark areas take the ink color,
    light areas stay paper white.
    """
    img = ensure_image(img)
    r, g, b, _ = parse_color(color)
    rgb = img[..., :3].astype(np.uint32)
    # Rec.601 weights in integer math, truncated
    gray = (rgb @ np.array([299, 587, 114], dtype=np.uint32)) // 1000
    gray_f = gray.astype(np.float32)[..., None] / 255.0
    ink = np.array([r, g, b], dtype=np.float32)
    res = np.empty_like(img)
    res[..., :3] = np.clip((1.0 - gray_f) * ink + gray_f * 255.0, 0, 255).astype(np.uint8)
    res[..., 3] = img[..., 3]
    return res


def compose_plates(layers: Sequence[np.ndarray]) -> np.ndarray:
    """
    Overprints recolored plates: the first is drawn as is, each following
    one is multiply-blended on top. Returns RGB.
    """
    if not layers:
        raise NoChannelsProducedError()

    shape: Tuple[int, int] = layers[0].shape[:2]
    res = np.ones(shape + (3,), dtype=np.float32)
    for layer in layers:
        if layer.shape[:2] != shape:
            raise InvalidInputError(
                f"Plate size {layer.shape[:2]} does not match {shape}"
            )
        rgb = flatten_alpha(ensure_image(layer))[..., :3].astype(np.float32)
        # multiply over white is the plain draw for the first layer
        res *= rgb / 255.0

    return np.clip(np.rint(res * 255.0), 0, 255).astype(np.uint8)
