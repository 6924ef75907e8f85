from typing import Optional, Sequence, Tuple
import numpy as np
from numba import njit  # type: ignore
from PIL import ImageColor
from inksplit.kernel.types import ColorStops, RGBA, WHITE
from inksplit.kernel.system.logging import get_logger

logger = get_logger(__name__)


@njit(nogil=True)
def _round_u8(value: float) -> int:
    # add-then-truncate, value is never negative here
    return int(value * 255.0 + 0.5)


@njit(nogil=True)
def rgb_to_cmyk(r: int, g: int, b: int) -> Tuple[int, int, int, int]:
    """
    Subtractive conversion of an 8-bit RGB triplet to 8-bit CMYK.
    Pure black short-circuits to (0, 0, 0, 255).
    """
    ri = int(r)
    gi = int(g)
    bi = int(b)
    mx = max(ri, max(gi, bi))
    if mx == 0:
        return 0, 0, 0, 255

    c = _round_u8(1.0 - ri / mx)
    m = _round_u8(1.0 - gi / mx)
    y = _round_u8(1.0 - bi / mx)
    return c, m, y, 255 - mx


@njit(nogil=True)
def _unit_to_u8(value: float) -> int:
    v = int(np.floor(value * 255.0 + 0.5))
    if v < 0:
        return 0
    if v > 255:
        return 255
    return v


@njit(nogil=True)
def cmyk_to_rgb(c: float, m: float, y: float, k: float) -> Tuple[int, int, int]:
    """
    Inverse conversion. Inputs are ink fractions in 0.0 - 1.0.
    """
    r = _unit_to_u8((1.0 - c) * (1.0 - k))
    g = _unit_to_u8((1.0 - m) * (1.0 - k))
    b = _unit_to_u8((1.0 - y) * (1.0 - k))
    return r, g, b


def parse_color(value: str, fallback: RGBA = WHITE) -> RGBA:
    """
    Parses a hex string (#RGB, #RRGGBB, #RRGGBBAA) or a CSS color name.
    Malformed values fall back to white instead of failing the pipeline.
    """
    try:
        rgba = ImageColor.getcolor(str(value).strip(), "RGBA")
    except (ValueError, AttributeError):
        logger.warning(f"Unrecognized color {value!r}, using {fallback}")
        return fallback
    if not isinstance(rgba, tuple) or len(rgba) != 4:
        return fallback
    return rgba[0], rgba[1], rgba[2], rgba[3]


def color_suffix(value: str) -> str:
    """
    File name suffix for a display color: the hex digits without "#".
    """
    return str(value).strip().lstrip("#").replace(" ", "")


def build_color_stops(colors: Optional[Sequence[str]]) -> ColorStops:
    """
    Parses gradient stops into an (N, 4) uint8 array. None gives zero stops.
    """
    if not colors:
        return np.zeros((0, 4), dtype=np.uint8)
    return np.array([parse_color(c) for c in colors], dtype=np.uint8).reshape(-1, 4)
