from typing import TypeAlias, Tuple
import numpy as np
import numpy.typing as npt


# Image Types
# 8-bit RGBA image (Height, Width, 4)
ImageBuffer: TypeAlias = npt.NDArray[np.uint8]
# 8-bit single channel plate (Height, Width)
PlateBuffer: TypeAlias = npt.NDArray[np.uint8]
# Gradient stops (N, 4) RGBA
ColorStops: TypeAlias = npt.NDArray[np.uint8]

RGBA: TypeAlias = Tuple[int, int, int, int]
# (Height, Width)
Dimensions: TypeAlias = Tuple[int, int]

# https://en.wikipedia.org/wiki/Luma_(video)
LUMA_COEFFS = np.array([0.2126, 0.7152, 0.0722], dtype=np.float32)
LUMA_R = 0.2126
LUMA_G = 0.7152
LUMA_B = 0.0722

WHITE: RGBA = (255, 255, 255, 255)
