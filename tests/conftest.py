import os

os.environ.setdefault("NUMBA_THREADING_LAYER", "workqueue")

import numpy as np
import pytest


def solid(color, size=(4, 4)):
    """RGBA image filled with one color."""
    h, w = size
    img = np.empty((h, w, 4), dtype=np.uint8)
    img[...] = np.array(color, dtype=np.uint8)
    return img


@pytest.fixture
def random_rgba():
    rng = np.random.default_rng(1234)
    return rng.integers(0, 256, size=(24, 31, 4), dtype=np.uint8)


@pytest.fixture
def random_plate():
    rng = np.random.default_rng(4321)
    return rng.integers(0, 256, size=(29, 37), dtype=np.uint8)
