from dataclasses import dataclass
import numpy as np


@dataclass(frozen=True)
class CacheEntry:
    """
    A full C, M, Y, K separation of one source image.
    """

    source_hash: str
    data: np.ndarray  # (4, H, W)
