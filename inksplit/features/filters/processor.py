from typing import Callable, Dict
import numpy as np
from inksplit.domain.models import FilterKind
from inksplit.kernel.interfaces import IProcessor, PipelineContext
from inksplit.kernel.types import ImageBuffer
from inksplit.features.filters.logic import (
    apply_blur,
    apply_brighten,
    apply_contrast,
    apply_darken,
    apply_grayscale,
    apply_invert,
    apply_pixelate,
    apply_sepia,
    apply_sharpen,
)

FilterFn = Callable[[ImageBuffer], ImageBuffer]

FILTERS: Dict[FilterKind, FilterFn] = {
    FilterKind.GRAYSCALE: apply_grayscale,
    FilterKind.SEPIA: apply_sepia,
    FilterKind.INVERT: apply_invert,
    FilterKind.PIXELATE: apply_pixelate,
    FilterKind.BRIGHTEN: apply_brighten,
    FilterKind.DARKEN: apply_darken,
    FilterKind.CONTRAST: apply_contrast,
    FilterKind.BLUR: apply_blur,
    FilterKind.SHARPEN: apply_sharpen,
}


def get_filter(kind: FilterKind) -> FilterFn:
    return FILTERS[kind]


class FilterProcessor(IProcessor):
    """
    Applies one color filter to the composite image, before separation.
    """

    def __init__(self, kind: FilterKind):
        self.kind = kind
        self._fn = get_filter(kind)

    def process(self, image: np.ndarray, context: PipelineContext) -> ImageBuffer:
        context.metrics["filter"] = self.kind.value
        return self._fn(image)
