from typing import Optional, Sequence
import numpy as np
from inksplit.kernel.interfaces import IProcessor, PipelineContext
from inksplit.kernel.types import ImageBuffer
from inksplit.features.color.logic import build_color_stops
from inksplit.features.toning.logic import apply_gradient_map


class GradientProcessor(IProcessor):
    """
    Recolors plates through the user's display colors (monotone, duotone
    or multi-tone). `alpha` is the source alpha of the separated image;
    pixels transparent there stay transparent on every recolored plate.
    """

    def __init__(
        self, colors: Optional[Sequence[str]], alpha: Optional[np.ndarray] = None
    ):
        self.stops = build_color_stops(colors)
        self.alpha = alpha

    @property
    def is_passthrough(self) -> bool:
        return self.stops.shape[0] == 0

    def process(self, image: np.ndarray, context: PipelineContext) -> ImageBuffer:
        context.metrics["gradient_stops"] = int(self.stops.shape[0])
        return apply_gradient_map(image, self.stops, self.alpha)
