from typing import Callable, Dict
import numpy as np
from inksplit.domain.models import EffectKind
from inksplit.kernel.interfaces import IProcessor, PipelineContext
from inksplit.kernel.types import PlateBuffer
from inksplit.features.effects.logic import (
    apply_dither,
    apply_halftone,
    apply_original,
    apply_posterize,
    apply_threshold,
)

EffectFn = Callable[[np.ndarray], PlateBuffer]

EFFECTS: Dict[EffectKind, EffectFn] = {
    EffectKind.ORIGINAL: apply_original,
    EffectKind.DITHER: apply_dither,
    EffectKind.HALFTONE: apply_halftone,
    EffectKind.THRESHOLD: apply_threshold,
    EffectKind.POSTERIZE: apply_posterize,
}


def get_effect(kind: EffectKind) -> EffectFn:
    return EFFECTS[kind]


class EffectProcessor(IProcessor):
    """
    Applies one print effect to a separated plate.
    """

    def __init__(self, kind: EffectKind):
        self.kind = kind
        self._fn = get_effect(kind)

    def process(self, image: np.ndarray, context: PipelineContext) -> PlateBuffer:
        return self._fn(image)
