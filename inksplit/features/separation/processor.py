from typing import List
import numpy as np
from inksplit.domain.models import ChannelKind, ChannelPlate, RgbChannel, RGB_ORDER
from inksplit.kernel.types import ImageBuffer
from inksplit.kernel.validation import ensure_image
from inksplit.features.separation.logic import separate_cmyk, split_rgb, tint_plate


class ChannelSeparator:
    """
    Produces one plate per requested ink, always in C, M, Y, K order.
    """

    def __init__(self, tinted: bool = False):
        self.tinted = tinted

    def separate(
        self, image: ImageBuffer, channels: ChannelKind = ChannelKind.ALL
    ) -> List[ChannelPlate]:
        kinds = channels.members()
        if not kinds:
            return []

        stack = separate_cmyk(ensure_image(image))
        return self.select(stack, channels)

    def select(self, stack: np.ndarray, channels: ChannelKind) -> List[ChannelPlate]:
        """
        Picks the requested plates out of a full (4, H, W) separation.
        """
        plates = []
        for kind in channels.members():
            plate = stack[kind.index]
            if self.tinted:
                plate = tint_plate(plate, kind.index)
            else:
                plate = plate.copy()
            plates.append(ChannelPlate(kind, plate))
        return plates

    def split_rgb_channels(
        self, image: ImageBuffer, channels: RgbChannel = RgbChannel.ALL
    ) -> List[np.ndarray]:
        """
        Gray plates of the additive R, G, B components.
        """
        selected = channels.members()
        if not selected:
            return []
        stack = split_rgb(ensure_image(image))
        return [stack[RGB_ORDER.index(c)].copy() for c in selected]
