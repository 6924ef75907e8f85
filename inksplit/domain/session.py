from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import List, Optional
from inksplit.domain.models import ChannelResult, ProcessSettings, ProcessingStatus
from inksplit.kernel.caching.manager import SeparationCache
from inksplit.kernel.errors import NoImageSelectedError
from inksplit.kernel.image.logic import calculate_image_hash
from inksplit.kernel.types import ImageBuffer
from inksplit.kernel.validation import ensure_image


@dataclass
class PipelineSession:
    """
    Everything one host window knows about its current image.
    Passed explicitly to every engine call.
    """

    image: Optional[ImageBuffer] = None
    image_name: Optional[str] = None
    source_hash: str = ""
    settings: Optional[ProcessSettings] = None
    status: ProcessingStatus = ProcessingStatus.IDLE
    cache: SeparationCache = field(default_factory=SeparationCache)
    pending: Optional["Future[bool]"] = None
    results: List[ChannelResult] = field(default_factory=list)

    def load(self, image: ImageBuffer, name: Optional[str] = None) -> str:
        """
        Makes an image current and invalidates the separation cache.
        """
        img = ensure_image(image)
        self.image = img
        self.image_name = name
        self.source_hash = calculate_image_hash(img)
        self.cache.reset(self.source_hash)
        self.status = ProcessingStatus.IDLE
        self.pending = None
        self.results = []
        return self.source_hash

    def require_image(self) -> ImageBuffer:
        if self.image is None:
            raise NoImageSelectedError()
        return self.image

    @property
    def base_name(self) -> str:
        if not self.image_name:
            return "image"
        return self.image_name.rsplit(".", 1)[0]
