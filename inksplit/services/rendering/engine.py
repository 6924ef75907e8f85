from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import replace
from typing import List, Optional, Sequence
import numpy as np
from inksplit.domain.models import (
    ChannelKind,
    ChannelPlate,
    ChannelResult,
    ExportConfig,
    ProcessSettings,
    ProcessingStatus,
)
from inksplit.domain.session import PipelineSession
from inksplit.kernel.caching.logic import CacheEntry
from inksplit.kernel.errors import NoChannelsProducedError
from inksplit.kernel.interfaces import PipelineContext
from inksplit.kernel.image.io import encode_image
from inksplit.kernel.system.config import APP_CONFIG
from inksplit.kernel.system.logging import get_logger
from inksplit.kernel.types import ImageBuffer
from inksplit.features.separation.logic import separate_cmyk
from inksplit.features.separation.processor import ChannelSeparator
from inksplit.features.filters.processor import FilterProcessor
from inksplit.features.effects.processor import EffectProcessor
from inksplit.features.toning.processor import GradientProcessor
from inksplit.features.toning.logic import compose_plates
from inksplit.services.export.service import ExportService

logger = get_logger(__name__)


def _log_background_failure(future: "Future[bool]") -> None:
    if future.cancelled():
        return
    exc = future.exception()
    if exc is not None:
        logger.error(f"Background separation failed, cache left empty: {exc}")


class SeparationEngine:
    """
    The orchestrator: filter -> separation -> effect -> recolor -> persist.

    Filters act on the composite image, effects on each separated plate.
    The separation of the loaded image is cached and reused by any run
    that requests no filter.
    """

    def __init__(self, max_workers: Optional[int] = None) -> None:
        self.config = APP_CONFIG
        self.separator = ChannelSeparator()
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers or self.config.max_workers,
            thread_name_prefix="inksplit",
        )

    def __enter__(self) -> "SeparationEngine":
        return self

    def __exit__(self, *exc: object) -> None:
        self.shutdown()

    def shutdown(self) -> None:
        self._executor.shutdown(wait=True)

    def load(
        self,
        session: PipelineSession,
        image: ImageBuffer,
        name: Optional[str] = None,
        precompute: bool = True,
    ) -> Optional["Future[bool]"]:
        """
        Makes an image current. By default starts separating it in the
        background so the first unfiltered run hits the cache.
        """
        source_hash = session.load(image, name)
        logger.info(f"Loaded {name or 'image'} ({source_hash[:8]})")
        if precompute:
            return self.precompute(session)
        return None

    def precompute(self, session: PipelineSession) -> "Future[bool]":
        """
        Background separation. The result lands in the cache only if the
        same image is still loaded when it completes.
        """
        image = session.require_image()
        source_hash = session.source_hash
        cache = session.cache

        def job() -> bool:
            stack = separate_cmyk(image)
            stored = cache.store(CacheEntry(source_hash, stack))
            logger.debug(f"Background separation for {source_hash[:8]} stored={stored}")
            return stored

        future = self._executor.submit(job)
        future.add_done_callback(_log_background_failure)
        session.pending = future
        return future

    def _separation(
        self,
        session: PipelineSession,
        image: ImageBuffer,
        settings: ProcessSettings,
        context: PipelineContext,
    ) -> np.ndarray:
        if settings.filter is not None:
            # The filtered composite is a different image, the cached
            # separation does not apply to it.
            context.metrics["cache_hit"] = False
            return separate_cmyk(image)

        entry = session.cache.lookup(session.source_hash)
        if entry is not None:
            context.metrics["cache_hit"] = True
            return entry.data

        context.metrics["cache_hit"] = False
        stack = separate_cmyk(image)
        session.cache.store(CacheEntry(session.source_hash, stack))
        return stack

    def process(
        self,
        session: PipelineSession,
        settings: Optional[ProcessSettings] = None,
        channels: ChannelKind = ChannelKind.ALL,
    ) -> List[ChannelPlate]:
        """
        Runs the in-memory stages and returns the plates in C, M, Y, K order.
        """
        image = session.require_image()
        settings = settings if settings is not None else (session.settings or ProcessSettings())
        session.settings = settings

        if not channels.members():
            return []

        context = PipelineContext(
            original_size=(image.shape[0], image.shape[1]),
            source_hash=session.source_hash,
        )
        logger.info(f"Processing {session.source_hash[:8]} with {settings.to_dict()}")

        composite = image
        if settings.filter is not None:
            composite = FilterProcessor(settings.filter).process(composite, context)

        stack = self._separation(session, composite, settings, context)
        plates = self.separator.select(stack, channels)

        if settings.effect is not None:
            effect = EffectProcessor(settings.effect)
            # plates are independent, each effect keeps its own pixel order
            images = list(
                self._executor.map(lambda p: effect.process(p.image, context), plates)
            )
            plates = [ChannelPlate(p.kind, img) for p, img in zip(plates, images)]

        # separated plates carry no alpha, recoloring restores the source one
        gradient = GradientProcessor(settings.colors, composite[..., 3])
        if not gradient.is_passthrough:
            plates = [
                ChannelPlate(p.kind, gradient.process(p.image, context)) for p in plates
            ]

        return plates

    def persist(
        self,
        plates: List[ChannelPlate],
        output_dir: str,
        base_name: str,
        export: Optional[ExportConfig] = None,
        colors: Optional[Sequence[str]] = None,
    ) -> List[ChannelResult]:
        """
        Encodes each plate (JPEG q70 by default) as {base}_{channel}[_{color}].{ext}.
        `colors` are per-channel display labels matched by position.
        """
        export = replace(export or ExportConfig(), export_path=output_dir)
        return ExportService.save_plates_to_disk(plates, base_name, colors, export)

    def run(
        self,
        session: PipelineSession,
        settings: Optional[ProcessSettings] = None,
        output_dir: Optional[str] = None,
        channels: ChannelKind = ChannelKind.ALL,
        export: Optional[ExportConfig] = None,
        colors: Optional[Sequence[str]] = None,
    ) -> List[ChannelResult]:
        """
        Full pipeline including persistence, tracking the session status.
        `colors` label the written files by position, the gradient comes from
        `settings.colors`.
        """
        session.status = ProcessingStatus.PROCESSING
        try:
            plates = self.process(session, settings, channels)
            if not plates:
                raise NoChannelsProducedError()
            export = export or ExportConfig()
            results = self.persist(
                plates,
                output_dir or export.export_path,
                session.base_name,
                export,
                colors,
            )
        except Exception:
            session.status = ProcessingStatus.FAILED
            raise

        session.results = results
        session.status = ProcessingStatus.COMPLETED
        logger.info(f"Wrote {len(results)} channel(s) for {session.base_name}")
        return results

    def render_preview(self, plates: List[ChannelPlate]) -> bytes:
        """
        Overprinted composite of the plates, PNG encoded.
        """
        composite = compose_plates([p.image for p in plates])
        return encode_image(composite, self.config.preview_format)
