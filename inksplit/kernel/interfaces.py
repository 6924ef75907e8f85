from typing import Protocol, Any, runtime_checkable
from dataclasses import dataclass, field
import numpy as np
from inksplit.kernel.types import Dimensions


@dataclass
class PipelineContext:
    """
    Shared state passed through the pipeline.
    """

    original_size: Dimensions

    source_hash: str = ""

    # Timings and cache hits gathered by the stages
    metrics: dict[str, Any] = field(default_factory=dict)


@runtime_checkable
class IProcessor(Protocol):
    """
    Interface for any image processing step.
    """

    def process(self, image: np.ndarray, context: PipelineContext) -> np.ndarray: ...
