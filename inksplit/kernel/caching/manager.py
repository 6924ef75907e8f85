import threading
from typing import Optional
from inksplit.kernel.caching.logic import CacheEntry
from inksplit.kernel.system.logging import get_logger

logger = get_logger(__name__)


class SeparationCache:
    """
    Single slot holding the separation of the ACTIVE image.
    The slot is reset when switching source images, and a write computed
    for any other image is dropped.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.source_hash: str = ""
        self._entry: Optional[CacheEntry] = None

    def reset(self, source_hash: str) -> None:
        with self._lock:
            self._entry = None
            self.source_hash = source_hash

    def clear(self) -> None:
        self.reset("")

    def store(self, entry: CacheEntry) -> bool:
        """
        Returns False when the entry is stale and was discarded.
        """
        with self._lock:
            if entry.source_hash != self.source_hash:
                logger.debug(
                    f"Dropping stale separation for {entry.source_hash[:8]} "
                    f"(active: {self.source_hash[:8]})"
                )
                return False
            self._entry = entry
            return True

    def lookup(self, source_hash: str) -> Optional[CacheEntry]:
        """
        None is a plain miss, including while a background fill is in flight.
        """
        with self._lock:
            entry = self._entry
        if entry is None or entry.source_hash != source_hash:
            return None
        return entry

    @property
    def populated(self) -> bool:
        with self._lock:
            return self._entry is not None
