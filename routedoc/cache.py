"""
Generated document cache.

Explicit cache objects for a finished document. Each cache takes its
clock as a constructor argument, so freshness is decided by the caller's
clock rather than by module-level state.
"""

from __future__ import annotations

import copy
import json
import logging
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

from .faults import CacheReadFault, CacheWriteFault

logger = logging.getLogger("routedoc.cache")

Clock = Callable[[], float]
Document = Dict[str, Any]


class DocumentCache(ABC):
    """Storage for one generated document."""

    @abstractmethod
    def get(self) -> Optional[Document]:
        """Cached document, or None on a miss."""

    @abstractmethod
    def store(self, document: Document) -> None:
        """Replace the cached document."""

    @abstractmethod
    def clear(self) -> None:
        """Drop the cached document."""


class NullDocumentCache(DocumentCache):
    """Cache that never holds anything."""

    def get(self) -> Optional[Document]:
        return None

    def store(self, document: Document) -> None:
        pass

    def clear(self) -> None:
        pass


class MemoryDocumentCache(DocumentCache):
    """
    In-process cache. Documents are copied on the way in and out, so
    callers never share the stored dict.

    Args:
        ttl: Seconds a stored document stays fresh (None = forever)
        clock: Monotonic time source
    """

    def __init__(self, ttl: Optional[float] = None, clock: Clock = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._document: Optional[Document] = None
        self._stored_at = 0.0

    def get(self) -> Optional[Document]:
        if self._document is None:
            return None
        if _expired(self._stored_at, self.ttl, self._clock()):
            logger.debug("Cached document expired")
            self._document = None
            return None
        return copy.deepcopy(self._document)

    def store(self, document: Document) -> None:
        self._document = copy.deepcopy(document)
        self._stored_at = self._clock()

    def clear(self) -> None:
        self._document = None


class FileDocumentCache(DocumentCache):
    """
    JSON file cache, shared between processes.

    The file holds ``{"stored_at": <epoch seconds>, "document": {...}}``.
    A missing, unreadable or corrupt file is a cache miss.
    """

    def __init__(
        self,
        path: Union[str, Path],
        ttl: Optional[float] = None,
        clock: Clock = time.time,
    ):
        self.path = Path(path)
        self.ttl = ttl
        self._clock = clock

    def get(self) -> Optional[Document]:
        if not self.path.exists():
            return None

        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
            stored_at = float(payload["stored_at"])
            document = payload["document"]
        except (OSError, ValueError, KeyError, TypeError) as exc:
            fault = CacheReadFault(str(self.path), str(exc))
            logger.warning("%s", fault)
            return None

        if not isinstance(document, dict):
            logger.warning("%s", CacheReadFault(str(self.path), "document is not an object"))
            return None

        if _expired(stored_at, self.ttl, self._clock()):
            logger.debug("Cached document at %s expired", self.path)
            return None
        return document

    def store(self, document: Document) -> None:
        payload = {"stored_at": self._clock(), "document": document}
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_name(self.path.name + ".tmp")
            tmp_path.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")
            tmp_path.replace(self.path)
        except OSError as exc:
            raise CacheWriteFault(str(self.path), str(exc)) from exc

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


def _expired(stored_at: float, ttl: Optional[float], now: float) -> bool:
    return ttl is not None and now - stored_at >= ttl
