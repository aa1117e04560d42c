"""
Chunk Classifier.

Assigns a load-timing category to each chunk from its entry status and the
source locations of the connections that pulled its modules in.
"""

import logging
from typing import Iterable, Sequence

from .types import ChunkKind

logger = logging.getLogger(__name__)

DEFAULT_PREFETCH_MARKERS = ("webpackPrefetch",)
DEFAULT_PRELOAD_MARKERS = ("webpackPreload",)


class ChunkClassifier:
    """
    sync / lazy / preload / prefetch classification.

    Initial chunks are always ``sync``. For the rest, prefetch evidence beats
    preload evidence, which beats plain dynamic loading.
Markers are matched as case-sensitive substrings of each location.
    """

    def __init__(
        self,
        prefetch_markers: Sequence[str] = DEFAULT_PREFETCH_MARKERS,
        preload_markers: Sequence[str] = DEFAULT_PRELOAD_MARKERS,
    ):
        self._prefetch = tuple(m for m in prefetch_markers if m)
        self._preload = tuple(m for m in preload_markers if m)

    def classify(
        self,
        chunk_id: str,
        is_initial: bool,
        reason_locations: Iterable[str],
    ) -> ChunkKind:
        if is_initial:
            return ChunkKind.SYNC

        saw_preload = False
        for location in reason_locations:
            if any(marker in location for marker in self._prefetch):
                return ChunkKind.PREFETCH
            if any(marker in location for marker in self._preload):
                saw_preload = True

        if saw_preload:
            return ChunkKind.PRELOAD

        logger.debug(f"Chunk {chunk_id} is non-initial without prefetch/preload hints")
        return ChunkKind.LAZY


def classify_chunk(chunk_id: str, is_initial: bool, reason_locations: Iterable[str]) -> ChunkKind:
    """Classify with the default directive markers."""
    return ChunkClassifier().classify(chunk_id, is_initial, reason_locations)
