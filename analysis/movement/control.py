"""Bounded, index-ordered store of control thumbnails.

The buffer only knows how to keep and evict thumbnails; *when* a
thumbnail is admitted is decided by the detector (key-frame interval
plus bootstrap while the buffer is not yet full).
"""

from __future__ import annotations

from collections import OrderedDict
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .similarity import psnr


def evictions(capacity: int, indices: Iterable[int]) -> list[int]:
    """Indices to drop so that at most ``capacity`` entries remain (oldest first)."""
    ordered = sorted(indices)
    excess = len(ordered) - max(1, int(capacity))
    return ordered[:excess] if excess > 0 else []


@dataclass(frozen=True)
class ControlMatch:
    index: int
    thumbnail: np.ndarray
    score: float


@dataclass(frozen=True)
class SearchOutcome:
    match: Optional[ControlMatch]
    last_score: Optional[float]  # None when nothing was compared


def find_first_below(
    entries: Iterable[tuple[int, np.ndarray]],
    thumbnail: np.ndarray,
    threshold: float,
    metric: Callable[[np.ndarray, np.ndarray], float] = psnr,
) -> SearchOutcome:
    """
    Return the first entry whose score against ``thumbnail`` is below ``threshold``.

    ``entries`` is consumed lazily and the scan stops at the first match,
    so pass them most-recent-first.
    """
    last: Optional[float] = None
    for index, control in entries:
        last = metric(control, thumbnail)
        if last < threshold:
            return SearchOutcome(ControlMatch(index, control, last), last)
    return SearchOutcome(None, last)


class ControlBuffer:
    """
    Control thumbnails keyed by frame index.

    Indices must strictly increase across inserts, so index order and
    insertion order coincide and eviction is plain FIFO.
    """

    def __init__(self, capacity: int = 4) -> None:
        self._capacity = max(1, int(capacity))
        self._entries: OrderedDict[int, np.ndarray] = OrderedDict()

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, index: object) -> bool:
        return index in self._entries

    def empty(self) -> bool:
        return not self._entries

    def indices(self) -> list[int]:
        return list(self._entries)

    def newest_index(self) -> Optional[int]:
        return next(reversed(self._entries), None)

    def is_full(self) -> bool:
        return len(self._entries) >= self._capacity

    def _evict(self) -> list[int]:
        dropped = evictions(self._capacity, self._entries)
        for index in dropped:
            del self._entries[index]
        return dropped

    def retain(self, index: int, thumbnail: np.ndarray) -> list[int]:
        """Store ``thumbnail`` under ``index`` and return the evicted indices."""
        newest = self.newest_index()
        if newest is not None and index <= newest:
            raise ValueError(
                f"control frame index {index} must be greater than newest index {newest}"
            )
        self._entries[int(index)] = thumbnail
        return self._evict()

    def resize(self, capacity: int) -> list[int]:
        self._capacity = max(1, int(capacity))
        return self._evict()

    def iterate_most_recent_first(self) -> Iterator[tuple[int, np.ndarray]]:
        # Recent control frames are the most likely to reveal new movement,
        # which lets the search stop early.
        for index in reversed(list(self._entries)):
            yield index, self._entries[index]

    def clear(self) -> None:
        self._entries.clear()
