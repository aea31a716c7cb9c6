"""Striped locking used by the LRU cache."""

import threading
from typing import Hashable, List

from policy_cache.in_memory_cache.exceptions import InvalidArgumentError

SEGMENT_COUNT = 16


class SegmentLock:
    """
    A fixed array of locks selected by hashing a key, plus one structural lock.

    A key always maps to the same segment, so two operations on the same key
    never run concurrently, while operations on keys in different segments
    only meet on the structural lock. Callers must take a segment lock before
    the structural lock and never the other way around.
    """

    def __init__(self, segment_count: int = SEGMENT_COUNT):
        if segment_count <= 0:
            raise InvalidArgumentError("segment_count", f"{segment_count}. Must be a positive integer")

        self._segments: List[threading.Lock] = [threading.Lock() for _ in range(segment_count)]
        self.structural = threading.Lock()

    def segment_index(self, key: Hashable) -> int:
        # Python's % is non-negative for a positive modulus
        return hash(key) % len(self._segments)

    def for_key(self, key: Hashable) -> threading.Lock:
        """Get the segment lock that owns key."""
        return self._segments[self.segment_index(key)]

    def __len__(self) -> int:
        return len(self._segments)
