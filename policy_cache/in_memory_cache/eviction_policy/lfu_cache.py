"""LFU (Least Frequently Used) cache implementation."""

import logging
import threading
from typing import Dict, Iterator, List, Optional

import structlog

from policy_cache.in_memory_cache.base import BaseCache, K, V
from policy_cache.in_memory_cache.eviction_policy.eviction_policy import EvictionPolicy
from policy_cache.in_memory_cache.exceptions import InvalidCapacityError, require_not_none
from policy_cache.in_memory_cache.metrics import record_eviction, record_lookup

logger = structlog.wrap_logger(logging.getLogger(__name__), wrapper_class=structlog.stdlib.BoundLogger)


class _Node:
    """Node for doubly linked list in LFU cache with frequency tracking."""

    __slots__ = ("key", "value", "frequency", "prev", "next")

    def __init__(self, key, value):
        self.key = key
        self.value = value
        self.frequency = 1
        self.prev: Optional['_Node'] = None
        self.next: Optional['_Node'] = None


class _FrequencyBucket:
    """
    Entries sharing one access count, oldest first.

    A sentinel-bounded doubly linked list, so appending, unlinking an
    arbitrary node and popping the oldest node are all O(1).
    """

    def __init__(self):
        self._head = _Node(None, None)
        self._tail = _Node(None, None)
        self._head.next = self._tail
        self._tail.prev = self._head
        self._size = 0

    def append(self, node: _Node) -> None:
        """Link node as the newest member of the bucket."""
        node.prev = self._tail.prev
        node.next = self._tail
        self._tail.prev.next = node
        self._tail.prev = node
        self._size += 1

    def remove(self, node: _Node) -> None:
        node.prev.next = node.next
        node.next.prev = node.prev
        node.prev = node.next = None
        self._size -= 1

    def pop_oldest(self) -> _Node:
        """Unlink and return the member that joined the bucket first."""
        oldest = self._head.next
        assert oldest is not self._tail, "pop from an empty frequency bucket"
        self.remove(oldest)
        return oldest

    def is_empty(self) -> bool:
        return self._size == 0

    def __len__(self) -> int:
        return self._size

    def __iter__(self) -> Iterator[_Node]:
        node = self._head.next
        while node is not self._tail:
            yield node
            node = node.next


class LFUCache(BaseCache[K, V]):
    """
    Thread-safe LFU (Least Frequently Used) cache implementation.

    Uses a hash map for O(1) key lookup and frequency buckets with
    doubly linked lists to maintain frequency order for O(1) eviction.
    Ties on frequency are broken FIFO: the entry that entered the
    lowest-frequency bucket first is evicted first.

    A single lock serializes every operation. A cache built with a
    non-positive capacity never stores anything.
    """

    policy = EvictionPolicy.LFU

    def __init__(self, capacity: int):
        """
        Initialize LFU cache.

        Args:
            capacity: Maximum number of keys the cache can hold. Zero or
                a negative value yields a cache that ignores every put.

        Raises:
            InvalidCapacityError: If capacity is not an integer
        """
        if not isinstance(capacity, int) or isinstance(capacity, bool):
            raise InvalidCapacityError(capacity)

        super().__init__(capacity)
        self._lock = threading.Lock()
        self._cache: Dict[K, _Node] = {}
        self._frequency_buckets: Dict[int, _FrequencyBucket] = {}
        self._min_frequency = 1

    def get(self, key: K) -> Optional[V]:
        """
        Get a value from the cache by key.

        Increments the frequency of the accessed key.

        Args:
            key: The key to look up

        Returns:
            The value associated with the key, or None if not found
        """
        require_not_none("key", key)

        value = None
        with self._lock:
            node = self._cache.get(key)
            if node is not None:
                self._increment_frequency(node)
                value = node.value

        record_lookup(self.policy.value, hit=node is not None)
        return value

    def put(self, key: K, value: V) -> None:
        """
        Set a key-value pair in the cache.

        If key exists, updates value and increments frequency.
        If key doesn't exist, evicts the least frequently used item when
        the cache is full, then creates a new node with frequency=1.

        Args:
            key: The key to store
            value: The value to store
        """
        require_not_none("key", key)
        require_not_none("value", value)
        if self._capacity <= 0:
            return

        victim = None
        with self._lock:
            node = self._cache.get(key)
            if node is not None:
                node.value = value
                self._increment_frequency(node)
            else:
                if len(self._cache) >= self._capacity:
                    victim = self._evict_lfu()

                node = _Node(key, value)
                self._cache[key] = node
                self._add_to_frequency_bucket(node)
                self._min_frequency = 1

        if victim is not None:
            record_eviction(self.policy.value)
            logger.debug(
                "Evicted least frequently used entry",
                key=victim.key,
                frequency=victim.frequency,
                capacity=self._capacity
            )

    def invalidate(self, key: K) -> bool:
        """
        Remove a key from the cache.

        Args:
            key: The key to remove

        Returns:
            True if the key was cached
        """
        require_not_none("key", key)

        with self._lock:
            node = self._cache.pop(key, None)
            if node is not None:
                emptied = self._remove_from_frequency_bucket(node)
                # Only an emptied minimum bucket moves the minimum
                if emptied and node.frequency == self._min_frequency:
                    self._min_frequency = min(self._frequency_buckets, default=1)

        if node is None:
            return False
        logger.debug("Invalidated cache entry", key=key, eviction_policy=self.policy.value)
        return True

    def clear(self) -> None:
        """Clear all entries from the cache."""
        with self._lock:
            self._cache.clear()
            self._frequency_buckets.clear()
            self._min_frequency = 1

    def size(self) -> int:
        """
        Get the current number of keys in the cache.

        Returns:
            The number of keys currently in the cache
        """
        with self._lock:
            return len(self._cache)

    def contains(self, key: K) -> bool:
        require_not_none("key", key)
        with self._lock:
            return key in self._cache

    def keys(self) -> List[K]:
        """Keys by ascending frequency, oldest first within a frequency."""
        with self._lock:
            return [
                node.key
                for frequency in sorted(self._frequency_buckets)
                for node in self._frequency_buckets[frequency]
            ]

    def frequency_of(self, key: K) -> Optional[int]:
        """Get the access count of key without bumping it, or None if not cached."""
        require_not_none("key", key)
        with self._lock:
            node = self._cache.get(key)
            return node.frequency if node is not None else None

    def assert_integrity(self) -> None:
        with self._lock:
            assert len(self._cache) <= max(self._capacity, 0), "cache holds more entries than its capacity"

            seen = set()
            for frequency, bucket in self._frequency_buckets.items():
                assert not bucket.is_empty(), f"empty bucket left for frequency {frequency}"
                count = 0
                for node in bucket:
                    assert node.frequency == frequency, f"{node.key!r} sits in the wrong bucket"
                    assert node.key not in seen, f"key {node.key!r} linked twice"
                    assert self._cache.get(node.key) is node, f"bucketed node {node.key!r} missing from lookup table"
                    seen.add(node.key)
                    count += 1
                assert count == len(bucket), f"bucket {frequency} size counter is off"

            assert len(seen) == len(self._cache), "lookup table holds unbucketed entries"
            if self._cache:
                assert self._min_frequency == min(self._frequency_buckets), "min frequency is stale"

    def _increment_frequency(self, node: _Node) -> None:
        """
        Increment the frequency of a node and move it to the appropriate bucket.

        Args:
            node: The node whose frequency should be incremented
        """
        old_frequency = node.frequency
        emptied = self._remove_from_frequency_bucket(node)
        if emptied and old_frequency == self._min_frequency:
            # The node lands in old_frequency + 1, so that bucket is the new minimum
            self._min_frequency = old_frequency + 1

        node.frequency = old_frequency + 1
        self._add_to_frequency_bucket(node)

    def _add_to_frequency_bucket(self, node: _Node) -> None:
        bucket = self._frequency_buckets.get(node.frequency)
        if bucket is None:
            bucket = self._frequency_buckets[node.frequency] = _FrequencyBucket()
        bucket.append(node)

    def _remove_from_frequency_bucket(self, node: _Node) -> bool:
        """
        Remove a node from its current frequency bucket.

        Returns:
            True if the bucket became empty and was dropped
        """
        bucket = self._frequency_buckets[node.frequency]
        bucket.remove(node)
        if bucket.is_empty():
            del self._frequency_buckets[node.frequency]
            return True
        return False

    def _evict_lfu(self) -> _Node:
        """Evict the oldest entry of the min_frequency bucket. Caller holds the lock."""
        bucket = self._frequency_buckets.get(self._min_frequency)
        assert bucket is not None, f"no bucket for min frequency {self._min_frequency}"

        lfu_node = bucket.pop_oldest()
        if bucket.is_empty():
            del self._frequency_buckets[self._min_frequency]
        del self._cache[lfu_node.key]
        return lfu_node
