"""LRU (Least Recently Used) cache implementation."""

import logging
from typing import Dict, List, Optional

import structlog

from policy_cache.in_memory_cache.base import BaseCache, K, V
from policy_cache.in_memory_cache.eviction_policy.eviction_policy import EvictionPolicy
from policy_cache.in_memory_cache.exceptions import InvalidCapacityError, require_not_none
from policy_cache.in_memory_cache.metrics import record_eviction, record_lookup
from policy_cache.in_memory_cache.segment_lock import SEGMENT_COUNT, SegmentLock

logger = structlog.wrap_logger(logging.getLogger(__name__), wrapper_class=structlog.stdlib.BoundLogger)


class _Node:
    """Node for doubly linked list in LRU cache."""

    __slots__ = ("key", "value", "prev", "next")

    def __init__(self, key, value):
        self.key = key
        self.value = value
        self.prev: Optional['_Node'] = None
        self.next: Optional['_Node'] = None


class LRUCache(BaseCache[K, V]):
    """
    Thread-safe LRU (Least Recently Used) cache implementation.

    Uses a hash map for O(1) key lookup and a doubly linked list
    to maintain access order for O(1) eviction. The most recently used
    entry sits right after the head sentinel, the victim right before
    the tail sentinel.

    Operations on one key are serialized by that key's segment lock.
    Every splice of the list, the size counter and the eviction decision
    are serialized by the structural lock, which is always taken after
    the segment lock and at most once per operation.
    """

    policy = EvictionPolicy.LRU

    def __init__(self, capacity: int, segment_count: int = SEGMENT_COUNT):
        """
        Initialize LRU cache.

        Args:
            capacity: Maximum number of keys the cache can hold
            segment_count: Number of segment locks keys are striped across

        Raises:
            InvalidCapacityError: If capacity is not a positive integer
        """
        if not isinstance(capacity, int) or isinstance(capacity, bool) or capacity <= 0:
            raise InvalidCapacityError(capacity)

        super().__init__(capacity)
        self._cache: Dict[K, _Node] = {}
        self._size = 0
        self._locks = SegmentLock(segment_count)
        # Dummy head and tail nodes for easier list manipulation
        self._head = _Node(None, None)
        self._tail = _Node(None, None)
        self._head.next = self._tail
        self._tail.prev = self._head

    def get(self, key: K) -> Optional[V]:
        """
        Get a value from the cache by key.

        Moves the accessed node to the head (most recently used).

        Args:
            key: The key to look up

        Returns:
            The value associated with the key, or None if not found
        """
        require_not_none("key", key)

        if key not in self._cache:
            record_lookup(self.policy.value, hit=False)
            return None

        value = None
        with self._locks.for_key(key):
            with self._locks.structural:
                # The entry may have been evicted since the presence check above
                node = self._cache.get(key)
                if node is not None:
                    self._move_to_head(node)
                    value = node.value

        record_lookup(self.policy.value, hit=node is not None)
        return value

    def put(self, key: K, value: V) -> None:
        """
        Set a key-value pair in the cache.

        If key exists, updates value and moves to head.
        If key doesn't exist, creates new node and adds to head, then
        evicts the least recently used item if capacity is exceeded.

        Args:
            key: The key to store
            value: The value to store
        """
        require_not_none("key", key)
        require_not_none("value", value)

        victim = None
        with self._locks.for_key(key):
            node = self._cache.get(key)
            with self._locks.structural:
                if node is not None and self._cache.get(key) is node:
                    node.value = value
                    self._move_to_head(node)
                else:
                    node = _Node(key, value)
                    self._cache[key] = node
                    self._add_to_head(node)
                    self._size += 1
                    if self._size > self._capacity:
                        victim = self._evict_lru()

        if victim is not None:
            record_eviction(self.policy.value)
            logger.debug("Evicted least recently used entry", key=victim.key, capacity=self._capacity)

    def invalidate(self, key: K) -> bool:
        """
        Remove a key from the cache.

        Args:
            key: The key to remove

        Returns:
            True if the key was cached
        """
        require_not_none("key", key)

        with self._locks.for_key(key):
            with self._locks.structural:
                node = self._cache.pop(key, None)
                if node is not None:
                    self._remove_node(node)
                    self._size -= 1

        if node is None:
            return False
        logger.debug("Invalidated cache entry", key=key, eviction_policy=self.policy.value)
        return True

    def clear(self) -> None:
        """Clear all entries from the cache."""
        with self._locks.structural:
            self._cache.clear()
            self._size = 0
            # Reset head and tail pointers
            self._head.next = self._tail
            self._tail.prev = self._head

    def size(self) -> int:
        """
        Get the current number of keys in the cache.

        Returns:
            The number of keys currently in the cache
        """
        with self._locks.structural:
            return self._size

    def contains(self, key: K) -> bool:
        require_not_none("key", key)
        with self._locks.structural:
            return key in self._cache

    def keys(self) -> List[K]:
        """Keys from least to most recently used."""
        with self._locks.structural:
            keys = []
            node = self._tail.prev
            while node is not self._head:
                keys.append(node.key)
                node = node.prev
            return keys

    def assert_integrity(self) -> None:
        with self._locks.structural:
            assert self._size == len(self._cache), "size counter disagrees with lookup table"
            assert self._size <= self._capacity, "cache holds more entries than its capacity"
            assert (self._head.next is self._tail) == (self._size == 0), "empty list and size disagree"

            seen = set()
            node = self._head
            # Bounded walk so a cycle fails the check instead of hanging it
            for _ in range(self._size + 1):
                nxt = node.next
                assert nxt is not None and nxt.prev is node, "broken back link"
                if nxt is self._tail:
                    break
                assert nxt.key not in seen, f"key {nxt.key!r} linked twice"
                assert self._cache.get(nxt.key) is nxt, f"linked node {nxt.key!r} missing from lookup table"
                seen.add(nxt.key)
                node = nxt
            else:
                raise AssertionError("list is longer than the size counter")

            assert len(seen) == self._size, "lookup table holds unlinked entries"

    def _add_to_head(self, node: _Node) -> None:
        node.prev = self._head
        node.next = self._head.next
        self._head.next.prev = node
        self._head.next = node

    def _remove_node(self, node: _Node) -> None:
        node.prev.next = node.next
        node.next.prev = node.prev
        node.prev = node.next = None

    def _move_to_head(self, node: _Node) -> None:
        """
        Move a node to the head of the linked list (most recently used).

        Args:
            node: The node to move
        """
        self._remove_node(node)
        self._add_to_head(node)

    def _evict_lru(self) -> _Node:
        """Evict the least recently used item (tail of the list). Caller holds the structural lock."""
        lru_node = self._tail.prev
        assert lru_node is not self._head, "eviction requested on an empty list"

        self._remove_node(lru_node)
        del self._cache[lru_node.key]
        self._size -= 1
        return lru_node
