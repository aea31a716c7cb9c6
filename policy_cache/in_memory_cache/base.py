"""Base cache interface for in-memory cache implementations."""

from abc import ABC, abstractmethod
from typing import Generic, Hashable, List, Optional, TypeVar

from policy_cache.in_memory_cache.eviction_policy.eviction_policy import EvictionPolicy

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class BaseCache(ABC, Generic[K, V]):
    """
    Abstract base class for cache implementations.

    Subclasses differ only in the ordering discipline they use to pick an
    eviction victim, so callers can swap one policy for another without
    changing code.
    """

    policy: EvictionPolicy

    def __init__(self, capacity: int):
        """
        Initialize the cache.

        Args:
            capacity: Maximum number of keys the cache can hold
        """
        self._capacity = capacity

    @abstractmethod
    def get(self, key: K) -> Optional[V]:
        """
        Get a value from the cache by key, recording the access.

        Args:
            key: The key to look up

        Returns:
            The value associated with the key, or None if not found

        Raises:
            InvalidArgumentError: If key is None
        """
        pass

    @abstractmethod
    def put(self, key: K, value: V) -> None:
        """
        Set a key-value pair in the cache, evicting if capacity is exceeded.

        Args:
            key: The key to store
            value: The value to store

        Raises:
            InvalidArgumentError: If key or value is None
        """
        pass

    @abstractmethod
    def invalidate(self, key: K) -> bool:
        """
        Remove a key from the cache.

        Args:
            key: The key to remove

        Returns:
            True if the key was present and has been removed
        """
        pass

    @abstractmethod
    def clear(self) -> None:
        """Clear all entries from the cache."""
        pass

    @abstractmethod
    def size(self) -> int:
        """
        Get the current number of keys in the cache.

        Returns:
            The number of keys currently in the cache
        """
        pass

    @abstractmethod
    def keys(self) -> List[K]:
        """
        Snapshot the cached keys in eviction order.

        Returns:
            Keys ordered so that the next eviction victim comes first
        """
        pass

    @abstractmethod
    def contains(self, key: K) -> bool:
        """Check whether key is cached without touching its ordering metadata. Rejects a None key."""
        pass

    @abstractmethod
    def assert_integrity(self) -> None:
        """
        Walk the ordering structure and assert it agrees with the lookup table.

        Raises:
            AssertionError: If the internal structures have diverged
        """
        pass

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, key: object) -> bool:
        return key is not None and self.contains(key)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(capacity={self._capacity}, size={self.size()})"

    @property
    def capacity(self) -> int:
        """Get the maximum number of keys the cache can hold."""
        return self._capacity
