"""Factory for creating cache instances based on eviction policy."""

from typing import Optional, Union
import logging
import threading

import structlog

from policy_cache.config import settings
from policy_cache.in_memory_cache.base import BaseCache
from policy_cache.in_memory_cache.eviction_policy.eviction_policy import EvictionPolicy
from policy_cache.in_memory_cache.eviction_policy.lfu_cache import LFUCache
from policy_cache.in_memory_cache.eviction_policy.lru_cache import LRUCache
from policy_cache.in_memory_cache.exceptions import (
    InvalidCapacityError,
    InvalidEvictionPolicyError
)

logger = structlog.wrap_logger(logging.getLogger(__name__), wrapper_class=structlog.stdlib.BoundLogger)

# Singleton cache instance
_cache_instance: Optional[BaseCache] = None
_cache_lock = threading.Lock()


def create_cache(
    eviction_policy: Union[EvictionPolicy, str],
    max_key_count: int,
    segment_count: Optional[int] = None
) -> BaseCache:
    """
    Create a cache instance based on the specified eviction policy.

    Args:
        eviction_policy: The eviction policy to use (LRU or LFU), as an enum
                        member or a case-insensitive name
        max_key_count: Maximum number of keys the cache can hold
        segment_count: Lock segments for an LRU cache. Defaults to
                      settings.segment_count; ignored for LFU.

    Returns:
        A cache instance implementing the BaseCache interface

    Raises:
        InvalidEvictionPolicyError: If the eviction policy is not supported
        InvalidCapacityError: If max_key_count is not a positive integer
    """
    if not isinstance(max_key_count, int) or isinstance(max_key_count, bool) or max_key_count <= 0:
        raise InvalidCapacityError(max_key_count)

    if not isinstance(eviction_policy, EvictionPolicy):
        try:
            eviction_policy = EvictionPolicy.parse(str(eviction_policy))
        except ValueError:
            raise InvalidEvictionPolicyError(str(eviction_policy))

    if eviction_policy == EvictionPolicy.LRU:
        cache = LRUCache(max_key_count, segment_count or settings.segment_count)
    else:
        cache = LFUCache(max_key_count)

    logger.info(
        "Created in-memory cache",
        eviction_policy=eviction_policy.value,
        max_key_count=max_key_count
    )
    return cache


def get_in_memory_cache(
    eviction_policy: Optional[Union[EvictionPolicy, str]] = None,
    max_key_count: Optional[int] = None
) -> BaseCache:
    """
    Get the process-wide cache, building it on the first call.

    Arguments only matter on that first call. Anything left out falls back
    to POLICY_CACHE_EVICTION_POLICY / POLICY_CACHE_MAX_KEY_COUNT via settings.
    Later calls return the same object whatever they pass.

    Raises:
        InvalidEvictionPolicyError: If the first call names an unknown policy
        InvalidCapacityError: If the first call's capacity is not a positive integer

    Example:
        # POLICY_CACHE_EVICTION_POLICY=lfu POLICY_CACHE_MAX_KEY_COUNT=256
        sessions = get_in_memory_cache()
        sessions.put(("session", user_id), token)
        assert get_in_memory_cache() is sessions
    """
    global _cache_instance

    # Double-checked locking pattern for thread-safe singleton
    if _cache_instance is None:
        with _cache_lock:
            if _cache_instance is None:
                _cache_instance = create_cache(
                    eviction_policy if eviction_policy is not None else settings.eviction_policy,
                    max_key_count if max_key_count is not None else settings.max_key_count
                )

    return _cache_instance
