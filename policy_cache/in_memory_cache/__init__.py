"""In-memory cache service with support for multiple eviction policies."""

from policy_cache.in_memory_cache.cache_factory import create_cache, get_in_memory_cache
from policy_cache.in_memory_cache.eviction_policy.eviction_policy import EvictionPolicy
from policy_cache.in_memory_cache.base import BaseCache
from policy_cache.in_memory_cache.eviction_policy.lru_cache import LRUCache
from policy_cache.in_memory_cache.eviction_policy.lfu_cache import LFUCache
from policy_cache.in_memory_cache.segment_lock import SEGMENT_COUNT, SegmentLock
from policy_cache.in_memory_cache.exceptions import (
    InvalidArgumentError,
    InvalidCapacityError,
    InvalidEvictionPolicyError
)

__all__ = [
    "create_cache",
    "get_in_memory_cache",
    "EvictionPolicy",
    "BaseCache",
    "LRUCache",
    "LFUCache",
    "SEGMENT_COUNT",
    "SegmentLock",
    "InvalidArgumentError",
    "InvalidCapacityError",
    "InvalidEvictionPolicyError",
]
