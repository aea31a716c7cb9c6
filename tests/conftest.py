"""
Pytest Configuration and Fixtures

This module provides shared fixtures and configuration for all tests.
"""

import pytest

from policy_cache.in_memory_cache import BaseCache, EvictionPolicy, LFUCache, LRUCache, create_cache
from policy_cache.in_memory_cache import cache_factory


# ============================================================================
# Cache Fixtures
# ============================================================================

@pytest.fixture
def lru_cache() -> LRUCache:
    """Create an LRU cache for testing (5 items max)."""
    return LRUCache(5)


@pytest.fixture
def lfu_cache() -> LFUCache:
    """Create an LFU cache for testing (5 items max)."""
    return LFUCache(5)


@pytest.fixture(params=[EvictionPolicy.LRU, EvictionPolicy.LFU], ids=["lru", "lfu"])
def cache(request) -> BaseCache:
    """Create a 5-item cache of each policy, for behaviour both must share."""
    return create_cache(request.param, 5)


# ============================================================================
# Factory Fixtures
# ============================================================================

@pytest.fixture
def fresh_singleton(monkeypatch):
    """Start from an uninitialised shared cache and restore it afterwards."""
    monkeypatch.setattr(cache_factory, "_cache_instance", None)
    yield
