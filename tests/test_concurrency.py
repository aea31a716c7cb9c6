"""
Concurrent stress tests

Many threads issue random get/put calls on overlapping keys; afterwards the
cache is inspected single-threaded to make sure no node leaked or was linked
twice and capacity still holds.
"""

import threading

import pytest

from policy_cache.in_memory_cache import (
    BaseCache,
    EvictionPolicy,
    InvalidArgumentError,
    LFUCache,
    LRUCache,
    SegmentLock,
    create_cache,
)
from policy_cache.main import run_stress


def drain(cache: BaseCache) -> list:
    """Invalidate every key in eviction order and return what was removed."""
    drained = []
    for key in cache.keys():
        assert cache.invalidate(key) is True
        drained.append(key)
    assert cache.size() == 0
    return drained


class TestStress:
    """Random interleavings never corrupt the ordering structure."""

    @pytest.mark.parametrize("policy", [EvictionPolicy.LRU, EvictionPolicy.LFU])
    @pytest.mark.parametrize("capacity, key_space", [(8, 32), (64, 64), (1, 4)])
    def test_random_workload(self, policy, capacity, key_space):
        cache = create_cache(policy, capacity)

        summary = run_stress(cache, threads=8, ops_per_thread=2000, key_space=key_space, seed=7)

        assert summary["operations"] == 16000
        assert summary["size"] <= capacity
        cache.assert_integrity()

        keys = cache.keys()
        assert len(keys) == len(set(keys)) == cache.size()
        assert drain(cache) == keys
        cache.assert_integrity()

    def test_lru_with_single_segment(self):
        """All keys sharing one segment lock still stay consistent."""
        cache = LRUCache(16, segment_count=1)

        run_stress(cache, threads=6, ops_per_thread=1500, key_space=40, seed=3)

        cache.assert_integrity()

    def test_mixed_with_invalidate_and_clear(self):
        for cache in (LRUCache(10), LFUCache(10)):
            stop = threading.Event()

            def churn():
                i = 0
                while not stop.is_set():
                    cache.invalidate(i % 20)
                    if i % 500 == 0:
                        cache.clear()
                    i += 1

            background = threading.Thread(target=churn)
            background.start()
            try:
                run_stress(cache, threads=4, ops_per_thread=2000, key_space=20, seed=11)
            finally:
                stop.set()
                background.join()

            cache.assert_integrity()
            assert cache.size() <= 10

    def test_worker_errors_are_raised(self):
        class Broken(LRUCache):
            def put(self, key, value):
                raise RuntimeError("boom")

        with pytest.raises(RuntimeError, match="boom"):
            run_stress(Broken(4), threads=2, ops_per_thread=50, key_space=4, seed=1)


class TestSegmentLock:
    """Key-to-segment mapping."""

    def test_same_key_same_lock(self):
        locks = SegmentLock()
        assert locks.for_key("user:1") is locks.for_key("user:1")

    def test_index_in_range(self):
        locks = SegmentLock(16)
        for key in [-1, -17, 0, 15, 16, "a", ("t", 2), 2 ** 70]:
            assert 0 <= locks.segment_index(key) < 16

    def test_small_ints_spread_across_segments(self):
        locks = SegmentLock(16)
        assert {locks.segment_index(i) for i in range(16)} == set(range(16))

    def test_structural_lock_is_separate(self):
        locks = SegmentLock(4)
        assert all(locks.for_key(i) is not locks.structural for i in range(4))

    def test_rejects_non_positive_count(self):
        with pytest.raises(InvalidArgumentError):
            SegmentLock(0)
