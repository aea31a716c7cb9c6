"""Prometheus counters for cache lookups and evictions."""

from prometheus_client import Counter

from policy_cache.config import settings

CACHE_HITS = Counter('policy_cache_hits', 'Cache lookups that found the key', ['policy'])
CACHE_MISSES = Counter('policy_cache_misses', 'Cache lookups that did not find the key', ['policy'])
CACHE_EVICTIONS = Counter('policy_cache_evictions', 'Entries evicted to stay within capacity', ['policy'])


def record_lookup(policy: str, hit: bool) -> None:
    """Count a get() as a hit or a miss for the given policy."""
    if not settings.enable_metrics:
        return
    if hit:
        CACHE_HITS.labels(policy=policy).inc()
    else:
        CACHE_MISSES.labels(policy=policy).inc()


def record_eviction(policy: str) -> None:
    """Count one capacity eviction for the given policy."""
    if settings.enable_metrics:
        CACHE_EVICTIONS.labels(policy=policy).inc()
