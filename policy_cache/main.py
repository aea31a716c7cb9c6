"""Command line entry point: replay the reference scenarios or stress a cache."""

import argparse
import logging
import random
import sys
import threading
import time
from typing import List, Optional

import structlog

from policy_cache.config import settings
from policy_cache.in_memory_cache import (
    BaseCache,
    EvictionPolicy,
    InvalidArgumentError,
    LFUCache,
    LRUCache,
    create_cache,
)

logger = structlog.get_logger()


def configure_logging(log_level: Optional[str] = None, json_logs: Optional[bool] = None) -> None:
    """Configure structured logging on top of the standard library logger."""
    level = (log_level or settings.log_level).upper()
    json_logs = settings.json_logs if json_logs is None else json_logs

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def run_demo() -> List[Optional[str]]:
    """
    Replay the reference LRU and LFU sequences on capacity-2 caches.

    Returns:
        Every observed get() result, in order
    """
    results: List[Optional[str]] = []

    def observe(cache: BaseCache, key: str) -> None:
        value = cache.get(key)
        results.append(value)
        logger.info("Demo lookup", eviction_policy=cache.policy.value, key=key, value=value)

    lru: LRUCache[str, str] = LRUCache(2)
    lru.put("a", "a")
    lru.put("b", "b")
    observe(lru, "a")
    lru.put("c", "c")  # evicts b
    observe(lru, "b")
    lru.put("d", "d")  # evicts a
    for key in ("a", "c", "d"):
        observe(lru, key)

    lfu: LFUCache[str, str] = LFUCache(2)
    lfu.put("a", "a")
    lfu.put("b", "b")
    observe(lfu, "a")
    lfu.put("c", "c")  # evicts b, the only frequency-1 entry
    observe(lfu, "b")
    observe(lfu, "c")
    lfu.put("d", "d")  # a and c tie at frequency 2, a got there first
    for key in ("a", "c", "d"):
        observe(lfu, key)
    lfu.put("a", "a")
    for key in ("a", "b", "c", "d"):
        observe(lfu, key)

    return results


def run_stress(
    cache: BaseCache,
    threads: int,
    ops_per_thread: int,
    key_space: int,
    seed: Optional[int] = None
) -> dict:
    """
    Hammer a cache with random get/put calls from several threads.

    Every worker draws keys from the same range, so operations on one key
    collide across threads. Worker exceptions are collected and re-raised
    after all workers have joined.

    Returns:
        Summary counts of the run

    Raises:
        InvalidArgumentError: If threads, ops_per_thread or key_space is not positive
    """
    for name, count in (("threads", threads), ("ops_per_thread", ops_per_thread), ("key_space", key_space)):
        if count <= 0:
            raise InvalidArgumentError(name, f"{count}. Must be a positive integer")

    rng = random.Random(seed)
    seeds = [rng.randrange(2 ** 32) for _ in range(threads)]
    hits = [0] * threads
    errors: List[BaseException] = []
    start = threading.Barrier(threads)

    def worker(index: int) -> None:
        local = random.Random(seeds[index])
        try:
            start.wait()
            for _ in range(ops_per_thread):
                key = local.randrange(key_space)
                if local.random() < 0.5:
                    cache.put(key, f"v{key}-{index}")
                elif cache.get(key) is not None:
                    hits[index] += 1
        except BaseException as e:
            errors.append(e)

    started = time.perf_counter()
    workers = [threading.Thread(target=worker, args=(i,), name=f"stress-{i}") for i in range(threads)]
    for t in workers:
        t.start()
    for t in workers:
        t.join()

    if errors:
        raise errors[0]

    return {
        "eviction_policy": cache.policy.value,
        "threads": threads,
        "operations": threads * ops_per_thread,
        "hits": sum(hits),
        "size": cache.size(),
        "capacity": cache.capacity,
        "elapsed_seconds": round(time.perf_counter() - started, 3),
    }


def positive_int(value: str) -> int:
    """argparse type for counts that must be at least 1."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"{value!r} is not an integer")
    if number <= 0:
        raise argparse.ArgumentTypeError(f"{value} must be a positive integer")
    return number


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="policy-cache",
        description="Concurrent LRU/LFU in-memory cache",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--log-level", default=settings.log_level, help="Logging level")
    parser.add_argument("--console-logs", action="store_true", help="Render logs for a terminal instead of JSON")

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("demo", help="Replay the reference LRU and LFU scenarios")

    stress = commands.add_parser(
        "stress",
        help="Run a concurrent random workload and verify the cache afterwards",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    stress.add_argument(
        "--policy",
        type=str.upper,
        choices=[p.value for p in EvictionPolicy],
        default=settings.eviction_policy.upper(),
        help="Eviction policy to stress",
    )
    stress.add_argument("--capacity", type=positive_int, default=64, help="Cache capacity")
    stress.add_argument("--threads", type=positive_int, default=8, help="Number of worker threads")
    stress.add_argument("--ops", type=positive_int, default=10000, help="Operations per thread")
    stress.add_argument("--keys", type=positive_int, default=256, help="Size of the shared key space")
    stress.add_argument("--seed", type=int, default=None, help="Seed for reproducible runs")

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the command line."""
    args = parse_args(argv)
    configure_logging(args.log_level, json_logs=False if args.console_logs else None)

    if args.command == "demo":
        run_demo()
        return 0

    try:
        cache = create_cache(args.policy, args.capacity)
        summary = run_stress(cache, args.threads, args.ops, args.keys, seed=args.seed)
    except InvalidArgumentError as e:
        logger.error("Invalid stress run", error=str(e))
        return 2

    try:
        cache.assert_integrity()
    except AssertionError as e:
        logger.error("Cache integrity check failed", error=str(e), **summary)
        return 1

    logger.info("Stress run completed", **summary)
    return 0


if __name__ == "__main__":
    sys.exit(main())
