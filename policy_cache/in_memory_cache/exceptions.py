"""Custom exceptions for in-memory cache operations."""

from typing import Any


class InvalidArgumentError(ValueError):
    """Raised when a cache operation receives an argument it cannot accept."""

    def __init__(self, argument: str, message: str):
        self.argument = argument
        super().__init__(f"Invalid {argument}: {message}")


class InvalidCapacityError(InvalidArgumentError):
    """Raised when a cache is built with a capacity it cannot honour."""

    def __init__(self, capacity: Any):
        self.capacity = capacity
        super().__init__("capacity", f"{capacity}. Must be a positive integer greater than 0")


class InvalidEvictionPolicyError(InvalidArgumentError):
    """Raised when an invalid eviction policy is provided."""

    def __init__(self, policy: str):
        self.policy = policy
        super().__init__("eviction policy", f"{policy}. Supported policies: LRU, LFU")


def require_not_none(name: str, value: Any) -> None:
    """Fail fast on a None key or value, before any shared state is touched."""
    if value is None:
        raise InvalidArgumentError(name, "must not be None")
