"""Eviction policy definitions for in-memory cache."""

from enum import Enum


class EvictionPolicy(str, Enum):
    """Enumeration of supported eviction policies."""

    LRU = "LRU"  # Least Recently Used
    LFU = "LFU"  # Least Frequently Used

    @classmethod
    def parse(cls, value: str) -> "EvictionPolicy":
        """Resolve a policy name case-insensitively, raising ValueError if unknown."""
        return cls(value.strip().upper())
