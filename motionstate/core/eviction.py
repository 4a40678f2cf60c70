"""
Sliding-window eviction policies.

A policy decides how many of the oldest pool entries must go before the
next observation at time `now` is inserted. The store does the actual
removal; policies only look at the pool.
"""

from __future__ import annotations

from typing import Sequence

from motionstate.config import ClustererConfig


class EvictionPolicy:
    """Base policy. Subclasses implement `count_stale`."""

    def __init__(self, window_length: int, capacity: int):
        self.window_length = window_length
        self.capacity = capacity

    def count_stale(self, pool: Sequence, now: float) -> int:
        """Number of entries to drop from the front of `pool`."""
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(window_length={self.window_length}, capacity={self.capacity})"


class TimeWindowPolicy(EvictionPolicy):
    """
    Keep entries no older than window_length seconds.

    Capacity is still a hard limit: entries are dropped while the pool is
    full, whatever their age.
    """

    def count_stale(self, pool: Sequence, now: float) -> int:
        size = len(pool)
        stale = 0
        while stale < size and (
            now - pool[stale].timestamp > self.window_length
            or size - stale >= self.capacity
        ):
            stale += 1
        return stale


class CountWindowPolicy(EvictionPolicy):
    """Fixed-size FIFO: drop the single oldest entry once the window is full."""

    def count_stale(self, pool: Sequence, now: float) -> int:
        if pool and len(pool) >= self.window_length:
            return 1
        return 0


def make_eviction_policy(config: ClustererConfig) -> EvictionPolicy:
    """Select the policy for a config. Chosen once, never switched."""
    if config.time_based_window:
        return TimeWindowPolicy(config.window_length, config.capacity)
    return CountWindowPolicy(config.window_length, config.capacity)
