"""
Observation window store.

Fixed-capacity slot table holding the most recent observations, plus a
symmetric capacity x capacity distance matrix indexed by slot.

Matrix conventions:
    SENTINEL (-1.0)  no valid distance (slot unused, or pair never compared)
    >= 0.0           cached distance between two live slots

A live slot keeps its own diagonal cell at 0.0 (self-distance), so a slot
is free exactly when its whole row is SENTINEL. Allocation scans rows from
slot 0 upward, which makes slot reuse deterministic.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Any, Optional

import numpy as np

from motionstate.config import ClustererConfig
from .eviction import EvictionPolicy, make_eviction_policy

SENTINEL = -1.0


class TimestampOrderError(Exception):
    """Raised when a timestamp would break the pool's FIFO ordering."""
    pass


@dataclass(frozen=True)
class WindowEntry:
    """A live pool entry: insertion timestamp and matrix slot."""

    timestamp: float
    slot: int


class ObservationWindowStore:
    """
    Bounded storage for the active window.

    Owns the observations and the distance matrix. Callers get slots and
    copies back, never the matrix itself.
    """

    def __init__(self, config: ClustererConfig, policy: Optional[EvictionPolicy] = None):
        """
        Initialize store.

        Args:
            config: Window parameters (capacity sizes the matrix)
            policy: Eviction policy (default: selected from config)
        """
        if config.capacity <= 0:
            raise RuntimeError(f"Window store capacity must be positive, got {config.capacity}")

        self._capacity = config.capacity
        self.window_length = config.window_length
        self.policy = policy or make_eviction_policy(config)

        self._matrix = np.full((self._capacity, self._capacity), SENTINEL, dtype=np.float64)
        self._observations: dict[int, Any] = {}  # slot -> observation
        self._pool: deque[WindowEntry] = deque()

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    def pool_size(self) -> int:
        return len(self._pool)

    def capacity(self) -> int:
        return self._capacity

    def entries(self) -> list[WindowEntry]:
        """Live entries, oldest first."""
        return list(self._pool)

    def live_slots(self) -> list[int]:
        """Live slots in FIFO order."""
        return [entry.slot for entry in self._pool]

    def observation(self, slot: int) -> Any:
        return self._observations[slot]

    def distance(self, i: int, j: int) -> float:
        return float(self._matrix[i, j])

    def distance_matrix(self) -> np.ndarray:
        """Read-only copy of the full matrix."""
        matrix = self._matrix.copy()
        matrix.setflags(write=False)
        return matrix

    def pool_distances(self) -> np.ndarray:
        """Pool x pool distances, rows and columns in FIFO order."""
        idx = np.asarray(self.live_slots(), dtype=np.intp)
        return self._matrix[np.ix_(idx, idx)]

    def newest_timestamp(self) -> Optional[float]:
        return self._pool[-1].timestamp if self._pool else None

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    def check_timestamp(self, timestamp: float) -> None:
        """Reject timestamps older than the newest live entry."""
        newest = self.newest_timestamp()
        if newest is not None and timestamp < newest:
            raise TimestampOrderError(
                f"Timestamp {timestamp} is earlier than newest pool entry {newest}"
            )

    def allocate_slot(self) -> int:
        """Return the lowest slot whose matrix row is entirely SENTINEL."""
        for slot in range(self._capacity):
            if np.all(self._matrix[slot] == SENTINEL):
                return slot
        raise RuntimeError(
            f"No free slot among {self._capacity}; eviction must run before insert"
        )

    def insert(self, timestamp: float, observation: Any) -> int:
        """
        Store an observation and cache its distance to every live one.

        Args:
            timestamp: Seconds, not earlier than the newest entry
            observation: Object with distance_from() and epsilon()

        Returns:
            Slot assigned to the observation
        """
        self.check_timestamp(timestamp)
        slot = self.allocate_slot()

        # All distances before any write
        distances = [
            (entry.slot, observation.distance_from(self._observations[entry.slot]))
            for entry in self._pool
        ]

        self._matrix[slot, slot] = 0.0
        for other, d in distances:
            self._matrix[slot, other] = d
            self._matrix[other, slot] = d

        self._observations[slot] = observation
        self._pool.append(WindowEntry(timestamp=timestamp, slot=slot))
        return slot

    def evict_stale(self, now: float) -> list[WindowEntry]:
        """
        Drop entries from the front of the pool per the eviction policy.

        Returns:
            Evicted entries, oldest first
        """
        evicted = []
        for _ in range(self.policy.count_stale(self._pool, now)):
            entry = self._pool.popleft()
            self._matrix[entry.slot, :] = SENTINEL
            self._matrix[:, entry.slot] = SENTINEL
            del self._observations[entry.slot]
            evicted.append(entry)
        return evicted

    def snapshot(self) -> tuple:
        """Copy of the window state, for restore()."""
        return self._matrix.copy(), dict(self._observations), deque(self._pool)

    def restore(self, snapshot: tuple) -> None:
        """Put back the state captured by snapshot()."""
        matrix, observations, pool = snapshot
        self._matrix = matrix
        self._observations = observations
        self._pool = pool
