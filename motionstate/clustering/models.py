"""
Data models for motion-state clustering.

Defines update results, stationary episodes and the place registry used by
the reference place clusterer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from motionstate.core.window_store import WindowEntry


@dataclass
class UpdateResult:
    """Outcome of a single WindowedDensityClusterer.process call."""

    timestamp: float
    slot: int
    pool_size: int
    evicted: list[WindowEntry]
    stationary_slots: list[int]      # FIFO order
    stationary_count: int
    vote: int                        # > 0 leans moving, < 0 leans stationary
    was_moving: bool                 # Motion state at start of call
    moving: bool                     # Motion state after this call
    cluster_id: Optional[int] = None  # Place id when an episode was submitted

    @property
    def transitioned(self) -> bool:
        return self.was_moving != self.moving

    def to_dict(self) -> dict:
        """Convert to dict for JSON logging."""
        return {
            "timestamp": self.timestamp,
            "slot": self.slot,
            "pool_size": self.pool_size,
            "evicted_slots": [e.slot for e in self.evicted],
            "stationary_slots": self.stationary_slots,
            "stationary_count": self.stationary_count,
            "vote": self.vote,
            "was_moving": self.was_moving,
            "moving": self.moving,
            "cluster_id": self.cluster_id,
        }


class StationaryEpisode:
    """Observations believed to belong to one continuous stationary dwell."""

    def __init__(self, timestamp: float):
        self.timestamp = timestamp
        self.observations: list[Any] = []

    def add_observation(self, observation: Any) -> None:
        self.observations.append(observation)

    def size(self) -> int:
        return len(self.observations)

    def medoid(self) -> Any:
        """Observation with the smallest total distance to the others."""
        if not self.observations:
            raise ValueError("Empty episode has no medoid")

        best = self.observations[0]
        best_total = float('inf')
        for candidate in self.observations:
            total = sum(candidate.distance_from(o) for o in self.observations)
            if total < best_total:
                best_total = total
                best = candidate
        return best

    def __repr__(self) -> str:
        return f"StationaryEpisode(timestamp={self.timestamp}, size={self.size()})"


@dataclass
class PlaceState:
    """State of a single significant place."""

    id: int
    representative: Any           # Medoid of the founding episode
    visit_count: int              # Episodes assigned to this place
    observation_count: int        # Observations across those episodes
    first_seen: float
    last_seen: float

    def to_meta_dict(self) -> dict:
        """Convert to dict for logging (excludes the representative)."""
        return {
            "id": self.id,
            "visit_count": self.visit_count,
            "observation_count": self.observation_count,
            "first_seen": self.first_seen,
            "last_seen": self.last_seen,
        }


@dataclass
class PlaceRegistry:
    """Registry of all places and their states."""

    places: dict[int, PlaceState] = field(default_factory=dict)
    next_place_id: int = 0

    def get(self, place_id: int) -> Optional[PlaceState]:
        return self.places.get(place_id)

    def all_places(self) -> list[PlaceState]:
        return list(self.places.values())

    def spawn_place(self, episode: StationaryEpisode) -> PlaceState:
        """Create a new place founded by an episode."""
        place_id = self.next_place_id
        self.next_place_id += 1

        place = PlaceState(
            id=place_id,
            representative=episode.medoid(),
            visit_count=0,
            observation_count=0,
            first_seen=episode.timestamp,
            last_seen=episode.timestamp,
        )
        self.places[place_id] = place
        return place
