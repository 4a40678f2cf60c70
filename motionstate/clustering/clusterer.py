"""
Windowed density clusterer.

Core loop per observation: evict → insert → density pass → vote → hysteresis.
On the step where a moving pool first shows stationary points, the
stationary observations are gathered into an episode and submitted to the
place clusterer.
"""

from __future__ import annotations

from typing import Any, Optional

import numpy as np

from motionstate.config import ClustererConfig
from motionstate.core.logger import Logger
from motionstate.core.window_store import ObservationWindowStore, TimestampOrderError

from .algorithm import mark_stationary, tally_votes
from .models import UpdateResult
from .places import PlaceClusterer


class WindowedDensityClusterer:
    """
    Online motion/stationary classifier over a sliding observation window.

    Each instance owns its window and motion state; run one instance per
    sensor stream. Not thread-safe: callers serialize process() calls.
    """

    def __init__(
        self,
        config: ClustererConfig,
        place_clusterer: PlaceClusterer,
        logger: Optional[Logger] = None,
        verbose: bool = False,
    ):
        """
        Initialize clusterer.

        Args:
            config: Window and density parameters (frozen)
            place_clusterer: Receives stationary episodes
            logger: Optional JSONL event log
            verbose: Print transitions and submissions
        """
        self.config = config
        self.place_clusterer = place_clusterer
        self.logger = logger
        self.verbose = verbose

        self.store = ObservationWindowStore(config)
        self._previously_moving = True

        # Tracking
        self.updates = 0
        self.episodes_submitted = 0

        if self.logger:
            self.logger.log_session_start(config.to_dict(), repr(self.store.policy))

    # -------------------------------------------------------------------------
    # Introspection
    # -------------------------------------------------------------------------

    @property
    def previously_moving(self) -> bool:
        """Motion state carried into the next update."""
        return self._previously_moving

    @property
    def window_length(self) -> int:
        return self.config.window_length

    def pool_size(self) -> int:
        return self.store.pool_size()

    def capacity(self) -> int:
        return self.store.capacity()

    def distance_matrix(self) -> np.ndarray:
        return self.store.distance_matrix()

    def cluster_status(self) -> str:
        """Human-readable place clusterer state."""
        return str(self.place_clusterer)

    # -------------------------------------------------------------------------
    # Update
    # -------------------------------------------------------------------------

    def process(self, timestamp: float, observation: Any) -> UpdateResult:
        """
        Add an observation to the window and re-cluster the pool.

        A call either completes or leaves the clusterer as it was. If the
        place clusterer raises on submit, the eviction and insert of this
        call are rolled back and the motion state stays moving, so the
        same observation can be processed again.

        Args:
            timestamp: Seconds, never earlier than the previous call's
            observation: Object with distance_from() and epsilon()

        Returns:
            UpdateResult for this observation

        Raises:
            TimestampOrderError: Timestamp went backwards (nothing mutated)
            Exception: Whatever place_clusterer.submit() raised (window restored)
        """
        try:
            self.store.check_timestamp(timestamp)
        except TimestampOrderError as e:
            if self.logger:
                self.logger.log_error(str(e), observed_at=timestamp, error_type="precondition")
            raise

        was_moving = self._previously_moving

        # Only a moving clusterer submits, and submit may fail
        snapshot = self.store.snapshot() if was_moving else None

        evicted = self.store.evict_stale(timestamp)
        slot = self.store.insert(timestamp, observation)

        entries = self.store.entries()
        stationary = mark_stationary(
            self.store.pool_distances(),
            eps=observation.epsilon(),
            delta=self.config.delta,
        )
        vote, stationary_count = tally_votes(stationary)

        # Moving at the start of the call: stationary points seed an episode
        episode = None
        episode_start = None
        if was_moving and stationary_count > 0:
            members = [e for e, s in zip(entries, stationary) if s]
            episode_start = members[0].timestamp
            episode = self.place_clusterer.new_episode(episode_start)
            for entry in members:
                episode.add_observation(self.store.observation(entry.slot))

        cluster_id = None
        if episode is not None:
            try:
                cluster_id = self._submit(timestamp, episode, episode_start, stationary_count)
            except Exception:
                self.store.restore(snapshot)
                raise
            self._previously_moving = False
        elif not was_moving and stationary_count == 0:
            self._previously_moving = True

        if evicted and self.logger:
            self.logger.log_eviction(
                observed_at=timestamp,
                timestamps=[e.timestamp for e in evicted],
                slots=[e.slot for e in evicted],
            )

        result = UpdateResult(
            timestamp=timestamp,
            slot=slot,
            pool_size=len(entries),
            evicted=evicted,
            stationary_slots=[e.slot for e, s in zip(entries, stationary) if s],
            stationary_count=stationary_count,
            vote=vote,
            was_moving=was_moving,
            moving=self._previously_moving,
            cluster_id=cluster_id,
        )
        self.updates += 1

        if self.logger:
            self.logger.log_update(result.to_dict())
            if result.transitioned:
                self.logger.log_transition(
                    observed_at=timestamp,
                    moving=result.moving,
                    stationary_count=stationary_count,
                    pool_size=result.pool_size,
                )

        if self.verbose and result.transitioned:
            state = "moving" if result.moving else "stationary"
            print(f"[t={timestamp:g}] -> {state} "
                  f"({stationary_count}/{result.pool_size} points clustered)")

        return result

    def _submit(self, timestamp: float, episode: Any, episode_start: float, size: int) -> int:
        """Hand an episode to the place clusterer."""
        try:
            cluster_id = self.place_clusterer.submit(episode)
        except Exception as e:
            if self.logger:
                self.logger.log_error(
                    f"Place clusterer rejected episode: {e}",
                    observed_at=timestamp,
                    error_type="collaborator",
                )
            raise

        self.episodes_submitted += 1

        if self.logger:
            self.logger.log_episode_submitted(
                observed_at=timestamp,
                episode_start=episode_start,
                size=size,
                cluster_id=cluster_id,
            )
        if self.verbose:
            print(f"  place clusterer thinks we're at place {cluster_id}")

        return cluster_id
