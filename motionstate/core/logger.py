"""
Structured event log for motion-state clustering.

Single JSONL file with typed events for streaming and analysis.

Event types:
- session_start: Clusterer configuration
- update: Per-observation clustering outcome
- eviction: Entries dropped from the window
- transition: Motion state changed
- episode_submitted: Stationary episode handed to the place clusterer
- error: Rejected observation or collaborator failure
- session_end: Summary stats
"""

import json
from pathlib import Path
from datetime import datetime
from typing import Any, Optional


class Logger:
    def __init__(self, output_dir: Path, filename: str = "clusterer.jsonl"):
        """
        Initialize event log.

        Args:
            output_dir: Directory for log files
            filename: Log file name inside output_dir
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.log_file = self.output_dir / filename

        # Open file in append mode
        self.file_handle = open(self.log_file, 'a')

    def _write_event(self, event_type: str, data: dict[str, Any]) -> None:
        """Write typed event to JSONL log."""
        event = {
            "type": event_type,
            "timestamp": datetime.now().isoformat(),
            **data
        }
        self.file_handle.write(json.dumps(event) + '\n')
        self.file_handle.flush()  # Ensure streaming writes

    def log_session_start(self, config: dict[str, Any], policy: str) -> None:
        """
        Log clusterer initialization.

        Args:
            config: Clusterer configuration parameters
            policy: Eviction policy description
        """
        self._write_event("session_start", {
            "config": config,
            "policy": policy,
        })

    def log_update(self, result: dict[str, Any]) -> None:
        """Log one process() outcome (UpdateResult.to_dict())."""
        self._write_event("update", result)

    def log_eviction(self, observed_at: float, timestamps: list[float], slots: list[int]) -> None:
        """
        Log entries evicted before an insert.

        Args:
            observed_at: Timestamp of the incoming observation
            timestamps: Timestamps of evicted entries
            slots: Slots released
        """
        self._write_event("eviction", {
            "observed_at": observed_at,
            "evicted_timestamps": timestamps,
            "slots": slots,
        })

    def log_transition(self, observed_at: float, moving: bool, stationary_count: int, pool_size: int) -> None:
        """
        Log a motion state change.

        Args:
            observed_at: Timestamp of the observation causing the change
            moving: New motion state
            stationary_count: Stationary points in the pool
            pool_size: Pool size after insert
        """
        self._write_event("transition", {
            "observed_at": observed_at,
            "state": "moving" if moving else "stationary",
            "stationary_count": stationary_count,
            "pool_size": pool_size,
        })

    def log_episode_submitted(self, observed_at: float, episode_start: float, size: int, cluster_id: Any) -> None:
        """
        Log a stationary episode handed to the place clusterer.

        Args:
            observed_at: Timestamp of the observation causing submission
            episode_start: Timestamp the episode was created with
            size: Observations in the episode
            cluster_id: Id returned by the place clusterer
        """
        self._write_event("episode_submitted", {
            "observed_at": observed_at,
            "episode_start": episode_start,
            "size": size,
            "cluster_id": cluster_id,
        })

    def log_error(
        self,
        message: str,
        observed_at: Optional[float] = None,
        error_type: str = "error",
    ) -> None:
        """
        Log error event.

        Args:
            message: Error description
            observed_at: Timestamp of the offending observation (if any)
            error_type: Error category (error, precondition, collaborator)
        """
        data = {
            "message": message,
            "error_type": error_type,
        }
        if observed_at is not None:
            data["observed_at"] = observed_at

        self._write_event("error", data)

    def log_session_end(self, total_updates: int, final_pool_size: int, episodes_submitted: int) -> None:
        """
        Log session completion.

        Args:
            total_updates: Observations processed
            final_pool_size: Pool size at end
            episodes_submitted: Episodes handed to the place clusterer
        """
        self._write_event("session_end", {
            "total_updates": total_updates,
            "final_pool_size": final_pool_size,
            "episodes_submitted": episodes_submitted,
        })

    def close(self) -> None:
        """Close log file."""
        if hasattr(self, 'file_handle') and self.file_handle:
            self.file_handle.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
