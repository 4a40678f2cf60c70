"""
Trace replay runner.

Core loop: load trace → build observation → process → record transitions.
Used by scripts/replay.py and for offline inspection of recorded streams.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from motionstate.config import ReplayConfig
from motionstate.core.logger import Logger
from motionstate.core.observation import GeoObservation, VectorObservation
from motionstate.clustering.clusterer import WindowedDensityClusterer
from motionstate.clustering.places import SignificantPlaceClusterer


@dataclass
class TraceRecord:
    """One recorded reading."""

    timestamp: float
    payload: dict


@dataclass
class ReplaySummary:
    """Outcome of replaying a trace."""

    updates: int = 0
    transitions: list[dict] = field(default_factory=list)
    place_ids: list[int] = field(default_factory=list)
    final_pool_size: int = 0
    final_moving: bool = True
    cluster_status: str = ""

    def to_dict(self) -> dict:
        return {
            "updates": self.updates,
            "transitions": self.transitions,
            "place_ids": self.place_ids,
            "final_pool_size": self.final_pool_size,
            "final_moving": self.final_moving,
            "cluster_status": self.cluster_status,
        }


def load_trace(trace_path: Path) -> list[TraceRecord]:
    """
    Load a YAML trace.

    Format: a list of mappings, each with a timestamp under 't' and either
    'lat'/'lon' or 'vector'. A top-level mapping with an 'observations'
    list is accepted too.
    """
    trace_path = Path(trace_path)
    if not trace_path.exists():
        raise FileNotFoundError(f"Trace not found: {trace_path}")

    with open(trace_path) as f:
        data = yaml.safe_load(f) or []

    if isinstance(data, dict):
        data = data.get('observations', [])

    records = []
    for i, item in enumerate(data):
        if not isinstance(item, dict) or 't' not in item:
            raise ValueError(f"Trace record {i} has no timestamp 't': {item!r}")
        payload = {k: v for k, v in item.items() if k != 't'}
        records.append(TraceRecord(timestamp=float(item['t']), payload=payload))
    return records


def build_observation(record: TraceRecord, kind: str, epsilon: float) -> Any:
    """Turn a trace record into an observation of the configured kind."""
    if kind == "geo":
        try:
            return GeoObservation(record.payload['lat'], record.payload['lon'], eps=epsilon)
        except KeyError as e:
            raise ValueError(f"Geo record at t={record.timestamp} missing {e}") from e
    if kind == "vector":
        if 'vector' not in record.payload:
            raise ValueError(f"Vector record at t={record.timestamp} missing 'vector'")
        return VectorObservation(record.payload['vector'], eps=epsilon)
    raise ValueError(f"Unknown observation kind: {kind}")


class ReplayRunner:
    """Feeds a recorded trace through a fresh clusterer."""

    def __init__(self, config: ReplayConfig):
        """
        Initialize runner.

        Args:
            config: Clusterer parameters and replay options
        """
        self.config = config
        self.place_clusterer = SignificantPlaceClusterer(place_epsilon=config.place_epsilon)
        self.logger: Optional[Logger] = Logger(config.log_dir) if config.log_dir else None
        self.clusterer = WindowedDensityClusterer(
            config.clusterer,
            self.place_clusterer,
            logger=self.logger,
            verbose=config.verbose,
        )

    def run(self, records: list[TraceRecord]) -> ReplaySummary:
        """
        Replay records in order.

        Returns:
            Summary of transitions and places
        """
        summary = ReplaySummary()

        try:
            for record in records:
                observation = build_observation(
                    record, self.config.observation_kind, self.config.epsilon
                )
                result = self.clusterer.process(record.timestamp, observation)
                summary.updates += 1

                if result.transitioned:
                    summary.transitions.append({
                        "t": result.timestamp,
                        "state": "moving" if result.moving else "stationary",
                    })
                if result.cluster_id is not None:
                    summary.place_ids.append(result.cluster_id)
        except ValueError as e:
            if self.logger:
                self.logger.log_error(f"Replay aborted: {e}", error_type="abort")
            raise

        summary.final_pool_size = self.clusterer.pool_size()
        summary.final_moving = self.clusterer.previously_moving
        summary.cluster_status = self.clusterer.cluster_status()

        if self.logger:
            self.logger.log_session_end(
                total_updates=summary.updates,
                final_pool_size=summary.final_pool_size,
                episodes_submitted=self.clusterer.episodes_submitted,
            )

        return summary

    def close(self) -> None:
        if self.logger:
            self.logger.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
