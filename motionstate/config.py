"""
Configuration for motion-state clustering.

Parameters are fixed at construction; a clusterer never sees them change.
"""

from __future__ import annotations

from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Optional

import yaml

__all__ = [
    "ClustererConfig",
    "ReplayConfig",
    "ConfigurationError",
    "DEFAULT_CLUSTERER_CONFIG",
    "DEFAULT_REPLAY_CONFIG",
    "load_config",
    "load_replay_config",
]


class ConfigurationError(ValueError):
    """Raised when clusterer parameters cannot produce a working window."""
    pass


# 5 minute time window; capacity None sizes the matrix to window_length
DEFAULT_CLUSTERER_CONFIG = {
    'time_based_window': True,
    'window_length': 300,
    'delta': 0.5,
    'capacity': None,
}

DEFAULT_REPLAY_CONFIG = {
    'observation_kind': 'geo',  # 'geo' or 'vector'
    'epsilon': 25.0,            # metres for geo, feature units for vector
    'place_epsilon': None,      # falls back to epsilon
    'log_dir': None,
    'verbose': True,
}


@dataclass(frozen=True)
class ClustererConfig:
    """Window and density parameters for a WindowedDensityClusterer."""

    # Seconds when time_based_window, otherwise the maximum pool size
    time_based_window: bool = True
    window_length: int = 300

    # Fraction of the pool that must lie within eps of a point
    delta: float = 0.5

    # Slots in the distance matrix; defaults to window_length
    capacity: Optional[int] = None

    def __post_init__(self):
        if self.capacity is None:
            object.__setattr__(self, 'capacity', self.window_length)

        if not isinstance(self.capacity, int) or self.capacity <= 0:
            raise ConfigurationError(f"capacity must be a positive integer, got {self.capacity!r}")
        if self.window_length <= 0:
            raise ConfigurationError(f"window_length must be positive, got {self.window_length!r}")
        if not (0.0 < self.delta <= 1.0):
            raise ConfigurationError(f"delta must be in (0, 1], got {self.delta!r}")
        if not self.time_based_window and self.window_length > self.capacity:
            raise ConfigurationError(
                f"count-based window_length ({self.window_length}) "
                f"exceeds capacity ({self.capacity})"
            )

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "ClustererConfig":
        """Create from dict, filtering out unknown keys."""
        valid_keys = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in data.items() if k in valid_keys}
        return cls(**filtered)


@dataclass
class ReplayConfig:
    """Clusterer parameters plus options for replaying a recorded trace."""

    clusterer: ClustererConfig = field(default_factory=ClustererConfig)

    observation_kind: str = "geo"
    epsilon: float = 25.0
    place_epsilon: Optional[float] = None

    # Output
    log_dir: Optional[Path] = None
    verbose: bool = True

    def __post_init__(self):
        if self.observation_kind not in ("geo", "vector"):
            raise ConfigurationError(f"Unknown observation kind: {self.observation_kind}")
        if self.epsilon <= 0:
            raise ConfigurationError(f"epsilon must be positive, got {self.epsilon!r}")
        if self.place_epsilon is None:
            self.place_epsilon = self.epsilon
        if self.log_dir is not None:
            self.log_dir = Path(self.log_dir)

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        return {
            'clusterer': self.clusterer.to_dict(),
            'observation_kind': self.observation_kind,
            'epsilon': self.epsilon,
            'place_epsilon': self.place_epsilon,
            'log_dir': str(self.log_dir) if self.log_dir else None,
            'verbose': self.verbose,
        }


def _read_mapping(config_path: Path) -> dict:
    """Read a YAML (or JSON) mapping from disk."""
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config must be a mapping: {config_path}")
    return data


def load_config(config_path: Path) -> ClustererConfig:
    """
    Load clusterer config, merging with defaults.

    The file may hold the parameters at top level or under a
    'clusterer' section.

    Args:
        config_path: YAML or JSON file

    Returns:
        Validated ClustererConfig
    """
    data = _read_mapping(config_path)
    section = data.get('clusterer', data)

    merged = DEFAULT_CLUSTERER_CONFIG.copy()
    merged.update(section)

    return ClustererConfig.from_dict(merged)


def load_replay_config(config_path: Path) -> ReplayConfig:
    """Load a replay config file ('clusterer' section plus runner options)."""
    data = _read_mapping(config_path)

    merged = DEFAULT_REPLAY_CONFIG.copy()
    merged.update({k: v for k, v in data.items() if k in DEFAULT_REPLAY_CONFIG})

    return ReplayConfig(clusterer=load_config(config_path), **merged)
