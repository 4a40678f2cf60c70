"""
Windowed density clustering for motion-state detection.

Re-clusters the observation window on every reading and hands stationary
episodes to a place clusterer.
"""

from .models import (
    UpdateResult,
    StationaryEpisode,
    PlaceState,
    PlaceRegistry,
)
from .algorithm import (
    density_threshold,
    neighbor_mask,
    count_neighbors,
    mark_stationary,
    tally_votes,
)
from .places import (
    PlaceClusterer,
    SignificantPlaceClusterer,
    find_nearest_place,
)
from .clusterer import WindowedDensityClusterer

__all__ = [
    # Models
    "UpdateResult",
    "StationaryEpisode",
    "PlaceState",
    "PlaceRegistry",
    # Algorithm
    "density_threshold",
    "neighbor_mask",
    "count_neighbors",
    "mark_stationary",
    "tally_votes",
    # Places
    "PlaceClusterer",
    "SignificantPlaceClusterer",
    "find_nearest_place",
    # Clusterer
    "WindowedDensityClusterer",
]
